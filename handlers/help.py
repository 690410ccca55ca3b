from telegram import Update, InlineKeyboardMarkup
from telegram.ext import ContextTypes

from config import SCHEDULER_CONFIG
from utils.constants import MENU_BUTTON
from utils.telegram_helpers import safe_edit_text, safe_send_text


HELP_TEXT = (
    "<b>❓ How it works</b>\n\n"
    "1. Send <code>front | back</code> to make a card\n"
    "2. New cards come back a few times the same day before moving to days\n"
    "3. Rate each recall: Again, Hard, Good or Easy\n"
    "4. Good and Easy push the next review further out\n\n"
    f"Cards you fail {SCHEDULER_CONFIG.leech_lapses} times are suspended as leeches. "
    "Use /leeches to bring them back.\n\n"
    "<code>/cap 10 French</code> limits new cards per day for a deck."
)


async def help_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    await safe_edit_text(query, HELP_TEXT, reply_markup=InlineKeyboardMarkup([MENU_BUTTON]))


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await safe_send_text(update.message, HELP_TEXT, reply_markup=InlineKeyboardMarkup([MENU_BUTTON]))
