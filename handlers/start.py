import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes, ConversationHandler

import database.database as db
from utils.constants import CARD_FLOW_KEYS, REVIEW_FLOW_KEYS
from utils.telegram_helpers import safe_edit_text, safe_send_text


def menu_text(stats: dict[str, int], new_today: int) -> str:
    """
    One-line summary of the collection for the main menu.
    new_today is what the decks' daily caps still allow, not every new card.
    """
    total = stats['total']
    due = stats['due']

    if total == 0:
        return "\U0001f4da <b>Hone</b>\n\n<i>No cards yet — add your first one!</i>"
    if due == 0 and new_today == 0:
        return f"✅ <b>All caught up!</b>\n\n<i>{total} cards in your collection</i>"

    parts = []
    if due:
        parts.append(f"{due} due")
    if new_today:
        parts.append(f"{new_today} new")
    return f"\U0001f9e0 <b>{' · '.join(parts)}</b>\n\n<i>{total} cards total</i>"


def build_main_menu() -> tuple[str, InlineKeyboardMarkup]:
    """Returns (message_text, markup) for the main menu."""
    stats = db.get_card_stats()
    new_today = sum(deck['new_available'] for deck in db.get_deck_summaries())
    due = stats['due']

    review_label = f'\U0001f9e0 Review · {due} due' if due > 0 else '\U0001f9e0 Review'
    markup = InlineKeyboardMarkup([
        [
            InlineKeyboardButton('\U0001f4dd New Card', callback_data='add_card'),
            InlineKeyboardButton(review_label, callback_data='review'),
        ],
        [
            InlineKeyboardButton('\U0001f4ca Stats', callback_data='stats'),
            InlineKeyboardButton('❓ How it works', callback_data='help'),
        ],
    ])
    return menu_text(stats, new_today), markup


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    logging.info("Started /start")

    name = update.effective_user.first_name
    text, markup = build_main_menu()
    await safe_send_text(
        update.message,
        f"Hey {html.escape(name)} \U0001f44b\n\n{text}",
        reply_markup=markup,
    )


async def force_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """ConversationHandler fallback: drop whatever flow was running and show the menu."""
    for key in CARD_FLOW_KEYS + REVIEW_FLOW_KEYS:
        context.user_data.pop(key, None)
    await start(update, context)
    return ConversationHandler.END


async def main_menu(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Callback handler for the 'Menu' button (outside conversation)."""
    query = update.callback_query
    await query.answer()

    text, markup = build_main_menu()
    await safe_edit_text(query, text, reply_markup=markup)
