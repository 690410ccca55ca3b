import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes

import database.database as db
from utils.constants import MENU_BUTTON
from utils.telegram_helpers import safe_edit_text, safe_send_text
from utils.utils import parse_cap_args, truncate

FRONT_MAX = 30


# ── Leeches ──────────────────────────────────────────────────

def _leech_markup(cards: list[dict]) -> InlineKeyboardMarkup:
    buttons = [
        [InlineKeyboardButton(
            f"↩ {truncate(card['front'], FRONT_MAX)} · {card['lapses']} lapses",
            callback_data=f"unsuspend_{card['card_id']}",
        )]
        for card in cards
    ]
    buttons.append(MENU_BUTTON)
    return InlineKeyboardMarkup(buttons)


def _leech_text(cards: list[dict]) -> str:
    if not cards:
        return "✨ No leeches"
    return f"\U0001fa78 {len(cards)} suspended card{'s' if len(cards) != 1 else ''}\n\n<i>Tap one to unsuspend it</i>"


async def leeches_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/leeches — list suspended cards."""
    cards = db.get_suspended_cards()
    await safe_send_text(update.message, _leech_text(cards), reply_markup=_leech_markup(cards))


async def unsuspend(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    card_id = int(query.data.split('_')[1])  # unsuspend_<id>
    if not db.unsuspend_card(card_id):
        logging.info(f"Card {card_id} was not suspended")

    cards = db.get_suspended_cards()
    await safe_edit_text(query, _leech_text(cards), reply_markup=_leech_markup(cards))


# ── Deck settings ────────────────────────────────────────────

async def cap_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/cap <n> <deck name> — new cards per day for that deck."""
    try:
        cap, deck_name = parse_cap_args(context.args or [])
    except ValueError:
        await safe_send_text(update.message, "Usage: <code>/cap 10 Deck name</code>")
        return

    deck_id = db.get_deck_id(deck_name)
    if deck_id is None:
        await safe_send_text(update.message, f"⚠️ No deck called \"{html.escape(deck_name)}\"")
        return

    db.set_daily_new_cap(deck_id, cap)
    await safe_send_text(
        update.message,
        f"✅ {html.escape(deck_name)}: up to {cap} new card{'s' if cap != 1 else ''} a day"
    )


async def delete_deck_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/deletedeck <deck name> — asks for confirmation first."""
    deck_name = ' '.join(context.args or []).strip()
    deck_id = db.get_deck_id(deck_name) if deck_name else None

    if deck_id is None:
        await safe_send_text(update.message, "Usage: <code>/deletedeck Deck name</code>")
        return

    await safe_send_text(
        update.message,
        f"\U0001f5d1 Delete <b>{html.escape(deck_name)}</b> and all its cards?",
        reply_markup=InlineKeyboardMarkup([
            [InlineKeyboardButton("Delete", callback_data=f'deck_delete_yes_{deck_id}')],
            MENU_BUTTON,
        ]),
    )


async def delete_deck_yes(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    deck_id = int(query.data.split('_')[3])  # deck_delete_yes_<id>
    deck_name = db.get_deck_name(deck_id)
    db.delete_deck(deck_id)
    if context.user_data.get('default_deck_id') == deck_id:
        context.user_data.pop('default_deck_id', None)

    await safe_edit_text(
        query,
        f"\U0001f5d1 Deleted {html.escape(deck_name or 'deck')}",
        reply_markup=InlineKeyboardMarkup([MENU_BUTTON]),
    )
