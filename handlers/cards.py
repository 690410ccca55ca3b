import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup, Message
from telegram.ext import ContextTypes, ConversationHandler

import database.database as db
from handlers.start import build_main_menu
from utils.constants import AddCardState, CARD_FLOW_KEYS, CARD_SIDE_MAX, DECK_NAME_MAX, PREVIEW_BUTTONS, MENU_BUTTON
from utils.telegram_helpers import safe_edit_text, safe_send_text
from utils.utils import get_buttons, parse_text


async def add_card_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    # Also reached mid-flow when the New Card button is tapped again
    for key in CARD_FLOW_KEYS:
        context.user_data.pop(key, None)

    deck_id = context.user_data.get('default_deck_id')
    deck_name = db.get_deck_name(deck_id) if deck_id else None

    if deck_id and deck_name is None:
        logging.info(f"Default deck {deck_id} no longer exists")
        context.user_data.pop('default_deck_id', None)

    hint = (
        f"<i>\U0001f4c1 {html.escape(deck_name)}</i>" if deck_name
        else "<i>Use <code>front | back</code> or two lines</i>"
    )
    await safe_edit_text(query, f"\U0001f4dd Send me a card\n\n{hint}")
    return AddCardState.AWAITING_CONTENT


async def get_content(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    parsed = parse_text(update.message.text or '')

    if not parsed['front']:
        await safe_send_text(update.message, "⚠️ Card can't be empty. Send some text:")
        return AddCardState.AWAITING_CONTENT

    if len(parsed['front']) > CARD_SIDE_MAX or len(parsed['back']) > CARD_SIDE_MAX:
        await safe_send_text(
            update.message,
            f"⚠️ Too long — each side can be up to {CARD_SIDE_MAX} characters. Try again:"
        )
        return AddCardState.AWAITING_CONTENT

    if not parsed['back']:
        front_hint = html.escape(parsed['front'][:20])
        await safe_send_text(
            update.message,
            f"⚠️ Cards need two sides.\n\n"
            f"<code>{front_hint} | meaning here</code>"
        )
        return AddCardState.AWAITING_CONTENT

    context.user_data['cur_card'] = parsed

    if context.user_data.get('cur_deck_id') or context.user_data.get('default_deck_id'):
        await _preview(update.message, context)
        return AddCardState.CONFIRMATION_PREVIEW

    return await _ask_for_deck(update.message)


async def change_deck(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    buttons = get_buttons(db.get_all_decks(), 'deck')
    buttons.append([InlineKeyboardButton("➕ New deck", callback_data='new_deck')])
    await safe_edit_text(query, "\U0001f4c1 Pick a deck", reply_markup=InlineKeyboardMarkup(buttons))
    return AddCardState.AWAITING_DECK


async def selected_deck(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    context.user_data['cur_deck_id'] = int(query.data.split('_')[1])  # deck_<id>
    await _preview(query, context)
    return AddCardState.CONFIRMATION_PREVIEW


async def new_deck(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    await safe_edit_text(query, "✏️ Name for the new deck:")
    return AddCardState.CREATING_DECK


async def create_deck(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    deck_name = (update.message.text or '').strip()

    if not deck_name:
        await safe_send_text(update.message, "⚠️ Deck name can't be empty. Try again:")
        return AddCardState.CREATING_DECK

    if len(deck_name) > DECK_NAME_MAX:
        await safe_send_text(update.message, f"⚠️ Too long — {DECK_NAME_MAX} characters max. Try again:")
        return AddCardState.CREATING_DECK

    if db.get_deck_id(deck_name):
        await safe_send_text(
            update.message,
            f"⚠️ \"{html.escape(deck_name)}\" already exists. Pick a different name:"
        )
        return AddCardState.CREATING_DECK

    context.user_data['cur_deck_id'] = db.create_deck(deck_name)

    if context.user_data.get('cur_card'):
        await _preview(update.message, context)
        return AddCardState.CONFIRMATION_PREVIEW

    await safe_send_text(update.message, f"✅ Deck \"{html.escape(deck_name)}\" created! Now send the card:")
    return AddCardState.AWAITING_CONTENT


async def edit_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    await safe_edit_text(query, "✏️ Send the new content")
    return AddCardState.AWAITING_CONTENT


async def save_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    cur_card = context.user_data.get('cur_card')
    deck_id = context.user_data.get('cur_deck_id') or context.user_data.get('default_deck_id')

    if not cur_card or not deck_id:
        await safe_edit_text(
            query,
            "⚠️ Session expired — please start over.",
            reply_markup=InlineKeyboardMarkup([MENU_BUTTON])
        )
        return ConversationHandler.END

    db.save_card(cur_card, deck_id)

    # Last deck used becomes the default for this chat
    context.user_data['default_deck_id'] = deck_id
    for key in CARD_FLOW_KEYS:
        context.user_data.pop(key, None)

    await safe_edit_text(
        query,
        "✔️ Saved! Send me another one",
        reply_markup=InlineKeyboardMarkup([MENU_BUTTON])
    )
    return AddCardState.AWAITING_CONTENT


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel button, Menu button or /cancel: drop the draft and show the menu."""
    for key in CARD_FLOW_KEYS:
        context.user_data.pop(key, None)

    text, markup = build_main_menu()
    if update.callback_query:
        await update.callback_query.answer()
        await safe_edit_text(update.callback_query, text, reply_markup=markup)
    else:
        await safe_send_text(update.message, text, reply_markup=markup)
    return ConversationHandler.END


# ── private helpers ──────────────────────────────────────────

async def _ask_for_deck(message: Message) -> int:
    decks = db.get_all_decks()

    if not decks:
        await safe_send_text(message, "No decks yet \U0001f4ad\nType a name for your first one:")
        return AddCardState.CREATING_DECK

    buttons = get_buttons(decks, 'deck')
    buttons.append([InlineKeyboardButton("➕ New deck", callback_data='new_deck')])
    buttons.append([InlineKeyboardButton("Cancel", callback_data='cancel')])
    await safe_send_text(message, "\U0001f4c1 Which deck?", reply_markup=InlineKeyboardMarkup(buttons))
    return AddCardState.AWAITING_DECK


def preview_text(card: dict[str, str], deck_name: str | None) -> str:
    return (
        f"<b>\U0001f4cb Preview</b>\n\n"
        f"<b>Front:</b> {html.escape(card.get('front', ''))}\n"
        f"<b>Back:</b> {html.escape(card.get('back', ''))}\n\n"
        f"<i>\U0001f4c1 {html.escape(deck_name or '—')}</i>"
    )


async def _preview(message_or_query, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Works with both Message and CallbackQuery."""
    deck_id = context.user_data.get('cur_deck_id') or context.user_data.get('default_deck_id')
    text = preview_text(context.user_data.get('cur_card', {}), db.get_deck_name(deck_id))
    markup = InlineKeyboardMarkup(PREVIEW_BUTTONS)

    if isinstance(message_or_query, Message):
        await safe_send_text(message_or_query, text, reply_markup=markup)
    else:
        await safe_edit_text(message_or_query, text, reply_markup=markup)
