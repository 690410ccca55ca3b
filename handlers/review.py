import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup, CallbackQuery
from telegram.ext import ContextTypes, ConversationHandler

import database.database as db
from config import SCHEDULER_CONFIG
from srs.config import SchedulerConfig
from srs.preview import format_interval, schedule_all_ratings
from srs.scheduler import now_ms
from srs.state import Rating, SchedulerState
from utils.constants import ReviewState, RATING_LABELS, MENU_BUTTON, REVIEW_FLOW_KEYS
from utils.telegram_helpers import safe_edit_text, safe_send_text


async def review_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Entry point: user clicks 'Review'."""
    query = update.callback_query
    await query.answer()

    decks = available_decks(db.get_deck_summaries())

    if not decks:
        await safe_edit_text(
            query,
            "✨ Nothing due — you're all caught up!",
            reply_markup=InlineKeyboardMarkup([MENU_BUTTON])
        )
        return ConversationHandler.END

    if len(decks) == 1:
        return await _start_review(query, decks[0]['deck_id'], context)

    buttons = [
        [InlineKeyboardButton(
            f"\U0001f4da {deck['deck_name']}  ·  {_work_label(deck)}",
            callback_data=f"review_deck_{deck['deck_id']}",
        )]
        for deck in decks
    ]
    buttons.append(MENU_BUTTON)
    await safe_edit_text(query, "\U0001f9e0 Choose a deck:", reply_markup=InlineKeyboardMarkup(buttons))
    return ReviewState.DECK_PICKER


async def review_deck_selected(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """User picked a deck from the picker."""
    query = update.callback_query
    await query.answer()

    deck_id = int(query.data.split('_')[2])  # review_deck_<id>
    return await _start_review(query, deck_id, context)


async def review_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/review slash command — sends a message with a Review button."""
    decks = available_decks(db.get_deck_summaries())

    if not decks:
        await safe_send_text(update.message, "✨ Nothing due — you're all caught up!")
        return

    await safe_send_text(
        update.message,
        f"\U0001f9e0 {', '.join(_work_label(d) for d in decks)}",
        reply_markup=InlineKeyboardMarkup([
            [InlineKeyboardButton('▶ Review', callback_data='review')]
        ]),
    )


async def show_answer(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """User taps 'Show answer' — reveal back + rating buttons."""
    query = update.callback_query
    await query.answer()

    card = context.user_data.get('review_card')
    if card is None:
        return await _finish_review(query, context)

    state = SchedulerState.from_row(card)
    text = (
        f"{html.escape(card['front'])}\n\n"
        f"\U0001f4a1 {html.escape(card['back'])}"
    )
    await safe_edit_text(query, text, reply_markup=InlineKeyboardMarkup(_rating_buttons(state)))
    return ReviewState.RATING


async def rate_card(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """User rates a card — reschedule it, move to the next one."""
    query = update.callback_query
    await query.answer()

    card = context.user_data.get('review_card')
    if card is None:
        return await _finish_review(query, context)

    rating = Rating(int(query.data.split('_')[1]))  # rate_<n>
    previous, result = db.rate_card(card['card_id'], rating)

    context.user_data['review_count'] = context.user_data.get('review_count', 0) + 1
    if rating >= Rating.GOOD:
        context.user_data['review_correct'] = context.user_data.get('review_correct', 0) + 1
    if result.suspended and not previous.suspended:
        context.user_data['review_leeches'] = context.user_data.get('review_leeches', 0) + 1

    logging.info(
        f"Card {card['card_id']}: rated {rating.name.lower()}, "
        f"{previous.phase.value} -> {result.phase.value}, next due {result.due_ts}"
    )

    return await _show_next(query, context)


async def cancel_review(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """User stops mid-review. Works for both callback button and /cancel command."""
    reviewed = context.user_data.get('review_count', 0)
    _cleanup_review_data(context)

    text = f"⏹ Stopped after {reviewed} card{'s' if reviewed != 1 else ''}"
    markup = InlineKeyboardMarkup([MENU_BUTTON])

    if update.callback_query:
        await update.callback_query.answer()
        await safe_edit_text(update.callback_query, text, reply_markup=markup)
    else:
        await safe_send_text(update.message, text, reply_markup=markup)

    return ConversationHandler.END


# ============================================================
# Helpers
# ============================================================

def available_decks(summaries: list[dict]) -> list[dict]:
    """Decks with something to show right now: due cards or new cards under today's cap."""
    return [d for d in summaries if d['due_count'] + d['new_available'] > 0]


def rating_labels(
    state: SchedulerState,
    now: int,
    config: SchedulerConfig = SCHEDULER_CONFIG,
) -> dict[Rating, str]:
    """Button text per rating, with the interval each one would give."""
    results = schedule_all_ratings(state, now, config)
    return {
        rating: f"{RATING_LABELS[rating]} {format_interval(result, now)}"
        for rating, result in results.items()
    }


def _work_label(deck: dict) -> str:
    parts = []
    if deck['due_count']:
        parts.append(f"{deck['due_count']} due")
    if deck['new_available']:
        parts.append(f"{deck['new_available']} new")
    return ' · '.join(parts)


def _rating_buttons(state: SchedulerState) -> list[list[InlineKeyboardButton]]:
    labels = rating_labels(state, now_ms())

    def button(rating: Rating) -> InlineKeyboardButton:
        return InlineKeyboardButton(labels[rating], callback_data=f'rate_{int(rating)}')

    return [
        [button(Rating.AGAIN), button(Rating.HARD)],
        [button(Rating.GOOD), button(Rating.EASY)],
    ]


async def _start_review(query: CallbackQuery, deck_id: int, context: ContextTypes.DEFAULT_TYPE) -> int:
    _cleanup_review_data(context)
    context.user_data['review_deck_id'] = deck_id
    return await _show_next(query, context)


async def _show_next(query: CallbackQuery, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Ask the store for the deck's next card and show its front."""
    card = db.get_next_card(context.user_data['review_deck_id'])
    context.user_data['review_card'] = card

    if card is None:
        return await _finish_review(query, context)

    buttons = InlineKeyboardMarkup([
        [InlineKeyboardButton("\U0001f440 Show answer", callback_data='show_answer')],
        [InlineKeyboardButton("⏹ Stop", callback_data='cancel_review')]
    ])
    tag = " \U0001f195" if card['reps'] == 0 and card['learning_stage'] == 0 else ""
    await safe_edit_text(query, f"{html.escape(card['front'])}{tag}", reply_markup=buttons)
    return ReviewState.SHOWING_FRONT


def summary_text(total: int, correct: int, leeches: int) -> str:
    if total == 0:
        return "✨ Nothing left to review here"
    text = f"\U0001f389 Done! {correct}/{total} recalled"
    if leeches:
        text += (
            f"\n\n\U0001fa78 {leeches} leech{'es' if leeches != 1 else ''} suspended"
            f" — see /leeches"
        )
    return text


async def _finish_review(query: CallbackQuery, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Show review summary and end conversation."""
    text = summary_text(
        context.user_data.get('review_count', 0),
        context.user_data.get('review_correct', 0),
        context.user_data.get('review_leeches', 0),
    )
    _cleanup_review_data(context)

    markup = InlineKeyboardMarkup([
        [InlineKeyboardButton("\U0001f4dd New Card", callback_data='add_card'),
         InlineKeyboardButton("\U0001f3e0 Menu", callback_data='main_menu')]
    ])
    await safe_edit_text(query, text, reply_markup=markup)
    return ConversationHandler.END


def _cleanup_review_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for key in REVIEW_FLOW_KEYS:
        context.user_data.pop(key, None)
