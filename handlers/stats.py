import html
from datetime import date
from typing import Any

from telegram import Update, InlineKeyboardMarkup
from telegram.ext import ContextTypes

import database.database as db
from utils.constants import MENU_BUTTON
from utils.telegram_helpers import safe_edit_text, safe_send_text


def _forecast_lines(forecast: list[dict[str, Any]]) -> str:
    if not any(entry['count'] for entry in forecast):
        return "  Nothing coming up"

    lines = []
    for entry in forecast:
        day_label = date.fromisoformat(entry['day']).strftime('%b %d')  # "Feb 18"
        count = entry['count']
        lines.append(f"  {day_label}  ·  {count} card{'s' if count != 1 else ''}")
    return '\n'.join(lines)


def _deck_lines(decks: list[dict[str, Any]]) -> str:
    if not decks:
        return "  No decks yet"
    return '\n'.join(
        f"  {html.escape(d['deck_name'])}  ·  {d['card_count']} cards, "
        f"{d['due_count']} due, {d['new_available']}/{d['new_count']} new today"
        for d in decks
    )


def build_stats_text(stats: dict[str, int], decks: list[dict[str, Any]], forecast: list[dict[str, Any]]) -> str:
    return (
        f"\U0001f4ca Stats\n\n"
        f"\U0001f4da Total: {stats['total']}\n"
        f"\U0001f195 New: {stats['new']}\n"
        f"\U0001f4d6 Learning: {stats['learning']}\n"
        f"✅ Review: {stats['review']}\n"
        f"\U0001fa78 Suspended: {stats['suspended']}\n\n"
        f"\U0001f514 Due now: {stats['due']}\n\n"
        f"\U0001f4c1 Decks\n"
        f"{_deck_lines(decks)}\n\n"
        f"\U0001f4c5 Next 7 days\n"
        f"{_forecast_lines(forecast)}"
    )


def _current_stats_text() -> str:
    return build_stats_text(db.get_card_stats(), db.get_deck_summaries(), db.get_forecast(days=7))


async def stats_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    await safe_edit_text(query, _current_stats_text(), reply_markup=InlineKeyboardMarkup([MENU_BUTTON]))


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/stats slash command — send a fresh stats message."""
    await safe_send_text(update.message, _current_stats_text(), reply_markup=InlineKeyboardMarkup([MENU_BUTTON]))
