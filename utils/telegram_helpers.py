"""
Telegram calls that never crash a handler.

Handlers send and edit through these. Failures are logged at warning level;
an edit that can't be applied turns into a fresh reply.

Messages use parse_mode='HTML', so card text and deck names must go through
html.escape() before they're formatted in.
"""

import logging

from telegram import CallbackQuery, InlineKeyboardMarkup, Message
from telegram.error import BadRequest, Forbidden, TimedOut, NetworkError

logger = logging.getLogger(__name__)


async def safe_edit_text(
    query: CallbackQuery,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
) -> bool:
    """Edit the message behind a button press; reply instead if that fails."""
    try:
        await query.edit_message_text(text, reply_markup=reply_markup, parse_mode='HTML')
        return True
    except BadRequest as e:
        if "message is not modified" in str(e).lower():
            return True  # double tap
        logger.warning(f"safe_edit_text BadRequest: {e}")
        return await safe_send_text(query.message, text, reply_markup=reply_markup)
    except (TimedOut, NetworkError) as e:
        logger.warning(f"safe_edit_text network error: {e}")
        return False


async def safe_send_text(
    message: Message | None,
    text: str,
    reply_markup: InlineKeyboardMarkup | None = None,
) -> bool:
    """Reply to a Message. Returns False if there's nothing to reply to or the send failed."""
    if message is None:
        logger.warning("safe_send_text: nowhere to send")
        return False
    try:
        await message.reply_text(text, reply_markup=reply_markup, parse_mode='HTML')
        return True
    except Forbidden:
        logger.warning("Bot was blocked by the owner")
        return False
    except (TimedOut, NetworkError, BadRequest) as e:
        logger.warning(f"safe_send_text failed: {e}")
        return False
