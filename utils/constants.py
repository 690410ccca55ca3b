from enum import IntEnum
from telegram import InlineKeyboardButton

from srs.state import Rating

DECK_NAME_MAX = 50
CARD_SIDE_MAX = 1000


# Conversation states; the two flows use separate ranges
class AddCardState(IntEnum):
    AWAITING_CONTENT = 1
    AWAITING_DECK = 2
    CREATING_DECK = 3
    CONFIRMATION_PREVIEW = 4


class ReviewState(IntEnum):
    DECK_PICKER = 11
    SHOWING_FRONT = 12
    RATING = 13


# user_data keys each flow owns
CARD_FLOW_KEYS = ('cur_card', 'cur_deck_id')
REVIEW_FLOW_KEYS = ('review_deck_id', 'review_card', 'review_count', 'review_correct', 'review_leeches')


# Button text per rating, left to right
RATING_LABELS = {
    Rating.AGAIN: "\U0001f534 Again",
    Rating.HARD: "\U0001f7e0 Hard",
    Rating.GOOD: "\U0001f7e2 Good",
    Rating.EASY: "\U0001f535 Easy",
}

PREVIEW_BUTTONS = [
    [InlineKeyboardButton("✅ Save", callback_data='save_card')],
    [
        InlineKeyboardButton("✏️ Edit", callback_data='edit_card'),
        InlineKeyboardButton("\U0001f4c1 Deck", callback_data='change_deck'),
    ],
    [InlineKeyboardButton("✖ Cancel", callback_data='cancel')],
]

MENU_BUTTON = [InlineKeyboardButton("\U0001f3e0 Menu", callback_data='main_menu')]
