import logging

from telegram import Update
from telegram.error import BadRequest, Forbidden, TimedOut, NetworkError
from telegram.ext import (
    Application,
    ApplicationBuilder,
    ApplicationHandlerStop,
    CommandHandler,
    MessageHandler,
    ConversationHandler,
    CallbackQueryHandler,
    ContextTypes,
    TypeHandler,
    filters,
)

from config import TG_BOT_TOKEN, PROXY_URL, OWNER_ID
from database.database import init_db
import handlers.cards as hand_card
import handlers.decks as hand_deck
import handlers.help as hand_help
import handlers.review as hand_review
import handlers.start as hand_start
import handlers.stats as hand_stats
from utils.constants import AddCardState, ReviewState

TEXT_INPUT = filters.TEXT & ~filters.COMMAND


def add_card_conversation() -> ConversationHandler:
    """New Card -> content -> deck -> preview -> save."""
    return ConversationHandler(
        entry_points=[CallbackQueryHandler(hand_card.add_card_entry, pattern='^add_card$')],
        states={
            AddCardState.AWAITING_CONTENT: [
                CallbackQueryHandler(hand_card.cancel, pattern='^main_menu$'),
                MessageHandler(TEXT_INPUT, hand_card.get_content),
            ],
            AddCardState.AWAITING_DECK: [
                CallbackQueryHandler(hand_card.selected_deck, pattern=r'^deck_\d+$'),
                CallbackQueryHandler(hand_card.new_deck, pattern='^new_deck$'),
                CallbackQueryHandler(hand_card.cancel, pattern='^cancel$'),
            ],
            AddCardState.CREATING_DECK: [MessageHandler(TEXT_INPUT, hand_card.create_deck)],
            AddCardState.CONFIRMATION_PREVIEW: [
                CallbackQueryHandler(hand_card.save_card, pattern='^save_card$'),
                CallbackQueryHandler(hand_card.edit_card, pattern='^edit_card$'),
                CallbackQueryHandler(hand_card.change_deck, pattern='^change_deck$'),
                CallbackQueryHandler(hand_card.cancel, pattern='^cancel$'),
            ],
        },
        fallbacks=[CommandHandler('cancel', hand_card.cancel), CommandHandler('start', hand_start.force_start)],
        allow_reentry=True,
        per_message=False,
    )


def review_conversation() -> ConversationHandler:
    """Review -> deck picker -> front -> answer -> rating, until the deck runs dry."""
    stop = CallbackQueryHandler(hand_review.cancel_review, pattern='^cancel_review$')
    return ConversationHandler(
        entry_points=[CallbackQueryHandler(hand_review.review_entry, pattern='^review$')],
        states={
            ReviewState.DECK_PICKER: [
                CallbackQueryHandler(hand_review.review_deck_selected, pattern=r'^review_deck_\d+$'),
                CallbackQueryHandler(hand_review.cancel_review, pattern='^main_menu$'),
            ],
            ReviewState.SHOWING_FRONT: [
                CallbackQueryHandler(hand_review.show_answer, pattern='^show_answer$'),
                stop,
            ],
            ReviewState.RATING: [
                CallbackQueryHandler(hand_review.rate_card, pattern='^rate_[0-3]$'),
                stop,
            ],
        },
        fallbacks=[CommandHandler('cancel', hand_review.cancel_review), CommandHandler('start', hand_start.force_start)],
        allow_reentry=True,
        per_message=False,
    )


def build_application(token: str, proxy_url: str | None = None, owner_id: int | None = None) -> Application:
    builder = ApplicationBuilder().token(token)
    if proxy_url:
        builder = builder.proxy(proxy_url).get_updates_proxy(proxy_url)
    application = builder.build()

    if owner_id is not None:
        application.bot_data['owner_id'] = owner_id
        application.add_handler(TypeHandler(Update, owner_only), group=-1)

    application.add_handler(add_card_conversation())
    application.add_handler(review_conversation())
    application.add_handler(CommandHandler('start', hand_start.start))

    commands = {
        'review': hand_review.review_command,
        'stats': hand_stats.stats_command,
        'help': hand_help.help_command,
        'leeches': hand_deck.leeches_command,
        'cap': hand_deck.cap_command,
        'deletedeck': hand_deck.delete_deck_command,
    }
    for name, callback in commands.items():
        application.add_handler(CommandHandler(name, callback))

    buttons = {
        '^main_menu$': hand_start.main_menu,
        '^stats$': hand_stats.stats_entry,
        '^help$': hand_help.help_entry,
        r'^unsuspend_\d+$': hand_deck.unsuspend,
        r'^deck_delete_yes_\d+$': hand_deck.delete_deck_yes,
    }
    for pattern, callback in buttons.items():
        application.add_handler(CallbackQueryHandler(callback, pattern=pattern))

    application.add_error_handler(error_handler)
    return application


async def owner_only(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Drop updates from anyone but the owner before other handlers see them."""
    user = update.effective_user
    if user is None or user.id != context.bot_data.get('owner_id'):
        logging.warning(f"Ignoring update from user {user.id if user else None}")
        raise ApplicationHandlerStop


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Logs every unhandled error and tells the learner when it makes sense."""
    error = context.error
    logging.error(f"Update {update} caused error: {error}", exc_info=error)

    if isinstance(error, Forbidden):
        logging.warning(f"Bot was blocked: {error}")
        return
    if isinstance(error, BadRequest) and "message is not modified" in str(error).lower():
        return
    if isinstance(error, (TimedOut, NetworkError)) and not isinstance(error, BadRequest):
        logging.warning(f"Network issue: {error}")
        return

    if isinstance(update, Update) and update.effective_chat:
        try:
            await context.bot.send_message(
                chat_id=update.effective_chat.id,
                text="⚠️ Something went wrong. Try /start to reset."
            )
        except (Forbidden, BadRequest, TimedOut, NetworkError) as e:
            logging.warning(f"Could not report the error: {e}")


def main() -> None:
    logging.info("Init db...")
    init_db()

    logging.info("Starting app")
    build_application(TG_BOT_TOKEN, PROXY_URL, OWNER_ID).run_polling()


if __name__ == '__main__':
    main()
