"""
transport/updates.py
--------------------
The single python-telegram-bot callback every update goes through,
and the application-wide error handler.
"""

from telegram import Update
from telegram.ext import ContextTypes

from core.dispatcher import UpdateDispatcher
from models.events import CallbackQuery, event_from_update
from security.rate_limiter import rate_limited
from transport.sender import MessageSender
from utils.logger import get_logger

logger = get_logger(__name__)

DISPATCHER_KEY = "dispatcher"

ERROR_TEXT = "⚠️ Something went wrong. Please try again or send /start."


async def process_update(update: Update, dispatcher: UpdateDispatcher, sender: MessageSender) -> None:
    """Convert an update to an event, dispatch it and deliver the reply."""
    event = event_from_update(update)
    if event is None:
        logger.debug(f"Ignoring update {update.update_id}: no text message or callback")
        return

    if isinstance(event, CallbackQuery):
        await sender.answer_callback(event.query_id)

    reply = dispatcher.dispatch(event)
    if reply is not None:
        await sender.deliver(reply)


@rate_limited
async def on_update(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    dispatcher: UpdateDispatcher = context.bot_data[DISPATCHER_KEY]
    await process_update(update, dispatcher, MessageSender(context.bot))


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log any exception raised while processing an update and tell the user."""
    logger.error("Exception while handling an update", exc_info=context.error)

    if isinstance(update, Update) and update.effective_chat is not None:
        await context.bot.send_message(chat_id=update.effective_chat.id, text=ERROR_TEXT)
