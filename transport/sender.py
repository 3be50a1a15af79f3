"""
transport/sender.py
-------------------
Delivers handler replies through the Telegram Bot API.
"""

from typing import Optional

from telegram import Bot, InlineKeyboardMarkup, Message
from telegram.error import BadRequest

from models.reply import Reply
from utils.logger import get_logger

logger = get_logger(__name__)


class MessageSender:
    """Sends, edits and acknowledges messages on behalf of handlers."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def deliver(self, reply: Reply) -> Optional[Message]:
        """
        Send a Reply.

        A reply with a photo is always sent as a new photo message. A reply
        with ``edit_message_id`` edits that message in place; if Telegram
        refuses the edit (e.g. the original is a photo), a new message is
        sent instead.

        Returns:
            The sent Message, or None when an edit left the message unchanged.
        """
        if reply.photo:
            return await self.bot.send_photo(
                chat_id=reply.chat_id,
                photo=reply.photo,
                caption=reply.text,
                parse_mode=reply.parse_mode,
                reply_markup=reply.reply_markup,
            )

        if reply.is_edit() and not _is_reply_keyboard(reply):
            try:
                result = await self.bot.edit_message_text(
                    chat_id=reply.chat_id,
                    message_id=reply.edit_message_id,
                    text=reply.text,
                    parse_mode=reply.parse_mode,
                    reply_markup=reply.reply_markup,
                )
                return result if isinstance(result, Message) else None
            except BadRequest as e:
                if "not modified" in str(e).lower():
                    return None
                logger.info(f"Cannot edit message {reply.edit_message_id} in chat {reply.chat_id}: {e}")

        return await self.bot.send_message(
            chat_id=reply.chat_id,
            text=reply.text,
            parse_mode=reply.parse_mode,
            reply_markup=reply.reply_markup,
        )

    async def answer_callback(self, query_id: Optional[str]) -> None:
        """Acknowledge a callback query so the client stops its loading spinner."""
        if not query_id:
            return
        try:
            await self.bot.answer_callback_query(query_id)
        except BadRequest as e:
            # queries expire after a while; the reply is still worth sending
            logger.warning(f"Failed to answer callback query {query_id}: {e}")


def _is_reply_keyboard(reply: Reply) -> bool:
    return reply.reply_markup is not None and not isinstance(reply.reply_markup, InlineKeyboardMarkup)
