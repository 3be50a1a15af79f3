"""
models/events.py
----------------
Inbound events as seen by the dispatcher.

A Telegram update reaches the dispatcher as exactly one of two variants:
a text message or a callback query from an inline button. Anything else
(photos, stickers, edited messages, ...) is not an event for this bot.
"""

from dataclasses import dataclass
from typing import Optional, Union

from telegram import Update


@dataclass(frozen=True)
class TextMessage:
    """
    A text message sent by a user.

    Attributes:
        chat_id: Sender/chat identifier, the key for state lookups.
        text: Raw message text.
        message_id: Telegram id of the message (for replies).
        username: Sender's @username, if any.
        first_name: Sender's first name, if known.
        last_name: Sender's last name, if known.
    """
    chat_id: int
    text: str
    message_id: Optional[int] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass(frozen=True)
class CallbackQuery:
    """
    An inline-button press.

    Attributes:
        chat_id: Chat of the message the button belongs to.
        data: Opaque callback payload, e.g. ``"cat:electronics"``.
        query_id: Telegram callback query id (needed to answer it).
        message_id: Id of the message carrying the keyboard.
        username: Sender's @username, if any.
        first_name: Sender's first name, if known.
    """
    chat_id: int
    data: str
    query_id: Optional[str] = None
    message_id: Optional[int] = None
    username: Optional[str] = None
    first_name: Optional[str] = None


InboundEvent = Union[TextMessage, CallbackQuery]


def event_from_update(update: Update) -> Optional[InboundEvent]:
    """
    Convert a python-telegram-bot Update into an InboundEvent.

    Returns:
        A TextMessage or CallbackQuery, or None when the update carries
        neither a text message nor a callback query with a chat.
    """
    if update.callback_query is not None:
        query = update.callback_query
        message = query.message
        if message is None or query.data is None:
            return None
        user = query.from_user
        return CallbackQuery(
            chat_id=message.chat.id,
            data=query.data,
            query_id=query.id,
            message_id=message.message_id,
            username=user.username if user else None,
            first_name=user.first_name if user else None,
        )

    message = update.message
    if message is not None and message.text is not None:
        user = message.from_user
        return TextMessage(
            chat_id=message.chat.id,
            text=message.text,
            message_id=message.message_id,
            username=user.username if user else None,
            first_name=user.first_name if user else None,
            last_name=user.last_name if user else None,
        )

    return None
