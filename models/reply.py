"""
models/reply.py
---------------
Outbound result produced by handlers and delivered by the transport.
"""

from dataclasses import dataclass
from typing import Optional, Union

from telegram import InlineKeyboardMarkup, ReplyKeyboardMarkup


@dataclass
class Reply:
    """
    What the bot should send back for one event.

    Attributes:
        chat_id: Target chat.
        text: Message text (or photo caption when ``photo`` is set).
        reply_markup: Inline or reply keyboard to attach.
        parse_mode: Telegram parse mode, e.g. "Markdown".
        edit_message_id: Edit this message in place instead of sending a new one.
        photo: URL or file_id of a photo to send with ``text`` as caption.
    """
    chat_id: int
    text: str
    reply_markup: Optional[Union[InlineKeyboardMarkup, ReplyKeyboardMarkup]] = None
    parse_mode: Optional[str] = None
    edit_message_id: Optional[int] = None
    photo: Optional[str] = None

    def is_edit(self) -> bool:
        return self.edit_message_id is not None and self.photo is None
