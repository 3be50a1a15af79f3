import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup
from telegram.error import BadRequest

from models.reply import Reply
from tests.helpers import callback, text
from transport.sender import MessageSender
from transport.updates import process_update


@pytest.fixture
def bot():
    return AsyncMock()


INLINE = InlineKeyboardMarkup([[InlineKeyboardButton("Back", callback_data="catalog")]])


class TestMessageSender:
    def test_sends_new_message(self, bot):
        asyncio.run(MessageSender(bot).deliver(Reply(chat_id=42, text="hi")))

        bot.send_message.assert_awaited_once_with(chat_id=42, text="hi", parse_mode=None, reply_markup=None)

    def test_edits_in_place(self, bot):
        reply = Reply(chat_id=42, text="hi", reply_markup=INLINE, edit_message_id=7)

        asyncio.run(MessageSender(bot).deliver(reply))

        bot.edit_message_text.assert_awaited_once_with(
            chat_id=42, message_id=7, text="hi", parse_mode=None, reply_markup=INLINE
        )
        bot.send_message.assert_not_awaited()

    def test_failed_edit_falls_back_to_send(self, bot):
        bot.edit_message_text.side_effect = BadRequest("There is no text in the message to edit")

        asyncio.run(MessageSender(bot).deliver(Reply(chat_id=42, text="hi", edit_message_id=7)))

        bot.send_message.assert_awaited_once()

    def test_unmodified_edit_is_silent(self, bot):
        bot.edit_message_text.side_effect = BadRequest("Message is not modified")

        result = asyncio.run(MessageSender(bot).deliver(Reply(chat_id=42, text="hi", edit_message_id=7)))

        assert result is None
        bot.send_message.assert_not_awaited()

    def test_reply_keyboard_is_never_edited(self, bot):
        markup = ReplyKeyboardMarkup([["A"]])

        asyncio.run(MessageSender(bot).deliver(
            Reply(chat_id=42, text="hi", reply_markup=markup, edit_message_id=7)
        ))

        bot.edit_message_text.assert_not_awaited()
        bot.send_message.assert_awaited_once()

    def test_photo(self, bot):
        reply = Reply(chat_id=42, text="caption", photo="file-id", edit_message_id=7)

        asyncio.run(MessageSender(bot).deliver(reply))

        bot.send_photo.assert_awaited_once_with(
            chat_id=42, photo="file-id", caption="caption", parse_mode=None, reply_markup=None
        )
        bot.edit_message_text.assert_not_awaited()

    def test_answer_callback(self, bot):
        asyncio.run(MessageSender(bot).answer_callback("q-1"))
        bot.answer_callback_query.assert_awaited_once_with("q-1")

    def test_expired_callback_answer_is_logged_not_raised(self, bot):
        bot.answer_callback_query.side_effect = BadRequest("Query is too old")
        asyncio.run(MessageSender(bot).answer_callback("q-1"))


class TestProcessUpdate:
    def _run(self, monkeypatch, event, reply):
        monkeypatch.setattr("transport.updates.event_from_update", lambda update: event)
        dispatcher = Mock()
        dispatcher.dispatch.return_value = reply
        sender = Mock()
        sender.deliver = AsyncMock()
        sender.answer_callback = AsyncMock()
        asyncio.run(process_update(Mock(update_id=1), dispatcher, sender))
        return dispatcher, sender

    def test_text_reply_is_delivered(self, monkeypatch):
        reply = Reply(chat_id=42, text="hi")
        dispatcher, sender = self._run(monkeypatch, text("/start"), reply)

        dispatcher.dispatch.assert_called_once_with(text("/start"))
        sender.deliver.assert_awaited_once_with(reply)
        sender.answer_callback.assert_not_awaited()

    def test_callback_is_answered(self, monkeypatch):
        dispatcher, sender = self._run(monkeypatch, callback("cat:x"), None)

        sender.answer_callback.assert_awaited_once_with("q-1")
        sender.deliver.assert_not_awaited()

    def test_unsupported_update_is_ignored(self, monkeypatch):
        dispatcher, sender = self._run(monkeypatch, None, None)

        dispatcher.dispatch.assert_not_called()

    def test_dispatch_errors_propagate(self, monkeypatch):
        monkeypatch.setattr("transport.updates.event_from_update", lambda update: text("boom"))
        dispatcher = Mock()
        dispatcher.dispatch.side_effect = RuntimeError("handler failed")

        with pytest.raises(RuntimeError):
            asyncio.run(process_update(Mock(update_id=1), dispatcher, Mock()))
