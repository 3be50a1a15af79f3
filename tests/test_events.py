from datetime import datetime, timezone

from telegram import CallbackQuery as TgCallbackQuery
from telegram import Chat, Message, Update, User

from models.events import CallbackQuery, TextMessage, event_from_update

USER = User(id=42, first_name="Ann", is_bot=False, last_name="Lee", username="ann")
CHAT = Chat(id=42, type=Chat.PRIVATE)


def _message(text=None, message_id=10):
    return Message(
        message_id=message_id,
        date=datetime.now(timezone.utc),
        chat=CHAT,
        from_user=USER,
        text=text,
    )


class TestEventFromUpdate:
    def test_text_message(self):
        update = Update(update_id=1, message=_message("/start"))

        event = event_from_update(update)

        assert event == TextMessage(
            chat_id=42,
            text="/start",
            message_id=10,
            username="ann",
            first_name="Ann",
            last_name="Lee",
        )

    def test_callback_query_uses_chat_of_originating_message(self):
        query = TgCallbackQuery(
            id="q1",
            from_user=USER,
            chat_instance="ci",
            data="cat:electronics",
            message=_message("Catalog", message_id=77),
        )

        event = event_from_update(Update(update_id=2, callback_query=query))

        assert isinstance(event, CallbackQuery)
        assert event.chat_id == 42
        assert event.data == "cat:electronics"
        assert event.query_id == "q1"
        assert event.message_id == 77

    def test_message_without_text_is_ignored(self):
        assert event_from_update(Update(update_id=3, message=_message(None))) is None

    def test_callback_without_message_is_ignored(self):
        query = TgCallbackQuery(id="q2", from_user=USER, chat_instance="ci", data="cat:x")
        assert event_from_update(Update(update_id=4, callback_query=query)) is None

    def test_empty_update_is_ignored(self):
        assert event_from_update(Update(update_id=5)) is None
