"""Fakes shared by the test suite."""

from typing import Callable, Optional

from core.handler import StateHandler, UpdateHandler
from models.events import CallbackQuery, InboundEvent, TextMessage
from models.reply import Reply


def text(body: str, chat_id: int = 42) -> TextMessage:
    return TextMessage(chat_id=chat_id, text=body, message_id=100, first_name="Ann")


def callback(data: str, chat_id: int = 42) -> CallbackQuery:
    return CallbackQuery(chat_id=chat_id, data=data, query_id="q-1", message_id=200, first_name="Ann")


class FakeUserDirectory:
    """
    In-memory user directory.

    A chat id missing from ``states`` has no user record; a chat id mapped
    to None has a record without a state.
    """

    def __init__(self, states: Optional[dict] = None, log: Optional[list] = None):
        self.states = dict(states or {})
        self.log = log if log is not None else []
        self.lookups: list[int] = []
        self.cleared: list[int] = []

    def find_state(self, chat_id: int) -> Optional[str]:
        self.lookups.append(chat_id)
        return self.states.get(chat_id)

    def clear_state(self, chat_id: int) -> None:
        self.cleared.append(chat_id)
        self.log.append(("clear", chat_id))
        self.states[chat_id] = None


class RecordingHandler(UpdateHandler):
    """Plain handler with a pluggable predicate that records its calls."""

    def __init__(
        self,
        label: str,
        accepts: Callable[[InboundEvent], bool],
        log: Optional[list] = None,
        error: Optional[Exception] = None,
    ):
        self.label = label
        self.accepts = accepts
        self.log = log if log is not None else []
        self.error = error
        self.checked: list[InboundEvent] = []
        self.handled: list[InboundEvent] = []

    def can_handle(self, event: InboundEvent) -> bool:
        self.checked.append(event)
        return self.accepts(event)

    def handle(self, event: InboundEvent) -> Optional[Reply]:
        self.handled.append(event)
        self.log.append(("handle", self.label))
        if self.error is not None:
            raise self.error
        return Reply(chat_id=event.chat_id, text=self.label)


class RecordingStateHandler(StateHandler):
    """State handler with a pluggable predicate that records its calls."""

    def __init__(
        self,
        label: str,
        accepts: Callable[[InboundEvent, str], bool],
        log: Optional[list] = None,
    ):
        self.label = label
        self.accepts = accepts
        self.log = log if log is not None else []
        self.checked: list[tuple[InboundEvent, str]] = []
        self.handled: list[tuple[InboundEvent, str]] = []

    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        self.checked.append((event, state))
        return self.accepts(event, state)

    def handle_state(self, event: InboundEvent, state: str) -> Optional[Reply]:
        self.handled.append((event, state))
        self.log.append(("handle_state", self.label))
        return Reply(chat_id=event.chat_id, text=f"{self.label}:{state}")
