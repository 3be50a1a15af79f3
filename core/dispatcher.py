"""
core/dispatcher.py
------------------
Routes one inbound event to exactly one handler.

Priority, first match wins:
    1. Restart command ("/start" or "start") -> the registry's start handler,
       after clearing any pending state for the sender.
    2. Text message from a sender with a state -> first matching state handler.
    3. First matching plain handler.
    4. Nothing matched -> None.

The dispatcher keeps no per-event state, so one instance can serve
concurrent updates. Errors from the directory or from a handler are
not caught here.
"""

from typing import Optional, Protocol

from core.handler import HandlerRegistry
from models.events import CallbackQuery, InboundEvent, TextMessage
from models.reply import Reply
from utils.logger import get_logger

logger = get_logger(__name__)

RESTART_COMMANDS = frozenset({"/start", "start"})


class UserDirectory(Protocol):
    """Storage of per-user state labels, keyed by chat id."""

    def find_state(self, chat_id: int) -> Optional[str]:
        """Return the user's state label, or None if unset or the user is unknown."""
        ...

    def clear_state(self, chat_id: int) -> None:
        """Persist a null state label for the user."""
        ...


def is_restart_command(event: InboundEvent) -> bool:
    return isinstance(event, TextMessage) and event.text.strip() in RESTART_COMMANDS


class UpdateDispatcher:
    """
    Selects and invokes the handler responsible for an event.

    Args:
        registry: Handlers fixed at startup.
        directory: Where sender state labels are read and cleared.
    """

    def __init__(self, registry: HandlerRegistry, directory: UserDirectory):
        self._registry = registry
        self._directory = directory

    def dispatch(self, event: InboundEvent) -> Optional[Reply]:
        """
        Route the event and return the chosen handler's reply.

        Returns:
            The handler's Reply, or None when no handler accepted the event
            (or the chosen handler had nothing to say).
        """
        if isinstance(event, CallbackQuery):
            logger.info(f"Callback '{event.data}' from chat {event.chat_id}")

        start = self._registry.start
        if start is not None and is_restart_command(event) and start.can_handle(event):
            logger.info(f"Restart command from chat {event.chat_id}, routing to {start.name}")
            self._reset_state(event.chat_id)
            return start.handle(event)

        if isinstance(event, TextMessage):
            state = self._directory.find_state(event.chat_id)
            if state is not None:
                logger.debug(f"Chat {event.chat_id} is in state {state}")
                for handler in self._registry.state:
                    if handler.can_handle_state(event, state):
                        logger.debug(f"State handler {handler.name} selected")
                        return handler.handle_state(event, state)

        for handler in self._registry.plain:
            if handler.can_handle(event):
                logger.debug(f"Handler {handler.name} selected")
                return handler.handle(event)

        if isinstance(event, CallbackQuery):
            logger.warning(f"No handler for callback '{event.data}'")
        else:
            logger.debug(f"No handler for message from chat {event.chat_id}")
        return None

    def _reset_state(self, chat_id: int) -> None:
        state = self._directory.find_state(chat_id)
        if state is not None:
            logger.info(f"Resetting state {state} for chat {chat_id}")
            self._directory.clear_state(chat_id)
