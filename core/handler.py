"""
core/handler.py
---------------
Handler capability interfaces and the startup-time handler registry.

Plain handlers are picked by the shape of an event alone. State handlers
are picked by the shape of an event together with the sender's current
state label. The registry fixes both collections, and their order, once
at startup.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from core.errors import RegistryError
from models.events import InboundEvent
from models.reply import Reply


class UpdateHandler(ABC):
    """A handler selected purely by event shape."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def can_handle(self, event: InboundEvent) -> bool:
        """Return True if this handler accepts the event."""

    @abstractmethod
    def handle(self, event: InboundEvent) -> Optional[Reply]:
        """Process the event and return the reply to send, if any."""


class StateHandler(ABC):
    """A handler selected by event shape and the sender's state label."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        """Return True if this handler accepts the event in the given state."""

    @abstractmethod
    def handle_state(self, event: InboundEvent, state: str) -> Optional[Reply]:
        """Process the event for the given state and return the reply, if any."""


@dataclass(frozen=True)
class HandlerRegistry:
    """
    Immutable, ordered set of registered handlers.

    Attributes:
        plain: Plain handlers, in registration (= tie-break) order.
        state: State handlers, in registration (= tie-break) order.
        start: The distinguished restart-command handler. Must be one of
            ``plain``; None disables the restart rule.
    """
    plain: tuple[UpdateHandler, ...]
    state: tuple[StateHandler, ...] = ()
    start: Optional[UpdateHandler] = None

    def __post_init__(self):
        for handler in self.plain:
            if not isinstance(handler, UpdateHandler):
                raise RegistryError(f"{handler!r} is not an UpdateHandler")
        for handler in self.state:
            if not isinstance(handler, StateHandler):
                raise RegistryError(f"{handler!r} is not a StateHandler")
        for collection in (self.plain, self.state):
            if len({id(h) for h in collection}) != len(collection):
                raise RegistryError("The same handler instance is registered twice")
        if self.start is not None and not any(h is self.start for h in self.plain):
            raise RegistryError(
                f"Start handler {self.start.name} must be registered as a plain handler"
            )

    @classmethod
    def build(
        cls,
        plain: Sequence[UpdateHandler],
        state: Sequence[StateHandler] = (),
        start: Optional[UpdateHandler] = None,
    ) -> "HandlerRegistry":
        """Freeze the given sequences into a registry, preserving order."""
        return cls(plain=tuple(plain), state=tuple(state), start=start)
