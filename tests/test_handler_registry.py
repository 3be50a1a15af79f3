import pytest

from core.errors import RegistryError
from core.handler import HandlerRegistry
from tests.helpers import RecordingHandler, RecordingStateHandler


def _plain(label):
    return RecordingHandler(label, lambda e: False)


def _state(label):
    return RecordingStateHandler(label, lambda e, s: False)


class TestHandlerRegistry:
    def test_build_preserves_order_and_freezes(self):
        a, b, c = _plain("a"), _plain("b"), _plain("c")
        s1, s2 = _state("s1"), _state("s2")

        registry = HandlerRegistry.build([c, a, b], [s2, s1], start=a)

        assert registry.plain == (c, a, b)
        assert registry.state == (s2, s1)
        assert registry.start is a

    def test_start_must_be_a_plain_handler(self):
        with pytest.raises(RegistryError, match="must be registered"):
            HandlerRegistry.build([_plain("a")], start=_plain("start"))

    def test_rejects_state_handler_in_plain_collection(self):
        with pytest.raises(RegistryError):
            HandlerRegistry.build([_state("s")])

    def test_rejects_plain_handler_in_state_collection(self):
        with pytest.raises(RegistryError):
            HandlerRegistry.build([], [_plain("p")])

    def test_rejects_duplicate_instances(self):
        a = _plain("a")
        with pytest.raises(RegistryError, match="twice"):
            HandlerRegistry.build([a, a])

    def test_registry_error_is_a_value_error(self):
        assert issubclass(RegistryError, ValueError)

    def test_is_immutable(self):
        registry = HandlerRegistry.build([_plain("a")])
        with pytest.raises(AttributeError):
            registry.plain = ()

    def test_handler_name_defaults_to_class_name(self):
        assert _plain("a").name == "RecordingHandler"
        assert _state("s").name == "RecordingStateHandler"
