import pytest

from core.dispatcher import UpdateDispatcher, is_restart_command
from core.errors import DirectoryUnavailable
from core.handler import HandlerRegistry
from models.events import CallbackQuery, TextMessage
from tests.helpers import RecordingHandler, RecordingStateHandler, callback, text


def _never(*_):
    return False


def _always(*_):
    return True


def _category_handler(log):
    return RecordingHandler(
        "catalog",
        lambda e: isinstance(e, CallbackQuery) and e.data.startswith("cat:"),
        log=log,
    )


class TestRestartCommand:
    def test_null_state_invokes_start_without_mutation(self, directory, start_handler, address_handler):
        directory.states[42] = None
        registry = HandlerRegistry.build([start_handler], [address_handler], start=start_handler)

        reply = UpdateDispatcher(registry, directory).dispatch(text("/start"))

        assert reply.text == "start"
        assert directory.cleared == []
        assert address_handler.checked == []

    def test_pending_state_is_cleared_before_start_runs(self, directory, log, start_handler, address_handler):
        directory.states[42] = "AWAITING_ADDRESS"
        registry = HandlerRegistry.build([start_handler], [address_handler], start=start_handler)

        reply = UpdateDispatcher(registry, directory).dispatch(text("/start"))

        assert reply.text == "start"
        assert directory.states[42] is None
        assert log == [("clear", 42), ("handle", "start")]
        assert address_handler.handled == []

    @pytest.mark.parametrize("body", ["start", "/start", "  /start  ", "start\n"])
    def test_literal_tokens_after_trimming(self, directory, start_handler, body):
        directory.states[42] = "AWAITING_PHONE"
        registry = HandlerRegistry.build([start_handler], start=start_handler)
        start_handler.accepts = _always

        UpdateDispatcher(registry, directory).dispatch(text(body))

        assert len(start_handler.handled) == 1
        assert directory.cleared == [42]

    @pytest.mark.parametrize("body", ["/Start", "START", "/start now", "/started", "restart"])
    def test_other_texts_are_not_restart_commands(self, body):
        assert not is_restart_command(text(body))

    def test_callback_with_start_payload_is_not_a_restart(self):
        assert not is_restart_command(callback("/start"))

    def test_start_handler_found_before_earlier_plain_handlers(self, directory, log, start_handler):
        greedy = RecordingHandler("greedy", _always, log=log)
        registry = HandlerRegistry.build([greedy, start_handler], start=start_handler)

        reply = UpdateDispatcher(registry, directory).dispatch(text("start"))

        assert reply.text == "start"
        assert greedy.handled == []

    def test_unknown_user_is_not_written(self, directory, start_handler):
        registry = HandlerRegistry.build([start_handler], start=start_handler)

        UpdateDispatcher(registry, directory).dispatch(text("/start", chat_id=7))

        assert directory.cleared == []
        assert len(start_handler.handled) == 1

    def test_rejecting_start_handler_falls_through_without_reset(self, directory, log, address_handler):
        start = RecordingHandler("start", _never, log=log)
        directory.states[42] = "AWAITING_ADDRESS"
        registry = HandlerRegistry.build([start], [address_handler], start=start)

        reply = UpdateDispatcher(registry, directory).dispatch(text("/start"))

        assert reply.text == "address:AWAITING_ADDRESS"
        assert directory.cleared == []

    def test_without_start_slot_restart_text_follows_normal_rules(self, directory, log, address_handler):
        plain = RecordingHandler("plain", _always, log=log)
        directory.states[42] = "AWAITING_ADDRESS"
        registry = HandlerRegistry.build([plain], [address_handler])

        reply = UpdateDispatcher(registry, directory).dispatch(text("/start"))

        assert reply.text == "address:AWAITING_ADDRESS"
        assert directory.cleared == []


class TestStateHandlers:
    def test_state_handler_wins_over_plain_handlers(self, directory, log, start_handler, address_handler):
        plain = RecordingHandler("plain", _always, log=log)
        directory.states[42] = "AWAITING_ADDRESS"
        registry = HandlerRegistry.build([start_handler, plain], [address_handler], start=start_handler)

        reply = UpdateDispatcher(registry, directory).dispatch(text("123 Main St"))

        assert reply.text == "address:AWAITING_ADDRESS"
        assert address_handler.handled == [(text("123 Main St"), "AWAITING_ADDRESS")]
        assert plain.checked == []

    def test_first_registered_state_handler_wins(self, directory, log):
        first = RecordingStateHandler("first", _always, log=log)
        second = RecordingStateHandler("second", _always, log=log)
        directory.states[42] = "ANY"
        registry = HandlerRegistry.build([], [first, second])

        reply = UpdateDispatcher(registry, directory).dispatch(text("hello"))

        assert reply.text == "first:ANY"
        assert second.checked == []

    def test_unmatched_state_falls_through_to_plain_handlers(self, directory, log, address_handler):
        plain = RecordingHandler("plain", _always, log=log)
        directory.states[42] = "SOMETHING_ELSE"
        registry = HandlerRegistry.build([plain], [address_handler])

        reply = UpdateDispatcher(registry, directory).dispatch(text("hello"))

        assert reply.text == "plain"
        assert len(address_handler.checked) == 1

    def test_null_state_skips_state_handlers(self, directory, log):
        greedy_state = RecordingStateHandler("state", _always, log=log)
        plain = RecordingHandler("plain", _always, log=log)
        directory.states[42] = None
        registry = HandlerRegistry.build([plain], [greedy_state])

        UpdateDispatcher(registry, directory).dispatch(text("hello"))

        assert greedy_state.checked == []
        assert len(plain.handled) == 1

    def test_state_handler_needs_no_plain_predicate(self, directory, log):
        state_only = RecordingStateHandler("state", _always, log=log)
        directory.states[42] = "AWAITING_COMMENT"
        registry = HandlerRegistry.build([RecordingHandler("plain", _never, log=log)], [state_only])

        reply = UpdateDispatcher(registry, directory).dispatch(text("-"))

        assert reply.text == "state:AWAITING_COMMENT"


class TestCallbacks:
    def test_category_callback_routes_to_prefix_handler(self, directory, log, start_handler):
        other = RecordingHandler("other", lambda e: isinstance(e, CallbackQuery) and e.data == "cart:view", log=log)
        catalog = _category_handler(log)
        directory.states[42] = None
        registry = HandlerRegistry.build([start_handler, other, catalog], start=start_handler)

        reply = UpdateDispatcher(registry, directory).dispatch(callback("cat:electronics"))

        assert reply.text == "catalog"
        assert other.handled == []

    def test_callbacks_never_consult_state_handlers(self, directory, log):
        greedy_state = RecordingStateHandler("state", _always, log=log)
        catalog = _category_handler(log)
        directory.states[42] = "AWAITING_ADDRESS"
        registry = HandlerRegistry.build([catalog], [greedy_state])

        reply = UpdateDispatcher(registry, directory).dispatch(callback("cat:electronics"))

        assert reply.text == "catalog"
        assert greedy_state.checked == []
        assert directory.lookups == []
        assert directory.states[42] == "AWAITING_ADDRESS"

    def test_unhandled_callback_returns_none(self, directory, log):
        registry = HandlerRegistry.build([_category_handler(log)])

        assert UpdateDispatcher(registry, directory).dispatch(callback("unknown")) is None


class TestPlainHandlers:
    def test_registration_order_breaks_ties(self, directory, log):
        first = RecordingHandler("first", _always, log=log)
        second = RecordingHandler("second", _always, log=log)
        registry = HandlerRegistry.build([first, second])

        reply = UpdateDispatcher(registry, directory).dispatch(text("hello"))

        assert reply.text == "first"
        assert second.checked == []

    def test_unknown_sender_without_match_gets_nothing(self, directory, log, start_handler):
        plain = RecordingHandler("menu", lambda e: getattr(e, "text", "") == "🛍 Catalog", log=log)
        registry = HandlerRegistry.build([start_handler, plain], start=start_handler)

        reply = UpdateDispatcher(registry, directory).dispatch(text("what is this", chat_id=99))

        assert reply is None
        assert directory.cleared == []
        assert log == []

    def test_handler_returning_none_is_passed_through(self, directory):
        silent = RecordingHandler("silent", _always)
        silent.handle = lambda event: None
        registry = HandlerRegistry.build([silent])

        assert UpdateDispatcher(registry, directory).dispatch(text("x")) is None


class TestFailures:
    def test_handler_error_propagates_without_fallback(self, directory, log):
        failing = RecordingHandler("failing", _always, log=log, error=RuntimeError("boom"))
        fallback = RecordingHandler("fallback", _always, log=log)
        registry = HandlerRegistry.build([failing, fallback])

        with pytest.raises(RuntimeError, match="boom"):
            UpdateDispatcher(registry, directory).dispatch(text("x"))
        assert fallback.checked == []

    def test_directory_failure_aborts_dispatch(self, log, start_handler):
        class BrokenDirectory:
            def find_state(self, chat_id):
                raise DirectoryUnavailable("db down")

            def clear_state(self, chat_id):
                raise AssertionError("not reached")

        plain = RecordingHandler("plain", _always, log=log)
        registry = HandlerRegistry.build([start_handler, plain], start=start_handler)
        dispatcher = UpdateDispatcher(registry, BrokenDirectory())

        with pytest.raises(DirectoryUnavailable):
            dispatcher.dispatch(text("/start"))
        with pytest.raises(DirectoryUnavailable):
            dispatcher.dispatch(text("hello"))
        assert log == []

    def test_directory_failure_does_not_affect_callbacks(self, log):
        class BrokenDirectory:
            def find_state(self, chat_id):
                raise DirectoryUnavailable("db down")

            def clear_state(self, chat_id):
                raise DirectoryUnavailable("db down")

        registry = HandlerRegistry.build([_category_handler(log)])

        reply = UpdateDispatcher(registry, BrokenDirectory()).dispatch(callback("cat:phones"))

        assert reply.text == "catalog"


def test_text_message_and_callback_are_distinct_variants():
    assert isinstance(text("x"), TextMessage)
    assert not isinstance(text("x"), CallbackQuery)
