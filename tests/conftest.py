from unittest.mock import Mock

import pytest

from core.dispatcher import RESTART_COMMANDS
from tests.helpers import FakeUserDirectory, RecordingHandler, RecordingStateHandler


@pytest.fixture
def log():
    """Shared, ordered record of directory writes and handler invocations."""
    return []


@pytest.fixture
def directory(log):
    return FakeUserDirectory(log=log)


@pytest.fixture
def start_handler(log):
    return RecordingHandler(
        "start",
        lambda e: getattr(e, "text", None) in RESTART_COMMANDS,
        log=log,
    )


@pytest.fixture
def address_handler(log):
    return RecordingStateHandler("address", lambda e, s: s == "AWAITING_ADDRESS", log=log)


@pytest.fixture
def user_repo():
    """Mocked UserRepository."""
    return Mock()
