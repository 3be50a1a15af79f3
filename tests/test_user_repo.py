from unittest.mock import MagicMock

import psycopg2
import pytest

import repositories.user_repo as user_repo_module
from core.errors import DirectoryUnavailable
from repositories.user_repo import UserRepository


@pytest.fixture
def conn(monkeypatch):
    conn = MagicMock()
    monkeypatch.setattr(user_repo_module, "get_connection", lambda: conn)
    monkeypatch.setattr(user_repo_module, "release_connection", lambda c: None)
    return conn


def _cursor(conn):
    return conn.cursor.return_value.__enter__.return_value


class TestUserDirectory:
    def test_find_state_of_unknown_user_is_none(self, conn):
        _cursor(conn).fetchone.return_value = None

        assert UserRepository().find_state(99) is None

    def test_find_state(self, conn):
        _cursor(conn).fetchone.return_value = ("AWAITING_ADDRESS",)

        assert UserRepository().find_state(42) == "AWAITING_ADDRESS"

    def test_clear_state_writes_null(self, conn):
        UserRepository().clear_state(42)

        _cursor(conn).execute.assert_called_once_with(
            "UPDATE telegram_users SET state = %s WHERE chat_id = %s;", (None, 42)
        )
        conn.commit.assert_called_once()

    def test_read_failure_raises_directory_unavailable(self, conn):
        _cursor(conn).execute.side_effect = psycopg2.OperationalError("server closed the connection")

        with pytest.raises(DirectoryUnavailable) as exc:
            UserRepository().find_state(42)
        assert isinstance(exc.value.__cause__, psycopg2.OperationalError)

    def test_write_failure_rolls_back(self, conn):
        _cursor(conn).execute.side_effect = psycopg2.OperationalError("gone")

        with pytest.raises(DirectoryUnavailable):
            UserRepository().clear_state(42)
        conn.rollback.assert_called_once()
