from unittest.mock import Mock

import pytest

import db.connection as connection_module


@pytest.fixture
def db_pool(monkeypatch):
    db_pool = Mock()
    monkeypatch.setattr(connection_module, "_pool", db_pool)
    return db_pool


def test_transaction_commits_and_releases(db_pool):
    conn = db_pool.getconn.return_value

    with connection_module.transaction() as borrowed:
        assert borrowed is conn

    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()
    db_pool.putconn.assert_called_once_with(conn)


def test_transaction_rolls_back_and_reraises(db_pool):
    conn = db_pool.getconn.return_value

    with pytest.raises(ValueError):
        with connection_module.transaction():
            raise ValueError("abort")

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    db_pool.putconn.assert_called_once_with(conn)


def test_get_connection_requires_pool(monkeypatch):
    monkeypatch.setattr(connection_module, "_pool", None)

    with pytest.raises(RuntimeError):
        connection_module.get_connection()


def test_init_pool_is_idempotent(db_pool, monkeypatch):
    factory = Mock()
    monkeypatch.setattr(connection_module.pool, "ThreadedConnectionPool", factory)

    connection_module.init_pool()

    factory.assert_not_called()
