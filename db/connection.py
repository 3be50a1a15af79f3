"""
db/connection.py
----------------
PostgreSQL access for the shop bot.

A single psycopg2 ThreadedConnectionPool is shared by all repositories,
since updates may be processed concurrently. Reads borrow a connection
with get_connection()/release_connection(); multi-statement writes use
the transaction() context manager, which commits on success and rolls
back on any exception.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2 import pool
from psycopg2.extensions import connection as Connection

from config import DATABASE_URL, DB_CONNECT_TIMEOUT, DB_POOL_MAX, DB_POOL_MIN
from utils.logger import get_logger

logger = get_logger(__name__)

APPLICATION_NAME = "telegram-shop-bot"

_pool: Optional[pool.ThreadedConnectionPool] = None


def init_pool(min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX) -> None:
    """
    Open the shared pool. Calling it again while the pool is open is a no-op.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.ThreadedConnectionPool(
            min_conn,
            max_conn,
            DATABASE_URL,
            connect_timeout=DB_CONNECT_TIMEOUT,
            application_name=APPLICATION_NAME,
        )
    except psycopg2.OperationalError as e:
        logger.error(f"Cannot reach the shop database: {e}")
        raise
    logger.info(f"Shop database pool ready ({min_conn}-{max_conn} connections).")


def get_connection() -> Connection:
    """
    Borrow a connection. Every call must be paired with release_connection().

    Raises:
        RuntimeError: If init_pool() has not been called.
        psycopg2.pool.PoolError: If all max_conn connections are in use.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    try:
        return _pool.getconn()
    except pool.PoolError:
        logger.error("Shop database pool exhausted; raise DB_POOL_MAX if this repeats.")
        raise


def release_connection(conn: Connection) -> None:
    if _pool is not None:
        _pool.putconn(conn)


@contextmanager
def transaction() -> Iterator[Connection]:
    """
    Borrow a connection for one unit of work.

    Commits when the block exits normally. Rolls back and re-raises when
    it raises, including for domain errors raised on purpose to abort.
    """
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        release_connection(conn)


def close_pool() -> None:
    global _pool
    if _pool is None:
        return
    _pool.closeall()
    _pool = None
    logger.info("Shop database pool closed.")
