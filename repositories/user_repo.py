"""
repositories/user_repo.py
--------------------------
Data access layer for bot users and their conversational state.
This is the user directory the dispatcher reads and clears states through.
"""

from typing import Optional

import psycopg2

from config import ADMIN_IDS
from core.errors import DirectoryUnavailable
from db.connection import get_connection, release_connection, transaction
from models.user import ROLE_ADMIN, ROLE_USER, ROLES, TelegramUser
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "chat_id, username, first_name, last_name, phone_number, "
    "state, role, temp_data, registered_at"
)


def _row_to_user(row) -> TelegramUser:
    return TelegramUser(
        chat_id=row[0],
        username=row[1],
        first_name=row[2],
        last_name=row[3],
        phone_number=row[4],
        state=row[5],
        role=row[6],
        temp_data=row[7],
        registered_at=row[8],
    )


class UserRepository:
    """Repository for the telegram_users table."""

    def get(self, chat_id: int) -> Optional[TelegramUser]:
        """Fetch a user by chat id, or None if they never contacted the bot."""
        sql = f"SELECT {_COLUMNS} FROM telegram_users WHERE chat_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id,))
                row = cur.fetchone()
                return _row_to_user(row) if row else None
        finally:
            release_connection(conn)

    def ensure_user(
        self,
        chat_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> TelegramUser:
        """
        Insert a user if they don't exist, otherwise refresh their names.
        State, role and phone of an existing user are left untouched.

        Returns:
            The stored TelegramUser.
        """
        role = ROLE_ADMIN if chat_id in ADMIN_IDS else ROLE_USER
        sql = f"""
            INSERT INTO telegram_users (chat_id, username, first_name, last_name, role)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (chat_id) DO UPDATE SET
                username = COALESCE(EXCLUDED.username, telegram_users.username),
                first_name = COALESCE(EXCLUDED.first_name, telegram_users.first_name),
                last_name = COALESCE(EXCLUDED.last_name, telegram_users.last_name)
            RETURNING {_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id, username, first_name, last_name, role))
                row = cur.fetchone()
            conn.commit()
            return _row_to_user(row)
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to ensure user {chat_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def find_state(self, chat_id: int) -> Optional[str]:
        """
        Return the user's state label.

        Returns:
            The label, or None if it is unset or the user does not exist.

        Raises:
            DirectoryUnavailable: If the database query fails.
        """
        sql = "SELECT state FROM telegram_users WHERE chat_id = %s;"
        try:
            conn = get_connection()
        except psycopg2.Error as e:
            raise DirectoryUnavailable(f"Cannot read state of chat {chat_id}") from e
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id,))
                row = cur.fetchone()
                return row[0] if row else None
        except psycopg2.Error as e:
            logger.error(f"Failed to read state of chat {chat_id}: {e}")
            raise DirectoryUnavailable(f"Cannot read state of chat {chat_id}") from e
        finally:
            release_connection(conn)

    def set_state(self, chat_id: int, state: Optional[str]) -> None:
        """
        Persist a new state label (None clears it).

        Raises:
            DirectoryUnavailable: If the database update fails.
        """
        sql = "UPDATE telegram_users SET state = %s WHERE chat_id = %s;"
        try:
            conn = get_connection()
        except psycopg2.Error as e:
            raise DirectoryUnavailable(f"Cannot write state of chat {chat_id}") from e
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (state, chat_id))
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to set state of chat {chat_id} to {state}: {e}")
            raise DirectoryUnavailable(f"Cannot write state of chat {chat_id}") from e
        finally:
            release_connection(conn)

    def clear_state(self, chat_id: int) -> None:
        """Persist a null state label."""
        self.set_state(chat_id, None)

    def set_temp_data(self, chat_id: int, value: Optional[str]) -> None:
        """Store (or clear) the scratch value kept between checkout steps."""
        self._update_column(chat_id, "temp_data", value)

    def set_phone(self, chat_id: int, phone_number: str) -> None:
        self._update_column(chat_id, "phone_number", phone_number)

    def _update_column(self, chat_id: int, column: str, value) -> None:
        sql = f"UPDATE telegram_users SET {column} = %s WHERE chat_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (value, chat_id))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update {column} for chat {chat_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def set_role(self, chat_id: int, role: str) -> bool:
        """
        Change a user's role.

        Returns:
            True if the user exists.
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role '{role}'")
        sql = "UPDATE telegram_users SET role = %s WHERE chat_id = %s;"
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (role, chat_id))
                updated = cur.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to set role of chat {chat_id} to {role}: {e}")
            raise
        if updated:
            logger.info(f"Chat {chat_id} is now {role}")
        return updated

    def count(self) -> int:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM telegram_users;")
                return cur.fetchone()[0]
        finally:
            release_connection(conn)

    def list_recent(self, limit: int = 10) -> list[TelegramUser]:
        """Most recently registered users first."""
        sql = f"SELECT {_COLUMNS} FROM telegram_users ORDER BY registered_at DESC LIMIT %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (limit,))
                return [_row_to_user(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)
