"""
repositories/settings_repo.py
------------------------------
Data access for admin-editable shop texts (key/value rows).
"""

from db.connection import get_connection, release_connection, transaction
from models.settings import SETTING_KEYS, ShopSettings
from utils.logger import get_logger

logger = get_logger(__name__)


class SettingsRepository:
    """Repository for the shop_settings table."""

    def get(self) -> ShopSettings:
        """Stored texts, with configured defaults for keys never set."""
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT key, value FROM shop_settings;")
                return ShopSettings.from_mapping(dict(cur.fetchall()))
        finally:
            release_connection(conn)

    def set(self, key: str, value: str) -> None:
        if key not in SETTING_KEYS:
            raise ValueError(f"Unknown shop setting '{key}'")
        sql = """
            INSERT INTO shop_settings (key, value) VALUES (%s, %s)
            ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value;
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (key, value))
        except Exception as e:
            logger.error(f"Failed to save shop setting '{key}': {e}")
            raise
        logger.info(f"Shop setting '{key}' updated")
