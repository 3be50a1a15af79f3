"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int_list(raw: str) -> list[int]:
    return [int(part.strip()) for part in raw.split(",") if part.strip()]


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "telegram_shop")
DB_USER: str = os.getenv("DB_USER", "shop_user")
DB_PASS: str = os.getenv("DB_PASS", "")
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))
DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Webhook (empty WEBHOOK_URL means long polling) ────────
WEBHOOK_URL: str = os.getenv("WEBHOOK_URL", "")
WEBHOOK_LISTEN: str = os.getenv("WEBHOOK_LISTEN", "0.0.0.0")
WEBHOOK_PORT: int = int(os.getenv("WEBHOOK_PORT", "8443"))
WEBHOOK_PATH: str = os.getenv("WEBHOOK_PATH", "webhook")
WEBHOOK_SECRET: str = os.getenv("WEBHOOK_SECRET", "")

# ── Roles ─────────────────────────────────────────────────
ADMIN_IDS: list[int] = _int_list(os.getenv("ADMIN_IDS", ""))

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Shop ──────────────────────────────────────────────────
SHOP_NAME: str = os.getenv("SHOP_NAME", "Telegram Shop")
SUPPORT_CONTACT: str = os.getenv("SUPPORT_CONTACT", "@shop_support")
CURRENCY: str = os.getenv("CURRENCY", "UZS")
SHOP_ABOUT: str = os.getenv("SHOP_ABOUT", "We deliver orders within 1-3 days after confirmation. Payment on delivery.")
SHOP_HOURS: str = os.getenv("SHOP_HOURS", "Mon-Sat, 9:00-20:00")
CATALOG_PAGE_SIZE: int = int(os.getenv("CATALOG_PAGE_SIZE", "8"))
