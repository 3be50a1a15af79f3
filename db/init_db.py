"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

import psycopg2

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users: one row per chat, carries the conversational state label
CREATE TABLE IF NOT EXISTS telegram_users (
    chat_id         BIGINT PRIMARY KEY,
    username        VARCHAR(64),
    first_name      VARCHAR(100),
    last_name       VARCHAR(100),
    phone_number    VARCHAR(32),
    state           VARCHAR(64),
    role            VARCHAR(16) NOT NULL DEFAULT 'USER',
    temp_data       TEXT,
    registered_at   TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS categories (
    id              SERIAL PRIMARY KEY,
    name            VARCHAR(100) NOT NULL,
    slug            VARCHAR(100) UNIQUE NOT NULL,
    description     VARCHAR(1000),
    position        INT DEFAULT 0
);

CREATE TABLE IF NOT EXISTS products (
    id              SERIAL PRIMARY KEY,
    category_id     INT REFERENCES categories(id) ON DELETE SET NULL,
    name            VARCHAR(200) NOT NULL,
    description     TEXT,
    price           NUMERIC(12,2) NOT NULL,
    image_url       TEXT,
    stock           INT NOT NULL DEFAULT 0 CHECK (stock >= 0)
);

CREATE TABLE IF NOT EXISTS cart_items (
    id              SERIAL PRIMARY KEY,
    chat_id         BIGINT NOT NULL REFERENCES telegram_users(chat_id) ON DELETE CASCADE,
    product_id      INT NOT NULL REFERENCES products(id) ON DELETE CASCADE,
    quantity        INT NOT NULL CHECK (quantity > 0),
    UNIQUE(chat_id, product_id)
);

CREATE TABLE IF NOT EXISTS orders (
    id              SERIAL PRIMARY KEY,
    chat_id         BIGINT NOT NULL REFERENCES telegram_users(chat_id),
    address         TEXT NOT NULL,
    phone_number    VARCHAR(32) NOT NULL,
    comment         TEXT,
    total           NUMERIC(12,2) NOT NULL,
    status          VARCHAR(16) NOT NULL DEFAULT 'NEW',
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS order_items (
    id              SERIAL PRIMARY KEY,
    order_id        INT NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
    product_id      INT REFERENCES products(id) ON DELETE SET NULL,
    product_name    VARCHAR(200) NOT NULL,
    price           NUMERIC(12,2) NOT NULL,
    quantity        INT NOT NULL
);

-- Admin-editable shop texts (about, hours, contacts, support)
CREATE TABLE IF NOT EXISTS shop_settings (
    key             VARCHAR(32) PRIMARY KEY,
    value           TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_products_category ON products(category_id);
CREATE INDEX IF NOT EXISTS idx_orders_chat ON orders(chat_id, created_at);
CREATE INDEX IF NOT EXISTS idx_orders_status ON orders(status, created_at);
"""


def create_tables() -> None:
    """Create missing tables and indexes. Safe to run on every startup."""
    try:
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
    except psycopg2.Error as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise
    logger.info("Database schema is up to date.")


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("Database schema created successfully.")
