"""
main.py
-------
Entry point for the Telegram shop bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Build the handler registry and the update dispatcher.
    - Start the Telegram application via long polling or a webhook.
"""

from telegram import BotCommand, Update
from telegram.ext import Application, TypeHandler

from config import (
    TELEGRAM_BOT_TOKEN,
    WEBHOOK_LISTEN,
    WEBHOOK_PATH,
    WEBHOOK_PORT,
    WEBHOOK_SECRET,
    WEBHOOK_URL,
)
from core.dispatcher import UpdateDispatcher
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers import build_registry
from repositories.cart_repo import CartRepository
from repositories.catalog_repo import CatalogRepository
from repositories.order_repo import OrderRepository
from repositories.settings_repo import SettingsRepository
from repositories.user_repo import UserRepository
from services.cart_service import CartService
from services.catalog_service import CatalogService
from services.order_service import OrderService
from transport.updates import DISPATCHER_KEY, on_error, on_update
from utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_UPDATES = [Update.MESSAGE, Update.CALLBACK_QUERY]


def build_dispatcher() -> UpdateDispatcher:
    """Wire repositories, services and handlers into a dispatcher."""
    user_repo = UserRepository()
    catalog_repo = CatalogRepository()
    cart_service = CartService(CartRepository(), catalog_repo)
    order_service = OrderService(cart_service, OrderRepository())
    registry = build_registry(
        user_repo,
        catalog_repo,
        SettingsRepository(),
        cart_service,
        order_service,
        CatalogService(catalog_repo),
    )
    logger.info(
        f"Registered {len(registry.plain)} handlers and {len(registry.state)} state handlers"
    )
    return UpdateDispatcher(registry, user_repo)


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    await application.bot.set_my_commands([
        BotCommand("start", "🏠 Main menu"),
        BotCommand("help", "📖 How to order"),
        BotCommand("admin", "⚙️ Admin panel (staff)"),
    ])
    logger.info("Bot commands menu registered.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build the Telegram application ─────────────────
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()
    app.bot_data[DISPATCHER_KEY] = build_dispatcher()

    # ── 3. One entry point for every update ───────────────
    app.add_handler(TypeHandler(Update, on_update))
    app.add_error_handler(on_error)

    # ── 4. Start receiving updates ────────────────────────
    try:
        if WEBHOOK_URL:
            webhook_url = f"{WEBHOOK_URL.rstrip('/')}/{WEBHOOK_PATH}"
            logger.info(f"Shop bot is running with webhook {webhook_url}")
            app.run_webhook(
                listen=WEBHOOK_LISTEN,
                port=WEBHOOK_PORT,
                url_path=WEBHOOK_PATH,
                webhook_url=webhook_url,
                secret_token=WEBHOOK_SECRET or None,
                allowed_updates=ALLOWED_UPDATES,
                drop_pending_updates=True,
            )
        else:
            logger.info("Shop bot is running with long polling. Press Ctrl+C to stop.")
            app.run_polling(drop_pending_updates=True, allowed_updates=ALLOWED_UPDATES)
    finally:
        # ── 5. Cleanup on shutdown ────────────────────────
        close_pool()
        logger.info("Shop bot stopped.")


if __name__ == "__main__":
    main()
