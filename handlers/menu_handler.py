"""
handlers/menu_handler.py
-------------------------
Handles the main-menu reply keyboard buttons and the /help command.
"""

from typing import Optional

from telegram.helpers import escape_markdown

from config import SHOP_NAME
from core.handler import UpdateHandler
from handlers.keyboards import (
    BTN_CART,
    BTN_CATALOG,
    BTN_INFO,
    BTN_SUPPORT,
    MAIN_MENU_BUTTONS,
    cart_keyboard,
    categories_keyboard,
    main_menu_keyboard,
)
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from repositories.catalog_repo import CatalogRepository
from repositories.settings_repo import SettingsRepository
from repositories.user_repo import UserRepository
from services.cart_service import CartService
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_COMMAND = "/help"

HELP_TEXT = """
🤖 *How to shop here*

1. Open *🛍 Catalog* and pick a category.
2. Open a product and press *➕ Add to cart*.
3. Open *🛒 Cart* and press *✅ Checkout*.
4. Send your address, phone and an optional comment.

Send /start at any time to cancel and return to the main menu.
"""


class MainMenuHandler(UpdateHandler):
    """Main-menu buttons: catalog, cart, info, support; plus /help."""

    def __init__(
        self,
        user_repo: UserRepository,
        catalog_repo: CatalogRepository,
        cart_service: CartService,
        settings_repo: SettingsRepository,
    ):
        self.user_repo = user_repo
        self.catalog_repo = catalog_repo
        self.cart_service = cart_service
        self.settings_repo = settings_repo

    def can_handle(self, event: InboundEvent) -> bool:
        if not isinstance(event, TextMessage):
            return False
        text = event.text.strip()
        return text in MAIN_MENU_BUTTONS or text == HELP_COMMAND

    def handle(self, event: TextMessage) -> Optional[Reply]:
        text = event.text.strip()
        chat_id = event.chat_id
        logger.info(f"Main menu '{text}' from chat {chat_id}")
        user = self.user_repo.ensure_user(chat_id, event.username, event.first_name, event.last_name)

        if text == BTN_CATALOG:
            return self._catalog(chat_id)
        if text == BTN_CART:
            return self._cart(chat_id)
        if text == BTN_INFO:
            return self._info(chat_id)
        if text == BTN_SUPPORT:
            support = self.settings_repo.get().support
            return Reply(
                chat_id=chat_id,
                text=f"📞 Questions about an order? Write to {support}.",
            )
        return Reply(
            chat_id=chat_id,
            text=HELP_TEXT,
            parse_mode="Markdown",
            reply_markup=main_menu_keyboard(user.is_staff()),
        )

    def _info(self, chat_id: int) -> Reply:
        settings = self.settings_repo.get()
        lines = [f"ℹ️ *{escape_markdown(SHOP_NAME)}*", "", escape_markdown(settings.about)]
        if settings.hours:
            lines += ["", f"🕘 {escape_markdown(settings.hours)}"]
        if settings.contacts:
            lines += ["", f"📍 {escape_markdown(settings.contacts)}"]
        return Reply(chat_id=chat_id, text="\n".join(lines), parse_mode="Markdown")

    def _catalog(self, chat_id: int) -> Reply:
        categories = self.catalog_repo.list_categories()
        if not categories:
            return Reply(chat_id=chat_id, text="The catalog is empty right now. Please check back later.")
        return Reply(
            chat_id=chat_id,
            text="📋 *Catalog*\n\nChoose a category:",
            parse_mode="Markdown",
            reply_markup=categories_keyboard(categories),
        )

    def _cart(self, chat_id: int) -> Reply:
        items = self.cart_service.get_items(chat_id)
        return Reply(
            chat_id=chat_id,
            text=self.cart_service.render_summary(items),
            parse_mode="Markdown",
            reply_markup=cart_keyboard(items) if items else None,
        )
