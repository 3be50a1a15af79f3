"""
handlers/catalog_handler.py
----------------------------
Handles catalog navigation callbacks:
    catalog              -> list categories
    cat:<slug>           -> first page of a category's products
    catp:<slug>:<page>   -> another page of the same list
    prod:<id>            -> product card
"""

import math
from typing import Optional

from telegram.helpers import escape_markdown

from config import CATALOG_PAGE_SIZE
from core.handler import UpdateHandler
from handlers.keyboards import (
    CB_CATALOG,
    CB_CATEGORY_PAGE_PREFIX,
    CB_CATEGORY_PREFIX,
    CB_PRODUCT_PREFIX,
    back_to_catalog_keyboard,
    categories_keyboard,
    product_keyboard,
    products_keyboard,
)
from models.events import CallbackQuery, InboundEvent
from models.reply import Reply
from repositories.catalog_repo import CatalogRepository
from services.cart_service import format_price
from utils.logger import get_logger

logger = get_logger(__name__)


class CatalogCallbackHandler(UpdateHandler):
    """Inline-keyboard navigation through categories and products."""

    def __init__(self, catalog_repo: CatalogRepository, page_size: int = CATALOG_PAGE_SIZE):
        self.catalog_repo = catalog_repo
        self.page_size = page_size

    def can_handle(self, event: InboundEvent) -> bool:
        if not isinstance(event, CallbackQuery):
            return False
        data = event.data
        return (
            data == CB_CATALOG
            or data.startswith(CB_CATEGORY_PREFIX)
            or data.startswith(CB_CATEGORY_PAGE_PREFIX)
            or data.startswith(CB_PRODUCT_PREFIX)
        )

    def handle(self, event: CallbackQuery) -> Optional[Reply]:
        data = event.data
        logger.info(f"Catalog callback '{data}' from chat {event.chat_id}")

        if data == CB_CATALOG:
            return self._categories(event)
        if data.startswith(CB_CATEGORY_PREFIX):
            return self._category(event, data[len(CB_CATEGORY_PREFIX):], 0)
        if data.startswith(CB_CATEGORY_PAGE_PREFIX):
            slug, _, raw_page = data[len(CB_CATEGORY_PAGE_PREFIX):].rpartition(":")
            if not slug or not raw_page.isdigit():
                logger.warning(f"Malformed page payload '{data}'")
                return None
            return self._category(event, slug, int(raw_page))

        raw_id = data[len(CB_PRODUCT_PREFIX):]
        if not raw_id.isdigit():
            logger.warning(f"Malformed product payload '{data}'")
            return None
        return self._product(event, int(raw_id))

    def _categories(self, event: CallbackQuery) -> Reply:
        categories = self.catalog_repo.list_categories()
        if not categories:
            return Reply(
                chat_id=event.chat_id,
                text="The catalog is empty right now. Please check back later.",
                edit_message_id=event.message_id,
            )
        return Reply(
            chat_id=event.chat_id,
            text="📋 *Catalog*\n\nChoose a category:",
            parse_mode="Markdown",
            reply_markup=categories_keyboard(categories),
            edit_message_id=event.message_id,
        )

    def _category(self, event: CallbackQuery, slug: str, page: int) -> Reply:
        category = self.catalog_repo.get_category_by_slug(slug)
        if category is None:
            return Reply(
                chat_id=event.chat_id,
                text="Category not found.",
                reply_markup=back_to_catalog_keyboard(),
                edit_message_id=event.message_id,
            )

        total = self.catalog_repo.count_products(category.id)
        pages = max(1, math.ceil(total / self.page_size))
        page = min(page, pages - 1)
        products = self.catalog_repo.list_products(
            category.id, limit=self.page_size, offset=page * self.page_size
        )

        text = f"📂 *{escape_markdown(category.name)}*\n\n"
        if category.description:
            text += f"{escape_markdown(category.description)}\n\n"
        text += "Choose a product:" if products else "No products in this category yet."
        return Reply(
            chat_id=event.chat_id,
            text=text,
            parse_mode="Markdown",
            reply_markup=products_keyboard(products, category.slug, page, pages),
            edit_message_id=event.message_id,
        )

    def _product(self, event: CallbackQuery, product_id: int) -> Reply:
        product = self.catalog_repo.get_product(product_id)
        if product is None:
            return Reply(
                chat_id=event.chat_id,
                text="Product not found.",
                reply_markup=back_to_catalog_keyboard(),
                edit_message_id=event.message_id,
            )

        lines = [f"*{escape_markdown(product.name)}*", "", f"💰 {format_price(product.price)}"]
        lines.append(f"📦 In stock: {product.stock}" if product.in_stock() else "❌ Out of stock")
        if product.description:
            lines += ["", escape_markdown(product.description)]
        return Reply(
            chat_id=event.chat_id,
            text="\n".join(lines),
            parse_mode="Markdown",
            reply_markup=product_keyboard(product),
            edit_message_id=event.message_id,
            photo=product.image_url,
        )
