"""
handlers/product_state_handler.py
----------------------------------
Admin conversations that create or edit a product.

Adding (draft kept as JSON in the user's temp data):
    ADDING_PRODUCT_NAME -> _PRICE -> _STOCK -> _DESCRIPTION -> _IMAGE -> (saved, no state)
Editing one field (temp data holds the product id):
    EDITING_PRODUCT_<FIELD> -> (saved, no state)
"""

import json
from typing import Optional

from telegram.helpers import escape_markdown

from core.handler import StateHandler
from handlers.access import access_denied, find_staff
from handlers.admin_keyboards import admin_product_keyboard
from models.catalog import Product
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from repositories.catalog_repo import PRODUCT_FIELDS, CatalogRepository
from repositories.user_repo import UserRepository
from services.cart_service import format_price
from services.catalog_service import CatalogService
from utils.logger import get_logger

logger = get_logger(__name__)

ADDING_PRODUCT_NAME = "ADDING_PRODUCT_NAME"
ADDING_PRODUCT_PRICE = "ADDING_PRODUCT_PRICE"
ADDING_PRODUCT_STOCK = "ADDING_PRODUCT_STOCK"
ADDING_PRODUCT_DESCRIPTION = "ADDING_PRODUCT_DESCRIPTION"
ADDING_PRODUCT_IMAGE = "ADDING_PRODUCT_IMAGE"


def editing_product_state(field: str) -> str:
    return f"EDITING_PRODUCT_{field.upper()}"


EDITING_PRODUCT_STATES = {editing_product_state(f): f for f in PRODUCT_FIELDS}

FIELD_PROMPTS = {
    "name": "Send the product name:",
    "price": "Send the price, e.g. 129000 or 99.90:",
    "stock": "How many units are in stock?",
    "description": "Send a description, or '-' to leave it empty:",
    "image_url": "Send a photo URL, or '-' for no photo:",
}

# The draft key each adding step fills, and the state that follows it.
_ADDING_STEPS = {
    ADDING_PRODUCT_NAME: ("name", ADDING_PRODUCT_PRICE),
    ADDING_PRODUCT_PRICE: ("price", ADDING_PRODUCT_STOCK),
    ADDING_PRODUCT_STOCK: ("stock", ADDING_PRODUCT_DESCRIPTION),
    ADDING_PRODUCT_DESCRIPTION: ("description", ADDING_PRODUCT_IMAGE),
    ADDING_PRODUCT_IMAGE: ("image_url", None),
}


def render_admin_product(product: Product) -> str:
    lines = [
        f"*{escape_markdown(product.name)}* (#{product.id})",
        "",
        f"💰 {format_price(product.price)}",
        f"📦 In stock: {product.stock}",
    ]
    if product.description:
        lines += ["", escape_markdown(product.description)]
    if product.image_url:
        lines += ["", "🖼 Has a photo"]
    return "\n".join(lines)


class ProductStateHandler(StateHandler):
    """Step-by-step product creation and single-field product editing."""

    def __init__(self, user_repo: UserRepository, catalog_repo: CatalogRepository, catalog_service: CatalogService):
        self.user_repo = user_repo
        self.catalog_repo = catalog_repo
        self.catalog_service = catalog_service

    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        return isinstance(event, TextMessage) and (
            state in _ADDING_STEPS or state in EDITING_PRODUCT_STATES
        )

    def handle_state(self, event: TextMessage, state: str) -> Optional[Reply]:
        chat_id = event.chat_id
        user = find_staff(self.user_repo, chat_id)
        if user is None:
            self._finish(chat_id)
            return access_denied(chat_id)

        logger.info(f"Product step {state} for admin {chat_id}")
        if state in EDITING_PRODUCT_STATES:
            return self._edit(chat_id, user.temp_data, EDITING_PRODUCT_STATES[state], event.text)
        return self._add(chat_id, user.temp_data, state, event.text)

    def _add(self, chat_id: int, temp_data: Optional[str], state: str, text: str) -> Reply:
        try:
            draft = json.loads(temp_data or "{}")
        except ValueError:
            draft = {}
        if "category_id" not in draft:
            logger.warning(f"Product draft of admin {chat_id} is missing, aborting")
            self._finish(chat_id)
            return Reply(chat_id=chat_id, text="The product draft was lost. Please start again from the admin panel.")

        field, next_state = _ADDING_STEPS[state]
        value, error = self.catalog_service.parse_field(field, text)
        if error:
            return Reply(chat_id=chat_id, text=f"⚠️ {error}")
        draft[field] = str(value) if field == "price" else value

        if next_state is not None:
            self.user_repo.set_temp_data(chat_id, json.dumps(draft))
            self.user_repo.set_state(chat_id, next_state)
            return Reply(chat_id=chat_id, text=FIELD_PROMPTS[_ADDING_STEPS[next_state][0]])

        product = self.catalog_service.create_product(draft)
        self._finish(chat_id)
        return Reply(
            chat_id=chat_id,
            text="✅ Product added.\n\n" + render_admin_product(product),
            parse_mode="Markdown",
            reply_markup=admin_product_keyboard(product),
        )

    def _edit(self, chat_id: int, temp_data: Optional[str], field: str, text: str) -> Reply:
        if not temp_data or not temp_data.isdigit():
            logger.warning(f"Admin {chat_id} is editing a product without a product id")
            self._finish(chat_id)
            return Reply(chat_id=chat_id, text="Please pick the product again from the admin panel.")

        product_id = int(temp_data)
        if self.catalog_repo.get_product(product_id) is None:
            self._finish(chat_id)
            return Reply(chat_id=chat_id, text="This product no longer exists.")

        result = self.catalog_service.update_product(product_id, field, text)
        if not result["success"]:
            # bad input: stay in the same state and let the admin retry
            return Reply(chat_id=chat_id, text=f"⚠️ {result['message']}")

        self._finish(chat_id)
        product = self.catalog_repo.get_product(product_id)
        if product is None:
            return Reply(chat_id=chat_id, text="This product no longer exists.")
        return Reply(
            chat_id=chat_id,
            text=f"{result['message']}\n\n{render_admin_product(product)}",
            parse_mode="Markdown",
            reply_markup=admin_product_keyboard(product),
        )

    def _finish(self, chat_id: int) -> None:
        self.user_repo.set_state(chat_id, None)
        self.user_repo.set_temp_data(chat_id, None)
