"""
handlers/cart_handler.py
-------------------------
Handles cart callbacks: add a product, change or remove a line, view,
clear and start checkout.
"""

from typing import Optional

from telegram.helpers import escape_markdown

from core.handler import UpdateHandler
from handlers.checkout_handler import AWAITING_ADDRESS
from handlers.keyboards import (
    CB_CART_ADD_PREFIX,
    CB_CART_CHECKOUT,
    CB_CART_CLEAR,
    CB_CART_DEC_PREFIX,
    CB_CART_INC_PREFIX,
    CB_CART_REMOVE_PREFIX,
    CB_CART_VIEW,
    back_to_catalog_keyboard,
    cart_keyboard,
)
from models.events import CallbackQuery, InboundEvent
from models.reply import Reply
from repositories.user_repo import UserRepository
from services.cart_service import CartService
from utils.logger import get_logger

logger = get_logger(__name__)

_EXACT = (CB_CART_VIEW, CB_CART_CLEAR, CB_CART_CHECKOUT)
_LINE_PREFIXES = (CB_CART_INC_PREFIX, CB_CART_DEC_PREFIX, CB_CART_REMOVE_PREFIX)


class CartCallbackHandler(UpdateHandler):
    """Inline buttons that act on the user's cart."""

    def __init__(self, user_repo: UserRepository, cart_service: CartService):
        self.user_repo = user_repo
        self.cart_service = cart_service

    def can_handle(self, event: InboundEvent) -> bool:
        return isinstance(event, CallbackQuery) and (
            event.data in _EXACT
            or event.data.startswith(CB_CART_ADD_PREFIX)
            or event.data.startswith(_LINE_PREFIXES)
        )

    def handle(self, event: CallbackQuery) -> Optional[Reply]:
        data = event.data
        chat_id = event.chat_id
        logger.info(f"Cart callback '{data}' from chat {chat_id}")

        if data.startswith(CB_CART_ADD_PREFIX):
            raw_id = data[len(CB_CART_ADD_PREFIX):]
            if not raw_id.isdigit():
                logger.warning(f"Malformed cart payload '{data}'")
                return None
            # cart lines reference telegram_users, so the user must exist first
            self.user_repo.ensure_user(chat_id, event.username, event.first_name)
            result = self.cart_service.add_to_cart(chat_id, int(raw_id))
            return Reply(chat_id=chat_id, text=result["message"])

        if data.startswith(_LINE_PREFIXES):
            return self._edit_line(event)

        if data == CB_CART_CLEAR:
            self.cart_service.clear(chat_id)
            return Reply(
                chat_id=chat_id,
                text="🗑 Your cart is now empty.",
                reply_markup=back_to_catalog_keyboard(),
                edit_message_id=event.message_id,
            )

        items = self.cart_service.get_items(chat_id)
        if not items:
            return self._empty(event)

        if data == CB_CART_VIEW:
            return self._summary(event, items)

        self.user_repo.set_state(chat_id, AWAITING_ADDRESS)
        logger.info(f"Chat {chat_id} started checkout")
        return Reply(
            chat_id=chat_id,
            text=(
                "📦 Checkout\n\n"
                "Please send your delivery address.\n"
                "Send /start to cancel."
            ),
        )

    def _edit_line(self, event: CallbackQuery) -> Optional[Reply]:
        prefix = next(p for p in _LINE_PREFIXES if event.data.startswith(p))
        raw_id = event.data[len(prefix):]
        if not raw_id.isdigit():
            logger.warning(f"Malformed cart payload '{event.data}'")
            return None

        product_id = int(raw_id)
        if prefix == CB_CART_REMOVE_PREFIX:
            result = self.cart_service.remove(event.chat_id, product_id)
        else:
            delta = 1 if prefix == CB_CART_INC_PREFIX else -1
            result = self.cart_service.change_quantity(event.chat_id, product_id, delta)

        items = self.cart_service.get_items(event.chat_id)
        if not items:
            return self._empty(event)
        notice = None if result["success"] else result["message"]
        return self._summary(event, items, notice)

    def _summary(self, event: CallbackQuery, items, notice: Optional[str] = None) -> Reply:
        text = self.cart_service.render_summary(items)
        if notice:
            text = f"⚠️ {escape_markdown(notice)}\n\n{text}"
        return Reply(
            chat_id=event.chat_id,
            text=text,
            parse_mode="Markdown",
            reply_markup=cart_keyboard(items),
            edit_message_id=event.message_id,
        )

    def _empty(self, event: CallbackQuery) -> Reply:
        return Reply(
            chat_id=event.chat_id,
            text="🛒 Your cart is empty.",
            reply_markup=back_to_catalog_keyboard(),
            edit_message_id=event.message_id,
        )
