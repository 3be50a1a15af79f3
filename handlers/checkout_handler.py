"""
handlers/checkout_handler.py
-----------------------------
Collects delivery details after the user presses "Checkout".

States:
    AWAITING_ADDRESS -> AWAITING_PHONE -> AWAITING_COMMENT -> (order placed, no state)
"""

import re
from typing import Optional

from core.handler import StateHandler
from handlers.keyboards import back_to_catalog_keyboard, main_menu_keyboard, view_cart_keyboard
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from repositories.order_repo import OutOfStock
from repositories.user_repo import UserRepository
from services.cart_service import format_price
from services.order_service import OrderService
from utils.logger import get_logger

logger = get_logger(__name__)

AWAITING_ADDRESS = "AWAITING_ADDRESS"
AWAITING_PHONE = "AWAITING_PHONE"
AWAITING_COMMENT = "AWAITING_COMMENT"
CHECKOUT_STATES = frozenset({AWAITING_ADDRESS, AWAITING_PHONE, AWAITING_COMMENT})

NO_COMMENT = "-"

_PHONE_RE = re.compile(r"^\+?\d{7,15}$")


def normalize_phone(raw: str) -> Optional[str]:
    """Strip spaces, dashes and parentheses; return None if it is not a phone number."""
    candidate = re.sub(r"[\s\-()]", "", raw)
    return candidate if _PHONE_RE.match(candidate) else None


class CheckoutStateHandler(StateHandler):
    """Address, phone and comment steps of checkout."""

    def __init__(self, user_repo: UserRepository, order_service: OrderService):
        self.user_repo = user_repo
        self.order_service = order_service

    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        return isinstance(event, TextMessage) and state in CHECKOUT_STATES

    def handle_state(self, event: TextMessage, state: str) -> Optional[Reply]:
        text = event.text.strip()
        logger.info(f"Checkout step {state} for chat {event.chat_id}")

        if state == AWAITING_ADDRESS:
            return self._address(event.chat_id, text)
        if state == AWAITING_PHONE:
            return self._phone(event.chat_id, text)
        return self._comment(event.chat_id, text)

    def _address(self, chat_id: int, address: str) -> Reply:
        if not address:
            return Reply(chat_id=chat_id, text="Please send your delivery address.")
        self.user_repo.set_temp_data(chat_id, address)
        self.user_repo.set_state(chat_id, AWAITING_PHONE)
        return Reply(chat_id=chat_id, text="Thank you! Now send a contact phone number:")

    def _phone(self, chat_id: int, raw: str) -> Reply:
        phone = normalize_phone(raw)
        if phone is None:
            return Reply(
                chat_id=chat_id,
                text="⚠️ That doesn't look like a phone number. Example: +998 90 123 45 67",
            )
        self.user_repo.set_phone(chat_id, phone)
        self.user_repo.set_state(chat_id, AWAITING_COMMENT)
        return Reply(
            chat_id=chat_id,
            text=f"Thank you! Any comment for the order? Send '{NO_COMMENT}' if not.",
        )

    def _comment(self, chat_id: int, text: str) -> Reply:
        comment = "" if text == NO_COMMENT else text
        user = self.user_repo.get(chat_id)
        address = user.temp_data if user else None
        phone = user.phone_number if user else None

        self.user_repo.set_state(chat_id, None)
        self.user_repo.set_temp_data(chat_id, None)

        if not address or not phone:
            logger.warning(f"Checkout data missing for chat {chat_id}, restarting checkout")
            return Reply(
                chat_id=chat_id,
                text="Something went wrong with your delivery details. Please check out again.",
                reply_markup=main_menu_keyboard(),
            )

        try:
            order = self.order_service.create_order_from_cart(chat_id, address, phone, comment)
        except OutOfStock as e:
            return Reply(
                chat_id=chat_id,
                text=(
                    f"😔 Sorry, there is not enough {e.product_name} left for your order.\n"
                    f"Please update your cart and check out again."
                ),
                reply_markup=view_cart_keyboard(),
            )
        if order is None:
            return Reply(
                chat_id=chat_id,
                text="🛒 Your cart is empty, there is nothing to order.",
                reply_markup=back_to_catalog_keyboard(),
            )

        return Reply(
            chat_id=chat_id,
            text=(
                f"✅ Your order #{order.id} has been placed!\n\n"
                f"Total: {format_price(order.total)}\n"
                f"We will contact you soon to confirm it.\n\n"
                f"Thank you for shopping with us!"
            ),
            reply_markup=back_to_catalog_keyboard(),
        )
