"""
services/cart_service.py
-------------------------
Business logic for the shopping cart.
"""

from decimal import Decimal
from typing import Optional

from telegram.helpers import escape_markdown

from config import CURRENCY
from models.catalog import CartItem
from repositories.cart_repo import CartRepository
from repositories.catalog_repo import CatalogRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def format_price(amount: Decimal) -> str:
    """Render a price like ``1 250 000.00 UZS``."""
    return f"{amount:,.2f}".replace(",", " ") + f" {CURRENCY}"


class CartService:
    """Adds products to carts and renders cart summaries."""

    def __init__(
        self,
        cart_repo: Optional[CartRepository] = None,
        catalog_repo: Optional[CatalogRepository] = None,
    ):
        self.cart_repo = cart_repo or CartRepository()
        self.catalog_repo = catalog_repo or CatalogRepository()

    def add_to_cart(self, chat_id: int, product_id: int, quantity: int = 1) -> dict:
        """
        Add units of a product if enough stock is left.

        Returns:
            Dict with 'success' and 'message' keys.
        """
        product = self.catalog_repo.get_product(product_id)
        if product is None:
            logger.warning(f"Product {product_id} not found for chat {chat_id}")
            return {"success": False, "message": "This product is no longer available."}

        already = self.cart_repo.get_quantity(chat_id, product_id)
        if not product.in_stock(already + quantity):
            logger.info(
                f"Not enough stock for product {product_id}: "
                f"requested {already + quantity}, available {product.stock}"
            )
            return {"success": False, "message": f"Sorry, only {product.stock} left of {product.name}."}

        total_quantity = self.cart_repo.add(chat_id, product_id, quantity)
        return {
            "success": True,
            "message": f"✅ {product.name} added to cart ({total_quantity} pcs).",
        }

    def get_items(self, chat_id: int) -> list[CartItem]:
        return self.cart_repo.get_items(chat_id)

    @staticmethod
    def get_total(items: list[CartItem]) -> Decimal:
        return sum((item.subtotal for item in items), Decimal("0"))

    @classmethod
    def render_summary(cls, items: list[CartItem]) -> str:
        """Human-readable cart contents with a total line."""
        if not items:
            return "🛒 Your cart is empty."

        lines = ["🛒 *Your cart*\n"]
        for i, item in enumerate(items, start=1):
            lines.append(
                f"{i}. {escape_markdown(item.product.name)} × {item.quantity} = {format_price(item.subtotal)}"
            )
        lines.append(f"\n*Total:* {format_price(cls.get_total(items))}")
        return "\n".join(lines)

    def change_quantity(self, chat_id: int, product_id: int, delta: int) -> dict:
        """
        Add or take away units of a product already in the cart.
        Dropping to zero removes the line.

        Returns:
            Dict with 'success' and 'message' keys.
        """
        current = self.cart_repo.get_quantity(chat_id, product_id)
        if current == 0:
            return {"success": False, "message": "This product is not in your cart any more."}

        new_quantity = current + delta
        if new_quantity <= 0:
            return self.remove(chat_id, product_id)

        product = self.catalog_repo.get_product(product_id)
        if product is None:
            self.cart_repo.remove(chat_id, product_id)
            return {"success": False, "message": "This product is no longer available."}
        if delta > 0 and not product.in_stock(new_quantity):
            return {"success": False, "message": f"Sorry, only {product.stock} left of {product.name}."}

        self.cart_repo.set_quantity(chat_id, product_id, new_quantity)
        return {"success": True, "message": f"{product.name}: {new_quantity} pcs."}

    def remove(self, chat_id: int, product_id: int) -> dict:
        if not self.cart_repo.remove(chat_id, product_id):
            return {"success": False, "message": "This product is not in your cart any more."}
        logger.info(f"Removed product {product_id} from cart of {chat_id}")
        return {"success": True, "message": "Removed from cart."}

    def clear(self, chat_id: int) -> None:
        removed = self.cart_repo.clear(chat_id)
        logger.info(f"Cleared {removed} cart lines for chat {chat_id}")
