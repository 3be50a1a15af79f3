"""
services/order_service.py
--------------------------
Turns a user's cart into an order, and moves orders through their statuses.
"""

from typing import Optional

from models.catalog import Order, OrderItem, OrderStatus
from repositories.order_repo import OrderRepository, OutOfStock
from services.cart_service import CartService
from utils.logger import get_logger

logger = get_logger(__name__)

# Which statuses staff may move an order to from each status.
STATUS_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.NEW: (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    OrderStatus.PROCESSING: (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    OrderStatus.SHIPPED: (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}


class OrderService:
    """Creates orders from carts and manages their lifecycle."""

    def __init__(
        self,
        cart_service: Optional[CartService] = None,
        order_repo: Optional[OrderRepository] = None,
    ):
        self.cart_service = cart_service or CartService()
        self.order_repo = order_repo or OrderRepository()

    def create_order_from_cart(
        self, chat_id: int, address: str, phone_number: str, comment: str = ""
    ) -> Optional[Order]:
        """
        Save the current cart as a new order, take its units out of stock
        and empty the cart.

        Returns:
            The saved Order, or None if the cart is empty.

        Raises:
            OutOfStock: If a line asks for more units than are left. The cart
                is kept so the user can adjust it.
        """
        items = self.cart_service.get_items(chat_id)
        if not items:
            logger.warning(f"Chat {chat_id} tried to check out an empty cart")
            return None

        for item in items:
            if not item.product.in_stock(item.quantity):
                logger.info(
                    f"Checkout of chat {chat_id} stopped: {item.quantity} x product "
                    f"{item.product.id} requested, {item.product.stock} left"
                )
                raise OutOfStock(item.product.name)

        order = Order(
            chat_id=chat_id,
            address=address,
            phone_number=phone_number,
            comment=comment,
            total=self.cart_service.get_total(items),
            items=[OrderItem.from_cart_item(item) for item in items],
        )
        saved = self.order_repo.add(order)
        self.cart_service.clear(chat_id)
        return saved

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.order_repo.get(order_id)

    def list_orders(self, status: Optional[OrderStatus] = None, limit: int = 10) -> list[Order]:
        return self.order_repo.list_recent(status, limit)

    def update_status(self, order_id: int, status: OrderStatus) -> dict:
        """
        Move an order to ``status`` if that transition is allowed.

        Returns:
            Dict with 'success', 'message' and (when found) 'order' keys.
        """
        order = self.order_repo.get(order_id)
        if order is None:
            return {"success": False, "message": f"Order #{order_id} not found."}
        if status not in STATUS_TRANSITIONS[order.status]:
            return {
                "success": False,
                "message": f"Order #{order_id} is {order.status.label}; it cannot become {status.label}.",
                "order": order,
            }
        self.order_repo.update_status(order_id, status, restock=status is OrderStatus.CANCELLED)
        logger.info(f"Order #{order_id}: {order.status.value} -> {status.value}")
        order.status = status
        return {"success": True, "message": f"Order #{order_id} is now {status.label}.", "order": order}
