"""
repositories/order_repo.py
---------------------------
Data access layer for orders and their line items.
"""

from decimal import Decimal
from typing import Optional

from db.connection import get_connection, release_connection, transaction
from models.catalog import Order, OrderItem, OrderStatus
from utils.logger import get_logger

logger = get_logger(__name__)

_ORDER_COLUMNS = "id, chat_id, address, phone_number, comment, total, status, created_at"


class OutOfStock(Exception):
    """Raised when an order line asks for more units than are left."""

    def __init__(self, product_name: str):
        super().__init__(f"Not enough stock for {product_name}")
        self.product_name = product_name


def _row_to_order(row) -> Order:
    return Order(
        id=row[0],
        chat_id=row[1],
        address=row[2],
        phone_number=row[3],
        comment=row[4] or "",
        total=Decimal(row[5]),
        status=OrderStatus(row[6]),
        created_at=row[7],
    )


class OrderRepository:
    """Repository for the orders and order_items tables."""

    def add(self, order: Order) -> Order:
        """
        Reserve stock and insert an order with all of its items in one transaction.

        Each line decrements its product's stock only if enough units are
        left, so two buyers can never both take the last unit.

        Returns:
            The same Order with ``id`` and ``created_at`` populated.

        Raises:
            OutOfStock: If any line cannot be reserved; nothing is saved.
        """
        reserve_sql = "UPDATE products SET stock = stock - %s WHERE id = %s AND stock >= %s;"
        order_sql = """
            INSERT INTO orders (chat_id, address, phone_number, comment, total, status)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        item_sql = """
            INSERT INTO order_items (order_id, product_id, product_name, price, quantity)
            VALUES (%s, %s, %s, %s, %s);
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                for item in order.items:
                    cur.execute(reserve_sql, (item.quantity, item.product_id, item.quantity))
                    if cur.rowcount == 0:
                        raise OutOfStock(item.product_name)
                cur.execute(order_sql, (
                    order.chat_id, order.address, order.phone_number,
                    order.comment, order.total, order.status.value,
                ))
                order.id, order.created_at = cur.fetchone()
                cur.executemany(item_sql, [
                    (order.id, item.product_id, item.product_name, item.price, item.quantity)
                    for item in order.items
                ])
        except OutOfStock as e:
            logger.warning(f"Order for chat {order.chat_id} rejected: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to save order for chat {order.chat_id}: {e}")
            raise
        logger.info(f"Saved order #{order.id} for chat {order.chat_id}")
        return order

    def get(self, order_id: int) -> Optional[Order]:
        """Fetch an order with its items, or None."""
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {_ORDER_COLUMNS} FROM orders WHERE id = %s;", (order_id,))
                row = cur.fetchone()
                if row is None:
                    return None
                order = _row_to_order(row)
                cur.execute(
                    "SELECT product_id, product_name, price, quantity "
                    "FROM order_items WHERE order_id = %s ORDER BY id;",
                    (order_id,),
                )
                order.items = [
                    OrderItem(product_id=r[0], product_name=r[1], price=Decimal(r[2]), quantity=r[3])
                    for r in cur.fetchall()
                ]
                return order
        finally:
            release_connection(conn)

    def list_recent(self, status: Optional[OrderStatus] = None, limit: int = 10) -> list[Order]:
        """Newest orders first, optionally only those in one status. Items are not loaded."""
        if status is None:
            sql = f"SELECT {_ORDER_COLUMNS} FROM orders ORDER BY created_at DESC LIMIT %s;"
            params = (limit,)
        else:
            sql = f"SELECT {_ORDER_COLUMNS} FROM orders WHERE status = %s ORDER BY created_at DESC LIMIT %s;"
            params = (status.value, limit)
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [_row_to_order(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def update_status(self, order_id: int, status: OrderStatus, restock: bool = False) -> bool:
        """
        Move an order to a new status.

        Args:
            restock: Also put the order's units back into stock (cancellation).

        Returns:
            True if the order exists.
        """
        sql = "UPDATE orders SET status = %s, updated_at = NOW() WHERE id = %s;"
        restock_sql = """
            UPDATE products p SET stock = p.stock + i.quantity
            FROM order_items i
            WHERE i.order_id = %s AND i.product_id = p.id;
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (status.value, order_id))
                updated = cur.rowcount > 0
                if updated and restock:
                    cur.execute(restock_sql, (order_id,))
        except Exception as e:
            logger.error(f"Failed to set status of order #{order_id} to {status.value}: {e}")
            raise
        return updated
