"""
repositories/cart_repo.py
--------------------------
Data access layer for cart items.
"""

from decimal import Decimal

from db.connection import get_connection, release_connection, transaction
from models.catalog import CartItem, Product
from utils.logger import get_logger

logger = get_logger(__name__)


class CartRepository:
    """Repository for the cart_items table."""

    def get_items(self, chat_id: int) -> list[CartItem]:
        """All cart lines of a user, joined with their products."""
        sql = """
            SELECT c.id, c.quantity, p.id, p.name, p.price, p.stock,
                   p.category_id, p.description, p.image_url
            FROM cart_items c
            JOIN products p ON p.id = c.product_id
            WHERE c.chat_id = %s
            ORDER BY c.id;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id,))
                return [
                    CartItem(
                        id=r[0],
                        chat_id=chat_id,
                        quantity=r[1],
                        product=Product(
                            id=r[2],
                            name=r[3],
                            price=Decimal(r[4]),
                            stock=r[5],
                            category_id=r[6],
                            description=r[7],
                            image_url=r[8],
                        ),
                    )
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def get_quantity(self, chat_id: int, product_id: int) -> int:
        sql = "SELECT quantity FROM cart_items WHERE chat_id = %s AND product_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id, product_id))
                row = cur.fetchone()
                return row[0] if row else 0
        finally:
            release_connection(conn)

    def add(self, chat_id: int, product_id: int, quantity: int = 1) -> int:
        """
        Add units of a product, creating the cart line if needed.

        Returns:
            The new quantity of that line.
        """
        sql = """
            INSERT INTO cart_items (chat_id, product_id, quantity)
            VALUES (%s, %s, %s)
            ON CONFLICT (chat_id, product_id)
            DO UPDATE SET quantity = cart_items.quantity + EXCLUDED.quantity
            RETURNING quantity;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id, product_id, quantity))
                row = cur.fetchone()
            conn.commit()
            return row[0]
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add product {product_id} to cart of {chat_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def clear(self, chat_id: int) -> int:
        """Remove every line of a user's cart. Returns the number removed."""
        sql = "DELETE FROM cart_items WHERE chat_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (chat_id,))
                removed = cur.rowcount
            conn.commit()
            return removed
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to clear cart of {chat_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def set_quantity(self, chat_id: int, product_id: int, quantity: int) -> bool:
        """
        Overwrite the quantity of an existing cart line.

        Returns:
            True if the line exists.
        """
        sql = "UPDATE cart_items SET quantity = %s WHERE chat_id = %s AND product_id = %s;"
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (quantity, chat_id, product_id))
                return cur.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to set quantity of product {product_id} in cart of {chat_id}: {e}")
            raise

    def remove(self, chat_id: int, product_id: int) -> bool:
        """Delete one cart line. Returns True if it existed."""
        sql = "DELETE FROM cart_items WHERE chat_id = %s AND product_id = %s;"
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (chat_id, product_id))
                return cur.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to remove product {product_id} from cart of {chat_id}: {e}")
            raise
