"""
repositories/catalog_repo.py
-----------------------------
Data access for categories and products: customer-facing reads and the
writes behind the admin panel.
"""

from decimal import Decimal
from typing import Optional

from db.connection import get_connection, release_connection, transaction
from models.catalog import Category, Product
from utils.logger import get_logger

logger = get_logger(__name__)

_CATEGORY_COLUMNS = "id, name, slug, description"
_PRODUCT_COLUMNS = "id, name, price, stock, category_id, description, image_url"

# Columns an admin may change one at a time.
CATEGORY_FIELDS = ("name", "description")
PRODUCT_FIELDS = ("name", "price", "stock", "description", "image_url")


def _row_to_category(row) -> Category:
    return Category(id=row[0], name=row[1], slug=row[2], description=row[3])


def _row_to_product(row) -> Product:
    return Product(
        id=row[0],
        name=row[1],
        price=Decimal(row[2]),
        stock=row[3],
        category_id=row[4],
        description=row[5],
        image_url=row[6],
    )


class CatalogRepository:
    """Repository for the categories and products tables."""

    def _fetch_all(self, sql: str, params: tuple = ()) -> list:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        finally:
            release_connection(conn)

    def _fetch_one(self, sql: str, params: tuple):
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()
        finally:
            release_connection(conn)

    def _write(self, sql: str, params: tuple, what: str) -> int:
        """Run one write statement; return the affected row count."""
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.rowcount
        except Exception as e:
            logger.error(f"Failed to {what}: {e}")
            raise

    # ── Categories ────────────────────────────────────────

    def list_categories(self) -> list[Category]:
        rows = self._fetch_all(f"SELECT {_CATEGORY_COLUMNS} FROM categories ORDER BY position, name;")
        return [_row_to_category(r) for r in rows]

    def get_category(self, category_id: int) -> Optional[Category]:
        row = self._fetch_one(f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE id = %s;", (category_id,))
        return _row_to_category(row) if row else None

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        row = self._fetch_one(f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE slug = %s;", (slug,))
        return _row_to_category(row) if row else None

    def slug_exists(self, slug: str) -> bool:
        return self._fetch_one("SELECT 1 FROM categories WHERE slug = %s;", (slug,)) is not None

    def add_category(self, name: str, slug: str, description: Optional[str] = None) -> Category:
        sql = f"""
            INSERT INTO categories (name, slug, description, position)
            VALUES (%s, %s, %s, (SELECT COALESCE(MAX(position), 0) + 1 FROM categories))
            RETURNING {_CATEGORY_COLUMNS};
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (name, slug, description))
                category = _row_to_category(cur.fetchone())
        except Exception as e:
            logger.error(f"Failed to add category '{name}': {e}")
            raise
        logger.info(f"Added category #{category.id} '{category.slug}'")
        return category

    def update_category(self, category_id: int, field: str, value) -> bool:
        if field not in CATEGORY_FIELDS:
            raise ValueError(f"Category field '{field}' cannot be edited")
        sql = f"UPDATE categories SET {field} = %s WHERE id = %s;"
        return self._write(sql, (value, category_id), f"update {field} of category #{category_id}") > 0

    def delete_category(self, category_id: int) -> bool:
        """Delete a category. Its products stay, without a category."""
        sql = "DELETE FROM categories WHERE id = %s;"
        return self._write(sql, (category_id,), f"delete category #{category_id}") > 0

    # ── Products ──────────────────────────────────────────

    def count_products(self, category_id: int) -> int:
        row = self._fetch_one("SELECT COUNT(*) FROM products WHERE category_id = %s;", (category_id,))
        return row[0]

    def list_products(self, category_id: int, limit: Optional[int] = None, offset: int = 0) -> list[Product]:
        """Products of a category, in-stock first, then by name."""
        sql = f"""
            SELECT {_PRODUCT_COLUMNS} FROM products
            WHERE category_id = %s
            ORDER BY (stock > 0) DESC, name, id
            LIMIT %s OFFSET %s;
        """
        rows = self._fetch_all(sql, (category_id, limit, offset))
        return [_row_to_product(r) for r in rows]

    def list_uncategorized_products(self) -> list[Product]:
        rows = self._fetch_all(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE category_id IS NULL ORDER BY name, id;"
        )
        return [_row_to_product(r) for r in rows]

    def get_product(self, product_id: int) -> Optional[Product]:
        row = self._fetch_one(f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = %s;", (product_id,))
        return _row_to_product(row) if row else None

    def add_product(self, product: Product) -> Product:
        sql = """
            INSERT INTO products (category_id, name, description, price, image_url, stock)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (
                    product.category_id, product.name, product.description,
                    product.price, product.image_url, product.stock,
                ))
                product.id = cur.fetchone()[0]
        except Exception as e:
            logger.error(f"Failed to add product '{product.name}': {e}")
            raise
        logger.info(f"Added product #{product.id} '{product.name}'")
        return product

    def update_product(self, product_id: int, field: str, value) -> bool:
        if field not in PRODUCT_FIELDS:
            raise ValueError(f"Product field '{field}' cannot be edited")
        sql = f"UPDATE products SET {field} = %s WHERE id = %s;"
        return self._write(sql, (value, product_id), f"update {field} of product #{product_id}") > 0

    def delete_product(self, product_id: int) -> bool:
        """Delete a product. Cart lines go with it; past order lines keep their copy."""
        sql = "DELETE FROM products WHERE id = %s;"
        return self._write(sql, (product_id,), f"delete product #{product_id}") > 0
