"""
services/catalog_service.py
----------------------------
Business rules behind the admin panel's catalog editing: parsing admin
input and creating categories and products.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from models.catalog import Category, Product
from repositories.catalog_repo import CatalogRepository
from utils.logger import get_logger

logger = get_logger(__name__)

# Replies meaning "leave this optional field empty".
SKIP_WORDS = frozenset({"-", "skip"})

MAX_PRICE = Decimal("9999999999.99")


def slugify(name: str) -> str:
    """
    Lower-case ASCII key for callback payloads, e.g. "Smart Phones" -> "smart-phones".
    Falls back to "category" when nothing usable is left.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:50] or "category"


def parse_price(raw: str) -> Optional[Decimal]:
    """
    Parse a positive price with at most two decimals.
    Spaces are ignored and a comma works as the decimal separator.
    Returns None when the text is not a valid price.
    """
    cleaned = raw.replace(" ", "").replace(",", ".")
    try:
        price = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0 or price > MAX_PRICE:
        return None
    if price.as_tuple().exponent < -2:
        return None
    return price.quantize(Decimal("0.01"))


def parse_stock(raw: str) -> Optional[int]:
    raw = raw.strip()
    return int(raw) if raw.isdigit() else None


def optional_text(raw: str) -> Optional[str]:
    text = raw.strip()
    return None if text.lower() in SKIP_WORDS else text


class CatalogService:
    """Creates and edits categories and products on behalf of admins."""

    def __init__(self, catalog_repo: Optional[CatalogRepository] = None):
        self.catalog_repo = catalog_repo or CatalogRepository()

    def unique_slug(self, name: str) -> str:
        base = slugify(name)
        slug, n = base, 2
        while self.catalog_repo.slug_exists(slug):
            slug = f"{base}-{n}"
            n += 1
        return slug

    def create_category(self, name: str, description: Optional[str] = None) -> Category:
        return self.catalog_repo.add_category(name, self.unique_slug(name), description)

    def create_product(self, draft: dict) -> Product:
        """
        Save a product collected step by step in the admin flow.

        Args:
            draft: Dict with 'category_id', 'name', 'price' (str), 'stock'
                and optional 'description' / 'image_url'.
        """
        product = Product(
            id=0,
            name=draft["name"],
            price=Decimal(draft["price"]),
            stock=int(draft["stock"]),
            category_id=draft.get("category_id"),
            description=draft.get("description"),
            image_url=draft.get("image_url"),
        )
        return self.catalog_repo.add_product(product)

    @staticmethod
    def parse_field(field: str, raw: str, max_name_length: int = 200):
        """
        Turn admin input into a column value.

        Returns:
            (value, error) where error is a user-facing message or None.
        """
        text = raw.strip()
        if field == "name":
            if not text:
                return None, "The name cannot be empty."
            if len(text) > max_name_length:
                return None, f"The name is too long (max {max_name_length} characters)."
            return text, None
        if field == "price":
            price = parse_price(text)
            return (price, None) if price is not None else (None, "Send a positive price, e.g. 129000 or 99.90")
        if field == "stock":
            stock = parse_stock(text)
            return (stock, None) if stock is not None else (None, "Send a whole number, e.g. 10")
        return optional_text(text), None

    def update_product(self, product_id: int, field: str, raw: str) -> dict:
        """
        Change one product field from admin input.

        Returns:
            Dict with 'success' and 'message' keys.
        """
        value, error = self.parse_field(field, raw)
        if error:
            return {"success": False, "message": error}
        if not self.catalog_repo.update_product(product_id, field, value):
            return {"success": False, "message": "This product no longer exists."}
        logger.info(f"Product #{product_id}: {field} updated")
        return {"success": True, "message": "✅ Product updated."}

    def update_category(self, category_id: int, field: str, raw: str) -> dict:
        value, error = self.parse_field(field, raw, max_name_length=100)
        if error:
            return {"success": False, "message": error}
        if not self.catalog_repo.update_category(category_id, field, value):
            return {"success": False, "message": "This category no longer exists."}
        logger.info(f"Category #{category_id}: {field} updated")
        return {"success": True, "message": "✅ Category updated."}
