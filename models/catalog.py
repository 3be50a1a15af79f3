"""
models/catalog.py
-----------------
Domain models for the shop catalog, carts and orders.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


@dataclass
class Category:
    """
    A catalog section.

    Attributes:
        id: Database primary key.
        name: Display name.
        slug: URL-safe unique key, used in callback payloads ("cat:<slug>").
        description: Optional text shown above the product list.
    """
    id: int
    name: str
    slug: str
    description: Optional[str] = None


@dataclass
class Product:
    """
    A product for sale.

    Attributes:
        id: Database primary key.
        name: Display name.
        price: Unit price.
        stock: Units available.
        category_id: Owning category.
        description: Optional long text.
        image_url: Optional photo URL or Telegram file_id.
    """
    id: int
    name: str
    price: Decimal
    stock: int
    category_id: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    def in_stock(self, quantity: int = 1) -> bool:
        return self.stock >= quantity


@dataclass
class CartItem:
    """One product line in a user's cart."""
    chat_id: int
    product: Product
    quantity: int
    id: Optional[int] = None

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


class OrderStatus(str, Enum):
    NEW = "NEW"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    OrderStatus.NEW: "🆕 New",
    OrderStatus.PROCESSING: "⚙️ Processing",
    OrderStatus.SHIPPED: "🚚 Shipped",
    OrderStatus.DELIVERED: "✅ Delivered",
    OrderStatus.CANCELLED: "❌ Cancelled",
}


@dataclass
class OrderItem:
    """
    One product line of a placed order.

    Name and price are copied from the product at order time, so later
    catalog edits do not change past orders.
    """
    product_id: Optional[int]
    product_name: str
    price: Decimal
    quantity: int

    @classmethod
    def from_cart_item(cls, item: CartItem) -> "OrderItem":
        return cls(
            product_id=item.product.id,
            product_name=item.product.name,
            price=item.product.price,
            quantity=item.quantity,
        )

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Order:
    """
    A placed order.

    Attributes:
        chat_id: Customer chat id.
        address: Delivery address.
        phone_number: Contact phone.
        comment: Free-form customer note (may be empty).
        total: Sum of all line subtotals at order time.
        items: Order lines copied from the cart.
        status: Lifecycle status.
        id: Database primary key (None until saved).
        created_at: Timestamp when the record was created.
    """
    chat_id: int
    address: str
    phone_number: str
    comment: str
    total: Decimal
    items: list[OrderItem] = field(default_factory=list)
    status: OrderStatus = OrderStatus.NEW
    id: Optional[int] = None
    created_at: Optional[datetime] = None
