"""
handlers/admin_keyboards.py
----------------------------
Inline keyboards of the admin panel and order management, and the
callback payloads their buttons carry.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from models.catalog import Category, Order, OrderStatus, Product
from models.settings import SETTING_KEYS
from services.cart_service import format_price

# ── Admin panel payloads (admins only) ────────────────────
ADMIN_PREFIX = "admin:"
CB_ADMIN_MENU = "admin:menu"
CB_ADMIN_CATEGORIES = "admin:categories"
CB_ADMIN_CATEGORY_PREFIX = "admin:cat:"               # admin:cat:<id>
CB_ADMIN_NEW_CATEGORY = "admin:newcat"
CB_ADMIN_EDIT_CATEGORY_PREFIX = "admin:editcat:"      # admin:editcat:<id>:<field>
CB_ADMIN_DELETE_CATEGORY_PREFIX = "admin:delcat:"     # admin:delcat:<id>[:yes]
CB_ADMIN_PRODUCTS = "admin:products"
CB_ADMIN_PRODUCT_LIST_PREFIX = "admin:plist:"         # admin:plist:<category id, 0 = none>
CB_ADMIN_PRODUCT_PREFIX = "admin:prod:"               # admin:prod:<id>
CB_ADMIN_NEW_PRODUCT_PREFIX = "admin:newprod:"        # admin:newprod:<category id>
CB_ADMIN_EDIT_PRODUCT_PREFIX = "admin:editprod:"      # admin:editprod:<id>:<field>
CB_ADMIN_DELETE_PRODUCT_PREFIX = "admin:delprod:"     # admin:delprod:<id>[:yes]
CB_ADMIN_SETTINGS = "admin:settings"
CB_ADMIN_EDIT_SETTING_PREFIX = "admin:setting:"       # admin:setting:<key>
CB_ADMIN_USERS = "admin:users"
CB_ADMIN_CHANGE_ROLE = "admin:role"
CONFIRM_SUFFIX = ":yes"

# ── Order management payloads (admins and managers) ───────
CB_ORDERS_PREFIX = "orders:"                          # orders:menu | orders:all | orders:<STATUS>
CB_ORDERS_MENU = "orders:menu"
CB_ORDERS_ALL = "orders:all"
CB_ORDER_PREFIX = "order:"                            # order:<id>
CB_ORDER_STATUS_PREFIX = "order:status:"              # order:status:<id>:<STATUS>

PRODUCT_FIELD_LABELS = {
    "name": "✏️ Name",
    "price": "💰 Price",
    "stock": "📦 Stock",
    "description": "📝 Description",
    "image_url": "🖼 Photo URL",
}
CATEGORY_FIELD_LABELS = {
    "name": "✏️ Name",
    "description": "📝 Description",
}
SETTING_LABELS = {
    "about": "ℹ️ About",
    "hours": "🕘 Working hours",
    "contacts": "📍 Contacts",
    "support": "📞 Support",
}


def _button(text: str, data: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(text, callback_data=data)


def _back(data: str) -> list[InlineKeyboardButton]:
    return [_button("⬅️ Back", data)]


def admin_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [_button("📦 Products", CB_ADMIN_PRODUCTS), _button("📂 Categories", CB_ADMIN_CATEGORIES)],
        [_button("🧾 Orders", CB_ORDERS_MENU), _button("👥 Users", CB_ADMIN_USERS)],
        [_button("⚙️ Shop settings", CB_ADMIN_SETTINGS)],
    ])


def admin_categories_keyboard(categories: list[Category]) -> InlineKeyboardMarkup:
    rows = [[_button(c.name, f"{CB_ADMIN_CATEGORY_PREFIX}{c.id}")] for c in categories]
    rows.append([_button("➕ New category", CB_ADMIN_NEW_CATEGORY)])
    rows.append(_back(CB_ADMIN_MENU))
    return InlineKeyboardMarkup(rows)


def admin_category_keyboard(category: Category) -> InlineKeyboardMarkup:
    rows = [
        [_button(label, f"{CB_ADMIN_EDIT_CATEGORY_PREFIX}{category.id}:{field}")]
        for field, label in CATEGORY_FIELD_LABELS.items()
    ]
    rows.append([_button("🗑 Delete", f"{CB_ADMIN_DELETE_CATEGORY_PREFIX}{category.id}")])
    rows.append(_back(CB_ADMIN_CATEGORIES))
    return InlineKeyboardMarkup(rows)


def product_categories_keyboard(categories: list[Category]) -> InlineKeyboardMarkup:
    """Pick the category whose products to manage."""
    rows = [[_button(c.name, f"{CB_ADMIN_PRODUCT_LIST_PREFIX}{c.id}")] for c in categories]
    rows.append([_button("Without category", f"{CB_ADMIN_PRODUCT_LIST_PREFIX}0")])
    rows.append(_back(CB_ADMIN_MENU))
    return InlineKeyboardMarkup(rows)


def admin_products_keyboard(products: list[Product], category_id: int) -> InlineKeyboardMarkup:
    rows = [
        [_button(f"{p.name} ({p.stock})", f"{CB_ADMIN_PRODUCT_PREFIX}{p.id}")]
        for p in products
    ]
    if category_id:
        rows.append([_button("➕ New product", f"{CB_ADMIN_NEW_PRODUCT_PREFIX}{category_id}")])
    rows.append(_back(CB_ADMIN_PRODUCTS))
    return InlineKeyboardMarkup(rows)


def admin_product_keyboard(product: Product) -> InlineKeyboardMarkup:
    buttons = [
        _button(label, f"{CB_ADMIN_EDIT_PRODUCT_PREFIX}{product.id}:{field}")
        for field, label in PRODUCT_FIELD_LABELS.items()
    ]
    rows = [buttons[i:i + 2] for i in range(0, len(buttons), 2)]
    rows.append([_button("🗑 Delete", f"{CB_ADMIN_DELETE_PRODUCT_PREFIX}{product.id}")])
    rows.append(_back(f"{CB_ADMIN_PRODUCT_LIST_PREFIX}{product.category_id or 0}"))
    return InlineKeyboardMarkup(rows)


def confirm_keyboard(confirm_data: str, cancel_data: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [_button("✅ Yes, delete", confirm_data), _button("✖️ Cancel", cancel_data)],
    ])


def settings_keyboard() -> InlineKeyboardMarkup:
    rows = [[_button(SETTING_LABELS[key], f"{CB_ADMIN_EDIT_SETTING_PREFIX}{key}")] for key in SETTING_KEYS]
    rows.append(_back(CB_ADMIN_MENU))
    return InlineKeyboardMarkup(rows)


def users_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [_button("🔑 Change a role", CB_ADMIN_CHANGE_ROLE)],
        _back(CB_ADMIN_MENU),
    ])


def orders_menu_keyboard(show_admin_back: bool) -> InlineKeyboardMarkup:
    """Order filters; admins also get a way back to the admin panel."""
    rows = [[_button("📋 All orders", CB_ORDERS_ALL)]]
    statuses = list(OrderStatus)
    for i in range(0, len(statuses), 2):
        rows.append([_button(s.label, f"{CB_ORDERS_PREFIX}{s.value}") for s in statuses[i:i + 2]])
    if show_admin_back:
        rows.append(_back(CB_ADMIN_MENU))
    return InlineKeyboardMarkup(rows)


def orders_list_keyboard(orders: list[Order]) -> InlineKeyboardMarkup:
    rows = [
        [_button(f"#{o.id} · {o.status.label} · {format_price(o.total)}", f"{CB_ORDER_PREFIX}{o.id}")]
        for o in orders
    ]
    rows.append(_back(CB_ORDERS_MENU))
    return InlineKeyboardMarkup(rows)


def order_keyboard(order: Order, next_statuses: tuple[OrderStatus, ...]) -> InlineKeyboardMarkup:
    rows = [
        [_button(f"→ {s.label}", f"{CB_ORDER_STATUS_PREFIX}{order.id}:{s.value}")]
        for s in next_statuses
    ]
    rows.append(_back(CB_ORDERS_ALL))
    return InlineKeyboardMarkup(rows)
