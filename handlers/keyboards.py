"""
handlers/keyboards.py
----------------------
Customer-facing reply and inline keyboards, and the callback payloads
their buttons carry. Admin keyboards live in handlers/admin_keyboards.py.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from models.catalog import CartItem, Category, Product

# ── Main menu (reply keyboard texts) ──────────────────────
BTN_CATALOG = "🛍 Catalog"
BTN_CART = "🛒 Cart"
BTN_INFO = "ℹ️ Info"
BTN_SUPPORT = "📞 Support"
BTN_ADMIN = "⚙️ Admin panel"
MAIN_MENU_BUTTONS = (BTN_CATALOG, BTN_CART, BTN_INFO, BTN_SUPPORT)

# ── Callback payloads ─────────────────────────────────────
CB_CATALOG = "catalog"
CB_CATEGORY_PREFIX = "cat:"            # cat:<slug>
CB_CATEGORY_PAGE_PREFIX = "catp:"      # catp:<slug>:<page>
CB_PRODUCT_PREFIX = "prod:"            # prod:<id>
CB_CART_ADD_PREFIX = "cart:add:"       # cart:add:<product id>
CB_CART_INC_PREFIX = "cart:inc:"
CB_CART_DEC_PREFIX = "cart:dec:"
CB_CART_REMOVE_PREFIX = "cart:rm:"
CB_CART_VIEW = "cart:view"
CB_CART_CLEAR = "cart:clear"
CB_CART_CHECKOUT = "cart:checkout"


def main_menu_keyboard(show_admin: bool = False) -> ReplyKeyboardMarkup:
    rows = [
        [KeyboardButton(BTN_CATALOG), KeyboardButton(BTN_CART)],
        [KeyboardButton(BTN_INFO), KeyboardButton(BTN_SUPPORT)],
    ]
    if show_admin:
        rows.append([KeyboardButton(BTN_ADMIN)])
    return ReplyKeyboardMarkup(rows, resize_keyboard=True)


def categories_keyboard(categories: list[Category]) -> InlineKeyboardMarkup:
    """One button per category, two per row."""
    buttons = [
        InlineKeyboardButton(c.name, callback_data=f"{CB_CATEGORY_PREFIX}{c.slug}")
        for c in categories
    ]
    rows = [buttons[i:i + 2] for i in range(0, len(buttons), 2)]
    rows.append([InlineKeyboardButton(BTN_CART, callback_data=CB_CART_VIEW)])
    return InlineKeyboardMarkup(rows)


def products_keyboard(
    products: list[Product], slug: str = "", page: int = 0, pages: int = 1
) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(p.name, callback_data=f"{CB_PRODUCT_PREFIX}{p.id}")]
        for p in products
    ]
    if pages > 1:
        nav = []
        if page > 0:
            nav.append(InlineKeyboardButton("◀️", callback_data=f"{CB_CATEGORY_PAGE_PREFIX}{slug}:{page - 1}"))
        nav.append(InlineKeyboardButton(f"{page + 1}/{pages}", callback_data=f"{CB_CATEGORY_PAGE_PREFIX}{slug}:{page}"))
        if page < pages - 1:
            nav.append(InlineKeyboardButton("▶️", callback_data=f"{CB_CATEGORY_PAGE_PREFIX}{slug}:{page + 1}"))
        rows.append(nav)
    rows.append([InlineKeyboardButton("⬅️ Back to catalog", callback_data=CB_CATALOG)])
    return InlineKeyboardMarkup(rows)


def product_keyboard(product: Product) -> InlineKeyboardMarkup:
    rows = []
    if product.in_stock():
        rows.append([InlineKeyboardButton(
            "➕ Add to cart", callback_data=f"{CB_CART_ADD_PREFIX}{product.id}"
        )])
    rows.append([
        InlineKeyboardButton("⬅️ Catalog", callback_data=CB_CATALOG),
        InlineKeyboardButton(BTN_CART, callback_data=CB_CART_VIEW),
    ])
    return InlineKeyboardMarkup(rows)


def cart_keyboard(items: list[CartItem]) -> InlineKeyboardMarkup:
    """A ➖ / ➕ / ❌ row per cart line, then checkout, clear and back."""
    rows = []
    for item in items:
        pid = item.product.id
        rows.append([InlineKeyboardButton(
            f"{item.product.name[:30]} × {item.quantity}", callback_data=f"{CB_PRODUCT_PREFIX}{pid}"
        )])
        rows.append([
            InlineKeyboardButton("➖", callback_data=f"{CB_CART_DEC_PREFIX}{pid}"),
            InlineKeyboardButton("➕", callback_data=f"{CB_CART_INC_PREFIX}{pid}"),
            InlineKeyboardButton("❌", callback_data=f"{CB_CART_REMOVE_PREFIX}{pid}"),
        ])
    rows += [
        [InlineKeyboardButton("✅ Checkout", callback_data=CB_CART_CHECKOUT)],
        [InlineKeyboardButton("🗑 Clear cart", callback_data=CB_CART_CLEAR)],
        [InlineKeyboardButton("⬅️ Back to catalog", callback_data=CB_CATALOG)],
    ]
    return InlineKeyboardMarkup(rows)


def back_to_catalog_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("⬅️ Back to catalog", callback_data=CB_CATALOG)],
    ])


def view_cart_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(BTN_CART, callback_data=CB_CART_VIEW)],
    ])
