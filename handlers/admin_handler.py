"""
handlers/admin_handler.py
--------------------------
The admin panel: the "⚙️ Admin panel" menu button (or /admin) and every
"admin:..." callback. Admins manage products, categories, users and shop
texts here; managers are sent straight to order management.

Callbacks that need typed input (names, prices, texts) only switch the
admin into a state; the matching state handler consumes the next message.
"""

import json
from typing import Optional

from telegram.helpers import escape_markdown

from core.handler import UpdateHandler
from handlers.access import access_denied, find_staff
from handlers.admin_keyboards import (
    ADMIN_PREFIX,
    CATEGORY_FIELD_LABELS,
    CONFIRM_SUFFIX,
    PRODUCT_FIELD_LABELS,
    SETTING_LABELS,
    admin_categories_keyboard,
    admin_category_keyboard,
    admin_menu_keyboard,
    admin_product_keyboard,
    admin_products_keyboard,
    confirm_keyboard,
    orders_menu_keyboard,
    product_categories_keyboard,
    settings_keyboard,
    users_keyboard,
)
from handlers.category_state_handler import ADDING_CATEGORY_NAME, EDITING_CATEGORY_DESCRIPTION, EDITING_CATEGORY_NAME
from handlers.keyboards import BTN_ADMIN
from handlers.product_state_handler import (
    ADDING_PRODUCT_NAME,
    FIELD_PROMPTS,
    editing_product_state,
    render_admin_product,
)
from handlers.settings_state_handler import editing_setting_state
from handlers.user_management_handler import CHANGING_USER_ROLE, ROLE_PROMPT
from models.events import CallbackQuery, InboundEvent, TextMessage
from models.reply import Reply
from models.settings import SETTING_KEYS
from repositories.catalog_repo import CatalogRepository
from repositories.settings_repo import SettingsRepository
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)

ADMIN_COMMAND = "/admin"
RECENT_USERS = 10

_EDIT_CATEGORY_STATES = {"name": EDITING_CATEGORY_NAME, "description": EDITING_CATEGORY_DESCRIPTION}

# "admin:<action>" -> AdminCallbackHandler._<action>
_ACTIONS = frozenset({
    "menu", "categories", "cat", "newcat", "editcat", "delcat",
    "products", "plist", "prod", "newprod", "editprod", "delprod",
    "settings", "setting", "users", "role",
})


class AdminPanelHandler(UpdateHandler):
    """Opens the admin panel for admins, or order management for managers."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def can_handle(self, event: InboundEvent) -> bool:
        return isinstance(event, TextMessage) and event.text.strip() in (BTN_ADMIN, ADMIN_COMMAND)

    def handle(self, event: TextMessage) -> Optional[Reply]:
        user = find_staff(self.user_repo, event.chat_id, admin_only=False)
        if user is None:
            return access_denied(event.chat_id)
        logger.info(f"Staff panel opened by {event.chat_id} ({user.role})")
        if user.is_admin():
            return Reply(chat_id=event.chat_id, text="⚙️ *Admin panel*", parse_mode="Markdown",
                         reply_markup=admin_menu_keyboard())
        return Reply(chat_id=event.chat_id, text="🧾 *Orders*", parse_mode="Markdown",
                     reply_markup=orders_menu_keyboard(show_admin_back=False))


class AdminCallbackHandler(UpdateHandler):
    """Every "admin:<action>[:<args>]" inline button. Admins only."""

    def __init__(
        self,
        user_repo: UserRepository,
        catalog_repo: CatalogRepository,
        settings_repo: SettingsRepository,
    ):
        self.user_repo = user_repo
        self.catalog_repo = catalog_repo
        self.settings_repo = settings_repo

    def can_handle(self, event: InboundEvent) -> bool:
        return isinstance(event, CallbackQuery) and event.data.startswith(ADMIN_PREFIX)

    def handle(self, event: CallbackQuery) -> Optional[Reply]:
        logger.info(f"Admin callback '{event.data}' from chat {event.chat_id}")
        if find_staff(self.user_repo, event.chat_id) is None:
            return access_denied(event.chat_id)

        action, _, rest = event.data[len(ADMIN_PREFIX):].partition(":")
        args = rest.split(":") if rest else []
        if action not in _ACTIONS:
            logger.warning(f"Unknown admin action in '{event.data}'")
            return None
        return getattr(self, f"_{action}")(event, args)

    # ── Helpers ───────────────────────────────────────────

    def _edit(self, event: CallbackQuery, text: str, markup, parse_mode: Optional[str] = None) -> Reply:
        return Reply(
            chat_id=event.chat_id,
            text=text,
            reply_markup=markup,
            parse_mode=parse_mode,
            edit_message_id=event.message_id,
        )

    def _ask(self, event: CallbackQuery, state: str, temp_data: Optional[str], prompt: str) -> Reply:
        self.user_repo.set_temp_data(event.chat_id, temp_data)
        self.user_repo.set_state(event.chat_id, state)
        return Reply(chat_id=event.chat_id, text=f"{prompt}\n\nSend /start to cancel.")

    @staticmethod
    def _id(args: list[str], index: int = 0) -> Optional[int]:
        if len(args) <= index or not args[index].isdigit():
            return None
        return int(args[index])

    # ── Menu ──────────────────────────────────────────────

    def _menu(self, event: CallbackQuery, args: list[str]) -> Reply:
        return self._edit(event, "⚙️ *Admin panel*", admin_menu_keyboard(), "Markdown")

    # ── Categories ────────────────────────────────────────

    def _categories(self, event: CallbackQuery, args: list[str]) -> Reply:
        categories = self.catalog_repo.list_categories()
        text = "📂 Categories" if categories else "📂 There are no categories yet."
        return self._edit(event, text, admin_categories_keyboard(categories))

    def _cat(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        category_id = self._id(args)
        if category_id is None:
            return None
        category = self.catalog_repo.get_category(category_id)
        if category is None:
            return self._categories(event, [])
        lines = [
            f"📂 *{escape_markdown(category.name)}* (`{category.slug}`)",
            f"Products: {self.catalog_repo.count_products(category.id)}",
        ]
        if category.description:
            lines += ["", escape_markdown(category.description)]
        return self._edit(event, "\n".join(lines), admin_category_keyboard(category), "Markdown")

    def _newcat(self, event: CallbackQuery, args: list[str]) -> Reply:
        return self._ask(event, ADDING_CATEGORY_NAME, None, "Send the name of the new category:")

    def _editcat(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        category_id = self._id(args)
        if category_id is None or len(args) != 2 or args[1] not in CATEGORY_FIELD_LABELS:
            return None
        prompt = "Send the new name:" if args[1] == "name" else "Send the new description, or '-' to remove it:"
        return self._ask(event, _EDIT_CATEGORY_STATES[args[1]], str(category_id), prompt)

    def _delcat(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        category_id = self._id(args)
        if category_id is None:
            return None
        if args[1:] != ["yes"]:
            return self._edit(
                event,
                "Delete this category? Its products will stay, without a category.",
                confirm_keyboard(f"{event.data}{CONFIRM_SUFFIX}", f"{ADMIN_PREFIX}cat:{category_id}"),
            )
        self.catalog_repo.delete_category(category_id)
        logger.info(f"Admin {event.chat_id} deleted category #{category_id}")
        return self._categories(event, [])

    # ── Products ──────────────────────────────────────────

    def _products(self, event: CallbackQuery, args: list[str]) -> Reply:
        categories = self.catalog_repo.list_categories()
        return self._edit(event, "📦 Choose a category:", product_categories_keyboard(categories))

    def _plist(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        category_id = self._id(args)
        if category_id is None:
            return None
        if category_id == 0:
            products = self.catalog_repo.list_uncategorized_products()
            title = "Products without a category"
        else:
            category = self.catalog_repo.get_category(category_id)
            if category is None:
                return self._products(event, [])
            products = self.catalog_repo.list_products(category_id)
            title = f"Products in {category.name}"
        if not products:
            title += " (none yet)"
        return self._edit(event, f"📦 {title}", admin_products_keyboard(products, category_id))

    def _prod(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        product_id = self._id(args)
        if product_id is None:
            return None
        product = self.catalog_repo.get_product(product_id)
        if product is None:
            return self._products(event, [])
        return self._edit(event, render_admin_product(product), admin_product_keyboard(product), "Markdown")

    def _newprod(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        category_id = self._id(args)
        if category_id is None:
            return None
        draft = json.dumps({"category_id": category_id})
        return self._ask(event, ADDING_PRODUCT_NAME, draft, FIELD_PROMPTS["name"])

    def _editprod(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        product_id = self._id(args)
        if product_id is None or len(args) != 2 or args[1] not in PRODUCT_FIELD_LABELS:
            return None
        field = args[1]
        return self._ask(event, editing_product_state(field), str(product_id), FIELD_PROMPTS[field])

    def _delprod(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        product_id = self._id(args)
        if product_id is None:
            return None
        product = self.catalog_repo.get_product(product_id)
        if product is None:
            return self._products(event, [])
        if args[1:] != ["yes"]:
            return self._edit(
                event,
                f"Delete {product.name}? It will also disappear from customers' carts.",
                confirm_keyboard(f"{event.data}{CONFIRM_SUFFIX}", f"{ADMIN_PREFIX}prod:{product_id}"),
            )
        self.catalog_repo.delete_product(product_id)
        logger.info(f"Admin {event.chat_id} deleted product #{product_id}")
        return self._plist(event, [str(product.category_id or 0)])

    # ── Settings ──────────────────────────────────────────

    def _settings(self, event: CallbackQuery, args: list[str]) -> Reply:
        settings = self.settings_repo.get()
        lines = ["⚙️ *Shop settings*", ""]
        for key in SETTING_KEYS:
            value = getattr(settings, key) or "—"
            lines.append(f"{SETTING_LABELS[key]}: {escape_markdown(value)}")
        return self._edit(event, "\n".join(lines), settings_keyboard(), "Markdown")

    def _setting(self, event: CallbackQuery, args: list[str]) -> Optional[Reply]:
        if len(args) != 1 or args[0] not in SETTING_KEYS:
            return None
        key = args[0]
        hint = " Send '-' to clear it." if key == "contacts" else ""
        return self._ask(event, editing_setting_state(key), None, f"Send the new text for {SETTING_LABELS[key]}.{hint}")

    # ── Users ─────────────────────────────────────────────

    def _users(self, event: CallbackQuery, args: list[str]) -> Reply:
        users = self.user_repo.list_recent(RECENT_USERS)
        lines = [f"👥 Users: {self.user_repo.count()}", "", "Latest:"]
        for user in users:
            handle = f" @{user.username}" if user.username else ""
            lines.append(f"• {user.display_name}{handle} · {user.chat_id} · {user.role}")
        return self._edit(event, "\n".join(lines), users_keyboard())

    def _role(self, event: CallbackQuery, args: list[str]) -> Reply:
        self.user_repo.set_state(event.chat_id, CHANGING_USER_ROLE)
        return Reply(chat_id=event.chat_id, text=ROLE_PROMPT, parse_mode="Markdown")
