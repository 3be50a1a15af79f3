"""
handlers/ - Presentation Layer
================================
Bot handlers. Each handler decides from an inbound event (and, for state
handlers, the user's state) whether it owns it, delegates to services,
and returns the Reply to send. No SQL lives here.

`build_registry` is the single place where handlers are registered;
the order of each list is the order in which they are tried.
"""

from core.handler import HandlerRegistry
from handlers.admin_handler import AdminCallbackHandler, AdminPanelHandler
from handlers.cart_handler import CartCallbackHandler
from handlers.catalog_handler import CatalogCallbackHandler
from handlers.category_state_handler import CategoryStateHandler
from handlers.checkout_handler import CheckoutStateHandler
from handlers.menu_handler import MainMenuHandler
from handlers.order_management_handler import OrderManagementHandler
from handlers.product_state_handler import ProductStateHandler
from handlers.settings_state_handler import AdminSettingsStateHandler
from handlers.start_handler import StartCommandHandler
from handlers.user_management_handler import UserManagementHandler
from repositories.catalog_repo import CatalogRepository
from repositories.settings_repo import SettingsRepository
from repositories.user_repo import UserRepository
from services.cart_service import CartService
from services.catalog_service import CatalogService
from services.order_service import OrderService


def build_registry(
    user_repo: UserRepository,
    catalog_repo: CatalogRepository,
    settings_repo: SettingsRepository,
    cart_service: CartService,
    order_service: OrderService,
    catalog_service: CatalogService,
) -> HandlerRegistry:
    """Instantiate every handler and freeze them into a HandlerRegistry."""
    start = StartCommandHandler(user_repo)
    return HandlerRegistry.build(
        plain=[
            start,
            MainMenuHandler(user_repo, catalog_repo, cart_service, settings_repo),
            AdminPanelHandler(user_repo),
            CatalogCallbackHandler(catalog_repo),
            CartCallbackHandler(user_repo, cart_service),
            AdminCallbackHandler(user_repo, catalog_repo, settings_repo),
            OrderManagementHandler(user_repo, order_service),
        ],
        state=[
            CheckoutStateHandler(user_repo, order_service),
            ProductStateHandler(user_repo, catalog_repo, catalog_service),
            CategoryStateHandler(user_repo, catalog_repo, catalog_service),
            AdminSettingsStateHandler(user_repo, settings_repo),
            UserManagementHandler(user_repo),
        ],
        start=start,
    )
