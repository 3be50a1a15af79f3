from unittest.mock import Mock

import pytest

from core.dispatcher import UpdateDispatcher
from handlers import build_registry
from handlers.admin_handler import AdminCallbackHandler, AdminPanelHandler
from handlers.cart_handler import CartCallbackHandler
from handlers.catalog_handler import CatalogCallbackHandler
from handlers.category_state_handler import ADDING_CATEGORY_NAME, CategoryStateHandler
from handlers.checkout_handler import AWAITING_ADDRESS, AWAITING_PHONE, CheckoutStateHandler
from handlers.menu_handler import MainMenuHandler
from handlers.order_management_handler import OrderManagementHandler
from handlers.product_state_handler import ADDING_PRODUCT_NAME, ProductStateHandler
from handlers.settings_state_handler import AdminSettingsStateHandler
from handlers.start_handler import StartCommandHandler
from handlers.user_management_handler import UserManagementHandler
from models.catalog import Category
from models.user import TelegramUser
from services.cart_service import CartService
from services.catalog_service import CatalogService
from tests.helpers import FakeUserDirectory, callback, text


@pytest.fixture
def catalog_repo():
    return Mock()


@pytest.fixture
def registry(user_repo, catalog_repo):
    return build_registry(
        user_repo,
        catalog_repo,
        Mock(),
        CartService(Mock(), catalog_repo),
        Mock(),
        CatalogService(catalog_repo),
    )


def test_registration_order(registry):
    assert [type(h) for h in registry.plain] == [
        StartCommandHandler,
        MainMenuHandler,
        AdminPanelHandler,
        CatalogCallbackHandler,
        CartCallbackHandler,
        AdminCallbackHandler,
        OrderManagementHandler,
    ]
    assert [type(h) for h in registry.state] == [
        CheckoutStateHandler,
        ProductStateHandler,
        CategoryStateHandler,
        AdminSettingsStateHandler,
        UserManagementHandler,
    ]
    assert registry.start is registry.plain[0]


def test_restart_during_checkout(registry, user_repo):
    directory = FakeUserDirectory({42: AWAITING_ADDRESS})
    user_repo.ensure_user.return_value = TelegramUser(chat_id=42, first_name="Ann")

    reply = UpdateDispatcher(registry, directory).dispatch(text("/start"))

    assert directory.states[42] is None
    assert "Welcome" in reply.text
    user_repo.set_temp_data.assert_not_called()


def test_address_goes_to_checkout(registry, user_repo):
    directory = FakeUserDirectory({42: AWAITING_ADDRESS})

    UpdateDispatcher(registry, directory).dispatch(text("123 Main St"))

    user_repo.set_temp_data.assert_called_once_with(42, "123 Main St")
    user_repo.set_state.assert_called_once_with(42, AWAITING_PHONE)


def test_menu_button_during_checkout_is_taken_as_input(registry, user_repo, catalog_repo):
    directory = FakeUserDirectory({42: AWAITING_ADDRESS})

    UpdateDispatcher(registry, directory).dispatch(text("🛍 Catalog"))

    user_repo.set_temp_data.assert_called_once_with(42, "🛍 Catalog")
    catalog_repo.list_categories.assert_not_called()


def test_category_callback_during_checkout(registry, catalog_repo):
    directory = FakeUserDirectory({42: AWAITING_ADDRESS})
    catalog_repo.get_category_by_slug.return_value = Category(id=3, name="Electronics", slug="electronics")
    catalog_repo.count_products.return_value = 0
    catalog_repo.list_products.return_value = []

    reply = UpdateDispatcher(registry, directory).dispatch(callback("cat:electronics"))

    catalog_repo.get_category_by_slug.assert_called_once_with("electronics")
    assert "Electronics" in reply.text
    assert directory.states[42] == AWAITING_ADDRESS


def test_product_name_goes_to_product_flow(registry, user_repo):
    directory = FakeUserDirectory({42: ADDING_PRODUCT_NAME})
    user_repo.get.return_value = TelegramUser(chat_id=42, role="ADMIN", temp_data='{"category_id": 3}')

    reply = UpdateDispatcher(registry, directory).dispatch(text("Super_Phone"))

    user_repo.set_state.assert_called_once_with(42, "ADDING_PRODUCT_PRICE")
    assert "price" in reply.text


def test_category_name_goes_to_category_flow(registry, user_repo):
    directory = FakeUserDirectory({42: ADDING_CATEGORY_NAME})
    user_repo.get.return_value = TelegramUser(chat_id=42, role="ADMIN")

    UpdateDispatcher(registry, directory).dispatch(text("Phones"))

    user_repo.set_temp_data.assert_called_once_with(42, "Phones")


def test_admin_button_for_customer_is_refused(registry, user_repo):
    user_repo.get.return_value = TelegramUser(chat_id=42)

    reply = UpdateDispatcher(registry, FakeUserDirectory({42: None})).dispatch(text("⚙️ Admin panel"))

    assert "staff only" in reply.text


def test_free_text_without_state_is_unhandled(registry):
    directory = FakeUserDirectory()

    assert UpdateDispatcher(registry, directory).dispatch(text("hello", chat_id=99)) is None
    assert directory.cleared == []
