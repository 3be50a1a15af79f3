from decimal import Decimal
from unittest.mock import Mock

import pytest

from handlers.catalog_handler import CatalogCallbackHandler
from models.catalog import Category, Product
from tests.helpers import callback, text


@pytest.fixture
def catalog_repo():
    return Mock()


@pytest.fixture
def handler(catalog_repo):
    return CatalogCallbackHandler(catalog_repo, page_size=3)


def _payloads(reply):
    return [b.callback_data for row in reply.reply_markup.inline_keyboard for b in row]


class TestCanHandle:
    @pytest.mark.parametrize("data", ["catalog", "cat:electronics", "catp:electronics:1", "prod:5"])
    def test_accepts_catalog_payloads(self, handler, data):
        assert handler.can_handle(callback(data))

    @pytest.mark.parametrize("data", ["cart:view", "catalogue", "category:1"])
    def test_rejects_other_payloads(self, handler, data):
        assert not handler.can_handle(callback(data))

    def test_rejects_text_messages(self, handler):
        assert not handler.can_handle(text("cat:electronics"))


class TestHandle:
    def test_categories(self, handler, catalog_repo):
        catalog_repo.list_categories.return_value = [
            Category(id=1, name="Electronics", slug="electronics"),
            Category(id=2, name="Books", slug="books"),
        ]

        reply = handler.handle(callback("catalog"))

        assert reply.edit_message_id == 200
        assert _payloads(reply)[:2] == ["cat:electronics", "cat:books"]

    def test_category_lists_products(self, handler, catalog_repo):
        catalog_repo.get_category_by_slug.return_value = Category(id=1, name="Electronics", slug="electronics")
        catalog_repo.count_products.return_value = 1
        catalog_repo.list_products.return_value = [
            Product(id=5, name="Phone", price=Decimal("100"), stock=2, category_id=1),
        ]

        reply = handler.handle(callback("cat:electronics"))

        catalog_repo.get_category_by_slug.assert_called_once_with("electronics")
        catalog_repo.list_products.assert_called_once_with(1, limit=3, offset=0)
        assert "Electronics" in reply.text
        assert "prod:5" in _payloads(reply)
        assert not any(p.startswith("catp:") for p in _payloads(reply))

    def test_unknown_category(self, handler, catalog_repo):
        catalog_repo.get_category_by_slug.return_value = None

        reply = handler.handle(callback("cat:nope"))

        assert reply.text == "Category not found."
        catalog_repo.list_products.assert_not_called()

    def test_product_card_with_photo(self, handler, catalog_repo):
        catalog_repo.get_product.return_value = Product(
            id=5, name="Phone", price=Decimal("100"), stock=2, image_url="https://example.com/p.jpg"
        )

        reply = handler.handle(callback("prod:5"))

        assert reply.photo == "https://example.com/p.jpg"
        assert not reply.is_edit()
        assert "cart:add:5" in _payloads(reply)

    def test_out_of_stock_product_has_no_add_button(self, handler, catalog_repo):
        catalog_repo.get_product.return_value = Product(id=6, name="Tablet", price=Decimal("1"), stock=0)

        reply = handler.handle(callback("prod:6"))

        assert "Out of stock" in reply.text
        assert "cart:add:6" not in _payloads(reply)

    def test_malformed_product_payload(self, handler, catalog_repo):
        assert handler.handle(callback("prod:x")) is None
        catalog_repo.get_product.assert_not_called()


class TestPagination:
    @pytest.fixture
    def phones(self, catalog_repo):
        catalog_repo.get_category_by_slug.return_value = Category(id=1, name="Phones", slug="phones")
        catalog_repo.count_products.return_value = 7
        catalog_repo.list_products.return_value = [
            Product(id=10, name="Phone 4", price=Decimal("1"), stock=1, category_id=1),
        ]

    def test_middle_page_has_both_arrows(self, handler, catalog_repo, phones):
        reply = handler.handle(callback("catp:phones:1"))

        catalog_repo.list_products.assert_called_once_with(1, limit=3, offset=3)
        payloads = _payloads(reply)
        assert "catp:phones:0" in payloads
        assert "catp:phones:2" in payloads
        nav = reply.reply_markup.inline_keyboard[-2]
        assert nav[1].text == "2/3"

    def test_page_past_the_end_shows_last_page(self, handler, catalog_repo, phones):
        reply = handler.handle(callback("catp:phones:9"))

        catalog_repo.list_products.assert_called_once_with(1, limit=3, offset=6)
        assert "catp:phones:3" not in _payloads(reply)

    @pytest.mark.parametrize("data", ["catp:phones", "catp::1", "catp:phones:x"])
    def test_malformed_page_payload(self, handler, catalog_repo, data):
        assert handler.handle(callback(data)) is None
        catalog_repo.get_category_by_slug.assert_not_called()


class TestMarkdownEscaping:
    def test_product_name_with_underscore(self, handler, catalog_repo):
        catalog_repo.get_product.return_value = Product(
            id=5, name="Super_Phone", price=Decimal("100"), stock=2, description="Fits *any* pocket"
        )

        reply = handler.handle(callback("prod:5"))

        assert reply.parse_mode == "Markdown"
        assert "*Super\\_Phone*" in reply.text
        assert "Fits \\*any\\* pocket" in reply.text

    def test_category_name_with_underscore(self, handler, catalog_repo):
        catalog_repo.get_category_by_slug.return_value = Category(id=1, name="Smart_Home", slug="smart-home")
        catalog_repo.count_products.return_value = 0
        catalog_repo.list_products.return_value = []

        reply = handler.handle(callback("cat:smart-home"))

        assert "Smart\\_Home" in reply.text
