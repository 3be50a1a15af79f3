"""
handlers/category_state_handler.py
-----------------------------------
Admin conversations that create or edit a category.

States:
    ADDING_CATEGORY_NAME -> ADDING_CATEGORY_DESCRIPTION -> (saved, no state)
    EDITING_CATEGORY_NAME / EDITING_CATEGORY_DESCRIPTION -> (saved, no state)
"""

from typing import Optional

from core.handler import StateHandler
from handlers.access import access_denied, find_staff
from handlers.admin_keyboards import admin_categories_keyboard
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from repositories.catalog_repo import CatalogRepository
from repositories.user_repo import UserRepository
from services.catalog_service import CatalogService, optional_text
from utils.logger import get_logger

logger = get_logger(__name__)

ADDING_CATEGORY_NAME = "ADDING_CATEGORY_NAME"
ADDING_CATEGORY_DESCRIPTION = "ADDING_CATEGORY_DESCRIPTION"
EDITING_CATEGORY_NAME = "EDITING_CATEGORY_NAME"
EDITING_CATEGORY_DESCRIPTION = "EDITING_CATEGORY_DESCRIPTION"

EDITING_CATEGORY_STATES = {
    EDITING_CATEGORY_NAME: "name",
    EDITING_CATEGORY_DESCRIPTION: "description",
}
CATEGORY_STATES = frozenset({ADDING_CATEGORY_NAME, ADDING_CATEGORY_DESCRIPTION, *EDITING_CATEGORY_STATES})


class CategoryStateHandler(StateHandler):
    """Two-step category creation and single-field category editing."""

    def __init__(self, user_repo: UserRepository, catalog_repo: CatalogRepository, catalog_service: CatalogService):
        self.user_repo = user_repo
        self.catalog_repo = catalog_repo
        self.catalog_service = catalog_service

    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        return isinstance(event, TextMessage) and state in CATEGORY_STATES

    def handle_state(self, event: TextMessage, state: str) -> Optional[Reply]:
        chat_id = event.chat_id
        user = find_staff(self.user_repo, chat_id)
        if user is None:
            self._finish(chat_id)
            return access_denied(chat_id)

        logger.info(f"Category step {state} for admin {chat_id}")
        if state == ADDING_CATEGORY_NAME:
            name, error = self.catalog_service.parse_field("name", event.text, max_name_length=100)
            if error:
                return Reply(chat_id=chat_id, text=f"⚠️ {error}")
            self.user_repo.set_temp_data(chat_id, name)
            self.user_repo.set_state(chat_id, ADDING_CATEGORY_DESCRIPTION)
            return Reply(chat_id=chat_id, text="Send a short description, or '-' to leave it empty:")

        if state == ADDING_CATEGORY_DESCRIPTION:
            if not user.temp_data:
                self._finish(chat_id)
                return Reply(chat_id=chat_id, text="The category name was lost. Please start again.")
            category = self.catalog_service.create_category(user.temp_data, optional_text(event.text))
            self._finish(chat_id)
            return self._with_list(chat_id, f"✅ Category \"{category.name}\" added.")

        if not user.temp_data or not user.temp_data.isdigit():
            self._finish(chat_id)
            return Reply(chat_id=chat_id, text="Please pick the category again from the admin panel.")
        result = self.catalog_service.update_category(
            int(user.temp_data), EDITING_CATEGORY_STATES[state], event.text
        )
        if not result["success"] and self.catalog_repo.get_category(int(user.temp_data)) is not None:
            return Reply(chat_id=chat_id, text=f"⚠️ {result['message']}")
        self._finish(chat_id)
        return self._with_list(chat_id, result["message"])

    def _with_list(self, chat_id: int, text: str) -> Reply:
        return Reply(
            chat_id=chat_id,
            text=text,
            reply_markup=admin_categories_keyboard(self.catalog_repo.list_categories()),
        )

    def _finish(self, chat_id: int) -> None:
        self.user_repo.set_state(chat_id, None)
        self.user_repo.set_temp_data(chat_id, None)
