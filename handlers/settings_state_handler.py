"""
handlers/settings_state_handler.py
-----------------------------------
Admin conversation that replaces one of the shop texts
(EDITING_SHOP_ABOUT, _HOURS, _CONTACTS, _SUPPORT).
"""

from typing import Optional

from core.handler import StateHandler
from handlers.access import access_denied, find_staff
from handlers.admin_keyboards import settings_keyboard
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from models.settings import SETTING_KEYS
from repositories.settings_repo import SettingsRepository
from repositories.user_repo import UserRepository
from services.catalog_service import optional_text
from utils.logger import get_logger

logger = get_logger(__name__)


def editing_setting_state(key: str) -> str:
    return f"EDITING_SHOP_{key.upper()}"


EDITING_SETTING_STATES = {editing_setting_state(key): key for key in SETTING_KEYS}


class AdminSettingsStateHandler(StateHandler):
    """Stores the next text message as the new value of a shop setting."""

    def __init__(self, user_repo: UserRepository, settings_repo: SettingsRepository):
        self.user_repo = user_repo
        self.settings_repo = settings_repo

    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        return isinstance(event, TextMessage) and state in EDITING_SETTING_STATES

    def handle_state(self, event: TextMessage, state: str) -> Optional[Reply]:
        chat_id = event.chat_id
        if find_staff(self.user_repo, chat_id) is None:
            self.user_repo.set_state(chat_id, None)
            return access_denied(chat_id)

        key = EDITING_SETTING_STATES[state]
        value = optional_text(event.text) or ""
        if not value and key != "contacts":
            return Reply(chat_id=chat_id, text="⚠️ This text cannot be empty. Please send it again:")

        self.settings_repo.set(key, value)
        self.user_repo.set_state(chat_id, None)
        return Reply(chat_id=chat_id, text="✅ Saved.", reply_markup=settings_keyboard())
