"""
handlers/user_management_handler.py
------------------------------------
Admin conversation that changes a user's role (CHANGING_USER_ROLE).
The admin replies with "<chat id> <ROLE>".
"""

from typing import Optional

from core.handler import StateHandler
from handlers.access import access_denied, find_staff
from handlers.admin_keyboards import users_keyboard
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from models.user import ROLES
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)

CHANGING_USER_ROLE = "CHANGING_USER_ROLE"

ROLE_PROMPT = (
    "Send the chat id and the new role separated by a space, e.g. `123456789 MANAGER`.\n"
    f"Roles: {', '.join(ROLES)}. Send /start to cancel."
)


def parse_role_change(text: str) -> Optional[tuple[int, str]]:
    parts = text.split()
    if len(parts) != 2 or not parts[0].lstrip("-").isdigit():
        return None
    role = parts[1].upper()
    if role not in ROLES:
        return None
    return int(parts[0]), role


class UserManagementHandler(StateHandler):
    """Applies a role change typed by an admin."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def can_handle_state(self, event: InboundEvent, state: str) -> bool:
        return isinstance(event, TextMessage) and state == CHANGING_USER_ROLE

    def handle_state(self, event: TextMessage, state: str) -> Optional[Reply]:
        chat_id = event.chat_id
        if find_staff(self.user_repo, chat_id) is None:
            self.user_repo.set_state(chat_id, None)
            return access_denied(chat_id)

        parsed = parse_role_change(event.text)
        if parsed is None:
            return Reply(chat_id=chat_id, text=f"⚠️ {ROLE_PROMPT}", parse_mode="Markdown")

        target, role = parsed
        if target == chat_id:
            return Reply(chat_id=chat_id, text="⚠️ You cannot change your own role. Send another chat id:")

        found = self.user_repo.set_role(target, role)
        self.user_repo.set_state(chat_id, None)
        text = f"✅ {target} is now {role}." if found else f"User {target} has never used the bot."
        return Reply(chat_id=chat_id, text=text, reply_markup=users_keyboard())
