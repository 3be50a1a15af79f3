"""
handlers/access.py
-------------------
Role checks shared by the admin and order-management handlers.
"""

from typing import Optional

from models.reply import Reply
from models.user import TelegramUser
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)

ACCESS_DENIED_TEXT = "⛔ This section is for shop staff only."


def find_staff(user_repo: UserRepository, chat_id: int, admin_only: bool = True) -> Optional[TelegramUser]:
    """
    Return the user if they may use a staff section, otherwise None.

    Args:
        admin_only: Require the ADMIN role; when False, managers pass too.
    """
    user = user_repo.get(chat_id)
    if user is None:
        return None
    allowed = user.is_admin() if admin_only else user.is_staff()
    if not allowed:
        logger.warning(f"Chat {chat_id} with role {user.role} was refused a staff section")
        return None
    return user


def access_denied(chat_id: int) -> Reply:
    return Reply(chat_id=chat_id, text=ACCESS_DENIED_TEXT)
