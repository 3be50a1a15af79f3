"""
models/user.py
--------------
Domain model for a bot user and their conversational state.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

ROLE_USER = "USER"
ROLE_MANAGER = "MANAGER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_MANAGER, ROLE_ADMIN)


@dataclass
class TelegramUser:
    """
    A person talking to the bot.

    Attributes:
        chat_id: Telegram chat id (primary key).
        username: Telegram @username.
        first_name: First name from Telegram.
        last_name: Last name from Telegram.
        phone_number: Contact phone given during checkout.
        state: What the bot is waiting for next (e.g. 'AWAITING_ADDRESS'), or None.
        role: One of ROLES.
        temp_data: Scratch value kept between the steps of a multi-message
            flow (delivery address, product draft, id of the edited record).
        registered_at: When the record was created.
    """
    chat_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    state: Optional[str] = None
    role: str = ROLE_USER
    temp_data: Optional[str] = None
    registered_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def is_staff(self) -> bool:
        """Admins and managers may manage orders."""
        return self.role in (ROLE_ADMIN, ROLE_MANAGER)

    @property
    def display_name(self) -> str:
        return self.first_name or self.username or str(self.chat_id)
