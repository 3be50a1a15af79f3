"""
handlers/start_handler.py
--------------------------
Handles the /start command: registers the user and shows the main menu.
"""

from typing import Optional

from config import SHOP_NAME
from core.dispatcher import is_restart_command
from core.handler import UpdateHandler
from handlers.keyboards import main_menu_keyboard
from models.events import InboundEvent, TextMessage
from models.reply import Reply
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class StartCommandHandler(UpdateHandler):
    """Entry point of every conversation."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def can_handle(self, event: InboundEvent) -> bool:
        return is_restart_command(event)

    def handle(self, event: TextMessage) -> Optional[Reply]:
        user = self.user_repo.ensure_user(
            event.chat_id, event.username, event.first_name, event.last_name
        )
        logger.info(f"User {user.chat_id} ({user.display_name}) started the bot.")

        text = (
            f"👋 Welcome to {SHOP_NAME}, {user.display_name}!\n\n"
            f"🛍 Browse the catalog, add products to your cart and place an order "
            f"right here in the chat.\n\n"
            f"Use the menu buttons below to navigate."
        )
        if user.is_admin():
            text += "\n\n🔑 You are signed in as an administrator. Use ⚙️ Admin panel to manage the shop."
        elif user.is_staff():
            text += "\n\n🔑 You are signed in as a manager. Use ⚙️ Admin panel to manage orders."
        return Reply(chat_id=event.chat_id, text=text, reply_markup=main_menu_keyboard(user.is_staff()))
