"""
handlers/order_management_handler.py
-------------------------------------
Order management for shop staff (admins and managers): filter the
latest orders by status, open one, and move it to its next status.
"""

from typing import Optional

from telegram.helpers import escape_markdown

from core.handler import UpdateHandler
from handlers.access import access_denied, find_staff
from handlers.admin_keyboards import (
    CB_ORDER_PREFIX,
    CB_ORDER_STATUS_PREFIX,
    CB_ORDERS_ALL,
    CB_ORDERS_MENU,
    CB_ORDERS_PREFIX,
    order_keyboard,
    orders_list_keyboard,
    orders_menu_keyboard,
)
from models.catalog import Order, OrderStatus
from models.events import CallbackQuery, InboundEvent
from models.reply import Reply
from repositories.user_repo import UserRepository
from services.cart_service import format_price
from services.order_service import STATUS_TRANSITIONS, OrderService
from utils.logger import get_logger

logger = get_logger(__name__)

ORDERS_PAGE = 10


def render_order(order: Order) -> str:
    lines = [
        f"🧾 *Order #{order.id}* · {order.status.label}",
    ]
    if order.created_at:
        lines.append(f"📅 {order.created_at:%Y-%m-%d %H:%M}")
    lines += [
        f"👤 Chat {order.chat_id} · 📞 {escape_markdown(order.phone_number)}",
        f"📍 {escape_markdown(order.address)}",
    ]
    if order.comment:
        lines.append(f"💬 {escape_markdown(order.comment)}")
    lines.append("")
    for item in order.items:
        lines.append(
            f"• {escape_markdown(item.product_name)} × {item.quantity} = {format_price(item.subtotal)}"
        )
    lines += ["", f"*Total: {format_price(order.total)}*"]
    return "\n".join(lines)


class OrderManagementHandler(UpdateHandler):
    """
    "orders:..." and "order:..." callbacks.

    Payloads:
        orders:menu                 status filters
        orders:all | orders:<STATUS>  latest orders
        order:<id>                  order details with the allowed next statuses
        order:status:<id>:<STATUS>  apply a status change
    """

    def __init__(self, user_repo: UserRepository, order_service: OrderService):
        self.user_repo = user_repo
        self.order_service = order_service

    def can_handle(self, event: InboundEvent) -> bool:
        return isinstance(event, CallbackQuery) and (
            event.data.startswith(CB_ORDERS_PREFIX) or event.data.startswith(CB_ORDER_PREFIX)
        )

    def handle(self, event: CallbackQuery) -> Optional[Reply]:
        user = find_staff(self.user_repo, event.chat_id, admin_only=False)
        if user is None:
            return access_denied(event.chat_id)

        data = event.data
        logger.info(f"Order management '{data}' from {event.chat_id}")
        if data == CB_ORDERS_MENU:
            return self._edit(event, "🧾 *Orders*", orders_menu_keyboard(user.is_admin()))
        if data.startswith(CB_ORDERS_PREFIX):
            return self._list(event, data[len(CB_ORDERS_PREFIX):])
        if data.startswith(CB_ORDER_STATUS_PREFIX):
            return self._change_status(event, data[len(CB_ORDER_STATUS_PREFIX):])

        raw_id = data[len(CB_ORDER_PREFIX):]
        if not raw_id.isdigit():
            logger.warning(f"Malformed order payload '{data}'")
            return None
        order = self.order_service.get_order(int(raw_id))
        if order is None:
            return Reply(chat_id=event.chat_id, text=f"Order #{raw_id} not found.")
        return self._show(event, order)

    def _list(self, event: CallbackQuery, filter_: str) -> Optional[Reply]:
        status = None
        if CB_ORDERS_PREFIX + filter_ != CB_ORDERS_ALL:
            try:
                status = OrderStatus(filter_)
            except ValueError:
                logger.warning(f"Unknown order filter '{filter_}'")
                return None
        orders = self.order_service.list_orders(status, ORDERS_PAGE)
        if status is None:
            text = "🧾 Latest orders" if orders else "🧾 No orders yet."
        else:
            text = f"🧾 {status.label} orders" if orders else f"🧾 No orders with status {status.label}."
        return Reply(
            chat_id=event.chat_id,
            text=text,
            reply_markup=orders_list_keyboard(orders),
            edit_message_id=event.message_id,
        )

    def _change_status(self, event: CallbackQuery, payload: str) -> Optional[Reply]:
        raw_id, _, raw_status = payload.partition(":")
        if not raw_id.isdigit():
            logger.warning(f"Malformed order status payload '{event.data}'")
            return None
        try:
            status = OrderStatus(raw_status)
        except ValueError:
            logger.warning(f"Unknown order status in '{event.data}'")
            return None

        result = self.order_service.update_status(int(raw_id), status)
        order = result.get("order")
        if order is None:
            return Reply(chat_id=event.chat_id, text=result["message"])
        notice = ("✅ " if result["success"] else "⚠️ ") + escape_markdown(result["message"])
        return self._show(event, order, notice)

    def _show(self, event: CallbackQuery, order: Order, notice: str = "") -> Reply:
        text = render_order(order)
        if notice:
            text = f"{notice}\n\n{text}"
        return self._edit(event, text, order_keyboard(order, STATUS_TRANSITIONS[order.status]))

    def _edit(self, event: CallbackQuery, text: str, markup) -> Reply:
        return Reply(
            chat_id=event.chat_id,
            text=text,
            reply_markup=markup,
            parse_mode="Markdown",
            edit_message_id=event.message_id,
        )
