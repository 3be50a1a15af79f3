"""
security/rate_limiter.py
-------------------------
Rate limiting middleware to prevent flooding the bot.
Limits the number of updates a chat can send within a time window.
"""

import time
from collections import defaultdict
from functools import wraps
from typing import Callable, Optional

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)

RATE_LIMIT_TEXT = "⚠️ You are sending messages too fast. Please wait a moment and try again."

# In-memory storage for rate tracking: {chat_id: [timestamp1, timestamp2, ...]}
_chat_timestamps: dict[int, list[float]] = defaultdict(list)


def _cleanup(chat_id: int, now: float) -> None:
    """Remove expired timestamps for a chat."""
    cutoff = now - RATE_LIMIT_WINDOW_SECONDS
    _chat_timestamps[chat_id] = [t for t in _chat_timestamps[chat_id] if t > cutoff]


def reset() -> None:
    """Forget all tracked timestamps."""
    _chat_timestamps.clear()


async def _answer(update: Update, text: Optional[str]) -> None:
    try:
        await update.callback_query.answer(text=text, show_alert=text is not None)
    except BadRequest as e:
        logger.warning(f"Failed to answer a rate-limited callback query: {e}")


def rate_limited(func: Callable):
    """
    Decorator that enforces rate limiting per chat.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max updates per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).

    Behavior:
        - Updates without a chat pass through untouched.
        - The update that first exceeds the limit gets a warning reply;
          further ones inside the window are dropped silently.
        - Dropped button presses are still answered, with the warning as a
          popup the first time, so the client stops its loading spinner.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        chat = update.effective_chat
        if chat is None:
            return await func(update, context, *args, **kwargs)

        now = time.time()
        _cleanup(chat.id, now)
        timestamps = _chat_timestamps[chat.id]

        if len(timestamps) >= RATE_LIMIT_MESSAGES:
            first_hit = len(timestamps) == RATE_LIMIT_MESSAGES
            if first_hit:
                logger.warning(f"Rate limit hit for chat {chat.id}")
                timestamps.append(now)
            if update.callback_query is not None:
                await _answer(update, RATE_LIMIT_TEXT if first_hit else None)
            elif first_hit:
                await context.bot.send_message(chat_id=chat.id, text=RATE_LIMIT_TEXT)
            return

        timestamps.append(now)
        return await func(update, context, *args, **kwargs)

    return wrapper
