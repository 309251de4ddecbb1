"""
security/rate_limiter.py
-------------------------
Per-user rate limiting for bot commands.
Limits how many messages a user can send within a sliding time window.
"""

import time
from collections import defaultdict
from functools import wraps
from typing import Callable, Optional

from telegram import Update
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)


class SlidingWindowLimiter:
    """Allows at most `max_calls` per user within any `window_seconds` span."""

    def __init__(self, max_calls: int, window_seconds: float):
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._calls: dict[int, list[float]] = defaultdict(list)

    def allow(self, user_id: int, now: Optional[float] = None) -> bool:
        """Record a call for `user_id` and say whether it is within the limit."""
        now = time.time() if now is None else now
        cutoff = now - self.window_seconds
        recent = [t for t in self._calls[user_id] if t > cutoff]
        if len(recent) >= self.max_calls:
            self._calls[user_id] = recent
            return False
        recent.append(now)
        self._calls[user_id] = recent
        return True


limiter = SlidingWindowLimiter(RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS)


def rate_limited(func: Callable):
    """
    Decorator that enforces `limiter` per user.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max messages per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not limiter.allow(user.id):
            logger.warning(f"⚠️ Rate limit hit for user {user.id}")
            await update.message.reply_text("⚠️ Too many messages. Wait a bit and try again.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
