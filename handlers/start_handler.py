"""
handlers/start_handler.py
--------------------------
Handles /start, /help and /myid commands.
"""

from telegram import Update
from telegram.ext import ContextTypes

from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
🤖 *SubTrack*
Keeps track of paid subscriptions 💶

*🔧 Commands:*
/add - add a subscription
/get - show a subscription (e.g. /get 1)
/edit - change fields (e.g. /edit 1 price=1299)
/delete - delete a subscription (e.g. /delete 1)
/list - list all subscriptions
/total - total price, optional filters:
  `start=MM-YYYY end=MM-YYYY user=<uuid> service=<name>`
/myid - show your Telegram ID
/help - this message
"""


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - show a welcome message."""
    user = update.effective_user
    logger.info(f"User {user.id} started the bot.")
    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I keep track of your subscriptions.\n"
        f"Send /help to see every command."
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show all available commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid command - show the user's Telegram ID for whitelisting."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your Telegram ID: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot down.",
        parse_mode="Markdown",
    )
