"""
main.py
-------
Entry point for the SubTrack Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Connect the Redis cache (or continue without one).
    - Build the subscription service once and hand it to the handlers.
    - Configure and start the Telegram bot with all handlers.
"""

from telegram import BotCommand
from telegram.ext import Application, CommandHandler

import config
from cache import connect_cache
from cache.subscription_cache import SubscriptionCache
from db.connection import ConnectionPool
from db.init_db import create_tables
from handlers.start_handler import help_command, myid_command, start_command
from handlers.subscription_handler import (
    SERVICE_KEY,
    add_command,
    delete_command,
    edit_command,
    get_command,
    list_command,
    total_command,
)
from repositories.caching_repo import CachingSubscriptionRepository
from repositories.subscription_repo import SubscriptionRepository
from services.subscription_service import SubscriptionService
from utils.logger import get_logger

logger = get_logger(__name__)


def build_service(db: ConnectionPool, cache: SubscriptionCache) -> SubscriptionService:
    """Wire store → caching repository → service."""
    repo = CachingSubscriptionRepository(SubscriptionRepository(db), cache)
    return SubscriptionService(repo)


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    commands = [
        BotCommand("start", "🚀 Start the bot"),
        BotCommand("help", "📖 Show help"),
        BotCommand("add", "➕ Add a subscription"),
        BotCommand("get", "📄 Show a subscription"),
        BotCommand("edit", "✏️ Edit a subscription"),
        BotCommand("delete", "🗑️ Delete a subscription"),
        BotCommand("list", "📋 List subscriptions"),
        BotCommand("total", "💶 Total price"),
        BotCommand("myid", "🆔 Your Telegram ID"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    db = ConnectionPool(config.DATABASE_URL, config.DB_POOL_MIN, config.DB_POOL_MAX)
    db.open()
    create_tables(db)

    # ── 2. Cache setup ────────────────────────────────────
    cache = connect_cache(
        enabled=config.REDIS_ENABLED,
        host=config.REDIS_HOST,
        port=config.REDIS_PORT,
        db=config.REDIS_DB,
        password=config.REDIS_PASSWORD,
        ttl_seconds=config.CACHE_TTL_SECONDS,
    )

    # ── 3. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(config.TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()
    app.bot_data[SERVICE_KEY] = build_service(db, cache)

    # ── 4. Register command handlers ──────────────────────
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("myid", myid_command))
    app.add_handler(CommandHandler("add", add_command))
    app.add_handler(CommandHandler("get", get_command))
    app.add_handler(CommandHandler("edit", edit_command))
    app.add_handler(CommandHandler("delete", delete_command))
    app.add_handler(CommandHandler("list", list_command))
    app.add_handler(CommandHandler("total", total_command))

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 SubTrack is running! Press Ctrl+C to stop.")
    try:
        app.run_polling(drop_pending_updates=True, allowed_updates=["message"])
    finally:
        # ── 6. Cleanup on shutdown ────────────────────────
        cache.close()
        db.close()
        logger.info("SubTrack stopped.")


if __name__ == "__main__":
    main()
