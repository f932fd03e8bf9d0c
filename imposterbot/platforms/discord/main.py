# imposterbot/platforms/discord/main.py

import discord
import logging
import pathlib
from discord.ext import commands

import sentry_sdk
from imposterbot.core.config import settings
from imposterbot.core.constants import BotConfig, MediaConfig
from imposterbot.core.logger import setup_logging
from imposterbot.core.db import engine, Base

if settings.SENTRY_DSN:
    sentry_sdk.init(dsn=settings.SENTRY_DSN)

setup_logging(
    level=settings.LOG_LEVEL,
    webhook_url=settings.BOT_LOGS_WEBHOOK_URL,
    bot_name="imposterbot",
)
log = logging.getLogger(__name__)

_COGS_DIR = pathlib.Path(__file__).resolve().parent / "cogs"

intents = discord.Intents.default()

# Join and leave events are only delivered with the privileged members intent.
intents.members = True

bot = commands.Bot(command_prefix="/", intents=intents)


@bot.event
async def on_ready():
    log.info(f"Logged in as {bot.user} (ID: {bot.user.id})")

    user_content = pathlib.Path(settings.DATA_DIRECTORY) / MediaConfig.USER_CONTENT_DIRNAME
    try:
        user_content.mkdir(parents=True, exist_ok=True)
        log.info(f"User content directory: {user_content.resolve()}")
    except OSError as e:
        log.critical(f"Failed to create data directory {user_content}", exc_info=e)

    log.info("Connecting to Database...")
    try:
        # Creates missing tables only; schema changes go through alembic.
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("Database tables verified/created successfully.")
    except Exception as e:
        log.error("Failed to connect to the Database!", exc_info=e)


def load_cogs():
    log.info("Attempting to load cogs...")
    for path in sorted(_COGS_DIR.glob("*.py")):
        if path.name == "__init__.py":
            continue
        cog_path = f"{BotConfig.COGS_PACKAGE}.{path.stem}"
        try:
            bot.load_extension(cog_path)
            log.info(f"Successfully loaded cog: {cog_path}")
        except Exception as e:
            log.error(f"Failed to load cog: {cog_path}", exc_info=e)


if __name__ == "__main__":
    # Models must be imported so Base knows about them before create_all runs.
    import imposterbot.core.models  # noqa: F401

    load_cogs()
    bot.run(settings.DISCORD_BOT_TOKEN)
