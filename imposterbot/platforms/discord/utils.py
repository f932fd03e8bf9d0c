# imposterbot/platforms/discord/utils.py

import logging

import discord

from imposterbot.core.config import settings
from imposterbot.core.db import get_session
from imposterbot.core.notifications.configurator import NotificationConfigurator
from imposterbot.core.notifications.renderer import NotificationRenderer
from imposterbot.core.notifications.resolver import AttachmentResolver
from imposterbot.core.notifications.store import NotificationStore

log = logging.getLogger(__name__)


def build_configurator() -> NotificationConfigurator:
    """Wires the notification components to the live database and data directory."""
    return NotificationConfigurator(
        store=NotificationStore(get_session),
        resolver=AttachmentResolver(
            settings.DATA_DIRECTORY, settings.MEDIA_DOWNLOAD_TIMEOUT_SECONDS
        ),
        renderer=NotificationRenderer(settings.DATA_DIRECTORY),
    )


async def fetch_member_counts(bot, guild_id: int) -> tuple[int | None, int | None]:
    """
    Returns (approximate member count, approximate online count) for a guild.
    Both are None if Discord could not be reached; callers carry on without them.
    """
    try:
        guild = await bot.fetch_guild(guild_id, with_counts=True)
    except discord.HTTPException as e:
        log.warning(f"Could not fetch member counts for guild {guild_id}: {e}")
        return None, None
    return guild.approximate_member_count, guild.approximate_presence_count
