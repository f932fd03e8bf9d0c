# imposterbot/platforms/discord/cogs/welcome.py

import discord
import logging
from discord.ext import commands

from imposterbot.core.notifications.configurator import NotificationConfigurator
from imposterbot.core.notifications.errors import StoreFailure
from imposterbot.core.notifications.renderer import RenderContext
from imposterbot.core.notifications.types import EventType
from imposterbot.platforms.discord.utils import build_configurator, fetch_member_counts

log = logging.getLogger(__name__)


class WelcomeCog(commands.Cog):
    """Posts the configured join and leave notifications."""

    def __init__(self, bot, configurator: NotificationConfigurator | None = None):
        self.bot = bot
        self.configurator = configurator or build_configurator()

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member):
        log.info(f"on_member_join event triggered for user: {member.name}")
        if member.bot:
            return
        await self.announce(member.guild, member, EventType.JOIN)

    @commands.Cog.listener()
    async def on_member_remove(self, member: discord.Member):
        log.info(f"on_member_remove event triggered for user: {member.name}")
        await self.announce(member.guild, member, EventType.LEAVE)

    async def announce(
        self, guild: discord.Guild, user: discord.abc.User, event_type: EventType
    ) -> bool:
        """Renders and posts the guild's notification for ``user``. Returns True if one was sent."""
        store = self.configurator.store
        try:
            channel_id = await store.get_channel(guild.id, event_type)
            config = await store.find(guild.id, event_type) if channel_id else None
        except StoreFailure as e:
            log.error(f"Database error while fetching {event_type.value} notification.", exc_info=e)
            return False

        if not channel_id or config is None:
            log.debug(f"No {event_type.value} notification configured for guild '{guild.name}'.")
            return False

        channel = guild.get_channel(channel_id)
        if channel is None:
            log.error(f"{event_type.value} channel ID {channel_id} not found in guild.")
            return False

        counts = await fetch_member_counts(self.bot, guild.id)
        message = await self.configurator.renderer.render(
            config, RenderContext.for_user(user, event_type, counts)
        )
        if message.is_empty():
            log.warning(f"{event_type.value} notification for guild '{guild.name}' is empty.")
            return False

        try:
            await channel.send(**message.send_kwargs())
            log.info(f"Sent {event_type.value} notification for {user.name}.")
            return True
        except discord.errors.Forbidden:
            log.error(f"Permission error: Cannot send messages to the {event_type.value} channel.")
        except Exception as e:
            log.error("An unexpected error occurred.", exc_info=e)
        return False


def setup(bot):
    bot.add_cog(WelcomeCog(bot))
