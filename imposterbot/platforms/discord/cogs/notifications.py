# imposterbot/platforms/discord/cogs/notifications.py
import logging

import discord
from discord.ext import commands

from imposterbot.core.constants import BrandColors
from imposterbot.core.notifications.configurator import (
    ConfigureResult,
    NotificationConfigurator,
)
from imposterbot.core.notifications.errors import (
    FileSystemError,
    MediaUnavailable,
    StoreFailure,
)
from imposterbot.core.notifications.renderer import RenderContext
from imposterbot.core.notifications.request import NotificationRequest
from imposterbot.core.notifications.types import EventType, Upload
from imposterbot.platforms.discord.utils import build_configurator, fetch_member_counts

log = logging.getLogger(__name__)

HELP_DESCRIPTION = (
    "Configures the messages posted when members join or leave this server.\n"
    "Each subcommand changes one part of the message; `full` replaces the whole "
    "format at once. Leaving a subcommand's value empty clears that part."
)

HELP_IMAGES = (
    "1. `thumbnail`: large, top right of the embed\n"
    "2. `image`: large, bottom of the embed\n"
    "3. `author-icon`: small, next to the author text\n"
    "4. `footer-icon`: small, next to the footer text\n\n"
    "Use either the `_file` option to upload an image or the `_url` option to "
    "link one. If both are given the upload is used."
)

HELP_PLACEHOLDERS = (
    "`{name}` display name of the member\n"
    "`{mention}` @mention of the member (join only)\n"
    "`{user_avatar}` avatar url; works in the `_url` image options\n"
    "`{member_count}` current member count of the server\n"
    "`{online_member_count}` current number of online members\n\n"
    "Slash commands cannot contain line breaks, type `\\n` instead."
)

HELP_EXAMPLES = (
    "`/notify-member full event:join content:Welcome, {mention}! "
    "description:**{name}** has joined footer:Member count: {member_count}`\n"
    "`/notify-member description event:leave` clears the leave description\n"
    "`/notify-member channel event:join channel:#welcome`"
)


def _event_option():
    return discord.Option(
        str,
        "Which notification to change",
        choices=[EventType.JOIN.value, EventType.LEAVE.value],
    )


def _text_option(description: str):
    return discord.Option(str, description, required=False, default=None)


def _file_option(description: str):
    return discord.Option(discord.Attachment, description, required=False, default=None)


def _upload(file: discord.Attachment | None) -> Upload | None:
    return Upload.from_attachment(file) if file else None


async def _require_guild(ctx: discord.ApplicationContext) -> bool:
    if ctx.guild is None:
        await ctx.followup.send("❌ This command only works in a server.", ephemeral=True)
        return False
    return True


class NotificationsCog(commands.Cog):
    def __init__(self, bot, configurator: NotificationConfigurator | None = None):
        self.bot = bot
        self.configurator = configurator or build_configurator()

    notify_group = discord.SlashCommandGroup(
        "notify-member",
        "Configure member join and leave notifications.",
        default_member_permissions=discord.Permissions(administrator=True),
    )

    async def _configure(
        self,
        ctx: discord.ApplicationContext,
        event: str,
        request: NotificationRequest,
    ):
        """Runs a configuration request and replies with the outcome and a preview."""
        await ctx.defer(ephemeral=True)
        if not await _require_guild(ctx):
            return

        event_type = EventType(event)
        guild_id = ctx.guild.id
        author = ctx.author

        async def preview_context() -> RenderContext:
            counts = await fetch_member_counts(self.bot, guild_id)
            return RenderContext.for_user(author, event_type, counts)

        try:
            result = await self.configurator.configure(
                guild_id, event_type, request, preview_context
            )
        except MediaUnavailable as e:
            log.warning(f"Guild {guild_id} {event_type.value} notification: {e}")
            await ctx.followup.send(
                "❌ The attached file could not be downloaded. Nothing was changed.",
                ephemeral=True,
            )
            return
        except FileSystemError as e:
            log.error(f"Guild {guild_id} {event_type.value} notification: {e}", exc_info=e)
            await ctx.followup.send(
                "❌ The attached file could not be saved. Nothing was changed.",
                ephemeral=True,
            )
            return
        except StoreFailure as e:
            log.error(
                f"Failed to update {event_type.value} notification for guild {guild_id}",
                exc_info=e,
            )
            await ctx.followup.send(
                "❌ An error occurred while saving to the database.", ephemeral=True
            )
            return

        await self._send_result(ctx, event_type, result)

    async def _send_result(
        self,
        ctx: discord.ApplicationContext,
        event_type: EventType,
        result: ConfigureResult,
    ):
        saved = f"✅ Successfully configured the {event_type.value} notification."

        if result.preview is None:
            await ctx.followup.send(
                f"{saved} A preview could not be generated.", ephemeral=True
            )
            return

        if result.preview.is_empty():
            await ctx.followup.send(
                f"{saved} The message is empty, so nothing will be posted.",
                ephemeral=True,
            )
            return

        await ctx.followup.send(
            f"{saved} Below is a sample of the new format:", ephemeral=True
        )
        try:
            await ctx.followup.send(ephemeral=True, **result.preview.send_kwargs())
        except discord.HTTPException as e:
            log.warning(
                f"Discord rejected the {event_type.value} preview for guild {ctx.guild.id}",
                exc_info=e,
            )
            await ctx.followup.send(
                "⚠️ Discord rejected the preview. Check that image urls are valid.",
                ephemeral=True,
            )

    @notify_group.command(name="full", description="Replace the whole notification format.")
    async def replace_full(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        content: _text_option("Plain-text content of the notification message"),
        title: _text_option("Embed title text"),
        description: _text_option("Embed description text"),
        thumbnail_file: _file_option("Embed thumbnail file upload"),
        thumbnail_url: _text_option("Embed thumbnail web url"),
        image_file: _file_option("Embed image file upload"),
        image_url: _text_option("Embed image web url"),
        author: _text_option("Embed author text"),
        author_icon_file: _file_option("Embed author icon file upload"),
        author_icon_url: _text_option("Embed author icon web url"),
        footer: _text_option("Embed footer text"),
        footer_icon_file: _file_option("Embed footer icon file upload"),
        footer_icon_url: _text_option("Embed footer icon web url"),
    ):
        request = NotificationRequest.full(
            content=content,
            title=title,
            description=description,
            thumbnail_file=_upload(thumbnail_file),
            thumbnail_url=thumbnail_url,
            image_file=_upload(image_file),
            image_url=image_url,
            author=author,
            author_icon_file=_upload(author_icon_file),
            author_icon_url=author_icon_url,
            footer=footer,
            footer_icon_file=_upload(footer_icon_file),
            footer_icon_url=footer_icon_url,
        )
        await self._configure(ctx, event, request)

    @notify_group.command(name="content", description="Set the plain-text content.")
    async def set_content(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        content: _text_option("Plain-text content of the notification message"),
    ):
        await self._configure(ctx, event, NotificationRequest().with_content(content))

    @notify_group.command(name="title", description="Set the embed title.")
    async def set_title(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        title: _text_option("Embed title text"),
    ):
        await self._configure(ctx, event, NotificationRequest().with_title(title))

    @notify_group.command(name="description", description="Set the embed description.")
    async def set_description(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        description: _text_option("Embed description text"),
    ):
        await self._configure(
            ctx, event, NotificationRequest().with_description(description)
        )

    @notify_group.command(name="author", description="Set the embed author text.")
    async def set_author(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        author: _text_option("Embed author text"),
    ):
        await self._configure(ctx, event, NotificationRequest().with_author(author))

    @notify_group.command(name="footer", description="Set the embed footer text.")
    async def set_footer(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        footer: _text_option("Embed footer text"),
    ):
        await self._configure(ctx, event, NotificationRequest().with_footer(footer))

    @notify_group.command(name="thumbnail", description="Set the embed thumbnail.")
    async def set_thumbnail(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        thumbnail_file: _file_option("Embed thumbnail file upload"),
        thumbnail_url: _text_option("Embed thumbnail web url"),
    ):
        await self._configure(
            ctx,
            event,
            NotificationRequest().with_thumbnail(_upload(thumbnail_file), thumbnail_url),
        )

    @notify_group.command(name="image", description="Set the embed image.")
    async def set_image(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        image_file: _file_option("Embed image file upload"),
        image_url: _text_option("Embed image web url"),
    ):
        await self._configure(
            ctx, event, NotificationRequest().with_image(_upload(image_file), image_url)
        )

    @notify_group.command(name="author-icon", description="Set the embed author icon.")
    async def set_author_icon(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        author_icon_file: _file_option("Embed author icon file upload"),
        author_icon_url: _text_option("Embed author icon web url"),
    ):
        await self._configure(
            ctx,
            event,
            NotificationRequest().with_author_icon(_upload(author_icon_file), author_icon_url),
        )

    @notify_group.command(name="footer-icon", description="Set the embed footer icon.")
    async def set_footer_icon(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        footer_icon_file: _file_option("Embed footer icon file upload"),
        footer_icon_url: _text_option("Embed footer icon web url"),
    ):
        await self._configure(
            ctx,
            event,
            NotificationRequest().with_footer_icon(_upload(footer_icon_file), footer_icon_url),
        )

    @notify_group.command(
        name="channel", description="Set the channel a notification is posted in."
    )
    async def set_channel(
        self,
        ctx: discord.ApplicationContext,
        event: _event_option(),
        channel: discord.Option(
            discord.TextChannel,
            "Leave empty to stop posting this notification",
            required=False,
            default=None,
        ),
    ):
        await ctx.defer(ephemeral=True)
        if not await _require_guild(ctx):
            return
        event_type = EventType(event)
        guild_id = ctx.guild.id
        try:
            await self.configurator.store.set_channel(
                guild_id, event_type, channel.id if channel else None
            )
        except StoreFailure as e:
            log.error(f"Failed to update {event_type.value} channel for guild {guild_id}", exc_info=e)
            await ctx.followup.send(
                "❌ An error occurred while saving to the database.", ephemeral=True
            )
            return

        if channel:
            message = f"The **{event_type.value}** notification will be posted in {channel.mention}."
        else:
            message = f"The **{event_type.value}** notification will no longer be posted."
        embed = discord.Embed(
            title="Configuration Updated ✅", description=message, color=BrandColors.SUCCESS
        )
        await ctx.followup.send(embed=embed, ephemeral=True)
        log.info(
            f"Guild {guild_id} updated {event_type.value} channel = "
            f"{channel.id if channel else None}"
        )

    @notify_group.command(name="remove", description="Delete a notification format.")
    async def remove_notification(self, ctx: discord.ApplicationContext, event: _event_option()):
        await ctx.defer(ephemeral=True)
        if not await _require_guild(ctx):
            return
        event_type = EventType(event)
        try:
            removed = await self.configurator.remove(ctx.guild.id, event_type)
        except StoreFailure as e:
            log.error(
                f"Failed to remove {event_type.value} notification for guild {ctx.guild.id}",
                exc_info=e,
            )
            await ctx.followup.send(
                "❌ An error occurred while saving to the database.", ephemeral=True
            )
            return

        if removed:
            await ctx.followup.send(
                f"✅ Removed the {event_type.value} notification.", ephemeral=True
            )
        else:
            await ctx.followup.send(
                f"There is no {event_type.value} notification configured.", ephemeral=True
            )

    @notify_group.command(name="help", description="Show how /notify-member works.")
    async def show_help(self, ctx: discord.ApplicationContext):
        embed = discord.Embed(
            title="Help for /notify-member",
            description=HELP_DESCRIPTION,
            color=BrandColors.HELP,
        )
        embed.add_field(name="**Images**", value=HELP_IMAGES, inline=False)
        embed.add_field(name="**Placeholders**", value=HELP_PLACEHOLDERS, inline=False)
        embed.add_field(name="**Examples**", value=HELP_EXAMPLES, inline=False)
        await ctx.respond(embed=embed, ephemeral=True)


def setup(bot):
    bot.add_cog(NotificationsCog(bot))
