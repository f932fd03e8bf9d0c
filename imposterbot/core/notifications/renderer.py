# imposterbot/core/notifications/renderer.py

import asyncio
import io
import logging
import pathlib
from dataclasses import dataclass, field

import discord

from imposterbot.core.constants import BrandColors, MediaConfig, PlaceholderConfig
from imposterbot.core.notifications.types import (
    EventType,
    LocalFile,
    NotificationConfig,
    UrlMedia,
    user_content_directory,
)

log = logging.getLogger(__name__)


class _Placeholders(dict):
    # Unknown placeholders are written back out untouched.
    def __missing__(self, key):
        return "{" + key + "}"


def substitute(template: str, values: dict[str, str]) -> str:
    """
    Replaces ``{placeholder}`` tokens in a stored template.
    Templates the formatter cannot parse (stray braces, ``{0}``) come back verbatim.
    """
    if not template:
        return template
    try:
        return template.format_map(_Placeholders(values))
    except (ValueError, IndexError, KeyError, AttributeError, TypeError) as e:
        log.debug("Leaving template unexpanded (%s): %r", e, template)
        return template


@dataclass(frozen=True)
class RenderContext:
    event_type: EventType
    name: str
    mention: str
    avatar_url: str
    member_count: int | None = None
    online_member_count: int | None = None

    @classmethod
    def for_user(
        cls,
        user: discord.abc.User,
        event_type: EventType,
        counts: tuple[int | None, int | None] = (None, None),
    ) -> "RenderContext":
        member_count, online_member_count = counts
        return cls(
            event_type=event_type,
            name=user.display_name,
            mention=user.mention,
            avatar_url=user.display_avatar.url,
            member_count=member_count,
            online_member_count=online_member_count,
        )

    def placeholders(self) -> dict[str, str]:
        values = {
            PlaceholderConfig.NAME: self.name,
            PlaceholderConfig.USER_AVATAR: self.avatar_url,
        }
        # A member who left can no longer be pinged.
        if self.event_type is EventType.JOIN:
            values[PlaceholderConfig.MENTION] = self.mention
        if self.member_count is not None:
            values[PlaceholderConfig.MEMBER_COUNT] = str(self.member_count)
        if self.online_member_count is not None:
            values[PlaceholderConfig.ONLINE_MEMBER_COUNT] = str(self.online_member_count)
        return values


@dataclass
class RenderedMessage:
    content: str | None
    embed: discord.Embed | None
    files: list[discord.File] = field(default_factory=list)
    # Rendered text in display order: content, title, description, author, footer.
    sections: list[tuple[str, str]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.content and self.embed is None

    def send_kwargs(self) -> dict:
        kwargs = {}
        if self.content:
            kwargs["content"] = self.content
        if self.embed is not None:
            kwargs["embed"] = self.embed
        if self.files:
            kwargs["files"] = self.files
        return kwargs


class NotificationRenderer:
    def __init__(self, content_root: pathlib.Path):
        self.content_root = pathlib.Path(content_root)

    async def render(
        self, config: NotificationConfig, context: RenderContext
    ) -> RenderedMessage:
        values = context.placeholders()
        files: list[discord.File] = []

        content = substitute(config.content, values)
        title = substitute(config.title, values)
        description = substitute(config.description, values)
        author = substitute(config.author, values)
        footer = substitute(config.footer, values)

        sections = [
            (name, text)
            for name, text in (
                ("content", content),
                ("title", title),
                ("description", description),
                ("author", author),
                ("footer", footer),
            )
            if text
        ]

        color = BrandColors.JOIN if config.event_type is EventType.JOIN else BrandColors.LEAVE
        embed = discord.Embed(title=title or None, description=description or None, color=color)
        has_embed = bool(title or description)

        thumbnail = await self._media_url(config, "thumbnail", values, files)
        if thumbnail:
            embed.set_thumbnail(url=thumbnail)
            has_embed = True

        image = await self._media_url(config, "image", values, files)
        if image:
            embed.set_image(url=image)
            has_embed = True

        # Discord drops an author or footer icon that has no text next to it.
        if author:
            icon = await self._media_url(config, "author_icon", values, files)
            embed.set_author(name=author, icon_url=icon)
            has_embed = True

        if footer:
            icon = await self._media_url(config, "footer_icon", values, files)
            embed.set_footer(text=footer, icon_url=icon)
            has_embed = True

        return RenderedMessage(
            content=content or None,
            embed=embed if has_embed else None,
            files=files,
            sections=sections,
        )

    async def _media_url(
        self,
        config: NotificationConfig,
        name: str,
        values: dict[str, str],
        files: list[discord.File],
    ) -> str | None:
        ref = getattr(config, name)
        if isinstance(ref, UrlMedia):
            return substitute(ref.url, values) or None
        if not isinstance(ref, LocalFile):
            return None

        path = user_content_directory(self.content_root, config.guild_id) / ref.filename
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            log.warning(
                "Skipping %s of %s notification for guild %s, cannot read %s: %s",
                name,
                config.event_type.value,
                config.guild_id,
                path,
                e,
            )
            return None

        files.append(discord.File(io.BytesIO(data), filename=ref.filename))
        return f"{MediaConfig.ATTACHMENT_URL_PREFIX}{ref.filename}"
