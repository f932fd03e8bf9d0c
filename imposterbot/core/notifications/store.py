# imposterbot/core/notifications/store.py

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from imposterbot.core.models import MemberNotificationChannel, MemberNotificationMessage
from imposterbot.core.notifications.errors import StoreFailure
from imposterbot.core.notifications.types import (
    MEDIA_FIELDS,
    TEXT_FIELDS,
    EventType,
    LocalFile,
    MediaRef,
    NotificationConfig,
    UrlMedia,
)

log = logging.getLogger(__name__)


def _media_from_columns(is_file: bool, url: str) -> MediaRef | None:
    if not url:
        return None
    return LocalFile(url) if is_file else UrlMedia(url)


def _media_to_columns(ref: MediaRef | None) -> tuple[bool, str]:
    if isinstance(ref, LocalFile):
        return True, ref.filename
    if isinstance(ref, UrlMedia):
        return False, ref.url
    return False, ""


def row_to_config(row: MemberNotificationMessage) -> NotificationConfig:
    values = {name: getattr(row, name) or "" for name in TEXT_FIELDS}
    for name in MEDIA_FIELDS:
        values[name] = _media_from_columns(
            getattr(row, f"{name}_is_file"), getattr(row, f"{name}_url")
        )
    return NotificationConfig(
        guild_id=row.guild_id, event_type=EventType(row.event_type), **values
    )


def config_to_row(config: NotificationConfig) -> MemberNotificationMessage:
    row = MemberNotificationMessage(
        guild_id=config.guild_id, event_type=config.event_type.value
    )
    for name in TEXT_FIELDS:
        setattr(row, name, getattr(config, name))
    for name in MEDIA_FIELDS:
        is_file, url = _media_to_columns(getattr(config, name))
        setattr(row, f"{name}_is_file", is_file)
        setattr(row, f"{name}_url", url)
    return row


class NotificationStore:
    """
    One notification record per (guild, event type), plus the channel each
    notification is posted to.

    ``session_factory`` is an async context manager factory such as
    ``imposterbot.core.db.get_session``.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def find(
        self, guild_id: int, event_type: EventType
    ) -> NotificationConfig | None:
        try:
            async with self.session_factory() as db:
                row = await db.get(
                    MemberNotificationMessage, (guild_id, event_type.value)
                )
                return row_to_config(row) if row else None
        except SQLAlchemyError as e:
            raise StoreFailure(
                f"Could not load {event_type.value} notification for guild {guild_id}"
            ) from e

    async def find_or_default(
        self, guild_id: int, event_type: EventType
    ) -> NotificationConfig:
        existing = await self.find(guild_id, event_type)
        return existing or NotificationConfig.default(guild_id, event_type)

    async def upsert(self, config: NotificationConfig) -> None:
        # merge() inserts or replaces the row by primary key in one transaction,
        # so repeating the same upsert leaves the same row behind.
        try:
            async with self.session_factory() as db:
                await db.merge(config_to_row(config))
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreFailure(
                f"Could not save {config.event_type.value} notification "
                f"for guild {config.guild_id}"
            ) from e
        log.debug("Upserted %s notification for guild %s", config.event_type.value, config.guild_id)

    async def delete(self, guild_id: int, event_type: EventType) -> bool:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    delete(MemberNotificationMessage)
                    .where(MemberNotificationMessage.guild_id == guild_id)
                    .where(MemberNotificationMessage.event_type == event_type.value)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreFailure(
                f"Could not delete {event_type.value} notification for guild {guild_id}"
            ) from e
        return result.rowcount > 0

    async def get_channel(self, guild_id: int, event_type: EventType) -> int | None:
        try:
            async with self.session_factory() as db:
                return (
                    await db.execute(
                        select(MemberNotificationChannel.channel_id)
                        .where(MemberNotificationChannel.guild_id == guild_id)
                        .where(MemberNotificationChannel.event_type == event_type.value)
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreFailure(
                f"Could not load {event_type.value} channel for guild {guild_id}"
            ) from e

    async def set_channel(
        self, guild_id: int, event_type: EventType, channel_id: int | None
    ) -> None:
        """Points a notification at a channel; ``None`` stops sending it."""
        try:
            async with self.session_factory() as db:
                if channel_id is None:
                    await db.execute(
                        delete(MemberNotificationChannel)
                        .where(MemberNotificationChannel.guild_id == guild_id)
                        .where(MemberNotificationChannel.event_type == event_type.value)
                    )
                else:
                    await db.merge(
                        MemberNotificationChannel(
                            guild_id=guild_id,
                            event_type=event_type.value,
                            channel_id=channel_id,
                        )
                    )
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreFailure(
                f"Could not save {event_type.value} channel for guild {guild_id}"
            ) from e
