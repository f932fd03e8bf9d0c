# imposterbot/core/notifications/types.py
"""
Value types shared by the member notification components.

A notification is configured per (guild, event type). Text fields use ``""``
for "not set", media fields use ``None``.
"""

import pathlib
from dataclasses import dataclass
from enum import Enum

from imposterbot.core.constants import MediaConfig


class EventType(str, Enum):
    JOIN = "join"
    LEAVE = "leave"


@dataclass(frozen=True)
class UrlMedia:
    """Media hosted somewhere on the web."""

    url: str


@dataclass(frozen=True)
class LocalFile:
    """Media downloaded into the guild's user content directory."""

    filename: str


MediaRef = UrlMedia | LocalFile


@dataclass(frozen=True)
class Upload:
    """A file an administrator attached to a command, not yet downloaded."""

    filename: str
    url: str

    @classmethod
    def from_attachment(cls, attachment) -> "Upload":
        return cls(filename=attachment.filename, url=attachment.url)


TEXT_FIELDS = ("content", "title", "description", "author", "footer")
MEDIA_FIELDS = ("thumbnail", "image", "author_icon", "footer_icon")


@dataclass(frozen=True)
class NotificationConfig:
    guild_id: int
    event_type: EventType
    content: str = ""
    title: str = ""
    description: str = ""
    author: str = ""
    footer: str = ""
    thumbnail: MediaRef | None = None
    image: MediaRef | None = None
    author_icon: MediaRef | None = None
    footer_icon: MediaRef | None = None

    @classmethod
    def default(cls, guild_id: int, event_type: EventType) -> "NotificationConfig":
        return cls(guild_id=guild_id, event_type=event_type)

    def local_files(self) -> list[str]:
        """Filenames of every locally stored file this record references."""
        return [
            value.filename
            for name in MEDIA_FIELDS
            if isinstance(value := getattr(self, name), LocalFile)
        ]

    def is_empty(self) -> bool:
        return all(getattr(self, name) in ("", None) for name in TEXT_FIELDS + MEDIA_FIELDS)


def user_content_directory(root: pathlib.Path, guild_id: int) -> pathlib.Path:
    """<root>/user_content/<guild_id>"""
    return pathlib.Path(root) / MediaConfig.USER_CONTENT_DIRNAME / str(guild_id)
