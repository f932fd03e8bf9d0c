# imposterbot/core/notifications/request.py
"""
Partial updates to a notification format.

Every field of a request is a ``TriState``: leave it alone, reset it to its
empty default, or replace it. Command handlers build requests through the
``with_*`` methods, one per field.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, TypeVar

from imposterbot.core.notifications.types import MediaRef, Upload, UrlMedia

T = TypeVar("T")


class _Action(Enum):
    UNSET = "unset"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True)
class TriState(Generic[T]):
    action: _Action = _Action.UNSET
    value: T | None = None

    @classmethod
    def unset(cls) -> "TriState[T]":
        return cls(_Action.UNSET)

    @classmethod
    def clear(cls) -> "TriState[T]":
        return cls(_Action.CLEAR)

    @classmethod
    def set(cls, value: T) -> "TriState[T]":
        return cls(_Action.SET, value)

    @classmethod
    def from_optional(cls, value: T | None) -> "TriState[T]":
        """A supplied value replaces the field, a missing one clears it."""
        return cls.clear() if value is None else cls.set(value)

    @property
    def is_unset(self) -> bool:
        return self.action is _Action.UNSET

    @property
    def is_clear(self) -> bool:
        return self.action is _Action.CLEAR

    @property
    def is_set(self) -> bool:
        return self.action is _Action.SET

    def apply(self, existing: T, default: T) -> T:
        if self.action is _Action.SET:
            return self.value
        if self.action is _Action.CLEAR:
            return default
        return existing

    def map(self, fn) -> "TriState":
        return TriState.set(fn(self.value)) if self.is_set else self


MediaSource = MediaRef | Upload


def media_source(file: Upload | None, url: str | None) -> MediaSource | None:
    # An upload wins over a url when both were given.
    if file is not None:
        return file
    if url:
        return UrlMedia(url)
    return None


@dataclass(frozen=True)
class NotificationRequest:
    content: TriState[str] = TriState()
    title: TriState[str] = TriState()
    description: TriState[str] = TriState()
    author: TriState[str] = TriState()
    footer: TriState[str] = TriState()
    thumbnail: TriState[MediaSource] = TriState()
    image: TriState[MediaSource] = TriState()
    author_icon: TriState[MediaSource] = TriState()
    footer_icon: TriState[MediaSource] = TriState()

    @classmethod
    def full(
        cls,
        content: str | None = None,
        title: str | None = None,
        description: str | None = None,
        thumbnail_file: Upload | None = None,
        thumbnail_url: str | None = None,
        image_file: Upload | None = None,
        image_url: str | None = None,
        author: str | None = None,
        author_icon_file: Upload | None = None,
        author_icon_url: str | None = None,
        footer: str | None = None,
        footer_icon_file: Upload | None = None,
        footer_icon_url: str | None = None,
    ) -> "NotificationRequest":
        """Replaces the whole format; anything not supplied is cleared."""
        return (
            cls()
            .with_content(content)
            .with_title(title)
            .with_description(description)
            .with_thumbnail(thumbnail_file, thumbnail_url)
            .with_image(image_file, image_url)
            .with_author(author)
            .with_author_icon(author_icon_file, author_icon_url)
            .with_footer(footer)
            .with_footer_icon(footer_icon_file, footer_icon_url)
        )

    def with_content(self, value: str | None) -> "NotificationRequest":
        return replace(self, content=TriState.from_optional(value))

    def with_title(self, value: str | None) -> "NotificationRequest":
        return replace(self, title=TriState.from_optional(value))

    def with_description(self, value: str | None) -> "NotificationRequest":
        return replace(self, description=TriState.from_optional(value))

    def with_author(self, value: str | None) -> "NotificationRequest":
        return replace(self, author=TriState.from_optional(value))

    def with_footer(self, value: str | None) -> "NotificationRequest":
        return replace(self, footer=TriState.from_optional(value))

    def with_thumbnail(self, file: Upload | None, url: str | None = None) -> "NotificationRequest":
        return replace(self, thumbnail=TriState.from_optional(media_source(file, url)))

    def with_image(self, file: Upload | None, url: str | None = None) -> "NotificationRequest":
        return replace(self, image=TriState.from_optional(media_source(file, url)))

    def with_author_icon(self, file: Upload | None, url: str | None = None) -> "NotificationRequest":
        return replace(self, author_icon=TriState.from_optional(media_source(file, url)))

    def with_footer_icon(self, file: Upload | None, url: str | None = None) -> "NotificationRequest":
        return replace(self, footer_icon=TriState.from_optional(media_source(file, url)))
