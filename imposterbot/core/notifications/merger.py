# imposterbot/core/notifications/merger.py

from dataclasses import dataclass, field, replace

from imposterbot.core.notifications.request import NotificationRequest
from imposterbot.core.notifications.types import (
    MEDIA_FIELDS,
    TEXT_FIELDS,
    LocalFile,
    NotificationConfig,
    UrlMedia,
)

# Slash command options cannot contain line breaks, so users type "\n" instead.
ESCAPED_NEWLINE = "\\n"


@dataclass(frozen=True)
class MergeResult:
    config: NotificationConfig
    orphaned_files: list[str] = field(default_factory=list)


def unescape_newlines(text: str) -> str:
    return text.replace(ESCAPED_NEWLINE, "\n")


def merge(existing: NotificationConfig, request: NotificationRequest) -> MergeResult:
    """
    Applies a partial update to an existing (or default) record.

    Returns the updated record and the local files it no longer references.
    Media uploads must already be resolved to a ``LocalFile``.
    """
    changes = {}
    orphaned: list[str] = []

    for name in TEXT_FIELDS:
        update = getattr(request, name).map(unescape_newlines)
        changes[name] = update.apply(getattr(existing, name), "")

    for name in MEDIA_FIELDS:
        update = getattr(request, name)
        if update.is_set and not isinstance(update.value, (UrlMedia, LocalFile)):
            raise TypeError(f"{name} must be resolved before merging, got {update.value!r}")

        old = getattr(existing, name)
        new = update.apply(old, None)
        if isinstance(old, LocalFile) and new != old and old.filename not in orphaned:
            orphaned.append(old.filename)
        changes[name] = new

    return MergeResult(config=replace(existing, **changes), orphaned_files=orphaned)
