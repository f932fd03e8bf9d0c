# imposterbot/core/notifications/errors.py


class NotificationError(Exception):
    """Base class for failures while configuring or rendering member notifications."""


class MediaUnavailable(NotificationError):
    """An uploaded file could not be fetched (network error or non-success status)."""


class FileSystemError(NotificationError):
    """A user content directory or file could not be created or written."""


class StoreFailure(NotificationError):
    """The database rejected a read or write of a notification record."""


class PreviewFailure(NotificationError):
    """The configuration was saved but a preview could not be rendered."""
