# imposterbot/core/notifications/configurator.py
"""
Runs one notification configuration command from start to finish:

    load -> download uploads -> merge -> save -> delete orphans -> preview

Nothing is saved if a download or the save itself fails, and files downloaded
for the command are removed again. Once the save succeeds the change stands;
orphan cleanup and the preview can only fail quietly.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from imposterbot.core.notifications.errors import PreviewFailure, StoreFailure
from imposterbot.core.notifications.merger import merge
from imposterbot.core.notifications.renderer import (
    NotificationRenderer,
    RenderContext,
    RenderedMessage,
)
from imposterbot.core.notifications.request import NotificationRequest
from imposterbot.core.notifications.resolver import AttachmentResolver
from imposterbot.core.notifications.store import NotificationStore
from imposterbot.core.notifications.types import EventType, NotificationConfig

log = logging.getLogger(__name__)

PreviewContextFactory = Callable[[], Awaitable[RenderContext]]


@dataclass
class ConfigureResult:
    config: NotificationConfig
    preview: RenderedMessage | None = None
    preview_error: PreviewFailure | None = None


class NotificationConfigurator:
    def __init__(
        self,
        store: NotificationStore,
        resolver: AttachmentResolver,
        renderer: NotificationRenderer,
    ):
        self.store = store
        self.resolver = resolver
        self.renderer = renderer

    async def configure(
        self,
        guild_id: int,
        event_type: EventType,
        request: NotificationRequest,
        preview_context: PreviewContextFactory,
    ) -> ConfigureResult:
        """
        Applies ``request`` to the guild's notification for ``event_type``.

        Raises MediaUnavailable, FileSystemError or StoreFailure if nothing was
        saved. ``preview_context`` is awaited only after the save, to build the
        sample identity the preview is rendered with.
        """
        existing = await self.store.find_or_default(guild_id, event_type)

        files_added: list[str] = []
        resolved = await self.resolver.resolve_request(request, guild_id, files_added)

        result = merge(existing, resolved)

        try:
            await self.store.upsert(result.config)
        except StoreFailure:
            log.error(
                "Saving %s notification for guild %s failed, removing %d new file(s)",
                event_type.value,
                guild_id,
                len(files_added),
            )
            await self.resolver.discard(guild_id, files_added)
            raise

        log.info("Saved %s notification for guild %s", event_type.value, guild_id)

        if result.orphaned_files:
            removed = await self.resolver.discard(guild_id, result.orphaned_files)
            log.info(
                "Removed %d of %d replaced file(s) for guild %s",
                removed,
                len(result.orphaned_files),
                guild_id,
            )

        return await self._preview(guild_id, event_type, result.config, preview_context)

    async def remove(self, guild_id: int, event_type: EventType) -> bool:
        """Deletes the notification and the files it owned. Returns False if there was none."""
        existing = await self.store.find(guild_id, event_type)
        if existing is None:
            return False
        await self.store.delete(guild_id, event_type)
        await self.resolver.discard(guild_id, existing.local_files())
        log.info("Removed %s notification for guild %s", event_type.value, guild_id)
        return True

    async def _preview(
        self,
        guild_id: int,
        event_type: EventType,
        saved: NotificationConfig,
        preview_context: PreviewContextFactory,
    ) -> ConfigureResult:
        try:
            current = await self.store.find(guild_id, event_type) or saved
            context = await preview_context()
            preview = await self.renderer.render(current, context)
        except Exception as e:
            log.warning(
                "Preview of %s notification for guild %s failed",
                event_type.value,
                guild_id,
                exc_info=e,
            )
            failure = PreviewFailure(f"Could not render a preview: {e}")
            failure.__cause__ = e
            return ConfigureResult(config=saved, preview_error=failure)

        return ConfigureResult(config=current, preview=preview)
