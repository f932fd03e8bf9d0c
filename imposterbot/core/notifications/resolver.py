# imposterbot/core/notifications/resolver.py

import asyncio
import logging
import pathlib
import uuid
from dataclasses import replace

import aiohttp

from imposterbot.core.constants import BotConfig, MediaConfig
from imposterbot.core.notifications.errors import FileSystemError, MediaUnavailable
from imposterbot.core.notifications.request import MediaSource, NotificationRequest, TriState
from imposterbot.core.notifications.types import (
    MEDIA_FIELDS,
    LocalFile,
    MediaRef,
    Upload,
    user_content_directory,
)

log = logging.getLogger(__name__)


def random_filename(original: str) -> str:
    """A uuid4 name that keeps the upload's extension, e.g. ``3f2c....gif``."""
    return f"{uuid.uuid4().hex}{pathlib.PurePath(original).suffix}"


class AttachmentResolver:
    """
    Turns uploaded files into files stored under the guild's user content
    directory. Web urls pass straight through.

    Every file written during one configuration command is recorded in the
    caller's ``files_added`` list so that a failure on a later field can
    remove the files written for earlier ones.
    """

    def __init__(self, content_root: pathlib.Path, timeout_seconds: float = 30.0):
        self.content_root = pathlib.Path(content_root)
        self.timeout_seconds = timeout_seconds

    def guild_directory(self, guild_id: int) -> pathlib.Path:
        return user_content_directory(self.content_root, guild_id)

    async def resolve(
        self, source: MediaSource, guild_id: int, files_added: list[str]
    ) -> MediaRef:
        if not isinstance(source, Upload):
            return source

        partial: str | None = None
        try:
            directory = self.guild_directory(guild_id)
            log.debug("Ensuring user content directory exists: %s", directory)
            await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)

            filename = random_filename(source.filename)
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            headers = {"User-Agent": BotConfig.USER_AGENT}
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(source.url, headers=headers) as response:
                    if not 200 <= response.status < 300:
                        raise MediaUnavailable(
                            f"Downloading {source.filename} returned HTTP {response.status}"
                        )

                    # Exclusive create: a name collision is an error, never an overwrite.
                    fh = await asyncio.to_thread(open, directory / filename, "xb")
                    partial = filename
                    try:
                        async for chunk in response.content.iter_chunked(
                            MediaConfig.DOWNLOAD_CHUNK_BYTES
                        ):
                            await asyncio.to_thread(fh.write, chunk)
                    finally:
                        await asyncio.to_thread(fh.close)
        except MediaUnavailable as e:
            await self._rollback(guild_id, files_added, partial)
            log.warning("Attachment %s unavailable: %s", source.filename, e)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            await self._rollback(guild_id, files_added, partial)
            log.warning("Failed to download attachment %s: %s", source.filename, e)
            raise MediaUnavailable(f"Could not download {source.filename}") from e
        except OSError as e:
            await self._rollback(guild_id, files_added, partial)
            log.error("Failed to store attachment %s", source.filename, exc_info=e)
            raise FileSystemError(f"Could not save {source.filename}") from e

        files_added.append(filename)
        log.info("Stored attachment %s as %s for guild %s", source.filename, filename, guild_id)
        return LocalFile(filename)

    async def resolve_request(
        self, request: NotificationRequest, guild_id: int, files_added: list[str]
    ) -> NotificationRequest:
        """Downloads every uploaded file in the request, in field order."""
        resolved = {}
        for name in MEDIA_FIELDS:
            update: TriState = getattr(request, name)
            if update.is_set and isinstance(update.value, Upload):
                resolved[name] = TriState.set(
                    await self.resolve(update.value, guild_id, files_added)
                )
        return replace(request, **resolved)

    async def discard(self, guild_id: int, filenames: list[str]) -> int:
        """Best-effort removal of files from the guild directory. Returns how many were removed."""
        directory = self.guild_directory(guild_id)

        def _remove_batch(names: tuple[str, ...]) -> int:
            removed = 0
            for filename in names:
                try:
                    (directory / filename).unlink()
                    removed += 1
                except FileNotFoundError:
                    log.warning("User content file already gone: %s", directory / filename)
                except OSError as e:
                    log.error(
                        "User content file cannot be removed: %s (%s)", directory / filename, e
                    )
            return removed

        if not filenames:
            return 0
        return await asyncio.to_thread(_remove_batch, tuple(filenames))

    async def _rollback(self, guild_id: int, files_added: list[str], partial: str | None):
        if partial is not None:
            files_added.append(partial)
        if files_added:
            log.warning(
                "Rolling back %d file(s) written for guild %s", len(files_added), guild_id
            )
            await self.discard(guild_id, files_added)
            files_added.clear()
