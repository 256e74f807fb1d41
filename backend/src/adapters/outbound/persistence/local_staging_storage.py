"""Local filesystem implementation of UploadStagingPort."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

from backend.src.core.entities.staged_upload import StagedUpload
from backend.src.core.exceptions import (
    CleanupFailedError,
    PayloadTooLargeError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


class LocalStagingStorage:
    """Implements :class:`UploadStagingPort` using a local staging directory.

    Payloads are streamed to ``<name>.part`` and renamed into place once
    complete, so a staged file is never observed half-written.
    """

    def __init__(self, staging_dir: str | Path, chunk_size: int = CHUNK_SIZE) -> None:
        self._base = Path(staging_dir).resolve()
        self._chunk_size = chunk_size

    # -- helpers ---------------------------------------------------------------

    def ensure_ready(self) -> Path:
        """Create the staging directory if missing and return it."""
        try:
            self._base.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create staging directory %s: %s", self._base, exc)
            raise StorageUnavailableError("Upload staging area is not available") from exc
        return self._base

    @staticmethod
    def _unlink_quietly(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    # -- UploadStagingPort implementation --------------------------------------

    async def save_stream(
        self, source: Any, filename: str, unique_tag: str, max_bytes: int
    ) -> StagedUpload:
        """Copy *source* (anything with an async ``read(size)``) into staging.

        Raises:
            PayloadTooLargeError: more than *max_bytes* were received.
            StorageUnavailableError: the staging file could not be written.
        """
        base = self.ensure_ready()
        staged = StagedUpload(path=base / filename, unique_tag=unique_tag)
        partial = staged.partial_path
        loop = asyncio.get_running_loop()

        try:
            handle = await loop.run_in_executor(None, open, partial, "xb")
        except OSError as exc:
            logger.error("Cannot create staging file %s: %s", partial.name, exc)
            raise StorageUnavailableError("Could not store uploaded video") from exc

        total_written = 0
        renamed = False
        try:
            try:
                while True:
                    chunk = await source.read(self._chunk_size)
                    if not chunk:
                        break
                    total_written += len(chunk)
                    if total_written > max_bytes:
                        raise PayloadTooLargeError(max_bytes // (1024 * 1024))
                    await loop.run_in_executor(None, handle.write, chunk)
            finally:
                await loop.run_in_executor(None, handle.close)
            await loop.run_in_executor(None, os.replace, partial, staged.path)
            renamed = True
        except OSError as exc:
            logger.error("Failed to stage upload %s: %s", filename, exc)
            raise StorageUnavailableError("Could not store uploaded video") from exc
        finally:
            if not renamed:
                # Synchronous so it still runs when the task is being cancelled.
                try:
                    self._unlink_quietly(partial)
                except OSError as exc:
                    logger.warning("Failed to remove partial upload %s: %s", partial.name, exc)

        logger.debug("Staged upload %s (%d bytes)", staged.path.name, total_written)
        return StagedUpload(
            path=staged.path,
            unique_tag=unique_tag,
            original_filename=getattr(source, "filename", None) or "",
            size_bytes=total_written,
        )

    async def discard(self, staged: StagedUpload) -> None:
        """Best-effort removal of a staged upload. Never raises."""
        loop = asyncio.get_running_loop()
        for target in (staged.path, staged.partial_path):
            try:
                await loop.run_in_executor(None, self._unlink_quietly, target)
            except OSError as exc:
                failure = CleanupFailedError(f"Failed to clean up uploaded file {target.name}")
                logger.warning("%s: %s", failure, exc)
            else:
                logger.debug("Removed staged file %s", target.name)
