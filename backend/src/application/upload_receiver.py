"""
Upload receiving: validates the multipart fields of an extraction request
and persists the video payload into staging under a unique name.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from backend.src.application.dto.extraction_request import ExtractionRequest
from backend.src.core.entities.staged_upload import StagedUpload
from backend.src.core.exceptions import (
    MissingFileError,
    MissingMountPointError,
    PayloadTooLargeError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_EXTENSIONS = (".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v")

# Room for multipart boundaries, part headers and the text fields
MULTIPART_OVERHEAD_BYTES = 64 * 1024

_SAFE_EXTENSION = re.compile(r"[^A-Za-z0-9]")


def staging_filename(unique_tag: str, original_name: str) -> str:
    """``video_<tag>.<ext>``, keeping only alphanumerics of the original extension."""
    ext = _SAFE_EXTENSION.sub("", Path(original_name).suffix).lower()
    return f"video_{unique_tag}.{ext}" if ext else f"video_{unique_tag}"


class UploadReceiver:
    """Turns an incoming form into an :class:`ExtractionRequest` and stages its video."""

    def __init__(
        self,
        staging,  # UploadStagingPort
        max_upload_size_mb: int = 100,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
    ) -> None:
        self._staging = staging
        self._max_upload_size_mb = max_upload_size_mb
        self._allowed_extensions = {e.lower() if e.startswith(".") else f".{e.lower()}" for e in allowed_extensions}

    @property
    def max_bytes(self) -> int:
        return self._max_upload_size_mb * 1024 * 1024

    def check_declared_length(self, content_length: str | None) -> None:
        """Reject a request whose declared body cannot fit a video within the limit.

        The exact limit is enforced on the file part by :meth:`validate` and
        while staging.
        """
        if (
            content_length
            and content_length.isdigit()
            and int(content_length) > self.max_bytes + MULTIPART_OVERHEAD_BYTES
        ):
            raise PayloadTooLargeError(self._max_upload_size_mb)

    def parse(self, form: Mapping[str, Any]) -> ExtractionRequest:
        """Validate the ``video``, ``mountPoint`` and ``subFolder`` fields."""
        video = form.get("video")
        if video is None or isinstance(video, str) or not hasattr(video, "read"):
            raise MissingFileError()

        mount_point = form.get("mountPoint")
        if not isinstance(mount_point, str) or not mount_point.strip():
            raise MissingMountPointError()

        sub_folder = form.get("subFolder")
        if not isinstance(sub_folder, str) or not sub_folder.strip():
            sub_folder = None

        return ExtractionRequest(video=video, mount_id=mount_point.strip(), sub_folder=sub_folder)

    def validate(self, request: ExtractionRequest) -> None:
        declared = request.declared_size
        if declared is not None and declared > self.max_bytes:
            raise PayloadTooLargeError(self._max_upload_size_mb)

        ext = Path(request.filename).suffix.lower()
        if ext not in self._allowed_extensions and not request.content_type.startswith("video/"):
            raise UnsupportedFileTypeError(
                f"Unsupported file type '{ext or request.content_type or 'unknown'}'. "
                f"Allowed: {', '.join(sorted(self._allowed_extensions))}"
            )

    async def receive(self, request: ExtractionRequest, unique_tag: str) -> StagedUpload:
        """Validate and stage the request's video. Nothing is written on validation failure."""
        self.validate(request)
        filename = staging_filename(unique_tag, request.filename)
        staged = await self._staging.save_stream(request.video, filename, unique_tag, self.max_bytes)
        logger.info(
            "Received %s (%d bytes) as %s",
            request.filename or "<unnamed>", staged.size_bytes, staged.path.name,
        )
        return staged
