"""Port for temporary storage of uploaded videos."""
from __future__ import annotations
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from backend.src.core.entities.staged_upload import StagedUpload


@runtime_checkable
class UploadStagingPort(Protocol):
    async def save_stream(self, source: Any, filename: str, unique_tag: str, max_bytes: int) -> StagedUpload: ...
    async def discard(self, staged: StagedUpload) -> None: ...
    def ensure_ready(self) -> Path: ...
