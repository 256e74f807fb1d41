"""StagedUpload entity - an uploaded video persisted for the duration of one request."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StagedUpload:
    """Staged copy of the uploaded payload, exclusively owned by one request."""

    path: Path
    unique_tag: str
    original_filename: str = ""
    size_bytes: int = 0

    @property
    def partial_path(self) -> Path:
        """Temporary name used while the payload is still being written."""
        return self.path.with_name(self.path.name + ".part")
