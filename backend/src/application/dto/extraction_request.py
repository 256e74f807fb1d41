"""DTO for frame extraction requests."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ExtractionRequest:
    video: Any  # uploaded file: filename, size, content_type, async read()
    mount_id: str
    sub_folder: Optional[str] = None

    @property
    def filename(self) -> str:
        return getattr(self.video, "filename", None) or ""

    @property
    def content_type(self) -> str:
        return getattr(self.video, "content_type", None) or ""

    @property
    def declared_size(self) -> Optional[int]:
        return getattr(self.video, "size", None)
