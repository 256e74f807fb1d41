"""OutputLocation value object: a sandboxed directory frames are written into."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputLocation:
    """Resolved, writable output directory inside an allow-listed mount."""

    resolved_directory: Path
    mount_id: str
    sub_folder: str

    @property
    def display_path(self) -> str:
        """Mount-relative path reported to clients instead of the local layout."""
        return f"{self.mount_id}/{self.sub_folder}"
