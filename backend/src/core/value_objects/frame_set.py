"""FrameSet value object: the frames one request produced."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FrameSet:
    """Lexically sorted frame filenames sharing a request's unique tag."""

    files: tuple[str, ...]
    unique_tag: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(sorted(self.files)))

    @property
    def frame_count(self) -> int:
        return len(self.files)

    @property
    def is_empty(self) -> bool:
        return not self.files
