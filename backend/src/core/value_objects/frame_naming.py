"""FrameNaming value object: how sampled frames are named on disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FrameNaming:
    """Filename scheme ``<prefix>_<tag>_<zero-padded index>.<format>``."""

    prefix: str = "frame"
    index_width: int = 4
    image_format: str = "png"

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ValueError("prefix must not be empty")
        if self.index_width < 1:
            raise ValueError(f"index_width must be positive, got {self.index_width}")
        object.__setattr__(self, "image_format", self.image_format.lstrip(".").lower())

    def file_prefix(self, unique_tag: str) -> str:
        # Trailing separator: tag "12" must never match files of tag "123".
        return f"{self.prefix}_{unique_tag}_"

    def pattern(self, directory: Path, unique_tag: str) -> str:
        """printf-style output pattern understood by the sampling engines.

        Literal ``%`` in the directory or prefix is doubled so the index
        placeholder stays the only directive.
        """
        literal = str(Path(directory) / self.file_prefix(unique_tag)).replace("%", "%%")
        return f"{literal}%0{self.index_width}d.{self.image_format}"

    def filename(self, unique_tag: str, index: int) -> str:
        return f"{self.file_prefix(unique_tag)}{index:0{self.index_width}d}.{self.image_format}"
