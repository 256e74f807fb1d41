"""Terminal result of one extraction request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from backend.src.core.exceptions import CLIENT_ERROR_KINDS, FramegrabError


@dataclass(frozen=True)
class ExtractionSuccess:
    frame_count: int
    output_path: str

    def __post_init__(self) -> None:
        if self.frame_count < 0:
            raise ValueError(f"frame_count must be >= 0, got {self.frame_count}")

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class ExtractionFailure:
    kind: str
    message: str
    detail: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return False

    @property
    def is_client_error(self) -> bool:
        return self.kind in CLIENT_ERROR_KINDS

    @classmethod
    def from_error(cls, error: FramegrabError) -> ExtractionFailure:
        return cls(kind=error.kind, message=error.message, detail=error.detail)


ExtractionOutcome = Union[ExtractionSuccess, ExtractionFailure]
