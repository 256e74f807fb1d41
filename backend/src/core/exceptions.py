"""Custom exception hierarchy for Framegrab."""
from __future__ import annotations

from typing import Optional


class FramegrabError(Exception):
    """Base exception for all Framegrab errors.

    ``kind`` is the stable identifier reported to clients.
    """

    kind: str = "InternalError"

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class MissingFileError(FramegrabError):
    """Raised when the request carries no video file part."""

    kind = "MissingFile"

    def __init__(self, message: str = "No file received") -> None:
        super().__init__(message)


class MissingMountPointError(FramegrabError):
    """Raised when the request names no mount point."""

    kind = "MissingMountPoint"

    def __init__(self, message: str = "No mount point specified") -> None:
        super().__init__(message)


class InvalidMountError(FramegrabError):
    """Raised for unknown mounts and sub-folders escaping their mount."""

    kind = "InvalidMount"


class PayloadTooLargeError(FramegrabError):
    """Raised when an upload exceeds the configured size limit."""

    kind = "PayloadTooLarge"

    def __init__(self, max_size_mb: int) -> None:
        self.max_size_mb = max_size_mb
        super().__init__(f"File too large. Maximum size: {max_size_mb}MB")


class UnsupportedFileTypeError(FramegrabError):
    """Raised when the uploaded file does not look like a video."""

    kind = "UnsupportedFileType"


class StorageUnavailableError(FramegrabError):
    """Raised when a staging or output directory cannot be created or written."""

    kind = "StorageUnavailable"


class ExtractionFailedError(FramegrabError):
    """Raised when the sampling engine reports an error."""

    kind = "ExtractionFailed"


class ExtractionTimeoutError(FramegrabError):
    """Raised when sampling does not finish within the configured timeout."""

    kind = "ExtractionTimeout"

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Frame extraction timed out after {timeout_seconds:g}s")


class AggregationFailedError(FramegrabError):
    """Raised when the output directory cannot be listed after extraction."""

    kind = "AggregationFailed"


class CleanupFailedError(FramegrabError):
    """Describes a staged upload that could not be removed. Logged, never surfaced."""

    kind = "CleanupFailed"


class SamplingError(FramegrabError):
    """Raised by sampling engines when they cannot produce frames."""

    kind = "ExtractionFailed"


class FFmpegError(SamplingError):
    """Raised when an FFmpeg invocation fails."""


class InvalidStateTransition(FramegrabError):
    """Raised when an extraction job is moved to a state it cannot reach."""


CLIENT_ERROR_KINDS = frozenset({
    MissingFileError.kind,
    MissingMountPointError.kind,
    InvalidMountError.kind,
    PayloadTooLargeError.kind,
    UnsupportedFileTypeError.kind,
})
