"""Port for the external engine that samples still frames from a video."""
from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class FrameSamplingPort(Protocol):
    """Writes zero or more images matching *output_pattern* or raises ``SamplingError``.

    ``output_pattern`` carries a printf-style index placeholder such as ``%04d``.
    Implementations must stop their work when the awaiting task is cancelled.
    """

    async def sample(self, input_path: str, output_pattern: str, fps: float, quality: int) -> None: ...
