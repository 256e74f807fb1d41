"""
Frame extraction engine.
Runs the sampling engine against a staged upload with an admission bound
and a hard timeout.
"""
from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

from backend.src.core.entities.staged_upload import StagedUpload
from backend.src.core.exceptions import (
    ExtractionFailedError,
    ExtractionTimeoutError,
    SamplingError,
)
from backend.src.core.value_objects.frame_naming import FrameNaming
from backend.src.core.value_objects.output_location import OutputLocation

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0
DEFAULT_MAX_CONCURRENT = 4
MAX_DETAIL_LENGTH = 300

_ABSOLUTE_PATH = re.compile(r"""(?:[A-Za-z]:)?(?:[\\/][^\s'"():,\\/]+){2,}""")


def sanitize_detail(text: Optional[str], known_paths: tuple[str, ...] = ()) -> Optional[str]:
    """Reduce engine output to its last meaningful line without local paths."""
    if not text:
        return None
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return None
    detail = lines[-1]
    for path in sorted(known_paths, key=len, reverse=True):
        if path:
            detail = detail.replace(path, Path(path).name)
    detail = _ABSOLUTE_PATH.sub(lambda m: Path(m.group(0).replace("\\", "/")).name, detail)
    return detail[:MAX_DETAIL_LENGTH]


class FrameExtractionEngine:
    """Invokes a :class:`FrameSamplingPort` for one staged upload at a time.

    A single engine instance is shared by every request in the process; its
    semaphore bounds how many sampling processes run at once.
    """

    def __init__(
        self,
        sampler,  # FrameSamplingPort
        naming: Optional[FrameNaming] = None,
        fps: float = 1.0,
        quality: int = 2,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self._sampler = sampler
        self._naming = naming or FrameNaming()
        self._fps = fps
        self._quality = quality
        self._timeout = timeout_seconds
        self._max_concurrent = max_concurrent
        self._admission = asyncio.Semaphore(max_concurrent)
        self._active = 0

    @property
    def naming(self) -> FrameNaming:
        return self._naming

    @property
    def active_extractions(self) -> int:
        return self._active

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    async def extract(self, staged: StagedUpload, location: OutputLocation) -> None:
        """Sample frames from *staged* into *location*.

        Completion only means the engine exited cleanly; counting is done by
        the aggregator.

        Raises:
            ExtractionTimeoutError: the engine ran longer than the timeout and was stopped.
            ExtractionFailedError: the engine reported an error.
        """
        pattern = self._naming.pattern(location.resolved_directory, staged.unique_tag)
        input_path = str(staged.path)

        async with self._admission:
            self._active += 1
            logger.info(
                "Extracting frames for %s -> %s (%d/%d slots)",
                staged.path.name, location.display_path, self._active, self._max_concurrent,
            )
            try:
                await asyncio.wait_for(
                    self._sampler.sample(input_path, pattern, self._fps, self._quality),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as exc:
                logger.error("Extraction of %s exceeded %gs", staged.path.name, self._timeout)
                raise ExtractionTimeoutError(self._timeout) from exc
            except SamplingError as exc:
                detail = sanitize_detail(
                    exc.detail or exc.message,
                    (input_path, str(location.resolved_directory), pattern),
                )
                logger.error("Extraction of %s failed: %s", staged.path.name, exc.detail or exc)
                raise ExtractionFailedError("Failed to extract frames from video", detail=detail) from exc
            finally:
                self._active -= 1
