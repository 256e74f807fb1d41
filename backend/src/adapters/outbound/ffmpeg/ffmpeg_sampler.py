"""FFmpeg adapter for fixed-rate frame sampling."""
from __future__ import annotations

import logging
from typing import Optional

from backend.src.adapters.outbound.ffmpeg.ffmpeg_base import get_ffmpeg_path, run_ffmpeg_async

logger = logging.getLogger(__name__)


class FFmpegFrameSampler:
    """Implements FrameSamplingPort by running ``ffmpeg -vf fps=N``."""

    def __init__(self, ffmpeg_path: Optional[str] = None) -> None:
        self._ffmpeg = get_ffmpeg_path(ffmpeg_path)

    @property
    def name(self) -> str:
        return "ffmpeg"

    def build_args(self, input_path: str, output_pattern: str, fps: float, quality: int) -> list[str]:
        return [
            "-nostdin",
            "-hide_banner",
            "-loglevel", "error",
            "-i", input_path,
            "-vf", f"fps={fps:g}",
            "-q:v", str(quality),
            output_pattern,
        ]

    async def sample(self, input_path: str, output_pattern: str, fps: float, quality: int) -> None:
        logger.info("Sampling %s at %g fps (q=%d)", input_path, fps, quality)
        await run_ffmpeg_async(self._ffmpeg, self.build_args(input_path, output_pattern, fps, quality))
