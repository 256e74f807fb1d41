"""OpenCV-based frame sampling adapter.

Implements :class:`FrameSamplingPort` without an external binary: the video
is decoded with ``cv2.VideoCapture`` in a worker thread and every frame that
crosses a ``1/fps`` boundary is written with ``cv2.imwrite``.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path

import cv2

from backend.src.core.exceptions import SamplingError

logger = logging.getLogger(__name__)

# Used when the container does not report a frame rate.
_FALLBACK_SOURCE_FPS: float = 25.0
# Float slack when comparing frame timestamps against sampling boundaries.
_EPSILON: float = 1e-6


def qscale_to_jpeg_quality(quality: int) -> int:
    """Map an FFmpeg ``-q:v`` value (2 best .. 31 worst) onto JPEG quality 0-100."""
    q = min(max(quality, 1), 31)
    return max(1, min(100, round(100 - (q - 1) * 100 / 30)))


class OpenCVFrameSampler:
    """Samples frames using OpenCV.

    Satisfies :class:`~backend.src.ports.outbound.frame_sampling_port.FrameSamplingPort`.
    """

    @property
    def name(self) -> str:
        return "opencv"

    # -- Port interface --------------------------------------------------------

    async def sample(self, input_path: str, output_pattern: str, fps: float, quality: int) -> None:
        if fps <= 0:
            raise SamplingError(f"Sampling rate must be positive, got {fps}")

        stop = threading.Event()
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(
            None, self._sample_sync, input_path, output_pattern, fps, quality, stop
        )
        try:
            await asyncio.shield(future)
        except asyncio.CancelledError:
            # The worker thread cannot be killed; ask it to stop at the next
            # frame and wait until it has released the video.
            stop.set()
            await asyncio.gather(future, return_exceptions=True)
            raise

    # -- Private sync helpers --------------------------------------------------

    def _imwrite_params(self, output_pattern: str, quality: int) -> list[int]:
        suffix = Path(output_pattern).suffix.lower()
        if suffix in (".jpg", ".jpeg"):
            return [cv2.IMWRITE_JPEG_QUALITY, qscale_to_jpeg_quality(quality)]
        if suffix == ".webp":
            return [cv2.IMWRITE_WEBP_QUALITY, qscale_to_jpeg_quality(quality)]
        return []

    def _sample_sync(
        self,
        input_path: str,
        output_pattern: str,
        fps: float,
        quality: int,
        stop: threading.Event,
    ) -> int:
        cap = cv2.VideoCapture(input_path)
        if not cap.isOpened():
            raise SamplingError("Cannot open video file", detail="unsupported or corrupt video")

        params = self._imwrite_params(output_pattern, quality)
        try:
            source_fps: float = cap.get(cv2.CAP_PROP_FPS)
            if not source_fps or source_fps <= 0:
                logger.warning("Video reports no frame rate, assuming %.1f fps", _FALLBACK_SOURCE_FPS)
                source_fps = _FALLBACK_SOURCE_FPS

            frame_index = 0
            saved = 0
            while not stop.is_set():
                ret, frame = cap.read()
                if not ret:
                    break

                timestamp = frame_index / source_fps
                if timestamp + _EPSILON >= saved / fps:
                    saved += 1
                    frame_path = output_pattern % saved
                    if not cv2.imwrite(frame_path, frame, params):
                        raise SamplingError("Failed to write frame", detail=Path(frame_path).name)

                frame_index += 1
        finally:
            cap.release()

        if stop.is_set():
            logger.info("Frame sampling stopped after %d frames", saved)
        elif frame_index == 0:
            raise SamplingError("Video contains no decodable frames", detail="no frames decoded")
        else:
            logger.info("Frame sampling completed: %d frames from %d decoded", saved, frame_index)
        return saved
