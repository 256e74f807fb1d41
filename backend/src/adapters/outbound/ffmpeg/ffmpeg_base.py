"""
FFmpeg path resolution and asynchronous command execution.
"""
from __future__ import annotations

import asyncio
import logging
import os
import shutil
from typing import Optional

from backend.src.core.exceptions import FFmpegError

logger = logging.getLogger(__name__)

# Common install locations checked when ffmpeg is not on PATH
_FALLBACK_FFMPEG_PATHS = [
    "/usr/local/bin/ffmpeg",
    "/opt/homebrew/bin/ffmpeg",
    r"C:\Program Files\ffmpeg\bin\ffmpeg.exe",
    r"C:\ffmpeg\bin\ffmpeg.exe",
]

# Bytes of stderr kept for error reporting
_STDERR_TAIL = 4000


def get_ffmpeg_path(explicit: Optional[str] = None) -> str:
    """Resolve ffmpeg executable path. Checks an explicit setting, PATH, then known locations."""
    if explicit:
        return explicit

    path = shutil.which("ffmpeg")
    if path:
        return path

    for candidate in _FALLBACK_FFMPEG_PATHS:
        if os.path.exists(candidate):
            logger.info("Found FFmpeg at: %s", candidate)
            return candidate

    return "ffmpeg"


async def run_ffmpeg_async(binary: str, args: list[str]) -> str:
    """Run FFmpeg without blocking the event loop.

    The child is killed if the awaiting task is cancelled (e.g. by
    ``asyncio.wait_for``), so a timed-out extraction never leaves an orphan.

    Returns:
        Captured stderr text.

    Raises:
        FFmpegError: the binary is missing or exited with a non-zero code.
    """
    cmd = [binary, *args]
    logger.debug("Running: %s", " ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise FFmpegError("FFmpeg executable not found", detail="ffmpeg is not installed") from exc

    try:
        _, stderr_bytes = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            logger.warning("Killing FFmpeg process %d", proc.pid)
            proc.kill()
            await proc.wait()
        raise

    stderr = stderr_bytes.decode("utf-8", errors="replace")[-_STDERR_TAIL:]
    if proc.returncode != 0:
        logger.error("FFmpeg error (rc=%d): %s", proc.returncode, stderr.strip())
        raise FFmpegError(
            f"FFmpeg failed (rc={proc.returncode})",
            detail=stderr.strip() or f"exit code {proc.returncode}",
        )
    return stderr
