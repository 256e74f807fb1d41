"""Shared test fixtures for all tests."""
from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import Optional

import pytest
from starlette.datastructures import Headers, UploadFile

from backend.src.adapters.outbound.persistence.local_staging_storage import LocalStagingStorage
from backend.src.core.entities.staged_upload import StagedUpload
from backend.src.core.exceptions import SamplingError
from backend.src.core.value_objects.output_location import OutputLocation
from backend.src.infrastructure.config import (
    SamplingSettings,
    Settings,
    StorageSettings,
    WebSettings,
)


# ── Test doubles ───────────────────────────────────────────────────────────

class FakeFrameSampler:
    """Deterministic FrameSamplingPort: writes ``frames`` files matching the pattern."""

    name = "fake"

    def __init__(self, frames: int = 3, delay: float = 0.0) -> None:
        self.frames = frames
        self.delay = delay
        self.hang = False
        self.error: Optional[SamplingError] = None
        self.calls: list[dict] = []
        self.cancelled = 0
        self.active = 0
        self.peak = 0

    async def sample(self, input_path: str, output_pattern: str, fps: float, quality: int) -> None:
        self.calls.append(
            {"input_path": input_path, "output_pattern": output_pattern, "fps": fps, "quality": quality}
        )
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.error is not None:
                raise self.error
            if self.hang:
                await asyncio.sleep(3600)
            for index in range(1, self.frames + 1):
                await asyncio.sleep(self.delay)
                Path(output_pattern % index).write_bytes(b"\x89PNG fake frame")
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.active -= 1


class RecordingStaging(LocalStagingStorage):
    """Local staging that counts how often uploads are staged and discarded."""

    def __init__(self, staging_dir) -> None:
        super().__init__(staging_dir)
        self.saved: list[StagedUpload] = []
        self.discarded: list[StagedUpload] = []

    async def save_stream(self, source, filename, unique_tag, max_bytes):
        staged = await super().save_stream(source, filename, unique_tag, max_bytes)
        self.saved.append(staged)
        return staged

    async def discard(self, staged: StagedUpload) -> None:
        self.discarded.append(staged)
        await super().discard(staged)


def make_upload(
    content: bytes = b"\x00" * 1024,
    filename: str = "clip.mp4",
    content_type: str = "video/mp4",
) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


# ── Settings & storage fixtures ────────────────────────────────────────────

@pytest.fixture
def mounts_root(tmp_path) -> Path:
    return tmp_path / "mounts"


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def test_settings(mounts_root, staging_dir) -> Settings:
    return Settings(
        app_env="test",
        web=WebSettings(max_upload_size_mb=1),
        sampling=SamplingSettings(timeout_seconds=5.0, max_concurrent_extractions=2),
        storage=StorageSettings(mounts_root=str(mounts_root), staging_dir=str(staging_dir)),
    )


@pytest.fixture
def output_location(mounts_root) -> OutputLocation:
    directory = mounts_root / "Downloads" / "video-frames"
    directory.mkdir(parents=True)
    return OutputLocation(resolved_directory=directory.resolve(), mount_id="Downloads", sub_folder="video-frames")


@pytest.fixture
def staged_upload(staging_dir) -> StagedUpload:
    staging_dir.mkdir(parents=True, exist_ok=True)
    path = staging_dir / "video_1-000001.mp4"
    path.write_bytes(b"\x00" * 64)
    return StagedUpload(path=path, unique_tag="1-000001", original_filename="clip.mp4", size_bytes=64)


@pytest.fixture
def recording_staging(staging_dir) -> RecordingStaging:
    return RecordingStaging(staging_dir)


@pytest.fixture
def fake_sampler() -> FakeFrameSampler:
    return FakeFrameSampler(frames=3)


@pytest.fixture
def upload_factory():
    return make_upload


# ── Media fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def synthetic_clip(tmp_path) -> Path:
    """A 3-second, 10 fps MJPG clip with a different shade on every frame."""
    cv2 = pytest.importorskip("cv2")
    np = pytest.importorskip("numpy")

    path = tmp_path / "synthetic.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    assert writer.isOpened()
    try:
        for index in range(30):
            frame = np.full((48, 64, 3), index * 8, dtype=np.uint8)
            writer.write(frame)
    finally:
        writer.release()
    return path
