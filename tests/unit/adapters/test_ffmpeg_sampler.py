"""Unit tests for the FFmpeg sampling adapter."""
from __future__ import annotations

import asyncio
import shutil
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from backend.src.adapters.outbound.ffmpeg.ffmpeg_base import get_ffmpeg_path, run_ffmpeg_async
from backend.src.adapters.outbound.ffmpeg.ffmpeg_sampler import FFmpegFrameSampler
from backend.src.core.exceptions import FFmpegError, SamplingError


def _fake_process(returncode=0, stderr=b""):
    proc = MagicMock()
    proc.pid = 4242
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(None, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestGetFFmpegPath:

    def test_explicit_path_wins(self):
        assert get_ffmpeg_path("/opt/ffmpeg/bin/ffmpeg") == "/opt/ffmpeg/bin/ffmpeg"

    def test_found_on_path(self):
        with patch("shutil.which", return_value="/usr/bin/ffmpeg"):
            assert get_ffmpeg_path() == "/usr/bin/ffmpeg"

    def test_falls_back_to_bare_name(self):
        with patch("shutil.which", return_value=None), patch("os.path.exists", return_value=False):
            assert get_ffmpeg_path() == "ffmpeg"


class TestRunFFmpegAsync:

    @pytest.mark.asyncio
    async def test_success_returns_stderr(self):
        proc = _fake_process(stderr=b"frame=3")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as create:
            stderr = await run_ffmpeg_async("ffmpeg", ["-i", "in.mp4", "out_%04d.png"])

        assert stderr == "frame=3"
        assert create.call_args.args == ("ffmpeg", "-i", "in.mp4", "out_%04d.png")

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises_with_stderr_detail(self):
        proc = _fake_process(returncode=1, stderr=b"in.mp4: Invalid data found when processing input\n")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(FFmpegError) as excinfo:
                await run_ffmpeg_async("ffmpeg", ["-i", "in.mp4"])

        assert "rc=1" in excinfo.value.message
        assert excinfo.value.detail == "in.mp4: Invalid data found when processing input"
        assert isinstance(excinfo.value, SamplingError)

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError())):
            with pytest.raises(FFmpegError, match="not found"):
                await run_ffmpeg_async("/nonexistent/ffmpeg", [])

    @pytest.mark.asyncio
    async def test_cancellation_kills_child(self):
        proc = _fake_process()
        proc.returncode = None

        async def _never_finishes():
            await asyncio.sleep(3600)

        proc.communicate = AsyncMock(side_effect=_never_finishes)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(run_ffmpeg_async("ffmpeg", []), timeout=0.05)

        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()


class TestFFmpegFrameSampler:

    def test_build_args(self):
        sampler = FFmpegFrameSampler(ffmpeg_path="ffmpeg")

        args = sampler.build_args("/in/video.mp4", "/out/frame_t_%04d.png", 1.0, 2)

        assert args == [
            "-nostdin", "-hide_banner", "-loglevel", "error",
            "-i", "/in/video.mp4",
            "-vf", "fps=1",
            "-q:v", "2",
            "/out/frame_t_%04d.png",
        ]

    def test_fractional_rate(self):
        args = FFmpegFrameSampler(ffmpeg_path="ffmpeg").build_args("in", "out", 0.5, 5)

        assert args[args.index("-vf") + 1] == "fps=0.5"

    @pytest.mark.asyncio
    async def test_sample_runs_configured_binary(self):
        sampler = FFmpegFrameSampler(ffmpeg_path="/custom/ffmpeg")
        with patch(
            "backend.src.adapters.outbound.ffmpeg.ffmpeg_sampler.run_ffmpeg_async",
            AsyncMock(return_value=""),
        ) as run:
            await sampler.sample("in.mp4", "out_%04d.png", 1.0, 2)

        binary, args = run.call_args.args
        assert binary == "/custom/ffmpeg"
        assert args[-1] == "out_%04d.png"

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
    async def test_real_ffmpeg_one_frame_per_second(self, synthetic_clip, tmp_path):
        out_dir = tmp_path / "frames"
        out_dir.mkdir()

        await FFmpegFrameSampler().sample(str(synthetic_clip), str(out_dir / "frame_t_%04d.png"), 1.0, 2)

        frames = sorted(p.name for p in out_dir.iterdir())
        assert 3 <= len(frames) <= 4
        assert frames[0] == "frame_t_0001.png"
