"""Unit tests for UploadReceiver."""
from __future__ import annotations

import pytest

from backend.src.application.upload_receiver import (
    MULTIPART_OVERHEAD_BYTES,
    UploadReceiver,
    staging_filename,
)
from backend.src.core.exceptions import (
    MissingFileError,
    MissingMountPointError,
    PayloadTooLargeError,
    UnsupportedFileTypeError,
)


@pytest.fixture
def receiver(recording_staging) -> UploadReceiver:
    return UploadReceiver(staging=recording_staging, max_upload_size_mb=1)


class TestParse:

    def test_valid_form(self, receiver, upload_factory):
        upload = upload_factory()

        request = receiver.parse({"video": upload, "mountPoint": " Downloads ", "subFolder": "clips"})

        assert request.video is upload
        assert request.mount_id == "Downloads"
        assert request.sub_folder == "clips"
        assert request.filename == "clip.mp4"

    def test_missing_video(self, receiver):
        with pytest.raises(MissingFileError) as excinfo:
            receiver.parse({"mountPoint": "Downloads"})

        assert excinfo.value.kind == "MissingFile"

    def test_video_sent_as_text_field(self, receiver):
        with pytest.raises(MissingFileError):
            receiver.parse({"video": "not-a-file", "mountPoint": "Downloads"})

    def test_missing_file_reported_before_missing_mount(self, receiver):
        with pytest.raises(MissingFileError):
            receiver.parse({})

    @pytest.mark.parametrize("form_mount", [None, "", "   "])
    def test_missing_mount_point(self, receiver, upload_factory, form_mount):
        form = {"video": upload_factory()}
        if form_mount is not None:
            form["mountPoint"] = form_mount

        with pytest.raises(MissingMountPointError):
            receiver.parse(form)

    @pytest.mark.parametrize("sub_folder", ["", "  "])
    def test_blank_sub_folder_is_absent(self, receiver, upload_factory, sub_folder):
        request = receiver.parse({"video": upload_factory(), "mountPoint": "Movies", "subFolder": sub_folder})

        assert request.sub_folder is None


class TestDeclaredLength:

    def test_oversized_content_length(self, receiver):
        with pytest.raises(PayloadTooLargeError):
            receiver.check_declared_length(str(2 * 1024 * 1024))

    def test_multipart_overhead_is_allowed(self, receiver):
        receiver.check_declared_length(str(receiver.max_bytes + 1024))

    def test_beyond_overhead_allowance(self, receiver):
        with pytest.raises(PayloadTooLargeError):
            receiver.check_declared_length(str(receiver.max_bytes + MULTIPART_OVERHEAD_BYTES + 1))

    @pytest.mark.parametrize("value", [None, "", "1024", "garbage"])
    def test_acceptable_or_unknown_length(self, receiver, value):
        receiver.check_declared_length(value)


class TestReceive:

    @pytest.mark.asyncio
    async def test_stages_under_unique_name(self, receiver, recording_staging, upload_factory):
        request = receiver.parse({"video": upload_factory(b"abc" * 100, "Holiday Clip.MOV"), "mountPoint": "Downloads"})

        staged = await receiver.receive(request, "55-000001")

        assert staged.path.name == "video_55-000001.mov"
        assert staged.path.read_bytes() == b"abc" * 100
        assert staged.size_bytes == 300
        assert staged.unique_tag == "55-000001"
        assert recording_staging.saved == [staged]

    @pytest.mark.asyncio
    async def test_declared_size_over_limit_writes_nothing(self, receiver, recording_staging, staging_dir, upload_factory):
        request = receiver.parse({"video": upload_factory(b"\x00" * (1024 * 1024 + 1)), "mountPoint": "Downloads"})

        with pytest.raises(PayloadTooLargeError):
            await receiver.receive(request, "55-000002")

        assert recording_staging.saved == []
        assert not staging_dir.exists() or list(staging_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_rejects_non_video(self, receiver, recording_staging, upload_factory):
        request = receiver.parse(
            {"video": upload_factory(b"MZ", "tool.exe", "application/octet-stream"), "mountPoint": "Downloads"}
        )

        with pytest.raises(UnsupportedFileTypeError):
            await receiver.receive(request, "55-000003")

        assert recording_staging.saved == []

    @pytest.mark.asyncio
    async def test_accepts_video_content_type_without_known_extension(self, receiver, upload_factory):
        request = receiver.parse(
            {"video": upload_factory(b"\x00" * 10, "recording", "video/quicktime"), "mountPoint": "Downloads"}
        )

        staged = await receiver.receive(request, "55-000004")

        assert staged.path.name == "video_55-000004"


class TestStagingFilename:

    @pytest.mark.parametrize(
        ("original", "expected"),
        [
            ("clip.mp4", "video_t.mp4"),
            ("CLIP.MOV", "video_t.mov"),
            ("archive.tar.mkv", "video_t.mkv"),
            ("noext", "video_t"),
            ("../../etc/passwd.mp4", "video_t.mp4"),
            ("weird.m$p4", "video_t.mp4"),
        ],
    )
    def test_names(self, original, expected):
        assert staging_filename("t", original) == expected
