"""
Dependency container.
Wires together ports and adapters based on configuration.
"""
from __future__ import annotations

import logging
from typing import Optional

from backend.src.infrastructure.config import Settings

logger = logging.getLogger(__name__)


class ApplicationContainer:
    """Simplified container that builds concrete instances from settings.

    Usage::

        container = ApplicationContainer(settings)
        service = container.extract_frames_service()
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._cache: dict[str, object] = {}

    def _get_or_create(self, key: str, factory):
        if key not in self._cache:
            self._cache[key] = factory(self.settings)
        return self._cache[key]

    def override(self, key: str, instance: object) -> None:
        """Replace a component before first use (fakes in tests, alternate adapters)."""
        self._cache[key] = instance

    # ── Lazy factory helpers ──────────────────────────────────────

    @staticmethod
    def _build_tag_generator(settings: Settings):
        from backend.src.core.services.tag_generator import get_tag_generator
        return get_tag_generator()

    @staticmethod
    def _build_frame_naming(settings: Settings):
        from backend.src.core.value_objects.frame_naming import FrameNaming
        return FrameNaming(
            prefix=settings.sampling.filename_prefix,
            index_width=settings.sampling.index_width,
            image_format=settings.sampling.image_format,
        )

    @staticmethod
    def _build_path_resolver(settings: Settings):
        from backend.src.core.services.path_resolver import PathResolver
        return PathResolver(
            mounts=settings.storage.mount_roots(),
            default_sub_folder=settings.storage.default_sub_folder,
        )

    @staticmethod
    def _build_staging(settings: Settings):
        from backend.src.adapters.outbound.persistence.local_staging_storage import LocalStagingStorage
        return LocalStagingStorage(staging_dir=settings.storage.staging_dir)

    @staticmethod
    def _build_frame_sampler(settings: Settings):
        if settings.sampling.backend == "opencv":
            from backend.src.adapters.outbound.media.opencv_frames import OpenCVFrameSampler
            return OpenCVFrameSampler()
        from backend.src.adapters.outbound.ffmpeg.ffmpeg_sampler import FFmpegFrameSampler
        return FFmpegFrameSampler(ffmpeg_path=settings.sampling.ffmpeg_path)

    # ── Port accessors ─────────────────────────────────────────────

    def tag_generator(self):
        return self._get_or_create("tag_generator", self._build_tag_generator)

    def frame_naming(self):
        return self._get_or_create("frame_naming", self._build_frame_naming)

    def path_resolver(self):
        return self._get_or_create("path_resolver", self._build_path_resolver)

    def staging(self):
        return self._get_or_create("staging", self._build_staging)

    def frame_sampler(self):
        return self._get_or_create("frame_sampler", self._build_frame_sampler)

    # ── Application services ───────────────────────────────────────

    def extraction_engine(self):
        # Cached: the engine's semaphore is the process-wide admission bound.
        def _build(settings: Settings):
            from backend.src.application.extraction_engine import FrameExtractionEngine
            return FrameExtractionEngine(
                sampler=self.frame_sampler(),
                naming=self.frame_naming(),
                fps=settings.sampling.fps,
                quality=settings.sampling.quality,
                timeout_seconds=settings.sampling.timeout_seconds,
                max_concurrent=settings.sampling.max_concurrent_extractions,
            )
        return self._get_or_create("extraction_engine", _build)

    def frame_aggregator(self):
        def _build(settings: Settings):
            from backend.src.core.services.frame_aggregator import FrameAggregator
            return FrameAggregator(naming=self.frame_naming())
        return self._get_or_create("frame_aggregator", _build)

    def upload_receiver(self):
        def _build(settings: Settings):
            from backend.src.application.upload_receiver import UploadReceiver
            return UploadReceiver(
                staging=self.staging(),
                max_upload_size_mb=settings.web.max_upload_size_mb,
                allowed_extensions=settings.web.allowed_extensions,
            )
        return self._get_or_create("upload_receiver", _build)

    def extract_frames_service(self):
        from backend.src.application.extract_frames_service import ExtractFramesService
        return ExtractFramesService(
            receiver=self.upload_receiver(),
            resolver=self.path_resolver(),
            engine=self.extraction_engine(),
            aggregator=self.frame_aggregator(),
            staging=self.staging(),
            tags=self.tag_generator(),
        )

    def prepare_storage(self) -> None:
        """Create the staging area up front so misconfiguration fails at startup."""
        staging_dir = self.staging().ensure_ready()
        logger.info(
            "Staging uploads in %s; mounts: %s",
            staging_dir, ", ".join(self.path_resolver().mount_names),
        )
