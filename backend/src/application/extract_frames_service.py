"""
Frame extraction use case.
Sequences staging, path resolution, sampling, aggregation and cleanup for
one upload and translates the result into an ExtractionOutcome.
"""
from __future__ import annotations

import asyncio
import logging

from backend.src.application.dto.extraction_request import ExtractionRequest
from backend.src.application.extraction_engine import FrameExtractionEngine
from backend.src.application.upload_receiver import UploadReceiver
from backend.src.core.entities.extraction_job import ExtractionJob
from backend.src.core.exceptions import FramegrabError
from backend.src.core.services.frame_aggregator import FrameAggregator
from backend.src.core.services.path_resolver import PathResolver
from backend.src.core.services.tag_generator import UniqueTagGenerator
from backend.src.core.value_objects.extraction_outcome import (
    ExtractionFailure,
    ExtractionOutcome,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Frames extracted successfully"
INTERNAL_ERROR_MESSAGE = "Failed to process video"


class ExtractFramesService:
    """Orchestrates one extraction request from upload to response."""

    def __init__(
        self,
        receiver: UploadReceiver,
        resolver: PathResolver,
        engine: FrameExtractionEngine,
        aggregator: FrameAggregator,
        staging,  # UploadStagingPort
        tags: UniqueTagGenerator,
    ):
        self._receiver = receiver
        self._resolver = resolver
        self._engine = engine
        self._aggregator = aggregator
        self._staging = staging
        self._tags = tags

    async def execute(self, request: ExtractionRequest) -> ExtractionOutcome:
        """Run the pipeline. Domain errors become failures, never exceptions."""
        job = ExtractionJob()
        await self.run(job, request)
        return job.outcome

    async def run(self, job: ExtractionJob, request: ExtractionRequest) -> ExtractionJob:
        """Drive *job* to a terminal state; exposed so callers can inspect the job."""
        loop = asyncio.get_running_loop()
        try:
            # 1. Stage the upload
            tag = self._tags.next_tag()
            staged = await self._receiver.receive(request, tag)
            job.mark_staged(staged)

            # 2. Resolve the output directory
            location = await loop.run_in_executor(
                None, self._resolver.resolve, request.mount_id, request.sub_folder
            )
            job.mark_resolved(location)

            # 3. Sample frames
            job.start_extracting()
            await self._engine.extract(staged, location)

            # 4. Count this request's frames
            frame_set = await loop.run_in_executor(
                None, self._aggregator.aggregate, location, staged.unique_tag
            )
            job.mark_aggregated(frame_set)

            outcome = job.succeed()
            logger.info(
                "Extraction job %s finished: %d frames in %s",
                job.id, outcome.frame_count, outcome.output_path,
            )
        except FramegrabError as exc:
            logger.warning("Extraction job %s failed in state %s: %s", job.id, job.state.value, exc)
            job.fail(ExtractionFailure.from_error(exc))
        except Exception:
            logger.exception("Unexpected error in extraction job %s", job.id)
            job.fail(ExtractionFailure(kind="InternalError", message=INTERNAL_ERROR_MESSAGE))
        finally:
            if job.needs_cleanup:
                job.record_cleanup()
                try:
                    await self._staging.discard(job.staged)
                except Exception:
                    # Cleanup failures never replace the job's outcome.
                    logger.exception("CleanupFailed for extraction job %s", job.id)
        return job
