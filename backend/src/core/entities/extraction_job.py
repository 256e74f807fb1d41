"""ExtractionJob - explicit per-request state carried through the orchestrator."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from backend.src.core.entities.staged_upload import StagedUpload
from backend.src.core.exceptions import InvalidStateTransition
from backend.src.core.value_objects.extraction_outcome import (
    ExtractionFailure,
    ExtractionOutcome,
    ExtractionSuccess,
)
from backend.src.core.value_objects.frame_set import FrameSet
from backend.src.core.value_objects.output_location import OutputLocation


class RequestState(str, Enum):
    RECEIVED = "received"
    STAGED = "staged"
    RESOLVED = "resolved"
    EXTRACTING = "extracting"
    AGGREGATED = "aggregated"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TERMINAL = {RequestState.SUCCEEDED, RequestState.FAILED}

_TRANSITIONS: dict[RequestState, set[RequestState]] = {
    RequestState.RECEIVED: {RequestState.STAGED, RequestState.FAILED},
    RequestState.STAGED: {RequestState.RESOLVED, RequestState.FAILED},
    RequestState.RESOLVED: {RequestState.EXTRACTING, RequestState.FAILED},
    RequestState.EXTRACTING: {RequestState.AGGREGATED, RequestState.FAILED},
    RequestState.AGGREGATED: {RequestState.SUCCEEDED, RequestState.FAILED},
    RequestState.SUCCEEDED: set(),
    RequestState.FAILED: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExtractionJob:
    """State machine for a single extraction request.

    ``RECEIVED -> STAGED -> RESOLVED -> EXTRACTING -> AGGREGATED -> SUCCEEDED``,
    with ``FAILED`` reachable from any non-terminal state. Once ``STAGED`` has
    been reached the staged upload must be cleaned up exactly once before the
    job is finished.
    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: RequestState = RequestState.RECEIVED
    staged: Optional[StagedUpload] = None
    location: Optional[OutputLocation] = None
    frame_set: Optional[FrameSet] = None
    outcome: Optional[ExtractionOutcome] = None
    cleanup_runs: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # -- transitions -----------------------------------------------------------

    def _move(self, target: RequestState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(
                f"Cannot move extraction job {self.id} from {self.state.value} to {target.value}"
            )
        self.state = target
        self.updated_at = _utcnow()

    def mark_staged(self, staged: StagedUpload) -> None:
        self._move(RequestState.STAGED)
        self.staged = staged

    def mark_resolved(self, location: OutputLocation) -> None:
        self._move(RequestState.RESOLVED)
        self.location = location

    def start_extracting(self) -> None:
        self._move(RequestState.EXTRACTING)

    def mark_aggregated(self, frame_set: FrameSet) -> None:
        self._move(RequestState.AGGREGATED)
        self.frame_set = frame_set

    def succeed(self) -> ExtractionSuccess:
        if self.frame_set is None or self.location is None:
            raise InvalidStateTransition(f"Extraction job {self.id} has no frames to report")
        self._move(RequestState.SUCCEEDED)
        self.outcome = ExtractionSuccess(
            frame_count=self.frame_set.frame_count,
            output_path=self.location.display_path,
        )
        return self.outcome

    def fail(self, failure: ExtractionFailure) -> ExtractionFailure:
        self._move(RequestState.FAILED)
        self.outcome = failure
        return failure

    def record_cleanup(self) -> None:
        if self.cleanup_runs:
            raise InvalidStateTransition(f"Extraction job {self.id} was already cleaned up")
        self.cleanup_runs += 1

    # -- queries ---------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.state in _TERMINAL

    @property
    def needs_cleanup(self) -> bool:
        return self.staged is not None and self.cleanup_runs == 0
