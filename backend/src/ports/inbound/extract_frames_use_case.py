"""Inbound port for frame extraction."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable
if TYPE_CHECKING:
    from backend.src.application.dto.extraction_request import ExtractionRequest
    from backend.src.core.value_objects.extraction_outcome import ExtractionOutcome


@runtime_checkable
class ExtractFramesUseCase(Protocol):
    async def execute(self, request: ExtractionRequest) -> ExtractionOutcome: ...
