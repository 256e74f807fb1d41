from backend.src.core.value_objects.extraction_outcome import (
    ExtractionFailure,
    ExtractionOutcome,
    ExtractionSuccess,
)
from backend.src.core.value_objects.frame_naming import FrameNaming
from backend.src.core.value_objects.frame_set import FrameSet
from backend.src.core.value_objects.output_location import OutputLocation

__all__ = [
    "ExtractionFailure",
    "ExtractionOutcome",
    "ExtractionSuccess",
    "FrameNaming",
    "FrameSet",
    "OutputLocation",
]
