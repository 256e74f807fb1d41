"""Counts the frames one request wrote into a shared output directory."""
from __future__ import annotations

import logging

from backend.src.core.exceptions import AggregationFailedError
from backend.src.core.value_objects.frame_naming import FrameNaming
from backend.src.core.value_objects.frame_set import FrameSet
from backend.src.core.value_objects.output_location import OutputLocation

logger = logging.getLogger(__name__)


class FrameAggregator:
    def __init__(self, naming: FrameNaming | None = None) -> None:
        self._naming = naming or FrameNaming()

    def aggregate(self, location: OutputLocation, unique_tag: str) -> FrameSet:
        """Collect files carrying *unique_tag*'s prefix. Zero files is a valid result."""
        prefix = self._naming.file_prefix(unique_tag)
        try:
            files = [
                entry.name
                for entry in location.resolved_directory.iterdir()
                if entry.name.startswith(prefix) and entry.is_file()
            ]
        except OSError as exc:
            logger.error("Cannot list output folder %s: %s", location.display_path, exc)
            raise AggregationFailedError(
                f"Could not read output folder {location.display_path}"
            ) from exc

        frame_set = FrameSet(files=tuple(files), unique_tag=unique_tag)
        logger.info("Found %d frames for tag %s in %s", frame_set.frame_count, unique_tag, location.display_path)
        return frame_set
