from backend.src.core.services.frame_aggregator import FrameAggregator
from backend.src.core.services.path_resolver import PathResolver
from backend.src.core.services.tag_generator import UniqueTagGenerator, get_tag_generator

__all__ = [
    "FrameAggregator",
    "PathResolver",
    "UniqueTagGenerator",
    "get_tag_generator",
]
