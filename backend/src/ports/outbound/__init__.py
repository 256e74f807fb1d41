from backend.src.ports.outbound.frame_sampling_port import FrameSamplingPort
from backend.src.ports.outbound.upload_staging_port import UploadStagingPort

__all__ = [
    "FrameSamplingPort",
    "UploadStagingPort",
]
