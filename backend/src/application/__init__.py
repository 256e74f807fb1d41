from backend.src.application.extract_frames_service import ExtractFramesService
from backend.src.application.extraction_engine import FrameExtractionEngine
from backend.src.application.upload_receiver import UploadReceiver

__all__ = [
    "ExtractFramesService",
    "FrameExtractionEngine",
    "UploadReceiver",
]
