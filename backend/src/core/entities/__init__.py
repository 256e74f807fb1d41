from backend.src.core.entities.extraction_job import ExtractionJob, RequestState
from backend.src.core.entities.staged_upload import StagedUpload

__all__ = ["ExtractionJob", "RequestState", "StagedUpload"]
