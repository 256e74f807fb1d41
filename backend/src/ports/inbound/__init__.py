from backend.src.ports.inbound.extract_frames_use_case import ExtractFramesUseCase

__all__ = [
    "ExtractFramesUseCase",
]
