"""
Framegrab configuration using Pydantic Settings.
Read once at process start; every section can be overridden from the environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load .env before any BaseSettings subclass reads env vars
load_dotenv()


class WebSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_size_mb: int = 100
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v"]
    )

    model_config = {"env_prefix": "WEB_"}


class SamplingSettings(BaseSettings):
    backend: Literal["ffmpeg", "opencv"] = "ffmpeg"
    ffmpeg_path: Optional[str] = None
    fps: float = 1.0
    quality: int = 2  # ffmpeg -q:v scale, 2 = high quality
    image_format: str = "png"
    filename_prefix: str = "frame"
    index_width: int = 4
    timeout_seconds: float = 300.0
    max_concurrent_extractions: int = 4

    model_config = {"env_prefix": "SAMPLING_"}

    @field_validator("fps", "timeout_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("max_concurrent_extractions", "index_width")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


class StorageSettings(BaseSettings):
    mounts_root: str = "./mounts"
    mount_names: list[str] = Field(
        default_factory=lambda: ["Downloads", "Desktop", "Documents", "Movies"]
    )
    mount_overrides: dict[str, str] = Field(default_factory=dict)
    staging_dir: str = "./media/uploads"
    default_sub_folder: str = "video-frames"

    model_config = {"env_prefix": "STORAGE_"}

    def mount_roots(self) -> dict[str, Path]:
        """Allow-listed mount names mapped to their filesystem roots."""
        roots = {name: Path(self.mounts_root) / name for name in self.mount_names}
        roots.update({name: Path(path) for name, path in self.mount_overrides.items()})
        return roots


class LoggingSettings(BaseSettings):
    level: str = "INFO"

    model_config = {"env_prefix": "LOG_"}


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    app_env: str = "development"

    web: WebSettings = Field(default_factory=WebSettings)
    sampling: SamplingSettings = Field(default_factory=SamplingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_production(self) -> None:
        """Validate critical settings for production environment."""
        if self.app_env != "production":
            return
        relative = [
            name for name, root in self.storage.mount_roots().items() if not root.is_absolute()
        ]
        if relative:
            raise RuntimeError(
                "FATAL: mount roots must be absolute paths in production. "
                f"Relative mounts: {', '.join(sorted(relative))}. "
                "Set STORAGE_MOUNTS_ROOT or STORAGE_MOUNT_OVERRIDES."
            )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
