"""
Output path resolution and sandboxing.
Turns a (mount, sub-folder) pair into a writable directory that can never
escape the mount's configured root.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Mapping, Optional

from backend.src.core.exceptions import InvalidMountError, StorageUnavailableError
from backend.src.core.value_objects.output_location import OutputLocation

logger = logging.getLogger(__name__)

DEFAULT_SUB_FOLDER = "video-frames"

_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")


class PathResolver:
    """Resolves allow-listed mounts and sanitised sub-folders to directories."""

    def __init__(
        self,
        mounts: Mapping[str, Path | str],
        default_sub_folder: str = DEFAULT_SUB_FOLDER,
    ) -> None:
        self._mounts = {name: Path(root) for name, root in mounts.items()}
        self._default_sub_folder = self._normalise_sub_folder(default_sub_folder)

    @property
    def mount_names(self) -> list[str]:
        return sorted(self._mounts)

    @property
    def default_sub_folder(self) -> str:
        return self._default_sub_folder

    def resolve(self, mount_id: str, sub_folder: Optional[str] = None) -> OutputLocation:
        """Return the sandboxed output location, creating the directory if needed.

        Raises:
            InvalidMountError: unknown mount or a sub-folder escaping the mount.
            StorageUnavailableError: the directory could not be created.
        """
        root = self._mounts.get(mount_id)
        if root is None:
            raise InvalidMountError(f"Unknown mount point: {mount_id!r}")

        if sub_folder is None or not sub_folder.strip():
            relative = self._default_sub_folder
        else:
            relative = self._normalise_sub_folder(sub_folder)

        try:
            root.mkdir(parents=True, exist_ok=True)
            real_root = root.resolve()
        except OSError as exc:
            logger.error("Cannot prepare mount root for %s: %s", mount_id, exc)
            raise StorageUnavailableError(f"Mount point {mount_id!r} is not available") from exc

        target = (real_root / relative).resolve()
        if target == real_root or real_root not in target.parents:
            raise InvalidMountError(f"Sub-folder escapes mount point {mount_id!r}")

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create output directory under %s: %s", mount_id, exc)
            raise StorageUnavailableError(
                f"Output folder {mount_id}/{relative} could not be created"
            ) from exc

        # Re-check after creation: an existing symlink may point elsewhere.
        if real_root not in target.resolve().parents:
            raise InvalidMountError(f"Sub-folder escapes mount point {mount_id!r}")

        logger.debug("Resolved %s/%s -> %s", mount_id, relative, target)
        return OutputLocation(resolved_directory=target, mount_id=mount_id, sub_folder=relative)

    @staticmethod
    def _normalise_sub_folder(sub_folder: str) -> str:
        value = sub_folder.strip()
        if "\x00" in value or "\\" in value:
            raise InvalidMountError("Sub-folder contains illegal characters")
        if value.startswith("/") or _DRIVE_LETTER.match(value):
            raise InvalidMountError("Sub-folder must be a relative path")

        segments = value.split("/")
        for segment in segments:
            if segment in ("", ".", ".."):
                raise InvalidMountError(f"Invalid sub-folder: {sub_folder!r}")
        return "/".join(segments)
