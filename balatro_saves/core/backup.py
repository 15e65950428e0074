"""Backup manager — snapshot, restore and delete single-file save backups."""

from __future__ import annotations

import shutil
import stat
from datetime import datetime
from pathlib import Path
from typing import Callable

from loguru import logger

from balatro_saves.core.naming import DEFAULT_EXTENSION, decode, encode
from balatro_saves.core.path_resolver import PathResolver
from balatro_saves.errors import (
    BackupNotFound,
    InsufficientDiskSpace,
    LiveSaveNotFound,
    ProfileMismatch,
    ReadFailed,
    StorageUnavailable,
    WriteFailed,
)
from balatro_saves.models.save_file import SaveFileInfo, validate_profile
from balatro_saves.utils import atomic_write_bytes, format_size

# Upper bound on same-second backups before giving up on a free name
_MAX_SEQUENCE = 1000


def _disk_free(path: Path) -> int:
    return shutil.disk_usage(path).free


def _is_file(path: Path) -> bool:
    """Like ``Path.is_file`` but only a missing path counts as False."""
    try:
        return stat.S_ISREG(path.stat().st_mode)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise ReadFailed(path, e) from e


class BackupManager:
    """Creates, restores and deletes backups. Stateless apart from its collaborators."""

    def __init__(
        self,
        paths: PathResolver,
        extension: str = DEFAULT_EXTENSION,
        *,
        now: Callable[[], datetime] = datetime.now,
        free_space: Callable[[Path], int] = _disk_free,
    ) -> None:
        self._paths = paths
        self._extension = extension
        self._now = now
        self._free_space = free_space

    @property
    def paths(self) -> PathResolver:
        return self._paths

    def live_save_exists(self, profile: int) -> bool:
        return _is_file(self._paths.live_save_path(profile))

    def _read(self, path: Path, missing: Callable[[Path], Exception]) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise missing(path) from e
        except OSError as e:
            raise ReadFailed(path, e) from e

    def _free_name(self, directory: Path, profile: int, timestamp: datetime) -> tuple[Path, int]:
        """Name for *timestamp* that sorts after every same-second backup in *directory*."""
        try:
            names = [entry.name for entry in directory.iterdir()]
        except OSError as e:
            raise StorageUnavailable(directory, e) from e

        taken = [
            decoded.sequence
            for decoded in (decode(name, self._extension) for name in names)
            if decoded is not None and decoded.profile == profile and decoded.timestamp == timestamp
        ]
        sequence = max(taken) + 1 if taken else 0
        if sequence >= _MAX_SEQUENCE:
            raise WriteFailed(
                directory / encode(profile, timestamp, self._extension),
                FileExistsError(f"{_MAX_SEQUENCE} backups already exist for {timestamp}"),
            )
        return directory / encode(profile, timestamp, self._extension, sequence), sequence

    def create_backup(self, profile: int) -> SaveFileInfo:
        """Snapshot the live save of *profile* into the backup directory."""
        validate_profile(profile)
        live_path = self._paths.live_save_path(profile)
        if not _is_file(live_path):
            raise LiveSaveNotFound(live_path)

        data = self._read(live_path, LiveSaveNotFound)

        storage = self._paths.resolve_backup_storage_directory()
        try:
            available = self._free_space(storage)
        except OSError as e:
            raise StorageUnavailable(storage, e) from e
        if len(data) > available:
            raise InsufficientDiskSpace(storage, len(data), available)

        timestamp = self._now().replace(microsecond=0)
        target, sequence = self._free_name(storage, profile, timestamp)
        try:
            atomic_write_bytes(target, data)
        except OSError as e:
            raise WriteFailed(target, e) from e

        logger.info(f"Created backup: {target.name} ({format_size(len(data))})")
        return SaveFileInfo(
            file_path=target,
            profile=profile,
            timestamp=timestamp,
            file_size=len(data),
            sequence=sequence,
        )

    def restore_backup(self, profile: int, backup_path: str | Path) -> Path:
        """Overwrite the live save of *profile* with *backup_path*.

        Destructive: no safety copy of the current live save is taken.
        Returns the live-save path that was written.
        """
        validate_profile(profile)
        backup_path = Path(backup_path)
        if not _is_file(backup_path):
            raise BackupNotFound(backup_path)

        decoded = decode(backup_path.name, self._extension)
        if decoded is None or decoded.profile != profile:
            raise ProfileMismatch(backup_path, profile, decoded.profile if decoded else None)

        data = self._read(backup_path, BackupNotFound)

        live_path = self._paths.live_save_path(profile)
        try:
            live_path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_bytes(live_path, data)
        except OSError as e:
            raise WriteFailed(live_path, e) from e

        logger.info(f"Restored {backup_path.name} to profile {profile}")
        return live_path

    def delete_backup(self, path: str | Path) -> None:
        """Remove one backup. Deleting a missing file is an error, not a no-op."""
        path = Path(path)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise BackupNotFound(path) from e
        except OSError as e:
            raise WriteFailed(path, e) from e
        logger.debug(f"Deleted backup: {path.name}")

    def read_backup(self, path: str | Path) -> bytes:
        """Raw contents of a backup file."""
        return self._read(Path(path), BackupNotFound)
