"""Backup catalog — scans the backup directory and decodes filenames."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable

from loguru import logger

from balatro_saves.core.naming import DEFAULT_EXTENSION, decode
from balatro_saves.errors import ReadFailed, StorageUnavailable
from balatro_saves.models.save_file import PROFILE_RANGE, SaveFileInfo, validate_profile


class BackupCatalog:
    """Lists backups straight from the filesystem. Holds no cache.

    *storage_dir* is a callable so the directory is resolved on every scan
    (the resolver may create it, and settings may move it).
    """

    def __init__(
        self,
        storage_dir: Callable[[], Path],
        extension: str = DEFAULT_EXTENSION,
    ) -> None:
        self._storage_dir = storage_dir
        self._extension = extension

    @property
    def extension(self) -> str:
        return self._extension

    def _scan(self) -> list[SaveFileInfo]:
        directory = self._storage_dir()
        try:
            if not stat.S_ISDIR(directory.stat().st_mode):
                return []
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as e:
            raise StorageUnavailable(directory, e) from e

        try:
            entries = list(directory.iterdir())
        except OSError as e:
            raise ReadFailed(directory, e) from e

        found: list[SaveFileInfo] = []
        for entry in entries:
            decoded = decode(entry.name, self._extension)
            if decoded is None:
                logger.debug(f"Skipping non-backup file: {entry.name}")
                continue
            try:
                if not entry.is_file():
                    continue
                size = entry.stat().st_size
            except OSError:
                # removed between iterdir() and stat()
                continue
            found.append(
                SaveFileInfo(
                    file_path=entry,
                    profile=decoded.profile,
                    timestamp=decoded.timestamp,
                    file_size=size,
                    sequence=decoded.sequence,
                )
            )
        return found

    def list_backups(self, profile: int) -> list[SaveFileInfo]:
        """All backups for *profile*, newest first.

        Same-second backups are ordered by their sequence suffix, then by name.
        """
        validate_profile(profile)
        backups = [b for b in self._scan() if b.profile == profile]
        backups.sort(key=lambda b: b.sort_key, reverse=True)
        return backups

    def list_all_backups(self) -> dict[int, list[SaveFileInfo]]:
        """Backups grouped by profile, each list newest first."""
        grouped: dict[int, list[SaveFileInfo]] = {p: [] for p in PROFILE_RANGE}
        for backup in self._scan():
            grouped[backup.profile].append(backup)
        for backups in grouped.values():
            backups.sort(key=lambda b: b.sort_key, reverse=True)
        return grouped

    def latest_backup(self, profile: int) -> SaveFileInfo | None:
        backups = self.list_backups(profile)
        return backups[0] if backups else None
