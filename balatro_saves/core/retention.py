"""Retention policy — prune backups older than a maximum age."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from loguru import logger

from balatro_saves.core.backup import BackupManager
from balatro_saves.core.catalog import BackupCatalog
from balatro_saves.errors import SaveToolkitError
from balatro_saves.models.save_file import PROFILE_RANGE, validate_profile


@dataclass
class PruneResult:
    """Outcome of one retention pass."""

    cutoff: datetime
    deleted: list[Path] = field(default_factory=list)
    failed: dict[Path, SaveToolkitError] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed


class RetentionPolicy:
    def __init__(
        self,
        catalog: BackupCatalog,
        backup_manager: BackupManager,
        *,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._catalog = catalog
        self._backup_manager = backup_manager
        self._now = now

    def prune_older_than(self, profile: int, max_age: timedelta) -> PruneResult:
        """Delete backups of *profile* strictly older than ``now - max_age``.

        A backup exactly at the cutoff is kept. Per-file failures are collected
        in the result and do not stop the pass.
        """
        validate_profile(profile)
        if max_age < timedelta(0):
            raise ValueError(f"max_age must not be negative, got {max_age}")

        # Backup names carry whole seconds
        result = PruneResult(cutoff=self._now().replace(microsecond=0) - max_age)
        for backup in self._catalog.list_backups(profile):
            if not backup.timestamp < result.cutoff:
                continue
            try:
                self._backup_manager.delete_backup(backup.file_path)
            except SaveToolkitError as e:
                logger.warning(f"Could not prune {backup.file_path.name}: {e}")
                result.failed[backup.file_path] = e
            else:
                result.deleted.append(backup.file_path)

        if result.deleted or result.failed:
            logger.info(
                f"Retention pruned {len(result.deleted)} backups of profile {profile}"
                f" older than {result.cutoff:%Y-%m-%d %H:%M:%S}, {len(result.failed)} failed"
            )
        return result

    def prune_all(self, max_age: timedelta) -> dict[int, PruneResult]:
        """Run :meth:`prune_older_than` for every profile."""
        return {profile: self.prune_older_than(profile, max_age) for profile in PROFILE_RANGE}
