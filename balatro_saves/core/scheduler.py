"""Periodic auto-backup and cleanup driven by Qt timers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger
from PySide6.QtCore import QObject, QTimer, Signal

from balatro_saves.errors import SaveToolkitError

if TYPE_CHECKING:
    from balatro_saves.config import Config
    from balatro_saves.core.backup import BackupManager
    from balatro_saves.core.retention import PruneResult, RetentionPolicy
    from balatro_saves.models.save_file import SaveFileInfo


def _minutes_to_ms(minutes: float) -> int:
    return max(1000, int(minutes * 60_000))


class AutoBackupScheduler(QObject):
    """Backs up the selected profile and prunes old backups on a timer.

    Intervals, the profile and the retention age are read from the config at
    every tick, so settings changes apply without a restart (except the
    intervals, which apply on the next :meth:`start`).
    """

    backup_created = Signal(object)
    pruned = Signal(object)
    backup_failed = Signal(str)

    def __init__(
        self,
        backup_manager: BackupManager,
        retention: RetentionPolicy,
        config: Config,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._backup_manager = backup_manager
        self._retention = retention
        self._config = config

        self._backup_timer = QTimer(self)
        self._backup_timer.timeout.connect(self.run_backup)
        self._cleanup_timer = QTimer(self)
        self._cleanup_timer.timeout.connect(self.run_cleanup)

    @property
    def is_backup_active(self) -> bool:
        return self._backup_timer.isActive()

    @property
    def is_cleanup_active(self) -> bool:
        return self._cleanup_timer.isActive()

    def start(self, backup: bool | None = None) -> None:
        """Start the timers. *backup* overrides the auto_backup.enabled setting."""
        self.stop()
        enabled = self._config.auto_backup_enabled if backup is None else backup
        if enabled:
            self._backup_timer.start(_minutes_to_ms(self._config.auto_backup_interval_minutes))
            logger.info(
                f"Auto-backup every {self._config.auto_backup_interval_minutes:g} min"
            )
        self._cleanup_timer.start(_minutes_to_ms(self._config.cleanup_interval_minutes))

    def stop(self) -> None:
        self._backup_timer.stop()
        self._cleanup_timer.stop()

    def run_backup(self) -> SaveFileInfo | None:
        try:
            info = self._backup_manager.create_backup(self._config.selected_profile)
        except SaveToolkitError as e:
            logger.warning(f"Auto-backup failed: {e}")
            self.backup_failed.emit(str(e))
            return None
        self.backup_created.emit(info)
        return info

    def run_cleanup(self) -> dict[int, PruneResult] | None:
        try:
            results = self._retention.prune_all(self._config.retention_max_age)
        except SaveToolkitError as e:
            logger.warning(f"Backup cleanup failed: {e}")
            return None
        self.pruned.emit(results)
        return results
