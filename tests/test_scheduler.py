"""Tests for the AutoBackupScheduler."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock, PropertyMock

import pytest
from PySide6.QtCore import QCoreApplication

from balatro_saves.core.backup import BackupManager
from balatro_saves.core.naming import encode
from balatro_saves.core.retention import RetentionPolicy
from balatro_saves.core.scheduler import AutoBackupScheduler
from balatro_saves.errors import InvalidProfile

from conftest import NOW, write_backup, write_live


@pytest.fixture
def config() -> MagicMock:
    config = MagicMock()
    config.auto_backup_enabled = True
    config.auto_backup_interval_minutes = 5.0
    config.cleanup_interval_minutes = 60.0
    config.selected_profile = 2
    config.retention_max_age = timedelta(days=7)
    return config


@pytest.fixture
def scheduler(qapp: QCoreApplication, manager: BackupManager, retention: RetentionPolicy, config: MagicMock):
    s = AutoBackupScheduler(manager, retention, config)
    yield s
    s.stop()


class TestTimers:
    def test_start_and_stop(self, scheduler: AutoBackupScheduler) -> None:
        scheduler.start()
        assert scheduler.is_backup_active
        assert scheduler.is_cleanup_active
        scheduler.stop()
        assert not scheduler.is_backup_active
        assert not scheduler.is_cleanup_active

    def test_backup_timer_off_when_disabled(self, scheduler: AutoBackupScheduler, config: MagicMock) -> None:
        config.auto_backup_enabled = False
        scheduler.start()
        assert not scheduler.is_backup_active
        assert scheduler.is_cleanup_active

    def test_override_enables_backup(self, scheduler: AutoBackupScheduler, config: MagicMock) -> None:
        config.auto_backup_enabled = False
        scheduler.start(backup=True)
        assert scheduler.is_backup_active


class TestTicks:
    def test_backup_tick_uses_selected_profile(self, scheduler: AutoBackupScheduler, live_dir: Path) -> None:
        write_live(live_dir, 2, b"data")
        created: list[object] = []
        scheduler.backup_created.connect(created.append)

        info = scheduler.run_backup()

        assert info is not None
        assert info.profile == 2
        assert created == [info]

    def test_backup_tick_failure_reported(self, scheduler: AutoBackupScheduler) -> None:
        failures: list[str] = []
        scheduler.backup_failed.connect(failures.append)

        assert scheduler.run_backup() is None
        assert len(failures) == 1

    def test_invalid_selected_profile_reported(
        self, scheduler: AutoBackupScheduler, config: MagicMock
    ) -> None:
        type(config).selected_profile = PropertyMock(side_effect=InvalidProfile(7))
        failures: list[str] = []
        scheduler.backup_failed.connect(failures.append)

        assert scheduler.run_backup() is None
        assert failures

    def test_cleanup_tick(self, scheduler: AutoBackupScheduler, backup_dir: Path) -> None:
        old = write_backup(backup_dir, encode(1, NOW - timedelta(days=8)))
        pruned: list[object] = []
        scheduler.pruned.connect(pruned.append)

        results = scheduler.run_cleanup()

        assert results is not None
        assert results[1].deleted == [old]
        assert pruned == [results]
