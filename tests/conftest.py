"""Shared fixtures."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from balatro_saves.core.backup import BackupManager
from balatro_saves.core.catalog import BackupCatalog
from balatro_saves.core.path_resolver import LinuxPathResolver
from balatro_saves.core.retention import RetentionPolicy

NOW = datetime(2025, 5, 21, 12, 0, 0)


@pytest.fixture(scope="session")
def qapp() -> QCoreApplication:
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def live_dir(tmp_path: Path) -> Path:
    d = tmp_path / "Balatro"
    d.mkdir()
    return d


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def paths(live_dir: Path, backup_dir: Path) -> LinuxPathResolver:
    return LinuxPathResolver(live_save_dir=live_dir, backup_dir=backup_dir)


@pytest.fixture
def catalog(paths: LinuxPathResolver) -> BackupCatalog:
    return BackupCatalog(paths.resolve_backup_storage_directory)


@pytest.fixture
def manager(paths: LinuxPathResolver) -> BackupManager:
    return BackupManager(paths, now=lambda: NOW)


@pytest.fixture
def retention(catalog: BackupCatalog, manager: BackupManager) -> RetentionPolicy:
    return RetentionPolicy(catalog, manager, now=lambda: NOW)


def write_live(live_dir: Path, profile: int, data: bytes) -> Path:
    path = live_dir / f"profile{profile}.userdata"
    path.write_bytes(data)
    return path


def write_backup(backup_dir: Path, name: str, data: bytes = b"x") -> Path:
    backup_dir.mkdir(parents=True, exist_ok=True)
    path = backup_dir / name
    path.write_bytes(data)
    return path
