"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from balatro_saves.config import Config
    from balatro_saves.core.backup import BackupManager
    from balatro_saves.core.catalog import BackupCatalog
    from balatro_saves.core.path_resolver import PathResolver
    from balatro_saves.core.retention import RetentionPolicy


@dataclass
class AppContext:
    """
    Central service container.

    Front ends (CLI, GUI) receive this at construction time instead of
    reaching for module-level state.
    """

    config: Config
    paths: PathResolver
    catalog: BackupCatalog
    backup_manager: BackupManager
    retention: RetentionPolicy


def create_context(
    config: Config,
    *,
    live_save_dir: Path | None = None,
    backup_dir: Path | None = None,
) -> AppContext:
    """Wire all services from *config* and return an AppContext.

    Directory arguments override the settings for this context only.
    """
    from balatro_saves.core.backup import BackupManager
    from balatro_saves.core.catalog import BackupCatalog
    from balatro_saves.core.path_resolver import create_path_resolver
    from balatro_saves.core.retention import RetentionPolicy

    paths = create_path_resolver(
        live_save_dir=live_save_dir or config.live_save_path,
        backup_dir=backup_dir or config.backup_path,
    )
    extension = config.backup_extension
    catalog = BackupCatalog(paths.resolve_backup_storage_directory, extension)
    backup_manager = BackupManager(paths, extension)
    retention = RetentionPolicy(catalog, backup_manager)

    return AppContext(
        config=config,
        paths=paths,
        catalog=catalog,
        backup_manager=backup_manager,
        retention=retention,
    )
