"""Per-OS locations of the live Balatro saves and of the private backup store."""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Mapping, Protocol

from loguru import logger

from balatro_saves.errors import StorageUnavailable, UnsupportedPlatform
from balatro_saves.models.save_file import validate_profile

GAME_DIR_NAME = "Balatro"
BACKUP_DIR_NAME = "BalatroSaveAndLoad"
SETTINGS_DIR_NAME = "BalatroSaveToolkit"
STEAM_APP_ID = "2379780"


def live_save_filename(profile: int) -> str:
    return f"profile{validate_profile(profile)}.userdata"


def _ensure_directory(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageUnavailable(path, e) from e
    if not os.access(path, os.W_OK):
        raise StorageUnavailable(path, PermissionError(f"{path} is not writable"))
    return path


class PathResolver(Protocol):
    """Where the game keeps its saves and where backups are stored."""

    def resolve_backup_storage_directory(self) -> Path: ...

    def resolve_live_save_directory(self) -> Path: ...

    def live_save_path(self, profile: int) -> Path: ...


class _ResolverMixin:
    """Override handling shared by the platform resolvers."""

    _live_override: Path | None
    _backup_override: Path | None

    def _user_data_root(self) -> Path:
        raise NotImplementedError

    def _default_live_save_directory(self) -> Path:
        return self._user_data_root() / GAME_DIR_NAME

    def settings_directory(self) -> Path:
        return self._user_data_root() / SETTINGS_DIR_NAME

    def resolve_backup_storage_directory(self) -> Path:
        """Return the backup directory, creating it when absent."""
        return _ensure_directory(self._backup_override or self._user_data_root() / BACKUP_DIR_NAME)

    def resolve_live_save_directory(self) -> Path:
        """Return the live-save directory. Never creates it."""
        return self._live_override or self._default_live_save_directory()

    def live_save_path(self, profile: int) -> Path:
        validate_profile(profile)
        return self.resolve_live_save_directory() / live_save_filename(profile)


class WindowsPathResolver(_ResolverMixin):
    """``%APPDATA%\\Balatro`` for saves, ``%APPDATA%\\BalatroSaveAndLoad`` for backups."""

    def __init__(
        self,
        live_save_dir: Path | None = None,
        backup_dir: Path | None = None,
        *,
        home: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._live_override = live_save_dir
        self._backup_override = backup_dir
        self._home = home or Path.home()
        self._environ = os.environ if environ is None else environ

    def _user_data_root(self) -> Path:
        return Path(self._environ.get("APPDATA", str(self._home / "AppData" / "Roaming")))


class MacOsPathResolver(_ResolverMixin):
    """``~/Library/Application Support/Balatro/Saves`` for saves."""

    def __init__(
        self,
        live_save_dir: Path | None = None,
        backup_dir: Path | None = None,
        *,
        home: Path | None = None,
    ) -> None:
        self._live_override = live_save_dir
        self._backup_override = backup_dir
        self._home = home or Path.home()

    def _user_data_root(self) -> Path:
        return self._home / "Library" / "Application Support"

    def _default_live_save_directory(self) -> Path:
        return self._user_data_root() / GAME_DIR_NAME / "Saves"


class LinuxPathResolver(_ResolverMixin):
    """``$XDG_DATA_HOME/Balatro`` for saves, falling back to the Steam Proton prefix."""

    def __init__(
        self,
        live_save_dir: Path | None = None,
        backup_dir: Path | None = None,
        *,
        home: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._live_override = live_save_dir
        self._backup_override = backup_dir
        self._home = home or Path.home()
        self._environ = os.environ if environ is None else environ

    def _user_data_root(self) -> Path:
        xdg = self._environ.get("XDG_DATA_HOME", "")
        return Path(xdg) if xdg else self._home / ".local" / "share"

    def _proton_save_directory(self) -> Path:
        return (
            self._user_data_root() / "Steam" / "steamapps" / "compatdata" / STEAM_APP_ID
            / "pfx" / "drive_c" / "users" / "steamuser" / "AppData" / "Roaming" / GAME_DIR_NAME
        )

    def _default_live_save_directory(self) -> Path:
        native = self._user_data_root() / GAME_DIR_NAME
        if native.is_dir():
            return native
        proton = self._proton_save_directory()
        if proton.is_dir():
            logger.debug(f"Using Steam Proton save directory: {proton}")
            return proton
        return native


_RESOLVERS: dict[str, type[_ResolverMixin]] = {
    "Windows": WindowsPathResolver,
    "Darwin": MacOsPathResolver,
    "Linux": LinuxPathResolver,
}


def create_path_resolver(
    system: str | None = None,
    live_save_dir: Path | None = None,
    backup_dir: Path | None = None,
) -> PathResolver:
    """Pick the resolver for *system* (defaults to the running OS)."""
    system = platform.system() if system is None else system
    resolver_cls = _RESOLVERS.get(system)
    if resolver_cls is None:
        raise UnsupportedPlatform(system)
    return resolver_cls(live_save_dir=live_save_dir, backup_dir=backup_dir)


def default_settings_directory(system: str | None = None) -> Path:
    """Per-user directory for the settings file on *system*."""
    system = platform.system() if system is None else system
    resolver_cls = _RESOLVERS.get(system)
    if resolver_cls is None:
        raise UnsupportedPlatform(system)
    return resolver_cls().settings_directory()
