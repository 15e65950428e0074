"""Application settings — JSON-based, with file locking and batch update support."""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from balatro_saves.core.naming import DEFAULT_EXTENSION
from balatro_saves.core.path_resolver import default_settings_directory
from balatro_saves.models.save_file import validate_profile

_instance: "Config | None" = None


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """JSON-based settings with file locking."""

    _DEFAULTS: dict[str, Any] = {
        "selected_profile": 1,
        "retention_days": 7.0,
        "backup_path": "",
        "live_save_path": "",
        "backup_extension": DEFAULT_EXTENSION,
        "auto_backup": {
            "enabled": False,
            "interval_minutes": 5.0,
            "cleanup_interval_minutes": 60.0,
        },
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = config_dir or default_settings_directory()
        self._path = self._dir / "config.json"
        self._lock = threading.Lock()
        self._defer_save = False
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                self._deep_merge(self._data, user_data)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        if self._defer_save:
            return
        with self._lock:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                if tmp_path.exists():
                    tmp_path.unlink(missing_ok=True)

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batching multiple config changes into a single write."""
        self._defer_save = True
        try:
            yield
        finally:
            self._defer_save = False
            self._save()

    def reset_to_defaults(self) -> None:
        self._data = json.loads(json.dumps(self._DEFAULTS))
        self._save()

    # ── Generic access ──

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    # ── Typed properties ──

    @property
    def data_dir(self) -> Path:
        return self._dir

    @property
    def selected_profile(self) -> int:
        return validate_profile(self._data.get("selected_profile", 1))

    @selected_profile.setter
    def selected_profile(self, value: int) -> None:
        self.set("selected_profile", validate_profile(value))

    @property
    def retention_max_age(self) -> timedelta:
        return timedelta(days=float(self._data.get("retention_days", 7.0)))

    @retention_max_age.setter
    def retention_max_age(self, value: timedelta) -> None:
        if value < timedelta(0):
            raise ValueError(f"retention age must not be negative, got {value}")
        self.set("retention_days", value.total_seconds() / 86400)

    @property
    def backup_path(self) -> Path | None:
        raw = self._data.get("backup_path", "")
        return Path(raw) if raw else None

    @backup_path.setter
    def backup_path(self, value: Path | None) -> None:
        self.set("backup_path", str(value) if value else "")

    @property
    def live_save_path(self) -> Path | None:
        raw = self._data.get("live_save_path", "")
        return Path(raw) if raw else None

    @live_save_path.setter
    def live_save_path(self, value: Path | None) -> None:
        self.set("live_save_path", str(value) if value else "")

    @property
    def backup_extension(self) -> str:
        return str(self._data.get("backup_extension") or DEFAULT_EXTENSION)

    @property
    def auto_backup_enabled(self) -> bool:
        return bool(self.get("auto_backup.enabled", False))

    @auto_backup_enabled.setter
    def auto_backup_enabled(self, value: bool) -> None:
        self.set("auto_backup.enabled", value)

    @property
    def auto_backup_interval_minutes(self) -> float:
        return float(self.get("auto_backup.interval_minutes", 5.0))

    @auto_backup_interval_minutes.setter
    def auto_backup_interval_minutes(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"interval must be positive, got {value}")
        self.set("auto_backup.interval_minutes", value)

    @property
    def cleanup_interval_minutes(self) -> float:
        return float(self.get("auto_backup.cleanup_interval_minutes", 60.0))
