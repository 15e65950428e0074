"""Live save watcher — notifies when the game writes a profile's save file."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from loguru import logger
from PySide6.QtCore import QFileSystemWatcher, QObject, QTimer

from balatro_saves.core.path_resolver import PathResolver
from balatro_saves.models.save_file import validate_profile


class LiveFileWatcher(QObject):
    """
    Subscription to OS file events for one profile's live save.

    Notifications are delivered through the Qt event loop of the thread that
    owns the watcher; callbacks should be short and hand real work off.
    Events that arrive together (a rename-over reports both the file and the
    directory) are coalesced into one callback.
    The directory is watched as well as the file, so a save that is deleted
    and recreated (or replaced by rename) is picked up again.

    Release the subscription with :meth:`stop` or by using the watcher as a
    context manager.
    """

    def __init__(self, paths: PathResolver, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._paths = paths
        self._watcher: QFileSystemWatcher | None = None
        self._profile: int | None = None
        self._file_path: Path | None = None
        self._on_changed: Callable[[], None] | None = None

        self._pending = QTimer(self)
        self._pending.setSingleShot(True)
        self._pending.setInterval(0)
        self._pending.timeout.connect(self._deliver)

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None

    @property
    def profile(self) -> int | None:
        return self._profile

    def watched_paths(self) -> list[str]:
        if self._watcher is None:
            return []
        return self._watcher.directories() + self._watcher.files()

    def watch(self, profile: int, on_changed: Callable[[], None]) -> bool:
        """Start watching *profile*, replacing any previous watch.

        Returns False, without raising, when the live-save directory does not
        exist yet.
        """
        validate_profile(profile)
        self.stop()

        file_path = self._paths.live_save_path(profile)
        directory = file_path.parent
        if not directory.is_dir():
            logger.warning(f"Live save directory missing, watcher not started: {directory}")
            return False

        watcher = QFileSystemWatcher(self)
        watcher.addPath(str(directory))
        if file_path.is_file():
            watcher.addPath(str(file_path))
        watcher.fileChanged.connect(self._on_file_changed)
        watcher.directoryChanged.connect(self._on_directory_changed)

        self._watcher = watcher
        self._profile = profile
        self._file_path = file_path
        self._on_changed = on_changed
        logger.debug(f"Watching live save for profile {profile}: {file_path}")
        return True

    def stop(self) -> None:
        """Stop watching. Safe to call when not watching."""
        self._pending.stop()
        watcher = self._watcher
        if watcher is None:
            return
        watcher.fileChanged.disconnect(self._on_file_changed)
        watcher.directoryChanged.disconnect(self._on_directory_changed)
        watched = watcher.files() + watcher.directories()
        if watched:
            watcher.removePaths(watched)
        watcher.deleteLater()

        self._watcher = None
        self._profile = None
        self._file_path = None
        self._on_changed = None

    def _is_tracking_file(self) -> bool:
        return self._watcher is not None and str(self._file_path) in self._watcher.files()

    def _on_file_changed(self, path: str) -> None:
        if self._watcher is None or self._file_path is None:
            return
        if self._file_path.is_file():
            # A rename-over drops the path from the watch list
            if not self._is_tracking_file():
                self._watcher.addPath(str(self._file_path))
            self._notify()

    def _on_directory_changed(self, path: str) -> None:
        if self._watcher is None or self._file_path is None:
            return
        if self._file_path.is_file() and not self._is_tracking_file():
            self._watcher.addPath(str(self._file_path))
            self._notify()

    def _notify(self) -> None:
        self._pending.start()

    def _deliver(self) -> None:
        if self._on_changed is not None:
            self._on_changed()

    def __enter__(self) -> LiveFileWatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
