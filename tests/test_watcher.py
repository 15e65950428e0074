"""Tests for the LiveFileWatcher."""

from __future__ import annotations

import time
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from balatro_saves.core.path_resolver import LinuxPathResolver
from balatro_saves.core.watcher import LiveFileWatcher
from balatro_saves.errors import InvalidProfile

from conftest import write_live


@pytest.fixture
def watcher(qapp: QCoreApplication, paths: LinuxPathResolver):
    w = LiveFileWatcher(paths)
    yield w
    w.stop()


def _wait_for(condition, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        QCoreApplication.processEvents()
        if condition():
            return True
        time.sleep(0.02)
    return False


def _drain(duration: float = 0.1) -> None:
    deadline = time.monotonic() + duration
    while time.monotonic() < deadline:
        QCoreApplication.processEvents()
        time.sleep(0.01)


class TestWatchLifecycle:
    def test_watches_directory_and_file(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        live = write_live(live_dir, 1, b"data")

        assert watcher.watch(1, lambda: None)

        assert watcher.is_watching
        assert watcher.profile == 1
        assert str(live_dir) in watcher.watched_paths()
        assert str(live) in watcher.watched_paths()

    def test_missing_directory_does_not_start(self, qapp: QCoreApplication, tmp_path: Path) -> None:
        w = LiveFileWatcher(LinuxPathResolver(live_save_dir=tmp_path / "not-there"))
        assert w.watch(1, lambda: None) is False
        assert not w.is_watching

    def test_new_watch_replaces_previous(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        write_live(live_dir, 1, b"a")
        write_live(live_dir, 2, b"b")
        watcher.watch(1, lambda: None)
        watcher.watch(2, lambda: None)
        assert watcher.profile == 2
        assert str(live_dir / "profile1.userdata") not in watcher.watched_paths()

    def test_stop_is_idempotent(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        watcher.stop()
        watcher.watch(1, lambda: None)
        watcher.stop()
        watcher.stop()
        assert not watcher.is_watching
        assert watcher.watched_paths() == []

    def test_context_manager_stops(self, qapp: QCoreApplication, paths: LinuxPathResolver) -> None:
        with LiveFileWatcher(paths) as w:
            w.watch(3, lambda: None)
            assert w.is_watching
        assert not w.is_watching

    def test_invalid_profile(self, watcher: LiveFileWatcher) -> None:
        with pytest.raises(InvalidProfile):
            watcher.watch(0, lambda: None)


class TestNotifications:
    def test_file_change_notifies(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        live = write_live(live_dir, 1, b"data")
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))

        watcher._on_file_changed(str(live))

        assert _wait_for(lambda: bool(calls))
        assert calls == [1]

    def test_created_file_is_picked_up(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))
        live = write_live(live_dir, 1, b"first save")

        watcher._on_directory_changed(str(live_dir))

        assert _wait_for(lambda: bool(calls))
        assert calls == [1]
        assert str(live) in watcher.watched_paths()

    def test_unrelated_directory_change_ignored(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        write_live(live_dir, 1, b"data")
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))
        (live_dir / "other.txt").write_text("x")

        watcher._on_directory_changed(str(live_dir))

        _drain()
        assert calls == []

    def test_no_callback_after_stop(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        live = write_live(live_dir, 1, b"data")
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))
        watcher.stop()

        watcher._on_file_changed(str(live))

        _drain()
        assert calls == []

    def test_os_event_delivered(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        live = write_live(live_dir, 1, b"data")
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))

        live.write_bytes(b"autosaved by the game")

        assert _wait_for(lambda: bool(calls))

    def test_pending_notification_dropped_on_stop(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        live = write_live(live_dir, 1, b"data")
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))

        watcher._on_file_changed(str(live))
        watcher.stop()
        _drain()

        assert calls == []


class TestCoalescing:
    def test_rename_over_notifies_once(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))
        live = write_live(live_dir, 1, b"replaced")

        # Both signals fire for one replace; either order must give one callback
        watcher._on_directory_changed(str(live_dir))
        watcher._on_file_changed(str(live))
        _drain()

        assert calls == [1]

    def test_separate_bursts_notify_separately(self, watcher: LiveFileWatcher, live_dir: Path) -> None:
        live = write_live(live_dir, 1, b"data")
        calls: list[int] = []
        watcher.watch(1, lambda: calls.append(1))

        watcher._on_file_changed(str(live))
        assert _wait_for(lambda: len(calls) == 1)
        watcher._on_file_changed(str(live))
        assert _wait_for(lambda: len(calls) == 2)
