"""Command-line front end for the backup core.

Usage:
    balatro-saves list [--profile N]
    balatro-saves backup [--profile N]
    balatro-saves restore <backup> [--profile N]
    balatro-saves delete <backup>
    balatro-saves prune [--days D] [--all-profiles]
    balatro-saves watch [--backup-on-change]
    balatro-saves auto
    balatro-saves paths | open | select <N> | retention <D>

Without ``--profile`` the selected profile from the settings file is used.
"""

from __future__ import annotations

import argparse
import signal
import sys
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from loguru import logger

from balatro_saves.config import Config
from balatro_saves.context import create_context
from balatro_saves.errors import SaveToolkitError
from balatro_saves.logger import setup_logger
from balatro_saves.utils import format_size, open_folder

if TYPE_CHECKING:
    from balatro_saves.context import AppContext


def _profile(ctx: AppContext, args: argparse.Namespace) -> int:
    return args.profile if args.profile is not None else ctx.config.selected_profile


def cmd_paths(ctx: AppContext, args: argparse.Namespace) -> int:
    print(f"Live saves : {ctx.paths.resolve_live_save_directory()}")
    print(f"Backups    : {ctx.paths.resolve_backup_storage_directory()}")
    print(f"Settings   : {ctx.config.data_dir}")
    return 0


def cmd_list(ctx: AppContext, args: argparse.Namespace) -> int:
    profile = _profile(ctx, args)
    backups = ctx.catalog.list_backups(profile)
    if not backups:
        print(f"No backups for profile {profile}")
        return 0
    for info in backups:
        print(f"{info.display_name}  {info.formatted_size:>9}  {info.file_path.name}")
    return 0


def cmd_backup(ctx: AppContext, args: argparse.Namespace) -> int:
    info = ctx.backup_manager.create_backup(_profile(ctx, args))
    print(f"Created {info.file_path}")
    return 0


def cmd_restore(ctx: AppContext, args: argparse.Namespace) -> int:
    profile = _profile(ctx, args)
    backup = Path(args.backup)
    if not backup.is_absolute() and not backup.exists():
        backup = ctx.paths.resolve_backup_storage_directory() / backup
    live = ctx.backup_manager.restore_backup(profile, backup)
    print(f"Restored {backup.name} to {live}")
    return 0


def cmd_delete(ctx: AppContext, args: argparse.Namespace) -> int:
    backup = Path(args.backup)
    if not backup.is_absolute() and not backup.exists():
        backup = ctx.paths.resolve_backup_storage_directory() / backup
    ctx.backup_manager.delete_backup(backup)
    print(f"Deleted {backup.name}")
    return 0


def cmd_prune(ctx: AppContext, args: argparse.Namespace) -> int:
    max_age = timedelta(days=args.days) if args.days is not None else ctx.config.retention_max_age
    if args.all_profiles:
        results = ctx.retention.prune_all(max_age)
    else:
        profile = _profile(ctx, args)
        results = {profile: ctx.retention.prune_older_than(profile, max_age)}

    exit_code = 0
    for profile, result in results.items():
        print(f"Profile {profile}: deleted {len(result.deleted)}, failed {len(result.failed)}")
        for path, error in result.failed.items():
            print(f"  {path.name}: {error}", file=sys.stderr)
            exit_code = 1
    return exit_code


def cmd_open(ctx: AppContext, args: argparse.Namespace) -> int:
    open_folder(ctx.paths.resolve_backup_storage_directory())
    return 0


def cmd_select(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.config.selected_profile = args.number
    print(f"Selected profile {args.number}")
    return 0


def cmd_retention(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.config.retention_max_age = timedelta(days=args.days)
    print(f"Backups older than {args.days:g} days will be pruned")
    return 0


def _run_event_loop() -> int:
    """Run a Qt event loop until Ctrl+C."""
    from PySide6.QtCore import QCoreApplication, QTimer

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # Wake the loop periodically so Python can run the SIGINT handler
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(250)
    return app.exec()


def cmd_watch(ctx: AppContext, args: argparse.Namespace) -> int:
    from PySide6.QtCore import QCoreApplication, QTimer

    from balatro_saves.core.watcher import LiveFileWatcher

    QCoreApplication.instance() or QCoreApplication(sys.argv)
    profile = _profile(ctx, args)

    def backup_now() -> None:
        try:
            info = ctx.backup_manager.create_backup(profile)
        except SaveToolkitError as e:
            logger.error(str(e))
            return
        print(f"Created {info.file_path.name} ({format_size(info.file_size)})")

    def on_changed() -> None:
        print(f"Profile {profile} save changed")
        if args.backup_on_change:
            QTimer.singleShot(0, backup_now)

    with LiveFileWatcher(ctx.paths) as watcher:
        if not watcher.watch(profile, on_changed):
            print("Live save directory does not exist yet; nothing to watch", file=sys.stderr)
            return 1
        print(f"Watching profile {profile}, press Ctrl+C to stop")
        return _run_event_loop()


def cmd_auto(ctx: AppContext, args: argparse.Namespace) -> int:
    from PySide6.QtCore import QCoreApplication

    from balatro_saves.core.scheduler import AutoBackupScheduler

    QCoreApplication.instance() or QCoreApplication(sys.argv)
    scheduler = AutoBackupScheduler(ctx.backup_manager, ctx.retention, ctx.config)
    scheduler.backup_created.connect(lambda info: print(f"Created {info.file_path.name}"))
    scheduler.start(backup=True)
    try:
        return _run_event_loop()
    finally:
        scheduler.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="balatro-saves",
        description="Back up, list, restore and prune Balatro save files.",
    )
    parser.add_argument("--config-dir", type=Path, help="Directory holding config.json")
    parser.add_argument("--backup-dir", type=Path, help="Override the backup directory")
    parser.add_argument("--live-dir", type=Path, help="Override the game's save directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    profile_parent = argparse.ArgumentParser(add_help=False)
    profile_parent.add_argument("-p", "--profile", type=int, help="Profile number (1-4)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("paths", help="Show resolved directories").set_defaults(func=cmd_paths)
    sub.add_parser("list", parents=[profile_parent], help="List backups").set_defaults(
        func=cmd_list
    )
    sub.add_parser("backup", parents=[profile_parent], help="Back up the live save").set_defaults(
        func=cmd_backup
    )

    p = sub.add_parser("restore", parents=[profile_parent], help="Restore a backup")
    p.add_argument("backup", help="Backup file name or path")
    p.set_defaults(func=cmd_restore)

    p = sub.add_parser("delete", help="Delete a backup")
    p.add_argument("backup", help="Backup file name or path")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("prune", parents=[profile_parent], help="Delete old backups")
    p.add_argument("--days", type=float, help="Maximum age in days (default: from settings)")
    p.add_argument("--all-profiles", action="store_true", help="Prune every profile")
    p.set_defaults(func=cmd_prune)

    p = sub.add_parser("watch", parents=[profile_parent], help="Watch the live save")
    p.add_argument("--backup-on-change", action="store_true", help="Back up on every change")
    p.set_defaults(func=cmd_watch)

    sub.add_parser("auto", help="Run the auto-backup scheduler").set_defaults(func=cmd_auto)
    sub.add_parser("open", help="Open the backup folder").set_defaults(func=cmd_open)

    p = sub.add_parser("select", help="Set the default profile")
    p.add_argument("number", type=int)
    p.set_defaults(func=cmd_select)

    p = sub.add_parser("retention", help="Set the retention age in days")
    p.add_argument("days", type=float)
    p.set_defaults(func=cmd_retention)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config_dir)
        setup_logger(config.data_dir / "logs", verbose=args.verbose)
        ctx = create_context(config, live_save_dir=args.live_dir, backup_dir=args.backup_dir)
        return args.func(ctx, args)
    except (SaveToolkitError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
