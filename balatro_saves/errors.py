"""Failure kinds raised by the backup core."""

from __future__ import annotations

from pathlib import Path


class SaveToolkitError(Exception):
    """Base class for every classified failure of the backup core."""


class InvalidProfile(SaveToolkitError, ValueError):
    """Profile number outside the supported range."""

    def __init__(self, profile: object) -> None:
        super().__init__(f"Profile number must be between 1 and 4, got {profile!r}")
        self.profile = profile


class UnsupportedPlatform(SaveToolkitError):
    """The current operating system has no known save location."""

    def __init__(self, system: str) -> None:
        super().__init__(f"Unsupported operating system: {system or 'unknown'}")
        self.system = system


class StorageUnavailable(SaveToolkitError):
    """The backup-storage directory cannot be created or accessed."""

    def __init__(self, path: Path, cause: OSError | None = None) -> None:
        super().__init__(f"Backup storage unavailable: {path} ({cause})")
        self.path = path
        self.cause = cause


class LiveSaveNotFound(SaveToolkitError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Live save not found: {path}")
        self.path = path


class BackupNotFound(SaveToolkitError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Backup file not found: {path}")
        self.path = path


class ProfileMismatch(SaveToolkitError):
    """A backup belongs to a different profile than the one requested."""

    def __init__(self, path: Path, expected: int, actual: int | None) -> None:
        found = f"profile {actual}" if actual is not None else "no recognisable profile"
        super().__init__(f"{Path(path).name} has {found}, expected profile {expected}")
        self.path = path
        self.expected = expected
        self.actual = actual


class InsufficientDiskSpace(SaveToolkitError):
    def __init__(self, path: Path, required: int, available: int) -> None:
        super().__init__(
            f"Not enough free space at {path}: need {required} bytes, {available} available"
        )
        self.path = path
        self.required = required
        self.available = available


class _IOFailure(SaveToolkitError):
    verb = ""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to {self.verb} {path}: {cause}")
        self.path = path
        self.cause = cause


class ReadFailed(_IOFailure):
    verb = "read"


class WriteFailed(_IOFailure):
    verb = "write"
