"""Profile and backup snapshot models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import NamedTuple

from balatro_saves.errors import InvalidProfile
from balatro_saves.utils import format_size

PROFILE_RANGE = range(1, 5)


def validate_profile(profile: object) -> int:
    """Return *profile* unchanged if it is a valid profile number, else raise."""
    if isinstance(profile, bool) or not isinstance(profile, int) or profile not in PROFILE_RANGE:
        raise InvalidProfile(profile)
    return profile


class DecodedName(NamedTuple):
    """Fields recovered from a backup filename."""

    profile: int
    timestamp: datetime
    sequence: int = 0  # same-second disambiguation suffix, 0 when absent


@dataclass
class SaveFileInfo:
    """One backup snapshot on disk.

    ``profile`` and ``timestamp`` are always decoded from the filename, never
    taken from file metadata.
    """

    file_path: Path
    profile: int
    timestamp: datetime
    file_size: int = 0
    sequence: int = 0

    @property
    def display_name(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d %H:%M:%S")

    @property
    def formatted_size(self) -> str:
        return format_size(self.file_size)

    @property
    def sort_key(self) -> tuple[datetime, int, str]:
        return (self.timestamp, self.sequence, self.file_path.name)
