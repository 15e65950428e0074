"""Backup filename codec — ``profile{N}_{yyyyMMdd}_{HHmmss}.{ext}``.

Existing backups on disk use exactly this shape, so encoding must stay
bit-exact. Same-second backups from one run get a ``-{n}`` suffix after the
time field (``profile1_20250520_120000-1.userdata``), which sorts after the
plain name and decodes to ``sequence=n``.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from balatro_saves.models.save_file import DecodedName, validate_profile

DEFAULT_EXTENSION = "userdata"

_DATE_FORMAT = "%Y%m%d"
_TIME_FORMAT = "%H%M%S"
_NAME_RE = re.compile(
    r"profile(?P<profile>[1-4])_(?P<date>\d{8})_(?P<time>\d{6})"
    r"(?:-(?P<seq>[1-9]\d*))?\.(?P<ext>[^.]+)"
)


def encode(
    profile: int,
    timestamp: datetime,
    extension: str = DEFAULT_EXTENSION,
    sequence: int = 0,
) -> str:
    """Build the backup filename for *profile* at *timestamp* (second precision)."""
    validate_profile(profile)
    if sequence < 0:
        raise ValueError(f"sequence must be >= 0, got {sequence}")
    stamp = timestamp.strftime(f"{_DATE_FORMAT}_{_TIME_FORMAT}")
    suffix = f"-{sequence}" if sequence else ""
    return f"profile{profile}_{stamp}{suffix}.{extension.lstrip('.')}"


def decode(filename: str | Path, extension: str | None = DEFAULT_EXTENSION) -> DecodedName | None:
    """Parse a backup filename. Returns ``None`` for anything not in the exact shape.

    *filename* may be a bare name or a path. Pass ``extension=None`` to accept
    any extension.
    """
    name = Path(filename).name
    match = _NAME_RE.fullmatch(name)
    if match is None:
        return None
    if extension is not None and match["ext"] != extension.lstrip("."):
        return None
    try:
        timestamp = datetime.strptime(
            f"{match['date']}_{match['time']}", f"{_DATE_FORMAT}_{_TIME_FORMAT}"
        )
    except ValueError:
        return None
    return DecodedName(
        profile=int(match["profile"]),
        timestamp=timestamp,
        sequence=int(match["seq"] or 0),
    )
