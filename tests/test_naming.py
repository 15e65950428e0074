"""Tests for the backup filename codec."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from balatro_saves.core.naming import decode, encode
from balatro_saves.errors import InvalidProfile


class TestEncode:
    def test_exact_format(self) -> None:
        name = encode(2, datetime(2025, 5, 20, 12, 0, 0))
        assert name == "profile2_20250520_120000.userdata"

    def test_truncates_subseconds(self) -> None:
        name = encode(1, datetime(2025, 1, 2, 3, 4, 5, 999_999))
        assert name == "profile1_20250102_030405.userdata"

    def test_custom_extension(self) -> None:
        assert encode(3, datetime(2025, 1, 2, 3, 4, 5), ".jkr") == "profile3_20250102_030405.jkr"

    def test_sequence_suffix(self) -> None:
        name = encode(1, datetime(2025, 1, 2, 3, 4, 5), sequence=2)
        assert name == "profile1_20250102_030405-2.userdata"

    @pytest.mark.parametrize("profile", [0, 5, -1, True])
    def test_invalid_profile(self, profile: int) -> None:
        with pytest.raises(InvalidProfile):
            encode(profile, datetime(2025, 1, 1))


class TestDecode:
    @pytest.mark.parametrize("profile", [1, 2, 3, 4])
    def test_round_trip(self, profile: int) -> None:
        ts = datetime(2024, 12, 31, 23, 59, 58, 123456)
        decoded = decode(encode(profile, ts))
        assert decoded is not None
        assert (decoded.profile, decoded.timestamp) == (profile, ts.replace(microsecond=0))

    def test_accepts_full_path(self) -> None:
        decoded = decode(Path("/some/dir/profile4_20250521_090000.userdata"))
        assert decoded is not None
        assert decoded.profile == 4
        assert decoded.timestamp == datetime(2025, 5, 21, 9, 0, 0)
        assert decoded.sequence == 0

    def test_sequence_decoded(self) -> None:
        decoded = decode("profile1_20250521_090000-3.userdata")
        assert decoded is not None
        assert decoded.sequence == 3

    @pytest.mark.parametrize(
        "name",
        [
            "profile1.userdata",
            "profile1_20250521.userdata",
            "profile1_20250521_090000_extra.userdata",
            "profileX_20250521_090000.userdata",
            "profile01_20250521_090000.userdata",
            "profile5_20250521_090000.userdata",
            "profile1_2025052a_090000.userdata",
            "profile1_20251340_090000.userdata",
            "profile1_20250521_256000.userdata",
            "profile1_20250521_090000.txt",
            "profile1_20250521_090000",
            "profile1_20250521_090000-0.userdata",
            "config.json",
            "",
        ],
    )
    def test_rejects_malformed(self, name: str) -> None:
        assert decode(name) is None

    def test_any_extension(self) -> None:
        assert decode("profile1_20250521_090000.jkr", extension=None) is not None
