# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for identifier segmentation."""

import pytest

from permgen import to_period_separated


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("SampleProperty", "sample.property"),
        ("Sample.Property", "sample.property"),
        ("SampleTwo.Property", "sample.two.property"),
        ("DataUsers.duckies.public", "data.users.duckies.public"),
        ("DataUsersDuckiesPublic", "data.users.duckies.public"),
        ("lorescopesRead", "lorescopes.read"),
        ("Account", "account"),
    ],
)
def test_pg_seg_001_splits_on_case_boundaries(identifier: str, expected: str) -> None:
    assert to_period_separated(identifier) == expected


@pytest.mark.parametrize(
    "identifier",
    ["SampleProperty", "DataUsersDuckiesPublic", "Sample.Property", "accountRead"],
)
def test_pg_seg_002_segmentation_is_idempotent(identifier: str) -> None:
    once = to_period_separated(identifier)

    assert to_period_separated(once) == once


def test_pg_seg_003_already_segmented_input_is_unchanged() -> None:
    assert to_period_separated("data.user.lorescopes.read") == "data.user.lorescopes.read"


def test_pg_seg_004_first_character_never_starts_empty_segment() -> None:
    result = to_period_separated("Read")

    assert result == "read"
    assert not result.startswith(".")


def test_pg_seg_005_consecutive_capitals_split_individually() -> None:
    assert to_period_separated("ABC") == "a.b.c"
