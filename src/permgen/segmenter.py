# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Split identifiers into period-separated permission segments."""

import re

SEGMENT_SEPARATOR = "."

_CASE_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_period_separated(identifier: str) -> str:
    """Convert a camel or Pascal cased identifier to a permission name.

    Existing periods are kept as separators and every period-delimited chunk is
    split on its own, so ``"SampleTwo.Property"`` becomes
    ``"sample.two.property"``. Already segmented input is returned unchanged.

    Args:
        identifier: Identifier text, possibly containing periods.

    Returns:
        Lowercase, period-joined segments.
    """
    chunks = identifier.split(SEGMENT_SEPARATOR)
    return SEGMENT_SEPARATOR.join(_split_chunk(chunk) for chunk in chunks).lower()


def _split_chunk(chunk: str) -> str:
    """Insert separators before each uppercase letter except the first character."""
    return SEGMENT_SEPARATOR.join(_CASE_BOUNDARY.split(chunk))
