# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for permission name obfuscation."""

import pytest

from permgen import obfuscate_name
from permgen.obfuscation import fit_token, validate_algorithm


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("sample.permission", "aihuI"),
        ("data.user.lorescopes.read", "rGzP7"),
        ("account.read", "qgPRw"),
    ],
)
def test_pg_obf_001_obfuscation_matches_recorded_tokens(name: str, expected: str) -> None:
    assert obfuscate_name(name) == expected


def test_pg_obf_002_obfuscation_is_stable_across_calls() -> None:
    first = obfuscate_name("sample.permission")
    second = obfuscate_name("sample.permission")

    assert first == second


@pytest.mark.parametrize(
    "name", ["", "a", "sample.permission", "ünïcode.näme", "x" * 500]
)
@pytest.mark.parametrize("algorithm", ["sha256", "sha512", "md5"])
def test_pg_obf_003_token_is_always_five_characters(name: str, algorithm: str) -> None:
    token = obfuscate_name(name, algorithm=algorithm)

    assert len(token) == 5
    assert not set(token) & {"+", "/", "="}


def test_pg_obf_004_short_digest_text_is_padded() -> None:
    assert fit_token("ab") == "ab000"
    assert fit_token("") == "00000"
    assert fit_token("abcdefgh") == "abcde"
    assert fit_token("abcdefghijk") == "abcde"


def test_pg_obf_005_validate_algorithm_rejects_unknown_and_variable_length() -> None:
    assert validate_algorithm("SHA256") == "sha256"
    with pytest.raises(ValueError):
        validate_algorithm("not-a-hash")
    with pytest.raises(ValueError):
        validate_algorithm("shake_128")
