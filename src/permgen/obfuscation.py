# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Deterministic obfuscation of permission names.

Names are replaced with a five character token taken from the base64 digest of
the name. The token space is small: two different names can map to the same
token, and nothing here prevents that.
"""

import base64
import hashlib
import re

DEFAULT_HASH_ALGORITHM = "sha256"
TOKEN_LENGTH = 5
PAD_CHARACTER = "0"

_TRUNCATE_THRESHOLD = 10
_STRIPPED_CHARACTERS = re.compile(r"[+/=]")


def obfuscate_name(name: str, algorithm: str = DEFAULT_HASH_ALGORITHM) -> str:
    """Obfuscate a permission name into a fixed-width token.

    Args:
        name: Current canonical permission name.
        algorithm: ``hashlib`` algorithm name.

    Returns:
        Five character token; identical for identical input and algorithm.

    Raises:
        ValueError: If ``algorithm`` is unknown to ``hashlib``.
    """
    digest = hashlib.new(algorithm, name.encode("utf-8")).digest()
    encoded = base64.b64encode(digest).decode("ascii")
    return fit_token(_STRIPPED_CHARACTERS.sub("", encoded))


def fit_token(text: str) -> str:
    """Truncate or pad filtered digest text to the token width.

    Args:
        text: Base64 digest text with ``+``, ``/`` and ``=`` removed.

    Returns:
        The first five characters of long text, otherwise the text right-padded
        with ``0``.
    """
    if len(text) > _TRUNCATE_THRESHOLD:
        return text[:TOKEN_LENGTH]
    return text.ljust(TOKEN_LENGTH, PAD_CHARACTER)[:TOKEN_LENGTH]


def validate_algorithm(algorithm: str) -> str:
    """Check that a digest algorithm can be used for obfuscation.

    Args:
        algorithm: ``hashlib`` algorithm name.

    Returns:
        The normalized algorithm name.

    Raises:
        ValueError: If the algorithm is unavailable or needs a digest length.
    """
    normalized = algorithm.lower()
    if normalized not in hashlib.algorithms_available:
        raise ValueError(f"Unknown hash algorithm: {algorithm}")
    if normalized.startswith("shake_"):
        raise ValueError(f"Variable-length hash algorithm not supported: {algorithm}")
    return normalized
