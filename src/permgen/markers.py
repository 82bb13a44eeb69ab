# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Markers used in source code to declare permission containers.

Example::

    @permissions_store(GeneratorFlags.PARSE_PREFIX)
    class Permissions(Partial):
        LorescopesRead: ClassVar[Annotated[str, Prefix("DataUser")]]
        AccountRead: Annotated[str, Visibility.INTERNAL]

The markers carry no behavior at runtime beyond recording their arguments;
``permgen.discovery`` reads them from the source text.
"""

from collections.abc import Callable
from typing import TypeVar, overload

from permgen.model import ContainerKind, GeneratorFlags, Visibility

__all__ = [
    "GeneratorFlags",
    "Partial",
    "Prefix",
    "Visibility",
    "permissions_repo",
    "permissions_store",
]

_T = TypeVar("_T", bound=type)

CONTAINER_ATTRIBUTE = "__permgen_container__"


class Partial:
    """Base class marking a container whose declarations get generated values."""


class Prefix:
    """Prefix declaration attached to a slot annotation."""

    def __init__(self, *tokens: str) -> None:
        self.tokens = tokens

    def __repr__(self) -> str:
        return f"Prefix({', '.join(repr(token) for token in self.tokens)})"


@overload
def permissions_store(flags: _T) -> _T: ...


@overload
def permissions_store(flags: int = GeneratorFlags.NONE) -> Callable[[_T], _T]: ...


def permissions_store(flags=GeneratorFlags.NONE):
    """Mark a class as a configurable permissions container.

    Args:
        flags: ``GeneratorFlags`` combination, or the class when used bare.

    Returns:
        Class decorator, or the decorated class.
    """
    return _mark("store", flags)


@overload
def permissions_repo(flags: _T) -> _T: ...


@overload
def permissions_repo(flags: int = GeneratorFlags.NONE) -> Callable[[_T], _T]: ...


def permissions_repo(flags=GeneratorFlags.NONE):
    """Mark a class as a flat permissions container; flags are ignored."""
    return _mark("repo", flags)


def _mark(kind: ContainerKind, flags):
    if isinstance(flags, type):
        setattr(flags, CONTAINER_ATTRIBUTE, (kind, GeneratorFlags.NONE))
        return flags

    def decorator(cls):
        setattr(cls, CONTAINER_ATTRIBUTE, (kind, GeneratorFlags(flags)))
        return cls

    return decorator
