# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for permission slots and their containers."""

import enum
import logging
from dataclasses import dataclass, field
from typing import Literal

logger = logging.getLogger(__name__)

ContainerKind = Literal["repo", "store"]


class SlotContractError(RuntimeError):
    """Represent a slot declaration that violates the discovery contract."""


class Visibility(str, enum.Enum):
    """Declared access level of a slot, emitted verbatim."""

    PUBLIC = "public"
    INTERNAL = "internal"
    PROTECTED = "protected"
    PRIVATE = "private"


class GeneratorFlags(enum.IntFlag):
    """Bit-encoded generator options as written on container markers."""

    NONE = 0
    OBFUSCATE = 0b1
    UPPER_CASE = 0b10
    PARSE_PREFIX = 0b100
    GENERATE_ALL_PERMISSIONS_METHOD = 0b1000


@dataclass(frozen=True)
class ContainerFlags:
    """Named generator options for one container.

    Attributes:
        obfuscate: Replace names with short digest tokens.
        upper_case: Upper-case the final names.
        parse_prefix: Re-segment the composed name on case boundaries.
        emit_enumeration_method: Emit one declaration listing every value.
    """

    obfuscate: bool = False
    upper_case: bool = False
    parse_prefix: bool = False
    emit_enumeration_method: bool = False

    @classmethod
    def from_bits(cls, value: int) -> "ContainerFlags":
        """Decode a bit-encoded flag value.

        Args:
            value: Integer built from ``GeneratorFlags`` members.

        Returns:
            Decoded flag record.
        """
        bits = GeneratorFlags(value & 0b1111)
        return cls(
            obfuscate=GeneratorFlags.OBFUSCATE in bits,
            upper_case=GeneratorFlags.UPPER_CASE in bits,
            parse_prefix=GeneratorFlags.PARSE_PREFIX in bits,
            emit_enumeration_method=GeneratorFlags.GENERATE_ALL_PERMISSIONS_METHOD
            in bits,
        )

    def active_stages(self) -> list[str]:
        """List enabled options by name, for logging."""
        return [name for name, enabled in vars(self).items() if enabled]


NO_FLAGS = ContainerFlags()


@dataclass(frozen=True)
class SlotRecord:
    """Represent one declared permission slot.

    Attributes:
        identity: Declared slot name.
        visibility: Declared access level.
        is_static: Whether the slot is declared static (class-level).
        prefix_tokens: Tokens of the first prefix declaration, verbatim.
        canonical_name: Current permission name; rewritten by each stage.
        finalized: Set once the transform pipeline produced this record.
    """

    identity: str
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False
    prefix_tokens: tuple[str, ...] = ()
    canonical_name: str = ""
    finalized: bool = False

    def __post_init__(self) -> None:
        if not self.identity:
            raise SlotContractError("Slot identity must not be empty")


@dataclass(frozen=True)
class ContainerDescriptor:
    """Represent one output container and its slots.

    Attributes:
        name: Container (class) name.
        namespace_path: Dotted namespace or module path of the container.
        slots: Slots in declaration order.
        flags: Generator options for the container.
        kind: ``repo`` (no options) or ``store`` (configurable).
        re_emittable: Whether the container carries the partial marker.
        source_path: Origin of the declaration, when known.
    """

    name: str
    namespace_path: str
    slots: tuple[SlotRecord, ...] = ()
    flags: ContainerFlags = field(default_factory=ContainerFlags)
    kind: ContainerKind = "store"
    re_emittable: bool = True
    source_path: str | None = None

    @property
    def qualified_name(self) -> str:
        if not self.namespace_path:
            return self.name
        return f"{self.namespace_path}.{self.name}"

    def effective_flags(self) -> ContainerFlags:
        """Return the options that apply for this container kind.

        Returns:
            The declared flags for stores; no options for repos.
        """
        if self.kind == "repo":
            return NO_FLAGS
        return self.flags
