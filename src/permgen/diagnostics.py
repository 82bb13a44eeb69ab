# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Diagnostic descriptors reported during generation."""

from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning", "info"]


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Describe one diagnostic rule.

    Attributes:
        id: Stable rule identifier.
        title: Short rule title.
        message_format: ``str.format`` template for the message.
        category: Rule category.
        severity: Default severity.
    """

    id: str
    title: str
    message_format: str
    category: str
    severity: Severity


@dataclass(frozen=True)
class Diagnostic:
    """Represent one reported diagnostic."""

    descriptor: DiagnosticDescriptor
    message: str
    container: str
    source_path: str | None = None

    @property
    def is_error(self) -> bool:
        return self.descriptor.severity == "error"

    def format(self) -> str:
        location = f"{self.source_path}: " if self.source_path else ""
        return (
            f"{location}{self.descriptor.severity} {self.descriptor.id}: {self.message}"
        )


NON_PARTIAL_CONTAINER = DiagnosticDescriptor(
    id="PG001",
    title="Permissions container must be partial",
    message_format="Class '{0}' should derive from Partial to support permissions generation",
    category="Usage",
    severity="error",
)


def report(
    descriptor: DiagnosticDescriptor,
    container: str,
    *args: object,
    source_path: str | None = None,
) -> Diagnostic:
    """Create a diagnostic from a descriptor.

    Args:
        descriptor: Rule being reported.
        container: Qualified container name.
        *args: Values for the message template.
        source_path: Origin of the container, when known.

    Returns:
        Diagnostic record.
    """
    return Diagnostic(
        descriptor=descriptor,
        message=descriptor.message_format.format(*args),
        container=container,
        source_path=source_path,
    )
