# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Assemble and render generated permission declarations."""

import json
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Literal

from permgen.model import ContainerDescriptor, Visibility

logger = logging.getLogger(__name__)

Dialect = Literal["python", "csharp"]

DIALECTS: tuple[Dialect, ...] = ("python", "csharp")
AUTO_GENERATED_MARKER = "<auto-generated />"
ENUMERATION_METHOD_NAMES: dict[Dialect, str] = {
    "python": "get_all_permissions",
    "csharp": "GetAllPermissions",
}

_INDENT = "    "


@dataclass(frozen=True)
class Declaration:
    """Bind one slot to its literal permission name.

    Attributes:
        identity: Slot name.
        visibility: Declared access level, verbatim.
        is_static: Whether the slot is class-level.
        literal: Final permission name.
    """

    identity: str
    visibility: Visibility
    is_static: bool
    literal: str


@dataclass(frozen=True)
class EnumerationDeclaration:
    """List every literal of a container in slot order."""

    name: str
    literals: tuple[str, ...]


@dataclass(frozen=True)
class EmissionRecord:
    """Represent the generated output of one container.

    Attributes:
        container: Qualified container name.
        hint_name: Relative output path for the generated source.
        declarations: One declaration per slot, in declaration order.
        enumeration: Optional declaration listing all literals.
        text: Rendered source text.
    """

    container: str
    hint_name: str
    declarations: tuple[Declaration, ...]
    enumeration: EnumerationDeclaration | None
    text: str


def assemble(
    container: ContainerDescriptor, dialect: Dialect = "python"
) -> tuple[tuple[Declaration, ...], EnumerationDeclaration | None]:
    """Build declaration records for a finalized container.

    Declarations keep slot order and are never deduplicated; slots sharing a
    name each get their own declaration.

    Args:
        container: Container whose slots went through the pipeline.
        dialect: Target dialect, used to name the enumeration method.

    Returns:
        Slot declarations and the optional enumeration declaration.
    """
    declarations = tuple(
        Declaration(
            identity=slot.identity,
            visibility=slot.visibility,
            is_static=slot.is_static,
            literal=slot.canonical_name,
        )
        for slot in container.slots
    )
    enumeration = None
    if container.effective_flags().emit_enumeration_method:
        enumeration = EnumerationDeclaration(
            name=ENUMERATION_METHOD_NAMES[dialect],
            literals=tuple(declaration.literal for declaration in declarations),
        )
    return declarations, enumeration


def emit(container: ContainerDescriptor, dialect: Dialect = "python") -> EmissionRecord:
    """Assemble and render one container.

    Args:
        container: Container whose slots went through the pipeline.
        dialect: Output language.

    Returns:
        Emission record with rendered text.

    Raises:
        ValueError: If ``dialect`` is unknown.
    """
    if dialect not in DIALECTS:
        raise ValueError(f"Unknown dialect: {dialect}")
    declarations, enumeration = assemble(container, dialect=dialect)
    if dialect == "csharp":
        text = render_csharp(container, declarations, enumeration)
    else:
        text = render_python(container, declarations, enumeration)
    return EmissionRecord(
        container=container.qualified_name,
        hint_name=hint_name(container, dialect),
        declarations=declarations,
        enumeration=enumeration,
        text=text,
    )


def hint_name(container: ContainerDescriptor, dialect: Dialect) -> str:
    """Build the relative output path of a container's generated source.

    The path is derived from the qualified name with the class name kept
    verbatim, so distinct containers never share a path.

    Args:
        container: Output container.
        dialect: Output language.

    Returns:
        POSIX relative path.
    """
    if dialect == "csharp":
        return f"{container.qualified_name}.g.cs"
    parts = [part for part in container.namespace_path.split(".") if part]
    return str(PurePosixPath(*parts, f"{container.name}_generated.py"))



def render_csharp(
    container: ContainerDescriptor,
    declarations: tuple[Declaration, ...],
    enumeration: EnumerationDeclaration | None,
) -> str:
    """Render a partial C# class binding each property to its literal."""
    lines = [f"// {AUTO_GENERATED_MARKER}"]
    if container.kind == "store":
        lines.append("using System.Collections.Generic;")
    if container.namespace_path:
        lines.append(f"namespace {container.namespace_path};")
    lines.append("")
    lines.append(f"public partial class {container.name} {{")
    for declaration in declarations:
        static_prefix = "static " if declaration.is_static else ""
        lines.append(
            f"{_INDENT}{declaration.visibility.value} {static_prefix}partial string "
            f"{declaration.identity} {{ get => {_quote(declaration.literal)}; }}"
        )
    if container.kind == "store":
        lines.append("")
    if enumeration is not None:
        lines.append(f"{_INDENT}public static IEnumerable<string> {enumeration.name}() {{")
        for literal in enumeration.literals:
            lines.append(f"{_INDENT * 2}yield return {_quote(literal)};")
        lines.append(f"{_INDENT}}}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_python(
    container: ContainerDescriptor,
    declarations: tuple[Declaration, ...],
    enumeration: EnumerationDeclaration | None,
) -> str:
    """Render a Python module holding the container class."""
    header = [
        f"# {AUTO_GENERATED_MARKER}",
        f'"""Generated permission names for {container.qualified_name}."""',
        "",
    ]
    imports: list[str] = []
    if enumeration is not None:
        imports.append("from collections.abc import Iterator")
    if any(declaration.is_static for declaration in declarations):
        imports.append("from typing import ClassVar")

    body: list[str] = []
    for declaration in declarations:
        comment = _visibility_comment(declaration.visibility)
        if declaration.is_static:
            body.append(
                f"{_INDENT}{declaration.identity}: ClassVar[str] = "
                f"{_quote(declaration.literal)}{comment}"
            )
            continue
        if body:
            body.append("")
        body.extend(
            [
                f"{_INDENT}@property",
                f"{_INDENT}def {declaration.identity}(self) -> str:{comment}",
                f"{_INDENT * 2}return {_quote(declaration.literal)}",
            ]
        )
    if enumeration is not None:
        if body:
            body.append("")
        body.extend(
            [
                f"{_INDENT}@staticmethod",
                f"{_INDENT}def {enumeration.name}() -> Iterator[str]:",
            ]
        )
        if enumeration.literals:
            body.extend(
                f"{_INDENT * 2}yield {_quote(literal)}" for literal in enumeration.literals
            )
        else:
            body.append(f"{_INDENT * 2}yield from ()")
    if not body:
        body.append(f"{_INDENT}pass")

    lines = list(header)
    if imports:
        lines.extend(imports)
        lines.extend(["", ""])
    else:
        lines.append("")
    lines.append(f"class {container.name}:")
    lines.extend(body)
    return "\n".join(lines) + "\n"


def _visibility_comment(visibility: Visibility) -> str:
    if visibility is Visibility.PUBLIC:
        return ""
    return f"  # {visibility.value}"


def _quote(value: str) -> str:
    """Quote a literal using escapes valid in both output languages."""
    return json.dumps(value, ensure_ascii=False)
