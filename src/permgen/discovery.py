# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Discover permission containers declared in Python source files.

A container is a class, at module level or nested in another class, decorated
with ``permissions_store`` or ``permissions_repo``. Its slots are class-level
annotations without a value whose type is ``str``, optionally wrapped in
``ClassVar`` and ``Annotated``.
Unmarked classes and members of other types are skipped without error.
"""

import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from permgen.model import (
    ContainerDescriptor,
    ContainerFlags,
    ContainerKind,
    GeneratorFlags,
    SlotRecord,
    Visibility,
)
from permgen.naming import create_slot

logger = logging.getLogger(__name__)

_CONTAINER_MARKERS: dict[str, ContainerKind] = {
    "permissions_store": "store",
    "permissions_repo": "repo",
}
_PARTIAL_MARKER = "Partial"
_PREFIX_MARKER = "Prefix"
_VISIBILITY_MARKER = "Visibility"


@dataclass(frozen=True)
class DiscoveryError:
    """Represent a recoverable discovery failure for one file."""

    file_path: str
    message: str


class Discovery(Protocol):
    """Source-language specific container discovery contract."""

    def discover(
        self, root_path: Path, files: list[Path] | None = None
    ) -> tuple[list[ContainerDescriptor], list[DiscoveryError]]:
        """Discover containers beneath a root and return them with file errors."""


@dataclass(frozen=True)
class _SlotType:
    is_static: bool
    metadata: tuple[ast.expr, ...]


class PythonDiscovery:
    """Discover containers declared in Python modules."""

    def discover(
        self, root_path: Path, files: list[Path] | None = None
    ) -> tuple[list[ContainerDescriptor], list[DiscoveryError]]:
        """Discover containers in Python files.

        Args:
            root_path: Project root, or a single Python file.
            files: Files to read; every ``*.py`` beneath ``root_path`` when
                omitted.

        Returns:
            Discovered containers in file and declaration order, and recoverable
            per-file errors.
        """
        if files is None:
            files = [root_path] if root_path.is_file() else sorted(root_path.rglob("*.py"))
        base = root_path.parent if root_path.is_file() else root_path

        containers: list[ContainerDescriptor] = []
        errors: list[DiscoveryError] = []
        for file_path in sorted(files):
            relative_path = _relative_to(file_path, base)
            try:
                source = file_path.read_text(encoding="utf-8")
                containers.extend(
                    discover_source(
                        source,
                        module_name=module_name_for(base, file_path),
                        source_path=relative_path,
                    )
                )
            except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
                logger.warning(
                    f"Skipping file due to parse/read failure (file_path={relative_path} error={exc})",
                )
                errors.append(DiscoveryError(file_path=relative_path, message=str(exc)))
        return containers, errors


def discover_source(
    source: str, module_name: str, source_path: str | None = None
) -> list[ContainerDescriptor]:
    """Discover containers in one module's source text.

    Args:
        source: Python source code.
        module_name: Dotted module path used as the container namespace.
        source_path: Origin of the source, for diagnostics.

    Returns:
        Containers in declaration order, each enclosing class before the
        classes nested in it.

    Raises:
        SyntaxError: If the source cannot be parsed.
    """
    tree = ast.parse(source, filename=source_path or "<unknown>")
    containers: list[ContainerDescriptor] = []
    _discover_classes(
        body=tree.body,
        namespace_path=module_name,
        module_constants=_string_constants(tree.body),
        source_path=source_path,
        containers=containers,
    )
    return containers


def _discover_classes(
    body: list[ast.stmt],
    namespace_path: str,
    module_constants: dict[str, str],
    source_path: str | None,
    containers: list[ContainerDescriptor],
) -> None:
    """Collect marked classes of a body, descending into nested classes.

    A nested class is namespaced under its enclosing class, so
    ``Outer.Inner`` in ``app.perms`` gets namespace ``app.perms.Outer``.
    """
    for node in body:
        if not isinstance(node, ast.ClassDef):
            continue
        marker = _container_marker(node)
        if marker is not None:
            kind, flags_node = marker
            constants = {**module_constants, **_string_constants(node.body)}
            containers.append(
                ContainerDescriptor(
                    name=node.name,
                    namespace_path=namespace_path,
                    slots=tuple(_collect_slots(node, constants)),
                    flags=ContainerFlags.from_bits(_decode_flags(flags_node, node.name)),
                    kind=kind,
                    re_emittable=any(
                        _terminal_name(base) == _PARTIAL_MARKER for base in node.bases
                    ),
                    source_path=source_path,
                )
            )
        nested_namespace = f"{namespace_path}.{node.name}" if namespace_path else node.name
        _discover_classes(
            body=node.body,
            namespace_path=nested_namespace,
            module_constants=module_constants,
            source_path=source_path,
            containers=containers,
        )


def module_name_for(root_path: Path, file_path: Path) -> str:
    """Derive the dotted module path of a file relative to the project root.

    Args:
        root_path: Project root.
        file_path: Python file.

    Returns:
        Dotted module path with ``src`` and ``__init__`` parts removed.
    """
    try:
        relative = file_path.resolve().relative_to(root_path.resolve())
    except ValueError:
        relative = Path(file_path.name)
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    if len(parts) > 1 and parts[0] == "src":
        parts = parts[1:]
    return ".".join(parts)


def _container_marker(node: ast.ClassDef) -> tuple[ContainerKind, ast.expr | None] | None:
    """Find the container marker of a class.

    Args:
        node: Class definition.

    Returns:
        Container kind and the flags expression, or ``None`` when unmarked.
    """
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        kind = _CONTAINER_MARKERS.get(_terminal_name(target) or "")
        if kind is None:
            continue
        if not isinstance(decorator, ast.Call):
            return kind, None
        if decorator.args:
            return kind, decorator.args[0]
        for keyword in decorator.keywords:
            if keyword.arg == "flags":
                return kind, keyword.value
        return kind, None
    return None


def _decode_flags(node: ast.expr | None, container_name: str) -> int:
    if node is None:
        return GeneratorFlags.NONE
    value = _evaluate_flags(node)
    if value is None:
        logger.warning(
            "Unsupported flags expression; using no flags (container=%s expression=%s)",
            container_name,
            ast.unparse(node),
        )
        return GeneratorFlags.NONE
    return value


def _evaluate_flags(node: ast.expr) -> int | None:
    """Statically evaluate a flags expression built from ``GeneratorFlags``.

    Args:
        node: Flags expression.

    Returns:
        Integer flag value, or ``None`` when it cannot be evaluated.
    """
    if isinstance(node, ast.Constant) and isinstance(node.value, int):
        if isinstance(node.value, bool):
            return None
        return node.value
    if isinstance(node, (ast.Attribute, ast.Name)):
        member = GeneratorFlags.__members__.get(_terminal_name(node) or "")
        return int(member) if member is not None else None
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        left = _evaluate_flags(node.left)
        right = _evaluate_flags(node.right)
        if left is None or right is None:
            return None
        return left | right
    return None


def _collect_slots(node: ast.ClassDef, constants: dict[str, str]) -> list[SlotRecord]:
    slots: list[SlotRecord] = []
    for statement in node.body:
        if not isinstance(statement, ast.AnnAssign):
            continue
        if not isinstance(statement.target, ast.Name) or statement.value is not None:
            continue
        slot_type = _analyze_annotation(statement.annotation)
        if slot_type is None:
            logger.debug(
                "Skipping non-string member (container=%s member=%s)",
                node.name,
                statement.target.id,
            )
            continue
        identity = statement.target.id
        prefix_declarations: list[tuple[str, ...]] = []
        visibility: Visibility | None = None
        for item in slot_type.metadata:
            if isinstance(item, ast.Call) and _terminal_name(item.func) == _PREFIX_MARKER:
                prefix_declarations.append(_prefix_tokens(item, constants))
            elif visibility is None:
                visibility = _visibility_marker(item)
        slots.append(
            create_slot(
                identity=identity,
                visibility=visibility or _default_visibility(identity),
                is_static=slot_type.is_static,
                prefix_declarations=prefix_declarations,
            )
        )
    return slots


def _analyze_annotation(node: ast.expr, is_static: bool = False) -> _SlotType | None:
    """Recognize string slot annotations.

    Args:
        node: Annotation expression.
        is_static: Whether an enclosing ``ClassVar`` was seen.

    Returns:
        Slot type details, or ``None`` for non-string members.
    """
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            parsed = ast.parse(node.value, mode="eval").body
        except SyntaxError:
            return None
        return _analyze_annotation(parsed, is_static)
    if isinstance(node, ast.Name) and node.id == "str":
        return _SlotType(is_static=is_static, metadata=())
    if not isinstance(node, ast.Subscript):
        return None
    wrapper = _terminal_name(node.value)
    if wrapper == "ClassVar":
        return _analyze_annotation(node.slice, is_static=True)
    if wrapper == "Annotated" and isinstance(node.slice, ast.Tuple) and node.slice.elts:
        inner = _analyze_annotation(node.slice.elts[0], is_static)
        if inner is None:
            return None
        return _SlotType(
            is_static=inner.is_static,
            metadata=inner.metadata + tuple(node.slice.elts[1:]),
        )
    return None


def _prefix_tokens(node: ast.Call, constants: dict[str, str]) -> tuple[str, ...]:
    """Resolve the tokens of one prefix declaration.

    String literals are used as is; names resolve to string constants declared
    in the class or module and fall back to the name itself. Any other argument
    makes the declaration malformed, which counts as no prefix.

    Args:
        node: ``Prefix(...)`` call.
        constants: Known string constants.

    Returns:
        Prefix tokens, empty when malformed.
    """
    tokens: list[str] = []
    for argument in node.args:
        if isinstance(argument, ast.Constant) and isinstance(argument.value, str):
            tokens.append(argument.value)
        elif isinstance(argument, ast.Name):
            tokens.append(constants.get(argument.id, argument.id))
        else:
            logger.debug("Ignoring malformed prefix (expression=%s)", ast.unparse(node))
            return ()
    return tuple(tokens)


def _visibility_marker(node: ast.expr) -> Visibility | None:
    if not isinstance(node, ast.Attribute):
        return None
    if _terminal_name(node.value) != _VISIBILITY_MARKER:
        return None
    member = Visibility.__members__.get(node.attr)
    return member


def _default_visibility(identity: str) -> Visibility:
    """Map Python naming conventions to a visibility."""
    if identity.startswith("__") and not identity.endswith("__"):
        return Visibility.PRIVATE
    if identity.startswith("_"):
        return Visibility.INTERNAL
    return Visibility.PUBLIC


def _string_constants(body: list[ast.stmt]) -> dict[str, str]:
    constants: dict[str, str] = {}
    for statement in body:
        if isinstance(statement, ast.Assign):
            targets = statement.targets
            value = statement.value
        elif isinstance(statement, ast.AnnAssign) and statement.value is not None:
            targets = [statement.target]
            value = statement.value
        else:
            continue
        if not (isinstance(value, ast.Constant) and isinstance(value.value, str)):
            continue
        for target in targets:
            if isinstance(target, ast.Name):
                constants[target.id] = value.value
    return constants


def _terminal_name(node: ast.expr) -> str | None:
    """Return the last dotted component of a name or attribute expression."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _relative_to(file_path: Path, base: Path) -> str:
    try:
        return str(file_path.relative_to(base))
    except ValueError:
        return str(file_path)
