# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Generate permission name sources for a Python project."""

import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import pathspec
from permgen import GenerationError, GenerationOptions, GenerationResult, generate
from permgen.discovery import Discovery, PythonDiscovery
from permgen.emission import DIALECTS
from permgen.obfuscation import DEFAULT_HASH_ALGORITHM
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteSummary:
    """Represent write phase counters."""

    files_written: int
    files_unchanged: int
    elapsed_ms: int


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class WriteError(RuntimeError):
    """Represent output write failure."""


class IgnoreMatcher:
    """Match project paths against .gitignore patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        """Initialize matcher.

        Args:
            spec: Compiled gitignore matcher.
        """
        self._spec = spec

    @classmethod
    def from_project_root(cls, input_root: Path) -> "IgnoreMatcher":
        """Build matcher from root and nested .gitignore files.

        Args:
            input_root: Project root.

        Returns:
            Configured ignore matcher; matches nothing without .gitignore files.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(input_root.rglob(".gitignore")):
            base = ignore_path.parent.relative_to(input_root).as_posix()
            if base == ".":
                base = ""
            for line in ignore_path.read_text(encoding="utf-8").splitlines():
                patterns.append(_translate_gitignore_line(line=line, base=base))
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str) -> bool:
        """Check whether a file path should be ignored.

        Args:
            relative_path: Project-relative POSIX path.

        Returns:
            True when path should be ignored.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        return self._spec.match_file(normalized)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="permgen")
    parser.add_argument(
        "--input", required=True, help="Python project directory or module file."
    )
    parser.add_argument(
        "--output", required=True, help="Directory receiving generated sources."
    )
    parser.add_argument(
        "--dialect",
        choices=DIALECTS,
        default="python",
        help="Language of generated sources.",
    )
    parser.add_argument(
        "--hash-algorithm",
        default=DEFAULT_HASH_ALGORITHM,
        help="Digest algorithm used for obfuscated names.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=4,
        help="Maximum number of containers processed concurrently.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    discovery: Discovery | None = None,
) -> int:
    """Run permission generation command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        discovery: Container discovery collaborator; Python source discovery
            when omitted.

    Returns:
        Exit code: 0 on success, 1 when error diagnostics were reported, 2 on
        failure.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2
    if args.verbose:
        logging.getLogger("permgen").setLevel(logging.DEBUG)

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    _emit_marker(console=console, phase="validation", state="start")
    try:
        input_path, output_path = _validate_paths(
            input_path=Path(args.input), output_path=Path(args.output)
        )
        options = GenerationOptions(
            dialect=args.dialect,
            hash_algorithm=args.hash_algorithm,
            max_workers=args.max_workers,
        )
    except (ValidationError, ValueError) as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="validation", state="done")

    _emit_marker(console=console, phase="discovery", state="start")
    try:
        files = _select_files(input_path=input_path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read .gitignore files (error=%s)", exc)
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2
    started = time.monotonic()
    discovery = discovery or PythonDiscovery()
    containers, discovery_errors = discovery.discover(input_path, files=files)
    _emit_marker(console=console, phase="discovery", state="done")
    _emit_summary(
        console=console,
        summary={
            "python_files_discovered": len(files),
            "python_files_failed": len(discovery_errors),
            "containers_discovered": len(containers),
            "slots_discovered": sum(len(container.slots) for container in containers),
            "elapsed_ms": _elapsed_ms(started),
        },
    )

    _emit_marker(console=console, phase="generation", state="start")
    started = time.monotonic()
    try:
        result = generate(containers, options=options)
    except GenerationError as exc:
        logger.warning("Generation failed (error=%s)", exc)
        stderr.write(f"Generation failed: {exc}\n")
        return 2
    for diagnostic in result.diagnostics:
        stderr.write(f"{diagnostic.format()}\n")
    _emit_marker(console=console, phase="generation", state="done")
    _emit_summary(
        console=console,
        summary={
            "containers_emitted": len(result.emissions),
            "containers_skipped": len(containers) - len(result.emissions),
            "diagnostics": len(result.diagnostics),
            "elapsed_ms": _elapsed_ms(started),
        },
    )

    _emit_marker(console=console, phase="write", state="start")
    try:
        write_summary = _write_outputs(output_root=output_path, result=result)
    except WriteError as exc:
        logger.warning("Write failed (error=%s)", exc)
        stderr.write(f"Write failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="write", state="done")
    _emit_summary(
        console=console,
        summary={
            "files_written": write_summary.files_written,
            "files_unchanged": write_summary.files_unchanged,
            "elapsed_ms": write_summary.elapsed_ms,
        },
    )
    if result.has_errors:
        console.print("status=completed_with_errors")
        return 1
    console.print("status=success")
    return 0


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields)


def _elapsed_ms(started: float) -> int:
    return int(round((time.monotonic() - started) * 1000))


def _validate_paths(input_path: Path, output_path: Path) -> tuple[Path, Path]:
    """Validate required input and output path constraints.

    Args:
        input_path: Input path from user args.
        output_path: Output path from user args.

    Returns:
        Normalized absolute input and output paths.

    Raises:
        ValidationError: If path constraints are not met.
    """
    input_abs = input_path.resolve()
    output_abs = output_path.resolve()

    if not input_abs.exists():
        raise ValidationError(f"Input path does not exist: {input_abs}")
    if input_abs.is_file() and input_abs.suffix != ".py":
        raise ValidationError(f"Input file must be a Python module: {input_abs}")
    if output_abs.exists() and not output_abs.is_dir():
        raise ValidationError(f"Output path must be a directory: {output_abs}")
    return input_abs, output_abs


def _select_files(input_path: Path) -> list[Path]:
    """Collect Python files to scan, honoring .gitignore rules.

    Args:
        input_path: Validated input directory or file.

    Returns:
        Sorted Python files.
    """
    if input_path.is_file():
        return [input_path]
    matcher = IgnoreMatcher.from_project_root(input_root=input_path)
    selected: list[Path] = []
    for file_path in sorted(input_path.rglob("*.py")):
        relative = file_path.relative_to(input_path)
        if ".git" in relative.parts:
            continue
        if matcher.matches(relative.as_posix()):
            continue
        selected.append(file_path)
    return selected


def _write_outputs(output_root: Path, result: GenerationResult) -> WriteSummary:
    """Write generated sources, replacing files atomically.

    Args:
        output_root: Output directory.
        result: Generation result.

    Returns:
        Write summary counters.

    Raises:
        WriteError: If any file cannot be written.
    """
    started = time.monotonic()
    written = 0
    unchanged = 0
    for emission in result.emissions:
        target = output_root / emission.hint_name
        try:
            if target.exists() and target.read_text(encoding="utf-8") == emission.text:
                unchanged += 1
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = target.with_suffix(f"{target.suffix}.tmp")
            tmp_path.write_text(emission.text, encoding="utf-8")
            tmp_path.replace(target)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed writing file (path=%s error=%s)", target, exc)
            raise WriteError(str(exc)) from exc
        written += 1
    return WriteSummary(
        files_written=written,
        files_unchanged=unchanged,
        elapsed_ms=_elapsed_ms(started),
    )


def _translate_gitignore_line(line: str, base: str) -> str:
    """Translate one .gitignore line to root-relative pattern.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to project root.

    Returns:
        Root-relative pattern line.
    """
    if not base or not line:
        return line
    if line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    prefixed = f"{base}/{normalized_pattern}" if normalized_pattern else base
    if anchored:
        prefixed = f"/{prefixed}"
    if is_negation:
        return f"!{prefixed}"
    return prefixed


def main() -> None:
    """Run permgen CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
