# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Generation orchestration for one batch of permission containers."""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass

from permgen.diagnostics import NON_PARTIAL_CONTAINER, Diagnostic, report
from permgen.emission import DIALECTS, Dialect, EmissionRecord, emit
from permgen.model import ContainerDescriptor, SlotContractError
from permgen.obfuscation import DEFAULT_HASH_ALGORITHM, validate_algorithm
from permgen.pipeline import PipelineError, run_pipeline

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Represent a fatal failure that aborts the whole batch."""


class GenerationCancelled(RuntimeError):
    """Represent a batch abandoned on request."""


@dataclass(frozen=True)
class GenerationOptions:
    """Describe batch-wide generation settings.

    Attributes:
        dialect: Output language of generated sources.
        hash_algorithm: Digest algorithm used for obfuscation.
        max_workers: Maximum number of containers processed concurrently.
    """

    dialect: Dialect = "python"
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.dialect not in DIALECTS:
            raise ValueError(f"dialect must be one of {', '.join(DIALECTS)}")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        object.__setattr__(
            self, "hash_algorithm", validate_algorithm(self.hash_algorithm)
        )


@dataclass(frozen=True)
class GenerationResult:
    """Represent the outcome of one batch.

    Attributes:
        emissions: Generated outputs, in input container order.
        diagnostics: Non-fatal diagnostics reported for skipped containers.
    """

    emissions: list[EmissionRecord]
    diagnostics: list[Diagnostic]

    @property
    def has_errors(self) -> bool:
        return any(diagnostic.is_error for diagnostic in self.diagnostics)


def generate(
    containers: list[ContainerDescriptor],
    options: GenerationOptions | None = None,
    cancel_event: threading.Event | None = None,
) -> GenerationResult:
    """Transform and render a batch of containers.

    Containers without the partial marker are skipped with one diagnostic each.
    The remaining containers are processed concurrently and returned in input
    order. A contract violation in any container aborts the batch and nothing is
    emitted.

    Args:
        containers: Discovered containers with fresh slots.
        options: Batch settings; defaults when omitted.
        cancel_event: Event that abandons the batch when set.

    Returns:
        Emissions and diagnostics of the batch.

    Raises:
        GenerationError: If a container violates the slot contract or two
            containers map to the same output path.
        GenerationCancelled: If ``cancel_event`` is set before completion.
    """
    options = options or GenerationOptions()
    diagnostics: list[Diagnostic] = []
    selected: list[ContainerDescriptor] = []
    for container in containers:
        if not container.re_emittable:
            logger.warning(
                "%s (rule=%s category=%s container=%s)",
                NON_PARTIAL_CONTAINER.title,
                NON_PARTIAL_CONTAINER.id,
                NON_PARTIAL_CONTAINER.category,
                container.qualified_name,
            )
            diagnostics.append(
                report(
                    NON_PARTIAL_CONTAINER,
                    container.qualified_name,
                    container.name,
                    source_path=container.source_path,
                )
            )
            continue
        selected.append(container)

    emissions: list[EmissionRecord | None] = [None] * len(selected)
    _raise_if_cancelled(cancel_event)
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=options.max_workers
    ) as executor:
        future_to_index = {
            executor.submit(_process_container, container, options): index
            for index, container in enumerate(selected)
        }
        try:
            for future in concurrent.futures.as_completed(future_to_index):
                _raise_if_cancelled(cancel_event)
                index = future_to_index[future]
                try:
                    emissions[index] = future.result()
                except (SlotContractError, PipelineError) as exc:
                    logger.error(
                        "Aborting generation batch (container=%s error=%s)",
                        selected[index].qualified_name,
                        exc,
                    )
                    raise GenerationError(
                        f"{selected[index].qualified_name}: {exc}"
                    ) from exc
        except BaseException:
            for future in future_to_index:
                future.cancel()
            raise

    completed = [emission for emission in emissions if emission is not None]
    _check_unique_hint_names(completed)
    logger.info(
        "generation_complete containers=%s emitted=%s diagnostics=%s",
        len(containers),
        len(selected),
        len(diagnostics),
    )
    return GenerationResult(emissions=completed, diagnostics=diagnostics)


def _process_container(
    container: ContainerDescriptor, options: GenerationOptions
) -> EmissionRecord:
    """Run the pipeline and render one container.

    Args:
        container: Container with fresh slots.
        options: Batch settings.

    Returns:
        Emission record for the container.
    """
    finalized = run_pipeline(container, algorithm=options.hash_algorithm)
    return emit(finalized, dialect=options.dialect)


def _check_unique_hint_names(emissions: list[EmissionRecord]) -> None:
    """Reject a batch where two containers would write the same output file.

    Paths are compared case-insensitively so output stays valid on
    case-insensitive file systems.

    Raises:
        GenerationError: If two emissions share an output path.
    """
    owners: dict[str, EmissionRecord] = {}
    for emission in emissions:
        previous = owners.setdefault(emission.hint_name.casefold(), emission)
        if previous is emission:
            continue
        logger.error(
            "Output path collision (path=%s containers=%s,%s)",
            emission.hint_name,
            previous.container,
            emission.container,
        )
        raise GenerationError(
            f"{previous.container} and {emission.container} both map to "
            f"{emission.hint_name}"
        )


def _raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.warning("Generation batch cancelled; discarding partial results")
        raise GenerationCancelled("Generation batch cancelled")
