# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Apply the ordered name transform stages to container slots."""

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import replace
from functools import partial

from permgen.model import ContainerDescriptor, ContainerFlags, SlotRecord
from permgen.obfuscation import DEFAULT_HASH_ALGORITHM, obfuscate_name
from permgen.segmenter import to_period_separated

logger = logging.getLogger(__name__)

Stage = Callable[[SlotRecord], SlotRecord]


class PipelineError(RuntimeError):
    """Represent an invalid transform pipeline invocation."""


def parse_prefix_stage(slot: SlotRecord) -> SlotRecord:
    """Re-segment the composed name, splitting case boundaries inside prefixes."""
    return replace(slot, canonical_name=to_period_separated(slot.canonical_name))


def lower_case_stage(slot: SlotRecord) -> SlotRecord:
    """Lower-case the name."""
    return replace(slot, canonical_name=slot.canonical_name.lower())


def obfuscate_stage(
    slot: SlotRecord, algorithm: str = DEFAULT_HASH_ALGORITHM
) -> SlotRecord:
    """Replace the name with its digest token."""
    return replace(slot, canonical_name=obfuscate_name(slot.canonical_name, algorithm))


def upper_case_stage(slot: SlotRecord) -> SlotRecord:
    """Upper-case the name; separators are left untouched."""
    return replace(slot, canonical_name=slot.canonical_name.upper())


def build_stages(
    flags: ContainerFlags, algorithm: str = DEFAULT_HASH_ALGORITHM
) -> list[Stage]:
    """Select the active stages in their fixed order.

    Prefix parsing runs before lower-casing since it relies on the original
    casing; obfuscation hashes the lower-cased name; upper-casing runs last.

    Args:
        flags: Container options.
        algorithm: Digest algorithm for obfuscation.

    Returns:
        Stages to apply, in order.
    """
    stages: list[Stage] = []
    if flags.parse_prefix:
        stages.append(parse_prefix_stage)
    stages.append(lower_case_stage)
    if flags.obfuscate:
        stages.append(partial(obfuscate_stage, algorithm=algorithm))
    if flags.upper_case:
        stages.append(upper_case_stage)
    return stages


def transform_slot(slot: SlotRecord, stages: list[Stage]) -> SlotRecord:
    """Run stages over one slot.

    Args:
        slot: Freshly discovered slot.
        stages: Stages from ``build_stages``.

    Returns:
        Finalized slot.

    Raises:
        PipelineError: If the slot was already transformed.
    """
    if slot.finalized:
        raise PipelineError(f"Slot already transformed: {slot.identity}")
    for stage in stages:
        slot = stage(slot)
    return replace(slot, finalized=True)


def run_pipeline(
    container: ContainerDescriptor, algorithm: str = DEFAULT_HASH_ALGORITHM
) -> ContainerDescriptor:
    """Transform every slot of a container.

    Args:
        container: Container with freshly discovered slots.
        algorithm: Digest algorithm for obfuscation.

    Returns:
        Container holding finalized slots in the original order.

    Raises:
        PipelineError: If any slot was already transformed.
    """
    flags = container.effective_flags()
    stages = build_stages(flags, algorithm=algorithm)
    slots = tuple(transform_slot(slot, stages) for slot in container.slots)
    logger.debug(
        "Transformed container (container=%s slots=%s flags=%s)",
        container.qualified_name,
        len(slots),
        ",".join(flags.active_stages()) or "none",
    )
    if flags.obfuscate:
        _warn_on_collisions(container, slots)
    return replace(container, slots=slots)


def _warn_on_collisions(
    container: ContainerDescriptor, slots: tuple[SlotRecord, ...]
) -> None:
    """Log obfuscated names shared by more than one slot.

    Args:
        container: Container being transformed.
        slots: Finalized slots.
    """
    counts = Counter(slot.canonical_name for slot in slots)
    for name, count in counts.items():
        if count < 2:
            continue
        identities = [slot.identity for slot in slots if slot.canonical_name == name]
        logger.warning(
            "Obfuscated permission names collide",
            extra={
                "container": container.qualified_name,
                "token": name,
                "slots": identities,
            },
        )
