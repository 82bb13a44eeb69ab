# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Compose canonical permission names from prefixes and slot identities."""

import logging
from collections.abc import Sequence

from permgen.model import SlotContractError, SlotRecord, Visibility
from permgen.segmenter import SEGMENT_SEPARATOR, to_period_separated

logger = logging.getLogger(__name__)


def select_prefix(declarations: Sequence[Sequence[str]]) -> tuple[str, ...]:
    """Pick the prefix tokens that apply to a slot.

    Only the first prefix declaration is honored; later ones are ignored
    without a warning.

    Args:
        declarations: Prefix declarations in source order.

    Returns:
        Tokens of the first declaration, or an empty tuple.
    """
    if not declarations:
        return ()
    if len(declarations) > 1:
        logger.debug(
            "Ignoring additional prefix declarations (count=%s)", len(declarations) - 1
        )
    return tuple(declarations[0])


def build_permission_name(
    identity: str,
    prefix_tokens: Sequence[str] = (),
    separator: str = SEGMENT_SEPARATOR,
) -> str:
    """Build the canonical permission name of one slot.

    Args:
        identity: Declared slot name.
        prefix_tokens: Prefix tokens, taken verbatim.
        separator: Text placed between prefix tokens and the base name.

    Returns:
        ``prefix.base`` when prefix tokens are present, ``base`` otherwise.

    Raises:
        SlotContractError: If ``identity`` is empty.
    """
    if not identity:
        raise SlotContractError("Cannot build a permission name for an empty identity")
    base_name = to_period_separated(identity)
    tokens = [token for token in prefix_tokens if token]
    if not tokens:
        return base_name
    return separator.join([*tokens, base_name])


def create_slot(
    identity: str,
    visibility: Visibility = Visibility.PUBLIC,
    is_static: bool = False,
    prefix_declarations: Sequence[Sequence[str]] = (),
) -> SlotRecord:
    """Create a slot record with its initial canonical name.

    Args:
        identity: Declared slot name.
        visibility: Declared access level.
        is_static: Whether the slot is class-level.
        prefix_declarations: Every prefix declaration found on the slot.

    Returns:
        New slot record.
    """
    prefix_tokens = select_prefix(prefix_declarations)
    return SlotRecord(
        identity=identity,
        visibility=visibility,
        is_static=is_static,
        prefix_tokens=prefix_tokens,
        canonical_name=build_permission_name(identity, prefix_tokens),
    )
