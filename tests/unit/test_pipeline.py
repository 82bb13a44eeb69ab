# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the name transform pipeline."""

import logging

import pytest

from permgen import (
    ContainerDescriptor,
    ContainerFlags,
    PipelineError,
    create_slot,
    obfuscate_name,
    run_pipeline,
)
from permgen.pipeline import build_stages, lower_case_stage, upper_case_stage


def _container(
    flags: ContainerFlags, kind: str = "store", **slot_prefixes: tuple[str, ...]
) -> ContainerDescriptor:
    slots = tuple(
        create_slot(identity=identity, is_static=True, prefix_declarations=[prefix])
        if prefix
        else create_slot(identity=identity, is_static=True)
        for identity, prefix in slot_prefixes.items()
    )
    return ContainerDescriptor(
        name="Permissions",
        namespace_path="sample.app",
        slots=slots,
        flags=flags,
        kind=kind,
    )


def test_pg_pipe_001_parse_prefix_splits_prefix_case_boundaries() -> None:
    container = _container(
        ContainerFlags(parse_prefix=True), LorescopesRead=("DataUser",)
    )

    result = run_pipeline(container)

    assert result.slots[0].canonical_name == "data.user.lorescopes.read"


def test_pg_pipe_002_without_parse_prefix_prefix_is_only_lower_cased() -> None:
    container = _container(ContainerFlags(), LorescopesRead=("DataUser",))

    result = run_pipeline(container)

    assert result.slots[0].canonical_name == "datauser.lorescopes.read"


def test_pg_pipe_003_obfuscation_hashes_resolved_lower_case_name() -> None:
    container = _container(
        ContainerFlags(parse_prefix=True, obfuscate=True),
        LorescopesRead=("DataUser",),
    )

    result = run_pipeline(container)

    assert result.slots[0].canonical_name == obfuscate_name("data.user.lorescopes.read")
    assert result.slots[0].canonical_name == "rGzP7"


def test_pg_pipe_004_upper_case_runs_last() -> None:
    plain = run_pipeline(
        _container(ContainerFlags(parse_prefix=True, upper_case=True), LorescopesRead=("DataUser",))
    )
    obfuscated = run_pipeline(
        _container(
            ContainerFlags(parse_prefix=True, obfuscate=True, upper_case=True),
            LorescopesRead=("DataUser",),
        )
    )

    assert plain.slots[0].canonical_name == "DATA.USER.LORESCOPES.READ"
    assert obfuscated.slots[0].canonical_name == "RGZP7"


def test_pg_pipe_005_stage_order_is_fixed() -> None:
    stages = build_stages(
        ContainerFlags(obfuscate=True, upper_case=True, parse_prefix=True)
    )
    names = [getattr(stage, "func", stage).__name__ for stage in stages]

    assert names == [
        "parse_prefix_stage",
        "lower_case_stage",
        "obfuscate_stage",
        "upper_case_stage",
    ]
    assert [stage.__name__ for stage in build_stages(ContainerFlags())] == [
        "lower_case_stage"
    ]


def test_pg_pipe_006_upper_case_is_idempotent_and_keeps_separators() -> None:
    slot = create_slot(identity="MixedCasePermission")

    once = upper_case_stage(lower_case_stage(slot))
    twice = upper_case_stage(once)

    assert once.canonical_name == "MIXED.CASE.PERMISSION"
    assert twice.canonical_name == once.canonical_name


def test_pg_pipe_007_slot_order_and_modifiers_are_preserved() -> None:
    container = _container(
        ContainerFlags(obfuscate=True),
        Zeta=(),
        Alpha=(),
        Mid=(),
    )

    result = run_pipeline(container)

    assert [slot.identity for slot in result.slots] == ["Zeta", "Alpha", "Mid"]
    assert all(slot.is_static for slot in result.slots)
    assert all(slot.finalized for slot in result.slots)
    assert all(not slot.finalized for slot in container.slots)


def test_pg_pipe_008_running_twice_is_rejected() -> None:
    result = run_pipeline(_container(ContainerFlags(), AccountRead=()))

    with pytest.raises(PipelineError):
        run_pipeline(result)


def test_pg_pipe_009_repo_containers_ignore_flags() -> None:
    container = _container(
        ContainerFlags(obfuscate=True, upper_case=True, parse_prefix=True),
        kind="repo",
        LorescopesRead=("DataUser",),
    )

    result = run_pipeline(container)

    assert result.slots[0].canonical_name == "datauser.lorescopes.read"


def test_pg_pipe_010_obfuscation_collisions_are_logged_not_rejected(
    caplog: pytest.LogCaptureFixture,
) -> None:
    container = ContainerDescriptor(
        name="Permissions",
        namespace_path="sample",
        slots=(
            create_slot(identity="AccountRead"),
            create_slot(identity="Account", prefix_declarations=[("",)]),
        ),
        flags=ContainerFlags(obfuscate=True),
    )
    duplicate = ContainerDescriptor(
        name="Permissions",
        namespace_path="sample",
        slots=(create_slot(identity="AccountRead"), create_slot(identity="accountRead")),
        flags=ContainerFlags(obfuscate=True),
    )

    with caplog.at_level(logging.WARNING, logger="permgen.pipeline"):
        run_pipeline(container)
        result = run_pipeline(duplicate)

    assert result.slots[0].canonical_name == result.slots[1].canonical_name
    assert len(result.slots) == 2
    assert [record.getMessage() for record in caplog.records] == [
        "Obfuscated permission names collide"
    ]
