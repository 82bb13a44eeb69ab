# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for batch generation orchestration."""

import logging
import threading

import pytest

from permgen import (
    ContainerDescriptor,
    ContainerFlags,
    GenerationCancelled,
    GenerationError,
    GenerationOptions,
    create_slot,
    generate,
    run_pipeline,
)


def _store(
    name: str,
    flags: ContainerFlags,
    re_emittable: bool = True,
) -> ContainerDescriptor:
    return ContainerDescriptor(
        name=name,
        namespace_path="sample.app",
        slots=(
            create_slot(
                identity="LorescopesRead",
                is_static=True,
                prefix_declarations=[("DataUser",)],
            ),
            create_slot(identity="AccountRead", is_static=True),
        ),
        flags=flags,
        re_emittable=re_emittable,
        source_path="sample/app.py",
    )


def test_pg_gen_001_parse_prefix_end_to_end() -> None:
    result = generate([_store("Permissions", ContainerFlags(parse_prefix=True))])

    assert result.diagnostics == []
    [emission] = result.emissions
    assert [declaration.literal for declaration in emission.declarations] == [
        "data.user.lorescopes.read",
        "account.read",
    ]


def test_pg_gen_002_obfuscated_end_to_end() -> None:
    result = generate(
        [_store("Permissions", ContainerFlags(parse_prefix=True, obfuscate=True))]
    )

    [emission] = result.emissions
    assert [declaration.literal for declaration in emission.declarations] == [
        "rGzP7",
        "qgPRw",
    ]


def test_pg_gen_003_non_partial_container_is_skipped_with_one_diagnostic() -> None:
    result = generate(
        [
            _store("Broken", ContainerFlags(), re_emittable=False),
            _store("Permissions", ContainerFlags()),
        ]
    )

    assert [emission.container for emission in result.emissions] == [
        "sample.app.Permissions"
    ]
    assert len(result.diagnostics) == 1
    diagnostic = result.diagnostics[0]
    assert diagnostic.descriptor.id == "PG001"
    assert diagnostic.container == "sample.app.Broken"
    assert "'Broken'" in diagnostic.message
    assert diagnostic.format().startswith("sample/app.py: error PG001:")
    assert result.has_errors


def test_pg_gen_004_only_non_partial_container_emits_nothing() -> None:
    result = generate([_store("Broken", ContainerFlags(), re_emittable=False)])

    assert result.emissions == []
    assert len(result.diagnostics) == 1


def test_pg_gen_005_emissions_follow_input_order() -> None:
    names = [f"Container{index}" for index in range(12)]
    containers = [_store(name, ContainerFlags(obfuscate=True)) for name in names]

    result = generate(containers, options=GenerationOptions(max_workers=4))

    assert [emission.container for emission in result.emissions] == [
        f"sample.app.{name}" for name in names
    ]


def test_pg_gen_006_output_is_deterministic() -> None:
    flags = ContainerFlags(parse_prefix=True, upper_case=True, emit_enumeration_method=True)

    first = generate([_store("Permissions", flags)], GenerationOptions(dialect="csharp"))
    second = generate([_store("Permissions", flags)], GenerationOptions(dialect="csharp"))

    assert first.emissions[0].text == second.emissions[0].text


def test_pg_gen_007_already_transformed_container_aborts_batch() -> None:
    finalized = run_pipeline(_store("Finalized", ContainerFlags()))

    with pytest.raises(GenerationError, match="sample.app.Finalized"):
        generate([_store("Permissions", ContainerFlags()), finalized])


def test_pg_gen_008_cancelled_batch_is_discarded() -> None:
    cancel_event = threading.Event()
    cancel_event.set()

    with pytest.raises(GenerationCancelled):
        generate([_store("Permissions", ContainerFlags())], cancel_event=cancel_event)


def test_pg_gen_009_options_are_validated() -> None:
    with pytest.raises(ValueError):
        GenerationOptions(max_workers=0)
    with pytest.raises(ValueError):
        GenerationOptions(dialect="ruby")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        GenerationOptions(hash_algorithm="nope")
    assert GenerationOptions(hash_algorithm="SHA512").hash_algorithm == "sha512"


def test_pg_gen_010_containers_sharing_an_output_path_abort_batch() -> None:
    with pytest.raises(GenerationError, match="Permissions_generated.py"):
        generate(
            [
                _store("Permissions", ContainerFlags()),
                _store("Permissions", ContainerFlags(upper_case=True)),
            ]
        )


def test_pg_gen_011_output_paths_are_compared_case_insensitively() -> None:
    distinct = generate(
        [_store("FooBar", ContainerFlags()), _store("Foo_bar", ContainerFlags())]
    )

    assert [emission.hint_name for emission in distinct.emissions] == [
        "sample/app/FooBar_generated.py",
        "sample/app/Foo_bar_generated.py",
    ]
    with pytest.raises(GenerationError, match="sample.app.FooBar and sample.app.Foobar"):
        generate([_store("FooBar", ContainerFlags()), _store("Foobar", ContainerFlags())])


def test_pg_gen_012_skipped_container_warning_names_the_rule(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="permgen.generator"):
        generate([_store("Broken", ContainerFlags(), re_emittable=False)])

    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "Permissions container must be partial "
        "(rule=PG001 category=Usage container=sample.app.Broken)"
    ]
