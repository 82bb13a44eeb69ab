# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for permission name generation."""

from permgen.diagnostics import Diagnostic, DiagnosticDescriptor
from permgen.emission import Declaration, EmissionRecord, EnumerationDeclaration, emit
from permgen.generator import (
    GenerationCancelled,
    GenerationError,
    GenerationOptions,
    GenerationResult,
    generate,
)
from permgen.model import (
    ContainerDescriptor,
    ContainerFlags,
    GeneratorFlags,
    SlotContractError,
    SlotRecord,
    Visibility,
)
from permgen.naming import build_permission_name, create_slot, select_prefix
from permgen.obfuscation import obfuscate_name
from permgen.pipeline import PipelineError, run_pipeline
from permgen.segmenter import to_period_separated

__all__ = [
    "ContainerDescriptor",
    "ContainerFlags",
    "Declaration",
    "Diagnostic",
    "DiagnosticDescriptor",
    "EmissionRecord",
    "EnumerationDeclaration",
    "GenerationCancelled",
    "GenerationError",
    "GenerationOptions",
    "GenerationResult",
    "GeneratorFlags",
    "PipelineError",
    "SlotContractError",
    "SlotRecord",
    "Visibility",
    "build_permission_name",
    "create_slot",
    "emit",
    "generate",
    "obfuscate_name",
    "run_pipeline",
    "select_prefix",
    "to_period_separated",
]
