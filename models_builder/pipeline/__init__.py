"""
Pipeline - published content models generation.

Each run goes through the same phases:

1. Schema: load the content types and their composition
2. Scanner: parse the hand-authored sources of the models directory
3. Planner: decide which classes and properties to generate
4. Builder: render one source file per content type
5. Compiler: optionally build the sources into an assembly

The generator drives the phases, holds the per-directory lock and reports
failures to the status sink.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .config import ModelsBuilderConfig, ModelsMode, load_config
from .errors import (
    CodeParseError,
    CompilationFailedError,
    Diagnostic,
    DiagnosticKind,
    EmitIOError,
    GenerationEnvironmentError,
    GenerationInProgressError,
    ModelsBuilderError,
    SchemaUnavailableError,
    Severity,
)
from .generator import GenerationReport, GenerationState, ModelsGenerator
from .schema import JsonSchemaProvider, SchemaProvider, SchemaSnapshot, StaticSchemaProvider
from .status import GenerationStatus, build_dashboard
from .store import FileStore, LocalFileStore

__all__ = [
    "ModelsGenerator",
    "GenerationReport",
    "GenerationState",
    "ModelsBuilderConfig",
    "ModelsMode",
    "load_config",
    "GenerationStatus",
    "build_dashboard",
    "SchemaProvider",
    "SchemaSnapshot",
    "StaticSchemaProvider",
    "JsonSchemaProvider",
    "FileStore",
    "LocalFileStore",
    "AtomicWriter",
    "Diagnostic",
    "DiagnosticKind",
    "Severity",
    "ModelsBuilderError",
    "SchemaUnavailableError",
    "CodeParseError",
    "GenerationEnvironmentError",
    "EmitIOError",
    "CompilationFailedError",
    "GenerationInProgressError",
]
