"""Models Builder

Generates strongly-typed published content models from a content-type
schema, merged with the hand-authored partial classes that sit next to
them, and optionally compiles them into an assembly.
"""

__version__ = "1.0.0"

from .pipeline import (
    GenerationReport,
    GenerationStatus,
    JsonSchemaProvider,
    ModelsBuilderConfig,
    ModelsBuilderError,
    ModelsGenerator,
    ModelsMode,
    StaticSchemaProvider,
)

__all__ = [
    "ModelsGenerator",
    "GenerationReport",
    "GenerationStatus",
    "ModelsBuilderConfig",
    "ModelsMode",
    "ModelsBuilderError",
    "JsonSchemaProvider",
    "StaticSchemaProvider",
]
