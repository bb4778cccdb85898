"""
Configuration for the models builder pipeline.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import ModelsBuilderError


class ModelsMode(str, Enum):
    """How models are produced.

    Only some modes generate models on request; the DLL modes also compile
    the generated sources into an assembly.
    """

    NOTHING = "nothing"  # Models builder disabled
    PURE_LIVE = "purelive"  # Models built in memory by the runtime, never on disk
    APP_DATA = "appdata"  # Sources generated in the models directory
    LIVE_APP_DATA = "liveappdata"  # Same, also regenerated when the schema changes
    DLL = "dll"  # Sources generated and compiled into the bin directory
    LIVE_DLL = "livedll"  # Same, also regenerated when the schema changes

    @property
    def supports_explicit_generation(self) -> bool:
        """Whether models can be generated on request."""
        return self in (ModelsMode.APP_DATA, ModelsMode.LIVE_APP_DATA, ModelsMode.DLL, ModelsMode.LIVE_DLL)

    @property
    def is_any_dll(self) -> bool:
        """Whether generation produces a compiled assembly."""
        return self in (ModelsMode.DLL, ModelsMode.LIVE_DLL)


@dataclass
class ModelsBuilderConfig:
    """Configuration options for models generation."""

    # Whether the models builder is enabled at all
    enable: bool = True

    # Generation mode
    models_mode: ModelsMode = ModelsMode.APP_DATA

    # Namespace of the generated models
    models_namespace: str = "Umbraco.Web.PublishedContentModels"

    # Directory holding hand-authored and generated model sources
    models_directory: str = "App_Data/Models"

    # Directory receiving the compiled assembly in DLL modes
    bin_directory: str = "bin"

    # Base class of generated models that have no base content type
    model_base_class: str = "PublishedContentModel"

    # Extra using statements added to every generated file
    additional_usings: list[str] = field(default_factory=list)

    # Add the auto-generated header at the top of each file
    add_generation_comment: bool = True

    # Treat mixins declaring the same alias with different types as unresolvable
    strict_mixin_conflicts: bool = False

    # Extra member names generated properties must not use
    reserved_member_names: list[str] = field(default_factory=list)

    # Compiler invocation (DLL modes)
    compiler_command: list[str] = field(default_factory=lambda: ["csc"])
    compiler_references: list[str] = field(default_factory=list)
    compile_timeout: float = 120.0

    # Whether the status sink tracks out-of-date models
    flag_out_of_date_models: bool = True

    @staticmethod
    def from_dict(d: dict) -> ModelsBuilderConfig:
        """Create a config from a dictionary."""
        config = ModelsBuilderConfig()
        for k, v in d.items():
            if k == "models_mode":
                try:
                    config.models_mode = ModelsMode(v.lower() if isinstance(v, str) else v)
                except ValueError as e:
                    raise ModelsBuilderError(f"Unknown models mode: {v!r}") from e
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "enable": self.enable,
            "models_mode": self.models_mode.value,
            "models_namespace": self.models_namespace,
            "models_directory": self.models_directory,
            "bin_directory": self.bin_directory,
            "model_base_class": self.model_base_class,
            "additional_usings": self.additional_usings,
            "add_generation_comment": self.add_generation_comment,
            "strict_mixin_conflicts": self.strict_mixin_conflicts,
            "reserved_member_names": self.reserved_member_names,
            "compiler_command": self.compiler_command,
            "compiler_references": self.compiler_references,
            "compile_timeout": self.compile_timeout,
            "flag_out_of_date_models": self.flag_out_of_date_models,
        }

    @property
    def can_generate(self) -> bool:
        """Whether explicit generation is currently possible."""
        return self.enable and self.models_mode.supports_explicit_generation


def load_config(path: str | Path) -> ModelsBuilderConfig:
    """Load a configuration from a JSON file."""
    with open(path, encoding="utf-8") as f:
        return ModelsBuilderConfig.from_dict(json.load(f))
