"""
Errors and diagnostics for the models builder pipeline.

Run-local failures are exceptions (they end the run). Type-local and
file-local problems are Diagnostic records collected along the way, so
that one broken type or file never blocks its siblings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .compilers.base import CompileResult


class ModelsBuilderError(Exception):
    """Base class for errors that end a generation run."""

    pass


class SchemaUnavailableError(ModelsBuilderError):
    """Raised when the content-type schema cannot be obtained or is invalid."""

    pass


class CodeParseError(ModelsBuilderError):
    """Raised when a hand-authored source file cannot be parsed.

    The scanner catches it per file and records a diagnostic instead.
    """

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column


class GenerationEnvironmentError(ModelsBuilderError):
    """Raised when the models directory cannot be prepared or read."""

    pass


class EmitIOError(ModelsBuilderError):
    """Raised when a generated file cannot be written."""

    pass


class CompilationFailedError(ModelsBuilderError):
    """Raised when the models could not be compiled into an artifact."""

    def __init__(self, result: CompileResult):
        super().__init__(result.summary())
        self.result = result


class GenerationInProgressError(ModelsBuilderError):
    """Raised when another run already holds the models directory."""

    pass


class Severity(str, Enum):
    """Severity of a diagnostic."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticKind(str, Enum):
    """What a diagnostic is about."""

    PARSE_FAILURE = "parse_failure"
    MIXIN_CONFLICT = "mixin_conflict"
    UNRESOLVABLE_TYPE = "unresolvable_type"
    DEPENDENCY_SKIPPED = "dependency_skipped"
    DUPLICATE_CLASS_NAME = "duplicate_class_name"
    IGNORED_TYPE = "ignored_type"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found during a run."""

    kind: DiagnosticKind
    severity: Severity
    message: str
    type_alias: str | None = None
    path: str | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        location = ""
        if self.path:
            location = self.path
            if self.line is not None:
                location += f"({self.line},{self.column or 0})"
            location += ": "
        elif self.type_alias:
            location = f"{self.type_alias}: "
        return f"{location}{self.severity.value}: {self.message}"

    def to_dict(self) -> dict:
        """Convert the diagnostic to a JSON-friendly dictionary."""
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "typeAlias": self.type_alias,
            "path": self.path,
            "line": self.line,
            "column": self.column,
        }
