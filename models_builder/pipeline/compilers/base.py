"""
Base class for artifact compilers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class CompileStatus(str, Enum):
    """Outcome of a compilation."""

    SUCCEEDED = "succeeded"  # Artifact written
    FAILED = "failed"  # The code does not compile, nothing written
    ENVIRONMENT_ERROR = "environment_error"  # The compiler could not run or write


@dataclass(frozen=True)
class CompilerDiagnostic:
    """A message reported by the compiler, mapped back to the source path."""

    path: str | None = None
    line: int | None = None
    column: int | None = None
    severity: str = "error"
    code: str = ""
    message: str = ""

    def __str__(self) -> str:
        location = ""
        if self.path:
            location = self.path if self.line is None else f"{self.path}({self.line},{self.column})"
            location += ": "
        code = f" {self.code}" if self.code else ""
        return f"{location}{self.severity}{code}: {self.message}"


@dataclass
class CompileResult:
    """Result of compiling the model sources."""

    status: CompileStatus = CompileStatus.SUCCEEDED
    artifact_path: Path | None = None
    diagnostics: list[CompilerDiagnostic] = field(default_factory=list)
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status == CompileStatus.SUCCEEDED

    @property
    def errors(self) -> list[CompilerDiagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]

    def summary(self) -> str:
        """One message describing the result, errors included verbatim."""
        if self.success:
            return f"Compiled models to {self.artifact_path}"
        lines = [self.message or "Failed to compile models."]
        lines.extend(str(d) for d in self.errors)
        return "\n".join(lines)


class Compiler(ABC):
    """Abstract base class for compilers of the model sources."""

    @abstractmethod
    def compile(self, namespace: str, files: dict[str, str], output_dir: Path) -> CompileResult:
        """
        Compile model sources into an artifact.

        On failure, nothing is left at the artifact path that was not there
        before the call.

        Args:
            namespace: Models namespace, also names the artifact
            files: Mapping of path to source text, hand-authored and generated
            output_dir: Directory receiving the artifact

        Returns:
            The compile result
        """
