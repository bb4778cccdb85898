"""
C# compiler backend.

Runs a command-line C# compiler (csc, or "dotnet path/to/csc.dll") on the
model sources and installs the resulting assembly.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import tempfile
from pathlib import Path

from ...logging import get_logger
from .base import Compiler, CompilerDiagnostic, CompileResult, CompileStatus

logger = get_logger("compiler")

# "path(line,col): error CS0103: message"
_LOCATED_DIAGNOSTIC = re.compile(r"^(?P<path>.+?)\((?P<line>\d+),(?P<column>\d+)\): (?P<severity>error|warning) (?P<code>[A-Z]+\d+): (?P<message>.*)$")

# "error CS2001: message"
_GLOBAL_DIAGNOSTIC = re.compile(r"^(?P<severity>error|warning) (?P<code>[A-Z]+\d+): (?P<message>.*)$")


class CSharpCompiler(Compiler):
    """Compiler using a command-line C# compiler through subprocess."""

    def __init__(
        self,
        command: list[str] | None = None,
        references: list[str] | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize the compiler.

        Args:
            command: Compiler command line prefix, e.g. ["csc"]
            references: Assemblies to reference
            timeout: Seconds before the compiler is abandoned
        """
        self.command = list(command or ["csc"])
        self.references = list(references or [])
        self.timeout = timeout

    def compile(self, namespace: str, files: dict[str, str], output_dir: Path) -> CompileResult:
        output_dir = Path(output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return CompileResult(
                status=CompileStatus.ENVIRONMENT_ERROR,
                message=f"Cannot create output directory {output_dir}: {e}",
            )

        target = output_dir / f"{namespace}.dll"

        with tempfile.TemporaryDirectory(prefix="models_builder_") as work:
            work_dir = Path(work)
            try:
                source_map = self._write_sources(files, work_dir)
            except OSError as e:
                return CompileResult(status=CompileStatus.ENVIRONMENT_ERROR, message=f"Cannot stage model sources: {e}")

            built = work_dir / target.name
            cmd = self.build_command(list(source_map), built)
            logger.debug("Running %s", " ".join(cmd[: len(self.command)]))

            try:
                completed = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    cwd=work_dir,
                )
            except FileNotFoundError:
                return CompileResult(
                    status=CompileStatus.ENVIRONMENT_ERROR,
                    message=f"C# compiler not found: {self.command[0]}",
                )
            except subprocess.TimeoutExpired:
                return CompileResult(
                    status=CompileStatus.ENVIRONMENT_ERROR,
                    message=f"C# compiler timed out after {self.timeout} seconds",
                )

            diagnostics = self.parse_diagnostics(completed.stdout + "\n" + completed.stderr, source_map)
            has_errors = any(d.severity == "error" for d in diagnostics)
            if completed.returncode != 0 or has_errors:
                return CompileResult(
                    status=CompileStatus.FAILED,
                    diagnostics=diagnostics,
                    message=f"Failed to compile models (exit code {completed.returncode}).",
                )
            if not built.exists():
                return CompileResult(
                    status=CompileStatus.FAILED,
                    diagnostics=diagnostics,
                    message="The C# compiler reported success but produced no assembly.",
                )

            try:
                self._install(built, target)
            except OSError as e:
                return CompileResult(
                    status=CompileStatus.ENVIRONMENT_ERROR,
                    diagnostics=diagnostics,
                    message=f"Cannot write {target}: {e}",
                )

        return CompileResult(status=CompileStatus.SUCCEEDED, artifact_path=target, diagnostics=diagnostics)

    def build_command(self, sources: list[str], output: Path) -> list[str]:
        """Build the compiler command line."""
        cmd = list(self.command)
        cmd.extend(["-nologo", "-target:library", f"-out:{output}"])
        cmd.extend(f"-reference:{reference}" for reference in self.references)
        cmd.extend(sources)
        return cmd

    def parse_diagnostics(self, output: str, source_map: dict[str, str]) -> list[CompilerDiagnostic]:
        """
        Parse compiler output into diagnostics.

        Args:
            output: Compiler stdout and stderr
            source_map: Staged path to original path

        Returns:
            Diagnostics with paths mapped back to the original files
        """
        diagnostics = []
        for raw_line in output.splitlines():
            line = raw_line.strip()
            located = _LOCATED_DIAGNOSTIC.match(line)
            if located:
                staged = located.group("path")
                diagnostics.append(
                    CompilerDiagnostic(
                        path=self._original_path(staged, source_map),
                        line=int(located.group("line")),
                        column=int(located.group("column")),
                        severity=located.group("severity"),
                        code=located.group("code"),
                        message=located.group("message"),
                    )
                )
                continue
            unlocated = _GLOBAL_DIAGNOSTIC.match(line)
            if unlocated:
                diagnostics.append(
                    CompilerDiagnostic(
                        severity=unlocated.group("severity"),
                        code=unlocated.group("code"),
                        message=unlocated.group("message"),
                    )
                )
        return diagnostics

    def _write_sources(self, files: dict[str, str], work_dir: Path) -> dict[str, str]:
        """Stage sources under unique names; returns staged path -> original path."""
        source_map = {}
        for index, path in enumerate(sorted(files)):
            staged = work_dir / f"{index:04d}_{Path(path).name}"
            staged.write_text(files[path], encoding="utf-8")
            source_map[str(staged)] = path
        return source_map

    def _original_path(self, staged: str, source_map: dict[str, str]) -> str:
        if staged in source_map:
            return source_map[staged]
        # Compilers may report paths relative to the working directory
        name = Path(staged).name
        for staged_path, original in source_map.items():
            if Path(staged_path).name == name:
                return original
        return staged

    def _install(self, built: Path, target: Path) -> None:
        """Copy the assembly next to the target, then rename it into place."""
        staging = target.with_name(f".{target.name}.tmp")
        try:
            shutil.copyfile(built, staging)
            staging.replace(target)
        except OSError:
            staging.unlink(missing_ok=True)
            raise
