"""
Models generator.

Runs one generation end to end:

1. Load the schema snapshot
2. Clean: delete every generated file of the models directory
3. Scan: parse the hand-authored sources left in the directory
4. Plan: merge schema and hand-authored code into generation plans
5. Emit: render and write one generated file per plan
6. Compile (DLL modes): build the assembly from all model sources

The schema is loaded before anything is touched, so a run that cannot get
the schema leaves the models directory as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..logging import get_logger
from .builders import CSharpTextBuilder, TextBuilder
from .compilers import Compiler, CompileResult, CSharpCompiler
from .config import ModelsBuilderConfig
from .errors import (
    CompilationFailedError,
    Diagnostic,
    DiagnosticKind,
    EmitIOError,
    GenerationEnvironmentError,
    ModelsBuilderError,
    Severity,
)
from .locking import generation_lock
from .parser import CodeParser, CSharpCodeParser
from .planner import GenerationPlanner, NameResolver, PlanSet
from .schema import SchemaProvider
from .status import GenerationStatus
from .store import GENERATED_SUFFIX, SOURCE_PATTERN, FileStore, LocalFileStore, is_generated

logger = get_logger("generator")


class GenerationState(str, Enum):
    """Stage a generation run is in, or ended in."""

    IDLE = "idle"
    CLEANING = "cleaning"
    SCANNING = "scanning"
    PLANNING = "planning"
    EMITTING = "emitting"
    COMPILING = "compiling"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GenerationReport:
    """Outcome of one generation run."""

    state: GenerationState = GenerationState.IDLE
    error: str | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    generated_files: list[Path] = field(default_factory=list)
    compile_result: CompileResult | None = None

    @property
    def success(self) -> bool:
        return self.state == GenerationState.DONE

    def to_dict(self) -> dict:
        """Convert the report to a JSON-friendly dictionary."""
        return {
            "success": self.success,
            "state": self.state.value,
            "error": self.error,
            "generatedFiles": [str(p) for p in self.generated_files],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "artifact": str(self.compile_result.artifact_path)
            if self.compile_result is not None and self.compile_result.artifact_path
            else None,
        }


class ModelsGenerator:
    """Generates the published content models of a site."""

    def __init__(
        self,
        config: ModelsBuilderConfig,
        schema_provider: SchemaProvider,
        file_store: FileStore | None = None,
        status: GenerationStatus | None = None,
        parser: CodeParser | None = None,
        planner: GenerationPlanner | None = None,
        text_builder: TextBuilder | None = None,
        compiler: Compiler | None = None,
    ):
        """
        Initialize the generator.

        Every collaborator defaults to the C# implementation built from the
        configuration.

        Args:
            config: Models builder configuration
            schema_provider: Source of the content-type schema
            file_store: File operations on the models directory
            status: Status sink receiving errors and the out-of-date flag
            parser: Scanner of the hand-authored sources
            planner: Generation planner
            text_builder: Renderer of generation plans
            compiler: Compiler used in DLL modes
        """
        self.config = config
        self.schema_provider = schema_provider
        self.file_store = file_store or LocalFileStore()
        self.status = status or GenerationStatus(out_of_date_enabled=config.flag_out_of_date_models)
        self.parser = parser or CSharpCodeParser()
        self.planner = planner or GenerationPlanner(
            model_base_class=config.model_base_class,
            strict_mixin_conflicts=config.strict_mixin_conflicts,
            name_resolver=NameResolver(config.reserved_member_names),
        )
        self.text_builder = text_builder or CSharpTextBuilder(config)
        self.compiler = compiler or CSharpCompiler(
            command=config.compiler_command,
            references=config.compiler_references,
            timeout=config.compile_timeout,
        )

    @property
    def models_directory(self) -> Path:
        return Path(self.config.models_directory)

    def generate(self, blocking: bool = False) -> GenerationReport:
        """
        Run one generation.

        Failures of the run are reported to the status sink and returned in
        the report. Unexpected exceptions are reported too, then re-raised.

        Args:
            blocking: Wait for a concurrent run on the same directory instead
                of failing with GenerationInProgressError

        Returns:
            The generation report

        Raises:
            GenerationInProgressError: If another run holds the directory
        """
        if not self.config.can_generate:
            return GenerationReport(state=GenerationState.FAILED, error="Models generation is not enabled.")

        with generation_lock(self.models_directory, blocking=blocking):
            report = GenerationReport()
            try:
                self._run(report)
            except ModelsBuilderError as e:
                self._fail(report, e)
            except Exception as e:
                self._fail(report, e)
                raise
            return report

    def _run(self, report: GenerationReport) -> None:
        models_dir = self.models_directory
        schema = self.schema_provider.get_schema()
        logger.debug("Loaded schema with %d content types", len(schema))

        self._enter(report, GenerationState.CLEANING)
        self._clean(models_dir)

        self._enter(report, GenerationState.SCANNING)
        sources = self._read_sources(models_dir, report)
        parse_result = self.parser.parse_files(sources)
        report.diagnostics.extend(parse_result.diagnostics)

        self._enter(report, GenerationState.PLANNING)
        plan_set = self.planner.plan(schema, parse_result)
        report.diagnostics.extend(plan_set.diagnostics)

        namespace = parse_result.models_namespace or self.config.models_namespace

        self._enter(report, GenerationState.EMITTING)
        generated = self._emit(plan_set, namespace, models_dir, report)

        if self.config.models_mode.is_any_dll:
            self._enter(report, GenerationState.COMPILING)
            result = self.compiler.compile(namespace, {**sources, **generated}, Path(self.config.bin_directory))
            report.compile_result = result
            if not result.success:
                raise CompilationFailedError(result)
            logger.info(result.summary())

        self._enter(report, GenerationState.DONE)
        self.status.clear()
        self.status.clear_out_of_date()
        self._log_diagnostics(report.diagnostics)
        logger.info("Generated %d models in %s", len(report.generated_files), models_dir)

    def _clean(self, models_dir: Path) -> None:
        """Delete every generated file, leaving hand-authored files alone."""
        try:
            self.file_store.ensure_directory(models_dir)
            for path in self.file_store.list_files(models_dir, f"*{GENERATED_SUFFIX}"):
                self.file_store.delete(path)
        except OSError as e:
            raise GenerationEnvironmentError(f"Cannot clean models directory {models_dir}: {e}") from e

    def _read_sources(self, models_dir: Path, report: GenerationReport) -> dict[str, str]:
        """Read the hand-authored sources; undecodable files become diagnostics."""
        sources = {}
        try:
            paths = [p for p in self.file_store.list_files(models_dir, SOURCE_PATTERN) if not is_generated(p)]
            for path in paths:
                try:
                    sources[str(path)] = self.file_store.read_text(path)
                except UnicodeDecodeError as e:
                    report.diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.PARSE_FAILURE,
                            severity=Severity.WARNING,
                            message=f"File is not valid UTF-8: {e}",
                            path=str(path),
                        )
                    )
        except OSError as e:
            raise GenerationEnvironmentError(f"Cannot read models directory {models_dir}: {e}") from e
        return sources

    def _emit(self, plan_set: PlanSet, namespace: str, models_dir: Path, report: GenerationReport) -> dict[str, str]:
        """Render and write every plan; returns path -> generated text."""
        generated = {}
        for plan in plan_set.plans:
            text = self.text_builder.generate(plan, namespace)
            path = models_dir / self.text_builder.file_name(plan)
            try:
                self.file_store.write_text(path, text)
            except OSError as e:
                raise EmitIOError(f"Cannot write {path}: {e}") from e
            generated[str(path)] = text
            report.generated_files.append(path)
        return generated

    def _enter(self, report: GenerationReport, state: GenerationState) -> None:
        logger.debug("%s -> %s", report.state.value, state.value)
        report.state = state

    def _fail(self, report: GenerationReport, exc: Exception) -> None:
        logger.error("Models generation failed while %s: %s", report.state.value, exc)
        report.state = GenerationState.FAILED
        report.error = str(exc)
        self.status.report("Failed to build models.", exc)
        self._log_diagnostics(report.diagnostics)

    def _log_diagnostics(self, diagnostics: list[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            if diagnostic.severity == Severity.INFO:
                logger.info(str(diagnostic))
            else:
                logger.warning(str(diagnostic))
