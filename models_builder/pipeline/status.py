"""
Generation status.

The last generation error and the out-of-date flag, as shown by a
dashboard. The generator is the only writer; the dashboard the only reader.
When given a directory, the status is also persisted there (``models.err``
and ``ood.flag``) so that other processes can read it.
"""

from __future__ import annotations

import threading
from pathlib import Path

from .atomic_writer import AtomicWriter
from .config import ModelsBuilderConfig


class GenerationStatus:
    """Process-wide status of models generation."""

    ERROR_FILE = "models.err"
    OUT_OF_DATE_FILE = "ood.flag"

    def __init__(self, directory: str | Path | None = None, out_of_date_enabled: bool = True):
        """
        Initialize the status.

        Args:
            directory: Directory to persist the status in, or None to keep it in memory
            out_of_date_enabled: Whether out-of-date tracking is enabled
        """
        self.directory = Path(directory) if directory is not None else None
        self.out_of_date_enabled = out_of_date_enabled
        self._lock = threading.Lock()
        self._writer = AtomicWriter()
        self._last_error: str | None = None
        self._out_of_date = False
        self._load()

    @property
    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    @property
    def is_out_of_date(self) -> bool:
        with self._lock:
            return self.out_of_date_enabled and self._out_of_date

    def report(self, message: str, exc: BaseException | None = None) -> None:
        """Record a generation failure."""
        text = message
        if exc is not None:
            text += f"\n{type(exc).__name__}: {exc}"
        with self._lock:
            self._last_error = text
            if self.directory is not None:
                self._writer.write(self.directory / self.ERROR_FILE, text)

    def clear(self) -> None:
        """Clear the last error after a successful generation."""
        with self._lock:
            self._last_error = None
            if self.directory is not None:
                (self.directory / self.ERROR_FILE).unlink(missing_ok=True)

    def flag_out_of_date(self) -> None:
        """Flag models as out of date, e.g. after a schema change."""
        if not self.out_of_date_enabled:
            return
        with self._lock:
            self._out_of_date = True
            if self.directory is not None:
                self._writer.write(self.directory / self.OUT_OF_DATE_FILE, "THIS FILE INDICATES THAT MODELS ARE OUT-OF-DATE\n")

    def clear_out_of_date(self) -> None:
        """Clear the out-of-date flag after a successful generation."""
        with self._lock:
            self._out_of_date = False
            if self.directory is not None:
                (self.directory / self.OUT_OF_DATE_FILE).unlink(missing_ok=True)

    def _load(self) -> None:
        if self.directory is None:
            return
        error_file = self.directory / self.ERROR_FILE
        if error_file.is_file():
            self._last_error = error_file.read_text(encoding="utf-8")
        self._out_of_date = (self.directory / self.OUT_OF_DATE_FILE).is_file()


def build_dashboard(config: ModelsBuilderConfig, status: GenerationStatus) -> dict:
    """Summarize configuration and status the way the dashboard shows them."""
    if not config.enable:
        text = "Models builder is disabled."
    else:
        text = f"Models builder is enabled. The models mode is '{config.models_mode.value}'."
        if config.models_mode.supports_explicit_generation:
            text += f" Models are generated in '{config.models_directory}'"
            if config.models_mode.is_any_dll:
                text += f" and compiled into '{config.bin_directory}'"
            text += f", in namespace '{config.models_namespace}'."
    return {
        "enable": config.enable,
        "text": text,
        "canGenerate": config.can_generate,
        "generateCausesRestart": config.models_mode.is_any_dll,
        "outOfDateModels": status.is_out_of_date,
        "lastError": status.last_error,
    }
