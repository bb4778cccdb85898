"""
File store for model sources.

Generated files live next to hand-authored files in the models directory
and are told apart only by their suffix.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from .atomic_writer import AtomicWriter

# Suffix of every generated model file
GENERATED_SUFFIX = ".generated.cs"

# Pattern of every model source file, generated or not
SOURCE_PATTERN = "*.cs"


def is_generated(path: str | Path) -> bool:
    """Check whether a file is a generated model file."""
    return Path(path).name.endswith(GENERATED_SUFFIX)


class FileStore(ABC):
    """File operations the pipeline needs.

    Implementations must be strongly consistent within a run: a file
    written is immediately readable and listed.
    """

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Read a whole file as UTF-8 text."""

    @abstractmethod
    def write_text(self, path: Path, content: str) -> None:
        """Write a whole file as UTF-8 text."""

    @abstractmethod
    def list_files(self, directory: Path, pattern: str) -> list[Path]:
        """List the files of a directory matching a glob pattern, sorted."""

    @abstractmethod
    def ensure_directory(self, directory: Path) -> None:
        """Create a directory if it does not exist."""

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Delete a file."""


class LocalFileStore(FileStore):
    """File store on the local file system, writing atomically."""

    def __init__(self, writer: AtomicWriter | None = None):
        self.writer = writer or AtomicWriter()

    def read_text(self, path: Path) -> str:
        with open(path, encoding="utf-8-sig", newline="") as f:
            return f.read()

    def write_text(self, path: Path, content: str) -> None:
        self.writer.write(path, content)

    def list_files(self, directory: Path, pattern: str) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob(pattern) if p.is_file())

    def ensure_directory(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)

    def delete(self, path: Path) -> None:
        path.unlink(missing_ok=True)
