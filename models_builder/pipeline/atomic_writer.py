"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

from .errors import EmitIOError


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(self, validate_csharp: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_csharp: Optional validation function for C# code
        """
        self._validate_csharp = validate_csharp or self._default_validate_csharp

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate C# sources before finalizing

        Raises:
            EmitIOError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )

        temp_path = Path(temp_path_str)

        try:
            # newline="" keeps the generated line endings byte for byte
            with open(temp_fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)

            if validate and path.suffix == ".cs":
                self._validate_csharp(content)

            # On POSIX systems, rename() is atomic if source and dest are on same filesystem
            temp_path.replace(path)

        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def _default_validate_csharp(self, content: str) -> None:
        """Default C# validation.

        Args:
            content: C# code to validate

        Raises:
            EmitIOError: If validation fails
        """
        # Basic structural checks, the compiler does the real work
        if "namespace " not in content:
            raise EmitIOError("Generated C# code is missing namespace declaration")

        if "class " not in content and "interface " not in content:
            raise EmitIOError("Generated C# code has no type definitions")
