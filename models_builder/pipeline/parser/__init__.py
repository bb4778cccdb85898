"""
Existing-code scanner.

Parses hand-authored sources in the models directory to find which members
of the generated classes are already declared or explicitly ignored.
"""

from __future__ import annotations

from .base import CodeParser, ExistingFileInfo, ParseResult
from .csharp_parser import CSharpCodeParser

__all__ = [
    "CodeParser",
    "CSharpCodeParser",
    "ExistingFileInfo",
    "ParseResult",
]
