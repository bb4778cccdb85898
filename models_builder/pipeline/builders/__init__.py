"""
Text builders.

Render generation plans into model source files.
"""

from __future__ import annotations

from .base import TextBuilder
from .csharp_builder import CSharpTextBuilder

__all__ = [
    "TextBuilder",
    "CSharpTextBuilder",
]
