"""
Artifact compilers.

Turn the merged model sources into a loadable assembly.
"""

from __future__ import annotations

from .base import Compiler, CompilerDiagnostic, CompileResult, CompileStatus
from .csharp_compiler import CSharpCompiler

__all__ = [
    "Compiler",
    "CompilerDiagnostic",
    "CompileResult",
    "CompileStatus",
    "CSharpCompiler",
]
