"""
Base classes for scanning hand-authored model sources.

Provides the records produced by a scan and the abstract interface for
language-specific code parsers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ...utils import matches_alias_pattern
from ..errors import CodeParseError, Diagnostic, DiagnosticKind, Severity


@dataclass
class ExistingFileInfo:
    """What hand-authored code already says about one generated class.

    Partial declarations of the same class spread over several files are
    merged into a single record.

    Attributes:
        class_name: Name of the partial class
        paths: Files contributing a partial declaration, sorted
        declared_members: Member names declared by hand (case-sensitive)
        implemented_aliases: Property aliases claimed with [ImplementPropertyType]
        ignored_aliases: Alias patterns from [IgnorePropertyType] on the class
        usings: Using directives to carry into the generated file
        base_class: Base class declared by hand, if any
        has_constructor: Whether a constructor is declared by hand
    """

    class_name: str = ""
    paths: list[str] = field(default_factory=list)
    declared_members: set[str] = field(default_factory=set)
    implemented_aliases: set[str] = field(default_factory=set)
    ignored_aliases: list[str] = field(default_factory=list)
    usings: list[str] = field(default_factory=list)
    base_class: str | None = None
    has_constructor: bool = False

    def is_declared(self, name: str) -> bool:
        """Check whether a member with this exact name is declared by hand."""
        return name in self.declared_members

    def is_implemented(self, alias: str) -> bool:
        """Check whether a property alias is implemented by hand."""
        return alias.lower() in {a.lower() for a in self.implemented_aliases}

    def is_ignored(self, alias: str) -> bool:
        """Check whether a property alias is explicitly ignored by hand."""
        return any(matches_alias_pattern(alias, pattern) for pattern in self.ignored_aliases)

    def merge(self, other: ExistingFileInfo) -> None:
        """Merge another partial declaration of the same class into this one."""
        for path in other.paths:
            if path not in self.paths:
                self.paths.append(path)
        self.paths.sort()
        self.declared_members |= other.declared_members
        self.implemented_aliases |= other.implemented_aliases
        for pattern in other.ignored_aliases:
            if pattern not in self.ignored_aliases:
                self.ignored_aliases.append(pattern)
        for using in other.usings:
            if using not in self.usings:
                self.usings.append(using)
        if self.base_class is None:
            self.base_class = other.base_class
        self.has_constructor = self.has_constructor or other.has_constructor


@dataclass
class ParseResult:
    """Everything found in the hand-authored sources of one run.

    Attributes:
        types: Class name to merged ExistingFileInfo
        ignored_content_types: Alias patterns from [assembly: IgnoreContentType]
        renamed_content_types: Alias to class name from [assembly: RenameContentType]
        models_namespace: Namespace override from [assembly: ModelsNamespace]
        diagnostics: Files that could not be parsed
    """

    types: dict[str, ExistingFileInfo] = field(default_factory=dict)
    ignored_content_types: list[str] = field(default_factory=list)
    renamed_content_types: dict[str, str] = field(default_factory=dict)
    models_namespace: str | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def get(self, class_name: str) -> ExistingFileInfo | None:
        """Get the existing info for a class, if any partial declares it."""
        return self.types.get(class_name)

    def add(self, info: ExistingFileInfo) -> None:
        """Add a partial declaration, merging with earlier ones."""
        existing = self.types.get(info.class_name)
        if existing is None:
            self.types[info.class_name] = info
        else:
            existing.merge(info)

    def is_content_type_ignored(self, alias: str) -> bool:
        """Check whether a content type is excluded from generation."""
        return any(matches_alias_pattern(alias, pattern) for pattern in self.ignored_content_types)

    def renamed_class(self, alias: str) -> str | None:
        """Get the class name a content type was renamed to, if any."""
        for renamed_alias, class_name in self.renamed_content_types.items():
            if renamed_alias.lower() == alias.lower():
                return class_name
        return None


class CodeParser(ABC):
    """Abstract base class for language-specific code parsers.

    Subclasses implement parsing a single file; the file loop, merging of
    partial declarations and failure isolation are shared.
    """

    @abstractmethod
    def parse(self, code: str) -> Any:
        """Parse source code into a syntax tree.

        Args:
            code: Source code string

        Returns:
            Language-specific tree

        Raises:
            CodeParseError: If the code cannot be parsed
        """

    @abstractmethod
    def scan_file(self, path: str, code: str, result: ParseResult) -> None:
        """Scan one file and record its declarations into result.

        Args:
            path: Path of the file, recorded in ExistingFileInfo.paths
            code: Source code of the file
            result: Result receiving the file's contribution

        Raises:
            CodeParseError: If the code cannot be parsed
        """

    def parse_files(self, files: dict[str, str]) -> ParseResult:
        """Scan a set of hand-authored files.

        Files are visited in sorted path order so the merged result does not
        depend on directory listing order. A file that fails to parse
        contributes nothing and is reported as a diagnostic.

        Args:
            files: Mapping of path to source text

        Returns:
            The merged ParseResult
        """
        result = ParseResult()
        for path in sorted(files):
            file_result = ParseResult()
            try:
                self.scan_file(path, files[path], file_result)
            except CodeParseError as e:
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.PARSE_FAILURE,
                        severity=Severity.WARNING,
                        message=str(e),
                        path=path,
                        line=e.line,
                        column=e.column,
                    )
                )
                continue
            self._merge_file_result(result, file_result)
        return result

    def _merge_file_result(self, result: ParseResult, file_result: ParseResult) -> None:
        """Fold a single file's contribution into the run result."""
        for info in file_result.types.values():
            result.add(info)
        for pattern in file_result.ignored_content_types:
            if pattern not in result.ignored_content_types:
                result.ignored_content_types.append(pattern)
        for alias, class_name in file_result.renamed_content_types.items():
            result.renamed_content_types.setdefault(alias, class_name)
        if result.models_namespace is None:
            result.models_namespace = file_result.models_namespace
