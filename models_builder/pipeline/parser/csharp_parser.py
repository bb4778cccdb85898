"""
C# code parser implementation.

Uses tree-sitter and tree-sitter-c-sharp to find which members of the
generated partial classes are already written by hand, and which ones are
explicitly suppressed with attributes.
"""

from __future__ import annotations

import re
from typing import Any

import tree_sitter_c_sharp as ts_csharp
from tree_sitter import Language, Parser

from ..errors import CodeParseError
from .base import CodeParser, ExistingFileInfo, ParseResult

# Base list entries that look like interfaces (IFoo, Ns.IFoo, IFoo<T>)
_INTERFACE_NAME = re.compile(r"^I[A-Z]")


class CSharpCodeParser(CodeParser):
    """Parser for hand-authored C# model files.

    Each file is scanned in two passes. The first pass collects the partial
    class declarations and their members, the second pass collects the
    attribute markers attached to the assembly, to those classes, and to
    their members.
    """

    # Class-level marker: do not generate this property
    IGNORE_PROPERTY_TYPE = "IgnorePropertyType"

    # Member-level marker: this member implements this property alias
    IMPLEMENT_PROPERTY_TYPE = "ImplementPropertyType"

    # Assembly-level markers
    IGNORE_CONTENT_TYPE = "IgnoreContentType"
    RENAME_CONTENT_TYPE = "RenameContentType"
    MODELS_NAMESPACE = "ModelsNamespace"

    # Node types that wrap an attribute between it and the declaration it applies to
    ATTRIBUTE_WRAPPERS = {"attribute_list", "global_attribute", "global_attribute_list", "attribute_target_specifier"}

    # Declarations that make a class nested
    TYPE_DECLARATIONS = {"class_declaration", "struct_declaration", "interface_declaration", "record_declaration"}

    def __init__(self):
        self._parser = Parser(Language(ts_csharp.language()))

    def parse(self, code: str) -> Any:
        """Parse C# source code into a tree-sitter tree.

        Args:
            code: C# source code string

        Returns:
            tree-sitter Tree object

        Raises:
            CodeParseError: If the code cannot be parsed
        """
        source = bytes(code, "utf8")
        tree = self._parser.parse(source)

        if tree.root_node.has_error:
            error = self._find_first_error(tree.root_node)
            if error is None:
                raise CodeParseError("Failed to parse C# code: syntax error")
            line = error.start_point[0] + 1
            column = error.start_point[1] + 1
            near = self._get_node_text(error, source)[:50]
            raise CodeParseError(f"Failed to parse C# code at line {line}: syntax error near '{near}'", line, column)

        return tree

    def scan_file(self, path: str, code: str, result: ParseResult) -> None:
        tree = self.parse(code)
        source = bytes(code, "utf8")
        root = tree.root_node

        usings = []
        for using in self._find_nodes(root, "using_directive"):
            text = self._get_node_text(using, source).strip()
            if text not in usings:
                usings.append(text)

        # Pass 1: partial classes and their declared members
        classes: dict[tuple[int, int], ExistingFileInfo] = {}
        for class_node in self._find_nodes(root, "class_declaration"):
            if self._is_nested(class_node) or not self._is_partial(class_node, source):
                continue
            class_name = self._get_class_name(class_node, source)
            if not class_name:
                continue

            info = ExistingFileInfo(class_name=class_name, paths=[path], usings=list(usings))
            info.base_class = self._get_declared_base_class(class_node, source)
            body = self._get_class_body(class_node)
            if body is not None:
                for member in body.children:
                    if member.type == "constructor_declaration":
                        info.has_constructor = True
                    else:
                        info.declared_members.update(self._get_member_names(member, source))
            classes[self._span(class_node)] = info

        # Pass 2: attribute markers
        for attribute in self._find_nodes(root, "attribute"):
            owner = self._get_attribute_owner(attribute)
            if owner is None:
                continue
            name = self._get_attribute_name(attribute, source)
            arguments = self._get_string_arguments(attribute, source)

            if owner.type == "compilation_unit":
                self._apply_assembly_attribute(name, arguments, result)
            elif owner.type == "class_declaration":
                info = classes.get(self._span(owner))
                if info is not None and name == self.IGNORE_PROPERTY_TYPE and arguments:
                    if arguments[0] not in info.ignored_aliases:
                        info.ignored_aliases.append(arguments[0])
            elif name == self.IMPLEMENT_PROPERTY_TYPE and arguments:
                class_node = self._get_member_class(owner)
                info = classes.get(self._span(class_node)) if class_node is not None else None
                if info is not None:
                    info.implemented_aliases.add(arguments[0])

        for info in classes.values():
            result.add(info)

    def _apply_assembly_attribute(self, name: str, arguments: list[str], result: ParseResult) -> None:
        """Record an assembly-level attribute."""
        if name == self.IGNORE_CONTENT_TYPE and arguments:
            if arguments[0] not in result.ignored_content_types:
                result.ignored_content_types.append(arguments[0])
        elif name == self.RENAME_CONTENT_TYPE and len(arguments) >= 2:
            result.renamed_content_types.setdefault(arguments[0], arguments[1])
        elif name == self.MODELS_NAMESPACE and arguments:
            if result.models_namespace is None:
                result.models_namespace = arguments[0]

    def _find_first_error(self, node: Any) -> Any | None:
        """Find the first ERROR or MISSING node in the tree."""
        if node.type == "ERROR" or node.is_missing:
            return node
        for child in node.children:
            error = self._find_first_error(child)
            if error is not None:
                return error
        return None

    def _find_nodes(self, node: Any, node_type: str) -> list[Any]:
        """Find all nodes of a given type in the tree."""
        results = []
        if node.type == node_type:
            results.append(node)
        for child in node.children:
            results.extend(self._find_nodes(child, node_type))
        return results

    def _get_node_text(self, node: Any, source: bytes) -> str:
        """Get the source text for a node."""
        return source[node.start_byte : node.end_byte].decode("utf8")

    def _span(self, node: Any) -> tuple[int, int]:
        return (node.start_byte, node.end_byte)

    def _is_nested(self, node: Any) -> bool:
        """Check whether a type declaration sits inside another type."""
        parent = node.parent
        while parent is not None:
            if parent.type in self.TYPE_DECLARATIONS:
                return True
            parent = parent.parent
        return False

    def _is_partial(self, class_node: Any, source: bytes) -> bool:
        for child in class_node.children:
            if child.type == "declaration_list":
                break
            if self._get_node_text(child, source) == "partial":
                return True
        return False

    def _get_class_name(self, node: Any, source: bytes) -> str | None:
        """Get class name from class_declaration node."""
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            return self._get_node_text(name_node, source)
        for child in node.children:
            if child.type == "identifier":
                return self._get_node_text(child, source)
        return None

    def _get_class_body(self, class_node: Any) -> Any | None:
        for child in class_node.children:
            if child.type == "declaration_list":
                return child
        return None

    def _get_declared_base_class(self, class_node: Any, source: bytes) -> str | None:
        """Get the base class from the base list, skipping interfaces.

        Without semantic information, entries named like IFoo are taken to
        be interfaces; the first other entry is the base class.
        """
        for child in class_node.children:
            if child.type != "base_list":
                continue
            for entry in child.named_children:
                if entry.type == "argument_list":
                    continue
                text = self._get_node_text(entry, source).strip()
                simple_name = text.split("<", 1)[0].rsplit(".", 1)[-1]
                if not _INTERFACE_NAME.match(simple_name):
                    return text
        return None

    def _get_member_names(self, member: Any, source: bytes) -> set[str]:
        """Get the names a class member declares."""
        if member.type in ("property_declaration", "method_declaration", "event_declaration"):
            name_node = member.child_by_field_name("name")
            return {self._get_node_text(name_node, source)} if name_node is not None else set()

        if member.type in ("field_declaration", "event_field_declaration"):
            names = set()
            for variable in self._find_nodes(member, "variable_declarator"):
                name_node = variable.child_by_field_name("name")
                if name_node is None:
                    name_node = next((c for c in variable.children if c.type == "identifier"), None)
                if name_node is not None:
                    names.add(self._get_node_text(name_node, source))
            return names

        return set()

    def _get_attribute_owner(self, attribute: Any) -> Any | None:
        """Get the declaration (or compilation unit) an attribute applies to."""
        node = attribute.parent
        while node is not None and node.type in self.ATTRIBUTE_WRAPPERS:
            node = node.parent
        return node

    def _get_member_class(self, member: Any) -> Any | None:
        """Get the class declaring a member, if the member is a direct class member."""
        body = member.parent
        if body is None or body.type != "declaration_list":
            return None
        owner = body.parent
        if owner is None or owner.type != "class_declaration":
            return None
        return owner

    def _get_attribute_name(self, attribute: Any, source: bytes) -> str:
        """Get an attribute's simple name: no namespace, no Attribute suffix."""
        name_node = attribute.child_by_field_name("name")
        if name_node is None:
            name_node = attribute.named_children[0] if attribute.named_children else attribute
        name = self._get_node_text(name_node, source)
        name = name.rsplit("::", 1)[-1].rsplit(".", 1)[-1].strip()
        if name.endswith("Attribute") and name != "Attribute":
            name = name[: -len("Attribute")]
        return name

    def _get_string_arguments(self, attribute: Any, source: bytes) -> list[str]:
        """Get the string literal arguments of an attribute, in order."""
        arguments = []
        for argument in self._find_nodes(attribute, "attribute_argument"):
            literal = self._find_string_literal(argument)
            if literal is not None:
                arguments.append(self._unquote(self._get_node_text(literal, source)))
        return arguments

    def _find_string_literal(self, node: Any) -> Any | None:
        if node.type in ("string_literal", "verbatim_string_literal", "raw_string_literal"):
            return node
        for child in node.children:
            literal = self._find_string_literal(child)
            if literal is not None:
                return literal
        return None

    def _unquote(self, text: str) -> str:
        """Turn a C# string literal into its value."""
        if text.startswith("@"):
            return text[1:].strip('"').replace('""', '"')
        value = text.strip('"')
        return value.replace('\\"', '"').replace("\\\\", "\\")
