"""
Name resolver for generated class and member names.

Turns schema aliases into valid C# identifiers and knows which member
names generated properties must stay away from.
"""

from __future__ import annotations

from ...utils import alias_to_pascal_case, is_identifier
from ..schema.nodes import PropertyModel, TypeModel

# C# reserved keywords that need escaping
CS_RESERVED_KEYWORDS = {
    "abstract",
    "as",
    "base",
    "bool",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "checked",
    "class",
    "const",
    "continue",
    "decimal",
    "default",
    "delegate",
    "do",
    "double",
    "else",
    "enum",
    "event",
    "explicit",
    "extern",
    "false",
    "finally",
    "fixed",
    "float",
    "for",
    "foreach",
    "goto",
    "if",
    "implicit",
    "in",
    "int",
    "interface",
    "internal",
    "is",
    "lock",
    "long",
    "namespace",
    "new",
    "null",
    "object",
    "operator",
    "out",
    "override",
    "params",
    "private",
    "protected",
    "public",
    "readonly",
    "ref",
    "return",
    "sbyte",
    "sealed",
    "short",
    "sizeof",
    "stackalloc",
    "static",
    "string",
    "struct",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "uint",
    "ulong",
    "unchecked",
    "unsafe",
    "ushort",
    "using",
    "virtual",
    "void",
    "volatile",
    "while",
}

# Members every generated model already has, through the generated
# constants or the published content base class
RESERVED_MEMBER_NAMES = {
    "ModelTypeAlias",
    "ModelItemType",
    "GetModelContentType",
    "GetModelPropertyType",
    "Id",
    "Key",
    "Name",
    "UrlName",
    "Url",
    "Path",
    "Level",
    "SortOrder",
    "TemplateId",
    "CreateDate",
    "UpdateDate",
    "CreatorId",
    "CreatorName",
    "WriterId",
    "WriterName",
    "Version",
    "DocumentTypeId",
    "DocumentTypeAlias",
    "ContentType",
    "ContentSet",
    "ItemType",
    "IsDraft",
    "Parent",
    "Children",
    "Properties",
    "GetProperty",
    "GetIndex",
    "Equals",
    "GetHashCode",
    "GetType",
    "ToString",
}


class NameResolver:
    """Resolves class and member names for generated models."""

    def __init__(self, reserved_member_names: list[str] | None = None):
        """
        Initialize the resolver.

        Args:
            reserved_member_names: Extra member names to reserve
        """
        self.reserved_member_names = RESERVED_MEMBER_NAMES | set(reserved_member_names or [])

    def class_name(self, type_model: TypeModel, renamed: str | None = None) -> str:
        """Get the class name for a content type."""
        name = renamed or type_model.class_name or alias_to_pascal_case(type_model.alias)
        name = self._make_identifier(name)
        # Class names never get the @ prefix, it would leak into file names
        if name.lower() in CS_RESERVED_KEYWORDS:
            name = name + "Type"
        return name

    def interface_name(self, class_name: str) -> str:
        """Get the interface name of a mixin class."""
        return f"I{class_name}"

    def property_name(self, prop: PropertyModel) -> str:
        """Get the local name for a property."""
        name = self._make_identifier(prop.name or alias_to_pascal_case(prop.alias))
        return self.escape_keyword(name)

    def is_reserved(self, member_name: str, class_name: str) -> bool:
        """Check whether a member name collides with a reserved name."""
        bare = member_name.lstrip("@")
        return bare in self.reserved_member_names or bare == class_name

    def escape_keyword(self, name: str) -> str:
        """Escape a C# reserved keyword with @ prefix."""
        if name in CS_RESERVED_KEYWORDS:
            return f"@{name}"
        return name

    def _make_identifier(self, name: str) -> str:
        """Make a name a valid identifier."""
        if is_identifier(name):
            return name
        cleaned = "".join(c if c.isalnum() or c == "_" else "_" for c in name if c.isascii())
        if not cleaned:
            return "_"
        if cleaned[0].isdigit():
            cleaned = "_" + cleaned
        return cleaned
