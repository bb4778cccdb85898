"""
Schema model node definitions.

An immutable snapshot of the content types to generate models for: their
properties, their base type and the mixins they are composed of.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import SchemaUnavailableError


class ItemType(str, Enum):
    """Kind of published item a content type describes."""

    CONTENT = "content"
    MEDIA = "media"
    MEMBER = "member"
    ELEMENT = "element"

    @property
    def csharp_name(self) -> str:
        """Name of the matching PublishedItemType member."""
        return self.value.capitalize()


@dataclass(frozen=True)
class PropertyModel:
    """A property of a content type."""

    alias: str = ""  # Stable schema identifier
    name: str = ""  # Local (generated) name, empty = derived from the alias
    value_type: str = "object"  # C# type of the property value
    is_ignored: bool = False
    display_name: str = ""
    description: str = ""


@dataclass(frozen=True)
class TypeModel:
    """A content type, mixin or element type."""

    alias: str = ""
    class_name: str = ""  # Empty = derived from the alias
    display_name: str = ""
    description: str = ""
    item_type: ItemType = ItemType.CONTENT

    properties: tuple[PropertyModel, ...] = ()

    # Inheritance: a single base type, and mixins in declaration order
    base_alias: str | None = None
    mixin_aliases: tuple[str, ...] = ()

    # Whether another type composes this one as a mixin
    is_mixin: bool = False


@dataclass(frozen=True)
class SchemaSnapshot:
    """An ordered, immutable set of content types."""

    types: tuple[TypeModel, ...] = ()
    _by_alias: dict[str, TypeModel] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        index: dict[str, TypeModel] = {}
        for type_model in self.types:
            if not type_model.alias:
                raise SchemaUnavailableError("Invalid schema: content type without an alias")
            if type_model.alias in index:
                raise SchemaUnavailableError(f"Invalid schema: duplicate content type alias '{type_model.alias}'")
            index[type_model.alias] = type_model
        object.__setattr__(self, "_by_alias", index)

    def get(self, alias: str) -> TypeModel | None:
        """Get a content type by alias."""
        return self._by_alias.get(alias)

    def __contains__(self, alias: object) -> bool:
        return alias in self._by_alias

    def __iter__(self):
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> SchemaSnapshot:
        """Build a snapshot from its JSON representation.

        Types referenced as a mixin by any other type are flagged as mixins,
        in addition to those explicitly flagged with ``isMixin``.

        Raises:
            SchemaUnavailableError: If the document is not a valid snapshot
        """
        raw_types = d.get("contentTypes")
        if not isinstance(raw_types, list):
            raise SchemaUnavailableError("Invalid schema: 'contentTypes' must be a list")

        mixin_aliases: set[str] = set()
        for raw in raw_types:
            if not isinstance(raw, dict):
                raise SchemaUnavailableError("Invalid schema: content types must be objects")
            mixin_aliases.update(raw.get("mixins") or [])

        types = tuple(_type_from_dict(raw, mixin_aliases) for raw in raw_types)
        return SchemaSnapshot(types)

    def to_dict(self) -> dict[str, Any]:
        """Convert the snapshot to its JSON representation."""
        return {
            "contentTypes": [
                {
                    "alias": t.alias,
                    "clrName": t.class_name,
                    "name": t.display_name,
                    "description": t.description,
                    "itemType": t.item_type.value,
                    "baseType": t.base_alias,
                    "mixins": list(t.mixin_aliases),
                    "isMixin": t.is_mixin,
                    "properties": [
                        {
                            "alias": p.alias,
                            "clrName": p.name,
                            "clrType": p.value_type,
                            "isIgnored": p.is_ignored,
                            "name": p.display_name,
                            "description": p.description,
                        }
                        for p in t.properties
                    ],
                }
                for t in self.types
            ]
        }


def _type_from_dict(raw: dict[str, Any], mixin_aliases: set[str]) -> TypeModel:
    alias = raw.get("alias") or ""
    try:
        item_type = ItemType(str(raw.get("itemType", "content")).lower())
    except ValueError as e:
        raise SchemaUnavailableError(f"Invalid schema: unknown item type {raw.get('itemType')!r} for '{alias}'") from e

    properties = []
    for raw_prop in raw.get("properties") or []:
        if not isinstance(raw_prop, dict) or not raw_prop.get("alias"):
            raise SchemaUnavailableError(f"Invalid schema: property without an alias in '{alias}'")
        properties.append(
            PropertyModel(
                alias=raw_prop["alias"],
                name=raw_prop.get("clrName") or "",
                value_type=raw_prop.get("clrType") or "object",
                is_ignored=bool(raw_prop.get("isIgnored", False)),
                display_name=raw_prop.get("name") or "",
                description=raw_prop.get("description") or "",
            )
        )

    return TypeModel(
        alias=alias,
        class_name=raw.get("clrName") or "",
        display_name=raw.get("name") or "",
        description=raw.get("description") or "",
        item_type=item_type,
        properties=tuple(properties),
        base_alias=raw.get("baseType") or None,
        mixin_aliases=tuple(raw.get("mixins") or ()),
        is_mixin=bool(raw.get("isMixin", False)) or alias in mixin_aliases,
    )
