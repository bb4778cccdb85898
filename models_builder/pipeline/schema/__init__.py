"""
Schema model: content types, properties and their composition.
"""

from __future__ import annotations

from .nodes import ItemType, PropertyModel, SchemaSnapshot, TypeModel
from .provider import JsonSchemaProvider, SchemaProvider, StaticSchemaProvider

__all__ = [
    "ItemType",
    "PropertyModel",
    "TypeModel",
    "SchemaSnapshot",
    "SchemaProvider",
    "StaticSchemaProvider",
    "JsonSchemaProvider",
]
