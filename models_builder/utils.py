"""
Utility functions for the models builder.
"""

import re

# Anything that is not a letter or digit separates words in an alias
_SEPARATOR_PATTERN = re.compile(r"[^A-Za-z0-9]+")

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _split_into_words(text: str) -> list[str]:
    """Split text on separators (underscores, hyphens, spaces, dots...)."""
    return [word for word in _SEPARATOR_PATTERN.split(text) if word]


def _capitalize_first(word: str) -> str:
    """Upper-case the first character only, keeping inner casing."""
    return word[:1].upper() + word[1:]


def alias_to_pascal_case(text: str) -> str:
    """Convert a content-type or property alias to PascalCase.

    Unlike a title-case conversion, the casing inside each word is kept,
    so camelCase boundaries and acronyms survive.

    Examples:
        "title" -> "Title"
        "metaTitle" -> "MetaTitle"
        "meta_title" -> "MetaTitle"
        "body-text" -> "BodyText"
        "SEO" -> "SEO"
        "3dModel" -> "3dModel"

    Args:
        text: The alias to convert

    Returns:
        PascalCase string (may still start with a digit)
    """
    if not text:
        return ""
    return "".join(_capitalize_first(word) for word in _split_into_words(text))


def is_identifier(text: str) -> bool:
    """Check whether text is a plain C# identifier (ASCII subset)."""
    return bool(_IDENTIFIER_PATTERN.match(text))


def matches_alias_pattern(alias: str, pattern: str) -> bool:
    """Match an alias against an ignore pattern.

    Patterns are exact aliases, or end with ``*`` to match a prefix.
    Matching is case-insensitive, as aliases are in the schema.
    """
    if pattern.endswith("*"):
        return alias.lower().startswith(pattern[:-1].lower())
    return alias.lower() == pattern.lower()
