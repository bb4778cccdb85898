"""
Schema providers.

The schema itself lives in the CMS runtime; the pipeline only ever sees a
snapshot of it, obtained through a provider when a run starts.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path

from ..errors import SchemaUnavailableError
from .nodes import SchemaSnapshot


class SchemaProvider(ABC):
    """Source of content-type schema snapshots."""

    @abstractmethod
    def get_schema(self) -> SchemaSnapshot:
        """
        Get the current schema snapshot.

        Returns:
            An immutable schema snapshot

        Raises:
            SchemaUnavailableError: If the schema cannot be obtained
        """


class StaticSchemaProvider(SchemaProvider):
    """Provider returning a snapshot held in memory."""

    def __init__(self, snapshot: SchemaSnapshot):
        self.snapshot = snapshot

    def get_schema(self) -> SchemaSnapshot:
        return self.snapshot


class JsonSchemaProvider(SchemaProvider):
    """Provider reading a snapshot exported as JSON."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get_schema(self) -> SchemaSnapshot:
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except OSError as e:
            raise SchemaUnavailableError(f"Cannot read schema snapshot {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SchemaUnavailableError(f"Schema snapshot {self.path} is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise SchemaUnavailableError(f"Schema snapshot {self.path} must be a JSON object")

        return SchemaSnapshot.from_dict(document)
