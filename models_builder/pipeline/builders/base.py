"""
Base class for text builders.

Defines the interface that language-specific builders implement to turn a
generation plan into source text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from xml.sax.saxutils import escape

import jinja2

from ..config import ModelsBuilderConfig
from ..planner.planner import GenerationPlan


class TextBuilder(ABC):
    """Abstract base class for text builders.

    Builders are pure: the same plan, namespace and configuration always
    render to the same text.
    """

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: ModelsBuilderConfig):
        """
        Initialize the builder.

        Args:
            config: Models builder configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )
        # Add custom filters
        self.jinja_env.filters["xmldoc"] = self._xmldoc
        self.jinja_env.filters["cs_string"] = self._cs_string

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.suffix_template = self.jinja_env.get_template(f"suffix.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def generate(self, plan: GenerationPlan, namespace: str) -> str:
        """
        Generate the source text of one model.

        Args:
            plan: The generation plan of the model
            namespace: Namespace of the generated models

        Returns:
            Generated source text
        """

    @abstractmethod
    def file_name(self, plan: GenerationPlan) -> str:
        """
        Get the file name of a generated model.

        Args:
            plan: The generation plan of the model

        Returns:
            File name, carrying the generated-file suffix
        """

    def _xmldoc(self, text: str) -> str:
        """Escape text for an XML doc comment, on a single line."""
        return escape(" ".join(str(text).split()))

    def _cs_string(self, text: str) -> str:
        """Escape text for a regular string literal."""
        return str(text).replace("\\", "\\\\").replace('"', '\\"')
