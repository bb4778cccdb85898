"""
C# text builder.

Renders a generation plan as a partial C# model class.
"""

from __future__ import annotations

from typing import Any

from ... import __version__
from ..planner.planner import GenerationPlan, PlannedProperty
from ..store import GENERATED_SUFFIX
from .base import TextBuilder


class CSharpTextBuilder(TextBuilder):
    """C# text builder for published content models."""

    TEMPLATE_LANG = "cs"
    FILE_EXTENSION = "cs"

    # Standard using statements that are always generated
    STANDARD_USINGS = [
        "System",
        "System.Collections.Generic",
        "System.Linq.Expressions",
        "System.Web",
        "Umbraco.Core.Models",
        "Umbraco.Core.Models.PublishedContent",
        "Umbraco.ModelsBuilder",
        "Umbraco.ModelsBuilder.Umbraco",
        "Umbraco.Web",
    ]

    def generate(self, plan: GenerationPlan, namespace: str) -> str:
        """Generate the C# source of one model."""
        prefix = self.prefix_template.render(
            generation_comment=self.config.add_generation_comment,
            version=__version__,
            usings=self._collect_usings(plan, namespace),
            namespace=namespace,
        )
        body = self.class_template.render(self._prepare_class_context(plan))
        suffix = self.suffix_template.render()
        return prefix + body + suffix

    def file_name(self, plan: GenerationPlan) -> str:
        return f"{plan.class_name}{GENERATED_SUFFIX}"

    def _collect_usings(self, plan: GenerationPlan, namespace: str) -> list[str]:
        """Standard, configured and preserved usings, sorted and unique.

        The models namespace itself is never imported.
        """
        usings = set(self.STANDARD_USINGS)
        usings.update(self.config.additional_usings)
        for directive in plan.usings:
            target = self._extract_namespace_from_using(directive)
            if target:
                usings.add(target)
        usings.discard(namespace)
        return sorted(usings)

    def _extract_namespace_from_using(self, using_text: str) -> str | None:
        """Extract the target of a using directive.

        "using System.Text;" -> "System.Text"
        "using static System.Math;" -> "static System.Math"
        "global using X;" -> None (already visible everywhere)
        """
        text = using_text.strip()
        if text.startswith("using ") and text.endswith(";"):
            return text[6:-1].strip()
        return None

    def _prepare_class_context(self, plan: GenerationPlan) -> dict[str, Any]:
        """
        Prepare the template context for a model.

        Args:
            plan: The generation plan

        Returns:
            Dictionary of template variables
        """
        bases = ([plan.base_class] if plan.base_class else []) + plan.interfaces
        declaration = f"public partial class {plan.class_name}"
        if bases:
            declaration += " : " + ", ".join(bases)

        interface = None
        if plan.interface_name:
            interface = {
                "declaration": f"public partial interface {plan.interface_name} : {', '.join(plan.interface_bases)}",
                "properties": [self._prepare_property_context(prop) for prop in plan.interface_properties],
            }

        return {
            "alias": plan.alias,
            "class_name": plan.class_name,
            "summary": plan.summary,
            "item_type": plan.item_type.csharp_name,
            "declaration": declaration,
            "interface": interface,
            "emit_constructor": plan.emit_constructor,
            "properties": [self._prepare_property_context(prop) for prop in plan.properties],
        }

    def _prepare_property_context(self, prop: PlannedProperty) -> dict[str, Any]:
        alias = self._cs_string(prop.alias)
        return {
            "alias": prop.alias,
            "name": prop.name,
            "type": prop.value_type,
            "summary": prop.summary,
            "getter": f'this.GetPropertyValue<{prop.value_type}>("{alias}")',
        }
