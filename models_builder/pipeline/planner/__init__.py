"""
Generation planner.

Decides, per content type, which class, base, interfaces and property
accessors to generate.
"""

from __future__ import annotations

from .name_resolver import NameResolver
from .planner import GenerationPlan, GenerationPlanner, PlannedProperty, PlanSet, SkippedProperty, SkipReason

__all__ = [
    "NameResolver",
    "GenerationPlan",
    "GenerationPlanner",
    "PlannedProperty",
    "PlanSet",
    "SkippedProperty",
    "SkipReason",
]
