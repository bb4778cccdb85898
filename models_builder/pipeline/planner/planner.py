"""
Generation planner.

Merges the schema snapshot with what the hand-authored code already
declares, and decides, type by type, which properties to generate.

Composition rules:

- A type's effective property set is its own properties followed by the
  effective sets of its mixins, in declaration order (depth first).
- The first occurrence of an alias wins: the type's own property beats any
  mixin property, an earlier mixin beats a later one.
- Properties provided by the base type chain are inherited and never
  generated again.
- A class implements the interface of every mixin it is composed of, so
  every interface member must end up on the class with the interface
  type: generated, inherited, or written by hand. When it cannot, the type
  is unresolvable.

Problems with one type (unknown or cyclic references, conflicting names)
skip that type and the types depending on it, never the others.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ...logging import get_logger
from ..errors import Diagnostic, DiagnosticKind, Severity
from ..parser.base import ExistingFileInfo, ParseResult
from ..schema.nodes import ItemType, PropertyModel, SchemaSnapshot, TypeModel
from .name_resolver import NameResolver

logger = get_logger("planner")


class SkipReason(str, Enum):
    """Why a property of the effective set is not generated."""

    IGNORED = "ignored"  # Flagged as ignored in the schema
    HAND_IGNORED = "hand-ignored"  # [IgnorePropertyType] on the hand-authored class
    IMPLEMENTED = "implemented"  # [ImplementPropertyType] on a hand-authored member
    DECLARED = "declared"  # A hand-authored member already has the name


@dataclass
class PlannedProperty:
    """A property accessor to generate."""

    alias: str = ""
    name: str = ""
    value_type: str = "object"
    origin_alias: str = ""  # Type or mixin declaring the property
    summary: str = ""


@dataclass
class SkippedProperty:
    """A property of the effective set that is not generated."""

    alias: str = ""
    name: str = ""
    reason: SkipReason = SkipReason.IGNORED


@dataclass
class GenerationPlan:
    """Everything the text builder needs to render one model."""

    alias: str = ""
    class_name: str = ""
    item_type: ItemType = ItemType.CONTENT
    summary: str = ""
    is_mixin: bool = False

    # None when the hand-authored partial declares the base class itself
    base_class: str | None = None

    # Interfaces of the mixins this type is composed of
    interfaces: list[str] = field(default_factory=list)

    properties: list[PlannedProperty] = field(default_factory=list)
    skipped: list[SkippedProperty] = field(default_factory=list)

    # Mixins only: the interface exposing the mixin's own properties
    interface_name: str | None = None
    interface_bases: list[str] = field(default_factory=list)
    interface_properties: list[PlannedProperty] = field(default_factory=list)

    emit_constructor: bool = True
    usings: list[str] = field(default_factory=list)


@dataclass
class PlanSet:
    """Plans for every generated type, plus the diagnostics of planning."""

    plans: list[GenerationPlan] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def get(self, alias: str) -> GenerationPlan | None:
        """Get the plan of a content type."""
        return next((plan for plan in self.plans if plan.alias == alias), None)


@dataclass
class _Candidate:
    """A property of the effective set, tagged with where it comes from."""

    prop: PropertyModel
    origin_alias: str


class _UnresolvableTypeError(Exception):
    """Internal: the type cannot be planned."""

    def __init__(self, kind: DiagnosticKind, message: str):
        super().__init__(message)
        self.kind = kind


@dataclass
class _PlanningRun:
    """State of one plan() call."""

    schema: SchemaSnapshot
    parse_result: ParseResult
    # Aliases composed into another type, or flagged as mixins
    mixins: set[str] = field(default_factory=set)
    class_names: dict[str, str] = field(default_factory=dict)
    # alias -> plan, or None when the type is not generated
    results: dict[str, GenerationPlan | None] = field(default_factory=dict)
    # alias -> why the type is not generated
    failures: dict[str, str] = field(default_factory=dict)
    resolving: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class GenerationPlanner:
    """Builds one generation plan per content type."""

    def __init__(
        self,
        model_base_class: str = "PublishedContentModel",
        strict_mixin_conflicts: bool = False,
        name_resolver: NameResolver | None = None,
    ):
        """
        Initialize the planner.

        Args:
            model_base_class: Base class of models without a base content type
            strict_mixin_conflicts: Skip types whose mixins declare the same
                alias with different value types even when no implemented
                interface requires the losing declaration
            name_resolver: Resolver for class and member names
        """
        self.model_base_class = model_base_class
        self.strict_mixin_conflicts = strict_mixin_conflicts
        self.name_resolver = name_resolver or NameResolver()

    def plan(self, schema: SchemaSnapshot, parse_result: ParseResult) -> PlanSet:
        """
        Plan the generation of every content type.

        Args:
            schema: The schema snapshot
            parse_result: What the hand-authored code declares

        Returns:
            PlanSet with plans in schema order
        """
        run = _PlanningRun(schema=schema, parse_result=parse_result, mixins=self._find_mixins(schema))
        self._exclude_ignored_types(run)
        self._assign_class_names(run)

        for type_model in schema:
            self._resolve(type_model.alias, run)

        plans = [run.results[t.alias] for t in schema if run.results.get(t.alias) is not None]
        logger.debug("Planned %d of %d content types", len(plans), len(schema))
        return PlanSet(plans=plans, diagnostics=run.diagnostics)

    def _find_mixins(self, schema: SchemaSnapshot) -> set[str]:
        mixins = {t.alias for t in schema if t.is_mixin}
        for type_model in schema:
            mixins.update(type_model.mixin_aliases)
        return mixins

    def _mixins_of(self, type_model: TypeModel) -> list[str]:
        """Mixin aliases in declaration order, without repeats."""
        return list(dict.fromkeys(type_model.mixin_aliases))

    def _exclude_ignored_types(self, run: _PlanningRun) -> None:
        for type_model in run.schema:
            if run.parse_result.is_content_type_ignored(type_model.alias):
                run.results[type_model.alias] = None
                run.failures[type_model.alias] = "ignored"
                run.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.IGNORED_TYPE,
                        severity=Severity.INFO,
                        message=f"Content type '{type_model.alias}' is ignored",
                        type_alias=type_model.alias,
                    )
                )

    def _assign_class_names(self, run: _PlanningRun) -> None:
        """Resolve class names; a name already taken skips the later type.

        Mixin interfaces live in the same namespace as the classes, so their
        names are taken too.
        """
        taken: dict[str, str] = {}
        for type_model in run.schema:
            if type_model.alias in run.failures:
                continue
            renamed = run.parse_result.renamed_class(type_model.alias)
            class_name = self.name_resolver.class_name(type_model, renamed)
            names = [class_name]
            if type_model.alias in run.mixins:
                names.append(self.name_resolver.interface_name(class_name))
            # Generated file names derive from class names, so compare case-insensitively
            clash = next((name for name in names if name.lower() in taken), None)
            if clash is not None:
                run.results[type_model.alias] = None
                run.failures[type_model.alias] = "a duplicate class name"
                run.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.DUPLICATE_CLASS_NAME,
                        severity=Severity.ERROR,
                        message=f"Type name '{clash}' of content type '{type_model.alias}' is already used by '{taken[clash.lower()]}'",
                        type_alias=type_model.alias,
                    )
                )
                continue
            for name in names:
                taken[name.lower()] = type_model.alias
            run.class_names[type_model.alias] = class_name

    def _resolve(self, alias: str, run: _PlanningRun) -> GenerationPlan | None:
        """Plan a type after its base and mixins, memoized per run."""
        if alias in run.results:
            return run.results[alias]

        type_model = run.schema.get(alias)
        if type_model is None:
            return None

        run.resolving.append(alias)
        try:
            self._check_dependencies(type_model, run)
            plan = self._plan_type(type_model, run)
        except _UnresolvableTypeError as e:
            run.results[alias] = None
            run.failures[alias] = "unresolvable"
            run.diagnostics.append(
                Diagnostic(
                    kind=e.kind,
                    severity=Severity.ERROR,
                    message=f"Content type '{alias}' is not generated: {e}",
                    type_alias=alias,
                )
            )
            logger.warning("Skipping content type '%s': %s", alias, e)
            return None
        finally:
            run.resolving.pop()

        run.results[alias] = plan
        return plan

    def _check_dependencies(self, type_model: TypeModel, run: _PlanningRun) -> None:
        """Make sure the base type and every mixin can be generated."""
        dependencies = ([type_model.base_alias] if type_model.base_alias else []) + self._mixins_of(type_model)
        for dependency in dependencies:
            if dependency not in run.schema:
                raise _UnresolvableTypeError(DiagnosticKind.UNRESOLVABLE_TYPE, f"it references unknown content type '{dependency}'")
            if dependency in run.resolving:
                raise _UnresolvableTypeError(DiagnosticKind.UNRESOLVABLE_TYPE, f"its composition with '{dependency}' is circular")
            if self._resolve(dependency, run) is None:
                reason = run.failures.get(dependency, "unresolvable")
                raise _UnresolvableTypeError(DiagnosticKind.DEPENDENCY_SKIPPED, f"it depends on '{dependency}', which is {reason}")

    def _plan_type(self, type_model: TypeModel, run: _PlanningRun) -> GenerationPlan:
        class_name = run.class_names[type_model.alias]
        info = run.parse_result.get(class_name)

        effective, conflicts = self._effective_properties(type_model, run)
        if type_model.base_alias:
            base_effective, _ = self._effective_properties(self._get_type(type_model.base_alias, run), run)
            inherited = {c.prop.alias.lower() for c in base_effective}
            effective = [c for c in effective if c.prop.alias.lower() not in inherited]

        plan = GenerationPlan(
            alias=type_model.alias,
            class_name=class_name,
            item_type=type_model.item_type,
            summary=type_model.description or type_model.display_name or class_name,
            is_mixin=type_model.alias in run.mixins,
            interfaces=[self.name_resolver.interface_name(run.class_names[m]) for m in self._mixins_of(type_model)],
            emit_constructor=not (info is not None and info.has_constructor),
            usings=list(info.usings) if info is not None else [],
        )

        if info is not None and info.base_class:
            plan.base_class = None
        elif type_model.base_alias:
            plan.base_class = run.class_names[type_model.base_alias]
        else:
            plan.base_class = self.model_base_class

        for candidate in effective:
            name = self.name_resolver.property_name(candidate.prop)
            reason = self._skip_reason(candidate.prop, name, info)
            if reason is not None:
                plan.skipped.append(SkippedProperty(alias=candidate.prop.alias, name=name, reason=reason))
                continue
            plan.properties.append(self._planned(candidate, name))
        self._check_member_names(plan.properties, class_name)
        self._check_interface_members(type_model, plan, info, run)

        if plan.is_mixin:
            plan.interface_name = self.name_resolver.interface_name(class_name)
            plan.interface_bases = list(plan.interfaces) or ["IPublishedContent"]
            for prop in type_model.properties:
                if prop.is_ignored or (info is not None and info.is_ignored(prop.alias)):
                    continue
                candidate = _Candidate(prop=prop, origin_alias=type_model.alias)
                plan.interface_properties.append(self._planned(candidate, self.name_resolver.property_name(prop)))
            self._check_member_names(plan.interface_properties, class_name)

        # Conflicts no implemented interface cares about: first declaration wins
        for diagnostic in conflicts:
            if diagnostic not in run.diagnostics:
                run.diagnostics.append(diagnostic)

        return plan

    def _effective_properties(self, type_model: TypeModel, run: _PlanningRun) -> tuple[list[_Candidate], list[Diagnostic]]:
        """Union of own and mixin properties, first occurrence of an alias wins.

        Returns the effective set and a warning per conflicting redeclaration.
        """
        effective: dict[str, _Candidate] = {}
        conflicts: list[Diagnostic] = []
        for candidate in self._collect_candidates(type_model, run):
            key = candidate.prop.alias.lower()
            kept = effective.get(key)
            if kept is None:
                effective[key] = candidate
                continue
            if kept.origin_alias == candidate.origin_alias or kept.prop.value_type == candidate.prop.value_type:
                # Same mixin reached twice, or a compatible redeclaration
                continue
            message = (
                f"Property '{candidate.prop.alias}' is declared by '{kept.origin_alias}' as {kept.prop.value_type} "
                f"and by '{candidate.origin_alias}' as {candidate.prop.value_type}"
            )
            if self.strict_mixin_conflicts:
                raise _UnresolvableTypeError(DiagnosticKind.MIXIN_CONFLICT, message)
            conflicts.append(
                Diagnostic(
                    kind=DiagnosticKind.MIXIN_CONFLICT,
                    severity=Severity.WARNING,
                    message=f"{message}; using {kept.prop.value_type} from '{kept.origin_alias}'",
                    type_alias=type_model.alias,
                )
            )
        return list(effective.values()), conflicts

    def _collect_candidates(self, type_model: TypeModel, run: _PlanningRun) -> list[_Candidate]:
        """Own properties, then each mixin's candidates, in precedence order."""
        candidates = [_Candidate(prop=prop, origin_alias=type_model.alias) for prop in type_model.properties]
        for mixin_alias in self._mixins_of(type_model):
            candidates.extend(self._collect_candidates(self._get_type(mixin_alias, run), run))
        return candidates

    def _get_type(self, alias: str, run: _PlanningRun) -> TypeModel:
        type_model = run.schema.get(alias)
        if type_model is None:
            raise _UnresolvableTypeError(DiagnosticKind.UNRESOLVABLE_TYPE, f"it references unknown content type '{alias}'")
        return type_model

    def _skip_reason(self, prop: PropertyModel, name: str, info: ExistingFileInfo | None) -> SkipReason | None:
        """Decide whether a property is left out, and why.

        Absence of a hand-authored declaration means the property is
        generated; only explicit markers or an actual declaration skip it.
        """
        if prop.is_ignored:
            return SkipReason.IGNORED
        if info is None:
            return None
        if info.is_ignored(prop.alias):
            return SkipReason.HAND_IGNORED
        if info.is_implemented(prop.alias):
            return SkipReason.IMPLEMENTED
        if info.is_declared(name.lstrip("@")):
            return SkipReason.DECLARED
        return None

    def _planned(self, candidate: _Candidate, name: str) -> PlannedProperty:
        prop = candidate.prop
        return PlannedProperty(
            alias=prop.alias,
            name=name,
            value_type=prop.value_type,
            origin_alias=candidate.origin_alias,
            summary=prop.description or prop.display_name or name.lstrip("@"),
        )

    def _check_member_names(self, properties: list[PlannedProperty], class_name: str) -> None:
        """Planned members must not collide with each other or reserved names."""
        seen: dict[str, str] = {}
        for prop in properties:
            if self.name_resolver.is_reserved(prop.name, class_name):
                raise _UnresolvableTypeError(
                    DiagnosticKind.UNRESOLVABLE_TYPE,
                    f"property '{prop.alias}' resolves to reserved member name '{prop.name}'",
                )
            if prop.name in seen:
                raise _UnresolvableTypeError(
                    DiagnosticKind.UNRESOLVABLE_TYPE,
                    f"properties '{seen[prop.name]}' and '{prop.alias}' both resolve to member name '{prop.name}'",
                )
            seen[prop.name] = prop.alias

    def _check_interface_members(
        self,
        type_model: TypeModel,
        plan: GenerationPlan,
        info: ExistingFileInfo | None,
        run: _PlanningRun,
    ) -> None:
        """Every member of the implemented mixin interfaces must exist on the class.

        A member is satisfied by a generated property with the same name and
        type, by hand-authored code declaring or implementing it, or by a
        class of the base chain.
        """
        generated = {p.alias.lower(): p for p in plan.properties}
        for interface_name, required in self._interface_members(type_model, run):
            prop = generated.get(required.alias.lower())
            if prop is None:
                if self._is_hand_written(required, info) or self._is_inherited(required, type_model, run):
                    continue
                raise _UnresolvableTypeError(
                    DiagnosticKind.UNRESOLVABLE_TYPE,
                    f"property '{required.alias}' of interface '{interface_name}' is neither generated nor written by hand",
                )
            if prop.name != required.name or prop.value_type != required.value_type:
                raise _UnresolvableTypeError(
                    DiagnosticKind.MIXIN_CONFLICT,
                    f"property '{required.alias}' is generated as {prop.value_type} {prop.name} from '{prop.origin_alias}' "
                    f"but interface '{interface_name}' requires {required.value_type} {required.name}",
                )

    def _interface_members(self, type_model: TypeModel, run: _PlanningRun) -> list[tuple[str, PlannedProperty]]:
        """Members of every mixin interface the class implements, directly or not."""
        members = []
        seen: set[str] = set()
        pending = self._mixins_of(type_model)
        while pending:
            alias = pending.pop(0)
            if alias in seen:
                continue
            seen.add(alias)
            mixin_plan = run.results.get(alias)
            if mixin_plan is None:
                continue
            members.extend((mixin_plan.interface_name, p) for p in mixin_plan.interface_properties)
            pending.extend(self._mixins_of(self._get_type(alias, run)))
        return members

    def _is_hand_written(self, required: PlannedProperty, info: ExistingFileInfo | None) -> bool:
        if info is None:
            return False
        return info.is_implemented(required.alias) or info.is_declared(required.name.lstrip("@"))

    def _is_inherited(self, required: PlannedProperty, type_model: TypeModel, run: _PlanningRun) -> bool:
        """Check whether a class of the base chain provides the member."""
        key = required.alias.lower()
        base_alias = type_model.base_alias
        while base_alias:
            base_plan = run.results.get(base_alias)
            if base_plan is None:
                return False
            for prop in base_plan.properties:
                if prop.alias.lower() == key:
                    return prop.name == required.name and prop.value_type == required.value_type
            if self._is_hand_written(required, run.parse_result.get(base_plan.class_name)):
                return True
            base_alias = self._get_type(base_alias, run).base_alias
        return False
