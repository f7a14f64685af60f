"""Cross-entity reference checks: existence, dependency cycles and orphans.

References are compared on their short form (``pln-003``) so an ID written
with or without its slug resolves to the same entity.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from spec_mcp.core.entity_types import EntityType
from spec_mcp.core.ids import entity_id_of, parse_entity_id
from spec_mcp.core.schemas import Component, Decision, Plan, SpecBase
from spec_mcp.core.storage import SpecManager, dump_entity
from spec_mcp.core.supersession import active_items
from spec_mcp.core.validation.models import BrokenReference, ReferenceValidationOptions, ValidationResult
from spec_mcp.core.validation.similarity import similar_ids

logger = logging.getLogger(__name__)

Graph = Dict[str, List[str]]


def ref_key(ref: str) -> str:
    """Short, slug-less form of an entity ID; unparseable values pass through."""
    parsed = parse_entity_id(ref)
    return parsed.short_id if parsed else ref


def full_id(entity: SpecBase) -> str:
    return entity_id_of({"type": entity.type, "number": entity.number, "slug": entity.slug})


def find_cycle(graph: Graph, start: str) -> Optional[List[str]]:
    """Depth-first search for a dependency path leading from ``start`` back to it.

    Cycles that do not pass through ``start`` are skipped, as is a direct
    self-edge on ``start``. Returns the path with ``start`` as first and last
    node, or None.
    """
    visited: Set[str] = {start}
    path: List[str] = [start]

    def visit(node: str) -> Optional[List[str]]:
        for dep in graph.get(node, []):
            if dep == start:
                if len(path) > 1:
                    return path + [start]
                continue
            if dep in visited:
                continue
            visited.add(dep)
            path.append(dep)
            cycle = visit(dep)
            if cycle:
                return cycle
            path.pop()
        return None

    return visit(start)


def find_all_cycles(graph: Graph) -> List[List[str]]:
    """One cycle per back-edge found by a depth-first walk over the whole graph."""
    cycles: List[List[str]] = []
    done: Set[str] = set()
    on_stack: Set[str] = set()
    stack: List[str] = []

    def visit(node: str) -> None:
        on_stack.add(node)
        stack.append(node)
        for dep in graph.get(node, []):
            if dep in on_stack:
                cycles.append(stack[stack.index(dep):] + [dep])
            elif dep not in done:
                visit(dep)
        stack.pop()
        on_stack.discard(node)
        done.add(node)

    for node in graph:
        if node not in done:
            visit(node)
    return cycles


@dataclass
class _Snapshot:
    """All entities loaded once per validation run, keyed by short ID."""

    entities: Dict[str, SpecBase] = field(default_factory=dict)

    def of_type(self, entity_type: EntityType) -> List[SpecBase]:
        return [e for e in self.entities.values() if e.type == entity_type.value]

    def exists(self, ref: str) -> bool:
        return ref_key(ref) in self.entities

    def get(self, ref: str) -> Optional[SpecBase]:
        return self.entities.get(ref_key(ref))


class ReferenceValidator:
    """Validates references between entities held by a ``SpecManager``."""

    def __init__(self, specs: SpecManager) -> None:
        self.specs = specs

    def _snapshot(self) -> _Snapshot:
        snapshot = _Snapshot()
        for entity in self.specs.list_all():
            snapshot.entities[ref_key(full_id(entity))] = entity
        return snapshot

    # ------------------------------------------------------------------
    # Per-entity checks
    # ------------------------------------------------------------------

    def validate_entity_references(
        self,
        entity: SpecBase,
        options: Optional[ReferenceValidationOptions] = None,
        *,
        snapshot: Optional[_Snapshot] = None,
    ) -> ValidationResult:
        options = options or ReferenceValidationOptions()
        snapshot = snapshot or self._snapshot()
        result = ValidationResult(entity_id=full_id(entity))

        if isinstance(entity, Plan):
            self._check_plan(entity, snapshot, options, result)
        elif isinstance(entity, Component):
            self._check_component(entity, snapshot, options, result)
        elif isinstance(entity, Decision):
            if options.check_existence and entity.supersedes and not snapshot.exists(entity.supersedes):
                result.add_error(f"Decision supersedes non-existent decision '{entity.supersedes}'")

        if options.check_orphans:
            for warning in self._orphan_warnings(entity, snapshot):
                result.add_warning(warning)
        return result

    def _dependency_graph(self, snapshot: _Snapshot, entity_type: EntityType, current: SpecBase) -> Graph:
        graph: Graph = {
            key: [ref_key(d) for d in getattr(e, "depends_on", [])]
            for key, e in snapshot.entities.items()
            if e.type == entity_type.value
        }
        graph[ref_key(full_id(current))] = [ref_key(d) for d in getattr(current, "depends_on", [])]
        return graph

    def _check_depends_on(
        self,
        entity: SpecBase,
        label: str,
        entity_type: EntityType,
        snapshot: _Snapshot,
        options: ReferenceValidationOptions,
        result: ValidationResult,
    ) -> None:
        own_key = ref_key(full_id(entity))
        if options.check_existence:
            for dep in entity.depends_on:
                if ref_key(dep) == own_key:
                    if not options.allow_self_references:
                        result.add_error(f"{label} cannot depend on itself: {dep}")
                    continue
                if not snapshot.exists(dep):
                    result.add_error(f"{label} depends on non-existent {label.lower()} '{dep}'")
        if options.check_cycles:
            cycle = find_cycle(self._dependency_graph(snapshot, entity_type, entity), own_key)
            if cycle:
                result.add_error(f"Circular dependency detected: {' -> '.join(cycle)}")

    def _check_plan(
        self, plan: Plan, snapshot: _Snapshot, options: ReferenceValidationOptions, result: ValidationResult
    ) -> None:
        if options.check_existence and plan.criteria is not None:
            requirement = snapshot.get(plan.criteria.requirement)
            if requirement is None:
                result.add_error(f"Plan references non-existent requirement '{plan.criteria.requirement}'")
            elif not any(c.id == plan.criteria.criteria for c in getattr(requirement, "criteria", [])):
                result.add_error(
                    f"Plan references non-existent criteria '{plan.criteria.criteria}' "
                    f"in '{plan.criteria.requirement}'"
                )

        self._check_depends_on(plan, "Plan", EntityType.PLAN, snapshot, options, result)

        if options.check_existence:
            for milestone in plan.milestones:
                if not snapshot.exists(milestone):
                    result.add_error(f"Plan references non-existent milestone '{milestone}'")

        for flow in plan.flows:
            step_ids = {s.id for s in flow.steps}
            for step in flow.steps:
                for next_id in step.next_steps:
                    if next_id not in step_ids:
                        result.add_error(
                            f"Flow '{flow.id}' step '{step.id}' references non-existent step '{next_id}'"
                        )

        task_ids = {t.id for t in plan.tasks}
        for task in plan.tasks:
            for dep in task.depends_on:
                if dep not in task_ids:
                    result.add_error(f"Task '{task.id}' depends on non-existent task '{dep}'")
            for entry in task.blocked:
                for dep in entry.blocked_by:
                    if dep not in task_ids:
                        result.add_warning(f"Task '{task.id}' is blocked by unknown task '{dep}'")

        if options.check_cycles:
            live = [t for t in plan.tasks if not t.superseded_by]
            graph = {t.id: [d for d in t.depends_on if d in task_ids] for t in live}
            for cycle in find_all_cycles(graph):
                result.add_error(f"Circular task dependency detected: {' -> '.join(cycle)}")

    def _check_component(
        self, component: Component, snapshot: _Snapshot, options: ReferenceValidationOptions, result: ValidationResult
    ) -> None:
        self._check_depends_on(component, "Component", EntityType.COMPONENT, snapshot, options, result)

    # ------------------------------------------------------------------
    # Orphans
    # ------------------------------------------------------------------

    @staticmethod
    def _fulfills_criterion(plan: Plan, snapshot: _Snapshot) -> bool:
        if plan.criteria is None:
            return False
        requirement = snapshot.get(plan.criteria.requirement)
        return any(c.id == plan.criteria.criteria for c in getattr(requirement, "criteria", []))

    def _orphan_warnings(self, entity: SpecBase, snapshot: _Snapshot) -> List[str]:
        key = ref_key(full_id(entity))
        others = [e for k, e in snapshot.entities.items() if k != key]
        if isinstance(entity, Plan):
            referenced = any(key in {ref_key(d) for d in o.depends_on} for o in others if isinstance(o, Plan))
            if not referenced and not self._fulfills_criterion(entity, snapshot):
                return [f"Plan '{full_id(entity)}' is not referenced by any other plan and does not fulfill any criteria"]
        elif isinstance(entity, Component):
            referenced = any(key in {ref_key(d) for d in o.depends_on} for o in others if isinstance(o, Component))
            if not referenced:
                return [f"Component '{full_id(entity)}' is not referenced by any other component"]
        elif entity.type in (EntityType.BUSINESS_REQUIREMENT.value, EntityType.TECHNICAL_REQUIREMENT.value):
            fulfilled = {
                p.criteria.criteria
                for p in snapshot.of_type(EntityType.PLAN)
                if p.criteria is not None and ref_key(p.criteria.requirement) == key
            }
            open_ids = [c["id"] for c in active_items(dump_entity(entity).get("criteria", [])) if c["id"] not in fulfilled]
            if open_ids:
                return [f"Requirement '{full_id(entity)}' has criteria not fulfilled by any plan: {', '.join(open_ids)}"]
        return []

    # ------------------------------------------------------------------
    # Whole-store checks
    # ------------------------------------------------------------------

    def validate_all_references(self, options: Optional[ReferenceValidationOptions] = None) -> ValidationResult:
        options = options or ReferenceValidationOptions(check_orphans=True)
        snapshot = self._snapshot()
        combined = ValidationResult()
        for entity in snapshot.entities.values():
            partial = self.validate_entity_references(entity, options, snapshot=snapshot)
            for message in partial.errors:
                combined.add_error(f"{partial.entity_id}: {message}")
            for message in partial.warnings:
                combined.add_warning(message)
        logger.debug(
            "Reference validation over %d entities: %d errors, %d warnings",
            len(snapshot.entities),
            len(combined.errors),
            len(combined.warnings),
        )
        return combined

    def find_broken_references(self) -> List[BrokenReference]:
        snapshot = self._snapshot()
        broken: List[BrokenReference] = []
        for entity in snapshot.entities.values():
            source = full_id(entity)
            targets: Dict[str, Sequence[str]] = {"depends_on": getattr(entity, "depends_on", [])}
            if isinstance(entity, Plan):
                targets["milestones"] = entity.milestones
                if entity.criteria is not None:
                    requirement = snapshot.get(entity.criteria.requirement)
                    if requirement is None:
                        broken.append(BrokenReference(source, "criteria.requirement", entity.criteria.requirement))
                    elif not any(c.id == entity.criteria.criteria for c in getattr(requirement, "criteria", [])):
                        broken.append(
                            BrokenReference(
                                source,
                                "criteria.criteria",
                                f"{entity.criteria.requirement}/{entity.criteria.criteria}",
                            )
                        )
            if isinstance(entity, Decision) and entity.supersedes:
                targets["supersedes"] = [entity.supersedes]
            for field_name, refs in targets.items():
                for ref in refs:
                    if not snapshot.exists(ref):
                        broken.append(BrokenReference(source, field_name, ref))
        return broken

    def suggest_reference_fixes(self, broken_id: str) -> List[str]:
        """Up to three existing IDs that closely resemble ``broken_id``."""
        snapshot = self._snapshot()
        parsed = parse_entity_id(broken_id)
        pool = snapshot.of_type(parsed.entity_type) if parsed else list(snapshot.entities.values())
        return similar_ids(broken_id, [full_id(e) for e in pool])
