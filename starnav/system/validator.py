"""
Structural validation and debugging output for a StarSystem.

Checks are diagnostic only: they collect issue strings and never raise,
so callers decide whether an imperfect system is usable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from starnav.system.query import SystemQueryService
from starnav.system.types import CelestialObject, ObjectType, StarSystem
from starnav.utils.logging_config import get_logger

logger = get_logger("validation")


# Hierarchy dump ordering of siblings
TYPE_PRIORITY: Dict[ObjectType, int] = {
    ObjectType.STAR: 0,
    ObjectType.PLANET: 1,
    ObjectType.MOON: 2,
    ObjectType.LAGRANGE_POINT: 3,
    ObjectType.JUMP_POINT: 4,
    ObjectType.STATION: 5,
    ObjectType.SPACE_STATION: 6,
    ObjectType.REST_STOP: 7,
    ObjectType.OUTPOST: 8,
    ObjectType.LANDING_ZONE: 9,
    ObjectType.COMM_ARRAY: 10,
    ObjectType.ORBIT_MARKER: 11,
    ObjectType.GENERIC: 12,
}


@dataclass
class ValidationReport:
    """Result of SystemValidator.validate()."""
    valid: bool
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "issues": list(self.issues)}


class SystemValidator:
    """
    Invariant checks, hierarchy dump, statistics and disconnected-node search.

    Args:
        system: Snapshot to inspect
        query: Query service over the same snapshot (created if omitted)
        system_prefix: Id prefix of lagrange point references
    """

    def __init__(
        self,
        system: StarSystem,
        query: Optional[SystemQueryService] = None,
        system_prefix: str = "stanton",
    ):
        self.system = system
        self.query = query or SystemQueryService(system)
        self._lagrange_pattern = re.compile(rf"{re.escape(system_prefix)}\d+_l\d+", re.IGNORECASE)

    def _label(self, obj: CelestialObject) -> str:
        return f"{obj.display_name} ({obj.id})"

    def validate(self) -> ValidationReport:
        """
        Check root presence, parent resolution and position sanity.

        Dangling parents that look like lagrange point ids are tolerated.
        """
        issues: List[str] = []
        objects = self.system.objects_by_id
        root = objects.get(self.system.root_id)

        if root is None:
            issues.append("No star found in the system")
        elif root.parent_id not in ("", "root") and root.parent_id not in objects:
            issues.append(f"Root {self._label(root)} has non-existent parent: {root.parent_id}")

        for obj in objects.values():
            if obj.id == self.system.root_id:
                continue
            if not obj.parent_id:
                issues.append(f"Object {self._label(obj)} has no parent")
            elif obj.parent_id not in objects and not self._lagrange_pattern.search(obj.parent_id):
                issues.append(f"Object {self._label(obj)} has non-existent parent: {obj.parent_id}")

        for obj in objects.values():
            if not obj.position.is_finite:
                issues.append(f"Object {self._label(obj)} has invalid position data")

        report = ValidationReport(valid=not issues, issues=issues)
        if issues:
            logger.warning(f"Validation found {len(issues)} issue(s) in {self.system.name}")
        return report

    def find_disconnected(self) -> List[CelestialObject]:
        """Non-root objects whose parent chain never passes through a Star."""
        objects = self.system.objects_by_id
        disconnected: List[CelestialObject] = []

        for obj in objects.values():
            if obj.id == self.system.root_id:
                continue

            reaches_star = False
            visited = {obj.id}
            current = obj
            while current.parent_id:
                parent = objects.get(current.parent_id)
                if parent is None or parent.id in visited:
                    break
                if parent.object_type is ObjectType.STAR:
                    reaches_star = True
                    break
                visited.add(parent.id)
                current = parent

            if not reaches_star:
                disconnected.append(obj)

        return disconnected

    def generate_hierarchy_text(self) -> str:
        """Indented tree dump, siblings sorted by type priority then name."""
        objects = self.system.objects_by_id
        root = objects.get(self.system.root_id)
        if root is None:
            return "No star system loaded"

        lines = [f"Star System: {self.system.name}"]
        visited = set()
        stack = [(root, 0)]
        while stack:
            obj, depth = stack.pop()
            if obj.id in visited:
                continue
            visited.add(obj.id)
            lines.append(f"{'  ' * depth}{obj.display_name} ({obj.object_type.value})")

            children = sorted(
                self.query.get_children(obj.id),
                key=lambda c: (TYPE_PRIORITY.get(c.object_type, 999), c.display_name),
            )
            # Reversed so the first sorted child is popped first
            for child in reversed(children):
                if child.id not in visited:
                    stack.append((child, depth + 1))

        return "\n".join(lines) + "\n"

    def generate_statistics(self) -> Dict[str, Any]:
        """Query statistics plus children-per-parent counts."""
        stats = self.query.get_statistics()
        stats["parent_stats"] = {
            parent_id: len(children)
            for parent_id, children in self.system.objects_by_parent.items()
        }
        return stats
