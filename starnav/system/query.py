"""
Read-only queries over a built StarSystem.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Dict, List, Optional, Union

from starnav.system.errors import ObjectNotFoundError
from starnav.system.types import CelestialObject, ObjectType, StarSystem
from starnav.utils.geometry import Position, orbit_path


class SystemQueryService:
    """
    Lookups, world-space positions, orbit paths and statistics.

    All methods are pure reads; the service can be shared freely across
    consumers of the same snapshot.
    """

    def __init__(self, system: StarSystem):
        self.system = system

    def get_by_type(self, object_type: Union[ObjectType, str]) -> List[CelestialObject]:
        """Objects of a type in load order (empty for unknown types)."""
        parsed = ObjectType.parse(object_type)
        if parsed is None:
            return []
        return list(self.system.objects_by_type.get(parsed, ()))

    def get_by_id(self, object_id: str) -> CelestialObject:
        """Raises ObjectNotFoundError for unknown ids."""
        return self.system.get(object_id)

    def find(self, object_id: str) -> Optional[CelestialObject]:
        return self.system.objects_by_id.get(object_id)

    def get_children(self, parent_id: str) -> List[CelestialObject]:
        """Direct children in index order, not sorted."""
        return list(self.system.objects_by_parent.get(parent_id, ()))

    def get_absolute_position(self, object_id: str) -> Position:
        """
        Sum local positions up the parent chain.

        Uses the builder's precomputed absolute position when present.
        Otherwise walks the chain; a broken link or a revisited id ends the
        walk early and the partial sum is returned.

        Raises:
            ObjectNotFoundError: If object_id is unknown
        """
        obj = self.system.get(object_id)
        precomputed = self.system.absolute_positions.get(object_id)
        if precomputed is not None:
            return precomputed

        position = obj.position
        visited = {obj.id}

        parent_id = obj.parent_id
        while parent_id:
            parent = self.system.objects_by_id.get(parent_id)
            if parent is None or parent.id in visited:
                break
            visited.add(parent.id)
            position = position + parent.position
            parent_id = parent.parent_id

        return position

    def get_orbit_path(self, object_id: str, steps: int = 100) -> List[Position]:
        """
        Circular orbit samples relative to the object's parent.

        Raises:
            ObjectNotFoundError: If object_id is unknown
            ValueError: If steps is negative
        """
        obj = self.system.get(object_id)
        return orbit_path(obj.position, steps)

    def depth_histogram(self) -> Dict[int, int]:
        """Object count per depth below the root (root = depth 0)."""
        histogram: Dict[int, int] = {}
        visited = set()
        queue = deque([(self.system.root_id, 0)])

        while queue:
            object_id, depth = queue.popleft()
            if object_id in visited:
                continue
            visited.add(object_id)
            histogram[depth] = histogram.get(depth, 0) + 1
            for child in self.system.objects_by_parent.get(object_id, ()):
                if child.id not in visited:
                    queue.append((child.id, depth + 1))

        return histogram

    def get_statistics(self) -> Dict[str, Any]:
        """Object, type, parent-group and depth statistics."""
        histogram = self.depth_histogram()
        return {
            "object_count": len(self.system),
            "counts_by_type": {
                object_type.value: len(objects)
                for object_type, objects in self.system.objects_by_type.items()
            },
            "parent_group_count": len(self.system.objects_by_parent),
            "depth_histogram": histogram,
            "max_depth": max(histogram) if histogram else 0,
        }
