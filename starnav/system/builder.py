"""
Hierarchy reconstruction from a flat, noisy record feed.

The builder turns an unordered ``id -> record`` mapping into a rooted
StarSystem snapshot:

    1. Inference: synthesize lagrange points that are referenced as parents
       but never defined (``stanton3_l1`` -> child of ``stanton3``).
    2. Construction: classify every record into a CelestialObject.
    3. Repair: retarget dangling parent references by naming convention
       (RepairPolicy), recording a RepairDecision for each change.
    4. Root detection: Star-typed object, else an id containing "star",
       else a parentless object. No candidate -> MissingRootError.
    5. Anchoring: detach the root, adopt leftover parentless objects and
       break parent cycles so every chain ends at the root.
    6. Absolute positions: accumulate local offsets down from the root.

Only step 4 can fail; every other step degrades to "parent = root".
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

from starnav.system.classifier import classify
from starnav.system.errors import MalformedInputError, MissingRootError
from starnav.system.types import (
    CelestialObject,
    ObjectType,
    RepairDecision,
    RepairRule,
    StarSystem,
    parent_of,
)
from starnav.utils.config_loader import HierarchyConfig
from starnav.utils.geometry import Position, compose_position
from starnav.utils.logging_config import get_logger

logger = get_logger("hierarchy.builder")

ROOT_SENTINEL = "root"


class RepairPolicy:
    """
    Naming-convention heuristics for guessing an intended parent.

    Every decision is returned as a RepairDecision so callers can see which
    rule fired, not just the resulting parent.
    """

    def __init__(self, system_prefix: str = "stanton", root_keywords=("star", "sun")):
        self.system_prefix = system_prefix.lower()
        self.root_keywords = tuple(k.lower() for k in root_keywords)
        self._lagrange_pattern = re.compile(
            rf"{re.escape(self.system_prefix)}(\d+)_l(\d+)", re.IGNORECASE
        )

    def match_lagrange(self, text: str) -> Optional[re.Match]:
        """Match ``<prefix><planet>_l<n>`` anywhere in *text*."""
        return self._lagrange_pattern.search(text or "")

    def planet_for(self, match: re.Match) -> str:
        return f"{self.system_prefix}{match.group(1)}"

    def is_reststop_station(self, object_id: str) -> bool:
        lowered = object_id.lower()
        return "station_reststop" in lowered and self.system_prefix in lowered

    def find_root_key(self, object_ids) -> Optional[str]:
        """First id containing a root keyword, in iteration order."""
        for object_id in object_ids:
            lowered = object_id.lower()
            if any(keyword in lowered for keyword in self.root_keywords):
                return object_id
        return None

    def decide(
        self,
        object_id: str,
        old_parent: str,
        known_ids,
        root_key: Optional[str],
    ) -> RepairDecision:
        """
        Choose a new parent for an object whose parent does not resolve.

        Args:
            object_id: Object being repaired
            old_parent: Its dangling parent reference
            known_ids: All ids present in the feed
            root_key: Provisional root id ("" is used if None)

        Returns:
            RepairDecision describing the retarget
        """
        root_target = root_key or ""

        if object_id == root_key:
            return RepairDecision(
                object_id, old_parent, "", RepairRule.ROOT_DETACHED,
                "star cannot have a parent",
            )

        own_match = self.match_lagrange(object_id)
        if own_match:
            planet_id = self.planet_for(own_match)
            if planet_id in known_ids:
                return RepairDecision(
                    object_id, old_parent, planet_id, RepairRule.LAGRANGE_TO_PLANET,
                    f"lagrange point id names planet {planet_id}",
                )
            return RepairDecision(
                object_id, old_parent, root_target, RepairRule.LAGRANGE_TO_ROOT,
                f"lagrange point planet {planet_id} is not defined",
            )

        if self.is_reststop_station(object_id):
            parent_match = self.match_lagrange(old_parent)
            if parent_match:
                planet_id = self.planet_for(parent_match)
                if planet_id in known_ids:
                    return RepairDecision(
                        object_id, old_parent, planet_id, RepairRule.RESTSTOP_TO_PLANET,
                        f"rest stop parent {old_parent} lies at planet {planet_id}",
                    )
            return RepairDecision(
                object_id, old_parent, root_target, RepairRule.RESTSTOP_TO_ROOT,
                f"no planet could be derived from {old_parent!r}",
            )

        return RepairDecision(
            object_id, old_parent, root_target, RepairRule.DEFAULT_TO_ROOT,
            f"parent {old_parent!r} does not exist",
        )


class HierarchyBuilder:
    """
    Builds StarSystem snapshots from raw feed records.

    Example:
        >>> builder = HierarchyBuilder()
        >>> system = builder.build({"sun": {"parent": "root"}, "stanton1": {"parent": "sun"}})
        >>> system.root_id
        'sun'
    """

    def __init__(self, config: Optional[HierarchyConfig] = None):
        self.config = config or HierarchyConfig()
        self.policy = RepairPolicy(self.config.system_prefix, self.config.root_keywords)

    def build(self, raw_records: Mapping[str, Any]) -> StarSystem:
        """
        Reconstruct the hierarchy.

        Args:
            raw_records: Mapping of id to loosely-typed record

        Returns:
            StarSystem whose every parent chain terminates at the root

        Raises:
            MalformedInputError: If raw_records is not a mapping
            MissingRootError: If no root can be determined
        """
        records = self._normalize(raw_records)

        inferred = self.infer_missing_objects(records)
        records.update(inferred)

        objects: Dict[str, CelestialObject] = {
            object_id: CelestialObject.from_record(
                object_id, payload, classify(object_id, payload), inferred=object_id in inferred
            )
            for object_id, payload in records.items()
        }
        parents = {object_id: obj.parent_id for object_id, obj in objects.items()}

        repairs = self.repair_parents(parents)
        root_id = self.detect_root(objects, parents)
        repairs.extend(self._anchor_to_root(parents, root_id))

        objects = {
            object_id: obj if obj.parent_id == parents[object_id] else replace(obj, parent_id=parents[object_id])
            for object_id, obj in objects.items()
        }
        absolute = self._compute_absolute_positions(objects, root_id)

        system = StarSystem.from_objects(
            self.config.system_name, root_id, objects.values(), absolute, repairs
        )
        logger.info(
            f"Built {system.name}: {len(system)} objects, root={root_id}, "
            f"{len(system.inferred_ids)} inferred, {len(system.repairs)} repairs"
        )
        return system

    def _normalize(self, raw_records: Any) -> Dict[str, Dict[str, Any]]:
        """Shallow-copy the feed so the caller's data is never mutated."""
        if not isinstance(raw_records, Mapping):
            raise MalformedInputError(
                f"System data must be a mapping of id to record, got {type(raw_records).__name__}"
            )

        records: Dict[str, Dict[str, Any]] = {}
        for key, payload in raw_records.items():
            object_id = str(key)
            if not object_id:
                logger.warning("Skipping record with empty id")
                continue
            if not isinstance(payload, Mapping):
                logger.warning(f"Record {object_id} is not an object; using empty record")
                payload = {}
            records[object_id] = dict(payload)
        return records

    def infer_missing_objects(self, records: Mapping[str, Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """
        Synthesize lagrange points referenced as parents but never defined.

        Returns:
            Mapping of inferred id to placeholder record
        """
        referenced: Dict[str, None] = {}
        for payload in records.values():
            parent = parent_of(payload)
            if parent:
                referenced.setdefault(parent, None)

        inferred: Dict[str, Dict[str, Any]] = {}
        for parent_id in referenced:
            if parent_id in records:
                continue
            match = self.policy.match_lagrange(parent_id)
            if not match:
                continue

            inferred[parent_id] = {
                "arrivalRadius": self.config.inferred_lagrange_arrival_radius,
                "atmoHeight": 0.0,
                "display_name": f"L{match.group(2)}",
                "obstructionRadius": 0.0,
                "parent": self.policy.planet_for(match),
                "position": {"x": 0.0, "y": 0.0, "z": 0.0},
                "rotation": {"w": 1.0, "x": 0.0, "y": 0.0, "z": 0.0},
                "size": self.config.inferred_lagrange_size,
                "system_entity_name": f"Inferred_{parent_id}",
                "type": ObjectType.LAGRANGE_POINT.value,
            }
            logger.info(f"Created inferred Lagrange point: {parent_id}")

        return inferred

    def repair_parents(self, parents: Dict[str, str]) -> List[RepairDecision]:
        """
        Retarget parent references that do not resolve. Mutates *parents*.

        Returns:
            Audit trail, one decision per changed object
        """
        known_ids = set(parents)
        root_key = self.policy.find_root_key(parents)
        decisions: List[RepairDecision] = []

        if root_key is not None and parents[root_key] == ROOT_SENTINEL:
            decisions.append(RepairDecision(
                root_key, ROOT_SENTINEL, "", RepairRule.ROOT_SENTINEL_CLEARED,
                "star marked with the 'root' sentinel",
            ))
            parents[root_key] = ""

        for object_id, parent in parents.items():
            if not parent or parent in known_ids:
                continue
            decision = self.policy.decide(object_id, parent, known_ids, root_key)
            parents[object_id] = decision.new_parent
            decisions.append(decision)
            logger.info(
                f"Fixing parent for {object_id}: {parent} -> {decision.new_parent or '<none>'} "
                f"({decision.rule.value})"
            )

        return decisions

    def detect_root(self, objects: Mapping[str, CelestialObject], parents: Mapping[str, str]) -> str:
        """
        Pick the root: Star-typed, else id containing "star", else parentless.

        Raises:
            MissingRootError: If no candidate exists
        """
        for object_id, obj in objects.items():
            if obj.object_type is ObjectType.STAR:
                return object_id

        for object_id in objects:
            if "star" in object_id.lower():
                return object_id

        for object_id in objects:
            if not parents.get(object_id):
                return object_id

        raise MissingRootError("Star not found in the system data")

    def _anchor_to_root(self, parents: Dict[str, str], root_id: str) -> List[RepairDecision]:
        """Make every parent chain end at root_id. Mutates *parents*."""
        decisions: List[RepairDecision] = []

        if parents[root_id]:
            decisions.append(RepairDecision(
                root_id, parents[root_id], "", RepairRule.ROOT_DETACHED,
                "root cannot have a parent",
            ))
            parents[root_id] = ""

        for object_id in parents:
            trail = set()
            current = object_id
            while current != root_id:
                parent = parents[current]
                if not parent or parent not in parents:
                    decisions.append(RepairDecision(
                        current, parent, root_id, RepairRule.ORPHAN_ADOPTED,
                        "object has no parent and is not the root",
                    ))
                    parents[current] = root_id
                    break
                trail.add(current)
                if parent in trail:
                    decisions.append(RepairDecision(
                        current, parent, root_id, RepairRule.CYCLE_BROKEN,
                        f"parent chain loops back to {parent}",
                    ))
                    parents[current] = root_id
                    break
                current = parent

        for decision in decisions:
            logger.warning(
                f"Anchored {decision.object_id}: {decision.old_parent or '<none>'} -> "
                f"{decision.new_parent or '<none>'} ({decision.rule.value})"
            )
        return decisions

    def _compute_absolute_positions(
        self, objects: Mapping[str, CelestialObject], root_id: str
    ) -> Dict[str, Position]:
        """Depth-first accumulation of local offsets, starting at the root."""
        children: Dict[str, List[str]] = {}
        for object_id, obj in objects.items():
            if object_id != root_id:
                children.setdefault(obj.parent_id, []).append(object_id)

        absolute: Dict[str, Position] = {root_id: objects[root_id].position}
        stack = [root_id]
        while stack:
            parent_id = stack.pop()
            for child_id in children.get(parent_id, []):
                if child_id in absolute:
                    continue
                absolute[child_id] = compose_position(absolute[parent_id], objects[child_id].position)
                stack.append(child_id)
        return absolute


def build_star_system(raw_records: Mapping[str, Any], config: Optional[HierarchyConfig] = None) -> StarSystem:
    """Build a StarSystem with a default-configured HierarchyBuilder."""
    return HierarchyBuilder(config).build(raw_records)
