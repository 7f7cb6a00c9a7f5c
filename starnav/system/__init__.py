"""
Star System Hierarchy - reconstruction, queries and validation.

Components:
- classifier: naming-convention object typing
- builder: inference, parent repair, root detection
- query: lookups, absolute positions, orbit paths, statistics
- validator: invariant checks, hierarchy dump, disconnected objects
- loader: JSON feed loading with fallback paths

Example:
    >>> from starnav.system import HierarchyBuilder, SystemQueryService
    >>> system = HierarchyBuilder().build(records)
    >>> SystemQueryService(system).get_absolute_position("stanton1")
"""

from .errors import MalformedInputError, MissingRootError, ObjectNotFoundError, StarSystemError
from .types import CelestialObject, ObjectType, RepairDecision, RepairRule, StarSystem
from .classifier import classify
from .builder import HierarchyBuilder, RepairPolicy, build_star_system
from .query import SystemQueryService
from .validator import SystemValidator, ValidationReport
from .loader import load_first_available, load_records, load_system, parse_records

__all__ = [
    "StarSystemError",
    "MissingRootError",
    "ObjectNotFoundError",
    "MalformedInputError",
    "CelestialObject",
    "ObjectType",
    "RepairDecision",
    "RepairRule",
    "StarSystem",
    "classify",
    "HierarchyBuilder",
    "RepairPolicy",
    "build_star_system",
    "SystemQueryService",
    "SystemValidator",
    "ValidationReport",
    "load_first_available",
    "load_records",
    "load_system",
    "parse_records",
]
