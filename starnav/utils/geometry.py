"""
Geometry utilities for star system navigation.
Vector composition, distances, orbit sampling and rotation conversion.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Tuple

import numpy as np


@dataclass(frozen=True)
class Position:
    """A 3D point or offset. Parent-relative unless stated otherwise."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y, self.z + other.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, values: Iterable[float]) -> "Position":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self)


ORIGIN = Position()


@dataclass(frozen=True)
class Rotation:
    """Orientation quaternion (w, x, y, z)."""
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self) -> dict:
        return {"w": self.w, "x": self.x, "y": self.y, "z": self.z}


IDENTITY_ROTATION = Rotation()


class DistanceUnit(Enum):
    """Distance units. 1 scene unit = 1 Gm."""
    KILOMETER = "km"
    GIGAMETER = "Gm"
    ASTRONOMICAL_UNIT = "AU"


_KM_PER_GM = 1_000_000.0
_GM_PER_AU = 149.6


def convert_distance(value: float, from_unit: DistanceUnit, to_unit: DistanceUnit) -> float:
    """
    Convert a distance between km, Gm and AU.

    Example:
        >>> convert_distance(1.0, DistanceUnit.ASTRONOMICAL_UNIT, DistanceUnit.GIGAMETER)
        149.6
    """
    if from_unit is DistanceUnit.KILOMETER:
        in_gm = value / _KM_PER_GM
    elif from_unit is DistanceUnit.ASTRONOMICAL_UNIT:
        in_gm = value * _GM_PER_AU
    else:
        in_gm = value

    if to_unit is DistanceUnit.KILOMETER:
        return in_gm * _KM_PER_GM
    if to_unit is DistanceUnit.ASTRONOMICAL_UNIT:
        return in_gm / _GM_PER_AU
    return in_gm


def distance(a: Position, b: Position) -> float:
    """Euclidean distance between two positions."""
    return float(np.linalg.norm(b.as_array() - a.as_array()))


def midpoint(a: Position, b: Position) -> Position:
    """Point halfway between *a* and *b*."""
    return Position((a.x + b.x) / 2, (a.y + b.y) / 2, (a.z + b.z) / 2)


def compose_position(parent_absolute: Position, local: Position) -> Position:
    """Absolute position of a child given its parent's absolute position."""
    return parent_absolute + local


def _orbit_basis(unit: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Two orthonormal vectors spanning the plane perpendicular to *unit*."""
    reference = np.array([0.0, 1.0, 0.0])
    # Near-parallel to up gives a degenerate cross product
    if abs(unit[1]) > 0.9:
        reference = np.array([1.0, 0.0, 0.0])

    v1 = np.cross(unit, reference)
    v1 /= np.linalg.norm(v1)
    v2 = np.cross(unit, v1)
    v2 /= np.linalg.norm(v2)
    return v1, v2


def orbit_path(local_position: Position, steps: int = 100) -> List[Position]:
    """
    Sample a circular orbit for an object around its parent.

    The radius is the magnitude of the parent-relative position and the
    circle lies in the plane perpendicular to that position vector.

    Args:
        local_position: Object position relative to its parent
        steps: Number of evenly spaced samples

    Returns:
        List of ``steps`` positions relative to the parent
    """
    if steps < 0:
        raise ValueError("steps must be non-negative")

    radius = local_position.magnitude
    if radius == 0.0 or not math.isfinite(radius):
        return [ORIGIN] * steps

    unit = local_position.as_array() / radius
    v1, v2 = _orbit_basis(unit)

    angles = np.arange(steps) / steps * 2.0 * np.pi if steps else np.array([])
    points = (
        radius * np.cos(angles)[:, np.newaxis] * v1
        + radius * np.sin(angles)[:, np.newaxis] * v2
    )
    return [Position.from_array(p) for p in points]


def quaternion_to_euler(rotation: Rotation) -> Tuple[float, float, float]:
    """
    Convert a quaternion to (roll, pitch, yaw) in radians.

    Pitch saturates at +/- pi/2 when the input is at gimbal lock.
    """
    w, x, y, z = rotation.w, rotation.x, rotation.y, rotation.z

    sinr_cosp = 2 * (w * x + y * z)
    cosr_cosp = 1 - 2 * (x * x + y * y)
    roll = math.atan2(sinr_cosp, cosr_cosp)

    sinp = 2 * (w * y - z * x)
    if abs(sinp) >= 1:
        pitch = math.copysign(math.pi / 2, sinp)
    else:
        pitch = math.asin(sinp)

    siny_cosp = 2 * (w * z + x * y)
    cosy_cosp = 1 - 2 * (y * y + z * z)
    yaw = math.atan2(siny_cosp, cosy_cosp)

    return roll, pitch, yaw
