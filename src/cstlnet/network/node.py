"""Node identifiers, node kinds and immutable coordinate value types."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, NewType, Tuple

import numpy as np

if TYPE_CHECKING:
    from cstlnet.orbital.frame import EarthFrame

NodeId = NewType("NodeId", int)


class NodeType(str, Enum):
    """Kind of node; the value is the one-letter tag used in projections."""

    SATELLITE = "S"
    GROUNDSTATION = "G"


class NodeRef(NamedTuple):
    """A NodeId resolved into an index of the collection that owns it."""

    kind: NodeType
    index: int


@dataclass(frozen=True)
class NodePosition:
    """Earth-centered, Earth-fixed position in km."""

    x: float
    y: float
    z: float

    @classmethod
    def from_vector(cls, vector_km: np.ndarray) -> "NodePosition":
        return cls(float(vector_km[0]), float(vector_km[1]), float(vector_km[2]))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def as_vector(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def distance_to(self, other: "NodePosition") -> float:
        """Straight-line distance in km (no Earth obscuration)."""
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def to_geodetic(self, frame: "EarthFrame") -> "Geodetic":
        lat, lon, alt = frame.ecef_to_geodetic(self.as_vector())
        return Geodetic(lat, lon, alt)


@dataclass(frozen=True)
class Geodetic:
    """Geodetic latitude/longitude in degrees and height in km."""

    lat: float
    lon: float
    alt: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.lat, self.lon, self.alt)

    def to_ecef(self, frame: "EarthFrame") -> NodePosition:
        return NodePosition.from_vector(
            frame.geodetic_to_ecef(self.lat, self.lon, self.alt)
        )
