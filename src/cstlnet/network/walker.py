"""
Walker constellation geometry.

Placement assigns every satellite slot (plane p, index k in plane) a right
ascension of the ascending node and an argument of latitude:

    Q          = S / P                       satellites per plane
    dRAAN      = pi / P  (Star), 2*pi / P (Delta)
    dPhi       = 2*pi / Q                    in-plane spacing
    df         = 2*pi*F / (P*Q)              inter-plane phase offset
    RAAN(p)    = dRAAN * p
    AOL(p, k)  = (df * p + dPhi * k) mod 2*pi
    NodeId     = k + p*Q

The same row-major flattening drives the neighbor grid: the top neighbor of
(p, k) is (p, k+1 mod Q) and the right neighbor is (p+1 mod P, k).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List

from cstlnet.errors import ConfigurationError
from cstlnet.network.node import NodeId

TWO_PI = 2 * math.pi


class ConstellationType(str, Enum):
    STAR = "star"
    DELTA = "delta"

    @classmethod
    def parse(cls, value: "ConstellationType | str") -> "ConstellationType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                "pattern", value, f"expected one of {[t.value for t in cls]}"
            ) from None

    def raan_delta(self, number_of_planes: int) -> float:
        """RAAN spacing between adjacent planes, in radians."""
        if self is ConstellationType.STAR:
            return math.pi / number_of_planes
        return TWO_PI / number_of_planes


@dataclass(frozen=True)
class WalkerConfig:
    """Parameters of a single-shell Walker constellation.

    Attributes:
        pattern: Walker Star or Walker Delta.
        satellite_count: Total satellites S.
        plane_count: Orbital planes P.
        inter_plane_spacing: Phasing factor F.
        altitude_km: Shell altitude above the equatorial radius.
        inclination_deg: Orbital inclination.
    """

    pattern: ConstellationType
    satellite_count: int
    plane_count: int
    inter_plane_spacing: int = 0
    altitude_km: float = 550.0
    inclination_deg: float = 53.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", ConstellationType.parse(self.pattern))

    @property
    def sats_per_plane(self) -> int:
        return self.satellite_count // self.plane_count

    def validate(self) -> None:
        """Raise ConfigurationError on the first parameter that is out of range."""
        if not isinstance(self.satellite_count, int) or self.satellite_count <= 0:
            raise ConfigurationError("satellite_count", self.satellite_count, "must be a positive integer")
        if not isinstance(self.plane_count, int) or self.plane_count <= 0:
            raise ConfigurationError("plane_count", self.plane_count, "must be a positive integer")
        if self.satellite_count % self.plane_count != 0:
            raise ConfigurationError(
                "satellite_count",
                self.satellite_count,
                f"must be divisible by plane_count={self.plane_count}",
            )
        if not isinstance(self.inter_plane_spacing, int) or self.inter_plane_spacing < 0:
            raise ConfigurationError(
                "inter_plane_spacing", self.inter_plane_spacing, "must be a non-negative integer"
            )
        if self.inter_plane_spacing >= self.satellite_count:
            raise ConfigurationError(
                "inter_plane_spacing",
                self.inter_plane_spacing,
                f"must be less than satellite_count={self.satellite_count}",
            )
        if not self.altitude_km > 0:
            raise ConfigurationError("altitude_km", self.altitude_km, "must be > 0")
        if not 0.0 <= self.inclination_deg <= 180.0:
            raise ConfigurationError("inclination_deg", self.inclination_deg, "must be in [0, 180]")


@dataclass(frozen=True)
class WalkerSlot:
    """Placement of one satellite; angles in radians."""

    node_id: NodeId
    plane: int
    number_in_plane: int
    raan: float
    aol: float


@dataclass(frozen=True)
class GridNeighbors:
    node_id: NodeId
    top: NodeId
    right: NodeId


def _check_angle(name: str, value: float, upper_inclusive: bool) -> None:
    in_range = 0.0 <= value <= TWO_PI if upper_inclusive else 0.0 <= value < TWO_PI
    if not in_range:
        bound = "]" if upper_inclusive else ")"
        raise ConfigurationError(name, value, f"must lie in [0, 2*pi{bound}")


def walker_slots(config: WalkerConfig) -> List[WalkerSlot]:
    """
    Compute the placement of every satellite, in NodeId order.

    Raises:
        ConfigurationError: if the configuration or a derived angle is invalid
    """
    config.validate()

    planes = config.plane_count
    per_plane = config.sats_per_plane

    raan_delta = config.pattern.raan_delta(planes)
    phase_difference = TWO_PI / per_plane
    phase_offset = TWO_PI * config.inter_plane_spacing / config.satellite_count
    _check_angle("raan_delta", raan_delta, upper_inclusive=True)
    _check_angle("phase_difference", phase_difference, upper_inclusive=True)
    _check_angle("phase_offset", phase_offset, upper_inclusive=False)

    slots = []
    for plane in range(planes):
        raan = (raan_delta * plane) % TWO_PI
        _check_angle("raan", raan, upper_inclusive=True)
        plane_phase_offset = phase_offset * plane
        for number_in_plane in range(per_plane):
            aol = (plane_phase_offset + phase_difference * number_in_plane) % TWO_PI
            _check_angle("aol", aol, upper_inclusive=False)
            slots.append(WalkerSlot(
                node_id=NodeId(number_in_plane + plane * per_plane),
                plane=plane,
                number_in_plane=number_in_plane,
                raan=raan,
                aol=aol,
            ))
    return slots


def grid_neighbors(
    plane: int, number_in_plane: int, sats_per_plane: int, number_of_planes: int
) -> GridNeighbors:
    """Top (same plane, next index) and right (next plane, same index) neighbors."""
    top = ((number_in_plane + 1) % sats_per_plane) + plane * sats_per_plane
    right = ((plane + 1) % number_of_planes) * sats_per_plane + number_in_plane
    return GridNeighbors(
        node_id=NodeId(number_in_plane + plane * sats_per_plane),
        top=NodeId(top),
        right=NodeId(right),
    )


def iter_grid(sats_per_plane: int, number_of_planes: int) -> Iterator[GridNeighbors]:
    for plane in range(number_of_planes):
        for number_in_plane in range(sats_per_plane):
            yield grid_neighbors(plane, number_in_plane, sats_per_plane, number_of_planes)
