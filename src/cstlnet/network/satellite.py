from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cstlnet.network.node import Geodetic, NodeId, NodePosition, NodeType
from cstlnet.network.walker import GridNeighbors, grid_neighbors
from cstlnet.orbital.propagator import Propagator


@dataclass
class Satellite:
    """
    A satellite of the Walker shell.

    The orbit attribute is an opaque handle owned by the propagator; it is
    replaced (never mutated) by each simulation step.
    """

    id: NodeId
    plane: int
    number_in_plane: int
    orbit: Any

    node_type = NodeType.SATELLITE

    def neighbors(self, sats_per_plane: int, number_of_planes: int) -> GridNeighbors:
        return grid_neighbors(self.plane, self.number_in_plane, sats_per_plane, number_of_planes)

    def position_ecef(self, propagator: Propagator) -> NodePosition:
        return propagator.position_ecef(self.orbit)

    def position_geodetic(self, propagator: Propagator) -> Geodetic:
        return propagator.position_geodetic(self.orbit)

    def is_ascending(self, propagator: Propagator) -> bool:
        """Moving northwards (non-negative Z velocity)."""
        return propagator.velocity_z(self.orbit) >= 0.0
