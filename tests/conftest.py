"""Shared fixtures.

StubPropagator places satellite i at longitude 10*i on the equator (550 km)
unless told otherwise, and reports latitude, direction and elevation from
plain dicts keyed by construction index. The constellation constructs orbits
in NodeId order, so the index equals the satellite's NodeId.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, List

import pytest

from cstlnet.errors import PropagationError
from cstlnet.network.node import Geodetic, NodePosition
from cstlnet.orbital.propagator import Propagator


@dataclass(frozen=True)
class StubOrbit:
    index: int
    epoch: datetime


class StubPropagator(Propagator):
    name = "stub"

    def __init__(self) -> None:
        super().__init__()
        self.latitudes: Dict[int, float] = {}
        self.ascending: Dict[int, bool] = {}
        self.elevations: Dict[int, float] = {}
        self.fail = False
        self.propagated: List[int] = []
        self._constructed = 0

    def construct_orbit(
        self,
        altitude_km,
        eccentricity,
        inclination_deg,
        raan_deg,
        arg_of_perigee_deg,
        aol_deg,
        epoch,
    ) -> StubOrbit:
        orbit = StubOrbit(index=self._constructed, epoch=epoch)
        self._constructed += 1
        return orbit

    def propagate(self, orbit: StubOrbit, duration_seconds: float) -> StubOrbit:
        self.propagated.append(orbit.index)
        if self.fail:
            raise PropagationError(f"stub failure on satellite {orbit.index}")
        return replace(orbit, epoch=orbit.epoch + timedelta(seconds=duration_seconds))

    def position_ecef(self, orbit: StubOrbit) -> NodePosition:
        lat = self.latitudes.get(orbit.index, 0.0)
        return Geodetic(lat, 10.0 * orbit.index, 550.0).to_ecef(self.frame)

    def velocity_z(self, orbit: StubOrbit) -> float:
        return 1.0 if self.ascending.get(orbit.index, True) else -1.0

    def elevation_angle(self, site: Geodetic, orbit: StubOrbit) -> float:
        return self.elevations.get(orbit.index, -90.0)


@pytest.fixture
def stub_propagator() -> StubPropagator:
    """Fresh deterministic propagator; mutate its dicts to shape the geometry."""
    return StubPropagator()
