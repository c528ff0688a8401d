from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime

from cstlnet.errors import ConfigurationError
from cstlnet.network.node import Geodetic, NodeId, NodePosition, NodeType
from cstlnet.network.satellite import Satellite
from cstlnet.orbital.propagator import Propagator


@dataclass
class GroundStation:
    """
    A fixed ground terminal.

    The geodetic position never changes; the epoch is kept in step with the
    constellation clock by the simulation loop.
    """

    id: NodeId
    name: str
    geodetic: Geodetic
    min_elevation_deg: float
    epoch: datetime
    position: NodePosition = field(repr=False)

    node_type = NodeType.GROUNDSTATION

    @classmethod
    def create(
        cls,
        node_id: NodeId,
        name: str,
        geodetic: Geodetic,
        min_elevation_deg: float,
        epoch: datetime,
        propagator: Propagator,
    ) -> "GroundStation":
        cls.validate_site(geodetic, min_elevation_deg)
        return cls(
            id=node_id,
            name=name,
            geodetic=geodetic,
            min_elevation_deg=min_elevation_deg,
            epoch=epoch,
            position=geodetic.to_ecef(propagator.frame),
        )

    @staticmethod
    def validate_site(geodetic: Geodetic, min_elevation_deg: float) -> None:
        if not -90.0 <= geodetic.lat <= 90.0:
            raise ConfigurationError("lat", geodetic.lat, "must be in [-90, 90] degrees")
        if not -180.0 <= geodetic.lon <= 360.0:
            raise ConfigurationError("lon", geodetic.lon, "must be in [-180, 360] degrees")
        if not math.isfinite(geodetic.alt):
            raise ConfigurationError("alt", geodetic.alt, "must be finite")
        if not -90.0 <= min_elevation_deg <= 90.0:
            raise ConfigurationError(
                "min_elevation_deg", min_elevation_deg, "must be in [-90, 90] degrees"
            )

    def elevation_of(self, satellite: Satellite, propagator: Propagator) -> float:
        return propagator.elevation_angle(self.geodetic, satellite.orbit)

    def is_visible(self, satellite: Satellite, propagator: Propagator) -> bool:
        return self.elevation_of(satellite, propagator) >= self.min_elevation_deg

    def update_epoch(self, epoch: datetime) -> None:
        self.epoch = epoch
