"""
Constellation aggregate: satellites, ground stations and the link mesh.

The constellation is the sole owner of every entity. Satellites and ground
stations never reference each other; all cross-entity work (distances,
visibility, neighbor links) is resolved here through NodeIds.

Lifecycle:
    1. Construction places S satellites on the Walker grid (ids 0..S-1) and
       builds the ISL mesh once.
    2. add_ground_station() hands out the next id (S, S+1, ...) and rebuilds
       the GSL mesh.
    3. step() propagates every satellite and ground-station clock in a
       thread pool, waits for all of them, then rebuilds ISL and GSL meshes.
"""

from __future__ import annotations

import itertools
import logging
import math
import operator
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional, Tuple, Union

import networkx as nx
import numpy as np

from cstlnet.errors import ConfigurationError, NodeLookupError, PropagationError
from cstlnet.network.graph_export import (
    GraphSnapshot,
    constellation_to_networkx,
    positions_ecef,
    positions_geodetic,
)
from cstlnet.network.groundstation import GroundStation
from cstlnet.network.links import LinkMesh, LinkType, UndirectedLink
from cstlnet.network.node import Geodetic, NodeId, NodePosition, NodeRef, NodeType
from cstlnet.network.satellite import Satellite
from cstlnet.network.walker import (
    ConstellationType,
    GridNeighbors,
    WalkerConfig,
    walker_slots,
)
from cstlnet.orbital.propagator import KeplerianPropagator, Propagator

logger = logging.getLogger(__name__)

# Fixed epoch for reproducibility (J2000.0 epoch: 2000-01-01T12:00:00Z)
DEFAULT_EPOCH_ISO = "2000-01-01T12:00:00+00:00"
DEFAULT_MIN_ELEVATION_DEG = 25.0

# Walker Star cross-plane links are only kept below this latitude
STAR_MAX_LINK_LATITUDE_DEG = 70.0

Node = Union[Satellite, GroundStation]


def default_epoch() -> datetime:
    return datetime.fromisoformat(DEFAULT_EPOCH_ISO)


def _as_utc(epoch: datetime) -> datetime:
    if epoch.tzinfo is None:
        return epoch.replace(tzinfo=timezone.utc)
    return epoch.astimezone(timezone.utc)


class Constellation:
    """
    Single-shell Walker constellation and its time-varying link mesh.

    Args:
        pattern: "star" / "delta" or a ConstellationType
        satellite_count: Total number of satellites (S)
        plane_count: Number of orbital planes (P), must divide S
        inter_plane_spacing: Walker phasing factor (F)
        altitude_km: Shell altitude above the equatorial radius
        inclination_deg: Orbital inclination
        epoch: Simulation start (default: J2000.0, naive datetimes are UTC)
        min_elevation_deg: Default ground-station visibility threshold
        propagator: Orbital collaborator (default: two-body Keplerian)
        max_workers: Thread-pool size for the propagate phase (None: executor default)

    Raises:
        ConfigurationError: on any invalid parameter
    """

    def __init__(
        self,
        pattern: Union[ConstellationType, str],
        satellite_count: int,
        plane_count: int,
        inter_plane_spacing: int = 0,
        altitude_km: float = 550.0,
        inclination_deg: float = 53.0,
        epoch: Optional[datetime] = None,
        min_elevation_deg: float = DEFAULT_MIN_ELEVATION_DEG,
        propagator: Optional[Propagator] = None,
        max_workers: Optional[int] = None,
    ):
        self.config = WalkerConfig(
            pattern=pattern,
            satellite_count=satellite_count,
            plane_count=plane_count,
            inter_plane_spacing=inter_plane_spacing,
            altitude_km=altitude_km,
            inclination_deg=inclination_deg,
        )
        slots = walker_slots(self.config)

        if not -90.0 <= min_elevation_deg <= 90.0:
            raise ConfigurationError(
                "min_elevation_deg", min_elevation_deg, "must be in [-90, 90] degrees"
            )
        if max_workers is not None and (not isinstance(max_workers, int) or max_workers <= 0):
            raise ConfigurationError("max_workers", max_workers, "must be a positive integer or None")

        self.min_elevation_deg = float(min_elevation_deg)
        self.max_workers = max_workers
        self._propagator = propagator if propagator is not None else KeplerianPropagator()
        self._epoch = _as_utc(epoch) if epoch is not None else default_epoch()

        self._satellites: List[Satellite] = [
            Satellite(
                id=slot.node_id,
                plane=slot.plane,
                number_in_plane=slot.number_in_plane,
                orbit=self._propagator.construct_orbit(
                    altitude_km=self.config.altitude_km,
                    eccentricity=0.0,
                    inclination_deg=self.config.inclination_deg,
                    raan_deg=math.degrees(slot.raan),
                    arg_of_perigee_deg=0.0,
                    aol_deg=math.degrees(slot.aol),
                    epoch=self._epoch,
                ),
            )
            for slot in slots
        ]
        self._ground_stations: List[GroundStation] = []
        self._links = LinkMesh()
        self._next_free_id = NodeId(self.config.satellite_count)

        self.recalculate_satellite_connections()

        logger.info(
            "Created Walker %s constellation: %d satellites in %d planes (F=%d), "
            "%.1f km, %.1f deg, %d ISLs, propagator=%s",
            self.pattern.value,
            self.config.satellite_count,
            self.config.plane_count,
            self.config.inter_plane_spacing,
            self.config.altitude_km,
            self.config.inclination_deg,
            self._links.count(LinkType.ISL),
            self._propagator.name,
        )

    @classmethod
    def from_config(cls, config: WalkerConfig, **kwargs) -> "Constellation":
        return cls(
            pattern=config.pattern,
            satellite_count=config.satellite_count,
            plane_count=config.plane_count,
            inter_plane_spacing=config.inter_plane_spacing,
            altitude_km=config.altitude_km,
            inclination_deg=config.inclination_deg,
            **kwargs,
        )

    def __repr__(self) -> str:
        return (
            f"Constellation(pattern={self.pattern.value!r}, satellites={self.satellite_count}, "
            f"planes={self.plane_count}, ground_stations={len(self._ground_stations)}, "
            f"links={len(self._links)}, epoch={self._epoch.isoformat()!r})"
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def pattern(self) -> ConstellationType:
        return self.config.pattern

    @property
    def satellite_count(self) -> int:
        return self.config.satellite_count

    @property
    def plane_count(self) -> int:
        return self.config.plane_count

    @property
    def sats_per_plane(self) -> int:
        return self.config.sats_per_plane

    @property
    def epoch(self) -> datetime:
        return self._epoch

    @property
    def propagator(self) -> Propagator:
        return self._propagator

    @property
    def satellites(self) -> Tuple[Satellite, ...]:
        return tuple(self._satellites)

    @property
    def ground_stations(self) -> Tuple[GroundStation, ...]:
        return tuple(self._ground_stations)

    @property
    def links(self) -> Tuple[UndirectedLink, ...]:
        return self._links.snapshot()

    def links_of_type(self, link_type: LinkType) -> List[UndirectedLink]:
        return self._links.of_type(link_type)

    def node_count(self) -> int:
        """Number of satellites plus ground stations."""
        return len(self._satellites) + len(self._ground_stations)

    def nodes(self) -> Iterator[Node]:
        """All nodes in id order."""
        return itertools.chain(self._satellites, self._ground_stations)

    def neighbor_grid(self) -> List[GridNeighbors]:
        """Top and right grid neighbors of every satellite, in id order."""
        return [
            sat.neighbors(self.sats_per_plane, self.plane_count)
            for sat in self._satellites
        ]

    # ------------------------------------------------------------------
    # Node id space
    # ------------------------------------------------------------------

    def _next_id(self) -> NodeId:
        """
        Return the next free id and advance the counter.

        The only caller is add_ground_station(), which uses the id at once.
        """
        node_id = self._next_free_id
        self._next_free_id = NodeId(node_id + 1)
        return node_id

    def resolve(self, node_id: int) -> NodeRef:
        """Map a NodeId onto the collection that owns it."""
        try:
            value = operator.index(node_id)
        except TypeError:
            raise NodeLookupError(node_id, self.node_count()) from None
        if value < 0 or value >= self._next_free_id:
            raise NodeLookupError(node_id, self.node_count())
        if value < self.satellite_count:
            return NodeRef(NodeType.SATELLITE, value)
        return NodeRef(NodeType.GROUNDSTATION, value - self.satellite_count)

    def get_node(self, node_id: int) -> Node:
        ref = self.resolve(node_id)
        if ref.kind is NodeType.SATELLITE:
            return self._satellites[ref.index]
        return self._ground_stations[ref.index]

    def get_satellite(self, node_id: int) -> Satellite:
        ref = self.resolve(node_id)
        if ref.kind is not NodeType.SATELLITE:
            raise NodeLookupError(node_id, self.satellite_count)
        return self._satellites[ref.index]

    def get_ground_station(self, node_id: int) -> GroundStation:
        ref = self.resolve(node_id)
        if ref.kind is not NodeType.GROUNDSTATION:
            raise NodeLookupError(node_id, self.node_count())
        return self._ground_stations[ref.index]

    def position_of(self, node_id: int) -> NodePosition:
        node = self.get_node(node_id)
        if isinstance(node, Satellite):
            return node.position_ecef(self._propagator)
        return node.position

    def geodetic_of(self, node_id: int) -> Geodetic:
        node = self.get_node(node_id)
        if isinstance(node, Satellite):
            return node.position_geodetic(self._propagator)
        return node.geodetic

    def distance(self, first: int, second: int) -> float:
        """Straight-line ECEF distance between two nodes, in km."""
        return self.position_of(first).distance_to(self.position_of(second))

    # ------------------------------------------------------------------
    # Ground stations
    # ------------------------------------------------------------------

    def add_ground_station(
        self,
        name: str,
        lat: float,
        lon: float,
        alt: float = 0.0,
        min_elevation_deg: Optional[float] = None,
    ) -> NodeId:
        """
        Add a ground station and recompute ground-station visibilities.

        Args:
            name: Station label
            lat: Geodetic latitude in degrees
            lon: Longitude in degrees
            alt: Height above the ellipsoid in km
            min_elevation_deg: Visibility threshold (default: constellation-wide value)

        Returns:
            The id assigned to the station (>= satellite_count)
        """
        if min_elevation_deg is None:
            min_elevation_deg = self.min_elevation_deg
        geodetic = Geodetic(float(lat), float(lon), float(alt))
        GroundStation.validate_site(geodetic, min_elevation_deg)

        station = GroundStation.create(
            node_id=self._next_id(),
            name=name,
            geodetic=geodetic,
            min_elevation_deg=float(min_elevation_deg),
            epoch=self._epoch,
            propagator=self._propagator,
        )
        self._ground_stations.append(station)
        self.recalculate_ground_visibilities()

        logger.info(
            "Added ground station %r as node %d at (%.4f, %.4f, %.3f km), %d satellites visible",
            name,
            station.id,
            geodetic.lat,
            geodetic.lon,
            geodetic.alt,
            sum(1 for link in self._links.of_type(LinkType.GSL) if link.first == station.id),
        )
        return station.id

    # ------------------------------------------------------------------
    # Simulation step
    # ------------------------------------------------------------------

    def step(self, duration_seconds: float) -> None:
        """
        Advance the simulation and bring the link mesh back into consistency.

        Propagation of all satellites runs in a thread pool; nothing is
        committed until every satellite has a new state. Mesh recomputation
        only starts after the pool has joined.

        Raises:
            ConfigurationError: if the duration is not a finite number
            PropagationError: if any satellite fails to propagate; the
                constellation is left at its previous epoch
        """
        try:
            duration = float(duration_seconds)
        except (TypeError, ValueError):
            raise ConfigurationError("duration_seconds", duration_seconds, "must be a number") from None
        if not math.isfinite(duration):
            raise ConfigurationError("duration_seconds", duration_seconds, "must be finite")

        previous_epoch = self._epoch
        new_epoch = previous_epoch + timedelta(seconds=duration)
        propagator = self._propagator

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            try:
                orbits = list(pool.map(
                    lambda sat: propagator.propagate(sat.orbit, duration),
                    self._satellites,
                ))
            except PropagationError as exc:
                raise PropagationError(
                    f"propagation step failed: {exc}", previous_epoch, duration
                ) from exc

            for sat, orbit in zip(self._satellites, orbits):
                sat.orbit = orbit
            list(pool.map(lambda gs: gs.update_epoch(new_epoch), self._ground_stations))

        self._epoch = new_epoch

        self.recalculate_satellite_connections()
        self.recalculate_ground_visibilities()

        logger.debug(
            "Stepped %.3fs to %s: %d ISLs, %d GSLs",
            duration,
            new_epoch.isoformat(),
            self._links.count(LinkType.ISL),
            self._links.count(LinkType.GSL),
        )

    def propagate(self, step_ms: int) -> None:
        """Advance by a step given in milliseconds."""
        self.step(step_ms / 1000.0)

    def advance(self, delta: timedelta) -> None:
        self.step(delta.total_seconds())

    # ------------------------------------------------------------------
    # Link mesh recomputation
    # ------------------------------------------------------------------

    def _satellite_positions(self) -> List[NodePosition]:
        return [sat.position_ecef(self._propagator) for sat in self._satellites]

    def recalculate_satellite_connections(self) -> None:
        """
        Rebuild every ISL from the neighbor grid and current positions.

        Every satellite links to its top neighbor. The right neighbor is
        always linked for Walker Delta; for Walker Star only when the
        satellite is not in the last plane, both satellites are below 70 deg
        latitude and both are flying in the same direction.
        """
        positions = self._satellite_positions()
        star = self.pattern is ConstellationType.STAR
        if star:
            latitudes = np.array([
                sat.position_geodetic(self._propagator).lat for sat in self._satellites
            ])
            ascending = [sat.is_ascending(self._propagator) for sat in self._satellites]

        links: List[UndirectedLink] = []
        linked = set()

        def connect(first: NodeId, second: NodeId) -> None:
            # Q == 1 / P == 1 grids point at themselves, Q == 2 / P == 2 grids
            # name each pair twice.
            key = (min(first, second), max(first, second))
            if first == second or key in linked:
                return
            linked.add(key)
            links.append(
                UndirectedLink.isl(first, second, positions[first].distance_to(positions[second]))
            )

        last_plane = self.plane_count - 1
        for sat in self._satellites:
            neighbors = sat.neighbors(self.sats_per_plane, self.plane_count)
            connect(neighbors.node_id, neighbors.top)

            right = neighbors.right
            if star:
                allowed = (
                    sat.plane != last_plane
                    and abs(latitudes[sat.id]) < STAR_MAX_LINK_LATITUDE_DEG
                    and abs(latitudes[right]) < STAR_MAX_LINK_LATITUDE_DEG
                    and ascending[sat.id] == ascending[right]
                )
            else:
                allowed = True
            if allowed:
                connect(neighbors.node_id, right)

        self._links.replace(LinkType.ISL, links)

    def recalculate_ground_visibilities(self) -> None:
        """Rebuild every GSL from a full ground-station x satellite visibility scan."""
        positions = self._satellite_positions()
        links = [
            UndirectedLink.gsl(gs.id, sat.id, gs.position.distance_to(positions[sat.id]))
            for gs, sat in itertools.product(self._ground_stations, self._satellites)
            if gs.is_visible(sat, self._propagator)
        ]
        self._links.replace(LinkType.GSL, links)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_graph(self) -> GraphSnapshot:
        """Snapshot of node ids and (source, target, weight_km) edges."""
        return GraphSnapshot(
            nodes=tuple(NodeId(i) for i in range(self.node_count())),
            edges=tuple((link.first, link.second, link.weight) for link in self._links),
        )

    def to_networkx(self) -> nx.Graph:
        """Annotated graph: node `type`, edge `link_type` and `distance_km`."""
        return constellation_to_networkx(self)

    def positions_ecef(self) -> Dict[int, Tuple[str, Tuple[float, float, float]]]:
        return positions_ecef(self)

    def positions_geodetic(self) -> Dict[int, Tuple[str, Tuple[float, float, float]]]:
        return positions_geodetic(self)

    def summary(self) -> str:
        """Return a summary of the constellation configuration and state."""
        a = self._propagator.frame.semi_major_axis_for_altitude(self.config.altitude_km)
        period = self._propagator.frame.orbital_period_seconds(a)
        return (
            f"Walker {self.pattern.value.capitalize()} Constellation:\n"
            f"  Planes: {self.plane_count}\n"
            f"  Sats/plane: {self.sats_per_plane}\n"
            f"  Phasing (F): {self.config.inter_plane_spacing}\n"
            f"  Total satellites: {self.satellite_count}\n"
            f"  Ground stations: {len(self._ground_stations)}\n"
            f"  Inclination: {self.config.inclination_deg}°\n"
            f"  Altitude: {self.config.altitude_km} km\n"
            f"  Orbital period: {period:.1f} s ({period / 60:.1f} min)\n"
            f"  Epoch: {self._epoch.isoformat()}\n"
            f"  ISLs: {self._links.count(LinkType.ISL)}\n"
            f"  GSLs: {self._links.count(LinkType.GSL)}\n"
            f"  Propagator: {self._propagator.name}"
        )


def create_constellation(
    satellites: int,
    planes: int,
    ipc: int,
    altitude: float,
    inclination: float,
    min_elevation: float,
    constellation_type: Union[ConstellationType, str] = ConstellationType.DELTA,
    epoch: Optional[datetime] = None,
    propagator: Optional[Propagator] = None,
) -> Constellation:
    """Positional-argument constructor (altitude in km, angles in degrees)."""
    return Constellation(
        pattern=constellation_type,
        satellite_count=satellites,
        plane_count=planes,
        inter_plane_spacing=ipc,
        altitude_km=altitude,
        inclination_deg=inclination,
        epoch=epoch,
        min_elevation_deg=min_elevation,
        propagator=propagator,
    )
