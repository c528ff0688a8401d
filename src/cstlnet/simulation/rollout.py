"""Time-stepped rollout of a constellation with per-step connectivity records.

Dataclasses defined here establish the contract between:
- Configuration inputs (Walker shell, ground stations, time, propagator)
- Per-step outputs (link counts and connectivity at each time step)
- Run summary outputs (aggregated connectivity)

The constellation itself keeps only its current state; the rollout records
what the caller asks for, one row per step.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from cstlnet.errors import ConfigurationError
from cstlnet.metrics.connectivity import (
    connected_ground_stations,
    count_components,
    giant_component_fraction,
    mean_edge_weight,
)
from cstlnet.network.constellation import (
    DEFAULT_EPOCH_ISO,
    DEFAULT_MIN_ELEVATION_DEG,
    Constellation,
)
from cstlnet.network.graph_export import GraphSnapshot, constellation_to_networkx
from cstlnet.network.links import LinkType
from cstlnet.network.walker import WalkerConfig
from cstlnet.orbital.propagator import make_propagator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroundStationSpec:
    """A ground station to add before the rollout starts.

    Attributes:
        name: Station label.
        lat_deg: Geodetic latitude in degrees.
        lon_deg: Longitude in degrees.
        alt_km: Height above the ellipsoid in km.
        min_elevation_deg: Station threshold (None: constellation default).
    """

    name: str
    lat_deg: float
    lon_deg: float
    alt_km: float = 0.0
    min_elevation_deg: Optional[float] = None

    @classmethod
    def parse(cls, text: str) -> "GroundStationSpec":
        """Parse NAME:LAT:LON[:ALT[:MIN_ELEVATION]]."""
        parts = text.split(":")
        if not 3 <= len(parts) <= 5 or not parts[0]:
            raise ConfigurationError(
                "ground_station", text, "expected NAME:LAT:LON[:ALT[:MIN_ELEVATION]]"
            )
        try:
            numbers = [float(p) for p in parts[1:]]
        except ValueError:
            raise ConfigurationError("ground_station", text, "coordinates must be numbers") from None
        lat, lon = numbers[0], numbers[1]
        alt = numbers[2] if len(numbers) > 2 else 0.0
        min_elevation = numbers[3] if len(numbers) > 3 else None
        return cls(parts[0], lat, lon, alt, min_elevation)


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for a single rollout.

    Attributes:
        walker: Walker shell parameters.
        ground_stations: Stations added (in order) before t=0.
        duration_seconds: Total simulated time.
        step_seconds: Time step interval.
        min_elevation_deg: Default ground-station visibility threshold.
        epoch_iso: Start epoch as ISO 8601 string (default: J2000.0).
        propagator: "keplerian" or "sgp4".
        max_workers: Thread-pool size for propagation (None: executor default).
    """

    walker: WalkerConfig
    ground_stations: Tuple[GroundStationSpec, ...] = ()
    duration_seconds: float = 600.0
    step_seconds: float = 60.0
    min_elevation_deg: float = DEFAULT_MIN_ELEVATION_DEG
    epoch_iso: str = DEFAULT_EPOCH_ISO
    propagator: str = "keplerian"
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "ground_stations", tuple(self.ground_stations))
        if not (math.isfinite(self.step_seconds) and self.step_seconds > 0):
            raise ConfigurationError("step_seconds", self.step_seconds, "must be finite and > 0")
        if not (math.isfinite(self.duration_seconds) and self.duration_seconds >= 0):
            raise ConfigurationError(
                "duration_seconds", self.duration_seconds, "must be finite and >= 0"
            )
        try:
            datetime.fromisoformat(self.epoch_iso)
        except (TypeError, ValueError):
            raise ConfigurationError("epoch_iso", self.epoch_iso, "must be an ISO 8601 timestamp") from None

    @property
    def epoch(self) -> datetime:
        """Parse epoch_iso string to datetime object."""
        return datetime.fromisoformat(self.epoch_iso)

    @property
    def num_steps(self) -> int:
        """Number of recorded steps, inclusive of t=0.

        Example: 180 s @ 60 s = steps 0,1,2,3 = 4 steps.
        """
        return int(self.duration_seconds // self.step_seconds) + 1

    def config_hash(self) -> str:
        """Deterministic short hash of this configuration."""
        config_json = json.dumps(asdict(self), sort_keys=True, default=str)
        return hashlib.sha256(config_json.encode()).hexdigest()[:16]


@dataclass
class SimulationStep:
    """Connectivity of the constellation at one time step."""

    t: int
    epoch_iso: str
    num_nodes: int
    num_isl: int
    num_gsl: int
    num_components: int
    gcc_frac: float
    connected_ground_stations: int
    mean_isl_km: float


@dataclass
class SimulationSummary:
    """Aggregate over all steps of a rollout."""

    num_steps: int
    gcc_frac_min: float
    gcc_frac_mean: float
    disconnected_steps: int
    mean_gsl_per_step: float
    config_hash: str = ""
    propagator: str = "keplerian"

    def to_dict(self) -> dict:
        return asdict(self)


def build_constellation(cfg: SimulationConfig) -> Constellation:
    """Construct the constellation and add the configured ground stations."""
    constellation = Constellation.from_config(
        cfg.walker,
        epoch=cfg.epoch,
        min_elevation_deg=cfg.min_elevation_deg,
        propagator=make_propagator(cfg.propagator),
        max_workers=cfg.max_workers,
    )
    for spec in cfg.ground_stations:
        constellation.add_ground_station(
            spec.name,
            spec.lat_deg,
            spec.lon_deg,
            spec.alt_km,
            min_elevation_deg=spec.min_elevation_deg,
        )
    return constellation


def iter_snapshots(
    constellation: Constellation,
    num_steps: int,
    step_seconds: float,
) -> Iterator[Tuple[int, GraphSnapshot]]:
    """
    Yield (t, snapshot) for t = 0..num_steps-1.

    The t=0 snapshot is the current state; each later one is taken after
    stepping the constellation by step_seconds.
    """
    for t in range(num_steps):
        if t > 0:
            constellation.step(step_seconds)
        yield t, constellation.export_graph()


def record_step(t: int, constellation: Constellation) -> SimulationStep:
    G = constellation_to_networkx(constellation)
    return SimulationStep(
        t=t,
        epoch_iso=constellation.epoch.isoformat(),
        num_nodes=constellation.node_count(),
        num_isl=len(constellation.links_of_type(LinkType.ISL)),
        num_gsl=len(constellation.links_of_type(LinkType.GSL)),
        num_components=count_components(G),
        gcc_frac=giant_component_fraction(G),
        connected_ground_stations=connected_ground_stations(
            G, (gs.id for gs in constellation.ground_stations)
        ),
        mean_isl_km=mean_edge_weight(G, link_type=LinkType.ISL.value),
    )


def run_simulation(
    cfg: SimulationConfig,
    on_step: Optional[Callable[[int, Constellation], None]] = None,
    constellation: Optional[Constellation] = None,
) -> Tuple[List[SimulationStep], SimulationSummary]:
    """
    Execute a rollout.

    This function:
    1. Builds the constellation and adds ground stations
    2. Records connectivity at t=0
    3. Steps the constellation num_steps-1 times, recording after each step
    4. Aggregates results into a summary

    Args:
        cfg: SimulationConfig with constellation, time and propagator settings.
        on_step: Optional callback invoked with (t, constellation) after each record.
        constellation: Already built constellation to roll out (default: built from cfg).

    Returns:
        Tuple of (steps, summary)
    """
    if constellation is None:
        constellation = build_constellation(cfg)
    logger.info(
        "Running %d steps of %.1fs (config %s)",
        cfg.num_steps,
        cfg.step_seconds,
        cfg.config_hash(),
    )

    steps: List[SimulationStep] = []
    for t in range(cfg.num_steps):
        if t > 0:
            constellation.step(cfg.step_seconds)
        step = record_step(t, constellation)
        if step.num_components > 1:
            logger.warning(
                "Step %d (%s): graph split into %d components (gcc_frac=%.3f)",
                t,
                step.epoch_iso,
                step.num_components,
                step.gcc_frac,
            )
        steps.append(step)
        if on_step is not None:
            on_step(t, constellation)

    return steps, summarize(steps, cfg)


def summarize(steps: Sequence[SimulationStep], cfg: SimulationConfig) -> SimulationSummary:
    num_steps = len(steps)
    if num_steps > 0:
        gcc_fracs = [s.gcc_frac for s in steps]
        gcc_frac_min = min(gcc_fracs)
        gcc_frac_mean = sum(gcc_fracs) / num_steps
        disconnected = sum(1 for s in steps if s.num_components > 1)
        mean_gsl = sum(s.num_gsl for s in steps) / num_steps
    else:
        gcc_frac_min = 0.0
        gcc_frac_mean = 0.0
        disconnected = 0
        mean_gsl = 0.0

    return SimulationSummary(
        num_steps=num_steps,
        gcc_frac_min=gcc_frac_min,
        gcc_frac_mean=gcc_frac_mean,
        disconnected_steps=disconnected,
        mean_gsl_per_step=mean_gsl,
        config_hash=cfg.config_hash(),
        propagator=cfg.propagator,
    )


def steps_to_frame(steps: Sequence[SimulationStep]) -> pd.DataFrame:
    """One row per step, columns in SimulationStep field order."""
    columns = list(SimulationStep.__dataclass_fields__)
    return pd.DataFrame([asdict(s) for s in steps], columns=columns)
