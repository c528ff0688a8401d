"""Command-line entry point: run a rollout and write the graph and step tables.

Usage:
    cstlnet-simulate --pattern delta --satellites 66 --planes 6 --spacing 1
    cstlnet-simulate --ground-station ZRH:47.37:8.54 --graph-out out/graph.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cstlnet.errors import CstlnetError
from cstlnet.network.constellation import DEFAULT_EPOCH_ISO, DEFAULT_MIN_ELEVATION_DEG
from cstlnet.network.graph_export import write_node_link
from cstlnet.network.walker import ConstellationType, WalkerConfig
from cstlnet.orbital.propagator import PROPAGATORS
from cstlnet.simulation.rollout import (
    GroundStationSpec,
    SimulationConfig,
    build_constellation,
    run_simulation,
    steps_to_frame,
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Simulate the link graph of a Walker satellite constellation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--pattern",
        choices=[t.value for t in ConstellationType],
        default=ConstellationType.DELTA.value,
        help="Walker pattern",
    )
    parser.add_argument("--satellites", type=int, default=24, help="Total number of satellites")
    parser.add_argument("--planes", type=int, default=4, help="Number of orbital planes")
    parser.add_argument("--spacing", type=int, default=1, help="Walker phasing factor F")
    parser.add_argument("--altitude", type=float, default=550.0, help="Shell altitude in km")
    parser.add_argument("--inclination", type=float, default=53.0, help="Inclination in degrees")
    parser.add_argument(
        "--min-elevation",
        type=float,
        default=DEFAULT_MIN_ELEVATION_DEG,
        help="Default ground-station minimum elevation in degrees",
    )
    parser.add_argument(
        "--ground-station",
        action="append",
        default=[],
        metavar="NAME:LAT:LON[:ALT]",
        help="Ground station to add (repeatable)",
    )
    parser.add_argument("--epoch", default=DEFAULT_EPOCH_ISO, help="Start epoch (ISO 8601)")
    parser.add_argument("--duration", type=float, default=600.0, help="Simulated time in seconds")
    parser.add_argument("--step", type=float, default=60.0, help="Time step in seconds")
    parser.add_argument(
        "--propagator",
        choices=sorted(PROPAGATORS),
        default="keplerian",
        help="Orbital propagator",
    )
    parser.add_argument("--workers", type=int, default=None, help="Propagation thread-pool size")
    parser.add_argument(
        "--graph-out",
        type=str,
        default=None,
        help="Write the final node-link graph as JSON",
    )
    parser.add_argument(
        "--steps-out",
        type=str,
        default=None,
        help="Write the per-step table as CSV",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )

    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        walker=WalkerConfig(
            pattern=args.pattern,
            satellite_count=args.satellites,
            plane_count=args.planes,
            inter_plane_spacing=args.spacing,
            altitude_km=args.altitude,
            inclination_deg=args.inclination,
        ),
        ground_stations=tuple(GroundStationSpec.parse(s) for s in args.ground_station),
        duration_seconds=args.duration,
        step_seconds=args.step,
        min_elevation_deg=args.min_elevation,
        epoch_iso=args.epoch,
        propagator=args.propagator,
        max_workers=args.workers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run one rollout from the command line; returns the exit status."""
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        cfg = config_from_args(args)
        constellation = build_constellation(cfg)
        print(constellation.summary())
        print("=" * 60)
        steps, summary = run_simulation(cfg, constellation=constellation)
    except CstlnetError as exc:
        logger.error("%s", exc)
        return 1

    print(json.dumps(summary.to_dict(), indent=2))

    if args.graph_out:
        path = write_node_link(constellation.export_graph(), args.graph_out)
        logger.info("Wrote node-link graph to %s", path)

    if args.steps_out:
        path = Path(args.steps_out)
        path.parent.mkdir(parents=True, exist_ok=True)
        steps_to_frame(steps).to_csv(path, index=False)
        logger.info("Wrote %d step rows to %s", len(steps), path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
