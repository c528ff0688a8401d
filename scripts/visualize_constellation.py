#!/usr/bin/env python3
"""
Visualize a Walker constellation on a latitude/longitude map.

Draws:
- Satellites as blue dots, ground stations as green triangles
- ISLs as gray lines, GSLs as green lines
- Links crossing the dateline are skipped

Usage:
    python scripts/visualize_constellation.py --pattern star --satellites 66 --planes 6
    python scripts/visualize_constellation.py --ground-station ZRH:47.37:8.54 --output map.png
"""

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.lines import Line2D  # noqa: E402

from cstlnet.network.constellation import Constellation  # noqa: E402
from cstlnet.network.links import LinkType  # noqa: E402
from cstlnet.simulation.rollout import GroundStationSpec  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Plot satellites, ground stations and links on a map",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--pattern", choices=["star", "delta"], default="delta")
    parser.add_argument("--satellites", type=int, default=576)
    parser.add_argument("--planes", type=int, default=24)
    parser.add_argument("--spacing", type=int, default=1)
    parser.add_argument("--altitude", type=float, default=550.0)
    parser.add_argument("--inclination", type=float, default=53.0)
    parser.add_argument("--min-elevation", type=float, default=25.0)
    parser.add_argument(
        "--ground-station",
        action="append",
        default=[],
        metavar="NAME:LAT:LON[:ALT]",
        help="Ground station to add (repeatable)",
    )
    parser.add_argument("--time", type=float, default=0.0, help="Seconds after epoch to draw")
    parser.add_argument(
        "--output",
        type=str,
        default=str(PROJECT_ROOT / "constellation_map.png"),
        help="Output image path",
    )
    return parser.parse_args()


def main() -> None:
    """Generate constellation visualization."""
    args = parse_args()

    print("=" * 60)
    print("Constellation Visualization")
    print("=" * 60)

    constellation = Constellation(
        pattern=args.pattern,
        satellite_count=args.satellites,
        plane_count=args.planes,
        inter_plane_spacing=args.spacing,
        altitude_km=args.altitude,
        inclination_deg=args.inclination,
        min_elevation_deg=args.min_elevation,
    )
    for text in args.ground_station:
        spec = GroundStationSpec.parse(text)
        constellation.add_ground_station(
            spec.name, spec.lat_deg, spec.lon_deg, spec.alt_km, spec.min_elevation_deg
        )
    if args.time:
        constellation.step(args.time)
    print(constellation.summary())

    positions = constellation.positions_geodetic()
    node_ids = sorted(positions)
    lats = np.array([positions[i][1][0] for i in node_ids])
    lons = np.array([((positions[i][1][1] + 180.0) % 360.0) - 180.0 for i in node_ids])
    is_satellite = np.array([positions[i][0] == "S" for i in node_ids])

    fig, ax = plt.subplots(figsize=(16, 8), dpi=150)

    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_xlabel("Longitude (°)", fontsize=12)
    ax.set_ylabel("Latitude (°)", fontsize=12)
    ax.set_title(
        f"Walker {constellation.pattern.value.capitalize()} "
        f"{constellation.satellite_count}/{constellation.plane_count}/"
        f"{constellation.config.inter_plane_spacing} at {constellation.epoch.isoformat()}",
        fontsize=14,
        fontweight="bold",
    )

    ax.set_facecolor("#e6f2ff")
    ax.grid(True, linestyle="--", alpha=0.5, color="gray")
    ax.set_xticks(np.arange(-180, 181, 30))
    ax.set_yticks(np.arange(-90, 91, 30))
    ax.axhline(y=0, color="darkgray", linewidth=1.0, linestyle="-")
    ax.axvline(x=0, color="darkgray", linewidth=1.0, linestyle="-")

    drawn = {LinkType.ISL: 0, LinkType.GSL: 0}
    skipped_dateline = 0
    for link in constellation.links:
        lon1, lat1 = lons[link.first], lats[link.first]
        lon2, lat2 = lons[link.second], lats[link.second]

        if abs(lon1 - lon2) > 180:
            skipped_dateline += 1
            continue

        if link.link_type is LinkType.GSL:
            ax.plot([lon1, lon2], [lat1, lat2], color="green", linewidth=0.8, alpha=0.7, zorder=2)
        else:
            ax.plot([lon1, lon2], [lat1, lat2], color="gray", linewidth=0.3, alpha=0.5, zorder=1)
        drawn[link.link_type] += 1

    ax.scatter(lons[is_satellite], lats[is_satellite], c="blue", s=2, zorder=3)
    ax.scatter(lons[~is_satellite], lats[~is_satellite], c="green", marker="^", s=40, zorder=4)

    legend_elements = [
        Line2D([0], [0], marker="o", color="w", markerfacecolor="blue", markersize=6, label="Satellite"),
        Line2D([0], [0], marker="^", color="w", markerfacecolor="green", markersize=8, label="Ground station"),
        Line2D([0], [0], color="gray", linewidth=1, label="ISL"),
        Line2D([0], [0], color="green", linewidth=1.5, label="GSL"),
    ]
    ax.legend(handles=legend_elements, loc="lower left", fontsize=10)

    stats_text = (
        f"ISLs drawn: {drawn[LinkType.ISL]}\n"
        f"GSLs drawn: {drawn[LinkType.GSL]}\n"
        f"Skipped (dateline): {skipped_dateline}"
    )
    ax.annotate(
        stats_text,
        xy=(0.99, 0.02),
        xycoords="axes fraction",
        fontsize=9,
        ha="right",
        va="bottom",
        bbox=dict(boxstyle="round,pad=0.3", facecolor="white", alpha=0.8),
    )

    plt.tight_layout()

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    print(f"\nSaved image to: {output_path}")


if __name__ == "__main__":
    main()
