"""TLE (two-line element) formatting used to seed the SGP4 propagator."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple

from cstlnet.errors import ConfigurationError
from cstlnet.orbital.frame import SECONDS_PER_DAY

# NORAD catalog numbers are five digits wide in both TLE lines.
MAX_CATALOG_NUMBER = 99999


def tle_checksum(line: str) -> int:
    """Compute TLE line checksum (modulo 10 sum of digits, '-' counts as 1)."""
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == '-':
            checksum += 1
    return checksum % 10


def format_tle_epoch(epoch: datetime) -> str:
    """Two-digit year followed by the fractional day of year (YYDDD.DDDDDDDD)."""
    if epoch.tzinfo is None:
        epoch = epoch.replace(tzinfo=timezone.utc)
    year_start = datetime(epoch.year, 1, 1, tzinfo=epoch.tzinfo)
    day_of_year = (epoch - year_start).total_seconds() / SECONDS_PER_DAY + 1
    return f"{epoch.year % 100:02d}{day_of_year:012.8f}"


def generate_tle_lines(
    catalog_number: int,
    inclination_deg: float,
    raan_deg: float,
    eccentricity: float,
    arg_perigee_deg: float,
    mean_anomaly_deg: float,
    mean_motion_rev_per_day: float,
    epoch: datetime,
    name: Optional[str] = None,
) -> Tuple[str, str, str]:
    """
    Generate a TLE for a satellite with no drag terms.

    Args:
        catalog_number: NORAD catalog number, 1..99999
        inclination_deg, raan_deg, arg_perigee_deg, mean_anomaly_deg: degrees
        eccentricity: orbit eccentricity in [0, 1)
        mean_motion_rev_per_day: revolutions per day
        epoch: element epoch (UTC)
        name: optional name line, defaults to SAT-<catalog number>

    Returns:
        Tuple of (name_line, line1, line2)
    """
    if not 0 < catalog_number <= MAX_CATALOG_NUMBER:
        raise ConfigurationError(
            "catalog_number", catalog_number, f"must be in 1..{MAX_CATALOG_NUMBER}"
        )
    if name is None:
        name = f"SAT-{catalog_number:05d}"

    epoch_str = format_tle_epoch(epoch)

    # Format: 1 NNNNNC NNNNNAAA NNNNN.NNNNNNNN +.NNNNNNNN +NNNNN-N +NNNNN-N N NNNNN
    line1 = f"1 {catalog_number:05d}U 00000A   {epoch_str}  .00000000  00000-0  00000-0 0  0000"
    line1 = line1[:68]
    line1 = line1 + str(tle_checksum(line1))

    # Format: 2 NNNNN NNN.NNNN NNN.NNNN NNNNNNN NNN.NNNN NNN.NNNN NN.NNNNNNNNNNNNNN
    ecc_str = f"{eccentricity:.7f}"[2:]

    line2 = (
        f"2 {catalog_number:05d} "
        f"{inclination_deg % 360.0:8.4f} "
        f"{raan_deg % 360.0:8.4f} "
        f"{ecc_str} "
        f"{arg_perigee_deg % 360.0:8.4f} "
        f"{mean_anomaly_deg % 360.0:8.4f} "
        f"{mean_motion_rev_per_day:11.8f}"
    )
    line2 = f"{line2:68}"[:68]
    line2 = line2 + str(tle_checksum(line2))

    return name, line1, line2
