"""Tests for cstlnet.orbital.tle formatting."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sgp4.api import WGS72, Satrec, jday

from cstlnet.errors import ConfigurationError
from cstlnet.orbital.tle import (
    MAX_CATALOG_NUMBER,
    format_tle_epoch,
    generate_tle_lines,
    tle_checksum,
)

EPOCH = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _lines(catalog_number: int = 1):
    return generate_tle_lines(
        catalog_number=catalog_number,
        inclination_deg=53.0,
        raan_deg=45.0,
        eccentricity=0.0001,
        arg_perigee_deg=0.0,
        mean_anomaly_deg=90.0,
        mean_motion_rev_per_day=15.05,
        epoch=EPOCH,
    )


class TestTleFormatting:
    """Tests for generated TLE lines."""

    def test_line_lengths(self) -> None:
        """Both element lines are 69 characters."""
        name, line1, line2 = _lines()
        assert name == "SAT-00001"
        assert len(line1) == 69
        assert len(line2) == 69

    def test_checksums(self) -> None:
        """Last column is the mod-10 checksum of the first 68."""
        _, line1, line2 = _lines(42)
        assert int(line1[68]) == tle_checksum(line1)
        assert int(line2[68]) == tle_checksum(line2)

    def test_checksum_counts_minus(self) -> None:
        assert tle_checksum("1-2") == 4

    def test_epoch_format(self) -> None:
        """J2000.0 is day 1.5 of year 00."""
        assert format_tle_epoch(EPOCH) == "00001.50000000"

    def test_catalog_number_bounds(self) -> None:
        with pytest.raises(ConfigurationError):
            _lines(0)
        with pytest.raises(ConfigurationError) as exc_info:
            _lines(MAX_CATALOG_NUMBER + 1)
        assert exc_info.value.parameter == "catalog_number"
        assert _lines(MAX_CATALOG_NUMBER)[1][2:7] == "99999"

    def test_sgp4_accepts_lines(self) -> None:
        """sgp4 parses the lines and propagates them without error."""
        _, line1, line2 = _lines(7)
        satrec = Satrec.twoline2rv(line1, line2, WGS72)
        assert satrec.satnum == 7
        jd, fr = jday(2000, 1, 1, 12, 0, 0.0)
        error, r, _ = satrec.sgp4(jd, fr)
        assert error == 0
        assert 6700.0 < sum(c * c for c in r) ** 0.5 < 7100.0
