"""Tests for cstlnet.orbital.frame conversions."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import numpy as np
import pytest

from cstlnet.orbital.frame import EarthFrame, compute_gmst, inertial_to_ecef, julian_date

J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestEarthFrame:
    """Tests for EarthFrame geodetic helpers."""

    def test_wgs84_defaults(self) -> None:
        """wgs84() carries the WGS84 ellipsoid."""
        frame = EarthFrame.wgs84()
        assert frame.equatorial_radius_km == pytest.approx(6378.137)
        assert frame.eccentricity_sq == pytest.approx(0.00669437999, rel=1e-8)

    def test_equator_prime_meridian(self) -> None:
        """(0, 0, 0) sits on the X axis at the equatorial radius."""
        frame = EarthFrame.wgs84()
        vec = frame.geodetic_to_ecef(0.0, 0.0, 0.0)
        np.testing.assert_allclose(vec, [6378.137, 0.0, 0.0], atol=1e-9)

    def test_pole_uses_polar_radius(self) -> None:
        """The north pole lies at the polar radius a*(1-f)."""
        frame = EarthFrame.wgs84()
        vec = frame.geodetic_to_ecef(90.0, 0.0, 0.0)
        polar = frame.equatorial_radius_km * (1.0 - frame.flattening)
        assert vec[2] == pytest.approx(polar, abs=1e-6)
        assert math.hypot(vec[0], vec[1]) == pytest.approx(0.0, abs=1e-9)

    def test_geodetic_roundtrip(self) -> None:
        """ECEF -> geodetic recovers a mid-latitude point at LEO height."""
        frame = EarthFrame.wgs84()
        vec = frame.geodetic_to_ecef(47.3769, 8.5417, 550.0)
        lat, lon, alt = frame.ecef_to_geodetic(vec)
        assert lat == pytest.approx(47.3769, abs=1e-9)
        assert lon == pytest.approx(8.5417, abs=1e-9)
        assert alt == pytest.approx(550.0, abs=1e-6)

    def test_local_up_is_unit(self) -> None:
        frame = EarthFrame.wgs84()
        up = frame.local_up(-33.0, 151.0)
        assert np.linalg.norm(up) == pytest.approx(1.0)

    def test_orbital_period_leo(self) -> None:
        """A 550 km shell has a period of roughly 95.6 minutes."""
        frame = EarthFrame.wgs84()
        period = frame.orbital_period_seconds(frame.semi_major_axis_for_altitude(550.0))
        assert period / 60.0 == pytest.approx(95.6, abs=0.2)


class TestSiderealTime:
    """Tests for Julian date, GMST and the inertial-to-ECEF rotation."""

    def test_julian_date_j2000(self) -> None:
        assert julian_date(J2000) == pytest.approx(2451545.0)

    def test_gmst_j2000(self) -> None:
        """GMST at J2000.0 is 280.46061837 degrees."""
        assert math.degrees(compute_gmst(J2000)) == pytest.approx(280.46061837, abs=1e-6)

    def test_gmst_range(self) -> None:
        gmst = compute_gmst(datetime(2024, 6, 30, 23, 59, 59, tzinfo=timezone.utc))
        assert 0.0 <= gmst < 2 * math.pi

    def test_rotation_preserves_z_and_norm(self) -> None:
        """Rotation about Z keeps Z and the vector length."""
        vec = np.array([1234.0, -5678.0, 3210.0])
        rotated = inertial_to_ecef(vec, 1.234)
        assert rotated[2] == vec[2]
        assert np.linalg.norm(rotated) == pytest.approx(np.linalg.norm(vec))

    def test_zero_gmst_is_identity(self) -> None:
        vec = np.array([7000.0, 10.0, -20.0])
        np.testing.assert_allclose(inertial_to_ecef(vec, 0.0), vec)
