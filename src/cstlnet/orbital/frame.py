"""
Earth reference frame for the orbital collaborator.

The frame is an explicitly constructed value that is handed to a propagator
at startup and held for the lifetime of the process. Nothing in the package
reads a process-wide ephemeris singleton, so tests can build their own
frame (or none at all, with a stub propagator).

Conversions provided here:
    - Greenwich Mean Sidereal Time (IAU 1982 approximation)
    - Inertial (EME2000 / TEME) to Earth-fixed rotation about Z
    - Geodetic (WGS84 ellipsoid) <-> Earth-centered, Earth-fixed
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

import numpy as np

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class EarthFrame:
    """Physical constants of the central body, in km and seconds."""

    name: str = "EME2000"
    mu_km3_s2: float = 398600.4418
    equatorial_radius_km: float = 6378.137
    flattening: float = 1.0 / 298.257223563
    rotation_rate_rad_s: float = 7.2921159e-5

    @classmethod
    def wgs84(cls) -> "EarthFrame":
        return cls()

    @property
    def eccentricity_sq(self) -> float:
        f = self.flattening
        return f * (2.0 - f)

    def semi_major_axis_for_altitude(self, altitude_km: float) -> float:
        return self.equatorial_radius_km + altitude_km

    def orbital_period_seconds(self, semi_major_axis_km: float) -> float:
        """Kepler's third law."""
        return 2 * math.pi * math.sqrt(semi_major_axis_km**3 / self.mu_km3_s2)

    def mean_motion_rad_s(self, semi_major_axis_km: float) -> float:
        return math.sqrt(self.mu_km3_s2 / semi_major_axis_km**3)

    def geodetic_to_ecef(
        self, lat_deg: float, lon_deg: float, alt_km: float
    ) -> np.ndarray:
        """
        Convert geodetic coordinates on the reference ellipsoid to ECEF.

        Args:
            lat_deg: Geodetic latitude in degrees
            lon_deg: Longitude in degrees
            alt_km: Height above the ellipsoid in km

        Returns:
            ECEF position vector in km
        """
        lat = math.radians(lat_deg)
        lon = math.radians(lon_deg)
        e2 = self.eccentricity_sq
        sin_lat = math.sin(lat)
        n = self.equatorial_radius_km / math.sqrt(1.0 - e2 * sin_lat**2)

        x = (n + alt_km) * math.cos(lat) * math.cos(lon)
        y = (n + alt_km) * math.cos(lat) * math.sin(lon)
        z = (n * (1.0 - e2) + alt_km) * sin_lat
        return np.array([x, y, z])

    def ecef_to_geodetic(
        self, position_km: np.ndarray, tolerance: float = 1e-12
    ) -> Tuple[float, float, float]:
        """
        Convert an ECEF position to geodetic (lat_deg, lon_deg, alt_km).

        Uses fixed-point iteration on the geodetic latitude; the height is
        evaluated with a form that stays well conditioned near the poles.
        """
        x, y, z = (float(c) for c in position_km)
        a = self.equatorial_radius_km
        e2 = self.eccentricity_sq

        lon = math.atan2(y, x)
        p = math.hypot(x, y)
        if p == 0.0 and z == 0.0:
            return 0.0, math.degrees(lon), -a

        lat = math.atan2(z, p * (1.0 - e2))
        for _ in range(20):
            sin_lat = math.sin(lat)
            n = a / math.sqrt(1.0 - e2 * sin_lat**2)
            alt = p * math.cos(lat) + z * sin_lat - a * math.sqrt(1.0 - e2 * sin_lat**2)
            new_lat = math.atan2(z, p * (1.0 - e2 * n / (n + alt)))
            if abs(new_lat - lat) < tolerance:
                lat = new_lat
                break
            lat = new_lat

        sin_lat = math.sin(lat)
        alt = p * math.cos(lat) + z * sin_lat - a * math.sqrt(1.0 - e2 * sin_lat**2)
        return math.degrees(lat), math.degrees(lon), alt

    def local_up(self, lat_deg: float, lon_deg: float) -> np.ndarray:
        """Unit normal of the ellipsoid at a geodetic point (ECEF)."""
        lat = math.radians(lat_deg)
        lon = math.radians(lon_deg)
        return np.array([
            math.cos(lat) * math.cos(lon),
            math.cos(lat) * math.sin(lon),
            math.sin(lat),
        ])


def compute_gmst(dt: datetime) -> float:
    """
    Compute Greenwich Mean Sidereal Time (GMST) in radians.

    Uses the IAU 1982 model approximation.

    Args:
        dt: UTC datetime (naive datetimes are taken as UTC)

    Returns:
        GMST angle in radians, in [0, 2*pi)
    """
    jd = julian_date(dt)

    # Julian centuries from J2000.0
    T = (jd - 2451545.0) / 36525.0

    gmst_deg = (
        280.46061837
        + 360.98564736629 * (jd - 2451545.0)
        + 0.000387933 * T**2
        - T**3 / 38710000.0
    )
    return math.radians(gmst_deg % 360.0)


def julian_date(dt: datetime) -> float:
    """Julian date of a UTC datetime (Meeus' algorithm)."""
    year = dt.year
    month = dt.month
    hour = dt.hour + dt.minute / 60.0 + dt.second / 3600.0 + dt.microsecond / 3600e6

    if month <= 2:
        year -= 1
        month += 12

    A = int(year / 100)
    B = 2 - A + int(A / 4)

    return (
        int(365.25 * (year + 4716))
        + int(30.6001 * (month + 1))
        + dt.day
        + hour / 24.0
        + B
        - 1524.5
    )


def inertial_to_ecef(vector_km: np.ndarray, gmst_rad: float) -> np.ndarray:
    """
    Rotate an inertial-frame vector into the Earth-fixed frame.

    This is a rotation about Z by the negative GMST angle; Z is unchanged,
    so the sign of the Z velocity (ascending/descending) is frame-invariant.
    """
    cos_gmst = math.cos(gmst_rad)
    sin_gmst = math.sin(gmst_rad)
    x, y, z = vector_km
    return np.array([
        cos_gmst * x + sin_gmst * y,
        -sin_gmst * x + cos_gmst * y,
        z,
    ])
