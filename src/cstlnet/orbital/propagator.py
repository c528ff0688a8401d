"""
Orbital propagation collaborator.

The constellation engine never touches orbital elements directly. It builds
orbits, advances them and queries positions only through the Propagator
interface defined here. Two implementations are provided:

    1. KeplerianPropagator: analytic two-body motion (Kepler's equation solved
       by Newton iteration), inertial frame rotated to ECEF by GMST.
    2. Sgp4Propagator: SGP4 with the WGS72 gravity model, seeded from a
       generated TLE; TEME rotated to ECEF by GMST.

Orbit handles are immutable. propagate() returns a new handle and leaves the
input untouched, so a failed step can be discarded without rollback.
"""

from __future__ import annotations

import abc
import itertools
import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

import numpy as np
from sgp4.api import SGP4_ERRORS, WGS72, Satrec, jday

from cstlnet.errors import ConfigurationError, PropagationError
from cstlnet.network.node import Geodetic, NodePosition
from cstlnet.orbital.frame import (
    SECONDS_PER_DAY,
    EarthFrame,
    compute_gmst,
    inertial_to_ecef,
)
from cstlnet.orbital.tle import MAX_CATALOG_NUMBER, generate_tle_lines

logger = logging.getLogger(__name__)

KEPLER_TOLERANCE = 1e-12
KEPLER_MAX_ITERATIONS = 50


def _as_utc(epoch: datetime) -> datetime:
    if epoch.tzinfo is None:
        return epoch.replace(tzinfo=timezone.utc)
    return epoch.astimezone(timezone.utc)


def _solve_kepler(mean_anomaly: float, eccentricity: float) -> float:
    """Solve M = E - e*sin(E) for the eccentric anomaly E."""
    M = mean_anomaly % (2 * math.pi)
    E = M if eccentricity < 0.8 else math.pi
    for _ in range(KEPLER_MAX_ITERATIONS):
        delta = (E - eccentricity * math.sin(E) - M) / (1.0 - eccentricity * math.cos(E))
        E -= delta
        if abs(delta) < KEPLER_TOLERANCE:
            return E
    raise PropagationError(
        f"Kepler equation did not converge for M={M:.6f}, e={eccentricity}"
    )


def true_to_mean_anomaly(true_anomaly: float, eccentricity: float) -> float:
    """Mean anomaly (rad) of a true anomaly (rad); identity for circular orbits."""
    if eccentricity == 0.0:
        return true_anomaly % (2 * math.pi)
    E = 2 * math.atan2(
        math.sqrt(1.0 - eccentricity) * math.sin(true_anomaly / 2),
        math.sqrt(1.0 + eccentricity) * math.cos(true_anomaly / 2),
    )
    return (E - eccentricity * math.sin(E)) % (2 * math.pi)


def _rotation_perifocal_to_inertial(
    raan: float, inclination: float, arg_perigee: float
) -> np.ndarray:
    """R = Rz(raan) @ Rx(inclination) @ Rz(arg_perigee)."""
    cO, sO = math.cos(raan), math.sin(raan)
    ci, si = math.cos(inclination), math.sin(inclination)
    cw, sw = math.cos(arg_perigee), math.sin(arg_perigee)
    return np.array([
        [cO * cw - sO * sw * ci, -cO * sw - sO * cw * ci, sO * si],
        [sO * cw + cO * sw * ci, -sO * sw + cO * cw * ci, -cO * si],
        [sw * si, cw * si, ci],
    ])


# ---------------------------------------------------------------------------
# Orbit handles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeplerianOrbit:
    """Classical elements (radians, km) plus the cached inertial state at epoch."""

    epoch: datetime
    semi_major_axis_km: float
    eccentricity: float
    inclination_rad: float
    raan_rad: float
    arg_perigee_rad: float
    mean_anomaly_rad: float
    position_eci: np.ndarray = field(compare=False, repr=False)
    velocity_eci: np.ndarray = field(compare=False, repr=False)


@dataclass(frozen=True)
class Sgp4Orbit:
    """An SGP4 satellite record evaluated at a given epoch (TEME frame)."""

    epoch: datetime
    catalog_number: int
    satrec: Satrec = field(compare=False, repr=False)
    position_teme: np.ndarray = field(compare=False, repr=False)
    velocity_teme: np.ndarray = field(compare=False, repr=False)
    tle: tuple = field(compare=False, repr=False, default=())


# ---------------------------------------------------------------------------
# Propagator interface
# ---------------------------------------------------------------------------

class Propagator(abc.ABC):
    """Interface the constellation engine uses for all orbital mechanics."""

    name: str = "abstract"

    def __init__(self, frame: Optional[EarthFrame] = None):
        self.frame = frame if frame is not None else EarthFrame.wgs84()

    @abc.abstractmethod
    def construct_orbit(
        self,
        altitude_km: float,
        eccentricity: float,
        inclination_deg: float,
        raan_deg: float,
        arg_of_perigee_deg: float,
        aol_deg: float,
        epoch: datetime,
    ):
        """Build an orbit handle; the argument of latitude places the satellite."""

    @abc.abstractmethod
    def propagate(self, orbit, duration_seconds: float):
        """Return a new orbit handle advanced by duration_seconds."""

    @abc.abstractmethod
    def position_ecef(self, orbit) -> NodePosition:
        """Earth-fixed position of the orbit at its epoch."""

    @abc.abstractmethod
    def velocity_z(self, orbit) -> float:
        """Inertial velocity component perpendicular to the equator (km/s)."""

    def position_geodetic(self, orbit) -> Geodetic:
        return self.position_ecef(orbit).to_geodetic(self.frame)

    def elevation_angle(self, site: Geodetic, orbit) -> float:
        """
        Elevation (degrees) of the orbiting body above the local horizon of site.

        The horizon plane is the tangent plane of the ellipsoid at the site.
        """
        site_ecef = self.frame.geodetic_to_ecef(site.lat, site.lon, site.alt)
        line_of_sight = self.position_ecef(orbit).as_vector() - site_ecef
        slant_range = np.linalg.norm(line_of_sight)
        if slant_range == 0:
            return 90.0
        up = self.frame.local_up(site.lat, site.lon)
        sin_elevation = np.clip(np.dot(line_of_sight, up) / slant_range, -1.0, 1.0)
        return math.degrees(math.asin(sin_elevation))

    def _check_elements(self, altitude_km: float, eccentricity: float) -> None:
        if not altitude_km > 0:
            raise ConfigurationError("altitude_km", altitude_km, "must be > 0")
        if not 0.0 <= eccentricity < 1.0:
            raise ConfigurationError("eccentricity", eccentricity, "must be in [0, 1)")


# ---------------------------------------------------------------------------
# Two-body propagator
# ---------------------------------------------------------------------------

class KeplerianPropagator(Propagator):
    """Analytic two-body propagation (no perturbations)."""

    name = "keplerian"

    def construct_orbit(
        self,
        altitude_km: float,
        eccentricity: float,
        inclination_deg: float,
        raan_deg: float,
        arg_of_perigee_deg: float,
        aol_deg: float,
        epoch: datetime,
    ) -> KeplerianOrbit:
        self._check_elements(altitude_km, eccentricity)
        arg_perigee = math.radians(arg_of_perigee_deg)
        true_anomaly = math.radians(aol_deg) - arg_perigee
        return self._state_at(
            epoch=_as_utc(epoch),
            semi_major_axis_km=self.frame.semi_major_axis_for_altitude(altitude_km),
            eccentricity=eccentricity,
            inclination_rad=math.radians(inclination_deg),
            raan_rad=math.radians(raan_deg),
            arg_perigee_rad=arg_perigee,
            mean_anomaly_rad=true_to_mean_anomaly(true_anomaly, eccentricity),
        )

    def propagate(self, orbit: KeplerianOrbit, duration_seconds: float) -> KeplerianOrbit:
        if not math.isfinite(duration_seconds):
            raise PropagationError(
                "non-finite propagation duration", orbit.epoch, duration_seconds
            )
        n = self.frame.mean_motion_rad_s(orbit.semi_major_axis_km)
        return self._state_at(
            epoch=orbit.epoch + timedelta(seconds=duration_seconds),
            semi_major_axis_km=orbit.semi_major_axis_km,
            eccentricity=orbit.eccentricity,
            inclination_rad=orbit.inclination_rad,
            raan_rad=orbit.raan_rad,
            arg_perigee_rad=orbit.arg_perigee_rad,
            mean_anomaly_rad=(orbit.mean_anomaly_rad + n * duration_seconds) % (2 * math.pi),
        )

    def position_ecef(self, orbit: KeplerianOrbit) -> NodePosition:
        gmst = compute_gmst(orbit.epoch)
        return NodePosition.from_vector(inertial_to_ecef(orbit.position_eci, gmst))

    def velocity_z(self, orbit: KeplerianOrbit) -> float:
        return float(orbit.velocity_eci[2])

    def _state_at(self, **elements) -> KeplerianOrbit:
        a = elements["semi_major_axis_km"]
        e = elements["eccentricity"]
        E = _solve_kepler(elements["mean_anomaly_rad"], e)

        true_anomaly = 2 * math.atan2(
            math.sqrt(1.0 + e) * math.sin(E / 2),
            math.sqrt(1.0 - e) * math.cos(E / 2),
        )
        radius = a * (1.0 - e * math.cos(E))
        semi_latus_rectum = a * (1.0 - e**2)
        speed_factor = math.sqrt(self.frame.mu_km3_s2 / semi_latus_rectum)

        r_pf = np.array([radius * math.cos(true_anomaly), radius * math.sin(true_anomaly), 0.0])
        v_pf = speed_factor * np.array([-math.sin(true_anomaly), e + math.cos(true_anomaly), 0.0])

        rotation = _rotation_perifocal_to_inertial(
            elements["raan_rad"], elements["inclination_rad"], elements["arg_perigee_rad"]
        )
        position = rotation @ r_pf
        velocity = rotation @ v_pf
        if not (np.all(np.isfinite(position)) and np.all(np.isfinite(velocity))):
            raise PropagationError("two-body state is not finite", elements["epoch"], 0.0)

        return KeplerianOrbit(position_eci=position, velocity_eci=velocity, **elements)


# ---------------------------------------------------------------------------
# SGP4 propagator
# ---------------------------------------------------------------------------

class Sgp4Propagator(Propagator):
    """SGP4 (WGS72) propagation of generated near-circular TLEs."""

    name = "sgp4"

    def __init__(self, frame: Optional[EarthFrame] = None):
        super().__init__(frame)
        self._catalog_numbers = itertools.count(1)
        self._lock = threading.Lock()

    def construct_orbit(
        self,
        altitude_km: float,
        eccentricity: float,
        inclination_deg: float,
        raan_deg: float,
        arg_of_perigee_deg: float,
        aol_deg: float,
        epoch: datetime,
    ) -> Sgp4Orbit:
        self._check_elements(altitude_km, eccentricity)
        with self._lock:
            catalog_number = next(self._catalog_numbers)
        if catalog_number > MAX_CATALOG_NUMBER:
            raise ConfigurationError(
                "satellite_count",
                catalog_number,
                f"an SGP4 propagator numbers at most {MAX_CATALOG_NUMBER} orbits",
            )

        a = self.frame.semi_major_axis_for_altitude(altitude_km)
        mean_motion = SECONDS_PER_DAY / self.frame.orbital_period_seconds(a)
        true_anomaly = math.radians(aol_deg - arg_of_perigee_deg)
        mean_anomaly_deg = math.degrees(true_to_mean_anomaly(true_anomaly, eccentricity))

        epoch = _as_utc(epoch)
        tle = generate_tle_lines(
            catalog_number=catalog_number,
            inclination_deg=inclination_deg,
            raan_deg=raan_deg,
            eccentricity=eccentricity,
            arg_perigee_deg=arg_of_perigee_deg,
            mean_anomaly_deg=mean_anomaly_deg,
            mean_motion_rev_per_day=mean_motion,
            epoch=epoch,
        )
        satrec = Satrec.twoline2rv(tle[1], tle[2], WGS72)
        return self._evaluate(satrec, catalog_number, epoch, tle, 0.0)

    def propagate(self, orbit: Sgp4Orbit, duration_seconds: float) -> Sgp4Orbit:
        if not math.isfinite(duration_seconds):
            raise PropagationError(
                "non-finite propagation duration", orbit.epoch, duration_seconds
            )
        return self._evaluate(
            orbit.satrec,
            orbit.catalog_number,
            orbit.epoch + timedelta(seconds=duration_seconds),
            orbit.tle,
            duration_seconds,
        )

    def position_ecef(self, orbit: Sgp4Orbit) -> NodePosition:
        gmst = compute_gmst(orbit.epoch)
        return NodePosition.from_vector(inertial_to_ecef(orbit.position_teme, gmst))

    def velocity_z(self, orbit: Sgp4Orbit) -> float:
        return float(orbit.velocity_teme[2])

    @staticmethod
    def _evaluate(
        satrec: Satrec,
        catalog_number: int,
        epoch: datetime,
        tle: tuple,
        duration_seconds: float,
    ) -> Sgp4Orbit:
        jd, fr = jday(
            epoch.year,
            epoch.month,
            epoch.day,
            epoch.hour,
            epoch.minute,
            epoch.second + epoch.microsecond / 1e6,
        )
        error, r_teme, v_teme = satrec.sgp4(jd, fr)
        if error != 0:
            raise PropagationError(
                f"SGP4 error {error} for satellite {catalog_number}: "
                f"{SGP4_ERRORS.get(error, 'unknown error')}",
                epoch - timedelta(seconds=duration_seconds),
                duration_seconds,
            )
        return Sgp4Orbit(
            epoch=epoch,
            catalog_number=catalog_number,
            satrec=satrec,
            position_teme=np.array(r_teme),
            velocity_teme=np.array(v_teme),
            tle=tle,
        )


PROPAGATORS = {
    KeplerianPropagator.name: KeplerianPropagator,
    Sgp4Propagator.name: Sgp4Propagator,
}


def make_propagator(name: str = "keplerian", frame: Optional[EarthFrame] = None) -> Propagator:
    """Instantiate a propagator by name ("keplerian" or "sgp4")."""
    try:
        cls = PROPAGATORS[name]
    except KeyError:
        raise ConfigurationError(
            "propagator", name, f"expected one of {sorted(PROPAGATORS)}"
        ) from None
    logger.debug("Using %s propagator (frame %s)", name, (frame or EarthFrame()).name)
    return cls(frame)
