"""
Beacon orbit design: turn a BeaconConfig into OrbitalElements.

  sun-synchronous -> inclination from J2 nodal precession, RAAN from local solar time (default 10 h)
  non-polar       -> caller inclination, must lie in [30, 98] deg, RAAN 0
  custom          -> caller inclination as-is, RAAN from local solar time if given, else 0
"""
from __future__ import annotations

import logging
import math

from contactsim.config import settings
from contactsim.errors import ConfigurationError
from contactsim.models.elements import OrbitalElements
from contactsim.models.params import BEACON_MODES, BeaconConfig
from contactsim.physics.body import EARTH, CentralBody

log = logging.getLogger(__name__)


def raan_from_local_solar_time(lst_hours: float) -> float:
    """RAAN (rad) = 15 deg per hour of local solar time."""
    return math.radians(settings.DEG_PER_SOLAR_HOUR * float(lst_hours))


def sun_synchronous_inclination(altitude_km: float, body: CentralBody = EARTH) -> float:
    """
    Inclination (rad) whose J2 nodal precession matches the mean motion of the
    Earth around the sun. Always retrograde, i.e. in [90, 180) deg.
    """
    if altitude_km <= 0:
        raise ConfigurationError("altitude_km", f"must be > 0 km (got {altitude_km})")
    if body.j2 <= 0:
        raise ConfigurationError("j2", "sun-synchronous design needs a body with J2 > 0")

    a = body.radius_km + altitude_km
    rate = settings.SUN_SYNC_PRECESSION_RAD_S
    cos_i = (-2.0 * rate * a ** 3.5) / (3.0 * math.sqrt(body.mu_km3_s2) * body.radius_km ** 2 * body.j2)
    if not -1.0 <= cos_i <= 1.0:
        raise ConfigurationError(
            "altitude_km",
            f"no sun-synchronous inclination exists at {altitude_km} km",
        )
    return math.acos(cos_i)


def _check_lst(lst):
    if lst is not None and not 0.0 <= float(lst) < 24.0:
        raise ConfigurationError("local_solar_time_hours", f"must be in [0, 24) h (got {lst})")


def beacon_elements(config: BeaconConfig, body: CentralBody = EARTH, phase_rad: float = None) -> OrbitalElements:
    """Resolve the Beacon orbit. Raises ConfigurationError on invalid mode input."""
    if config.mode not in BEACON_MODES:
        raise ConfigurationError("mode", f"must be one of {', '.join(BEACON_MODES)} (got {config.mode!r})")
    if config.altitude_km <= 0:
        raise ConfigurationError("altitude_km", f"must be > 0 km (got {config.altitude_km})")
    _check_lst(config.local_solar_time_hours)

    if phase_rad is None:
        phase_rad = settings.DEFAULT_BEACON_PHASE_RAD

    if config.mode == "sun-synchronous":
        inclination = sun_synchronous_inclination(config.altitude_km, body)
        lst = config.local_solar_time_hours
        if lst is None:
            lst = settings.DEFAULT_LOCAL_SOLAR_TIME_H
        raan = raan_from_local_solar_time(lst)

    elif config.mode == "non-polar":
        lo = settings.NON_POLAR_MIN_INCLINATION_DEG
        hi = settings.NON_POLAR_MAX_INCLINATION_DEG
        if not lo <= config.inclination_deg <= hi:
            raise ConfigurationError(
                "inclination_deg",
                f"inclination must be between {lo:g}° and {hi:g}° for non-polar mode "
                f"(got {config.inclination_deg:g}°)",
            )
        inclination = math.radians(config.inclination_deg)
        raan = 0.0

    else:
        if not 0.0 <= config.inclination_deg <= 180.0:
            raise ConfigurationError(
                "inclination_deg",
                f"inclination must be between 0° and 180° (got {config.inclination_deg:g}°)",
            )
        inclination = math.radians(config.inclination_deg)
        lst = config.local_solar_time_hours
        raan = raan_from_local_solar_time(lst) if lst is not None else 0.0

    elements = OrbitalElements(
        altitude_km=float(config.altitude_km),
        inclination_rad=inclination,
        raan_rad=raan,
        phase_offset_rad=float(phase_rad),
    )
    log.debug(
        "Beacon orbit (%s): alt=%.1f km inc=%.3f deg raan=%.3f deg",
        config.mode, elements.altitude_km,
        math.degrees(elements.inclination_rad), math.degrees(elements.raan_rad),
    )
    return elements
