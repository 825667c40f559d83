"""
Project settings (constants + small helpers).
Units: kilometres (km), seconds (s), radians internally, degrees at the config boundary.
"""
from __future__ import annotations

import math
import os

# Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
OUTPUT_DIR = os.path.join(BASE_DIR, "outputs")

# Run
VALIDATE_ON_IMPORT = False

# Earth
EARTH_NAME = "Earth"
EARTH_RADIUS_KM = 6371.0
MU_KM3_S2 = 398600.4418
J2 = 1.082616e-3

# Sun-synchronous design: nodal precession matched to Earth's mean motion around the sun
TROPICAL_YEAR_S = 365.2422 * 24 * 3600
SUN_SYNC_PRECESSION_RAD_S = 2 * math.pi / TROPICAL_YEAR_S
DEFAULT_LOCAL_SOLAR_TIME_H = 10.0
DEG_PER_SOLAR_HOUR = 15.0

# Non-polar mode limits (deg, inclusive)
NON_POLAR_MIN_INCLINATION_DEG = 30.0
NON_POLAR_MAX_INCLINATION_DEG = 98.0

# Antennas
BEACON_HALF_ANGLE_DEG = 60.0
REMOTE_HALF_ANGLE_DEG = 31.0

# Beacon defaults
DEFAULT_BEACON_ALTITUDE_KM = 600.0
DEFAULT_BEACON_INCLINATION_DEG = 97.5
DEFAULT_BEACON_PHASE_RAD = 0.0

# Remote (Iridium-like) defaults
DEFAULT_REMOTE_ID = 1
DEFAULT_REMOTE_ALTITUDE_KM = 781.0
DEFAULT_REMOTE_INCLINATION_DEG = 86.4
# single remote: put it on the opposite node, a quarter orbit ahead
SINGLE_REMOTE_RAAN_OFFSET_RAD = math.pi
SINGLE_REMOTE_PHASE_RAD = math.pi / 2

# Constellation layout
SATELLITES_PER_PLANE = 11
PLANE_COUNT = 6
PLANE_SPACING_DEG = 31.6
IN_PLANE_SPACING_DEG = 360.0 / SATELLITES_PER_PLANE

# Simulation
STEP_SECONDS = 60.0
DURATION_SECONDS = 24 * 3600.0
TIME_ACCELERATION = 1.0
PROGRESS_CHECKPOINTS = 10

# Orbital-element feed
CELESTRAK_GP_URL = "https://celestrak.org/NORAD/elements/gp.php"
IRIDIUM_GROUP = "iridium-next"
FEED_TIMEOUT_S = 15.0
FEED_RETRIES = 3


def horizon_steps(duration_s: float, step_s: float) -> int:
    """Number of whole steps covering duration_s."""
    if step_s <= 0:
        raise ValueError("step_s must be > 0")
    if duration_s <= 0:
        return 0
    # tolerate float noise such as 86400 / 60.000000001
    return int(math.floor(duration_s / step_s + 1e-9))


def validate_settings() -> None:
    if EARTH_RADIUS_KM <= 0:
        raise ValueError("EARTH_RADIUS_KM must be > 0")
    if MU_KM3_S2 <= 0:
        raise ValueError("MU_KM3_S2 must be > 0")
    if J2 <= 0:
        raise ValueError("J2 must be > 0")
    if STEP_SECONDS <= 0:
        raise ValueError("STEP_SECONDS must be > 0")
    if DURATION_SECONDS < 0:
        raise ValueError("DURATION_SECONDS must be >= 0")
    if TIME_ACCELERATION <= 0:
        raise ValueError("TIME_ACCELERATION must be > 0")
    if PROGRESS_CHECKPOINTS <= 0:
        raise ValueError("PROGRESS_CHECKPOINTS must be > 0")
    if SATELLITES_PER_PLANE <= 0:
        raise ValueError("SATELLITES_PER_PLANE must be > 0")
    if not 0.0 <= BEACON_HALF_ANGLE_DEG <= 180.0:
        raise ValueError("BEACON_HALF_ANGLE_DEG must be in [0, 180]")
    if not 0.0 <= REMOTE_HALF_ANGLE_DEG <= 180.0:
        raise ValueError("REMOTE_HALF_ANGLE_DEG must be in [0, 180]")
    if NON_POLAR_MAX_INCLINATION_DEG < NON_POLAR_MIN_INCLINATION_DEG:
        raise ValueError("NON_POLAR_MAX_INCLINATION_DEG must be >= NON_POLAR_MIN_INCLINATION_DEG")


if VALIDATE_ON_IMPORT:
    validate_settings()
