from __future__ import annotations

from dataclasses import dataclass

from contactsim.config.settings import EARTH_NAME, EARTH_RADIUS_KM, J2, MU_KM3_S2


@dataclass(frozen=True)
class CentralBody:
    """
    Spherical central body for two-body circular orbits.
    radius_km doubles as the occluding sphere for line-of-sight tests.
    """
    name: str
    radius_km: float
    mu_km3_s2: float
    j2: float = 0.0

    def __post_init__(self):
        if self.radius_km <= 0:
            raise ValueError("radius_km must be > 0")
        if self.mu_km3_s2 <= 0:
            raise ValueError("mu_km3_s2 must be > 0")


EARTH = CentralBody(name=EARTH_NAME, radius_km=EARTH_RADIUS_KM, mu_km3_s2=MU_KM3_S2, j2=J2)
