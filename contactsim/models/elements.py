from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from contactsim.errors import ConfigurationError


@dataclass(frozen=True)
class OrbitalElements:
    """
    Circular-orbit parameters. Semi-major axis = body radius + altitude.
    """
    altitude_km: float
    inclination_rad: float
    raan_rad: float = 0.0
    phase_offset_rad: float = 0.0

    def __post_init__(self):
        for name in ("altitude_km", "inclination_rad", "raan_rad", "phase_offset_rad"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(name, "must be a finite number")
        if self.altitude_km <= 0:
            raise ConfigurationError("altitude_km", f"must be > 0 km (got {self.altitude_km})")
        if not 0.0 <= self.inclination_rad <= math.pi:
            raise ConfigurationError(
                "inclination_rad",
                f"must be between 0 and pi (got {self.inclination_rad:.6f})",
            )

    @classmethod
    def from_degrees(cls, altitude_km, inclination_deg, raan_deg=0.0, phase_offset_deg=0.0):
        return cls(
            altitude_km=float(altitude_km),
            inclination_rad=math.radians(inclination_deg),
            raan_rad=math.radians(raan_deg),
            phase_offset_rad=math.radians(phase_offset_deg),
        )


class TerminalState:
    """
    Terminal state at one instant (or a stack of instants).
    orientation_hint is a velocity vector when hint_kind == "velocity",
    or an orbital-plane normal when hint_kind == "plane_normal".
    """
    VELOCITY = "velocity"
    PLANE_NORMAL = "plane_normal"

    def __init__(self, position, orientation_hint, hint_kind=VELOCITY):
        if hint_kind not in (self.VELOCITY, self.PLANE_NORMAL):
            raise ValueError(f"Unknown orientation hint kind: {hint_kind}")
        self.position = np.array(position, dtype=float)
        self.orientation_hint = np.array(orientation_hint, dtype=float)
        if self.position.shape[-1:] != (3,) or self.orientation_hint.shape != self.position.shape:
            raise ValueError("Position and orientation hint must be matching 3D vectors.")
        self.hint_kind = hint_kind

    def __repr__(self):
        return f"TerminalState(pos={self.position}, {self.hint_kind}={self.orientation_hint})"


@dataclass(frozen=True)
class RemoteSatellite:
    """A constellation member: identity plus its orbit.

    raan_rad / phase_rad left as None are assigned by the constellation layout.
    Altitude and inclination are checked when the layout builds OrbitalElements.
    """
    satellite_id: int
    altitude_km: float
    inclination_rad: float
    raan_rad: Optional[float] = None
    phase_rad: Optional[float] = None
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or f"SAT-{self.satellite_id}"
