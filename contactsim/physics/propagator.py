from __future__ import annotations

import math

import numpy as np

from contactsim.models.elements import OrbitalElements, TerminalState
from contactsim.physics.body import EARTH, CentralBody


def semi_major_axis(elements: OrbitalElements, body: CentralBody = EARTH) -> float:
    return body.radius_km + elements.altitude_km


def orbital_period(a_km: float, body: CentralBody = EARTH) -> float:
    """Kepler's third law, seconds."""
    return 2.0 * math.pi * math.sqrt(a_km ** 3 / body.mu_km3_s2)


def orbit_to_inertial(inclination_rad: float, raan_rad: float) -> np.ndarray:
    """
    Rotation taking orbital-plane coordinates to the inertial frame:
    first about the plane's x axis by inclination, then about inertial Z by RAAN.
    """
    ci, si = math.cos(inclination_rad), math.sin(inclination_rad)
    co, so = math.cos(raan_rad), math.sin(raan_rad)
    rx = np.array([[1.0, 0.0, 0.0], [0.0, ci, -si], [0.0, si, ci]])
    rz = np.array([[co, -so, 0.0], [so, co, 0.0], [0.0, 0.0, 1.0]])
    return rz @ rx


def plane_normal(elements: OrbitalElements) -> np.ndarray:
    """Unit normal of the orbital plane, i.e. the rotated plane Z axis."""
    i, raan = elements.inclination_rad, elements.raan_rad
    return np.array([
        math.sin(raan) * math.sin(i),
        -math.cos(raan) * math.sin(i),
        math.cos(i),
    ])


class CircularOrbitPropagator:
    """
    Two-body circular orbit. theta(t) = n*t + phase_offset, no eccentricity term.
    t may be a scalar (returns shape (3,)) or an array of N times (returns (N, 3)).
    """

    def __init__(self, elements: OrbitalElements, body: CentralBody = EARTH):
        self.elements = elements
        self.body = body
        self.a = semi_major_axis(elements, body)
        self.period = orbital_period(self.a, body)
        self.mean_motion = 2.0 * math.pi / self.period
        self.speed = math.sqrt(body.mu_km3_s2 / self.a)
        self._rot = orbit_to_inertial(elements.inclination_rad, elements.raan_rad)
        self._normal = plane_normal(elements)

    def true_anomaly(self, t):
        return self.mean_motion * np.asarray(t, dtype=float) + self.elements.phase_offset_rad

    def position(self, t) -> np.ndarray:
        theta = self.true_anomaly(t)
        in_plane = np.stack(
            [self.a * np.cos(theta), self.a * np.sin(theta), np.zeros_like(theta)], axis=-1
        )
        return in_plane @ self._rot.T

    def velocity(self, t) -> np.ndarray:
        theta = self.true_anomaly(t)
        in_plane = np.stack(
            [-self.speed * np.sin(theta), self.speed * np.cos(theta), np.zeros_like(theta)], axis=-1
        )
        return in_plane @ self._rot.T

    def plane_normal(self) -> np.ndarray:
        return self._normal.copy()

    def state(self, t, hint_kind: str = TerminalState.VELOCITY) -> TerminalState:
        """Terminal state at t with either the velocity or the plane normal as orientation hint."""
        pos = self.position(t)
        if hint_kind == TerminalState.PLANE_NORMAL:
            hint = np.broadcast_to(self._normal, pos.shape)
        else:
            hint = self.velocity(t)
        return TerminalState(pos, hint, hint_kind=hint_kind)


def position(t, elements: OrbitalElements, body: CentralBody = EARTH) -> np.ndarray:
    return CircularOrbitPropagator(elements, body).position(t)


def velocity(t, elements: OrbitalElements, body: CentralBody = EARTH) -> np.ndarray:
    return CircularOrbitPropagator(elements, body).velocity(t)
