"""
Visibility & antenna-alignment test between the Beacon and a remote satellite.

Beacon: two opposing cones along its direction of travel (forward / backward).
Remote: one nadir-pointing cone.
A pair is linked when the body does not block the segment between them and
the line of sight falls inside a Beacon cone and inside the remote cone.
Cone tests compare dot products against precomputed cosines.
"""
from __future__ import annotations

import math

import numpy as np

from contactsim.models.elements import TerminalState
from contactsim.physics.body import EARTH, CentralBody
from contactsim.physics.geometry import is_occluded
from contactsim.physics.vectors import dot, norm, safe_unit


class LinkTester:
    def __init__(self, beacon_half_angle_rad: float, remote_half_angle_rad: float, body: CentralBody = EARTH):
        for name, angle in (("beacon_half_angle_rad", beacon_half_angle_rad),
                            ("remote_half_angle_rad", remote_half_angle_rad)):
            if not 0.0 <= angle <= math.pi:
                raise ValueError(f"{name} must be in [0, pi]")
        self.body = body
        self.beacon_half_angle_rad = float(beacon_half_angle_rad)
        self.remote_half_angle_rad = float(remote_half_angle_rad)
        self.cos_beacon = math.cos(beacon_half_angle_rad)
        self.cos_remote = math.cos(remote_half_angle_rad)

    @classmethod
    def from_degrees(cls, beacon_half_angle_deg, remote_half_angle_deg, body: CentralBody = EARTH):
        return cls(math.radians(beacon_half_angle_deg), math.radians(remote_half_angle_deg), body=body)

    @staticmethod
    def beacon_forward(beacon: TerminalState):
        """
        Unit forward boresight of the Beacon and a validity mask.
        Plane-normal hints are first made orthogonal to the radius, then
        forward = n_hat x r_hat (prograde direction of travel).
        """
        if beacon.hint_kind == TerminalState.VELOCITY:
            return safe_unit(beacon.orientation_hint)

        r_hat, r_ok = safe_unit(beacon.position)
        n = beacon.orientation_hint
        n_perp = n - dot(n, r_hat)[..., None] * r_hat
        n_hat, n_ok = safe_unit(n_perp)
        fwd, f_ok = safe_unit(np.cross(n_hat, r_hat))
        return fwd, r_ok & n_ok & f_ok

    def evaluate(self, beacon: TerminalState, remote: TerminalState):
        """
        Returns (linked, degenerate) boolean arrays over the leading axes.
        Degenerate rows (coincident positions, zero-length or non-finite
        orientation hint on either terminal, non-finite positions) are never linked.
        """
        r1 = beacon.position
        r2 = remote.position
        radius = self.body.radius_km

        with np.errstate(invalid="ignore"):
            above = (norm(r1) > radius) & (norm(r2) > radius)
            clear = ~is_occluded(r1, r2, radius)

            los, los_ok = safe_unit(r2 - r1)
            fwd, fwd_ok = self.beacon_forward(beacon)
            nadir, nadir_ok = safe_unit(-r2)
            # the remote boresight is nadir, its hint only has to be usable
            _, hint_ok = safe_unit(remote.orientation_hint)

            c = dot(los, fwd)
            beacon_ok = (c >= self.cos_beacon) | (-c >= self.cos_beacon)
            remote_ok = dot(-los, nadir) >= self.cos_remote

        degenerate = ~(los_ok & fwd_ok & nadir_ok & hint_ok)
        linked = above & clear & beacon_ok & remote_ok & ~degenerate
        return linked, degenerate

    def mask(self, beacon: TerminalState, remote: TerminalState):
        return self.evaluate(beacon, remote)[0]

    def check(self, beacon: TerminalState, remote: TerminalState) -> bool:
        return bool(np.all(self.mask(beacon, remote)))


def is_linked(beacon: TerminalState, remote: TerminalState,
              beacon_half_angle_rad: float, remote_half_angle_rad: float,
              body: CentralBody = EARTH) -> bool:
    """Single-instant link decision. For per-step loops build one LinkTester and reuse it."""
    return LinkTester(beacon_half_angle_rad, remote_half_angle_rad, body=body).check(beacon, remote)
