from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from contactsim.engine.constellation import ConstellationLayout, primary_index, resolve_members
from contactsim.engine.contact_engine import ContactEngine, ProgressCallback
from contactsim.engine.orbit_design import beacon_elements
from contactsim.engine.timeline import LinkStatistics
from contactsim.errors import ConfigurationError
from contactsim.models.elements import OrbitalElements, RemoteSatellite
from contactsim.models.params import SimulationParams
from contactsim.physics.body import EARTH, CentralBody
from contactsim.physics.geometry import subpoint

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    contact_flags: np.ndarray
    stats: LinkStatistics
    combined_flags: np.ndarray
    combined_stats: LinkStatistics
    step_seconds: float
    beacon_elements: OrbitalElements
    primary_id: int
    initial_positions: Dict[str, np.ndarray]
    initial_subpoints: Dict[str, Dict[str, float]]
    members: List[RemoteSatellite]
    # constellation mode only
    all_positions: Optional[Dict[int, np.ndarray]] = None
    all_contact_flags: Optional[Dict[int, np.ndarray]] = None
    all_stats: Optional[Dict[int, LinkStatistics]] = None

    @property
    def constellation_mode(self) -> bool:
        return self.all_contact_flags is not None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view: flags as 0/1 lists, durations also in seconds."""
        out: Dict[str, Any] = {
            "contact_flags": self.contact_flags.astype(int).tolist(),
            "stats": {**self.stats.to_dict(), **self.stats.in_seconds(self.step_seconds)},
            "combined_stats": {**self.combined_stats.to_dict(), **self.combined_stats.in_seconds(self.step_seconds)},
            "step_seconds": self.step_seconds,
            "primary_id": self.primary_id,
            "beacon_elements": {
                "altitude_km": self.beacon_elements.altitude_km,
                "inclination_deg": math.degrees(self.beacon_elements.inclination_rad),
                "raan_deg": math.degrees(self.beacon_elements.raan_rad),
            },
            "initial_positions": {k: v.tolist() for k, v in self.initial_positions.items()},
            "initial_subpoints": self.initial_subpoints,
        }
        if self.constellation_mode:
            out["all_positions"] = {str(k): v.tolist() for k, v in self.all_positions.items()}
            out["all_contact_flags"] = {str(k): v.astype(int).tolist() for k, v in self.all_contact_flags.items()}
            out["all_stats"] = {str(k): s.to_dict() for k, s in self.all_stats.items()}
        return out


def _check_params(params: SimulationParams):
    h = params.horizon
    if h.step_seconds <= 0:
        raise ConfigurationError("horizon.step_seconds", f"must be > 0 s (got {h.step_seconds})")
    if h.duration_seconds < 0:
        raise ConfigurationError("horizon.duration_seconds", f"must be >= 0 s (got {h.duration_seconds})")
    if h.acceleration <= 0:
        raise ConfigurationError("horizon.acceleration", f"must be > 0 (got {h.acceleration})")
    for name, angle in (("beacon.antenna_half_angle_deg", params.beacon.antenna_half_angle_deg),
                        ("remote.antenna_half_angle_deg", params.remote.antenna_half_angle_deg)):
        if not 0.0 <= angle <= 180.0:
            raise ConfigurationError(name, f"must be between 0° and 180° (got {angle:g}°)")


def run_simulation(params: SimulationParams,
                   progress: Optional[ProgressCallback] = None,
                   layout: Optional[ConstellationLayout] = None,
                   rng: Optional[np.random.Generator] = None,
                   body: CentralBody = EARTH) -> SimulationResult:
    """
    Resolve configuration, run the contact engine, package the result.
    All ConfigurationErrors surface here, before any propagation.
    """
    _check_params(params)

    beacon = beacon_elements(params.beacon, body)
    members = resolve_members(params.remote, beacon)
    constellation = bool(params.remote.show_all and params.remote.members)

    remotes = (layout or ConstellationLayout()).assign(members, rng=rng)
    ids = [m.satellite_id for m in members]
    primary = members[primary_index(members, params.remote.satellite_id)]

    engine = ContactEngine(
        math.radians(params.beacon.antenna_half_angle_deg),
        math.radians(params.remote.antenna_half_angle_deg),
        body=body,
    )
    many = engine.run_many(
        beacon, remotes,
        step_count=params.horizon.step_count,
        step_seconds=params.horizon.step_seconds,
        ids=ids,
        primary_id=primary.satellite_id,
        acceleration=params.horizon.acceleration,
        progress=progress,
    )

    beacon_pos = many.beacon_initial["position"]
    remote_pos = many.initial_positions[primary.satellite_id]

    return SimulationResult(
        contact_flags=many.primary_timeline,
        stats=many.primary_stats,
        combined_flags=many.combined_timeline,
        combined_stats=many.combined_stats,
        step_seconds=float(params.horizon.step_seconds),
        beacon_elements=beacon,
        primary_id=primary.satellite_id,
        initial_positions={"beacon": beacon_pos, "remote": remote_pos},
        initial_subpoints={"beacon": subpoint(beacon_pos), "remote": subpoint(remote_pos)},
        members=members,
        all_positions=dict(many.initial_positions) if constellation else None,
        all_contact_flags=dict(many.per_satellite_timelines) if constellation else None,
        all_stats=dict(many.per_satellite_stats) if constellation else None,
    )
