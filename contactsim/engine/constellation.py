from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from contactsim.config import settings
from contactsim.errors import ConfigurationError
from contactsim.models.elements import OrbitalElements, RemoteSatellite
from contactsim.models.params import RemoteConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstellationLayout:
    """
    Parameter-assignment policy for constellation members (not physics).
    Members without an explicit RAAN / phase get
        plane = index // satellites_per_plane
        raan  = plane * plane_spacing_rad
        phase = (index % satellites_per_plane) * in_plane_spacing_rad
    Optional *_jitter_rad values are the std-dev of a Gaussian perturbation,
    applied only when the caller passes a numpy Generator.
    """
    satellites_per_plane: int = settings.SATELLITES_PER_PLANE
    plane_spacing_rad: float = math.radians(settings.PLANE_SPACING_DEG)
    in_plane_spacing_rad: float = math.radians(settings.IN_PLANE_SPACING_DEG)
    expected_size: Optional[int] = None
    raan_jitter_rad: float = 0.0
    phase_jitter_rad: float = 0.0
    inclination_jitter_rad: float = 0.0

    def __post_init__(self):
        if self.satellites_per_plane <= 0:
            raise ConfigurationError("satellites_per_plane", "must be > 0")
        if self.expected_size is not None and self.expected_size <= 0:
            raise ConfigurationError("expected_size", "must be > 0 when given")
        for name in ("raan_jitter_rad", "phase_jitter_rad", "inclination_jitter_rad"):
            if getattr(self, name) < 0:
                raise ConfigurationError(name, "must be >= 0")

    @classmethod
    def iridium(cls, **overrides):
        """6 planes x 11 satellites, 31.6 deg between planes."""
        kw = dict(expected_size=settings.PLANE_COUNT * settings.SATELLITES_PER_PLANE)
        kw.update(overrides)
        return cls(**kw)

    def slot(self, index: int) -> Tuple[float, float]:
        """(raan_rad, phase_rad) for member position `index`."""
        plane, in_plane = divmod(int(index), self.satellites_per_plane)
        return plane * self.plane_spacing_rad, in_plane * self.in_plane_spacing_rad

    def assign(self, members: Sequence[RemoteSatellite],
               rng: Optional[np.random.Generator] = None) -> List[OrbitalElements]:
        if not members:
            raise ConfigurationError("members", "at least one remote satellite is required")
        if self.expected_size is not None and len(members) != self.expected_size:
            raise ConfigurationError(
                "members",
                f"constellation expects {self.expected_size} members (got {len(members)})",
            )

        seen = set()
        out: List[OrbitalElements] = []
        for index, member in enumerate(members):
            if member.satellite_id in seen:
                raise ConfigurationError("members", f"duplicate satellite id {member.satellite_id}")
            seen.add(member.satellite_id)

            raan, phase = self.slot(index)
            if member.raan_rad is not None:
                raan = member.raan_rad
            if member.phase_rad is not None:
                phase = member.phase_rad
            inclination = member.inclination_rad

            if rng is not None:
                raan += rng.normal(0.0, self.raan_jitter_rad) if self.raan_jitter_rad else 0.0
                phase += rng.normal(0.0, self.phase_jitter_rad) if self.phase_jitter_rad else 0.0
                if self.inclination_jitter_rad:
                    inclination = float(np.clip(
                        inclination + rng.normal(0.0, self.inclination_jitter_rad), 0.0, math.pi
                    ))

            try:
                out.append(OrbitalElements(
                    altitude_km=member.altitude_km,
                    inclination_rad=inclination,
                    raan_rad=raan % (2 * math.pi),
                    phase_offset_rad=phase,
                ))
            except ConfigurationError as e:
                raise ConfigurationError(f"members[{member.satellite_id}].{e.field}", e.constraint) from e
        return out


def single_member(config: RemoteConfig, beacon: OrbitalElements) -> RemoteSatellite:
    """
    The lone remote of a non-constellation run: opposite node to the Beacon,
    a quarter orbit ahead.
    """
    if config.altitude_km <= 0:
        raise ConfigurationError("remote.altitude_km", f"must be > 0 km (got {config.altitude_km})")
    if not 0.0 <= config.inclination_deg <= 180.0:
        raise ConfigurationError(
            "remote.inclination_deg",
            f"must be between 0° and 180° (got {config.inclination_deg:g}°)",
        )
    return RemoteSatellite(
        satellite_id=int(config.satellite_id),
        altitude_km=float(config.altitude_km),
        inclination_rad=math.radians(config.inclination_deg),
        raan_rad=(beacon.raan_rad + settings.SINGLE_REMOTE_RAAN_OFFSET_RAD) % (2 * math.pi),
        phase_rad=settings.SINGLE_REMOTE_PHASE_RAD,
    )


def resolve_members(config: RemoteConfig, beacon: OrbitalElements) -> List[RemoteSatellite]:
    """Uniform member list: the configured constellation, or one synthesised satellite."""
    if config.show_all and config.members:
        return list(config.members)
    if config.show_all:
        log.warning("show_all requested without members; using a single remote satellite")
    return [single_member(config, beacon)]


def primary_index(members: Sequence[RemoteSatellite], satellite_id) -> int:
    for i, m in enumerate(members):
        if m.satellite_id == satellite_id:
            return i
    log.warning("Satellite id %s not in constellation; using %s as primary", satellite_id, members[0].label)
    return 0


def walker_members(count: int, altitude_km: float, inclination_deg: float,
                   first_id: int = 1, name_prefix: str = "SAT") -> List[RemoteSatellite]:
    """Members with no RAAN / phase of their own, to be placed by a ConstellationLayout."""
    inc = math.radians(inclination_deg)
    return [
        RemoteSatellite(
            satellite_id=first_id + i,
            altitude_km=float(altitude_km),
            inclination_rad=inc,
            name=f"{name_prefix} {first_id + i}",
        )
        for i in range(int(count))
    ]
