from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from contactsim.config import settings
from contactsim.models.elements import RemoteSatellite

BeaconMode = Literal["sun-synchronous", "non-polar", "custom"]
BEACON_MODES = ("sun-synchronous", "non-polar", "custom")


@dataclass(frozen=True)
class BeaconConfig:
    mode: BeaconMode = "sun-synchronous"
    altitude_km: float = settings.DEFAULT_BEACON_ALTITUDE_KM
    inclination_deg: float = settings.DEFAULT_BEACON_INCLINATION_DEG  # ignored for sun-synchronous
    local_solar_time_hours: Optional[float] = None
    antenna_half_angle_deg: float = settings.BEACON_HALF_ANGLE_DEG


@dataclass(frozen=True)
class RemoteConfig:
    satellite_id: int = settings.DEFAULT_REMOTE_ID
    altitude_km: float = settings.DEFAULT_REMOTE_ALTITUDE_KM
    inclination_deg: float = settings.DEFAULT_REMOTE_INCLINATION_DEG
    antenna_half_angle_deg: float = settings.REMOTE_HALF_ANGLE_DEG
    show_all: bool = False
    members: List[RemoteSatellite] = field(default_factory=list)


@dataclass(frozen=True)
class Horizon:
    duration_seconds: float = settings.DURATION_SECONDS
    step_seconds: float = settings.STEP_SECONDS
    # presentation speed-up: scales simulated time per step, see ContactEngine
    acceleration: float = settings.TIME_ACCELERATION

    @property
    def step_count(self) -> int:
        return settings.horizon_steps(self.duration_seconds, self.step_seconds)


@dataclass(frozen=True)
class SimulationParams:
    beacon: BeaconConfig = field(default_factory=BeaconConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    horizon: Horizon = field(default_factory=Horizon)
