import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence

import numpy as np

from contactsim.config import settings
from contactsim.engine.timeline import LinkStatistics, freeze, summarize_timeline
from contactsim.errors import ConfigurationError
from contactsim.models.elements import OrbitalElements, TerminalState
from contactsim.physics.body import EARTH, CentralBody
from contactsim.physics.geometry import subpoint
from contactsim.physics.link import LinkTester
from contactsim.physics.propagator import CircularOrbitPropagator

log = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class ContactRun:
    """Result of ContactEngine.run: one timeline, linked to any remote."""
    timeline: np.ndarray
    stats: LinkStatistics
    initial: dict


@dataclass(frozen=True)
class ConstellationRun:
    per_satellite_timelines: Dict[Hashable, np.ndarray]
    per_satellite_stats: Dict[Hashable, LinkStatistics]
    primary_id: Hashable
    primary_timeline: np.ndarray
    primary_stats: LinkStatistics
    combined_timeline: np.ndarray
    combined_stats: LinkStatistics
    beacon_initial: dict
    initial_positions: Dict[Hashable, np.ndarray]
    degenerate_steps: int


def _initial(position) -> dict:
    pos = np.array(position, dtype=float)
    return {"position": pos, "subpoint": subpoint(pos)}


class ContactEngine:
    """
    Steps the horizon, propagates the Beacon and every remote, and classifies
    each (Beacon, remote, step) with the LinkTester.

    Step i covers simulated time t = i * step_seconds * acceleration.
    Acceleration only changes how far the orbits advance per step, it never
    changes how many steps are evaluated.

    The Beacon boresight comes from its velocity by default; pass
    beacon_hint=TerminalState.PLANE_NORMAL to derive it from the plane normal.
    """

    def __init__(self, beacon_half_angle_rad: float, remote_half_angle_rad: float,
                 body: CentralBody = EARTH,
                 checkpoints: int = settings.PROGRESS_CHECKPOINTS,
                 beacon_hint: str = TerminalState.VELOCITY):
        if checkpoints <= 0:
            raise ConfigurationError("checkpoints", "must be > 0")
        self.body = body
        self.tester = LinkTester(beacon_half_angle_rad, remote_half_angle_rad, body=body)
        self.checkpoints = int(checkpoints)
        self.beacon_hint = beacon_hint

    # -------------------------
    # helpers
    # -------------------------
    @staticmethod
    def _check_horizon(step_count, step_seconds, acceleration):
        if step_count < 0:
            raise ConfigurationError("step_count", f"must be >= 0 (got {step_count})")
        if step_seconds <= 0:
            raise ConfigurationError("step_seconds", f"must be > 0 s (got {step_seconds})")
        if acceleration <= 0:
            raise ConfigurationError("acceleration", f"must be > 0 (got {acceleration})")

    def _chunks(self, step_count: int):
        """
        Exactly `checkpoints` windows (k, start, stop) with evenly spaced
        boundaries. Windows may be empty when step_count < checkpoints.
        """
        bounds = np.linspace(0, step_count, self.checkpoints + 1).round().astype(int)
        for k in range(self.checkpoints):
            yield k, int(bounds[k]), int(bounds[k + 1])

    @staticmethod
    def _report(progress: Optional[ProgressCallback], percent: int):
        if progress is None:
            return
        try:
            progress(int(percent))
        except Exception:
            log.warning("Progress callback failed at %d%%; continuing", percent, exc_info=True)

    # -------------------------
    # main run
    # -------------------------
    def run_many(self, beacon: OrbitalElements, remotes: Sequence[OrbitalElements],
                 step_count: int, step_seconds: float,
                 ids: Optional[Sequence[Hashable]] = None,
                 primary_id: Optional[Hashable] = None,
                 acceleration: float = 1.0,
                 progress: Optional[ProgressCallback] = None) -> ConstellationRun:
        """
        One timeline per remote. Cost is O(step_count * len(remotes)).
        primary_id picks the member reported as primary (default: the first).
        """
        self._check_horizon(step_count, step_seconds, acceleration)
        if not remotes:
            raise ConfigurationError("remotes", "at least one remote satellite is required")
        ids: List[Hashable] = list(range(len(remotes))) if ids is None else list(ids)
        if len(ids) != len(remotes):
            raise ConfigurationError("ids", f"expected {len(remotes)} ids (got {len(ids)})")
        if len(set(ids)) != len(ids):
            raise ConfigurationError("ids", "satellite ids must be unique")
        if primary_id is None:
            primary_id = ids[0]
        elif primary_id not in ids:
            raise ConfigurationError("primary_id", f"{primary_id!r} is not a member id")

        log.info(
            "Contact run: %d steps x %.1f s (x%.2f), %d remote(s)",
            step_count, step_seconds, acceleration, len(remotes),
        )

        beacon_prop = CircularOrbitPropagator(beacon, self.body)
        remote_props = [CircularOrbitPropagator(r, self.body) for r in remotes]

        flags = np.zeros((len(remotes), step_count), dtype=bool)
        degenerate = 0
        times = np.arange(step_count, dtype=float) * float(step_seconds) * float(acceleration)

        for k, start, stop in self._chunks(step_count):
            self._report(progress, (k * 100) // self.checkpoints)
            if stop == start:
                continue
            t = times[start:stop]
            beacon_state = beacon_prop.state(t, hint_kind=self.beacon_hint)
            for j, prop in enumerate(remote_props):
                remote_state = prop.state(t, hint_kind=TerminalState.PLANE_NORMAL)
                linked, bad = self.tester.evaluate(beacon_state, remote_state)
                flags[j, start:stop] = linked
                degenerate += int(np.count_nonzero(bad))
        self._report(progress, 100)

        if degenerate:
            log.debug("%d degenerate (beacon, remote, step) evaluations treated as not linked", degenerate)

        per_tl = {sid: freeze(flags[j]) for j, sid in enumerate(ids)}
        per_stats = {sid: summarize_timeline(tl) for sid, tl in per_tl.items()}
        combined = freeze(flags.any(axis=0))
        combined_stats = summarize_timeline(combined)

        snapshot = {sid: prop.position(0.0) for sid, prop in zip(ids, remote_props)}

        log.info(
            "Contact run done: primary %s -> %d handshakes, %d outages; any member -> %d handshakes",
            primary_id, per_stats[primary_id].handshake_count, per_stats[primary_id].outage_count,
            combined_stats.handshake_count,
        )

        return ConstellationRun(
            per_satellite_timelines=per_tl,
            per_satellite_stats=per_stats,
            primary_id=primary_id,
            primary_timeline=per_tl[primary_id],
            primary_stats=per_stats[primary_id],
            combined_timeline=combined,
            combined_stats=combined_stats,
            beacon_initial=_initial(beacon_prop.position(0.0)),
            initial_positions=snapshot,
            degenerate_steps=degenerate,
        )

    def run(self, beacon: OrbitalElements, remotes: Sequence[OrbitalElements],
            step_count: int, step_seconds: float, acceleration: float = 1.0,
            progress: Optional[ProgressCallback] = None) -> ContactRun:
        """A step is in contact when the Beacon links with any remote."""
        many = self.run_many(
            beacon, remotes, step_count, step_seconds,
            acceleration=acceleration, progress=progress,
        )
        first = next(iter(many.initial_positions.values()))
        return ContactRun(
            timeline=many.combined_timeline,
            stats=many.combined_stats,
            initial={"beacon": many.beacon_initial, "remote": _initial(first)},
        )


def run(beacon: OrbitalElements, remotes: Sequence[OrbitalElements], step_count: int,
        step_seconds: float, beacon_half_angle_rad: float, remote_half_angle_rad: float,
        body: CentralBody = EARTH, acceleration: float = 1.0,
        progress: Optional[ProgressCallback] = None) -> ContactRun:
    engine = ContactEngine(beacon_half_angle_rad, remote_half_angle_rad, body=body)
    return engine.run(beacon, remotes, step_count, step_seconds, acceleration=acceleration, progress=progress)


def run_many(beacon: OrbitalElements, remotes: Sequence[OrbitalElements], step_count: int,
             step_seconds: float, beacon_half_angle_rad: float, remote_half_angle_rad: float,
             ids: Optional[Sequence[Hashable]] = None, primary_id: Optional[Hashable] = None,
             body: CentralBody = EARTH, acceleration: float = 1.0,
             progress: Optional[ProgressCallback] = None) -> ConstellationRun:
    engine = ContactEngine(beacon_half_angle_rad, remote_half_angle_rad, body=body)
    return engine.run_many(
        beacon, remotes, step_count, step_seconds, ids=ids, primary_id=primary_id,
        acceleration=acceleration, progress=progress,
    )
