from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np


@dataclass(frozen=True)
class LinkStatistics:
    total_contact_steps: int
    handshake_count: int
    total_outage_steps: int
    outage_count: int
    avg_outage_steps: float

    def in_seconds(self, step_seconds: float) -> dict:
        return {
            "total_contact_s": self.total_contact_steps * step_seconds,
            "total_outage_s": self.total_outage_steps * step_seconds,
            "avg_outage_s": self.avg_outage_steps * step_seconds,
        }

    def to_dict(self) -> dict:
        return asdict(self)


def freeze(timeline) -> np.ndarray:
    """Read-only boolean copy of a contact timeline."""
    arr = np.array(timeline, dtype=bool).reshape(-1)
    arr.flags.writeable = False
    return arr


def summarize_timeline(timeline) -> LinkStatistics:
    """
    Reduce a per-step contact timeline.
      handshake: false -> true at i >= 1 (a timeline that opens in contact has no handshake at 0)
      outage:    maximal run of false, counted at its first step (including i = 0)
    """
    flags = np.asarray(timeline, dtype=bool).reshape(-1)
    n = flags.size
    if n == 0:
        return LinkStatistics(0, 0, 0, 0, 0.0)

    prev = flags[:-1]
    cur = flags[1:]
    handshakes = int(np.count_nonzero(~prev & cur))
    outages = int(np.count_nonzero(prev & ~cur)) + int(not flags[0])

    outage_steps = int(n - np.count_nonzero(flags))
    avg = outage_steps / outages if outages > 0 else 0.0

    return LinkStatistics(
        total_contact_steps=n - outage_steps,
        handshake_count=handshakes,
        total_outage_steps=outage_steps,
        outage_count=outages,
        avg_outage_steps=float(avg),
    )
