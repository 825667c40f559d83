"""
Background execution harness: runs a simulation in a separate process so the
caller's interactive surface stays responsive.

Messages from the child process are (kind, payload) tuples:
    ("progress", percent) | ("result", SimulationResult) | ("error", message)
Abort terminates the process; the engine itself holds nothing to clean up.
"""
from __future__ import annotations

import logging
import multiprocessing
import queue as queue_mod
import time
from typing import Callable, Optional

import numpy as np

from contactsim.engine.constellation import ConstellationLayout
from contactsim.models.params import SimulationParams
from contactsim.simulation.runner import SimulationResult, run_simulation

log = logging.getLogger(__name__)


def _worker_main(out_q, params: SimulationParams, layout: Optional[ConstellationLayout], seed: Optional[int]):
    rng = np.random.default_rng(seed) if seed is not None else None
    try:
        result = run_simulation(
            params,
            progress=lambda pct: out_q.put(("progress", pct)),
            layout=layout,
            rng=rng,
        )
        out_q.put(("result", result))
    except Exception as e:
        out_q.put(("error", f"{type(e).__name__}: {e}"))


class SimulationWorker:
    def __init__(self, context=None):
        self._ctx = context or multiprocessing.get_context()
        self._process = None
        self._queue = None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.is_alive()

    def start(self, params: SimulationParams, layout: Optional[ConstellationLayout] = None,
              seed: Optional[int] = None) -> None:
        if self._process is not None:
            raise RuntimeError("A simulation is already running")
        self._queue = self._ctx.Queue()
        self._process = self._ctx.Process(
            target=_worker_main,
            args=(self._queue, params, layout, seed),
            daemon=True,
        )
        self._process.start()
        log.info("Simulation worker started (pid=%s)", self._process.pid)

    def wait(self, timeout: Optional[float] = None,
             on_progress: Optional[Callable[[int], None]] = None) -> SimulationResult:
        """
        Block until the child reports a result. Progress messages are
        forwarded to on_progress. Raises RuntimeError on worker error,
        premature exit or timeout (the worker is aborted on timeout).
        """
        if self._process is None:
            raise RuntimeError("No simulation has been started")

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if deadline is not None and time.monotonic() > deadline:
                self.abort()
                raise RuntimeError(f"Simulation did not finish within {timeout} s")
            try:
                kind, payload = self._queue.get(timeout=0.1)
            except queue_mod.Empty:
                if not self._process.is_alive():
                    # one last drain: the child may have exited right after putting its message
                    try:
                        kind, payload = self._queue.get(timeout=0.5)
                    except queue_mod.Empty:
                        code = self._process.exitcode
                        self._reset()
                        raise RuntimeError(f"Worker exited without a result (exit code {code})")
                else:
                    continue

            if kind == "progress":
                log.debug("Simulation progress: %s%%", payload)
                if on_progress is not None:
                    on_progress(payload)
            elif kind == "result":
                self._finish()
                return payload
            elif kind == "error":
                self._finish()
                raise RuntimeError(payload)

    def abort(self) -> None:
        if self._process is None:
            return
        if self._process.is_alive():
            self._process.terminate()
            log.info("Simulation worker aborted")
        self._finish()

    def _finish(self):
        if self._process is not None:
            self._process.join(timeout=5)
        self._reset()

    def _reset(self):
        self._process = None
        self._queue = None
