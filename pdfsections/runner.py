from __future__ import annotations

# pdfsections/runner.py

import logging
import threading
from dataclasses import replace
from typing import Callable, Optional, Sequence, Tuple

from pdfsections.assembler import Progress, assemble
from pdfsections.flatten import Flattener
from pdfsections.layout import LayoutConfig
from pdfsections.sections import Section

logger = logging.getLogger(__name__)


def _call_now(func, *args):
    func(*args)


class AssemblyRunner:
    """
    Runs assemblies one at a time on a background thread.

    Each ``request`` snapshots its inputs and gets a new generation number.
    A request made while a run is in flight is parked (newer requests replace
    older parked ones) and started once the current run ends. Results and
    progress from a run that is no longer the newest are dropped, including
    callbacks already dispatched but not yet executed. ``invalidate`` makes
    the current run stale without queueing another.

    ``dispatch(func, *args)`` is how callbacks reach the caller's thread;
    a Tk app passes ``lambda f, *a: root.after(0, f, *a)``.
    """

    def __init__(
        self,
        on_result: Callable[[bytes], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        on_progress: Optional[Callable[[Progress], None]] = None,
        dispatch: Callable = _call_now,
        flattener: Optional[Flattener] = None,
        assemble_func: Callable = assemble,
    ):
        self.on_result = on_result
        self.on_error = on_error
        self.on_progress = on_progress
        self.dispatch = dispatch
        self.flattener = flattener
        self.assemble_func = assemble_func

        self._lock = threading.Lock()
        self._generation = 0
        self._worker: Optional[threading.Thread] = None
        self._pending: Optional[Tuple[int, Tuple[Section, ...], LayoutConfig]] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._worker is not None

    def request(self, sections: Sequence[Section], config: LayoutConfig) -> int:
        """Queue an assembly of *sections* and return its generation."""
        snapshot = tuple(replace(section) for section in sections)
        with self._lock:
            self._generation += 1
            job = (self._generation, snapshot, config)
            if self._worker is not None:
                self._pending = job
                return job[0]
            self._start(job)
        return job[0]

    def invalidate(self) -> None:
        """Make every queued or running request stale without starting a new one."""
        with self._lock:
            self._generation += 1
            self._pending = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no run is active. Returns False on timeout."""
        while True:
            with self._lock:
                worker = self._worker
            if worker is None:
                return True
            worker.join(timeout)
            if worker.is_alive():
                return False

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _start(self, job) -> None:
        # Caller holds the lock
        self._worker = threading.Thread(target=self._run, args=(job,), daemon=True)
        self._worker.start()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _deliver(self, generation: int, func: Callable, *args) -> None:
        # Re-checked when it runs on the receiving thread
        def deliver():
            if self._is_current(generation):
                func(*args)
            else:
                logger.debug("Dropping callback of stale run %d", generation)
        self.dispatch(deliver)

    def _run(self, job) -> None:
        generation, sections, config = job

        def progress(event: Progress):
            if self.on_progress and self._is_current(generation):
                self._deliver(generation, self.on_progress, event)

        try:
            data = self.assemble_func(
                sections, config, flattener=self.flattener, progress=progress
            )
        except Exception as e:
            if self._is_current(generation):
                logger.error("Assembly failed: %s", e)
                if self.on_error:
                    self._deliver(generation, self.on_error, e)
            else:
                logger.debug("Ignoring failure of stale run %d: %s", generation, e)
        else:
            if self._is_current(generation):
                self._deliver(generation, self.on_result, data)
            else:
                logger.debug("Discarding stale result of run %d", generation)
        finally:
            if self.on_progress and self._is_current(generation):
                self._deliver(generation, self.on_progress, Progress(0, 0))
            with self._lock:
                self._worker = None
                pending, self._pending = self._pending, None
                if pending is not None:
                    self._start(pending)
