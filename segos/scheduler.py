"""Short and long term scheduling of processes: FIFO or HRRN over the ready queue."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from .queues import Pcb, ProcessQueue, ProcessState, log_state_change

log = logging.getLogger(__name__)


def _milliseconds() -> int:
    return int(time.time() * 1000)


class Scheduler:
    """Admits new processes up to the multiprogramming limit and picks who runs next.

    ``processes`` holds every admitted process; its length is the degree of
    multiprogramming in use. Removing a finished process from it and calling
    :meth:`admit` lets the next waiting process in.
    """

    def __init__(
        self,
        algorithm: str = "FIFO",
        hrrn_alpha: float = 0.5,
        initial_estimate: int = 0,
        max_multiprogramming: int = 1,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.algorithm = algorithm
        self.hrrn_alpha = hrrn_alpha
        self.initial_estimate = initial_estimate
        self.max_multiprogramming = max_multiprogramming
        self.clock = clock if clock is not None else _milliseconds
        self.new = ProcessQueue("NEW", algorithm)
        self.ready = ProcessQueue("READY", algorithm)
        self.processes: list[Pcb] = []

    def admit(self, pcb: Pcb | None = None) -> list[Pcb]:
        """Queue ``pcb`` in NEW, then move waiting processes to READY while slots remain.

        Returns the processes that were moved to READY by this call.
        """
        if pcb is not None:
            log.info("Se crea el proceso %d en NEW", pcb.pid)
            self.new.add(pcb, ProcessState.NEW)
        admitted = []
        while len(self.processes) < self.max_multiprogramming and len(self.new):
            waiting = self.new.pop(0)
            self.processes.append(waiting)
            self.send_to_ready(waiting, self.clock())
            admitted.append(waiting)
        return admitted

    def send_to_ready(self, pcb: Pcb, now: int) -> None:
        """Put ``pcb`` at the end of the ready queue, arriving at time ``now``."""
        self.ready.add(pcb, ProcessState.READY)
        pcb.ready_since = now

    def pick_hrrn(self, now: int) -> Pcb:
        """Remove and return the ready process with the highest response ratio.

        Ties go to the process that has been in the queue longest.
        """
        candidates = list(self.ready)
        if not candidates:
            raise IndexError("READY queue is empty")
        best_index = 0
        best_ratio = 0.0
        for index, pcb in enumerate(candidates):
            waited = now - pcb.ready_since
            if pcb.burst_estimate:
                ratio = (pcb.burst_estimate + waited) / pcb.burst_estimate
            elif waited > 0:
                ratio = math.inf
            else:
                continue
            if ratio > best_ratio:
                best_ratio = ratio
                best_index = index
        chosen = candidates[best_index]
        self.ready.remove(chosen)
        return chosen

    def pick_next(self, now: int) -> Pcb:
        """Choose the next process to run, move it to EXEC and stamp its CPU arrival."""
        if self.algorithm == "FIFO":
            pcb = self.ready.pop(0)
        else:
            pcb = self.pick_hrrn(now)
        log_state_change(pcb.pid, pcb.state, ProcessState.EXEC)
        pcb.state = ProcessState.EXEC
        pcb.cpu_arrival = now
        return pcb

    def estimate_burst(self, pcb: Pcb, now: int) -> int:
        """Update the process's next-burst estimate from the burst that ends at ``now``."""
        elapsed = now - pcb.cpu_arrival
        estimate = (1 - self.hrrn_alpha) * pcb.burst_estimate + self.hrrn_alpha * elapsed
        pcb.burst_estimate = int(estimate)
        return pcb.burst_estimate