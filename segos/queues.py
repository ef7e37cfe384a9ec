"""Process control blocks and the scheduling queues that hold them."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from .mmu import Segment
from .registers import Registers

log = logging.getLogger(__name__)


class ProcessState(Enum):
    """Life-cycle states of a process."""

    NEW = "NEW"
    READY = "READY"
    EXEC = "EXEC"
    BLOCKED = "BLOCKED"
    EXIT = "EXIT"


def log_state_change(pid: int, old: ProcessState, new: ProcessState) -> None:
    """Log a process moving from one state to another."""
    log.info("PID: %d - Cambio de estado %s -> %s", pid, old.value, new.value)


@dataclass(eq=False)
class Pcb:
    """Process control block."""

    pid: int
    instructions: list[str] = field(default_factory=list)
    burst_estimate: float = 0
    state: ProcessState = ProcessState.NEW
    program_counter: int = 0
    registers: Registers = field(default_factory=Registers)
    segments: list[Segment] = field(default_factory=list)
    files: list[Any] = field(default_factory=list)
    resources: list[Any] = field(default_factory=list)
    ready_since: int = 0
    cpu_arrival: int = 0


class ProcessQueue:
    """A thread-safe queue of processes in one state."""

    def __init__(self, name: str, algorithm: str = "") -> None:
        self.name = name
        self.algorithm = algorithm
        self._pcbs: list[Pcb] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pcbs)

    def __iter__(self) -> Iterator[Pcb]:
        with self._lock:
            return iter(list(self._pcbs))

    def __contains__(self, pcb: object) -> bool:
        with self._lock:
            return any(entry is pcb for entry in self._pcbs)

    def add(self, pcb: Pcb, state: ProcessState) -> None:
        """Append ``pcb`` to the queue, moving it into ``state``."""
        with self._lock:
            if pcb.state is not state:
                log_state_change(pcb.pid, pcb.state, state)
            pcb.state = state
            self._pcbs.append(pcb)
            if self.name == "READY":
                log.info("Cola Ready %s : %s", self.algorithm, self.describe())

    def pop(self, index: int = 0) -> Pcb:
        """Remove and return the process at ``index``; IndexError if there is none."""
        with self._lock:
            if not self._pcbs:
                raise IndexError(f"{self.name} queue is empty")
            return self._pcbs.pop(index)

    def remove(self, pcb: Pcb) -> bool:
        """Remove ``pcb`` if it is queued; tell whether it was."""
        with self._lock:
            for index, entry in enumerate(self._pcbs):
                if entry is pcb:
                    del self._pcbs[index]
                    return True
            return False

    def pids(self) -> list[int]:
        """Return the pids of the queued processes, in order."""
        with self._lock:
            return [pcb.pid for pcb in self._pcbs]

    def describe(self) -> str:
        """Return the queued pids as ``[1, 2, 3]``."""
        return "[" + ", ".join(str(pid) for pid in self.pids()) + "]"