"""Counting resources that processes wait on and signal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .queues import Pcb, ProcessState, log_state_change

log = logging.getLogger(__name__)


@dataclass(eq=False)
class Resource:
    """A named resource with a count of free instances and a queue of waiters."""

    name: str
    instances: int
    blocked: list[Pcb] = field(default_factory=list)

    def acquire(self, pcb: Pcb) -> bool:
        """Take one instance for ``pcb``.

        Returns True when the process may keep running, False when it was
        blocked waiting for the resource.
        """
        self.instances -= 1
        pcb.resources.append(self)
        log.info(
            "PID: %d - Wait: %s - Instancias: %d", pcb.pid, self.name, self.instances
        )
        if self.instances < 0:
            self.blocked.append(pcb)
            log_state_change(pcb.pid, pcb.state, ProcessState.BLOCKED)
            log.info("PID: %d - Bloqueado por: %s", pcb.pid, self.name)
            pcb.state = ProcessState.BLOCKED
            return False
        return True

    def release(self, pcb: Pcb) -> Pcb | None:
        """Give back one instance held by ``pcb``.

        Returns the process that was unblocked by it, if any.
        """
        self.instances += 1
        for index, held in enumerate(pcb.resources):
            if held is self:
                del pcb.resources[index]
                break
        log.info(
            "PID: %d - Signal: %s - Instancias: %d", pcb.pid, self.name, self.instances
        )
        if not self.blocked:
            return None
        woken = self.blocked.pop(0)
        log.info("PID: %d - Desbloqueado por: %s", woken.pid, self.name)
        return woken


def build_resources(names: Iterable[str], instances: Iterable[int | str]) -> list[Resource]:
    """Create one resource per name with the matching instance count."""
    names = list(names)
    counts = [int(count) for count in instances]
    if len(counts) < len(names):
        raise ValueError("fewer instance counts than resources")
    return [Resource(name, count) for name, count in zip(names, counts)]


def find_resource(resources: Iterable[Resource], name: str) -> Resource | None:
    """Return the resource called ``name`` (any case), or None."""
    wanted = name.lower()
    return next((res for res in resources if res.name.lower() == wanted), None)