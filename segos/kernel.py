"""The kernel: reacts to the reasons a process leaves the CPU.

It serves resource waits and signals, the per-process file table, I/O,
file-system requests and segment management, and ends processes.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable, Protocol

from .instructions import Opcode, parse_instruction
from .mmu import Segment
from .openfiles import OpenFile, OpenFileTable, process_file
from .queues import Pcb, ProcessState, log_state_change
from .resources import Resource, find_resource
from .scheduler import Scheduler

log = logging.getLogger(__name__)


class FileSystemPort(Protocol):
    """The connection to the file system module."""

    def request(self, message: str) -> str:
        """Send ``message`` and return the file system's reply."""


class MemoryPort(Protocol):
    """The connection to the memory module."""

    def request(self, message: str) -> str:
        """Send ``message`` and return memory's text reply."""

    def send(self, message: str) -> None:
        """Send ``message`` without waiting for a reply."""

    def receive_table(self) -> tuple[int, list[Segment]]:
        """Receive a process's segment table as ``(pid, segments)``."""


def _start_thread(task: Callable[[], None]) -> None:
    threading.Thread(target=task, daemon=True).start()


class Kernel:
    """Handles the context a process hands back and decides what happens next."""

    def __init__(
        self,
        scheduler: Scheduler,
        resources: Iterable[Resource],
        filesystem: FileSystemPort,
        memory: MemoryPort,
        spawn: Callable[[Callable[[], None]], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        on_exit: Callable[[Pcb, str], None] | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.resources = list(resources)
        self.filesystem = filesystem
        self.memory = memory
        self.open_files = OpenFileTable()
        self.spawn = spawn if spawn is not None else _start_thread
        self.sleep = sleep
        self.on_exit = on_exit
        self.filesystem_busy = False
        self._filesystem_lock = threading.RLock()
        self._memory_lock = threading.RLock()

    # -- dispatch ------------------------------------------------------------

    def handle_reason(self, pcb: Pcb, reason: str, now: int) -> bool:
        """Act on the reason ``pcb`` left the CPU.

        Returns True when the same process goes straight back to the CPU.
        """
        try:
            instruction = parse_instruction(reason)
        except ValueError:
            return False
        opcode = instruction.opcode
        params = instruction.params

        if opcode is Opcode.WAIT:
            return self.wait(pcb, params[0], now)
        if opcode is Opcode.SIGNAL:
            return self.signal(pcb, params[0], now)
        if opcode is Opcode.YIELD:
            self.scheduler.estimate_burst(pcb, now)
            self.scheduler.send_to_ready(pcb, now)
            return False
        if opcode is Opcode.EXIT:
            self.finish(pcb, "SUCCESS")
            return False
        if opcode is Opcode.I_O:
            self._io(pcb, int(params[0]), now)
            return False
        if opcode is Opcode.F_OPEN:
            return self.open_file(pcb, params[0], now)
        if opcode is Opcode.F_CLOSE:
            return self.close_file(pcb, params[0], now)
        if opcode is Opcode.F_SEEK:
            return self.seek(pcb, params[0], int(params[1]))
        if opcode in (Opcode.F_READ, Opcode.F_WRITE):
            open_file = self._process_file(pcb, params[0])
            action = "Leer" if opcode is Opcode.F_READ else "Escribir"
            log.info(
                "PID: %d - %s Archivo: %s - Puntero: %d - Direccion Memoria: %s - Tamaño: %s",
                pcb.pid,
                action,
                params[0],
                open_file.pointer,
                params[1],
                params[2],
            )
            self._filesystem_action(pcb, f"{reason} {open_file.pointer}", params[0])
            return False
        if opcode is Opcode.F_TRUNCATE:
            self.scheduler.estimate_burst(pcb, now)
            log.info(
                "PID: %d - Truncar Archivo: %s - Tamaño: %s", pcb.pid, params[0], params[1]
            )
            self._filesystem_action(pcb, reason, params[0])
            return False
        if opcode is Opcode.CREATE_SEGMENT:
            return self._create_segment(pcb, reason, params)
        if opcode is Opcode.DELETE_SEGMENT:
            self._delete_segment(pcb, reason, params[0])
            return True
        if opcode in (Opcode.MOV_IN, Opcode.MOV_OUT):
            self.finish(pcb, "SEG_FAULT")
            return False
        return False

    # -- resources -------------------------------------------------------------

    def wait(self, pcb: Pcb, name: str, now: int) -> bool:
        """Take an instance of resource ``name``; True if the process keeps running."""
        resource = find_resource(self.resources, name)
        if resource is None:
            log.error("Finaliza el proceso PID: %d - Motivo: WAIT - %s ", pcb.pid, name)
            self.finish(pcb, "INVALID_RESOURCE")
            return False
        if resource.acquire(pcb):
            return True
        self.scheduler.estimate_burst(pcb, now)
        return False

    def signal(self, pcb: Pcb, name: str, now: int) -> bool:
        """Give back an instance of resource ``name``; True if the process keeps running."""
        resource = find_resource(self.resources, name)
        if resource is None:
            log.error("Finaliza el proceso PID: %d - Motivo: SIGNAL - %s ", pcb.pid, name)
            self.finish(pcb, "INVALID_RESOURCE")
            return False
        woken = resource.release(pcb)
        if woken is not None:
            self.scheduler.send_to_ready(woken, now)
        return True

    # -- files -------------------------------------------------------------------

    def _process_file(self, pcb: Pcb, name: str) -> OpenFile:
        open_file = process_file(pcb.files, name)
        if open_file is None:
            raise KeyError(f"process {pcb.pid} has no open file {name}")
        return open_file

    def open_file(self, pcb: Pcb, name: str, now: int) -> bool:
        """Open ``name`` for the process, creating it if needed.

        A file already open elsewhere blocks the process; returns True when it
        keeps running.
        """
        log.info("PID: %d - Abrir Archivo: %s", pcb.pid, name)
        open_file = self.open_files.find(name)
        if open_file is not None:
            self.scheduler.estimate_burst(pcb, now)
            open_file.blocked.append(pcb)
            log_state_change(pcb.pid, pcb.state, ProcessState.BLOCKED)
            log.info("PID: %d - Bloqueado por: %s", pcb.pid, open_file.name)
            pcb.state = ProcessState.BLOCKED
            pcb.files.append(open_file)
            return False
        with self._filesystem_lock:
            reply = self.filesystem.request(f"F_OPEN {name}")
            if reply.lower() != "ok":
                self.filesystem.request(f"F_CREATE {name}")
        open_file = self.open_files.open(name)
        pcb.files.append(open_file)
        return True

    def close_file(self, pcb: Pcb, name: str, now: int) -> bool:
        """Close the process's file ``name``, waking the next process waiting on it."""
        open_file = process_file(pcb.files, name)
        if open_file is None:
            return True
        log.info("PID: %d - Cerrar Archivo: %s", pcb.pid, open_file.name)
        for index, entry in enumerate(pcb.files):
            if entry is open_file:
                del pcb.files[index]
                break
        open_file.pointer = 0
        if not open_file.blocked:
            if open_file in self.open_files:
                self.open_files.remove(open_file)
        else:
            self.scheduler.send_to_ready(open_file.blocked.pop(0), now)
        return True

    def seek(self, pcb: Pcb, name: str, pointer: int) -> bool:
        """Move the seek pointer of the process's file ``name``."""
        log.info(
            "PID: %d - Actualizar puntero Archivo: %s -> %d", pcb.pid, name, pointer
        )
        self._process_file(pcb, name).pointer = pointer
        return True

    def _filesystem_action(self, pcb: Pcb, message: str, name: str) -> None:
        def task() -> None:
            with self._filesystem_lock:
                self.filesystem_busy = True
                log_state_change(pcb.pid, pcb.state, ProcessState.BLOCKED)
                log.info("PID: %d - Bloqueado por: %s", pcb.pid, name)
                pcb.state = ProcessState.BLOCKED
                self.filesystem.request(message)
                self.filesystem_busy = False
            self.scheduler.send_to_ready(pcb, self.scheduler.clock())

        self.spawn(task)

    # -- I/O ------------------------------------------------------------------------

    def _io(self, pcb: Pcb, duration: int, now: int) -> None:
        self.scheduler.estimate_burst(pcb, now)
        log.info("PID: %d - Ejecuta IO: %d", pcb.pid, duration)
        log_state_change(pcb.pid, pcb.state, ProcessState.BLOCKED)
        log.info("PID: %d - Bloqueado por: %s", pcb.pid, "IO")
        pcb.state = ProcessState.BLOCKED

        def task() -> None:
            self.sleep(duration)
            self.scheduler.send_to_ready(pcb, self.scheduler.clock())

        self.spawn(task)

    # -- segments ------------------------------------------------------------------

    def _create_segment(self, pcb: Pcb, reason: str, params: tuple[str, ...]) -> bool:
        if params[0] == "OUT_OF_MEMORY":
            log.error(
                "Finaliza el proceso PID: %d - Motivo: SEGMENTO MAYOR AL PERMITIDO", pcb.pid
            )
            self.finish(pcb, "OUT_OF_MEMORY")
            return False
        log.info(
            "PID: %d - Crear Segmento - ID: %s - Tamaño: %s", pcb.pid, params[0], params[1]
        )
        message = f"{reason} {pcb.pid}"
        with self._memory_lock:
            reply = self.memory.request(message)
            return self._memory_reply(pcb, reply, message)

    def _memory_reply(self, pcb: Pcb, reply: str, request: str) -> bool:
        words = reply.split()
        code = words[0] if words else ""
        if code == Opcode.OUT.value:
            log.error("Finaliza el proceso PID: %d - Motivo: OUT OF MEMORY", pcb.pid)
            self._terminate(pcb, "OUT OF MEMORY", notify_memory=False)
            return False
        if code == Opcode.SEGMENT.value:
            requested = request.split()
            segment_id, size = int(requested[1]), int(requested[2])
            base = int(words[1], 16)
            segment = Segment(base, base + size)
            if segment_id < len(pcb.segments):
                pcb.segments[segment_id] = segment
            else:
                pcb.segments.extend(
                    Segment(0, 0) for _ in range(segment_id - len(pcb.segments))
                )
                pcb.segments.append(segment)
            return True
        if code == Opcode.COMPACT.value:
            self._compact()
            return self._memory_reply(pcb, self.memory.request(request), request)
        return False

    def _compact(self) -> None:
        if self.filesystem_busy:
            log.info("Compactacion: Esperando Fin de Operaciones de FS")
        with self._filesystem_lock:
            log.info("Compactacion: Se solicito compactacion")
            self.memory.send("COMPACT")
            processes = list(self.scheduler.processes)
            for _ in processes:
                pid, segments = self.memory.receive_table()
                owner = next((pcb for pcb in processes if pcb.pid == pid), None)
                if owner is not None:
                    owner.segments = segments
            log.info("Se finalizo el proceso de compactacion")

    def _delete_segment(self, pcb: Pcb, reason: str, segment_id: str) -> None:
        log.info(
            "PID: %d - Eliminar Segmento - Id segmento: %s", pcb.pid, segment_id
        )
        with self._memory_lock:
            self.memory.send(f"{reason} {pcb.pid}")
            _, segments = self.memory.receive_table()
        pcb.segments = segments

    # -- process life ----------------------------------------------------------------

    def _admit(self) -> None:
        for admitted in self.scheduler.admit():
            with self._memory_lock:
                self.memory.send(f"INICIAR {admitted.pid}")
                _, segments = self.memory.receive_table()
            admitted.segments = segments

    def finish(self, pcb: Pcb, reason: str) -> None:
        """End the process, releasing its resources, files and memory."""
        self._terminate(pcb, reason, notify_memory=True)

    def _terminate(self, pcb: Pcb, reason: str, notify_memory: bool) -> None:
        log_state_change(pcb.pid, pcb.state, ProcessState.EXIT)
        pcb.state = ProcessState.EXIT
        if notify_memory:
            with self._memory_lock:
                self.memory.send(f"FINALIZAR {pcb.pid}")
        log.info("Finaliza el proceso PID: %d - Motivo: %s ", pcb.pid, reason)
        if self.on_exit is not None:
            self.on_exit(pcb, reason)
        now = self.scheduler.clock()
        for resource in list(pcb.resources):
            woken = resource.release(pcb)
            if woken is not None:
                self.scheduler.send_to_ready(woken, now)
        for open_file in list(pcb.files):
            self.close_file(pcb, open_file.name, now)
        self.scheduler.processes[:] = [
            process for process in self.scheduler.processes if process is not pcb
        ]
        self.scheduler.ready.remove(pcb)
        self._admit()