"""The CPU's instruction cycle: fetch, decode and execute a process's program."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Protocol

from .filesystem import MemoryLink
from .instructions import Instruction, Opcode, parse_instruction
from .mmu import Mmu, Segment
from .registers import Registers, register_size

log = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class KernelLink(Protocol):
    """The connection back to the kernel."""

    def return_context(self, context: "ExecutionContext", reason: str) -> None:
        """Hand the execution context back with the reason it stopped."""


@dataclass(eq=False)
class ExecutionContext:
    """What the CPU needs to run a process: its program, counter, registers and segments."""

    pid: int
    instructions: list[str] = field(default_factory=list)
    program_counter: int = 0
    registers: Registers = field(default_factory=Registers)
    segments: list[Segment] = field(default_factory=list)


# Instructions that simply hand the context back naming their parameters.
_ONE_PARAM = {
    Opcode.I_O,
    Opcode.F_OPEN,
    Opcode.F_CLOSE,
    Opcode.WAIT,
    Opcode.SIGNAL,
    Opcode.DELETE_SEGMENT,
}
_TWO_PARAMS = {Opcode.F_SEEK, Opcode.F_TRUNCATE}


class Cpu:
    """Runs execution contexts, talking to memory and returning them to the kernel."""

    def __init__(
        self,
        kernel: KernelLink,
        memory: MemoryLink,
        max_segment_size: int,
        instruction_delay: int = 0,
    ) -> None:
        self.kernel = kernel
        self.memory = memory
        self.max_segment_size = max_segment_size
        self.instruction_delay = instruction_delay

    def _mmu(self, context: ExecutionContext) -> Mmu:
        return Mmu(self.max_segment_size, context.segments)

    def _return(self, context: ExecutionContext, reason: str) -> None:
        log.debug("enviando a kernel: %s", reason)
        self.kernel.return_context(context, reason)

    def fetch(self, context: ExecutionContext) -> Instruction:
        """Parse the instruction at the program counter and advance the counter."""
        if not 0 <= context.program_counter < len(context.instructions):
            raise IndexError(
                f"program counter {context.program_counter} is outside the program"
            )
        instruction = parse_instruction(context.instructions[context.program_counter])
        context.program_counter += 1
        return instruction

    def execute(self, context: ExecutionContext, instruction: Instruction) -> bool:
        """Execute one instruction.

        Returns True when the process keeps the CPU, False once its context
        has been handed back to the kernel (or the instruction was invalid).
        """
        opcode = instruction.opcode
        params = instruction.params
        log.info("PID: %d - Ejecutando: %s", context.pid, instruction)
        mmu = self._mmu(context)

        if opcode is Opcode.SET:
            time.sleep(self.instruction_delay / 1000)
            context.registers.put(params[0], params[1])
            return True

        if opcode is Opcode.MOV_IN:
            register, address = params[0], _atoi(params[1])
            if not mmu.is_access_valid(register, address):
                log.info(
                    "PID: %d - Error SEG_FAULT - Segmento: - Offset: - Tamaño: ",
                    context.pid,
                )
                self._return(context, "MOV_IN SEG_FAULT")
                return False
            physical = mmu.physical_address(address)
            size = register_size(register)
            log.info(
                "PID: %d - Accion: LEER - Direccion Fisica: %#x - Tamaño:%d - Origen: CPU",
                context.pid,
                physical,
                size,
            )
            value = self.memory.request(f"MOV_IN {physical:#x} {size}")
            context.registers.put(register, value)
            log.debug("%s", context.registers.dump())
            return True

        if opcode is Opcode.MOV_OUT:
            address, register = _atoi(params[0]), params[1]
            if not mmu.is_access_valid(register, address):
                log.info(
                    "PID: %d - Error SEG_FAULT - Segmento: - Offset: - Tamaño: ",
                    context.pid,
                )
                self._return(context, "MOV_OUT SEG_FAULT")
                return False
            physical = mmu.physical_address(address)
            size = register_size(register)
            value = context.registers.get(register)[:size]
            log.info(
                "PID: %d - Accion: ESCRIBIR - Direccion Fisica: %#x - Tamaño: %d - Origen: CPU",
                context.pid,
                physical,
                size,
            )
            self.memory.send(f"MOV_OUT {physical:#x} {value} {size}")
            return True

        if opcode in _ONE_PARAM:
            self._return(context, f"{opcode.value} {params[0]}")
            return False

        if opcode in _TWO_PARAMS:
            self._return(context, f"{opcode.value} {params[0]} {params[1]}")
            return False

        if opcode in (Opcode.F_READ, Opcode.F_WRITE):
            physical = mmu.physical_address(_atoi(params[1]))
            size = _atoi(params[2])
            self._return(context, f"{opcode.value} {params[0]} {physical:#x} {size}")
            return False

        if opcode is Opcode.CREATE_SEGMENT:
            if _atoi(params[1]) > self.max_segment_size:
                log.info(
                    "PID: %d - Error OUT_OF_MEMORY - Segmento: - Offset: - Tamaño: ",
                    context.pid,
                )
                self._return(context, "CREATE_SEGMENT OUT_OF_MEMORY")
            else:
                self._return(context, f"CREATE_SEGMENT {params[0]} {params[1]}")
            return False

        if opcode in (Opcode.YIELD, Opcode.EXIT):
            self._return(context, opcode.value)
            return False

        log.error("Instruccion inválida")
        return False

    def run(self, context: ExecutionContext) -> Instruction:
        """Run instructions until the process leaves the CPU; return the last one."""
        log.info("Comenzar ejecucion del proceso: %d.", context.pid)
        while True:
            instruction = self.fetch(context)
            if not self.execute(context, instruction):
                return instruction