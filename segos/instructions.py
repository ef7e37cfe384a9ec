"""Instruction set shared by the CPU, the kernel and the file system."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Opcode(Enum):
    """Every instruction and request code understood by the system."""

    SET = "SET"
    MOV_IN = "MOV_IN"
    MOV_OUT = "MOV_OUT"
    I_O = "I_O"
    F_OPEN = "F_OPEN"
    F_CLOSE = "F_CLOSE"
    F_SEEK = "F_SEEK"
    F_READ = "F_READ"
    F_WRITE = "F_WRITE"
    F_TRUNCATE = "F_TRUNCATE"
    F_CREATE = "F_CREATE"
    WAIT = "WAIT"
    SIGNAL = "SIGNAL"
    CREATE_SEGMENT = "CREATE_SEGMENT"
    DELETE_SEGMENT = "DELETE_SEGMENT"
    YIELD = "YIELD"
    EXIT = "EXIT"
    OUT = "OUT"
    SEGMENT = "SEGMENT"
    COMPACT = "COMPACT"


@dataclass(frozen=True)
class Instruction:
    """An opcode together with its textual parameters."""

    opcode: Opcode
    params: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return " ".join((self.opcode.value, *self.params))


def parse_instruction(line: str) -> Instruction:
    """Parse a line such as ``SET AX HOLA`` into an instruction.

    Raises ValueError for an empty line or an unknown opcode.
    """
    words = line.split()
    if not words:
        raise ValueError("empty instruction")
    name, *params = words
    try:
        opcode = Opcode(name)
    except ValueError:
        raise ValueError(f"unknown instruction: {name}") from None
    return Instruction(opcode, tuple(params))