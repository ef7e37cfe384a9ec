"""Indexed-allocation file system: one direct and one indirect block pointer per file."""

from __future__ import annotations

import logging
import struct
import time
from pathlib import Path
from typing import Protocol

from .bitmap import BlockBitmap
from .blocks import BlockFile
from .fcb import Fcb, create_fcb, find_fcb
from .instructions import Opcode, parse_instruction
from .superblock import Superblock

log = logging.getLogger(__name__)

_POINTER = struct.Struct("<I")


class MemoryLink(Protocol):
    """The connection to the memory module."""

    def request(self, message: str) -> str:
        """Send ``message`` and return memory's reply."""

    def send(self, message: str) -> None:
        """Send ``message`` without waiting for a reply."""


class FileSystem:
    """Files stored in a blocks file, tracked by a bitmap and control blocks."""

    def __init__(
        self,
        superblock: Superblock,
        bitmap: BlockBitmap,
        blocks: BlockFile,
        fcb_directory: str | Path,
        fcbs: list[Fcb] | None = None,
        access_delay: int = 0,
    ) -> None:
        self.superblock = superblock
        self.bitmap = bitmap
        self.blocks = blocks
        self.fcb_directory = Path(fcb_directory)
        self.fcbs: list[Fcb] = list(fcbs) if fcbs is not None else []
        self.access_delay = access_delay

    # -- files -----------------------------------------------------------

    def exists(self, name: str) -> bool:
        """Tell whether a file called ``name`` (any case) exists."""
        return find_fcb(self.fcbs, name) is not None

    def create(self, name: str) -> Fcb:
        """Create an empty file and return its control block."""
        fcb = create_fcb(self.fcb_directory, name)
        self.fcbs.append(fcb)
        return fcb

    def _fcb(self, name: str) -> Fcb:
        fcb = find_fcb(self.fcbs, name)
        if fcb is None:
            raise FileNotFoundError(name)
        return fcb

    # -- block bookkeeping ---------------------------------------------------

    def _pointer_position(self, fcb: Fcb, index: int) -> int:
        return fcb.indirect_pointer * self.superblock.block_size + index * _POINTER.size

    def _add_block(self, fcb: Fcb, assigned: int) -> None:
        if assigned == 0:
            fcb.direct_pointer = self.bitmap.allocate()
            return
        if assigned == 1:
            fcb.indirect_pointer = self.bitmap.allocate()
        block = self.bitmap.allocate()
        self.blocks.write(self._pointer_position(fcb, assigned - 1), _POINTER.pack(block))

    def _release_block(self, fcb: Fcb, assigned: int) -> None:
        if assigned == 1:
            self.bitmap.release(fcb.direct_pointer)
            return
        raw = self.blocks.read(self._pointer_position(fcb, assigned - 2), _POINTER.size)
        (block,) = _POINTER.unpack(raw)
        self.bitmap.release(block)
        if assigned == 2:
            self.bitmap.release(fcb.indirect_pointer)

    def _grow(self, fcb: Fcb, assigned: int, needed: int) -> None:
        if assigned == 0 and needed == 1:
            fcb.direct_pointer = self.bitmap.allocate()
            return
        for count in range(assigned, needed):
            self._add_block(fcb, count)
        time.sleep(self.access_delay / 1000)
        log.info(
            "Acceso Bloque - Archivo: %s - Bloque Archivo:%s - Bloque File System %d",
            fcb.name,
            "puntero",
            fcb.indirect_pointer,
        )

    def _shrink(self, fcb: Fcb, assigned: int, needed: int) -> None:
        if assigned == 1 and needed == 0:
            self.bitmap.release(fcb.direct_pointer)
            return
        time.sleep(self.access_delay / 1_000_000)
        log.info(
            "Acceso Bloque - Archivo: %s - Bloque Archivo: %s - Bloque File System: %d",
            fcb.name,
            "punteros",
            fcb.indirect_pointer,
        )
        for count in range(assigned, needed, -1):
            self._release_block(fcb, count)

    def truncate(self, name: str, size: int) -> None:
        """Change the size of a file, allocating or freeing blocks as needed."""
        fcb = self._fcb(name)
        assigned = self.superblock.blocks_needed(fcb.size)
        needed = self.superblock.blocks_needed(size)
        if needed > assigned:
            self._grow(fcb, assigned, needed)
        elif assigned > needed:
            self._shrink(fcb, assigned, needed)
        fcb.size = size
        fcb.save(self.fcb_directory)
        self.bitmap.save()

    def _physical_block(self, fcb: Fcb, logical: int) -> int:
        if logical == 0:
            return fcb.direct_pointer
        raw = self.blocks.read(self._pointer_position(fcb, logical - 1), _POINTER.size)
        return _POINTER.unpack(raw)[0]

    def _chunks(self, fcb: Fcb, pointer: int, size: int):
        """Yield (physical position, chunk size, logical block, physical block)."""
        block_size = self.superblock.block_size
        done = 0
        while done < size:
            offset = pointer % block_size
            chunk = min(size - done, block_size - offset)
            logical = pointer // block_size
            physical = self._physical_block(fcb, logical)
            yield physical * block_size + offset, chunk, logical, physical
            done += chunk
            pointer += chunk

    def _log_access(self, name: str, logical: int, physical: int) -> None:
        time.sleep(self.access_delay / 1_000_000)
        log.info(
            "Acceso Bloque - Archivo:%s - Bloque Archivo:%d - Bloque File System: %d",
            name,
            logical,
            physical,
        )

    def write(self, name: str, data: bytes, pointer: int) -> None:
        """Write ``data`` into the file starting at byte ``pointer``."""
        fcb = self._fcb(name)
        log.debug("escribiendo archivo: %s", name)
        written = 0
        for position, chunk, logical, physical in self._chunks(fcb, pointer, len(data)):
            self.blocks.write(position, bytes(data[written : written + chunk]))
            self._log_access(name, logical, physical)
            written += chunk

    def read(self, name: str, pointer: int, size: int) -> bytes:
        """Read ``size`` bytes of the file starting at byte ``pointer``."""
        fcb = self._fcb(name)
        log.debug("leyendo archivo: %s", name)
        parts = []
        for position, chunk, logical, physical in self._chunks(fcb, pointer, size):
            parts.append(self.blocks.read(position, chunk))
            self._log_access(name, logical, physical)
        return b"".join(parts)

    # -- requests from the kernel --------------------------------------------

    def handle(self, command: str, memory: MemoryLink) -> str | None:
        """Carry out a kernel request and return the reply for the kernel.

        Returns None for requests the file system does not serve.
        """
        try:
            instruction = parse_instruction(command)
        except ValueError:
            return None
        params = instruction.params

        if instruction.opcode is Opcode.F_OPEN:
            name = params[0]
            if self.exists(name):
                log.info("abrir archivo: %s", name)
                return "OK"
            return "NO EXISTE"

        if instruction.opcode is Opcode.F_CREATE:
            name = params[0]
            self.create(name)
            log.info("crear archivo: %s", name)
            return "OK"

        if instruction.opcode is Opcode.F_TRUNCATE:
            name, size = params[0], int(params[1])
            log.info("Truncar archivo: %s tamanio: %d", name, size)
            self.truncate(name, size)
            return "el filesystem trunco el archivo"

        if instruction.opcode is Opcode.F_WRITE:
            name, address = params[0], params[1]
            size, pointer = int(params[2]), int(params[3])
            log.info(
                "Escribir Archivo: %s - Puntero: %d- Memoria: %s - Tamaño: %d",
                name,
                pointer,
                address,
                size,
            )
            reply = memory.request(f"F_WRITE {address} {size}")
            data = reply.encode("latin-1")[:size].ljust(size, b"\0")
            self.write(name, data, pointer)
            return "se escribio el archivo"

        if instruction.opcode is Opcode.F_READ:
            name, address = params[0], params[1]
            size, pointer = int(params[2]), int(params[3])
            log.info(
                "Leer Archivo: %s - Puntero: %d -Memoria: %s - Tamaño: %d",
                name,
                pointer,
                address,
                size,
            )
            text = self.read(name, pointer, size).split(b"\0", 1)[0].decode("latin-1")
            memory.send(f"MOV_OUT {address} {text} {size}")
            return "se leyo el archivo"

        return None