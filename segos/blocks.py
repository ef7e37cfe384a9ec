"""The file that holds every data block of the file system."""

from __future__ import annotations

import logging
import struct
from pathlib import Path

log = logging.getLogger(__name__)


class BlockFile:
    """Random access to the blocks file."""

    def __init__(self, path: str | Path, block_size: int, block_count: int) -> None:
        self.path = Path(path)
        self.block_size = block_size
        self.block_count = block_count

    def read(self, position: int, size: int) -> bytes:
        """Read ``size`` bytes starting at ``position``."""
        with self.path.open("rb") as handle:
            handle.seek(position)
            return handle.read(size)

    def write(self, position: int, data: bytes) -> None:
        """Write ``data`` starting at ``position``."""
        log.debug("escribiendo archivo pos: %d , cant: %d", position, len(data))
        with self.path.open("r+b") as handle:
            handle.seek(position)
            handle.write(data)

    def read_pointers(self, block: int) -> list[int]:
        """Return the block's contents as a list of 32-bit block pointers."""
        raw = self.read(block * self.block_size, self.block_size)
        raw = raw[: len(raw) - len(raw) % 4]
        return [value for (value,) in struct.iter_unpack("<I", raw)]


def open_blocks(path: str | Path, block_size: int, block_count: int) -> BlockFile:
    """Open the blocks file, creating it at its full size if it does not exist."""
    path = Path(path)
    size = block_size * block_count
    if path.exists():
        log.debug("Archivo de Bloques leido")
    else:
        with path.open("wb") as handle:
            handle.truncate(size)
        log.debug("Archivo de Bloques creado")
    log.debug("Tamaño: %d", size)
    return BlockFile(path, block_size, block_count)