"""Persistent bitmap of allocated file-system blocks, most significant bit first."""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class NoFreeBlockError(RuntimeError):
    """Raised when every block in the bitmap is in use."""


class BlockBitmap:
    """A bit per block; a set bit marks the block as allocated."""

    def __init__(self, path: str | Path, data: bytearray) -> None:
        self.path = Path(path)
        self.data = data

    def __len__(self) -> int:
        return len(self.data) * 8

    def _check(self, block: int) -> None:
        if not 0 <= block < len(self):
            raise IndexError(f"block {block} out of range")

    def is_set(self, block: int) -> bool:
        """Tell whether ``block`` is allocated."""
        self._check(block)
        return bool(self.data[block // 8] & (0x80 >> (block % 8)))

    def _log_access(self, block: int) -> None:
        log.info(
            "Acceso a Bitmap - Bloque: %d - Estado: %d", block, int(self.is_set(block))
        )

    def first_free(self) -> int | None:
        """Return the lowest free block, or None when all are taken."""
        for block in range(len(self)):
            self._log_access(block)
            if not self.is_set(block):
                return block
        return None

    def allocate(self) -> int:
        """Mark the lowest free block as used, save the bitmap and return the block."""
        block = self.first_free()
        if block is None:
            raise NoFreeBlockError("no free blocks left")
        self.data[block // 8] |= 0x80 >> (block % 8)
        self._log_access(block)
        self.save()
        return block

    def release(self, block: int) -> None:
        """Mark ``block`` as free."""
        self._log_access(block)
        self.data[block // 8] &= ~(0x80 >> (block % 8)) & 0xFF
        self._log_access(block)

    def save(self) -> None:
        """Write the whole bitmap to its file."""
        self.path.write_bytes(bytes(self.data))


def open_bitmap(path: str | Path, block_count: int) -> BlockBitmap:
    """Load the bitmap from ``path``, creating an empty one if the file is missing."""
    path = Path(path)
    size = block_count // 8
    data = bytearray(size)
    if path.exists():
        log.debug("Creando Bitmap desde archivo -> %s", path)
        stored = path.read_bytes()[:size]
        data[: len(stored)] = stored
    else:
        log.debug("Creando archivo %s", path)
        path.write_bytes(bytes(data))
    log.debug("Bitmap inicializado")
    return BlockBitmap(path, data)