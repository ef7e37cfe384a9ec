"""The superblock that fixes the block size and count of the file system."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)


def read_properties(path: str | Path) -> dict[str, str]:
    """Read a ``KEY=VALUE`` file, skipping blank lines and ``#`` comments."""
    properties: dict[str, str] = {}
    for line in Path(path).read_text().split("\n"):
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep:
            properties[key] = value
    return properties


@dataclass(frozen=True)
class Superblock:
    """Block geometry of the file system."""

    block_size: int
    block_count: int

    def blocks_needed(self, size: int) -> int:
        """Return how many blocks ``size`` bytes take up."""
        return -(-size // self.block_size)


def load_superblock(path: str | Path) -> Superblock:
    """Read the superblock from its properties file."""
    properties = read_properties(path)
    superblock = Superblock(
        block_size=int(properties["BLOCK_SIZE"]),
        block_count=int(properties["BLOCK_COUNT"]),
    )
    log.debug("Super Bloque Montado")
    log.debug("Tamaño de Bloque: %d", superblock.block_size)
    log.debug("Cantidad de Bloques: %d", superblock.block_count)
    return superblock