"""File control blocks: one properties file per file in the file system."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .superblock import read_properties

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _fcb_path(directory: str | Path, name: str) -> Path:
    return Path(directory) / f"{name}.dat"


@dataclass
class Fcb:
    """Name, size and block pointers of one file."""

    name: str
    size: int = 0
    direct_pointer: int = 0
    indirect_pointer: int = 0

    def save(self, directory: str | Path) -> None:
        """Write this control block to its file in ``directory``."""
        _fcb_path(directory, self.name).write_text(
            f"NOMBRE_ARCHIVO={self.name}\n"
            f"TAMANIO_ARCHIVO={self.size}\n"
            f"PUNTERO_DIRECTO={self.direct_pointer}\n"
            f"PUNTERO_INDIRECTO={self.indirect_pointer}"
        )


def create_fcb(directory: str | Path, name: str) -> Fcb:
    """Create an empty file's control block and write it to ``directory``."""
    _fcb_path(directory, name).write_text(
        f"NOMBRE_ARCHIVO={name}\nTAMANIO_ARCHIVO=0\nPUNTERO_DIRECTO=\nPUNTERO_INDIRECTO="
    )
    return Fcb(name)


def load_fcbs(directory: str | Path) -> list[Fcb]:
    """Load every control block found in ``directory``; none if it is missing."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    fcbs = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file():
            continue
        properties = read_properties(entry)
        fcbs.append(
            Fcb(
                name=properties["NOMBRE_ARCHIVO"],
                size=_atoi(properties["TAMANIO_ARCHIVO"]),
                direct_pointer=_atoi(properties["PUNTERO_DIRECTO"]),
                indirect_pointer=_atoi(properties["PUNTERO_INDIRECTO"]),
            )
        )
    return fcbs


def find_fcb(fcbs: list[Fcb], name: str) -> Fcb | None:
    """Return the control block named ``name`` (any case), or None."""
    wanted = name.lower()
    return next((fcb for fcb in fcbs if fcb.name.lower() == wanted), None)