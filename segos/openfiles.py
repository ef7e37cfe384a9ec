"""The kernel's table of open files and the per-process file lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass(eq=False)
class OpenFile:
    """An open file: its name, seek pointer and the processes waiting for it."""

    name: str
    pointer: int = 0
    blocked: list[Any] = field(default_factory=list)


class OpenFileTable:
    """Every file currently open in the system."""

    def __init__(self) -> None:
        self._files: list[OpenFile] = []

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[OpenFile]:
        return iter(self._files)

    def __contains__(self, open_file: object) -> bool:
        return any(entry is open_file for entry in self._files)

    def open(self, name: str) -> OpenFile:
        """Add a newly opened file to the table and return it."""
        open_file = OpenFile(name)
        self._files.append(open_file)
        return open_file

    def find(self, name: str) -> OpenFile | None:
        """Return the open file whose name matches exactly, or None."""
        return next((entry for entry in self._files if entry.name == name), None)

    def remove(self, open_file: OpenFile) -> None:
        """Take ``open_file`` out of the table."""
        for index, entry in enumerate(self._files):
            if entry is open_file:
                del self._files[index]
                return
        raise ValueError(f"{open_file.name} is not in the open file table")


def process_file(files: list[OpenFile], name: str) -> OpenFile | None:
    """Return the file called ``name`` (any case) from a process's file list."""
    wanted = name.lower()
    return next((entry for entry in files if entry.name.lower() == wanted), None)