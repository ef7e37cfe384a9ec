"""Loading of the pseudocode program that a console submits."""

from __future__ import annotations

from pathlib import Path


def read_program(path: str | Path) -> str:
    """Return the whole text of the pseudocode file at ``path``."""
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()