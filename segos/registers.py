"""General purpose CPU registers of fixed width, holding text values."""

from __future__ import annotations

_SIZES: dict[str, int] = {
    "ax": 4,
    "bx": 4,
    "cx": 4,
    "dx": 4,
    "eax": 8,
    "ebx": 8,
    "ecx": 8,
    "edx": 8,
    "rax": 16,
    "rbx": 16,
    "rcx": 16,
    "rdx": 16,
}


def register_size(name: str) -> int:
    """Return the width in bytes of the register called ``name`` (any case)."""
    try:
        return _SIZES[name.lower()]
    except KeyError:
        raise KeyError(f"unknown register: {name}") from None


class Registers:
    """The twelve registers of the CPU, addressed by name regardless of case."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {
            name: " " * size for name, size in _SIZES.items()
        }
        self._values["rcx"] = "rcxrcxrcxrcxrcxr"

    def put(self, name: str, value: str) -> None:
        """Store ``value``, cut to the register's width and at any NUL."""
        size = register_size(name)
        self._values[name.lower()] = value.split("\0", 1)[0][:size]

    def get(self, name: str) -> str:
        """Return the value held by the register."""
        register_size(name)
        return self._values[name.lower()]

    def dump(self) -> str:
        """Return a printable listing of every register."""
        lines = ["Registros:"]
        lines.extend(
            f"{name.upper()} = {value}" for name, value in self._values.items()
        )
        return "\n".join(lines) + "\n"