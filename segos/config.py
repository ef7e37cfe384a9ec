"""Configuration of each module, read from ``KEY=VALUE`` files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .superblock import read_properties

log = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class ConfigError(KeyError):
    """Raised when a configuration file lacks a required key."""


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


class _Properties:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._values = read_properties(path)

    def string(self, key: str) -> str:
        try:
            return self._values[key]
        except KeyError:
            raise ConfigError(f"{self.path}: missing key {key}") from None

    def integer(self, key: str) -> int:
        return _atoi(self.string(key))

    def decimal(self, key: str) -> float:
        return _atof(self.string(key))

    def array(self, key: str) -> list[str]:
        text = self.string(key).strip()
        if text.startswith("["):
            text = text[1:]
        if text.endswith("]"):
            text = text[:-1]
        if not text.strip():
            return []
        return [item.strip() for item in text.split(",")]


def _log_lines(lines: list[tuple[str, object]]) -> None:
    log.info("-------Valores del config-------")
    for label, value in lines:
        log.info("%s = %s", label, value)
    log.info("--------------------------------")


@dataclass(frozen=True)
class CpuConfig:
    """Settings of the CPU module."""

    instruction_delay: int
    memory_ip: str
    memory_port: str
    listen_port: str
    max_segment_size: int


@dataclass(frozen=True)
class ConsoleConfig:
    """Settings of a console."""

    kernel_ip: str
    kernel_port: str


@dataclass(frozen=True)
class FileSystemConfig:
    """Settings of the file system module."""

    memory_ip: str
    memory_port: str
    listen_port: str
    superblock_path: str
    bitmap_path: str
    blocks_path: str
    fcb_path: str
    block_access_delay: int


@dataclass(frozen=True)
class KernelConfig:
    """Settings of the kernel module."""

    memory_ip: str
    memory_port: str
    filesystem_ip: str
    filesystem_port: str
    cpu_ip: str
    cpu_port: str
    listen_port: str
    scheduling_algorithm: str
    initial_estimate: int
    hrrn_alpha: float
    max_multiprogramming: int
    resources: list[str] = field(default_factory=list)
    resource_instances: list[int] = field(default_factory=list)


def load_cpu_config(path: str | Path) -> CpuConfig:
    """Read the CPU configuration file."""
    props = _Properties(path)
    config = CpuConfig(
        instruction_delay=props.integer("RETARDO_INSTRUCCION"),
        memory_ip=props.string("IP_MEMORIA"),
        memory_port=props.string("PUERTO_MEMORIA"),
        listen_port=props.string("PUERTO_ESCUCHA"),
        max_segment_size=props.integer("TAM_MAX_SEGMENTO"),
    )
    _log_lines(
        [
            ("Retardo Instrucción", config.instruction_delay),
            ("IP Memoria", config.memory_ip),
            ("Puerto Memoria", config.memory_port),
            ("Puerto Escucha", config.listen_port),
            ("Tamanio maximo de segmento", config.max_segment_size),
        ]
    )
    return config


def load_console_config(path: str | Path) -> ConsoleConfig:
    """Read a console's configuration file."""
    props = _Properties(path)
    config = ConsoleConfig(
        kernel_ip=props.string("IP_KERNEL"),
        kernel_port=props.string("PUERTO_KERNEL"),
    )
    _log_lines([("Ip", config.kernel_ip), ("Puerto", config.kernel_port)])
    return config


def load_filesystem_config(path: str | Path) -> FileSystemConfig:
    """Read the file system configuration file."""
    props = _Properties(path)
    config = FileSystemConfig(
        memory_ip=props.string("IP_MEMORIA"),
        memory_port=props.string("PUERTO_MEMORIA"),
        listen_port=props.string("PUERTO_ESCUCHA"),
        superblock_path=props.string("PATH_SUPERBLOQUE"),
        bitmap_path=props.string("PATH_BITMAP"),
        blocks_path=props.string("PATH_BLOQUES"),
        fcb_path=props.string("PATH_FCB"),
        block_access_delay=props.integer("RETARDO_ACCESO_BLOQUE"),
    )
    _log_lines(
        [
            ("IP Memoria", config.memory_ip),
            ("Puerto Memoria", config.memory_port),
            ("Puerto Escucha", config.listen_port),
            ("Path Superbloque", config.superblock_path),
            ("Path Bitmap", config.bitmap_path),
            ("Path Bloques", config.blocks_path),
            ("Path FCB", config.fcb_path),
            ("Retardo Acceso Bloque", config.block_access_delay),
        ]
    )
    return config


def load_kernel_config(path: str | Path) -> KernelConfig:
    """Read the kernel configuration file."""
    props = _Properties(path)
    config = KernelConfig(
        memory_ip=props.string("IP_MEMORIA"),
        memory_port=props.string("PUERTO_MEMORIA"),
        filesystem_ip=props.string("IP_FILESYSTEM"),
        filesystem_port=props.string("PUERTO_FILESYSTEM"),
        cpu_ip=props.string("IP_CPU"),
        cpu_port=props.string("PUERTO_CPU"),
        listen_port=props.string("PUERTO_ESCUCHA"),
        scheduling_algorithm=props.string("ALGORITMO_PLANIFICACION"),
        initial_estimate=props.integer("ESTIMACION_INICIAL"),
        hrrn_alpha=props.decimal("HRRN_ALFA"),
        max_multiprogramming=props.integer("GRADO_MAX_MULTIPROGRAMACION"),
        resources=props.array("RECURSOS"),
        resource_instances=[_atoi(item) for item in props.array("INSTANCIAS_RECURSOS")],
    )
    _log_lines(
        [
            ("IP Memoria", config.memory_ip),
            ("Puerto Memoria", config.memory_port),
            ("IP File System", config.filesystem_ip),
            ("Puerto File System", config.filesystem_port),
            ("IP CPU", config.cpu_ip),
            ("Puerto CPU", config.cpu_port),
            ("Puerto Escucha", config.listen_port),
            ("Algoritmo de Planificación", config.scheduling_algorithm),
            ("Estimacion inicial", config.initial_estimate),
            ("HRRN alfa", f"{config.hrrn_alpha:f}"),
            ("Grado Máximo de Multiprogramación", config.max_multiprogramming),
        ]
    )
    log.info("--------Recursos----------------")
    for name, instances in zip(config.resources, config.resource_instances):
        log.info("%s   %s", instances, name)
    log.info("--------------------------------")
    return config