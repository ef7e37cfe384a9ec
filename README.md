# segos

`segos` models the pieces of a small teaching operating system as plain
Python objects. It has a CPU with named registers and a segmented MMU. It
has a kernel that schedules processes with FIFO or HRRN and manages
resources and open files. It also has a block-based file system built from
a bitmap, a blocks file and file control blocks.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite, install the test extra:

```
pip install ".[test]"
pytest
```

## Components

### CPU

- `segos.registers`
  - `Registers` holds twelve fixed-width registers: `AX`..`DX` (4 bytes),
    `EAX`..`EDX` (8 bytes) and `RAX`..`RDX` (16 bytes).
  - Register names are matched regardless of case.
  - `put` cuts a value to the register's width and at the first NUL.
  - `get` returns the value a register holds, and `dump` returns a printable listing of all of them.
  - `register_size(name)` gives a register's width. An unknown name raises `KeyError`.
- `segos.mmu`
  - `Mmu(max_segment_size, segments)` works over a list of `Segment(base, limit)` entries.
  - It splits a logical address into a segment number (`segment_number`) and an offset (`segment_offset`).
  - `is_access_valid(register, address)` checks that reading or writing a register at that address stays inside its segment.
  - `physical_address` translates a logical address.
  - An address whose segment is not in the table raises `IndexError`.
- `segos.instructions`
  - `Opcode` lists every instruction and request code.
  - `Instruction` pairs an opcode with its text parameters.
  - `parse_instruction` turns a line such as `SET AX HOLA` into an `Instruction`. An empty line or an unknown opcode raises `ValueError`.
- `segos.cpu`
  - `ExecutionContext` holds a process's program, program counter, registers and segments.
  - `Cpu.fetch` parses the instruction at the program counter and advances the counter.
  - `Cpu.execute` runs one instruction and returns whether the process keeps the CPU.
  - `Cpu.run` loops until an instruction hands the context back, and returns that last instruction.
  - `MOV_IN` and `MOV_OUT` go to memory through the link you supply; an access outside the segment is reported as `SEG_FAULT`.
  - `CREATE_SEGMENT` with a size above the maximum segment size is reported as `OUT_OF_MEMORY`.

### Kernel

- `segos.queues`
  - `ProcessState` gives the states `NEW`, `READY`, `EXEC`, `BLOCKED` and `EXIT`.
  - `Pcb` is the process control block.
  - `ProcessQueue` is a thread-safe queue that logs state changes. For the ready queue it also logs the queued pids (`describe()` gives `[1, 2, 3]`).
- `segos.resources`
  - `Resource` counts free instances and keeps a queue of blocked processes.
  - `acquire` (wait) returns `False` when the process has to block.
  - `release` (signal) returns the process it unblocked, if any.
  - `build_resources` sets resources up from names and counts, and `find_resource` looks one up by name in any case.
- `segos.openfiles`
  - `OpenFile` holds a name, a seek pointer and the processes waiting for the file.
  - `OpenFileTable` is the global table of open files.
  - `process_file` finds a file in a process's own file list.
- `segos.scheduler`
  - `Scheduler` admits processes from NEW to READY up to the multiprogramming limit (`admit`).
  - `pick_next` picks the next process by FIFO or, for any other algorithm name, by HRRN (`pick_hrrn`).
  - `estimate_burst` re-estimates bursts by exponential averaging with `hrrn_alpha`.
  - Times are in milliseconds. The `clock` callable can be replaced.
- `segos.kernel`
  - `Kernel.handle_reason(pcb, reason, now)` acts on the reason a process left the CPU. The reasons are `WAIT`, `SIGNAL`, `YIELD`, `EXIT`, `I_O`, `F_OPEN`, `F_CLOSE`, `F_SEEK`, `F_READ`, `F_WRITE`, `F_TRUNCATE`, `CREATE_SEGMENT`, `DELETE_SEGMENT`, and `MOV_IN`/`MOV_OUT` for a segmentation fault.
  - It returns `True` when the same process goes straight back to the CPU.
  - `wait`, `signal`, `open_file`, `close_file`, `seek` and `finish` can also be called directly.
  - I/O and file-system requests run in background tasks, started by the `spawn` callable. By default `spawn` starts a daemon thread.

### File system

- `segos.superblock`
  - `load_superblock` reads `BLOCK_SIZE` and `BLOCK_COUNT` from a `KEY=VALUE` file. `read_properties` is the reader it uses.
  - `Superblock.blocks_needed` rounds a size in bytes up to whole blocks.
- `segos.bitmap`
  - `open_bitmap` loads the block bitmap, or creates it if the file is missing.
  - `BlockBitmap` tests, allocates and releases blocks, most significant bit first, and saves itself.
  - `allocate` raises `NoFreeBlockError` when the disk is full.
- `segos.blocks`
  - `open_blocks` loads the blocks file, or creates it at full size.
  - `BlockFile` reads and writes bytes at absolute positions.
  - `read_pointers` reads a block as 32-bit little-endian block numbers.
- `segos.fcb`
  - `Fcb`, `create_fcb`, `load_fcbs` and `find_fcb` keep file control blocks as `<name>.dat` `KEY=VALUE` files in a directory.
- `segos.filesystem`
  - `FileSystem` creates, truncates, reads and writes files. Each file has one direct block pointer and one indirect pointer block.
  - `handle(command, memory)` answers the kernel's `F_OPEN`, `F_CREATE`, `F_TRUNCATE`, `F_WRITE` and `F_READ` commands with a reply string.

### Console and configuration

- `segos.console`
  - `read_program(path)` returns the text of a pseudocode file.
- `segos.config`
  - `load_cpu_config`, `load_console_config`, `load_filesystem_config` and `load_kernel_config` read the `KEY=VALUE` configuration files into frozen dataclasses.
  - A missing key raises `ConfigError`.

## Examples

```python
from segos.registers import Registers

regs = Registers()
regs.put("ax", "HOLA")
assert regs.get("AX") == "HOLA"
```

```python
from pathlib import Path

from segos.bitmap import open_bitmap
from segos.blocks import open_blocks
from segos.filesystem import FileSystem
from segos.superblock import Superblock

root = Path("fs")
(root / "fcb").mkdir(parents=True, exist_ok=True)
superblock = Superblock(block_size=64, block_count=64)
fs = FileSystem(
    superblock,
    open_bitmap(root / "bitmap.dat", 64),
    open_blocks(root / "bloques.dat", 64, 64),
    root / "fcb",
)
fs.create("notes")
fs.truncate("notes", 100)
fs.write("notes", b"hello", 0)
assert fs.read("notes", 0, 5) == b"hello"
```

## What the package does not do

The package has no networking and no command-line programs. Nothing here
opens sockets, listens on the configured ports or starts the components as
processes.

The CPU, kernel and file system talk to one another, and to memory, only
through objects you pass in:

| Module | Connection objects |
| --- | --- |
| `segos.cpu` | `KernelLink` |
| `segos.filesystem` | `MemoryLink` |
| `segos.kernel` | `FileSystemPort` and `MemoryPort` |

The memory module itself, which allocates segments, compacts and stores
bytes, is not part of this package. You have to provide it behind those
interfaces.