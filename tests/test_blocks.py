import struct

from segos.blocks import open_blocks


def test_open_creates_full_size_file(tmp_path):
    path = tmp_path / "bloques.dat"
    open_blocks(path, 64, 32)
    assert path.stat().st_size == 64 * 32
    assert path.read_bytes() == bytes(64 * 32)


def test_write_read_round_trip(tmp_path):
    blocks = open_blocks(tmp_path / "bloques.dat", 64, 32)
    blocks.write(130, b"hello world")
    assert blocks.read(130, len(b"hello world")) == b"hello world"


def test_write_spanning_blocks(tmp_path):
    blocks = open_blocks(tmp_path / "bloques.dat", 16, 8)
    payload = bytes(range(40))
    blocks.write(10, payload)
    assert blocks.read(10, len(payload)) == payload
    assert blocks.read(0, 10) == bytes(10)


def test_existing_file_is_kept(tmp_path):
    path = tmp_path / "bloques.dat"
    first = open_blocks(path, 64, 4)
    first.write(0, b"keep")
    second = open_blocks(path, 64, 4)
    assert second.read(0, 4) == b"keep"
    assert path.stat().st_size == 64 * 4


def test_read_pointers(tmp_path):
    blocks = open_blocks(tmp_path / "bloques.dat", 64, 8)
    blocks.write(3 * 64, struct.pack("<II", 7, 42))
    pointers = blocks.read_pointers(3)
    assert len(pointers) == 64 // 4
    assert pointers[:2] == [7, 42]
    assert set(pointers[2:]) == {0}