import pytest

from segos.bitmap import NoFreeBlockError, open_bitmap


def test_open_creates_zeroed_file(tmp_path):
    path = tmp_path / "bitmap.dat"
    bitmap = open_bitmap(path, 64)
    assert path.read_bytes() == bytes(64 // 8)
    assert len(bitmap) == 64
    assert not any(bitmap.is_set(block) for block in range(len(bitmap)))


def test_allocate_in_order(tmp_path):
    bitmap = open_bitmap(tmp_path / "bitmap.dat", 64)
    assert [bitmap.allocate(), bitmap.allocate()] == [0, 1]
    assert bitmap.is_set(0) and bitmap.is_set(1)


def test_allocation_is_msb_first_and_saved(tmp_path):
    path = tmp_path / "bitmap.dat"
    bitmap = open_bitmap(path, 16)
    bitmap.allocate()
    assert path.read_bytes()[0] == 0x80


def test_reopen_keeps_allocations(tmp_path):
    path = tmp_path / "bitmap.dat"
    first = open_bitmap(path, 64)
    allocated = [first.allocate() for _ in range(3)]
    second = open_bitmap(path, 64)
    assert all(second.is_set(block) for block in allocated)
    assert second.first_free() == len(allocated)


def test_release_frees_block(tmp_path):
    bitmap = open_bitmap(tmp_path / "bitmap.dat", 64)
    block = bitmap.allocate()
    bitmap.allocate()
    bitmap.release(block)
    assert not bitmap.is_set(block)
    assert bitmap.first_free() == block


def test_save_persists_release(tmp_path):
    path = tmp_path / "bitmap.dat"
    bitmap = open_bitmap(path, 16)
    block = bitmap.allocate()
    bitmap.release(block)
    bitmap.save()
    assert path.read_bytes() == bytes(16 // 8)


def test_full_bitmap(tmp_path):
    bitmap = open_bitmap(tmp_path / "bitmap.dat", 8)
    for _ in range(len(bitmap)):
        bitmap.allocate()
    assert bitmap.first_free() is None
    with pytest.raises(NoFreeBlockError):
        bitmap.allocate()


def test_out_of_range(tmp_path):
    bitmap = open_bitmap(tmp_path / "bitmap.dat", 8)
    with pytest.raises(IndexError):
        bitmap.is_set(len(bitmap))