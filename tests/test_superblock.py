import pytest

from segos.superblock import Superblock, load_superblock, read_properties


def test_read_properties_skips_comments_and_blanks(tmp_path):
    path = tmp_path / "props.config"
    path.write_text("# comment\nA=1\n\nB=x=y\nnoequals\n")
    assert read_properties(path) == {"A": "1", "B": "x=y"}


def test_read_properties_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_properties(tmp_path / "none.config")


def test_load_superblock(tmp_path):
    path = tmp_path / "superbloque.dat"
    path.write_text("BLOCK_SIZE=64\nBLOCK_COUNT=1024")
    superblock = load_superblock(path)
    assert superblock == Superblock(block_size=64, block_count=1024)


def test_load_superblock_missing_key(tmp_path):
    path = tmp_path / "superbloque.dat"
    path.write_text("BLOCK_SIZE=64\n")
    with pytest.raises(KeyError):
        load_superblock(path)


@pytest.mark.parametrize("count", [0, 1, 2, 7])
def test_blocks_needed_exact_multiple(count):
    superblock = Superblock(block_size=64, block_count=1024)
    assert superblock.blocks_needed(count * superblock.block_size) == count


@pytest.mark.parametrize("count", [0, 1, 5])
def test_blocks_needed_rounds_up(count):
    superblock = Superblock(block_size=64, block_count=1024)
    assert superblock.blocks_needed(count * superblock.block_size + 1) == count + 1
    assert (
        superblock.blocks_needed((count + 1) * superblock.block_size - 1)
        == count + 1
    )