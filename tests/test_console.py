import pytest

from segos.console import read_program


def test_reads_whole_program(tmp_path):
    program = "SET AX HOLA\nYIELD\nEXIT\n"
    path = tmp_path / "programa.txt"
    path.write_text(program, encoding="utf-8")
    assert read_program(path) == program


def test_keeps_line_endings_untouched(tmp_path):
    path = tmp_path / "programa.txt"
    path.write_bytes(b"WAIT DISCO\r\nEXIT")
    assert read_program(str(path)) == "WAIT DISCO\r\nEXIT"


def test_empty_file_gives_empty_text(tmp_path):
    path = tmp_path / "vacio.txt"
    path.write_bytes(b"")
    assert read_program(path) == ""


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_program(tmp_path / "no_existe.txt")