import pytest

from segos.instructions import Instruction, Opcode, parse_instruction


def test_parse_set_with_two_parameters():
    instruction = parse_instruction("SET AX HOLA")
    assert instruction.opcode is Opcode.SET
    assert instruction.params == ("AX", "HOLA")


def test_parse_without_parameters():
    instruction = parse_instruction("YIELD")
    assert instruction.opcode is Opcode.YIELD
    assert instruction.params == ()


def test_parse_ignores_surrounding_whitespace():
    instruction = parse_instruction("  F_SEEK   notas  12\n")
    assert instruction == Instruction(Opcode.F_SEEK, ("notas", "12"))


@pytest.mark.parametrize("opcode", list(Opcode))
def test_every_opcode_parses_from_its_name(opcode):
    assert parse_instruction(opcode.value).opcode is opcode


@pytest.mark.parametrize(
    "line", ["F_WRITE notas 64 10", "I_O 5", "EXIT", "CREATE_SEGMENT 1 128"]
)
def test_text_round_trip(line):
    assert str(parse_instruction(line)) == line


def test_unknown_opcode_raises():
    with pytest.raises(ValueError):
        parse_instruction("JUMP 4")


def test_empty_line_raises():
    with pytest.raises(ValueError):
        parse_instruction("   ")


def test_opcode_is_case_sensitive():
    with pytest.raises(ValueError):
        parse_instruction("set AX 1")