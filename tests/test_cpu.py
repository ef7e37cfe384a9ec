import pytest

from segos.cpu import Cpu, ExecutionContext
from segos.instructions import Opcode, parse_instruction
from segos.mmu import Segment


class FakeKernel:
    def __init__(self):
        self.returned = []

    def return_context(self, context, reason):
        self.returned.append((context.pid, reason))


class FakeMemory:
    def __init__(self, reply=""):
        self.reply = reply
        self.requests = []
        self.sent = []

    def request(self, message):
        self.requests.append(message)
        return self.reply

    def send(self, message):
        self.sent.append(message)


def make_cpu(reply="", max_segment_size=64):
    kernel = FakeKernel()
    memory = FakeMemory(reply)
    return Cpu(kernel, memory, max_segment_size), kernel, memory


def make_context(program, segments=None):
    return ExecutionContext(
        pid=7,
        instructions=list(program),
        segments=segments if segments is not None else [Segment(0x1000, 0x1040)],
    )


def test_fetch_advances_program_counter():
    cpu, _, _ = make_cpu()
    context = make_context(["SET AX HOLA", "EXIT"])
    first = cpu.fetch(context)
    assert first.opcode is Opcode.SET
    assert first.params == ("AX", "HOLA")
    assert context.program_counter == 1
    assert cpu.fetch(context).opcode is Opcode.EXIT


def test_fetch_past_end_raises():
    cpu, _, _ = make_cpu()
    context = make_context(["EXIT"])
    context.program_counter = 1
    with pytest.raises(IndexError):
        cpu.fetch(context)


def test_set_keeps_running_and_stores_value():
    cpu, kernel, _ = make_cpu()
    context = make_context([])
    assert cpu.execute(context, parse_instruction("SET AX HOLA")) is True
    assert context.registers.get("AX") == "HOLA"
    assert kernel.returned == []


def test_run_stops_at_exit():
    cpu, kernel, _ = make_cpu()
    context = make_context(["SET BX CHAU", "EXIT", "SET AX NUNC"])
    last = cpu.run(context)
    assert last.opcode is Opcode.EXIT
    assert kernel.returned == [(7, "EXIT")]
    assert context.registers.get("bx") == "CHAU"
    assert context.program_counter == 2


def test_yield_returns_context():
    cpu, kernel, _ = make_cpu()
    context = make_context([])
    assert cpu.execute(context, parse_instruction("YIELD")) is False
    assert kernel.returned == [(7, "YIELD")]


@pytest.mark.parametrize(
    "line",
    ["I_O 5", "F_OPEN notas", "F_CLOSE notas", "WAIT DISCO", "SIGNAL DISCO", "DELETE_SEGMENT 1"],
)
def test_one_parameter_instructions_are_sent_verbatim(line):
    cpu, kernel, _ = make_cpu()
    assert cpu.execute(make_context([]), parse_instruction(line)) is False
    assert kernel.returned == [(7, line)]


@pytest.mark.parametrize("line", ["F_SEEK notas 12", "F_TRUNCATE notas 80"])
def test_two_parameter_instructions_are_sent_verbatim(line):
    cpu, kernel, _ = make_cpu()
    assert cpu.execute(make_context([]), parse_instruction(line)) is False
    assert kernel.returned == [(7, line)]


def test_f_read_translates_address():
    cpu, kernel, _ = make_cpu()
    cpu.execute(make_context([]), parse_instruction("F_READ notas 0 16"))
    assert kernel.returned == [(7, "F_READ notas 0x1000 16")]


def test_f_write_translates_address():
    cpu, kernel, _ = make_cpu()
    cpu.execute(make_context([]), parse_instruction("F_WRITE notas 0 8"))
    assert kernel.returned == [(7, "F_WRITE notas 0x1000 8")]


def test_create_segment_within_limit():
    cpu, kernel, _ = make_cpu(max_segment_size=64)
    cpu.execute(make_context([]), parse_instruction("CREATE_SEGMENT 1 32"))
    assert kernel.returned == [(7, "CREATE_SEGMENT 1 32")]


def test_create_segment_too_large():
    cpu, kernel, _ = make_cpu(max_segment_size=64)
    cpu.execute(make_context([]), parse_instruction("CREATE_SEGMENT 1 128"))
    assert kernel.returned == [(7, "CREATE_SEGMENT OUT_OF_MEMORY")]


def test_mov_in_reads_from_memory():
    cpu, kernel, memory = make_cpu(reply="ABCD")
    context = make_context([])
    assert cpu.execute(context, parse_instruction("MOV_IN AX 0")) is True
    assert memory.requests == ["MOV_IN 0x1000 4"]
    assert context.registers.get("AX") == "ABCD"
    assert kernel.returned == []


def test_mov_in_segmentation_fault():
    cpu, kernel, memory = make_cpu()
    context = make_context([], segments=[Segment(0x1000, 0x1002)])
    assert cpu.execute(context, parse_instruction("MOV_IN AX 0")) is False
    assert kernel.returned == [(7, "MOV_IN SEG_FAULT")]
    assert memory.requests == []


def test_mov_out_writes_register_value():
    cpu, kernel, memory = make_cpu()
    context = make_context([])
    context.registers.put("AX", "HOLA")
    assert cpu.execute(context, parse_instruction("MOV_OUT 0 AX")) is True
    assert memory.sent == ["MOV_OUT 0x1000 HOLA 4"]
    assert kernel.returned == []


def test_mov_out_segmentation_fault():
    cpu, kernel, memory = make_cpu()
    context = make_context([], segments=[Segment(0x1000, 0x1002)])
    assert cpu.execute(context, parse_instruction("MOV_OUT 0 AX")) is False
    assert kernel.returned == [(7, "MOV_OUT SEG_FAULT")]
    assert memory.sent == []


def test_mov_in_then_mov_out_round_trip():
    cpu, _, memory = make_cpu(reply="DATOSDAT")
    context = make_context([])
    cpu.execute(context, parse_instruction("MOV_IN EAX 0"))
    cpu.execute(context, parse_instruction("MOV_OUT 0 EAX"))
    assert memory.sent == ["MOV_OUT 0x1000 DATOSDAT 8"]


def test_unknown_opcode_in_program_raises():
    cpu, _, _ = make_cpu()
    context = make_context(["BOGUS 1"])
    with pytest.raises(ValueError):
        cpu.run(context)