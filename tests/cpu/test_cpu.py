import io

import pytest

import regvm.asm.asm as asm
import regvm.runtime.cpu as cpu
from regvm.asm.program import Program, Instruction, LabelRef
from regvm.common.errors import ExecutionError
from regvm.common.hwconf import MachineConfig
from regvm.runtime.console import Console, HeadlessConsole

from unit_utils import execute_source
from fixtures import headless  # noqa: F401


INT64_MAX = 2 ** 63 - 1
INT64_MIN = -2 ** 63


def test_negation():
    proc, _ = execute_source('mov r0, r1\nnot r0\ninc r0', {1: 12})

    assert proc.gp[0] == -12
    assert proc.gp[1] == 12
    assert not proc.zero


def test_mov_keeps_flag():
    proc, _ = execute_source('cmp r0, 0\nmov r1, 5\nmov r2, r1\nzero r3', {3: 7})

    assert proc.zero
    assert proc.gp[:4] == [0, 5, 5, 0]


def test_initial_state():
    program = asm.assemble('nop')
    proc = cpu.CPU(program, registers={2: -1})

    assert proc.pc == 0
    assert proc.zero is False
    assert proc.state is cpu.State.RUNNING
    assert proc.gp == [0, 0, -1, 0, 0, 0, 0, 0]


def test_unknown_initial_register():
    with pytest.raises(ValueError):
        cpu.CPU(Program(), registers={8: 1})


@pytest.mark.parametrize('source, registers, expected, zero', [
    ('add r0, r1, r2', {1: 2, 2: 3}, 5, False),
    ('sub r0, r1, r2', {1: 3, 2: 3}, 0, True),
    ('mul r0, r1, r2', {1: 6, 2: -7}, -42, False),
    ('div r0, r1, r2', {1: -7, 2: 2}, -3, False),
    ('div r0, r1, r2', {1: 1, 2: 2}, 0, True),
    ('mod r0, r1, r2', {1: -7, 2: 2}, -1, False),
    ('mod r0, r1, r2', {1: 7, 2: -2}, 1, False),
    ('and r0, r1, r2', {1: 12, 2: 10}, 8, False),
    ('or r0, r1, r2', {1: 12, 2: 10}, 14, False),
    ('xor r0, r1, r2', {1: 12, 2: 12}, 0, True),
    ('not r0', {0: -1}, 0, True),
    ('not r0', {0: 0}, -1, False),
    ('inc r0', {0: -1}, 0, True),
    ('dec r0', {0: 1}, 0, True),
    ('shl r0, 4', {0: 1}, 16, False),
    ('shl r0, 64', {0: 1}, 0, True),
    ('shl r0, 1', {0: INT64_MAX}, -2, False),
    ('shr r0, 60', {0: -1}, 15, False),
    ('shr r0, 1', {0: 1}, 0, True),
    ('shr r0, 0x8000000000000000', {0: -1}, 0, True),
])
def test_arithmetic(source, registers, expected, zero):
    proc, _ = execute_source(source, registers)

    assert proc.gp[0] == expected
    assert proc.zero is zero


@pytest.mark.parametrize('source, expected', [
    ('shl r0, 200', 0),
    ('shl r0, 255', 0),
    ('shr r0, 128', 0),
    ('shl r0, 7', -128),
])
def test_shift_count_top_bit(source, expected):
    proc, _ = execute_source(source, {0: 1}, MachineConfig(word_bits=8))

    assert proc.gp[0] == expected
    assert proc.zero is (expected == 0)


def test_wraparound():
    proc, _ = execute_source('inc r0\ndec r1\nadd r2, r0, r1', {0: INT64_MAX, 1: INT64_MIN})

    assert proc.gp[0] == INT64_MIN
    assert proc.gp[1] == INT64_MAX
    assert proc.gp[2] == -1


def test_division_overflow_wraps():
    proc, _ = execute_source('div r0, r1, r2', {1: INT64_MIN, 2: -1})

    assert proc.gp[0] == INT64_MIN


def test_cmp():
    proc, _ = execute_source('cmp r0, r1', {0: 5, 1: 5})
    assert proc.zero
    assert proc.gp[:2] == [5, 5]

    proc, _ = execute_source('cmp r0, 4', {0: 5})
    assert not proc.zero


def test_loop():
    proc, _ = execute_source('mov r0, 3\nloop:\ninc r1\ndec r0\njnz loop')

    assert proc.gp[:2] == [0, 3]
    assert proc.pc == len(proc.program)
    assert proc.state is cpu.State.HALTED


def test_conditional_not_taken():
    proc, _ = execute_source('cmp r0, 1\njz skip\nmov r1, 1\nskip:\nmov r2, 1')

    assert proc.gp[1:3] == [1, 1]


def test_jump_to_end_halts():
    proc, _ = execute_source('j end\nmov r0, 1\nend:')

    assert proc.gp[0] == 0
    assert proc.pc == 2


@pytest.mark.parametrize('source, line', [
    ('mov r1, 0\n// r0 / 0\ndiv r0, r0, r1', 3),
    ('mod r0, r1, r2', 1),
])
def test_division_by_zero(source, line):
    for _ in range(3):
        with pytest.raises(ExecutionError) as e:
            execute_source(source, {0: 10})

        assert e.value.line == line
        assert e.value.message == 'division by zero'


def test_jump_out_of_range(headless):  # noqa: F811
    program = Program((Instruction('j', (LabelRef('far'),), 7),), {'far': 5})
    proc = cpu.CPU(program, headless)

    with pytest.raises(ExecutionError) as e:
        proc.exec_next()

    assert e.value.line == 7
    assert 'out of range' in e.value.message


def test_unknown_label_at_runtime(headless):  # noqa: F811
    program = Program((Instruction('jz', (LabelRef('lost'),), 1),))
    proc = cpu.CPU(program, headless)
    proc.zero = True

    with pytest.raises(ExecutionError) as e:
        proc.exec_next()

    assert 'unknown label `lost`' in e.value.message


def test_halt_repeats(headless):  # noqa: F811
    proc = cpu.CPU(Program(), headless)

    for _ in range(2):
        with pytest.raises(cpu.Halt):
            proc.exec_next()

    assert proc.state is cpu.State.HALTED


def test_debug_snapshot_matches_final():
    proc, console = execute_source('mov r0, 5\ncmp r0, 5\ndebug')

    assert console.breakpoints == [(3, proc.snapshot())]
    assert proc.snapshot().registers[0] == 5
    assert proc.snapshot().zero


def test_debug_in_loop():
    proc, console = execute_source('mov r0, 2\nloop: debug\ndec r0\njnz loop')

    assert [line for line, _ in console.breakpoints] == [2, 2]
    assert [s.registers[0] for _, s in console.breakpoints] == [2, 1]


def test_debug_awaits_resume():
    class Probe(HeadlessConsole):
        states = []

        def wait_resume(self):
            self.states.append(proc.state)

    probe = Probe()
    proc = cpu.CPU(asm.assemble('debug\nnop'), probe)

    with pytest.raises(cpu.Halt):
        while True:
            proc.exec_next()

    assert probe.states == [cpu.State.AWAITING_DEBUG_RESUME]
    assert proc.state is cpu.State.HALTED


def test_debug_reads_stdin(capsys):
    proc = cpu.CPU(asm.assemble('mov r0, 1\ndebug'), Console(io.StringIO('go\n')))

    with pytest.raises(cpu.Halt):
        while True:
            proc.exec_next()

    out = capsys.readouterr().out
    assert out.startswith('Debug: line 2\nZero: false\n')


def test_debug_closed_stdin(capsys):
    proc = cpu.CPU(asm.assemble('debug'), Console(io.StringIO('')))

    with pytest.raises(ExecutionError) as e:
        proc.exec_next()

    assert e.value.line == 1
    assert 'Debug: line 1' in capsys.readouterr().out


def test_deterministic():
    source = 'mov r0, 9\nloop: add r1, r1, r0\ndec r0\njnz loop\ndebug'
    first, first_console = execute_source(source, {2: 3})
    second, second_console = execute_source(source, {2: 3})

    assert first.snapshot() == second.snapshot()
    assert first_console.breakpoints == second_console.breakpoints
