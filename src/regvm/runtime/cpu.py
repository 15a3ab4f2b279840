import logging as lg
from enum import Enum, auto
from typing import Callable, Mapping

from regvm.asm.program import Program, Instruction, Operand, Register, LabelRef
from regvm.common.errors import ExecutionError
from regvm.common.hwconf import MachineConfig, DEFAULT_CONFIG
from regvm.common.word import wrap, to_unsigned
from regvm.runtime.console import Console
from regvm.runtime.dump import Snapshot


class Halt(Exception):
    pass


class State(Enum):
    RUNNING = auto()
    HALTED = auto()
    AWAITING_DEBUG_RESUME = auto()


def trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def trunc_mod(a: int, b: int) -> int:
    return a - b * trunc_div(a, b)


class CPU():
    pc: int  # Program counter
    zero: bool  # Zero flag
    gp: list[int]  # General purpose registers, signed
    state: State
    current: Instruction | None

    def __init__(
        self, program: Program, console: Console | None = None,
        registers: Mapping[int, int] | None = None,
        config: MachineConfig = DEFAULT_CONFIG
    ):
        self.program = program  # Ref. to program
        self.console = console if console is not None else Console()
        self.bits = config.word_bits

        self.pc = 0
        self.zero = False
        self.state = State.RUNNING
        self.current = None

        self.gp = [0] * config.registers

        for index, value in (registers or {}).items():
            if not 0 <= index < config.registers:
                raise ValueError(f'r{index} does not exist')

            self.gp[index] = wrap(value, self.bits)

    # - Helpers - #

    def debug_dump(self):
        state = [f'PC:{self.pc}', f'Z:{int(self.zero)}']
        state.extend([f'r{i}:{to_unsigned(v, self.bits):X}' for i, v in enumerate(self.gp)])
        lg.debug(' '.join(state))

    def snapshot(self) -> Snapshot:
        return Snapshot(tuple(self.gp), self.zero, self.bits)

    def line(self) -> int | None:
        return self.current.line if self.current is not None else None

    def read(self, operand: Operand) -> int:
        if isinstance(operand, Register):
            return self.gp[operand.index]

        return operand.value  # type: ignore

    def write(self, reg: Register, val: int):
        self.gp[reg.index] = wrap(val, self.bits)

    def write_flagged(self, reg: Register, val: int):
        self.write(reg, val)
        self.zero = self.gp[reg.index] == 0

    def arithm_pair(self, to: Register, op1: Register, op2: Register, op: Callable[[int, int], int]):
        self.write_flagged(to, op(self.read(op1), self.read(op2)))

    def target(self, label: LabelRef) -> int:
        try:
            return self.program.resolve(label.name)
        except KeyError:
            raise ExecutionError(f'unknown label `{label.name}`', self.line()) from None

    # - Operations - #

    def nop(self):
        pass

    def debug(self):
        line = self.line()
        self.console.breakpoint(line, self.snapshot())  # type: ignore
        self.state = State.AWAITING_DEBUG_RESUME

        try:
            self.console.wait_resume()
        except EOFError:
            raise ExecutionError('input closed while waiting at breakpoint', line) from None

        self.state = State.RUNNING

    def zro(self, reg: Register):
        self.write(reg, 0)

    def mov(self, to: Register, src: Operand):
        self.write(to, self.read(src))

    def cmp(self, a: Register, b: Operand):
        self.zero = wrap(self.read(a) - self.read(b), self.bits) == 0

    def jmp(self, label: LabelRef) -> int:
        return self.target(label)

    def jz(self, label: LabelRef) -> int | None:
        if self.zero:
            return self.target(label)

        return None

    def jnz(self, label: LabelRef) -> int | None:
        if not self.zero:
            return self.target(label)

        return None

    # - Arithmetic - #

    def inv(self, reg: Register):
        self.write_flagged(reg, ~self.read(reg))

    def inc(self, reg: Register):
        self.write_flagged(reg, self.read(reg) + 1)

    def dec(self, reg: Register):
        self.write_flagged(reg, self.read(reg) - 1)

    def shl(self, reg: Register, amount: Operand):
        self.write_flagged(reg, self.read(reg) << min(self.read(amount), self.bits))

    def shr(self, reg: Register, amount: Operand):
        # Logical shift
        val = to_unsigned(self.read(reg), self.bits)
        self.write_flagged(reg, val >> min(self.read(amount), self.bits))

    def add(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, lambda a, b: a + b)

    def sub(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, lambda a, b: a - b)

    def mul(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, lambda a, b: a * b)

    def div(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, trunc_div)

    def mod(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, trunc_mod)

    def band(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, lambda a, b: a & b)

    def bor(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, lambda a, b: a | b)

    def xor(self, to: Register, op1: Register, op2: Register):
        self.arithm_pair(to, op1, op2, lambda a, b: a ^ b)

    HANDLERS = {
        'nop': nop,
        'debug': debug,
        'zero': zro,
        'mov': mov,
        'cmp': cmp,
        'j': jmp,
        'jz': jz,
        'jnz': jnz,

        'not': inv,
        'inc': inc,
        'dec': dec,
        'shl': shl,
        'shr': shr,
        'add': add,
        'sub': sub,
        'mul': mul,
        'div': div,
        'mod': mod,
        'and': band,
        'or': bor,
        'xor': xor,
    }

    # -- Implementation -- #

    def exec_next(self):
        if self.pc >= len(self.program):
            self.state = State.HALTED
            raise Halt()

        instruction = self.program[self.pc]
        self.current = instruction
        handler = self.HANDLERS.get(instruction.opcode)

        if handler is None:
            raise ExecutionError(f'unknown instruction `{instruction.opcode}`', instruction.line)

        try:
            target = handler(self, *instruction.operands)
        except ZeroDivisionError:
            raise ExecutionError('division by zero', instruction.line) from None

        if target is None:
            self.pc += 1
        elif 0 <= target <= len(self.program):
            self.pc = target
        else:
            raise ExecutionError(f'jump target {target} is out of range', instruction.line)

        self.debug_dump()
