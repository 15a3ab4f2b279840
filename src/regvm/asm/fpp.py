import logging as lg
from typing import List, Dict, Tuple, NoReturn

import regvm.common.ops as ops
from regvm.common.errors import ParseError
from regvm.common.hwconf import MachineConfig, DEFAULT_CONFIG
from regvm.common.word import fits, wrap
from regvm.asm.program import Instruction, Operand, Register, Immediate, LabelRef, Program


class FPP:
    ''' First pass processor, collects instructions and labels line by line '''
    instructions: List[Instruction]
    label_dict: Dict[str, int]
    refs: List[Tuple[str, int]]  # label name, line
    line: int

    def __init__(self, config: MachineConfig = DEFAULT_CONFIG):
        self.config = config
        self.instructions = list()
        self.label_dict = dict()
        self.refs = list()
        self.line = 0

    def fail(self, message: str) -> NoReturn:
        raise ParseError(message, self.line)

    @staticmethod
    def is_register(token: str) -> bool:
        return token[0] == 'r' and token[1:].isascii() and token[1:].isdigit()

    # Operands
    def read_register(self, token: str) -> Register:
        index = int(token[1:])

        if index >= self.config.registers:
            self.fail(f'{token} does not exist')

        return Register(index)

    def read_immediate(self, token: str, unsigned: bool = False) -> Immediate:
        try:
            value = int(token, 0)
        except ValueError:
            self.fail(f'malformed immediate `{token}`')

        if unsigned and value < 0:
            self.fail(f'immediate `{token}` must not be negative')

        if not fits(value, self.config.word_bits):
            self.fail(f'immediate `{token}` does not fit in {self.config.word_bits} bits')

        if unsigned:
            # Counts keep their magnitude
            return Immediate(value)

        return Immediate(wrap(value, self.config.word_bits))

    def read_operand(self, token: str, unsigned: bool = False) -> Operand:
        if token[0] in '+-0123456789':
            return self.read_immediate(token, unsigned)

        if self.is_register(token):
            return self.read_register(token)

        if token.isidentifier():
            self.refs.append((token, self.line))
            return LabelRef(token)

        self.fail(f'garbage operand `{token}`')

    # Handlers
    def on_label(self, name: str):
        if self.is_register(name):
            self.fail(f'`{name}` is a register and cannot be a label')

        if name in self.label_dict:
            self.fail(f'duplicate label `{name}`')

        index = len(self.instructions)
        self.label_dict[name] = index
        lg.debug(f'Label {name} @ {index}')

    def on_cmd(self, cmd: Tuple[str, List[str]]):
        opcode, tokens = cmd
        signature = ops.SIGNATURES.get(opcode)

        if signature is None:
            self.fail(f'unknown instruction `{opcode}`')

        if len(tokens) != len(signature):
            self.fail(f'`{opcode}` expects {len(signature)} operand(s), got {len(tokens)}')

        unsigned = opcode in ops.UNSIGNED_IMMEDIATES
        operands = tuple(self.read_operand(token, unsigned) for token in tokens)

        for position, (operand, kind) in enumerate(zip(operands, signature), start=1):
            if operand.kind not in kind:
                self.fail(
                    f'operand {position} of `{opcode}` must be {kind.describe()}, '
                    f'got {operand.kind.describe()} `{operand}`'
                )

        self.instructions.append(Instruction(opcode, operands, self.line))

    # Second pass
    def finish(self) -> Program:
        for name, line in self.refs:
            if name not in self.label_dict:
                raise ParseError(f'unknown label `{name}`', line)

        return Program(tuple(self.instructions), self.label_dict)
