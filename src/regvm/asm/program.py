from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, TypeAlias

import regvm.common.ops as ops


@dataclass(frozen=True)
class Register:
    index: int

    kind = ops.Kind.REGISTER

    def __str__(self) -> str:
        return f'r{self.index}'


@dataclass(frozen=True)
class Immediate:
    value: int

    kind = ops.Kind.IMMEDIATE

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LabelRef:
    name: str

    kind = ops.Kind.LABEL

    def __str__(self) -> str:
        return self.name


Operand: TypeAlias = Register | Immediate | LabelRef


@dataclass(frozen=True)
class Instruction:
    opcode: str
    operands: tuple[Operand, ...]
    line: int  # 1-based source line

    def __str__(self) -> str:
        if not self.operands:
            return self.opcode

        return f'{self.opcode} ' + ', '.join(str(o) for o in self.operands)


@dataclass(frozen=True)
class Program:
    instructions: tuple[Instruction, ...] = ()
    labels: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the caller's dict
        object.__setattr__(self, 'labels', MappingProxyType(dict(self.labels)))

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def resolve(self, label: str) -> int:
        return self.labels[label]
