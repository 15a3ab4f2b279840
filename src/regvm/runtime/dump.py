from dataclasses import dataclass
from typing import List

from regvm.common.word import mask, to_unsigned


@dataclass(frozen=True)
class Snapshot:
    registers: tuple[int, ...]  # signed values
    zero: bool
    word_bits: int


def render(snapshot: Snapshot) -> List[str]:
    bits = snapshot.word_bits
    u_width = max(len(str(mask(bits))), len('unsigned'))
    s_width = max(len(str(-(1 << (bits - 1)))), len('signed'))
    h_width = (bits + 3) // 4

    names = [f'R{i}:' for i in range(len(snapshot.registers))]
    n_width = max(len(name) for name in names)

    lines = [
        f'Zero: {"true" if snapshot.zero else "false"}',
        f'{"":{n_width}}  {"unsigned":>{u_width}}  {"signed":>{s_width}}  {"hex":>{h_width + 2}}'
    ]

    for name, value in zip(names, snapshot.registers):
        unsigned = to_unsigned(value, bits)
        lines.append(
            f'{name:<{n_width}}  {unsigned:>{u_width}}  {value:>{s_width}}  0x{unsigned:0{h_width}X}'
        )

    return lines
