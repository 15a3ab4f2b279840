import tomllib
from dataclasses import dataclass, fields
from pathlib import Path


NUMBER_OF_REGISTERS = 8
WORD_BITS = 64


@dataclass(frozen=True)
class MachineConfig:
    registers: int = NUMBER_OF_REGISTERS
    word_bits: int = WORD_BITS

    def __post_init__(self):
        if self.registers < 1:
            raise ValueError(f'At least one register is required, got {self.registers}')

        if self.word_bits < 2:
            raise ValueError(f'Word width must be at least 2 bits, got {self.word_bits}')


DEFAULT_CONFIG = MachineConfig()


def load_config(path: str | Path) -> MachineConfig:
    if isinstance(path, str):
        path = Path(path)

    config = tomllib.loads(path.read_text(encoding='utf-8'))
    machine = config.get('machine', {})
    known = {f.name for f in fields(MachineConfig)}

    for key, value in machine.items():
        if key not in known:
            raise ValueError(f'Unknown machine setting `{key}`')

        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f'Machine setting `{key}` must be an integer')

    return MachineConfig(**machine)
