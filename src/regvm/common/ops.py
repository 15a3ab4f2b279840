from enum import Flag, auto


class Kind(Flag):
    REGISTER = auto()
    IMMEDIATE = auto()
    LABEL = auto()

    def describe(self) -> str:
        return ' or '.join(k.name.lower() for k in Kind if k in self)  # type: ignore


REG = Kind.REGISTER
IMM = Kind.IMMEDIATE
LBL = Kind.LABEL

Signature = tuple[Kind, ...]

# Opcode -> operand kinds
SIGNATURES: dict[str, Signature] = {
    # Basic
    'nop': (),
    'debug': (),            # breakpoint, dump and wait for resume
    'zero': (REG,),         # 0 -> R1
    'mov': (REG, REG | IMM),  # R2/I2 -> R1

    # Arithmetic, all set the zero flag
    'add': (REG, REG, REG),  # R2 + R3 -> R1
    'sub': (REG, REG, REG),  # R2 - R3 -> R1
    'mul': (REG, REG, REG),  # R2 * R3 -> R1
    'div': (REG, REG, REG),  # R2 / R3 -> R1, truncated
    'mod': (REG, REG, REG),  # R2 % R3 -> R1, sign of R2
    'and': (REG, REG, REG),  # R2 & R3 -> R1
    'or': (REG, REG, REG),   # R2 | R3 -> R1
    'xor': (REG, REG, REG),  # R2 ^ R3 -> R1
    'not': (REG,),           # ~R1 -> R1
    'inc': (REG,),           # R1 + 1 -> R1
    'dec': (REG,),           # R1 - 1 -> R1
    'shl': (REG, IMM),       # R1 << I2 -> R1
    'shr': (REG, IMM),       # R1 >> I2 -> R1, logical
    'cmp': (REG, REG | IMM),  # zero = R1 == R2/I2

    # Flow
    'j': (LBL,),
    'jz': (LBL,),
    'jnz': (LBL,),
}

# Immediates that may not be negative
UNSIGNED_IMMEDIATES = {'shl', 'shr'}
