''' Fixed-width two's complement helpers '''


def mask(bits: int) -> int:
    return (1 << bits) - 1


def wrap(value: int, bits: int) -> int:
    value &= mask(bits)

    if value >> (bits - 1):
        value -= 1 << bits

    return value


def to_unsigned(value: int, bits: int) -> int:
    return value & mask(bits)


def fits(value: int, bits: int) -> bool:
    # Both signed and unsigned spellings are accepted
    return -(1 << (bits - 1)) <= value <= mask(bits)
