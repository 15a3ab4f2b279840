import logging as lg
from pathlib import Path

import pyparsing as pp

import regvm.asm.grammar as grammar
from regvm.asm.fpp import FPP
from regvm.asm.program import Program
from regvm.common.errors import ParseError
from regvm.common.hwconf import MachineConfig, DEFAULT_CONFIG


def assemble(source: str, config: MachineConfig = DEFAULT_CONFIG) -> Program:
    first_pass = FPP(config)

    for number, text in enumerate(source.splitlines(), start=1):
        first_pass.line = number

        try:
            actions = grammar.statement.parse_string(text.lower(), parse_all=True)
        except pp.ParseException as e:
            raise ParseError(f'unable to parse `{text.strip()}` (column {e.column})', number) from None

        for (func, arg) in actions:
            func(first_pass, arg)

    program = first_pass.finish()
    lg.info(f'Parsed {len(program)} instruction(s), {len(program.labels)} label(s)')
    return program


def assemble_file(filepath: str | Path, config: MachineConfig = DEFAULT_CONFIG) -> Program:
    if isinstance(filepath, str):
        filepath = Path(filepath)

    lg.debug(f'Reading {filepath}')

    try:
        source = filepath.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise ParseError(f'{filepath} is not valid UTF-8 text ({e.reason})') from None

    return assemble(source, config)
