import sys
import logging as lg
from pathlib import Path
from typing import Dict, Mapping, Sequence

import click

import regvm.asm.asm as asm
import regvm.common.hwconf as hw
import regvm.runtime.cpu as cpu
from regvm.asm.program import Program
from regvm.common.errors import ParseError, ExecutionError, RegvmError
from regvm.common.word import fits
from regvm.runtime.console import Console


EXIT_HALT = 0
EXIT_PARSE_ERROR = 1
EXIT_KEYBOARD = 3
EXIT_EXEC_ERROR = 100


def parse_override(arg: str, config: hw.MachineConfig = hw.DEFAULT_CONFIG) -> tuple[int, int]:
    ''' Parses `rN=value` into (N, value) '''
    name, sep, value = arg.partition('=')

    digits = name[1:]

    if not sep or name[:1] not in ('r', 'R') or not (digits.isascii() and digits.isdigit()):
        raise ParseError(f'Unable to parse arg: `{arg}`')

    index = int(digits)

    if index >= config.registers:
        raise ParseError(f'r{index} does not exist')

    try:
        number = int(value.strip(), 0)
    except ValueError:
        raise ParseError(f'Unable to parse arg: `{arg}`') from None

    if not fits(number, config.word_bits):
        raise ParseError(f'Value of r{index} does not fit in {config.word_bits} bits')

    return index, number


def parse_overrides(
    args: Sequence[str], config: hw.MachineConfig = hw.DEFAULT_CONFIG
) -> Dict[int, int]:
    # Later assignments win
    return dict(parse_override(arg, config) for arg in args)


def execute(
    program: Program, console: Console | None = None,
    registers: Mapping[int, int] | None = None,
    config: hw.MachineConfig = hw.DEFAULT_CONFIG
) -> cpu.CPU:
    proc = cpu.CPU(program, console, registers, config)

    try:
        while True:
            proc.exec_next()

    except cpu.Halt:
        lg.info('Execution halted')

    return proc


def report_error(error: RegvmError):
    click.echo(click.style('Error:', fg='red') + f' {error}', err=True)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option(
    '-c', '--config', 'config_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Machine configuration (TOML)'
)
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('overrides', nargs=-1)
def run(verbose: bool, config_path: Path | None, source: Path, overrides: Sequence[str]):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('REGVM')

    config = hw.DEFAULT_CONFIG

    if config_path is not None:
        try:
            config = hw.load_config(config_path)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint='--config')

    console = Console()

    try:
        registers = parse_overrides(overrides, config)
        program = asm.assemble_file(source, config)
        proc = execute(program, console, registers, config)

    except ParseError as e:
        lg.info('Rejected before execution')
        report_error(e)
        sys.exit(EXIT_PARSE_ERROR)

    except ExecutionError as e:
        lg.info('Execution halted on error')
        report_error(e)
        sys.exit(EXIT_EXEC_ERROR)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    console.finished(proc.snapshot())
    sys.exit(EXIT_HALT)


if __name__ == '__main__':
    run()
