import sys
from typing import List, TextIO, Tuple

import click

from regvm.runtime.dump import Snapshot, render


class Console:
    ''' Terminal side of the machine: stdout for snapshots, stdin for resume '''

    def __init__(self, stdin: TextIO | None = None):
        self.stdin = stdin

    def emit(self, header: str, snapshot: Snapshot):
        click.echo(header)

        for line in render(snapshot):
            click.echo(line)

    def breakpoint(self, line: int, snapshot: Snapshot):
        header = click.style('Debug:', fg='yellow') + ' ' + click.style(f'line {line}', fg='blue')
        self.emit(header, snapshot)

    def finished(self, snapshot: Snapshot):
        self.emit(click.style('Finished:', fg='green'), snapshot)

    def wait_resume(self):
        # Content is ignored, any line resumes
        stdin = self.stdin if self.stdin is not None else sys.stdin

        if stdin.readline() == '':
            raise EOFError('stdin closed')


class HeadlessConsole(Console):
    ''' Records snapshots and resumes immediately '''
    breakpoints: List[Tuple[int, Snapshot]]
    final: Snapshot | None

    def __init__(self):
        super().__init__()
        self.breakpoints = []
        self.final = None

    def breakpoint(self, line: int, snapshot: Snapshot):
        self.breakpoints.append((line, snapshot))

    def finished(self, snapshot: Snapshot):
        self.final = snapshot

    def wait_resume(self):
        pass
