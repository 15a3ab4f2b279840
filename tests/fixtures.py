# type: ignore
import pytest
from click.testing import CliRunner

from regvm.runtime.console import HeadlessConsole


@pytest.fixture
def headless():
    yield HeadlessConsole()


@pytest.fixture
def runner():
    yield CliRunner()
