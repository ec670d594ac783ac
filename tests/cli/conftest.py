import functools

import click.testing
import pytest

from curito._cogs.structs.outcomes import FailureKind, WaitOutcome
from curito.cli import main


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def real_run(mocker):
    return mocker.patch('curito._core.reactor.waiting.run', return_value=WaitOutcome())


@pytest.fixture()
def failed_run(mocker):
    outcome = WaitOutcome(failure=FailureKind.TASK_TIMEOUT)
    return mocker.patch('curito._core.reactor.waiting.run', return_value=outcome)
