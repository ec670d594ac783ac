import asyncio
import dataclasses
import json
import logging
import re
import sys
from typing import Callable, Dict, List, Sequence, Tuple, Union
from unittest.mock import AsyncMock, MagicMock

import pytest

from curito._cogs.clients.auth import APIContext
from curito._cogs.configs.configuration import WaiterSettings
from curito._cogs.structs.credentials import ConnectionInfo


def pytest_configure(config):
    config.addinivalue_line('markers', "e2e: end-to-end tests with real clusters.")


@pytest.fixture(autouse=True)
def _restore_loggers():
    """ Undo `configure()` after every test: it touches the root & asyncio loggers. """
    saved = []
    for name in [None, 'asyncio']:
        logger = logging.getLogger(name)
        saved.append((logger, logger.handlers[:], logger.level, logger.propagate))
    yield
    for logger, handlers, level, propagate in saved:
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate


@pytest.fixture()
def settings():
    return WaiterSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('curito.tests')


#
# The cluster API is served by `aresponses` on a fake host; nothing goes outside.
#

@pytest.fixture()
def hostname():
    return 'fake-host'


@pytest.fixture()
async def context(hostname):
    # Created in the test's own loop, since aiohttp sessions are bound to it.
    async with APIContext(ConnectionInfo(server=f'https://{hostname}')) as context:
        yield context


@pytest.fixture()
def resp_mocker(context, aresponses):
    """
    Make an `aresponses` handler that remembers its calls and the request bodies.

    The kwargs are those of `MagicMock`: the return value (or the side effect)
    is the response to send back. The parsed body of every request is stored
    as ``request.data`` to be asserted on later via the mock's calls.
    """
    def make(**kwargs):
        responder = MagicMock(**kwargs)

        async def handle(request):
            text = await request.text()
            try:
                request.data = json.loads(text)
            except json.JSONDecodeError:
                request.data = text
            return responder()

        return AsyncMock(side_effect=handle)
    return make


#
# The cluster as seen by the waiter: a scripted counter of the ready pods.
#

CountsSource = Union[int, BaseException, Callable[[], int]]


@dataclasses.dataclass()
class FakeCounter:
    """
    Per-label sequences of the ready pods' counts.

    Every call takes the next item of the label's sequence; the last item
    repeats forever. An item can also be an exception to raise instead.
    All calls are recorded with the loop time at which they were made.
    """
    counts: Dict[str, Sequence[CountsSource]]
    calls: List[Tuple[float, str, str]] = dataclasses.field(default_factory=list)

    async def __call__(self, label_key: str, label_value: str) -> int:
        index = len(self.calls_of(label_value))
        self.calls.append((asyncio.get_running_loop().time(), label_key, label_value))
        sequence = self.counts.get(label_value) or [0]
        item = sequence[min(index, len(sequence) - 1)]
        if isinstance(item, BaseException):
            raise item
        elif callable(item):
            return item()
        else:
            return item

    def calls_of(self, label_value: str) -> List[float]:
        return [ts for ts, _, value in self.calls if value == label_value]


@pytest.fixture()
def fake_counter():
    def factory(**counts: Sequence[CountsSource]) -> FakeCounter:
        return FakeCounter(counts={key.replace('_', '-'): value for key, value in counts.items()})
    return factory


@pytest.fixture()
def no_leftover_tasks():
    async def check() -> None:
        await asyncio.sleep(0)
        current = asyncio.current_task()
        remains = {t for t in asyncio.all_tasks() if t is not current and not t.done()}
        if remains:
            pytest.fail(f"Unattended asyncio tasks detected: {remains!r}")
    return check


#
# The optional client library: either really installed, or hidden from imports.
#

@pytest.fixture()
def kubernetes():
    kubernetes = pytest.importorskip('kubernetes')
    yield kubernetes
    kubernetes.client.Configuration.set_default(None)


@pytest.fixture()
def no_kubernetes(mocker):
    # A None in sys.modules makes the import fail, even if the library is installed.
    hidden = [name for name in sys.modules if name.split('.')[0] == 'kubernetes']
    mocker.patch.dict(sys.modules, {name: None for name in hidden + ['kubernetes']})


@pytest.fixture()
def assert_logs(caplog):
    """
    Check that the patterns are logged in that order, maybe with other messages
    in between, and that none of the messages match the prohibited patterns.
    """
    caplog.set_level(logging.DEBUG)

    def check(patterns=(), prohibited=()):
        __tracebackhide__ = True
        messages = iter(caplog.messages)
        for pattern in patterns:
            if not any(re.search(pattern, message) for message in messages):
                pytest.fail(f"Missing log message (in this order): {pattern!r}")
        for pattern in prohibited:
            found = [message for message in caplog.messages if re.search(pattern, message)]
            if found:
                pytest.fail(f"Prohibited log pattern {pattern!r} is found: {found!r}")
    return check
