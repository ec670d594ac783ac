import asyncio
import logging

import pytest

from curito._cogs.aiokits.aiotasks import create_task, stop

pytestmark = pytest.mark.looptime

logger = logging.getLogger(__name__)


async def idle() -> None:
    await asyncio.Event().wait()


async def stubborn() -> None:
    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        await asyncio.Event().wait()


def own_messages(caplog):
    return [record.message for record in caplog.records if record.name == __name__]


@pytest.fixture(autouse=True)
def _all_levels(caplog):
    caplog.set_level(logging.DEBUG)


@pytest.mark.parametrize('quiet, messages', [
    (False, ["Sample tasks need no stopping: there are none."]),
    (True, []),
])
async def test_nothing_to_stop(caplog, quiet, messages):
    done, pending = await stop([], title='sample', logger=logger, quiet=quiet)
    assert done == pending == set()
    assert own_messages(caplog) == messages


@pytest.mark.parametrize('cancelled, how', [(False, 'finishing'), (True, 'cancellation')])
async def test_idle_tasks_stop_at_once(caplog, looptime, cancelled, how):
    tasks = [create_task(idle()), create_task(idle())]
    done, pending = await stop(tasks, title='sample', logger=logger, cancelled=cancelled)
    assert done == set(tasks)
    assert not pending
    assert all(task.cancelled() for task in tasks)
    assert own_messages(caplog) == [f"Sample tasks are stopped after {how}."]
    assert looptime == 0


async def test_quiet_stopping_logs_nothing(caplog):
    task = create_task(idle())
    done, pending = await stop([task], title='sample', logger=logger, quiet=True)
    assert done == {task}
    assert not pending
    assert not own_messages(caplog)


async def test_stopping_without_a_logger():
    task = create_task(idle())
    done, _ = await stop([task], title='sample')
    assert done == {task}


async def test_stubborn_tasks_are_awaited(looptime):
    task1 = create_task(idle())
    task2 = create_task(stubborn())
    stopper = create_task(stop([task1, task2], title='sample', logger=logger))

    done, _ = await asyncio.wait({stopper}, timeout=100)
    assert not done
    assert task1.done()
    assert not task2.done()

    task2.cancel()
    await asyncio.wait({stopper})
    assert stopper.result() == ({task1, task2}, set())
    assert looptime == 100


@pytest.mark.parametrize('cancelled, reason', [(False, 'cancelled'), (True, 'cancelled twice')])
async def test_stopping_can_be_cancelled(assert_logs, cancelled, reason):
    task1 = create_task(idle())
    task2 = create_task(stubborn())
    stopper = create_task(stop([task1, task2], title='sample', logger=logger, cancelled=cancelled))
    await asyncio.wait({stopper}, timeout=1)

    stopper.cancel()
    await asyncio.wait({stopper})
    assert stopper.cancelled()
    assert task1.done()
    assert not task2.done()
    assert_logs([rf"Sample tasks are not stopped, the stopping is {reason}; left: \{{<Task"])

    task2.cancel()  # so that it does not outlive the test.
    await asyncio.wait({task2})
