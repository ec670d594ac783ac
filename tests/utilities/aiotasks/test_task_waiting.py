import asyncio

import pytest

from curito._cogs.aiokits.aiotasks import create_task, wait

pytestmark = pytest.mark.looptime


async def test_wait_with_no_tasks(looptime):
    done, pending = await wait([])
    assert not done
    assert not pending
    assert looptime == 0


async def test_wait_with_timeout(looptime):
    flag = asyncio.Event()
    task = create_task(flag.wait())
    done, pending = await wait([task], timeout=1.23)
    assert not done
    assert pending == {task}
    assert looptime == 1.23
    flag.set()
    await task


async def test_wait_for_the_first_completed(looptime):
    task1 = create_task(asyncio.sleep(1))
    task2 = create_task(asyncio.sleep(5))
    done, pending = await wait([task1, task2], return_when=asyncio.FIRST_COMPLETED)
    assert done == {task1}
    assert pending == {task2}
    assert looptime == 1
    await task2


async def test_task_names_are_assigned():
    task = create_task(asyncio.sleep(0), name='some name')
    await task
    assert task.get_name() == 'some name'
