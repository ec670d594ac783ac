"""
Orchestration of the polling tasks: starting, waiting, stopping, and failing.

Only tasks are accepted, not any awaitables: the tasks are cancelled
and then awaited again until they exit, which only tasks allow.
"""
import asyncio
from typing import TYPE_CHECKING, Any, Collection, Coroutine, Optional, Set, Tuple

from curito._cogs.helpers import typedefs

# `asyncio.Task` is generic for type-checkers only, not at runtime.
if TYPE_CHECKING:
    Task = asyncio.Task[Any]
else:
    Task = asyncio.Task


def create_task(coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None) -> Task:
    return asyncio.create_task(coro, name=name)


async def wait(
        tasks: Collection[Task],
        *,
        timeout: Optional[float] = None,
        return_when: Any = asyncio.ALL_COMPLETED,
) -> Tuple[Set[Task], Set[Task]]:
    """ Same as :func:`asyncio.wait`, but nothing to wait for is not an error. """
    if not tasks:
        return set(), set()
    return await asyncio.wait(tasks, timeout=timeout, return_when=return_when)


async def stop(
        tasks: Collection[Task],
        *,
        title: str,
        quiet: bool = False,
        cancelled: bool = False,
        logger: Optional[typedefs.Logger] = None,
) -> Tuple[Set[Task], Set[Task]]:
    """
    Cancel the tasks and wait for all of them to exit, with no time limits.

    If the stopping is cancelled itself, the tasks remain cancelled but not awaited.
    ``cancelled=True`` marks the stopping as a part of an ongoing cancellation.
    ``quiet=True`` hides everything except the failures to stop.
    """
    def log(message: str) -> None:
        if logger is not None:
            logger.debug(f"{title.capitalize()} tasks {message}")

    if not tasks:
        if not quiet:
            log("need no stopping: there are none.")
        return set(), set()

    for task in tasks:
        task.cancel()
    try:
        done, pending = await wait(tasks)
    except asyncio.CancelledError:
        left = {task for task in tasks if not task.done()}
        reason = "cancelled twice" if cancelled else "cancelled"
        log(f"are {'not ' if left else ''}stopped, the stopping is {reason}; left: {left!r}")
        raise
    if not quiet:
        log(f"are stopped after {'cancellation' if cancelled else 'finishing'}.")
    return done, pending


async def reraise(tasks: Collection[Task]) -> None:
    """ Escalate the first error of the tasks, if any. Cancellations are not errors. """
    for task in tasks:
        exc = None if task.cancelled() else task.exception()
        if exc is not None:
            raise exc
