"""
Flags used to stop the waiting from outside (e.g. an aborted test run).

A flag can be one of the asyncio primitives, or a thread-safe future
when the waiting runs in a separate thread with its own event loop.
"""
import asyncio
import concurrent.futures
from typing import Any, Optional, Union

Flag = Union['asyncio.Future[Any]', asyncio.Event, 'concurrent.futures.Future[Any]']


async def wait_flag(
        flag: Optional[Flag],
) -> Any:
    """
    Wait for a flag to be raised. Non-raisable (absent) flags wait forever.
    """
    if flag is None:
        return await asyncio.Event().wait()
    elif isinstance(flag, asyncio.Future):
        return await flag
    elif isinstance(flag, asyncio.Event):
        return await flag.wait()
    elif isinstance(flag, concurrent.futures.Future):
        # Shielded: cancelling the waiter must not cancel the caller's own future.
        return await asyncio.shield(asyncio.wrap_future(flag))
    else:
        raise TypeError(f"Unsupported type of a flag: {flag!r}")
