"""
Polling of one component until its pods are ready.

Every component is polled in its own task, independently of other components.
The task re-queries the number of ready pods every interval, and exits as soon
as the expected number is reached, so that the satisfied components do not
load the cluster API with useless requests while others are still waiting.

The task's own timeout bounds everything inside it, including a hanging
cluster query: a query cannot make the task outlive its time budget.
"""
import asyncio
from typing import Awaitable, Callable, Optional

import aiohttp

from curito._cogs.clients import errors
from curito._cogs.structs import components, requests
from curito._core.engines import loggers

# The collaborator: the number of ready pods for the label's key & value.
ReadyPodsCounter = Callable[[str, str], Awaitable[int]]

# The errors that can be fixed by the cluster itself over time. Everything else is a bug.
TRANSIENT_ERRORS = (errors.APIError, aiohttp.ClientError, asyncio.TimeoutError)


async def poll_component(
        component: components.Component,
        *,
        request: requests.WaitRequest,
        counter: ReadyPodsCounter,
        logger: loggers.ComponentLogger,
) -> int:
    """
    Re-query the cluster until the readiness condition holds; return the count.

    This coroutine never exits on its own until the condition is satisfied.
    The time limits are the caller's responsibility.
    """
    selector = f"{request.label_key}={component.value}"
    last_count: Optional[int] = None
    while True:
        try:
            count = await counter(request.label_key, component.value)
        except TRANSIENT_ERRORS as e:
            logger.warning(f"Cannot count the ready pods for {selector}; will retry: {e!r}")
        else:
            if request.strategy.is_satisfied(count, request.expected_pods):
                return count
            if count != last_count:
                logger.info(f"{count} of {request.expected_pods} pods are ready for {selector}.")
            else:
                logger.debug(f"Still {count} of {request.expected_pods} pods ready for {selector}.")
            last_count = count

        await asyncio.sleep(request.interval)


async def wait_for_component(
        component: components.Component,
        *,
        request: requests.WaitRequest,
        counter: ReadyPodsCounter,
        logger: loggers.ComponentLogger,
) -> bool:
    """
    Poll one component within its own timeout. Return ``True`` if it is ready.
    """
    try:
        count = await asyncio.wait_for(
            poll_component(component, request=request, counter=counter, logger=logger),
            timeout=request.timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Not ready in {request.timeout}s: "
                       f"expected {request.expected_pods} ready pods.")
        return False
    else:
        logger.info(f"Ready: {count} ready pods.")
        return True
