import asyncio
from typing import Any, Mapping, Optional

import aiohttp

from curito._cogs.clients import auth, errors
from curito._cogs.configs import configuration
from curito._cogs.helpers import typedefs

# Worth retrying: the cluster or the network may recover soon. 4xx errors will not.
RETRIED_ERRORS = (aiohttp.ClientConnectionError, asyncio.TimeoutError, errors.APIServerError)


def make_timeout(settings: configuration.WaiterSettings) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(
        total=settings.networking.request_timeout,
        sock_connect=settings.networking.connect_timeout,
    )


async def request(
        method: str,
        url: str,  # absolute, or relative to the server.
        *,
        context: auth.APIContext,
        settings: configuration.WaiterSettings,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Send a request and return the unparsed response once it is not an error.

    The retried errors are logged and retried after each of the backoffs in turn,
    and escalated when the backoffs are exhausted. Other errors escalate at once.
    """
    if '://' not in url:
        url = f"{context.server.rstrip('/')}/{url.lstrip('/')}"
    what = f"{method.upper()} {url}"
    delays = list(settings.networking.error_backoffs)
    attempts = len(delays) + 1

    attempt = 0
    while True:
        attempt += 1
        if attempt > 1:
            logger.debug(f"Request attempt #{attempt}/{attempts}: {what}")
        try:
            response = await context.session.request(
                method, url,
                params=params,
                headers=headers,
                timeout=timeout or make_timeout(settings),
            )
            await errors.check_response(response)
        except RETRIED_ERRORS as e:
            if attempt >= attempts:
                logger.error(f"Request attempt #{attempt}/{attempts} failed; escalating: {what} -> {e!r}")
                raise
            logger.error(f"Request attempt #{attempt}/{attempts} failed; will retry: {what} -> {e!r}")
            await asyncio.sleep(delays[attempt - 1])
        else:
            if attempt > 1:
                logger.debug(f"Request attempt #{attempt}/{attempts} succeeded: {what}")
            return response


async def get(
        url: str,
        *,
        context: auth.APIContext,
        settings: configuration.WaiterSettings,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        'get', url,
        params=params,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()
