"""
Errors of the cluster API, as seen by the waiter.

The HTTP statuses of interest get their own classes, so that the callers
can react to them specifically (e.g. a missing namespace vs. no permissions).
When the cluster explains the error with its ``Status`` object, it is kept;
any other body is dropped, as it can contain anything at all.
"""
import collections.abc
from typing import Dict, Optional, Type

import aiohttp
from typing_extensions import Literal, TypedDict


class RawStatus(TypedDict, total=False):
    kind: Literal["Status"]
    code: int
    reason: str
    message: str


class APIError(Exception):

    def __init__(self, payload: Optional[RawStatus], *, status: int) -> None:
        self.status = status
        self.payload = payload
        super().__init__(self.message or f"HTTP {status}")

    @property
    def code(self) -> Optional[int]:
        return self.payload.get('code') if self.payload else None

    @property
    def reason(self) -> Optional[str]:
        return self.payload.get('reason') if self.payload else None

    @property
    def message(self) -> Optional[str]:
        return self.payload.get('message') if self.payload else None


class APIClientError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIUnauthorizedError(APIClientError):
    pass


class APIForbiddenError(APIClientError):
    pass


class APINotFoundError(APIClientError):
    pass


class APIConflictError(APIClientError):
    pass


ERRORS_BY_STATUS: Dict[int, Type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
    409: APIConflictError,
}


def error_class(status: int) -> Type[APIError]:
    if status in ERRORS_BY_STATUS:
        return ERRORS_BY_STATUS[status]
    elif 400 <= status < 500:
        return APIClientError
    elif 500 <= status < 600:
        return APIServerError
    else:
        return APIError


async def check_response(response: aiohttp.ClientResponse) -> None:
    """ Raise an API error for the 4xx/5xx responses; let the good ones through. """
    if response.status < 400:
        return

    payload: Optional[RawStatus]
    try:
        payload = await response.json(content_type=None)
    except (ValueError, aiohttp.ClientError):
        payload = None
    finally:
        response.release()

    if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
        payload = None
    raise error_class(response.status)(payload, status=response.status)
