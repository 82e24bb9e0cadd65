"""
Typed errors of K8s API, so that the checks do not depend on ``aiohttp``.

The network-level errors (connectivity, SSL) are escalated from ``aiohttp``
as is. Only the HTTP responses with 4xx/5xx statuses become :class:`APIError`
or its subclasses, with the original ``aiohttp`` error chained as the cause.
"""
import re
from typing import Any, Dict, Mapping, Optional, Type, cast

import aiohttp
from typing_extensions import TypedDict


# The fields of K8s's Status payloads that the checks look into.
class RawStatus(TypedDict, total=False):
    kind: str
    code: int
    reason: str
    message: str
    details: Mapping[str, Any]


class APIError(Exception):

    def __init__(self, payload: Optional[RawStatus], *, status: int) -> None:
        super().__init__(payload.get('message') if payload else None, payload)
        self.status = status
        self.payload: RawStatus = payload or {}

    def __str__(self) -> str:
        return self.message or f"K8s API error with HTTP status {self.status}"

    @property
    def code(self) -> Optional[int]:
        return self.payload.get('code')

    @property
    def reason(self) -> Optional[str]:
        return self.payload.get('reason')

    @property
    def message(self) -> Optional[str]:
        return self.payload.get('message')

    @property
    def details(self) -> Optional[Mapping[str, Any]]:
        return self.payload.get('details')


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


class APIServerError(APIError):
    pass


_ERRORS_BY_STATUS: Dict[int, Type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
    409: APIConflictError,
}

# Only as a last resort, for the errors that come without a typed classification.
NOT_FOUND_PATTERN = re.compile(r'.+ not found')


def is_not_found(exc: BaseException) -> bool:
    """
    Check if the error means that the requested object is absent.

    The typed classification is used first: the HTTP status or the reason
    of K8s API's status payload. The error's text is matched only for errors
    that have no HTTP status: e.g. the errors of other client libraries.
    """
    if isinstance(exc, APINotFoundError):
        return True
    if isinstance(exc, APIError):
        return exc.reason == 'NotFound'
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.status == 404
    return bool(NOT_FOUND_PATTERN.search(str(exc)))


async def check_response(response: aiohttp.ClientResponse) -> None:
    """ Raise a typed error for a failed response; keep the successful ones unread. """
    if response.status < 400:
        return

    # The body must be read before raise_for_status() closes it.
    try:
        body = await response.json()
    except (ValueError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        body = None

    # Anything but a Status can contain the objects' data, which must not leak into the logs.
    payload: Optional[RawStatus] = None
    if isinstance(body, dict) and body.get('kind') == 'Status':
        payload = cast(RawStatus, body)

    if response.status >= 500:
        cls: Type[APIError] = APIServerError
    else:
        cls = _ERRORS_BY_STATUS.get(response.status, APIError)

    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(payload, status=response.status) from e
