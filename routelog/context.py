"""Per-request values shared between the middleware and route handlers.

Everything lives in the ASGI ``scope["state"]`` dict, which is the same dict
Starlette exposes as ``request.state`` inside handlers.
"""

from __future__ import annotations

from typing import Any, MutableMapping

from starlette.requests import HTTPConnection

from routelog.errors import ErrorList, ErrorType, RequestError


ERRORS_KEY = "routelog_errors"
REQID_KEY = "routelog_reqid"
STATUS_KEY = "routelog_status"


Scope = MutableMapping[str, Any]


def _state(target: HTTPConnection | Scope) -> MutableMapping[str, Any]:
    scope = target.scope if isinstance(target, HTTPConnection) else target
    return scope.setdefault("state", {})


def request_errors(target: HTTPConnection | Scope) -> ErrorList:
    state = _state(target)
    errors = state.get(ERRORS_KEY)
    if errors is None:
        errors = state[ERRORS_KEY] = ErrorList()
    return errors


def add_error(
    target: HTTPConnection | Scope,
    err: BaseException | str,
    error_type: ErrorType = ErrorType.PRIVATE,
    meta: Any = None,
) -> RequestError:
    """Attach an error to the current request; it is reported after the handler returns."""

    return request_errors(target).add(err, error_type=error_type, meta=meta)


def set_request_id(target: HTTPConnection | Scope, reqid: str) -> None:
    _state(target)[REQID_KEY] = reqid


def get_request_id(target: HTTPConnection | Scope) -> str | None:
    return _state(target).get(REQID_KEY)


def set_status(target: HTTPConnection | Scope, status_code: int) -> None:
    """Record the status an error body should use if the handler writes no response."""

    _state(target)[STATUS_KEY] = int(status_code)


def pending_status(target: HTTPConnection | Scope, default: int = 200) -> int:
    return int(_state(target).get(STATUS_KEY, default))
