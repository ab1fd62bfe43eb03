from __future__ import annotations

import sys
import time
from datetime import datetime
from typing import Any, Callable, Iterable, TextIO

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse, PlainTextResponse

from routelog.colors import RESET, color_for_method, color_for_status
from routelog.context import pending_status, request_errors, set_request_id
from routelog.errors import ErrorType
from routelog.reqid import PROCESS_REQID, ReqIdGenerator


# Error bodies written with this status keep the status the handler set (200 if none).
KEEP_STATUS = -1

TIME_FORMAT = "%Y/%m/%d - %H:%M:%S"
START_FORMAT = "[%s] [%s] [Route Start]\t%s |%s  %s %-7s %s\n"
END_FORMAT = "[%s] [%s] [Route End]\t%s |%s %3d %s| %13s | %s |%s  %s %-7s %s\n%s"

_REDACTED_HEADERS = {"authorization", "cookie", "proxy-authorization"}

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000


def _fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_latency(nanoseconds: int) -> str:
    """Render a duration the way Go prints ``time.Duration`` (``1.5ms``, ``2m3s``)."""

    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    n = abs(nanoseconds)
    if n < _NS_PER_US:
        return f"{sign}{n}ns"
    if n < _NS_PER_MS:
        return f"{sign}{_fraction(n, _NS_PER_US)}µs"
    if n < _NS_PER_S:
        return f"{sign}{_fraction(n, _NS_PER_MS)}ms"

    hours, rem = divmod(n, 3600 * _NS_PER_S)
    minutes, rem = divmod(rem, 60 * _NS_PER_S)
    seconds = f"{_fraction(rem, _NS_PER_S)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


def request_uri(scope: dict[str, Any]) -> str:
    raw_path = scope.get("raw_path")
    # Some servers leave the query on raw_path.
    path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else scope.get("path", "")
    query = scope.get("query_string") or b""
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


def client_ip(scope: dict[str, Any], headers: Headers, trust_forwarded_headers: bool = True) -> str:
    if trust_forwarded_headers:
        forwarded_for = headers.get("x-forwarded-for", "")
        first = forwarded_for.split(",", 1)[0].strip()
        if first:
            return first
        real_ip = headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip
    client = scope.get("client")
    return client[0] if client else ""


class RequestLoggerMiddleware:
    """Resolves the request id and writes colorized start/end route lines.

    The id comes from the inbound ``X-Reqid`` header or is generated, and is
    always echoed back on the response. Requests whose URI is in
    ``skip_paths`` still get an id but produce no route lines.

    The ``route_start`` event goes through structlog; call
    ``configure_logging`` first (``add_route_logging`` does) or structlog's
    default printer writes it to stdout next to the route lines.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        out: TextIO | None = None,
        skip_paths: Iterable[str] = (),
        tag: str = "ROUTE",
        reqid_header: str = "X-Reqid",
        reqid: ReqIdGenerator = PROCESS_REQID,
        trust_forwarded_headers: bool = True,
    ) -> None:
        self.app = app
        self.out = out if out is not None else sys.stdout
        self.skip_paths = frozenset(skip_paths)
        self.tag = tag
        self.reqid_header = reqid_header
        self.reqid = reqid
        self.trust_forwarded_headers = trust_forwarded_headers
        self._log = structlog.get_logger("routelog")

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        reqid = headers.get(self.reqid_header) or self.reqid()
        set_request_id(scope, reqid)

        method = scope.get("method", "")
        path = request_uri(scope)
        ip = client_ip(scope, headers, self.trust_forwarded_headers)
        logged = path not in self.skip_paths

        structlog.contextvars.bind_contextvars(request_id=reqid, method=method, path=path)

        start = datetime.now()
        start_ns = time.perf_counter_ns()

        if logged:
            self._write(
                START_FORMAT
                % (self.tag, reqid, start.strftime(TIME_FORMAT), color_for_method(method), RESET, method, path)
            )
            self._log.info(
                "route_start",
                client_ip=ip,
                http_version=scope.get("http_version"),
                headers={k: ("***" if k in _REDACTED_HEADERS else v) for k, v in headers.items()},
            )

        status_code: int = 500
        started = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code, started

            if message.get("type") == "http.response.start":
                started = True
                status_code = int(message.get("status", 500))
                message.setdefault("headers", [])
                MutableHeaders(scope=message)[self.reqid_header] = reqid

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            # Answer here so the 500 still carries the request id; the
            # server error middleware skips its own response once started.
            if not started:
                await PlainTextResponse("Internal Server Error", status_code=500)(scope, receive, send_wrapper)
            raise
        finally:
            if logged:
                latency = time.perf_counter_ns() - start_ns
                end = datetime.now()
                comment = str(request_errors(scope).by_type(ErrorType.PRIVATE))
                self._write(
                    END_FORMAT
                    % (
                        self.tag,
                        reqid,
                        end.strftime(TIME_FORMAT),
                        color_for_status(status_code),
                        status_code,
                        RESET,
                        format_latency(latency),
                        ip,
                        color_for_method(method),
                        RESET,
                        method,
                        path,
                        comment,
                    )
                )

            structlog.contextvars.clear_contextvars()

    def _write(self, line: str) -> None:
        try:
            self.out.write(line)
        except (OSError, ValueError):
            # Closed or broken sinks never fail the request.
            self._log.warning("route_line_write_failed", exc_info=True)


class ErrorLoggerMiddleware:
    """Writes the request's accumulated errors as JSON if the handler sent no response."""

    def __init__(
        self,
        app: Callable[..., Any],
        error_type: ErrorType = ErrorType.ANY,
        status_code: int = KEEP_STATUS,
    ) -> None:
        self.app = app
        self.error_type = error_type
        self.status_code = status_code

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        written = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal written

            if message.get("type") == "http.response.start":
                written = True

            await send(message)

        await self.app(scope, receive, send_wrapper)

        if written:
            return

        errors = request_errors(scope).by_type(self.error_type)
        if not errors:
            return

        status = pending_status(scope) if self.status_code == KEEP_STATUS else self.status_code
        response = JSONResponse(errors.to_json(), status_code=status)
        await response(scope, receive, send)
