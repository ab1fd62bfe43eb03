"""Request logging and error reporting middleware for Starlette/FastAPI.

Colorized route start/end lines keyed by a per-request ``X-Reqid``, plus a
JSON error body for handlers that attach errors without writing a response.
"""

from routelog.context import add_error, get_request_id, request_errors, set_status
from routelog.errors import ErrorList, ErrorType, RequestError
from routelog.middleware import KEEP_STATUS, ErrorLoggerMiddleware, RequestLoggerMiddleware
from routelog.reqid import ReqIdGenerator, gen_reqid


__all__ = [
    "KEEP_STATUS",
    "ErrorList",
    "ErrorLoggerMiddleware",
    "ErrorType",
    "ReqIdGenerator",
    "RequestError",
    "RequestLoggerMiddleware",
    "add_error",
    "gen_reqid",
    "get_request_id",
    "request_errors",
    "set_status",
]
