from __future__ import annotations

from typing import TextIO

from fastapi import FastAPI

from routelog.config import Settings, get_settings
from routelog.logging import configure_logging
from routelog.middleware import ErrorLoggerMiddleware, RequestLoggerMiddleware
from routelog.reqid import PROCESS_REQID, ReqIdGenerator


def add_route_logging(
    app: FastAPI,
    settings: Settings | None = None,
    out: TextIO | None = None,
    reqid: ReqIdGenerator = PROCESS_REQID,
) -> FastAPI:
    """Install the error reporter and the route logger (logger outermost)."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    app.add_middleware(ErrorLoggerMiddleware, error_type=settings.error_flags)
    app.add_middleware(
        RequestLoggerMiddleware,
        out=out,
        skip_paths=settings.skip_paths,
        tag=settings.tag,
        reqid_header=settings.reqid_header,
        reqid=reqid,
        trust_forwarded_headers=settings.trust_forwarded_headers,
    )
    return app


def create_app(settings: Settings | None = None, out: TextIO | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="routelog", version="0.1.0")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return add_route_logging(app, settings=settings, out=out)


app = create_app()
