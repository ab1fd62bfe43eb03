from __future__ import annotations

import io
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
import structlog
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from structlog.testing import capture_logs

from routelog.config import Settings, get_settings
from routelog.context import add_error, set_status
from routelog.errors import ErrorType
from routelog.logging import configure_logging
from routelog.main import create_app


_ENV_VARS = (
    "ROUTELOG_TAG",
    "ROUTELOG_REQID_HEADER",
    "ROUTELOG_SKIP_PATHS",
    "ROUTELOG_LOG_LEVEL",
    "ROUTELOG_TRUST_FORWARDED_HEADERS",
    "ROUTELOG_ERROR_TYPE",
)


async def _errors_without_response(scope: dict[str, Any], receive: Any, send: Any) -> None:
    # Raw ASGI handler: attaches errors and returns without responding.
    add_error(scope, "validation failed", error_type=ErrorType.PUBLIC, meta={"field": "email"})
    add_error(scope, RuntimeError("db timeout"))
    set_status(scope, 422)


def build_app(sink: io.StringIO, **overrides: Any) -> FastAPI:
    app = create_app(Settings(**overrides), out=sink)

    @app.get("/users", status_code=201)
    async def create_user() -> dict[str, str]:
        return {"id": "u1"}

    @app.get("/private-error")
    async def private_error(request: Request) -> dict[str, bool]:
        add_error(request, "cache miss", meta="users:42")
        return {"ok": True}

    @app.get("/context")
    async def bound_context() -> dict[str, Any]:
        return structlog.contextvars.get_contextvars()

    @app.get("/fail")
    async def fail() -> dict[str, str]:
        raise RuntimeError("boom")

    app.mount("/raw", _errors_without_response)
    return app


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def sink() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def log_events() -> list[dict[str, Any]]:
    configure_logging()
    with capture_logs() as events:
        yield events


@pytest.fixture
def app_factory() -> Callable[..., FastAPI]:
    return build_app


@pytest.fixture
async def api_client(sink: io.StringIO) -> AsyncIterator[AsyncClient]:
    app = build_app(sink, tag="TEST", skip_paths=["/health"])
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
