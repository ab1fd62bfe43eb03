from starlette.requests import Request

from routelog.context import add_error, get_request_id, pending_status, request_errors, set_request_id, set_status


def _scope() -> dict:
    return {"type": "http", "method": "GET", "path": "/", "headers": []}


def test_request_and_scope_share_state() -> None:
    scope = _scope()
    request = Request(scope)

    add_error(request, "from handler")
    add_error(scope, "from middleware")

    assert [str(e) for e in request_errors(scope)] == ["from handler", "from middleware"]
    assert request.state.routelog_errors is request_errors(scope)


def test_request_id_round_trip() -> None:
    scope = _scope()
    assert get_request_id(scope) is None
    set_request_id(scope, "abc123")
    assert get_request_id(Request(scope)) == "abc123"


def test_pending_status_defaults_to_200() -> None:
    scope = _scope()
    assert pending_status(scope) == 200
    set_status(scope, 418)
    assert pending_status(scope) == 418
