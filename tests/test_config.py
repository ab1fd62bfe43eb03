import pytest
from pydantic import ValidationError

from routelog.config import Settings, get_settings
from routelog.errors import ErrorType


def test_defaults() -> None:
    settings = get_settings()
    assert settings.tag == "ROUTE"
    assert settings.reqid_header == "X-Reqid"
    assert settings.skip_paths == []
    assert settings.error_flags is ErrorType.ANY


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROUTELOG_TAG", "GIN")
    monkeypatch.setenv("ROUTELOG_SKIP_PATHS", '["/health", "/metrics"]')
    monkeypatch.setenv("ROUTELOG_LOG_LEVEL", "debug")
    monkeypatch.setenv("ROUTELOG_ERROR_TYPE", "public")

    settings = get_settings()
    assert settings.tag == "GIN"
    assert settings.skip_paths == ["/health", "/metrics"]
    assert settings.log_level == "DEBUG"
    assert settings.error_flags is ErrorType.PUBLIC


def test_rejects_unknown_values() -> None:
    with pytest.raises(ValidationError):
        Settings(log_level="loud")
    with pytest.raises(ValidationError):
        Settings(error_type="fatal")
