from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from routelog.errors import ErrorType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True)

    tag: str = Field(default="ROUTE", alias="ROUTELOG_TAG")
    reqid_header: str = Field(default="X-Reqid", alias="ROUTELOG_REQID_HEADER")
    skip_paths: list[str] = Field(default_factory=list, alias="ROUTELOG_SKIP_PATHS")
    log_level: str = Field(default="INFO", alias="ROUTELOG_LOG_LEVEL")
    trust_forwarded_headers: bool = Field(default=True, alias="ROUTELOG_TRUST_FORWARDED_HEADERS")
    error_type: str = Field(default="ANY", alias="ROUTELOG_ERROR_TYPE")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("error_type")
    @classmethod
    def _normalize_error_type(cls, value: str) -> str:
        name = value.upper()
        if name not in ErrorType.__members__:
            raise ValueError(f"unknown error type: {value}")
        return name

    @property
    def error_flags(self) -> ErrorType:
        return ErrorType[self.error_type]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
