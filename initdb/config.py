import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_RETRY_SECONDS = 5

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Settings(BaseSettings):
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "pn-registry"
    collection: str = "records"

    # Server selection timeout for one connection attempt
    timeout_ms: int = 5000

    retry_connection_seconds: int = Field(
        DEFAULT_RETRY_SECONDS, validation_alias="RETRY_CONNECTION_SECONDS"
    )

    # Exit non-zero when the seed insert fails (default keeps exit code 0)
    strict_exit_code: bool = Field(False, validation_alias="INIT_DB_STRICT_EXIT_CODE")

    model_config = {
        "env_file": ".env",
        "env_prefix": "PN_REGISTRY_API_MONGODB_",
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("retry_connection_seconds", mode="before")
    @classmethod
    def _coerce_retry_seconds(cls, value):
        return parse_retry_seconds(value)


def parse_retry_seconds(value) -> int:
    """Leading integer of ``value``; anything unparseable or not positive becomes 5."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_RETRY_SECONDS
    if isinstance(value, (int, float)):
        seconds = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return DEFAULT_RETRY_SECONDS
        seconds = int(match.group(1))
    return seconds if seconds > 0 else DEFAULT_RETRY_SECONDS


settings = Settings()
