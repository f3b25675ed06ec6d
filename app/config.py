"""Application settings loaded from environment variables."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_PORT = 3001


class Settings(BaseSettings):
    # API
    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)

    # Logging (also handed to uvicorn)
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"

    # An empty PORT= behaves like an unset one
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_level(cls, value):
        return value.lower() if isinstance(value, str) else value


def load_settings() -> Settings:
    """Read settings from the environment (and .env) once."""
    return Settings()
