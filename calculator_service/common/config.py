"""Environment-driven settings for the calculator service and its client."""
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, IPvAnyAddress, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Calculator settings, read from ``CALCULATOR_*`` environment variables or a ``.env`` file.

    Examples:
        - CALCULATOR_PORT=9090
        - CALCULATOR_LOG_FILE=  (empty value disables the log file)
    """

    model_config = SettingsConfigDict(env_prefix="CALCULATOR_", env_file=".env", extra="ignore")

    # Server
    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8080, ge=1, le=65535, description="Server TCP port")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"], description="Origins allowed to call the API"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Package logging level")
    log_file: Optional[Path] = Field(default=Path("calculator.log"), description="Log file path")
    log_format: Literal["json", "text"] = Field(default="json", description="Log file format")

    # Client
    api_base_url: str = Field(default="http://127.0.0.1:8080", description="Service root URL")
    request_timeout: float = Field(default=10.0, gt=0, description="Client timeout in seconds")

    @field_validator("log_file", mode="before")
    @classmethod
    def empty_log_file_disables_file_logging(cls, v):
        """An empty value means no log file."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
