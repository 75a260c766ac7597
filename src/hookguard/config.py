"""Configuration via environment variables with Pydantic validation.

All values are read from ``HOOKGUARD_``-prefixed environment variables
(with .env file support). The address and hostname rule tables are not
configurable; only the operational knobs are.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMATS = ("json", "console")


class Settings(BaseSettings):
    """hookguard settings. All values sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HOOKGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # DNS: bound on the only I/O step; a timeout rejects the endpoint
    dns_timeout_seconds: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("dns_timeout_seconds")
    @classmethod
    def dns_timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HOOKGUARD_DNS_TIMEOUT_SECONDS must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def log_format_known(cls, v: str) -> str:
        fmt = v.strip().lower()
        if fmt not in LOG_FORMATS:
            raise ValueError(f"HOOKGUARD_LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}")
        return fmt


def get_settings() -> Settings:
    """Create and return a validated Settings instance.

    Raises ValidationError with clear messages if an env var is invalid.
    """
    return Settings()
