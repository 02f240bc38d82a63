"""
discovery_sdk.tier0_core.config
────────────────────────────────
Bootstrap settings: the handful of values needed before the property source
exists (which namespace to read, which property files to load, whether to
watch them, how to log). Reads from .env → environment variables. Everything else the
client needs is resolved from the property source at call time by
ConfigResolver.

Minimal stack: pydantic-settings + python-dotenv
Env prefix:     DISCOVERY_ (e.g. DISCOVERY_NAMESPACE, DISCOVERY_ENVIRONMENT)
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discovery_sdk.tier0_core.errors import ConfigurationError

DEFAULT_NAMESPACE = "eureka."
DEFAULT_PROPS_NAME = "eureka-client"
DEFAULT_ENVIRONMENT = "test"


class DiscoverySettings(BaseSettings):
    """
    Typed bootstrap configuration for one discovery client instance.
    All env vars are prefixed with DISCOVERY_.
    """

    model_config = SettingsConfigDict(
        env_prefix="DISCOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Property namespace ────────────────────────────────────────────────────
    namespace: str = Field(default=DEFAULT_NAMESPACE)

    # ── Property files ────────────────────────────────────────────────────────
    props_name: str = Field(default=DEFAULT_PROPS_NAME, min_length=1)
    environment: str = Field(default=DEFAULT_ENVIRONMENT, min_length=1)
    config_dir: str = Field(default=".")
    watch_interval_seconds: float = Field(default=0.0, ge=0)

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if v and not v.endswith("."):
            raise ValueError(f"namespace must be empty or end with '.', got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}, got {v!r}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v.lower()

    @property
    def watch_enabled(self) -> bool:
        return self.watch_interval_seconds > 0


@lru_cache(maxsize=1)
def get_settings() -> DiscoverySettings:
    """
    Return the process-wide bootstrap settings. Cached after first call.
    Call _reset_settings() in tests to pick up new env vars.
    """
    try:
        return DiscoverySettings()
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid discovery settings: {exc.error_count()} error(s)",
            errors=[err["msg"] for err in exc.errors()],
        ) from exc


def _reset_settings() -> None:
    """For tests: clear the settings cache."""
    get_settings.cache_clear()


__all__ = [
    "DEFAULT_NAMESPACE",
    "DEFAULT_PROPS_NAME",
    "DEFAULT_ENVIRONMENT",
    "DiscoverySettings",
    "get_settings",
]
