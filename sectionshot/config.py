# sectionshot/config.py
"""
Configuration for the screenshot service.
Values come from the environment (optionally a .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

INSECURE_DEFAULT_API_KEY = "your-secret-api-key"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP surface and the capture engine."""

    host: str = "0.0.0.0"
    port: int = 3000
    api_key: str = INSECURE_DEFAULT_API_KEY
    require_api_key: bool = True
    default_section_height: int = 800
    max_section_height: int = 10000
    viewport_width: int = 1280
    settle_delay_ms: int = 300
    settle_timeout_ms: int = 2000
    navigation_timeout_ms: Optional[int] = None
    max_concurrent_sessions: int = 4
    log_level: str = "INFO"

    @property
    def uses_default_api_key(self) -> bool:
        return self.api_key == INSECURE_DEFAULT_API_KEY

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from environment variables, loading .env first."""
        load_dotenv(env_file)
        return cls(
            host=os.getenv("HOST", cls.host),
            port=_env_int("PORT", cls.port),
            api_key=os.getenv("API_KEY") or INSECURE_DEFAULT_API_KEY,
            require_api_key=_env_bool("REQUIRE_API_KEY", cls.require_api_key),
            default_section_height=_env_int("DEFAULT_SECTION_HEIGHT", cls.default_section_height),
            max_section_height=_env_int("MAX_SECTION_HEIGHT", cls.max_section_height),
            viewport_width=_env_int("VIEWPORT_WIDTH", cls.viewport_width),
            settle_delay_ms=_env_int("SETTLE_DELAY_MS", cls.settle_delay_ms),
            settle_timeout_ms=_env_int("SETTLE_TIMEOUT_MS", cls.settle_timeout_ms),
            navigation_timeout_ms=_env_int("NAVIGATION_TIMEOUT_MS", None),
            max_concurrent_sessions=_env_int("MAX_CONCURRENT_SESSIONS", cls.max_concurrent_sessions),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )

    def validate(self) -> "Settings":
        """Validate configuration values, raising ValueError listing every problem."""
        errors = []

        if self.port <= 0 or self.port > 65535:
            errors.append("PORT must be between 1 and 65535")

        if self.require_api_key and not self.api_key:
            errors.append("API_KEY must not be empty when REQUIRE_API_KEY is enabled")

        if self.max_section_height <= 0:
            errors.append("MAX_SECTION_HEIGHT must be positive")

        if not 0 < self.default_section_height <= self.max_section_height:
            errors.append("DEFAULT_SECTION_HEIGHT must be between 1 and MAX_SECTION_HEIGHT")

        if self.viewport_width <= 0:
            errors.append("VIEWPORT_WIDTH must be positive")

        if self.settle_delay_ms < 0:
            errors.append("SETTLE_DELAY_MS must not be negative")

        if self.settle_timeout_ms < 0:
            errors.append("SETTLE_TIMEOUT_MS must not be negative")

        if self.navigation_timeout_ms is not None and self.navigation_timeout_ms < 0:
            errors.append("NAVIGATION_TIMEOUT_MS must not be negative")

        if self.max_concurrent_sessions <= 0:
            errors.append("MAX_CONCURRENT_SESSIONS must be positive")

        if errors:
            raise ValueError(f"Configuration errors: {'; '.join(errors)}")

        return self
