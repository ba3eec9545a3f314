"""
Skeleton Backend - Application Configuration
============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       A bad PORT or LOG_LEVEL fails before the listener is ever bound.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
When:  Loaded once at import time. `start()` and `create_app()` also accept
       an explicit Settings instance (tests, embedding).
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a default, so the service starts with no environment
    at all and listens on port 4000.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")

    # 0 asks the OS for a free ephemeral port (used by the test suite)
    port: int = Field(default=4000, ge=0, le=65535)

    # Seconds stop() waits for in-flight requests before giving up
    shutdown_timeout: float = Field(default=5.0, gt=0, le=120)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Origins allowed to read responses cross-origin
    # Default "*": any origin, header sent on every response
    # Format: Comma-separated URLs, e.g. "http://localhost:3000,https://app.example.com"
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Request Bodies ────────────────────────────────────────────────────
    # What: Largest JSON body accepted, in bytes (100kb)
    json_body_limit: int = Field(default=102_400, ge=1, le=52_428_800)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # PORT and port both work
        "extra": "ignore",
    }

    @property
    def display_host(self) -> str:
        """Host name used in log lines; wildcard binds are reported as localhost."""
        if self.host in ("", "0.0.0.0", "::"):
            return "localhost"
        return self.host


# Singleton instance, imported throughout the application
settings = Settings()
