"""Centralized configuration for the calculator server.

All settings can be overridden via environment variables.

Usage:
    from calculator_server.config import get_settings

    settings = get_settings()
    timeout = settings.model_timeout_seconds

Environment Variables:
    CALCULATOR_SERVER_HOST: Bind address (default: 0.0.0.0)
    CALCULATOR_SERVER_PORT: Server port (default: 8000)
    MODEL_API_URL: Chat completions endpoint of the model gateway
    MODEL_API_KEY: Bearer credential for the model gateway (required)
    MODEL_NAME: Model identifier passed through to the gateway
    MODEL_TIMEOUT_SECONDS: Timeout for each model round trip (default: 30.0)
    LOG_REQUEST_BODIES: Log request/response bodies (default: true)
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

DEFAULT_MODEL_API_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL_NAME = "google/gemini-3-flash-preview"


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean value from environment variable.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Boolean value (case-insensitive "true"/"false")
    """
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() == "true"


def _get_int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    return int(value)


def _get_float_env(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    return float(value)


def _get_optional_env(key: str) -> Optional[str]:
    """Get a string from the environment, treating empty values as unset."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class Settings:
    """Application settings with environment variable support.

    Attributes:
        server_host: Address uvicorn binds to
        server_port: FastAPI server port
        model_api_url: OpenAI-compatible chat completions URL
        model_api_key: Bearer token sent to the model endpoint
        model_name: Opaque model identifier sent with every request
        model_timeout_seconds: Upper bound for a single model round trip
        log_request_bodies: Log request and response payloads in the middleware
    """

    # Server settings
    server_host: str = field(default_factory=lambda: os.getenv("CALCULATOR_SERVER_HOST", "0.0.0.0"))
    server_port: int = field(default_factory=lambda: _get_int_env("CALCULATOR_SERVER_PORT", 8000))

    # Model endpoint settings
    model_api_url: str = field(default_factory=lambda: os.getenv("MODEL_API_URL", DEFAULT_MODEL_API_URL))
    model_api_key: Optional[str] = field(default_factory=lambda: _get_optional_env("MODEL_API_KEY"))
    model_name: str = field(default_factory=lambda: os.getenv("MODEL_NAME", DEFAULT_MODEL_NAME))
    model_timeout_seconds: float = field(default_factory=lambda: _get_float_env("MODEL_TIMEOUT_SECONDS", 30.0))

    # Logging
    log_request_bodies: bool = field(default_factory=lambda: _get_bool_env("LOG_REQUEST_BODIES", True))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Environment variables are read once at first access.
    """
    return Settings()
