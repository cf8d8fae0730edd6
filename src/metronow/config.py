"""Process configuration loaded from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Header carrying the JSON-encoded stop list on the WebSocket handshake
STOP_IDS_HEADER = "X-Stop-IDs"

DEFAULT_API_URL = "https://api.golemio.cz"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_REFRESH_INTERVAL = 5.0  # seconds between periodic refreshes
DEFAULT_DEPARTURE_LIMIT = 10
DEFAULT_REQUEST_TIMEOUT = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the departure-board server."""
    api_key: str
    api_url: str = DEFAULT_API_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    departure_limit: int = DEFAULT_DEPARTURE_LIMIT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    refresh_on_subscribe: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        When environ is None, variables from a local .env file are loaded
        first (variables already set in the process take precedence).

        Raises:
            ConfigError: If GOLEMIO_API_KEY is missing or a numeric value is
                invalid.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        api_key = (environ.get("GOLEMIO_API_KEY") or "").strip()
        if not api_key:
            raise ConfigError("GOLEMIO_API_KEY is not set in the environment or .env")

        settings = cls(
            api_key=api_key,
            api_url=environ.get("GOLEMIO_API_URL", DEFAULT_API_URL).rstrip("/"),
            host=environ.get("METRONOW_HOST", DEFAULT_HOST),
            port=_parse_number(environ, "METRONOW_PORT", int, DEFAULT_PORT),
            refresh_interval=_parse_number(
                environ, "METRONOW_REFRESH_INTERVAL", float, DEFAULT_REFRESH_INTERVAL
            ),
            departure_limit=_parse_number(
                environ, "METRONOW_DEPARTURE_LIMIT", int, DEFAULT_DEPARTURE_LIMIT
            ),
            request_timeout=_parse_number(
                environ, "METRONOW_REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT
            ),
            refresh_on_subscribe=(
                environ.get("METRONOW_REFRESH_ON_SUBSCRIBE", "").strip().lower() in _TRUE_VALUES
            ),
        )
        logger.debug(f"Loaded settings for {settings.host}:{settings.port}")
        return settings


def _parse_number(environ: Mapping[str, str], name: str, kind, default):
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = kind(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")

    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value
