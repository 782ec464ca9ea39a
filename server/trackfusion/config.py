"""
Configuration for the Trackfusion MCP adapter.

Environment variables:
    TRACKFUSION_API_KEY    - Bearer token for the Trackfusion API (required)
    TRACKFUSION_API_URL    - API base URL (default: production endpoint)
    TRACKFUSION_TIMEOUT_MS - Per-attempt request timeout in ms (default: 30000)
    TRACKFUSION_LOG_LEVEL  - Log level for stderr logging (default: "INFO")
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

DEFAULT_BASE_URL = "https://europe-west1-oz-track.cloudfunctions.net/api"
DEFAULT_TIMEOUT_MS = 30_000
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConfigError(ValueError):
    """Raised when the adapter cannot be configured."""


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("api_key must be a non-empty string")
        if not self.base_url:
            raise ConfigError("base_url is required")
        if not isinstance(self.timeout_ms, int) or self.timeout_ms <= 0:
            raise ConfigError(f"timeout_ms must be a positive integer, got {self.timeout_ms!r}")
        # Only one trailing slash is stripped; paths are appended verbatim.
        if self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url[:-1])

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


def load_config(environ: Mapping[str, str] | None = None) -> ClientConfig:
    """Build a ClientConfig from environment variables."""
    env = os.environ if environ is None else environ

    api_key = env.get("TRACKFUSION_API_KEY", "")
    if not api_key:
        raise ConfigError("TRACKFUSION_API_KEY environment variable is required")

    raw_timeout = env.get("TRACKFUSION_TIMEOUT_MS")
    timeout_ms = DEFAULT_TIMEOUT_MS
    if raw_timeout:
        try:
            timeout_ms = int(raw_timeout)
        except ValueError:
            raise ConfigError(f"TRACKFUSION_TIMEOUT_MS must be an integer, got {raw_timeout!r}") from None

    return ClientConfig(
        api_key=api_key,
        base_url=env.get("TRACKFUSION_API_URL") or DEFAULT_BASE_URL,
        timeout_ms=timeout_ms,
    )


def configure_logging(environ: Mapping[str, str] | None = None) -> None:
    """Send logs to stderr; stdout carries the MCP message stream."""
    env = os.environ if environ is None else environ
    requested = env.get("TRACKFUSION_LOG_LEVEL", "INFO").upper()
    # getLevelName returns a string for names it does not know
    level = requested if isinstance(logging.getLevelName(requested), int) else "INFO"
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    if level != requested:
        logging.getLogger(__name__).warning(
            "Unknown TRACKFUSION_LOG_LEVEL %r, using INFO", requested
        )
