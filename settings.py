"""
Runtime configuration, read once from the environment at startup.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.incident.io"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"

API_KEY_VAR = "INCIDENTIO_API_KEY"
BASE_URL_VAR = "INCIDENTIO_API_BASE_URL"
LOG_LEVEL_VAR = "INCIDENTIO_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def __repr__(self) -> str:
        # Never leak the key into logs or tracebacks
        return (
            f"Settings(api_key='***', base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, log_level={self.log_level!r})"
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: mapping to read from (defaults to os.environ)

    Raises:
        ConfigurationError: if INCIDENTIO_API_KEY is missing or blank
    """
    if environ is None:
        environ = os.environ

    api_key = environ.get(API_KEY_VAR, "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_VAR} environment variable is required")

    base_url = environ.get(BASE_URL_VAR, "").strip() or DEFAULT_BASE_URL
    log_level = environ.get(LOG_LEVEL_VAR, "").strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"{LOG_LEVEL_VAR} has unknown level {log_level!r}")

    return Settings(
        api_key=api_key,
        base_url=base_url.rstrip("/"),
        log_level=log_level,
    )
