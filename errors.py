"""
Error types raised while serving incident.io tools.
"""

from typing import Dict, Optional


class IncidentIOError(Exception):
    """Base class for every error raised by this server."""


class ConfigurationError(IncidentIOError):
    """Required configuration is missing or invalid. Fatal at startup."""


class ToolError(IncidentIOError):
    """A single tool call failed. Never fatal to the server."""


class ToolValidationError(ToolError):
    """A required tool argument is missing."""


class UnknownToolError(ToolError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class IncidentIOAPIError(ToolError):
    """
    The incident.io API answered with a non-2xx status, or no answer arrived.

    status_code is None for transport failures (timeouts, DNS, refused
    connections).
    """

    def __init__(
        self,
        status_code: Optional[int],
        message: str,
        rate_limit: Optional[Dict[str, str]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.rate_limit = rate_limit or {}
        status = status_code if status_code is not None else "no response"
        super().__init__(f"incident.io API error ({status}): {message}")
