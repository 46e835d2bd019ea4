"""
incident.io API client.

Thin async wrapper around httpx. Handles authentication, request
formatting, and turning every failure into an IncidentIOAPIError.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx

from errors import IncidentIOAPIError
from settings import Settings

logger = logging.getLogger(__name__)

USER_AGENT = "incidentio-mcp/1.0.0"

# Headers incident.io sends alongside a 429
RATE_LIMIT_HEADERS = [
    "Retry-After",
    "X-RateLimit-Limit",
    "X-RateLimit-Remaining",
    "X-RateLimit-Reset",
]


@dataclass(frozen=True)
class ApiRequest:
    """One outbound call: method, path relative to the base URL, query, body."""

    method: str
    path: str
    params: Tuple[Tuple[str, str], ...] = ()
    json: Optional[Dict[str, Any]] = None


class IncidentIOClient:
    """
    Shared HTTP client for the incident.io API.

    Configured once from Settings and read-only afterwards. Pass a custom
    httpx transport (e.g. httpx.MockTransport) to run without a network.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = settings.api_key
        self._http = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "IncidentIOClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(self, api_request: ApiRequest) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            IncidentIOAPIError: on transport failure or non-2xx status
        """
        logger.debug("%s %s params=%s", api_request.method, api_request.path, api_request.params)

        try:
            response = await self._http.request(
                api_request.method,
                api_request.path,
                params=list(api_request.params) or None,
                json=api_request.json,
            )
        except httpx.RequestError as e:
            raise IncidentIOAPIError(None, self._redact(str(e) or type(e).__name__)) from e

        if response.is_success:
            return _decode_body(response)

        rate_limit = None
        if response.status_code == 429:
            rate_limit = _log_rate_limit(response)

        raise IncidentIOAPIError(
            response.status_code,
            self._redact(_error_message(response)),
            rate_limit=rate_limit,
        )

    def _redact(self, message: str) -> str:
        if self._api_key and self._api_key in message:
            return message.replace(self._api_key, "[REDACTED]")
        return message


def _decode_body(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {"raw_response": response.text}


def _error_message(response: httpx.Response) -> str:
    """
    Pull the server-provided message out of an error response.

    incident.io errors carry either a top-level "message" or a list of
    "errors" each with their own "message".
    """
    fallback = f"Request failed with status code {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return fallback

    if not isinstance(data, dict):
        return fallback
    if data.get("message"):
        return str(data["message"])

    errors: List[Any] = data.get("errors") or []
    for error in errors:
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])

    return fallback


def _log_rate_limit(response: httpx.Response) -> Dict[str, str]:
    """Log rate limit headers from a 429. Diagnostic only, nothing is retried."""
    values = {
        header: response.headers.get(header, "not specified")
        for header in RATE_LIMIT_HEADERS
    }
    logger.warning("Hit incident.io rate limit")
    for header, value in values.items():
        logger.warning("%s: %s", header, value)
    return values
