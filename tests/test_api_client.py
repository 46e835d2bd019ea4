"""
Tests for the incident.io HTTP client in api_client.py
"""

import logging

import httpx
import pytest

from api_client import ApiRequest, IncidentIOClient
from errors import IncidentIOAPIError

TEST_API_KEY = "test-api-key"


class TestRequests:
    """Outbound request formatting"""

    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_json(self, client, fake_api):
        await client.request(ApiRequest("POST", "/v2/incidents", json={"name": "x"}))

        request = fake_api.requests[0]
        assert request.headers["Authorization"] == f"Bearer {TEST_API_KEY}"
        assert request.headers["Content-Type"] == "application/json"
        assert request.url.host == "api.incident.test"
        assert fake_api.bodies() == [{"name": "x"}]

    @pytest.mark.asyncio
    async def test_returns_decoded_json(self, client, fake_api):
        fake_api.responses = [httpx.Response(200, json={"incident": {"id": "i1"}})]
        assert await client.request(ApiRequest("GET", "/v2/incidents/i1")) == {"incident": {"id": "i1"}}

    @pytest.mark.asyncio
    async def test_empty_response_becomes_empty_object(self, client, fake_api):
        fake_api.responses = [httpx.Response(204)]
        assert await client.request(ApiRequest("POST", "/v2/anything")) == {}


class TestErrors:
    """Failures become IncidentIOAPIError"""

    @pytest.mark.asyncio
    async def test_uses_server_message(self, client, fake_api):
        fake_api.responses = [httpx.Response(404, json={"message": "Incident not found"})]
        with pytest.raises(IncidentIOAPIError) as exc_info:
            await client.request(ApiRequest("GET", "/v2/incidents/missing"))

        error = exc_info.value
        assert error.status_code == 404
        assert str(error) == "incident.io API error (404): Incident not found"

    @pytest.mark.asyncio
    async def test_uses_first_nested_error_message(self, client, fake_api):
        fake_api.responses = [httpx.Response(422, json={
            "type": "validation_error",
            "errors": [{"code": "is_required", "message": "severity_id is required"}],
        })]
        with pytest.raises(IncidentIOAPIError, match=r"\(422\): severity_id is required"):
            await client.request(ApiRequest("POST", "/v2/incidents", json={}))

    @pytest.mark.asyncio
    async def test_falls_back_to_generic_message(self, client, fake_api):
        fake_api.responses = [httpx.Response(502, text="<html>Bad gateway</html>")]
        with pytest.raises(IncidentIOAPIError, match="Request failed with status code 502"):
            await client.request(ApiRequest("GET", "/v1/severities"))

    @pytest.mark.asyncio
    async def test_transport_error_has_no_status(self, settings):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        async with IncidentIOClient(settings, transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(IncidentIOAPIError) as exc_info:
                await client.request(ApiRequest("GET", "/v1/severities"))

        assert exc_info.value.status_code is None
        assert str(exc_info.value) == "incident.io API error (no response): Connection refused"

    @pytest.mark.asyncio
    async def test_api_key_is_redacted(self, settings):
        def leak(request):
            raise httpx.ConnectError(f"bad header {TEST_API_KEY}", request=request)

        async with IncidentIOClient(settings, transport=httpx.MockTransport(leak)) as client:
            with pytest.raises(IncidentIOAPIError) as exc_info:
                await client.request(ApiRequest("GET", "/v1/severities"))

        assert TEST_API_KEY not in str(exc_info.value)
        assert "[REDACTED]" in str(exc_info.value)


class TestRateLimit:
    """429 responses are logged but never retried"""

    @pytest.mark.asyncio
    async def test_rate_limit_is_logged_and_surfaced(self, client, fake_api, caplog):
        caplog.set_level(logging.WARNING, logger="api_client")
        fake_api.responses = [httpx.Response(
            429,
            json={"message": "Too many requests"},
            headers={"Retry-After": "17", "X-RateLimit-Limit": "1200"},
        )]

        with pytest.raises(IncidentIOAPIError) as exc_info:
            await client.request(ApiRequest("GET", "/v2/incidents"))

        error = exc_info.value
        assert error.status_code == 429
        assert error.rate_limit["Retry-After"] == "17"
        assert error.rate_limit["X-RateLimit-Remaining"] == "not specified"
        assert "Retry-After: 17" in caplog.text
        assert "X-RateLimit-Limit: 1200" in caplog.text
        assert len(fake_api.requests) == 1

    @pytest.mark.asyncio
    async def test_other_errors_do_not_log_rate_limit(self, client, fake_api, caplog):
        caplog.set_level(logging.WARNING, logger="api_client")
        fake_api.responses = [httpx.Response(500, json={"message": "boom"})]

        with pytest.raises(IncidentIOAPIError) as exc_info:
            await client.request(ApiRequest("GET", "/v2/incidents"))

        assert exc_info.value.rate_limit == {}
        assert "Retry-After" not in caplog.text
