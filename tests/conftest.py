"""
Shared fixtures: a fake incident.io API built on httpx.MockTransport.
"""

import json

import httpx
import pytest
import pytest_asyncio

from api_client import IncidentIOClient
from router import ToolRouter
from settings import Settings

TEST_API_KEY = "test-api-key"
TEST_BASE_URL = "https://api.incident.test"


class FakeIncidentIO:
    """
    Records every outbound request and answers with a canned response.

    Set `responses` to a list to answer calls in order, or `handler` to
    compute a response per request.
    """

    def __init__(self):
        self.requests = []
        self.responses = []
        self.handler = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, json={"ok": True})

    def bodies(self):
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture
def settings():
    return Settings(api_key=TEST_API_KEY, base_url=TEST_BASE_URL)


@pytest.fixture
def fake_api():
    return FakeIncidentIO()


@pytest_asyncio.fixture
async def client(settings, fake_api):
    client = IncidentIOClient(settings, transport=httpx.MockTransport(fake_api))
    yield client
    await client.aclose()


@pytest.fixture
def router(client):
    return ToolRouter(client)
