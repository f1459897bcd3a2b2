"""Pytest configuration and fixtures for freebox_core tests."""

from __future__ import annotations

import inspect
import ssl
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from freebox_core import AppRegistration, FreeboxHttpClient
from freebox_core.models import FreeboxRequest, FreeboxResponse


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


@pytest.fixture
def http_client(mock_session: MagicMock) -> FreeboxHttpClient:
    """Transport wired to the mock session with a stub SSL context."""
    return FreeboxHttpClient(
        mock_session, ssl_context=MagicMock(spec=ssl.SSLContext)
    )


@pytest.fixture
def registration() -> AppRegistration:
    """Registration matching a Freebox reachable at r42bhm9p.fbxos.fr:35023."""
    return AppRegistration(
        app_token="super-secret-app-token",
        app_id="fbx.integration.test",
        api_domain="r42bhm9p.fbxos.fr",
        https_port=35023,
        api_base_url="/api/",
        api_version="7.0",
        app_version="1.0.0",
    )


def create_mock_response(
    status: int = 200,
    json_data: dict[str, Any] | None = None,
    text_data: str | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call
        text_data: Data to return from text() call

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        response.headers = {"Content-Type": "application/json; charset=utf-8"}
        response.json.return_value = json_data
    else:
        response.headers = {"Content-Type": "text/plain"}
        response.text.return_value = text_data or ""

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


def envelope(result: dict[str, Any] | None = None, **extra: Any) -> dict[str, Any]:
    """Build a successful Freebox OS envelope."""
    return {"success": True, "result": result or {}, **extra}


class FakeTransport:
    """In-memory transport that answers from a handler and records requests.

    The handler receives (request, base_url) and returns a FreeboxResponse, an
    exception instance to raise, or an awaitable resolving to either.
    """

    def __init__(
        self, handler: Callable[[FreeboxRequest, str | None], Any]
    ) -> None:
        self.handler = handler
        self.calls: list[tuple[FreeboxRequest, str | None]] = []

    async def send(
        self, request: FreeboxRequest, *, base_url: str | None = None
    ) -> FreeboxResponse:
        self.calls.append((request, base_url))
        result = self.handler(request, base_url)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        return result

    def calls_to(self, url: str) -> list[FreeboxRequest]:
        return [request for request, _ in self.calls if request.url == url]
