"""HTTP transport for Freebox OS device endpoints."""

from __future__ import annotations

import logging
import ssl
from typing import Any, Protocol

import aiohttp

from .errors import (
    FreeboxConnectionError,
    FreeboxResponseError,
    FreeboxTimeout,
    FreeboxValidationError,
)
from .models import FreeboxRequest, FreeboxResponse
from .protocol import DEFAULT_REQUEST_TIMEOUT, describe_auth_error
from .tls import create_ssl_context

_LOGGER = logging.getLogger(__name__)

_ACCEPT = "application/json, text/plain, */*"
_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class FreeboxTransport(Protocol):
    """Minimal transport consumed by the registrar, session manager and client."""

    async def send(
        self, request: FreeboxRequest, *, base_url: str | None = None
    ) -> FreeboxResponse: ...


def join_url(url: str, base_url: str | None) -> str:
    """Resolve `url` against `base_url` unless it is already absolute."""
    if url.startswith(("http://", "https://")):
        return url
    if not base_url:
        raise FreeboxValidationError("base_url is required when url is relative")
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


class FreeboxHttpClient:
    """Single-exchange HTTP transport pinned to the Freebox root CA.

    Returns a FreeboxResponse for 2xx answers, raises FreeboxResponseError
    for HTTP-level failures and FreeboxConnectionError/FreeboxTimeout when no
    response was received at all.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        ssl_context: ssl.SSLContext | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session
        self._ssl_context = ssl_context or create_ssl_context()
        self._timeout = timeout

    async def send(
        self, request: FreeboxRequest, *, base_url: str | None = None
    ) -> FreeboxResponse:
        """Perform one HTTP exchange."""
        url = join_url(request.url, base_url)
        method = request.method.upper()
        headers = {"Accept": _ACCEPT, **request.headers}

        kwargs: dict[str, Any] = {
            "headers": headers,
            "ssl": self._ssl_context,
            "timeout": aiohttp.ClientTimeout(total=self._timeout),
        }
        if request.params:
            kwargs["params"] = request.params
        if request.json is not None and method not in _BODYLESS_METHODS:
            kwargs["json"] = request.json

        _LOGGER.debug("%s %s", method, url)
        try:
            async with self._session.request(method, url, **kwargs) as resp:
                data = await self._read_body(resp)
                if not 200 <= resp.status < 300:
                    raise self._response_error(resp.status, data)
                return FreeboxResponse(
                    status=resp.status,
                    data=data,
                    headers=dict(resp.headers or {}),
                )
        except TimeoutError as err:
            raise FreeboxTimeout(f"{method} {url} timed out") from err
        except aiohttp.ClientError as err:
            raise FreeboxConnectionError(f"{method} {url} failed: {err}") from err

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        content_type = (resp.headers or {}).get("Content-Type", "")
        if "application/json" in content_type:
            try:
                return await resp.json(content_type=None)
            except ValueError:
                _LOGGER.debug("Response declared JSON but is not, reading as text")
        return await resp.text()

    @staticmethod
    def _response_error(status: int, data: Any) -> FreeboxResponseError:
        message = f"Request failed with status {status}"
        error_code = data.get("error_code") if isinstance(data, dict) else None
        if description := describe_auth_error(error_code):
            message = f"{message}: {description} ({error_code})"
        elif isinstance(data, dict) and data.get("msg"):
            message = f"{message}: {data['msg']}"
        return FreeboxResponseError(status, message, data)
