"""Authenticated entry point for Freebox OS API calls."""

from __future__ import annotations

import logging
from dataclasses import replace

from .errors import FreeboxResponseError
from .http import FreeboxTransport
from .models import AppRegistration, FreeboxRequest, FreeboxResponse, Permissions, Session
from .protocol import (
    FREEBOX_LOCAL_URL,
    MAX_REQUEST_ATTEMPTS,
    build_api_base_url,
    build_root_url,
    session_expiry_challenge,
)
from .session import FreeboxSessionManager

_LOGGER = logging.getLogger(__name__)


class FreeboxClient:
    """Sends API calls with the session header and renews expired sessions.

    Usage:
        async with aiohttp.ClientSession() as http_session:
            client = FreeboxClient(registration, FreeboxHttpClient(http_session))
            response = await client.request(FreeboxRequest(url="wifi/config"))
            await client.logout()

    With `auto_login` (the default) the first request on a client without a
    session logs in before sending. Without it, the caller must call
    `login()` first; a 403 on a request that carried no session header is
    never treated as expiry.
    """

    def __init__(
        self,
        registration: AppRegistration,
        transport: FreeboxTransport,
        *,
        auto_login: bool = True,
    ) -> None:
        self._transport = transport
        self._auto_login = auto_login
        self.set_registration(registration)

    @property
    def registration(self) -> AppRegistration:
        return self._registration

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def sessions(self) -> FreeboxSessionManager:
        return self._sessions

    @property
    def session(self) -> Session | None:
        return self._sessions.session

    @property
    def permissions(self) -> Permissions | None:
        session = self._sessions.session
        return session.permissions if session else None

    def set_registration(self, registration: AppRegistration) -> None:
        """Switch credentials; any cached session is dropped."""
        registration.validate()
        self._registration = registration
        self._api_url = build_api_base_url(
            build_root_url(
                registration.api_domain or FREEBOX_LOCAL_URL, registration.https_port
            ),
            registration.api_base_url,
            registration.api_version,
        )
        self._sessions = FreeboxSessionManager(
            self._transport,
            self._api_url,
            app_id=registration.app_id,
            app_token=registration.app_token,
            app_version=registration.app_version,
        )

    async def login(self, challenge: str | None = None) -> Session:
        return await self._sessions.login(challenge)

    async def logout(self) -> bool:
        """Close the session on the device and forget it locally."""
        try:
            return await self._sessions.logout()
        finally:
            self._sessions.clear()
            _LOGGER.info("Session closed for %s", self._registration.app_id)

    async def request(self, config: FreeboxRequest) -> FreeboxResponse:
        """Send an authenticated request.

        When the device answers 403 auth_required with a fresh challenge on
        a request that carried a session header, the session is renewed and
        the original request is sent once more. The second failure, and any
        other failure, is raised unchanged.
        """
        if self._auto_login and self._sessions.session is None:
            await self._sessions.ensure_session()

        for attempt in range(1, MAX_REQUEST_ATTEMPTS + 1):
            session_token = self._sessions.session_token
            auth_headers = self._sessions.auth_headers()
            request = replace(config, headers={**config.headers, **auth_headers})
            try:
                return await self._transport.send(request, base_url=self._api_url)
            except FreeboxResponseError as err:
                challenge = session_expiry_challenge(err, had_session=bool(auth_headers))
                if challenge is None or attempt == MAX_REQUEST_ATTEMPTS:
                    raise
                _LOGGER.debug(
                    "%s %s rejected with expired session, retrying",
                    config.method,
                    config.url,
                )
                await self._sessions.renew(session_token, challenge)

        # Unreachable: the last attempt either returns or raises
        raise AssertionError("request loop exited without a result")
