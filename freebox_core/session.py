"""Session management for Freebox OS.

Turns the durable app_token into a short-lived session token through the
challenge-response login, and renews it when the device reports expiry.
The current Session is the only mutable state and is only replaced while
holding the renewal lock.
"""

from __future__ import annotations

import asyncio
import logging

from .errors import FreeboxClientError
from .http import FreeboxTransport
from .models import FreeboxRequest, Permissions, Session
from .protocol import AUTH_HEADER, compute_password, unwrap_result

_LOGGER = logging.getLogger(__name__)


class FreeboxSessionManager:
    """Opens, renews and closes sessions for one app registration."""

    def __init__(
        self,
        transport: FreeboxTransport,
        api_url: str,
        *,
        app_id: str,
        app_token: str,
        app_version: str | None = None,
    ) -> None:
        self._transport = transport
        self._api_url = api_url
        self._app_id = app_id
        self._app_token = app_token
        self._app_version = app_version

        self._session: Session | None = None
        self._renewal_lock = asyncio.Lock()

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def session_token(self) -> str | None:
        return self._session.session_token if self._session else None

    def auth_headers(self) -> dict[str, str]:
        """Snapshot of the session header, empty when there is no session."""
        token = self.session_token
        if not token:
            return {}
        return {AUTH_HEADER: token}

    def clear(self) -> None:
        self._session = None

    async def get_challenge(self) -> tuple[str, bool]:
        """Fetch a login challenge; returns (challenge, logged_in)."""
        response = await self._transport.send(
            FreeboxRequest(url="login"), base_url=self._api_url
        )
        result = unwrap_result(response.data)
        challenge = result.get("challenge")
        if not isinstance(challenge, str) or not challenge:
            raise FreeboxClientError("Unable to retrieve challenge to open a session")
        return challenge, bool(result.get("logged_in", False))

    async def login(self, challenge: str | None = None) -> Session:
        """Open a new session, fetching a challenge first when none is given."""
        async with self._renewal_lock:
            return await self._open_session(challenge)

    async def ensure_session(self) -> Session:
        """Return the current session, logging in first when there is none."""
        async with self._renewal_lock:
            if self._session is not None:
                return self._session
            return await self._open_session(None)

    async def renew(self, stale_token: str | None, challenge: str) -> Session:
        """Replace an expired session, at most once across concurrent callers.

        Callers that detect expiry while another renewal holds the lock wait
        for it and reuse its session instead of logging in again.
        """
        async with self._renewal_lock:
            current = self._session
            if current is not None and current.session_token != stale_token:
                _LOGGER.debug("Session already renewed by a concurrent request")
                return current
            _LOGGER.warning("Session token expired for %s, renewing", self._app_id)
            return await self._open_session(challenge)

    async def logout(self) -> bool:
        """Close the current session on the device.

        Local state is left untouched; the caller clears it.
        """
        response = await self._transport.send(
            FreeboxRequest(url="login/logout", method="POST", headers=self.auth_headers()),
            base_url=self._api_url,
        )
        return response.success

    async def _open_session(self, challenge: str | None) -> Session:
        if not challenge:
            challenge, _ = await self.get_challenge()

        app_version = (
            self._app_version
            if isinstance(self._app_version, str) and self._app_version
            else None
        )
        response = await self._transport.send(
            FreeboxRequest(
                url="login/session",
                method="POST",
                json={
                    "app_id": self._app_id,
                    "app_version": app_version,
                    "password": compute_password(self._app_token, challenge),
                },
            ),
            base_url=self._api_url,
        )
        result = unwrap_result(response.data)
        session_token = result.get("session_token")
        if not isinstance(session_token, str) or not session_token:
            raise FreeboxClientError("Session response is missing session_token")

        self._session = Session(
            session_token=session_token,
            permissions=Permissions.from_dict(result.get("permissions")),
        )
        _LOGGER.info("Session opened for %s", self._app_id)
        return self._session
