"""Application registration against a Freebox server.

Registration is a one-shot handshake that needs a human to confirm the
request on the Freebox front panel:

    Discovering -> Authorizing -> Polling{pending}* -> Granted | Rejected | Failed

A rejected or failed attempt is final; call `register()` again to retry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .errors import (
    FreeboxAuthorizationRejected,
    FreeboxClientError,
    FreeboxConnectionError,
    FreeboxNetworkUnreachable,
    FreeboxRegistrationCancelled,
    FreeboxTimeout,
    FreeboxValidationError,
)
from .http import FreeboxTransport
from .models import (
    AppIdentity,
    AppRegistration,
    AuthorizationStatus,
    AuthorizationTrack,
    DiscoveryInfo,
    FreeboxRequest,
)
from .protocol import (
    AUTHORIZATION_STATUS_REASONS,
    DEFAULT_POLL_INTERVAL,
    FREEBOX_LOCAL_URL,
    build_api_base_url,
    unwrap_result,
)

_LOGGER = logging.getLogger(__name__)


def validate_track_id(track_id: Any) -> None:
    """Reject anything but a non-empty string or a non-zero integer."""
    if isinstance(track_id, bool) or not isinstance(track_id, (str, int)):
        raise FreeboxValidationError("track_id must be a string or a number not null")
    if isinstance(track_id, str) and not track_id.strip():
        raise FreeboxValidationError("track_id must not be empty")
    if track_id == 0:
        raise FreeboxValidationError("track_id must not be zero")


class FreeboxRegister:
    """Registers an application and returns its durable credential.

    Usage:
        identity = AppIdentity.create(app_id="fbx.my_app", app_name="My App")
        registrar = FreeboxRegister(identity, FreeboxHttpClient(session))
        registration = await registrar.register()
    """

    def __init__(
        self,
        identity: AppIdentity,
        transport: FreeboxTransport,
        *,
        base_url: str = FREEBOX_LOCAL_URL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.identity = identity
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._poll_interval = poll_interval

        self._discovery: DiscoveryInfo | None = None
        self._api_url: str | None = None
        self._polling = False
        self._cancelled = asyncio.Event()

    @property
    def discovery(self) -> DiscoveryInfo | None:
        return self._discovery

    @property
    def api_url(self) -> str | None:
        """Version-scoped API root computed by the last discovery."""
        return self._api_url

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Abandon registration; a running poll loop stops at its next wait."""
        self._cancelled.set()

    async def register(self, *, silent: bool = False) -> AppRegistration:
        """Run the full discovery, authorization and polling sequence.

        Args:
            silent: Suppress the progress messages. Protocol behavior is
                unchanged.

        Returns:
            The granted registration.

        Raises:
            FreeboxNetworkUnreachable: The device is not reachable.
            FreeboxAuthorizationRejected: The request ended denied, timed
                out or unknown.
            FreeboxRegistrationCancelled: `cancel()` was called.
        """
        self._raise_if_cancelled()
        await self.discover()
        self._raise_if_cancelled()
        app_token, track_id = await self.request_authorization(self.identity)

        if not silent:
            _LOGGER.info(
                "Please check your Freebox Server LCD screen and authorize "
                "application access to register %s",
                self.identity.app_id,
            )

        registration = await self.poll_authorization(track_id, app_token)

        if not silent:
            _LOGGER.info(
                "%s has been granted access to %s; store the returned "
                "registration safely to open sessions later",
                registration.app_id,
                registration.api_domain,
            )
        return registration

    async def discover(self) -> DiscoveryInfo:
        """Query /api_version on the local endpoint."""
        try:
            response = await self._transport.send(
                FreeboxRequest(url="api_version"), base_url=self._base_url
            )
        except (FreeboxConnectionError, FreeboxTimeout) as err:
            raise FreeboxNetworkUnreachable(
                "Unable to reach the Freebox, you are probably not connected "
                f'to your Freebox network (check "{self._base_url}")'
            ) from err

        discovery = DiscoveryInfo.from_dict(unwrap_result(response.data))
        if not discovery.https_available:
            _LOGGER.warning("HTTPS is not available on %s", self._base_url)

        self._discovery = discovery
        self._api_url = build_api_base_url(
            self._base_url, discovery.api_base_url, discovery.api_version
        )
        _LOGGER.debug(
            "Discovered Freebox API v%s at %s", discovery.api_version, self._api_url
        )
        return discovery

    async def request_authorization(self, identity: AppIdentity) -> tuple[str, Any]:
        """Submit the app identity; returns (app_token, track_id)."""
        api_url = self._require_api_url()
        response = await self._transport.send(
            FreeboxRequest(
                url="login/authorize", method="POST", json=identity.as_payload()
            ),
            base_url=api_url,
        )
        result = unwrap_result(response.data)
        app_token = result.get("app_token")
        track_id = result.get("track_id")
        if not isinstance(app_token, str) or not app_token or track_id is None:
            raise FreeboxClientError(
                "Authorization response is missing app_token or track_id"
            )
        return app_token, track_id

    async def track_authorization_progress(self, track_id: Any) -> AuthorizationTrack:
        """Fetch the current status of one authorization request."""
        validate_track_id(track_id)
        api_url = self._require_api_url()
        response = await self._transport.send(
            FreeboxRequest(url=f"login/authorize/{track_id}"), base_url=api_url
        )
        status = AuthorizationStatus.parse(unwrap_result(response.data).get("status"))
        return AuthorizationTrack(track_id=track_id, status=status)

    async def poll_authorization(self, track_id: Any, app_token: str) -> AppRegistration:
        """Poll the authorization every poll interval until it is terminal.

        Pending polls continue indefinitely; the device itself reports
        `timeout` eventually. A transport failure aborts immediately.
        """
        validate_track_id(track_id)
        discovery = self._require_discovery()
        if self._polling:
            raise FreeboxClientError("Authorization polling is already running")

        self._polling = True
        try:
            while True:
                if not await self._wait_next_tick():
                    self._raise_if_cancelled()
                track = await self.track_authorization_progress(track_id)
                _LOGGER.debug("Authorization %s is %s", track_id, track.status.value)

                if track.status is AuthorizationStatus.GRANTED:
                    break
                if track.status.is_terminal:
                    raise FreeboxAuthorizationRejected(
                        track.status.value,
                        AUTHORIZATION_STATUS_REASONS[track.status.value],
                    )
        finally:
            self._polling = False

        return AppRegistration(
            app_token=app_token,
            app_id=self.identity.app_id,
            api_domain=discovery.api_domain,
            https_port=discovery.https_port,
            api_base_url=discovery.api_base_url,
            api_version=discovery.api_version,
            app_version=self.identity.app_version,
        )

    async def _wait_next_tick(self) -> bool:
        """Wait one poll interval; False when cancelled before or during it."""
        if self._cancelled.is_set():
            return False
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self._poll_interval)
        except TimeoutError:
            return True
        return False

    def _raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise FreeboxRegistrationCancelled(
                f"Registration of {self.identity.app_id} was cancelled"
            )

    def _require_discovery(self) -> DiscoveryInfo:
        if self._discovery is None:
            raise FreeboxValidationError("Missing discovery, call discover() first")
        return self._discovery

    def _require_api_url(self) -> str:
        if self._api_url is None:
            raise FreeboxValidationError("Missing base API URL, call discover() first")
        return self._api_url
