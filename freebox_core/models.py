"""Data model for Freebox registration and sessions."""

from __future__ import annotations

import secrets
import string
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .errors import FreeboxValidationError
from .protocol import DEFAULT_API_BASE_URL, FREEBOX_LOCAL_URL, major_version

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 7


def _random_suffix() -> str:
    return "_" + "".join(
        secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH)
    )


@dataclass(frozen=True, slots=True)
class AppIdentity:
    """Application identity submitted to the device at registration."""

    app_id: str
    app_name: str
    app_version: str = "1.0.0"
    device_name: str = "Python"

    @classmethod
    def create(
        cls,
        *,
        app_id: str | None = None,
        app_name: str | None = None,
        app_version: str = "1.0.0",
        device_name: str = "Python",
    ) -> AppIdentity:
        """Build an identity, generating whichever of app_id/app_name is missing."""
        suffix = _random_suffix()
        if not app_id and not app_name:
            app_name = f"python_app{suffix}"
            app_id = f"fbx.{app_name}"
        elif not app_id:
            app_id = f"fbx.{app_name}{suffix}"
        elif not app_name:
            app_name = f"{app_id}{suffix}"
        return cls(
            app_id=app_id,
            app_name=app_name,  # type: ignore[arg-type]
            app_version=app_version,
            device_name=device_name,
        )

    def as_payload(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class DiscoveryInfo:
    """Connection metadata returned by the unauthenticated /api_version call."""

    api_domain: str
    https_port: int | None
    api_base_url: str
    api_version: str
    https_available: bool = True
    box_model: str | None = None
    device_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiscoveryInfo:
        api_version = data.get("api_version")
        if api_version is None or str(api_version).strip() == "":
            raise FreeboxValidationError("Discovery response is missing api_version")
        https_port = data.get("https_port")
        return cls(
            api_domain=str(data.get("api_domain") or FREEBOX_LOCAL_URL),
            https_port=int(https_port) if https_port else None,
            api_base_url=str(data.get("api_base_url") or DEFAULT_API_BASE_URL),
            api_version=str(api_version),
            https_available=bool(data.get("https_available", True)),
            box_model=data.get("box_model"),
            device_name=data.get("device_name"),
        )

    @property
    def major_version(self) -> str:
        return major_version(self.api_version)


@dataclass(frozen=True, slots=True)
class AppRegistration:
    """Durable credential produced by a granted registration.

    The package never persists it; callers store it (for example with
    `as_dict()`) and hand it back to `FreeboxClient` later.
    """

    app_token: str
    app_id: str
    api_domain: str
    https_port: int | None
    api_base_url: str
    api_version: str
    app_version: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppRegistration:
        registration = cls(
            app_token=data.get("app_token"),  # type: ignore[arg-type]
            app_id=data.get("app_id"),  # type: ignore[arg-type]
            api_domain=data.get("api_domain") or FREEBOX_LOCAL_URL,
            https_port=data.get("https_port"),
            api_base_url=data.get("api_base_url", DEFAULT_API_BASE_URL),
            api_version=data.get("api_version"),  # type: ignore[arg-type]
            app_version=data.get("app_version"),
        )
        registration.validate()
        return registration

    def validate(self) -> None:
        """Raise FreeboxValidationError listing every invalid field."""
        errors: list[str] = []
        for name in ("app_token", "app_id", "api_base_url", "api_version"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                errors.append(f"{name} is required and must be a non-empty string")
        if not isinstance(self.api_domain, str):
            errors.append("api_domain must be a string")
        if self.https_port is not None and (
            isinstance(self.https_port, bool) or not isinstance(self.https_port, int)
        ):
            errors.append("https_port must be an integer")
        if not errors:
            try:
                major_version(self.api_version)
            except FreeboxValidationError as err:
                errors.append(str(err))
        if errors:
            raise FreeboxValidationError(
                "Invalid Freebox registration: " + "; ".join(errors), errors
            )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class AuthorizationStatus(str, Enum):
    """Status of a pending registration authorization."""

    UNKNOWN = "unknown"
    PENDING = "pending"
    TIMEOUT = "timeout"
    GRANTED = "granted"
    DENIED = "denied"

    @classmethod
    def parse(cls, value: Any) -> AuthorizationStatus:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self is not AuthorizationStatus.PENDING


@dataclass(frozen=True, slots=True)
class AuthorizationTrack:
    """One observation of a registration authorization."""

    track_id: int | str
    status: AuthorizationStatus


@dataclass(frozen=True, slots=True)
class Permissions:
    """Capability flags granted to a session by the device."""

    settings: bool = False
    contacts: bool = False
    calls: bool = False
    explorer: bool = False
    downloader: bool = False
    parental: bool = False
    pvr: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Permissions:
        data = data or {}
        return cls(
            settings=bool(data.get("settings", False)),
            contacts=bool(data.get("contacts", False)),
            calls=bool(data.get("calls", False)),
            explorer=bool(data.get("explorer", False)),
            downloader=bool(data.get("downloader", False)),
            parental=bool(data.get("parental", False)),
            pvr=bool(data.get("pvr", False)),
        )


@dataclass(frozen=True, slots=True)
class Session:
    """Authenticated session opened from an app_token."""

    session_token: str
    permissions: Permissions = field(default_factory=Permissions)


@dataclass(frozen=True, slots=True)
class FreeboxRequest:
    """A single API call, relative to the API root unless `url` is absolute."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    params: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class FreeboxResponse:
    """Successful device response."""

    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        if isinstance(self.data, dict):
            return bool(self.data.get("success", True))
        return True

    @property
    def result(self) -> Any:
        if isinstance(self.data, dict) and "result" in self.data:
            return self.data["result"]
        return None
