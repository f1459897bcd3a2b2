"""Protocol helpers for the Freebox OS login API.

This module holds the wire-level constants, the password derivation used to
open a session, and helpers for reading the `{success, result, error_code}`
envelope returned by every Freebox OS endpoint.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Final

from .errors import FreeboxResponseError, FreeboxValidationError

FREEBOX_LOCAL_URL: Final = "https://mafreebox.freebox.fr"
AUTH_HEADER: Final = "X-Fbx-App-Auth"

DEFAULT_POLL_INTERVAL: Final = 2.0
DEFAULT_REQUEST_TIMEOUT: Final = 10.0
DEFAULT_API_BASE_URL: Final = "/api/"

# One original attempt plus a single retry after session renewal
MAX_REQUEST_ATTEMPTS: Final = 2

AUTH_REQUIRED: Final = "auth_required"

AUTHORIZATION_STATUS_REASONS: Final[dict[str, str]] = {
    "unknown": "The app_token is invalid or has been revoked",
    "pending": "The user has not confirmed the authorization request yet",
    "timeout": "The user did not confirmed the authorization within the given time",
    "granted": "The app_token is valid and can be used to open a session",
    "denied": "The user denied the authorization request",
}

AUTH_ERROR_DESCRIPTIONS: Final[dict[str, str]] = {
    "auth_required": "Invalid session token, or no session token sent",
    "invalid_token": "The app token you are trying to use is invalid or has been revoked",
    "pending_token": "The app token you are trying to use has not been validated by user yet",
    "insufficient_rights": "Your app permissions does not allow accessing this API",
    "denied_from_external_ip": "You are trying to get an app_token from a remote IP",
    "invalid_request": "Your request is invalid",
    "ratelimited": "Too many auth error have been made from your IP",
    "new_apps_denied": "New application token request has been disabled",
    "apps_denied": "API access from apps has been disabled",
    "internal_error": "Internal error",
}


def compute_password(app_token: str, challenge: str) -> str:
    """Derive the session password for a login challenge.

    The device computes the same value on its side: lower-case hex of
    HMAC-SHA1 keyed by the app_token over the challenge.
    """
    return hmac.new(
        app_token.encode("utf-8"), challenge.encode("utf-8"), hashlib.sha1
    ).hexdigest()


def major_version(api_version: Any) -> str:
    """Return the integer prefix of a dotted API version ("7.1" -> "7")."""
    head = str(api_version if api_version is not None else "").split(".")[0].strip()
    if not head.isdigit():
        raise FreeboxValidationError(f'Invalid api_version "{api_version}"')
    return head


def build_api_base_url(
    root_url: str, api_base_url: str, api_version: Any
) -> str:
    """Build the version-scoped API root, e.g. https://host:port/api/v7."""
    root = root_url.rstrip("/")
    base = "/" + api_base_url.strip("/") + "/" if api_base_url.strip("/") else "/"
    return f"{root}{base}v{major_version(api_version)}"


def build_root_url(api_domain: str, https_port: int | None = None) -> str:
    """Build the https origin for a Freebox domain and optional port."""
    if api_domain.startswith(("http://", "https://")):
        origin = api_domain.rstrip("/")
    else:
        origin = f"https://{api_domain}"
    return f"{origin}:{https_port}" if https_port else origin


def unwrap_result(payload: Any) -> dict[str, Any]:
    """Return the envelope's `result` object, or the payload itself.

    Discovery answers with a bare object while every other endpoint wraps
    its payload in `{success, result}`.
    """
    if not isinstance(payload, dict):
        return {}
    result = payload.get("result")
    if isinstance(result, dict):
        return result
    return payload


def describe_auth_error(error_code: str | None) -> str | None:
    """Return the human readable description of a Freebox auth error code."""
    if error_code is None:
        return None
    return AUTH_ERROR_DESCRIPTIONS.get(error_code)


def session_expiry_challenge(
    err: FreeboxResponseError, *, had_session: bool
) -> str | None:
    """Return the fresh challenge when `err` signals an expired session.

    Expiry is a 403 with error code auth_required on a request that carried
    a session header, and a challenge in the error body. Any other failure
    returns None.
    """
    if err.status != 403 or err.error_code != AUTH_REQUIRED or not had_session:
        return None
    return err.challenge
