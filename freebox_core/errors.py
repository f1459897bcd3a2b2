"""Client error types for Freebox OS device interactions."""

from __future__ import annotations

from typing import Any


class FreeboxClientError(Exception):
    """Base error for Freebox client failures."""


class FreeboxTimeout(FreeboxClientError):
    """Timeout while communicating with the device."""


class FreeboxConnectionError(FreeboxClientError):
    """Network connection to the device failed."""


class FreeboxNetworkUnreachable(FreeboxConnectionError):
    """The device could not be reached at all during discovery.

    Usually means the caller is not on the same local network as the Freebox.
    """


class FreeboxValidationError(FreeboxClientError, ValueError):
    """Caller supplied structurally invalid input."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or [message]


class FreeboxResponseError(FreeboxClientError):
    """HTTP response error from the device."""

    def __init__(self, status: int, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def error_code(self) -> str | None:
        if isinstance(self.body, dict):
            code = self.body.get("error_code")
            return code if isinstance(code, str) else None
        return None

    @property
    def challenge(self) -> str | None:
        if not isinstance(self.body, dict):
            return None
        result = self.body.get("result")
        if isinstance(result, dict):
            challenge = result.get("challenge")
            if isinstance(challenge, str) and challenge:
                return challenge
        return None


class FreeboxRegistrationCancelled(FreeboxClientError):
    """Registration was abandoned by the caller while polling."""


class FreeboxAuthorizationRejected(FreeboxClientError):
    """Registration reached a terminal state other than granted."""

    def __init__(self, status: str, reason: str) -> None:
        super().__init__(f"{reason} (status: {status})")
        self.status = status
        self.reason = reason
