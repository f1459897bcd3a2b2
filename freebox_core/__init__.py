"""Client core for the Freebox OS local authentication protocol."""

__version__ = "0.1.0"

from .client import FreeboxClient
from .errors import (
    FreeboxAuthorizationRejected,
    FreeboxClientError,
    FreeboxConnectionError,
    FreeboxNetworkUnreachable,
    FreeboxRegistrationCancelled,
    FreeboxResponseError,
    FreeboxTimeout,
    FreeboxValidationError,
)
from .http import FreeboxHttpClient, FreeboxTransport
from .models import (
    AppIdentity,
    AppRegistration,
    AuthorizationStatus,
    AuthorizationTrack,
    DiscoveryInfo,
    FreeboxRequest,
    FreeboxResponse,
    Permissions,
    Session,
)
from .protocol import AUTH_HEADER, FREEBOX_LOCAL_URL, compute_password
from .register import FreeboxRegister
from .session import FreeboxSessionManager
from .tls import FREEBOX_ROOT_CA, create_ssl_context

__all__ = [
    "AUTH_HEADER",
    "FREEBOX_LOCAL_URL",
    "FREEBOX_ROOT_CA",
    "AppIdentity",
    "AppRegistration",
    "AuthorizationStatus",
    "AuthorizationTrack",
    "DiscoveryInfo",
    "FreeboxAuthorizationRejected",
    "FreeboxClient",
    "FreeboxClientError",
    "FreeboxConnectionError",
    "FreeboxHttpClient",
    "FreeboxNetworkUnreachable",
    "FreeboxRegister",
    "FreeboxRegistrationCancelled",
    "FreeboxRequest",
    "FreeboxResponse",
    "FreeboxResponseError",
    "FreeboxSessionManager",
    "FreeboxTimeout",
    "FreeboxTransport",
    "FreeboxValidationError",
    "Permissions",
    "Session",
    "__version__",
    "compute_password",
    "create_ssl_context",
]
