"""
Instagram API Client - thin Python client for the Instagram v1 REST API.

This client:
- Handles the OAuth2 authorization-code flow
- Wraps user, media, tag, location and relationship endpoints
- Follows pagination cursors of any paged response
- Returns decoded JSON envelopes unchanged
"""

from .client import InstagramClient
from .config import ClientConfig, TransportConfig
from .exceptions import (
    AuthenticationRequired,
    InstagramError,
    InvalidConfiguration,
    InvalidParameter,
    OAuthError,
    PaginationUnsupported,
    ResponseDecodeError,
    TransportError,
)
from .models import BatchResult, OAuthToken, RequestSpec

__version__ = "1.0.0"
__all__ = [
    "InstagramClient",
    "ClientConfig",
    "TransportConfig",
    "RequestSpec",
    "OAuthToken",
    "BatchResult",
    "InstagramError",
    "InvalidConfiguration",
    "AuthenticationRequired",
    "InvalidParameter",
    "TransportError",
    "ResponseDecodeError",
    "PaginationUnsupported",
    "OAuthError",
]
