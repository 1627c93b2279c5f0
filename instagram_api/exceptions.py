"""
Exceptions raised by the Instagram API client.
"""

from typing import Optional


class InstagramError(Exception):
    """Base class for every error raised by this package."""
    pass


class InvalidConfiguration(InstagramError):
    """Raised for bad client configuration or a disallowed permission scope."""
    pass


class AuthenticationRequired(InstagramError):
    """Raised when an authenticated call is attempted without an access token."""
    pass


class InvalidParameter(InstagramError):
    """Raised when a request parameter is rejected before dispatch."""
    pass


class PaginationUnsupported(InstagramError):
    """Raised when following pages of a response that has no pagination object."""
    pass


class TransportError(InstagramError):
    """Raised when the HTTP round trip itself fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(f"Transport error: {message}")
        self.status_code = status_code


class ResponseDecodeError(InstagramError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(f"Could not decode response: {message}")
        self.body = body


class OAuthError(InstagramError):
    """Raised when the OAuth code exchange does not return an access token."""

    def __init__(self, error_type: str, message: str = ""):
        super().__init__(f"OAuth exchange failed: {error_type}. {message}")
        self.error_type = error_type
