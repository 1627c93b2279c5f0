"""
Configuration settings for the Instagram API client.
"""

import os
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from .exceptions import InvalidConfiguration


# Instagram endpoints
API_URL = "https://api.instagram.com/v1/"
API_OAUTH_URL = "https://api.instagram.com/oauth/authorize"
API_OAUTH_TOKEN_URL = "https://api.instagram.com/oauth/access_token"

# Permission scopes
DEFAULT_SCOPE = ("basic",)
VALID_SCOPES = frozenset({
    "basic",
    "likes",
    "comments",
    "relationships",
    "public_content",
    "follower_list",
})

# Actions accepted by users/{id}/relationship
RELATIONSHIP_ACTIONS = frozenset({
    "follow",
    "unfollow",
    "block",
    "unblock",
    "approve",
    "deny",
})


@dataclass
class TransportConfig:
    """HTTP settings shared by the sync and batch transports."""

    # Request settings
    connect_timeout: float = 5.0
    request_timeout: float = 30.0

    # Only switch off for test environments with self-signed certificates
    verify_tls: bool = True

    # Batch settings
    max_concurrency: int = 10

    # Proxy settings
    proxy_url: Optional[str] = None


def merge_scope(requested: Iterable[str], current: Iterable[str] = ()) -> list[str]:
    """
    Merge requested permission scopes with the mandatory default scope.

    Args:
        requested: Scopes asked for by the caller
        current: Scope to fall back to when nothing is requested

    Returns:
        De-duplicated scope list, always containing "basic"

    Raises:
        InvalidConfiguration: If a requested scope is not a known Instagram scope
    """
    requested = list(requested or ())
    if not requested:
        return list(current) or list(DEFAULT_SCOPE)

    merged = []
    for scope in requested + list(DEFAULT_SCOPE):
        if scope not in merged:
            merged.append(scope)

    invalid = [scope for scope in merged if scope not in VALID_SCOPES]
    if invalid:
        raise InvalidConfiguration(
            f"Invalid permission scope: {', '.join(map(str, invalid))}"
        )

    return merged


@dataclass
class ClientConfig:
    """
    Credentials and permission scope for one Instagram application.

    Build it with one of the named constructors:
    - ClientConfig.for_app(...) for the OAuth flow and user data
    - ClientConfig.public(api_key) for public data only
    """

    api_key: str
    api_secret: Optional[str] = None
    callback_url: Optional[str] = None
    access_token: Optional[str] = None
    _scope: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPE), repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @classmethod
    def for_app(
        cls,
        api_key: str,
        api_secret: str,
        callback_url: str,
        scope: Optional[Iterable[str]] = None,
    ) -> "ClientConfig":
        """Full configuration for the OAuth flow."""
        if not api_key or not api_secret or not callback_url:
            raise InvalidConfiguration(
                "api_key, api_secret and callback_url are all required"
            )
        config = cls(api_key=api_key, api_secret=api_secret, callback_url=callback_url)
        config.scope = scope or []
        return config

    @classmethod
    def public(cls, api_key: str) -> "ClientConfig":
        """Configuration for public data only (no OAuth)."""
        if not api_key or not isinstance(api_key, str):
            raise InvalidConfiguration("A non-empty API key is required")
        return cls(api_key=api_key)

    @classmethod
    def from_mapping(cls, data: Union[str, Mapping[str, Any]]) -> "ClientConfig":
        """
        Build a configuration from either an API key string or a mapping
        with api_key, api_secret, callback_url and an optional scope list.
        """
        if isinstance(data, str):
            return cls.public(data)

        if isinstance(data, Mapping):
            missing = [
                key for key in ("api_key", "api_secret", "callback_url")
                if not data.get(key)
            ]
            if missing:
                raise InvalidConfiguration(
                    f"Missing configuration keys: {', '.join(missing)}"
                )
            config = cls.for_app(
                data["api_key"],
                data["api_secret"],
                data["callback_url"],
                scope=data.get("scope"),
            )
            if data.get("access_token"):
                config.set_access_token(data["access_token"])
            return config

        raise InvalidConfiguration(
            f"Invalid configuration data for client: {type(data).__name__}"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build a configuration from INSTAGRAM_* environment variables.

        INSTAGRAM_CLIENT_ID is required. When INSTAGRAM_CLIENT_SECRET and
        INSTAGRAM_REDIRECT_URI are also set the full OAuth configuration is
        returned, otherwise a public-only one.
        """
        env = os.environ if environ is None else environ

        api_key = env.get("INSTAGRAM_CLIENT_ID", "")
        api_secret = env.get("INSTAGRAM_CLIENT_SECRET", "")
        callback_url = env.get("INSTAGRAM_REDIRECT_URI", "")

        if api_secret and callback_url:
            scope = env.get("INSTAGRAM_SCOPE", "").replace(",", " ").split()
            config = cls.for_app(api_key, api_secret, callback_url, scope=scope)
        else:
            config = cls.public(api_key)

        token = env.get("INSTAGRAM_ACCESS_TOKEN")
        if token:
            config.set_access_token(token)
        return config

    @property
    def scope(self) -> list[str]:
        """Granted permission scope, always including "basic"."""
        return list(self._scope) or list(DEFAULT_SCOPE)

    @scope.setter
    def scope(self, value: Iterable[str]):
        self._scope = merge_scope(value)

    @property
    def is_public_only(self) -> bool:
        return not (self.api_secret and self.callback_url)

    def merge_scope(self, requested: Optional[Iterable[str]]) -> list[str]:
        """Merge extra scopes for a login URL, defaulting to the configured scope."""
        return merge_scope(requested or [], self.scope)

    def set_access_token(self, data: Any):
        """
        Store the user access token.

        Args:
            data: A raw token string, a decoded OAuth response mapping,
                or any object with an ``access_token`` attribute
        """
        if isinstance(data, Mapping):
            token = data.get("access_token")
        elif hasattr(data, "access_token"):
            token = data.access_token
        else:
            token = data

        with self._lock:
            self.access_token = token or None

    def get_access_token(self) -> Optional[str]:
        with self._lock:
            return self.access_token
