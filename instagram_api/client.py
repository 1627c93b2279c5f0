"""
Instagram v1 API client.

Every resource method maps to one endpoint and returns the decoded JSON
envelope unchanged.
"""

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional, Union
from urllib.parse import quote_plus

import httpx

from .batch import batch_call, run_batch
from .config import (
    API_OAUTH_TOKEN_URL,
    API_OAUTH_URL,
    RELATIONSHIP_ACTIONS,
    ClientConfig,
    TransportConfig,
)
from .exceptions import InvalidConfiguration, InvalidParameter, OAuthError
from .models import BatchResult, OAuthToken
from .pagination import iter_pages, next_page
from .request import RequestBuilder
from .transport import Transport

logger = logging.getLogger(__name__)


class InstagramClient:
    """
    Client for the Instagram v1 REST API.

    This client:
    - Builds the OAuth login URL and exchanges the returned code for a token
    - Calls user, media, tag, location and relationship endpoints
    - Follows pagination cursors of any paged response
    - Fans one request out over many access tokens (batch calls)
    """

    def __init__(
        self,
        config: Union[ClientConfig, str, Mapping[str, Any]],
        transport_config: Optional[TransportConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the Instagram client.

        Args:
            config: ClientConfig, or an API key / mapping for ClientConfig.from_mapping
            transport_config: HTTP settings (uses defaults if not provided)
            transport: Custom httpx transport, e.g. httpx.MockTransport in tests
        """
        if not isinstance(config, ClientConfig):
            config = ClientConfig.from_mapping(config)

        self.config = config
        self.transport_config = transport_config or TransportConfig()
        self.builder = RequestBuilder(self.config)
        self.transport = Transport(self.transport_config, transport=transport)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP client."""
        self.transport.close()

    def call(
        self,
        path: str,
        authenticated: bool = False,
        params: Optional[Mapping[str, Any]] = None,
        method: str = "GET",
    ) -> Any:
        """Build and dispatch one request to an arbitrary resource path."""
        spec = self.builder.build(path, authenticated, params, method)
        return self.transport.execute(spec)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    @property
    def access_token(self) -> Optional[str]:
        return self.config.get_access_token()

    def set_access_token(self, data: Any):
        """Store a token string or the result of get_oauth_token()."""
        self.config.set_access_token(data)

    @property
    def scope(self) -> list[str]:
        return self.config.scope

    def get_login_url(
        self,
        scope: Optional[Iterable[str]] = None,
        state: Optional[str] = None,
    ) -> str:
        """
        Generate the OAuth login URL.

        Args:
            scope: Additional permissions to request (default: configured scope)
            state: Opaque value echoed back to the callback URL

        Returns:
            Instagram OAuth authorization URL
        """
        if self.config.is_public_only:
            raise InvalidConfiguration("The login URL needs a callback URL and API secret")

        scopes = self.config.merge_scope(scope)
        url = (
            f"{API_OAUTH_URL}"
            f"?client_id={quote_plus(self.config.api_key)}"
            f"&redirect_uri={quote_plus(self.config.callback_url)}"
            f"&scope={'+'.join(scopes)}"
            f"&response_type=code"
        )
        if isinstance(state, str):
            url += f"&state={quote_plus(state)}"
        return url

    def get_oauth_token(self, code: str, token_only: bool = False) -> Union[OAuthToken, str]:
        """
        Exchange the OAuth callback code for an access token.

        Args:
            code: The ``code`` query parameter received on the callback URL
            token_only: Return only the access token string

        Returns:
            OAuthToken (access token plus user data), or the token string
        """
        if self.config.is_public_only:
            raise InvalidConfiguration("The OAuth exchange needs a callback URL and API secret")

        data = self.transport.post_form(API_OAUTH_TOKEN_URL, {
            "grant_type": "authorization_code",
            "client_id": self.config.api_key,
            "client_secret": self.config.api_secret,
            "redirect_uri": self.config.callback_url,
            "code": code,
        })

        if not isinstance(data, dict) or not data.get("access_token"):
            details = data if isinstance(data, dict) else {}
            raise OAuthError(
                details.get("error_type", "unknown_error"),
                details.get("error_message", ""),
            )

        token = OAuthToken.model_validate(data)
        logger.info(f"OAuth exchange completed for user {token.user.get('username', '?')}")
        return token.access_token if token_only else token

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def search_user(self, name: str, limit: Optional[int] = None) -> Any:
        """Search for a user by name."""
        return self.call("users/search", False, {"q": name, "count": limit})

    def get_user(self, user_id: Optional[Union[int, str]] = None) -> Any:
        """
        Get basic information about a user.

        With no user_id and an access token set, returns the owner of the token.
        """
        authenticated = False
        if user_id is None:
            if not self.access_token:
                raise InvalidParameter("get_user() needs a user id when no access token is set")
            user_id = "self"
            authenticated = True
        return self.call(f"users/{user_id}", authenticated)

    def get_user_feed(self, limit: Optional[int] = None) -> Any:
        """Get the authenticated user's feed."""
        return self.call("users/self/feed", True, {"count": limit})

    def get_user_media(
        self,
        user_id: Union[int, str] = "self",
        limit: Optional[int] = None,
    ) -> Any:
        """Get the most recent media of a user."""
        return self.call(
            f"users/{user_id}/media/recent", user_id == "self", {"count": limit}
        )

    def get_user_likes(self, limit: Optional[int] = None) -> Any:
        """Get media the authenticated user has liked."""
        return self.call("users/self/media/liked", True, {"count": limit})

    def get_user_follows(
        self,
        user_id: Union[int, str] = "self",
        limit: Optional[int] = None,
    ) -> Any:
        """Get the list of users this user follows."""
        return self.call(f"users/{user_id}/follows", True, {"count": limit})

    def get_user_followers(
        self,
        user_id: Union[int, str] = "self",
        limit: Optional[int] = None,
    ) -> Any:
        """Get the list of users this user is followed by."""
        return self.call(f"users/{user_id}/followed-by", True, {"count": limit})

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def get_user_relationship(self, user_id: Union[int, str]) -> Any:
        """Get the relationship between the authenticated user and another user."""
        return self.call(f"users/{user_id}/relationship", True)

    def modify_relationship(self, action: str, user_id: Union[int, str]) -> Any:
        """
        Modify the relationship with a target user.

        Args:
            action: follow, unfollow, block, unblock, approve or deny
            user_id: Target user ID
        """
        if action not in RELATIONSHIP_ACTIONS:
            raise InvalidParameter(
                f"Unsupported relationship action {action!r}, "
                f"expected one of: {', '.join(sorted(RELATIONSHIP_ACTIONS))}"
            )
        if user_id is None or user_id == "":
            raise InvalidParameter("modify_relationship() requires a target user id")

        return self.call(
            f"users/{user_id}/relationship", True, {"action": action}, "POST"
        )

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def search_media(
        self,
        lat: float,
        lng: float,
        distance: int = 1000,
        min_timestamp: Optional[int] = None,
        max_timestamp: Optional[int] = None,
    ) -> Any:
        """
        Search media around a coordinate.

        Args:
            lat: Latitude of the center search coordinate
            lng: Longitude of the center search coordinate
            distance: Radius in metres (default 1km, max 5km)
            min_timestamp: Media taken later than this Unix timestamp
            max_timestamp: Media taken earlier than this Unix timestamp
        """
        return self.call("media/search", False, {
            "lat": lat,
            "lng": lng,
            "distance": distance,
            "min_timestamp": min_timestamp,
            "max_timestamp": max_timestamp,
        })

    def get_media(self, media_id: Union[int, str]) -> Any:
        return self.call(f"media/{media_id}")

    def get_popular_media(self) -> Any:
        return self.call("media/popular")

    def get_media_likes(self, media_id: Union[int, str]) -> Any:
        """Get the users who liked a media."""
        return self.call(f"media/{media_id}/likes", True)

    def get_media_comments(self, media_id: Union[int, str]) -> Any:
        return self.call(f"media/{media_id}/comments", False)

    def add_media_comment(self, media_id: Union[int, str], text: str) -> Any:
        """Comment on a media as the authenticated user."""
        return self.call(f"media/{media_id}/comments", True, {"text": text}, "POST")

    def delete_media_comment(
        self,
        media_id: Union[int, str],
        comment_id: Union[int, str],
    ) -> Any:
        """Remove a comment from a media."""
        return self.call(
            f"media/{media_id}/comments/{comment_id}", True, None, "DELETE"
        )

    def like_media(self, media_id: Union[int, str]) -> Any:
        return self.call(f"media/{media_id}/likes", True, None, "POST")

    def delete_liked_media(self, media_id: Union[int, str]) -> Any:
        return self.call(f"media/{media_id}/likes", True, None, "DELETE")

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def search_tags(self, name: str) -> Any:
        return self.call("tags/search", False, {"q": name})

    def get_tag(self, name: str) -> Any:
        return self.call(f"tags/{name}")

    def get_tag_media(self, name: str, limit: Optional[int] = None) -> Any:
        """Get recently tagged media."""
        return self.call(f"tags/{name}/media/recent", False, {"count": limit})

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def get_location(self, location_id: Union[int, str]) -> Any:
        return self.call(f"locations/{location_id}", False)

    def get_location_media(self, location_id: Union[int, str]) -> Any:
        """Get recent media from a location."""
        return self.call(f"locations/{location_id}/media/recent", False)

    def search_location(self, lat: float, lng: float, distance: int = 1000) -> Any:
        """Search locations around a coordinate (distance in metres, max 5000)."""
        return self.call(
            "locations/search", False, {"lat": lat, "lng": lng, "distance": distance}
        )

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def pagination(self, envelope: Any, limit: Optional[int] = None) -> Optional[Any]:
        """
        Fetch the page following a previously returned envelope.

        Args:
            envelope: Response of any paged method
            limit: Page size to request

        Returns:
            Next envelope, or None when there are no more pages

        Raises:
            PaginationUnsupported: If the envelope has no pagination object
        """
        return next_page(envelope, self.builder, self.transport, limit)

    def iter_pages(
        self,
        envelope: Any,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> Iterator[Any]:
        """Yield every page after ``envelope``."""
        return iter_pages(envelope, self.builder, self.transport, limit, max_pages)

    # ------------------------------------------------------------------
    # Batch calls
    # ------------------------------------------------------------------

    def batch_call(
        self,
        path: str,
        tokens: Iterable[str],
        authenticated: bool = True,
        params: Optional[Mapping[str, Any]] = None,
        method: str = "GET",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> dict[str, BatchResult]:
        """
        Call one resource once per access token, concurrently.

        Returns:
            Mapping of token -> BatchResult (envelope or error per token)
        """
        return run_batch(
            self.config,
            tokens,
            path,
            authenticated=authenticated,
            params=params,
            method=method,
            transport_config=self.transport_config,
            transport=transport,
            base_url=self.builder.base_url,
        )

    async def abatch_call(
        self,
        path: str,
        tokens: Iterable[str],
        authenticated: bool = True,
        params: Optional[Mapping[str, Any]] = None,
        method: str = "GET",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> dict[str, BatchResult]:
        """Awaitable batch_call for code already running in an event loop."""
        return await batch_call(
            self.config,
            tokens,
            path,
            authenticated=authenticated,
            params=params,
            method=method,
            transport_config=self.transport_config,
            transport=transport,
            base_url=self.builder.base_url,
        )

    def get_users(self, tokens: Iterable[str], **kwargs) -> dict[str, BatchResult]:
        """Get the owner of each access token."""
        return self.batch_call("users/self", tokens, **kwargs)

    def get_users_media(
        self,
        tokens: Iterable[str],
        limit: Optional[int] = None,
        **kwargs,
    ) -> dict[str, BatchResult]:
        """Get the recent media of each token's owner."""
        return self.batch_call(
            "users/self/media/recent", tokens, params={"count": limit}, **kwargs
        )

    def get_users_followers(
        self,
        tokens: Iterable[str],
        limit: Optional[int] = None,
        **kwargs,
    ) -> dict[str, BatchResult]:
        """Get the followers of each token's owner."""
        return self.batch_call(
            "users/self/followed-by", tokens, params={"count": limit}, **kwargs
        )
