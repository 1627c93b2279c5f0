"""
Builds Instagram API requests from a resource path and parameters.
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from .config import API_URL, ClientConfig
from .exceptions import AuthenticationRequired, InvalidParameter
from .models import RequestSpec

SUPPORTED_METHODS = ("GET", "POST", "DELETE")

# Set by the builder from the configuration only
CREDENTIAL_PARAMS = frozenset({"client_id", "access_token"})


class RequestBuilder:
    """
    Turns (path, auth, params, method) into a RequestSpec.

    Unauthenticated requests identify the application with ``client_id``,
    authenticated ones carry the user's ``access_token``.
    """

    def __init__(self, config: ClientConfig, base_url: str = API_URL):
        self.config = config
        self.base_url = base_url

    def _auth_param(self, authenticated: bool) -> dict[str, str]:
        """Credential parameter for the request."""
        if not authenticated:
            return {"client_id": self.config.api_key}

        token = self.config.get_access_token()
        if not token:
            raise AuthenticationRequired(
                "This method requires a valid user access token"
            )
        return {"access_token": token}

    @staticmethod
    def clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        """Drop None values, reject credential keys and validate ``count``."""
        cleaned = {
            key: value for key, value in (params or {}).items()
            if value is not None
        }

        reserved = sorted(CREDENTIAL_PARAMS.intersection(cleaned))
        if reserved:
            raise InvalidParameter(
                f"Credential parameters cannot be passed explicitly: {', '.join(reserved)}"
            )

        count = cleaned.get("count")
        if count is not None:
            try:
                count = int(count)
            except (TypeError, ValueError):
                raise InvalidParameter(f"count must be an integer, got {count!r}")
            if count < 1:
                raise InvalidParameter(f"count must be at least 1, got {count}")
            cleaned["count"] = count

        return cleaned

    def build(
        self,
        path: str,
        authenticated: bool = False,
        params: Optional[Mapping[str, Any]] = None,
        method: str = "GET",
    ) -> RequestSpec:
        """
        Build a request for an API resource.

        Args:
            path: Resource path relative to the API base (e.g. "users/self")
            authenticated: Whether the call needs the user access token
            params: Query parameters (GET) or form fields (POST)
            method: GET, POST or DELETE

        Returns:
            RequestSpec with the final URL and optional form body

        Raises:
            AuthenticationRequired: If authenticated and no token is set
            InvalidParameter: If count < 1 or the method is unsupported
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise InvalidParameter(f"Unsupported HTTP method: {method}")

        path = path.lstrip("/")
        credential = self._auth_param(authenticated)
        cleaned = self.clean_params(params)

        body = None
        if method == "GET":
            query = {**credential, **cleaned}
        elif method == "POST":
            query = credential
            body = urlencode(cleaned)
        else:
            # DELETE carries only the credential
            query = credential

        url = f"{self.base_url}{path}?{urlencode(query)}"

        return RequestSpec(
            path=path,
            authenticated=authenticated,
            method=method,
            params=cleaned,
            url=url,
            body=body,
        )
