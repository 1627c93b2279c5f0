"""
HTTP transport for the Instagram API.

One request, one blocking wait, one JSON decode. Nothing is retried here;
callers that need resilience wrap the client themselves.
"""

import logging
from typing import Any, Mapping, Optional

import httpx

from .config import TransportConfig
from .exceptions import ResponseDecodeError, TransportError
from .models import RequestSpec
from .utils.headers import HeaderGenerator

logger = logging.getLogger(__name__)


def _timeout(config: TransportConfig) -> httpx.Timeout:
    return httpx.Timeout(config.request_timeout, connect=config.connect_timeout)


def _client_kwargs(
    config: TransportConfig,
    transport: Optional[Any],
) -> dict[str, Any]:
    """Keyword arguments shared by httpx.Client and httpx.AsyncClient."""
    if not config.verify_tls:
        logger.warning(
            "TLS certificate verification is DISABLED - use only against test servers"
        )

    kwargs: dict[str, Any] = {
        "timeout": _timeout(config),
        "verify": config.verify_tls,
        "follow_redirects": False,
    }
    if transport is not None:
        kwargs["transport"] = transport
    elif config.proxy_url:
        kwargs["proxy"] = config.proxy_url
    return kwargs


def decode_response(response: httpx.Response) -> Any:
    """
    Decode a response body as JSON.

    Raises:
        TransportError: If the status is not 2xx and the body is empty or not JSON
        ResponseDecodeError: If a 2xx body is not valid JSON
    """
    if not response.is_success and not response.content.strip():
        raise TransportError(
            f"HTTP {response.status_code} {response.reason_phrase} with empty body",
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as e:
        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} {response.reason_phrase} with non-JSON body",
                status_code=response.status_code,
            ) from e
        raise ResponseDecodeError(str(e), body=response.text[:500]) from e


def _describe(error: httpx.HTTPError) -> str:
    return str(error) or type(error).__name__


class Transport:
    """
    Synchronous HTTP transport backed by httpx.Client.

    Usage:
        with Transport() as transport:
            envelope = transport.execute(spec)
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        header_gen: Optional[HeaderGenerator] = None,
    ):
        """
        Initialize the transport.

        Args:
            config: Timeouts, TLS and proxy settings (defaults if not provided)
            transport: Custom httpx transport, e.g. httpx.MockTransport in tests
            header_gen: Header generator (defaults if not provided)
        """
        self.config = config or TransportConfig()
        self.header_gen = header_gen or HeaderGenerator()
        self._client = httpx.Client(**_client_kwargs(self.config, transport))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the underlying HTTP client."""
        self._client.close()

    def execute(self, spec: RequestSpec) -> Any:
        """
        Dispatch a built request and decode the response.

        Args:
            spec: Request built by RequestBuilder

        Returns:
            Decoded JSON envelope
        """
        logger.debug(f"{spec.method} {spec.path} (auth={spec.authenticated})")

        try:
            response = self._client.request(
                spec.method,
                spec.url,
                content=spec.body,
                headers=self.header_gen.get_api_headers(spec.headers),
            )
        except httpx.HTTPError as e:
            raise TransportError(_describe(e)) from e

        return decode_response(response)

    def post_form(self, url: str, data: Mapping[str, Any]) -> Any:
        """POST form fields to an absolute URL and decode the JSON reply."""
        logger.debug(f"POST {url}")

        try:
            response = self._client.post(
                url,
                data=dict(data),
                headers=self.header_gen.get_api_headers(),
            )
        except httpx.HTTPError as e:
            raise TransportError(_describe(e)) from e

        return decode_response(response)


class AsyncTransport:
    """Asynchronous counterpart of Transport, used for batch calls."""

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        header_gen: Optional[HeaderGenerator] = None,
    ):
        self.config = config or TransportConfig()
        self.header_gen = header_gen or HeaderGenerator()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self):
        """Ensure HTTP client is created."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                **_client_kwargs(self.config, self._transport)
            )

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def execute(self, spec: RequestSpec) -> Any:
        await self._ensure_client()
        logger.debug(f"{spec.method} {spec.path} (auth={spec.authenticated}, async)")

        try:
            response = await self._client.request(
                spec.method,
                spec.url,
                content=spec.body,
                headers=self.header_gen.get_api_headers(spec.headers),
            )
        except httpx.HTTPError as e:
            raise TransportError(_describe(e)) from e

        return decode_response(response)
