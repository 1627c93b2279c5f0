"""
Concurrent per-token calls to the same resource.

Each access token gets its own request and its own result; a failure for
one token is recorded in its BatchResult and never affects the others.
"""

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional

import httpx

from .config import API_URL, ClientConfig, TransportConfig
from .models import BatchResult
from .request import RequestBuilder
from .transport import AsyncTransport

logger = logging.getLogger(__name__)


def _unique(tokens: Iterable[Any]) -> list[str]:
    """Tokens as strings in first-seen order without duplicates (None becomes "")."""
    seen = []
    for token in tokens:
        token = "" if token is None else str(token)
        if token not in seen:
            seen.append(token)
    return seen


def _builder_for(config: ClientConfig, token: str, base_url: str) -> RequestBuilder:
    """Request builder sharing app credentials but carrying one user's token."""
    token_config = ClientConfig(
        api_key=config.api_key,
        api_secret=config.api_secret,
        callback_url=config.callback_url,
    )
    token_config.set_access_token(token)
    return RequestBuilder(token_config, base_url=base_url)


async def _call_one(
    semaphore: asyncio.Semaphore,
    transport: AsyncTransport,
    builder: RequestBuilder,
    token: str,
    path: str,
    authenticated: bool,
    params: Optional[Mapping[str, Any]],
    method: str,
) -> BatchResult:
    async with semaphore:
        try:
            spec = builder.build(path, authenticated, params, method)
            envelope = await transport.execute(spec)
        except Exception as e:
            # recorded on this token only
            return BatchResult(token=token, error=e)
    return BatchResult(token=token, envelope=envelope)


async def batch_call(
    config: ClientConfig,
    tokens: Iterable[str],
    path: str,
    authenticated: bool = True,
    params: Optional[Mapping[str, Any]] = None,
    method: str = "GET",
    transport_config: Optional[TransportConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    base_url: Optional[str] = None,
) -> dict[str, BatchResult]:
    """
    Call one resource once per access token, concurrently.

    Args:
        config: Application configuration (api key is used for unauthenticated calls)
        tokens: User access tokens, one request each
        path: Resource path relative to the API base
        authenticated: Whether each call carries its token
        params: Parameters shared by every request
        method: GET, POST or DELETE
        transport_config: Timeouts and max_concurrency
        transport: Custom httpx async transport (tests)

    Returns:
        Mapping of token -> BatchResult, in the order the tokens were given
    """
    transport_config = transport_config or TransportConfig()
    base = base_url or API_URL
    tokens = _unique(tokens)
    if not tokens:
        return {}

    semaphore = asyncio.Semaphore(max(1, transport_config.max_concurrency))

    logger.debug(f"Batch {method} {path} for {len(tokens)} tokens")

    async with AsyncTransport(transport_config, transport=transport) as client:
        results = await asyncio.gather(*[
            _call_one(
                semaphore,
                client,
                _builder_for(config, token, base),
                token,
                path,
                authenticated,
                params,
                method,
            )
            for token in tokens
        ])

    failed = sum(1 for result in results if not result.ok)
    if failed:
        logger.debug(f"Batch {path}: {failed}/{len(results)} requests failed")

    return {result.token: result for result in results}


def run_batch(*args, **kwargs) -> dict[str, BatchResult]:
    """Blocking wrapper around batch_call; code already inside an event loop awaits batch_call."""
    return asyncio.run(batch_call(*args, **kwargs))
