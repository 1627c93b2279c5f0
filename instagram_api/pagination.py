"""
Follows the ``pagination`` object of a response envelope to the next page.

Time-ordered feeds page with ``next_max_id`` (sent back as ``max_id``),
relationship lists with ``next_cursor`` (sent back as ``cursor``).
"""

import logging
from typing import Any, Iterator, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import ValidationError

from .exceptions import PaginationUnsupported
from .models import Pagination, RequestSpec
from .request import RequestBuilder
from .transport import Transport

logger = logging.getLogger(__name__)


def get_pagination(envelope: Any) -> Pagination:
    """
    Extract the pagination object from an envelope.

    Raises:
        PaginationUnsupported: If the envelope has no pagination object
    """
    if not isinstance(envelope, dict) or envelope.get("pagination") is None:
        raise PaginationUnsupported("This response doesn't support pagination")

    try:
        return Pagination.model_validate(envelope["pagination"])
    except ValidationError as e:
        raise PaginationUnsupported(f"Malformed pagination object: {e}") from e


def _relative_path(next_url: str, base_url: str) -> str:
    """Path of next_url relative to the API base."""
    url = next_url.split("?", 1)[0]
    if url.startswith(base_url):
        return url[len(base_url):]

    # Same API under another host spelling (e.g. http vs https)
    base_path = urlsplit(base_url).path
    path = urlsplit(url).path
    if path.startswith(base_path):
        return path[len(base_path):]
    return path.lstrip("/")


def build_next_request(
    envelope: Any,
    builder: RequestBuilder,
    limit: Optional[int] = None,
) -> Optional[RequestSpec]:
    """
    Build the request for the page after ``envelope``.

    Args:
        envelope: Decoded response of a previous call
        builder: Request builder holding the client credentials
        limit: Page size to request (None = API default)

    Returns:
        RequestSpec for the next page, or None when there are no more pages
    """
    pagination = get_pagination(envelope)

    if not pagination.next_url or "?" not in pagination.next_url:
        return None

    base_url = builder.base_url
    path = _relative_path(pagination.next_url, base_url)
    query = parse_qs(urlsplit(pagination.next_url).query)
    authenticated = "access_token" in query

    # next_max_id takes precedence if both are present
    params: dict[str, Any] = {}
    if pagination.next_max_id is not None:
        params["max_id"] = pagination.next_max_id
    elif pagination.next_cursor is not None:
        params["cursor"] = pagination.next_cursor
    params["count"] = limit

    return builder.build(path, authenticated, params)


def next_page(
    envelope: Any,
    builder: RequestBuilder,
    transport: Transport,
    limit: Optional[int] = None,
) -> Optional[Any]:
    """Fetch the page after ``envelope``, or None when it was the last one."""
    spec = build_next_request(envelope, builder, limit)
    if spec is None:
        logger.debug("No further pages")
        return None
    return transport.execute(spec)


def iter_pages(
    envelope: Any,
    builder: RequestBuilder,
    transport: Transport,
    limit: Optional[int] = None,
    max_pages: Optional[int] = None,
) -> Iterator[Any]:
    """
    Yield the envelopes following ``envelope`` until the last page.

    Args:
        envelope: First page, already fetched by the caller
        max_pages: Stop after this many additional pages (None = all)
    """
    fetched = 0
    current = envelope
    while max_pages is None or fetched < max_pages:
        current = next_page(current, builder, transport, limit)
        if current is None:
            return
        fetched += 1
        yield current
