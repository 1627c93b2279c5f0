"""Tests for following paginated responses."""

from urllib.parse import parse_qsl, urlsplit

import pytest

from instagram_api import ClientConfig, InvalidParameter, PaginationUnsupported
from instagram_api.pagination import build_next_request, get_pagination
from instagram_api.request import RequestBuilder

NEXT_URL = "https://api.instagram.com/v1/tags/sunset/media/recent?client_id=k&max_tag_id=99"
NEXT_URL_AUTH = "https://api.instagram.com/v1/users/self/followed-by?access_token=tok&cursor=abc"


@pytest.fixture
def builder():
    config = ClientConfig.for_app("k", "s", "https://cb")
    config.set_access_token("tok")
    return RequestBuilder(config)


def query_of(url: str) -> dict:
    return dict(parse_qsl(urlsplit(url).query))


class TestBuildNextRequest:
    """Test cases for build_next_request"""

    @pytest.mark.parametrize("envelope", [
        {"data": []},
        {"pagination": None},
        "not an envelope",
        None,
    ])
    def test_no_pagination_object(self, builder, envelope):
        with pytest.raises(PaginationUnsupported):
            build_next_request(envelope, builder)

    def test_no_next_url_is_last_page(self, builder):
        assert build_next_request({"pagination": {}}, builder) is None

    def test_next_url_without_query_is_last_page(self, builder):
        envelope = {"pagination": {"next_url": "https://api.instagram.com/v1/media/popular"}}
        assert build_next_request(envelope, builder) is None

    def test_max_id(self, builder):
        envelope = {"pagination": {"next_url": NEXT_URL, "next_max_id": "99"}}
        spec = build_next_request(envelope, builder, limit=20)

        assert spec.path == "tags/sunset/media/recent"
        assert not spec.authenticated
        assert query_of(spec.url) == {"client_id": "k", "max_id": "99", "count": "20"}

    def test_cursor(self, builder):
        envelope = {"pagination": {"next_url": NEXT_URL_AUTH, "next_cursor": "abc"}}
        spec = build_next_request(envelope, builder)

        assert spec.path == "users/self/followed-by"
        assert spec.authenticated
        query = query_of(spec.url)
        assert query == {"access_token": "tok", "cursor": "abc"}
        assert "max_id" not in query

    def test_numeric_max_id(self, builder):
        envelope = {"pagination": {"next_url": NEXT_URL, "next_max_id": 12345}}
        spec = build_next_request(envelope, builder)
        assert query_of(spec.url)["max_id"] == "12345"

    def test_max_id_wins_over_cursor(self, builder):
        envelope = {"pagination": {
            "next_url": NEXT_URL,
            "next_max_id": "99",
            "next_cursor": "abc",
        }}
        query = query_of(build_next_request(envelope, builder).url)
        assert query["max_id"] == "99"
        assert "cursor" not in query

    def test_invalid_limit(self, builder):
        envelope = {"pagination": {"next_url": NEXT_URL, "next_max_id": "99"}}
        with pytest.raises(InvalidParameter):
            build_next_request(envelope, builder, limit=0)

    def test_get_pagination_model(self):
        pagination = get_pagination({"pagination": {"next_url": NEXT_URL, "extra": 1}})
        assert pagination.next_url == NEXT_URL
        assert pagination.next_cursor is None


class TestClientPagination:
    """Test cases for InstagramClient.pagination and iter_pages"""

    def test_follows_next_page(self, fake, authed_client):
        fake.queue({"data": [2], "pagination": {}})
        envelope = {"data": [1], "pagination": {"next_url": NEXT_URL_AUTH, "next_cursor": "abc"}}

        page = authed_client.pagination(envelope, limit=10)

        assert page == {"data": [2], "pagination": {}}
        assert fake.last.url.path == "/v1/users/self/followed-by"
        assert fake.last.url.params["cursor"] == "abc"
        assert fake.last.url.params["count"] == "10"

    def test_returns_none_on_last_page(self, fake, client):
        assert client.pagination({"pagination": {}}) is None
        assert fake.requests == []

    def test_raises_without_pagination(self, client):
        with pytest.raises(PaginationUnsupported):
            client.pagination({"data": []})

    def test_iter_pages_until_exhausted(self, fake, client):
        fake.queue({"data": [2], "pagination": {"next_url": NEXT_URL, "next_max_id": "50"}})
        fake.queue({"data": [3], "pagination": {}})
        first = {"data": [1], "pagination": {"next_url": NEXT_URL, "next_max_id": "99"}}

        pages = list(client.iter_pages(first))

        assert [page["data"] for page in pages] == [[2], [3]]
        assert [r.url.params["max_id"] for r in fake.requests] == ["99", "50"]

    def test_iter_pages_max_pages(self, fake, client):
        fake.queue({"data": [2], "pagination": {"next_url": NEXT_URL, "next_max_id": "50"}})
        first = {"data": [1], "pagination": {"next_url": NEXT_URL, "next_max_id": "99"}}

        pages = list(client.iter_pages(first, max_pages=1))

        assert len(pages) == 1
        assert len(fake.requests) == 1
