"""Shared fixtures: an Instagram client wired to an in-memory httpx transport."""

import json

import httpx
import pytest

from instagram_api import ClientConfig, InstagramClient


class FakeInstagram:
    """Records requests and answers them with queued or default responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def queue(self, payload=None, status_code=200, content=None):
        if content is None:
            content = json.dumps(payload if payload is not None else {"data": []}).encode()
        self.responses.append(httpx.Response(status_code, content=content))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, json={"meta": {"code": 200}, "data": []})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fake():
    return FakeInstagram()


@pytest.fixture
def app_config():
    return ClientConfig.for_app("k", "s", "https://cb")


@pytest.fixture
def client(fake, app_config):
    with InstagramClient(app_config, transport=httpx.MockTransport(fake.handler)) as c:
        yield c


@pytest.fixture
def authed_client(client):
    client.set_access_token("tok123")
    return client
