"""Tests for client configuration and permission scopes."""

import threading

import pytest

from instagram_api import ClientConfig, InvalidConfiguration, OAuthToken
from instagram_api.config import VALID_SCOPES, merge_scope


class TestMergeScope:
    """Test cases for merge_scope"""

    def test_empty_request_is_basic(self):
        assert merge_scope([]) == ["basic"]
        assert merge_scope(None) == ["basic"]

    def test_empty_request_keeps_current(self):
        assert merge_scope([], ["likes", "basic"]) == ["likes", "basic"]

    @pytest.mark.parametrize("requested", [
        ["likes"],
        ["comments", "relationships"],
        ["basic", "likes", "likes"],
        ["public_content", "follower_list"],
        sorted(VALID_SCOPES),
    ])
    def test_always_includes_basic(self, requested):
        merged = merge_scope(requested)
        assert "basic" in merged
        assert len(merged) == len(set(merged))
        assert set(merged) == set(requested) | {"basic"}

    def test_requested_order_first(self):
        assert merge_scope(["likes", "comments"]) == ["likes", "comments", "basic"]

    @pytest.mark.parametrize("requested", [
        ["admin"],
        ["likes", "everything"],
        ["BASIC"],
    ])
    def test_rejects_unknown_scope(self, requested):
        with pytest.raises(InvalidConfiguration):
            merge_scope(requested)


class TestClientConfig:
    """Test cases for ClientConfig construction"""

    def test_for_app_default_scope(self):
        config = ClientConfig.for_app("k", "s", "https://cb")
        assert config.scope == ["basic"]
        assert config.access_token is None
        assert not config.is_public_only

    def test_for_app_with_scope(self):
        config = ClientConfig.for_app("k", "s", "https://cb", scope=["likes"])
        assert config.scope == ["likes", "basic"]

    def test_for_app_invalid_scope(self):
        with pytest.raises(InvalidConfiguration):
            ClientConfig.for_app("k", "s", "https://cb", scope=["write_everything"])

    def test_for_app_requires_all_fields(self):
        with pytest.raises(InvalidConfiguration):
            ClientConfig.for_app("k", "", "https://cb")

    def test_public(self):
        config = ClientConfig.public("k")
        assert config.api_key == "k"
        assert config.is_public_only
        assert config.scope == ["basic"]

    def test_public_rejects_empty_key(self):
        with pytest.raises(InvalidConfiguration):
            ClientConfig.public("")

    def test_from_mapping_string(self):
        assert ClientConfig.from_mapping("k").is_public_only

    def test_from_mapping_dict(self):
        config = ClientConfig.from_mapping({
            "api_key": "k",
            "api_secret": "s",
            "callback_url": "https://cb",
            "scope": ["comments"],
            "access_token": "t",
        })
        assert config.scope == ["comments", "basic"]
        assert config.access_token == "t"

    @pytest.mark.parametrize("data", [
        42,
        None,
        ["k", "s"],
        {"api_key": "k"},
        {"api_key": "k", "api_secret": "s"},
    ])
    def test_from_mapping_rejects_other_shapes(self, data):
        with pytest.raises(InvalidConfiguration):
            ClientConfig.from_mapping(data)

    def test_from_env_full(self):
        config = ClientConfig.from_env({
            "INSTAGRAM_CLIENT_ID": "k",
            "INSTAGRAM_CLIENT_SECRET": "s",
            "INSTAGRAM_REDIRECT_URI": "https://cb",
            "INSTAGRAM_SCOPE": "likes, comments",
            "INSTAGRAM_ACCESS_TOKEN": "t",
        })
        assert config.scope == ["likes", "comments", "basic"]
        assert config.access_token == "t"

    def test_from_env_public(self):
        config = ClientConfig.from_env({"INSTAGRAM_CLIENT_ID": "k"})
        assert config.is_public_only

    def test_from_env_missing_key(self):
        with pytest.raises(InvalidConfiguration):
            ClientConfig.from_env({})


class TestAccessToken:
    """Test cases for set_access_token"""

    def test_raw_string(self):
        config = ClientConfig.public("k")
        config.set_access_token("abc")
        assert config.get_access_token() == "abc"

    def test_oauth_mapping(self):
        config = ClientConfig.public("k")
        config.set_access_token({"access_token": "abc", "user": {"id": "1"}})
        assert config.get_access_token() == "abc"

    def test_oauth_model(self):
        config = ClientConfig.public("k")
        config.set_access_token(OAuthToken(access_token="abc"))
        assert config.get_access_token() == "abc"

    def test_empty_clears(self):
        config = ClientConfig.public("k")
        config.set_access_token("abc")
        config.set_access_token("")
        assert config.get_access_token() is None

    def test_concurrent_writers(self):
        config = ClientConfig.public("k")
        tokens = [f"token-{i}" for i in range(20)]
        threads = [
            threading.Thread(target=config.set_access_token, args=(t,))
            for t in tokens
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert config.get_access_token() in tokens
