"""Tests for the GitHub OAuth delegate, with GitHub replaced by httpx.MockTransport."""

import json

import httpx
import pytest

from backend.app.auth.github_oauth import (
    AuthError,
    GithubUser,
    MissingToken,
    build_authorize_url,
    exchange_code,
    fetch_profile,
)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_authorize_url_carries_client_and_callback():
    url = httpx.URL(build_authorize_url())
    assert str(url).startswith("https://github.com/login/oauth/authorize?")
    assert url.params["client_id"] == "test-client-id"
    assert url.params["redirect_uri"] == "http://localhost:3001/sso/callback"


class TestExchangeCode:
    def test_returns_access_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["accept"] = request.headers["accept"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"access_token": "gh-token", "token_type": "bearer"})

        assert exchange_code("abc", client=_client(handler)) == "gh-token"
        assert seen["url"] == "https://github.com/login/oauth/access_token"
        assert seen["accept"] == "application/json"
        assert seen["body"] == {
            "code": "abc",
            "client_id": "test-client-id",
            "client_secret": "test-client-secret",
        }

    def test_non_200_raises(self):
        client = _client(lambda request: httpx.Response(500, json={}))
        with pytest.raises(AuthError):
            exchange_code("abc", client=client)

    def test_error_body_without_token_raises(self):
        client = _client(lambda request: httpx.Response(200, json={"error": "bad_verification_code"}))
        with pytest.raises(AuthError):
            exchange_code("reused", client=client)

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AuthError):
            exchange_code("abc", client=_client(handler))


class TestFetchProfile:
    def test_returns_github_user(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, json={"id": 42, "login": "alice", "email": "a@x.com"})

        user = fetch_profile("gh-token", client=_client(handler))

        assert user == GithubUser(id=42, login="alice", email="a@x.com")
        assert seen["auth"] == "token gh-token"

    def test_email_may_be_missing(self):
        client = _client(lambda request: httpx.Response(200, json={"id": 1, "login": "bob"}))
        assert fetch_profile("t", client=client).email is None

    def test_empty_token_raises_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(MissingToken):
            fetch_profile("", client=_client(handler))

    def test_rejected_token_raises(self):
        client = _client(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))
        with pytest.raises(AuthError, match="Cant get user profile"):
            fetch_profile("expired", client=client)
