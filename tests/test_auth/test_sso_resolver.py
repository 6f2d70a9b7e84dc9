"""Tests for the SSO redirect resolver (clink.auth.sso).

The identity provider is an httpx.MockTransport: it either answers with a
redirect to ``drink://callback#access_token=...`` or with a plain 200 page,
which is what happens when the Kerberos ticket was not accepted.
"""

from __future__ import annotations

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from clink.auth.login import LoginFlow
from clink.auth.sso import SSORedirectResolver, extract_access_token
from clink.exceptions import (
    BadFormatError,
    LoginAbortedError,
    TransportError,
    UnauthorizedError,
)
from clink.models import ClinkConfig


def _redirect(token: str = "T") -> httpx.Response:
    return httpx.Response(
        302,
        headers={"Location": f"drink://callback#state=&access_token={token}&token_type=bearer"},
    )


def _login_page() -> httpx.Response:
    return httpx.Response(200, text="<html>Sign in</html>")


class _Provider:
    """Mock identity provider replaying a fixed list of responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses[len(self.requests) - 1]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


# ------------------------------------------------------------------ #
# extract_access_token
# ------------------------------------------------------------------ #


class TestExtractAccessToken:
    def test_fragment_token(self) -> None:
        location = "drink://callback#access_token=abc.def&expires_in=300"
        assert extract_access_token(location) == "Bearer abc.def"

    def test_token_not_first_key(self) -> None:
        location = "drink://callback#state=&session_state=x&access_token=T"
        assert extract_access_token(location) == "Bearer T"

    def test_missing_token_is_bad_format(self) -> None:
        with pytest.raises(BadFormatError):
            extract_access_token("drink://callback#id_token=xyz")

    def test_empty_token_is_bad_format(self) -> None:
        with pytest.raises(BadFormatError):
            extract_access_token("drink://callback#access_token=&id_token=xyz")

    def test_relative_location_is_bad_format(self) -> None:
        with pytest.raises(BadFormatError):
            extract_access_token("callback#access_token=T")

    def test_no_fragment_is_bad_format(self) -> None:
        with pytest.raises(BadFormatError):
            extract_access_token("drink://callback")


# ------------------------------------------------------------------ #
# Authorization request
# ------------------------------------------------------------------ #


class TestAuthorizationRequest:
    def test_default_url_matches_registered_client(self) -> None:
        resolver = SSORedirectResolver(ClinkConfig())
        assert resolver.authorization_request_url == (
            "https://sso.csh.rit.edu/auth/realms/csh/protocol/openid-connect/auth"
            "?client_id=clidrink"
            "&redirect_uri=drink%3A%2F%2Fcallback"
            "&response_type=token%20id_token"
            "&scope=openid%20profile%20drink_balance"
            "&state=&nonce="
        )

    def test_request_does_not_follow_redirect(self, config: ClinkConfig) -> None:
        idp = _Provider(_redirect())
        SSORedirectResolver(config, transport=idp.transport).resolve()

        assert len(idp.requests) == 1
        sent = idp.requests[0]
        assert sent.url.host == "sso.example.com"
        assert sent.url.path == "/oidc/auth"
        query = parse_qs(urlsplit(str(sent.url)).query, keep_blank_values=True)
        assert query["client_id"] == ["clidrink"]
        assert query["response_type"] == ["token id_token"]

    def test_max_attempts_must_be_positive(self, config: ClinkConfig) -> None:
        with pytest.raises(ValueError):
            SSORedirectResolver(config, max_attempts=0)


# ------------------------------------------------------------------ #
# resolve()
# ------------------------------------------------------------------ #


class TestResolve:
    def test_redirect_on_first_request(
        self, config: ClinkConfig, exchanger, make_provider
    ) -> None:
        idp = _Provider(_redirect("T"))
        provider = make_provider(["hunter2"])
        flow = LoginFlow(provider, exchanger, username="alice")
        resolver = SSORedirectResolver(config, flow, transport=idp.transport)

        assert resolver.resolve() == "Bearer T"
        assert len(idp.requests) == 1
        assert provider.usernames == []
        assert exchanger.calls == []

    def test_login_then_redirect(self, config: ClinkConfig, exchanger, make_provider) -> None:
        idp = _Provider(_login_page(), _redirect("fresh"))
        provider = make_provider(["hunter2"])
        flow = LoginFlow(provider, exchanger, username="alice")
        resolver = SSORedirectResolver(config, flow, transport=idp.transport)

        assert resolver.resolve() == "Bearer fresh"
        assert len(idp.requests) == 2
        assert exchanger.calls == [("alice", "hunter2")]

    def test_no_redirect_after_login_is_bad_format(
        self, config: ClinkConfig, exchanger, make_provider
    ) -> None:
        idp = _Provider(_login_page(), _login_page(), _login_page())
        flow = LoginFlow(make_provider(["hunter2"]), exchanger, username="alice")
        resolver = SSORedirectResolver(config, flow, transport=idp.transport)

        with pytest.raises(BadFormatError):
            resolver.resolve()
        # The retry is bounded: one request, one login, one retry.
        assert len(idp.requests) == 2
        assert len(exchanger.calls) == 1

    def test_login_uses_configured_timeout(self, config: ClinkConfig) -> None:
        idp = _Provider(_login_page(), _redirect())
        flow = MagicMock(spec=LoginFlow)
        config = config.model_copy(update={"login_timeout": 12.5})
        resolver = SSORedirectResolver(config, flow, transport=idp.transport)

        assert resolver.resolve() == "Bearer T"
        flow.login.assert_called_once_with(timeout=12.5)

    def test_aborted_login_stops_resolution(
        self, config: ClinkConfig, exchanger, make_provider
    ) -> None:
        idp = _Provider(_login_page(), _redirect())
        flow = LoginFlow(make_provider([]), exchanger, username="alice")
        resolver = SSORedirectResolver(config, flow, transport=idp.transport)

        with pytest.raises(LoginAbortedError):
            resolver.resolve()
        assert len(idp.requests) == 1

    def test_without_login_flow_is_unauthorized(self, config: ClinkConfig) -> None:
        idp = _Provider(_login_page(), _redirect())
        resolver = SSORedirectResolver(config, transport=idp.transport)

        with pytest.raises(UnauthorizedError) as exc_info:
            resolver.resolve()
        assert "kinit" in str(exc_info.value)
        assert len(idp.requests) == 1

    def test_single_attempt_without_redirect(self, config: ClinkConfig) -> None:
        idp = _Provider(_login_page())
        resolver = SSORedirectResolver(config, transport=idp.transport, max_attempts=1)

        with pytest.raises(BadFormatError, match="after 1 attempts"):
            resolver.resolve()

    def test_malformed_redirect_is_bad_format(self, config: ClinkConfig) -> None:
        idp = _Provider(httpx.Response(302, headers={"Location": "drink://callback#error=denied"}))
        resolver = SSORedirectResolver(config, transport=idp.transport)

        with pytest.raises(BadFormatError):
            resolver.resolve()

    def test_connection_failure_is_transport_error(self, config: ClinkConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        resolver = SSORedirectResolver(config, transport=httpx.MockTransport(handler))

        with pytest.raises(TransportError, match="connection refused"):
            resolver.resolve()
