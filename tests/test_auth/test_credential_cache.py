"""Tests for the in-memory credential cache (clink.auth.cache)."""

from __future__ import annotations

import threading
import time
from unittest.mock import patch

import httpx
import pytest

from clink.auth.cache import CredentialCache, create_default_cache
from clink.auth.login import LoginFlow
from clink.auth.sso import SSORedirectResolver
from clink.exceptions import LoginAbortedError
from clink.models import ClinkConfig


class _CountingResolver:
    def __init__(self, token: str = "Bearer T", delay: float = 0.0) -> None:
        self.token = token
        self.delay = delay
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return self.token


class TestCredentialCache:
    def test_resolves_once(self) -> None:
        resolver = _CountingResolver()
        cache = CredentialCache(resolver)

        assert not cache.is_populated
        assert cache.get_token() == "Bearer T"
        assert cache.get_token() == "Bearer T"
        assert resolver.calls == 1
        assert cache.is_populated

    def test_failed_resolution_leaves_cache_empty(self) -> None:
        attempts = []

        def resolver() -> str:
            attempts.append(1)
            if len(attempts) == 1:
                raise LoginAbortedError()
            return "Bearer second"

        cache = CredentialCache(resolver)
        with pytest.raises(LoginAbortedError):
            cache.get_token()
        assert not cache.is_populated

        assert cache.get_token() == "Bearer second"
        assert len(attempts) == 2

    def test_concurrent_callers_share_one_resolution(self) -> None:
        resolver = _CountingResolver("Bearer shared", delay=0.05)
        cache = CredentialCache(resolver)
        barrier = threading.Barrier(8)
        results: list[str] = []
        results_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            token = cache.get_token()
            with results_lock:
                results.append(token)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert resolver.calls == 1
        assert results == ["Bearer shared"] * 8

    def test_redirect_token_cached(self, config: ClinkConfig) -> None:
        requests: list[httpx.Request] = []

        def idp(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(302, headers={"Location": "drink://callback#access_token=T"})

        resolver = SSORedirectResolver(config, transport=httpx.MockTransport(idp))
        cache = CredentialCache(resolver.resolve)

        assert cache.get_token() == "Bearer T"
        assert cache.get_token() == "Bearer T"
        assert len(requests) == 1


class TestCreateDefaultCache:
    def test_interactive_attaches_login_flow(self, config: ClinkConfig, exchanger) -> None:
        with patch("clink.auth.sso.SSORedirectResolver") as resolver_cls:
            cache = create_default_cache(config, exchanger=exchanger)

        args = resolver_cls.call_args.args
        assert args[0] is config
        assert isinstance(args[1], LoginFlow)
        assert not cache.is_populated

    def test_non_interactive_has_no_login_flow(self, config: ClinkConfig) -> None:
        with patch("clink.auth.sso.SSORedirectResolver") as resolver_cls:
            create_default_cache(config, interactive=False)

        assert resolver_cls.call_args.args == (config, None)

    def test_cache_delegates_to_resolver(self, config: ClinkConfig) -> None:
        with patch("clink.auth.sso.SSORedirectResolver") as resolver_cls:
            resolver_cls.return_value.resolve.return_value = "Bearer from-sso"
            cache = create_default_cache(config, interactive=False)

        assert cache.get_token() == "Bearer from-sso"
        assert cache.get_token() == "Bearer from-sso"
        resolver_cls.return_value.resolve.assert_called_once_with()

    def test_default_exchanger_uses_configured_realm(self, config: ClinkConfig) -> None:
        with patch("clink.auth.login.LoginFlow") as flow_cls, patch(
            "clink.auth.sso.SSORedirectResolver"
        ):
            create_default_cache(config)

        exchanger = flow_cls.call_args.args[1]
        assert exchanger.principal("alice") == "alice@EXAMPLE.COM"
        assert exchanger.command == "kinit"
        assert flow_cls.call_args.kwargs == {"username": "alice"}
