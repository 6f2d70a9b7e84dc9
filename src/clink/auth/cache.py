"""In-memory, process-lifetime credential cache.

:class:`CredentialCache` owns the single bearer credential of a client.
Construct one per process and share it by reference with every component
that needs to authenticate; it is never written to disk.

The lock is held for the whole resolution, including any interactive
login, so concurrent callers never start a second SSO or login sequence.
They wait, then read the value the first caller stored.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Callable, Optional

from clink.output import get_output

if TYPE_CHECKING:
    from clink.auth.base import SecretProvider, TicketExchanger
    from clink.models import ClinkConfig


class CredentialCache:
    """Lazily resolved, write-once bearer credential.

    Args:
        resolver: Zero-argument callable returning a formatted credential
            (``"Bearer <token>"``), typically
            :meth:`SSORedirectResolver.resolve
            <clink.auth.sso.SSORedirectResolver.resolve>`.

    Example::

        cache = CredentialCache(resolver.resolve)
        token = cache.get_token()
    """

    def __init__(self, resolver: Callable[[], str]) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._token: Optional[str] = None

    @property
    def is_populated(self) -> bool:
        return self._token is not None

    def get_token(self) -> str:
        """Return the cached credential, resolving it on first use.

        A failed resolution propagates its exception and leaves the cache
        empty, so a later call starts over.
        """
        with self._lock:
            if self._token is None:
                get_output().debug("No cached credential; resolving")
                self._token = self._resolver()
            return self._token


def create_default_cache(
    config: ClinkConfig,
    provider: Optional[SecretProvider] = None,
    exchanger: Optional[TicketExchanger] = None,
    interactive: bool = True,
) -> CredentialCache:
    """Wire a :class:`CredentialCache` with the built-in login components.

    - :class:`~clink.auth.providers.PromptSecretProvider` unless *provider*
      is given.
    - :class:`~clink.auth.exchanger.KinitExchanger` for ``config.realm``
      and ``config.kinit_command`` unless *exchanger* is given.
    - :class:`~clink.auth.sso.SSORedirectResolver` with Negotiate auth.

    With ``interactive=False`` no login flow is attached, so a missing
    Kerberos ticket fails with :class:`~clink.exceptions.UnauthorizedError`
    instead of prompting.

    Returns:
        An empty cache that resolves on first use.
    """
    from clink.auth.exchanger import KinitExchanger
    from clink.auth.login import LoginFlow
    from clink.auth.providers import PromptSecretProvider
    from clink.auth.sso import SSORedirectResolver

    flow: Optional[LoginFlow] = None
    if interactive:
        flow = LoginFlow(
            provider or PromptSecretProvider(),
            exchanger or KinitExchanger(realm=config.realm, command=config.kinit_command),
            username=config.username,
        )
    resolver = SSORedirectResolver(config, flow)
    return CredentialCache(resolver.resolve)
