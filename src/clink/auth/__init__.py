"""Authentication for clink: SSO redirect, Kerberos login, and token caching.

The pieces, leaves first:

- :class:`TicketExchanger` / :class:`KinitExchanger` -- check a password by
  running ``kinit``.
- :class:`SecretProvider` / :class:`PromptSecretProvider` -- obtain
  passwords and decide when to stop retrying.
- :class:`LoginFlow` -- run a provider against an exchanger until a ticket
  is obtained or the provider gives up.
- :class:`SSORedirectResolver` -- exchange the ambient ticket for a bearer
  token via the identity provider's redirect.
- :class:`CredentialCache` -- hold that token for the life of the process.

Typical usage::

    from clink.auth import create_default_cache

    cache = create_default_cache(config)
    headers = {"Authorization": cache.get_token()}
"""

from clink.auth.base import AttemptOutcome, SecretProvider, TicketExchanger
from clink.auth.cache import CredentialCache, create_default_cache
from clink.auth.exchanger import KinitExchanger
from clink.auth.login import LoginFlow, LoginSession, SessionState
from clink.auth.providers import CallbackSecretProvider, PromptSecretProvider
from clink.auth.sso import SSORedirectResolver, extract_access_token

__all__ = [
    "AttemptOutcome",
    "CallbackSecretProvider",
    "CredentialCache",
    "KinitExchanger",
    "LoginFlow",
    "LoginSession",
    "PromptSecretProvider",
    "SSORedirectResolver",
    "SecretProvider",
    "SessionState",
    "TicketExchanger",
    "create_default_cache",
    "extract_access_token",
]
