"""Capability interfaces of the login subsystem.

This module defines the foundational types that the login flow is built
from:

- :class:`AttemptOutcome` -- the result of trying one secret.
- :class:`TicketExchanger` -- turns a username and secret into an
  :class:`AttemptOutcome` (normally by running ``kinit``).
- :class:`SecretProvider` -- obtains secrets for a username and decides
  when to stop retrying.

Both abstract classes are injected into
:class:`~clink.auth.login.LoginFlow`, so tests and embedding applications
can swap them for doubles without touching the real ticket-granting tool
or a terminal.

See Also:
    :mod:`clink.auth.exchanger` and :mod:`clink.auth.providers` for the
    built-in implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clink.auth.login import LoginSession


@dataclass(frozen=True)
class AttemptOutcome:
    """Outcome of a single secret attempt.

    Args:
        succeeded: Whether the ticket-granting step accepted the secret.
        message: Diagnostic text produced by the exchanger (may be empty).

    Example::

        outcome = AttemptOutcome(succeeded=False, message="Password incorrect")
    """

    succeeded: bool
    message: str = ""


class TicketExchanger(ABC):
    """Converts a username and secret into a yes/no outcome.

    The exchanger does not produce the bearer credential itself; a
    successful exchange only means the ambient Kerberos ticket is now
    valid, so the SSO redirect can be retried.
    """

    @abstractmethod
    def exchange(self, username: str, secret: str) -> AttemptOutcome:
        """Try *secret* for *username*.

        Returns:
            The :class:`AttemptOutcome` of this attempt.

        Raises:
            TicketExchangeError: If the exchange could not be carried out
                at all (as opposed to the secret being rejected).
        """
        ...


class SecretProvider(ABC):
    """Strategy that supplies secrets and drives retry-on-failure.

    :meth:`provide` is called with the username and an open
    :class:`~clink.auth.login.LoginSession`. The provider calls
    :meth:`LoginSession.try_secret` zero or more times and returns when it
    is done. Returning before any attempt succeeded aborts the login.
    """

    @abstractmethod
    def provide(self, username: str, session: LoginSession) -> None:
        """Obtain secrets for *username* and try them through *session*."""
        ...
