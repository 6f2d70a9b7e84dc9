"""Exception hierarchy for clink.

All exceptions inherit from :class:`ClinkError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`clink.exit_codes`.
The top-level handler in :func:`clink.app.main` catches ``ClinkError``
and exits with the appropriate code, while unexpected exceptions produce a
crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ClinkError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- AuthError               (exit 3)
    |   +-- UnauthorizedError
    |   +-- LoginAbortedError
    |   +-- IdentityError
    |   +-- TicketExchangeError
    +-- ServerError             (exit 5)
    +-- TransportError          (exit 6)
    +-- BadFormatError          (exit 7)
    +-- ConfigError             (exit 1)

No component retries after raising one of these; every error travels
unchanged up to the caller of the typed API operation.
"""

from __future__ import annotations

from typing import Optional

from clink.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_BAD_FORMAT,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SERVER_ERROR,
)


class ClinkError(Exception):
    """Root of every error clink raises on purpose.

    Args:
        message: Text shown to the user after ``Error:``.
        exit_code: Per-instance status; defaults to the class's
            ``exit_code``.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ClinkError):
    """Raised for invalid CLI arguments or out-of-range operation inputs."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(ClinkError):
    """Raised when authentication fails at any stage of the login sequence."""

    exit_code = EXIT_AUTH_FAILURE


class UnauthorizedError(AuthError):
    """Raised for a 401-class condition.

    The usual cause is an expired Kerberos ticket, so the default message
    tells the user how to get a fresh one.
    """

    def __init__(
        self,
        message: str = "Unauthorized (Did your Kerberos ticket expire?: `kinit`)",
        exit_code: Optional[int] = None,
    ):
        super().__init__(message, exit_code)


class LoginAbortedError(AuthError):
    """Raised when the secret provider gave up without a successful attempt."""

    def __init__(self, message: str = "LoginAborted", exit_code: Optional[int] = None):
        super().__init__(message, exit_code)


class IdentityError(AuthError):
    """Raised when no username can be determined for the login attempt."""


class TicketExchangeError(AuthError):
    """Raised when the ticket-granting tool cannot be spawned, fed, or waited on."""


class ServerError(ClinkError):
    """Raised for any non-200 response from the service or identity provider.

    Args:
        uri: The URL of the request that failed, when known.
        message: Best-effort error text extracted from the response body.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, uri: Optional[str], message: str, exit_code: Optional[int] = None):
        self.uri = uri
        self.message = message
        super().__init__(f"ServerError for {uri or '<unknown>'}: {message}", exit_code)


class TransportError(ClinkError):
    """Raised on network-level failures or when a request cannot be constructed."""

    exit_code = EXIT_CONNECTION_ERROR


class BadFormatError(ClinkError):
    """Raised when a response body or redirect location cannot be understood."""

    exit_code = EXIT_BAD_FORMAT

    def __init__(
        self,
        message: str = "BadFormat (The server sent data we didn't understand)",
        exit_code: Optional[int] = None,
    ):
        super().__init__(message, exit_code)


class ConfigError(ClinkError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
