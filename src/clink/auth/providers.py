"""Built-in secret providers.

- :class:`PromptSecretProvider` asks for the password on the terminal with
  :func:`getpass.getpass`, reports rejected attempts, and asks again.
- :class:`CallbackSecretProvider` adapts a plain function, which is the
  easiest way for an embedding application to plug in its own prompt.
"""

from __future__ import annotations

import getpass
import sys
from typing import Callable, Optional

from clink.auth.base import SecretProvider
from clink.auth.login import LoginSession
from clink.exceptions import AuthError
from clink.output import get_output


class PromptSecretProvider(SecretProvider):
    """Prompt for the password until ``kinit`` accepts it.

    The loop stops, aborting the login, when the user enters an empty
    password, closes stdin, or *max_attempts* rejected attempts have been
    made.

    Args:
        max_attempts: Upper bound on attempts, or ``None`` for no limit.
    """

    def __init__(self, max_attempts: Optional[int] = None) -> None:
        self.max_attempts = max_attempts

    def provide(self, username: str, session: LoginSession) -> None:
        if not sys.stdin.isatty():
            raise AuthError(
                "Password prompt requires an interactive terminal "
                "(stdin must be a TTY); run `kinit` first"
            )

        output = get_output()
        attempts = 0
        while self.max_attempts is None or attempts < self.max_attempts:
            try:
                secret = getpass.getpass(f"Password for {username}: ")
            except EOFError:
                return
            if not secret:
                return

            attempts += 1
            outcome = session.try_secret(secret)
            if outcome.succeeded:
                return
            output.error(f"Login failed: {outcome.message.strip()}")


class CallbackSecretProvider(SecretProvider):
    """Delegate to ``func(username, session)``.

    Example::

        def ask(username, session):
            session.try_secret(my_dialog(username))

        provider = CallbackSecretProvider(ask)
    """

    def __init__(self, func: Callable[[str, LoginSession], None]) -> None:
        self._func = func

    def provide(self, username: str, session: LoginSession) -> None:
        self._func(username, session)
