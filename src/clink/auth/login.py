"""Interactive login flow -- secret provider <-> ticket exchanger handshake.

The flow is a small message-passing protocol rather than a nest of
callbacks:

1. :class:`LoginFlow` resolves the username and opens a
   :class:`LoginSession`.
2. The :class:`~clink.auth.base.SecretProvider` runs on the caller's
   thread (or a worker thread when a timeout is given) and calls
   :meth:`LoginSession.try_secret` zero or more times. Each call runs the
   :class:`~clink.auth.base.TicketExchanger` and returns an
   :class:`~clink.auth.base.AttemptOutcome`.
3. The first successful attempt moves the session to
   :attr:`SessionState.SUCCEEDED` and posts a completion message. When the
   provider returns, a *closed* message follows.
4. :meth:`LoginFlow.login` waits for the first message: completion means
   success, *closed* means the provider gave up, and a timeout cancels the
   session.

Session states::

    WAITING --try_secret ok--> SUCCEEDED
    WAITING --provider done--> ABORTED
    WAITING --timeout--------> CANCELLED
"""

from __future__ import annotations

import enum
import queue
import threading
from typing import Optional

from clink.auth.base import AttemptOutcome, SecretProvider, TicketExchanger
from clink.config import resolve_username
from clink.exceptions import LoginAbortedError
from clink.output import get_output


class SessionState(str, enum.Enum):
    """Lifecycle states of a :class:`LoginSession`."""

    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


class _Message(str, enum.Enum):
    COMPLETED = "completed"
    CLOSED = "closed"


class LoginSession:
    """One login sequence: the channel between a provider and the flow.

    A session is created by :class:`LoginFlow` and handed to the secret
    provider; providers never construct one themselves.

    Args:
        username: The identity secrets are tried for.
        exchanger: Capability used to check each secret.
    """

    def __init__(self, username: str, exchanger: TicketExchanger) -> None:
        self.username = username
        self._exchanger = exchanger
        self._state = SessionState.WAITING
        self._lock = threading.Lock()
        self._messages: queue.Queue[tuple[_Message, Optional[Exception]]] = queue.Queue()
        self.attempts = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.WAITING

    def try_secret(self, secret: str) -> AttemptOutcome:
        """Check *secret* with the exchanger.

        On the first success the session completes and the waiting
        :class:`LoginFlow` is released. A failed attempt leaves the session
        open so the provider may try again.

        Raises:
            LoginAbortedError: If the session is no longer open.
            TicketExchangeError: If the exchanger could not run.
        """
        if not self.is_open:
            raise LoginAbortedError(f"Login session is {self._state.value}")

        outcome = self._exchanger.exchange(self.username, secret)
        with self._lock:
            self.attempts += 1
            if outcome.succeeded and self._state is SessionState.WAITING:
                self._state = SessionState.SUCCEEDED
                self._messages.put((_Message.COMPLETED, None))
        get_output().debug(
            f"Login attempt {self.attempts} for {self.username}: "
            f"{'accepted' if outcome.succeeded else 'rejected'}"
        )
        return outcome

    def close(self, error: Optional[Exception] = None) -> None:
        """Mark the provider as finished, aborting the session if still open."""
        with self._lock:
            if self._state is SessionState.WAITING:
                self._state = SessionState.ABORTED
            self._messages.put((_Message.CLOSED, error))

    def cancel(self) -> None:
        """Cancel an open session; later :meth:`try_secret` calls are refused."""
        with self._lock:
            if self._state is SessionState.WAITING:
                self._state = SessionState.CANCELLED

    def wait(self, timeout: Optional[float] = None) -> tuple[_Message, Optional[Exception]]:
        """Block until the first message arrives.

        Raises:
            queue.Empty: If *timeout* elapses first.
        """
        return self._messages.get(timeout=timeout)


class LoginFlow:
    """Run a secret provider until a ticket is obtained or it gives up.

    Only one login sequence runs at a time per flow; concurrent callers of
    :meth:`login` queue on an internal lock.

    Args:
        provider: Strategy that obtains secrets and decides when to stop.
        exchanger: Capability that checks each secret.
        username: Explicit username override. When ``None`` the name is
            resolved by :func:`~clink.config.resolve_username`.
    """

    def __init__(
        self,
        provider: SecretProvider,
        exchanger: TicketExchanger,
        username: Optional[str] = None,
    ) -> None:
        self._provider = provider
        self._exchanger = exchanger
        self._username = username
        # Held while provider.provide() runs, including by a worker that
        # outlives a timed-out login() call.
        self._provider_lock = threading.Lock()

    def login(self, timeout: Optional[float] = None) -> None:
        """Obtain a ticket through the secret provider.

        A new sequence does not start until the provider of the previous
        one has returned, even when that sequence already timed out.

        Args:
            timeout: Seconds to wait for the provider before cancelling the
                session. ``None`` waits indefinitely.

        Raises:
            IdentityError: If no username can be resolved. Raised before the
                provider is invoked.
            LoginAbortedError: If the provider returned without a successful
                attempt, or the timeout elapsed.
            Exception: Whatever the provider itself raised, re-raised here.
        """
        username = resolve_username(self._username)

        self._provider_lock.acquire()
        session = LoginSession(username, self._exchanger)
        get_output().debug(f"Starting login for {username}")
        if timeout is None:
            # Prompting stays on the caller's thread so Ctrl-C reaches
            # getpass and the terminal echo is restored.
            self._run_provider(username, session)
        else:
            worker = threading.Thread(
                target=self._run_provider,
                args=(username, session),
                name="clink-secret-provider",
                daemon=True,
            )
            try:
                worker.start()
            except BaseException:
                self._provider_lock.release()
                raise

        try:
            message, error = session.wait(timeout)
        except queue.Empty:
            session.cancel()
            raise LoginAbortedError(f"Login timed out after {timeout} seconds") from None
        if message is _Message.COMPLETED:
            return
        if error is not None:
            raise error
        raise LoginAbortedError()

    def _run_provider(self, username: str, session: LoginSession) -> None:
        error: Optional[Exception] = None
        try:
            self._provider.provide(username, session)
        except Exception as exc:
            error = exc
        finally:
            session.close(error)
            self._provider_lock.release()
