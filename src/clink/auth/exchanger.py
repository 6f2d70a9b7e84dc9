"""Ticket exchanger backed by the system ``kinit`` tool.

:class:`KinitExchanger` runs ``kinit <user>@<REALM>``, writes the secret to
the process's stdin, closes it, and waits for the exit status. The process's
stderr is returned verbatim as the diagnostic text of the attempt so that a
secret provider can show the user why the secret was rejected.

Retrying is not this module's job: a rejected secret is an ordinary
:class:`~clink.auth.base.AttemptOutcome`, while failure to run the tool
at all raises :class:`~clink.exceptions.TicketExchangeError`.
"""

from __future__ import annotations

import subprocess

from clink.auth.base import AttemptOutcome, TicketExchanger
from clink.exceptions import TicketExchangeError
from clink.output import get_output


class KinitExchanger(TicketExchanger):
    """Obtain a Kerberos ticket by piping the secret into ``kinit``.

    Args:
        realm: Kerberos realm appended to the username.
        command: Name or path of the ticket-granting executable.
    """

    def __init__(self, realm: str = "CSH.RIT.EDU", command: str = "kinit") -> None:
        self.realm = realm
        self.command = command

    def principal(self, username: str) -> str:
        return f"{username}@{self.realm}"

    def exchange(self, username: str, secret: str) -> AttemptOutcome:
        principal = self.principal(username)
        get_output().debug(f"Running {self.command} for {principal}")
        try:
            # communicate() writes the secret, closes stdin, then drains
            # stderr while waiting, so a chatty tool cannot block on a full pipe.
            process = subprocess.Popen(
                [self.command, principal],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
            _, stderr = process.communicate(input=secret.encode("utf-8"))
        except OSError as exc:
            raise TicketExchangeError(
                f"Could not run '{self.command}' for {principal}: {exc}"
            ) from exc

        message = stderr.decode("utf-8", errors="replace") if stderr else ""
        succeeded = process.returncode == 0
        get_output().debug(
            f"{self.command} exited with status {process.returncode}"
        )
        return AttemptOutcome(succeeded=succeeded, message=message)
