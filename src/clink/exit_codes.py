"""Process exit statuses of the ``clink`` command.

Every :class:`~clink.exceptions.ClinkError` subclass carries one of these,
so scripts can tell "log in again" apart from "the machine is broken"
without parsing stderr::

    $ clink drop bigdrink 3 || echo "status $?"
    status 3        # EXIT_AUTH_FAILURE: no ticket and the login was aborted
"""

EXIT_SUCCESS = 0
"""Done."""

EXIT_GENERIC_FAILURE = 1
"""Unclassified failure, including config file problems."""

EXIT_INVALID_USAGE = 2
"""Bad arguments, e.g. a slot outside 0-255."""

EXIT_AUTH_FAILURE = 3
"""No username, ``kinit`` unusable, login aborted, or ticket rejected."""

EXIT_SERVER_ERROR = 5
"""The drink service or identity provider answered with a non-200 status."""

EXIT_CONNECTION_ERROR = 6
"""The request never got an answer (DNS, refused connection, timeout)."""

EXIT_BAD_FORMAT = 7
"""An answer arrived but could not be understood."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C (128 + SIGINT)."""
