"""SPNEGO (``Negotiate``) authentication for :mod:`httpx`.

The identity provider accepts the user's ambient Kerberos ticket through
the ``Negotiate`` HTTP scheme. :class:`NegotiateAuth` answers a
``WWW-Authenticate: Negotiate`` challenge with a token produced by
:mod:`spnego`; no secret is ever passed at this step.

When no usable ticket exists the SPNEGO context cannot be built. That is
the normal "not logged in yet" case, so the challenge response is handed
back unchanged and the caller decides what to do with it.
"""

from __future__ import annotations

import base64
import logging
from typing import Generator

import httpx
import spnego
from spnego.exceptions import SpnegoError

logger = logging.getLogger(__name__)


class NegotiateAuth(httpx.Auth):
    """Answer one ``Negotiate`` challenge using the ambient credential cache.

    Args:
        service: Service class of the target principal (``HTTP/<host>``).
    """

    def __init__(self, service: str = "HTTP") -> None:
        self.service = service

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        response = yield request
        if response.status_code != 401 or not _offers_negotiate(response):
            return

        host = request.url.host
        try:
            context = spnego.client(hostname=host, service=self.service, protocol="negotiate")
            token = context.step()
        except SpnegoError as exc:
            logger.debug("No Kerberos credential usable for %s: %s", host, exc)
            return

        if not token:
            return
        request.headers["Authorization"] = f"Negotiate {base64.b64encode(token).decode('ascii')}"
        yield request


def _offers_negotiate(response: httpx.Response) -> bool:
    challenges = response.headers.get_list("www-authenticate", split_commas=True)
    return any(c.strip().lower().startswith("negotiate") for c in challenges)
