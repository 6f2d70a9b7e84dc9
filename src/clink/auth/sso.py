"""SSO redirect resolver -- turn an ambient Kerberos ticket into a bearer token.

The identity provider is asked for an implicit grant
(``response_type=token id_token``) while authenticating with ``Negotiate``.
When the ticket is accepted the provider answers with a redirect to the
registered ``drink://callback`` URI whose fragment carries
``access_token=<value>``. When it is not, there is no redirect and the
interactive :class:`~clink.auth.login.LoginFlow` is run before asking
again.

The number of authorization requests per :meth:`SSORedirectResolver.resolve`
call is bounded by ``max_attempts`` (initial request plus one retry after a
successful login by default).
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

import httpx

from clink.auth.login import LoginFlow
from clink.auth.negotiate import NegotiateAuth
from clink.exceptions import BadFormatError, TransportError, UnauthorizedError
from clink.models import ClinkConfig
from clink.output import get_output

ACCESS_TOKEN_KEY = "access_token"
DEFAULT_MAX_ATTEMPTS = 2


def extract_access_token(location: str) -> str:
    """Return ``"Bearer <token>"`` from a redirect *location*.

    The fragment delimiter is rewritten to a query delimiter so the
    fragment's key/value pairs can be parsed like a query string.

    Raises:
        BadFormatError: If *location* is not an absolute URL or carries no
            non-empty ``access_token``.
    """
    try:
        parts = urlsplit(location.replace("#", "?"))
    except ValueError as exc:
        raise BadFormatError(f"Unparseable redirect location: {exc}") from exc
    if not parts.scheme:
        raise BadFormatError("Redirect location is not an absolute URL")

    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key == ACCESS_TOKEN_KEY:
            if not value:
                break
            return f"Bearer {value}"
    raise BadFormatError("Redirect location carries no access token")


class SSORedirectResolver:
    """Resolve a bearer credential through the identity provider's redirect.

    Args:
        config: Effective configuration (endpoints, client id, scopes).
        login_flow: Flow run when the provider does not redirect. ``None``
            makes a missing redirect fail with
            :class:`~clink.exceptions.UnauthorizedError` instead.
        transport: Optional :class:`httpx.BaseTransport`; tests substitute an
            :class:`httpx.MockTransport` acting as the identity provider.
        auth: Authentication for the authorization request. Defaults to
            :class:`~clink.auth.negotiate.NegotiateAuth`.
        max_attempts: Upper bound on authorization requests per
            :meth:`resolve` call.
    """

    def __init__(
        self,
        config: ClinkConfig,
        login_flow: Optional[LoginFlow] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        auth: Optional[httpx.Auth] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._config = config
        self._login_flow = login_flow
        self._transport = transport
        self._auth = auth if auth is not None else NegotiateAuth()
        self.max_attempts = max_attempts

    @property
    def authorization_request_url(self) -> str:
        params = {
            "client_id": self._config.client_id,
            "redirect_uri": self._config.redirect_uri,
            "response_type": "token id_token",
            "scope": " ".join(self._config.scopes),
            "state": "",
            "nonce": "",
        }
        return f"{self._config.authorization_url}?{urlencode(params, quote_via=quote)}"

    def fetch_redirect(self) -> Optional[str]:
        """Issue one authorization request and return its ``Location`` header.

        Raises:
            TransportError: If the request could not be sent.
        """
        url = self.authorization_request_url
        get_output().debug(f"GET {self._config.authorization_url}")
        try:
            with httpx.Client(
                transport=self._transport,
                auth=self._auth,
                follow_redirects=False,
                timeout=self._config.request.timeout,
                verify=self._config.request.verify_ssl,
            ) as client:
                response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Authorization request failed: {exc}") from exc
        return response.headers.get("location")

    def resolve(self) -> str:
        """Return a bearer credential, logging in when the provider asks for it.

        Raises:
            BadFormatError: If the redirect cannot be parsed, carries no
                token, or is still missing after the last allowed attempt.
            UnauthorizedError: If there is no redirect and no login flow.
            LoginAbortedError: If the login flow gave up.
            TransportError: If an authorization request could not be sent.
        """
        output = get_output()
        for attempt in range(1, self.max_attempts + 1):
            location = self.fetch_redirect()
            if location is not None:
                return extract_access_token(location)
            if attempt == self.max_attempts:
                break
            if self._login_flow is None:
                raise UnauthorizedError()
            output.debug("Identity provider did not redirect; logging in")
            self._login_flow.login(timeout=self._config.login_timeout)

        raise BadFormatError(
            f"Identity provider did not redirect after {self.max_attempts} attempts"
        )
