"""Authenticated request pipeline.

:class:`AuthenticatedClient` is the single primitive every typed operation
is built on. For each call it:

1. opens a fresh :class:`httpx.Client` (no pooling across calls);
2. obtains the bearer credential from the shared
   :class:`~clink.auth.cache.CredentialCache`, which may run the whole
   SSO/login sequence the first time;
3. attaches ``Authorization``, ``Accept``, and (only with a body)
   ``Content-Type`` headers;
4. dispatches the request; and
5. decodes the response through :func:`~clink.client.response.decode_response`.

Nothing is retried: transport failures, server errors, and decode errors
all propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel

from clink.auth.cache import CredentialCache
from clink.client.response import ModelT, decode_response
from clink.exceptions import TransportError
from clink.models import ClinkConfig
from clink.output import get_output

JSON_CONTENT_TYPE = "application/json"


class AuthenticatedClient:
    """Send bearer-authenticated JSON requests and decode typed responses.

    Args:
        config: Effective configuration. ``api_base_url`` prefixes relative
            paths; ``request`` supplies timeout and TLS verification.
        credentials: Cache shared by every client of the process.
        transport: Optional :class:`httpx.BaseTransport` used instead of the
            network, e.g. :class:`httpx.MockTransport` in tests.

    Example::

        client = AuthenticatedClient(config, cache)
        listing = client.request("GET", "/drinks", DrinkList)
    """

    def __init__(
        self,
        config: ClinkConfig,
        credentials: CredentialCache,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._transport = transport

    @property
    def credentials(self) -> CredentialCache:
        return self._credentials

    def url_for(self, path: str) -> str:
        """Return *path* unchanged if absolute, else joined to ``api_base_url``."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._config.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        response_model: type[ModelT],
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[BaseModel] = None,
    ) -> ModelT:
        """Send an authenticated request and decode the response.

        Args:
            method: HTTP method.
            path: Path relative to ``api_base_url``, or an absolute URL
                (used for the identity provider's userinfo endpoint).
            response_model: Pydantic model the 200 body must match.
            params: Query parameters.
            json_body: Request body; ``None`` sends no body and no
                ``Content-Type``.

        Returns:
            The decoded *response_model* instance.

        Raises:
            TransportError: If the client cannot be built or the request
                cannot be sent.
            BadFormatError: If a 200 body does not match *response_model*.
            ServerError: For any non-200 status.
            AuthError: Propagated from the credential cache.
        """
        url = self.url_for(path)
        try:
            client = httpx.Client(
                transport=self._transport,
                timeout=self._config.request.timeout,
                verify=self._config.request.verify_ssl,
            )
        except (OSError, ValueError) as exc:
            raise TransportError(f"Could not create HTTP client: {exc}") from exc

        with client:
            token = self._credentials.get_token()
            headers = {"Authorization": token, "Accept": JSON_CONTENT_TYPE}
            content: Optional[bytes] = None
            if json_body is not None:
                headers["Content-Type"] = JSON_CONTENT_TYPE
                content = json_body.model_dump_json().encode("utf-8")

            try:
                response = client.request(
                    method, url, params=params, headers=headers, content=content
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise TransportError(f"{method.upper()} {url} failed: {exc}") from exc

        get_output().debug(f"{method.upper()} {response.request.url} -> {response.status_code}")
        return decode_response(response, response_model)

    def get(self, path: str, response_model: type[ModelT], **kwargs: Any) -> ModelT:
        return self.request("GET", path, response_model, **kwargs)

    def post(self, path: str, response_model: type[ModelT], **kwargs: Any) -> ModelT:
        return self.request("POST", path, response_model, **kwargs)
