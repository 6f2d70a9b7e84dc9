"""Typed operations of the drink service.

:class:`DrinkAPI` wraps an :class:`~clink.client.sync_client.AuthenticatedClient`
with one method per service endpoint. Instances are cheap and thread-safe;
clones made with :meth:`DrinkAPI.with_transport` or by passing the same
cache share a single credential.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from clink.auth.base import SecretProvider, TicketExchanger
from clink.auth.cache import CredentialCache, create_default_cache
from clink.client.sync_client import AuthenticatedClient
from clink.exceptions import InvalidUsageError
from clink.models import (
    ClinkConfig,
    CreditResponse,
    DrinkList,
    DropRequest,
    DropResponse,
    UserInfo,
)


class DrinkAPI:
    """Client for listing machines, reading credits, and dropping items.

    Args:
        config: Effective configuration.
        credentials: Shared credential cache. When ``None`` one is built by
            :func:`~clink.auth.cache.create_default_cache` from *provider*
            and *exchanger*.
        provider: Secret provider for the default cache.
        exchanger: Ticket exchanger for the default cache.
        transport: Optional transport for the service requests.
    """

    def __init__(
        self,
        config: ClinkConfig,
        credentials: Optional[CredentialCache] = None,
        *,
        provider: Optional[SecretProvider] = None,
        exchanger: Optional[TicketExchanger] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if credentials is None:
            credentials = create_default_cache(config, provider=provider, exchanger=exchanger)
        self.config = config
        self._client = AuthenticatedClient(config, credentials, transport=transport)

    @property
    def credentials(self) -> CredentialCache:
        return self._client.credentials

    def with_transport(self, transport: httpx.BaseTransport) -> DrinkAPI:
        """Return a copy that sends requests through *transport* but shares the credential."""
        return DrinkAPI(self.config, self.credentials, transport=transport)

    def get_token(self) -> str:
        """Return the bearer credential, logging in if necessary."""
        return self.credentials.get_token()

    def get_status_for_machine(self, machine: Optional[str] = None) -> DrinkList:
        """List machines, their slots, and stocked items.

        Args:
            machine: Only return the machine with this name.
        """
        params = {"machine": machine} if machine is not None else None
        return self._client.get("/drinks", DrinkList, params=params)

    def get_user_info(self) -> UserInfo:
        """Fetch the identity provider's userinfo document for the current token."""
        return self._client.get(self.config.userinfo_url, UserInfo)

    def get_credits(self) -> int:
        """Return the current user's drink credit balance."""
        user = self.get_user_info()
        credits = self._client.get(
            "/users/credits",
            CreditResponse,
            params={"uid": user.preferred_username},
        )
        return credits.user.drinkBalance

    def drop(self, machine: str, slot: int) -> int:
        """Drop the item in *slot* of *machine*.

        Returns:
            The balance remaining after the drop.

        Raises:
            InvalidUsageError: If *slot* is outside 0-255. Checked before
                any request is sent.
        """
        try:
            body = DropRequest(machine=machine, slot=slot)
        except ValidationError as exc:
            raise InvalidUsageError(f"Invalid drop request: slot must be 0-255, got {slot}") from exc
        response = self._client.post("/drinks/drop", DropResponse, json_body=body)
        return response.drinkBalance
