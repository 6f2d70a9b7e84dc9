"""Canonical Pydantic models shared across all clink modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig`, and :class:`ClinkConfig`.

**Wire models** -- decoded from (or encoded to) the drink service and the
identity provider:
    :class:`Item`, :class:`Slot`, :class:`Machine`, :class:`DrinkList`,
    :class:`UserInfo`, :class:`CreditUser`, :class:`CreditResponse`,
    :class:`DropRequest`, :class:`DropResponse`, :class:`ErrorBody`, and
    :class:`MessageBody`.

Wire models ignore unknown keys so that the service can grow new fields
without breaking older clients. Integers on the wire are strict: numeric text
or a float such as ``50.0`` is rejected rather than coerced.
"""

from __future__ import annotations

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


# --- Configuration ---


DEFAULT_API_BASE_URL = "https://drink.csh.rit.edu"
DEFAULT_SSO_BASE_URL = "https://sso.csh.rit.edu/auth/realms/csh/protocol/openid-connect"


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`ClinkConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class ClinkConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/clink/config.json``.

    Loaded and saved by :func:`~clink.config.load_config` and
    :func:`~clink.config.save_config`. Fields here have the lowest
    precedence and can be overridden by environment variables or CLI flags.
    See :func:`~clink.config.resolve_config` for the full precedence chain.
    """

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL, description="Base URL of the drink service"
    )
    sso_base_url: str = Field(
        default=DEFAULT_SSO_BASE_URL,
        description="OpenID Connect base URL of the identity provider",
    )
    client_id: str = Field(default="clidrink", description="OAuth client id")
    redirect_uri: str = Field(
        default="drink://callback", description="Registered redirect URI"
    )
    scopes: list[str] = Field(
        default_factory=lambda: ["openid", "profile", "drink_balance"]
    )
    realm: str = Field(default="CSH.RIT.EDU", description="Kerberos realm")
    kinit_command: str = Field(
        default="kinit", description="Ticket-granting executable"
    )
    username: Optional[str] = Field(
        default=None, description="Explicit username override"
    )
    login_timeout: Optional[float] = Field(
        default=None, gt=0, description="Seconds to wait for a password before giving up"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def authorization_url(self) -> str:
        return f"{self.sso_base_url}/auth"

    @property
    def userinfo_url(self) -> str:
        return f"{self.sso_base_url}/userinfo"


# --- Wire models ---


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Item(_WireModel):
    """An item stocked in a slot."""

    id: StrictInt
    name: str
    price: StrictInt


class Slot(_WireModel):
    """A single slot of a machine.

    ``count`` is only reported by machines that track stock levels.
    """

    active: bool
    count: Optional[StrictInt] = None
    empty: bool
    item: Item
    machine: StrictInt
    number: StrictInt = Field(ge=0, le=255)


class Machine(_WireModel):
    """A vending machine and its slots."""

    display_name: str
    id: StrictInt
    is_online: bool
    name: str
    slots: list[Slot]


class DrinkList(_WireModel):
    """Response of ``GET /drinks``."""

    machines: list[Machine]
    message: str


class UserInfo(_WireModel):
    """Subset of the identity provider's userinfo document."""

    preferred_username: str


_NUMERIC_TEXT = re.compile(r"[+-]?[0-9]+")


class CreditUser(_WireModel):
    """User record nested in the credits response.

    The service encodes the balance as numeric text, so a native JSON
    number is rejected along with anything that is not an integer literal.
    """

    drinkBalance: int

    @field_validator("drinkBalance", mode="before")
    @classmethod
    def _parse_numeric_text(cls, value: Any) -> int:
        if not isinstance(value, str) or not _NUMERIC_TEXT.fullmatch(value):
            raise ValueError(f"drinkBalance must be numeric text, got {value!r}")
        return int(value)


class CreditResponse(_WireModel):
    """Response of ``GET /users/credits``."""

    user: CreditUser


class DropRequest(BaseModel):
    """Body of ``POST /drinks/drop``."""

    machine: str
    slot: int = Field(ge=0, le=255)


class DropResponse(_WireModel):
    """Response of ``POST /drinks/drop``."""

    drinkBalance: StrictInt


class ErrorBody(_WireModel):
    """Error payload of the form ``{"error": "..."}``."""

    error: StrictStr


class MessageBody(_WireModel):
    """Error payload of the form ``{"message": "..."}``."""

    message: StrictStr
