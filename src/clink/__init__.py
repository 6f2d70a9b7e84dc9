"""clink -- command line and library client for the CSH drink service.

The library resolves a bearer token through the identity provider's SSO
redirect, logging in with ``kinit`` when no Kerberos ticket is available,
keeps that token in memory for the rest of the process, and exposes the
drink service's endpoints as typed operations.

Typical use::

    from clink.client import DrinkAPI
    from clink.config import resolve_config

    api = DrinkAPI(resolve_config())
    print(api.get_credits())

Modules:
    app: Typer application and CLI entry point.
    auth: SSO redirect, Kerberos login flow, and credential cache.
    client: Authenticated request pipeline and typed operations.
    models: Pydantic models for configuration and wire payloads.
    config: XDG-aware configuration and identity resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
