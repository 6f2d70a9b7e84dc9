"""Config commands -- view and modify the clink configuration file.

Provides the ``clink config`` sub-command group for reading, updating,
and resetting :class:`~clink.models.ClinkConfig`. Settings are persisted
in the clink config directory and supply defaults for the service and
identity provider URLs, the Kerberos realm, and output format.
"""

from __future__ import annotations

import typer

from clink.exceptions import ConfigError
from clink.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the configuration file's contents.

    Example::

        clink config show --json
    """
    from clink.config import config_path, load_config

    try:
        config = load_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config file: {config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'request.timeout')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type; list fields such as
    ``scopes`` take a space-separated string.

    Example::

        clink config set realm EXAMPLE.ORG
        clink config set request.timeout 10
        clink config set scopes "openid profile drink_balance"
    """
    from clink.config import load_config, save_config, set_config_value

    try:
        updated = set_config_value(load_config(), key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    save_config(updated)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the configuration file to defaults."""
    from clink.config import save_config
    from clink.models import ClinkConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_config(ClinkConfig())
    success("Configuration reset to defaults.")
