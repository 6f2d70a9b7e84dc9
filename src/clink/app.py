"""The ``clink`` command.

Global flags are handled once in :func:`main_callback`, which installs the
:class:`~clink.output.OutputManager` and records the options that shape the
:class:`~clink.client.DrinkAPI` built by each command. The drink commands
(``list``, ``credits``, ``drop``, ``login``) live here; ``config`` is a
sub-app from :mod:`clink.commands.config`.

:func:`main` is the console-script entry point. It maps
:class:`~clink.exceptions.ClinkError` to exit codes and turns any other
exception into a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, Optional

import typer

from clink import __version__
from clink.exceptions import ClinkError
from clink.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from clink.output import error, format_response, get_output, print_table, success, suggest

if TYPE_CHECKING:
    from clink.client import DrinkAPI
    from clink.output import OutputFormat


app = typer.Typer(
    name="clink",
    help="Drop drinks and check credits from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from clink.commands.config import config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"clink {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    username: Optional[str] = typer.Option(
        None, "--username", "-u", help="Username to log in as."
    ),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", help="Base URL of the drink service."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_input: bool = typer.Option(
        False, "--no-input", help="Never prompt for a password."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~clink.output.OutputManager` from CLI
    flags and stores the options that shape the API client in ``ctx.obj``.
    """
    from clink.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["username"] = username
    ctx.obj["api_url"] = api_url
    ctx.obj["no_input"] = no_input


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _configured_format() -> OutputFormat:
    """Return the ``output.format`` setting from the config file.

    An unreadable config file yields ``AUTO`` here; the command that loads
    the config reports the error with the output manager in place.
    """
    from clink.config import resolve_config
    from clink.exceptions import ConfigError
    from clink.output import OutputFormat

    try:
        return OutputFormat(resolve_config().output.format)
    except ConfigError:
        return OutputFormat.AUTO


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Print a :class:`ClinkError` and exit with its code."""
    try:
        yield
    except ClinkError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _build_api(ctx: typer.Context) -> DrinkAPI:
    from clink.auth.cache import create_default_cache
    from clink.client import DrinkAPI
    from clink.config import resolve_config

    obj = ctx.obj or {}
    config = resolve_config(cli_username=obj.get("username"), cli_api_url=obj.get("api_url"))
    cache = create_default_cache(config, interactive=not obj.get("no_input", False))
    return DrinkAPI(config, cache)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("list")
def list_command(
    ctx: typer.Context,
    machine: Optional[str] = typer.Argument(None, help="Only show this machine."),
) -> None:
    """List machines and the items in each slot.

    Example::

        clink list
        clink list bigdrink --json
    """
    from clink.output import OutputFormat

    with _reported_errors():
        listing = _build_api(ctx).get_status_for_machine(machine)

    if get_output().format == OutputFormat.JSON:
        format_response(listing.model_dump(mode="json"))
        return

    rows: list[list[str]] = []
    for m in listing.machines:
        for slot in m.slots:
            if not slot.active:
                status = "disabled"
            elif slot.empty:
                status = "empty"
            else:
                status = "ok"
            rows.append([
                m.display_name if m.is_online else f"{m.display_name} (offline)",
                str(slot.number),
                slot.item.name,
                str(slot.item.price),
                "" if slot.count is None else str(slot.count),
                status,
            ])
    print_table(["Machine", "Slot", "Item", "Price", "Count", "Status"], rows, title="Machines")


@app.command("credits")
def credits_command(ctx: typer.Context) -> None:
    """Show your drink credit balance."""
    with _reported_errors():
        balance = _build_api(ctx).get_credits()
    format_response({"credits": balance})


@app.command("drop")
def drop_command(
    ctx: typer.Context,
    machine: str = typer.Argument(help="Machine name, e.g. 'bigdrink'."),
    slot: int = typer.Argument(help="Slot number."),
) -> None:
    """Drop the item in SLOT of MACHINE.

    Example::

        clink drop bigdrink 3
    """
    with _reported_errors():
        balance = _build_api(ctx).drop(machine, slot)
    success(f"Dropped slot {slot} on {machine}.")
    format_response({"credits": balance})


@app.command("login")
def login_command(ctx: typer.Context) -> None:
    """Log in now instead of on the first request."""
    with _reported_errors():
        _build_api(ctx).get_token()
    success("Logged in.")
    suggest("Try: clink list")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _exit_on_interrupt(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    raise SystemExit(EXIT_INTERRUPTED)


def _install_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _exit_on_interrupt)


def _write_crash_log(exc: BaseException) -> Path:
    """Save the traceback of *exc* under ``<data dir>/logs`` and return the file."""
    from clink.config import get_data_dir

    log_dir = get_data_dir() / "logs"
    log_dir.mkdir(exist_ok=True)
    log_path = log_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return log_path


def main() -> None:
    """Console-script entry point.

    A :class:`~clink.exceptions.ClinkError` that escapes a command exits
    with its ``exit_code``; anything else leaves a crash log behind and
    exits with :data:`~clink.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _install_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except ClinkError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
