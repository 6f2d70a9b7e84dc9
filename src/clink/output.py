"""Terminal output for clink: data on stdout, everything else on stderr.

Machine listings, balances and config dumps are *data* and are the only
thing written to stdout, so ``clink --json credits | jq`` always sees
valid JSON. Status lines, login failures, errors and ``--verbose`` traces
are *diagnostics* and go to stderr.

Rendering depends on the resolved :class:`OutputFormat`:

===========  =====================================  ==========================
Format       Data                                   Diagnostics
===========  =====================================  ==========================
``json``     indented JSON                          plain text, ``Error:`` etc.
``plain``    tab-separated lines                    plain text
``rich``     Rich tables / highlighted JSON         coloured Rich markup
===========  =====================================  ==========================

``auto`` picks ``rich`` for an interactive, colour-capable stdout and
``plain`` otherwise. Colour is off with ``--no-color``, ``NO_COLOR`` or
``TERM=dumb``.

Library modules report through :func:`get_output` (mostly at debug level)
and never print directly. Secrets and bearer tokens are never passed here.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output formats selectable with ``--json`` / ``--plain``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Level(NamedTuple):
    plain: str
    rich: str
    quiet_hides: bool = True
    verbose_only: bool = False


_LEVELS: dict[str, _Level] = {
    "info": _Level("{}", "{}"),
    "success": _Level("{}", "[green]{}[/green]"),
    "suggest": _Level("→ {}", "[dim]→ {}[/dim]"),
    "warning": _Level("Warning: {}", "[yellow]Warning:[/yellow] {}", quiet_hides=False),
    "error": _Level("Error: {}", "[bold red]Error:[/bold red] {}", quiet_hides=False),
    "debug": _Level("[debug] {}", "[dim]\\[debug] {}[/dim]", quiet_hides=False, verbose_only=True),
}


class OutputManager:
    """Routes data and diagnostics to the right stream in the right format.

    Args:
        format: Requested format; ``AUTO`` is resolved once, here.
        no_color: Force colour off regardless of the environment.
        quiet: Hide info, success and suggestions. Warnings, errors and
            data are always shown.
        verbose: Show debug traces.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)

        rich_data = self._format == OutputFormat.RICH
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_data)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # -- data ---------------------------------------------------------- #

    def format_response(self, data: Any) -> None:
        """Write a JSON-compatible value (dict, list or scalar) to stdout."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(escape(str(data)))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout.

        JSON mode emits one object per row keyed by header, plain mode emits
        a tab-separated header line and one line per row, and rich mode a
        :class:`~rich.table.Table` with *title*.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stdout.print(table)

    # -- diagnostics --------------------------------------------------- #

    def notify(self, level: str, message: str) -> None:
        """Write *message* to stderr at *level* (a key of ``_LEVELS``)."""
        style = _LEVELS[level]
        if style.verbose_only and not self._verbose:
            return
        if style.quiet_hides and self._quiet:
            return
        if self._no_color:
            print(style.plain.format(message), file=sys.stderr, flush=True)
        else:
            # Server-supplied text must not be read as Rich markup.
            self._stderr.print(style.rich.format(escape(message)))

    def info(self, message: str) -> None:
        self.notify("info", message)

    def success(self, message: str) -> None:
        self.notify("success", message)

    def suggest(self, message: str) -> None:
        self.notify("suggest", message)

    def warning(self, message: str) -> None:
        self.notify("warning", message)

    def error(self, message: str) -> None:
        self.notify("error", message)

    def debug(self, message: str) -> None:
        self.notify("debug", message)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# -- process-wide instance -------------------------------------------- #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the process-wide manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the process-wide manager (tests call this between cases)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def error(message: str) -> None:
    get_output().error(message)
