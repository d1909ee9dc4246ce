"""Terminal output for specpatch: generated data on stdout, chatter on stderr.

What goes where:

* **stdout** carries only what a user may want to redirect into a file or
  another tool: generated YAML, preview tables, diagnostics tables, and
  ``config show`` data.
* **stderr** carries status lines, engine warnings, errors, next-step hints
  and ``--verbose`` traces.

Three renderings exist. ``RICH`` (tables and syntax highlighting) is picked
automatically for an interactive terminal; ``PLAIN`` (tab-separated,
uncoloured) when output is piped or colour is off; ``JSON`` on request.
``NO_COLOR`` and ``TERM=dumb`` switch colour off, like ``--no-color``.

Library modules never receive an :class:`OutputManager`. They call the
module-level helpers (:func:`warning`, :func:`debug`, ...) which act on the
instance installed by :func:`set_output` in the CLI callback, or on a
default one created on first use.
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
    """How data written to stdout is rendered. ``AUTO`` is resolved at construction."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Channel(NamedTuple):
    plain_prefix: str
    markup: str
    quietable: bool
    verbose_only: bool = False


# Each stderr message kind: uncoloured prefix, Rich template, and whether
# --quiet hides it or only --verbose shows it.
_CHANNELS: dict[str, _Channel] = {
    "info": _Channel("", "{}", quietable=True),
    "success": _Channel("", "[green]{}[/green]", quietable=True),
    "warning": _Channel("Warning: ", "[yellow]Warning:[/yellow] {}", quietable=False),
    "error": _Channel("Error: ", "[bold red]Error:[/bold red] {}", quietable=False),
    "suggest": _Channel("→ ", "[dim]→ {}[/dim]", quietable=True),
    "debug": _Channel("[debug] ", "[dim]\\[debug] {}[/dim]", quietable=False, verbose_only=True),
}


class OutputManager:
    """Routes every piece of CLI output to the right stream and rendering.

    Args:
        format: Rendering for stdout data; ``AUTO`` becomes ``RICH`` on a
            colour-capable TTY and ``PLAIN`` otherwise.
        no_color: Print stderr messages without markup and stdout data
            without colour.
        quiet: Hide info, success and suggestion lines.
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

        resolved = OutputFormat(format)
        if resolved is OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            resolved = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = resolved

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=resolved is OutputFormat.RICH,
        )
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

    @property
    def console(self) -> Console:
        """The Rich console bound to stdout."""
        return self._stdout

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* and a newline to stdout, unformatted."""
        sys.stdout.write(f"{text}\n")
        sys.stdout.flush()

    def format_response(self, data: Any) -> None:
        """Write a JSON-compatible value (a config dump, a preview bundle)."""
        if self._format is OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format is OutputFormat.RICH:
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            for line in _plain_lines(data):
                self.print_data(line)

    def print_yaml(self, text: str) -> None:
        """Write generated YAML; highlighted in Rich mode, byte-for-byte otherwise."""
        if self._format is OutputFormat.RICH:
            self._stdout.print(Syntax(text, "yaml", theme="monokai", word_wrap=False))
            return
        sys.stdout.write(text if text.endswith("\n") else f"{text}\n")
        sys.stdout.flush()

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows under *headers*.

        JSON mode emits a list of objects keyed by header, plain mode one
        tab-separated line per row (header first, *title* dropped), and Rich
        mode a table whose cells are escaped so that pointers such as
        ``/paths/[id]`` are not read as markup.
        """
        if self._format is OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format is OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*map(escape, row))
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._emit("warning", message)

    def error(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._emit("error", message)

    def suggest(self, message: str) -> None:
        """A next step for the user, e.g. a command to run."""
        self._emit("suggest", message)

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        self._emit("debug", message)

    def _emit(self, kind: str, message: str) -> None:
        channel = _CHANNELS[kind]
        if channel.verbose_only and not self._verbose:
            return
        if channel.quietable and self._quiet:
            return
        if self._no_color:
            print(f"{channel.plain_prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(channel.markup.format(escape(message)))


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
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything, or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed manager; a default one is created on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests swap stdout/stderr between runs)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_yaml(text: str) -> None:
    get_output().print_yaml(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
