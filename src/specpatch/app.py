"""The ``specpatch`` command line.

Sub-commands:

* ``fix`` -- edit a document and write it out as YAML.
* ``preview`` -- show the edited document and its diagnostics.
* ``validate`` -- remote schema validation only.
* ``config`` -- show, set or reset the stored configuration.

Options given before the sub-command (output format, verbosity, validator
endpoint) are handled by :func:`main_callback`. :func:`main` is the console
script: a :class:`~specpatch.exceptions.SpecpatchError` that reaches it
becomes one error line and its exit code, anything else a crash log.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from specpatch import __version__
from specpatch.commands.config import config_app
from specpatch.commands.fix import fix_command
from specpatch.commands.preview import preview_command
from specpatch.commands.validate import validate_command
from specpatch.exceptions import SpecpatchError
from specpatch.exit_codes import EXIT_GENERIC_FAILURE
from specpatch.output import OutputFormat, OutputManager, error, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="specpatch",
    help="Patch, preview, and validate OpenAPI/Swagger documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("fix")(fix_command)
app.command("preview")(preview_command)
app.command("validate")(validate_command)
app.add_typer(config_app, name="config", help="Show or change stored configuration.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"specpatch {__version__}")
        raise typer.Exit()


def _output_format(json_output: bool, plain_output: bool) -> OutputFormat:
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="Render data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Render data as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace each pipeline step."),
    validator_url: Optional[str] = typer.Option(
        None, "--validator-url", help="Schema validation endpoint (POST)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the validator."
    ),
    no_validate: bool = typer.Option(
        False, "--no-validate", help="Do not contact the validator."
    ),
) -> None:
    """Patch, preview, and validate OpenAPI/Swagger documents."""
    set_output(
        OutputManager(
            format=_output_format(json_output, plain_output),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    # Read back by commands.common.settings_from_context.
    ctx.obj = {
        "validator_url": validator_url,
        "timeout": timeout,
        "no_validate": no_validate,
    }


def _install_interrupt_handler() -> None:
    def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log(exc: BaseException) -> Path:
    """Save the traceback of *exc* under ``<data dir>/logs`` and return its path."""
    from specpatch.config import atomic_write, get_data_dir

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    path = get_data_dir() / "logs" / f"crash-{stamp}.log"
    atomic_write(path, "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return path


def main() -> None:
    """Console-script entry point; always ends in :class:`SystemExit`."""
    _install_interrupt_handler()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except SpecpatchError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
