"""Preview command -- show the modified document and its diagnostics."""

from __future__ import annotations

from typing import Optional

import typer

from specpatch.commands.common import config_changes, read_upload, run_session, settings_from_context
from specpatch.exit_codes import EXIT_SPEC_PARSE_ERROR
from specpatch.models import FileState
from specpatch.output import error
from specpatch.preview import render_preview


def preview_command(
    ctx: typer.Context,
    file: str = typer.Argument(help="OpenAPI/Swagger file (.json, .yaml, .yml) or '-' for stdin."),
    set_version: Optional[str] = typer.Option(
        None, "--set-version", help="Override info.version."
    ),
    time_fix: bool = typer.Option(
        False, "--time-fix", help="Retype Time.hour/Time.minute as int32 integers."
    ),
    yaml_hint: bool = typer.Option(False, "--yaml", help="Treat stdin as YAML."),
) -> None:
    """Preview an OpenAPI document after applying edits.

    Shows the API info, its operations and schemas, and the diagnostics
    returned by the remote validator.

    Example::

        specpatch preview api.yaml --time-fix
        specpatch --json preview api.yaml
    """
    settings = settings_from_context(ctx)
    file_name, raw_text = read_upload(file, yaml_hint)

    session = run_session(settings, file_name, raw_text, config_changes(set_version, time_fix))
    render_preview(session.preview_payload())

    if session.state.file_state is FileState.ERROR:
        error(session.state.error or "Failed to load the document.")
        raise typer.Exit(code=EXIT_SPEC_PARSE_ERROR)
