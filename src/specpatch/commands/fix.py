"""Fix command -- apply edits to a document and write it out as YAML.

Implements ``specpatch fix``: the whole pipeline in one go. The upload is
parsed, validated remotely (unless disabled), edited according to the
flags, serialised, and written to ``<product>-api.<version>.yaml`` in the
output directory -- or printed to stdout with ``--stdout``.
"""

from __future__ import annotations

from typing import Optional

import typer

from specpatch.commands.common import config_changes, read_upload, run_session, settings_from_context
from specpatch.engine import describe_modifications
from specpatch.exit_codes import EXIT_MODIFICATION_ERROR, EXIT_SPEC_PARSE_ERROR
from specpatch.models import FileState
from specpatch.output import error, info, print_yaml, success, suggest
from specpatch.preview import render_diagnostics
from specpatch.session import modified_file_name


def fix_command(
    ctx: typer.Context,
    file: str = typer.Argument(help="OpenAPI/Swagger file (.json, .yaml, .yml) or '-' for stdin."),
    set_version: Optional[str] = typer.Option(
        None, "--set-version", help="Override info.version."
    ),
    time_fix: bool = typer.Option(
        False, "--time-fix", help="Retype Time.hour/Time.minute as int32 integers."
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o", help="Directory for the generated file."
    ),
    product: Optional[str] = typer.Option(
        None, "--product", help="Product prefix of the generated file name."
    ),
    keep_name: bool = typer.Option(
        False,
        "--keep-name",
        help="Name the output <upload>-modified-<date>.yaml instead.",
    ),
    to_stdout: bool = typer.Option(
        False, "--stdout", help="Print the YAML instead of writing a file."
    ),
    yaml_hint: bool = typer.Option(
        False, "--yaml", help="Treat stdin as YAML."
    ),
) -> None:
    """Apply edits to an OpenAPI document and download the result as YAML.

    Example::

        specpatch fix api.json --set-version 2.0.0 --time-fix
        specpatch fix api.yaml --stdout > fixed.yaml
    """
    settings = settings_from_context(ctx, cli_product=product, cli_output_dir=output_dir)
    file_name, raw_text = read_upload(file, yaml_hint)

    session = run_session(settings, file_name, raw_text, config_changes(set_version, time_fix))
    state = session.state

    if state.file_state is FileState.ERROR:
        error(state.error or "Failed to load the document.")
        raise typer.Exit(code=EXIT_SPEC_PARSE_ERROR)

    render_diagnostics(state.validation_result)
    for label, value in describe_modifications(state.config):
        info(f"{label}: {value}")

    if not state.modified_yaml:
        error("No output generated. Run with --verbose for details.")
        raise typer.Exit(code=EXIT_MODIFICATION_ERROR)

    if to_stdout:
        print_yaml(state.modified_yaml)
        return

    target_name = modified_file_name(file_name) if keep_name else None
    download = session.download(file_name=target_name)
    if download is None:
        raise typer.Exit(code=EXIT_MODIFICATION_ERROR)
    success(f"Wrote {download.path} ({download.size / 1024:.2f} KB, {download.media_type})")
    if state.validation_result is not None and state.validation_result.error_count:
        suggest("The uploaded document has schema errors; run: specpatch validate " + file)
