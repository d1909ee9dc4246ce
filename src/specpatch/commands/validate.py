"""Validate command -- check a document against the remote schema validator.

Unlike the session, which degrades an unreachable validator to an
"unavailable" result, this command reports the failure and exits with
:data:`~specpatch.exit_codes.EXIT_VALIDATION_UNAVAILABLE`, so it can gate
CI jobs.
"""

from __future__ import annotations

import asyncio

import typer

from specpatch.commands.common import read_upload, settings_from_context
from specpatch.exceptions import ParseError, ValidationServiceError
from specpatch.exit_codes import EXIT_INVALID_USAGE, EXIT_SCHEMA_INVALID
from specpatch.models import Document, ValidationResult, ValidatorSettings
from specpatch.output import debug, error
from specpatch.parser import is_yaml_file_name, parse
from specpatch.preview import render_diagnostics
from specpatch.validator import ValidatorClient


async def _validate(
    settings: ValidatorSettings, document: Document, raw_text: str, is_yaml: bool
) -> ValidationResult:
    async with ValidatorClient(settings) as client:
        return await client.validate(document=document, raw_text=raw_text, is_yaml=is_yaml)


def validate_command(
    ctx: typer.Context,
    file: str = typer.Argument(help="OpenAPI/Swagger file (.json, .yaml, .yml) or '-' for stdin."),
    yaml_hint: bool = typer.Option(False, "--yaml", help="Treat stdin as YAML."),
) -> None:
    """Validate an OpenAPI document with the remote schema validator.

    Exits with code 8 when the validator reports at least one error.

    Example::

        specpatch validate api.yaml
        specpatch --validator-url http://localhost:8080/validator/debug validate api.json
    """
    settings = settings_from_context(ctx)
    if not settings.validator.enabled:
        error("Remote validation is disabled; drop --no-validate or SPECPATCH_NO_VALIDATE.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    file_name, raw_text = read_upload(file, yaml_hint)
    is_yaml = is_yaml_file_name(file_name)
    try:
        document = parse(raw_text, is_yaml)
    except ParseError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    debug(f"Validating {file_name} against {settings.validator.url}")
    try:
        result = asyncio.run(_validate(settings.validator, document, raw_text, is_yaml))
    except ValidationServiceError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    render_diagnostics(result)
    if result.error_count:
        raise typer.Exit(code=EXIT_SCHEMA_INVALID)
