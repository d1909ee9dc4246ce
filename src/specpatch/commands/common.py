"""Plumbing shared by the document commands.

Typer commands are synchronous; :func:`run_session` drives a
:class:`~specpatch.session.SessionController` through one load, the
requested edits, and the background validation inside ``asyncio.run``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from specpatch.exceptions import ConfigError, ParseError
from specpatch.models import FileState, GlobalConfig
from specpatch.output import error
from specpatch.parser import read_spec_file
from specpatch.session import SessionController


def settings_from_context(ctx: typer.Context, **overrides: Any) -> GlobalConfig:
    """Resolve the effective configuration from root options plus *overrides*.

    Raises:
        typer.Exit: With the config error's exit code when resolution fails.
    """
    from specpatch.config import resolve_config

    obj = ctx.obj or {}
    try:
        return resolve_config(
            cli_validator_url=obj.get("validator_url"),
            cli_timeout=obj.get("timeout"),
            cli_no_validate=obj.get("no_validate", False),
            **overrides,
        )
    except ConfigError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None


def read_upload(source: str, yaml_hint: bool) -> tuple[str, str]:
    """Read ``(file_name, raw_text)`` or exit with the parse error's code."""
    try:
        return read_spec_file(source, yaml_hint=yaml_hint)
    except ParseError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def config_changes(set_version: Optional[str], time_fix: bool) -> dict[str, Any]:
    """Translate CLI edit flags into ``update_config`` keyword arguments."""
    changes: dict[str, Any] = {}
    if set_version is not None:
        changes["version"] = set_version
    if time_fix:
        changes["apply_time_object_fix"] = True
    return changes


async def _drive(
    settings: GlobalConfig, file_name: str, raw_text: str, changes: dict[str, Any]
) -> SessionController:
    session = SessionController(settings)
    await session.load(file_name, raw_text)
    if session.state.file_state is FileState.LOADED and changes:
        session.update_config(**changes)
    await session.aclose()
    return session


def run_session(
    settings: GlobalConfig, file_name: str, raw_text: str, changes: dict[str, Any]
) -> SessionController:
    """Load, edit, and validate one upload; returns the settled session."""
    return asyncio.run(_drive(settings, file_name, raw_text, changes))
