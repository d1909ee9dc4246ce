"""``specpatch config`` -- the stored user configuration.

Keys use dot notation over :class:`~specpatch.models.GlobalConfig`:
``validator.url``, ``validator.timeout``, ``validator.enabled``,
``download.product``, ``download.directory``, ``output.format``.
Project files (``./specpatch.json``) and ``SPECPATCH_*`` variables are not
touched here; they are layered on top at run time.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from specpatch.config import get_config_dir, load_global_config, save_global_config
from specpatch.exit_codes import EXIT_INVALID_USAGE
from specpatch.models import GlobalConfig
from specpatch.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

_TRUE_WORDS = ("true", "1", "yes", "on")


def _fail(message: str) -> typer.Exit:
    error(message)
    return typer.Exit(code=EXIT_INVALID_USAGE)


def _locate(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Return the section holding *key* and the leaf name inside it."""
    *sections, leaf = key.split(".")
    node = data
    for section in sections:
        child = node.get(section)
        if not isinstance(child, dict):
            raise _fail(f"Invalid config key: {key}")
        node = child
    if leaf not in node or isinstance(node[leaf], dict):
        raise _fail(f"Unknown config key: {key}")
    return node, leaf


def _coerce(current: Any, raw: str, key: str) -> Any:
    """Convert *raw* to the type of the value it replaces."""
    if isinstance(current, bool):
        return raw.strip().lower() in _TRUE_WORDS
    if isinstance(current, (int, float)):
        try:
            return type(current)(raw)
        except ValueError:
            raise _fail(f"Expected a number for {key}, got: {raw}") from None
    return raw


@config_app.command("show")
def config_show() -> None:
    """Print the stored configuration.

    Example::

        specpatch config show
        specpatch --json config show
    """
    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted key, e.g. 'validator.timeout'."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Change one stored setting.

    Example::

        specpatch config set validator.url http://localhost:8080/validator/debug
        specpatch config set validator.timeout 30
        specpatch config set download.product shop
    """
    data = load_global_config().model_dump(mode="json")
    section, leaf = _locate(data, key)
    section[leaf] = _coerce(section[leaf], value, key)

    try:
        updated = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise _fail(f"Invalid value for {key}: {exc}") from None

    save_global_config(updated)
    success(f"Set {key} = {section[leaf]}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Restore the default configuration.

    Example::

        specpatch config reset --force
    """
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
