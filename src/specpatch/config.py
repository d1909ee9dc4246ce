"""Where specpatch keeps its settings, and how the effective settings are chosen.

Files:

* ``config.json`` in the config directory holds the user's
  :class:`~specpatch.models.GlobalConfig`. The directory is
  ``$XDG_CONFIG_HOME/specpatch`` (``~/.config/specpatch``) on Linux and the
  BSDs and ``~/.specpatch`` elsewhere.
* ``specpatch.json`` in the working directory may override any part of it
  for one project, e.g. ``{"download": {"product": "shop"}}``.
* Crash logs go under the data directory (:func:`get_data_dir`).

The loaded document and its edits are never written here; only
preferences are.

Every write, downloads of generated YAML included, goes through
:func:`atomic_write`, so a reader never sees a half-written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specpatch.exceptions import ConfigError
from specpatch.models import GlobalConfig

_APP_NAME = "specpatch"
_USER_CONFIG_FILE = "config.json"
_PROJECT_CONFIG_FILE = "specpatch.json"

ENV_VALIDATOR_URL = "SPECPATCH_VALIDATOR_URL"
ENV_VALIDATOR_TIMEOUT = "SPECPATCH_VALIDATOR_TIMEOUT"
ENV_NO_VALIDATE = "SPECPATCH_NO_VALIDATE"
ENV_PRODUCT = "SPECPATCH_PRODUCT"

_TRUTHY = ("1", "true", "yes")


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _home_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_dir(env_var: str, *default: str) -> Path:
    configured = os.environ.get(env_var)
    base = Path(configured) if configured else Path.home().joinpath(*default)
    return base / _APP_NAME


def _ensure(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``; created on demand."""
    if _is_xdg_platform():
        return _ensure(_xdg_dir("XDG_CONFIG_HOME", ".config"))
    return _ensure(_home_dir())


def get_data_dir() -> Path:
    """Directory for runtime data such as ``logs/``; created on demand."""
    if _is_xdg_platform():
        return _ensure(_xdg_dir("XDG_DATA_HOME", ".local", "share"))
    return _ensure(_home_dir())


# --- Writes ---


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one step.

    The text goes to a temporary sibling first, is fsynced, and is then
    renamed over *path*. If anything fails, the temporary file is removed
    and an existing *path* keeps its old content. Parent directories are
    created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise


# --- Stored configuration ---


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Read the user configuration, or the defaults if none was saved.

    Raises:
        ConfigError: If ``config.json`` is not valid JSON or holds values
            the model rejects.
    """
    path = get_config_dir() / _USER_CONFIG_FILE
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    atomic_write(get_config_dir() / _USER_CONFIG_FILE, text)


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./specpatch.json`` as a partial configuration, if present.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILE
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Effective configuration ---


def resolve_config(
    cli_validator_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_no_validate: bool = False,
    cli_product: Optional[str] = None,
    cli_output_dir: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Combine every configuration source into the settings for one run.

    Later layers win:

    1. model defaults and the user ``config.json``
    2. ``./specpatch.json``
    3. ``SPECPATCH_VALIDATOR_URL``, ``SPECPATCH_VALIDATOR_TIMEOUT``,
       ``SPECPATCH_NO_VALIDATE``, ``SPECPATCH_PRODUCT``
    4. command-line options

    Raises:
        ConfigError: If the combined values do not validate.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project:
        data = _deep_merge(data, project)

    _apply_env(data)

    cli_overrides = {
        ("validator", "url"): cli_validator_url,
        ("validator", "timeout"): cli_timeout,
        ("validator", "enabled"): False if cli_no_validate else None,
        ("download", "product"): cli_product,
        ("download", "directory"): cli_output_dir,
        ("output", "format"): cli_format,
    }
    for (section, key), value in cli_overrides.items():
        if value is not None:
            _put(data, section, key, value)

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _apply_env(data: dict[str, Any]) -> None:
    env = os.environ
    if env.get(ENV_VALIDATOR_URL):
        _put(data, "validator", "url", env[ENV_VALIDATOR_URL])
    if env.get(ENV_VALIDATOR_TIMEOUT):
        _put(data, "validator", "timeout", env[ENV_VALIDATOR_TIMEOUT])
    if env.get(ENV_NO_VALIDATE, "").lower() in _TRUTHY:
        _put(data, "validator", "enabled", False)
    if env.get(ENV_PRODUCT):
        _put(data, "download", "product", env[ENV_PRODUCT])


def _put(data: dict[str, Any], section: str, key: str, value: Any) -> None:
    target = data.setdefault(section, {})
    if not isinstance(target, dict):
        raise ConfigError(f'Invalid configuration: "{section}" must be an object')
    target[key] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
