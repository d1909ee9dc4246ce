"""Configuration-driven edits applied to a copy of the original document.

:func:`apply_modifications` is a pure function: it clones the original with
:func:`~specpatch.engine.clone.clone_document` and runs every registered
transformation on the copy, in the fixed order of :data:`TRANSFORMATIONS`.

Each transformation has the signature ``(document, config) -> bool``,
mutates only the copy it is handed, returns whether it changed anything,
and is idempotent: running it twice with the same configuration leaves the
document as running it once did.
"""

from __future__ import annotations

from typing import Any, Callable

from specpatch.engine.clone import clone_document
from specpatch.models import Document, ModificationConfig
from specpatch.output import debug, warning

Transformation = Callable[[Document, ModificationConfig], bool]

TIME_SCHEMA = "Time"
TIME_FIELDS = ("hour", "minute")
TIME_FIELD_PATCH = {"type": "integer", "format": "int32"}


def apply_modifications(original: Document, config: ModificationConfig) -> Document:
    """Apply every enabled transformation to a fresh copy of *original*.

    Args:
        original: The document as uploaded. Never mutated.
        config: The edits to apply; absent fields are no-ops.

    Returns:
        The modified copy. With an empty configuration it is structurally
        equal to *original*.

    Raises:
        CloneError: If *original* cannot be copied. No partial document is
            returned.
    """
    modified = clone_document(original)
    debug(f"Applying modifications: {config.model_dump(by_alias=True)}")
    for name, transform in TRANSFORMATIONS:
        if transform(modified, config):
            debug(f"Applied '{name}'")
    return modified


def override_version(document: Document, config: ModificationConfig) -> bool:
    """Set ``info.version`` to ``config.version`` when the latter is non-empty.

    A document without an ``info`` object is left alone, and so is a version
    whose text already equals ``config.version``: a YAML ``version: 1.1``
    stays a number unless the user picks a different version.
    """
    if not config.version:
        return False
    info = document.get("info")
    if not isinstance(info, dict):
        debug("No 'info' object, version override skipped")
        return False
    current = info.get("version")
    if current is not None and str(current) == config.version:
        return False
    info["version"] = config.version
    return True


def fix_time_object(document: Document, config: ModificationConfig) -> bool:
    """Retype ``Time.hour`` and ``Time.minute`` as ``integer``/``int32``.

    Looks up ``components.schemas.Time.properties``; a missing schema or
    property map is a warning, not an error. Each of the two properties is
    patched independently and keeps all of its other attributes.
    """
    if not config.apply_time_object_fix:
        return False

    schemas = _child(_child(document, "components"), "schemas")
    time_schema = _child(schemas, TIME_SCHEMA)
    if time_schema is None:
        warning(f"'{TIME_SCHEMA}' schema not found in components/schemas.")
        return False

    properties = _child(time_schema, "properties")
    if properties is None:
        warning(f"'{TIME_SCHEMA}' schema has no properties defined.")
        return False

    changed = False
    for field_name in TIME_FIELDS:
        prop = properties.get(field_name)
        if not isinstance(prop, dict):
            warning(f"{TIME_SCHEMA}.{field_name} property not found in '{TIME_SCHEMA}' schema.")
            continue
        properties[field_name] = {**prop, **TIME_FIELD_PATCH}
        debug(f"Modified {TIME_SCHEMA}.{field_name} to type: 'integer', format: 'int32'")
        changed = True
    return changed


TRANSFORMATIONS: tuple[tuple[str, Transformation], ...] = (
    ("version override", override_version),
    ("time object fix", fix_time_object),
)


def describe_modifications(config: ModificationConfig) -> list[tuple[str, str]]:
    """Summarise *config* as ``(label, value)`` rows for status displays."""
    return [
        ("Version", config.version or "Not set"),
        ("Time Object Fix", "Enabled" if config.apply_time_object_fix else "Disabled"),
    ]


def _child(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        value = node.get(key)
        if isinstance(value, dict):
            return value
    return None
