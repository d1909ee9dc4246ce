"""Deterministic YAML and JSON rendering of OpenAPI documents.

The YAML policy is fixed: two-space indentation, no line wrapping, keys in
document order, and no anchors or aliases -- a subtree that appears twice
is written out twice. Output is therefore portable to YAML consumers that
do not understand anchors, and diffs between two renders stay local.

Because aliases are disabled, a cyclic document cannot be represented at
all; it is rejected up front rather than recursing until the interpreter
gives up.
"""

from __future__ import annotations

import datetime
import json
from typing import Any

import yaml

from specpatch.engine.clone import clone_document
from specpatch.exceptions import CloneError, SerializationError
from specpatch.models import Document


class _NoAliasDumper(yaml.SafeDumper):
    """Safe dumper that never emits ``&anchor``/``*alias`` pairs."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def to_yaml(document: Document) -> str:
    """Serialise *document* as canonical YAML text.

    The same document structure always yields byte-identical output.

    Raises:
        SerializationError: If the document contains a cycle or a value kind
            YAML cannot represent. Nothing is returned in that case.
    """
    _ensure_tree(document)
    try:
        return yaml.dump(
            document,
            Dumper=_NoAliasDumper,
            indent=2,
            width=float("inf"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as exc:
        raise SerializationError(
            f"Failed to convert OpenAPI specification to YAML format: {exc}"
        ) from exc


def to_json(document: Document, indent: int | None = None) -> str:
    """Serialise *document* as JSON, rendering YAML timestamps in ISO 8601.

    Raises:
        SerializationError: If the document contains a cycle or a value kind
            JSON cannot represent.
    """
    _ensure_tree(document)
    try:
        return json.dumps(document, indent=indent, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Failed to convert OpenAPI specification to JSON format: {exc}"
        ) from exc


def _ensure_tree(document: Any) -> None:
    try:
        clone_document(document)
    except CloneError as exc:
        raise SerializationError(str(exc).replace("Cannot copy", "Cannot serialize")) from exc


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
