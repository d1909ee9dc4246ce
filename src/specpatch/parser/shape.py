"""Minimal shape validation for OpenAPI/Swagger documents.

This is a required-field presence check, not schema validation: full
validation against the OpenAPI meta-schema is delegated to the remote
service in :mod:`specpatch.validator`.
"""

from __future__ import annotations

from typing import Any

from specpatch.exceptions import ShapeError


def validate_shape(document: Any) -> None:
    """Check that *document* looks like an OpenAPI (or Swagger) document.

    Requires a version marker (``openapi`` or ``swagger``), an ``info``
    object with non-empty ``title`` and ``version``, and a ``paths``
    mapping. An empty ``paths: {}`` is accepted.

    Raises:
        ShapeError: Naming the first missing or malformed field.
    """
    if not isinstance(document, dict):
        kind = "empty document" if document is None else type(document).__name__
        raise ShapeError(
            f"The uploaded file is not an OpenAPI (Swagger) specification (got {kind})."
        )

    if not document.get("openapi") and not document.get("swagger"):
        raise ShapeError(
            "The uploaded file does not appear to be a valid OpenAPI (Swagger) "
            'specification. Missing "openapi" or "swagger" property.'
        )

    info = document.get("info")
    if not isinstance(info, dict) or not _non_empty(info.get("title")) or not _non_empty(
        info.get("version")
    ):
        raise ShapeError(
            'Invalid OpenAPI (Swagger) specification: Missing or incomplete "info" '
            "object (title and version are required)."
        )

    paths = document.get("paths")
    if paths is None:
        raise ShapeError(
            'Invalid OpenAPI (Swagger) specification: Missing "paths" object.'
        )
    if not isinstance(paths, dict):
        raise ShapeError(
            'Invalid OpenAPI (Swagger) specification: "paths" must be an object '
            f"(got {type(paths).__name__})."
        )


def _non_empty(value: Any) -> bool:
    # YAML happily loads `version: 1.0` as a float; any non-blank scalar counts.
    if value is None:
        return False
    return str(value).strip() != ""
