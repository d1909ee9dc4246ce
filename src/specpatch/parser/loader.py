"""Read and parse uploaded OpenAPI documents.

This module is the I/O edge of the pipeline: it reads raw text from a file
or stdin and turns it into a Python dictionary. The format is decided by
the file name alone (``.yaml``/``.yml`` means YAML, anything else JSON);
there is no content-sniffing fallback.

The public functions are:

* :func:`read_spec_file` -- Fetch ``(file_name, raw_text)`` from a path or stdin.
* :func:`is_yaml_file_name` -- Decide the format from a file name.
* :func:`parse` -- Parse raw text and run the shape check.
* :func:`looks_like_openapi` -- Non-raising probe used on generated YAML.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml

from specpatch.exceptions import ParseError
from specpatch.models import Document
from specpatch.parser.shape import validate_shape

_YAML_SUFFIXES = (".yaml", ".yml")


def is_yaml_file_name(name: str) -> bool:
    """Return True when *name* carries a ``.yaml`` or ``.yml`` extension."""
    return name.lower().endswith(_YAML_SUFFIXES)


def read_spec_file(source: str, yaml_hint: bool = False) -> tuple[str, str]:
    """Read an uploaded document from a local path, or stdin for ``'-'``.

    Empty content is returned as-is; rejecting it is the session's job.

    Args:
        source: File path, or ``'-'`` for stdin.
        yaml_hint: For stdin only -- name the upload ``stdin.yaml`` instead
            of ``stdin.json`` so that it is parsed as YAML.

    Returns:
        A ``(file_name, raw_text)`` tuple.

    Raises:
        ParseError: If the file does not exist or cannot be read.
    """
    if source == "-":
        try:
            content = sys.stdin.read()
        except Exception as exc:
            raise ParseError(f"Failed to read from stdin: {exc}") from exc
        return ("stdin.yaml" if yaml_hint else "stdin.json"), content

    file_path = Path(source)
    if not file_path.is_file():
        raise ParseError(f"Spec file not found: {source}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Failed to read spec file {source}: {exc}") from exc

    return file_path.name, content


def parse(raw_text: str, is_yaml: bool) -> Document:
    """Parse *raw_text* as YAML or JSON and check its OpenAPI shape.

    The returned dictionary is exactly what the loader produced: no
    normalisation and no stripping of unknown fields.

    Args:
        raw_text: The uploaded text. Must be non-empty (caller's check).
        is_yaml: Parse as YAML when True, JSON otherwise.

    Returns:
        The parsed document.

    Raises:
        ParseError: If the text is not well-formed in the chosen format.
        ShapeError: If it is well-formed but not an OpenAPI/Swagger document.
    """
    document = _load(raw_text, is_yaml)
    validate_shape(document)
    return document


def _load(raw_text: str, is_yaml: bool) -> Any:
    if is_yaml:
        try:
            return yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ParseError(f"Failed to parse YAML: {exc}") from exc
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse JSON: {exc}") from exc


def looks_like_openapi(yaml_text: str) -> bool:
    """Return True if *yaml_text* loads as a mapping with an ``openapi``/``swagger`` key.

    Never raises; malformed input simply yields False.
    """
    try:
        document = yaml.safe_load(yaml_text)
    except yaml.YAMLError:
        return False
    return isinstance(document, dict) and bool(
        document.get("openapi") or document.get("swagger")
    )
