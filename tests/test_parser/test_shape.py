"""Tests for specpatch.parser.shape -- required-field presence checks."""

from __future__ import annotations

from typing import Any

import pytest

from specpatch.exceptions import ShapeError
from specpatch.parser.shape import validate_shape


def _doc(**overrides: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": "Shape", "version": "1.0.0"},
        "paths": {"/a": {"get": {"responses": {}}}},
    }
    for key, value in overrides.items():
        if value is None:
            doc.pop(key, None)
        else:
            doc[key] = value
    return doc


class TestValidateShape:
    def test_accepts_minimal_openapi(self) -> None:
        validate_shape(_doc())

    def test_accepts_swagger_marker(self) -> None:
        doc = _doc(openapi=None, swagger="2.0")
        validate_shape(doc)

    def test_accepts_empty_paths(self) -> None:
        validate_shape(_doc(paths={}))

    def test_accepts_numeric_version(self) -> None:
        # `version: 1.0` in YAML loads as a float
        validate_shape(_doc(info={"title": "T", "version": 1.0}))

    def test_rejects_missing_version_marker(self) -> None:
        with pytest.raises(ShapeError, match='Missing "openapi" or "swagger"'):
            validate_shape(_doc(openapi=None))

    def test_rejects_missing_paths(self) -> None:
        with pytest.raises(ShapeError, match='Missing "paths" object'):
            validate_shape(_doc(paths=None))

    def test_rejects_non_mapping_paths(self) -> None:
        with pytest.raises(ShapeError, match='"paths" must be an object'):
            validate_shape(_doc(paths=["/a"]))

    def test_rejects_missing_info(self) -> None:
        with pytest.raises(ShapeError, match='"info"'):
            validate_shape(_doc(info=None))

    def test_rejects_missing_info_version(self) -> None:
        with pytest.raises(ShapeError, match="title and version are required"):
            validate_shape(_doc(info={"title": "T"}))

    @pytest.mark.parametrize("info", [{"title": "", "version": "1"}, {"title": "T", "version": "  "}])
    def test_rejects_blank_info_fields(self, info: dict[str, Any]) -> None:
        with pytest.raises(ShapeError):
            validate_shape(_doc(info=info))

    @pytest.mark.parametrize("document", [None, [], "openapi", 3])
    def test_rejects_non_mappings(self, document: Any) -> None:
        with pytest.raises(ShapeError, match="not an OpenAPI"):
            validate_shape(document)
