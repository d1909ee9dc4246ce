"""Document parser -- read uploads, parse JSON/YAML, and check OpenAPI shape.

Typical usage::

    from specpatch.parser import is_yaml_file_name, parse, read_spec_file

    name, text = read_spec_file("petstore.yaml")
    document = parse(text, is_yaml=is_yaml_file_name(name))

Sub-modules:

* :mod:`~specpatch.parser.loader` -- I/O layer (file, stdin) and JSON/YAML
  parsing chosen by file extension.
* :mod:`~specpatch.parser.shape` -- Required-field presence checks raising
  :class:`~specpatch.exceptions.ShapeError`.
"""

from specpatch.parser.loader import (
    is_yaml_file_name,
    looks_like_openapi,
    parse,
    read_spec_file,
)
from specpatch.parser.shape import validate_shape

__all__ = [
    "is_yaml_file_name",
    "looks_like_openapi",
    "parse",
    "read_spec_file",
    "validate_shape",
]
