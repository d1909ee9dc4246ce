"""Structural copies of OpenAPI documents.

:func:`clone_document` is the only way the engine obtains a document it is
allowed to edit. Unlike :func:`copy.deepcopy`, it accepts nothing but the
value kinds a JSON/YAML loader produces, and it refuses cyclic graphs
instead of faithfully reproducing them, since neither JSON nor anchor-free
YAML can represent a cycle.
"""

from __future__ import annotations

import datetime
from typing import Any

from specpatch.exceptions import CloneError

SCALAR_TYPES = (str, bool, int, float, type(None), datetime.date, datetime.datetime)
"""Scalar kinds allowed as values and mapping keys (dates come from YAML timestamps)."""


def clone_document(value: Any) -> Any:
    """Return a structural copy of *value*.

    Dicts and lists are rebuilt (dict key order is preserved); scalars are
    shared, which is safe because they are immutable.

    Raises:
        CloneError: If *value* contains a cycle, or a mapping key or value
            outside the JSON/YAML structural union.
    """
    return _clone(value, path="#", active=set())


def _clone(value: Any, path: str, active: set[int]) -> Any:
    if isinstance(value, SCALAR_TYPES):
        return value

    if isinstance(value, (dict, list)):
        marker = id(value)
        if marker in active:
            raise CloneError(f"Cannot copy document: cycle detected at {path}")
        active.add(marker)
        try:
            if isinstance(value, dict):
                copied: dict[str, Any] = {}
                for key, item in value.items():
                    if not isinstance(key, SCALAR_TYPES):
                        raise CloneError(
                            f"Cannot copy document: unsupported key type "
                            f"{type(key).__name__} at {path}"
                        )
                    copied[key] = _clone(item, f"{path}/{key}", active)
                return copied
            return [_clone(item, f"{path}/{index}", active) for index, item in enumerate(value)]
        finally:
            active.discard(marker)

    raise CloneError(
        f"Cannot copy document: unsupported value of type {type(value).__name__} at {path}"
    )
