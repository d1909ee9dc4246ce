"""Modification engine -- pure, ordered, idempotent edits on document copies.

Typical usage::

    from specpatch.engine import apply_modifications
    from specpatch.models import ModificationConfig

    modified = apply_modifications(original, ModificationConfig(version="2.0.0"))

Sub-modules:

* :mod:`~specpatch.engine.clone` -- Structural copying with cycle and
  value-kind checks.
* :mod:`~specpatch.engine.modifications` -- The transformation table and
  the individual transformations.
"""

from specpatch.engine.clone import clone_document
from specpatch.engine.modifications import (
    TRANSFORMATIONS,
    apply_modifications,
    describe_modifications,
    fix_time_object,
    override_version,
)

__all__ = [
    "TRANSFORMATIONS",
    "apply_modifications",
    "clone_document",
    "describe_modifications",
    "fix_time_object",
    "override_version",
]
