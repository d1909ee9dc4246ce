"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specpatch.exceptions.SpecpatchError` subclass.
CI scripts can inspect the exit code to tell a broken upload from an
unreachable validator without parsing stderr.

Example::

    $ specpatch validate api.yaml
    $ echo $?
    8   # EXIT_SCHEMA_INVALID -- the validator reported schema errors
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_VALIDATION_UNAVAILABLE = 6
"""The remote validation service could not be reached or returned an error."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document is not well-formed JSON/YAML or is not an OpenAPI document."""

EXIT_SCHEMA_INVALID = 8
"""The remote validator reported at least one schema error."""

EXIT_MODIFICATION_ERROR = 9
"""The document could not be cloned, modified, or serialised."""
