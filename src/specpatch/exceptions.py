"""Exception hierarchy for specpatch.

All exceptions inherit from :class:`SpecpatchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specpatch.exit_codes`.
The session controller catches every one of them and turns it into session
state; the top-level handler in :func:`specpatch.app.main` only sees them
when a command calls a component directly.

Subclass hierarchy::

    SpecpatchError            (exit 1)
    +-- InvalidUsageError     (exit 2)
    +-- ParseError            (exit 7)
    |   +-- ShapeError        (exit 7)
    +-- ValidationServiceError (exit 6)
    +-- ModificationError     (exit 9)
    |   +-- CloneError
    |   +-- SerializationError
    +-- ConfigError           (exit 1)
"""

from __future__ import annotations

from typing import Optional

from specpatch.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MODIFICATION_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_VALIDATION_UNAVAILABLE,
)


class SpecpatchError(Exception):
    """Base exception for all specpatch errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecpatchError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ParseError(SpecpatchError):
    """Raised when the uploaded text is not well-formed JSON or YAML, or cannot be read."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ShapeError(ParseError):
    """Raised when a well-formed document is not a recognisable OpenAPI/Swagger document.

    Subclasses :class:`ParseError` only to share its exit code. Handlers
    that must distinguish the two catch ``ShapeError`` first.
    """


class ValidationServiceError(SpecpatchError):
    """Raised when the remote validation service is unreachable or answers with an error.

    Args:
        message: Description including the transport status.
        status_code: HTTP status of the failed response, when there was one.
    """

    exit_code = EXIT_VALIDATION_UNAVAILABLE

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ModificationError(SpecpatchError):
    """Base class for failures inside the modify/serialise step."""

    exit_code = EXIT_MODIFICATION_ERROR


class CloneError(ModificationError):
    """Raised when a document cannot be structurally copied (cycles, foreign value kinds)."""


class SerializationError(ModificationError):
    """Raised when a document cannot be rendered as YAML or JSON."""


class ConfigError(SpecpatchError):
    """Raised for configuration problems (invalid JSON, bad values, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE
