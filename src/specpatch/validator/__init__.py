"""Remote schema validation client.

Classes and functions:
    :class:`ValidatorClient` -- async client backed by :class:`httpx.AsyncClient`.
    :func:`parse_validation_response` -- response body normalisation.
    :func:`validate_document` -- one-shot validation with graceful degradation.
"""

from specpatch.validator.client import (
    ValidatorClient,
    parse_validation_response,
    validate_document,
)

__all__ = ["ValidatorClient", "parse_validation_response", "validate_document"]
