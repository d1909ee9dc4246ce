"""Asynchronous client for the remote OpenAPI schema validation service.

This module provides :class:`ValidatorClient`, a thin wrapper around
:class:`httpx.AsyncClient` that POSTs one document per call to the
configured endpoint (by default the public swagger.io validator) and turns
the answer into a :class:`~specpatch.models.ValidationResult`.

The remote check is best-effort. The client itself raises
:class:`~specpatch.exceptions.ValidationServiceError` on any transport
failure, timeout, or non-2xx status; :func:`validate_document` is the
convenience wrapper that applies the degrade-to-unavailable policy.

Example::

    async with ValidatorClient(settings) as client:
        result = await client.validate(raw_text=text, is_yaml=True)
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from specpatch.exceptions import SerializationError, ValidationServiceError
from specpatch.models import Document, ValidationResult, ValidatorSettings
from specpatch.output import debug, warning
from specpatch.serializer import to_json

YAML_CONTENT_TYPE = "application/yaml"
JSON_CONTENT_TYPE = "application/json"


class ValidatorClient:
    """Async HTTP client for the schema validation endpoint.

    Must be used as an async context manager. Every :meth:`validate` call is
    a single round trip; there is no retry.

    Args:
        settings: Endpoint URL and timeout.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
    """

    def __init__(
        self,
        settings: Optional[ValidatorSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or ValidatorSettings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> ValidatorClient:
        self._client = httpx.AsyncClient(
            timeout=self._settings.timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def validate(
        self,
        document: Optional[Document] = None,
        raw_text: Optional[str] = None,
        is_yaml: bool = False,
    ) -> ValidationResult:
        """Send one representation of the document and normalise the answer.

        YAML uploads are sent as the raw text the user provided, so that the
        check sees exactly the uploaded bytes; everything else is sent as the
        JSON encoding of *document*.

        Args:
            document: The parsed document.
            raw_text: The uploaded text, used when *is_yaml* is True.
            is_yaml: Whether the upload was YAML.

        Returns:
            The normalised validation result.

        Raises:
            ValueError: If neither a usable *raw_text* nor a *document* is given.
            ValidationServiceError: On transport failure, timeout, non-2xx
                status, or an unreadable response body.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        if is_yaml and raw_text is not None:
            content, content_type = raw_text, YAML_CONTENT_TYPE
        elif document is not None:
            try:
                content, content_type = to_json(document), JSON_CONTENT_TYPE
            except SerializationError as exc:
                raise ValidationServiceError(f"Cannot encode document for validation: {exc}") from exc
        else:
            raise ValueError("validate() needs a document, or raw YAML text with is_yaml=True")

        url = self._settings.url
        debug(f"POST {url} ({content_type}, {len(content)} chars)")
        try:
            response = await self._client.post(
                url,
                content=content.encode("utf-8"),
                headers={"Content-Type": content_type, "Accept": JSON_CONTENT_TYPE},
            )
        except httpx.TimeoutException as exc:
            raise ValidationServiceError(
                f"Validation request timed out after {self._settings.timeout:g}s: {exc}"
            ) from exc
        except httpx.RequestError as exc:
            raise ValidationServiceError(f"Validation request failed: {exc}") from exc

        if not response.is_success:
            reason = response.reason_phrase or ""
            raise ValidationServiceError(
                f"Validation API request failed: HTTP {response.status_code} {reason}".rstrip(),
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ValidationServiceError(
                f"Validation API returned a non-JSON body: {exc}",
                status_code=response.status_code,
            ) from exc

        return parse_validation_response(payload)


def parse_validation_response(payload: Any) -> ValidationResult:
    """Normalise a validator response body into a :class:`ValidationResult`.

    ``messages`` and ``schemaValidationMessages`` are passed through; either
    one may be absent (or ``null``) and is then treated as empty.

    Raises:
        ValidationServiceError: If the body is not a JSON object or its
            entries do not have the expected shape.
    """
    if not isinstance(payload, dict):
        raise ValidationServiceError(
            f"Unexpected validation response: expected an object, got {type(payload).__name__}"
        )
    try:
        return ValidationResult.model_validate(
            {
                "messages": [str(m) for m in payload.get("messages") or []],
                "schemaValidationMessages": payload.get("schemaValidationMessages") or [],
            }
        )
    except ValidationError as exc:
        raise ValidationServiceError(f"Unexpected validation response: {exc}") from exc


async def validate_document(
    settings: ValidatorSettings,
    document: Optional[Document] = None,
    raw_text: Optional[str] = None,
    is_yaml: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ValidationResult:
    """Validate once and degrade service failures to an *unavailable* result.

    This is the policy the session applies: the remote service is
    best-effort, so its failures are logged and reported in the result
    rather than raised.
    """
    try:
        async with ValidatorClient(settings, transport=transport) as client:
            return await client.validate(document=document, raw_text=raw_text, is_yaml=is_yaml)
    except ValidationServiceError as exc:
        warning(f"Schema validation unavailable: {exc}")
        return ValidationResult.unavailable(f"Schema validation unavailable: {exc}")
