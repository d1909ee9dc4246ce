"""Canonical Pydantic models shared across all specpatch modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ValidatorSettings`, :class:`DownloadSettings`,
    :class:`OutputConfig`, and :class:`GlobalConfig`.

**Pipeline models** -- produced and consumed while a document is being
worked on:
    :class:`FileState`, :class:`ActiveTab`, :class:`ModificationConfig`,
    :class:`SchemaLocation`, :class:`InstanceLocation`,
    :class:`SchemaValidationMessage`, and :class:`ValidationResult`.

The OpenAPI document itself is deliberately *not* modelled: it stays a plain
``dict`` so that unknown fields and ``x-`` extensions survive every step
untouched. See :data:`Document`.

Models that mirror the validator's wire format use camelCase aliases with
``populate_by_name`` so they can be built from either spelling.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


Document = dict[str, Any]
"""A parsed OpenAPI/Swagger document: nested dicts, lists, and scalars."""


# --- Configuration models ---


class ValidatorSettings(BaseModel):
    """Remote schema validation settings stored in :class:`GlobalConfig`."""

    url: str = Field(
        default="https://validator.swagger.io/validator/debug",
        description="Endpoint receiving the document as a POST body",
    )
    timeout: float = Field(
        default=20.0, ge=1.0, le=120.0, description="Request timeout in seconds"
    )
    enabled: bool = Field(default=True, description="Run remote validation on load")


class DownloadSettings(BaseModel):
    """Where and under which name the modified YAML is written."""

    product: str = Field(
        default="openapi",
        min_length=1,
        description="Product prefix of the downloaded file name",
    )
    directory: str = Field(default=".", description="Target directory for downloads")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specpatch/config.json``.

    Loaded and saved by :func:`~specpatch.config.load_global_config` and
    :func:`~specpatch.config.save_global_config`. See
    :func:`~specpatch.config.resolve_config` for the precedence chain.
    """

    validator: ValidatorSettings = Field(default_factory=ValidatorSettings)
    download: DownloadSettings = Field(default_factory=DownloadSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Pipeline models ---


class FileState(str, enum.Enum):
    """Lifecycle of the document held by a session."""

    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ActiveTab(str, enum.Enum):
    """Which output view the user is looking at."""

    YAML = "yaml"
    PREVIEW = "preview"


class ModificationConfig(BaseModel):
    """The user-selected edits applied on top of the original document.

    Every field is independently optional; an absent or empty value means
    "leave this concern alone".
    """

    model_config = ConfigDict(populate_by_name=True)

    version: Optional[str] = Field(
        default=None, description="Overrides info.version when non-empty"
    )
    apply_time_object_fix: bool = Field(
        default=False,
        alias="applyTimeObjectFix",
        description="Retype Time.hour and Time.minute as int32 integers",
    )

    @classmethod
    def from_document(cls, document: Optional[Document]) -> ModificationConfig:
        """Build the default configuration for a freshly loaded document.

        The version field starts out as the document's own ``info.version``
        so that the first render is an identity edit.
        """
        version: Optional[str] = None
        if isinstance(document, dict):
            info = document.get("info")
            if isinstance(info, dict) and info.get("version") is not None:
                version = str(info["version"])
        return cls(version=version)


class SchemaLocation(BaseModel):
    """Where in the OpenAPI meta-schema a finding originates."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    loading_uri: str = Field(default="", alias="loadingURI")
    pointer: str = ""


class InstanceLocation(BaseModel):
    """JSON pointer to the offending node in the validated document."""

    model_config = ConfigDict(extra="allow")

    pointer: str = ""


class SchemaValidationMessage(BaseModel):
    """A single structured finding returned by the validation service."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    level: str = "error"
    domain: str = ""
    keyword: str = ""
    message: str = ""
    schema_: SchemaLocation = Field(default_factory=SchemaLocation, alias="schema")
    instance: InstanceLocation = Field(default_factory=InstanceLocation)


class ValidationResult(BaseModel):
    """Normalised diagnostic bundle for one document.

    Empty sequences mean "no problems found". Whether a check is still
    running is tracked by the session's ``validation_pending`` flag, and
    ``available`` is ``False`` when the remote service could not be
    consulted at all.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[str] = Field(default_factory=list)
    schema_validation_messages: list[SchemaValidationMessage] = Field(
        default_factory=list, alias="schemaValidationMessages"
    )
    available: bool = True

    @classmethod
    def from_message(cls, message: str) -> ValidationResult:
        """A result carrying a single client-side message."""
        return cls(messages=[message])

    @classmethod
    def unavailable(cls, message: str) -> ValidationResult:
        """The degraded result used when the remote check could not run."""
        return cls(messages=[message], available=False)

    @property
    def error_count(self) -> int:
        return sum(
            1 for m in self.schema_validation_messages if m.level.lower() == "error"
        )

    @property
    def warning_count(self) -> int:
        return sum(
            1 for m in self.schema_validation_messages if m.level.lower() == "warning"
        )

    @property
    def is_clean(self) -> bool:
        """True when the check ran and found nothing at all."""
        return self.available and not self.messages and not self.schema_validation_messages
