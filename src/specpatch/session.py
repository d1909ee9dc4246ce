"""Session controller -- owns the loaded document and sequences the pipeline.

A session moves through ``empty -> loading -> {loaded | error}`` and back to
``empty`` on :meth:`SessionController.clear`; a new upload from ``loaded``
or ``error`` restarts at ``loading`` with every derived field reset.

State is an immutable :class:`SessionState` snapshot. Every change goes
through one of the pure transition functions below (``begin_load``,
``fail_load``, ``complete_load``, ``with_config``, ``commit_output``,
``commit_validation``, ``cleared``) and is then published to subscribers,
so the state machine can be tested without any I/O.

Two rules keep the displayed outputs honest:

* Whenever the original document or the modification config changes, the
  YAML text is regenerated synchronously and then parsed back for the
  preview. If that parse fails, only the preview is dropped.
* Remote validation runs as a background task tagged with the load token
  that started it. A result whose token is no longer current is discarded,
  so a slow answer for an earlier upload never lands on a later one.

Example::

    session = SessionController(resolve_config())
    await session.load("api.yaml", text)
    session.update_config(version="2.0.0", apply_time_object_fix=True)
    await session.wait_for_validation()
    session.download()
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field, replace
from datetime import date
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import httpx
import yaml

from specpatch.config import atomic_write
from specpatch.engine import apply_modifications
from specpatch.exceptions import ModificationError, ParseError, ShapeError
from specpatch.models import (
    ActiveTab,
    Document,
    FileState,
    GlobalConfig,
    ModificationConfig,
    ValidationResult,
)
from specpatch.output import debug, error, warning
from specpatch.parser import is_yaml_file_name, parse
from specpatch.preview import PreviewPayload
from specpatch.serializer import to_yaml
from specpatch.validator import validate_document

EMPTY_FILE_MESSAGE = "Failed to read file or file was empty."
YAML_MEDIA_TYPE = "text/yaml"

Validator = Callable[..., Awaitable[ValidationResult]]
Subscriber = Callable[["SessionState"], None]


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of everything a session displays.

    Attributes:
        file_state: Position in the ``empty/loading/loaded/error`` machine.
        file_name: Name of the current upload.
        original: The uploaded document; never mutated.
        is_yaml: Whether the upload was parsed as YAML.
        config: The edits currently applied on top of ``original``.
        modified_yaml: Generated YAML, ``""`` when nothing was generated.
        modified_document: ``modified_yaml`` parsed back, for the preview.
        error: Message of the last failed load.
        validation_result: Diagnostics for ``original``, once known.
        validation_pending: True while the remote check is in flight.
        active_tab: Output view selected by the user.
        load_token: Increases on every load and clear.
    """

    file_state: FileState = FileState.EMPTY
    file_name: str = ""
    original: Optional[Document] = None
    is_yaml: bool = False
    config: ModificationConfig = field(default_factory=ModificationConfig)
    modified_yaml: str = ""
    modified_document: Optional[Document] = None
    error: Optional[str] = None
    validation_result: Optional[ValidationResult] = None
    validation_pending: bool = False
    active_tab: ActiveTab = ActiveTab.YAML
    load_token: int = 0


@dataclass(frozen=True)
class Download:
    """A written download: where it went and what it holds."""

    path: Path
    media_type: str
    size: int


# ------------------------------------------------------------------ #
# Pure transitions: (state, event) -> state
# ------------------------------------------------------------------ #


def begin_load(state: SessionState, file_name: str) -> SessionState:
    """Start a new load: fresh token, every derived field reset."""
    return SessionState(
        file_state=FileState.LOADING,
        file_name=file_name,
        load_token=state.load_token + 1,
    )


def fail_load(state: SessionState, message: str) -> SessionState:
    """Record a failed load; the diagnostics carry the same message."""
    return replace(
        state,
        file_state=FileState.ERROR,
        original=None,
        error=message,
        modified_yaml="",
        modified_document=None,
        validation_result=ValidationResult.from_message(message),
        validation_pending=False,
    )


def complete_load(
    state: SessionState, original: Document, is_yaml: bool, validating: bool
) -> SessionState:
    """Store a successfully parsed upload with its default configuration."""
    return replace(
        state,
        file_state=FileState.LOADED,
        original=original,
        is_yaml=is_yaml,
        config=ModificationConfig.from_document(original),
        error=None,
        validation_pending=validating,
    )


def with_config(state: SessionState, config: ModificationConfig) -> SessionState:
    return replace(state, config=config)


def commit_output(
    state: SessionState, modified_yaml: str, modified_document: Optional[Document]
) -> SessionState:
    return replace(state, modified_yaml=modified_yaml, modified_document=modified_document)


def commit_validation(
    state: SessionState, token: int, result: ValidationResult
) -> SessionState:
    """Merge a validation result, unless it belongs to a superseded load."""
    if token != state.load_token:
        return state
    return replace(state, validation_result=result, validation_pending=False)


def cleared(state: SessionState) -> SessionState:
    """Back to ``empty``; the bumped token orphans any in-flight validation."""
    return SessionState(load_token=state.load_token + 1)


# ------------------------------------------------------------------ #
# Output generation
# ------------------------------------------------------------------ #


def render_output(
    original: Optional[Document], config: ModificationConfig
) -> tuple[str, Optional[Document]]:
    """Run modify -> serialise -> re-parse for one (original, config) pair.

    Returns:
        ``(yaml_text, preview_document)``. A modification or serialisation
        failure yields ``("", None)``; YAML that does not parse back yields
        ``(yaml_text, None)``.
    """
    if original is None:
        return "", None

    try:
        modified = apply_modifications(original, config)
        yaml_text = to_yaml(modified)
    except ModificationError as exc:
        warning(f"No output generated: {exc}")
        return "", None

    try:
        preview = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        error(f"Generated YAML does not parse back: {exc}")
        return yaml_text, None
    if not isinstance(preview, dict):
        error(f"Generated YAML does not parse back to a mapping (got {type(preview).__name__})")
        return yaml_text, None
    return yaml_text, preview


def download_file_name(product: str, version: str) -> str:
    """``<product>-api.<version>.yaml``, with path separators neutralised."""
    safe_version = re.sub(r"[\\/\s]+", "-", version.strip()) or "unversioned"
    return f"{product}-api.{safe_version}.yaml"


def modified_file_name(original_name: str, today: Optional[date] = None) -> str:
    """``<base>-modified-<YYYY-MM-DD>.yaml`` derived from the uploaded file name."""
    base = re.sub(r"\.[^/.]+$", "", original_name)
    stamp = (today or date.today()).isoformat()
    return f"{base or 'openapi'}-modified-{stamp}.yaml"


# ------------------------------------------------------------------ #
# Controller
# ------------------------------------------------------------------ #


class SessionController:
    """Orchestrates load, validation, modification, preview, and download.

    Args:
        settings: Effective configuration (validator endpoint, download
            naming). Defaults to :class:`~specpatch.models.GlobalConfig`.
        validator: Coroutine function called as
            ``validator(document=..., raw_text=..., is_yaml=...)``. Defaults
            to :func:`~specpatch.validator.validate_document` bound to
            ``settings.validator``; ignored when validation is disabled.
        transport: Optional httpx transport for the default validator.
    """

    def __init__(
        self,
        settings: Optional[GlobalConfig] = None,
        validator: Optional[Validator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or GlobalConfig()
        self._validator: Optional[Validator] = None
        if self._settings.validator.enabled:
            self._validator = validator or partial(
                validate_document, self._settings.validator, transport=transport
            )
        self._state = SessionState()
        self._subscribers: list[Subscriber] = []
        self._tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------ #
    # Observation
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call *callback* with every committed state; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def preview_payload(self) -> PreviewPayload:
        return PreviewPayload(
            document=self._state.modified_document,
            validation_result=self._state.validation_result,
        )

    @property
    def current_version(self) -> str:
        """The version the download is named after."""
        if self._state.config.version:
            return self._state.config.version
        original = self._state.original or {}
        info = original.get("info") if isinstance(original.get("info"), dict) else {}
        return str(info.get("version") or "unversioned")

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #

    async def load(self, file_name: str, raw_text: Optional[str]) -> SessionState:
        """Load a new upload and start validating it in the background.

        Never raises for bad input: parse and shape failures end in the
        ``error`` state with the message in both ``error`` and the
        validation result. Must be awaited inside a running event loop;
        use :meth:`wait_for_validation` to wait for the diagnostics.
        """
        self._commit(begin_load(self._state, file_name))
        token = self._state.load_token

        if not raw_text or not raw_text.strip():
            self._commit(fail_load(self._state, EMPTY_FILE_MESSAGE))
            return self._state

        is_yaml = is_yaml_file_name(file_name)
        try:
            document = parse(raw_text, is_yaml)
        except ShapeError as exc:
            debug(f"Shape check failed for {file_name}")
            self._commit(fail_load(self._state, str(exc)))
            return self._state
        except ParseError as exc:
            self._commit(fail_load(self._state, str(exc)))
            return self._state

        self._commit(
            complete_load(self._state, document, is_yaml, validating=self._validator is not None)
        )
        self._recompute()

        if self._validator is not None:
            task = asyncio.create_task(self._validate(token, document, raw_text, is_yaml))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return self._state

    def set_config(self, config: ModificationConfig) -> SessionState:
        """Replace the modification config and regenerate the outputs."""
        self._commit(with_config(self._state, config))
        self._recompute()
        return self._state

    def update_config(self, **changes: Any) -> SessionState:
        """Change individual config fields, e.g. ``update_config(version="2.0")``."""
        data = {**self._state.config.model_dump(), **changes}
        return self.set_config(ModificationConfig.model_validate(data))

    def set_active_tab(self, tab: ActiveTab) -> SessionState:
        self._commit(replace(self._state, active_tab=ActiveTab(tab)))
        return self._state

    def clear(self) -> SessionState:
        self._commit(cleared(self._state))
        return self._state

    def download(
        self, directory: Optional[str | Path] = None, file_name: Optional[str] = None
    ) -> Optional[Download]:
        """Write the current YAML text to disk.

        The file is named ``<product>-api.<version>.yaml`` unless
        *file_name* is given. With no YAML generated yet this only warns.

        Returns:
            The written :class:`Download`, or ``None`` if there was nothing
            to write.
        """
        text = self._state.modified_yaml
        if not text:
            warning("No YAML content to download.")
            return None

        name = file_name or download_file_name(
            self._settings.download.product, self.current_version
        )
        target = Path(directory or self._settings.download.directory) / name
        atomic_write(target, text)
        return Download(path=target, media_type=YAML_MEDIA_TYPE, size=len(text.encode("utf-8")))

    # ------------------------------------------------------------------ #
    # Background validation
    # ------------------------------------------------------------------ #

    async def wait_for_validation(self) -> None:
        """Wait until every validation task started so far has finished."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    async def aclose(self) -> None:
        await self.wait_for_validation()

    async def _validate(
        self, token: int, document: Document, raw_text: str, is_yaml: bool
    ) -> None:
        assert self._validator is not None
        try:
            result = await self._validator(document=document, raw_text=raw_text, is_yaml=is_yaml)
        except Exception as exc:
            warning(f"Schema validation unavailable: {exc}")
            result = ValidationResult.unavailable(f"Schema validation unavailable: {exc}")

        if token != self._state.load_token:
            debug(f"Discarding validation result of superseded load #{token}")
            return
        self._commit(commit_validation(self._state, token, result))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _recompute(self) -> None:
        yaml_text, preview = render_output(self._state.original, self._state.config)
        self._commit(commit_output(self._state, yaml_text, preview))

    def _commit(self, state: SessionState) -> None:
        self._state = state
        for callback in list(self._subscribers):
            callback(state)
