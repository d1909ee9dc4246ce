"""Terminal preview of a (modified) OpenAPI document and its diagnostics.

The session hands the renderer a :class:`PreviewPayload`: the document
re-parsed from the current YAML text plus the current validation result.
Either part may be ``None`` -- no document renders the empty-state prompt,
no validation result renders as "no diagnostics".

Rendering goes through :class:`~specpatch.output.OutputManager`, so the
same preview prints as Rich tables on a terminal, tab-separated rows when
piped, or a single JSON object with ``--json``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from specpatch.models import Document, ValidationResult
from specpatch.output import OutputFormat, OutputManager, get_output

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

EMPTY_STATE_PROMPT = (
    "No specification loaded. Upload a Swagger/OpenAPI file to start editing and previewing."
)


@dataclass(frozen=True)
class PreviewPayload:
    """What the preview renderer receives from the session.

    Attributes:
        document: The document parsed back from the generated YAML, or
            ``None`` when there is nothing to show.
        validation_result: Diagnostics for the uploaded document, or
            ``None`` when no check has completed.
    """

    document: Optional[Document] = None
    validation_result: Optional[ValidationResult] = None


def render_preview(payload: PreviewPayload, output: Optional[OutputManager] = None) -> None:
    """Render the document overview followed by its diagnostics."""
    output = output or get_output()

    if output.format == OutputFormat.JSON:
        validation = (
            payload.validation_result.model_dump(mode="json", by_alias=True)
            if payload.validation_result is not None
            else None
        )
        output.format_response({"document": payload.document, "validation": validation})
        return

    if payload.document is None:
        output.info(EMPTY_STATE_PROMPT)
    else:
        _render_document(payload.document, output)

    render_diagnostics(payload.validation_result, output)


def render_diagnostics(
    result: Optional[ValidationResult], output: Optional[OutputManager] = None
) -> None:
    """Render a validation result as a table of findings.

    Free-text messages are listed with level ``message``; structured
    findings carry their level, keyword, and instance pointer.
    """
    output = output or get_output()

    if result is None:
        output.info("No diagnostics.")
        return
    if not result.available:
        for message in result.messages:
            output.warning(message)
        return
    if result.is_clean:
        output.success("Schema validation passed: no problems found.")
        return

    rows = diagnostic_rows(result)
    output.print_table(
        ["Level", "Keyword", "Pointer", "Message"],
        rows,
        title=f"Diagnostics ({result.error_count} errors, {result.warning_count} warnings)",
    )


def diagnostic_rows(result: ValidationResult) -> list[list[str]]:
    """Flatten a validation result into ``[level, keyword, pointer, message]`` rows."""
    rows = [["message", "-", "-", message] for message in result.messages]
    for finding in result.schema_validation_messages:
        rows.append([
            finding.level,
            finding.keyword or "-",
            finding.instance.pointer or "/",
            finding.message,
        ])
    return rows


def _render_document(document: Document, output: OutputManager) -> None:
    info = document.get("info") if isinstance(document.get("info"), dict) else {}
    dialect = (
        f"OpenAPI {document['openapi']}"
        if document.get("openapi")
        else f"Swagger {document.get('swagger', '?')}"
    )
    servers = document.get("servers") or []
    server_urls = [s.get("url", "") for s in servers if isinstance(s, dict)]
    if not server_urls and document.get("host"):
        server_urls = [f"{document['host']}{document.get('basePath', '')}"]

    operations = list(_operations(document.get("paths")))

    output.print_table(
        ["Field", "Value"],
        [
            ["Title", _text(info.get("title"))],
            ["Version", _text(info.get("version"))],
            ["Spec", dialect],
            ["Servers", ", ".join(server_urls) or "-"],
            ["Operations", str(len(operations))],
        ],
        title=_text(info.get("title")),
    )

    if operations:
        output.print_table(
            ["Method", "Path", "Summary", "Operation ID"],
            [
                [method.upper(), path, _text(op.get("summary")), _text(op.get("operationId"))]
                for path, method, op in operations
            ],
            title=f"Paths ({len(operations)})",
        )

    schemas = _schemas(document)
    if schemas:
        rows: list[list[str]] = []
        for name, schema in schemas.items():
            props = schema.get("properties") if isinstance(schema, dict) else None
            prop_names = list(props) if isinstance(props, dict) else []
            listed = ", ".join(str(p) for p in prop_names[:5])
            if len(prop_names) > 5:
                listed += "..."
            kind = schema.get("type", "object") if isinstance(schema, dict) else "unknown"
            rows.append([str(name), str(kind), listed or "-"])
        output.print_table(["Schema", "Type", "Properties"], rows, title=f"Schemas ({len(rows)})")


def _operations(paths: Any):  # noqa: ANN202
    if not isinstance(paths, dict):
        return
    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        for method in HTTP_METHODS:
            op = item.get(method)
            if isinstance(op, dict):
                yield str(path), method, op


def _schemas(document: Document) -> dict[str, Any]:
    # OpenAPI 3 keeps schemas under components, Swagger 2 under definitions.
    components = document.get("components")
    if isinstance(components, dict) and isinstance(components.get("schemas"), dict):
        return components["schemas"]
    definitions = document.get("definitions")
    return definitions if isinstance(definitions, dict) else {}


def _text(value: Any) -> str:
    return "-" if value is None or value == "" else str(value)
