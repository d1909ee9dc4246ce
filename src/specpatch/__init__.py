"""specpatch -- patch, preview, and validate OpenAPI/Swagger documents.

This package loads an OpenAPI (or Swagger 2.0) document from JSON or YAML,
applies a small set of configuration-driven edits, serialises the result as
canonical YAML, and checks the uploaded document against a remote schema
validation service.

Typical workflow::

    specpatch fix api.yaml --set-version 2.1.0 --time-fix
    specpatch validate api.json

Modules:
    app: Typer application and CLI entry point.
    session: Session state machine orchestrating the whole pipeline.
    parser: Document parsing and minimal shape validation.
    engine: Pure, idempotent document transformations.
    serializer: Deterministic YAML/JSON serialisation.
    validator: Async client for the remote schema validation service.
    preview: Terminal rendering of the modified document and diagnostics.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
