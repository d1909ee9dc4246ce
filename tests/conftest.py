"""Shared test fixtures for specpatch.

Provides reusable fixtures for loading spec fixtures, building validator
responses, creating isolated config environments, and managing output
state. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
import yaml

from specpatch.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation, so a
    stale manager would write to closed files.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output(capsys: pytest.CaptureFixture[str]) -> OutputManager:
    """Install an uncoloured PLAIN OutputManager whose stderr lines capsys sees."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_text() -> str:
    return (FIXTURES_DIR / "petstore_3.0.json").read_text(encoding="utf-8")


@pytest.fixture
def petstore_doc(petstore_text: str) -> dict[str, Any]:
    return json.loads(petstore_text)


@pytest.fixture
def store_hours_text() -> str:
    return (FIXTURES_DIR / "store_hours.yaml").read_text(encoding="utf-8")


@pytest.fixture
def store_hours_doc(store_hours_text: str) -> dict[str, Any]:
    return yaml.safe_load(store_hours_text)


@pytest.fixture
def swagger_text() -> str:
    return (FIXTURES_DIR / "swagger_2.0.json").read_text(encoding="utf-8")


@pytest.fixture
def time_doc() -> dict[str, Any]:
    """Minimal document carrying the Time schema the time-object fix targets."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Clock", "version": "1.0.0"},
        "paths": {},
        "components": {
            "schemas": {
                "Time": {
                    "type": "object",
                    "properties": {
                        "hour": {"type": "string", "description": "h"},
                        "minute": {"type": "string"},
                    },
                }
            }
        },
    }


# ---------------------------------------------------------------------------
# Validator responses
# ---------------------------------------------------------------------------


VALIDATOR_PAYLOAD: dict[str, Any] = {
    "messages": ["attribute paths.'/pets'(get).responses is missing"],
    "schemaValidationMessages": [
        {
            "level": "error",
            "domain": "validation",
            "keyword": "required",
            "message": "object has missing required properties ([\"responses\"])",
            "schema": {"loadingURI": "#", "pointer": "/definitions/operation"},
            "instance": {"pointer": "/paths/~1pets/get"},
        },
        {
            "level": "warning",
            "domain": "validation",
            "keyword": "additionalProperties",
            "message": "unexpected property",
            "schema": {"loadingURI": "#", "pointer": "/definitions/info"},
            "instance": {"pointer": "/info"},
        },
    ],
}


@pytest.fixture
def validator_payload() -> dict[str, Any]:
    return json.loads(json.dumps(VALIDATOR_PAYLOAD))


@pytest.fixture
def mock_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for MockTransports that record the requests they receive.

    Usage::

        transport = mock_transport(json={"messages": []})
        transport.requests  # list of httpx.Request
    """

    def _factory(status_code: int = 200, json: Any = None, **kwargs: Any) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if json is not None:
                return httpx.Response(status_code, json=json)
            return httpx.Response(status_code, **kwargs)

        transport = httpx.MockTransport(handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return _factory


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME below tmp_path, forces the
    XDG layout, clears every SPECPATCH_* variable, and changes the working
    directory to tmp_path.
    """
    monkeypatch.setattr("specpatch.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SPECPATCH_VALIDATOR_URL",
        "SPECPATCH_VALIDATOR_TIMEOUT",
        "SPECPATCH_NO_VALIDATE",
        "SPECPATCH_PRODUCT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
