"""Integration tests for the specpatch command line.

Drives the real Typer application through CliRunner with configuration
isolated under tmp_path. Remote validation is either disabled with
``--no-validate`` or replaced by monkeypatching the coroutine the command
awaits, so no test touches the network.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest
import yaml
from typer.testing import CliRunner

from specpatch import __version__
from specpatch.app import app
from specpatch.exceptions import ValidationServiceError
from specpatch.models import ValidationResult

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
PETSTORE = str(FIXTURES_DIR / "petstore_3.0.json")
STORE_HOURS = str(FIXTURES_DIR / "store_hours.yaml")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _fake_validator(monkeypatch: pytest.MonkeyPatch, outcome: Any) -> list[dict[str, Any]]:
    """Replace the validate command's remote call with a canned *outcome*."""
    calls: list[dict[str, Any]] = []

    async def fake(settings, document, raw_text, is_yaml):  # noqa: ANN001, ANN202
        calls.append({"url": settings.url, "is_yaml": is_yaml})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr("specpatch.commands.validate._validate", fake)
    return calls


# ---------------------------------------------------------------------------
# Root options
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specpatch {__version__}" in result.output

    def test_no_args_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, [])
        assert "fix" in result.output
        assert "validate" in result.output


# ---------------------------------------------------------------------------
# fix
# ---------------------------------------------------------------------------


class TestFix:
    def test_writes_download(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(
            app,
            ["--no-validate", "fix", STORE_HOURS, "--set-version", "2211.16.0", "--time-fix"],
        )
        assert result.exit_code == 0, result.output

        written = isolated_config / "openapi-api.2211.16.0.yaml"
        assert written.is_file()
        doc = yaml.safe_load(written.read_text(encoding="utf-8"))
        assert doc["info"]["version"] == "2211.16.0"
        assert doc["components"]["schemas"]["Time"]["properties"]["minute"] == {
            "type": "integer",
            "format": "int32",
        }
        assert "Wrote" in result.output
        assert "text/yaml" in result.output

    def test_default_version_keeps_original(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-validate", "fix", PETSTORE])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "openapi-api.1.0.0.yaml").is_file()

    def test_product_and_output_dir(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(
            app, ["--no-validate", "fix", PETSTORE, "--product", "pets", "-o", "build"]
        )
        assert result.exit_code == 0, result.output
        assert (isolated_config / "build" / "pets-api.1.0.0.yaml").is_file()

    def test_product_from_project_config(self, runner: CliRunner, isolated_config: Path) -> None:
        (isolated_config / "specpatch.json").write_text(
            json.dumps({"download": {"product": "shop"}}), encoding="utf-8"
        )
        result = runner.invoke(app, ["--no-validate", "fix", PETSTORE])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "shop-api.1.0.0.yaml").is_file()

    def test_keep_name(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-validate", "fix", STORE_HOURS, "--keep-name"])
        assert result.exit_code == 0, result.output
        expected = f"store_hours-modified-{date.today().isoformat()}.yaml"
        assert (isolated_config / expected).is_file()

    def test_stdout(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(
            app, ["--quiet", "--no-validate", "fix", PETSTORE, "--set-version", "3.0.0", "--stdout"]
        )
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.stdout)["info"]["version"] == "3.0.0"
        assert list(isolated_config.glob("*.yaml")) == []

    def test_stdin_yaml(self, runner: CliRunner, isolated_config: Path) -> None:
        text = Path(STORE_HOURS).read_text(encoding="utf-8")
        result = runner.invoke(
            app, ["--quiet", "--no-validate", "fix", "-", "--yaml", "--stdout"], input=text
        )
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.stdout)["info"]["title"] == "Store Hours API"

    def test_missing_time_schema_warns(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-validate", "fix", PETSTORE, "--time-fix"])
        assert result.exit_code == 0, result.output
        assert "'Time' schema not found in components/schemas." in result.output

    def test_malformed_input(self, runner: CliRunner, isolated_config: Path) -> None:
        broken = isolated_config / "broken.json"
        broken.write_text("{nope", encoding="utf-8")
        result = runner.invoke(app, ["--no-validate", "fix", str(broken)])
        assert result.exit_code == 7
        assert "Failed to parse JSON" in result.output

    def test_not_openapi(self, runner: CliRunner, isolated_config: Path) -> None:
        other = isolated_config / "other.yaml"
        other.write_text("title: not an api\n", encoding="utf-8")
        result = runner.invoke(app, ["--no-validate", "fix", str(other)])
        assert result.exit_code == 7
        assert 'Missing "openapi" or "swagger" property' in result.output

    def test_empty_file(self, runner: CliRunner, isolated_config: Path) -> None:
        empty = isolated_config / "empty.json"
        empty.write_text("", encoding="utf-8")
        result = runner.invoke(app, ["--no-validate", "fix", str(empty)])
        assert result.exit_code == 7
        assert "Failed to read file or file was empty." in result.output

    def test_missing_file(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-validate", "fix", "nowhere.json"])
        assert result.exit_code == 7
        assert "Spec file not found" in result.output


# ---------------------------------------------------------------------------
# preview
# ---------------------------------------------------------------------------


class TestPreview:
    def test_plain_preview(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-validate", "preview", STORE_HOURS, "--set-version", "9"])
        assert result.exit_code == 0, result.output
        assert "Title\tStore Hours API" in result.output
        assert "Version\t9" in result.output
        assert "GET\t/{baseSiteId}/stores/{storeName}/hours" in result.output

    def test_json_preview(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(
            app, ["--json", "--quiet", "--no-validate", "preview", STORE_HOURS, "--time-fix"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        hour = data["document"]["components"]["schemas"]["Time"]["properties"]["hour"]
        assert hour["type"] == "integer"
        assert data["validation"] is None

    def test_error_preview(self, runner: CliRunner, isolated_config: Path) -> None:
        broken = isolated_config / "broken.yaml"
        broken.write_text("openapi: [", encoding="utf-8")
        result = runner.invoke(app, ["--no-validate", "preview", str(broken)])
        assert result.exit_code == 7
        assert "Failed to parse YAML" in result.output


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


class TestValidate:
    def test_clean(
        self, runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = _fake_validator(monkeypatch, ValidationResult())
        result = runner.invoke(app, ["validate", STORE_HOURS])
        assert result.exit_code == 0, result.output
        assert "Schema validation passed" in result.output
        assert calls == [{"url": "https://validator.swagger.io/validator/debug", "is_yaml": True}]

    def test_errors_exit_8(
        self,
        runner: CliRunner,
        isolated_config: Path,
        monkeypatch: pytest.MonkeyPatch,
        validator_payload: dict[str, Any],
    ) -> None:
        _fake_validator(monkeypatch, ValidationResult.model_validate(validator_payload))
        result = runner.invoke(app, ["validate", PETSTORE])
        assert result.exit_code == 8
        assert "required" in result.output

    def test_validator_url_option(
        self, runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = _fake_validator(monkeypatch, ValidationResult())
        result = runner.invoke(
            app, ["--validator-url", "http://localhost:8080/validator/debug", "validate", PETSTORE]
        )
        assert result.exit_code == 0, result.output
        assert calls[0] == {"url": "http://localhost:8080/validator/debug", "is_yaml": False}

    def test_service_failure_exit_6(
        self, runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _fake_validator(
            monkeypatch,
            ValidationServiceError("Validation API request failed: HTTP 503", status_code=503),
        )
        result = runner.invoke(app, ["validate", PETSTORE])
        assert result.exit_code == 6
        assert "HTTP 503" in result.output

    def test_disabled_exit_2(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-validate", "validate", PETSTORE])
        assert result.exit_code == 2

    def test_parse_failure_exit_7(
        self, runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = _fake_validator(monkeypatch, ValidationResult())
        broken = isolated_config / "broken.json"
        broken.write_text("[]", encoding="utf-8")
        result = runner.invoke(app, ["validate", str(broken)])
        assert result.exit_code == 7
        assert calls == []


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show_json(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["validator"]["timeout"] == 20.0
        assert data["download"]["product"] == "openapi"

    def test_set_and_show(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "validator.timeout", "45"])
        assert result.exit_code == 0, result.output

        saved = json.loads(
            (isolated_config / "config" / "specpatch" / "config.json").read_text(encoding="utf-8")
        )
        assert saved["validator"]["timeout"] == 45.0

    def test_set_bool(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "validator.enabled", "false"])
        assert result.exit_code == 0, result.output
        result = runner.invoke(app, ["validate", PETSTORE])
        assert result.exit_code == 2

    def test_set_unknown_key(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "validator.retries", "3"])
        assert result.exit_code == 2
        assert "Unknown config key" in result.output

    def test_set_out_of_range(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "validator.timeout", "500"])
        assert result.exit_code == 2

    def test_reset(self, runner: CliRunner, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "download.product", "shop"])
        result = runner.invoke(app, ["config", "reset", "--force"])
        assert result.exit_code == 0, result.output
        saved = json.loads(
            (isolated_config / "config" / "specpatch" / "config.json").read_text(encoding="utf-8")
        )
        assert saved["download"]["product"] == "openapi"
