# tests/unit/testing/test_chaossurface_cli.py
"""Tests for the chaossurface CLI commands."""

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from retarget.testing.chaossurface.cli import app

runner = CliRunner()


class TestPresetsCommand:
    def test_lists_presets(self) -> None:
        result = runner.invoke(app, ["presets"])

        assert result.exit_code == 0
        assert "flaky" in result.output
        assert "gentle" in result.output
        assert "stale_listing" in result.output


class TestShowConfigCommand:
    def test_yaml_default(self) -> None:
        result = runner.invoke(app, ["show-config", "--preset", "gentle"])

        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["preset_name"] == "gentle"
        assert data["rates"]["editor_opens_late_pct"] == 5

    def test_json_format(self) -> None:
        result = runner.invoke(app, ["show-config", "--preset", "stale_listing", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["diverged_value"] == "edited-by-someone-else.example"

    def test_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "surface.yaml"
        config_file.write_text("records: [a.example]\nfaults:\n  1: [save_disabled]\n")

        result = runner.invoke(app, ["show-config", "--config", str(config_file), "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["faults"] == {"1": ["save_disabled"]}

    def test_unknown_preset(self) -> None:
        result = runner.invoke(app, ["show-config", "--preset", "nope"])

        assert result.exit_code == 1

    def test_invalid_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "surface.yaml"
        config_file.write_text("rates:\n  field_missing_pct: 500\n")

        result = runner.invoke(app, ["show-config", "--config", str(config_file)])

        assert result.exit_code == 1
