"""Integration tests for CLI commands."""

import json
from pathlib import Path

from typer.testing import CliRunner

from sourcelens import __version__
from sourcelens import config_manager
from sourcelens.cli import app

runner = CliRunner()

FORM = "src/components/Form.jsx"


class TestDetectCommand:
    def test_detect_json(self, react_app: Path):
        result = runner.invoke(app, ["detect", "-w", str(react_app), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["framework"] == "react"
        assert payload["version"] == "^18.2.0"

    def test_detect_text(self, react_app: Path):
        result = runner.invoke(app, ["detect", "-w", str(react_app)])

        assert result.exit_code == 0
        assert "react" in result.stdout

    def test_missing_workspace(self):
        result = runner.invoke(app, ["detect", "-w", "/nonexistent/path"])

        assert result.exit_code != 0

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestResolveCommand:
    def test_resolve_json(self, react_app: Path):
        result = runner.invoke(
            app, ["resolve", "-w", str(react_app), "--tag", "button", "--id", "submit-btn", "--json"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["line_number"] == 9
        assert payload["component_name"] == "Form"

    def test_resolve_from_descriptor_file(self, react_app: Path, temp_dir: Path):
        descriptor = temp_dir / "element.json"
        descriptor.write_text(json.dumps({"tagName": "H1", "textContent": "{title}"}), encoding="utf-8")

        result = runner.invoke(app, ["resolve", "-w", str(react_app), "-d", str(descriptor), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["component_name"] == "Header"

    def test_resolve_not_found(self, react_app: Path):
        result = runner.invoke(app, ["resolve", "-w", str(react_app), "--tag", "marquee"])

        assert result.exit_code == 1
        assert "Could not locate" in result.stdout

    def test_resolve_requires_tag(self, react_app: Path):
        result = runner.invoke(app, ["resolve", "-w", str(react_app)])

        assert result.exit_code != 0


class TestHierarchyAndSearch:
    def test_hierarchy_json(self, react_app: Path):
        result = runner.invoke(app, ["hierarchy", "-w", str(react_app), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["component_name"] == "App"
        assert [c["component_name"] for c in payload["children"]] == ["Header", "Form"]

    def test_hierarchy_tree(self, react_app: Path):
        result = runner.invoke(app, ["hierarchy", "-w", str(react_app)])

        assert result.exit_code == 0
        assert "Header" in result.stdout

    def test_search(self, react_app: Path):
        result = runner.invoke(app, ["search", "Head", "-w", str(react_app), "--json"])

        assert result.exit_code == 0
        assert [m["component_name"] for m in json.loads(result.stdout)] == ["Header"]

    def test_search_no_results(self, react_app: Path):
        result = runner.invoke(app, ["search", "zzz", "-w", str(react_app)])

        assert result.exit_code == 0
        assert "No components" in result.stdout


class TestApplyRollbackHistory:
    def test_apply_with_explicit_location(self, react_app: Path):
        result = runner.invoke(app, [
            "apply", "-w", str(react_app),
            "--file", FORM, "--line", "9", "--tag", "button",
            "--style", "color=#ff0000",
        ])

        assert result.exit_code == 0
        assert "style={{ color: '#ff0000' }}" in (react_app / FORM).read_text(encoding="utf-8")

    def test_apply_resolves_location(self, react_app: Path):
        result = runner.invoke(app, [
            "apply", "-w", str(react_app), "--tag", "button", "--id", "submit-btn",
            "--style", "margin-top=4px", "--json",
        ])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["applied_styles"] == {"margin-top": "4px"}

    def test_apply_failure_exit_code(self, react_app: Path):
        result = runner.invoke(app, [
            "apply", "-w", str(react_app), "--file", FORM, "--line", "500",
            "--tag", "button", "--style", "color=red",
        ])

        assert result.exit_code == 1
        assert "out-of-range-line" in result.stdout

    def test_apply_rejects_bad_style(self, react_app: Path):
        result = runner.invoke(app, [
            "apply", "-w", str(react_app), "--file", FORM, "--line", "9", "--style", "color",
        ])

        assert result.exit_code != 0

    def test_history_and_rollback(self, react_app: Path):
        original = (react_app / FORM).read_bytes()
        runner.invoke(app, [
            "apply", "-w", str(react_app), "--file", FORM, "--line", "9",
            "--tag", "button", "--style", "color=red",
        ])

        history = runner.invoke(app, ["history", FORM, "-w", str(react_app), "--json"])
        assert history.exit_code == 0
        entries = json.loads(history.stdout)
        assert len(entries) == 1

        rollback = runner.invoke(app, ["rollback", FORM, "-w", str(react_app)])
        assert rollback.exit_code == 0
        assert (react_app / FORM).read_bytes() == original

    def test_rollback_without_backup(self, react_app: Path):
        result = runner.invoke(app, ["rollback", FORM, "-w", str(react_app)])

        assert result.exit_code == 1


class TestConfigCommands:
    def test_set_and_show(self, react_app: Path):
        result = runner.invoke(app, ["config", "set", "modification", "max_backups", "4"])
        assert result.exit_code == 0

        shown = runner.invoke(app, ["config", "show", "-w", str(react_app)])
        assert shown.exit_code == 0
        assert "max_backups" in shown.stdout
        _, modification = config_manager.load_config(react_app)
        assert modification.max_backups == 4

    def test_set_rejects_invalid_choice(self):
        result = runner.invoke(app, ["config", "set", "resolution", "search_mode", "random"])

        assert result.exit_code != 0

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "resolution", "colour", "blue"])

        assert result.exit_code != 0
