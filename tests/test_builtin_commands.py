"""Tests for the commands every dotcli application ships with."""

import json
import sys

import pytest

from dotcli.app import CliApp
from dotcli.settings_store import SettingsStore

from .conftest import SampleConfigurator


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings.yaml")


@pytest.fixture
def app_with_settings(configurators, history, plain_output, store):
    cli = CliApp(configurators, settings_store=store, history=history, output=plain_output)
    yield cli
    cli.close()


class TestHistoryCommands:
    def test_history_empty(self, app):
        assert app.run(["history"]) == "history is empty"

    def test_history_lists_entries(self, app):
        for line in ["greet a", "greet b"]:
            app.history.push(line)
        assert app.run(["history"]) == "0: greet a\n1: greet b"

    def test_flush(self, app):
        app.history.push("greet a")
        assert app.run(["flush"]) == "✓ History cleared"
        assert app.history.length() == 0

    def test_redo(self, app):
        app.history.push("greet a")
        assert app.run(["redo", "0"]) == "hello a"


class TestInfoCommands:
    def test_about(self, app):
        assert app.run(["about"]) == "sample 1.2.3\nSample CLI"

    def test_sys_info(self, app):
        out = app.run(["sys.info"])
        assert "Python" in out
        assert "sample 1.2.3" in out

    def test_status(self, app):
        app.history.push("greet a")
        out = app.run(["status"])
        assert "History entries" in out
        assert "(none)" in out

    def test_repl_command_when_interactive(self, app):
        app.interactive = True
        assert app.run(["repl"]) == "The repl is already running."


class TestSettingsCommands:
    def test_get_nested(self, app_with_settings, store):
        store.save({"ui": {"theme": "dark"}})
        assert app_with_settings.run(["settings.get", "ui.theme"]) == "dark"

    def test_get_missing(self, app_with_settings):
        assert app_with_settings.run(["settings.get", "nope"]) == "error: setting not found: nope"

    def test_get_without_key_shows_help(self, app_with_settings):
        assert app_with_settings.run(["settings.get"]).startswith("Usage: sample settings.get")

    def test_all(self, app_with_settings, store):
        store.save({"ui": {"theme": "dark"}, "count": 3})
        out = app_with_settings.run(["settings", "all"])
        assert "ui.theme" in out
        assert "dark" in out
        assert "count" in out

    def test_style_setting_selects_renderer(self, app_with_settings, store):
        store.save({"style": "json"})
        payload = json.loads(app_with_settings.run(["flush"]))
        assert payload["command"] == "flush"
        assert payload["output"][0]["message"] == "History cleared"


class TestSysCmd:
    def test_runs_program(self, app):
        assert app.run(["sys.cmd", sys.executable, "-c", "print('hi')"]) == "hi"

    def test_failing_program(self, app):
        out = app.run(["sys.cmd", sys.executable, "-c", "import sys; sys.exit(3)"])
        assert out.startswith("✗ ")
        assert "exit status 3" in out

    def test_missing_program(self, app):
        out = app.run(["sys.cmd", "definitely-not-a-program-dotcli"])
        assert out.startswith("error: cannot run definitely-not-a-program-dotcli")


class TestScriptCommand:
    """cli.script runs a file line by line."""

    def test_runs_lines_and_skips_comments(self, app, tmp_path):
        script = tmp_path / "setup.cli"
        script.write_text("# prepare\n\ngreet bob\n  dev.boom\nabout\n", encoding="utf-8")
        assert app.run(["cli.script", str(script)]) == "\n".join(
            [
                "script> greet bob",
                "hello bob",
                "script> dev.boom",
                "error: dev.boom: kaboom",
                "script> about",
                "sample 1.2.3",
                "Sample CLI",
            ]
        )

    def test_script_lines_not_recorded(self, app, tmp_path):
        script = tmp_path / "one.cli"
        script.write_text("greet bob\n", encoding="utf-8")
        app.run(["cli.script", str(script)])
        assert app.history.length() == 0

    def test_missing_file(self, app, tmp_path):
        out = app.run(["cli.script", str(tmp_path / "absent.cli")])
        assert out.startswith("error: cannot read script ")

    def test_without_file_shows_help(self, app):
        assert app.run(["cli", "script"]).startswith("Usage: sample cli.script")


class TestDebugCommand:
    def test_toggle_is_saved(self, app_with_settings, store):
        assert app_with_settings.run(["cli.debug"]) == "Debug mode is currently OFF"
        assert app_with_settings.run(["cli.debug", "on"]) == "Debug mode is now ON"
        assert store.load()["debug_mode"] is True
        assert app_with_settings.debug is True
        assert "Traceback" in app_with_settings.run(["dev.boom"])

        assert app_with_settings.run(["cli.debug", "off"]) == "Debug mode is now OFF"
        assert store.load()["debug_mode"] is False
        assert app_with_settings.run(["dev.boom"]) == "error: dev.boom: kaboom"

    def test_reads_saved_setting(self, app_with_settings, store):
        store.save({"debug_mode": True})
        assert app_with_settings.run(["cli.debug"]) == "Debug mode is currently ON"

    def test_without_settings_store(self, app):
        assert app.run(["cli.debug", "ON"]) == "Debug mode is now ON"
        assert app.debug is True

    def test_invalid_value(self, app):
        assert app.run(["cli.debug", "maybe"]) == "error: invalid value 'maybe', use 'on' or 'off'"


class TestWithoutDefaults:
    def test_builtins_absent(self, history, plain_output):
        cli = CliApp([SampleConfigurator()], history=history, output=plain_output)
        assert cli.run(["history"]) == "error: unknown command: history"
