"""Tests for settings, environment signals and logging setup."""

import logging

import pytest
from pythonjsonlogger import jsonlogger

from dotcli.app import CliApp
from dotcli.errors import SettingsError
from dotcli.logging_config import configure_logging
from dotcli.settings import AppSettings, OutputSignals, OutputStyle
from dotcli.settings_store import SettingsStore, lookup


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "nested" / "settings.yaml")


class TestSettingsStore:
    def test_missing_file_is_empty(self, store):
        assert store.load() == {}

    def test_save_merges(self, store):
        store.save({"a": 1})
        merged = store.save({"b": {"c": 2}})
        assert merged == {"a": 1, "b": {"c": 2}}
        assert store.load() == merged
        assert store.get("b.c") == 2

    def test_invalid_yaml(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(SettingsError):
            store.load()

    def test_invalid_encoding(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(b"style: \xff\xfe plain\n")
        with pytest.raises(SettingsError):
            store.load()

    def test_app_runs_with_undecodable_settings(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(b"style: \xff\xfe plain\n")
        app = CliApp(settings_store=store)
        try:
            assert app.run_line("cli.debug") == "Debug mode is currently OFF"
        finally:
            app.close()

    def test_non_mapping(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(SettingsError) as exc_info:
            store.load()
        assert "mapping" in exc_info.value.message

    def test_app_ignores_broken_settings(self, store, caplog):
        caplog.set_level(logging.WARNING, logger="dotcli.app")
        store.path.parent.mkdir(parents=True)
        store.path.write_text("a: [unclosed\n", encoding="utf-8")
        app = CliApp([], settings_store=store)
        try:
            assert app.load_settings() == {}
        finally:
            app.close()
        assert any("Ignoring settings" in r.getMessage() for r in caplog.records)


class TestLookup:
    def test_nested(self):
        assert lookup({"a": {"b": {"c": 1}}}, "a.b.c") == 1

    def test_literal_dotted_key_wins(self):
        assert lookup({"a.b": "literal", "a": {"b": "nested"}}, "a.b") == "literal"

    def test_default(self):
        assert lookup({"a": 1}, "a.b", "fallback") == "fallback"


class TestAppSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DOTCLI_LOG_LEVEL", "DOTCLI_LOG_FORMAT", "DOTCLI_HELP_WIDTH"):
            monkeypatch.delenv(name, raising=False)
        settings = AppSettings()
        assert settings.log_level == "WARNING"
        assert settings.log_format == "text"
        assert settings.help_width == 80

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOTCLI_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DOTCLI_SETTINGS_FILE", str(tmp_path / "s.yaml"))
        settings = AppSettings()
        assert settings.log_level == "DEBUG"
        assert settings.settings_file == tmp_path / "s.yaml"


class TestOutputSignals:
    @pytest.mark.parametrize("value, expected", [("1", True), ("yes", True), ("", False), ("0", False), ("false", False)])
    def test_no_color(self, monkeypatch, value, expected):
        monkeypatch.setenv("NO_COLOR", value)
        assert OutputSignals().no_color is expected

    @pytest.mark.parametrize("value, expected", [("plain", OutputStyle.PLAIN), ("RICH", OutputStyle.RICH), ("bogus", None)])
    def test_style(self, monkeypatch, value, expected):
        monkeypatch.setenv("DOTCLI_STYLE", value)
        assert OutputSignals().style is expected

    def test_construct_by_name(self, monkeypatch):
        monkeypatch.delenv("DOTCLI_TEST_MODE", raising=False)
        assert OutputSignals(test_mode=True).test_mode is True


class TestConfigureLogging:
    def test_json_format(self, restore_root_logging):
        handler = configure_logging("debug", "json")
        assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
        assert restore_root_logging.handlers == [handler]
        assert restore_root_logging.level == logging.DEBUG

    def test_text_format_and_unknown_level(self, restore_root_logging):
        handler = configure_logging("nonsense", "text")
        assert not isinstance(handler.formatter, jsonlogger.JsonFormatter)
        assert restore_root_logging.level == logging.WARNING
