"""Tests for the REPL loop and completion."""

import io

import pytest
from prompt_toolkit.document import Document

from dotcli.completion import DottedCommandCompleter, complete
from dotcli.parser import tokenize
from dotcli.repl import ALREADY_RUNNING, Repl, ReplState, StreamInput


@pytest.fixture
def repl(app):
    return Repl(app, input_source=StreamInput(io.StringIO("")), writer=lambda text: None)


def run_session(app, script):
    """Run a REPL over ``script`` and return the printed chunks."""
    printed = []
    session = Repl(app, input_source=StreamInput(io.StringIO(script)), writer=printed.append)
    state = session.run()
    return state, printed


class TestLoop:
    """State transitions and per-line behaviour."""

    def test_end_of_input_stops(self, app):
        state, printed = run_session(app, "")
        assert state == ReplState.STOPPED
        assert printed[:2] == ["sample 1.2.3", "Sample CLI"]

    @pytest.mark.parametrize("quit_command", ["quit", "q!", "exit"])
    def test_quit_stops_before_remaining_input(self, app, quit_command):
        state, printed = run_session(app, f"{quit_command}\ngreet bob\n")
        assert state == ReplState.STOPPED
        assert "hello bob" not in printed

    def test_commands_print_and_record(self, app):
        _, printed = run_session(app, "greet bob\nhistory\n")
        assert "hello bob" in printed
        assert "0: greet bob" in printed
        assert app.history.history() == [(0, "greet bob")]

    def test_fault_does_not_stop_loop(self, app):
        state, printed = run_session(app, "dev.boom\ngreet bob\n")
        assert state == ReplState.STOPPED
        assert printed.count("error: dev.boom: kaboom") == 1
        assert "hello bob" in printed

    def test_interactive_flag(self, app):
        _, printed = run_session(app, "status\n")
        assert any("Interactive" in chunk and "yes" in chunk for chunk in printed)
        assert app.interactive is False

    def test_repl_inside_repl(self, repl):
        assert repl.step("repl") == ALREADY_RUNNING

    def test_blank_line(self, repl, app):
        assert repl.step("   ") is None
        assert app.history.length() == 0

    def test_question_mark_is_help(self, repl, app):
        assert repl.step("?") == app.run(["help"])

    def test_prompt_shows_history_length(self, repl):
        assert repl.prompt() == "\nsmp 0 > "
        repl.step("greet bob")
        assert repl.prompt() == "\nsmp 1 > "

    def test_state_returns_to_running(self, repl):
        repl.step("greet bob")
        assert repl.state == ReplState.RUNNING


class TestDispatchEquivalence:
    """A line prints the same in the REPL and as a one-shot command."""

    @pytest.mark.parametrize(
        "line",
        ["greet bob", "greet 'big bob' -s", "nope", "dev.boom", "dev.report", "help greet", "--version", "dev"],
    )
    def test_same_output(self, repl, app, line):
        assert repl.step(line) == app.run(tokenize(line))


class TestHistoryRecording:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("greet bob", True),
            ("nope", True),
            ("history", False),
            ("redo 1", False),
            ("flush", False),
            ("help greet", False),
            ("cli.history", False),
            ("quit", False),
            ("tab dev.", False),
            ("", False),
        ],
    )
    def test_should_push(self, line, expected):
        assert Repl.should_push(line) is expected

    def test_redo_reruns_without_recording(self, repl, app):
        repl.step("greet bob")
        assert repl.step("redo 0") == "hello bob"
        assert app.history.history() == [(0, "greet bob")]

    def test_redo_invalid_index(self, repl):
        assert repl.step("redo 999") == "error: invalid command index: 999"

    def test_flush_clears(self, repl, app):
        repl.step("greet bob")
        assert repl.step("flush") == "✓ History cleared"
        assert app.history.length() == 0


class TestCompletion:
    """Dotted name completion."""

    NAMES = ["greet", "dev.boom", "dev.report", "dev.net.ping", "sys.info"]

    def test_empty_prefix_returns_all(self):
        assert complete("", self.NAMES) == sorted(self.NAMES)

    def test_plain_prefix(self):
        assert complete("de", self.NAMES) == ["dev.boom", "dev.net.ping", "dev.report"]

    def test_namespace_prefix_is_exact(self):
        assert complete("dev.", self.NAMES) == ["dev.boom", "dev.report"]
        assert complete("dev.net.", self.NAMES) == ["dev.net.ping"]

    def test_no_match(self):
        assert complete("zz", self.NAMES) == []

    def test_tab_pseudo_command(self, repl, app):
        assert repl.step("tab").splitlines() == sorted(app.schema.names())
        assert repl.step("tab dev.") == "dev.boom\ndev.report"

    def test_trailing_tab_trigger(self, repl, app):
        assert repl.step("dev.\t") == "dev.boom\ndev.report"
        assert app.history.length() == 0

    def test_prompt_toolkit_completer(self):
        completer = DottedCommandCompleter(lambda: self.NAMES)
        found = [c.text for c in completer.get_completions(Document("dev.n"), None)]
        assert found == ["dev.net.ping"]

    def test_completer_ignores_arguments(self):
        completer = DottedCommandCompleter(lambda: self.NAMES)
        assert list(completer.get_completions(Document("greet b"), None)) == []
