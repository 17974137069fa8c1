"""Interactive read-eval-print loop.

Lines go through the same dispatcher as the one-shot entry point, so a
command prints the same thing in both modes. On a terminal, input comes from
a prompt_toolkit session with dotted-name completion; otherwise lines are
read from a plain stream.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Callable, List, Optional, TextIO

import click
from prompt_toolkit import PromptSession

from .app import CliApp
from .completion import DottedCommandCompleter, complete
from .dispatcher import Resolution

logger = logging.getLogger(__name__)

QUIT_COMMANDS = frozenset({"quit", "q!", "exit"})
# Meta commands that are not recorded in history
NON_HISTORY_COMMANDS = frozenset({"history", "redo", "flush", "help"})
TAB_COMMAND = "tab"
TAB_TRIGGER = "\t"
ALREADY_RUNNING = "The repl is already running."


class ReplState(str, Enum):
    RUNNING = "running"
    DISPATCHING = "dispatching"
    STOPPED = "stopped"


class StreamInput:
    """Reads lines from a text stream; returns None at end of input."""

    def __init__(self, stream: TextIO, echo: bool = False):
        self.stream = stream
        self.echo = echo

    def read(self, prompt: str) -> Optional[str]:
        if self.echo:
            click.echo(prompt, nl=False)
        line = self.stream.readline()
        if line == "":
            return None
        # keep a trailing tab, it asks for completion
        return line.rstrip("\r\n")


class PromptInput:
    """prompt_toolkit input with tab completion on command names."""

    def __init__(self, names: Callable[[], List[str]]):
        self.session = PromptSession(completer=DottedCommandCompleter(names), complete_while_typing=False)

    def read(self, prompt: str) -> Optional[str]:
        try:
            return self.session.prompt(prompt)
        except EOFError:
            return None
        except KeyboardInterrupt:
            return ""


def default_input(app: CliApp):
    if sys.stdin.isatty():
        return PromptInput(app.schema.names)
    return StreamInput(sys.stdin)


class Repl:
    """REPL state machine: RUNNING -> DISPATCHING -> RUNNING ... -> STOPPED."""

    def __init__(self, app: CliApp, input_source=None, writer: Optional[Callable[[str], None]] = None):
        self.app = app
        self.input = input_source or default_input(app)
        self.writer = writer or click.echo
        self.state = ReplState.STOPPED

    def prompt(self) -> str:
        symbol = self.app.metadata.prompt_symbol or ">"
        return f"\n{symbol} {self.app.history.length()} > "

    def complete(self, prefix: str) -> List[str]:
        return complete(prefix, self.app.schema.names())

    @staticmethod
    def should_push(line: str) -> bool:
        words = line.split()
        if not words:
            return False
        head = words[0]
        if head in QUIT_COMMANDS or head in ("?", TAB_COMMAND) or line.endswith(TAB_TRIGGER):
            return False
        return head.rpartition(".")[2] not in NON_HISTORY_COMMANDS

    def run(self) -> ReplState:
        """Loop until a quit command or end of input."""
        self.state = ReplState.RUNNING
        previous, self.app.interactive = self.app.interactive, True
        for line in self.app.intro():
            self.writer(line)
        try:
            while self.state != ReplState.STOPPED:
                line = self.input.read(self.prompt())
                if line is None:
                    logger.debug("input exhausted, leaving repl")
                    self.state = ReplState.STOPPED
                    break
                output = self.step(line)
                if output:
                    self.writer(output)
        finally:
            self.app.interactive = previous
        return self.state

    def step(self, line: str) -> Optional[str]:
        """Handle one input line and return what should be printed."""
        text = line.strip()
        if not text:
            return None
        if text in QUIT_COMMANDS:
            self.state = ReplState.STOPPED
            return None
        if text == TAB_COMMAND or text.startswith(TAB_COMMAND + " ") or line.endswith(TAB_TRIGGER):
            return "\n".join(self.complete(self._completion_prefix(line)))
        if text == "repl":
            return ALREADY_RUNNING
        if text == "?":
            text = "help"

        self.state = ReplState.DISPATCHING
        try:
            resolution: Resolution = self.app.execute_line(text)
            if self.should_push(text):
                self.app.history.push(text)
            return self.app.render(resolution)
        finally:
            if self.state == ReplState.DISPATCHING:
                self.state = ReplState.RUNNING

    @staticmethod
    def _completion_prefix(line: str) -> str:
        text = line.rstrip(TAB_TRIGGER).strip()
        if text == TAB_COMMAND:
            return ""
        if text.startswith(TAB_COMMAND + " "):
            return text[len(TAB_COMMAND) + 1:].strip()
        return text
