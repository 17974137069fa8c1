"""Error types for dotcli and the one-line ``error:`` form shown to users."""

from __future__ import annotations

from typing import Optional, Sequence

import click


def format_error(message: str, command: Optional[str] = None) -> str:
    """Build the single user-visible error line.

    ``format_error("boom", "sys.info")`` gives ``"error: sys.info: boom"``,
    without a command it gives ``"error: boom"``.
    """
    parts = ["error:"]
    if command:
        parts.append(f"{command}:")
    parts.append(str(message).strip())
    return " ".join(p for p in parts if p).strip()


class DotCliError(click.ClickException):
    """Base class for all CLI-visible errors."""

    #: Short, actionable suggestion. Sub-classes override this in __init__.
    hint: Optional[str] = None

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        if hint is not None:
            self.hint = hint

    @property
    def formatted_message(self) -> str:
        return format_error(self.message)

    # Click calls show to emit the message.
    def show(self, file=None) -> None:
        click.echo(self.formatted_message, err=True, file=file)
        if self.hint:
            click.echo(self.hint, err=True, file=file)


class UnknownCommandError(DotCliError):
    """Raised when the input names no registered command."""

    def __init__(self, tokens: str, suggestions: Sequence[str] = ()):
        self.tokens = tokens
        self.suggestions = list(suggestions)
        message = f"unknown command: {tokens}"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(message, hint="Run 'help' to see available commands.")


class CommandParseError(DotCliError):
    """Raised when arguments do not fit a command's grammar."""

    def __init__(self, reason: str, command: Optional[str] = None):
        self.command = command
        self.reason = reason
        super().__init__(reason)

    @property
    def formatted_message(self) -> str:
        return format_error(self.reason, self.command)


class InvalidHistoryIndexError(DotCliError):
    """Raised by redo when the index does not address a history entry."""

    def __init__(self, index):
        self.index = index
        super().__init__(f"invalid command index: {index}")


class HistoryError(DotCliError):
    """Raised when the history service cannot answer a request."""


class SettingsError(DotCliError):
    """Raised when the settings file cannot be read or written."""

    def __init__(self, path: str, details: str):
        self.path = path
        super().__init__(
            f"settings problem in {path}: {details}",
            hint=f"Check that {path} is valid YAML and readable.",
        )


class ConfigurationError(DotCliError):
    """Raised when a configurator cannot provide its commands or metadata."""
