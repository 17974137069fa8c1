"""Resolves parser outcomes into results and runs command handlers.

Resolution order:

1. immediate text from the parser (``--version``) is returned as is
2. no command at all renders the top-level usage
3. unknown tokens become an ``unknown command`` error
4. help requests (``--help``, ``help <name>``, or an empty invocation of a
   command declared with ``show_help_on_empty``) render help
5. anything else runs the command's handler

Handler faults never escape :meth:`Dispatcher.resolve`; they come back as a
single ``error:`` line.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .completion import suggest
from .errors import CommandParseError, DotCliError, UnknownCommandError, format_error
from .history import HistoryStore
from .models import ParsedArgs, UnifiedSchema
from .parser import (
    ArgumentParser,
    HelpRequest,
    ImmediateText,
    NoCommand,
    ParseFailure,
    ParseOutcome,
    Parsed,
    UnknownTokens,
    tokenize,
)
from .settings_store import SettingsStore, lookup

logger = logging.getLogger(__name__)


class ResolutionKind(str, Enum):
    DIRECT = "direct"
    DISPATCHED = "dispatched"
    HELP = "help"
    ERROR = "error"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one invocation.

    ``value`` holds the text for direct results, the handler's return value
    for dispatched commands, a list of lines for help, and the formatted
    ``error: ...`` line for errors.
    """

    kind: ResolutionKind
    value: Any = None
    command: Optional[str] = None

    @classmethod
    def error(cls, message: str, command: Optional[str] = None) -> "Resolution":
        return cls(ResolutionKind.ERROR, format_error(message, command), command)

    @property
    def is_error(self) -> bool:
        return self.kind == ResolutionKind.ERROR


@dataclass
class Runtime:
    """What a handler can reach besides its arguments and settings."""

    parser: ArgumentParser
    schema: UnifiedSchema
    history: HistoryStore
    dispatch_line: Callable[[str], Resolution]
    settings_store: Optional["SettingsStore"] = None
    interactive: bool = False
    app: Any = None
    debug: bool = False
    set_debug: Callable[[bool], None] = lambda enabled: None


class Dispatcher:
    """Maps parsed input to handlers from the schema's lookup table."""

    def __init__(
        self,
        schema: UnifiedSchema,
        parser: ArgumentParser,
        runtime_factory: Callable[[], Runtime],
        help_width: int = 80,
    ):
        self.schema = schema
        self.parser = parser
        self.runtime_factory = runtime_factory
        self.help_width = help_width
        #: process-wide debug switch; the ``debug_mode`` setting also enables it
        self.debug = False

    def dispatch(self, argv: Sequence[str], settings: Mapping[str, Any]) -> Resolution:
        return self.resolve(self.parser.parse(argv), settings)

    def dispatch_line(self, line: str, settings: Mapping[str, Any]) -> Resolution:
        try:
            argv = tokenize(line)
        except ValueError as exc:
            return Resolution.error(str(exc))
        return self.dispatch(argv, settings)

    def resolve(self, outcome: ParseOutcome, settings: Mapping[str, Any]) -> Resolution:
        if isinstance(outcome, ImmediateText):
            return Resolution(ResolutionKind.DIRECT, outcome.text)
        if isinstance(outcome, NoCommand):
            return self.help(None, include_banner=False)
        if isinstance(outcome, UnknownTokens):
            return self._fail(self._unknown(outcome.tokens))
        if isinstance(outcome, ParseFailure):
            return self._fail(CommandParseError(outcome.reason, outcome.command), outcome.command)
        if isinstance(outcome, HelpRequest):
            return self.help(outcome.target)
        if isinstance(outcome, Parsed):
            descriptor = self.schema.lookup(outcome.command)
            if descriptor is not None and outcome.args.is_empty and descriptor.show_help_on_empty:
                return self.help(outcome.command)
            if outcome.deferred_error:
                return Resolution.error(outcome.deferred_error, outcome.command)
            return self.invoke(outcome.command, outcome.args, settings)
        return Resolution.error(f"unsupported parse result: {outcome!r}")

    def help(self, target: Optional[str], include_banner: bool = True) -> Resolution:
        try:
            lines: List[str] = self.parser.render_help(target, self.help_width, include_banner=include_banner)
        except UnknownCommandError as exc:
            return self._fail(self._unknown((exc.tokens,)))
        return Resolution(ResolutionKind.HELP, lines, target)

    def invoke(self, name: str, args: ParsedArgs, settings: Mapping[str, Any]) -> Resolution:
        handler = self.schema.handler_for(name)
        if handler is None:
            return self._fail(UnknownCommandError(name))
        logger.debug("Dispatching %s with %s", name, args)
        try:
            result = handler.handle(args, settings, self.runtime_factory())
        except DotCliError as exc:
            logger.info("Command %s failed: %s", name, exc.message)
            return self._fail(exc, name)
        except Exception as exc:
            # traceback only shows at INFO and below; the error line is the user output
            logger.info("Command %s raised", name, exc_info=True)
            message = str(exc) or type(exc).__name__
            if self.debug_enabled(settings):
                message += "\n" + traceback.format_exc().rstrip()
            return Resolution.error(message, name)
        if isinstance(result, Resolution):
            return result
        return Resolution(ResolutionKind.DISPATCHED, result, name)

    def debug_enabled(self, settings: Mapping[str, Any]) -> bool:
        return self.debug or lookup(settings, "debug_mode", False) is True

    def _unknown(self, tokens: Sequence[str]) -> UnknownCommandError:
        words = [t for t in tokens if not t.startswith("-")]
        names = self.schema.names()
        found: List[str] = []
        # "sys infoo" is checked as "sys.infoo" as well as "sys"
        for word in (".".join(words[:2]), words[0] if words else ""):
            found.extend(n for n in suggest(word, names) if n not in found)
        return UnknownCommandError(" ".join(tokens), found[:3])

    @staticmethod
    def _fail(exc: DotCliError, command: Optional[str] = None) -> Resolution:
        return Resolution(ResolutionKind.ERROR, exc.formatted_message, command)
