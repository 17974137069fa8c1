"""Argument parser boundary built on click.

Each command descriptor is compiled into a ``click.Command`` that does the
grammar work (types, required values, option syntax). :meth:`ArgumentParser.parse`
never raises; it returns one of the outcome classes below, which the
dispatcher turns into results.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import click

from .errors import UnknownCommandError
from .models import CommandDescriptor, ParameterType, ParsedArgs, UnifiedSchema

HELP_FLAGS = ("-h", "--help")
VERSION_FLAGS = ("-V", "--version")

_CLICK_TYPES = {
    ParameterType.STRING: click.STRING,
    ParameterType.INTEGER: click.INT,
    ParameterType.FLOAT: click.FLOAT,
    ParameterType.BOOLEAN: click.BOOL,
}


@dataclass(frozen=True)
class Parsed:
    command: str
    args: ParsedArgs = field(default_factory=ParsedArgs)
    #: Grammar error found on an empty invocation, reported only if the
    #: command does not show help on empty input
    deferred_error: Optional[str] = None


@dataclass(frozen=True)
class ImmediateText:
    text: str


@dataclass(frozen=True)
class HelpRequest:
    target: Optional[str] = None


@dataclass(frozen=True)
class NoCommand:
    pass


@dataclass(frozen=True)
class UnknownTokens:
    tokens: Tuple[str, ...]


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    command: Optional[str] = None


ParseOutcome = Union[Parsed, ImmediateText, HelpRequest, NoCommand, UnknownTokens, ParseFailure]


def tokenize(line: str) -> List[str]:
    """Split a command line, keeping quoted text together.

    Raises ValueError on unbalanced quotes.
    """
    return shlex.split(line)


def _default_kwargs(default: object) -> Dict[str, object]:
    # click 8.3+ treats an explicit default=None as a supplied value, which
    # hides missing required parameters
    return {} if default is None else {"default": default}


class DescriptorCommand(click.Command):
    """click command compiled from a :class:`CommandDescriptor`."""

    def __init__(self, descriptor: CommandDescriptor):
        self.descriptor = descriptor
        self.kinds: Dict[str, Tuple[str, str]] = {}
        params: List[click.Parameter] = []

        for arg in descriptor.arguments:
            param = click.Argument(
                [arg.name],
                type=_CLICK_TYPES[arg.type],
                required=arg.required,
                nargs=-1 if arg.multiple else 1,
                metavar=arg.value_name + ("..." if arg.multiple else ""),
                **_default_kwargs(None if arg.multiple else arg.default),
            )
            params.append(param)
            self.kinds[param.name] = ("arguments", arg.name)

        for opt in descriptor.options:
            decls = [opt.name, f"--{opt.long_name}"] + ([f"-{opt.short}"] if opt.short else [])
            param = click.Option(
                decls,
                type=_CLICK_TYPES[opt.type],
                required=opt.required,
                multiple=opt.multiple,
                show_default=opt.default is not None,
                help=opt.help or None,
                **_default_kwargs(opt.default),
            )
            params.append(param)
            self.kinds[param.name] = ("options", opt.name)

        for flag in descriptor.flags:
            decls = [flag.name, f"--{flag.long_name}"] + ([f"-{flag.short}"] if flag.short else [])
            param = click.Option(decls, is_flag=True, default=False, help=flag.help or None)
            params.append(param)
            self.kinds[param.name] = ("flags", flag.name)

        params.append(
            click.Option(
                ["help_requested", *HELP_FLAGS],
                is_flag=True,
                expose_value=False,
                help="Show this message and exit.",
            )
        )
        super().__init__(
            name=descriptor.name,
            params=params,
            help=descriptor.summary or None,
            add_help_option=False,
            context_settings={
                "ignore_unknown_options": descriptor.ignore_unknown_options,
                # pass-through commands hand everything after the first
                # positional token to the handler untouched
                "allow_interspersed_args": not descriptor.ignore_unknown_options,
            },
        )

    def format_options(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        arguments = [
            (
                arg.value_name + ("..." if arg.multiple else ""),
                arg.help + ("" if arg.required else " (optional)"),
            )
            for arg in self.descriptor.arguments
        ]
        if arguments:
            with formatter.section("Arguments"):
                formatter.write_dl(arguments)
        super().format_options(ctx, formatter)
        children = [(d.name, d.summary) for d in self.descriptor.subcommands if not d.hidden]
        if children:
            with formatter.section("Commands"):
                formatter.write_dl(children)

    def collect(self, ctx: click.Context, tokens: Sequence[str]) -> ParsedArgs:
        sections: Dict[str, Dict] = {"arguments": {}, "options": {}, "flags": {}}
        for param_name, value in ctx.params.items():
            kind, spec_name = self.kinds[param_name]
            if isinstance(value, tuple):
                value = list(value)
            sections[kind][spec_name] = value
        return ParsedArgs(tokens=tuple(tokens), **sections)


class ArgumentParser:
    """Parses argument vectors against a unified schema."""

    def __init__(self, schema: UnifiedSchema):
        self.schema = schema
        self._commands: Dict[str, DescriptorCommand] = {
            d.name: DescriptorCommand(d) for d in schema.descriptors
        }

    @property
    def prog(self) -> str:
        return self.schema.metadata.name or "dotcli"

    def version_text(self) -> str:
        return f"{self.prog} {self.schema.metadata.version}"

    def parse(self, argv: Sequence[str]) -> ParseOutcome:
        tokens = [str(t) for t in argv]
        if not tokens:
            return NoCommand()

        head = tokens[0]
        if head in VERSION_FLAGS:
            return ImmediateText(self.version_text())
        if head in HELP_FLAGS:
            return HelpRequest(None)
        if head == "help" and "help" not in self._commands:
            return HelpRequest(".".join(tokens[1:]) or None)
        if head.startswith("-"):
            return ParseFailure(f"No such option: {head}")

        name, rest = self._split_command(tokens)
        if name is None:
            if len(tokens) == 1 and self.schema.is_namespace(head):
                return HelpRequest(head)
            return UnknownTokens(tuple(tokens))
        if any(t in HELP_FLAGS for t in self._own_options(name, rest)):
            return HelpRequest(name)
        return self._parse_command(name, rest)

    def _own_options(self, name: str, rest: List[str]) -> List[str]:
        """Tokens the command itself interprets, as opposed to passing through."""
        tokens = self._before_separator(rest)
        if self._commands[name].descriptor.ignore_unknown_options:
            for i, token in enumerate(tokens):
                if not token.startswith("-"):
                    return tokens[:i]
        return tokens

    def _split_command(self, tokens: List[str]) -> Tuple[Optional[str], List[str]]:
        # "sys info x" resolves like "sys.info x"; the longest known name wins
        for n in range(len(tokens), 0, -1):
            head = tokens[:n]
            if any(t.startswith("-") for t in head):
                continue
            candidate = ".".join(head)
            if candidate in self._commands:
                return candidate, tokens[n:]
        return None, tokens

    @staticmethod
    def _before_separator(tokens: List[str]) -> List[str]:
        return tokens[: tokens.index("--")] if "--" in tokens else tokens

    def _parse_command(self, name: str, rest: List[str]) -> ParseOutcome:
        cmd = self._commands[name]
        try:
            ctx = cmd.make_context(name, list(rest))
        except click.UsageError as exc:
            if rest:
                return ParseFailure(exc.format_message(), name)
            # empty invocation: whether this is an error depends on the
            # command's show_help_on_empty policy
            ctx = cmd.make_context(name, [], resilient_parsing=True)
            return Parsed(name, cmd.collect(ctx, rest), deferred_error=exc.format_message())
        except click.ClickException as exc:
            return ParseFailure(exc.format_message(), name)
        return Parsed(name, cmd.collect(ctx, rest))

    def render_help(self, target: Optional[str] = None, width: int = 80, include_banner: bool = True) -> List[str]:
        """Help text for the whole CLI, a namespace, or one command.

        Raises UnknownCommandError when ``target`` names nothing.
        """
        if target is None:
            lines = self._top_level_help(width)
            return self._banner() + lines if include_banner else lines
        cmd = self._commands.get(target)
        if cmd is not None:
            ctx = click.Context(
                cmd,
                info_name=f"{self.prog} {target}",
                terminal_width=width,
                max_content_width=width,
            )
            return cmd.get_help(ctx).rstrip("\n").splitlines()
        if self.schema.is_namespace(target):
            return self._namespace_help(target, width)
        raise UnknownCommandError(target)

    def _banner(self) -> List[str]:
        meta = self.schema.metadata
        lines = [self.version_text()]
        if meta.about:
            lines.append(meta.about)
        return lines + [""]

    def _top_level_help(self, width: int) -> List[str]:
        formatter = click.HelpFormatter(width=width, max_width=width)
        formatter.write_usage(self.prog, "[OPTIONS] COMMAND [ARGS]...")
        with formatter.section("Options"):
            formatter.write_dl(
                [
                    (", ".join(HELP_FLAGS), "Show this message and exit."),
                    (", ".join(VERSION_FLAGS), "Show the version and exit."),
                ]
            )
        rows = [(d.name, d.summary) for d in sorted(self.schema.descriptors, key=lambda d: d.name) if not d.hidden]
        if rows:
            with formatter.section("Commands"):
                formatter.write_dl(rows)
        return formatter.getvalue().rstrip("\n").splitlines()

    def _namespace_help(self, namespace: str, width: int) -> List[str]:
        formatter = click.HelpFormatter(width=width, max_width=width)
        formatter.write_usage(self.prog, f"{namespace}.COMMAND [ARGS]...")
        rows = [
            (d.name, d.summary)
            for d in sorted(self.schema.descriptors, key=lambda d: d.name)
            if d.name.startswith(namespace + ".") and not d.hidden
        ]
        with formatter.section("Commands"):
            formatter.write_dl(rows)
        return formatter.getvalue().rstrip("\n").splitlines()
