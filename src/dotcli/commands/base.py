"""Command handler variants.

Two shapes of handler exist, both exposing ``handle(args, settings, runtime)``:

* subclasses of :class:`Command` declaring a class-level ``descriptor``
* plain functions wrapped by the :func:`command` decorator

``runtime`` gives access to the parser, the schema, the history store and
the dispatcher of the running application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterable, Mapping, Optional, Sequence, Type

from ..models import ArgumentSpec, CommandDescriptor, FlagSpec, OptionSpec, ParsedArgs

if TYPE_CHECKING:
    from ..dispatcher import Runtime


class Command:
    """Base class for class-based command handlers."""

    descriptor: ClassVar[CommandDescriptor]
    #: Handler classes registered as ``<descriptor.name>.<child name>``
    subcommands: ClassVar[Sequence[Type["Command"]]] = ()

    @property
    def name(self) -> str:
        return self.descriptor.name

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime: "Runtime") -> Any:
        """Execute the command and return its result.

        Results may be a string, a list of strings, an ``OutputContext``,
        ``None`` or a ``Resolution``.
        """
        raise NotImplementedError(f"command {self.name} does not implement handle()")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FunctionCommand(Command):
    """Adapts a plain ``fn(args, settings, runtime)`` function."""

    def __init__(self, descriptor: CommandDescriptor, fn: Callable[..., Any]):
        self.descriptor = descriptor
        self.fn = fn
        self.__doc__ = fn.__doc__

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime: "Runtime") -> Any:
        return self.fn(args, settings, runtime)


def command(
    name: str,
    summary: str = "",
    *,
    arguments: Iterable[ArgumentSpec] = (),
    options: Iterable[OptionSpec] = (),
    flags: Iterable[FlagSpec] = (),
    show_help_on_empty: bool = False,
    hidden: bool = False,
    ignore_unknown_options: bool = False,
) -> Callable[[Callable[..., Any]], FunctionCommand]:
    """Turn a function into a command.

    Example:
        @command("greet", "Say hello", arguments=[ArgumentSpec(name="who")])
        def greet(args, settings, runtime):
            return f"hello {args['who']}"
    """

    def decorator(fn: Callable[..., Any]) -> FunctionCommand:
        descriptor = CommandDescriptor(
            name=name,
            summary=summary or (fn.__doc__ or "").strip().split("\n")[0],
            arguments=list(arguments),
            options=list(options),
            flags=list(flags),
            show_help_on_empty=show_help_on_empty,
            hidden=hidden,
            ignore_unknown_options=ignore_unknown_options,
        )
        return FunctionCommand(descriptor, fn)

    return decorator


def instantiate(entry: Any) -> Optional[Command]:
    """Accept a Command instance or class, return an instance (None otherwise)."""
    if isinstance(entry, Command):
        return entry
    if isinstance(entry, type) and issubclass(entry, Command):
        return entry()
    return None
