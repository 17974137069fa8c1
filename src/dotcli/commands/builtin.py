"""Built-in commands shipped with every dotcli application."""

from __future__ import annotations

import platform
import subprocess
import sys
from typing import Any, Dict, List, Mapping

from .. import __version__
from ..configurator import Configurator
from ..context import OutputContext, OutputItem, Status
from ..errors import DotCliError
from ..models import ArgumentSpec, CommandDescriptor, ParsedArgs
from ..settings_store import lookup
from .base import Command


class AboutCommand(Command):
    descriptor = CommandDescriptor(name="about", summary="Show information about this CLI")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        if runtime.app is not None:
            return runtime.app.intro()
        meta = runtime.schema.metadata
        return [f"{meta.name} {meta.version}"]


class HistoryCommand(Command):
    descriptor = CommandDescriptor(name="history", summary="Show the command history")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        entries = runtime.history.history()
        if not entries:
            return "history is empty"
        width = len(str(entries[-1].index))
        return [f"{entry.index:>{width}}: {entry.line}" for entry in entries]


class RedoCommand(Command):
    """Re-run a history entry by index."""

    descriptor = CommandDescriptor(
        name="redo",
        summary="Run a command from the history again",
        arguments=[ArgumentSpec(name="index", help="History index, see 'history'")],
        show_help_on_empty=True,
        # "redo -1" must reach the handler as an index
        ignore_unknown_options=True,
    )

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        entry = runtime.history.entry(args["index"])
        return runtime.dispatch_line(entry.line)


class FlushCommand(Command):
    descriptor = CommandDescriptor(name="flush", summary="Clear the command history")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        runtime.history.flush()
        return OutputContext.new(settings=settings, command=self.name).add_output(
            OutputItem.success("History cleared")
        )


class StatusCommand(Command):
    descriptor = CommandDescriptor(name="status", summary="Show the state of this CLI session")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        rows = [
            ["Commands", len(runtime.schema.names())],
            ["History entries", runtime.history.length()],
            ["Settings file", str(runtime.settings_store.path) if runtime.settings_store else "(none)"],
            ["Interactive", "yes" if runtime.interactive else "no"],
        ]
        ctx = OutputContext.new(settings=settings, command=self.name)
        return ctx.add_output(OutputItem.table(rows, headers=["Item", "Value"])).complete(Status.OK)


def _flatten(settings: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in settings.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping) and value:
            flat.update(_flatten(value, name + "."))
        else:
            flat[name] = value
    return flat


class SettingsAllCommand(Command):
    descriptor = CommandDescriptor(name="settings.all", summary="Show all settings")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        rows = [[key, value] for key, value in sorted(_flatten(settings).items())]
        ctx = OutputContext.new(settings=settings, command=self.name)
        return ctx.add_output(OutputItem.table(rows, headers=["Setting", "Value"]))


class SettingsGetCommand(Command):
    descriptor = CommandDescriptor(
        name="settings.get",
        summary="Show one setting; nested keys use dots",
        arguments=[ArgumentSpec(name="key", help="Setting name, e.g. ui.theme")],
        show_help_on_empty=True,
    )

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        key = args["key"]
        missing = object()
        value = lookup(settings, key, missing)
        if value is missing:
            raise DotCliError(f"setting not found: {key}")
        return str(value)


class SysInfoCommand(Command):
    descriptor = CommandDescriptor(name="sys.info", summary="Show system information")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        meta = runtime.schema.metadata
        rows = [
            ["Application", f"{meta.name} {meta.version}"],
            ["dotcli", __version__],
            ["Python", platform.python_version()],
            ["Platform", platform.platform()],
            ["Executable", sys.executable],
        ]
        ctx = OutputContext.new(settings=settings, command=self.name)
        return ctx.add_output(OutputItem.table(rows)).complete()


class SysCmdCommand(Command):
    descriptor = CommandDescriptor(
        name="sys.cmd",
        summary="Run a program and show its output",
        arguments=[ArgumentSpec(name="argv", help="Program and its arguments", multiple=True)],
        show_help_on_empty=True,
        ignore_unknown_options=True,
    )

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        argv: List[str] = list(args["argv"])
        try:
            completed = subprocess.run(argv, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise DotCliError(f"cannot run {argv[0]}: {exc.strerror or exc}") from exc
        ctx = OutputContext.new(settings=settings, command=self.name)
        if completed.stdout:
            ctx = ctx.add_output(OutputItem.text(completed.stdout.rstrip("\n")))
        if completed.returncode != 0:
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            ctx = ctx.add_error(f"{argv[0]}: {detail}")
        return ctx


class CliScriptCommand(Command):
    """Run each line of a file as if it had been typed at the prompt.

    Blank lines and lines starting with ``#`` are skipped. Every executed
    line is echoed as ``script> <line>`` followed by its rendered output;
    a failing line does not stop the script.
    """

    descriptor = CommandDescriptor(
        name="cli.script",
        summary="Run commands from a script file",
        arguments=[ArgumentSpec(name="file", help="Path to a file with one command per line")],
        show_help_on_empty=True,
    )

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        path = args["file"]
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise DotCliError(f"cannot read script {path}: {getattr(exc, 'strerror', None) or exc}") from exc

        output: List[str] = []
        for raw in lines:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            resolution = runtime.dispatch_line(line)
            text = runtime.app.render(resolution) if runtime.app is not None else str(resolution.value)
            output.append(f"script> {line}")
            if text:
                output.append(text)
        return output


class CliDebugCommand(Command):
    descriptor = CommandDescriptor(
        name="cli.debug",
        summary="Show or toggle tracebacks in error output",
        arguments=[ArgumentSpec(name="toggle", help="on or off", required=False)],
    )

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        toggle = args["toggle"]
        if toggle is None:
            enabled = runtime.debug or lookup(settings, "debug_mode", False) is True
            return f"Debug mode is currently {'ON' if enabled else 'OFF'}"
        value = str(toggle).lower()
        if value not in ("on", "off"):
            raise DotCliError(f"invalid value '{toggle}', use 'on' or 'off'")
        enabled = value == "on"
        runtime.set_debug(enabled)
        if runtime.settings_store is not None:
            runtime.settings_store.save({"debug_mode": enabled})
        return f"Debug mode is now {'ON' if enabled else 'OFF'}"


class ReplCommand(Command):
    descriptor = CommandDescriptor(name="repl", summary="Start an interactive session")

    def handle(self, args: ParsedArgs, settings: Mapping[str, Any], runtime) -> Any:
        from ..repl import ALREADY_RUNNING, Repl

        if runtime.interactive:
            return ALREADY_RUNNING
        Repl(runtime.app).run()
        return None


class DefaultConfigurator(Configurator):
    """Built-in commands and default metadata."""

    name = "dotcli.default"
    cli_name = "dotcli"
    version = __version__
    about = "Dot-notation command line framework"
    prompt_symbol = "dotcli"
    command_classes = [
        AboutCommand,
        HistoryCommand,
        RedoCommand,
        FlushCommand,
        StatusCommand,
        SettingsAllCommand,
        SettingsGetCommand,
        SysInfoCommand,
        SysCmdCommand,
        CliScriptCommand,
        CliDebugCommand,
        ReplCommand,
    ]
