import logging

import pytest

from dotcli.app import CliApp
from dotcli.callbacks import CallbackRegistry
from dotcli.commands.base import Command, command
from dotcli.commands.builtin import DefaultConfigurator
from dotcli.configurator import Configurator
from dotcli.context import OutputContext, OutputItem
from dotcli.history import HistoryStore
from dotcli.models import ArgumentSpec, CommandDescriptor, FlagSpec, OptionSpec
from dotcli.output import OutputOrchestrator
from dotcli.settings import OutputSignals


# ----------------------------------------------------------------------
# Sample commands
# ----------------------------------------------------------------------
@command(
    "greet",
    "Say hello",
    arguments=[ArgumentSpec(name="who", help="Who to greet")],
    options=[OptionSpec(name="greeting", short="g", default="hello", help="Greeting word")],
    flags=[FlagSpec(name="shout", short="s", help="Upper case output")],
)
def greet(args, settings, runtime):
    text = f"{args['greeting']} {args['who']}"
    return text.upper() if args["shout"] else text


class BoomCommand(Command):
    descriptor = CommandDescriptor(name="dev.boom", summary="Always fails")

    def handle(self, args, settings, runtime):
        raise RuntimeError("kaboom")


class NetPingCommand(Command):
    descriptor = CommandDescriptor(name="dev.net.ping", summary="Answer pong")

    def handle(self, args, settings, runtime):
        return "pong"


class ReportCommand(Command):
    descriptor = CommandDescriptor(name="dev.report", summary="Structured output")

    def handle(self, args, settings, runtime):
        return (
            OutputContext.new(settings=settings, command=self.name)
            .add_output(OutputItem.success("done"))
            .add_output(OutputItem.bullet_list(["a", "b"], title="Items"))
        )


class SecretCommand(Command):
    descriptor = CommandDescriptor(name="dev.secret", summary="Hidden", hidden=True)

    def handle(self, args, settings, runtime):
        return "shh"


class SampleConfigurator(Configurator):
    name = "sample"
    cli_name = "sample"
    version = "1.2.3"
    about = "Sample CLI"
    prompt_symbol = "smp"
    command_classes = [greet, BoomCommand, NetPingCommand, ReportCommand, SecretCommand]


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------
@pytest.fixture
def history():
    """History store with its worker thread stopped after the test."""
    store = HistoryStore()
    yield store
    store.close()


@pytest.fixture
def callbacks():
    return CallbackRegistry()


@pytest.fixture
def plain_signals():
    """Signals fixed to test mode, independent of the real environment."""
    return OutputSignals.model_construct(no_color=False, style=None, test_mode=True)


@pytest.fixture
def plain_output(callbacks, plain_signals):
    return OutputOrchestrator(callbacks, signals=plain_signals)


@pytest.fixture
def configurators():
    return [DefaultConfigurator(), SampleConfigurator()]


@pytest.fixture
def app(configurators, history, callbacks, plain_output):
    """Application with built-in and sample commands rendering plain text."""
    cli = CliApp(configurators, history=history, callbacks=callbacks, output=plain_output)
    yield cli
    cli.close()


@pytest.fixture
def restore_root_logging():
    """Put root logger handlers and level back after configure_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
