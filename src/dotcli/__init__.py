"""
dotcli - framework for dot-notation command line applications with a REPL.
"""

__version__ = "0.1.0"

from .app import CliApp
from .callbacks import CallbackRegistry, Continue, Halt, for_context, for_text
from .commands.base import Command, command
from .configurator import Configurator
from .context import OutputContext, OutputItem

__all__ = [
    "__version__",
    "CliApp",
    "CallbackRegistry",
    "Command",
    "Configurator",
    "Continue",
    "Halt",
    "OutputContext",
    "OutputItem",
    "command",
    "for_context",
    "for_text",
]
