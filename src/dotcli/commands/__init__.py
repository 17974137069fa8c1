from .base import Command, FunctionCommand, command

__all__ = ["Command", "FunctionCommand", "command"]
