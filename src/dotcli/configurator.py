"""Configurators: named providers of commands and CLI metadata.

A CLI is assembled from any number of configurators. Subclass
:class:`Configurator` and set class attributes, or instantiate it directly
with keyword overrides::

    class ToolsConfigurator(Configurator):
        name = "tools"
        cli_name = "tools"
        version = "1.2.0"
        command_classes = [SysInfoCommand, GreetCommand]
"""

from __future__ import annotations

from typing import Any, ClassVar, List, Optional, Sequence, Tuple

from .commands.base import Command, instantiate
from .errors import ConfigurationError
from .models import CliMetadata


class Configurator:
    """Provides a list of commands plus CLI metadata."""

    name: ClassVar[str] = "configurator"
    command_classes: ClassVar[Sequence[Any]] = ()

    # CLI metadata; None leaves the value of earlier configurators in place
    cli_name: ClassVar[Optional[str]] = None
    version: ClassVar[Optional[str]] = None
    author: ClassVar[Optional[str]] = None
    about: ClassVar[Optional[str]] = None
    description: ClassVar[Optional[str]] = None
    url: ClassVar[Optional[str]] = None
    prompt_symbol: ClassVar[Optional[str]] = None

    def __init__(self, name: Optional[str] = None, commands: Optional[Sequence[Any]] = None, **metadata: Any):
        unknown = set(metadata) - set(CliMetadata.model_fields) - {"cli_name"}
        if unknown:
            raise ConfigurationError(f"unknown metadata fields: {', '.join(sorted(unknown))}")
        if name is not None:
            self.name = name
        if commands is not None:
            self.command_classes = list(commands)
        if "name" in metadata:
            metadata["cli_name"] = metadata.pop("name")
        for key, value in metadata.items():
            setattr(self, key, value)

    @property
    def identity(self) -> Tuple[str, str, str]:
        cls = type(self)
        return (cls.__module__, cls.__qualname__, self.name)

    def commands(self) -> List[Command]:
        result = []
        for entry in self.command_classes:
            cmd = instantiate(entry)
            if cmd is None:
                raise ConfigurationError(f"{self.name}: not a command: {entry!r}")
            result.append(cmd)
        return result

    def metadata(self) -> CliMetadata:
        return CliMetadata(
            name=self.cli_name,
            version=self.version,
            author=self.author,
            about=self.about,
            description=self.description,
            url=self.url,
            prompt_symbol=self.prompt_symbol,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
