"""Data models for command declaration and the merged command schema.

Descriptors are pydantic models so that configurators get validation of
names and grammar entries at declaration time. The schema itself is a plain
dataclass because it also carries the handler lookup table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from .commands.base import Command

_NAME_SEGMENT = re.compile(r"^[A-Za-z0-9_?!][A-Za-z0-9_?!\-]*$")


class ParameterType(str, Enum):
    """Value types understood by the argument parser."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"


class ArgumentSpec(BaseModel):
    """Positional argument of a command."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Argument name, also the key in parsed args")
    help: str = Field(default="", description="Help text")
    type: ParameterType = Field(default=ParameterType.STRING)
    required: bool = Field(default=True)
    multiple: bool = Field(default=False, description="Consume all remaining positional tokens")
    default: Any = Field(default=None)

    @property
    def value_name(self) -> str:
        return self.name.upper()


class OptionSpec(BaseModel):
    """Named option taking a value (``--name VALUE`` / ``-n VALUE``)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    help: str = Field(default="")
    type: ParameterType = Field(default=ParameterType.STRING)
    short: Optional[str] = Field(default=None, max_length=1, description="Single letter short form")
    long: Optional[str] = Field(default=None, description="Long form without dashes, defaults to name")
    required: bool = Field(default=False)
    multiple: bool = Field(default=False)
    default: Any = Field(default=None)

    @property
    def long_name(self) -> str:
        return self.long or self.name.replace("_", "-")


class FlagSpec(BaseModel):
    """Boolean switch (``--verbose`` / ``-v``)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    help: str = Field(default="")
    short: Optional[str] = Field(default=None, max_length=1)
    long: Optional[str] = Field(default=None)

    @property
    def long_name(self) -> str:
        return self.long or self.name.replace("_", "-")


class CommandDescriptor(BaseModel):
    """Declaration of one command: its dotted name, summary and grammar."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Dotted command name, e.g. sys.info")
    summary: str = Field(default="", description="One line description shown in help")
    arguments: List[ArgumentSpec] = Field(default_factory=list)
    options: List[OptionSpec] = Field(default_factory=list)
    flags: List[FlagSpec] = Field(default_factory=list)
    subcommands: List["CommandDescriptor"] = Field(
        default_factory=list, description="Nested descriptors, registered as <name>.<child>"
    )
    show_help_on_empty: bool = Field(
        default=False, description="Show help instead of running when invoked without arguments"
    )
    hidden: bool = Field(default=False, description="Leave out of help listings and completion")
    ignore_unknown_options: bool = Field(
        default=False, description="Pass unknown dash tokens (e.g. -1) through as arguments"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        segments = v.split(".")
        if not all(_NAME_SEGMENT.match(s) for s in segments):
            raise ValueError(f"invalid command name: {v!r}")
        return v

    @property
    def namespace(self) -> str:
        """Everything before the last dot, empty for flat names."""
        return self.name.rpartition(".")[0]

    @property
    def leaf(self) -> str:
        return self.name.rpartition(".")[2]


CommandDescriptor.model_rebuild()


class CliMetadata(BaseModel):
    """Descriptive data about the CLI, merged across configurators."""

    name: Optional[str] = Field(default=None, description="Program name")
    version: Optional[str] = Field(default=None)
    author: Optional[str] = Field(default=None)
    about: Optional[str] = Field(default=None, description="One line about text")
    description: Optional[str] = Field(default=None)
    url: Optional[str] = Field(default=None)
    prompt_symbol: Optional[str] = Field(default=None, description="REPL prompt prefix")

    def merged_with(self, other: "CliMetadata") -> "CliMetadata":
        """Fields set on ``other`` replace ours."""
        return self.model_copy(update=other.model_dump(exclude_none=True))

    def with_defaults(self) -> "CliMetadata":
        defaults = CliMetadata(name="dotcli", version="0.0.0", prompt_symbol=">")
        return defaults.merged_with(self)


class HistoryEntry(NamedTuple):
    index: int
    line: str


@dataclass
class UnifiedSchema:
    """Merged command declarations plus the name-keyed handler table."""

    descriptors: List[CommandDescriptor] = field(default_factory=list)
    handlers: Dict[str, "Command"] = field(default_factory=dict)
    metadata: CliMetadata = field(default_factory=lambda: CliMetadata().with_defaults())

    def names(self, include_hidden: bool = False) -> List[str]:
        return [d.name for d in self.descriptors if include_hidden or not d.hidden]

    def lookup(self, name: str) -> Optional[CommandDescriptor]:
        for descriptor in self.descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    def handler_for(self, name: str) -> Optional["Command"]:
        return self.handlers.get(name)

    def namespaces(self) -> List[str]:
        """All dotted prefixes that group at least one command."""
        found = set()
        for descriptor in self.descriptors:
            parts = descriptor.name.split(".")[:-1]
            for i in range(1, len(parts) + 1):
                found.add(".".join(parts[:i]))
        return sorted(found)

    def in_namespace(self, namespace: str, include_hidden: bool = False) -> List[CommandDescriptor]:
        """Direct members of ``namespace`` (no deeper levels)."""
        return [
            d for d in self.descriptors
            if d.namespace == namespace and (include_hidden or not d.hidden)
        ]

    def is_namespace(self, token: str) -> bool:
        return token in self.namespaces()



@dataclass(frozen=True)
class ParsedArgs:
    """Values the parser extracted for one command invocation."""

    arguments: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    flags: Dict[str, bool] = field(default_factory=dict)
    tokens: Tuple[str, ...] = ()

    def get(self, key: str, default: Any = None) -> Any:
        for source in (self.arguments, self.options, self.flags):
            if key in source:
                return source[key]
        return default

    def __getitem__(self, key: str) -> Any:
        missing = object()
        value = self.get(key, missing)
        if value is missing:
            raise KeyError(key)
        return value

    def __contains__(self, key: str) -> bool:
        return key in self.arguments or key in self.options or key in self.flags

    @property
    def is_empty(self) -> bool:
        return not self.tokens
