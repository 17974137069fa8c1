"""Output context: the value object a command invocation produces.

Every update method returns a new ``OutputContext``; instances are frozen so
a partially updated context is never observable.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Status(str, Enum):
    PENDING = "pending"
    OK = "ok"
    ERROR = "error"
    WARNING = "warning"


class ItemKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    TEXT = "text"
    TABLE = "table"
    LIST = "list"


class OutputItem(BaseModel):
    """One tagged piece of command output."""

    model_config = ConfigDict(frozen=True)

    kind: ItemKind
    message: str = ""
    rows: List[List[Any]] = Field(default_factory=list, description="Table rows")
    headers: Optional[List[str]] = Field(default=None, description="Table column headers")
    items: List[Any] = Field(default_factory=list, description="List entries")
    title: Optional[str] = Field(default=None, description="List title")

    @classmethod
    def success(cls, message: str) -> "OutputItem":
        return cls(kind=ItemKind.SUCCESS, message=message)

    @classmethod
    def error(cls, message: str) -> "OutputItem":
        return cls(kind=ItemKind.ERROR, message=message)

    @classmethod
    def warning(cls, message: str) -> "OutputItem":
        return cls(kind=ItemKind.WARNING, message=message)

    @classmethod
    def info(cls, message: str) -> "OutputItem":
        return cls(kind=ItemKind.INFO, message=message)

    @classmethod
    def text(cls, message: str) -> "OutputItem":
        return cls(kind=ItemKind.TEXT, message=message)

    @classmethod
    def table(cls, rows: Sequence[Any], headers: Optional[Sequence[str]] = None) -> "OutputItem":
        """Build a table item from row sequences or from a list of dicts.

        For dict rows without explicit headers, the keys of the first row
        become the headers.
        """
        rows = list(rows)
        if rows and isinstance(rows[0], Mapping):
            keys = list(headers) if headers else list(rows[0].keys())
            return cls(
                kind=ItemKind.TABLE,
                headers=[str(k) for k in keys],
                rows=[[row.get(k, "") for k in keys] for row in rows],
            )
        return cls(
            kind=ItemKind.TABLE,
            headers=list(headers) if headers is not None else None,
            rows=[list(row) for row in rows],
        )

    @classmethod
    def bullet_list(cls, items: Sequence[Any], title: Optional[str] = None) -> "OutputItem":
        return cls(kind=ItemKind.LIST, items=list(items), title=title)


class OutputContext(BaseModel):
    """Accumulated output, errors, status and metadata for one invocation."""

    model_config = ConfigDict(frozen=True)

    command: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)
    output: Tuple[OutputItem, ...] = ()
    errors: Tuple[str, ...] = ()
    status: Status = Status.PENDING
    cargo: Dict[str, Any] = Field(default_factory=dict)
    meta: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def new(
        cls,
        args: Optional[Mapping[str, Any]] = None,
        settings: Optional[Mapping[str, Any]] = None,
        command: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "OutputContext":
        """Start a context, seeding ``meta`` with style/no_color from settings."""
        meta: Dict[str, Any] = {}
        for key in ("style", "no_color"):
            if settings and settings.get(key) is not None:
                meta[key] = settings[key]
        return cls(
            command=command,
            args=dict(args or {}),
            options=dict(options or {}),
            meta=meta,
        )

    def add_output(self, item: OutputItem) -> "OutputContext":
        return self.model_copy(update={"output": self.output + (item,)})

    def add_outputs(self, items: Sequence[OutputItem]) -> "OutputContext":
        return self.model_copy(update={"output": self.output + tuple(items)})

    def add_error(self, message: str) -> "OutputContext":
        """Record an error message; status becomes error."""
        return self.model_copy(
            update={"errors": self.errors + (message,), "status": Status.ERROR}
        )

    def add_errors(self, messages: Sequence[str]) -> "OutputContext":
        if not messages:
            return self
        return self.model_copy(
            update={"errors": self.errors + tuple(messages), "status": Status.ERROR}
        )

    def with_cargo(self, cargo: Mapping[str, Any]) -> "OutputContext":
        return self.model_copy(update={"cargo": dict(cargo)})

    def update_cargo(self, updates: Mapping[str, Any]) -> "OutputContext":
        return self.model_copy(update={"cargo": {**self.cargo, **dict(updates)}})

    def set_meta(self, meta: Mapping[str, Any]) -> "OutputContext":
        return self.model_copy(update={"meta": dict(meta)})

    def update_meta(self, updates: Mapping[str, Any]) -> "OutputContext":
        return self.model_copy(update={"meta": {**self.meta, **dict(updates)}})

    def complete(self, status: Optional[Status] = None) -> "OutputContext":
        """Finalize the status.

        Without an explicit status, a pending context becomes error when it
        has errors and ok otherwise; a status already set is kept.
        """
        if status is None:
            if self.status != Status.PENDING:
                return self
            status = Status.ERROR if self.errors else Status.OK
        return self.model_copy(update={"status": Status(status)})

    def to_string(self) -> str:
        """Short human summary, handy in logs and assertions."""
        return (
            f"OutputContext(command={self.command!r}, status={self.status.value}, "
            f"output={len(self.output)} items, errors={len(self.errors)})"
        )

    def __str__(self) -> str:
        return self.to_string()
