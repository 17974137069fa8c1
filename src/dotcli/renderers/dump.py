"""Diagnostic renderer exposing the raw fields of a context."""

from __future__ import annotations

from rich.pretty import pretty_repr

from ..context import OutputContext
from ..settings import OutputStyle
from .base import ContextRenderer


class DumpRenderer(ContextRenderer):
    style = OutputStyle.DUMP

    def render(self, ctx: OutputContext) -> str:
        fields = ctx.model_dump(mode="json")
        return "OutputContext " + pretty_repr(fields, max_width=self.width)
