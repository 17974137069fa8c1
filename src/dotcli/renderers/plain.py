"""Styling-free renderer: symbols and box-drawn tables, never ANSI codes."""

from __future__ import annotations

from typing import Any, List

from rich import box
from rich.table import Table
from rich.text import Text

from ..context import ItemKind, OutputContext, OutputItem
from ..settings import OutputStyle
from .base import ContextRenderer

SYMBOLS = {
    ItemKind.SUCCESS: "✓",
    ItemKind.ERROR: "✗",
    ItemKind.WARNING: "⚠",
}


def strip_ansi(value: Any) -> str:
    return Text.from_ansi(str(value)).plain


class PlainRenderer(ContextRenderer):
    style = OutputStyle.PLAIN

    def render(self, ctx: OutputContext) -> str:
        blocks: List[str] = [f"{SYMBOLS[ItemKind.ERROR]} {strip_ansi(e)}" for e in ctx.errors]
        blocks.extend(self.render_item(item) for item in ctx.output)
        return "\n".join(blocks)

    def render_item(self, item: OutputItem) -> str:
        if item.kind in SYMBOLS:
            return f"{SYMBOLS[item.kind]} {strip_ansi(item.message)}"
        if item.kind == ItemKind.TABLE:
            return self.render_table(item)
        if item.kind == ItemKind.LIST:
            return self.render_list(item)
        return strip_ansi(item.message)

    def render_table(self, item: OutputItem) -> str:
        if not item.rows:
            return "(empty table)"
        table = Table(box=box.SQUARE, show_header=item.headers is not None)
        column_count = max(len(item.headers or []), max(len(r) for r in item.rows))
        headers = list(item.headers or [])
        for i in range(column_count):
            table.add_column(Text(strip_ansi(headers[i])) if i < len(headers) else "")
        for row in item.rows:
            cells = [Text(strip_ansi(cell)) for cell in row]
            cells.extend(Text("") for _ in range(column_count - len(cells)))
            table.add_row(*cells)
        return self._capture([table], color=False)

    def render_list(self, item: OutputItem) -> str:
        lines = [f"{strip_ansi(item.title)}:"] if item.title else []
        if not item.items:
            lines.append("(empty list)")
        else:
            lines.extend(f"* {strip_ansi(entry)}" for entry in item.items)
        return "\n".join(lines)
