"""Rich renderer with colors, icons and rounded tables."""

from __future__ import annotations

from typing import List

from rich import box
from rich.console import RenderableType
from rich.table import Table
from rich.text import Text

from ..context import ItemKind, OutputContext, OutputItem
from ..settings import OutputStyle
from .base import ContextRenderer

ICONS = {
    ItemKind.SUCCESS: ("✓ ", "bold green"),
    ItemKind.ERROR: ("✗ ", "bold red"),
    ItemKind.WARNING: ("⚠ ", "bold yellow"),
    ItemKind.INFO: ("ℹ ", "bold blue"),
}


class FancyRenderer(ContextRenderer):
    style = OutputStyle.RICH

    def render(self, ctx: OutputContext) -> str:
        renderables: List[RenderableType] = [
            Text.assemble(ICONS[ItemKind.ERROR], (str(e), "red")) for e in ctx.errors
        ]
        renderables.extend(self.render_item(item) for item in ctx.output)
        if not renderables:
            return ""
        return self._capture(renderables, color=True, no_color=bool(ctx.meta.get("no_color")))

    def render_item(self, item: OutputItem) -> RenderableType:
        if item.kind in ICONS:
            return Text.assemble(ICONS[item.kind], Text.from_ansi(item.message))
        if item.kind == ItemKind.TABLE:
            return self.render_table(item)
        if item.kind == ItemKind.LIST:
            return self.render_list(item)
        return Text.from_ansi(item.message)

    def render_table(self, item: OutputItem) -> RenderableType:
        if not item.rows:
            return Text("(empty table)", style="dim")
        table = Table(box=box.ROUNDED, show_header=item.headers is not None, header_style="bold cyan")
        headers = list(item.headers or [])
        column_count = max(len(headers), max(len(r) for r in item.rows))
        for i in range(column_count):
            table.add_column(Text(headers[i]) if i < len(headers) else "")
        for row in item.rows:
            cells = [Text.from_ansi(str(cell)) for cell in row]
            cells.extend(Text("") for _ in range(column_count - len(cells)))
            table.add_row(*cells)
        return table

    def render_list(self, item: OutputItem) -> RenderableType:
        text = Text()
        if item.title:
            text.append(f"{item.title}:", style="bold")
            text.append("\n")
        if not item.items:
            text.append("(empty list)", style="dim")
            return text
        for i, entry in enumerate(item.items):
            if i:
                text.append("\n")
            text.append("• ", style="cyan")
            text.append_text(Text.from_ansi(str(entry)))
        return text
