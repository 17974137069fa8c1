"""Base class shared by the output renderers."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Iterable

from rich.console import Console, RenderableType

from ..context import OutputContext
from ..settings import OutputStyle


class ContextRenderer(ABC):
    """Turns an OutputContext into the final display string."""

    style: OutputStyle

    def __init__(self, width: int = 80):
        self.width = width

    @abstractmethod
    def render(self, ctx: OutputContext) -> str:
        """Render ``ctx``. Must not touch the terminal directly."""

    def _console(self, color: bool, no_color: bool = False) -> Console:
        return Console(
            file=io.StringIO(),
            width=self.width,
            force_terminal=color,
            color_system="standard" if color else None,
            no_color=no_color,
            highlight=False,
            emoji=False,
            legacy_windows=False,
        )

    def _capture(self, renderables: Iterable[RenderableType], color: bool, no_color: bool = False) -> str:
        console = self._console(color, no_color)
        for renderable in renderables:
            console.print(renderable)
        text = console.file.getvalue()
        return "\n".join(line.rstrip() for line in text.rstrip("\n").split("\n"))
