"""Output orchestration: callback chain, style selection, renderer dispatch.

Style precedence, first match wins:

1. ``style`` in the context's metadata
2. ``NO_COLOR`` set (forces plain)
3. ``DOTCLI_STYLE``
4. ``DOTCLI_TEST_MODE`` set (forces plain)
5. terminal detection: rich on an interactive terminal, plain otherwise
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Callable, Dict, Mapping, Optional

from .callbacks import FORMAT_OUTPUT, CallbackRegistry
from .context import OutputContext
from .renderers import ContextRenderer, DumpRenderer, FancyRenderer, JsonRenderer, PlainRenderer
from .settings import OutputSignals, OutputStyle

logger = logging.getLogger(__name__)


def detect_tty(environ: Optional[Mapping[str, str]] = None, stream=None) -> bool:
    """True when output goes to an interactive terminal that is not ``dumb``."""
    environ = os.environ if environ is None else environ
    term = environ.get("TERM")
    if not term or term == "dumb":
        return False
    stream = stream or sys.stdout
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


class OutputOrchestrator:
    """Runs ``format_output`` callbacks, then renders with the active style."""

    def __init__(
        self,
        callbacks: Optional[CallbackRegistry] = None,
        signals: Optional[OutputSignals] = None,
        tty_detector: Optional[Callable[[], bool]] = None,
        width: int = 80,
    ):
        self.callbacks = callbacks if callbacks is not None else CallbackRegistry()
        self._signals = signals
        self._tty_detector = tty_detector or detect_tty
        self.renderers: Dict[OutputStyle, ContextRenderer] = {
            OutputStyle.RICH: FancyRenderer(width),
            OutputStyle.PLAIN: PlainRenderer(width),
            OutputStyle.DUMP: DumpRenderer(width),
            OutputStyle.JSON: JsonRenderer(width),
        }

    @property
    def signals(self) -> OutputSignals:
        # Read fresh from the environment unless fixed at construction
        return self._signals if self._signals is not None else OutputSignals()

    def determine_style(self, ctx: Optional[OutputContext] = None) -> OutputStyle:
        if ctx is not None:
            explicit = OutputStyle.coerce(ctx.meta.get("style"))
            if explicit is not None:
                return explicit
        signals = self.signals
        if signals.no_color:
            return OutputStyle.PLAIN
        if signals.style is not None:
            return signals.style
        if signals.test_mode:
            return OutputStyle.PLAIN
        return OutputStyle.RICH if self._tty_detector() else OutputStyle.PLAIN

    def render(self, value: Any) -> str:
        """Run the callback chain on ``value`` and produce the display string.

        Strings (legacy formatters) and lists of strings are joined and
        returned as they are; ``OutputContext`` values go to the renderer
        selected by :meth:`determine_style`.
        """
        value = self.callbacks.execute(FORMAT_OUTPUT, value)
        return self.to_text(value)

    def to_text(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, OutputContext):
            style = self.determine_style(value)
            logger.debug("Rendering %s with %s style", value.command, style.value)
            return self.renderers[style].render(value.complete())
        if isinstance(value, (list, tuple)):
            return "\n".join(str(v) for v in value)
        return str(value)
