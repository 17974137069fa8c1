"""Application object wiring schema, parser, dispatcher, history and output."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .callbacks import CallbackRegistry
from .configurator import Configurator
from .coordinator import Coordinator
from .dispatcher import Dispatcher, Resolution, ResolutionKind, Runtime
from .errors import SettingsError
from .history import HistoryStore
from .output import OutputOrchestrator
from .parser import ArgumentParser
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)


class CliApp:
    """One configured CLI. Both the one-shot entry point and the REPL use it.

    Example:
        app = CliApp([DefaultConfigurator(), MyConfigurator()])
        print(app.run_line("sys.info"))
    """

    def __init__(
        self,
        configurators: Optional[Iterable[Configurator]] = None,
        settings_store: Optional[SettingsStore] = None,
        history: Optional[HistoryStore] = None,
        callbacks: Optional[CallbackRegistry] = None,
        output: Optional[OutputOrchestrator] = None,
        help_width: int = 80,
    ):
        if configurators is None:
            from .commands.builtin import DefaultConfigurator
            configurators = [DefaultConfigurator()]
        self.schema = Coordinator().setup(configurators)
        self.parser = ArgumentParser(self.schema)
        self.history = history if history is not None else HistoryStore()
        self.callbacks = callbacks if callbacks is not None else CallbackRegistry()
        self.output = output if output is not None else OutputOrchestrator(self.callbacks, width=help_width)
        self.settings_store = settings_store
        self.interactive = False
        self.dispatcher = Dispatcher(self.schema, self.parser, self._runtime, help_width=help_width)

    @property
    def metadata(self):
        return self.schema.metadata

    @property
    def debug(self) -> bool:
        """Whether handler faults are reported with their traceback."""
        return self.dispatcher.debug

    @debug.setter
    def debug(self, enabled: bool) -> None:
        self.dispatcher.debug = enabled

    def _runtime(self) -> Runtime:
        return Runtime(
            parser=self.parser,
            schema=self.schema,
            history=self.history,
            dispatch_line=lambda line: self.dispatcher.dispatch_line(line, self.load_settings()),
            settings_store=self.settings_store,
            interactive=self.interactive,
            app=self,
            debug=self.debug,
            set_debug=lambda enabled: setattr(self, "debug", enabled),
        )

    def load_settings(self) -> Dict[str, Any]:
        """Settings passed to handlers; a broken settings file yields {}."""
        if self.settings_store is None:
            return {}
        try:
            return self.settings_store.load()
        except SettingsError as exc:
            logger.warning("Ignoring settings: %s", exc.message)
            return {}

    def execute(self, argv: Sequence[str], settings: Optional[Mapping[str, Any]] = None) -> Resolution:
        if settings is None:
            settings = self.load_settings()
        return self.dispatcher.dispatch(argv, settings)

    def execute_line(self, line: str, settings: Optional[Mapping[str, Any]] = None) -> Resolution:
        if settings is None:
            settings = self.load_settings()
        return self.dispatcher.dispatch_line(line, settings)

    def render(self, resolution: Resolution) -> str:
        """Display string for a resolution.

        Help and error lines are shown as they are; dispatched results go
        through the output orchestrator and its callbacks.
        """
        if resolution.kind == ResolutionKind.HELP:
            return "\n".join(resolution.value)
        if resolution.kind in (ResolutionKind.ERROR, ResolutionKind.DIRECT):
            return str(resolution.value)
        return self.output.render(resolution.value)

    def run(self, argv: Sequence[str]) -> str:
        return self.render(self.execute(argv))

    def run_line(self, line: str) -> str:
        return self.render(self.execute_line(line))

    def intro(self) -> List[str]:
        meta = self.schema.metadata
        lines = [f"{meta.name} {meta.version}"]
        for text in (meta.about, meta.description, meta.url):
            if text:
                lines.append(text)
        return lines

    def close(self) -> None:
        self.history.close()
