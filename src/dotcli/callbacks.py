"""Ordered callback chains keyed by event name.

A registry instance is created alongside the output orchestrator and passed
to whoever needs to register formatters. Callbacks run in registration
order. Each one returns either a replacement value (the chain continues),
``Continue(value)``, or ``Halt(value)`` which ends the chain with ``value``.

Callbacks can be tagged with the input shape they understand:

- ``for_text`` callbacks only see strings; an ``OutputContext`` passes
  through them untouched.
- ``for_context`` callbacks only see ``OutputContext`` values; strings pass
  through untouched.

Untagged callbacks see every value.
"""

from __future__ import annotations

import functools
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .context import OutputContext

logger = logging.getLogger(__name__)

FORMAT_OUTPUT = "format_output"
FORMAT_HELP = "format_help"

Callback = Callable[[Any], Any]


@dataclass(frozen=True)
class Continue:
    value: Any


@dataclass(frozen=True)
class Halt:
    value: Any


def _shape_guard(accepts: type, shape: str) -> Callable[[Callback], Callback]:
    def decorator(fn: Callback) -> Callback:
        @functools.wraps(fn)
        def wrapper(value: Any) -> Any:
            if not isinstance(value, accepts):
                return value
            return fn(value)

        wrapper.accepts = shape  # type: ignore[attr-defined]
        return wrapper

    return decorator


def for_text(fn: Callback) -> Callback:
    """Tag ``fn`` as a string formatter, inert for structured contexts."""
    return _shape_guard(str, "text")(fn)


def for_context(fn: Callback) -> Callback:
    """Tag ``fn`` as a context formatter, inert for plain strings."""
    return _shape_guard(OutputContext, "context")(fn)


class CallbackRegistry:
    """Event name to ordered list of callbacks."""

    def __init__(self):
        self._callbacks: Dict[str, List[Callback]] = OrderedDict()

    def register(self, event: str, callback: Callback) -> Callback:
        """Append ``callback`` to ``event``'s chain. Returns the callback."""
        if not callable(callback):
            raise TypeError(f"callback for {event!r} is not callable: {callback!r}")
        self._callbacks.setdefault(event, []).append(callback)
        logger.debug("Registered %s callback %s", event, getattr(callback, "__name__", callback))
        return callback

    def on(self, event: str) -> Callable[[Callback], Callback]:
        """Decorator form of :meth:`register`."""
        def decorator(fn: Callback) -> Callback:
            return self.register(event, fn)
        return decorator

    def unregister(self, event: str, callback: Callback) -> bool:
        chain = self._callbacks.get(event, [])
        if callback in chain:
            chain.remove(callback)
            return True
        return False

    def has_callbacks(self, event: str) -> bool:
        return bool(self._callbacks.get(event))

    def callbacks(self, event: str) -> List[Callback]:
        return list(self._callbacks.get(event, []))

    def clear(self, event: Optional[str] = None) -> None:
        if event is None:
            self._callbacks.clear()
        else:
            self._callbacks.pop(event, None)

    def execute(self, event: str, value: Any) -> Any:
        """Thread ``value`` through the chain for ``event``.

        A callback that raises is logged and treated as if it had returned
        its input unchanged.
        """
        current = value
        for callback in self.callbacks(event):
            try:
                result = callback(current)
            except Exception:
                logger.warning(
                    "Callback %s for %s failed; continuing with unchanged value",
                    getattr(callback, "__name__", repr(callback)),
                    event,
                    exc_info=True,
                )
                continue
            if isinstance(result, Halt):
                return result.value
            if isinstance(result, Continue):
                result = result.value
            current = result
        return current
