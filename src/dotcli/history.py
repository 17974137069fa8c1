"""Command history owned by a single worker thread.

Every request (push, read, flush) is sent to the worker over a queue and
answered synchronously, so concurrent callers are totally ordered. Entries
are kept newest-first internally and handed out oldest-first.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional, Tuple

from .errors import HistoryError, InvalidHistoryIndexError
from .models import HistoryEntry

logger = logging.getLogger(__name__)

_STOP = "stop"


@dataclass(frozen=True)
class HistoryState:
    """Raw internal record, newest entry first. Diagnostic use only."""
    entries: Tuple[HistoryEntry, ...]


class HistoryStore:
    """Append-only, index-addressable log of executed command lines."""

    def __init__(self, name: str = "dotcli-history"):
        self._entries: Deque[HistoryEntry] = deque()
        self._requests: "queue.Queue[Tuple[str, tuple, queue.Queue]]" = queue.Queue()
        self._stopped = threading.Event()
        # guards the stopped check and the enqueue in _call against shutdown
        self._lock = threading.Lock()
        self._worker = threading.Thread(target=self._run, name=name, daemon=True)
        self._worker.start()

    # Public API. Each call is a round trip to the worker.

    def push(self, line: str) -> List[HistoryEntry]:
        """Record ``line`` (stripped) and return the history oldest-first."""
        return self._call("push", line)

    def history(self) -> List[HistoryEntry]:
        return self._call("history")

    def length(self) -> int:
        return self._call("length")

    def flush(self) -> List[HistoryEntry]:
        return self._call("flush")

    def state(self) -> HistoryState:
        return self._call("state")

    def entry(self, index: int) -> HistoryEntry:
        """Return the entry at ``index`` or raise InvalidHistoryIndexError."""
        return self._call("entry", index)

    def close(self) -> None:
        if self._stopped.is_set():
            return
        self._call(_STOP)
        self._worker.join(timeout=1.0)

    def __enter__(self) -> "HistoryStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Worker side

    def _call(self, op: str, *payload: Any) -> Any:
        reply: "queue.Queue[Tuple[bool, Any]]" = queue.Queue(maxsize=1)
        with self._lock:
            if self._stopped.is_set():
                raise HistoryError("history service is not running")
            self._requests.put((op, payload, reply))
        ok, value = reply.get()
        if not ok:
            raise value
        return value

    def _run(self) -> None:
        handlers: dict = {
            "push": self._do_push,
            "history": self._do_history,
            "length": lambda: len(self._entries),
            "flush": self._do_flush,
            "state": lambda: HistoryState(tuple(self._entries)),
            "entry": self._do_entry,
        }
        while True:
            op, payload, reply = self._requests.get()
            if op == _STOP:
                self._shutdown(reply)
                break
            handler: Optional[Callable[..., Any]] = handlers.get(op)
            if handler is None:
                reply.put((False, HistoryError(f"unsupported history request: {op}")))
                continue
            try:
                reply.put((True, handler(*payload)))
            except InvalidHistoryIndexError as exc:
                reply.put((False, exc))
            except Exception as exc:
                logger.exception("History request %s failed", op)
                reply.put((False, HistoryError(f"history request {op} failed: {exc}")))

    def _shutdown(self, reply: "queue.Queue") -> None:
        with self._lock:
            self._stopped.set()
        reply.put((True, None))
        # nothing can be enqueued any more; answer whatever got in before
        while True:
            try:
                op, _, pending = self._requests.get_nowait()
            except queue.Empty:
                break
            if op == _STOP:
                pending.put((True, None))
            else:
                pending.put((False, HistoryError("history service is not running")))

    def _do_push(self, line: str) -> List[HistoryEntry]:
        entry = HistoryEntry(len(self._entries), str(line).strip())
        self._entries.appendleft(entry)
        logger.debug("History push %d: %s", entry.index, entry.line)
        return self._do_history()

    def _do_history(self) -> List[HistoryEntry]:
        return list(reversed(self._entries))

    def _do_flush(self) -> List[HistoryEntry]:
        self._entries.clear()
        return []

    def _do_entry(self, index: Any) -> HistoryEntry:
        try:
            position = int(index)
        except (TypeError, ValueError):
            raise InvalidHistoryIndexError(index)
        if position < 0 or position >= len(self._entries):
            raise InvalidHistoryIndexError(index)
        # newest-first storage: entry i sits at len - 1 - i
        return self._entries[len(self._entries) - 1 - position]
