"""Tab completion over dotted command names."""

from __future__ import annotations

import difflib
from typing import Callable, Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document


def complete(prefix: str, names: Iterable[str]) -> List[str]:
    """Return the command names matching ``prefix``, sorted.

    An empty prefix matches everything. A prefix ending in ``.`` matches the
    direct members of that namespace only (``sys.`` gives ``sys.info`` but
    not ``sys.net.ping``). Any other prefix matches by plain ``startswith``.
    """
    prefix = prefix.strip()
    candidates = sorted(set(names))
    if not prefix:
        return candidates
    if prefix.endswith("."):
        return [
            name for name in candidates
            if name.startswith(prefix) and "." not in name[len(prefix):]
        ]
    return [name for name in candidates if name.startswith(prefix)]


def suggest(word: str, names: Iterable[str], limit: int = 3) -> List[str]:
    """Command names the user may have meant by ``word``.

    Names whose last segment equals the input come first (``ping`` gives
    ``dev.net.ping``), then close spellings by ``difflib`` ratio.
    """
    word = word.strip()
    if not word:
        return []
    candidates = sorted(set(names))
    found = [name for name in candidates if name != word and name.rpartition(".")[2] == word]
    for name in difflib.get_close_matches(word, candidates, n=limit):
        if name not in found:
            found.append(name)
    return found[:limit]


class DottedCommandCompleter(Completer):
    """prompt_toolkit completer for the first word of a REPL line."""

    def __init__(self, names: Callable[[], Iterable[str]]):
        self._names = names

    def get_completions(self, document: Document, complete_event):
        text = document.text_before_cursor
        if " " in text.lstrip():
            return
        word = text.lstrip()
        for name in complete(word, self._names()):
            yield Completion(name, start_position=-len(word))
