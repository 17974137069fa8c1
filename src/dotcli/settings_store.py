"""YAML-backed key/value settings store.

The map returned by :meth:`SettingsStore.load` is handed read-only to
command handlers; ``style`` and ``no_color`` keys also seed the output
metadata of each invocation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .errors import SettingsError

logger = logging.getLogger(__name__)

_MISSING = object()


class SettingsStore:
    """Load and save a flat or nested settings mapping in a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Dict[str, Any]:
        """Return the stored settings; a missing file yields an empty map."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            raise SettingsError(str(self.path), str(exc)) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SettingsError(str(self.path), "top level must be a mapping")
        return data

    def save(self, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``updates`` into the stored settings and write them back."""
        merged = self.load()
        merged.update(dict(updates))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(merged, f, default_flow_style=False, indent=2)
        except OSError as exc:
            raise SettingsError(str(self.path), str(exc)) from exc
        logger.info("Saved %d settings to %s", len(merged), self.path)
        return merged

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return lookup(self.load(), key, default)


def lookup(settings: Mapping[str, Any], key: str, default: Optional[Any] = None) -> Any:
    """Read ``key`` from ``settings``, descending into nested maps on dots.

    A literal key containing dots wins over the nested interpretation.
    """
    if key in settings:
        return settings[key]
    node: Any = settings
    for part in key.split("."):
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node
