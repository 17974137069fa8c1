"""Merges configurators into one unified command schema."""

from __future__ import annotations

import copy
import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .commands.base import Command, instantiate
from .configurator import Configurator
from .models import CliMetadata, UnifiedSchema

logger = logging.getLogger(__name__)


class Coordinator:
    """Builds the :class:`UnifiedSchema` once at startup.

    Features:
    - Drops repeated configurators, keeping the first occurrence
    - Later configurators override metadata fields they set
    - Nested subcommands are registered under ``parent.child`` names
    - On duplicate command names the last registration wins

    Nothing here raises: problems are logged as warnings and the offending
    configurator or command is skipped.
    """

    def setup(self, configurators: Optional[Iterable[Configurator]]) -> UnifiedSchema:
        try:
            candidates = list(configurators or [])
        except TypeError:
            logger.warning(
                "Configurators must be a list, got %r; using an empty schema",
                configurators,
                extra={"event": "invalid_configurators"},
            )
            candidates = []

        commands: List[Command] = []
        metadata = CliMetadata()
        for configurator in self._dedupe(candidates):
            try:
                provided = configurator.commands()
                provided_meta = configurator.metadata()
            except Exception as exc:
                logger.warning(
                    "Configurator %r failed and was skipped: %s",
                    configurator,
                    exc,
                    extra={"event": "configurator_failed"},
                )
                continue
            for cmd in provided:
                commands.extend(self._flatten(cmd))
            metadata = metadata.merged_with(provided_meta)

        merged = self._resolve_collisions(commands)
        schema = UnifiedSchema(
            descriptors=[cmd.descriptor for cmd in merged.values()],
            handlers=dict(merged),
            metadata=metadata.with_defaults(),
        )
        logger.info("Registered %d commands", len(schema.descriptors))
        return schema

    def _dedupe(self, configurators: List[Any]) -> List[Configurator]:
        seen = set()
        unique = []
        for configurator in configurators:
            if not isinstance(configurator, Configurator):
                logger.warning(
                    "Ignoring %r: not a configurator",
                    configurator,
                    extra={"event": "invalid_configurator"},
                )
                continue
            identity = configurator.identity
            if identity in seen:
                logger.warning(
                    "Duplicate configurator %s ignored",
                    configurator.name,
                    extra={"event": "duplicate_configurator", "configurator": ".".join(identity)},
                )
                continue
            seen.add(identity)
            unique.append(configurator)
        return unique

    def _flatten(self, cmd: Command) -> Iterator[Command]:
        children = []
        for entry in cmd.subcommands:
            child = instantiate(entry)
            if child is None:
                logger.warning("Ignoring subcommand %r of %s: not a command", entry, cmd.name)
                continue
            # renamed on a copy; configurators may hand out shared instances
            child = copy.copy(child)
            child.descriptor = child.descriptor.model_copy(
                update={"name": f"{cmd.name}.{child.descriptor.name}"}
            )
            children.append(child)
        if children:
            cmd = copy.copy(cmd)
            cmd.descriptor = cmd.descriptor.model_copy(
                update={"subcommands": [c.descriptor for c in children]}
            )
        yield cmd
        for child in children:
            yield from self._flatten(child)

    def _resolve_collisions(self, commands: List[Command]) -> Dict[str, Command]:
        merged: "OrderedDict[str, Command]" = OrderedDict()
        for cmd in commands:
            if cmd.name in merged:
                logger.warning(
                    "Duplicate command name %s; keeping the last registration",
                    cmd.name,
                    extra={"event": "duplicate_command", "command": cmd.name},
                )
                del merged[cmd.name]
            merged[cmd.name] = cmd
        return merged
