"""Machine-readable renderer."""

from __future__ import annotations

import json

from ..context import OutputContext
from ..settings import OutputStyle
from .base import ContextRenderer


class JsonRenderer(ContextRenderer):
    style = OutputStyle.JSON

    def render(self, ctx: OutputContext) -> str:
        payload = {
            "command": ctx.command,
            "status": ctx.status.value,
            "output": [
                item.model_dump(mode="json", exclude_defaults=True)
                for item in ctx.output
            ],
            "errors": list(ctx.errors),
        }
        if ctx.cargo:
            payload["cargo"] = ctx.cargo
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
