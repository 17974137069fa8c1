from .base import ContextRenderer
from .dump import DumpRenderer
from .fancy import FancyRenderer
from .json_renderer import JsonRenderer
from .plain import PlainRenderer

__all__ = ["ContextRenderer", "DumpRenderer", "FancyRenderer", "JsonRenderer", "PlainRenderer"]
