"""Page and graph renderers."""

from .graphs import GraphRenderer
from .html import HtmlEngine

__all__ = ["GraphRenderer", "HtmlEngine"]
