"""Drawing surface and layout rendering API."""

from postergen.api.builder import draw_element, render_layout, resolve_source
from postergen.api.surface import DrawSurface, SurfaceClosedError

__all__ = [
    "DrawSurface",
    "SurfaceClosedError",
    "draw_element",
    "render_layout",
    "resolve_source",
]
