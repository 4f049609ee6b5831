"""Poster and card image composer built on Pillow."""

__version__ = "0.1.0"

# High-level Python API
from postergen.api import DrawSurface, SurfaceClosedError, render_layout
from postergen.config import FontSpec, Layout, LoaderConfig, load_layout
from postergen.fonts import FontMetrics, TextBox
from postergen.render.image import ResourceNotFoundError
from postergen.types import DrawStatus
from postergen.utils.text import LineBreaker, TextLayoutError, sanitize_text

__all__ = [
    "DrawStatus",
    "DrawSurface",
    "FontMetrics",
    "FontSpec",
    "Layout",
    "LineBreaker",
    "LoaderConfig",
    "ResourceNotFoundError",
    "SurfaceClosedError",
    "TextBox",
    "TextLayoutError",
    "load_layout",
    "render_layout",
    "sanitize_text",
]
