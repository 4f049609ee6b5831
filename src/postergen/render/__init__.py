"""Rendering modules for canvas, image fitting, masks and text placement."""

from postergen.render.canvas import Canvas, parse_hex_color
from postergen.render.image import (
    Placement,
    ResourceNotFoundError,
    auto_size,
    center_crop,
    get_image_dimensions,
    letterbox,
    load_bitmap,
    load_image_from_bytes,
    save_image_to_bytes,
    stretch_to_size,
)
from postergen.render.masks import circular_mask, rounded_corners
from postergen.render.text import TextLayoutEngine

__all__ = [
    "Canvas",
    "Placement",
    "ResourceNotFoundError",
    "TextLayoutEngine",
    "auto_size",
    "center_crop",
    "circular_mask",
    "get_image_dimensions",
    "letterbox",
    "load_bitmap",
    "load_image_from_bytes",
    "parse_hex_color",
    "rounded_corners",
    "save_image_to_bytes",
    "stretch_to_size",
]
