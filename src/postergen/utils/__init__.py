"""Utility modules."""

from postergen.utils.text import (
    ELLIPSIS,
    Line,
    LineBreaker,
    TextLayoutError,
    char_units,
    estimate_length,
    sanitize_text,
    truncate_width,
)

__all__ = [
    "ELLIPSIS",
    "Line",
    "LineBreaker",
    "TextLayoutError",
    "char_units",
    "estimate_length",
    "sanitize_text",
    "truncate_width",
]
