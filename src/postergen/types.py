"""Type aliases used across the postergen package."""

from enum import Enum
from typing import Literal, Tuple

# Color types
RGBColor = Tuple[int, int, int]  # RGB color in 0-255 range
RGBAColor = Tuple[int, int, int, int]

# Measurements
Size = Tuple[int, int]  # (width, height) in pixels

# Text placement options
TextAlign = Literal["left", "center", "right"]

# Image options
FlipMode = Literal["horizontal", "vertical", "both"]
ImageFormat = Literal["png", "jpeg"]


class DrawStatus(str, Enum):
    """Outcome of a single draw call on a DrawSurface."""

    DRAWN = "drawn"
    SKIPPED = "skipped"
    DECODE_FAILED = "decode_failed"
