"""Raster canvas owned by a single DrawSurface."""

import logging
from typing import Optional

from PIL import Image

from postergen.types import RGBAColor, RGBColor, Size

logger = logging.getLogger(__name__)

TRANSPARENT: RGBAColor = (0, 0, 0, 0)


def parse_hex_color(hex_color: str) -> RGBColor:
    """
    Resolve a hex color string to an RGB triple.

    Accepts "#RRGGBB" and "#RGB", with or without the leading "#". The short
    form multiplies each nibble by 16 ("#F80" -> (240, 128, 0)). Anything shorter
    than three digits resolves to black.

    Args:
        hex_color: Hex color string.

    Returns:
        Tuple of (r, g, b) in 0-255 range.

    Raises:
        ValueError: If the string contains non-hex digits.
    """
    digits = hex_color[1:] if hex_color.startswith("#") else hex_color

    if len(digits) > 5:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    if len(digits) > 2:
        return (int(digits[0], 16) * 16, int(digits[1], 16) * 16, int(digits[2], 16) * 16)
    return (0, 0, 0)


class Canvas:
    """
    Fixed-size RGBA raster surface.

    Colors resolved through color() are cached on the canvas itself, so two
    canvases never share resolved colors.
    """

    def __init__(self, image: Image.Image) -> None:
        """
        Wrap an image as a canvas.

        Args:
            image: Pillow image; converted to RGBA if necessary.
        """
        if image.mode != "RGBA":
            converted = image.convert("RGBA")
            image.close()
            image = converted
        self._image: Optional[Image.Image] = image
        self._colors: dict[str, RGBColor] = {}

    @classmethod
    def blank(cls, width: int, height: int, color: str = "#FFFFFF") -> "Canvas":
        """Create a canvas filled with a solid color."""
        canvas = cls(Image.new("RGBA", (width, height), TRANSPARENT))
        canvas.fill(canvas.color(color))
        return canvas

    @property
    def image(self) -> Image.Image:
        """Underlying Pillow image."""
        if self._image is None:
            raise RuntimeError("Canvas has been released")
        return self._image

    @property
    def closed(self) -> bool:
        return self._image is None

    @property
    def size(self) -> Size:
        return self.image.size

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def color(self, hex_color: str) -> RGBColor:
        """
        Resolve a hex color against this canvas, caching the result.

        Args:
            hex_color: Hex color string ("#RRGGBB" or "#RGB").

        Returns:
            RGB tuple.
        """
        key = hex_color[1:] if hex_color.startswith("#") else hex_color
        resolved = self._colors.get(key)
        if resolved is None:
            resolved = self._colors[key] = parse_hex_color(key)
        return resolved

    def fill(self, color: RGBColor) -> None:
        """Fill the whole canvas with an opaque color."""
        self.image.paste((*color, 255), (0, 0, self.width, self.height))

    def get_pixel(self, x: int, y: int) -> RGBAColor:
        return self.image.getpixel((x, y))

    def set_pixel(self, x: int, y: int, color: RGBAColor) -> None:
        self.image.putpixel((x, y), color)

    def blit(
        self,
        source: Image.Image,
        x: int,
        y: int,
        size: Optional[Size] = None,
        resample: Image.Resampling = Image.Resampling.LANCZOS,
    ) -> None:
        """
        Copy a bitmap onto the canvas, optionally resampling it first.

        The source is alpha-composited over the destination region, so an
        opaque canvas stays opaque under semi-transparent source pixels.

        Args:
            source: Bitmap to copy (not modified).
            x: Destination left edge.
            y: Destination top edge.
            size: Destination size; None keeps the source size.
            resample: Resampling filter used when resizing.
        """
        if source.mode != "RGBA":
            layer = source.convert("RGBA")
        else:
            layer = source.copy()
        try:
            if size is not None and size != layer.size:
                resized = layer.resize(size, resample)
                layer.close()
                layer = resized
            left, top = int(x), int(y)
            # Parts of the region outside the canvas read as transparent and are clipped on paste
            region = self.image.crop((left, top, left + layer.width, top + layer.height))
            composited = Image.alpha_composite(region, layer)
            self.image.paste(composited, (left, top))
            region.close()
            composited.close()
        finally:
            layer.close()

    def release(self) -> None:
        """Free the pixel buffer; the canvas cannot be used afterwards."""
        if self._image is not None:
            self._image.close()
            self._image = None
            self._colors.clear()
