"""Font resolution, text measurement and text rasterization."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from postergen.types import RGBColor

logger = logging.getLogger(__name__)

FONTS_DIR = Path(__file__).parent

DEFAULT_FONT_SIZE = 14

# Pillow's own gap between lines of a multiline block, in pixels
DEFAULT_LINE_GAP = 4

# Checked in order when no font ships in FONTS_DIR. CJK-capable faces come first
# so that multi-byte text does not render as tofu.
SYSTEM_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/System/Library/Fonts/PingFang.ttc",
    "C:/Windows/Fonts/simfang.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
]

# Loaded font objects keyed by (path, size). None as path means Pillow's default font.
_FONT_CACHE: dict[tuple[Optional[str], int], ImageFont.FreeTypeFont] = {}
_fallback_font: Optional[Path] = None
_fallback_resolved = False


@dataclass(frozen=True)
class TextBox:
    """
    Bounding box of a rendered text block.

    Coordinates are relative to the render origin, which is the baseline of the
    first line at the left edge of the first glyph. y grows downward, so glyphs
    above the baseline have negative y.

    Attributes:
        min_x: Left edge.
        min_y: Top edge.
        max_x: Right edge.
        max_y: Bottom edge.
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def corners(self) -> tuple[int, int, int, int, int, int, int, int]:
        """Corner coordinates: lower-left, lower-right, upper-right, upper-left."""
        return (
            self.min_x, self.max_y,
            self.max_x, self.max_y,
            self.max_x, self.min_y,
            self.min_x, self.min_y,
        )

    def offset(self, x: int, y: int) -> "TextBox":
        """Return the same box translated to an absolute origin."""
        return TextBox(self.min_x + x, self.min_y + y, self.max_x + x, self.max_y + y)


def get_fallback_font() -> Optional[Path]:
    """
    Find the font used when no font file has been set.

    Resolution priority:
    1. First .ttf/.otf file bundled in the fonts directory
    2. First existing well-known system font
    3. None, meaning Pillow's built-in scalable font

    Returns:
        Path to the fallback font file, or None.
    """
    global _fallback_font, _fallback_resolved

    if _fallback_resolved:
        return _fallback_font

    bundled = sorted(FONTS_DIR.glob("*.ttf")) + sorted(FONTS_DIR.glob("*.otf"))
    if bundled:
        _fallback_font = bundled[0]
        logger.info(f"Using bundled fallback font: {_fallback_font.name}")
    else:
        for candidate in SYSTEM_FONT_CANDIDATES:
            path = Path(candidate)
            if path.is_file():
                _fallback_font = path
                logger.info(f"Using system fallback font: {path}")
                break
        else:
            logger.warning(
                f"No font files found in {FONTS_DIR} or system font locations. "
                "Using Pillow's built-in font, which has no CJK glyphs."
            )

    _fallback_resolved = True
    return _fallback_font


def load_font(font_path: Optional[Path], size: int) -> ImageFont.FreeTypeFont:
    """
    Load a font at a pixel size, caching the result.

    Args:
        font_path: Path to a TrueType/OpenType file. None uses the fallback font.
        size: Font size in pixels.

    Returns:
        Pillow font object.

    Raises:
        OSError: If the font file cannot be read.
    """
    if font_path is None:
        font_path = get_fallback_font()

    key = (str(font_path) if font_path is not None else None, int(size))
    font = _FONT_CACHE.get(key)
    if font is None:
        if font_path is None:
            font = ImageFont.load_default(size=size)
        else:
            font = ImageFont.truetype(str(font_path), size)
        _FONT_CACHE[key] = font
        logger.debug(f"Loaded font {key[0] or '<default>'} at {size}px")
    return font


def line_gap(size: int, line_spacing: Optional[float]) -> int:
    """
    Convert a line-spacing multiplier to Pillow's inter-line gap.

    A multiplier of 1.0 (or None) keeps Pillow's natural line advance; each
    additional 0.1 adds a tenth of the font size between lines.

    Args:
        size: Font size in pixels.
        line_spacing: Line-spacing multiplier, or None for the default.

    Returns:
        Gap in pixels (may be negative for tight spacing).
    """
    if line_spacing is None:
        return DEFAULT_LINE_GAP
    return DEFAULT_LINE_GAP + round(size * (line_spacing - 1.0))


class FontMetrics:
    """Measures and renders text with Pillow using baseline-anchored origins."""

    ANCHOR = "ls"

    def __init__(self) -> None:
        # Scratch surface for bounding-box queries
        self._scratch = ImageDraw.Draw(Image.new("L", (1, 1)))

    def measure(
        self,
        font_path: Optional[Path],
        size: int,
        text: str,
        line_spacing: Optional[float] = None,
    ) -> TextBox:
        """
        Measure the bounding box of a (possibly multi-line) text block.

        Args:
            font_path: Font file, or None for the fallback font.
            size: Font size in pixels.
            text: Text to measure; lines separated by "\\n".
            line_spacing: Optional line-spacing multiplier.

        Returns:
            TextBox relative to the baseline origin of the first line.
        """
        if not text:
            return TextBox(0, 0, 0, 0)
        font = load_font(font_path, size)
        left, top, right, bottom = self._scratch.multiline_textbbox(
            (0, 0), text, font=font, spacing=line_gap(size, line_spacing), anchor=self.ANCHOR
        )
        return TextBox(int(left), int(top), int(right), int(bottom))

    def draw_text(
        self,
        image: Image.Image,
        font_path: Optional[Path],
        size: int,
        x: int,
        y: int,
        color: RGBColor,
        text: str,
        line_spacing: Optional[float] = None,
    ) -> None:
        """
        Rasterize a text block onto an image.

        Args:
            image: Target Pillow image (modified in place).
            font_path: Font file, or None for the fallback font.
            size: Font size in pixels.
            x: Left edge of the first glyph.
            y: Baseline of the first line.
            color: RGB fill color.
            text: Text to draw; lines separated by "\\n".
            line_spacing: Optional line-spacing multiplier.
        """
        font = load_font(font_path, size)
        ImageDraw.Draw(image).multiline_text(
            (x, y), text, fill=color, font=font,
            spacing=line_gap(size, line_spacing), anchor=self.ANCHOR,
        )


def draw_builtin_string(image: Image.Image, x: int, y: int, color: RGBColor, text: str) -> None:
    """
    Draw a single line with Pillow's built-in font, anchored at its top-left corner.

    No measuring, wrapping or alignment is applied.
    """
    ImageDraw.Draw(image).text((x, y), text, fill=color, font=ImageFont.load_default())
