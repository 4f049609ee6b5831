"""Positioning of wrapped and vertical text on a canvas."""

import logging
from typing import Optional, Sequence

from postergen.config import FontSpec
from postergen.fonts import FontMetrics
from postergen.render.canvas import Canvas
from postergen.types import DrawStatus
from postergen.utils.text import Line, sanitize_text

logger = logging.getLogger(__name__)


class TextLayoutEngine:
    """
    Places text blocks on a canvas.

    Lines are joined with newlines and drawn in a single render call, so line
    spacing is handled by the font renderer. The engine never keeps a reference
    to the canvas between calls.
    """

    def __init__(self, metrics: FontMetrics) -> None:
        self.metrics = metrics

    def aligned_x(
        self,
        text: str,
        x: int,
        width: int,
        font: FontSpec,
        source_text: Optional[str] = None,
    ) -> int:
        """
        Compute the left edge of a text block for the font's alignment.

        - left: x unchanged
        - right: x moved left by the width of the unwrapped source text, so
          that text's right edge would land on x
        - center: x moved right by half the space the wrapped block leaves
          in width

        Args:
            text: Wrapped text block (lines joined with "\\n").
            x: Requested origin.
            width: Bounding width used for centering.
            font: Active font settings.
            source_text: Unwrapped text; defaults to text.

        Returns:
            Adjusted x.
        """
        if font.align == "right":
            source_box = self.metrics.measure(
                font.path, font.size, source_text or text, font.line_spacing
            )
            return x - source_box.width
        if font.align == "center":
            # Wrapping changes the rendered width, so measure the wrapped block
            wrapped_box = self.metrics.measure(font.path, font.size, text, font.line_spacing)
            return x + int((width - wrapped_box.width) / 2)
        return x

    def place(
        self,
        canvas: Canvas,
        lines: Sequence[Line],
        x: int,
        y: int,
        width: int,
        font: FontSpec,
        source_text: Optional[str] = None,
    ) -> DrawStatus:
        """
        Draw wrapped lines with the first baseline at y.

        Args:
            canvas: Target canvas.
            lines: Lines produced by the LineBreaker.
            x: Left edge of the first glyph (before alignment).
            y: Baseline of the first line.
            width: Bounding width used for centering.
            font: Active font settings (path, size, color, spacing, alignment).
            source_text: Unwrapped sanitized text, used for right alignment.

        Returns:
            DrawStatus.DRAWN, or DrawStatus.SKIPPED if there was nothing to draw.
        """
        text = "\n".join(line.text for line in lines)
        if not text:
            return DrawStatus.SKIPPED

        text_x = self.aligned_x(text, x, width, font, source_text)
        logger.debug(f"Placing {len(lines)} line(s) at ({text_x}, {y}) aligned {font.align}")
        self.metrics.draw_text(
            canvas.image, font.path, font.size, text_x, y,
            canvas.color(font.color), text, font.line_spacing,
        )
        return DrawStatus.DRAWN

    def place_vertical(
        self,
        canvas: Canvas,
        text: str,
        x: int,
        y: int,
        font: FontSpec,
        height: Optional[int] = None,
    ) -> DrawStatus:
        """
        Draw text top to bottom, one character per line.

        When height is given, a non-negative y is centered within height. A
        negative y counts up from the canvas bottom edge and the block is
        raised by its own height so that it ends above that point. This is
        deliberately not a plain upward shift of y by the block height, which
        would leave the column above the top edge of the canvas for any
        negative y.

        Args:
            canvas: Target canvas.
            text: Raw text; it is sanitized first.
            x: Left edge of the column.
            y: Baseline of the first character.
            font: Active font settings.
            height: Optional height of the target box.

        Returns:
            DrawStatus.DRAWN, or DrawStatus.SKIPPED if there was nothing to draw.
        """
        text = sanitize_text(text)
        if not text:
            return DrawStatus.SKIPPED

        column = "\n".join(text)
        box = self.metrics.measure(font.path, font.size, column, font.line_spacing)
        if box.width == 0:
            return DrawStatus.SKIPPED

        if height is not None:
            if y >= 0:
                y += int((height - box.height) / 2)
            else:
                y = canvas.height + y - box.height

        logger.debug(f"Placing {len(text)} vertical character(s) at ({x}, {y})")
        self.metrics.draw_text(
            canvas.image, font.path, font.size, x, y,
            canvas.color(font.color), column, font.line_spacing,
        )
        return DrawStatus.DRAWN
