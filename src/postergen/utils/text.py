"""Text sanitization and approximate line breaking."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:
    from postergen.fonts import FontMetrics

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


class TextLayoutError(Exception):
    """Raised when text cannot be measured for layout."""


# ============================================================================
# Sanitization
# ============================================================================

def _is_kept_char(char: str) -> bool:
    """
    Check whether a character survives sanitization.

    Only characters encoded as a single ASCII byte or as a 3-byte UTF-8 sequence
    (lead byte 0xE0-0xEF) are kept. Surrogates cannot be encoded and are dropped.
    """
    code = ord(char)
    if code < 0x80:
        return True
    return 0x800 <= code <= 0xFFFF and not 0xD800 <= code <= 0xDFFF


def sanitize_text(raw: Union[str, bytes]) -> str:
    """
    Strip newlines and drop every character that is not 1-byte or 3-byte UTF-8.

    2-byte sequences (Latin-1 supplement, Cyrillic, ...) and 4-byte sequences
    (emoji, supplementary CJK) are silently removed. Bytes input is decoded as
    UTF-8 and invalid sequences are discarded.

    Args:
        raw: Text to clean.

    Returns:
        Sanitized text, possibly empty.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    return "".join(char for char in raw.replace("\n", "") if _is_kept_char(char))


# ============================================================================
# Width estimation
# ============================================================================

def char_units(char: str) -> int:
    """Estimated width of one character: 1 for ASCII, 2 for 3-byte characters."""
    return (len(char.encode("utf-8")) + 1) // 2


def estimate_length(text: str) -> float:
    """
    Approximate the display length of text in character units.

    Averages the UTF-8 byte length and the character count, so ASCII counts 1
    and 3-byte characters count 2 without any per-glyph metric calls.
    """
    return (len(text.encode("utf-8")) + len(text)) / 2


def truncate_width(text: str, max_units: int) -> str:
    """
    Take the longest prefix of text whose estimated width fits in max_units.

    Never splits a character. At least one character is taken from non-empty
    text, even if it alone is wider than max_units, so that wrapping always
    makes progress.

    Args:
        text: Source text.
        max_units: Width budget in character units.

    Returns:
        Prefix of text.
    """
    used = 0
    for index, char in enumerate(text):
        units = char_units(char)
        if used + units > max_units:
            return text[:index] if index > 0 else text[:1]
        used += units
    return text


# ============================================================================
# Line breaking
# ============================================================================

@dataclass
class Line:
    """
    One display line produced by the LineBreaker.

    Attributes:
        text: The text content.
        units: Estimated width in character units.
    """
    text: str
    units: float = 0.0

    def __post_init__(self):
        if not self.units:
            self.units = estimate_length(self.text)


class LineBreaker:
    """
    Greedy line breaker driven by an average glyph width.

    The whole string is measured once; its width divided by its estimated
    length gives a per-character width, from which the number of characters
    per line follows. Proportional fonts therefore wrap approximately.
    """

    def __init__(self, metrics: FontMetrics) -> None:
        self.metrics = metrics

    def max_chars_per_line(
        self, text: str, max_width: float, font_path: Optional[Path], size: int
    ) -> Optional[int]:
        """
        Compute how many character units fit in max_width for this text.

        Args:
            text: Sanitized text.
            max_width: Available width in pixels.
            font_path: Font file, or None for the fallback font.
            size: Font size in pixels.

        Returns:
            Character units per line, or None when the text has no length or
            no measurable width.

        Raises:
            TextLayoutError: If the font cannot be measured.
        """
        length = estimate_length(text)
        if length == 0:
            return None
        try:
            box = self.metrics.measure(font_path, size, text)
        except (OSError, ValueError) as e:
            raise TextLayoutError(f"Failed to measure text with font {font_path}: {e}") from e

        text_width = abs(box.width)
        if text_width == 0:
            return None

        single_width = text_width / length
        return math.floor(max_width / single_width)

    def wrap(
        self,
        text: Union[str, bytes],
        max_width: float,
        max_lines: int,
        font_path: Optional[Path] = None,
        size: int = 14,
    ) -> List[Line]:
        """
        Break text into at most max_lines lines of at most max_width pixels.

        When lines had to be dropped and the last kept line is full, its last
        three characters are replaced by an ellipsis, shortened to fit lines
        narrower than three units.

        Args:
            text: Raw text; it is sanitized first.
            max_width: Available width in pixels.
            max_lines: Maximum number of lines to return.
            font_path: Font file, or None for the fallback font.
            size: Font size in pixels.

        Returns:
            Ordered lines. Empty when there is nothing to draw.

        Raises:
            TextLayoutError: If the font cannot be measured.
        """
        text = sanitize_text(text)
        if not text or max_lines <= 0:
            return []

        max_chars = self.max_chars_per_line(text, max_width, font_path, size)
        if max_chars is None:
            return []

        lines: List[Line] = []
        remaining = text
        while estimate_length(remaining) > max_chars:
            chunk = truncate_width(remaining, max_chars)
            lines.append(Line(chunk))
            remaining = remaining[len(chunk):]
        if remaining:
            lines.append(Line(remaining))

        if len(lines) > max_lines:
            lines = lines[:max_lines]
            last = lines[-1]
            # Only mark the cut when the kept line was filled up to the boundary
            if len(last.text.encode("utf-8")) >= max_chars:
                # Lines narrower than the marker get a shortened marker
                marker = ELLIPSIS[:max(1, max_chars)]
                lines[-1] = Line(last.text[:-len(ELLIPSIS)] + marker)
            logger.debug(f"Truncated text to {max_lines} line(s) at {max_chars} units per line")

        return lines
