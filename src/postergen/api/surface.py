"""DrawSurface: stateful facade for composing text and images on one canvas."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from PIL import Image

from postergen.config import FontSpec, LoaderConfig
from postergen.fonts import FontMetrics, draw_builtin_string
from postergen.render.canvas import Canvas
from postergen.render.image import (
    auto_size,
    center_crop,
    flip_image,
    letterbox,
    load_bitmap,
    save_image_to_bytes,
    stretch_to_size,
)
from postergen.render.masks import circular_mask, rounded_corners
from postergen.render.text import TextLayoutEngine
from postergen.types import DrawStatus, FlipMode, ImageFormat
from postergen.utils.text import LineBreaker, sanitize_text

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path]


class SurfaceClosedError(RuntimeError):
    """Raised when drawing without a canvas or after the surface was encoded."""


class DrawSurface:
    """
    Owns one canvas plus the current font, size, color, spacing and alignment.

    Setters mutate the state in place and return the surface so they can be
    chained; draw calls return a DrawStatus. Encoding with to_png() or to_jpeg()
    releases the canvas, after which the surface cannot be drawn on.

    Example:
        ```python
        surface = DrawSurface()
        surface.create_bg_with_color(600, 300, "#FFFFFF")
        surface.set_size(24).set_color("#333333").set_align("center")
        surface.add_text("Hello poster", 0, 120, width=600)
        png_bytes = surface.to_png()
        ```
    """

    def __init__(
        self,
        metrics: Optional[FontMetrics] = None,
        loader: Optional[LoaderConfig] = None,
    ) -> None:
        """
        Initialize an empty surface.

        Args:
            metrics: Text measuring/rendering provider. Defaults to Pillow's.
            loader: Image loading settings. Defaults to TLS-verified, no timeout.
        """
        self.metrics = metrics or FontMetrics()
        self.loader = loader or LoaderConfig()
        self.font = FontSpec()
        self.line_breaker = LineBreaker(self.metrics)
        self.text_engine = TextLayoutEngine(self.metrics)
        self._canvas: Optional[Canvas] = None
        self._finished = False

    def __enter__(self) -> "DrawSurface":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def canvas(self) -> Canvas:
        """The active canvas."""
        if self._finished:
            raise SurfaceClosedError("DrawSurface has already been encoded")
        if self._canvas is None:
            raise SurfaceClosedError(
                "No background: call create_bg_with_color() or create_bg_with_file() first"
            )
        return self._canvas

    # ========================================================================
    # Background
    # ========================================================================

    def create_bg_with_file(self, source: ImageSource) -> "DrawSurface":
        """
        Use an image file or URL as the canvas.

        The canvas takes the image's size.

        Raises:
            ResourceNotFoundError: If a local path does not exist.
            ValueError: If the image cannot be decoded.
        """
        self._check_open()
        image = self._load(source)
        if image is None:
            raise ValueError(f"Background image could not be decoded: {source}")
        self._replace_canvas(Canvas(image))
        logger.info(f"Created {self._canvas.width}x{self._canvas.height} canvas from {source}")
        return self

    def create_bg_with_color(self, width: int, height: int, color: str = "#FFFFFF") -> "DrawSurface":
        """Create a canvas of the given size filled with a solid color."""
        self._check_open()
        self._replace_canvas(Canvas.blank(width, height, color))
        logger.info(f"Created {width}x{height} canvas filled with {color}")
        return self

    # ========================================================================
    # Text settings
    # ========================================================================

    def set_font(self, path: Union[str, Path]) -> "DrawSurface":
        """Set the font file. Paths that are not existing files are ignored."""
        font_path = Path(path)
        if font_path.is_file():
            self._update_font(path=font_path)
        else:
            logger.warning(f"Font file not found: {font_path}. Keeping {self.font.path or 'fallback font'}")
        return self

    def set_size(self, size: int) -> "DrawSurface":
        self._update_font(size=int(size))
        return self

    def set_color(self, hex_color: str) -> "DrawSurface":
        self._update_font(color=hex_color)
        return self

    def set_line_spacing(self, value: float) -> "DrawSurface":
        self._update_font(line_spacing=float(value))
        return self

    def set_align(self, value: str) -> "DrawSurface":
        self._update_font(align=value)
        return self

    def set_text_params(self, params: Optional[dict] = None, **kwargs: Any) -> "DrawSurface":
        """
        Set several text parameters at once.

        Recognized keys: size, color, line_spacing, font, align. Unknown keys are ignored.
        """
        params = {**(params or {}), **kwargs}
        if "size" in params:
            self.set_size(params["size"])
        if "color" in params:
            self.set_color(params["color"])
        if "line_spacing" in params:
            self.set_line_spacing(params["line_spacing"])
        if "font" in params:
            self.set_font(params["font"])
        if "align" in params:
            self.set_align(params["align"])
        return self

    # ========================================================================
    # Text
    # ========================================================================

    def add_string(self, text: str, x: int, y: int) -> DrawStatus:
        """Draw one line in Pillow's built-in font with its top-left corner at (x, y)."""
        canvas = self.canvas
        if not text:
            return DrawStatus.SKIPPED
        draw_builtin_string(canvas.image, x, y, canvas.color(self.font.color), text)
        return DrawStatus.DRAWN

    def add_text(
        self,
        text: Union[str, bytes],
        x: int,
        y: int,
        width: Optional[int] = None,
        max_lines: int = 2,
    ) -> DrawStatus:
        """
        Draw wrapped text with the first glyph's baseline-left corner at (x, y).

        Args:
            text: Text to draw; newlines and unsupported characters are removed.
            x: Left edge of the first glyph (before alignment).
            y: Baseline of the first line.
            width: Wrap and centering width; defaults to the canvas width.
            max_lines: Maximum number of lines; overflow is cut with an ellipsis.

        Returns:
            DrawStatus.DRAWN, or DrawStatus.SKIPPED when there is nothing to draw.

        Raises:
            TextLayoutError: If the font cannot be measured.
        """
        canvas = self.canvas
        text = sanitize_text(text)
        if not text:
            return DrawStatus.SKIPPED
        if width is None:
            width = canvas.width

        lines = self.line_breaker.wrap(text, width, max_lines, self.font.path, self.font.size)
        if not lines:
            return DrawStatus.SKIPPED
        return self.text_engine.place(canvas, lines, x, y, width, self.font, source_text=text)

    def add_vertical_text(
        self, text: Union[str, bytes], x: int, y: int, height: Optional[int] = None
    ) -> DrawStatus:
        """
        Draw text one character per line.

        Args:
            text: Text to draw.
            x: Left edge of the column.
            y: Baseline of the first character; negative counts from the bottom
                edge when height is given.
            height: Box height used to center the column.
        """
        return self.text_engine.place_vertical(self.canvas, text, x, y, self.font, height)

    # ========================================================================
    # Images
    # ========================================================================

    def add_image(
        self,
        source: ImageSource,
        x: int,
        y: int,
        width: int,
        height: int,
        flip: Optional[FlipMode] = None,
        crop: bool = False,
    ) -> DrawStatus:
        """
        Shrink an image to fit the box (never enlarging) and center it there.

        Args:
            source: Local path or URL.
            x, y: Top-left corner of the box.
            width, height: Box size.
            flip: Optional mirroring before drawing.
            crop: Square-crop the image to exactly fill the box first.

        Returns:
            DrawStatus.DRAWN, or DrawStatus.DECODE_FAILED with the canvas unchanged.

        Raises:
            ResourceNotFoundError: If a local path does not exist.
        """
        canvas = self.canvas
        with self._open_source(source) as image:
            if image is None:
                return DrawStatus.DECODE_FAILED
            if crop:
                with center_crop(image, (width, height)) as cropped:
                    self._blit_letterboxed(canvas, cropped, x, y, width, height, flip)
            else:
                self._blit_letterboxed(canvas, image, x, y, width, height, flip)
        return DrawStatus.DRAWN

    def add_scale_image(
        self,
        source: ImageSource,
        x: int,
        y: int,
        width: int,
        height: int,
        stretch: bool = False,
    ) -> DrawStatus:
        """
        Shrink an image to fit the box, optionally stretching it to the box first.

        With stretch=True the whole image is resized to width x height without
        cropping, so aspect ratio is not preserved.
        """
        canvas = self.canvas
        with self._open_source(source) as image:
            if image is None:
                return DrawStatus.DECODE_FAILED
            if stretch:
                with stretch_to_size(image, (width, height)) as stretched:
                    self._blit_letterboxed(canvas, stretched, x, y, width, height)
            else:
                self._blit_letterboxed(canvas, image, x, y, width, height)
        return DrawStatus.DRAWN

    def add_round_image(
        self, source: ImageSource, x: int, y: int, width: int, height: int
    ) -> DrawStatus:
        """Square-crop an image to the box and draw it clipped to a circle."""
        canvas = self.canvas
        with self._open_source(source) as image:
            if image is None:
                return DrawStatus.DECODE_FAILED
            with auto_size(image, (width, height)) as sized, circular_mask(sized) as masked:
                canvas.blit(masked, x, y, (width, height))
        return DrawStatus.DRAWN

    def add_radius_image(
        self, source: ImageSource, radius: int, x: int, y: int, width: int, height: int
    ) -> DrawStatus:
        """Square-crop an image to the box and draw it with rounded top corners."""
        canvas = self.canvas
        with self._open_source(source) as image:
            if image is None:
                return DrawStatus.DECODE_FAILED
            with auto_size(image, (width, height)) as sized, rounded_corners(sized, radius) as rounded:
                canvas.blit(rounded, x, y, (width, height))
        return DrawStatus.DRAWN

    # ========================================================================
    # Output
    # ========================================================================

    def encode(self, format: ImageFormat = "png", quality: int = 90) -> bytes:
        """
        Encode the canvas and release it.

        The surface cannot be drawn on afterwards.

        Args:
            format: "png" or "jpeg".
            quality: JPEG quality; ignored for PNG.

        Returns:
            Encoded image bytes.
        """
        canvas = self.canvas
        try:
            data = save_image_to_bytes(canvas.image, format, quality)
        finally:
            self.close()
        logger.info(f"Encoded {format.upper()} ({len(data)} bytes)")
        return data

    def to_png(self) -> bytes:
        return self.encode("png")

    def to_jpeg(self, quality: int = 90) -> bytes:
        return self.encode("jpeg", quality)

    def close(self) -> None:
        """Release the canvas without encoding. Further drawing is rejected."""
        if self._canvas is not None:
            self._canvas.release()
            self._canvas = None
        self._finished = True

    # ========================================================================
    # Internals
    # ========================================================================

    def _check_open(self) -> None:
        if self._finished:
            raise SurfaceClosedError("DrawSurface has already been encoded")

    def _replace_canvas(self, canvas: Canvas) -> None:
        if self._canvas is not None:
            self._canvas.release()
        self._canvas = canvas

    def _update_font(self, **changes: Any) -> None:
        # Validate through the model so bad values never reach the renderer
        self.font = FontSpec.model_validate({**self.font.model_dump(), **changes})

    def _load(self, source: ImageSource) -> Optional[Image.Image]:
        return load_bitmap(source, verify_tls=self.loader.verify_tls, timeout=self.loader.timeout)

    @contextmanager
    def _open_source(self, source: ImageSource) -> Iterator[Optional[Image.Image]]:
        """Load a source bitmap and close it when the block exits."""
        image = self._load(source)
        try:
            yield image
        finally:
            if image is not None:
                image.close()

    def _blit_letterboxed(
        self,
        canvas: Canvas,
        image: Image.Image,
        x: int,
        y: int,
        width: int,
        height: int,
        flip: Optional[FlipMode] = None,
    ) -> None:
        placement = letterbox(image.width, image.height, width, height)
        if flip is not None:
            with flip_image(image, flip) as flipped:
                canvas.blit(
                    flipped, x + placement.offset_x, y + placement.offset_y,
                    (placement.width, placement.height),
                )
        else:
            canvas.blit(
                image, x + placement.offset_x, y + placement.offset_y,
                (placement.width, placement.height),
            )
