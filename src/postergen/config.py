"""Configuration and layout document loading and validation."""

import re
import tomllib
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from postergen.types import FlipMode, ImageFormat, TextAlign

_HEX_COLOR = re.compile(r"^#?[0-9A-Fa-f]*$")


def _check_hex_color(value: str | None) -> str | None:
    if value is not None and not _HEX_COLOR.match(value):
        raise ValueError(f"Invalid hex color: {value!r}")
    return value


class LoaderConfig(BaseModel):
    """Settings for loading source images."""

    verify_tls: bool = True
    """Verify TLS certificates for https image URLs. Disable only for trusted hosts."""

    timeout: float | None = None
    """Request timeout in seconds. None waits indefinitely."""


class FontSpec(BaseModel):
    """
    Active text settings of a DrawSurface.

    Copied and updated by the surface setters:

        font = FontSpec(size=20)
        bold = font.model_copy(update={"color": "#FF0000"})
    """

    path: Path | None = None
    """Font file. None uses the bundled or system fallback font."""

    size: int = Field(default=14, gt=0)
    """Font size in pixels."""

    color: str = "#000000"
    """Text color as a hex string."""

    line_spacing: float | None = None
    """Line-spacing multiplier. None keeps the renderer's natural spacing."""

    align: TextAlign = "left"
    """Horizontal alignment: "left", "center" or "right"."""

    @field_validator("color")
    @classmethod
    def check_color(cls, value: str | None) -> str | None:
        return _check_hex_color(value)


# ============================================================================
# Layout documents
# ============================================================================

class Background(BaseModel):
    """Canvas background: an image file/URL, or a solid color with a size."""

    file: str | None = None
    color: str = "#FFFFFF"
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)

    @field_validator("color")
    @classmethod
    def check_color(cls, value: str | None) -> str | None:
        return _check_hex_color(value)

    @model_validator(mode="after")
    def check_source(self) -> "Background":
        if self.file is None and (self.width is None or self.height is None):
            raise ValueError("Background needs either 'file' or both 'width' and 'height'")
        return self


class TextParams(BaseModel):
    """Text setting overrides applied before an element is drawn."""

    font: Path | None = None
    size: int | None = Field(default=None, gt=0)
    color: str | None = None
    line_spacing: float | None = None
    align: TextAlign | None = None

    @field_validator("color")
    @classmethod
    def check_color(cls, value: str | None) -> str | None:
        return _check_hex_color(value)

    def overrides(self) -> dict:
        """Return only the text parameters that were set."""
        return self.model_dump(
            include={"font", "size", "color", "line_spacing", "align"}, exclude_none=True
        )


class StringElement(TextParams):
    """Single line in the built-in font, anchored at its top-left corner."""

    type: Literal["string"]
    text: str
    x: int
    y: int


class TextElement(TextParams):
    """Wrapped horizontal text; (x, y) is the baseline of the first glyph."""

    type: Literal["text"]
    text: str
    x: int
    y: int
    width: int | None = None
    max_lines: int = 2


class VerticalTextElement(TextParams):
    """Text drawn one character per line."""

    type: Literal["vertical_text"]
    text: str
    x: int
    y: int
    height: int | None = None


class _ImageBox(BaseModel):
    source: str
    x: int
    y: int
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class ImageElement(_ImageBox):
    """Image shrunk to fit its box; optionally square-cropped first."""

    type: Literal["image"]
    flip: FlipMode | None = None
    crop: bool = False


class ScaleImageElement(_ImageBox):
    """Image shrunk to fit its box; optionally stretched to the box first."""

    type: Literal["scale_image"]
    stretch: bool = False


class RoundImageElement(_ImageBox):
    """Image square-cropped to its box and masked to a circle."""

    type: Literal["round_image"]


class RadiusImageElement(_ImageBox):
    """Image square-cropped to its box with rounded top corners."""

    type: Literal["radius_image"]
    radius: int = Field(ge=0)


Element = Annotated[
    Union[
        StringElement,
        TextElement,
        VerticalTextElement,
        ImageElement,
        ScaleImageElement,
        RoundImageElement,
        RadiusImageElement,
    ],
    Field(discriminator="type"),
]


class Layout(BaseModel):
    """Root layout document: background, default font and ordered elements."""

    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    background: Background
    font: FontSpec = Field(default_factory=FontSpec)
    elements: list[Element] = Field(default_factory=list)
    format: ImageFormat = "png"
    quality: int = Field(default=90, ge=1, le=95)


def load_layout(layout_path: Path) -> Layout:
    """
    Load a layout document from a TOML file.

    Args:
        layout_path: Path to the layout file.

    Returns:
        Validated Layout object.

    Raises:
        FileNotFoundError: If the layout file doesn't exist.
        ValueError: If the layout is invalid.
    """
    if not layout_path.exists():
        raise FileNotFoundError(f"Layout file not found: {layout_path}")

    with open(layout_path, "rb") as f:
        try:
            layout_dict = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {layout_path}: {e}") from e

    return Layout(**layout_dict)
