"""High-level API for rendering layout documents."""

import logging
from pathlib import Path
from typing import Optional

from postergen.api.surface import DrawSurface
from postergen.config import (
    Element,
    FontSpec,
    ImageElement,
    Layout,
    RadiusImageElement,
    RoundImageElement,
    ScaleImageElement,
    StringElement,
    TextElement,
    VerticalTextElement,
)
from postergen.fonts import FontMetrics
from postergen.types import DrawStatus

logger = logging.getLogger(__name__)


def resolve_source(source: str, base_dir: Optional[Path]) -> str:
    """
    Resolve a relative file path against the layout's directory.

    URLs and absolute paths are returned unchanged.
    """
    if base_dir is None or source.startswith(("http://", "https://")):
        return source
    path = Path(source)
    if path.is_absolute():
        return source
    return str(base_dir / path)


def _font_params(font: FontSpec, base_dir: Optional[Path]) -> dict:
    params = font.model_dump(exclude_none=True, exclude={"path"})
    if font.path is not None:
        params["font"] = resolve_source(str(font.path), base_dir)
    return params


def draw_element(surface: DrawSurface, element: Element, base_dir: Optional[Path] = None) -> DrawStatus:
    """
    Draw one layout element on a surface.

    Text parameter overrides on the element are applied to the surface first
    and stay in effect for the following elements.

    Args:
        surface: Surface with an active canvas.
        element: Layout element.
        base_dir: Directory that relative paths are resolved against.

    Returns:
        Status of the draw call.
    """
    if isinstance(element, (StringElement, TextElement, VerticalTextElement)):
        overrides = element.overrides()
        if "font" in overrides:
            overrides["font"] = resolve_source(str(overrides["font"]), base_dir)
        surface.set_text_params(overrides)

        if isinstance(element, StringElement):
            return surface.add_string(element.text, element.x, element.y)
        if isinstance(element, TextElement):
            return surface.add_text(
                element.text, element.x, element.y,
                width=element.width, max_lines=element.max_lines,
            )
        return surface.add_vertical_text(element.text, element.x, element.y, height=element.height)

    source = resolve_source(element.source, base_dir)
    box = (element.x, element.y, element.width, element.height)

    if isinstance(element, ImageElement):
        return surface.add_image(source, *box, flip=element.flip, crop=element.crop)
    if isinstance(element, ScaleImageElement):
        return surface.add_scale_image(source, *box, stretch=element.stretch)
    if isinstance(element, RoundImageElement):
        return surface.add_round_image(source, *box)
    if isinstance(element, RadiusImageElement):
        return surface.add_radius_image(source, element.radius, *box)

    raise ValueError(f"Unsupported element type: {type(element).__name__}")


def render_layout(
    layout: Layout,
    base_dir: Optional[Path] = None,
    metrics: Optional[FontMetrics] = None,
) -> bytes:
    """
    Render a layout document to encoded image bytes.

    Elements are drawn in order. Images that cannot be decoded are skipped
    with a warning; missing local files abort the render.

    Args:
        layout: Validated layout (from load_layout() or built in code).
        base_dir: Directory that relative paths are resolved against.
        metrics: Optional text metrics provider.

    Returns:
        PNG or JPEG bytes, per layout.format.

    Raises:
        ResourceNotFoundError: If a local image path does not exist.
        requests.RequestException: If a remote image cannot be fetched.

    Example:
        ```python
        from pathlib import Path
        from postergen import load_layout, render_layout

        layout_path = Path("poster.toml")
        layout = load_layout(layout_path)
        Path("poster.png").write_bytes(render_layout(layout, base_dir=layout_path.parent))
        ```
    """
    with DrawSurface(metrics=metrics, loader=layout.loader) as surface:
        background = layout.background
        if background.file is not None:
            surface.create_bg_with_file(resolve_source(background.file, base_dir))
        else:
            surface.create_bg_with_color(background.width, background.height, background.color)

        surface.set_text_params(_font_params(layout.font, base_dir))

        for index, element in enumerate(layout.elements):
            status = draw_element(surface, element, base_dir)
            if status == DrawStatus.DECODE_FAILED:
                logger.warning(f"Element {index} ({element.type}): image could not be decoded, skipped")
            elif status == DrawStatus.SKIPPED:
                logger.debug(f"Element {index} ({element.type}): nothing to draw")

        return surface.encode(layout.format, layout.quality)
