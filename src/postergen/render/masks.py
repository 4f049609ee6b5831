"""Alpha masks for circular and rounded-corner image crops."""

from typing import Optional

from PIL import Image, ImageChops, ImageDraw

from postergen.render.canvas import TRANSPARENT
from postergen.types import Size


def build_circle_mask(size: Size, radius: Optional[float] = None) -> Image.Image:
    """
    Build an "L" mask that is opaque inside a circle centered on the image.

    Every pixel is tested: (x, y) is opaque iff
    (x - w/2)^2 + (y - h/2)^2 < radius^2.

    Args:
        size: Mask size as (width, height).
        radius: Circle radius in pixels. Defaults to height / 2, so wide or
            tall sizes get a circle fitted to the height rather than the width.

    Returns:
        Mask image with values 0 or 255.
    """
    width, height = size
    if radius is None:
        radius = height / 2

    mask = Image.new("L", size, 0)
    pixels = mask.load()
    center_x, center_y = width / 2, height / 2
    radius_sq = radius * radius

    for x in range(width):
        dx = x - center_x
        for y in range(height):
            dy = y - center_y
            if dx * dx + dy * dy < radius_sq:
                pixels[x, y] = 255
    return mask


def circular_mask(image: Image.Image, radius: Optional[float] = None) -> Image.Image:
    """
    Crop an image to a circle, making everything outside fully transparent.

    Args:
        image: Source image (not modified).
        radius: Circle radius; defaults to half the image height.

    Returns:
        New RGBA image of the same size.
    """
    source = image.convert("RGBA")
    mask = build_circle_mask(image.size, radius)
    background = Image.new("RGBA", image.size, TRANSPARENT)
    try:
        return Image.composite(source, background, mask)
    finally:
        source.close()
        mask.close()
        background.close()


def corner_stencil(radius: int) -> Image.Image:
    """
    Build the top-left quarter-disc stencil for a rounded corner.

    The stencil is radius x radius; the pie slice from 180 to 270 degrees of a
    circle centered on its bottom-right corner is opaque, the rest transparent.
    """
    stencil = Image.new("L", (radius, radius), 0)
    ImageDraw.Draw(stencil).pieslice((0, 0, radius * 2, radius * 2), 180, 270, fill=255)
    return stencil


def rounded_corners(image: Image.Image, radius: int) -> Image.Image:
    """
    Round the two top corners of an image.

    The bottom corners stay square.

    Args:
        image: Source image (not modified).
        radius: Corner radius in pixels; clamped to the image size.

    Returns:
        New RGBA image of the same size with transparent top corners.
    """
    result = image.convert("RGBA")
    radius = min(int(radius), result.width, result.height)
    if radius <= 0:
        return result

    left_corner = corner_stencil(radius)
    right_corner = left_corner.transpose(Image.Transpose.ROTATE_270)
    alpha = result.getchannel("A")

    for stencil, x in ((left_corner, 0), (right_corner, result.width - radius)):
        region = alpha.crop((x, 0, x + radius, radius))
        alpha.paste(ImageChops.multiply(region, stencil), (x, 0))
        region.close()

    result.putalpha(alpha)
    left_corner.close()
    right_corner.close()
    alpha.close()
    return result
