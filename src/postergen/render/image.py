"""Image loading, fitting and encoding utilities using Pillow."""

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import requests
from PIL import Image, ImageOps

from postergen.types import FlipMode, ImageFormat, Size

logger = logging.getLogger(__name__)

# Tall sources are cropped this far down (as a fraction of the excess height)
# instead of halfway, keeping the upper part where faces usually are.
VERTICAL_CROP_DIVISOR = 2.5


class ResourceNotFoundError(FileNotFoundError):
    """Raised when a local image path does not exist."""


def load_image_from_bytes(image_data: bytes) -> Image.Image:
    """
    Load and fully decode an image from raw bytes.

    Args:
        image_data: Raw image bytes (JPEG, PNG, etc.).

    Returns:
        PIL Image object.

    Raises:
        OSError: If the bytes are not a decodable image.
    """
    img = Image.open(BytesIO(image_data))
    try:
        img.load()
    except (OSError, ValueError):
        img.close()
        raise
    return img


def load_bitmap(
    source: Union[str, Path],
    verify_tls: bool = True,
    timeout: Optional[float] = None,
) -> Optional[Image.Image]:
    """
    Load a bitmap from a local path or an http(s) URL.

    Args:
        source: Local file path or URL.
        verify_tls: Verify TLS certificates for https URLs.
        timeout: Request timeout in seconds; None blocks until the server answers.

    Returns:
        Decoded PIL Image, or None if the data is not a valid image.

    Raises:
        ResourceNotFoundError: If a local path does not exist.
        requests.RequestException: If a remote fetch fails.
    """
    source_str = str(source)

    if source_str.startswith(("http://", "https://")):
        if not verify_tls:
            logger.warning(f"Fetching {source_str} without TLS certificate verification")
        logger.info(f"Fetching image: {source_str}")
        response = requests.get(source_str, verify=verify_tls, timeout=timeout)
        response.raise_for_status()
        image_data = response.content
    else:
        path = Path(source_str)
        if not path.is_file():
            raise ResourceNotFoundError(f"Image file not found: {source_str}")
        image_data = path.read_bytes()

    try:
        return load_image_from_bytes(image_data)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to decode image '{source_str}': {e}")
        return None


# ============================================================================
# Fitting policies
# ============================================================================

@dataclass(frozen=True)
class Placement:
    """
    Where a scaled bitmap lands inside a destination rectangle.

    Attributes:
        scale: Scale factor applied to the source (never above 1.0).
        width: Scaled width in pixels.
        height: Scaled height in pixels.
        offset_x: Horizontal offset from the destination's left edge.
        offset_y: Vertical offset from the destination's top edge.
    """
    scale: float
    width: int
    height: int
    offset_x: int
    offset_y: int


def letterbox(src_width: int, src_height: int, dst_width: int, dst_height: int) -> Placement:
    """
    Fit a source inside a destination, preserving aspect ratio, never enlarging.

    Args:
        src_width: Source width in pixels.
        src_height: Source height in pixels.
        dst_width: Destination width in pixels.
        dst_height: Destination height in pixels.

    Returns:
        Placement with the scaled size centered in the destination.
    """
    scale = min(1.0, dst_width / src_width, dst_height / src_height)
    # Very thin sources still keep one pixel on their short side
    width = max(1, int(scale * src_width))
    height = max(1, int(scale * src_height))
    return Placement(
        scale=scale,
        width=width,
        height=height,
        offset_x=(dst_width - width) // 2,
        offset_y=(dst_height - height) // 2,
    )


def square_crop_box(src_width: int, src_height: int) -> tuple[int, int, int, int]:
    """
    Select the square region used by the crop-to-size policies.

    Wide sources are cropped at the horizontal center. Tall sources are cropped
    with the vertical bias of VERTICAL_CROP_DIVISOR.

    Args:
        src_width: Source width in pixels.
        src_height: Source height in pixels.

    Returns:
        Crop box as (left, top, right, bottom).
    """
    if src_width > src_height:
        side = src_height
        left = int(abs(src_height - src_width) / 2)
        top = 0
    else:
        side = src_width
        left = 0
        top = int(abs(src_width - src_height) / VERTICAL_CROP_DIVISOR)
    return (left, top, left + side, top + side)


def center_crop(image: Image.Image, target_size: Size) -> Image.Image:
    """
    Crop the square center region and resample it to exactly target_size.

    Uses high-quality resampling; small sources are enlarged.

    Args:
        image: Source image (not modified).
        target_size: Target size as (width, height) in pixels.

    Returns:
        New image of exactly target_size.
    """
    return image.resize(
        target_size, Image.Resampling.LANCZOS, box=square_crop_box(image.width, image.height)
    )


def auto_size(image: Image.Image, target_size: Size) -> Image.Image:
    """
    Same crop as center_crop, resampled with nearest-neighbour.

    Intended as the intermediate step before masking, since the masked result
    is filtered again when blitted.
    """
    return image.resize(
        target_size, Image.Resampling.NEAREST, box=square_crop_box(image.width, image.height)
    )


def stretch_to_size(image: Image.Image, target_size: Size) -> Image.Image:
    """Resize the whole image to exactly target_size, ignoring aspect ratio."""
    return image.resize(target_size, Image.Resampling.NEAREST)


def flip_image(image: Image.Image, mode: FlipMode) -> Image.Image:
    """
    Mirror an image.

    Args:
        image: Source image (not modified).
        mode: "horizontal", "vertical" or "both".

    Returns:
        Flipped copy.
    """
    if mode == "horizontal":
        return ImageOps.mirror(image)
    elif mode == "vertical":
        return ImageOps.flip(image)
    elif mode == "both":
        return image.transpose(Image.Transpose.ROTATE_180)
    else:
        raise ValueError(f"Invalid flip mode: {mode}. Must be 'horizontal', 'vertical' or 'both'")


# ============================================================================
# Encoding
# ============================================================================

def save_image_to_bytes(img: Image.Image, format: ImageFormat = "png", quality: int = 90) -> bytes:
    """
    Encode a PIL Image to bytes.

    JPEG output drops the alpha channel.

    Args:
        img: PIL Image object.
        format: "png" or "jpeg".
        quality: JPEG quality (1-95); ignored for PNG.

    Returns:
        Encoded image bytes.
    """
    buffer = BytesIO()
    if format == "jpeg":
        rgb = img.convert("RGB")
        try:
            rgb.save(buffer, format="JPEG", quality=quality)
        finally:
            rgb.close()
    elif format == "png":
        img.save(buffer, format="PNG")
    else:
        raise ValueError(f"Invalid format: {format}. Must be 'png' or 'jpeg'")
    return buffer.getvalue()


def get_image_dimensions(image_data: bytes) -> tuple[int, int]:
    """
    Get dimensions of encoded image data without fully decoding it.

    Args:
        image_data: Raw image bytes.

    Returns:
        Tuple of (width, height) in pixels.
    """
    with Image.open(BytesIO(image_data)) as img:
        return (img.width, img.height)
