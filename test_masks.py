from PIL import Image

from postergen.render.masks import build_circle_mask, circular_mask, corner_stencil, rounded_corners


def test_circle_mask_membership():
    mask = build_circle_mask((10, 10))

    assert mask.getpixel((5, 5)) == 255
    assert mask.getpixel((1, 5)) == 255
    # On the circle itself is outside
    assert mask.getpixel((0, 5)) == 0
    assert mask.getpixel((0, 0)) == 0
    assert mask.getpixel((9, 9)) == 0


def test_circle_radius_follows_height_on_wide_images():
    mask = build_circle_mask((20, 10))

    assert mask.getpixel((10, 5)) == 255
    assert mask.getpixel((2, 5)) == 0
    assert mask.getpixel((17, 5)) == 0


def test_circle_mask_explicit_radius():
    mask = build_circle_mask((20, 10), radius=10)
    assert mask.getpixel((2, 5)) == 255


def test_circular_mask_makes_outside_transparent():
    with Image.new("RGB", (10, 10), (255, 0, 0)) as src:
        masked = circular_mask(src)

    assert masked.mode == "RGBA"
    assert masked.getpixel((5, 5)) == (255, 0, 0, 255)
    assert masked.getpixel((0, 0))[3] == 0


def test_corner_stencil_is_quarter_disc():
    stencil = corner_stencil(5)

    assert stencil.size == (5, 5)
    assert stencil.getpixel((0, 0)) == 0
    assert stencil.getpixel((4, 4)) == 255


def test_rounded_corners_only_top():
    with Image.new("RGB", (20, 20), (255, 0, 0)) as src:
        rounded = rounded_corners(src, 5)

    assert rounded.getpixel((0, 0))[3] == 0
    assert rounded.getpixel((19, 0))[3] == 0
    assert rounded.getpixel((0, 19))[3] == 255
    assert rounded.getpixel((19, 19))[3] == 255
    assert rounded.getpixel((10, 10)) == (255, 0, 0, 255)


def test_rounded_corners_zero_radius_keeps_image():
    with Image.new("RGB", (8, 8), (0, 255, 0)) as src:
        rounded = rounded_corners(src, 0)

    assert rounded.getpixel((0, 0)) == (0, 255, 0, 255)


def test_rounded_corners_radius_clamped():
    with Image.new("RGB", (6, 4), (0, 0, 255)) as src:
        rounded = rounded_corners(src, 50)

    assert rounded.size == (6, 4)
    assert rounded.getpixel((0, 0))[3] == 0
