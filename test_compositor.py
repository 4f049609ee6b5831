import pytest
from PIL import Image

from postergen.render.canvas import Canvas, parse_hex_color
from postergen.render.image import (
    center_crop,
    flip_image,
    get_image_dimensions,
    letterbox,
    load_bitmap,
    load_image_from_bytes,
    save_image_to_bytes,
    square_crop_box,
    stretch_to_size,
)


def _two_pixel_image():
    img = Image.new("RGB", (2, 1))
    img.putpixel((0, 0), (255, 0, 0))
    img.putpixel((1, 0), (0, 0, 255))
    return img


def test_letterbox_shrinks_and_centers():
    placement = letterbox(400, 200, 100, 100)
    assert placement.scale == pytest.approx(0.25)
    assert (placement.width, placement.height) == (100, 50)
    assert (placement.offset_x, placement.offset_y) == (0, 25)


def test_letterbox_never_enlarges():
    placement = letterbox(50, 20, 100, 100)
    assert placement.scale == 1.0
    assert (placement.width, placement.height) == (50, 20)
    assert (placement.offset_x, placement.offset_y) == (25, 40)


@pytest.mark.parametrize(
    "src, dst",
    [((1000, 3), (100, 100)), ((3, 1000), (40, 80)), ((640, 480), (64, 64)), ((7, 9), (7, 9))],
)
def test_letterbox_fits_destination(src, dst):
    placement = letterbox(*src, *dst)
    assert 1 <= placement.width <= max(dst[0], 1)
    assert 1 <= placement.height <= max(dst[1], 1)
    assert placement.width <= src[0] and placement.height <= src[1]
    assert placement.offset_x >= 0 and placement.offset_y >= 0


def test_square_crop_box_wide_is_centered():
    assert square_crop_box(200, 100) == (50, 0, 150, 100)


def test_square_crop_box_tall_is_biased_upward():
    assert square_crop_box(100, 200) == (0, 40, 100, 140)


def test_center_crop_fills_target():
    with Image.new("RGB", (300, 120), (10, 20, 30)) as src:
        cropped = center_crop(src, (50, 40))
    assert cropped.size == (50, 40)


def test_stretch_ignores_aspect_ratio():
    with Image.new("RGB", (10, 40)) as src:
        assert stretch_to_size(src, (30, 30)).size == (30, 30)


def test_flip_modes():
    img = _two_pixel_image()
    assert flip_image(img, "horizontal").getpixel((0, 0)) == (0, 0, 255)
    assert flip_image(img, "both").getpixel((0, 0)) == (0, 0, 255)
    assert flip_image(img, "vertical").getpixel((0, 0)) == (255, 0, 0)
    with pytest.raises(ValueError):
        flip_image(img, "sideways")


def test_encode_png_and_jpeg():
    img = Image.new("RGBA", (12, 7), (0, 128, 0, 128))

    png = save_image_to_bytes(img, "png")
    jpeg = save_image_to_bytes(img, "jpeg", quality=80)

    assert png.startswith(b"\x89PNG")
    assert jpeg.startswith(b"\xff\xd8")
    assert get_image_dimensions(png) == (12, 7)
    assert get_image_dimensions(jpeg) == (12, 7)


def test_parse_hex_color():
    assert parse_hex_color("#FF8000") == (255, 128, 0)
    assert parse_hex_color("ff8000") == (255, 128, 0)
    assert parse_hex_color("#F80") == (240, 128, 0)
    assert parse_hex_color("#12") == (0, 0, 0)


def test_color_cache_is_per_canvas():
    first = Canvas.blank(4, 4)
    second = Canvas.blank(4, 4)

    assert first.color("#123456") == (0x12, 0x34, 0x56)
    assert "123456" in first._colors
    assert "123456" not in second._colors


def test_blit_respects_source_alpha():
    canvas = Canvas.blank(20, 20, "#FFFFFF")
    layer = Image.new("RGBA", (10, 10), (255, 0, 0, 255))
    layer.putpixel((0, 0), (0, 0, 255, 0))

    canvas.blit(layer, 5, 5)

    assert canvas.get_pixel(6, 6) == (255, 0, 0, 255)
    assert canvas.get_pixel(5, 5) == (255, 255, 255, 255)
    assert canvas.get_pixel(0, 0) == (255, 255, 255, 255)


def test_blit_blends_semi_transparent_source():
    canvas = Canvas.blank(4, 4, "#FFFFFF")
    canvas.blit(Image.new("RGBA", (4, 4), (255, 0, 0, 128)), 0, 0)

    r, g, b, a = canvas.get_pixel(1, 1)
    assert a == 255
    assert r == 255
    assert abs(g - 127) <= 1 and abs(b - 127) <= 1


def test_blit_clips_negative_offsets():
    canvas = Canvas.blank(10, 10, "#FFFFFF")
    canvas.blit(Image.new("RGB", (6, 6), (0, 0, 255)), -3, -3)

    assert canvas.get_pixel(0, 0) == (0, 0, 255, 255)
    assert canvas.get_pixel(2, 2) == (0, 0, 255, 255)
    assert canvas.get_pixel(3, 3) == (255, 255, 255, 255)


def test_set_pixel():
    canvas = Canvas.blank(3, 3, "#000000")
    canvas.set_pixel(1, 2, (10, 20, 30, 255))

    assert canvas.get_pixel(1, 2) == (10, 20, 30, 255)
    assert canvas.get_pixel(2, 1) == (0, 0, 0, 255)


def test_blit_resamples_to_size():
    canvas = Canvas.blank(20, 20, "#FFFFFF")
    canvas.blit(Image.new("RGB", (10, 10), (0, 0, 255)), 0, 0, (4, 4))

    assert canvas.get_pixel(2, 2) == (0, 0, 255, 255)
    assert canvas.get_pixel(6, 6) == (255, 255, 255, 255)


def test_released_canvas_rejects_access():
    canvas = Canvas.blank(4, 4)
    canvas.release()
    assert canvas.closed
    with pytest.raises(RuntimeError):
        canvas.image


def test_load_image_closes_on_decode_error(monkeypatch):
    class Truncated:
        closed = False

        def load(self):
            raise OSError("image file is truncated")

        def close(self):
            self.closed = True

    truncated = Truncated()
    monkeypatch.setattr(Image, "open", lambda fp: truncated)

    with pytest.raises(OSError):
        load_image_from_bytes(b"\x89PNG")
    assert truncated.closed


def test_load_bitmap_truncated_file_is_decode_failure(tmp_path):
    path = tmp_path / "noise.png"
    Image.effect_noise((64, 64), 64).save(path)
    data = path.read_bytes()
    path.write_bytes(data[: len(data) // 2])

    assert load_bitmap(path) is None
