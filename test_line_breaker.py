import pytest

from postergen.fonts import TextBox
from postergen.utils.text import (
    LineBreaker,
    TextLayoutError,
    estimate_length,
    sanitize_text,
    truncate_width,
)


def test_sanitize_keeps_ascii_and_three_byte_characters():
    # é is 2-byte UTF-8, the emoji is 4-byte
    assert sanitize_text("a\nbé中😀c") == "ab中c"


def test_sanitize_decodes_bytes_and_drops_invalid_sequences():
    assert sanitize_text(b"\xffA" + "中".encode("utf-8")) == "A中"


def test_estimate_length_counts_wide_characters_double():
    assert estimate_length("ABC") == 3
    assert estimate_length("中文") == 4
    assert estimate_length("") == 0


def test_truncate_width_never_returns_empty_for_non_empty_text():
    assert truncate_width("中文", 1) == "中"
    assert truncate_width("ABCDEF", 3) == "ABC"
    assert truncate_width("AB", 10) == "AB"


def test_wrap_splits_at_character_budget(fake_metrics):
    lines = LineBreaker(fake_metrics).wrap("ABCDEF", 30, 2)
    assert [line.text for line in lines] == ["ABC", "DEF"]


def test_wrap_adds_ellipsis_when_lines_are_dropped(fake_metrics):
    lines = LineBreaker(fake_metrics).wrap("ABCDEF", 30, 1)
    assert [line.text for line in lines] == ["..."]


def test_wrap_keeps_wide_characters_whole(fake_metrics):
    lines = LineBreaker(fake_metrics).wrap("中文字符", 40, 3)
    assert [line.text for line in lines] == ["中文", "字符"]


def test_wrap_respects_line_limit(fake_metrics):
    lines = LineBreaker(fake_metrics).wrap("A" * 100, 30, 3)
    assert len(lines) == 3
    assert all(len(line.text) <= 3 for line in lines)
    assert lines[-1].text == "..."


def test_wrap_ellipsis_replaces_last_three_characters(fake_metrics):
    lines = LineBreaker(fake_metrics).wrap("AB CD EF", 50, 1)
    assert [line.text for line in lines] == ["AB..."]


def test_wrap_short_last_line_gets_no_ellipsis(fake_metrics):
    # A wide character does not fit after "A" in a 2-unit line
    lines = LineBreaker(fake_metrics).wrap("A中中", 20, 1)
    assert [line.text for line in lines] == ["A"]


@pytest.mark.parametrize(
    "text, max_width, expected",
    [("ABCD", 20, ".."), ("ABCD", 10, "."), ("中中", 20, "..")],
)
def test_wrap_ellipsis_fits_narrow_lines(fake_metrics, text, max_width, expected):
    lines = LineBreaker(fake_metrics).wrap(text, max_width, 1)

    assert [line.text for line in lines] == [expected]
    assert lines[0].units <= max(1, max_width // fake_metrics.unit)


def test_wrap_makes_progress_when_nothing_fits(fake_metrics):
    lines = LineBreaker(fake_metrics).wrap("ABCD", 5, 2)
    assert len(lines) == 2


@pytest.mark.parametrize("text", ["", "\n", "é😀"])
def test_wrap_empty_after_sanitizing(fake_metrics, text):
    assert LineBreaker(fake_metrics).wrap(text, 100, 2) == []


def test_wrap_zero_lines(fake_metrics):
    assert LineBreaker(fake_metrics).wrap("ABC", 100, 0) == []


def test_wrap_zero_width_text_draws_nothing():
    class ZeroWidth:
        def measure(self, font_path, size, text, line_spacing=None):
            return TextBox(0, -size, 0, 0)

    assert LineBreaker(ZeroWidth()).wrap("ABC", 100, 2) == []


def test_wrap_reports_unreadable_font():
    class Broken:
        def measure(self, font_path, size, text, line_spacing=None):
            raise OSError("cannot open resource")

    with pytest.raises(TextLayoutError):
        LineBreaker(Broken()).wrap("ABC", 100, 2, font_path="missing.ttf")
