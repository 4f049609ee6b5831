"""Shared pytest fixtures."""

import pytest

from postergen.fonts import TextBox
from postergen.utils.text import estimate_length


class FakeMetrics:
    """Deterministic metrics: every character unit is `unit` pixels wide, lines are `size` tall."""

    def __init__(self, unit: int = 10):
        self.unit = unit
        self.draw_calls = []

    def measure(self, font_path, size, text, line_spacing=None):
        if not text:
            return TextBox(0, 0, 0, 0)
        lines = text.split("\n")
        width = int(max(estimate_length(line) for line in lines) * self.unit)
        return TextBox(0, -size, width, size * len(lines) - size)

    def draw_text(self, image, font_path, size, x, y, color, text, line_spacing=None):
        self.draw_calls.append({"x": x, "y": y, "color": color, "text": text})


@pytest.fixture
def fake_metrics():
    return FakeMetrics()
