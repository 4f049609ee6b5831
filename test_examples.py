import runpy
import shutil
from pathlib import Path

from click.testing import CliRunner
from PIL import Image

from postergen.cli import main
from postergen.render.image import get_image_dimensions

EXAMPLES_DIR = Path(__file__).parent / "examples"


def test_simple_example_without_avatar(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    runpy.run_path(str(EXAMPLES_DIR / "simple_example.py"), run_name="__main__")

    output = capsys.readouterr().out
    assert "avatar.jpg not found" in output
    assert get_image_dimensions((tmp_path / "card.png").read_bytes()) == (600, 300)


def test_simple_example_with_avatar(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    Image.new("RGB", (240, 320), (90, 120, 200)).save(tmp_path / "avatar.jpg")

    runpy.run_path(str(EXAMPLES_DIR / "simple_example.py"), run_name="__main__")

    assert "not found" not in capsys.readouterr().out
    assert (tmp_path / "card.png").exists()


def test_poster_layout_renders(tmp_path):
    layout = Path(shutil.copy(EXAMPLES_DIR / "poster.toml", tmp_path))
    Image.new("RGB", (900, 700), (40, 40, 40)).save(tmp_path / "cover.jpg")
    Image.new("RGBA", (64, 64), (200, 200, 0, 180)).save(tmp_path / "sponsor.png")

    result = CliRunner().invoke(main, ["render", str(layout)])

    assert result.exit_code == 0, result.output
    assert get_image_dimensions((tmp_path / "poster.png").read_bytes()) == (800, 1200)
