"""CLI interface for the poster composer."""

import logging
from pathlib import Path

import click
import requests

from postergen import __version__
from postergen.api.builder import render_layout
from postergen.config import load_layout
from postergen.fonts import FontMetrics
from postergen.utils.text import LineBreaker, TextLayoutError


@click.group()
@click.version_option(version=__version__, prog_name="postergen")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """Compose posters and cards from text and images."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("layout_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output image path. Defaults to the layout path with a .png/.jpg suffix.",
)
@click.option(
    "--format",
    "image_format",
    type=click.Choice(["png", "jpeg"], case_sensitive=False),
    help="Output format override. Uses the layout's format if not specified.",
)
@click.option(
    "--insecure",
    is_flag=True,
    help="Do not verify TLS certificates when fetching remote images.",
)
def render(layout_path: Path, output: Path | None, image_format: str | None, insecure: bool) -> None:
    """
    Render a TOML layout document to an image.

    Relative image and font paths in the layout are resolved against the
    layout file's directory.
    """
    try:
        layout = load_layout(layout_path)

        # Apply CLI overrides
        updates = {}
        if image_format:
            updates["format"] = image_format.lower()
        if insecure:
            updates["loader"] = layout.loader.model_copy(update={"verify_tls": False})
        if updates:
            layout = layout.model_copy(update=updates)

        if output is None:
            output = layout_path.with_suffix(".jpg" if layout.format == "jpeg" else ".png")

        click.echo(f"Rendering {layout_path} ({len(layout.elements)} element(s))...")
        output.write_bytes(render_layout(layout, base_dir=layout_path.parent))
        click.echo(f"✓ Image saved to: {output}")

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except (requests.RequestException, TextLayoutError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("text")
@click.option("--width", type=int, required=True, help="Line width in pixels.")
@click.option("--max-lines", type=int, default=2, show_default=True, help="Maximum number of lines.")
@click.option("--size", type=int, default=14, show_default=True, help="Font size in pixels.")
@click.option(
    "--font",
    "font_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Font file. Uses the fallback font if not specified.",
)
def wrap(text: str, width: int, max_lines: int, size: int, font_path: Path | None) -> None:
    """Print how TEXT would be wrapped, one line per output line."""
    try:
        lines = LineBreaker(FontMetrics()).wrap(text, width, max_lines, font_path, size)
    except TextLayoutError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not lines:
        click.echo("(nothing to draw)")
        return
    for line in lines:
        click.echo(line.text)


if __name__ == "__main__":
    main()
