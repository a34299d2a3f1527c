"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Optional

import typer
from PySide6.QtCore import QCoreApplication, QRect
from PySide6.QtGui import QTransform
from rich import print

from cropview.core.filters.grayscale import grayscale_qimage
from cropview.errors import CropViewError
from cropview.gui.ui.widgets.crop_viewport.geometry import Rect
from cropview.gui.ui.widgets.crop_viewport.model import CropModel
from cropview.gui.utils.console_logger import ensure_console_logger
from cropview.utils.image_loader import open_image, save_qimage

app = typer.Typer(help="Fitted image viewer with drag-to-crop selection")

_ROTATIONS = (0, 90, 180, 270)


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CropViewError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _ensure_core_app() -> None:
    # Image format plugins are discovered through the application instance.
    if QCoreApplication.instance() is None:
        QCoreApplication([])


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    ensure_console_logger(logging.getLogger("cropview"), "cropview-console", level=level)


@app.command()
def view(path: Optional[Path] = typer.Argument(None, help="Image to open")) -> None:
    """Open the desktop viewer."""

    from cropview.gui.main import main as gui_main

    argv = ["cropview"]
    if path is not None:
        argv.append(str(path))
    raise typer.Exit(gui_main(argv))


@app.command()
@_handle_errors
def info(path: Path = typer.Argument(..., help="Image to inspect")) -> None:
    """Print the dimensions and pixel format of an image."""

    _ensure_core_app()
    image = open_image(path)
    print(f"[bold]{path.name}[/bold]")
    print(f"  size:   {image.width()}×{image.height()}")
    print(f"  format: {image.format().name}")
    print(f"  depth:  {image.depth()} bpp")


@app.command()
@_handle_errors
def grayscale(
    source: Path = typer.Argument(..., help="Input image"),
    destination: Path = typer.Argument(..., help="Output image"),
) -> None:
    """Convert an image to grayscale."""

    _ensure_core_app()
    image = grayscale_qimage(open_image(source))
    save_qimage(image, destination)
    print(f"[green]Wrote grayscale image to {destination}")


@app.command()
@_handle_errors
def crop(
    source: Path = typer.Argument(..., help="Input image"),
    destination: Path = typer.Argument(..., help="Output image"),
    x: int = typer.Option(..., help="Left edge of the crop in source pixels"),
    y: int = typer.Option(..., help="Top edge of the crop in source pixels"),
    width: int = typer.Option(..., help="Crop width in source pixels"),
    height: int = typer.Option(..., help="Crop height in source pixels"),
    rotate: int = typer.Option(0, help="Clockwise rotation applied after cropping (0/90/180/270)"),
    mirror: bool = typer.Option(False, "--mirror", help="Flip horizontally after rotating"),
) -> None:
    """Crop an image, then rotate and mirror the result."""

    if rotate not in _ROTATIONS:
        raise typer.BadParameter("rotate must be one of 0, 90, 180, 270", param_hint="--rotate")

    _ensure_core_app()
    image = open_image(source)
    model = CropModel()
    model.set_crop(Rect(x, y, width, height), image.width(), image.height())

    for _ in range(rotate // 90):
        image = image.transformed(QTransform().rotate(90))
        model.rotate_90(image.width(), image.height())
    if mirror:
        image = image.mirrored(True, False)
        model.mirror(image.width())

    region = model.effective_rect(image.width(), image.height())
    save_qimage(image.copy(QRect(*region.as_tuple())), destination)
    print(f"[green]Wrote {region.width}×{region.height} crop to {destination}")


def main() -> None:  # pragma: no cover - console script shim
    app()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
