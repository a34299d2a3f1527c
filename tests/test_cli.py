from __future__ import annotations

import logging
from pathlib import Path

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for CLI tests", exc_type=ImportError)
pytest.importorskip("typer", reason="typer is required for CLI tests", exc_type=ImportError)

from PySide6.QtGui import QColor, QImage
from typer.testing import CliRunner

from cropview.cli import app
from cropview.gui.utils.console_logger import remove_console_logger

runner = CliRunner()


@pytest.fixture(autouse=True)
def _detach_console_handler():
    """Drop the console handler bound to the runner's temporary stdout."""
    yield
    remove_console_logger(logging.getLogger("cropview"), "cropview-console")


@pytest.fixture
def source_image(tmp_path: Path, qapp) -> Path:
    image = QImage(100, 60, QImage.Format.Format_RGB32)
    image.fill(QColor(30, 20, 10))
    image.setPixelColor(10, 5, QColor(255, 0, 0))
    path = tmp_path / "source.png"
    assert image.save(str(path))
    return path


def test_info_reports_dimensions(source_image: Path) -> None:
    result = runner.invoke(app, ["info", str(source_image)])
    assert result.exit_code == 0, result.output
    assert "100×60" in result.output
    assert "source.png" in result.output


def test_grayscale_writes_converted_image(source_image: Path, tmp_path: Path) -> None:
    destination = tmp_path / "gray.png"
    result = runner.invoke(app, ["grayscale", str(source_image), str(destination)])
    assert result.exit_code == 0, result.output
    output = QImage(str(destination))
    assert output.pixelColor(50, 30) == QColor(22, 22, 22)


def test_crop_extracts_region(source_image: Path, tmp_path: Path) -> None:
    destination = tmp_path / "crop.png"
    result = runner.invoke(
        app,
        [
            "crop",
            str(source_image),
            str(destination),
            "--x", "10",
            "--y", "5",
            "--width", "40",
            "--height", "30",
        ],
    )
    assert result.exit_code == 0, result.output
    output = QImage(str(destination))
    assert (output.width(), output.height()) == (40, 30)
    assert output.pixelColor(0, 0) == QColor(255, 0, 0)


def test_crop_rotates_and_mirrors(source_image: Path, tmp_path: Path) -> None:
    destination = tmp_path / "turned.png"
    args = [
        "crop",
        str(source_image),
        str(destination),
        "--x", "10",
        "--y", "5",
        "--width", "40",
        "--height", "30",
        "--rotate", "90",
    ]
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    output = QImage(str(destination))
    assert (output.width(), output.height()) == (30, 40)
    # The crop's top-left corner ends up top-right after a clockwise turn.
    assert output.pixelColor(29, 0) == QColor(255, 0, 0)

    result = runner.invoke(app, args + ["--mirror"])
    assert result.exit_code == 0, result.output
    output = QImage(str(destination))
    assert output.pixelColor(0, 0) == QColor(255, 0, 0)


def test_crop_rejects_unsupported_rotation(source_image: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "crop",
            str(source_image),
            str(tmp_path / "out.png"),
            "--x", "0",
            "--y", "0",
            "--width", "10",
            "--height", "10",
            "--rotate", "45",
        ],
    )
    assert result.exit_code == 2


def test_crop_outside_image_fails(source_image: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "crop",
            str(source_image),
            str(tmp_path / "out.png"),
            "--x", "90",
            "--y", "0",
            "--width", "20",
            "--height", "10",
        ],
    )
    assert result.exit_code == 1
    assert "Error" in result.output


def test_missing_source_fails(tmp_path: Path, qapp) -> None:
    result = runner.invoke(app, ["grayscale", str(tmp_path / "nope.png"), str(tmp_path / "out.png")])
    assert result.exit_code == 1
    assert "Image not found" in result.output
