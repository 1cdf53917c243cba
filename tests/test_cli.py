import pytest
import structlog
from PIL import Image
from rich.console import Console
from typer.testing import CliRunner

from mapmosaic.client import cli
from mapmosaic.client.cli import APP

from tests.helpers import make_colors, save_map

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Keep table cells on one line.
    monkeypatch.setattr(cli, "CONSOLE", Console(width=200))
    yield
    # The CLI points logging at the runner's stderr.
    structlog.reset_defaults()


@pytest.fixture
def world(tmp_path):
    data = tmp_path / "data"
    save_map(data / "map_0.dat", colors=make_colors(fill=4))
    save_map(data / "map_1.dat", x_center=128, colors=make_colors(fill=8))
    save_map(data / "map_2.dat", dimension="minecraft:the_nether")
    return data


def test_test_map(tmp_path):
    result = runner.invoke(APP, ["test-map", str(tmp_path / "map_0.dat")])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "map_0.dat").exists()


def test_list(world):
    result = runner.invoke(APP, ["list", str(world)])

    assert result.exit_code == 0, result.output
    assert "map_0.dat" in result.output
    assert "The Nether" in result.output


def test_list_nothing(tmp_path):
    result = runner.invoke(APP, ["list", str(tmp_path)])

    assert result.exit_code == 1


def test_info(world):
    result = runner.invoke(APP, ["info", str(world / "map_1.dat")])

    assert result.exit_code == 0, result.output
    assert "Overworld" in result.output
    assert "1.20.1" in result.output


def test_info_missing_file(tmp_path):
    result = runner.invoke(APP, ["info", str(tmp_path / "map_7.dat")])

    assert result.exit_code == 1


def test_image(world, tmp_path):
    output = tmp_path / "out" / "map_0.png"

    result = runner.invoke(APP, ["image", str(world / "map_0.dat"), "-o", str(output)])

    assert result.exit_code == 0, result.output

    with Image.open(output) as image:
        assert image.size == (128, 128)


def test_images_per_dimension(world, tmp_path):
    output = tmp_path / "images"

    result = runner.invoke(
        APP, ["images", str(world), "--output-dir", str(output), "--recursive"]
    )

    assert result.exit_code == 0, result.output
    assert (output / "Overworld" / "map_0.png").exists()
    assert (output / "The Nether" / "map_2.png").exists()


def test_stitch(world, tmp_path):
    output = tmp_path / "world.png"

    result = runner.invoke(APP, ["stitch", str(world), str(output), "--sort", "name"])

    assert result.exit_code == 0, result.output
    assert "After filtering we have 2 map files." in result.output

    with Image.open(output) as image:
        assert image.size == (256, 128)


def test_stitch_with_edges(world, tmp_path):
    output = tmp_path / "part.png"

    result = runner.invoke(
        APP,
        ["stitch", str(world), str(output), "-l", "0", "-t", "0", "-r", "99", "-b", "9"],
    )

    assert result.exit_code == 0, result.output

    with Image.open(output) as image:
        assert image.size == (100, 10)


def test_stitch_nothing_left(world, tmp_path):
    result = runner.invoke(
        APP, ["stitch", str(world), str(tmp_path / "x.png"), "--dimension", "the end"]
    )

    assert result.exit_code == 1


def test_dump_nbt(world):
    result = runner.invoke(APP, ["dump-nbt", str(world / "map_0.dat")])

    assert result.exit_code == 0, result.output
    assert "xCenter" in result.output
    assert "[16384 values]" in result.output
