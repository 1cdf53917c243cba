"""
CLI components (using typer)
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress

from mapmosaic.log import setup_logging
from mapmosaic.maps.core import MapError
from mapmosaic.maps.locator import ReadMaps, SortingOrder, read_maps
from mapmosaic.settings import settings

from .tables import info_tables, maps_table, nbt_tree

CONSOLE = Console()
ERROR_CONSOLE = Console(stderr=True)

APP = typer.Typer(
    help="Tells information about map files and creates images from them.",
    no_args_is_help=True,
)


def fail(message: str):
    ERROR_CONSOLE.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code=1)


def _read_maps(path: Path, sort: SortingOrder | None, recursive: bool) -> ReadMaps:
    try:
        maps = read_maps(path, sort=sort, recursive=recursive)
    except MapError as e:
        fail(f"Could not get maps: {e}")

    if maps.is_empty():
        fail("Could not find any maps!")

    return maps


@APP.callback()
def configure(log_level: str = typer.Option(settings.log_level, help="Log level.")):
    setup_logging(log_level)


@APP.command("list")
def list_maps(
    path: Path = typer.Argument(settings.input_dir, help="Directory to search."),
    recursive: bool = typer.Option(settings.recursive, "--recursive", "-r"),
    sort: SortingOrder = typer.Option(settings.list_sort, "--sort", "-s"),
):
    """
    List maps and their information.
    """
    maps = _read_maps(path, sort, recursive)

    CONSOLE.print(maps_table(maps, base=maps.common_base_path()))


@APP.command()
def info(
    file: Path,
    dimension_from_path: bool = typer.Option(
        False,
        "--dimension-from-path",
        "-d",
        help="Detect the dimension from the file path instead of the map data.",
    ),
):
    """
    Show everything about a single map file.
    """
    from mapmosaic.maps.nbt import read_map

    try:
        item = read_map(file)
    except MapError as e:
        fail(f"Could not read map item: {e}")

    for table in info_tables(item, dimension_from_path=dimension_from_path):
        CONSOLE.print(table)
        CONSOLE.print()


@APP.command()
def image(
    map_file: Path,
    output_file: Optional[Path] = typer.Option(
        None, "--output-file", "-o", help="Defaults to <output dir>/<map name>.png"
    ),
):
    """
    Create an image of one map file.
    """
    from mapmosaic.maps.nbt import read_map
    from mapmosaic.processing.renderer import render

    if output_file is None:
        output_file = settings.output_dir / map_file.with_suffix(".png").name

    try:
        buffer = render(read_map(map_file))
        output_file.parent.mkdir(parents=True, exist_ok=True)
        settings.create_renderer().save(output_file, buffer)
    except MapError as e:
        fail(f"Could not create image: {e}")
    except OSError as e:
        fail(f"Could not create output directory: {e}")

    CONSOLE.print(f"Image written to: {output_file}")


@APP.command()
def images(
    path: Path = typer.Argument(settings.input_dir, help="Directory to search."),
    output_dir: Path = typer.Option(settings.output_dir, "--output-dir", "-o"),
    recursive: bool = typer.Option(settings.recursive, "--recursive", "-r"),
):
    """
    Create an image from each map file. With --recursive the images are
    sorted into a directory per dimension.
    """
    from mapmosaic.processing.renderer import render

    maps = _read_maps(path, None, recursive)
    renderer = settings.create_renderer()
    n_failed = 0

    for result in maps:
        if not result.ok:
            n_failed += 1
            ERROR_CONSOLE.print(f"[yellow]Skipping[/yellow] {escape(str(result.error))}")
            continue

        item = result.item
        directory = output_dir / item.pretty_dimension() if recursive else output_dir
        output_file = directory / result.file.with_suffix(".png").name

        try:
            directory.mkdir(parents=True, exist_ok=True)
            renderer.save(output_file, render(item))
        except MapError as e:
            n_failed += 1
            ERROR_CONSOLE.print(f"[yellow]Skipping[/yellow] {escape(str(e))}")
            continue
        except OSError as e:
            fail(f"Could not create output directory: {e}")

        CONSOLE.print(f"Image written to: {output_file}")

    if n_failed:
        fail(f"{n_failed} of {maps.file_count()} maps could not be drawn")


@APP.command()
def stitch(
    path: Path,
    filename: Path,
    dimension: str = typer.Option(
        settings.dimension or "",
        "--dimension",
        "-d",
        help="Only draw maps from this dimension. Empty for all dimensions.",
    ),
    recursive: bool = typer.Option(settings.recursive, "--recursive"),
    sort: SortingOrder = typer.Option(settings.stitch_sort, "--sort", "-s"),
    zoom: int = typer.Option(settings.zoom, "--zoom", "-z"),
    left: Optional[int] = typer.Option(None, "--left", "-l", help="Smaller X"),
    top: Optional[int] = typer.Option(None, "--top", "-t", help="Smaller Z"),
    right: Optional[int] = typer.Option(None, "--right", "-r", help="Larger X"),
    bottom: Optional[int] = typer.Option(None, "--bottom", "-b", help="Larger Z"),
):
    """
    Stitch maps together into one image. By default the image covers every
    map; the edges can be given to draw a part of it.
    """
    from mapmosaic.processing.stitching import (
        check_grid_alignment,
        filter_and_area,
        make_image,
    )

    maps = _read_maps(path, sort, recursive)
    CONSOLE.print(f"Found {maps.file_count()} map files.")

    try:
        project = filter_and_area(maps.flatten(), zoom=zoom, dimension=dimension or None)
        CONSOLE.print(f"After filtering we have {len(project.maps)} map files.")
        _print_area("Map area", project.area)

        area = project.area.with_overrides(left, top, right, bottom).check()
        project = project.model_copy(update={"area": area})
        _print_area("Map area for image", area)
    except MapError as e:
        fail(str(e))

    for warning in check_grid_alignment(area, zoom):
        ERROR_CONSOLE.print(
            f"[yellow]Warning:[/yellow] The {warning.edge} coordinate is not on the "
            "edge of the pixel boundary, which may give unexpected results. "
            f"Try to change it to {warning.lower} or {warning.upper}."
        )

    width, height = project.image_size
    CONSOLE.print(f"Making image with size: {width}×{height}")

    try:
        with Progress(console=CONSOLE) as progress:
            task = progress.add_task("Drawing maps", total=len(project.maps))
            buffer = make_image(project, on_map=lambda _: progress.advance(task))

        with CONSOLE.status(f"Saving image as {filename}"):
            settings.create_renderer().save(filename, buffer)
    except MapError as e:
        fail(str(e))

    CONSOLE.print(f"Image written to: {filename}")


def _print_area(title: str, area):
    CONSOLE.print(title)
    CONSOLE.print(f"  Upper Left  : {area.left} {area.top}")
    CONSOLE.print(f"  Lower Right : {area.right} {area.bottom}")
    CONSOLE.print(f"  Size        : {area.width}×{area.height}")


@APP.command("test-map")
def test_map(
    output_file: Path = typer.Argument(Path("map_0.dat")),
    data_version: Optional[int] = typer.Option(
        None, "--data-version", help="Defaults to the latest known version."
    ),
):
    """
    Write a map showing every palette index as 8x8 swatches.
    """
    from mapmosaic.maps.nbt import write_map
    from mapmosaic.maps.sample import make_test_map

    try:
        write_map(make_test_map(data_version=data_version), output_file)
    except MapError as e:
        fail(f"Could not write test map: {e}")

    CONSOLE.print(f"Test map written to: {output_file}")


@APP.command("dump-nbt")
def dump_nbt(file: Path):
    """
    Print the NBT structure of a file.
    """
    from mapmosaic.maps.nbt import read_tree

    try:
        tree = read_tree(file)
    except MapError as e:
        fail(f"Could not dump NBT file: {e}")

    CONSOLE.print(nbt_tree(tree, file.name))


def main():
    global APP

    APP()
