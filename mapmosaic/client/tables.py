"""
Tables and trees for presenting maps in the terminal, using rich.
"""

from pathlib import Path
from typing import Iterable

import nbtlib
from rich import box
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from mapmosaic.maps.core import MapItem
from mapmosaic.maps.locator import MapResult

ARRAY_PREVIEW_LENGTH = 8


def yes_or_no(value: bool) -> str:
    return "Yes" if value else "No"


def shorten(file: Path, base: Path | None) -> Path:
    if base is None:
        return file

    try:
        return file.relative_to(base)
    except ValueError:
        return file


def maps_table(results: Iterable[MapResult], base: Path | None = None) -> Table:
    table = Table(box=box.ROUNDED)

    for column in ("File", "Zoom", "Dimension", "Locked", "Center"):
        table.add_column(column)
    for column in ("Left", "Top", "Right", "Bottom"):
        table.add_column(column, justify="right")

    for result in results:
        file = str(shorten(result.file, base))

        if not result.ok:
            table.add_row(escape(file), f"[red]{escape(str(result.error))}[/red]")
            continue

        data = result.item.data
        table.add_row(
            escape(file),
            str(data.scale),
            data.pretty_dimension(),
            yes_or_no(data.locked),
            f"{data.x_center}, {data.z_center}",
            str(data.left),
            str(data.top),
            str(data.right),
            str(data.bottom),
        )

    return table


def _key_value_table(title: str) -> Table:
    table = Table(title=title, title_justify="left", show_header=False, box=None)
    table.add_column(style="bold")
    return table


def info_tables(item: MapItem, dimension_from_path: bool = False) -> list[Table]:
    """
    Everything we know about a single map, as a list of tables.
    """

    data = item.data

    basic = _key_value_table(item.file.name if item.file else "Map")
    basic.add_row("Scale", str(data.scale), data.scale_description())
    basic.add_row("Version", str(item.data_version), item.version_description())
    basic.add_row(
        "Dimension",
        item.pretty_dimension_from_path()
        if dimension_from_path
        else item.pretty_dimension(),
    )
    basic.add_row("Locked", yes_or_no(data.locked))

    tracking = _key_value_table("Tracking")
    tracking.add_row("Tracking position", yes_or_no(data.tracking_position))
    tracking.add_row("Unlimited tracking", yes_or_no(data.unlimited_tracking))

    coordinates = _key_value_table("Coordinates (X, Z)")
    coordinates.add_row("Upper left", str(data.left), str(data.top))
    coordinates.add_row("Lower left", str(data.left), str(data.bottom))
    coordinates.add_row("Upper right", str(data.right), str(data.top))
    coordinates.add_row("Lower right", str(data.right), str(data.bottom))
    coordinates.add_row("Center", str(data.x_center), str(data.z_center))

    tables = [basic, tracking, coordinates]

    if data.banners:
        banners = Table(title="Banners", title_justify="left", box=box.SIMPLE)
        banners.add_column("Name")
        banners.add_column("Color")
        for axis in "XYZ":
            banners.add_column(axis, justify="right")

        for banner in data.banners:
            banners.add_row(
                banner.extract_name(),
                banner.color.label,
                str(banner.pos.x),
                str(banner.pos.y),
                str(banner.pos.z),
            )

        tables.append(banners)

    if data.frames:
        frames = Table(title="Frames", title_justify="left", box=box.SIMPLE)
        frames.add_column("Entity ID")
        frames.add_column("Angle")
        for axis in "XYZ":
            frames.add_column(axis, justify="right")

        for frame in data.frames:
            frames.add_row(
                str(frame.entity_id),
                str(frame.rotation),
                str(frame.pos.x),
                str(frame.pos.y),
                str(frame.pos.z),
            )

        tables.append(frames)

    return tables


def _tag_label(name: str, tag) -> str:
    if isinstance(tag, nbtlib.Compound):
        return f"Compound: {name}"

    if isinstance(tag, nbtlib.List):
        return f"List: {name} [{tag.subtype.__name__}]×{len(tag)}"

    kind = type(tag).__name__

    if isinstance(tag, (nbtlib.ByteArray, nbtlib.IntArray, nbtlib.LongArray)):
        if len(tag) < ARRAY_PREVIEW_LENGTH:
            return f"{kind}: {name} = {[int(v) for v in tag]}"
        return f"{kind}: {name} = [{len(tag)} values]"

    if isinstance(tag, nbtlib.String):
        return f"{kind}: {name} = {str(tag)!r}"

    return f"{kind}: {name} = {tag.unpack()}"


def _add_tag(tree: Tree, name: str, tag):
    branch = tree.add(escape(_tag_label(name, tag)))

    if isinstance(tag, nbtlib.Compound):
        for key, value in tag.items():
            _add_tag(branch, key, value)
    elif isinstance(tag, nbtlib.List):
        for index, value in enumerate(tag):
            _add_tag(branch, str(index), value)

    return


def nbt_tree(root: nbtlib.Compound, label: str) -> Tree:
    """
    The whole NBT structure of a file as a rich tree.
    """

    tree = Tree(escape(label))

    for key, value in root.items():
        _add_tag(tree, key, value)

    return tree
