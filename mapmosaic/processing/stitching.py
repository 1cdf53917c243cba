"""
Stitch many maps together into one image, positioned by world coordinates.
"""

from time import perf_counter
from typing import Callable, Iterable, Literal

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict

from mapmosaic.maps.core import (
    EmptyResultError,
    GeometryError,
    MapItem,
)
from mapmosaic.palette import default_palette

from .renderer import render


class Area(BaseModel):
    """
    Rectangle in world coordinates (X grows to the right, Z downwards).
    All edges are inclusive.
    """

    model_config = ConfigDict(frozen=True)

    left: int
    top: int
    right: int
    bottom: int

    @classmethod
    def from_box(cls, box: tuple[int, int, int, int]) -> "Area":
        left, top, right, bottom = box
        return cls(left=left, top=top, right=right, bottom=bottom)

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    def check(self) -> "Area":
        if self.left >= self.right or self.top >= self.bottom:
            raise GeometryError(
                f"Invalid area: left {self.left}, top {self.top}, "
                f"right {self.right}, bottom {self.bottom}"
            )

        return self

    def overlaps(self, box: tuple[int, int, int, int]) -> bool:
        left, top, right, bottom = box
        return (
            left <= self.right
            and top <= self.bottom
            and right >= self.left
            and bottom >= self.top
        )

    def union(self, box: tuple[int, int, int, int]) -> "Area":
        left, top, right, bottom = box
        return Area(
            left=min(self.left, left),
            top=min(self.top, top),
            right=max(self.right, right),
            bottom=max(self.bottom, bottom),
        )

    def with_overrides(
        self,
        left: int | None = None,
        top: int | None = None,
        right: int | None = None,
        bottom: int | None = None,
    ) -> "Area":
        overrides = dict(left=left, top=top, right=right, bottom=bottom)
        return self.model_copy(
            update={k: v for k, v in overrides.items() if v is not None}
        )


class ImageProject(BaseModel):
    maps: list[MapItem]
    "Maps to draw, in drawing order."
    area: Area
    zoom: int = 0

    @property
    def scale_factor(self) -> int:
        return 2**self.zoom

    @property
    def image_size(self) -> tuple[int, int]:
        "Width and height of the image in pixels."
        return (
            (self.area.right - self.area.left) // self.scale_factor + 1,
            (self.area.bottom - self.area.top) // self.scale_factor + 1,
        )


class GridWarning(BaseModel):
    edge: Literal["left", "top", "right", "bottom"]
    value: int
    lower: int
    "Nearest valid value below ``value``."
    upper: int
    "Nearest valid value above ``value``."


def filter_and_area(
    maps: Iterable[MapItem], zoom: int, dimension: str | None = None
) -> ImageProject:
    """
    Keep the maps with the given zoom level (and dimension, compared
    case-insensitively with the pretty dimension name), and find the area
    they cover together.

    Raises
    ------
    EmptyResultError
        No maps are left after filtering.
    """

    log = structlog.get_logger().bind(zoom=zoom, dimension=dimension)

    if dimension is not None:
        dimension = dimension.lower()

    kept = []
    area = None
    n_skipped = 0

    for map in maps:
        if map.data.scale != zoom:
            n_skipped += 1
            continue

        if dimension is not None and map.pretty_dimension().lower() != dimension:
            n_skipped += 1
            continue

        area = (
            Area.from_box(map.bounding_box)
            if area is None
            else area.union(map.bounding_box)
        )
        kept.append(map)

    log = log.bind(n_kept=len(kept), n_skipped=n_skipped)

    if not kept:
        log.warning("stitching.no_maps")
        raise EmptyResultError("No map files after filtering")

    log.debug("stitching.filtered", area=area.model_dump())

    return ImageProject(maps=kept, area=area, zoom=zoom)


def _grid_warning(edge, value: int, scale_factor: int, expected: int) -> GridWarning | None:
    remainder = (value - expected) % scale_factor

    if remainder == 0:
        return None

    lower = value - remainder
    return GridWarning(edge=edge, value=value, lower=lower, upper=lower + scale_factor)


def check_grid_alignment(area: Area, zoom: int) -> list[GridWarning]:
    """
    At zoom levels above 0 a pixel covers several blocks. Left and top edges
    should be on a multiple of the scale factor, right and bottom edges one
    below a multiple, otherwise the maps will not line up with the pixels
    of the image. Misaligned edges are logged, not rejected.
    """

    log = structlog.get_logger()
    scale_factor = 2**zoom

    warnings = [
        _grid_warning("left", area.left, scale_factor, 0),
        _grid_warning("top", area.top, scale_factor, 0),
        _grid_warning("right", area.right, scale_factor, scale_factor - 1),
        _grid_warning("bottom", area.bottom, scale_factor, scale_factor - 1),
    ]
    warnings = [w for w in warnings if w is not None]

    for w in warnings:
        log.warning(
            "stitching.grid_misaligned",
            edge=w.edge,
            value=w.value,
            suggestions=(w.lower, w.upper),
        )

    return warnings


def paint(source: np.ndarray, target: np.ndarray, x: int, y: int):
    """
    Copy ``source`` onto ``target`` with its top left corner at (x, y).
    Pixels falling outside the target are dropped, and fully transparent
    source pixels leave the target unchanged.
    """

    source_height, source_width = source.shape[:2]
    target_height, target_width = target.shape[:2]

    start_x = max(0, x)
    start_y = max(0, y)
    end_x = min(target_width, x + source_width)
    end_y = min(target_height, y + source_height)

    if start_x >= end_x or start_y >= end_y:
        return

    source_selector = np.s_[start_y - y : end_y - y, start_x - x : end_x - x]
    target_selector = np.s_[start_y:end_y, start_x:end_x]

    patch = source[source_selector]
    opaque = patch[..., 3] != 0

    target[target_selector][opaque] = patch[opaque]

    return


def make_image(
    project: ImageProject,
    palette: np.ndarray | None = None,
    on_map: Callable[[MapItem], None] | None = None,
) -> np.ndarray:
    """
    Draw the maps of the project onto a fresh transparent image. Maps are
    drawn in order, so later maps cover earlier ones where they overlap.

    Parameters
    ----------
    project : ImageProject
        Maps and the area to draw.
    palette : np.ndarray, optional
        Palette for rendering the maps, defaults to ``default_palette()``.
    on_map : Callable[[MapItem], None], optional
        Called after each map has been handled, drawn or not.

    Returns
    -------
    np.ndarray
        (height, width, 4) uint8 RGBA buffer.
    """

    log = structlog.get_logger()

    if palette is None:
        palette = default_palette()

    area = project.area
    scale_factor = project.scale_factor
    width, height = project.image_size

    log = log.bind(area=area.model_dump(), size=(width, height))

    image = np.zeros((height, width, 4), dtype=np.uint8)

    start_time = perf_counter()
    n_drawn = 0
    n_outside = 0

    for map in project.maps:
        if area.overlaps(map.bounding_box):
            paint(
                render(map, palette),
                image,
                (map.data.left - area.left) // scale_factor,
                (map.data.top - area.top) // scale_factor,
            )
            n_drawn += 1
        else:
            n_outside += 1

        if on_map is not None:
            on_map(map)

    end_time = perf_counter()
    log = log.bind(dt=end_time - start_time, n_drawn=n_drawn, n_outside=n_outside)
    log.info("stitching.complete")

    return image


def composite(
    maps: Iterable[MapItem],
    zoom: int = 0,
    dimension: str | None = None,
    area: Area | None = None,
    palette: np.ndarray | None = None,
    on_map: Callable[[MapItem], None] | None = None,
) -> np.ndarray:
    """
    Filter the maps, work out the area and stitch them into one image.

    Parameters
    ----------
    maps : Iterable[MapItem]
        Maps in drawing order.
    zoom : int
        Only maps with this scale are used.
    dimension : str, optional
        Only maps in this dimension (e.g. 'overworld') are used.
    area : Area, optional
        Area to draw. Defaults to the area covered by all remaining maps.
    palette : np.ndarray, optional
        Palette for rendering the maps.

    Raises
    ------
    EmptyResultError
        No maps are left after filtering.
    GeometryError
        The given area is inverted or empty.
    """

    project = filter_and_area(maps, zoom=zoom, dimension=dimension)

    if area is not None:
        project = project.model_copy(update={"area": area.check()})

    check_grid_alignment(project.area, zoom)

    return make_image(project, palette=palette, on_map=on_map)
