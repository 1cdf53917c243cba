"""
Core map item model and the errors raised while handling map files.
"""

import json
from enum import Enum
from pathlib import Path

import numpydantic
from pydantic import BaseModel, ConfigDict

from mapmosaic.versions import version_description

MAP_SIZE = 128
"Width and height of every map in pixels."
MAP_PIXELS = MAP_SIZE * MAP_SIZE

NAMELESS = "[nameless]"


class MapError(Exception):
    pass


class DecodeError(MapError):
    """
    A map record is malformed: a required field is missing or has the wrong
    tag type.
    """


class IncompleteBufferError(DecodeError):
    """
    The colors buffer of a map is shorter than ``MAP_PIXELS``.
    """


class MapIOError(MapError):
    pass


class GeometryError(MapError):
    """
    The requested image area cannot be drawn.
    """


class EmptyResultError(GeometryError):
    pass


LEGACY_DIMENSIONS = {
    0: "minecraft:overworld",
    -1: "minecraft:the_nether",
    1: "minecraft:the_end",
}
"Dimension identifiers for saves that stored the dimension as a number."

LEGACY_DIMENSION_NAMES = {
    "0": "Overworld",
    "-1": "The Nether",
    "1": "The End",
}


def pretty_dimension(dimension: str) -> str:
    """
    Human readable dimension name, e.g. ``The Nether`` for
    ``minecraft:the_nether``.
    """
    _, colon, name = dimension.partition(":")

    if not colon:
        return LEGACY_DIMENSION_NAMES.get(dimension, "Overworld")

    return " ".join(word.capitalize() for word in name.replace("_", " ").split())


class BannerColor(str, Enum):
    BLACK = "black"
    BLUE = "blue"
    BROWN = "brown"
    CYAN = "cyan"
    GRAY = "gray"
    GREEN = "green"
    LIGHT_BLUE = "light_blue"
    LIGHT_GRAY = "light_gray"
    LIME = "lime"
    MAGENTA = "magenta"
    ORANGE = "orange"
    PINK = "pink"
    PURPLE = "purple"
    RED = "red"
    WHITE = "white"
    YELLOW = "yellow"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class Pos(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    z: int


class Banner(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: BannerColor
    name: str | None = None
    "Custom name of the banner as JSON text, if it has one."
    pos: Pos

    def extract_name(self) -> str:
        """
        The plain text name of the banner.

        Names are stored as JSON text, usually ``{"text": "..."}`` but
        sometimes just a JSON string. Text that is not valid JSON is
        returned unchanged.
        """
        if self.name is None:
            return NAMELESS

        try:
            parsed = json.loads(self.name)
        except ValueError:
            return self.name

        if isinstance(parsed, dict) and isinstance(parsed.get("text"), str):
            return parsed["text"]

        if isinstance(parsed, str):
            return parsed

        return self.name


class Marker(BaseModel):
    """
    Item frame marker.
    """

    model_config = ConfigDict(frozen=True)

    entity_id: int
    rotation: int
    "Rotation of the marker in degrees, 0 to 360."
    pos: Pos


class MapData(BaseModel):
    model_config = ConfigDict(frozen=True)

    scale: int
    "Zoom level; one pixel covers 2 ** scale blocks. From 0 to 4."
    dimension: str
    "Namespaced dimension identifier, e.g. minecraft:overworld."
    tracking_position: bool = False
    unlimited_tracking: bool = False
    locked: bool = False
    x_center: int
    z_center: int
    banners: list[Banner] = []
    frames: list[Marker] = []
    colors: numpydantic.NDArray
    "Palette indices (int8), row-major, MAP_SIZE x MAP_SIZE."

    @property
    def scale_factor(self) -> int:
        return 2**self.scale

    def scale_description(self) -> str:
        return f"1:{self.scale_factor}"

    def pretty_dimension(self) -> str:
        return pretty_dimension(self.dimension)

    @property
    def left(self) -> int:
        "X coordinate of the left-most blocks on the map."
        return self.x_center - 64 * self.scale_factor

    @property
    def top(self) -> int:
        "Z coordinate of the top-most blocks on the map."
        return self.z_center - 64 * self.scale_factor

    @property
    def right(self) -> int:
        return self.x_center + 64 * self.scale_factor - 1

    @property
    def bottom(self) -> int:
        return self.z_center + 64 * self.scale_factor - 1

    @property
    def bounding_box(self) -> tuple[int, int, int, int]:
        return self.left, self.top, self.right, self.bottom

    def __repr__(self) -> str:
        return (
            f"MapData(scale={self.scale}, dimension={self.dimension!r}, "
            f"center=({self.x_center}, {self.z_center}), "
            f"banners={len(self.banners)}, frames={len(self.frames)}, "
            f"colors=[{len(self.colors)} bytes])"
        )


DIMENSION_DIRECTORIES = {
    "dim-1": "The Nether",
    "dim1": "The End",
    "overworld": "Overworld",
    "nether": "The Nether",
    "the_nether": "The Nether",
    "end": "The End",
    "the_end": "The End",
}


class MapItem(BaseModel):
    """
    Contents of one ``map_<n>.dat`` file.
    """

    model_config = ConfigDict(frozen=True)

    data: MapData
    data_version: int
    file: Path | None = None
    "Where the map was read from. Not part of the stored record."

    @property
    def bounding_box(self) -> tuple[int, int, int, int]:
        return self.data.bounding_box

    def pretty_dimension(self) -> str:
        return self.data.pretty_dimension()

    def version_description(self) -> str:
        return version_description(self.data_version)

    def pretty_dimension_from_path(self) -> str:
        """
        Guess the dimension from the directories the file is in
        (``DIM-1``, ``DIM1`` or a directory named after the dimension),
        falling back to the dimension stored in the map.
        """
        if self.file is not None:
            for parent in self.file.parents:
                name = DIMENSION_DIRECTORIES.get(parent.name.lower())
                if name is not None:
                    return name

        return self.pretty_dimension()
