"""
Map item files: the data model, reading and writing them, and finding them
on disk.
"""

from .core import (
    Banner,
    BannerColor,
    DecodeError,
    EmptyResultError,
    GeometryError,
    IncompleteBufferError,
    MapData,
    MapError,
    MapIOError,
    MapItem,
    Marker,
    Pos,
)
from .locator import MapResult, ReadMaps, SortingOrder, common_base_path, read_maps
from .nbt import decode, encode, read_map, write_map

__all__ = (
    "Banner",
    "BannerColor",
    "DecodeError",
    "EmptyResultError",
    "GeometryError",
    "IncompleteBufferError",
    "MapData",
    "MapError",
    "MapIOError",
    "MapItem",
    "Marker",
    "Pos",
    "MapResult",
    "ReadMaps",
    "SortingOrder",
    "common_base_path",
    "read_maps",
    "decode",
    "encode",
    "read_map",
    "write_map",
)
