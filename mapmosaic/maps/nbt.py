"""
Reading and writing map items as gzipped NBT, using nbtlib as the codec.
"""

import gzip
import io
import json
import struct
from pathlib import Path

import nbtlib
import numpy as np
import structlog

from .core import (
    LEGACY_DIMENSIONS,
    MAP_PIXELS,
    Banner,
    BannerColor,
    DecodeError,
    IncompleteBufferError,
    MapData,
    MapIOError,
    MapItem,
    Marker,
    Pos,
)


def _field(compound, key: str, tag_types, where: str):
    try:
        value = compound[key]
    except KeyError:
        raise DecodeError(f"Missing field '{where}{key}'")

    if not isinstance(value, tag_types):
        expected = (
            " or ".join(t.__name__ for t in tag_types)
            if isinstance(tag_types, tuple)
            else tag_types.__name__
        )
        raise DecodeError(
            f"Field '{where}{key}' is {type(value).__name__}, expected {expected}"
        )

    return value


def _flag(compound, key: str, where: str) -> bool:
    if key not in compound:
        return False

    return _field(compound, key, nbtlib.Byte, where) != 0


def decode_pos(value, where: str) -> Pos:
    """
    Positions are stored either as an X/Y/Z compound or as an int array of
    three values.
    """
    if isinstance(value, nbtlib.Compound):
        return Pos(
            x=int(_field(value, "X", nbtlib.Int, where)),
            y=int(_field(value, "Y", nbtlib.Int, where)),
            z=int(_field(value, "Z", nbtlib.Int, where)),
        )

    if isinstance(value, nbtlib.IntArray):
        if len(value) != 3:
            raise DecodeError(f"Position '{where}' has {len(value)} values, expected 3")
        x, y, z = (int(v) for v in value)
        return Pos(x=x, y=y, z=z)

    raise DecodeError(
        f"Position '{where}' is {type(value).__name__}, expected Compound or IntArray"
    )


def _pos_field(compound, where: str) -> Pos:
    value = _field(compound, "Pos", (nbtlib.Compound, nbtlib.IntArray), where)
    return decode_pos(value, f"{where}Pos")


def decode_dimension(value) -> str:
    if isinstance(value, nbtlib.String):
        return str(value)

    # Before 1.16 the dimension was a number.
    return LEGACY_DIMENSIONS.get(int(value), str(int(value)))


def decode_banner(compound, where: str) -> Banner:
    color = str(_field(compound, "Color", nbtlib.String, where))

    try:
        color = BannerColor(color)
    except ValueError:
        raise DecodeError(f"Unknown banner color '{color}' in '{where}'")

    name = None
    if "Name" in compound:
        raw = _field(compound, "Name", (nbtlib.String, nbtlib.Compound), where)
        name = (
            json.dumps(raw.unpack(json=True))
            if isinstance(raw, nbtlib.Compound)
            else str(raw)
        )

    return Banner(
        color=color,
        name=name,
        pos=_pos_field(compound, where),
    )


def decode_marker(compound, where: str) -> Marker:
    return Marker(
        entity_id=int(_field(compound, "EntityId", nbtlib.Int, where)),
        rotation=int(_field(compound, "Rotation", nbtlib.Int, where)),
        pos=_pos_field(compound, where),
    )


def _compounds(compound, key: str, where: str) -> list:
    if key not in compound:
        return []

    values = _field(compound, key, nbtlib.List, where)

    for index, value in enumerate(values):
        if not isinstance(value, nbtlib.Compound):
            raise DecodeError(
                f"Entry {index} of '{where}{key}' is {type(value).__name__}, expected Compound"
            )

    return list(values)


def decode_colors(value) -> np.ndarray:
    colors = np.array(value, dtype=np.int8)

    if colors.size < MAP_PIXELS:
        raise IncompleteBufferError(
            f"Colors buffer has {colors.size} entries, expected {MAP_PIXELS}"
        )

    if colors.size != MAP_PIXELS:
        raise DecodeError(
            f"Colors buffer has {colors.size} entries, expected {MAP_PIXELS}"
        )

    return colors


def decode(tree, file: Path | None = None) -> MapItem:
    """
    Build a map item from a decoded NBT tree.

    Parameters
    ----------
    tree : nbtlib.Compound
        Root compound, holding ``DataVersion`` and the ``data`` compound.
    file : Path, optional
        Where the tree was read from.

    Raises
    ------
    DecodeError
        A required field is missing or has the wrong tag type.
    IncompleteBufferError
        The colors buffer is too short.
    """

    if not isinstance(tree, nbtlib.Compound):
        raise DecodeError(f"Root is {type(tree).__name__}, expected Compound")

    data_version = int(_field(tree, "DataVersion", nbtlib.Int, ""))
    data = _field(tree, "data", nbtlib.Compound, "")

    where = "data."

    banners = [
        decode_banner(compound, f"{where}banners[{index}].")
        for index, compound in enumerate(_compounds(data, "banners", where))
    ]
    frames = [
        decode_marker(compound, f"{where}frames[{index}].")
        for index, compound in enumerate(_compounds(data, "frames", where))
    ]

    map_data = MapData(
        scale=int(_field(data, "scale", nbtlib.Byte, where)),
        dimension=decode_dimension(
            _field(data, "dimension", (nbtlib.String, nbtlib.Byte, nbtlib.Int), where)
        ),
        tracking_position=_flag(data, "trackingPosition", where),
        unlimited_tracking=_flag(data, "unlimitedTracking", where),
        locked=_flag(data, "locked", where),
        x_center=int(_field(data, "xCenter", nbtlib.Int, where)),
        z_center=int(_field(data, "zCenter", nbtlib.Int, where)),
        banners=banners,
        frames=frames,
        colors=decode_colors(_field(data, "colors", nbtlib.ByteArray, where)),
    )

    return MapItem(data=map_data, data_version=data_version, file=file)


def read_tree(file: Path) -> nbtlib.File:
    """
    Read the raw NBT tree of a gzipped file.

    Raises
    ------
    MapIOError
        The file could not be read.
    DecodeError
        The file is not valid gzipped NBT.
    """

    file = Path(file)
    log = structlog.get_logger().bind(file=str(file))

    try:
        compressed = file.read_bytes()
    except OSError as e:
        log.debug("nbt.read_failed", error=str(e))
        raise MapIOError(f"Could not read {file}: {e}") from e

    try:
        with gzip.GzipFile(fileobj=io.BytesIO(compressed)) as handle:
            tree = nbtlib.File.parse(handle)
    except (
        OSError,
        EOFError,
        ValueError,
        TypeError,
        KeyError,
        IndexError,
        struct.error,
    ) as e:
        log.debug("nbt.parse_failed", error=str(e))
        raise DecodeError(f"Could not parse {file}: {e}") from e

    return tree


def read_map(file: Path) -> MapItem:
    """
    Read and decode one ``map_<n>.dat`` file.

    Raises
    ------
    MapIOError
        The file could not be read.
    DecodeError
        The file is not a valid map item.
    """

    file = Path(file)
    item = decode(read_tree(file), file=file)

    structlog.get_logger().debug(
        "nbt.read",
        file=str(file),
        data_version=item.data_version,
        scale=item.data.scale,
    )

    return item


def _encode_pos(pos: Pos) -> nbtlib.Compound:
    return nbtlib.Compound(
        {"X": nbtlib.Int(pos.x), "Y": nbtlib.Int(pos.y), "Z": nbtlib.Int(pos.z)}
    )


def encode(item: MapItem) -> nbtlib.File:
    """
    Inverse of ``decode``. Positions are always written as compounds.
    """

    data = item.data

    banners = []
    for banner in data.banners:
        compound = nbtlib.Compound(
            {"Color": nbtlib.String(banner.color.value), "Pos": _encode_pos(banner.pos)}
        )
        if banner.name is not None:
            compound["Name"] = nbtlib.String(banner.name)
        banners.append(compound)

    frames = [
        nbtlib.Compound(
            {
                "EntityId": nbtlib.Int(frame.entity_id),
                "Rotation": nbtlib.Int(frame.rotation),
                "Pos": _encode_pos(frame.pos),
            }
        )
        for frame in data.frames
    ]

    return nbtlib.File(
        {
            "DataVersion": nbtlib.Int(item.data_version),
            "data": nbtlib.Compound(
                {
                    "scale": nbtlib.Byte(data.scale),
                    "dimension": nbtlib.String(data.dimension),
                    "trackingPosition": nbtlib.Byte(int(data.tracking_position)),
                    "unlimitedTracking": nbtlib.Byte(int(data.unlimited_tracking)),
                    "locked": nbtlib.Byte(int(data.locked)),
                    "xCenter": nbtlib.Int(data.x_center),
                    "zCenter": nbtlib.Int(data.z_center),
                    "banners": nbtlib.List[nbtlib.Compound](banners),
                    "frames": nbtlib.List[nbtlib.Compound](frames),
                    "colors": nbtlib.ByteArray(np.asarray(data.colors, dtype=np.int8)),
                }
            ),
        },
        gzipped=True,
    )


def write_map(item: MapItem, file: Path):
    file = Path(file)

    try:
        file.parent.mkdir(parents=True, exist_ok=True)
        encode(item).save(file, gzipped=True)
    except OSError as e:
        raise MapIOError(f"Could not write {file}: {e}") from e

    return
