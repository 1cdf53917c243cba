from pathlib import Path

import nbtlib
import numpy as np

from mapmosaic.maps.core import MAP_PIXELS, MAP_SIZE, MapData, MapItem
from mapmosaic.maps.nbt import write_map


def make_colors(fill: int = 0, pixels: dict[tuple[int, int], int] | None = None):
    colors = np.full((MAP_SIZE, MAP_SIZE), fill, dtype=np.int8)

    for (x, y), value in (pixels or {}).items():
        colors[y, x] = value

    return colors.reshape(-1)


def make_map(
    scale: int = 0,
    x_center: int = 0,
    z_center: int = 0,
    dimension: str = "minecraft:overworld",
    colors=None,
    file: Path | None = None,
    data_version: int = 3465,
    **kwargs,
) -> MapItem:
    return MapItem(
        data=MapData(
            scale=scale,
            dimension=dimension,
            x_center=x_center,
            z_center=z_center,
            colors=make_colors() if colors is None else colors,
            **kwargs,
        ),
        data_version=data_version,
        file=file,
    )


def make_tree(**overrides) -> nbtlib.Compound:
    """
    A valid map item tree; ``overrides`` replace (or with None, remove)
    fields of the data compound.
    """
    data = nbtlib.Compound(
        {
            "scale": nbtlib.Byte(0),
            "dimension": nbtlib.String("minecraft:overworld"),
            "trackingPosition": nbtlib.Byte(1),
            "unlimitedTracking": nbtlib.Byte(0),
            "locked": nbtlib.Byte(1),
            "xCenter": nbtlib.Int(64),
            "zCenter": nbtlib.Int(-64),
            "banners": nbtlib.List[nbtlib.Compound]([]),
            "frames": nbtlib.List[nbtlib.Compound]([]),
            "colors": nbtlib.ByteArray(np.zeros(MAP_PIXELS, dtype=np.int8)),
        }
    )

    for key, value in overrides.items():
        if value is None:
            del data[key]
        else:
            data[key] = value

    return nbtlib.Compound({"DataVersion": nbtlib.Int(3465), "data": data})


def save_map(path: Path, **kwargs) -> Path:
    write_map(make_map(**kwargs), path)
    return path
