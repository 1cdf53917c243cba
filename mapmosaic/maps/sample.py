"""
Sample map showing every palette index, handy for checking palettes.
"""

from pathlib import Path

import numpy as np

from mapmosaic.versions import latest_data_version

from .core import MAP_SIZE, MapData, MapItem

SWATCH_SIZE = 8


def sample_colors() -> np.ndarray:
    """
    16 x 16 grid of 8 x 8 pixel swatches, one per palette index, left to
    right and top to bottom.
    """
    swatches = MAP_SIZE // SWATCH_SIZE
    indices = np.arange(swatches * swatches, dtype=np.uint8).reshape(swatches, swatches)
    pixels = np.repeat(np.repeat(indices, SWATCH_SIZE, axis=0), SWATCH_SIZE, axis=1)

    return pixels.view(np.int8).reshape(-1)


def make_test_map(data_version: int | None = None, file: Path | None = None) -> MapItem:
    if data_version is None:
        data_version = latest_data_version()

    return MapItem(
        data=MapData(
            scale=0,
            dimension="minecraft:overworld",
            tracking_position=True,
            unlimited_tracking=False,
            locked=True,
            x_center=0,
            z_center=0,
            colors=sample_colors(),
        ),
        data_version=data_version,
        file=file,
    )
