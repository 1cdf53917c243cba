"""
Renderer for map pixels to RGBA buffers, and buffers to images.
"""

from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

import numpy as np
from PIL import Image

from mapmosaic.maps.core import (
    MAP_PIXELS,
    MAP_SIZE,
    IncompleteBufferError,
    MapData,
    MapIOError,
    MapItem,
)
from mapmosaic.palette import default_palette


def render(map: MapItem | MapData, palette: np.ndarray | None = None) -> np.ndarray:
    """
    Turn the palette indices of a map into pixels.

    Parameters
    ----------
    map : MapItem | MapData
        Map to render.
    palette : np.ndarray, optional
        (256, 4) uint8 palette, defaults to ``default_palette()``.

    Returns
    -------
    np.ndarray
        (MAP_SIZE, MAP_SIZE, 4) uint8 RGBA buffer, indexed [y, x].

    Raises
    ------
    IncompleteBufferError
        The map has fewer than ``MAP_PIXELS`` color entries.
    """

    data = map.data if isinstance(map, MapItem) else map

    if palette is None:
        palette = default_palette()

    colors = np.asarray(data.colors).reshape(-1)

    if colors.size < MAP_PIXELS:
        raise IncompleteBufferError(
            f"Colors buffer has {colors.size} entries, expected {MAP_PIXELS}"
        )

    # Indices are stored signed but address the palette unsigned.
    indices = colors[:MAP_PIXELS].astype(np.int8).view(np.uint8)

    return palette[indices].reshape(MAP_SIZE, MAP_SIZE, 4)


class Renderer:
    format: Optional[str]
    "Format to render images to, defaults to None (picked from the file extension)."
    pil_kwargs: Optional[dict[str, Any]]
    "Keyword arguments to pass to PIL for saving, defaults to None."

    def __init__(
        self,
        format: Optional[str] = None,
        pil_kwargs: Optional[dict[str, Any]] = None,
    ):
        self.format = format
        self.pil_kwargs = pil_kwargs

        return

    def image(self, buffer: np.ndarray) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8))

    def save(
        self,
        fname: Union[str, Path, BinaryIO],
        buffer: np.ndarray,
    ):
        """
        Saves an RGBA buffer to the given file.

        Parameters
        ----------
        fname : Union[str, Path, BinaryIO]
            Output for the image.
        buffer : np.ndarray
            (height, width, 4) uint8 buffer.

        Raises
        ------
        MapIOError
            The image could not be written, or the format is unknown.
        """

        try:
            self.image(buffer).save(fname, format=self.format, **(self.pil_kwargs or {}))
        except (OSError, ValueError, KeyError) as e:
            raise MapIOError(f"Could not write image {fname}: {e}") from e

        return
