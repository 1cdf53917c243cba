"""
Settings for the project.
"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

from mapmosaic.maps.locator import SortingOrder


class Settings(BaseSettings):
    input_dir: Path = Path("data")
    "Directory searched for map files when no path is given."
    output_dir: Path = Path("images")
    "Directory that images of individual maps are written to."
    recursive: bool = False
    "Whether to search for map files in subdirectories too."

    list_sort: SortingOrder = SortingOrder.NAME
    "Order of the files when listing maps."
    stitch_sort: SortingOrder = SortingOrder.TIME
    "Drawing order when stitching maps, so that newer maps end up on top."

    zoom: int = 0
    "Zoom level of the maps to stitch together."
    dimension: str | None = "Overworld"
    "Only stitch maps from this dimension."

    image_format: str | None = None
    "Image format passed to PIL. If None, it is picked from the file extension."

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    class Config:
        env_prefix = "MAPMOSAIC_"

    def create_renderer(self):
        from mapmosaic.processing.renderer import Renderer

        return Renderer(format=self.image_format)


settings = Settings()
