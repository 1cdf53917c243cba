from pathlib import Path

import pytest

from mapmosaic.maps.core import Banner, BannerColor, Pos, pretty_dimension

from tests.helpers import make_map


@pytest.mark.parametrize("scale", range(5))
def test_bounding_box_is_square(scale):
    data = make_map(scale=scale, x_center=300, z_center=-1000).data
    left, top, right, bottom = data.bounding_box

    assert left <= right
    assert top <= bottom
    assert right - left + 1 == 128 * 2**scale
    assert bottom - top + 1 == 128 * 2**scale


def test_bounding_box_at_origin():
    data = make_map(scale=0, x_center=0, z_center=0).data

    assert data.bounding_box == (-64, -64, 63, 63)


def test_scale_description():
    assert make_map(scale=0).data.scale_description() == "1:1"
    assert make_map(scale=3).data.scale_description() == "1:8"


@pytest.mark.parametrize(
    "dimension, expected",
    [
        ("minecraft:overworld", "Overworld"),
        ("minecraft:the_nether", "The Nether"),
        ("minecraft:the_end", "The End"),
        ("mymod:crystal_caves", "Crystal Caves"),
        ("-1", "The Nether"),
        ("1", "The End"),
        ("0", "Overworld"),
        ("7", "Overworld"),
    ],
)
def test_pretty_dimension(dimension, expected):
    assert pretty_dimension(dimension) == expected


def test_pretty_dimension_from_path():
    nether = make_map(file=Path("/worlds/survival/DIM-1/data/map_1.dat"))
    end = make_map(file=Path("/worlds/survival/DIM1/data/map_2.dat"))
    plain = make_map(
        dimension="minecraft:the_end", file=Path("/worlds/survival/data/map_3.dat")
    )

    assert nether.pretty_dimension_from_path() == "The Nether"
    assert end.pretty_dimension_from_path() == "The End"
    assert plain.pretty_dimension_from_path() == "The End"


def test_version_description():
    assert make_map(data_version=3465).version_description() == "1.20.1"
    assert make_map(data_version=1).version_description() == "Unknown"


def _banner(name):
    return Banner(color=BannerColor.RED, name=name, pos=Pos(x=1, y=2, z=3))


def test_banner_name_from_json_object():
    assert _banner('{"text":"Hello"}').extract_name() == "Hello"


def test_banner_name_from_json_string():
    assert _banner('"World"').extract_name() == "World"


def test_banner_without_name():
    assert _banner(None).extract_name() == "[nameless]"


def test_banner_name_that_is_not_json():
    assert _banner("{broken").extract_name() == "{broken"
    assert _banner("Home").extract_name() == "Home"


def test_banner_color_label():
    assert BannerColor.LIGHT_BLUE.label == "Light Blue"
