import numpy as np
import pytest

from mapmosaic.palette import (
    BASE_COLORS_2699,
    MULTIPLIERS,
    default_palette,
    generate_palette,
)


def test_palette_has_256_entries():
    palette = generate_palette(BASE_COLORS_2699)

    assert palette.shape == (256, 4)
    assert palette.dtype == np.uint8


def test_missing_base_colors_are_transparent():
    palette = generate_palette(BASE_COLORS_2699)

    # Index 0 and 62, 63 have no base color.
    for base in (0, 62, 63):
        assert (palette[base * 4 : base * 4 + 4] == 0).all()


def test_shades_of_a_base_color():
    palette = generate_palette({1: (127, 178, 56, 255)})

    assert tuple(palette[4]) == (89, 125, 39, 255)
    assert tuple(palette[5]) == (109, 153, 48, 255)
    assert tuple(palette[6]) == (127, 178, 56, 255)
    assert tuple(palette[7]) == (67, 94, 29, 255)


def test_alpha_is_copied():
    palette = generate_palette({3: (200, 100, 50, 77)})

    assert (palette[12:16, 3] == 77).all()


def test_shades_are_ordered_by_multiplier():
    palette = generate_palette(BASE_COLORS_2699)
    order = np.argsort(MULTIPLIERS)

    for base in BASE_COLORS_2699:
        shades = palette[base * 4 : base * 4 + 4, :3].astype(int)[order]
        assert (np.diff(shades, axis=0) >= 0).all()


def test_generation_is_deterministic():
    assert (generate_palette(BASE_COLORS_2699) == generate_palette(BASE_COLORS_2699)).all()


def test_default_palette_is_shared_and_read_only():
    palette = default_palette()

    assert palette is default_palette()

    with pytest.raises(ValueError):
        palette[0, 0] = 1
