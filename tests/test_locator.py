import os
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from mapmosaic.maps.core import DecodeError, MapIOError
from mapmosaic.maps.locator import (
    ReadMaps,
    SortingOrder,
    common_base_path,
    find_map_files,
    is_map_file,
    natural_key,
    read_maps,
)

from tests.helpers import save_map


@pytest.fixture
def world(tmp_path):
    data = tmp_path / "data"
    save_map(data / "map_10.dat")
    save_map(data / "map_2.dat")
    save_map(data / "nested" / "map_1.dat", dimension="minecraft:the_nether")
    (data / "idcounts.dat").write_bytes(b"")
    (data / "map_3.txt").write_bytes(b"")
    return data


def test_is_map_file(world):
    assert is_map_file(world / "map_2.dat")
    assert not is_map_file(world / "idcounts.dat")
    assert not is_map_file(world / "map_3.txt")
    assert not is_map_file(world / "nested")


def test_find_only_in_root(world):
    assert {p.name for p in find_map_files(world)} == {"map_10.dat", "map_2.dat"}


def test_find_recursive_is_breadth_first(world):
    files = list(find_map_files(world, recursive=True))

    assert [p.name for p in files] == ["map_10.dat", "map_2.dat", "map_1.dat"]


def test_symlinks_are_not_followed(world, tmp_path):
    os.symlink(world, world / "loop")
    os.symlink(world / "map_2.dat", world / "map_99.dat")

    files = list(find_map_files(world, recursive=True))

    assert len(files) == 3
    assert all("loop" not in p.parts for p in files)
    assert world / "map_99.dat" not in files


def test_unreadable_directory_is_skipped(world, monkeypatch):
    original = Path.iterdir

    def iterdir(self):
        if self.name == "nested":
            raise PermissionError("denied")
        return original(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    with capture_logs() as logs:
        files = list(find_map_files(world, recursive=True))

    warnings = [l for l in logs if l["event"] == "locator.unreadable_directory"]

    assert len(files) == 2
    assert len(warnings) == 1
    assert warnings[0]["log_level"] == "warning"


def test_natural_sort(world):
    maps = read_maps(world, sort=SortingOrder.NAME)

    assert [p.name for p in maps.files] == ["map_2.dat", "map_10.dat"]
    assert natural_key(Path("map_9.dat")) < natural_key(Path("map_10.dat"))


def test_time_sort(world):
    os.utime(world / "map_2.dat", (2000, 2000))
    os.utime(world / "map_10.dat", (1000, 1000))

    maps = read_maps(world, sort=SortingOrder.TIME)

    assert [p.name for p in maps.files] == ["map_10.dat", "map_2.dat"]


def test_read_maps_not_a_directory(tmp_path):
    with pytest.raises(MapIOError):
        read_maps(tmp_path / "missing")


def test_broken_file_does_not_stop_the_others(world):
    (world / "map_5.dat").write_bytes(b"junk")

    maps = read_maps(world, sort=SortingOrder.NAME)
    results = list(maps)

    assert maps.file_count() == 3
    assert [r.ok for r in results] == [True, False, True]
    assert isinstance(results[1].error, DecodeError)

    with pytest.raises(DecodeError):
        results[1].unwrap()

    assert [m.file.name for m in maps.flatten()] == ["map_2.dat", "map_10.dat"]


def test_read_maps_counts_without_decoding(tmp_path):
    (tmp_path / "map_1.dat").write_bytes(b"junk")

    maps = read_maps(tmp_path)

    assert maps.file_count() == 1
    assert not maps.is_empty()


def test_from_paths(world):
    maps = ReadMaps.from_paths([str(world / "map_2.dat")])

    assert [m.data.x_center for m in maps.flatten()] == [0]


def test_common_base_path():
    assert common_base_path([Path("/a/b/1.dat"), Path("/a/c/2.dat")]) == Path("/a")
    assert common_base_path([Path("/a/b/1.dat")]) == Path("/a/b")
    assert common_base_path([]) is None
