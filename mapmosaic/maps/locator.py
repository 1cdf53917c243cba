"""
Finding map files on disk and reading them lazily.
"""

import re
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

import structlog

from .core import MapError, MapIOError, MapItem
from .nbt import read_map

MAP_FILE_PREFIX = "map_"
MAP_FILE_SUFFIX = ".dat"


class SortingOrder(str, Enum):
    NAME = "name"
    "Natural order of the file paths, so map_2 comes before map_10."
    TIME = "time"
    "Modification time, oldest first."


def is_map_file(path: Path) -> bool:
    """
    Regular files (never symlinks) named ``map_*.dat``.
    """
    return (
        path.name.startswith(MAP_FILE_PREFIX)
        and path.suffix == MAP_FILE_SUFFIX
        and not path.is_symlink()
        and path.is_file()
    )


def find_map_files(root: Path, recursive: bool = False) -> Iterator[Path]:
    """
    Breadth-first search for map files under ``root``. Symbolic links are
    not followed. Directories that cannot be listed are skipped with a
    warning.
    """

    log = structlog.get_logger()
    queue = deque([Path(root)])

    while queue:
        directory = queue.popleft()

        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            log.warning(
                "locator.unreadable_directory", directory=str(directory), error=str(e)
            )
            continue

        for entry in entries:
            if entry.is_symlink():
                continue

            if entry.is_dir():
                if recursive:
                    queue.append(entry)
            elif is_map_file(entry):
                yield entry


def natural_key(path: Path) -> list:
    # re.split with a group alternates text and digits, so the elements at
    # each position always have the same type.
    return [
        int(part) if index % 2 else part
        for index, part in enumerate(re.split(r"(\d+)", str(path)))
    ]


def _modified(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError as e:
        structlog.get_logger().warning(
            "locator.stat_failed", file=str(path), error=str(e)
        )
        return float("inf")


def sort_paths(paths: Iterable[Path], sort: SortingOrder | None) -> list[Path]:
    paths = list(paths)

    if sort == SortingOrder.NAME:
        paths.sort(key=natural_key)
    elif sort == SortingOrder.TIME:
        paths.sort(key=_modified)

    return paths


def common_base_path(paths: Iterable[Path]) -> Path | None:
    """
    Longest directory shared by all the given files, e.g. ``/a`` for
    ``/a/b/1.dat`` and ``/a/c/2.dat``. None if there are no paths or they
    share nothing.
    """

    parents = [Path(path).parent.parts for path in paths]

    if not parents:
        return None

    common = []
    for parts in zip(*parents):
        if any(part != parts[0] for part in parts):
            break
        common.append(parts[0])

    if not common:
        return None

    return Path(*common)


@dataclass(frozen=True)
class MapResult:
    """
    Outcome of reading one map file: either ``item`` or ``error`` is set.
    """

    file: Path
    item: MapItem | None = None
    error: MapError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> MapItem:
        if self.error is not None:
            raise self.error

        return self.item


class ReadMaps:
    """
    Ordered collection of map files. Files are only decoded while iterating,
    one at a time, and a file that fails to decode does not stop the rest.
    """

    files: list[Path]

    def __init__(self, files: Iterable[Path]):
        self.files = list(files)
        self.logger = structlog.get_logger()

    @classmethod
    def from_paths(cls, paths: Iterable[Path]) -> "ReadMaps":
        return cls(Path(path) for path in paths)

    def file_count(self) -> int:
        return len(self.files)

    def is_empty(self) -> bool:
        return not self.files

    def __len__(self) -> int:
        return self.file_count()

    def __iter__(self) -> Iterator[MapResult]:
        for file in self.files:
            try:
                item = read_map(file)
            except MapError as e:
                yield MapResult(file=file, error=e)
                continue

            yield MapResult(file=file, item=item)

    def flatten(self) -> Iterator[MapItem]:
        """
        Only the maps that could be read; failures are logged and skipped.
        """
        for result in self:
            if not result.ok:
                self.logger.warning(
                    "locator.skipped_map", file=str(result.file), error=str(result.error)
                )
                continue

            yield result.item

    def common_base_path(self) -> Path | None:
        return common_base_path(self.files)


def read_maps(
    root: Path, sort: SortingOrder | None = None, recursive: bool = False
) -> ReadMaps:
    """
    Find the map files under ``root`` and put them in the requested order.

    Raises
    ------
    MapIOError
        ``root`` is not a directory.
    """

    root = Path(root)
    log = structlog.get_logger().bind(root=str(root), recursive=recursive)

    if not root.is_dir():
        raise MapIOError(f"Not a directory: {root}")

    files = sort_paths(find_map_files(root, recursive=recursive), sort)

    log.debug("locator.found", files=len(files), sort=sort.value if sort else None)

    return ReadMaps(files)
