"""Ordered snapshots of staging directories, taken immediately before archiving."""

from collections.abc import Iterable, Iterator
import enum
from operator import attrgetter
import os
from pathlib import Path

from attrs import define

from .exceptions import FileMissingError
from .policy import Permission, classify


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


@define(frozen=True, slots=True)
class FilesystemEntry:
    rel_path: str
    source: Path
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def permission(self, allow_list: frozenset[str] = frozenset()) -> Permission:
        return classify(self.rel_path, is_dir=self.is_dir, allow_list=allow_list)

    def read_bytes(self) -> bytes:
        try:
            return self.source.read_bytes()
        except FileNotFoundError as e:
            raise FileMissingError(
                f"File disappeared before it could be packaged: {self.source}"
            ) from e


@define(frozen=True, slots=True)
class PackageTree:
    root: Path
    entries: tuple[FilesystemEntry, ...]

    def __iter__(self) -> Iterator[FilesystemEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def rel_paths(self) -> list[str]:
        return [entry.rel_path for entry in self.entries]


def _sorted_tree(root: Path, entries: Iterable[FilesystemEntry]) -> PackageTree:
    return PackageTree(
        root=root, entries=tuple(sorted(entries, key=attrgetter("rel_path")))
    )


def walk_tree(
    root: Path,
    *,
    exclude_dirs: Iterable[str] = (),
    skip_root_files: bool = False,
) -> PackageTree:
    """
    Walks `root` recursively and returns its entries ordered lexicographically
    by relative path, so archives built from the same tree are identical.

    Top-level directories named in `exclude_dirs` are pruned. When
    `skip_root_files` is set, only the contents of subdirectories are kept.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileMissingError(f"Directory not found: {root}")

    excluded = frozenset(exclude_dirs)
    entries: list[FilesystemEntry] = []

    def on_error(error: OSError) -> None:
        raise FileMissingError(
            f"Path disappeared while walking '{root}': {error.filename}"
        ) from error

    for dir_path_str, dir_names, file_names in os.walk(root, onerror=on_error):
        dir_path = Path(dir_path_str)
        at_root = dir_path == root
        if at_root:
            dir_names[:] = [name for name in dir_names if name not in excluded]

        for name in dir_names:
            path = dir_path / name
            entries.append(
                FilesystemEntry(
                    rel_path=path.relative_to(root).as_posix(),
                    source=path,
                    kind=EntryKind.DIRECTORY,
                )
            )

        if at_root and skip_root_files:
            continue

        for name in file_names:
            path = dir_path / name
            entries.append(
                FilesystemEntry(
                    rel_path=path.relative_to(root).as_posix(),
                    source=path,
                    kind=EntryKind.FILE,
                )
            )

    return _sorted_tree(root, entries)


def list_files(directory: Path) -> PackageTree:
    """Returns the regular files directly inside `directory`, without recursion."""
    directory = Path(directory)
    try:
        children = [child for child in directory.iterdir() if child.is_file()]
    except FileNotFoundError as e:
        raise FileMissingError(f"Directory not found: {directory}") from e

    return _sorted_tree(
        directory,
        (
            FilesystemEntry(rel_path=child.name, source=child, kind=EntryKind.FILE)
            for child in children
        ),
    )
