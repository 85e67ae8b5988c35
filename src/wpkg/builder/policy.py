"""
Executable-bit classification for packaged filesystem entries.

The rules do no I/O. Both the tar writer (Debian and RPM payloads) and the
zip writer (application bundles) call them.
"""

from collections.abc import Iterable
import enum
from pathlib import PurePosixPath

MAINTAINER_SCRIPTS = frozenset({"preinst", "postinst", "prerm", "postrm"})
EXECUTABLE_SUFFIXES = frozenset({".exe"})
BIN_SEGMENT = "/bin/"


class Permission(enum.IntEnum):
    EXEC = 0o777
    NON_EXEC = 0o666


def normalize_rel_path(path: str) -> str:
    """Returns `path` with POSIX separators and no leading `./` or `/`."""
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


def normalize_allow_list(paths: Iterable[str]) -> frozenset[str]:
    return frozenset(
        normalized for normalized in map(normalize_rel_path, paths) if normalized
    )


def classify(
    rel_path: str, *, is_dir: bool, allow_list: frozenset[str] = frozenset()
) -> Permission:
    """
    Decides the mode of a packaged entry.

    Directories are always executable. A file is executable when it sits
    under a `bin/` directory, is a maintainer script, has an executable
    suffix, or is named in `allow_list` (which must already be normalized).
    """
    if is_dir:
        return Permission.EXEC

    normalized = normalize_rel_path(rel_path)
    pure_path = PurePosixPath(normalized)
    if (
        BIN_SEGMENT in f"/{normalized}"
        or pure_path.name in MAINTAINER_SCRIPTS
        or pure_path.suffix.lower() in EXECUTABLE_SUFFIXES
        or normalized in allow_list
    ):
        return Permission.EXEC
    return Permission.NON_EXEC
