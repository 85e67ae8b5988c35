"""Small file helpers shared by the builders and the CLI."""

from collections.abc import Iterable
from pathlib import Path

import structlog

from .exceptions import FileMissingError
from .policy import normalize_allow_list

logger = structlog.get_logger()


def discard(path: Path) -> None:
    """Removes an intermediate file. Failures are logged, never raised."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(
            "Could not remove intermediate file", path=str(path), error=str(e)
        )


def read_allow_list(path: Path | None) -> frozenset[str]:
    """
    Reads the list of paths to force executable, one per line.

    A missing file is not an error: it simply means nothing is forced.
    """
    if path is None or not Path(path).is_file():
        return frozenset()
    lines = Path(path).read_text(encoding="utf-8").split("\n")
    return normalize_allow_list(line.rstrip("\r") for line in lines)


def dos2unix(paths: Iterable[Path]) -> list[Path]:
    """Rewrites CRLF line endings to LF in place."""
    converted = []
    for path in map(Path, paths):
        logger.info(f"dos2unix {path}")
        try:
            content = path.read_bytes()
        except FileNotFoundError as e:
            raise FileMissingError(f"Specified file does not exist: {path}") from e
        path.write_bytes(content.replace(b"\r\n", b"\n"))
        converted.append(path)
    return converted
