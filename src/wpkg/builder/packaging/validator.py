"""Pre-build layout checks for Debian package roots."""

from pathlib import Path

from ..exceptions import InvalidStructureError

CONTROL_DIR = "DEBIAN"
CONTROL_FILE = "control"
SPECS_DIR = "SPECS"
RESERVED_DIRS = frozenset({CONTROL_DIR, SPECS_DIR})


def control_path(root: Path) -> Path:
    return Path(root) / CONTROL_DIR / CONTROL_FILE


def validate_structure(root: Path) -> None:
    """
    Requires at least one subdirectory and a control file at `DEBIAN/control`.
    """
    root = Path(root)
    has_subdir = root.is_dir() and any(child.is_dir() for child in root.iterdir())
    has_control = control_path(root).is_file()

    if not (has_subdir and has_control):
        raise InvalidStructureError(
            f"Directory '{root}' does not match the package structure "
            "(expected at least one subdirectory and DEBIAN/control)."
        )
