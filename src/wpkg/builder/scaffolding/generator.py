"""Logic for scaffolding control files and theme package skeletons."""

from pathlib import Path

import jinja2

from ..packaging.validator import CONTROL_DIR, CONTROL_FILE

_TEMPLATE_DIR = Path(__file__).parent / "templates"

CONTROL_DEFAULTS: dict[str, str] = {
    "package": "com.yourcompany.identifier",
    "name": "Name of the product",
    "depends": "",
    "architecture": "any",
    "description": "This is a sample short description",
    "maintainer": "Maintainer Name",
    "author": "Author Name",
    "section": "Section",
    "version": "1.0",
}


def _get_template_env() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_control(**fields: str) -> str:
    unknown = set(fields) - set(CONTROL_DEFAULTS)
    if unknown:
        raise ValueError(f"Unknown control fields: {', '.join(sorted(unknown))}")
    template = _get_template_env().get_template("control.j2")
    return template.render(**{**CONTROL_DEFAULTS, **fields})


def generate_control_file(directory: Path, **fields: str) -> Path:
    """Writes a sample control file into `directory`."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    control_file = directory / CONTROL_FILE
    control_file.write_text(render_control(**fields), encoding="utf-8")
    return control_file


def scaffold_theme(theme_name: str, path: str | Path = ".") -> Path:
    """
    Creates the base structure of an iOS theme package under `path`,
    including a DEBIAN/control so the result is immediately buildable.
    """
    root = Path(path).resolve()
    theme_dir = root / "Library" / "Themes" / f"{theme_name}.theme"
    if theme_dir.exists():
        raise FileExistsError(f"Theme already exists: {theme_dir}")

    (theme_dir / "IconBundles").mkdir(parents=True)
    (theme_dir / "Bundles" / "com.apple.springboard").mkdir(parents=True)

    if not (root / CONTROL_DIR / CONTROL_FILE).exists():
        generate_control_file(root / CONTROL_DIR, name=theme_name)
    return theme_dir
