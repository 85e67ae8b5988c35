"""
Configuration for `wpkg`, read from a standalone `wpkg.toml` or from the
`[tool.wpkg]` table of a `pyproject.toml`.
"""

import os
from pathlib import Path
import tomllib
from typing import Any, Self

from attrs import define, field

from .exceptions import BuildError
from .models import DEBIAN_BINARY_VERSION

CONFIG_FILE_NAMES = ("wpkg.toml", "pyproject.toml")
DEFAULT_EXECS_FILE = Path("execs.txt")


def default_source_date_epoch() -> int:
    value = os.environ.get("SOURCE_DATE_EPOCH", "").strip()
    if not value:
        return 0
    try:
        return int(value)
    except ValueError as e:
        raise BuildError(f"SOURCE_DATE_EPOCH must be an integer, got {value!r}.") from e


@define(frozen=True, slots=True)
class WpkgConfig:
    execs: Path = DEFAULT_EXECS_FILE
    silent: bool = False
    debian_version: str = DEBIAN_BINARY_VERSION
    source_date_epoch: int = field(factory=default_source_date_epoch)
    output_dir: Path | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any], base_dir: Path) -> Self:
        """Builds a config from a TOML table; relative paths resolve against `base_dir`."""
        unknown = set(data) - {
            "execs",
            "silent",
            "debian_version",
            "source_date_epoch",
            "output_dir",
        }
        if unknown:
            raise BuildError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        kwargs: dict[str, Any] = {}
        try:
            if "execs" in data:
                kwargs["execs"] = base_dir / str(data["execs"])
            if "output_dir" in data:
                kwargs["output_dir"] = base_dir / str(data["output_dir"])
            if "silent" in data:
                kwargs["silent"] = bool(data["silent"])
            if "debian_version" in data:
                kwargs["debian_version"] = str(data["debian_version"])
            if "source_date_epoch" in data:
                kwargs["source_date_epoch"] = int(data["source_date_epoch"])
        except (TypeError, ValueError) as e:
            raise BuildError(f"Invalid configuration value: {e}") from e
        return cls(**kwargs)


def find_config_file(search_dir: Path | None = None) -> Path | None:
    directory = Path(search_dir) if search_dir else Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, search_dir: Path | None = None) -> WpkgConfig:
    config_path = Path(path) if path else find_config_file(search_dir)
    if config_path is None:
        return WpkgConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise BuildError(f"Invalid configuration file '{config_path}': {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("wpkg", {})
    return WpkgConfig.from_mapping(data, config_path.parent)
