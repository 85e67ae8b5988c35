"""Core logic for building Debian packages and app bundles from a staging root."""

from collections.abc import Iterable
from pathlib import Path

import structlog

from ..control import ControlMetadata, parse_control
from ..models import DEBIAN_BINARY_VERSION
from ..policy import normalize_allow_list
from ..tree import list_files, walk_tree
from . import ar
from .bundle import build_bundle
from .compression import compress
from .tarball import build_tar
from .validator import CONTROL_DIR, RESERVED_DIRS, control_path, validate_structure

logger = structlog.get_logger()


class BuildOrchestrator:
    def __init__(
        self,
        package_root: Path,
        allow_list: Iterable[str] = (),
        output_dir: Path | None = None,
        debian_version: str = DEBIAN_BINARY_VERSION,
        source_date_epoch: int = 0,
    ) -> None:
        self.package_root = Path(package_root)
        self.allow_list = normalize_allow_list(allow_list)
        self.output_dir = Path(output_dir) if output_dir else None
        self.debian_version = debian_version
        self.source_date_epoch = source_date_epoch

    def read_control(self) -> ControlMetadata:
        return parse_control(
            control_path(self.package_root).read_text(encoding="utf-8")
        )

    def _tar_gz(self, tar_bytes: bytes) -> bytes:
        return compress(tar_bytes, mtime=self.source_date_epoch)

    def build_control_archive(self) -> bytes:
        """Archives the top-level files of DEBIAN/ (control and maintainer scripts)."""
        logger.info("Creating control.tar.gz")
        tree = list_files(self.package_root / CONTROL_DIR)
        return self._tar_gz(
            build_tar(tree, self.allow_list, mtime=self.source_date_epoch)
        )

    def build_data_archive(self) -> bytes:
        """Archives every non-reserved subdirectory of the package root."""
        logger.info("Creating data.tar.gz")
        tree = walk_tree(
            self.package_root, exclude_dirs=RESERVED_DIRS, skip_root_files=True
        )
        return self._tar_gz(
            build_tar(tree, self.allow_list, mtime=self.source_date_epoch)
        )

    def build_deb(self) -> Path:
        logger.info(
            "Orchestrator starting Debian package build...",
            root=str(self.package_root),
        )
        validate_structure(self.package_root)
        package_name = self.read_control().require_name()

        container = ar.assemble(
            self.debian_version,
            self.build_control_archive(),
            self.build_data_archive(),
            mtime=self.source_date_epoch,
        )

        output_dir = self.output_dir or self.package_root
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / f"{package_name}.deb"
        output_path.write_bytes(container)
        logger.info(f"Created {output_path.name}", size=len(container))
        return output_path

    def build_app(self, output: Path | None = None) -> Path:
        return build_bundle(
            self.package_root,
            self.allow_list,
            output=output,
            mtime=self.source_date_epoch,
        )
