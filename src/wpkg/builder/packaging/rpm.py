"""Builds RPM packages by delegating to `rpmbuild` through a shell."""

from collections.abc import Callable, Iterable
from pathlib import Path
import shlex
import shutil
import tempfile

import structlog

from ..control import parse_spec_preamble
from ..delegate import DelegateLookup, Found, NotFound, Shell, find_build_delegate
from ..exceptions import (
    DelegateCommandError,
    MissingNameFieldError,
    NoBuildDelegateFoundError,
    SpecFileError,
)
from ..fileutil import discard
from ..policy import normalize_allow_list
from ..tree import walk_tree
from .compression import compress
from .tarball import build_tar
from .validator import RESERVED_DIRS, SPECS_DIR

logger = structlog.get_logger()

RPMS_DIR = "RPMS"
RPMBUILD_HOME = "~/rpmbuild"


class RpmBuilder:
    BUILD_TOOL = "rpmbuild"

    def __init__(
        self,
        package_root: Path,
        allow_list: Iterable[str] = (),
        source_date_epoch: int = 0,
        locate: Callable[[str], DelegateLookup] = find_build_delegate,
    ) -> None:
        self.package_root = Path(package_root)
        self.allow_list = normalize_allow_list(allow_list)
        self.source_date_epoch = source_date_epoch
        self.locate = locate

    def find_spec_file(self) -> Path:
        specs_dir = self.package_root / SPECS_DIR
        specs = sorted(specs_dir.glob("*.spec")) if specs_dir.is_dir() else []
        if not specs:
            raise SpecFileError(f"No spec file found in '{specs_dir}'.")
        if len(specs) > 1:
            names = ", ".join(spec.name for spec in specs)
            raise SpecFileError(
                f"Expected exactly one spec file in '{specs_dir}', found: {names}"
            )
        return specs[0]

    def read_spec(self, spec_file: Path) -> tuple[str, str]:
        preamble = parse_spec_preamble(spec_file.read_text(encoding="utf-8"))
        name = preamble.get("name")
        if not name:
            raise MissingNameFieldError(f"Spec file '{spec_file.name}' contains no name.")
        version = preamble.get("version")
        if not version:
            raise SpecFileError(f"Spec file '{spec_file.name}' contains no version.")
        return name, version

    def build_source_tarball(self, name: str, version: str, directory: Path) -> Path:
        """Writes `<name>-<version>.tar.gz` with every entry under `<name>-<version>/`."""
        tree = walk_tree(
            self.package_root,
            exclude_dirs=RESERVED_DIRS | {RPMS_DIR},
            skip_root_files=True,
        )
        tar_bytes = build_tar(
            tree,
            self.allow_list,
            prefix=f"{name}-{version}/",
            mtime=self.source_date_epoch,
        )
        source_path = directory / f"{name}-{version}.tar.gz"
        source_path.write_bytes(compress(tar_bytes, mtime=self.source_date_epoch))
        return source_path

    def _resolve_shell(self) -> Shell:
        match self.locate(self.BUILD_TOOL):
            case Found(shell=shell):
                return shell
            case NotFound(command=command):
                raise NoBuildDelegateFoundError(
                    f"No shell with {command} installed was found."
                )

    def build_rpm(self) -> list[Path]:
        logger.info(
            "Orchestrator starting RPM package build...", root=str(self.package_root)
        )
        spec_file = self.find_spec_file()
        name, version = self.read_spec(spec_file)
        shell = self._resolve_shell()

        home_spec = f"{RPMBUILD_HOME}/SPECS/{shlex.quote(spec_file.name)}"
        with tempfile.TemporaryDirectory(prefix="wpkg_build_") as temp_dir_str:
            source = self.build_source_tarball(name, version, Path(temp_dir_str))
            home_source = f"{RPMBUILD_HOME}/SOURCES/{shlex.quote(source.name)}"

            if shell.find("rpmdev-setuptree") is not None:
                shell.run("rpmdev-setuptree")
            else:
                shell.run(f"mkdir -p {RPMBUILD_HOME}/SOURCES {RPMBUILD_HOME}/SPECS")

            shell.run(f"cp {shlex.quote(shell.to_shell_path(spec_file))} {home_spec}")
            shell.run(f"cp {shlex.quote(shell.to_shell_path(source))} {home_source}")

        if shell.find("rpmlint") is not None:
            try:
                shell.run(f"rpmlint {home_spec}")
            except DelegateCommandError as e:
                logger.warning("rpmlint reported problems", details=str(e))

        shell.run(f"rpmbuild -bb {home_spec}")

        rpms_dir = shlex.quote(shell.to_shell_path(self.package_root / RPMS_DIR))
        shell.run(f"mkdir -p {rpms_dir} && cp -r {RPMBUILD_HOME}/RPMS/. {rpms_dir}/")
        return self.collect_artifacts(name, version)

    def collect_artifacts(self, name: str, version: str) -> list[Path]:
        """
        Moves `<name>-<version>-*.rpm` from RPMS/ into the package root and
        deletes everything else that the delegate produced.
        """
        rpms_dir = self.package_root / RPMS_DIR
        if not rpms_dir.is_dir():
            return []

        prefix = f"{name}-{version}-"
        kept = []
        for artifact in sorted(rpms_dir.rglob("*.rpm")):
            if artifact.name.startswith(prefix):
                target = self.package_root / artifact.name
                artifact.replace(target)
                kept.append(target)
                logger.info(f"Created {target.name}")
            else:
                discard(artifact)

        shutil.rmtree(rpms_dir, ignore_errors=True)
        return kept
