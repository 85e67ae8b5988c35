"""Expansion of Debian binary packages into content directories."""

from pathlib import Path
import shutil
import tarfile
import tempfile

from attrs import define
import structlog

from ..exceptions import DecodeError
from ..models import ArMemberKind
from .ar import iter_members
from .compression import decompress

logger = structlog.get_logger()

# Member name -> (content part, gzip-compressed)
TAR_MEMBERS: dict[str, tuple[str, bool]] = {
    ArMemberKind.CONTROL.value: ("control", True),
    "control.tar": ("control", False),
    ArMemberKind.DATA.value: ("data", True),
    "data.tar": ("data", False),
}


@define(frozen=True, slots=True)
class ExtractionResult:
    version: str
    control_dir: Path
    data_dir: Path
    skipped: tuple[str, ...] = ()


def _expand_tar(archive_path: Path, target: Path) -> None:
    target.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive_path, mode="r:") as archive:
            archive.extractall(target, filter="tar")
    except tarfile.TarError as e:
        raise DecodeError(f"Corrupt tar archive '{archive_path.name}': {e}") from e


def _publish(staged: Path, target: Path) -> None:
    if target.exists():
        shutil.copytree(staged, target, symlinks=True, dirs_exist_ok=True)
    else:
        shutil.move(staged, target)


def extract(container: bytes, destination: Path, name: str) -> ExtractionResult:
    """
    Unpacks `container` below `destination`.

    The control and data archives are expanded into `<name>_control` and
    `<name>_data`. Members are matched by name, so reordered containers are
    accepted; unknown members are skipped. Every member is decoded and
    expanded inside a scratch directory first; nothing reaches `destination`
    unless the whole container decodes.
    """
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)

    version: str | None = None
    staged: dict[str, Path] = {}
    skipped: list[str] = []

    with tempfile.TemporaryDirectory(
        prefix="wpkg_extract_", ignore_cleanup_errors=True
    ) as scratch_str:
        scratch = Path(scratch_str)
        for member in iter_members(container):
            if member.name == ArMemberKind.VERSION.value:
                (scratch / member.name).write_bytes(member.payload)
                version = member.payload.decode("ascii", errors="replace").strip()

            elif member.name in TAR_MEMBERS:
                part, compressed = TAR_MEMBERS[member.name]
                tar_path = scratch / f"{part}.tar"
                tar_path.write_bytes(
                    decompress(member.payload) if compressed else member.payload
                )
                staging_dir = scratch / "content" / part
                _expand_tar(tar_path, staging_dir)
                staged[part] = staging_dir

            else:
                logger.warning("Skipping unrecognized member", member=member.name)
                skipped.append(member.name)

        if version is None:
            raise DecodeError("Package has no debian-binary member.")
        for part in ("control", "data"):
            if part not in staged:
                raise DecodeError(f"Package has no {part}.tar.gz member.")

        content_dirs = {}
        for part, staging_dir in staged.items():
            target = destination / f"{name}_{part}"
            _publish(staging_dir, target)
            content_dirs[part] = target
            logger.info(f"Extracted {part} archive to {target}")

    return ExtractionResult(
        version=version,
        control_dir=content_dirs["control"],
        data_dir=content_dirs["data"],
        skipped=tuple(skipped),
    )
