"""Zip bundles for application folders, with Unix modes stored per entry."""

from pathlib import Path
import stat
import time
import zipfile

import structlog

from ..fileutil import discard
from ..policy import classify
from ..tree import walk_tree

logger = structlog.get_logger()

ZIP_UNIX_SYSTEM = 3
ZIP_DOS_DIRECTORY = 0x10
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def zip_date_time(epoch: int) -> tuple[int, int, int, int, int, int]:
    """Converts a Unix timestamp to a zip date, floored at the zip epoch."""
    if epoch <= 0:
        return ZIP_EPOCH
    t = time.gmtime(epoch)
    if t.tm_year < 1980:
        return ZIP_EPOCH
    return (t.tm_year, t.tm_mon, t.tm_mday, t.tm_hour, t.tm_min, t.tm_sec)


def build_bundle(
    staging: Path,
    allow_list: frozenset[str] = frozenset(),
    *,
    output: Path | None = None,
    mtime: int = 0,
) -> Path:
    """
    Zips `staging` (for example `MyApp.app`) into a bundle.

    Entry names are relative to the parent of `staging`, so they all start
    with the staging folder's name. The external attributes carry the
    entry type and policy mode in the high 16 bits, which unzip tools restore.
    """
    staging = Path(staging).resolve()
    tree = walk_tree(staging)
    output_path = Path(output) if output else staging.parent / f"{staging.name}.zip"
    date_time = zip_date_time(mtime)

    logger.info(f"Creating {output_path}")
    try:
        with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for entry in tree:
                arcname = f"{staging.name}/{entry.rel_path}"
                mode = classify(arcname, is_dir=entry.is_dir, allow_list=allow_list)

                info = zipfile.ZipInfo(
                    f"{arcname}/" if entry.is_dir else arcname, date_time=date_time
                )
                info.create_system = ZIP_UNIX_SYSTEM
                file_type = stat.S_IFDIR if entry.is_dir else stat.S_IFREG
                info.external_attr = (file_type | int(mode)) << 16
                if entry.is_dir:
                    info.external_attr |= ZIP_DOS_DIRECTORY
                    info.compress_type = zipfile.ZIP_STORED
                    archive.writestr(info, b"")
                else:
                    info.compress_type = zipfile.ZIP_DEFLATED
                    archive.writestr(info, entry.read_bytes())

                logger.info(f"add {info.filename}")
    except BaseException:
        discard(output_path)
        raise

    return output_path
