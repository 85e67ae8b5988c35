"""Deterministic tar construction for package payloads."""

import io
import tarfile

import structlog

from ..tree import PackageTree

logger = structlog.get_logger()

ROOT_NAME = "root"
ROOT_ID = 0


def build_tar(
    tree: PackageTree,
    allow_list: frozenset[str] = frozenset(),
    *,
    prefix: str = "./",
    mtime: int = 0,
) -> bytes:
    """
    Serializes `tree` into an uncompressed tar stream.

    Entries are written in the tree's order, owned by root:root (0:0) and
    stamped with `mtime`, with modes from the permission policy.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.GNU_FORMAT) as archive:
        for entry in tree:
            info = tarfile.TarInfo(prefix + entry.rel_path)
            info.uid = info.gid = ROOT_ID
            info.uname = info.gname = ROOT_NAME
            info.mode = int(entry.permission(allow_list))
            info.mtime = mtime

            if entry.is_dir:
                info.type = tarfile.DIRTYPE
                archive.addfile(info)
            else:
                payload = entry.read_bytes()
                info.size = len(payload)
                archive.addfile(info, io.BytesIO(payload))

            logger.info(f"add {info.name}")

    return buffer.getvalue()
