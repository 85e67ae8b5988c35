"""Gzip wrapping of tar streams."""

import gzip
import zlib

from ..exceptions import DecodeError


def compress(data: bytes, *, mtime: int = 0) -> bytes:
    return gzip.compress(data, compresslevel=9, mtime=mtime)


def decompress(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise DecodeError(f"Corrupt gzip payload: {e}") from e
