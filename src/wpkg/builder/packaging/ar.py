"""
Codec for the AR container wrapping a Debian binary package.

Reading is a small state machine: the magic is consumed first, then one
member per step until the input is exhausted.
"""

from collections.abc import Iterator

from ..exceptions import BadMagicError, DecodeError, TruncatedMemberError
from ..models import AR_MAGIC, HEADER_SIZE, ArHeader, ArMember, ArMemberKind


def assemble(
    version: str, control_tar_gz: bytes, data_tar_gz: bytes, *, mtime: int = 0
) -> bytes:
    """Builds the container bytes. Member order follows `ArMemberKind`."""
    payloads = {
        ArMemberKind.VERSION: f"{version}\n".encode("ascii"),
        ArMemberKind.CONTROL: control_tar_gz,
        ArMemberKind.DATA: data_tar_gz,
    }
    chunks = [AR_MAGIC]
    for kind in ArMemberKind:
        chunks.append(ArMember(name=kind.value, payload=payloads[kind], mtime=mtime).pack())
    return b"".join(chunks)


def _read_member(data: bytes, offset: int) -> tuple[ArMember, int]:
    header_end = offset + HEADER_SIZE
    if header_end > len(data):
        raise TruncatedMemberError(
            f"Member header at offset {offset} is truncated "
            f"({len(data) - offset} of {HEADER_SIZE} bytes present)."
        )

    try:
        header = ArHeader.unpack(data[offset:header_end])
    except ValueError as e:
        raise DecodeError(f"Malformed member header at offset {offset}: {e}") from e

    payload_end = header_end + header.size
    if payload_end > len(data):
        raise TruncatedMemberError(
            f"Member '{header.name}' declares {header.size} bytes "
            f"but only {len(data) - header_end} remain."
        )

    member = ArMember(
        name=header.name,
        payload=data[header_end:payload_end],
        mode=header.mode,
        mtime=header.mtime,
        uid=header.uid,
        gid=header.gid,
    )
    # Odd-sized payloads are followed by one pad byte, which may be absent at EOF.
    return member, payload_end + header.size % 2


def iter_members(data: bytes) -> Iterator[ArMember]:
    if data[: len(AR_MAGIC)] != AR_MAGIC:
        raise BadMagicError(
            f"Not an ar archive. Expected magic {AR_MAGIC!r}, "
            f"found {data[: len(AR_MAGIC)]!r}."
        )

    offset = len(AR_MAGIC)
    while offset < len(data):
        member, next_offset = _read_member(data, offset)
        if next_offset <= offset:
            raise DecodeError(f"Member header at offset {offset} does not advance the stream.")
        offset = next_offset
        yield member


def parse(data: bytes) -> list[tuple[str, bytes]]:
    return [(member.name, member.payload) for member in iter_members(data)]
