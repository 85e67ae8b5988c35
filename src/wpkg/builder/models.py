import enum
import struct
from typing import Self

from attrs import define, field

# Common `ar` format constants, as read by `ar(1)` and `dpkg-deb`.
AR_MAGIC: bytes = b"!<arch>\n"
AR_HEADER_END: bytes = b"`\n"
AR_PAD_BYTE: bytes = b"\n"
AR_NAME_WIDTH: int = 16
AR_REGULAR_FILE_MODE: int = 0o100644

# name, mtime, uid, gid, mode (octal), size, end-of-header marker
HEADER_STRUCT_FORMAT = "16s12s6s6s8s10s2s"
HEADER_SIZE = struct.calcsize(HEADER_STRUCT_FORMAT)

if HEADER_SIZE != 60:
    raise AssertionError(
        f"Calculated ar member header size is {HEADER_SIZE}, expected 60."
    )

DEBIAN_BINARY_VERSION = "2.0"


class ArMemberKind(enum.Enum):
    """The closed set of members in a Debian binary package, in container order."""

    VERSION = "debian-binary"
    CONTROL = "control.tar.gz"
    DATA = "data.tar.gz"


def _encode_field(value: int, width: int, *, base: int = 10) -> bytes:
    text = f"{value:o}" if base == 8 else str(value)
    if value < 0 or len(text) > width:
        raise ValueError(f"Value {value} does not fit in a {width}-byte header field.")
    return text.encode("ascii").ljust(width)


def _decode_field(raw: bytes, *, base: int = 10) -> int:
    text = raw.decode("ascii").strip()
    if not text:
        return 0
    # Unsigned ASCII digits only.
    if not text.isdigit():
        raise ValueError(f"Header field {raw!r} is not an unsigned number.")
    return int(text, base)


@define(frozen=True, slots=True)
class ArHeader:
    name: str
    size: int
    mtime: int = 0
    uid: int = 0
    gid: int = 0
    mode: int = field(default=AR_REGULAR_FILE_MODE)

    def pack(self) -> bytes:
        encoded_name = self.name.encode("ascii")
        if not encoded_name or len(encoded_name) > AR_NAME_WIDTH:
            raise ValueError(
                f"Member name {self.name!r} must be 1-{AR_NAME_WIDTH} ASCII characters."
            )
        return struct.pack(
            HEADER_STRUCT_FORMAT,
            encoded_name.ljust(AR_NAME_WIDTH),
            _encode_field(self.mtime, 12),
            _encode_field(self.uid, 6),
            _encode_field(self.gid, 6),
            _encode_field(self.mode, 8, base=8),
            _encode_field(self.size, 10),
            AR_HEADER_END,
        )

    @classmethod
    def unpack(cls, buffer: bytes) -> Self:
        if len(buffer) != HEADER_SIZE:
            raise ValueError(f"Buffer size {len(buffer)} != {HEADER_SIZE}")

        name, mtime, uid, gid, mode, size, end = struct.unpack(
            HEADER_STRUCT_FORMAT, buffer
        )
        if end != AR_HEADER_END:
            raise ValueError(f"Invalid end-of-header marker {end!r}.")

        decoded_name = name.decode("ascii").rstrip(" ")
        # GNU ar terminates names with a slash; dpkg-deb does not.
        if len(decoded_name) > 1 and decoded_name.endswith("/"):
            decoded_name = decoded_name[:-1]

        return cls(
            name=decoded_name,
            size=_decode_field(size),
            mtime=_decode_field(mtime),
            uid=_decode_field(uid),
            gid=_decode_field(gid),
            mode=_decode_field(mode, base=8),
        )


@define(frozen=True, slots=True)
class ArMember:
    name: str
    payload: bytes = field(repr=False)
    mode: int = AR_REGULAR_FILE_MODE
    mtime: int = 0
    uid: int = 0
    gid: int = 0

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def header(self) -> ArHeader:
        return ArHeader(
            name=self.name,
            size=self.size,
            mtime=self.mtime,
            uid=self.uid,
            gid=self.gid,
            mode=self.mode,
        )

    def pack(self) -> bytes:
        padding = AR_PAD_BYTE if self.size % 2 else b""
        return self.header.pack() + self.payload + padding
