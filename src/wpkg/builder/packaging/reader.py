"""Python-based reader for Debian binary packages."""

import io
from pathlib import Path
import tarfile

from ..control import ControlMetadata, parse_control
from ..exceptions import BadMagicError, DecodeError, FileMissingError
from ..models import AR_MAGIC, ArMember, ArMemberKind
from ..policy import normalize_rel_path
from .ar import iter_members
from .compression import decompress
from .extractor import TAR_MEMBERS, ExtractionResult, extract


def is_debian_binary(path: Path) -> bool:
    """Checks only the leading ar magic bytes."""
    with Path(path).open("rb") as f:
        return f.read(len(AR_MAGIC)) == AR_MAGIC


class DebReader:
    """Reads and describes the members of a Debian binary package."""

    def __init__(self, package_path: Path) -> None:
        package_path = Path(package_path)
        if not package_path.is_file():
            raise FileMissingError(f"Package not found at: {package_path}")
        self.package_path = package_path
        self._data = self._read_and_verify_magic()
        self.members: list[ArMember] = list(iter_members(self._data))

    def _read_and_verify_magic(self) -> bytes:
        with self.package_path.open("rb") as f:
            data = f.read()
        if data[: len(AR_MAGIC)] != AR_MAGIC:
            raise BadMagicError(
                f"File is not a Debian binary. Found magic {data[: len(AR_MAGIC)]!r}."
            )
        return data

    def member(self, name: str) -> ArMember | None:
        return next((m for m in self.members if m.name == name), None)

    @property
    def version(self) -> str | None:
        member = self.member(ArMemberKind.VERSION.value)
        return member.payload.decode("ascii", errors="replace").strip() if member else None

    def read_control(self) -> ControlMetadata:
        """Parses the `control` file out of the control archive."""
        member = next(
            (
                m
                for m in self.members
                if m.name in TAR_MEMBERS and TAR_MEMBERS[m.name][0] == "control"
            ),
            None,
        )
        if member is None:
            raise DecodeError("Package has no control.tar.gz member.")

        _, compressed = TAR_MEMBERS[member.name]
        raw = decompress(member.payload) if compressed else member.payload
        try:
            with tarfile.open(fileobj=io.BytesIO(raw), mode="r:") as archive:
                for info in archive.getmembers():
                    if info.isfile() and normalize_rel_path(info.name) == "control":
                        content = archive.extractfile(info).read()
                        return parse_control(content.decode("utf-8", errors="replace"))
        except tarfile.TarError as e:
            raise DecodeError(f"Corrupt control archive: {e}") from e
        raise DecodeError("Control archive contains no 'control' file.")

    def extract(self, destination: Path) -> ExtractionResult:
        return extract(self._data, destination, self.package_path.stem)

    def get_info(self) -> str:
        """Returns a human-readable string of the package information."""
        control = self.read_control()
        lines = [
            "Debian Package Information (parsed by Python):",
            f"  Format Version: {self.version}",
            f"  Package: {control.name}",
            f"  Version: {control.version}",
            "  Members:",
        ]
        lines.extend(f"    {m.name} ({m.size} bytes)" for m in self.members)
        return "\n".join(lines)
