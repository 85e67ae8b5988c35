"""Tests for allow-list reading and line-ending conversion."""

from pathlib import Path

import pytest

from wpkg.builder.exceptions import FileMissingError
from wpkg.builder.fileutil import discard, dos2unix, read_allow_list


def test_read_allow_list(tmp_path: Path) -> None:
    """Lines are normalised; CRs and blank lines are dropped."""
    execs = tmp_path / "execs.txt"
    execs.write_bytes(b"./usr/lib/demo/run\r\n/opt/tool\r\n\r\nplain\n")
    assert read_allow_list(execs) == frozenset(
        {"usr/lib/demo/run", "opt/tool", "plain"}
    )


def test_read_allow_list_missing_file(tmp_path: Path) -> None:
    """A missing allow-list forces nothing."""
    assert read_allow_list(tmp_path / "execs.txt") == frozenset()
    assert read_allow_list(None) == frozenset()


def test_dos2unix(tmp_path: Path) -> None:
    """CRLF pairs become LF; lone CRs are kept."""
    first = tmp_path / "a.sh"
    second = tmp_path / "b.txt"
    first.write_bytes(b"#!/bin/sh\r\necho hi\r\n")
    second.write_bytes(b"keep\rthis\r\n")

    assert dos2unix([first, second]) == [first, second]
    assert first.read_bytes() == b"#!/bin/sh\necho hi\n"
    assert second.read_bytes() == b"keep\rthis\n"


def test_dos2unix_missing_file(tmp_path: Path) -> None:
    """A missing input is reported by name."""
    with pytest.raises(FileMissingError, match="missing.txt"):
        dos2unix([tmp_path / "missing.txt"])


def test_discard(tmp_path: Path) -> None:
    """Discarding removes files and ignores ones that are already gone."""
    target = tmp_path / "control.tar"
    target.write_bytes(b"x")
    discard(target)
    assert not target.exists()
    discard(target)
