"""Tests for the BuildOrchestrator class."""

import gzip
import io
from pathlib import Path
import tarfile
from typing import Callable

import pytest

from wpkg.builder.exceptions import InvalidStructureError, MissingNameFieldError
from wpkg.builder.packaging import ar
from wpkg.builder.packaging.orchestrator import BuildOrchestrator


def _tar_members(payload: bytes) -> dict[str, tarfile.TarInfo]:
    with tarfile.open(fileobj=io.BytesIO(gzip.decompress(payload)), mode="r:") as archive:
        return {info.name: info for info in archive.getmembers()}


def _tar_file(payload: bytes, name: str) -> bytes:
    with tarfile.open(fileobj=io.BytesIO(gzip.decompress(payload)), mode="r:") as archive:
        return archive.extractfile(name).read()


def test_build_deb_end_to_end(make_package_root: Callable[..., Path]) -> None:
    """
    A control file naming `demo` plus `usr/bin/demo` yields `demo.deb`, with
    the binary marked executable and the control file copied byte for byte.
    """
    root = make_package_root()
    control_bytes = (root / "DEBIAN" / "control").read_bytes()

    deb_path = BuildOrchestrator(root).build_deb()

    assert deb_path == root / "demo.deb"
    members = ar.parse(deb_path.read_bytes())
    assert [name for name, _ in members] == [
        "debian-binary",
        "control.tar.gz",
        "data.tar.gz",
    ]
    payloads = dict(members)
    assert payloads["debian-binary"] == b"2.0\n"

    data = _tar_members(payloads["data.tar.gz"])
    assert data["./usr/bin/demo"].mode == 0o777
    assert data["./usr/share/doc/README"].mode == 0o666
    assert not any(name.startswith("./DEBIAN") for name in data)

    assert _tar_file(payloads["control.tar.gz"], "./control") == control_bytes


def test_build_deb_is_deterministic(make_package_root: Callable[..., Path]) -> None:
    """Repeated builds of the same tree are byte-identical."""
    root = make_package_root()
    orchestrator = BuildOrchestrator(root, source_date_epoch=1700000000)
    first = orchestrator.build_deb().read_bytes()
    second = orchestrator.build_deb().read_bytes()
    assert first == second


def test_build_deb_stamps_source_date_epoch(
    make_package_root: Callable[..., Path],
) -> None:
    """Every tar entry and every ar header carries the fixed timestamp."""
    root = make_package_root()
    deb_path = BuildOrchestrator(root, source_date_epoch=1700000000).build_deb()
    payloads = dict(ar.parse(deb_path.read_bytes()))
    for member in ("control.tar.gz", "data.tar.gz"):
        assert {info.mtime for info in _tar_members(payloads[member]).values()} == {
            1700000000
        }


def test_control_archive_holds_only_top_level_debian_files(
    make_package_root: Callable[..., Path],
) -> None:
    """Maintainer scripts are packaged executable; nested directories are not."""
    root = make_package_root()
    (root / "DEBIAN" / "postinst").write_text("#!/bin/sh\nexit 0\n")
    (root / "DEBIAN" / "extra").mkdir()
    (root / "DEBIAN" / "extra" / "notes").write_text("ignored")

    control = _tar_members(BuildOrchestrator(root).build_control_archive())
    assert sorted(control) == ["./control", "./postinst"]
    assert control["./postinst"].mode == 0o777
    assert control["./control"].mode == 0o666


def test_data_archive_skips_reserved_dirs_and_root_files(
    make_package_root: Callable[..., Path],
) -> None:
    """SPECS/, DEBIAN/ and loose files at the root are not installed content."""
    root = make_package_root()
    (root / "SPECS").mkdir()
    (root / "SPECS" / "demo.spec").write_text("Name: demo\n")
    (root / "README.txt").write_text("loose")

    data = _tar_members(BuildOrchestrator(root).build_data_archive())
    assert not any(name.startswith(("./SPECS", "./DEBIAN")) for name in data)
    assert "./README.txt" not in data


def test_build_deb_honours_allow_list_and_output_dir(
    make_package_root: Callable[..., Path], tmp_path: Path
) -> None:
    """Allow-listed files become executable and the .deb lands in output_dir."""
    root = make_package_root()
    (root / "opt" / "demo").mkdir(parents=True)
    (root / "opt" / "demo" / "launch").write_text("run")

    out_dir = tmp_path / "dist"
    deb_path = BuildOrchestrator(
        root, allow_list=["./opt/demo/launch"], output_dir=out_dir
    ).build_deb()

    assert deb_path == out_dir / "demo.deb"
    data = _tar_members(dict(ar.parse(deb_path.read_bytes()))["data.tar.gz"])
    assert data["./opt/demo/launch"].mode == 0o777


def test_build_deb_uses_name_field_and_debian_version(
    make_package_root: Callable[..., Path],
) -> None:
    """Without a Package field the Name field names the output file."""
    root = make_package_root(control="Name: mytheme\nVersion: 1.0\n")
    deb_path = BuildOrchestrator(root, debian_version="2.1").build_deb()
    assert deb_path.name == "mytheme.deb"
    assert dict(ar.parse(deb_path.read_bytes()))["debian-binary"] == b"2.1\n"


def test_build_deb_requires_name(make_package_root: Callable[..., Path]) -> None:
    """A control file without Package or Name fails before writing anything."""
    root = make_package_root(control="Version: 1.0\n")
    with pytest.raises(MissingNameFieldError):
        BuildOrchestrator(root).build_deb()
    assert list(root.glob("*.deb")) == []


def test_build_deb_rejects_invalid_structure(tmp_path: Path) -> None:
    """An unstructured folder fails validation."""
    (tmp_path / "file.txt").write_text("x")
    with pytest.raises(InvalidStructureError):
        BuildOrchestrator(tmp_path).build_deb()


def test_build_app_delegates_to_bundle(tmp_path: Path) -> None:
    """The app build zips the folder next to itself."""
    app = tmp_path / "Tool.app"
    (app / "Contents").mkdir(parents=True)
    (app / "Contents" / "Info.plist").write_text("<plist/>")

    assert BuildOrchestrator(app).build_app() == tmp_path / "Tool.app.zip"
