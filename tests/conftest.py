"""Pytest fixtures for the entire wpkg-builder test suite."""

from pathlib import Path
from typing import Callable, Generator

import pytest
import structlog

DEMO_CONTROL = "Package: demo\nVersion: 1.0\nArchitecture: all\n"


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """
    Restores structlog's default configuration after every test, since the
    CLI reconfigures logging globally on each invocation.
    """
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_package_root(tmp_path: Path) -> Callable[..., Path]:
    """
    A factory fixture that lays out a staging root with `DEBIAN/control`,
    an executable under `usr/bin/`, and a plain documentation file.
    """

    def _make_root(
        name: str = "demo",
        control: str = DEMO_CONTROL,
        parent: Path | None = None,
    ) -> Path:
        root = (parent or tmp_path) / name
        (root / "DEBIAN").mkdir(parents=True)
        (root / "DEBIAN" / "control").write_text(control)
        (root / "usr" / "bin").mkdir(parents=True)
        (root / "usr" / "bin" / "demo").write_bytes(b"#!/bin/sh\necho demo\n")
        (root / "usr" / "share" / "doc").mkdir(parents=True)
        (root / "usr" / "share" / "doc" / "README").write_text("Read me.\n")
        return root

    return _make_root
