"""Tests for control descriptor and spec preamble parsing."""

import pytest

from wpkg.builder.control import parse_control, parse_spec_preamble
from wpkg.builder.exceptions import MissingNameFieldError


def test_parse_control_fields_and_continuations() -> None:
    """Continuation lines extend the previous field; comments are ignored."""
    metadata = parse_control(
        "# generated\n"
        "Package: demo\n"
        "Version: 1.0-1\n"
        "Description: A demo package\n"
        " with a longer description\n"
        "\tspanning lines\n"
        "\n"
        "Architecture:   all  \n"
    )
    assert metadata.name == "demo"
    assert metadata.version == "1.0-1"
    assert metadata.get("ARCHITECTURE") == "all"
    assert metadata.get("description") == (
        "A demo package\nwith a longer description\nspanning lines"
    )
    assert metadata.get("maintainer") is None
    assert metadata.get("maintainer", "nobody") == "nobody"


def test_name_falls_back_to_name_field() -> None:
    """Packages scaffolded without a Package field are named by Name."""
    assert parse_control("Name: themed\n").name == "themed"
    assert parse_control("Package: pkg\nName: label\n").name == "pkg"
    assert parse_control("Package:\nName: label\n").name == "label"


def test_require_name_raises_when_absent() -> None:
    """A descriptor with neither Package nor Name cannot produce a file name."""
    metadata = parse_control("Version: 1.0\n")
    assert metadata.name is None
    with pytest.raises(MissingNameFieldError, match="'Package' or 'Name'"):
        metadata.require_name()


def test_parse_spec_preamble() -> None:
    """Only the Name and Version tags are read, first occurrence wins."""
    preamble = parse_spec_preamble(
        "Summary: Demo\n"
        "name:    demo\n"
        "Version: 2.1\n"
        "Release: 1\n"
        "%description\n"
        "Name: ignored\n"
    )
    assert preamble.get("name") == "demo"
    assert preamble.version == "2.1"
    assert preamble.get("summary") is None
