"""Parsing of Debian control descriptors and RPM spec preambles."""

import re

from attrs import define, field

from .exceptions import MissingNameFieldError

_FIELD_RE = re.compile(r"^(?P<key>[A-Za-z0-9][A-Za-z0-9._-]*)\s*:\s*(?P<value>.*)$")
_SPEC_TAG_RE = re.compile(r"^(?P<key>Name|Version)\s*:\s*(?P<value>.*)$", re.IGNORECASE)


@define(frozen=True, slots=True)
class ControlMetadata:
    """Key/value pairs of a control descriptor. Lookups are case-insensitive."""

    fields: dict[str, str] = field(factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.fields.get(key.lower(), default)

    @property
    def name(self) -> str | None:
        return self.get("package") or self.get("name") or None

    @property
    def version(self) -> str | None:
        return self.get("version") or None

    def require_name(self) -> str:
        name = self.name
        if not name:
            raise MissingNameFieldError(
                "Control descriptor contains no 'Package' or 'Name' field."
            )
        return name


def parse_control(text: str) -> ControlMetadata:
    fields: dict[str, str] = {}
    current_key: str | None = None

    for line in text.splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        if line[0] in " \t":
            # Continuation of a multi-line field such as Description.
            if current_key is not None:
                fields[current_key] = f"{fields[current_key]}\n{line.strip()}"
            continue
        match = _FIELD_RE.match(line)
        if match is None:
            current_key = None
            continue
        current_key = match["key"].lower()
        fields[current_key] = match["value"].strip()

    return ControlMetadata(fields=fields)


def parse_spec_preamble(text: str) -> ControlMetadata:
    """Reads the `Name:` and `Version:` tags from an RPM spec file."""
    fields: dict[str, str] = {}
    for line in text.splitlines():
        match = _SPEC_TAG_RE.match(line.strip())
        if match is not None:
            fields.setdefault(match["key"].lower(), match["value"].strip())
    return ControlMetadata(fields=fields)
