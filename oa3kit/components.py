"""Component references and component key names."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote, urlsplit

from .validation import Link, SpecError

_COMPONENT_NAME = re.compile(r"[a-zA-Z0-9.\-_]+")

_REFERENCEABLE = frozenset(
    {
        "schemas",
        "responses",
        "parameters",
        "examples",
        "requestBodies",
        "headers",
        "securitySchemes",
        "links",
        "callbacks",
    }
)

_CHECKED_SECTIONS = (
    "schemas",
    "responses",
    "parameters",
    "examples",
    "requestBodies",
    "headers",
    "securitySchemes",
    "links",
    "callbacks",
)


def parse_ref(uri: str, kind: str | None = None) -> str:
    """Return the component name a file-local ``$ref`` points at.

    The fragment must have the form ``components/TYPE/NAME``. ``kind`` names
    the component type the caller expects; the reference's own type is what
    is checked.
    """
    try:
        parts = urlsplit(uri)
    except ValueError as exc:
        raise SpecError(f"$ref failed to parse({uri}): {exc}") from exc

    if parts.scheme or parts.path:
        raise SpecError(f"$ref cannot contain non-file-local references: {uri}")

    fragment = unquote(parts.fragment)
    if not fragment:
        raise SpecError(f"$ref must contain a url fragment: {uri}")

    pieces = fragment.split("/")
    if len(pieces) != 3:
        raise SpecError(
            f"$ref must contain a url in the form '#/components/TYPE/NAME' but got: {uri}"
        )
    section, ref_type, name = pieces
    if section != "components":
        raise SpecError(f"$ref must start with '#/components' but got: {uri}")
    if ref_type not in _REFERENCEABLE:
        raise SpecError(
            "$ref can only refer to types: schemas|responses|parameters|examples|"
            f"requestBodies|headers|securitySchemes|links|callbacks, but got: {ref_type}"
        )
    return name


def is_valid_component_name(name: str) -> bool:
    """Report whether ``name`` may be used as a component key."""
    return _COMPONENT_NAME.fullmatch(name) is not None


def validate_component_names(components: Mapping[str, Any] | None) -> None:
    """Check every component key name and validate inline links."""
    if components is None:
        return
    if not isinstance(components, Mapping):
        raise SpecError("components must be a mapping")

    for section in _CHECKED_SECTIONS:
        entries = components.get(section)
        if entries is None:
            continue
        if not isinstance(entries, Mapping):
            raise SpecError(f"{section} must be a mapping")
        for name, entry in entries.items():
            if not isinstance(name, str) or not is_valid_component_name(name):
                raise SpecError(f"{section}({name}): invalid component key name")
            if section == "links" and isinstance(entry, Mapping) and not entry.get("$ref"):
                try:
                    Link.from_dict(entry).validate()
                except SpecError as exc:
                    raise SpecError(f"links({name}).{exc}") from exc