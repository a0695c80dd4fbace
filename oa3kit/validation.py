"""Descriptive objects of an OpenAPI 3 document and their validation."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

_SEMVER = re.compile(
    r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?",
    re.ASCII,
)
_EMAIL = re.compile(r"[^@ \t\r\n]+@[^@ \t\r\n]+\.[^@ \t\r\n]+")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class SpecError(ValueError):
    """Raised when a document is malformed or fails validation."""


def is_semver(version: str) -> bool:
    """Report whether ``version`` is a semantic version number."""
    return _SEMVER.fullmatch(version) is not None


def is_email(address: str) -> bool:
    """Report whether ``address`` looks like an e-mail address."""
    return _EMAIL.fullmatch(address) is not None


def _check_url(value: str) -> None:
    """Raise ValueError if ``value`` cannot be parsed as a URL."""
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in value):
        raise ValueError("invalid control character in URL")
    if value.startswith(":"):
        raise ValueError("missing protocol scheme")
    parts = urlsplit(value)
    for piece in (parts.path, parts.fragment):
        bad = _BAD_ESCAPE.search(piece)
        if bad:
            raise ValueError(f"invalid URL escape {piece[bad.start():bad.start() + 3]!r}")
    if (
        not parts.scheme
        and not parts.netloc
        and not parts.path.startswith("/")
        and ":" in parts.path.partition("/")[0]
    ):
        raise ValueError("first path segment in URL cannot contain colon")
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        port = host.partition("]")[2]
    else:
        port = host[host.rfind(":"):] if ":" in host else ""
    if port and not (port.startswith(":") and all(c in "0123456789" for c in port[1:])):
        raise ValueError(f"invalid port {port!r} after host")


def _mapping(data: Any, where: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise SpecError(f"{where} must be a mapping")
    return data


def _text(data: Mapping, key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise SpecError(f"{where}.{key} must be a string")


def _extensions(data: Mapping) -> dict[str, Any]:
    return {k: v for k, v in data.items() if isinstance(k, str) and k.startswith("x-")}


def _blank(text: str) -> bool:
    return not text.strip()


@dataclass
class Contact:
    """Contact information for the exposed API."""

    name: str | None = None
    url: str | None = None
    email: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Contact:
        data = _mapping(data, "contact")
        return cls(
            name=_text(data, "name", "contact"),
            url=_text(data, "url", "contact"),
            email=_text(data, "email", "contact"),
            extensions=_extensions(data),
        )

    def validate(self) -> None:
        if self.name is not None and _blank(self.name):
            raise SpecError("info.contact.name if present must not be blank")
        if self.url is not None:
            try:
                _check_url(self.url)
            except ValueError as exc:
                raise SpecError(f"info.contact.url if present must be a url: {exc}") from exc
        if self.email is not None and not is_email(self.email):
            raise SpecError("info.contact.email if present must be an e-mail address")


@dataclass
class License:
    """License information for the exposed API."""

    name: str = ""
    url: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> License:
        data = _mapping(data, "license")
        return cls(
            name=_text(data, "name", "license") or "",
            url=_text(data, "url", "license"),
            extensions=_extensions(data),
        )

    def validate(self) -> None:
        if _blank(self.name):
            raise SpecError("info.license.name cannot be blank")
        if self.url is not None:
            try:
                _check_url(self.url)
            except ValueError as exc:
                raise SpecError("info.license.url if present must be a url") from exc


@dataclass
class ExternalDocs:
    """A pointer to external documentation."""

    description: str | None = None
    url: str = ""
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> ExternalDocs:
        data = _mapping(data, "externalDocs")
        return cls(
            description=_text(data, "description", "externalDocs"),
            url=_text(data, "url", "externalDocs") or "",
            extensions=_extensions(data),
        )

    def validate(self) -> None:
        if self.description is not None and _blank(self.description):
            raise SpecError("description if present must not be blank")
        try:
            _check_url(self.url)
        except ValueError as exc:
            raise SpecError(f"url must be a valid url: {exc}") from exc


@dataclass
class Link:
    """A design-time link from a response to another operation."""

    operation_ref: str | None = None
    operation_id: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    request_body: Any = None
    description: str | None = None
    server: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> Link:
        data = _mapping(data, "link")
        parameters = data.get("parameters") or {}
        return cls(
            operation_ref=_text(data, "operationRef", "link"),
            operation_id=_text(data, "operationId", "link"),
            parameters=dict(_mapping(parameters, "link.parameters")),
            request_body=data.get("requestBody"),
            description=_text(data, "description", "link"),
            server=data.get("server"),
        )

    def validate(self) -> None:
        if self.operation_ref is not None and self.operation_id is not None:
            raise SpecError("operationRef is mutually exclusive with operationId")


@dataclass
class Example:
    """An example value; ``value`` and ``external_value`` are mutually exclusive."""

    summary: str | None = None
    description: str | None = None
    value: Any = None
    external_value: str = ""
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Example:
        data = _mapping(data, "example")
        return cls(
            summary=_text(data, "summary", "example"),
            description=_text(data, "description", "example"),
            value=data.get("value"),
            external_value=_text(data, "externalValue", "example") or "",
            extensions=_extensions(data),
        )


@dataclass
class Info:
    """Metadata about the API."""

    title: str = ""
    description: str | None = None
    terms_of_service: str | None = None
    contact: Contact | None = None
    license: License | None = None
    version: str = ""
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Info:
        data = _mapping(data, "info")
        contact = data.get("contact")
        license_data = data.get("license")
        return cls(
            title=_text(data, "title", "info") or "",
            description=_text(data, "description", "info"),
            terms_of_service=_text(data, "termsOfService", "info"),
            contact=Contact.from_dict(contact) if contact is not None else None,
            license=License.from_dict(license_data) if license_data is not None else None,
            version=_text(data, "version", "info") or "",
            extensions=_extensions(data),
        )

    def validate(self) -> None:
        if _blank(self.title):
            raise SpecError("info.title must not be blank")
        if self.description is not None and _blank(self.description):
            raise SpecError("info.description if present must not be blank")
        if self.terms_of_service is not None:
            try:
                _check_url(self.terms_of_service)
            except ValueError as exc:
                raise SpecError(
                    f"info.termsOfService if present must be a url: {exc}"
                ) from exc
        if self.contact is not None:
            self.contact.validate()
        if self.license is not None:
            self.license.validate()
        if _blank(self.version):
            raise SpecError("info.version must not be blank")