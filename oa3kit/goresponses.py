"""Response shape decisions and tag grouping for generated Go source."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .gotypes import is_inline_primitive

_JSON = "application/json"

_TAG_METHODS = (
    ("get", "GET"),
    ("post", "POST"),
    ("put", "PUT"),
    ("patch", "PATCH"),
    ("delete", "DELETE"),
    ("options", "OPTIONS"),
    ("head", "HEAD"),
    ("trace", "TRACE"),
)


@dataclass
class TagOp:
    """An operation together with the path and HTTP method it is found under."""

    path: str
    method: str
    op: dict[str, Any]


@dataclass
class TagPath:
    """All operations that share the same first tag."""

    tag: str
    ops: list[TagOp] = field(default_factory=list)


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _responses(op: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(op.get("responses"))


def _response(op: Mapping[str, Any], code: str) -> Mapping[str, Any]:
    return _mapping(_responses(op).get(code))


def _schema(media_type: Any) -> Mapping[str, Any]:
    return _mapping(_mapping(media_type).get("schema"))


def _ref(schema: Mapping[str, Any]) -> str:
    return schema.get("$ref") or ""


def _type(schema: Mapping[str, Any]) -> str:
    return schema.get("type") or ""


def _bodies_collide(body: Mapping[str, Any], other: Mapping[str, Any]) -> bool:
    """Report whether two bodies cannot be told apart by their Go type."""
    ref, other_ref = _ref(body), _ref(other)
    if ref and other_ref and ref == other_ref:
        return True
    if not ref and not other_ref and _type(body) == _type(other):
        return is_inline_primitive(body)
    return False


def tag_paths(spec: Mapping[str, Any]) -> list[TagPath]:
    """Group every operation by its first tag.

    Groups are ordered by tag, and operations within a group by operation id.
    Operations without tags are grouped under the empty tag.
    """
    groups: dict[str, list[TagOp]] = {}
    for name, path in _mapping(spec.get("paths")).items():
        if not isinstance(path, Mapping):
            continue
        for key, method in _TAG_METHODS:
            op = path.get(key)
            if not isinstance(op, Mapping):
                continue
            tags = op.get("tags") or []
            tag = tags[0] if tags else ""
            groups.setdefault(tag, []).append(TagOp(path=name, method=method, op=op))

    return [
        TagPath(
            tag=tag,
            ops=sorted(groups[tag], key=lambda item: item.op.get("operationId") or ""),
        )
        for tag in sorted(groups)
    ]


def response_needs_wrap(op: Mapping[str, Any], code: str) -> bool:
    """Report whether a response must be wrapped in a struct.

    That is the case when it has headers, or when two of its media types
    carry bodies of the same Go type.
    """
    response = _response(op, code)
    if response.get("headers"):
        return True

    content = _mapping(response.get("content"))
    for first, first_media in content.items():
        for second, second_media in content.items():
            if first == second:
                continue
            if _bodies_collide(_schema(first_media), _schema(second_media)):
                return True
    return False


def response_kind(op: Mapping[str, Any], code: str) -> str:
    """Return how a response code must be represented.

    ``"wrapped"`` when it has headers or its JSON body has the same Go type as
    another code's body, ``"empty"`` when it has no body, and ``""`` when its
    body type can be used directly.
    """
    response = _response(op, code)
    if response.get("headers"):
        return "wrapped"

    content = _mapping(response.get("content"))
    if not content:
        return "empty"
    if _JSON not in content:
        return ""

    body = _schema(content[_JSON])
    for other_code, other in _responses(op).items():
        if other_code == code:
            continue
        other_content = _mapping(_mapping(other).get("content"))
        if not other_content or _JSON not in other_content:
            continue
        if _bodies_collide(body, _schema(other_content[_JSON])):
            return "wrapped"
    return ""


def response_needs_ptr(op: Mapping[str, Any]) -> bool:
    """Report whether an operation's single response is returned by pointer.

    Operations with several responses, and responses with only non-JSON
    bodies, are returned by value.
    """
    responses = _responses(op)
    if len(responses) > 1:
        return False
    for response in responses.values():
        content = _mapping(_mapping(response).get("content"))
        if content and _JSON not in content:
            return False
    return True


def has_complex_servers(servers: Sequence[Mapping[str, Any]] | None) -> bool:
    """Report whether there are several servers and any of them has variables."""
    servers = list(servers or [])
    complicated = any(_mapping(server).get("variables") for server in servers)
    return len(servers) > 1 and complicated


def has_json_response(op: Mapping[str, Any]) -> bool:
    """Report whether any of an operation's responses has a JSON body."""
    return any(
        _JSON in _mapping(_mapping(response).get("content"))
        for response in _responses(op).values()
    )