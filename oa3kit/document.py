"""Loading, reference resolution and post-processing of OpenAPI 3 documents.

A document is kept as plain nested dictionaries and lists, the way it was
parsed. A resolved ``$ref`` object keeps its ``$ref`` key and receives the
keys of the object it refers to.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any
from urllib.parse import SplitResult, unquote, urlsplit

import yaml

from .components import validate_component_names
from .debug import debug
from .validation import ExternalDocs, Info, SpecError, is_semver

_OPERATIONS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
_ALL_OF_OPERATIONS = ("get", "post", "put", "delete", "patch", "head", "options")

_SECTIONS = (
    "schemas",
    "responses",
    "parameters",
    "examples",
    "requestBodies",
    "headers",
    "securitySchemes",
    "links",
    "callbacks",
    "pathItems",
)

_ONE, _MAP, _LIST = "one", "map", "list"

# For each kind of object: (key, shape, kind of child, whether the child may be a $ref)
_CHILDREN: dict[str, tuple[tuple[str, str, str, bool], ...]] = {
    "document": (
        ("paths", _MAP, "pathItems", True),
        ("components", _ONE, "components", False),
    ),
    "components": tuple((section, _MAP, section, True) for section in _SECTIONS),
    "pathItems": (("parameters", _LIST, "parameters", True),)
    + tuple((method, _ONE, "operation", False) for method in _OPERATIONS),
    "operation": (
        ("parameters", _LIST, "parameters", True),
        ("requestBody", _ONE, "requestBodies", True),
        ("responses", _MAP, "responses", True),
        ("callbacks", _MAP, "callbacks", True),
    ),
    "parameters": (
        ("schema", _ONE, "schemas", True),
        ("content", _MAP, "mediaType", False),
        ("examples", _MAP, "examples", True),
    ),
    "requestBodies": (("content", _MAP, "mediaType", False),),
    "responses": (
        ("headers", _MAP, "headers", True),
        ("content", _MAP, "mediaType", False),
        ("links", _MAP, "links", True),
    ),
    "headers": (
        ("schema", _ONE, "schemas", True),
        ("content", _MAP, "mediaType", False),
    ),
    "mediaType": (
        ("schema", _ONE, "schemas", True),
        ("encoding", _MAP, "encoding", False),
    ),
    "encoding": (("headers", _MAP, "headers", False),),
    "schemas": (
        ("properties", _MAP, "schemas", True),
        ("items", _ONE, "schemas", True),
        ("additionalProperties", _ONE, "schemas", True),
        ("allOf", _LIST, "schemas", True),
        ("oneOf", _LIST, "schemas", True),
        ("anyOf", _LIST, "schemas", True),
        ("not", _ONE, "schemas", True),
    ),
}


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return ""
    return key if isinstance(key, str) else str(key)


def _normalize(value: Any) -> Any:
    """Turn every mapping key into a string, as the document format expects."""
    if isinstance(value, Mapping):
        return {_key(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return value


def _parse_yaml(text: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SpecError(f"could not parse yaml: {exc}") from exc
    return _as_document(data)


def _parse_json(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SpecError(f"could not parse json: {exc}") from exc
    return _as_document(data)


def _as_document(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise SpecError("document must be a mapping")
    return _normalize(data)


def _finish(doc: dict[str, Any], run: bool, filename: str) -> dict[str, Any]:
    if run:
        post_process(doc, filename)
    return doc


def load_yaml(filename: str, post_process: bool = True) -> dict[str, Any]:
    """Load a YAML document from a file, optionally post-processing it."""
    with open(filename, encoding="utf-8") as handle:
        text = handle.read()
    return _finish(_parse_yaml(text), post_process, filename)


def load_json(filename: str, post_process: bool = True) -> dict[str, Any]:
    """Load a JSON document from a file, optionally post-processing it."""
    with open(filename, encoding="utf-8") as handle:
        text = handle.read()
    return _finish(_parse_json(text), post_process, filename)


def load_yaml_text(text: str, post_process: bool = True) -> dict[str, Any]:
    """Load a YAML document from text, optionally post-processing it."""
    return _finish(_parse_yaml(text), post_process, "")


def load_json_text(text: str, post_process: bool = True) -> dict[str, Any]:
    """Load a JSON document from text, optionally post-processing it."""
    return _finish(_parse_json(text), post_process, "")


def post_process(doc: dict[str, Any], filename: str = "") -> None:
    """Resolve references, validate, copy inherited items and merge allOfs."""
    try:
        resolve_refs(doc, filename)
    except SpecError as exc:
        raise SpecError(f"error resolving references: {exc}") from exc
    try:
        validate_document(doc)
    except SpecError as exc:
        raise SpecError(f"validation failed: {exc}") from exc
    copy_inherited_items(doc)
    try:
        resolve_all_ofs(doc)
    except SpecError as exc:
        raise SpecError(f"error resolving allOfs: {exc}") from exc


def validate_ref_uri(ref: str) -> SplitResult:
    """Check that ``ref`` is a local fragment or a local file reference.

    Returns the split URI.
    """
    try:
        parts = urlsplit(ref)
        host = parts.hostname or ""
    except ValueError as exc:
        raise SpecError(f"invalid ref({ref}): {exc}") from exc

    local_host = host in ("", "localhost")
    if not parts.scheme and not parts.fragment and local_host and parts.path:
        return parts
    if parts.fragment and not parts.scheme and local_host and not parts.path:
        return parts
    raise SpecError(
        f"invalid ref({ref}): only #/fragment or (file://localhost)?/path/to/file.(yaml|yml|json)"
        " refs supported"
    )


class _Resolver:
    """Depth-first resolution of ``$ref`` objects with cycle detection."""

    def __init__(self, doc: dict[str, Any]) -> None:
        self.doc = doc
        self.processing: set[str] = set()

    def walk(self, node: Any, kind: str, is_ref: bool, depth: int, filename: str) -> None:
        if not isinstance(node, dict):
            return
        indent = "  " * depth
        debug(f"{indent}visit:     {kind}")

        self._walk_children(node, kind, depth, filename)

        if not is_ref or "$ref" not in node:
            return
        ref = node["$ref"]
        if not isinstance(ref, str):
            raise SpecError(f"$ref must be a string, got: {ref!r}")
        if not ref:
            return
        if any(k != "$ref" for k in node):
            debug(f"{indent}done: {kind} ({ref})")
            return

        if ref in self.processing:
            raise SpecError(f"cycle detected: {ref} depth {depth}")
        self.processing.add(ref)

        debug(f"{indent}resolve: {kind} ({ref})")
        target, new_filename, target_is_ref = self._lookup(kind, ref, filename)
        self.walk(target, kind, target_is_ref, depth + 1, new_filename)
        node.update((k, v) for k, v in target.items() if k != "$ref")

        self.processing.discard(ref)

    def _walk_children(self, node: dict, kind: str, depth: int, filename: str) -> None:
        if kind == "callbacks":
            for key, value in list(node.items()):
                if key != "$ref":
                    self.walk(value, "pathItems", False, depth + 1, filename)
            return

        for key, shape, child_kind, child_ref in _CHILDREN.get(kind, ()):
            value = node.get(key)
            if shape == _ONE:
                children = [value]
            elif shape == _MAP:
                children = list(value.values()) if isinstance(value, Mapping) else []
            else:
                children = list(value) if isinstance(value, list) else []
            for child in children:
                self.walk(child, child_kind, child_ref, depth + 1, filename)

    def _lookup(self, kind: str, ref: str, filename: str) -> tuple[dict, str, bool]:
        parts = validate_ref_uri(ref)
        if not parts.fragment:
            content, path = _load_file_ref(parts, ref, filename)
            return content, path, False

        pieces = unquote(parts.fragment).split("/")
        if len(pieces) != 4 or pieces[0] or pieces[1] != "components":
            raise SpecError(f"invalid ref({ref}): fragment should be #/components/TYPE/NAME")
        ref_type, name = pieces[2], pieces[3]
        if ref_type not in _SECTIONS:
            raise SpecError(
                f"invalid ref({ref}): fragment did not contain a valid type ({ref_type})"
            )

        components = self.doc.get("components")
        section = components.get(ref_type) if isinstance(components, Mapping) else None
        if not isinstance(section, Mapping) or name not in section:
            raise SpecError(f"invalid ref({ref}): could not find object {ref_type}.{name}")
        if ref_type != kind:
            raise SpecError(f"invalid ref({ref}): {kind} references {ref_type} ({ref_type})")
        target = section[name]
        if target is None:
            raise SpecError(f"invalid ref({ref}): struct referred to is nil")
        if not isinstance(target, dict):
            raise SpecError(f"invalid ref({ref}): object referred to is not a mapping")
        return target, "", True


def _load_file_ref(parts: SplitResult, ref: str, filename: str) -> tuple[dict, str]:
    path = unquote(parts.path)
    if not os.path.isabs(path):
        base = os.path.dirname(filename) if filename else os.getcwd()
        path = os.path.join(base, path)

    if path.endswith(".json"):
        loader, label = json.loads, "json"
    elif path.endswith((".yaml", ".yml")):
        loader, label = yaml.safe_load, "yaml"
    else:
        raise SpecError(
            f"invalid ref({ref}): only yaml/json file refs are supported"
            " (must have proper file extension)"
        )

    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise SpecError(
            f"error resolving ref({ref}): failed to resolve {label} file ref,"
            f" could not read file: {exc}"
        ) from exc

    try:
        data = loader(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise SpecError(
            f"error resolving ref({ref}): failed to resolve {label} file ref,"
            f" could not unmarshal {label}: {exc}"
        ) from exc
    if not isinstance(data, Mapping):
        raise SpecError(
            f"error resolving ref({ref}): failed to resolve {label} file ref,"
            f" could not unmarshal {label}: not a mapping"
        )
    return _normalize(data), path


def resolve_refs(doc: dict[str, Any], filename: str = "") -> None:
    """Fill every ``$ref`` object in ``doc`` with the object it refers to."""
    _Resolver(doc).walk(doc, "document", False, 0, filename)


def _mapping_values(value: Any) -> list:
    return list(value.values()) if isinstance(value, Mapping) else []


def copy_inherited_items(doc: dict[str, Any]) -> None:
    """Push path-level parameters down into each operation.

    A parameter with the same name and location on the operation overrides
    the path-level one.
    """
    for path in _mapping_values(doc.get("paths")):
        if not isinstance(path, dict):
            continue
        path_params = [p for p in path.get("parameters") or [] if isinstance(p, Mapping)]
        for method in _OPERATIONS:
            op = path.get(method)
            if not isinstance(op, dict):
                continue
            op_params = list(op.get("parameters") or [])
            present = {
                (p.get("name"), p.get("in")) for p in op_params if isinstance(p, Mapping)
            }
            inherited = [
                p for p in path_params if (p.get("name"), p.get("in")) not in present
            ]
            if inherited:
                op["parameters"] = inherited + op_params


def _merge_all_of(schema: Any) -> None:
    if not isinstance(schema, dict):
        return
    parts = schema.get("allOf")
    if parts is None:
        return
    if not isinstance(parts, list):
        raise SpecError("allOf must be a list")

    required: list = []
    properties: dict = {}
    for part in parts:
        if not isinstance(part, Mapping):
            raise SpecError("allOf entries must be schemas")
        required.extend(part.get("required") or [])
        properties.update(part.get("properties") or {})
        if part.get("additionalProperties") is not None:
            schema["additionalProperties"] = part["additionalProperties"]
        if part.get("discriminator") is not None:
            schema["discriminator"] = part["discriminator"]
    schema["required"] = required
    schema["properties"] = properties


def _merge_media_types(content: Any) -> None:
    if not isinstance(content, Mapping):
        return
    for media, media_type in content.items():
        if not isinstance(media_type, Mapping):
            continue
        try:
            _merge_all_of(media_type.get("schema"))
        except SpecError as exc:
            raise SpecError(f"content({media}).{exc}") from exc


def _merge_parameter(param: Any) -> None:
    if not isinstance(param, Mapping):
        return
    _merge_all_of(param.get("schema"))
    _merge_media_types(param.get("content"))


def resolve_all_ofs(doc: dict[str, Any]) -> None:
    """Combine every ``allOf`` schema's parts into the schema itself."""
    components = doc.get("components")
    if isinstance(components, Mapping):
        for label, merge in (
            ("schemas", _merge_all_of),
            ("requestBodies", lambda v: _merge_media_types(v.get("content"))),
            ("responses", lambda v: _merge_media_types(v.get("content"))),
            ("parameters", _merge_parameter),
        ):
            entries = components.get(label)
            if not isinstance(entries, Mapping):
                continue
            for name, entry in entries.items():
                if not isinstance(entry, Mapping):
                    continue
                try:
                    merge(entry)
                except SpecError as exc:
                    raise SpecError(f"components.{label}({name}).{exc}") from exc

    paths = doc.get("paths")
    if not isinstance(paths, Mapping):
        return
    for key, path in paths.items():
        if not isinstance(path, Mapping):
            continue
        for verb in _ALL_OF_OPERATIONS:
            op = path.get(verb)
            if not isinstance(op, Mapping):
                continue
            for index, param in enumerate(op.get("parameters") or []):
                try:
                    _merge_parameter(param)
                except SpecError as exc:
                    raise SpecError(f"paths({key}).{verb}.parameters[{index}].{exc}") from exc
            body = op.get("requestBody")
            if isinstance(body, Mapping):
                try:
                    _merge_media_types(body.get("content"))
                except SpecError as exc:
                    raise SpecError(f"paths({key}).{verb}.requestBody.{exc}") from exc
            responses = op.get("responses")
            if isinstance(responses, Mapping):
                for code, response in responses.items():
                    if not isinstance(response, Mapping):
                        continue
                    try:
                        _merge_media_types(response.get("content"))
                    except SpecError as exc:
                        raise SpecError(
                            f"paths({key}).{verb}.responses({code}).{exc}"
                        ) from exc


def validate_document(doc: dict[str, Any]) -> None:
    """Validate the document, filling in defaults the format specifies.

    Should be called after references are resolved.
    """
    version = doc.get("openapi")
    version_text = "" if version is None else str(version)
    if not is_semver(version_text):
        raise SpecError("openapi must be a semantic version number")
    if not version_text.startswith(("3.", "v3.")):
        raise SpecError("openapi version must be 3.x.x for use with this package")

    Info.from_dict(doc.get("info") or {}).validate()

    if not doc.get("servers"):
        doc["servers"] = [{"url": "/"}]

    paths = doc.get("paths")
    if not paths:
        raise SpecError("must have at least one item in top-level 'paths'")
    if not isinstance(paths, Mapping):
        raise SpecError("paths must be a mapping")
    for key in paths:
        if not key.startswith("/"):
            raise SpecError(f"paths({key}): must begin with /")

    try:
        validate_component_names(doc.get("components"))
    except SpecError as exc:
        raise SpecError(f"components.{exc}") from exc

    external = doc.get("externalDocs")
    if external is not None:
        try:
            ExternalDocs.from_dict(external).validate()
        except SpecError as exc:
            raise SpecError(f"externalDocs.{exc}") from exc