"""Go type selection and validation decisions for document schemas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .validation import SpecError

PARAM_TIME_TYPE = "timetype"
PARAM_UUID_TYPE = "uuidtype"
PARAM_DECIMAL_TYPE = "decimaltype"

_SUPPORT = "github.com/aarondl/oa3/support"
_CHRONO = "github.com/aarondl/chrono"

_VALIDATION_KEYS = (
    "multipleOf",
    "maximum",
    "minimum",
    "maxLength",
    "minLength",
    "pattern",
    "maxItems",
    "minItems",
    "uniqueItems",
    "maxProperties",
    "minProperties",
)


@dataclass
class TypeContext:
    """Generation parameters plus the imports collected while choosing types."""

    params: dict[str, str] = field(default_factory=dict)
    imports: set[str] = field(default_factory=set)

    def add_import(self, path: str) -> None:
        self.imports.add(path)

    def param_equals(self, key: str, value: str) -> bool:
        return self.params.get(key) == value


def _type(schema: Mapping[str, Any] | None) -> str:
    if not isinstance(schema, Mapping):
        return ""
    return schema.get("type") or ""


def is_inline_primitive(schema: Mapping[str, Any]) -> bool:
    """Report whether a schema can be used inline rather than as a named type."""
    if _type(schema) == "object":
        return schema.get("additionalProperties") is not None
    return True


def _time_type(ctx: TypeContext, chrono_name: str) -> str:
    if ctx.param_equals(PARAM_TIME_TYPE, "chrono"):
        ctx.add_import(_CHRONO)
        return f"chrono.{chrono_name}"
    ctx.add_import("time")
    return "time.Time"


def primitive(ctx: TypeContext, schema: Mapping[str, Any]) -> str:
    """Return the Go type for a primitive schema, recording needed imports."""
    kind = _type(schema)
    fmt = schema.get("format") if isinstance(schema, Mapping) else None

    if kind == "integer":
        return fmt if fmt in ("int32", "int64") else "int"
    if kind == "number":
        return "float32" if fmt == "float" else "float64"
    if kind == "string":
        if fmt == "date":
            return _time_type(ctx, "Date")
        if fmt == "time":
            return _time_type(ctx, "Time")
        if fmt == "date-time":
            return _time_type(ctx, "DateTime")
        if fmt == "duration":
            ctx.add_import("time")
            return "time.Duration"
        if fmt == "uuid" and ctx.param_equals(PARAM_UUID_TYPE, "google"):
            ctx.add_import("github.com/google/uuid")
            return "uuid.UUID"
        if fmt == "decimal" and ctx.param_equals(PARAM_DECIMAL_TYPE, "shopspring"):
            ctx.add_import("github.com/shopspring/decimal")
            return "decimal.Decimal"
        return "string"
    if kind == "boolean":
        return "bool"

    raise SpecError(
        "schema expected primitive type (integer, number, string, boolean) "
        f"but got: {kind}"
    )


def primitive_bits(ctx: TypeContext, schema: Mapping[str, Any]) -> str:
    """Return the bit size of a primitive's Go type, ``64`` when it has none.

    Returns an empty string when the schema is not a primitive.
    """
    try:
        name = primitive(ctx, schema)
    except SpecError:
        return ""
    bits = "".join(c for c in name if not c.isalpha())
    return bits or "64"


def omitnull_wrap(ctx: TypeContext, typ: str, nullable: bool, required: bool) -> str:
    """Wrap a Go type in the optional/nullable container it needs."""
    if not nullable and required:
        return typ
    if nullable and required:
        kind = "null"
    elif nullable:
        kind = "omitnull"
    else:
        kind = "omit"
    ctx.add_import(f"github.com/aarondl/opt/{kind}")
    return f"{kind}.Val[{typ}]"


def primitive_wrapped(
    ctx: TypeContext, schema: Mapping[str, Any], nullable: bool, required: bool
) -> str:
    """Return the primitive's Go type wrapped as nullability requires."""
    return omitnull_wrap(ctx, primitive(ctx, schema), nullable, required)


def omitnull_unwrap(name: str, nullable: bool, required: bool) -> str:
    """Return an expression reading the plain value of a possibly wrapped field."""
    if not nullable and required:
        return name
    return f"{name}.GetOrZero()"


def omitnull_is_wrapped(nullable: bool, required: bool) -> bool:
    """Report whether a field's type is wrapped in an optional container."""
    return nullable or not required


def must_validate(ctx: TypeContext, schema: Mapping[str, Any]) -> bool:
    """Report whether a schema itself needs generated validation.

    Date, time and duration formats are checked when they are converted, so
    they need none here.
    """
    if any(schema.get(key) is not None for key in _VALIDATION_KEYS):
        return True
    if schema.get("enum"):
        return True
    fmt = schema.get("format")
    if fmt == "uuid" and not ctx.param_equals(PARAM_UUID_TYPE, "google"):
        return True
    if fmt == "decimal" and not ctx.param_equals(PARAM_DECIMAL_TYPE, "shopspring"):
        return True
    return False


def _must_validate_recurse(ctx: TypeContext, schema: Any, visited: set[str]) -> bool:
    if not isinstance(schema, Mapping):
        return False
    if must_validate(ctx, schema):
        return True

    kind = _type(schema)
    if kind == "array":
        items = schema.get("items")
        if not isinstance(items, Mapping):
            return False
        ref = items.get("$ref")
        if ref:
            if ref in visited:
                return False
            visited.add(ref)
        return _must_validate_recurse(ctx, items, visited)

    if kind == "object":
        additional = schema.get("additionalProperties")
        if isinstance(additional, Mapping):
            ref = additional.get("$ref")
            if ref:
                if ref not in visited:
                    visited.add(ref)
                    if _must_validate_recurse(ctx, additional, visited):
                        return True
            elif _must_validate_recurse(ctx, additional, visited):
                return True

        properties = schema.get("properties") or {}
        for prop in properties.values():
            if not isinstance(prop, Mapping):
                continue
            ref = prop.get("$ref")
            if ref:
                if ref in visited:
                    continue
                visited.add(ref)
            if _must_validate_recurse(ctx, prop, visited):
                return True
    return False


def must_validate_recurse(ctx: TypeContext, schema: Mapping[str, Any]) -> bool:
    """Report whether a schema or any schema nested in it needs validation."""
    return _must_validate_recurse(ctx, schema, set())


def param_requires_type(param: Mapping[str, Any]) -> bool:
    """Report whether a parameter needs a named type of its own."""
    schema = param.get("schema") or {}
    return bool(schema.get("enum")) or _type(schema) in ("object", "array")


def _style_and_explode(param: Mapping[str, Any]) -> tuple[str, bool]:
    style = param.get("style")
    if style is None:
        style = "form" if param.get("in") in ("query", "cookie") else "simple"
    explode = param.get("explode")
    if explode is None:
        explode = style == "form"
    return style, bool(explode)


def _string_conversion(
    ctx: TypeContext, fmt: str, items: Any, param_type_name: str, name: str
) -> str:
    chrono = ctx.param_equals(PARAM_TIME_TYPE, "chrono")
    if fmt == "date":
        return "support.StringToChronoDate" if chrono else "support.StringToDate"
    if fmt == "date-time":
        return "support.StringToChronoDateTime" if chrono else "support.StringToDateTime"
    if fmt == "time":
        return "support.StringToChronoTime" if chrono else "support.StringToTime"
    if fmt == "uuid":
        return "support.StringToUUID" if ctx.param_equals(PARAM_UUID_TYPE, "google") else ""
    if fmt == "decimal":
        if ctx.param_equals(PARAM_DECIMAL_TYPE, "shopspring"):
            return "support.StringToDecimal"
        return ""
    if fmt == "duration":
        return "support.StringToDuration"
    if fmt == "":
        if isinstance(items, Mapping) and items.get("enum"):
            return f"support.StringToString[string, {param_type_name}Item]"
        return "support.StringNoOp"
    raise SpecError(f"no conversion function available for {name}")


def param_convert_fn(
    ctx: TypeContext, param: Mapping[str, Any], param_type_name: str, rhs: str
) -> str:
    """Return a Go expression converting the raw string values ``rhs`` of a parameter."""
    name = param.get("name", "")
    schema = param.get("schema") or {}
    items = schema.get("items")
    outer_type = _type(schema)
    inner_type = outer_type
    if inner_type == "array":
        inner_type = _type(items)
        inner_format = (items or {}).get("format") or ""
    else:
        inner_format = schema.get("format") or ""

    inner = ""
    if inner_type == "string":
        ctx.add_import(_SUPPORT)
        inner = _string_conversion(ctx, inner_format, items, param_type_name, name)
    elif inner_type == "boolean":
        ctx.add_import(_SUPPORT)
        inner = "support.StringToBool"
    elif inner_type == "integer":
        ctx.add_import(_SUPPORT)
        if inner_format in ("int32", "int64"):
            inner = f"support.StringToInt[{inner_format}]"
        elif inner_format in ("", "int"):
            inner = "support.StringToInt[int]"
        else:
            raise SpecError(f"no conversion function available for {name}")
    elif inner_type == "number":
        ctx.add_import(_SUPPORT)
        if inner_format == "float":
            inner = "support.StringToFloat[float32]"
        elif inner_format in ("", "double"):
            inner = "support.StringToFloat[float64]"
        else:
            raise SpecError(f"no conversion function available for {name}")

    if inner_type == outer_type:
        return f"{inner}({rhs}[0])"

    if isinstance(items, Mapping) and items.get("enum"):
        prim = param_type_name + "Item"
    else:
        try:
            prim = primitive(ctx, items or {})
        except SpecError as exc:
            raise SpecError(f"failed to get primitive for param ({name}): {exc}") from exc

    style, explode = _style_and_explode(param)
    outer = ""
    if outer_type == "array" and style in ("form", "simple"):
        ctx.add_import(_SUPPORT)
        if style == "form" and explode:
            outer = f"support.ExplodedFormArrayToSlice[{prim}]"
        else:
            outer = f"support.FlatFormArrayToSlice[{prim}]"

    return f"{outer}({rhs}, {inner})"