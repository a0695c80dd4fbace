"""Name mangling helpers for generated Go source."""

from __future__ import annotations

from collections.abc import Iterable


def _single(mapped: str, original: str) -> str:
    """Keep a case mapping only when it yields exactly one character."""
    return mapped if len(mapped) == 1 else original


def camel_snake(name: str) -> str:
    """Turn a camel-cased name into snake case.

    ``schema_UserIDProfile`` becomes ``schema_user_id_profile`` and ``ID``
    becomes ``id``.
    """
    out: list[str] = []
    upper = False
    for i, char in enumerate(name):
        if not char.isalpha() or not char.isupper():
            upper = False
            out.append(char)
            continue

        if upper:
            add_underscore = i + 1 < len(name) and name[i + 1].islower()
        else:
            add_underscore = i - 1 > 0 and name[i - 1].isalpha()

        if add_underscore:
            out.append("_")
        upper = True
        out.append(_single(char.lower(), char))
    return "".join(out)


def snake_to_camel(name: str) -> str:
    """Drop underscores and upper-case the character following each one."""
    out: list[str] = []
    saw_underscore = False
    for char in name:
        if char == "_":
            saw_underscore = True
            continue
        if saw_underscore:
            saw_underscore = False
            out.append(_single(char.upper(), char))
        else:
            out.append(char)
    return "".join(out)


def filter_non_ident_chars(name: str) -> str:
    """Keep only letters and underscores."""
    return "".join(c for c in name if c.isalpha() or c == "_")


def _is_separator(char: str) -> bool:
    if ord(char) <= 0x7F:
        return not (char.isalnum() or char == "_")
    if char.isalpha() or char.isdecimal():
        return False
    return char.isspace()


def go_title(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest untouched."""
    out: list[str] = []
    prev = " "
    for char in text:
        out.append(_single(char.title(), char) if _is_separator(prev) else char)
        prev = char
    return "".join(out)


def render_imports(imports: Iterable[str]) -> str:
    """Render a Go import block, standard packages first, then third-party ones."""
    std: list[str] = []
    third: list[str] = []
    for imp in imports:
        (third if "." in imp.split("/")[0] else std).append(imp)

    if not std and not third:
        return ""

    parts = ["import ("]
    parts.extend(f'\n\t"{imp}"' for imp in sorted(std))
    if std and third:
        parts.append("\n")
    parts.extend(f'\n\t"{imp}"' for imp in sorted(third))
    parts.append("\n)")
    return "".join(parts)


def param_schema_name(operation_id: str, method_name: str, param_name: str) -> str:
    """Name of the type generated for an operation's parameter."""
    return (
        snake_to_camel(go_title(operation_id))
        + go_title(method_name.lower())
        + go_title(snake_to_camel(param_name))
        + "Param"
    )