"""Load, resolve and check OpenAPI 3 documents, with Go naming, typing and response helpers."""

__version__ = "0.1.0"

__all__ = [
    "components",
    "debug",
    "document",
    "goresponses",
    "gonames",
    "gotypes",
    "validation",
]