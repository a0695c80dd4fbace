"""Switchable diagnostic output written to standard error."""

from __future__ import annotations

import sys


class _Switch:
    """Holds whether diagnostic output is enabled."""

    def __init__(self) -> None:
        self.enabled = False


_switch = _Switch()


def set_debug(enabled: bool) -> None:
    """Turn diagnostic output on or off."""
    _switch.enabled = bool(enabled)


def is_debug() -> bool:
    """Report whether diagnostic output is enabled."""
    return _switch.enabled


def debug(message: str) -> None:
    """Write a line to standard error when diagnostic output is enabled."""
    if _switch.enabled:
        print(message, file=sys.stderr)