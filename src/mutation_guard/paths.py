"""Helpers for rendering the access paths reported in mutation errors."""

from __future__ import annotations

import re
from typing import Final

ROOT_PATH: Final = "target"
PROTOTYPE_KEY: Final = "__class__"
CALL_MARKER: Final = "()"

_SINGLE_DIGIT = re.compile(r"\d")

__all__ = [
    "CALL_MARKER",
    "PROTOTYPE_KEY",
    "ROOT_PATH",
    "call_path",
    "item_path",
    "key_path",
    "prop_path",
]


def prop_path(path: str, key: object) -> str:
    """Extend ``path`` with ``key`` using attribute notation where possible.

    Identifiers render as ``path.key``, a single digit as ``path[7]`` and
    everything else as ``path["key"]``.
    """
    text = str(key)
    if text.isidentifier():
        return f"{path}.{text}"
    if _SINGLE_DIGIT.fullmatch(text):
        return f"{path}[{text}]"
    return f'{path}["{text}"]'


def _describe_slice(key: slice) -> str:
    parts = ["" if part is None else repr(part) for part in (key.start, key.stop)]
    if key.step is not None:
        parts.append(repr(key.step))
    return ":".join(parts)


def item_path(path: str, key: object) -> str:
    """Extend ``path`` with a subscript for the item ``key``."""
    if isinstance(key, str):
        return f'{path}["{key}"]'
    if isinstance(key, slice):
        return f"{path}[{_describe_slice(key)}]"
    return f"{path}[{key!r}]"


def key_path(path: str, key: object, *, item: bool) -> str:
    """Extend ``path`` with ``key`` as an item subscript or an attribute."""
    return item_path(path, key) if item else prop_path(path, key)


def call_path(path: str) -> str:
    """Mark ``path`` as the site of a call."""
    return f"{path}{CALL_MARKER}"
