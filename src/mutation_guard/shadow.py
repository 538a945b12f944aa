"""Stand-in objects that back each guarded view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .reflect import PropertyDescriptor

__all__ = ["Shadow", "allocate_shadow"]


@dataclass
class Shadow:
    """Empty placeholder standing in for a guarded target.

    ``constructor`` is the target's type and is what the view reports as its
    ``__class__``. ``placeholder`` is a fresh empty object built by that
    constructor; its callability decides whether the view can be called.
    ``descriptors`` holds read-only descriptors materialised for the view.
    """

    constructor: type
    placeholder: object
    descriptors: dict[object, PropertyDescriptor] = field(default_factory=dict)


def _empty_like(target: object) -> object:
    if isinstance(target, type):
        return type(target.__name__, (), {})
    constructor = type(target)
    try:
        return constructor.__new__(constructor)
    except TypeError:
        # Functions, methods, generators and the like have no empty form.
        if callable(target):
            return lambda *_args, **_kwargs: None
        return object()


def allocate_shadow(target: object) -> Shadow:
    """Return a new, empty, same-constructor stand-in for ``target``."""
    return Shadow(type(target), _empty_like(target))
