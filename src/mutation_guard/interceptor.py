"""Traps that reject every mutation attempted through a guarded view."""
# ruff: noqa: ANN401

from __future__ import annotations

import array
import types
from collections.abc import MutableMapping, MutableSequence, MutableSet
from typing import TYPE_CHECKING, Any, Final, NoReturn

from . import reflect
from .errors import MutationAssertionError
from .paths import PROTOTYPE_KEY, call_path, key_path, prop_path

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .reflect import PropertyDescriptor
    from .view import GuardContext

_SEQUENCE_MUTATORS = frozenset(
    {
        "__delitem__",
        "__iadd__",
        "__imul__",
        "__init__",
        "__setitem__",
        "append",
        "appendleft",
        "byteswap",
        "clear",
        "extend",
        "extendleft",
        "frombytes",
        "fromfile",
        "fromlist",
        "fromunicode",
        "insert",
        "pop",
        "popleft",
        "remove",
        "reverse",
        "rotate",
        "sort",
    }
)
_MAPPING_MUTATORS = frozenset(
    {
        "__delitem__",
        "__init__",
        "__ior__",
        "__setitem__",
        "clear",
        "move_to_end",
        "pop",
        "popitem",
        "setdefault",
        "update",
    }
)
_SET_MUTATORS = frozenset(
    {
        "__iand__",
        "__init__",
        "__ior__",
        "__isub__",
        "__ixor__",
        "add",
        "clear",
        "difference_update",
        "discard",
        "intersection_update",
        "pop",
        "remove",
        "symmetric_difference_update",
        "update",
    }
)
_MUTATORS: Final = (
    ((MutableSequence, array.array), _SEQUENCE_MUTATORS),
    (MutableMapping, _MAPPING_MUTATORS),
    (MutableSet, _SET_MUTATORS),
)
# Builtins that write to whatever object they are bound to.
_ATTRIBUTE_WRITERS: Final = frozenset(
    {"__delattr__", "__delitem__", "__setattr__", "__setitem__"}
)

__all__ = ["WRITE_TRAPS", "is_mutating_method"]


def is_mutating_method(value: object) -> bool:
    """Return ``True`` for builtin methods that modify the object they are bound to.

    Python-level methods are not listed: they run against the view and any
    write they make is caught there.
    """
    if not isinstance(value, (types.BuiltinMethodType, types.MethodWrapperType)):
        return False
    if value.__name__ in _ATTRIBUTE_WRITERS:
        return True
    owner = value.__self__
    return any(
        isinstance(owner, kind) and value.__name__ in names
        for kind, names in _MUTATORS
    )


def _reject(trap: str, path: str) -> NoReturn:
    raise MutationAssertionError(trap, path)


def _intercept_set(
    context: GuardContext, key: Any, _value: Any, item: bool
) -> None:
    _reject("set", key_path(context.options.path, key, item=item))


def _intercept_define_property(
    context: GuardContext, key: Any, _descriptor: PropertyDescriptor
) -> None:
    item = reflect.uses_items(context.target)
    _reject("defineProperty", key_path(context.options.path, key, item=item))


def _intercept_delete_property(
    context: GuardContext, key: Any, item: bool
) -> None:
    _reject("deleteProperty", key_path(context.options.path, key, item=item))


def _intercept_prevent_extensions(context: GuardContext) -> None:
    _reject("preventExtensions", context.options.path)


def _intercept_set_prototype_of(context: GuardContext, _prototype: object) -> None:
    _reject("setPrototypeOf", prop_path(context.options.path, PROTOTYPE_KEY))


def _intercept_apply(
    context: GuardContext, _args: tuple[object, ...], _kwargs: dict[str, object]
) -> None:
    _reject("apply", call_path(context.options.path))


WRITE_TRAPS: Final[Mapping[str, Callable[..., None]]] = types.MappingProxyType(
    {
        "set": _intercept_set,
        "defineProperty": _intercept_define_property,
        "deleteProperty": _intercept_delete_property,
        "preventExtensions": _intercept_prevent_extensions,
        "setPrototypeOf": _intercept_set_prototype_of,
        "apply": _intercept_apply,
    }
)
