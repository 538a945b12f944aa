"""Wrap values in views that fail loudly on any attempt to mutate them.

:func:`guard` returns a view that reads exactly like the wrapped value but
raises :class:`~mutation_guard.errors.MutationAssertionError` as soon as a
write reaches it. Each view carries a trap table mapping an operation kind
(``get``, ``set``, ``apply``, ...) to the function that handles it: reads are
forwarded to the real value, writes are rejected, everything else passes
through untouched. Nested values are wrapped lazily as they are read.
"""
# ruff: noqa: ANN401

from __future__ import annotations

import dataclasses
import types
from typing import TYPE_CHECKING, Any, Final, TypeVar, cast

from . import reflect
from .interceptor import WRITE_TRAPS, is_mutating_method
from .options import GuardOptions, coerce_options
from .paths import PROTOTYPE_KEY, call_path, key_path, prop_path
from .shadow import allocate_shadow
from .view import GuardContext, GuardedCallable, GuardedView

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .reflect import PropertyDescriptor

_T = TypeVar("_T")

_PRIMITIVE_TYPES: Final = (
    type(None),
    type(Ellipsis),
    type(NotImplemented),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
)
# Builtin methods whose results are elements of the object they are bound to.
_ELEMENT_READERS: Final = frozenset(
    {"__getitem__", "__iter__", "__next__", "__reversed__", "get", "items", "values"}
)
_ALWAYS_GUARDED: Final = frozenset({"__dict__"})
_SHALLOW_SETTER_EXEMPT: Final = (
    "set",
    "defineProperty",
    "deleteProperty",
    "preventExtensions",
)

__all__ = ["guard"]


def guard(target: _T, options: GuardOptions | Mapping[str, Any] | None = None) -> _T:
    """Return a view of ``target`` that rejects every mutation.

    Parameters
    ----------
    target : Any
        The value to protect. Primitives (numbers, strings, bytes, ``None``)
        are returned unchanged.
    options : GuardOptions | Mapping[str, Any] | None, optional
        ``deep`` also guards values reached through reads, ``prototype``
        intercepts class reads and reassignment, ``name`` and ``path`` seed
        the access path shown in error messages.

    Returns:
    -------
    Any
        A view that behaves like ``target`` for reads and raises
        ``MutationAssertionError`` on writes.
    """
    return _guard(target, coerce_options(options))


def _guard(target: _T, options: GuardOptions) -> _T:
    if isinstance(target, _PRIMITIVE_TYPES):
        return target
    options = options.resolve(target)
    shadow = allocate_shadow(target)
    view_type = GuardedCallable if callable(shadow.placeholder) else GuardedView
    context = GuardContext(target, options, shadow)
    view = view_type(context, _build_traps(target, options))
    return cast("_T", view)


def _child(options: GuardOptions, path: str, **flags: bool) -> GuardOptions:
    return options.derive(path=path, name=False, **flags)


def _reads_elements(value: object, owner: object) -> bool:
    return (
        isinstance(value, (types.BuiltinMethodType, types.MethodWrapperType))
        and value.__self__ is owner
        and value.__name__ in _ELEMENT_READERS
    )


def _mediate_descriptor(context: GuardContext, key: Any) -> PropertyDescriptor | None:
    target, options, shadow = context
    # Read-only descriptors are fixed once reported.
    cached = shadow.descriptors.get(key)
    if cached is not None:
        return cached

    descriptor = reflect.get_own_property_descriptor(target, key)
    if descriptor is None:
        return None

    base = key_path(options.path, key, item=reflect.uses_items(target))
    if options.deep:
        if descriptor.is_accessor:
            descriptor = dataclasses.replace(
                descriptor,
                getter=_guard(
                    descriptor.getter,
                    _child(options, f"{base}.descriptor.get", is_getter=True),
                ),
            )
        else:
            descriptor = dataclasses.replace(
                descriptor,
                value=_guard(
                    descriptor.value, _child(options, f"{base}.descriptor.value")
                ),
            )
    if descriptor.is_accessor:
        descriptor = dataclasses.replace(
            descriptor,
            setter=_guard(
                descriptor.setter,
                _child(options, f"{base}.descriptor.set", is_setter=True),
            ),
        )

    if descriptor.read_only:
        shadow.descriptors[key] = descriptor
    return descriptor


def _forward_get(context: GuardContext, key: Any, item: bool, receiver: object) -> Any:
    target, options, _ = context
    real = reflect.get_property(target, key, item=item, receiver=receiver)
    child = _child(options, key_path(options.path, key, item=item))
    if is_mutating_method(real) or (not item and key in _ALWAYS_GUARDED):
        return _guard(real, child)
    if options.deep and not item and _reads_elements(real, target):
        return _guard(real, dataclasses.replace(child, is_getter=True))
    if options.deep or options.is_getter:
        return _guard(real, child)
    return real


def _forward_get_prototype_of(context: GuardContext) -> Any:
    target, options, _ = context
    real = reflect.get_prototype_of(target)
    if options.deep or options.is_getter:
        return _guard(real, _child(options, prop_path(options.path, PROTOTYPE_KEY)))
    return real


def _forward_getter_call(
    context: GuardContext, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> Any:
    target, options, _ = context
    return _guard(target(*args, **kwargs), _child(options, call_path(options.path)))


def _pass_set(context: GuardContext, key: Any, value: Any, item: bool) -> None:
    reflect.set_property(context.target, key, value, item=item)


def _pass_has(context: GuardContext, key: Any, item: bool) -> bool:
    return reflect.has_property(context.target, key, item=item)


def _pass_delete_property(context: GuardContext, key: Any, item: bool) -> None:
    reflect.delete_property(context.target, key, item=item)


def _pass_define_property(
    context: GuardContext, key: Any, descriptor: PropertyDescriptor
) -> None:
    reflect.define_property(context.target, key, descriptor)


def _pass_own_keys(context: GuardContext) -> list[Any]:
    return reflect.own_keys(context.target)


def _pass_is_extensible(context: GuardContext) -> bool:
    return reflect.is_extensible(context.target)


def _pass_prevent_extensions(context: GuardContext) -> None:
    reflect.prevent_extensions(context.target)


def _pass_get_prototype_of(context: GuardContext) -> Any:
    return reflect.get_prototype_of(context.target)


def _pass_set_prototype_of(context: GuardContext, prototype: Any) -> None:
    reflect.set_prototype_of(context.target, prototype)


def _pass_call(
    context: GuardContext, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> Any:
    return context.target(*args, **kwargs)


_PASSTHROUGH_TRAPS: Final[Mapping[str, Callable[..., Any]]] = types.MappingProxyType(
    {
        "set": _pass_set,
        "has": _pass_has,
        "deleteProperty": _pass_delete_property,
        "defineProperty": _pass_define_property,
        "ownKeys": _pass_own_keys,
        "isExtensible": _pass_is_extensible,
        "preventExtensions": _pass_prevent_extensions,
        "getPrototypeOf": _pass_get_prototype_of,
        "setPrototypeOf": _pass_set_prototype_of,
        "apply": _pass_call,
        "construct": _pass_call,
    }
)


def _build_traps(
    target: object, options: GuardOptions
) -> dict[str, Callable[..., Any]]:
    """Assemble the trap table for one view.

    Reads and descriptor queries are always mediated. Writes are rejected
    unless the view guards a setter in shallow mode, whose own writes are
    not audited. Calling a guarded setter (in deep mode) or a builtin method
    that mutates its receiver is itself a write.
    """
    traps = dict(_PASSTHROUGH_TRAPS)
    traps["getOwnPropertyDescriptor"] = _mediate_descriptor
    traps["get"] = _forward_get
    if options.prototype:
        traps["getPrototypeOf"] = _forward_get_prototype_of
    if options.is_getter:
        traps["apply"] = _forward_getter_call

    shallow_setter = options.is_setter and not options.deep
    if not shallow_setter:
        for name in _SHALLOW_SETTER_EXEMPT:
            traps[name] = WRITE_TRAPS[name]
        if options.prototype:
            traps["setPrototypeOf"] = WRITE_TRAPS["setPrototypeOf"]
    if (options.is_setter and options.deep) or is_mutating_method(target):
        traps["apply"] = WRITE_TRAPS["apply"]
    return traps
