"""Reflective operations over Python objects that honour guarded views.

Every function here accepts either a plain object or a guarded view. Views are
handed to the trap of the same name, so inspecting or modifying a view through
this module goes through exactly the same checks as ordinary Python syntax.

Python has two property namespaces, attributes and items. Functions taking an
``item`` flag use items when it is ``True``, attributes when it is ``False``,
and the object's own namespace (see :func:`uses_items`) when it is ``None``.
"""
# ruff: noqa: ANN401

from __future__ import annotations

import dataclasses
import inspect
from collections import defaultdict
import types
from collections.abc import (
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
)
from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Self

from .view import dispatch, is_guarded

if TYPE_CHECKING:
    from collections.abc import Callable

# Py_TPFLAGS_IMMUTABLETYPE: set on builtin and extension types.
_IMMUTABLE_TYPE_FLAG = 1 << 8
_MISSING = object()

__all__ = [
    "PropertyDescriptor",
    "define_property",
    "delete_property",
    "get_property",
    "get_own_property_descriptor",
    "get_prototype_of",
    "has_property",
    "is_extensible",
    "own_keys",
    "prevent_extensions",
    "set_property",
    "set_prototype_of",
    "uses_items",
]


@dataclass(frozen=True)
class PropertyDescriptor:
    """Description of one own property of an object.

    Data properties carry a ``value``; accessor properties (``property``
    objects found on a class) carry a ``getter`` and ``setter`` instead.
    """

    value: Any = None
    getter: Callable[..., Any] | None = None
    setter: Callable[..., Any] | None = None
    writable: bool = False
    enumerable: bool = True
    configurable: bool = False
    is_accessor: bool = False

    @classmethod
    def data(
        cls, value: Any, *, writable: bool = True, configurable: bool = True
    ) -> Self:
        """Describe a data property holding ``value``."""
        return cls(value=value, writable=writable, configurable=configurable)

    @classmethod
    def accessor(
        cls,
        getter: Callable[..., Any] | None,
        setter: Callable[..., Any] | None = None,
        *,
        configurable: bool = True,
    ) -> Self:
        """Describe an accessor property backed by ``getter`` and ``setter``."""
        return cls(
            getter=getter,
            setter=setter,
            configurable=configurable,
            is_accessor=True,
        )

    @property
    def read_only(self) -> bool:
        """``True`` for non-configurable properties and non-writable data."""
        return not self.configurable or (not self.is_accessor and not self.writable)


def uses_items(obj: object) -> bool:
    """Return ``True`` when the own properties of ``obj`` are its items."""
    return isinstance(obj, (Mapping, Sequence))


def _namespace(obj: object, item: bool | None) -> bool:
    return uses_items(obj) if item is None else item


def _class_attribute(cls: type, name: str) -> Any:
    for klass in cls.__mro__:
        namespace = vars(klass)
        if name in namespace:
            return namespace[name]
    return _MISSING


def _is_mutable_type(cls: type) -> bool:
    return not cls.__flags__ & _IMMUTABLE_TYPE_FLAG


def _is_frozen(obj: object) -> bool:
    return (
        dataclasses.is_dataclass(obj)
        and not isinstance(obj, type)
        and obj.__dataclass_params__.frozen  # type: ignore[attr-defined]
    )


def _slot_values(obj: object) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for klass in reversed(type(obj).__mro__):
        slots = vars(klass).get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            member = vars(klass).get(name)
            if isinstance(member, types.MemberDescriptorType):
                try:
                    values[name] = member.__get__(obj, type(obj))
                except AttributeError:
                    continue
    return values


def _missing_item(obj: dict[Any, Any], key: Any, receiver: object) -> Any:
    if isinstance(obj, defaultdict):
        if obj.default_factory is None:
            raise KeyError(key)
        value = obj.default_factory()
        set_property(receiver, key, value, item=True)
        return value
    hook = _class_attribute(type(obj), "__missing__")
    if inspect.isfunction(hook):
        return hook(receiver, key)
    raise KeyError(key)


def get_property(
    obj: object, key: Any, *, item: bool | None = None, receiver: object = None
) -> Any:
    """Read ``key`` from ``obj``.

    When ``receiver`` differs from ``obj``, ``property`` getters run with the
    receiver as ``self`` and Python methods bound to ``obj`` are re-bound to
    it, so code reached through the read sees the receiver.

    A missing ``dict`` key runs the ``__missing__`` hook against the
    receiver, so a ``defaultdict`` filling in its default writes through it.
    """
    item = _namespace(obj, item)
    if is_guarded(obj):
        return dispatch(obj, "get", key, item, obj if receiver is None else receiver)
    if item:
        if (
            receiver is not None
            and receiver is not obj
            and isinstance(obj, dict)
            and key not in obj
        ):
            return _missing_item(obj, key, receiver)
        return obj[key]  # type: ignore[index]
    if receiver is None or receiver is obj:
        return getattr(obj, key)
    attribute = _class_attribute(type(obj), key)
    if isinstance(attribute, property):
        return attribute.__get__(receiver, type(obj))
    value = getattr(obj, key)
    if (
        isinstance(value, types.MethodType)
        and value.__self__ is obj
        and inspect.isfunction(value.__func__)
    ):
        return types.MethodType(value.__func__, receiver)
    return value


def set_property(
    obj: object, key: Any, value: Any, *, item: bool | None = None
) -> None:
    """Assign ``value`` to ``key`` on ``obj``."""
    item = _namespace(obj, item)
    if is_guarded(obj):
        dispatch(obj, "set", key, value, item)
    elif item:
        obj[key] = value  # type: ignore[index]
    else:
        setattr(obj, key, value)


def has_property(obj: object, key: Any, *, item: bool | None = None) -> bool:
    """Return whether ``key`` exists on ``obj``."""
    item = _namespace(obj, item)
    if is_guarded(obj):
        return bool(dispatch(obj, "has", key, item))
    if item:
        return key in obj  # type: ignore[operator]
    return hasattr(obj, key)


def delete_property(obj: object, key: Any, *, item: bool | None = None) -> None:
    """Remove ``key`` from ``obj``."""
    item = _namespace(obj, item)
    if is_guarded(obj):
        dispatch(obj, "deleteProperty", key, item)
    elif item:
        del obj[key]  # type: ignore[attr-defined]
    else:
        delattr(obj, key)


def get_own_property_descriptor(obj: object, key: Any) -> PropertyDescriptor | None:
    """Describe the own property ``key`` of ``obj`` or return ``None``."""
    if is_guarded(obj):
        return dispatch(obj, "getOwnPropertyDescriptor", key)
    if isinstance(obj, type):
        namespace = vars(obj)
        if key not in namespace:
            return None
        mutable = _is_mutable_type(obj)
        attribute = namespace[key]
        if isinstance(attribute, property):
            return PropertyDescriptor.accessor(
                attribute.fget, attribute.fset, configurable=mutable
            )
        return PropertyDescriptor.data(
            attribute, writable=mutable, configurable=mutable
        )
    if isinstance(obj, Mapping):
        if key not in obj:
            return None
        mutable = isinstance(obj, MutableMapping)
        return PropertyDescriptor.data(
            obj[key], writable=mutable, configurable=mutable
        )
    if isinstance(obj, Sequence):
        if isinstance(key, bool) or not isinstance(key, int):
            return None
        if not 0 <= key < len(obj):
            return None
        mutable = isinstance(obj, MutableSequence)
        return PropertyDescriptor.data(
            obj[key], writable=mutable, configurable=mutable
        )
    if not isinstance(key, str):
        return None
    mutable = not _is_frozen(obj)
    namespace = getattr(obj, "__dict__", None)
    if isinstance(namespace, Mapping) and key in namespace:
        return PropertyDescriptor.data(
            namespace[key], writable=mutable, configurable=mutable
        )
    slots = _slot_values(obj)
    if key in slots:
        return PropertyDescriptor.data(
            slots[key], writable=mutable, configurable=mutable
        )
    return None


def own_keys(obj: object) -> list[Any]:
    """List the own property keys of ``obj`` in definition order."""
    if is_guarded(obj):
        return dispatch(obj, "ownKeys")
    if isinstance(obj, type):
        return list(vars(obj))
    if isinstance(obj, Mapping):
        return list(obj)
    if isinstance(obj, Sequence):
        return list(range(len(obj)))
    namespace = getattr(obj, "__dict__", None)
    keys = list(namespace) if isinstance(namespace, Mapping) else []
    keys.extend(name for name in _slot_values(obj) if name not in keys)
    return keys


def is_extensible(obj: object) -> bool:
    """Return whether new properties can be added to ``obj``."""
    if is_guarded(obj):
        return bool(dispatch(obj, "isExtensible"))
    if isinstance(obj, type):
        return _is_mutable_type(obj)
    if isinstance(obj, (MutableMapping, MutableSequence, MutableSet)):
        return True
    if isinstance(obj, (Mapping, Sequence, AbstractSet)) or _is_frozen(obj):
        return False
    return isinstance(getattr(obj, "__dict__", None), dict)


def prevent_extensions(obj: object) -> None:
    """Make ``obj`` non-extensible.

    Python objects cannot be sealed at runtime, so this only succeeds for
    objects that are already non-extensible.
    """
    if is_guarded(obj):
        dispatch(obj, "preventExtensions")
    elif is_extensible(obj):
        raise TypeError(
            f"{type(obj).__name__!r} objects cannot be made non-extensible"
        )


def define_property(obj: object, key: Any, descriptor: PropertyDescriptor) -> None:
    """Create or replace the own property ``key`` of ``obj`` from ``descriptor``."""
    if is_guarded(obj):
        dispatch(obj, "defineProperty", key, descriptor)
        return
    existing = get_own_property_descriptor(obj, key)
    if existing is not None and not existing.configurable:
        if existing == descriptor:
            return
        raise TypeError(f"Cannot redefine property: {key!r}")
    if existing is None and not is_extensible(obj):
        raise TypeError(f"Cannot define property {key!r}, object is not extensible")
    if descriptor.is_accessor:
        if not isinstance(obj, type):
            raise TypeError("Accessor properties can only be defined on classes")
        setattr(obj, key, property(descriptor.getter, descriptor.setter))
    elif isinstance(obj, type):
        setattr(obj, key, descriptor.value)
    elif isinstance(obj, MutableSequence) and key == len(obj):
        obj.append(descriptor.value)
    elif isinstance(obj, (MutableMapping, MutableSequence)):
        obj[key] = descriptor.value
    elif isinstance(getattr(obj, "__dict__", None), dict):
        vars(obj)[key] = descriptor.value
    else:
        object.__setattr__(obj, key, descriptor.value)


def get_prototype_of(obj: object) -> Any:
    """Return the object ``obj`` inherits from: its class, or a class's base."""
    if is_guarded(obj):
        return dispatch(obj, "getPrototypeOf")
    if isinstance(obj, type):
        mro = obj.__mro__
        return mro[1] if len(mro) > 1 else None
    return type(obj)


def set_prototype_of(obj: object, prototype: Any) -> None:
    """Make ``obj`` inherit from ``prototype``."""
    if is_guarded(obj):
        dispatch(obj, "setPrototypeOf", prototype)
    elif isinstance(obj, type):
        obj.__bases__ = (object if prototype is None else prototype,)
    else:
        obj.__class__ = prototype
