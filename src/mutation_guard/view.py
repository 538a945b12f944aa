"""The objects handed out by :func:`mutation_guard.guard`.

A view owns no data. Every operation Python performs on it is translated into
a call to one entry of the view's trap table, which decides whether the
operation is forwarded to the real target or rejected.
"""
# ruff: noqa: ANN401

from __future__ import annotations

import math
import operator
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

from .paths import PROTOTYPE_KEY

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .options import GuardOptions
    from .shadow import Shadow

__all__ = [
    "GuardContext",
    "GuardedCallable",
    "GuardedView",
    "context_of",
    "dispatch",
    "is_guarded",
]


class GuardContext(NamedTuple):
    """Everything a trap needs to know about the view it serves."""

    target: Any
    options: GuardOptions
    shadow: Shadow


def context_of(view: GuardedView) -> GuardContext:
    """Return the context stored on ``view``."""
    return object.__getattribute__(view, "_guard_context")


def dispatch(view: GuardedView, trap: str, *args: Any) -> Any:
    """Invoke the ``trap`` entry of ``view``'s trap table."""
    traps: Mapping[str, Callable[..., Any]] = object.__getattribute__(
        view, "_guard_traps"
    )
    return traps[trap](context_of(view), *args)


def is_guarded(value: object) -> bool:
    """Return ``True`` if ``value`` is a guarded view."""
    return isinstance(value, GuardedView)


def _target(view: GuardedView) -> Any:
    return context_of(view).target


def _call_attribute(name: str) -> Callable[..., Any]:
    def method(self: GuardedView, *args: Any) -> Any:
        return dispatch(self, "get", name, False, self)(*args)

    method.__name__ = name
    return method


def _inplace(name: str) -> Callable[[GuardedView, Any], Any]:
    def method(self: GuardedView, other: Any) -> Any:
        try:
            operation = dispatch(self, "get", name, False, self)
        except AttributeError:
            return NotImplemented
        return operation(other)

    method.__name__ = name
    return method


def _forward(function: Callable[..., Any]) -> Callable[..., Any]:
    def method(self: GuardedView, *args: Any) -> Any:
        return function(_target(self), *args)

    method.__name__ = f"__{function.__name__.strip('_')}__"
    return method


def _reflected(function: Callable[[Any, Any], Any]) -> Callable[..., Any]:
    def method(self: GuardedView, other: Any) -> Any:
        return function(other, _target(self))

    method.__name__ = f"__r{function.__name__.strip('_')}__"
    return method


class GuardedView:
    """Transparent, write-rejecting view of a target object."""

    __slots__ = ("__weakref__", "_guard_context", "_guard_traps")

    def __init__(
        self, context: GuardContext, traps: Mapping[str, Callable[..., Any]]
    ) -> None:
        object.__setattr__(self, "_guard_context", context)
        object.__setattr__(self, "_guard_traps", traps)

    def __getattribute__(self, name: str) -> Any:
        if name == "__class__":
            return context_of(self).shadow.constructor
        return dispatch(self, "get", name, False, self)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == PROTOTYPE_KEY:
            dispatch(self, "setPrototypeOf", value)
            return
        dispatch(self, "set", name, value, False)

    def __delattr__(self, name: str) -> None:
        dispatch(self, "deleteProperty", name, False)

    def __getitem__(self, key: Any) -> Any:
        return dispatch(self, "get", key, True, self)

    def __setitem__(self, key: Any, value: Any) -> None:
        dispatch(self, "set", key, value, True)

    def __delitem__(self, key: Any) -> None:
        dispatch(self, "deleteProperty", key, True)

    def __contains__(self, key: Any) -> bool:
        return bool(dispatch(self, "has", key, True))

    def __iter__(self) -> Iterator[Any]:
        target = _target(self)
        if isinstance(target, Sequence):
            return (self[index] for index in range(len(target)))
        if isinstance(target, Iterator):
            return self
        return dispatch(self, "get", "__iter__", False, self)()

    def __reversed__(self) -> Iterator[Any]:
        target = _target(self)
        if isinstance(target, Sequence):
            return (self[index] for index in reversed(range(len(target))))
        return dispatch(self, "get", "__reversed__", False, self)()

    def __len__(self) -> int:
        return len(_target(self))

    def __bool__(self) -> bool:
        return bool(_target(self))

    def __hash__(self) -> int:
        return hash(_target(self))

    def __repr__(self) -> str:
        return repr(_target(self))

    def __str__(self) -> str:
        return str(_target(self))

    def __format__(self, format_spec: str) -> str:
        return format(_target(self), format_spec)

    def __dir__(self) -> list[str]:
        return dir(_target(self))

    def __instancecheck__(self, instance: Any) -> bool:
        return isinstance(instance, _target(self))

    def __subclasscheck__(self, subclass: type) -> bool:
        return issubclass(subclass, _target(self))

    def __round__(self, ndigits: int | None = None) -> Any:
        if ndigits is None:
            return round(_target(self))
        return round(_target(self), ndigits)

    __eq__ = _forward(operator.eq)
    __ne__ = _forward(operator.ne)
    __lt__ = _forward(operator.lt)
    __le__ = _forward(operator.le)
    __gt__ = _forward(operator.gt)
    __ge__ = _forward(operator.ge)

    __add__ = _forward(operator.add)
    __sub__ = _forward(operator.sub)
    __mul__ = _forward(operator.mul)
    __matmul__ = _forward(operator.matmul)
    __truediv__ = _forward(operator.truediv)
    __floordiv__ = _forward(operator.floordiv)
    __mod__ = _forward(operator.mod)
    __divmod__ = _forward(divmod)
    __pow__ = _forward(pow)
    __lshift__ = _forward(operator.lshift)
    __rshift__ = _forward(operator.rshift)
    __and__ = _forward(operator.and_)
    __xor__ = _forward(operator.xor)
    __or__ = _forward(operator.or_)

    __radd__ = _reflected(operator.add)
    __rsub__ = _reflected(operator.sub)
    __rmul__ = _reflected(operator.mul)
    __rmatmul__ = _reflected(operator.matmul)
    __rtruediv__ = _reflected(operator.truediv)
    __rfloordiv__ = _reflected(operator.floordiv)
    __rmod__ = _reflected(operator.mod)
    __rdivmod__ = _reflected(divmod)
    __rpow__ = _reflected(pow)
    __rlshift__ = _reflected(operator.lshift)
    __rrshift__ = _reflected(operator.rshift)
    __rand__ = _reflected(operator.and_)
    __rxor__ = _reflected(operator.xor)
    __ror__ = _reflected(operator.or_)

    __iadd__ = _inplace("__iadd__")
    __isub__ = _inplace("__isub__")
    __imul__ = _inplace("__imul__")
    __imatmul__ = _inplace("__imatmul__")
    __itruediv__ = _inplace("__itruediv__")
    __ifloordiv__ = _inplace("__ifloordiv__")
    __imod__ = _inplace("__imod__")
    __ipow__ = _inplace("__ipow__")
    __ilshift__ = _inplace("__ilshift__")
    __irshift__ = _inplace("__irshift__")
    __iand__ = _inplace("__iand__")
    __ixor__ = _inplace("__ixor__")
    __ior__ = _inplace("__ior__")

    __neg__ = _forward(operator.neg)
    __pos__ = _forward(operator.pos)
    __abs__ = _forward(abs)
    __invert__ = _forward(operator.invert)
    __int__ = _forward(int)
    __float__ = _forward(float)
    __complex__ = _forward(complex)
    __index__ = _forward(operator.index)
    __bytes__ = _forward(bytes)
    __trunc__ = _forward(math.trunc)
    __floor__ = _forward(math.floor)
    __ceil__ = _forward(math.ceil)

    __next__ = _call_attribute("__next__")
    __enter__ = _call_attribute("__enter__")
    __exit__ = _call_attribute("__exit__")


class GuardedCallable(GuardedView):
    """View of a callable target; calling a class constructs an instance."""

    __slots__ = ()

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        trap = "construct" if isinstance(_target(self), type) else "apply"
        return dispatch(self, trap, args, kwargs)
