"""Decorator that hands a callable guarded views of its arguments."""
# ruff: noqa: ANN401

from __future__ import annotations

import inspect
import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast, overload

from .guard import guard
from .options import GuardOptions
from .paths import item_path

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
else:  # pragma: no cover - provide runtime aliases for introspection tools
    import collections.abc as _abc

    Awaitable = _abc.Awaitable
    Callable = _abc.Callable
    Iterable = _abc.Iterable

_P = ParamSpec("_P")
_T = TypeVar("_T")

_LOGGER = logging.getLogger(__name__)

__all__ = ["guard_arguments"]


def _guard_bound(
    bound: inspect.BoundArguments,
    allow: frozenset[str],
    deep: bool,
    prototype: bool,
) -> None:
    def wrap(value: Any, path: str) -> Any:
        options = GuardOptions(deep=deep, prototype=prototype, name=False, path=path)
        return guard(value, options)

    parameters = bound.signature.parameters
    for name, value in list(bound.arguments.items()):
        if name in allow:
            continue
        kind = parameters[name].kind
        if kind is inspect.Parameter.VAR_POSITIONAL:
            bound.arguments[name] = tuple(
                wrap(item, item_path(name, index)) for index, item in enumerate(value)
            )
        elif kind is inspect.Parameter.VAR_KEYWORD:
            bound.arguments[name] = {
                key: wrap(item, item_path(name, key)) for key, item in value.items()
            }
        else:
            bound.arguments[name] = wrap(value, name)


@overload
def guard_arguments(fn: Callable[_P, _T]) -> Callable[_P, _T]: ...


@overload
def guard_arguments(
    *, deep: bool = True, prototype: bool = False, allow: Iterable[str] = ()
) -> Callable[[Callable[_P, _T]], Callable[_P, _T]]: ...


def guard_arguments(
    fn: Callable[_P, _T] | None = None,
    *,
    deep: bool = True,
    prototype: bool = False,
    allow: Iterable[str] = (),
) -> Callable[[Callable[_P, _T]], Callable[_P, _T]] | Callable[_P, _T]:
    """Call ``fn`` with guarded views of its arguments.

    Every argument is wrapped with :func:`mutation_guard.guard` using the
    parameter name as the root of the access path, so an attempt by ``fn`` to
    modify one of its inputs raises ``MutationAssertionError`` naming the
    parameter. Items of ``*args`` and ``**kwargs`` are rooted at
    ``args[0]``-style and ``kwargs["key"]``-style paths.

    Parameters named in ``allow`` are passed through untouched. ``deep`` and
    ``prototype`` are forwarded to every guard; unlike :func:`guard`, ``deep``
    defaults to ``True``.
    """
    allowed = frozenset(allow)

    def decorator(func: Callable[_P, _T]) -> Callable[_P, _T]:
        signature = inspect.signature(func)
        unknown = sorted(allowed - set(signature.parameters))
        if unknown:
            raise ValueError(
                f"{func.__qualname__} has no parameters named {unknown}"
            )
        _LOGGER.debug(
            "Guarding arguments of %s (deep=%s, prototype=%s, allow=%s)",
            func.__qualname__,
            deep,
            prototype,
            sorted(allowed),
        )

        if inspect.iscoroutinefunction(func):
            async_fn = cast("Callable[..., Awaitable[Any]]", func)

            @wraps(func)
            async def async_wrapper(*args: _P.args, **kwargs: _P.kwargs) -> Any:
                bound = signature.bind(*args, **kwargs)
                _guard_bound(bound, allowed, deep, prototype)
                return await async_fn(*bound.args, **bound.kwargs)

            return cast("Callable[_P, _T]", async_wrapper)

        @wraps(func)
        def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
            bound = signature.bind(*args, **kwargs)
            _guard_bound(bound, allowed, deep, prototype)
            return func(*bound.args, **bound.kwargs)

        return wrapper

    if fn is not None:
        return decorator(fn)
    return decorator
