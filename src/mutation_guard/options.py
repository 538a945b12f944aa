"""Configuration accepted by :func:`mutation_guard.guard`."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from .paths import ROOT_PATH, prop_path

if TYPE_CHECKING:
    from collections.abc import Mapping
else:  # pragma: no cover - provide runtime aliases for introspection tools
    import collections.abc as _abc

    Mapping = _abc.Mapping

_PUBLIC_OPTIONS = ("deep", "prototype", "name", "path")

__all__ = ["GuardOptions", "coerce_options"]


@dataclass(frozen=True)
class GuardOptions:
    """Immutable settings threaded through every recursive guard.

    ``deep`` guards values reached through reads, ``prototype`` also intercepts
    class (prototype) reads and reassignment. ``name`` and ``path`` only shape
    the access path reported in errors. ``is_setter`` and ``is_getter`` are
    private to the recursion and mark guards of accessor functions.
    """

    deep: bool = False
    prototype: bool = False
    name: str | Literal[False] | None = None
    path: str | None = None
    is_setter: bool = field(default=False, repr=False)
    is_getter: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        for flag in ("deep", "prototype", "is_setter", "is_getter"):
            if not isinstance(getattr(self, flag), bool):
                raise TypeError(f"Guard option {flag!r} must be a bool")
        if self.name is not None and self.name is not False:
            if not isinstance(self.name, str):
                raise TypeError("Guard option 'name' must be a string or False")
        if self.path is not None and not isinstance(self.path, str):
            raise TypeError("Guard option 'path' must be a string")

    def derive(self, **changes: Any) -> GuardOptions:  # noqa: ANN401
        """Return options for a nested guard, clearing the accessor markers."""
        return dataclasses.replace(
            self, **{"is_setter": False, "is_getter": False, **changes}
        )

    def resolve(self, target: object) -> GuardOptions:
        """Fill in ``name`` and ``path`` for a guard of ``target``.

        Without an explicit ``name`` the target's own ``__name__`` is used
        when it is a string. Without a ``path`` the name (or ``"target"``)
        starts one; otherwise the name is appended to the given path.
        """
        name = self.name
        if name is None:
            own_name = getattr(target, "__name__", None)
            name = own_name if isinstance(own_name, str) and own_name else False
        path = self.path
        if not path:
            path = name or ROOT_PATH
        elif name:
            path = prop_path(path, name)
        return dataclasses.replace(self, name=name, path=path)


def coerce_options(
    options: GuardOptions | Mapping[str, Any] | None,
) -> GuardOptions:
    """Build :class:`GuardOptions` from a caller-supplied value."""
    if options is None:
        return GuardOptions()
    if isinstance(options, GuardOptions):
        return options
    unknown = sorted(set(options) - set(_PUBLIC_OPTIONS))
    if unknown:
        raise TypeError(f"Unknown guard options: {unknown}")
    return GuardOptions(**dict(options))
