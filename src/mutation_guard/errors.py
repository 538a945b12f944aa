"""Exceptions raised when a guarded value is mutated."""

from __future__ import annotations

from typing import Self

__all__ = ["MutationAssertionError"]


class MutationAssertionError(AssertionError):
    """A write was attempted against a guarded value.

    ``trap`` names the intercepted operation (``set``, ``defineProperty``,
    ``deleteProperty``, ``preventExtensions``, ``setPrototypeOf`` or
    ``apply``) and ``path`` locates it relative to the guarded root.
    """

    def __init__(self, trap: str, path: str) -> None:
        """Record the trap and path and build the failure message."""
        self.trap = trap
        self.path = path
        super().__init__(
            f"Mutation assertion failed. `{trap}` trap triggered on `{path}`."
        )

    def __reduce__(self) -> tuple[type[Self], tuple[str, str]]:
        return type(self), (self.trap, self.path)
