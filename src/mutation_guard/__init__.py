"""Public package surface for the mutation-guard project."""

from . import reflect
from .errors import MutationAssertionError
from .guard import guard
from .guard_arguments import guard_arguments
from .options import GuardOptions
from .reflect import PropertyDescriptor
from .view import is_guarded

__all__ = [
    "GuardOptions",
    "MutationAssertionError",
    "PropertyDescriptor",
    "guard",
    "guard_arguments",
    "is_guarded",
    "reflect",
]
