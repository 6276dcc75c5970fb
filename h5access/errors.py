"""Exceptions raised by the h5access layer.

Every exception also derives from the closest builtin exception type,
so callers may catch either the specific class or e.g. `KeyError`.
"""
from __future__ import annotations

from typing import Optional


class H5AccessError(Exception):
    """Base class of all errors raised by h5access.

    Carries the name of the affected node and of its parent, if known.
    """

    name: Optional[str]
    """Name (or path) of the node the failed operation was addressing."""

    parent: Optional[str]
    """Name (path) of the parent group, if it could be resolved."""

    def __init__(
        self, msg: str, *, name: Optional[str] = None, parent: Optional[str] = None
    ):
        super().__init__(msg)
        self.msg = msg
        self.name = name
        self.parent = parent

    def __str__(self) -> str:
        return self.msg


class ResourceError(H5AccessError, RuntimeError):
    """An open, create or close primitive of the store failed."""


class AlreadyExistsError(H5AccessError, ValueError):
    """A node should be created, but a node of that name exists already."""


class NotFoundError(H5AccessError, KeyError):
    """No node of the requested name (and kind) exists."""

    # KeyError quotes its argument in str(), we want the plain message
    def __str__(self) -> str:
        return self.msg


class ShapeMismatchError(H5AccessError, ValueError):
    """Rank or extents of an array or window do not match the stored dataset."""


class TypeMismatchError(H5AccessError, TypeError):
    """Element type of an array is incompatible with the stored element type."""


class InvalidStateError(H5AccessError, RuntimeError):
    """Operation on an unbound handle or a default-constructed iterator."""


class OutOfRangeError(H5AccessError, IndexError):
    """Dereference of a past-the-end group iterator."""


class UnsupportedOperationError(H5AccessError, AttributeError):
    """Mutating method called on a node obtained through a read-only view."""


def describe(name: Optional[str], parent: Optional[str] = None) -> str:
    """Return a quoted node description for error messages."""
    if parent is None:
        return f'"{name}"'
    return f'"{name}" of object "{parent}"'
