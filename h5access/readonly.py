"""Read-only views of group and dataset handles (yielded by const iterators)."""
from __future__ import annotations

from typing import Set

import wrapt

from .errors import UnsupportedOperationError


class ReadOnlyNode(wrapt.ObjectProxy):
    """Wrapper for Group and Dataset handles preventing mutation through it.

    The wrapped handle is still owned by whoever created it,
    closing the view closes the handle.
    """

    # manually assembled from the mutating public methods of the handle classes
    _self_FORBIDDEN: Set[str] = {"open", "create", "write", "swap", "move", "assign"}

    def __getattr__(self, key: str):
        if key in self._self_FORBIDDEN:
            msg = f"Cannot use {key}, the node is marked as read_only!"
            raise UnsupportedOperationError(msg, name=self.__wrapped__.name)
        return getattr(self.__wrapped__, key)

    @property
    def read_only(self) -> bool:
        return True

    # child containers of a read-only group yield read-only nodes as well

    def groups(self, read_only: bool = True):
        return self.__wrapped__.groups(read_only=True)

    def datasets(self, read_only: bool = True):
        return self.__wrapped__.datasets(read_only=True)

    # make wrapper transparent

    def __enter__(self):
        self.__wrapped__.__enter__()
        return self

    def __repr__(self):
        return repr(self.__wrapped__)
