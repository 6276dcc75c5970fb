"""Owning handles to nodes (groups, datasets) of an open HDF5 file.

A handle binds to exactly one node at a time. Handles cannot be duplicated,
ownership can only be passed on (`move`) or exchanged (`swap`), so that each
successful open is paired with exactly one close.

Handles are not thread-safe. Opening and closing mutates reference counts
inside the HDF5 library, so sharing handles between threads needs external
synchronization.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from .errors import InvalidStateError, ResourceError
from .store import node_path

logger = logging.getLogger(__name__)

H = TypeVar("H", bound="Handle")


class Handle:
    """Base class of all owning node handles.

    A default constructed handle is unbound (`valid` is False).
    """

    read_only: bool = False
    """True for views that forbid mutation (see `readonly.ReadOnlyNode`)."""

    _node: Optional[Any]
    """Bound h5py object (or None, if the handle is unbound)."""

    def __init__(self):
        self._node = None

    # ---- lifecycle ----

    @property
    def valid(self) -> bool:
        """Return True if the handle is bound to an open node."""
        return self._node is not None and bool(self._node.id.valid)

    @property
    def id(self):
        """Return the low-level HDF5 object id (h5py ObjectID) of the node."""
        self._guard_valid("access the id of")
        return self._node.id

    @property
    def name(self) -> Optional[str]:
        """Return the absolute path of the bound node (resolved on each access)."""
        if self._node is None:
            return None
        return node_path(self._node)

    def _bind(self, node) -> None:
        """Take ownership of a freshly opened h5py object."""
        if self._node is not None:
            msg = f"{type(self).__name__} object is already in use"
            raise ResourceError(msg, name=self.name)
        self._node = node
        logger.debug("opened %s %s", type(self).__name__, self.name)

    def _release(self, node) -> None:
        """Close the underlying object (here: drop our only reference)."""

    def close(self) -> None:
        """Close the handle. Does nothing if the handle is unbound."""
        if self._node is None:
            return
        node, self._node = self._node, None
        name = node_path(node)
        try:
            self._release(node)
        except (OSError, ValueError, RuntimeError) as e:
            msg = f"closing {type(self).__name__} {name}"
            raise ResourceError(msg, name=name) from e
        logger.debug("closed %s %s", type(self).__name__, name)

    def _guard_valid(self, action: str = "use"):
        if not self.valid:
            msg = f"cannot {action} unbound {type(self).__name__}"
            raise InvalidStateError(msg)

    # ---- ownership transfer ----

    def __copy__(self):
        raise InvalidStateError(
            f"{type(self).__name__} can not be copied, use move() instead"
        )

    def __deepcopy__(self, memo):
        return self.__copy__()

    def swap(self, other: Handle) -> None:
        """Exchange the bound nodes of two handles of the same class."""
        if type(other) is not type(self):
            msg = f"cannot swap {type(self).__name__} with {type(other).__name__}"
            raise InvalidStateError(msg)
        self._node, other._node = other._node, self._node

    def move(self: H) -> H:
        """Return a new handle owning the node, this handle becomes unbound."""
        cls: Type[H] = type(self)
        ret = cls()
        self.swap(ret)
        return ret

    def assign(self: H, other: H) -> H:
        """Take over the node of `other` and close the previously bound node.

        The previous node is closed exactly once, `other` is unbound afterwards.
        """
        tmp = other.move()
        self.swap(tmp)
        tmp.close()
        return self

    # ---- context manager support (i.e. to use `with`) ----

    def __enter__(self):
        return self

    def __exit__(self, ex_type, ex_value, ex_traceback):
        self.close()

    def __repr__(self):
        if not self.valid:
            return f"<{type(self).__name__} (unbound)>"
        return f'<{type(self).__name__} "{self.name}">'
