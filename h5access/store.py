"""Primitives of the underlying HDF5 store, as used by the handle classes.

Everything touching h5py group membership directly lives here:

* node kind lookup (group or dataset) for a name below a group,
* a non-destructive existence probe,
* a resumable, callback-driven enumeration of the children of a group.

h5py keeps the HDF5 error stack silent, so failing lookups done here
are never reported by the library itself.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Tuple

import h5py

from .errors import ResourceError


class NodeKind(str, Enum):
    """Kind of a named node in a HDF5 group.

    The namespace of a group carries no type information,
    so the kind must be queried for each candidate name.
    """

    group = "group"
    dataset = "dataset"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.value}"


_h5kinds = {
    h5py.Group: NodeKind.group,
    h5py.Dataset: NodeKind.dataset,
}


def node_kind(group: h5py.Group, name: str) -> Optional[NodeKind]:
    """Return the kind of the node `name` below `group`.

    Returns None if there is no such node, or it is neither group nor dataset
    (e.g. a dangling soft link or a committed datatype).
    """
    if name not in group:
        return None
    try:
        cls = group.get(name, getclass=True)
    except (KeyError, ValueError, RuntimeError):
        # unresolvable link
        return None
    return _h5kinds.get(cls)


def link_exists(group: h5py.Group, name: str) -> bool:
    """Return whether a link `name` exists below `group`, whatever it points to."""
    try:
        return group.get(name, getlink=True) is not None
    except (KeyError, ValueError, RuntimeError):
        return False


def exists(group: h5py.Group, name: str, kind: Optional[NodeKind] = None) -> bool:
    """Return whether a node `name` (optionally of given kind) exists below `group`."""
    found = node_kind(group, name)
    if kind is None:
        return found is not None
    return found == kind


EnumerationCallback = Callable[[str, NodeKind], bool]
"""Called for every candidate child with its name and kind.

Returning True accepts the candidate and stops the enumeration,
returning False continues with the next child.
"""


def iterate_children(
    group: h5py.Group, callback: EnumerationCallback, start: int = 0
) -> Optional[Tuple[str, int]]:
    """Enumerate children of `group` in increasing name order, beginning at `start`.

    Returns the accepted name and the index to resume from on the next call,
    or None if the enumeration ran out of children without accepting one.
    """
    gid = group.id
    try:
        num = gid.get_num_objs()
    except (KeyError, ValueError, RuntimeError) as e:
        raise ResourceError("cannot list children", parent=node_path(group)) from e

    for idx in range(start, num):
        raw = gid.get_objname_by_idx(idx)
        name = raw.decode("utf-8", "surrogateescape") if isinstance(raw, bytes) else raw
        kind = node_kind(group, name)
        if kind is None:
            # neither group nor dataset, never a match
            continue
        if callback(name, kind):
            return name, idx + 1
    return None


def node_path(obj) -> Optional[str]:
    """Return the absolute path of an h5py object (None for anonymous objects)."""
    try:
        return obj.name
    except (KeyError, ValueError, RuntimeError, OSError):
        return None
