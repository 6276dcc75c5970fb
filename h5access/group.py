"""Group handles and lazy, type-filtered iteration over the children of a group.

The children of a group are never cached. A `GroupIterator` asks the store
for one matching child at a time, and a `Container` (returned by
`Group.groups()` and `Group.datasets()`) re-queries the store on every
traversal.

Iterator protocol (modelled after C++ forward iterators):

```python
datasets = grp.datasets()
it, end = datasets.begin(), datasets.end()
while it != end:
    print(it.name, it.deref().shape_type())
    it.increment()  # closes the node returned by deref()
```

Plain Python iteration works as well. In that case every yielded node
is owned by the caller, who should close it:

```python
for sub in grp.groups():
    with sub:
        ...
```
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Optional, Union

import h5py

from . import store
from .errors import InvalidStateError, OutOfRangeError, ResourceError
from .handle import Handle
from .readonly import ReadOnlyNode
from .store import NodeKind

if TYPE_CHECKING:
    from .file import File

logger = logging.getLogger(__name__)

Parent = Union["File", "Group"]
"""Anything that can contain named groups and datasets."""


def parent_node(parent: Parent) -> h5py.Group:
    """Return the h5py group of a valid File or Group handle."""
    from .file import File

    if not isinstance(parent, (File, Group)):
        raise TypeError(f"Expected a File or Group as parent, got: {parent!r}")
    parent._guard_valid("access a child of")
    return parent._node


class Group(Handle):
    """Owning handle of an HDF5 group."""

    def __init__(self, parent: Optional[Parent] = None, name: Optional[str] = None):
        """Open (or create) the group `name` in `parent`, if given."""
        super().__init__()
        if parent is not None:
            if name is None:
                raise ValueError("Need a group name to open a group!")
            self.open(parent, name)

    def open(self, parent: Parent, name: str) -> None:
        """Open the group `name` in `parent`, create it if it does not exist.

        Missing intermediate groups of a nested path are created as well.
        """
        if self._node is not None:
            raise ResourceError("Group object is already in use", name=self.name)
        pnode = parent_node(parent)
        try:
            if store.exists(pnode, name, NodeKind.group):
                node = pnode[name]
            else:
                node = pnode.create_group(name)
                logger.debug("created group %s", node.name)
        except (KeyError, ValueError, TypeError, OSError, RuntimeError) as e:
            msg = f'creating or opening group "{name}"'
            raise ResourceError(msg, name=name, parent=pnode.name) from e
        self._bind(node)

    # container adapters

    def datasets(self, read_only: bool = False) -> Container:
        """Return a view of the datasets directly below this group."""
        return Container(self, NodeKind.dataset, read_only)

    def groups(self, read_only: bool = False) -> Container:
        """Return a view of the groups directly below this group."""
        return Container(self, NodeKind.group, read_only)


def exists_group(parent: Parent, name: str) -> bool:
    """Return whether a group `name` exists in `parent`."""
    return store.exists(parent_node(parent), name, NodeKind.group)


def exists(parent: Parent, name: str) -> bool:
    """Return whether any group or dataset `name` exists in `parent`."""
    return store.exists(parent_node(parent), name)


# ----

_FRESH = 0
"""Iterator index before the first lookup (points at first match or past the end)."""

_END = -1
"""Iterator index of the past-the-end iterator."""


class GroupIterator:
    """Forward iterator over the children of one kind (groups or datasets) of a group.

    The iterator does not own its parent group, it is only usable while the
    parent handle is open. It does own the node returned by `deref`,
    which is closed on `increment` or `close`.

    A fresh iterator performs no lookup until it is first dereferenced,
    incremented or compared, so comparing iterators (`==`, `!=`) may query
    the store. Use `ensure_positioned` to do that lookup explicitly.
    """

    def __init__(
        self,
        parent: Optional[Group] = None,
        kind: NodeKind = NodeKind.group,
        read_only: bool = False,
    ):
        self._parent = parent
        self._kind = NodeKind(kind)
        self._read_only = read_only
        self._index: int = _FRESH if parent is not None else _END
        self._name: str = ""
        self._element = None

    def copy(self) -> GroupIterator:
        """Return an iterator at the same position (without the materialized node)."""
        ret = type(self)(self._parent, self._kind, self._read_only)
        ret._index = self._index
        ret._name = self._name
        return ret

    __copy__ = copy

    def _set_to_end(self) -> None:
        self._drop_element()
        self._index = _END
        self._name = ""

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def at_end(self) -> bool:
        """Return whether the iterator is past the end (may query the store)."""
        self.ensure_positioned()
        return self._index == _END

    @property
    def name(self) -> str:
        """Return the name of the current child ("" if past the end)."""
        self.ensure_positioned()
        return self._name

    # state transitions

    def _step(self) -> bool:
        """Advance to the next matching child, or past the end if there is none."""
        parent = self._parent
        if parent is None or not parent.valid:
            self._set_to_end()
            return False

        kind = self._kind
        found = store.iterate_children(
            parent._node, lambda _, k: k == kind, start=self._index
        )
        if found is None:
            self._set_to_end()
            return False
        self._name, self._index = found
        return True

    def ensure_positioned(self) -> GroupIterator:
        """Perform the initial lookup of a fresh iterator (no-op otherwise)."""
        if self._index == _FRESH:
            self._step()
        return self

    def _drop_element(self) -> None:
        if self._element is not None:
            elem, self._element = self._element, None
            elem.close()

    def close(self) -> None:
        """Close the node materialized at the current position (if any)."""
        self._drop_element()

    def increment(self) -> GroupIterator:
        """Move to the next matching child (like C++ pre-increment)."""
        self._drop_element()
        if self._parent is None:
            raise InvalidStateError("cannot increment default constructed GroupIterator")
        self.ensure_positioned()
        if self._index == _END:
            raise InvalidStateError(
                "cannot increment past-the-end GroupIterator",
                parent=self._parent.name,
            )
        self._step()
        return self

    def _make_element(self):
        from .dataset.dataset import Dataset

        cls = Group if self._kind == NodeKind.group else Dataset
        elem = cls(self._parent, self._name)
        return ReadOnlyNode(elem) if self._read_only else elem

    def deref(self):
        """Return the node at the current position.

        The node is opened on first access and reused until the iterator moves on.
        """
        if self._parent is None:
            raise InvalidStateError(
                "cannot dereference default constructed GroupIterator"
            )
        self.ensure_positioned()
        if self._index == _END:
            msg = "parent group"
            if self._parent.valid:
                pname = self._parent.name
                raise OutOfRangeError(f"{msg} {pname}", parent=pname)
            raise OutOfRangeError(f"non-existing {msg}")

        if self._element is None:
            self._element = self._make_element()
        return self._element

    # comparison

    def __eq__(self, other) -> bool:
        if not isinstance(other, GroupIterator):
            return NotImplemented
        if self._parent is not other._parent or self._kind != other._kind:
            return False
        # a fresh iterator is equivalent to one at the first match (or at the end)
        self.ensure_positioned()
        other.ensure_positioned()
        return self._index == other._index

    __hash__ = None  # type: ignore

    # python iterator protocol

    def __iter__(self) -> GroupIterator:
        return self

    def __next__(self):
        self.ensure_positioned()
        if self._index == _END:
            raise StopIteration
        elem = self.deref()
        self._element = None  # ownership passes to the caller
        self._step()
        return elem

    def __repr__(self) -> str:
        if self._index == _FRESH:
            pos = "fresh"
        elif self._index == _END:
            pos = "end"
        else:
            pos = f'"{self._name}"'
        return f"<GroupIterator {self._kind.value} {pos}>"


class Container:
    """Adapter presenting the children of one kind of a group as a sequence.

    Nothing is copied, each traversal queries the store again.
    """

    def __init__(self, parent: Group, kind: NodeKind, read_only: bool = False):
        self._parent = parent
        self._kind = NodeKind(kind)
        self._read_only = read_only

    def begin(self) -> GroupIterator:
        return GroupIterator(self._parent, self._kind, self._read_only)

    def end(self) -> GroupIterator:
        it = self.begin()
        it._set_to_end()
        return it

    def cbegin(self) -> GroupIterator:
        return GroupIterator(self._parent, self._kind, True)

    def cend(self) -> GroupIterator:
        it = self.cbegin()
        it._set_to_end()
        return it

    def __iter__(self) -> GroupIterator:
        return self.begin()

    def names(self) -> Iterator[str]:
        """Iterate over the names of the children (without opening them)."""
        it = self.begin()
        while not it.at_end:
            yield it.name
            it.increment()

    def __repr__(self) -> str:
        return f"<Container of {self._kind.value}s in {self._parent!r}>"
