"""Dataset handles and raw transfer between numpy arrays and stored datasets."""
from __future__ import annotations

import logging
from typing import Optional

import h5py
import numpy as np

from .. import store
from ..config import get_settings
from ..errors import (
    AlreadyExistsError,
    NotFoundError,
    ResourceError,
    ShapeMismatchError,
    describe,
)
from ..group import Parent, parent_node
from ..handle import Handle
from ..policy import StoragePolicy, layout_name
from ..store import NodeKind
from .dataspace import ShapeType, Window

logger = logging.getLogger(__name__)


def _link_create_plist() -> h5py.h5p.PropLCID:
    lcpl = h5py.h5p.create(h5py.h5p.LINK_CREATE)
    lcpl.set_create_intermediate_group(True)
    return lcpl


def _mem_type(stored: ShapeType) -> h5py.h5t.TypeID:
    return h5py.h5t.py_create(stored.dtype)


def exists_dataset(parent: Parent, name: str) -> bool:
    """Return whether a dataset `name` exists in `parent`."""
    return store.exists(parent_node(parent), name, NodeKind.dataset)


class Dataset(Handle):
    """Owning handle of an HDF5 dataset.

    `Dataset(parent, name)` opens an existing dataset,
    `Dataset(parent, name, shape_type)` creates a new one.
    """

    def __init__(
        self,
        parent: Optional[Parent] = None,
        name: Optional[str] = None,
        shape_type: Optional[ShapeType] = None,
        storage: Optional[StoragePolicy] = None,
    ):
        super().__init__()
        if parent is None:
            return
        if name is None:
            raise ValueError("Need a dataset name to open a dataset!")
        if shape_type is None:
            self.open(parent, name)
        else:
            self.create(parent, name, shape_type, storage)

    def open(self, parent: Parent, name: str) -> None:
        """Open the existing dataset `name` in `parent`."""
        if self._node is not None:
            raise ResourceError("Dataset object is already in use", name=self.name)
        pnode = parent_node(parent)
        if store.node_kind(pnode, name) != NodeKind.dataset:
            msg = f"dataset {describe(name, pnode.name)} does not exist"
            raise NotFoundError(msg, name=name, parent=pnode.name)
        try:
            node = pnode[name]
        except (KeyError, ValueError) as e:
            msg = f"opening dataset {describe(name, pnode.name)}"
            raise ResourceError(msg, name=name, parent=pnode.name) from e
        self._bind(node)

    def create(
        self,
        parent: Parent,
        name: str,
        shape_type: ShapeType,
        storage: Optional[StoragePolicy] = None,
    ) -> None:
        """Create a new dataset `name` in `parent` and bind to it.

        Fails if any node of that name exists already, nothing is overwritten.
        Missing intermediate groups are created.
        """
        if self._node is not None:
            raise ResourceError("Dataset object is already in use", name=self.name)
        pnode = parent_node(parent)
        if store.link_exists(pnode, name):
            msg = f"dataset {describe(name, pnode.name)} does already exist"
            raise AlreadyExistsError(msg, name=name, parent=pnode.name)

        if storage is None:
            storage = get_settings().storage_for(shape_type.rank)
        dcpl = storage.make_dcpl(shape_type)
        tid = h5py.h5t.py_create(shape_type.dtype, logical=True)
        try:
            dsid = h5py.h5d.create(
                pnode.id,
                name.encode("utf-8"),
                tid,
                shape_type.to_space(),
                dcpl=dcpl,
                lcpl=_link_create_plist(),
            )
        except (KeyError, ValueError, OSError, RuntimeError) as e:
            msg = f"creating dataset {describe(name, pnode.name)}"
            raise ResourceError(msg, name=name, parent=pnode.name) from e
        logger.debug(
            "created dataset %s/%s %s %s (%s)",
            pnode.name.rstrip("/"),
            name,
            shape_type.extents,
            shape_type.dtype,
            storage.layout,
        )
        self._bind(h5py.Dataset(dsid))

    # ---- inspection ----

    def shape_type(self) -> ShapeType:
        """Return the stored shape and element type."""
        self._guard_valid("query the dataspace of")
        return ShapeType.of_dataset(self._node)

    @property
    def dtype(self) -> np.dtype:
        return self.shape_type().dtype

    @property
    def layout(self) -> str:
        """Name of the storage layout (compact, contiguous or chunked)."""
        self._guard_valid("query the layout of")
        return layout_name(self._node.id.get_create_plist())

    def _windows(self, stored: ShapeType, mem_window, file_window, mem_extents=None):
        """Check a pair of windows and return the matching HDF5 dataspaces."""
        if mem_window is None and file_window is None:
            return h5py.h5s.ALL, h5py.h5s.ALL
        if mem_window is None or file_window is None:
            raise ValueError("Memory and file window must be given together!")

        name = self.name
        if mem_extents is not None and mem_window.extents != tuple(mem_extents):
            msg = (
                f"memory window extents {mem_window.extents} do not match"
                f" array shape {tuple(mem_extents)}"
            )
            raise ShapeMismatchError(msg, name=name)
        stored.check_rank(mem_window.rank, name)
        stored.check_extents(file_window.extents, name)
        mem_window.check_matches(file_window, name)
        return mem_window.to_space(), file_window.to_space()

    # ---- transfer ----

    def write(
        self,
        value,
        mem_window: Optional[Window] = None,
        file_window: Optional[Window] = None,
    ) -> None:
        """Write an array (or scalar) to the dataset.

        Without windows, the array must have exactly the stored extents.
        With windows, the `mem_window` selection of the array is written to the
        `file_window` selection of the dataset, both selecting the same number
        of elements per dimension.
        """
        self._guard_valid("write to")
        name = self.name
        stored = self.shape_type()
        arr = np.asarray(value)
        stored.check_rank(arr.ndim, name)
        if isinstance(value, (np.ndarray, np.generic)):
            stored.check_writable_from(arr.dtype, name)
        else:
            # python numbers and lists have no declared element type
            stored.check_representable(arr, name)
        if mem_window is None and file_window is None:
            stored.check_extents(arr.shape, name)
        mspace, fspace = self._windows(stored, mem_window, file_window, arr.shape)

        if arr.size == 0:
            return
        # lossless conversion is done by numpy, the transfer uses the stored type
        arr = np.require(arr.astype(stored.dtype, copy=False), requirements="C")
        try:
            self._node.id.write(mspace, fspace, arr, mtype=_mem_type(stored))
        except (OSError, ValueError, TypeError) as e:
            raise ResourceError(f"writing dataset {describe(name)}", name=name) from e

    def read(
        self,
        ndim: Optional[int] = None,
        dtype=None,
        mem_window: Optional[Window] = None,
        file_window: Optional[Window] = None,
    ) -> np.ndarray:
        """Read the dataset into a new array.

        If `ndim` is given, it must be equal to the stored rank. If `dtype` is
        given, the stored values must be convertible to it without loss.

        With windows, the returned array has the extents of `mem_window` and
        receives the `file_window` selection of the dataset in its `mem_window`
        selection (everything else is zero).
        """
        self._guard_valid("read from")
        name = self.name
        stored = self.shape_type()
        if ndim is not None:
            stored.check_rank(ndim, name)
        out_dtype = stored.dtype if dtype is None else np.dtype(dtype)
        stored.check_readable_as(out_dtype, name)
        mspace, fspace = self._windows(stored, mem_window, file_window)

        if mem_window is None:
            out = np.empty(stored.extents, dtype=stored.dtype)
        else:
            out = np.zeros(mem_window.extents, dtype=stored.dtype)
        if out.size > 0:
            try:
                self._node.id.read(mspace, fspace, out, mtype=_mem_type(stored))
            except (OSError, ValueError, TypeError) as e:
                raise ResourceError(f"reading dataset {describe(name)}", name=name) from e
        return out.astype(out_dtype, copy=False)
