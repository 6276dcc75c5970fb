"""Shape/type descriptors of datasets and rectangular windows (hyperslabs).

A `ShapeType` is the authoritative logical layout of a dataset: its extents
(and thereby its rank) and its element type. Both are fixed at creation.

A `Window` describes the full extents of a data space together with a
rectangular selection in it, using the HDF5 hyperslab parameters:

* `offset`: first selected index per dimension,
* `count`: number of blocks per dimension,
* `stride`: distance between the starts of consecutive blocks,
* `block`: extent of each block.
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import h5py
import numpy as np

from ..errors import ShapeMismatchError, TypeMismatchError, describe

SUPPORTED_KINDS = "biufc"
"""numpy dtype kinds supported as dataset elements (bool, ints, floats, complex)."""


def check_element_dtype(dtype, name: Optional[str] = None, parent=None) -> np.dtype:
    """Return dtype as numpy dtype, if it is usable as dataset element type."""
    try:
        dt = np.dtype(dtype)
    except TypeError as e:
        raise TypeMismatchError(f"Invalid element type: {dtype}", name=name) from e
    if dt.kind not in SUPPORTED_KINDS or dt.fields is not None:
        msg = f"Unsupported element type {dt} for dataset {describe(name, parent)}"
        raise TypeMismatchError(msg, name=name, parent=parent)
    return dt


def _int_tuple(vals: Sequence[int]) -> Tuple[int, ...]:
    return tuple(int(v) for v in vals)


@dataclass(frozen=True)
class ShapeType:
    """Rank, extents and element type of a dataset."""

    extents: Tuple[int, ...]
    dtype: np.dtype

    def __post_init__(self):
        object.__setattr__(self, "extents", _int_tuple(self.extents))
        object.__setattr__(self, "dtype", np.dtype(self.dtype))
        if any(e < 0 for e in self.extents):
            raise ValueError(f"Extents must be non-negative: {self.extents}")

    @classmethod
    def for_array(cls, value) -> ShapeType:
        """Return the descriptor of an array (or anything numpy can convert)."""
        arr = np.asarray(value)
        return cls(arr.shape, check_element_dtype(arr.dtype))

    @classmethod
    def of_dataset(cls, dset: h5py.Dataset) -> ShapeType:
        """Query the descriptor of a stored dataset."""
        if dset.shape is None:
            msg = f"dataset {describe(dset.name)} has an empty dataspace"
            raise ShapeMismatchError(msg, name=dset.name)
        return cls(dset.shape, dset.dtype)

    @property
    def rank(self) -> int:
        return len(self.extents)

    @property
    def is_scalar(self) -> bool:
        return self.rank == 0

    @property
    def size(self) -> int:
        return int(np.prod(self.extents, dtype=np.int64))

    def to_space(self) -> h5py.h5s.SpaceID:
        """Return a fresh HDF5 dataspace with these extents."""
        if self.is_scalar:
            return h5py.h5s.create(h5py.h5s.SCALAR)
        return h5py.h5s.create_simple(self.extents)

    # validation against the caller's expectations

    def check_rank(self, ndim: int, name=None, parent=None) -> None:
        if ndim != self.rank:
            msg = (
                f"dataset {describe(name, parent)} has mismatching dataspace"
                f" (rank {self.rank}, requested rank {ndim})"
            )
            raise ShapeMismatchError(msg, name=name, parent=parent)

    def check_extents(self, extents: Sequence[int], name=None, parent=None) -> None:
        extents = _int_tuple(extents)
        self.check_rank(len(extents), name, parent)
        if extents != self.extents:
            msg = (
                f"dataset {describe(name, parent)} has mismatching dataspace"
                f" (extents {self.extents}, got {extents})"
            )
            raise ShapeMismatchError(msg, name=name, parent=parent)

    def check_writable_from(self, dtype, name=None, parent=None) -> None:
        """Check that values of given dtype can be stored without loss."""
        dt = check_element_dtype(dtype, name, parent)
        if not np.can_cast(dt, self.dtype, casting="safe"):
            msg = f"cannot write {dt} values to dataset {describe(name, parent)} of type {self.dtype}"
            raise TypeMismatchError(msg, name=name, parent=parent)

    def check_representable(self, arr: np.ndarray, name=None, parent=None) -> None:
        """Check that the values of `arr` can be stored without loss.

        Unlike `check_writable_from`, this looks at the actual values,
        e.g. the integer 5 fits into int32 although int64 does not.
        """
        dt = check_element_dtype(arr.dtype, name, parent)
        if np.can_cast(dt, self.dtype, casting="safe"):
            return
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            converted = arr.astype(self.dtype)
        equal_nan = dt.kind in "fc" and self.dtype.kind in "fc"
        if not np.array_equal(converted, arr, equal_nan=equal_nan):
            msg = f"cannot store values {arr} in dataset {describe(name, parent)} of type {self.dtype}"
            raise TypeMismatchError(msg, name=name, parent=parent)

    def check_readable_as(self, dtype, name=None, parent=None) -> None:
        """Check that stored values can be read as given dtype without loss."""
        dt = check_element_dtype(dtype, name, parent)
        if not np.can_cast(self.dtype, dt, casting="safe"):
            msg = f"cannot read dataset {describe(name, parent)} of type {self.dtype} as {dt}"
            raise TypeMismatchError(msg, name=name, parent=parent)


@dataclass(frozen=True)
class Window:
    """Data space extents together with a rectangular (hyperslab) selection.

    Unset selection parameters default to offset 0, stride 1, block 1 and
    the largest count that fits into the extents.
    """

    extents: Tuple[int, ...]
    offset: Optional[Tuple[int, ...]] = None
    count: Optional[Tuple[int, ...]] = None
    stride: Optional[Tuple[int, ...]] = None
    block: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        ext = _int_tuple(self.extents)
        rank = len(ext)

        def param(name: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
            val = getattr(self, name)
            val = default if val is None else _int_tuple(val)
            if len(val) != rank:
                msg = f"Window {name} {val} does not match rank {rank} of extents {ext}"
                raise ShapeMismatchError(msg)
            object.__setattr__(self, name, val)
            return val

        if any(e < 0 for e in ext):
            raise ValueError(f"Extents must be non-negative: {ext}")
        object.__setattr__(self, "extents", ext)

        offset = param("offset", (0,) * rank)
        stride = param("stride", (1,) * rank)
        block = param("block", (1,) * rank)
        if any(o < 0 for o in offset):
            raise ShapeMismatchError(f"Window offset must be non-negative: {offset}")
        if any(s < 1 for s in stride) or any(b < 1 for b in block):
            raise ShapeMismatchError("Window stride and block must be positive")

        # blocks wider than the stride only fit once
        fitting = tuple(
            min(1 if b > s else e, max(0, (e - o - b) // s + 1))
            for e, o, s, b in zip(ext, offset, stride, block)
        )
        count = param("count", fitting)
        if any(c < 0 for c in count):
            raise ShapeMismatchError(f"Window count must be non-negative: {count}")
        if any(c > 1 and b > s for c, s, b in zip(count, stride, block)):
            raise ShapeMismatchError(f"Window blocks {block} overlap (stride {stride})")
        for e, o, c, s, b in zip(ext, offset, count, stride, block):
            if c > 0 and o + (c - 1) * s + b > e:
                msg = f"Window selection exceeds extents {ext}"
                raise ShapeMismatchError(msg)

    @classmethod
    def all(cls, extents: Sequence[int]) -> Window:
        """Return a window selecting everything in a space of given extents."""
        return cls(_int_tuple(extents))

    @property
    def rank(self) -> int:
        return len(self.extents)

    @property
    def selected_shape(self) -> Tuple[int, ...]:
        """Number of selected elements per dimension."""
        return tuple(c * b for c, b in zip(self.count, self.block))  # type: ignore

    @property
    def npoints(self) -> int:
        return int(np.prod(self.selected_shape, dtype=np.int64))

    def indices(self, dim: int) -> np.ndarray:
        """Return the selected indices along one dimension."""
        o, c, s, b = (p[dim] for p in (self.offset, self.count, self.stride, self.block))  # type: ignore
        starts = o + s * np.arange(c)
        return (starts[:, None] + np.arange(b)[None, :]).ravel()

    def index(self) -> tuple:
        """Return a numpy index addressing the selection in an array of these extents."""
        if self.rank == 0:
            return ()
        return np.ix_(*(self.indices(d) for d in range(self.rank)))

    def to_space(self) -> h5py.h5s.SpaceID:
        """Return an HDF5 dataspace with these extents and this selection."""
        if self.rank == 0:
            return h5py.h5s.create(h5py.h5s.SCALAR)
        space = h5py.h5s.create_simple(self.extents)
        if self.npoints == 0:
            space.select_none()
        else:
            space.select_hyperslab(self.offset, self.count, self.stride, self.block)
        return space

    def check_matches(self, other: Window, name=None, parent=None) -> None:
        """Check that both windows select the same number of elements per dimension."""
        if self.rank != other.rank or self.selected_shape != other.selected_shape:
            msg = (
                f"windows for dataset {describe(name, parent)} do not match:"
                f" {self.selected_shape} vs. {other.selected_shape}"
            )
            raise ShapeMismatchError(msg, name=name, parent=parent)
