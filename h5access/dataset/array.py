"""Marshalling of N-dimensional numpy arrays to datasets addressed by name."""
from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from ..errors import NotFoundError, describe
from ..group import Parent, parent_node
from ..policy import StoragePolicy
from .dataset import Dataset, exists_dataset
from .dataspace import ShapeType, Window, check_element_dtype


def create_dataset(
    parent: Parent,
    name: str,
    like: Union[np.ndarray, Sequence[int]],
    dtype=None,
    storage: Optional[StoragePolicy] = None,
) -> Dataset:
    """Create a dataset with the shape and element type of an array.

    Only the layout is taken from `like`, no values are written. If `like` is
    a tuple, it is taken as the extents, with element type `dtype`
    (float64 if unset).

    Rank-0 datasets use the compact storage policy by default,
    all others the contiguous one (see `h5access.config`).
    """
    if isinstance(like, tuple):
        extents, default_dtype = like, np.dtype(float)
    else:
        arr = np.asarray(like)
        extents, default_dtype = arr.shape, arr.dtype
    elem_type = check_element_dtype(default_dtype if dtype is None else dtype, name)
    return Dataset(parent, name, ShapeType(extents, elem_type), storage)


def write_dataset(
    parent: Parent,
    name: str,
    value,
    mem_window: Optional[Window] = None,
    file_window: Optional[Window] = None,
) -> None:
    """Write an array to the existing dataset `name` in `parent`.

    The dataset is never created implicitly, see `create_dataset`.
    """
    pname = parent_node(parent).name
    if not exists_dataset(parent, name):
        msg = f"dataset {describe(name, pname)} does not exist"
        raise NotFoundError(msg, name=name, parent=pname)
    with Dataset(parent, name) as dset:
        dset.write(value, mem_window, file_window)


def read_dataset(
    parent: Parent,
    name: str,
    ndim: Optional[int] = None,
    dtype=None,
    mem_window: Optional[Window] = None,
    file_window: Optional[Window] = None,
) -> np.ndarray:
    """Read the dataset `name` in `parent` into a new array.

    See `Dataset.read` for the meaning of the optional arguments.
    """
    with Dataset(parent, name) as dset:
        return dset.read(ndim, dtype, mem_window, file_window)
