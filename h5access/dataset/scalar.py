"""Marshalling of fundamental values (bool, int, float, complex) to rank-0 datasets.

Writing by name never creates the dataset, it must be created explicitly
with `create_scalar` first.
"""
from __future__ import annotations

from typing import Optional

from ..errors import NotFoundError, ShapeMismatchError, describe
from ..group import Parent, parent_node
from ..policy import StoragePolicy
from .dataset import Dataset, exists_dataset
from .dataspace import ShapeType, check_element_dtype


def _expect_scalar(dset: Dataset, name: str, parent: Optional[str]) -> None:
    if not dset.shape_type().is_scalar:
        msg = f"dataset {describe(name, parent)} has non-scalar dataspace"
        raise ShapeMismatchError(msg, name=name, parent=parent)


def create_scalar(
    parent: Parent, name: str, dtype, storage: Optional[StoragePolicy] = None
) -> Dataset:
    """Create a rank-0 dataset of the given element type (compact layout by default)."""
    shape_type = ShapeType((), check_element_dtype(dtype, name))
    return Dataset(parent, name, shape_type, storage)


def write_scalar(parent: Parent, name: str, value) -> None:
    """Write a fundamental value to the existing scalar dataset `name`."""
    pname = parent_node(parent).name
    if not exists_dataset(parent, name):
        msg = f"dataset {describe(name, pname)} does not exist"
        raise NotFoundError(msg, name=name, parent=pname)
    with Dataset(parent, name) as dset:
        _expect_scalar(dset, name, pname)
        dset.write(value)


def read_scalar(parent: Parent, name: str, dtype=None):
    """Read the scalar dataset `name` and return its value as numpy scalar."""
    pname = parent_node(parent).name
    with Dataset(parent, name) as dset:
        _expect_scalar(dset, name, pname)
        return dset.read(ndim=0, dtype=dtype)[()]
