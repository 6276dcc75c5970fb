"""Datasets: handles, shape/type descriptors and marshalling of values."""

from .array import create_dataset, read_dataset, write_dataset
from .dataset import Dataset, exists_dataset
from .dataspace import ShapeType, Window
from .scalar import create_scalar, read_scalar, write_scalar

__all__ = [
    "Dataset",
    "ShapeType",
    "Window",
    "exists_dataset",
    "create_dataset",
    "write_dataset",
    "read_dataset",
    "create_scalar",
    "write_scalar",
    "read_scalar",
]
