"""Typed, resource-safe access to HDF5 groups and datasets.

The package wraps [h5py](https://docs.h5py.org) with a small set of owning
handles and marshalling functions:

| h5access     | h5py         |
| ------------ | ------------ |
| `File`       | [h5py.File](https://docs.h5py.org/en/latest/high/file.html) |
| `Group`      | [h5py.Group](https://docs.h5py.org/en/latest/high/group.html) |
| `Dataset`    | [h5py.Dataset](https://docs.h5py.org/en/latest/high/dataset.html) |

Datasets are created explicitly and exactly once. Afterwards their rank,
extents and element type are fixed, and every read and write is checked
against them. Nothing is reshaped or converted with loss of precision.

## Getting Started

```python
import numpy as np
from h5access import File, Group, Window, create_dataset, create_scalar
from h5access import read_dataset, read_scalar, write_dataset, write_scalar

with File("run.h5", "w") as f, Group(f, "run1") as run:
    create_scalar(run, "temperature", float).close()
    write_scalar(run, "temperature", 310.5)

    grid = np.arange(12.0).reshape(3, 4)
    create_dataset(run, "grid", grid).close()
    write_dataset(run, "grid", grid)
    assert read_dataset(run, "grid", ndim=2).shape == (3, 4)

    for dset in run.datasets():
        with dset:
            print(dset.name, dset.shape_type())
```

## Threads

Handles are not safe to share between threads without external locking,
opening and closing them changes reference counts inside the HDF5 library.
"""

from .dataset import (
    Dataset,
    ShapeType,
    Window,
    create_dataset,
    create_scalar,
    exists_dataset,
    read_dataset,
    read_scalar,
    write_dataset,
    write_scalar,
)
from .errors import (
    AlreadyExistsError,
    H5AccessError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    ResourceError,
    ShapeMismatchError,
    TypeMismatchError,
    UnsupportedOperationError,
)
from .file import File
from .group import Container, Group, GroupIterator, exists, exists_group
from .policy import Chunked, Compact, Contiguous, StoragePolicy
from .store import NodeKind

__all__ = [
    "File",
    "Group",
    "Dataset",
    "GroupIterator",
    "Container",
    "NodeKind",
    "ShapeType",
    "Window",
    "StoragePolicy",
    "Compact",
    "Contiguous",
    "Chunked",
    "exists",
    "exists_group",
    "exists_dataset",
    "create_dataset",
    "write_dataset",
    "read_dataset",
    "create_scalar",
    "write_scalar",
    "read_scalar",
    "H5AccessError",
    "ResourceError",
    "AlreadyExistsError",
    "NotFoundError",
    "ShapeMismatchError",
    "TypeMismatchError",
    "InvalidStateError",
    "OutOfRangeError",
    "UnsupportedOperationError",
]
