"""Storage layout policies for dataset creation.

A policy only decides how the elements are physically laid out in the file,
it never influences the logical shape or the addressing of a dataset.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple, Union

import h5py
import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated, Literal

from .errors import ShapeMismatchError

if TYPE_CHECKING:
    from .dataset.dataspace import ShapeType

_LAYOUT_NAMES = {
    h5py.h5d.COMPACT: "compact",
    h5py.h5d.CONTIGUOUS: "contiguous",
    h5py.h5d.CHUNKED: "chunked",
}


def layout_name(dcpl: h5py.h5p.PropDCID) -> str:
    """Return the name of the layout configured in a dataset creation property list."""
    return _LAYOUT_NAMES.get(dcpl.get_layout(), "unknown")


class StoragePolicy(BaseModel):
    """Common base of the storage layout policies."""

    model_config = ConfigDict(extra="forbid")

    fill_value: Optional[Union[bool, int, float]] = None
    """Value of elements that were never written (HDF5 default is zero)."""

    def _configure(self, dcpl: h5py.h5p.PropDCID, shape_type: ShapeType):
        raise NotImplementedError

    def make_dcpl(self, shape_type: ShapeType) -> h5py.h5p.PropDCID:
        """Return a dataset creation property list for a dataset of given shape."""
        dcpl = h5py.h5p.create(h5py.h5p.DATASET_CREATE)
        self._configure(dcpl, shape_type)
        if self.fill_value is not None:
            dcpl.set_fill_value(np.array(self.fill_value, dtype=shape_type.dtype))
        return dcpl


class Compact(StoragePolicy):
    """Store the raw data inside the object header.

    Meant for small, frequently accessed values (limited to 64 KiB by HDF5).
    """

    layout: Literal["compact"] = "compact"

    def _configure(self, dcpl, shape_type):
        dcpl.set_layout(h5py.h5d.COMPACT)


class Contiguous(StoragePolicy):
    """Store the raw data as one contiguous block in the file."""

    layout: Literal["contiguous"] = "contiguous"

    def _configure(self, dcpl, shape_type):
        dcpl.set_layout(h5py.h5d.CONTIGUOUS)


class Chunked(StoragePolicy):
    """Store the raw data in chunks of fixed shape, optionally filtered."""

    layout: Literal["chunked"] = "chunked"

    chunks: Tuple[Annotated[int, Field(ge=1)], ...]
    """Chunk extents, one per dimension of the dataset."""

    deflate: Optional[Annotated[int, Field(ge=0, le=9)]] = None
    """Gzip compression level, no compression if unset."""

    shuffle: bool = False
    """Enable the byte shuffle filter (applied before compression)."""

    fletcher32: bool = False
    """Enable the Fletcher32 checksum filter."""

    def _configure(self, dcpl, shape_type):
        if shape_type.is_scalar:
            raise ShapeMismatchError("chunked layout is not possible for scalars")
        if len(self.chunks) != shape_type.rank:
            msg = f"chunk rank {len(self.chunks)} != dataset rank {shape_type.rank}"
            raise ShapeMismatchError(msg)
        for c, e in zip(self.chunks, shape_type.extents):
            if c > e:
                msg = f"chunks {self.chunks} exceed dataset extents {shape_type.extents}"
                raise ShapeMismatchError(msg)

        dcpl.set_chunk(self.chunks)
        # filter pipeline order is significant
        if self.shuffle:
            dcpl.set_shuffle()
        if self.deflate is not None:
            dcpl.set_deflate(self.deflate)
        if self.fletcher32:
            dcpl.set_fletcher32()


AnyStoragePolicy = Annotated[Union[Compact, Contiguous, Chunked], Field(discriminator="layout")]
"""Any concrete storage policy, selected by its `layout` name."""

__all__ = [
    "StoragePolicy",
    "Compact",
    "Contiguous",
    "Chunked",
    "AnyStoragePolicy",
    "layout_name",
]
