"""Handle to an HDF5 file."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union, get_args

import h5py
from typing_extensions import Literal

from .errors import ResourceError
from .handle import Handle

logger = logging.getLogger(__name__)

OpenMode = Literal["r", "r+", "a", "w", "w-", "x"]
"""Open modes with the same semantics as for h5py.File."""

_OPEN_MODES = list(get_args(OpenMode))


class File(Handle):
    """Owning handle of an open HDF5 file.

    The file acts as the parent of top-level groups and datasets,
    `root()` returns a separate handle to the root group.
    """

    def __init__(
        self, path: Optional[Union[str, Path]] = None, mode: OpenMode = "r", **kwargs
    ):
        super().__init__()
        if path is not None:
            self.open(path, mode, **kwargs)

    def open(self, path: Union[str, Path], mode: OpenMode = "r", **kwargs) -> None:
        """Open the file at `path` (keyword arguments are passed to h5py.File)."""
        if mode not in _OPEN_MODES:
            raise ValueError(f"Unknown file open mode: {mode}")
        if self._node is not None:
            raise ResourceError("File object is already in use", name=str(path))
        try:
            f = h5py.File(Path(path), mode, **kwargs)
        except (OSError, ValueError) as e:
            raise ResourceError(f'opening file "{path}"', name=str(path)) from e
        self._bind(f)

    def _release(self, node) -> None:
        node.close()

    @property
    def filename(self) -> Optional[str]:
        return self._node.filename if self._node is not None else None

    @property
    def mode(self) -> Literal["r", "r+"]:
        self._guard_valid("query the mode of")
        return self._node.mode

    def flush(self) -> None:
        self._guard_valid("flush")
        self._node.flush()

    def root(self):
        """Return a new group handle of the root group."""
        from .group import Group

        return Group(self, "/")

    def __repr__(self):
        if not self.valid:
            return "<File (closed)>"
        return f'<File "{self.filename}" (mode {self.mode})>'
