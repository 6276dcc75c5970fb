import secrets
import shutil
from pathlib import Path

import pytest

from h5access import File, Group, config


@pytest.fixture(scope="session")
def ds_dir(tmpdir_factory):
    """Create a fresh temporary directory for files created in the tests."""
    return tmpdir_factory.mktemp("h5access_tests")


@pytest.fixture
def tmp_h5_path_factory(ds_dir):
    """Return a file name generator to be used for creating HDF5 files.

    All files will be cleaned up after completing the test.
    """
    names = []

    def fresh_name() -> Path:
        name = secrets.token_hex(4)
        names.append(name)
        return Path(ds_dir / f"{name}.h5")

    yield fresh_name

    # clean up
    for name in names:
        for path in Path(ds_dir).glob(f"{name}*"):
            if path.is_file() or path.is_symlink():
                path.unlink()
            elif path.is_dir():
                shutil.rmtree(path)


@pytest.fixture
def tmp_h5_path(tmp_h5_path_factory):
    """Generate a file name to be used for creating a HDF5 file."""
    return tmp_h5_path_factory()


@pytest.fixture
def fresh_file(tmp_h5_path):
    """Return a fresh writable file, closed after the test."""
    with File(tmp_h5_path, "w") as f:
        yield f


@pytest.fixture
def run1(fresh_file):
    """Return the (empty) group /run1 of a fresh file."""
    with Group(fresh_file, "run1") as g:
        yield g


@pytest.fixture
def default_settings():
    """Restore the default settings after the test."""
    yield config.reset()
    config.reset()


@pytest.fixture(scope="session")
def memory_file():
    """Return a factory of files that only live in memory.

    Usable in hypothesis tests, which do not work with function-scoped fixtures.
    """

    def open_file(mode: str = "w") -> File:
        name = f"{secrets.token_hex(4)}.h5"
        return File(name, mode, driver="core", backing_store=False)

    return open_file
