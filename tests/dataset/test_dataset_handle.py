import h5py
import numpy as np
import pytest

from h5access import (
    AlreadyExistsError,
    Chunked,
    Compact,
    Contiguous,
    Dataset,
    Group,
    InvalidStateError,
    NotFoundError,
    ResourceError,
    ShapeMismatchError,
    ShapeType,
    TypeMismatchError,
    Window,
    exists,
    exists_dataset,
)


def test_create_open(run1):
    with Dataset(run1, "grid", ShapeType((3, 4), float)) as dset:
        assert dset.valid
        assert dset.name == "/run1/grid"
        assert dset.shape_type() == ShapeType((3, 4), float)
        assert dset.dtype == np.dtype(float)
    assert exists_dataset(run1, "grid")

    with Dataset(run1, "grid") as dset:
        assert dset.shape_type().extents == (3, 4)

    # missing intermediate groups are created
    Dataset(run1, "a/b/vals", ShapeType((2,), int)).close()
    assert exists_dataset(run1, "a/b/vals")
    with Group(run1, "a") as a:
        assert exists_dataset(a, "b/vals")


@pytest.mark.parametrize(
    "storage", [None, Compact(), Contiguous(), Chunked(chunks=(2, 2), deflate=4)]
)
def test_create_existing_fails(run1, storage):
    Dataset(run1, "x", ShapeType((4, 4), np.int32)).close()
    with pytest.raises(AlreadyExistsError) as e:
        Dataset(run1, "x", ShapeType((4, 4), np.int32), storage)
    assert str(e.value) == 'dataset "x" of object "/run1" does already exist'

    # the existing dataset is left untouched
    with Dataset(run1, "x") as dset:
        assert dset.shape_type() == ShapeType((4, 4), np.int32)
        assert dset.layout == "contiguous"

    # a group of that name blocks creation as well
    Group(run1, "g").close()
    with pytest.raises(AlreadyExistsError):
        Dataset(run1, "g", ShapeType((1,), float), storage)


def test_create_over_other_links_fails(run1):
    run1._node["t"] = np.dtype("i4")  # committed datatype
    run1._node["broken"] = h5py.SoftLink("/nowhere")
    for name in ["t", "broken"]:
        assert not exists(run1, name)
        with pytest.raises(AlreadyExistsError) as e:
            Dataset(run1, name, ShapeType((2,), float))
        assert str(e.value) == f'dataset "{name}" of object "/run1" does already exist'
    # nothing was replaced
    assert isinstance(run1._node["t"], h5py.Datatype)
    assert run1._node.get("broken", getlink=True).path == "/nowhere"


def test_open_missing_fails(run1):
    with pytest.raises(NotFoundError) as e:
        Dataset(run1, "missing")
    assert str(e.value) == 'dataset "missing" of object "/run1" does not exist'
    assert e.value.name == "missing"
    assert not exists(run1, "missing")

    Group(run1, "grp").close()
    with pytest.raises(NotFoundError):
        Dataset(run1, "grp")  # a group is not a dataset
    # also usable as KeyError
    with pytest.raises(KeyError):
        Dataset(run1, "missing")


def test_handle_states(run1):
    dset = Dataset()
    assert not dset.valid
    with pytest.raises(InvalidStateError):
        dset.shape_type()
    with pytest.raises(InvalidStateError):
        dset.read()
    with pytest.raises(InvalidStateError):
        dset.write([1.0])

    dset.create(run1, "d", ShapeType((1,), float))
    with pytest.raises(ResourceError):
        dset.open(run1, "d")  # already bound
    with pytest.raises(ResourceError):
        dset.create(run1, "e", ShapeType((1,), float))
    dset.close()
    assert not exists(run1, "e")


def test_layouts(run1):
    Dataset(run1, "scalar", ShapeType((), float)).close()
    Dataset(run1, "array", ShapeType((10,), float)).close()
    Dataset(run1, "compact", ShapeType((3,), float), Compact()).close()
    Dataset(run1, "chunked", ShapeType((10, 10), float), Chunked(chunks=(5, 2))).close()

    expected = {
        "scalar": "compact",
        "array": "contiguous",
        "compact": "compact",
        "chunked": "chunked",
    }
    for name, layout in expected.items():
        with Dataset(run1, name) as dset:
            assert dset.layout == layout


def test_chunked_filters(run1):
    policy = Chunked(chunks=(4,), deflate=6, shuffle=True, fletcher32=True)
    vals = np.arange(16, dtype=np.int64)
    with Dataset(run1, "filtered", ShapeType((16,), np.int64), policy) as dset:
        dset.write(vals)
        assert dset._node.compression == "gzip"
        assert dset._node.shuffle
        assert dset._node.fletcher32
        assert dset._node.chunks == (4,)
        assert np.array_equal(dset.read(), vals)


def test_fill_value(run1):
    with Dataset(run1, "filled", ShapeType((3,), float), Contiguous(fill_value=-1.5)) as d:
        assert d.read().tolist() == [-1.5, -1.5, -1.5]


def test_write_read(run1):
    vals = np.arange(12.0).reshape(3, 4)
    with Dataset(run1, "grid", ShapeType((3, 4), float)) as dset:
        dset.write(vals)
        out = dset.read()
        assert out.dtype == np.dtype(float)
        assert np.array_equal(out, vals)
        # lossless conversions in both directions
        dset.write(np.ones((3, 4), dtype=np.float32))
        assert dset.read(dtype=np.complex128)[0, 0] == 1 + 0j
        # non-contiguous source arrays
        dset.write(np.arange(12.0).reshape(4, 3).T)
        assert dset.read()[0].tolist() == [0.0, 3.0, 6.0, 9.0]


def test_write_read_mismatch(run1):
    with Dataset(run1, "grid", ShapeType((3, 4), np.int32)) as dset:
        with pytest.raises(ShapeMismatchError):
            dset.write(np.zeros((4, 3), dtype=np.int32))
        with pytest.raises(ShapeMismatchError):
            dset.write(np.zeros(12, dtype=np.int32))
        with pytest.raises(TypeMismatchError):
            dset.write(np.zeros((3, 4), dtype=np.float64))
        with pytest.raises(TypeMismatchError):
            dset.write(np.zeros((3, 4), dtype=np.int64))
        with pytest.raises(ShapeMismatchError):
            dset.read(ndim=1)
        with pytest.raises(TypeMismatchError):
            dset.read(dtype=np.int16)
        with pytest.raises(TypeMismatchError):
            dset.read(dtype=str)


def test_empty_dataset(run1):
    with Dataset(run1, "empty", ShapeType((0, 3), float)) as dset:
        dset.write(np.zeros((0, 3)))
        assert dset.read().shape == (0, 3)


def test_windowed_write_read(run1):
    with Dataset(run1, "grid", ShapeType((4, 6), np.int64)) as dset:
        dset.write(np.zeros((4, 6), dtype=np.int64))

        # write a 2x3 block into rows 1-2 and columns 0, 2, 4
        block = np.array([[1, 2, 3], [4, 5, 6]])
        file_win = Window((4, 6), offset=(1, 0), count=(2, 3), stride=(1, 2))
        dset.write(block, Window.all(block.shape), file_win)
        full = dset.read()
        assert full[1].tolist() == [1, 0, 2, 0, 3, 0]
        assert full[2].tolist() == [4, 0, 5, 0, 6, 0]
        assert full[0].sum() == 0 and full[3].sum() == 0

        # read the same selection into the center of a larger buffer
        mem_win = Window((4, 5), offset=(1, 1), count=(2, 3))
        out = dset.read(mem_window=mem_win, file_window=file_win)
        assert out.shape == (4, 5)
        assert out[1:3, 1:4].tolist() == block.tolist()
        assert out.sum() == block.sum()  # rest is zero


def test_windowed_mismatch(run1):
    with Dataset(run1, "grid", ShapeType((4, 6), float)) as dset:
        arr = np.zeros((2, 3))
        with pytest.raises(ValueError):
            dset.write(arr, mem_window=Window.all((2, 3)))  # need both windows
        with pytest.raises(ShapeMismatchError):
            # file window extents differ from stored extents
            dset.write(arr, Window.all((2, 3)), Window((4, 5), count=(2, 3)))
        with pytest.raises(ShapeMismatchError):
            # memory window extents differ from array shape
            dset.write(arr, Window.all((3, 2)), Window((4, 6), count=(3, 2)))
        with pytest.raises(ShapeMismatchError):
            # selections of different shape
            dset.write(arr, Window.all((2, 3)), Window((4, 6), count=(3, 2)))
        with pytest.raises(ShapeMismatchError):
            dset.read(mem_window=Window.all((6,)), file_window=Window((4, 6)))
