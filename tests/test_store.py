import h5py
import numpy as np
import pytest

from h5access import NodeKind, ResourceError
from h5access.store import exists, iterate_children, link_exists, node_kind, node_path


@pytest.fixture
def h5file(tmp_h5_path):
    with h5py.File(tmp_h5_path, "w") as f:
        f.create_group("b_group")
        f.create_group("a_group/nested")
        f["c_data"] = np.arange(3)
        f["d_type"] = np.dtype("i4")  # committed datatype
        f["e_soft"] = h5py.SoftLink("/nowhere")
        f["f_link"] = h5py.SoftLink("/b_group")
        yield f


def test_node_kind(h5file):
    assert node_kind(h5file, "a_group") == NodeKind.group
    assert node_kind(h5file, "a_group/nested") == NodeKind.group
    assert node_kind(h5file, "c_data") == NodeKind.dataset
    assert node_kind(h5file, "f_link") == NodeKind.group
    assert node_kind(h5file, "d_type") is None
    assert node_kind(h5file, "e_soft") is None
    assert node_kind(h5file, "missing") is None
    assert node_kind(h5file, "missing/deeper") is None


def test_exists(h5file):
    assert exists(h5file, "c_data")
    assert exists(h5file, "c_data", NodeKind.dataset)
    assert not exists(h5file, "c_data", NodeKind.group)
    assert not exists(h5file, "e_soft")
    assert not exists(h5file, "missing", NodeKind.group)


def test_link_exists(h5file):
    # any link counts, even if it does not resolve to a group or dataset
    for name in ["a_group", "a_group/nested", "c_data", "d_type", "e_soft", "f_link"]:
        assert link_exists(h5file, name)
    assert not link_exists(h5file, "missing")
    assert not link_exists(h5file, "missing/deeper")
    assert not link_exists(h5file, "e_soft/deeper")


def test_iterate_children(h5file):
    seen = []

    def record(name, kind):
        seen.append((name, kind))
        return False

    assert iterate_children(h5file, record) is None
    # name order, nodes that are neither group nor dataset are skipped
    assert seen == [
        ("a_group", NodeKind.group),
        ("b_group", NodeKind.group),
        ("c_data", NodeKind.dataset),
        ("f_link", NodeKind.group),
    ]

    def is_group(_, kind):
        return kind == NodeKind.group

    assert iterate_children(h5file, is_group) == ("a_group", 1)
    assert iterate_children(h5file, is_group, start=1) == ("b_group", 2)
    assert iterate_children(h5file, is_group, start=2) == ("f_link", 6)
    assert iterate_children(h5file, is_group, start=6) is None
    assert iterate_children(h5file, is_group, start=100) is None


def test_iterate_children_closed(h5file):
    grp = h5file["a_group"]
    h5file.close()
    with pytest.raises(ResourceError):
        iterate_children(grp, lambda *_: True)


def test_node_path(h5file):
    assert node_path(h5file) == "/"
    assert node_path(h5file["a_group/nested"]) == "/a_group/nested"
    grp = h5file["a_group"]
    h5file.close()
    assert node_path(grp) is None
