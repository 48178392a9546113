import pytest

from plistkit.node import (
    Node,
    PlistType,
    is_binary,
    new_array,
    new_bool,
    new_data,
    new_date,
    new_dict,
    new_null,
    new_real,
    new_string,
    new_uid,
    new_uint,
)


def _sample_dict():
    d = new_dict()
    d.set_dict_item("a", new_string("alpha"))
    d.set_dict_item("b", new_uint(2))
    d.set_dict_item("c", new_bool(True))
    return d


def test_constructors_set_types_and_values():
    assert new_string("x").value == "x"
    assert new_string("x").type is PlistType.STRING
    assert new_bool(1).value is True
    assert new_uint(7).value == 7
    assert new_uid(9).type is PlistType.UID
    assert new_real(1.5).value == 1.5
    assert new_data(b"\x00\x01").value == b"\x00\x01"
    assert new_null().value is None


def test_uint_range_is_enforced():
    with pytest.raises(ValueError):
        new_uint(1 << 64)
    with pytest.raises(ValueError):
        new_uint(-(1 << 63) - 1)
    with pytest.raises(ValueError):
        new_uid(-1)


def test_node_of_type_none_is_rejected():
    with pytest.raises(ValueError):
        Node(PlistType.NONE)


def test_dict_set_and_get_keeps_order():
    d = _sample_dict()
    assert len(d) == 3
    assert list(d) == ["a", "b", "c"]
    assert d.dict_item("b").value == 2
    assert d.dict_item("missing") is None


def test_dict_replace_keeps_position():
    d = _sample_dict()
    d.set_dict_item("a", new_uint(10))
    assert list(d) == ["a", "b", "c"]
    assert d.dict_item("a").value == 10
    assert len(d) == 3


def test_dict_remove_item():
    d = _sample_dict()
    removed = d.dict_item("b")
    d.remove_dict_item("b")
    assert list(d) == ["a", "c"]
    assert removed.parent is None
    with pytest.raises(KeyError):
        d.remove_dict_item("b")


def test_dict_items_and_dict_key():
    d = _sample_dict()
    pairs = [(k, v.value) for k, v in d.dict_items()]
    assert pairs == [("a", "alpha"), ("b", 2), ("c", True)]
    assert d.dict_item("c").dict_key() == "c"


def test_attaching_node_twice_is_rejected():
    d = new_dict()
    item = new_string("v")
    d.set_dict_item("k", item)
    with pytest.raises(ValueError):
        d.set_dict_item("other", item)


def test_copy_is_deep_and_independent():
    d = _sample_dict()
    inner = new_array()
    inner.append(new_string("x"))
    d.set_dict_item("list", inner)
    clone = d.copy()
    clone.dict_item("list").append(new_string("y"))
    clone.set_dict_item("a", new_string("changed"))
    assert len(d.dict_item("list")) == 1
    assert d.dict_item("a").value == "alpha"
    assert len(clone.dict_item("list")) == 2
    assert clone.dict_item("list").parent is clone


def test_array_operations():
    arr = new_array()
    arr.append(new_uint(1))
    arr.append(new_uint(3))
    arr.insert(1, new_uint(2))
    assert [n.value for n in arr] == [1, 2, 3]
    arr.set_array_item(0, new_string("first"))
    assert arr.array_item(0).value == "first"
    arr.remove_array_item(1)
    assert [n.value for n in arr] == ["first", 3]
    with pytest.raises(IndexError):
        arr.array_item(5)


def test_array_index_and_remove_from_array():
    arr = new_array()
    items = [new_uint(i) for i in range(4)]
    for item in items:
        arr.append(item)
    assert [item.array_index() for item in items] == [0, 1, 2, 3]
    items[2].remove_from_array()
    assert len(arr) == 3
    assert items[3].array_index() == 2
    with pytest.raises(TypeError):
        items[2].array_index()


def test_wrong_container_type_raises():
    with pytest.raises(TypeError):
        new_array().dict_item("a")
    with pytest.raises(TypeError):
        new_dict().append(new_uint(1))
    with pytest.raises(TypeError):
        len(new_string("x"))


def test_merge_copies_entries():
    target = new_dict()
    target.set_dict_item("a", new_uint(1))
    source = new_dict()
    source.set_dict_item("a", new_uint(5))
    source.set_dict_item("z", new_string("zed"))
    target.merge(source)
    assert list(target) == ["a", "z"]
    assert target.dict_item("a").value == 5
    assert target.dict_item("z") is not source.dict_item("z")
    with pytest.raises(TypeError):
        target.merge(new_array())


def test_access_path():
    root = new_dict()
    arr = new_array()
    leaf = new_string("leaf")
    arr.append(new_uint(0))
    arr.append(leaf)
    root.set_dict_item("items", arr)
    assert root.access_path("items", 1) is leaf
    assert root.access_path("items", 9) is None
    assert root.access_path("nope", 0) is None
    assert root.access_path() is root


def test_set_key_renames_entry():
    d = _sample_dict()
    key_node = d.children[0]
    key_node.set_key("renamed")
    assert list(d) == ["renamed", "b", "c"]
    assert d.dict_item("renamed").value == "alpha"
    assert d.dict_item("a") is None


def test_set_key_rejects_duplicate():
    d = _sample_dict()
    with pytest.raises(ValueError):
        d.children[0].set_key("b")
    assert list(d) == ["a", "b", "c"]


def test_setters_change_type_and_value():
    node = new_string("x")
    node.set_uint(42)
    assert (node.type, node.value) == (PlistType.UINT, 42)
    node.set_real(2.5)
    assert (node.type, node.value) == (PlistType.REAL, 2.5)
    node.set_data(b"abc")
    assert (node.type, node.value) == (PlistType.DATA, b"abc")
    node.set_bool(False)
    assert (node.type, node.value) == (PlistType.BOOLEAN, False)
    node.set_uid(3)
    assert (node.type, node.value) == (PlistType.UID, 3)


def test_set_scalar_clears_children():
    arr = new_array()
    child = new_uint(1)
    arr.append(child)
    arr.set_string("now text")
    assert arr.children == []
    assert child.parent is None


@pytest.mark.parametrize("sec,usec", [(10, 500000), (0, 250000), (-1, 0), (123456, 0)])
def test_date_round_trip(sec, usec):
    assert new_date(sec, usec).date_value() == (sec, usec)
    node = new_null()
    node.set_date(sec, usec)
    assert node.date_value() == (sec, usec)


def test_is_binary():
    assert is_binary(b"bplist00rest")
    assert not is_binary(b"bplist0")
    assert not is_binary(b"<?xml version")