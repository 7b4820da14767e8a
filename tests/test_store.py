import pytest

from blconf import store
from blconf.store import BlconfError, MemoryStore
from blconf.values import Value, ValueType


@pytest.fixture(autouse=True)
def clean_state():
    while store.is_initialized():
        store.shutdown()
    yield
    while store.is_initialized():
        store.shutdown()


@pytest.fixture
def mem():
    return MemoryStore()


def test_set_and_lookup_round_trip(mem):
    mem.set("panel", "/size", Value(ValueType.INT, 42))
    assert mem.lookup("panel", "/size") == Value(ValueType.INT, 42)


def test_lookup_missing_raises(mem):
    with pytest.raises(BlconfError) as info:
        mem.lookup("panel", "/missing")
    assert info.value.code == "property_not_found"


def test_invalid_property_name(mem):
    with pytest.raises(BlconfError):
        mem.set("panel", "size", Value(ValueType.INT, 1))
    with pytest.raises(BlconfError):
        mem.lookup("panel", "/a//b")


def test_set_requires_value(mem):
    with pytest.raises(TypeError):
        mem.set("panel", "/size", 3)


def test_locked_property_cannot_change(mem):
    mem.set("panel", "/size", Value(ValueType.INT, 1))
    mem.lock("panel", "/size")
    assert mem.is_locked("panel", "/size")
    assert not mem.is_locked("panel", "/other")
    with pytest.raises(BlconfError):
        mem.set("panel", "/size", Value(ValueType.INT, 2))
    with pytest.raises(BlconfError):
        mem.reset("panel", "/size", False)
    assert mem.lookup("panel", "/size").data == 1


def test_reset_non_recursive(mem):
    mem.set("c", "/a", Value(ValueType.INT, 1))
    mem.set("c", "/a/b", Value(ValueType.INT, 2))
    mem.reset("c", "/a", False)
    assert set(mem.get_all("c", "/")) == {"/a/b"}


def test_reset_recursive(mem):
    mem.set("c", "/a", Value(ValueType.INT, 1))
    mem.set("c", "/a/b", Value(ValueType.INT, 2))
    mem.set("c", "/ab", Value(ValueType.INT, 3))
    mem.reset("c", "/a", True)
    assert set(mem.get_all("c", "/")) == {"/ab"}


def test_reset_root_removes_channel(mem):
    mem.set("c", "/a", Value(ValueType.INT, 1))
    mem.reset("c", "/", True)
    assert mem.list_channels() == []


def test_get_all_under_base(mem):
    mem.set("c", "/x", Value(ValueType.STRING, "v"))
    mem.set("c", "/x/y", Value(ValueType.BOOLEAN, True))
    mem.set("c", "/xy", Value(ValueType.BOOLEAN, False))
    result = mem.get_all("c", "/x")
    assert set(result) == {"/x", "/x/y"}
    assert result["/x"] == Value(ValueType.STRING, "v")


def test_get_all_unknown_channel(mem):
    with pytest.raises(BlconfError):
        mem.get_all("nope", "/")


def test_list_channels_sorted(mem):
    mem.set("zeta", "/a", Value(ValueType.INT, 1))
    mem.set("alpha", "/a", Value(ValueType.INT, 1))
    assert mem.list_channels() == ["alpha", "zeta"]


def test_callbacks_on_change_and_removal(mem):
    seen = []

    def callback(channel, prop, value):
        seen.append((channel, prop, value))

    mem.connect(callback)
    mem.set("c", "/a", Value(ValueType.INT, 5))
    mem.reset("c", "/a", False)
    mem.disconnect(callback)
    mem.set("c", "/a", Value(ValueType.INT, 6))
    assert seen == [("c", "/a", Value(ValueType.INT, 5)), ("c", "/a", None)]


def test_disconnect_unknown_raises(mem):
    with pytest.raises(ValueError):
        mem.disconnect(lambda *args: None)


def test_get_store_before_init():
    assert not store.is_initialized()
    with pytest.raises(BlconfError):
        store.get_store()


def test_init_refcounting(mem):
    assert store.init(mem) is mem
    assert store.init() is mem
    store.shutdown()
    assert store.is_initialized()
    assert store.get_store() is mem
    store.shutdown()
    assert not store.is_initialized()


def test_init_default_store_and_list_channels():
    active = store.init()
    active.set("desktop", "/bg", Value(ValueType.STRING, "blue"))
    assert store.list_channels() == ["desktop"]


def test_shutdown_without_init_is_harmless():
    store.shutdown()
    assert not store.is_initialized()


def test_named_struct_register_and_lookup():
    store.named_struct_register("point", [ValueType.INT, ValueType.INT])
    assert store.named_struct_lookup("point") == (ValueType.INT, ValueType.INT)
    assert store.named_struct_lookup("missing") is None


def test_named_struct_duplicate():
    store.named_struct_register("pair", [ValueType.DOUBLE])
    with pytest.raises(BlconfError):
        store.named_struct_register("pair", [ValueType.INT])
    assert store.named_struct_lookup("pair") == (ValueType.DOUBLE,)


def test_named_struct_invalid_arguments():
    with pytest.raises(ValueError):
        store.named_struct_register("", [ValueType.INT])
    with pytest.raises(ValueError):
        store.named_struct_register("empty", [])
    with pytest.raises(TypeError):
        store.named_struct_register("bad", ["int"])


def test_named_structs_cleared_on_shutdown():
    store.init()
    store.named_struct_register("gone", [ValueType.INT])
    store.shutdown()
    assert store.named_struct_lookup("gone") is None