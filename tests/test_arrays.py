import pytest

from blconf import store
from blconf.arrays import (
    get_array,
    get_arrayv,
    get_string_list,
    set_array,
    set_arrayv,
    set_string_list,
)
from blconf.channel import new_channel
from blconf.store import BlconfError, MemoryStore
from blconf.values import Value, ValueType


@pytest.fixture
def memstore():
    backing = store.init(MemoryStore())
    yield backing
    store.shutdown()


@pytest.fixture
def channel(memstore):
    chan = new_channel("test")
    yield chan
    chan.close()


def test_arrayv_round_trip(channel):
    values = [Value(ValueType.INT, -3), Value(ValueType.STRING, "abc"), Value(ValueType.BOOLEAN, True)]
    set_arrayv(channel, "/list", values)
    assert get_arrayv(channel, "/list") == values


def test_get_arrayv_missing_returns_none(channel):
    assert get_arrayv(channel, "/missing") is None


def test_get_arrayv_non_array_returns_none(channel):
    channel.set_int("/number", 4)
    assert get_arrayv(channel, "/number") is None


def test_get_arrayv_empty_array_returns_none(channel):
    set_arrayv(channel, "/empty", [])
    assert channel.has_property("/empty")
    assert get_arrayv(channel, "/empty") is None


def test_set_arrayv_widens_16bit(channel):
    set_arrayv(channel, "/w", [Value(ValueType.UINT16, 5), Value(ValueType.INT16, -7)])
    assert get_arrayv(channel, "/w") == [Value(ValueType.UINT, 5), Value(ValueType.INT, -7)]


def test_set_arrayv_locked_raises(memstore, channel):
    memstore.lock("test", "/locked")
    with pytest.raises(BlconfError):
        set_arrayv(channel, "/locked", [Value(ValueType.INT, 1)])


def test_array_round_trip_mixed_types(channel):
    items = [
        (ValueType.UCHAR, 200),
        (ValueType.CHAR, -5),
        (ValueType.UINT, 7),
        (ValueType.INT, -9),
        (ValueType.UINT64, 2**40),
        (ValueType.INT64, -(2**40)),
        (ValueType.FLOAT, 1.5),
        (ValueType.DOUBLE, 2.25),
        (ValueType.BOOLEAN, False),
        (ValueType.STRING, "hello"),
        (ValueType.STRV, ("a", "b")),
    ]
    set_array(channel, "/mixed", items)
    types = [t for t, _ in items]
    assert get_array(channel, "/mixed", types) == tuple(d for _, d in items)


def test_array_16bit_round_trip(channel):
    set_array(channel, "/s", [(ValueType.UINT16, 65535), (ValueType.INT16, -32768)])
    stored = get_arrayv(channel, "/s")
    assert [v.type for v in stored] == [ValueType.UINT, ValueType.INT]
    assert get_array(channel, "/s", [ValueType.UINT16, ValueType.INT16]) == (65535, -32768)


def test_get_array_too_many_types(channel):
    set_array(channel, "/a", [(ValueType.INT, 1)])
    with pytest.raises(ValueError):
        get_array(channel, "/a", [ValueType.INT, ValueType.INT])


def test_get_array_too_few_types(channel):
    set_array(channel, "/a", [(ValueType.INT, 1), (ValueType.INT, 2)])
    with pytest.raises(ValueError):
        get_array(channel, "/a", [ValueType.INT])


def test_get_array_type_mismatch(channel):
    set_array(channel, "/a", [(ValueType.INT, 1)])
    with pytest.raises(TypeError):
        get_array(channel, "/a", [ValueType.STRING])


def test_get_array_missing_returns_none(channel):
    assert get_array(channel, "/nothing", [ValueType.INT]) is None


def test_set_array_empty_raises(channel):
    with pytest.raises(ValueError):
        set_array(channel, "/a", [])
    assert not channel.has_property("/a")


def test_set_array_unsupported_type_raises(channel):
    with pytest.raises(ValueError):
        set_array(channel, "/a", [(ValueType.ARRAY, [])])
    assert not channel.has_property("/a")


def test_string_list_round_trip(channel):
    set_string_list(channel, "/names", ["one", "two", "three"])
    assert get_string_list(channel, "/names") == ["one", "two", "three"]


def test_string_list_with_property_base(memstore):
    with new_channel("test", "/base") as based:
        set_string_list(based, "/names", ["x"])
    with new_channel("test") as plain:
        assert get_string_list(plain, "/base/names") == ["x"]


def test_string_list_mixed_array_returns_none(channel):
    set_arrayv(channel, "/m", [Value(ValueType.STRING, "a"), Value(ValueType.INT, 2)])
    assert get_string_list(channel, "/m") is None


def test_string_list_missing_returns_none(channel):
    assert get_string_list(channel, "/none") is None


def test_set_string_list_empty_raises(channel):
    with pytest.raises(ValueError):
        set_string_list(channel, "/names", [])
    assert not channel.has_property("/names")


def test_set_string_list_rejects_non_strings(channel):
    with pytest.raises(TypeError):
        set_string_list(channel, "/names", ["a", 3])
    assert get_string_list(channel, "/names") is None