"""Struct properties: fixed sequences of typed members stored as arrays."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from blconf import store as blstore
from blconf.arrays import get_arrayv, set_arrayv
from blconf.channel import Channel
from blconf.values import Value, ValueType

_STRUCT_TYPES = frozenset(
    {
        ValueType.STRING,
        ValueType.UCHAR,
        ValueType.CHAR,
        ValueType.UINT,
        ValueType.INT,
        ValueType.UINT64,
        ValueType.INT64,
        ValueType.FLOAT,
        ValueType.DOUBLE,
        ValueType.BOOLEAN,
        ValueType.UINT16,
        ValueType.INT16,
    }
)

# 16-bit members are kept in the store as their 32-bit counterparts.
_STORED_AS = {
    ValueType.UINT16: ValueType.UINT,
    ValueType.INT16: ValueType.INT,
}


def _member_types(member_types: Iterable[ValueType]) -> list[ValueType]:
    types = list(member_types)
    if not types:
        raise ValueError("a struct needs at least one member")
    for member_type in types:
        if member_type not in _STRUCT_TYPES:
            name = getattr(member_type, "value", member_type)
            raise ValueError(f"Unable to handle value type {name} as a struct member")
    return types


def _narrow(number: int, value_type: ValueType) -> int:
    number &= 0xFFFF
    if value_type is ValueType.INT16 and number >= 0x8000:
        number -= 0x10000
    return number


def get_struct(
    channel: Channel, prop: str, member_types: Sequence[ValueType]
) -> tuple[Any, ...] | None:
    """The members of the struct stored under prop, as plain data.

    Returns None if there is no non-empty array under prop. Raises ValueError
    when the member count does not match or a member type is unsupported, and
    TypeError when a stored member is not of the requested type.
    """
    types = _member_types(member_types)
    members = get_arrayv(channel, prop)
    if members is None:
        return None
    if len(members) != len(types):
        raise ValueError(
            "Returned value array does not match the number of struct "
            f"members ({len(members)} != {len(types)})"
        )
    result = []
    for index, (member_type, member) in enumerate(zip(types, members)):
        expected = _STORED_AS.get(member_type, member_type)
        if member.type is not expected:
            raise TypeError(
                f"Returned value type {member.type.value} does not match struct "
                f"member type {member_type.value} at member {index}"
            )
        if member_type in _STORED_AS:
            result.append(_narrow(member.data, member_type))
        else:
            result.append(member.data)
    return tuple(result)


def set_struct(
    channel: Channel,
    prop: str,
    member_types: Sequence[ValueType],
    values: Iterable[Any],
) -> None:
    """Store the struct members values, typed by member_types, under prop."""
    types = _member_types(member_types)
    data = list(values)
    if len(data) != len(types):
        raise ValueError(
            f"struct has {len(types)} members but {len(data)} values were given"
        )
    set_arrayv(
        channel,
        prop,
        [Value(member_type, item) for member_type, item in zip(types, data)],
    )


def _lookup_named(struct_name: str) -> tuple[ValueType, ...]:
    types = blstore.named_struct_lookup(struct_name)
    if types is None:
        raise KeyError(f"The struct '{struct_name}' is not registered")
    return types


def get_named_struct(channel: Channel, prop: str, struct_name: str) -> tuple[Any, ...] | None:
    """Like get_struct, with member types registered under struct_name."""
    return get_struct(channel, prop, _lookup_named(struct_name))


def set_named_struct(
    channel: Channel, prop: str, struct_name: str, values: Iterable[Any]
) -> None:
    """Like set_struct, with member types registered under struct_name."""
    set_struct(channel, prop, _lookup_named(struct_name), values)