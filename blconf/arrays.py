"""Array properties: ordered lists of typed values stored under one name."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from blconf.channel import Channel
from blconf.store import BlconfError
from blconf.values import Value, ValueType

_PLAIN_TYPES = frozenset(
    {
        ValueType.UCHAR,
        ValueType.CHAR,
        ValueType.UINT,
        ValueType.INT,
        ValueType.UINT64,
        ValueType.INT64,
        ValueType.FLOAT,
        ValueType.DOUBLE,
        ValueType.BOOLEAN,
        ValueType.STRING,
        ValueType.STRV,
    }
)

# 16-bit members travel as their 32-bit counterparts.
_STORED_AS = {
    ValueType.UINT16: ValueType.UINT,
    ValueType.INT16: ValueType.INT,
}


def _narrow(number: int, value_type: ValueType) -> int:
    number &= 0xFFFF
    if value_type is ValueType.INT16 and number >= 0x8000:
        number -= 0x10000
    return number


def get_arrayv(channel: Channel, prop: str) -> list[Value] | None:
    """The members of the array stored under prop.

    Returns None if prop is missing, is not an array, or is an empty array.
    """
    if not isinstance(prop, str):
        raise TypeError(f"property name must be a str, got {prop!r}")
    try:
        value = channel.get_property(prop)
    except BlconfError:
        return None
    if value.type is not ValueType.ARRAY or not value.data:
        return None
    return list(value.data)


def set_arrayv(channel: Channel, prop: str, values: Iterable[Value]) -> None:
    """Store values as an array under prop; 16-bit members are widened."""
    if values is None:
        raise TypeError("values must be an iterable of Value")
    items = list(values)
    channel.set_property(prop, Value(ValueType.ARRAY, items))


def get_array(channel: Channel, prop: str, types: Sequence[ValueType]) -> tuple[Any, ...] | None:
    """The members of the array under prop as plain data, checked against types.

    Returns None if there is no non-empty array under prop. Raises ValueError
    when the number of types does not match the array length or a type is not
    supported, and TypeError when a member is not of the requested type.
    """
    wanted = list(types)
    members = get_arrayv(channel, prop)
    if members is None:
        return None
    if len(wanted) > len(members):
        raise ValueError(
            "Too many parameters passed, or config store doesn't have enough "
            f"elements in array (it only provided {len(members)})."
        )
    if len(wanted) < len(members):
        raise ValueError(
            "Too few parameters passed, or config store has too many elements "
            f"in array (it provided {len(members)})."
        )
    result = []
    for index, (value_type, member) in enumerate(zip(wanted, members)):
        stored_type = _STORED_AS.get(value_type, value_type)
        if member.type is not value_type and member.type is not stored_type:
            raise TypeError(
                f"Value types don't match ({member.type.value} != "
                f"{value_type.value}) at parameter {index}"
            )
        if value_type in _STORED_AS:
            result.append(_narrow(member.data, value_type))
        elif value_type in _PLAIN_TYPES:
            result.append(member.data)
        else:
            raise ValueError(
                f"Unknown value type {member.type.value} in value array."
            )
    return tuple(result)


def set_array(channel: Channel, prop: str, items: Iterable[tuple[ValueType, Any]]) -> None:
    """Store (type, data) pairs as an array under prop.

    Raises ValueError if items is empty or holds an unsupported type.
    """
    values = []
    for value_type, data in items:
        if value_type in _STORED_AS:
            values.append(Value(_STORED_AS[value_type], data))
        elif value_type in _PLAIN_TYPES:
            values.append(Value(value_type, data))
        else:
            raise ValueError(
                f"Unknown value type {getattr(value_type, 'value', value_type)} "
                "in parameter list."
            )
    if not values:
        raise ValueError("an array needs at least one member")
    set_arrayv(channel, prop, values)


def get_string_list(channel: Channel, prop: str) -> list[str] | None:
    """The array under prop as a list of strings.

    Returns None if there is no non-empty array or a member is not a string.
    """
    members = get_arrayv(channel, prop)
    if members is None:
        return None
    if any(member.type is not ValueType.STRING for member in members):
        return None
    return [member.data for member in members]


def set_string_list(channel: Channel, prop: str, values: Iterable[str]) -> None:
    """Store a non-empty list of strings as an array under prop."""
    if values is None:
        raise TypeError("values must be an iterable of str")
    items = [Value(ValueType.STRING, text) for text in values]
    if not items:
        raise ValueError("a string list needs at least one member")
    set_arrayv(channel, prop, items)