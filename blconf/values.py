"""Typed configuration values and the conversions between them."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass
from typing import Any, Iterable


class ConversionError(ValueError):
    """Raised when a value cannot be converted to the requested type."""


class ValueType(enum.Enum):
    """The value types a configuration property can hold."""

    UCHAR = "uchar"
    CHAR = "char"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT = "uint"
    INT = "int"
    UINT64 = "uint64"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"
    STRV = "strv"
    ARRAY = "array"


_INT_LAYOUT: dict[ValueType, tuple[int, bool]] = {
    ValueType.UCHAR: (8, False),
    ValueType.CHAR: (8, True),
    ValueType.UINT16: (16, False),
    ValueType.INT16: (16, True),
    ValueType.UINT: (32, False),
    ValueType.INT: (32, True),
    ValueType.UINT64: (64, False),
    ValueType.INT64: (64, True),
}

_FLOAT_TYPES = frozenset({ValueType.FLOAT, ValueType.DOUBLE})
_NUMERIC_TYPES = frozenset(_INT_LAYOUT) | _FLOAT_TYPES | {ValueType.BOOLEAN}


def _int_range(value_type: ValueType) -> tuple[int, int]:
    bits, signed = _INT_LAYOUT[value_type]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _wrap(number: int, value_type: ValueType) -> int:
    """Reduce an integer to the width of value_type, as a C cast does."""
    bits, signed = _INT_LAYOUT[value_type]
    number &= (1 << bits) - 1
    if signed and number >= 1 << (bits - 1):
        number -= 1 << bits
    return number


def _to_single(number: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


@dataclass(frozen=True)
class Value:
    """A typed value: its type and its data, checked against that type."""

    type: ValueType
    data: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", self._normalise(self.type, self.data))

    @staticmethod
    def _normalise(value_type: ValueType, data: Any) -> Any:
        if value_type in _INT_LAYOUT:
            if not isinstance(data, int):
                raise TypeError(f"{value_type.value} value needs an int, got {data!r}")
            number = int(data)
            low, high = _int_range(value_type)
            if not low <= number <= high:
                raise ValueError(
                    f"{number} is out of range for {value_type.value} ({low}..{high})"
                )
            return number
        if value_type in _FLOAT_TYPES:
            if not isinstance(data, (int, float)):
                raise TypeError(f"{value_type.value} value needs a number, got {data!r}")
            number = float(data)
            return _to_single(number) if value_type is ValueType.FLOAT else number
        if value_type is ValueType.BOOLEAN:
            return bool(data)
        if value_type is ValueType.STRING:
            if data is not None and not isinstance(data, str):
                raise TypeError(f"string value needs a str or None, got {data!r}")
            return data
        if value_type is ValueType.STRV:
            if data is None:
                return ()
            items = tuple(data)
            if not all(isinstance(item, str) for item in items):
                raise TypeError("strv value needs a sequence of str")
            return items
        if value_type is ValueType.ARRAY:
            if data is None:
                return ()
            items = tuple(data)
            if not all(isinstance(item, Value) for item in items):
                raise TypeError("array value needs a sequence of Value")
            return items
        raise TypeError(f"unknown value type {value_type!r}")

    def copy(self) -> Value:
        """Return an independent copy; array members are copied too."""
        if self.type is ValueType.ARRAY:
            return Value(self.type, [item.copy() for item in self.data])
        return Value(self.type, self.data)


def _format(value: Value) -> str:
    if value.type is ValueType.BOOLEAN:
        return "TRUE" if value.data else "FALSE"
    if value.type in _FLOAT_TYPES:
        return "%f" % value.data
    return "%d" % value.data


def transform(value: Value, target_type: ValueType) -> Value:
    """Convert value to target_type, raising ConversionError if impossible."""
    if value.type is target_type:
        return value.copy()
    source_type = value.type
    if source_type not in _NUMERIC_TYPES:
        raise ConversionError(
            f'Unable to transform value of type "{source_type.value}" '
            f'to type "{target_type.value}"'
        )
    data = value.data
    if target_type in _INT_LAYOUT:
        if source_type in _FLOAT_TYPES:
            if math.isnan(data) or math.isinf(data):
                raise ConversionError(
                    f"Unable to transform {data} to type \"{target_type.value}\""
                )
            number = math.trunc(data)
        else:
            number = int(data)
        return Value(target_type, _wrap(number, target_type))
    if target_type in _FLOAT_TYPES:
        return Value(target_type, float(data))
    if target_type is ValueType.BOOLEAN:
        return Value(target_type, data != 0)
    if target_type is ValueType.STRING:
        return Value(target_type, _format(value))
    raise ConversionError(
        f'Unable to transform value of type "{source_type.value}" '
        f'to type "{target_type.value}"'
    )


def transform_array(values: Iterable[Value], target_type: ValueType) -> list[Value]:
    """Convert every member of a non-empty array to target_type."""
    items = list(values)
    if not items:
        raise ValueError("cannot transform an empty array")
    result = []
    for index, item in enumerate(items):
        try:
            result.append(transform(item, target_type))
        except ConversionError as exc:
            raise ConversionError(
                f'Unable to convert array member {index} from type '
                f'"{item.type.value}" to type "{target_type.value}"'
            ) from exc
    return result


def fixup_16bit_ints(values: Iterable[Value]) -> list[Value] | None:
    """Widen 16-bit members to 32-bit ones; None if there are none to widen."""
    items = list(values)
    sixteen = (ValueType.UINT16, ValueType.INT16)
    if not any(item.type in sixteen for item in items):
        return None
    result = []
    for item in items:
        if item.type is ValueType.UINT16:
            result.append(Value(ValueType.UINT, item.data))
        elif item.type is ValueType.INT16:
            result.append(Value(ValueType.INT, item.data))
        else:
            result.append(item.copy())
    return result