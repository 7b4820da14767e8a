"""Channels: named views onto the configuration store."""

from __future__ import annotations

import threading
from typing import Callable

from blconf import store as blstore
from blconf.store import BlconfError
from blconf.values import (
    ConversionError,
    Value,
    ValueType,
    fixup_16bit_ints,
    transform,
    transform_array,
)

ChangeCallback = Callable[["Channel", str, "Value | None"], None]

_singletons_lock = threading.RLock()
_singletons: dict[str, Channel] = {}


def _check_utf8(text: str | None) -> None:
    if text is None:
        return
    if not isinstance(text, str):
        raise TypeError(f"expected a str or None, got {text!r}")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(f"string is not valid UTF-8: {text!r}") from exc


class Channel:
    """A channel of the configuration store, optionally rooted at a property base."""

    def __init__(
        self,
        channel_name: str,
        property_base: str | None = None,
        is_singleton: bool = False,
    ) -> None:
        if not channel_name:
            raise ValueError("a channel needs a name")
        if property_base is not None and not isinstance(property_base, str):
            raise TypeError(f"property base must be a str, got {property_base!r}")
        self._channel_name = channel_name
        self._property_base = property_base or None
        self._is_singleton = bool(is_singleton)
        self._callbacks: list[tuple[ChangeCallback, str | None]] = []
        self._callbacks_lock = threading.RLock()
        self._store = blstore.get_store()
        self._closed = False
        self._store.connect(self._on_store_change)

    @property
    def channel_name(self) -> str:
        """The name of the channel."""
        return self._channel_name

    @property
    def property_base(self) -> str | None:
        """The property path every property of this channel is rooted at."""
        return self._property_base

    @property
    def is_singleton(self) -> bool:
        """Whether this channel is the shared instance for its name."""
        return self._is_singleton

    def __repr__(self) -> str:
        return (
            f"Channel({self._channel_name!r}, property_base={self._property_base!r}, "
            f"is_singleton={self._is_singleton!r})"
        )

    def __enter__(self) -> Channel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _real_prop(self, prop: str) -> str:
        if not isinstance(prop, str):
            raise TypeError(f"property name must be a str, got {prop!r}")
        if self._property_base is None:
            return prop
        if prop == "/":
            return self._property_base
        return self._property_base + prop

    def _on_store_change(self, channel_name: str, prop: str, value: Value | None) -> None:
        if channel_name != self._channel_name:
            return
        base = self._property_base
        if base is not None:
            if not (prop == base or prop.startswith(base + "/")):
                return
            prop = prop[len(base):] or "/"
        with self._callbacks_lock:
            callbacks = list(self._callbacks)
        for callback, detail in callbacks:
            if detail is None or detail == prop:
                callback(self, prop, value)

    def _lookup(self, prop: str) -> Value | None:
        try:
            return self._store.lookup(self._channel_name, self._real_prop(prop))
        except BlconfError:
            return None

    def _set(self, prop: str, value: Value) -> None:
        self._store.set(self._channel_name, self._real_prop(prop), value)

    def connect(self, callback: ChangeCallback, detail: str | None = None) -> None:
        """Call callback(channel, prop, value) when a property changes.

        With detail, only changes of that property are reported; value is
        None when the property was removed.
        """
        with self._callbacks_lock:
            self._callbacks.append((callback, detail))

    def disconnect(self, callback: ChangeCallback) -> None:
        """Stop calling callback; raises ValueError if it was never connected."""
        with self._callbacks_lock:
            kept = [entry for entry in self._callbacks if entry[0] != callback]
            if len(kept) == len(self._callbacks):
                raise ValueError("callback is not connected")
            self._callbacks = kept

    def close(self) -> None:
        """Detach from the store; no more change notifications arrive."""
        if self._closed:
            return
        self._closed = True
        try:
            self._store.disconnect(self._on_store_change)
        except ValueError:
            pass

    def has_property(self, prop: str) -> bool:
        """Whether prop exists on this channel."""
        return self._lookup(prop) is not None

    def is_property_locked(self, prop: str) -> bool:
        """Whether prop is locked by system policy."""
        try:
            return self._store.is_locked(self._channel_name, self._real_prop(prop))
        except BlconfError:
            return False

    def reset_property(self, property_base: str | None = None, recursive: bool = False) -> None:
        """Reset property_base, and everything under it when recursive is true."""
        if not ((property_base and len(property_base) > 1) or recursive):
            raise ValueError("resetting the channel root requires recursive=True")
        if not property_base:
            property_base = "/"
        self._store.reset(self._channel_name, self._real_prop(property_base), recursive)

    def get_properties(self, property_base: str | None = None) -> dict[str, Value]:
        """All properties at and below property_base, keyed by full name."""
        if not property_base or property_base == "/":
            real_base = self._property_base
        else:
            real_base = self._real_prop(property_base)
        return self._store.get_all(self._channel_name, real_base or "/")

    def _get_typed(self, prop: str, value_type: ValueType, default):
        value = self._lookup(prop)
        if value is not None and value.type is value_type:
            return value.data
        return default

    def get_string(self, prop: str, default: str | None = None) -> str | None:
        """The string value of prop, or default."""
        result = self._get_typed(prop, ValueType.STRING, None)
        return default if result is None else result

    def set_string(self, prop: str, value: str | None) -> None:
        """Store a string value under prop."""
        _check_utf8(value)
        self._set(prop, Value(ValueType.STRING, value))

    def get_int(self, prop: str, default: int = 0) -> int:
        """The 32-bit signed value of prop, or default."""
        return self._get_typed(prop, ValueType.INT, default)

    def set_int(self, prop: str, value: int) -> None:
        """Store a 32-bit signed value under prop."""
        self._set(prop, Value(ValueType.INT, value))

    def get_uint(self, prop: str, default: int = 0) -> int:
        """The 32-bit unsigned value of prop, or default."""
        return self._get_typed(prop, ValueType.UINT, default)

    def set_uint(self, prop: str, value: int) -> None:
        """Store a 32-bit unsigned value under prop."""
        self._set(prop, Value(ValueType.UINT, value))

    def get_uint64(self, prop: str, default: int = 0) -> int:
        """The 64-bit unsigned value of prop, or default."""
        return self._get_typed(prop, ValueType.UINT64, default)

    def set_uint64(self, prop: str, value: int) -> None:
        """Store a 64-bit unsigned value under prop."""
        self._set(prop, Value(ValueType.UINT64, value))

    def get_double(self, prop: str, default: float = 0.0) -> float:
        """The double value of prop, or default."""
        return self._get_typed(prop, ValueType.DOUBLE, default)

    def set_double(self, prop: str, value: float) -> None:
        """Store a double value under prop."""
        self._set(prop, Value(ValueType.DOUBLE, value))

    def get_bool(self, prop: str, default: bool = False) -> bool:
        """The boolean value of prop, or default."""
        return self._get_typed(prop, ValueType.BOOLEAN, default)

    def set_bool(self, prop: str, value: bool) -> None:
        """Store a boolean value under prop."""
        self._set(prop, Value(ValueType.BOOLEAN, value))

    def get_property(self, prop: str, value_type: ValueType | None = None) -> Value:
        """The value of prop, converted to value_type when one is given.

        An array is converted member by member. Raises BlconfError if the
        property is missing and ConversionError if it cannot be converted.
        """
        value = self._store.lookup(self._channel_name, self._real_prop(prop))
        if value_type is None or value_type is value.type:
            return value
        if value.type is ValueType.ARRAY:
            try:
                return Value(ValueType.ARRAY, transform_array(value.data, value_type))
            except ConversionError:
                raise
            except ValueError as exc:
                raise ConversionError(str(exc)) from exc
        try:
            return transform(value, value_type)
        except ConversionError as exc:
            raise ConversionError(
                f'Unable to convert property "{prop}" from type "{value.type.value}" '
                f'to type "{value_type.value}"'
            ) from exc

    def set_property(self, prop: str, value: Value) -> None:
        """Store value under prop; 16-bit integers are widened to 32 bits."""
        if not isinstance(value, Value):
            raise TypeError(f"expected a Value, got {value!r}")
        if value.type is ValueType.STRING:
            _check_utf8(value.data)
        if value.type is ValueType.UINT16:
            value = Value(ValueType.UINT, value.data)
        elif value.type is ValueType.INT16:
            value = Value(ValueType.INT, value.data)
        elif value.type is ValueType.ARRAY:
            widened = fixup_16bit_ints(value.data)
            if widened is not None:
                value = Value(ValueType.ARRAY, widened)
        self._set(prop, value)


def get_channel(channel_name: str) -> Channel:
    """The shared channel for channel_name, created on first use."""
    if not channel_name:
        raise ValueError("a channel needs a name")
    with _singletons_lock:
        channel = _singletons.get(channel_name)
        if channel is None:
            channel = Channel(channel_name, is_singleton=True)
            _singletons[channel_name] = channel
        return channel


def new_channel(channel_name: str, property_base: str | None = None) -> Channel:
    """A new, unshared channel, optionally rooted at property_base."""
    return Channel(channel_name, property_base, is_singleton=False)


def shutdown_channels() -> None:
    """Close and forget every shared channel."""
    with _singletons_lock:
        channels = list(_singletons.values())
        _singletons.clear()
    for channel in channels:
        channel.close()


blstore._add_shutdown_hook(shutdown_channels)