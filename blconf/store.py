"""The configuration store behind channels, and library-wide state."""

from __future__ import annotations

import threading
from typing import Callable, Iterable

from blconf.values import Value, ValueType

PropertyCallback = Callable[[str, str, "Value | None"], None]


class BlconfError(Exception):
    """Raised when the configuration store refuses or cannot do an operation."""

    def __init__(self, message: str, code: str = "failed") -> None:
        super().__init__(message)
        self.code = code


def _check_property(prop: str) -> None:
    if not isinstance(prop, str) or not prop.startswith("/"):
        raise BlconfError(f"Invalid property name {prop!r}", "invalid_property")
    if len(prop) > 1 and (prop.endswith("/") or "//" in prop):
        raise BlconfError(f"Invalid property name {prop!r}", "invalid_property")


def _check_channel(channel: str) -> None:
    if not isinstance(channel, str) or not channel or "/" in channel:
        raise BlconfError(f"Invalid channel name {channel!r}", "invalid_channel")


def _under(prop: str, base: str) -> bool:
    return base == "/" or prop == base or prop.startswith(base + "/")


class MemoryStore:
    """An in-process configuration store keyed by channel and property."""

    def __init__(self) -> None:
        self._channels: dict[str, dict[str, Value]] = {}
        self._locked: set[tuple[str, str]] = set()
        self._callbacks: list[PropertyCallback] = []
        self._mutex = threading.RLock()

    def lookup(self, channel: str, prop: str) -> Value:
        """Return a copy of the value of prop, raising BlconfError if absent."""
        _check_channel(channel)
        _check_property(prop)
        with self._mutex:
            try:
                return self._channels[channel][prop].copy()
            except KeyError:
                raise BlconfError(
                    f'Property "{prop}" does not exist on channel "{channel}"',
                    "property_not_found",
                ) from None

    def set(self, channel: str, prop: str, value: Value) -> None:
        """Store value under prop; locked properties cannot be set."""
        _check_channel(channel)
        _check_property(prop)
        if prop == "/":
            raise BlconfError("The root property cannot hold a value", "invalid_property")
        if not isinstance(value, Value):
            raise TypeError(f"expected a Value, got {value!r}")
        with self._mutex:
            if (channel, prop) in self._locked:
                raise BlconfError(
                    f'Permission denied while modifying property "{prop}" '
                    f'on channel "{channel}"',
                    "permission_denied",
                )
            stored = value.copy()
            self._channels.setdefault(channel, {})[prop] = stored
        self._emit(channel, prop, stored.copy())

    def reset(self, channel: str, prop: str, recursive: bool) -> None:
        """Remove prop, and every property under it when recursive is true."""
        _check_channel(channel)
        _check_property(prop)
        with self._mutex:
            props = self._channels.get(channel, {})
            if recursive:
                doomed = [name for name in props if _under(name, prop)]
            else:
                doomed = [prop] if prop in props else []
            for name in doomed:
                if (channel, name) in self._locked:
                    raise BlconfError(
                        f'Permission denied while resetting property "{name}" '
                        f'on channel "{channel}"',
                        "permission_denied",
                    )
            for name in doomed:
                del props[name]
            if not props:
                self._channels.pop(channel, None)
        for name in doomed:
            self._emit(channel, name, None)

    def get_all(self, channel: str, base: str) -> dict[str, Value]:
        """Return copies of base and every property under it."""
        _check_channel(channel)
        _check_property(base)
        with self._mutex:
            if channel not in self._channels:
                raise BlconfError(
                    f'Channel "{channel}" does not exist', "channel_not_found"
                )
            return {
                name: value.copy()
                for name, value in self._channels[channel].items()
                if _under(name, base)
            }

    def lock(self, channel: str, prop: str) -> None:
        """Mark prop as locked by system policy."""
        _check_channel(channel)
        _check_property(prop)
        with self._mutex:
            self._locked.add((channel, prop))

    def is_locked(self, channel: str, prop: str) -> bool:
        """Whether prop is locked."""
        _check_channel(channel)
        _check_property(prop)
        with self._mutex:
            return (channel, prop) in self._locked

    def list_channels(self) -> list[str]:
        """Names of all channels that hold at least one property."""
        with self._mutex:
            return sorted(self._channels)

    def connect(self, callback: PropertyCallback) -> None:
        """Call callback(channel, prop, value) on every change; value None on removal."""
        with self._mutex:
            self._callbacks.append(callback)

    def disconnect(self, callback: PropertyCallback) -> None:
        """Stop calling callback; raises ValueError if it was never connected."""
        with self._mutex:
            self._callbacks.remove(callback)

    def _emit(self, channel: str, prop: str, value: Value | None) -> None:
        with self._mutex:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback(channel, prop, value)


_state_lock = threading.RLock()
_refcount = 0
_store: MemoryStore | None = None
_named_structs: dict[str, tuple[ValueType, ...]] = {}
_shutdown_hooks: list[Callable[[], None]] = []


def _add_shutdown_hook(hook: Callable[[], None]) -> None:
    """Run hook when the library is finally shut down."""
    with _state_lock:
        if hook not in _shutdown_hooks:
            _shutdown_hooks.append(hook)


def init(store: MemoryStore | None = None) -> MemoryStore:
    """Initialise the library; may be called repeatedly, each call counted."""
    global _refcount, _store
    with _state_lock:
        if _refcount:
            _refcount += 1
            return _store
        _store = store if store is not None else MemoryStore()
        _refcount = 1
        return _store


def shutdown() -> None:
    """Undo one init(); the last one releases all library state."""
    global _refcount, _store
    with _state_lock:
        if _refcount <= 0:
            return
        if _refcount > 1:
            _refcount -= 1
            return
        hooks = list(_shutdown_hooks)
    for hook in hooks:
        hook()
    with _state_lock:
        _named_structs.clear()
        _store = None
        _refcount = 0


def is_initialized() -> bool:
    """Whether init() is in effect."""
    with _state_lock:
        return _refcount > 0


def get_store() -> MemoryStore:
    """The active store; raises BlconfError before init()."""
    with _state_lock:
        if not _refcount:
            raise BlconfError(
                "blconf init() must be called before attempting to use blconf",
                "not_initialized",
            )
        return _store


def named_struct_register(struct_name: str, member_types: Iterable[ValueType]) -> None:
    """Register the member types of a named struct."""
    members = tuple(member_types)
    if not struct_name or not members:
        raise ValueError("a named struct needs a name and at least one member")
    if not all(isinstance(member, ValueType) for member in members):
        raise TypeError("struct member types must be ValueType members")
    with _state_lock:
        if struct_name in _named_structs:
            raise BlconfError(
                f"The struct '{struct_name}' is already registered", "already_registered"
            )
        _named_structs[struct_name] = members


def named_struct_lookup(struct_name: str) -> tuple[ValueType, ...] | None:
    """The member types registered under struct_name, or None."""
    with _state_lock:
        return _named_structs.get(struct_name)


def list_channels() -> list[str]:
    """All channels known to the active store."""
    return get_store().list_channels()