# blconf

A client library for a channel-based configuration store. Settings live in
named *channels*, and each channel holds properties addressed by
slash-separated paths such as `/general/theme`. Values are typed (strings,
signed and unsigned integers of several widths, floats, doubles, booleans,
string vectors and arrays), and listeners are told whenever a property changes
or is reset.

The store itself is `blconf.store.MemoryStore`, an in-process, thread-safe
store of typed values.

## What it does not do

`MemoryStore` keeps everything in the memory of the running process. Nothing
is written to disk, nothing is shared with other processes, and there is no
configuration daemon, schema of default values, or command-line tool.
Resetting a property therefore simply removes it. Property locks are set by
calling `MemoryStore.lock()` yourself.

## Installation

```
pip install blconf
```

## Getting started

```python
from blconf.store import MemoryStore, init, shutdown
from blconf.channel import get_channel, new_channel

init(MemoryStore())          # or init() for a fresh MemoryStore

panel = get_channel("panel")          # shared instance per channel name
panel.set_string("/general/theme", "dark")
panel.set_int("/general/size", 32)

panel.get_string("/general/theme", "light")   # "dark"
panel.get_int("/missing", 7)                  # 7, the default
panel.has_property("/general/size")           # True

# A channel restricted to one subtree of properties
with new_channel("panel", "/general") as general:
    general.get_int("/size", 0)               # 32

shutdown()
```

`init()` may be called several times; each call is counted, and the last
matching `shutdown()` closes the shared channels and forgets registered
structs. Creating a channel before `init()` raises `BlconfError`.

`get_channel()` returns the same `Channel` every time it is called with the
same name. `new_channel()` creates a separate channel, optionally with a
property base that every property path is placed under. `Channel.close()`
(or leaving a `with` block) detaches a channel from the store.

The typed getters (`get_string`, `get_int`, `get_uint`, `get_uint64`,
`get_double`, `get_bool`) return the default when the property is missing or
holds a different type. The setters raise `BlconfError` if the store refuses,
for example because the property is locked.

## Change notifications

```python
def on_change(channel, prop, value):
    print(channel.channel_name, prop, value)

panel.connect(on_change)                       # every property
panel.connect(on_change, "/general/theme")     # one property only
panel.disconnect(on_change)
```

When a property is reset, the callback receives `None` as its value. A
channel with a property base reports paths relative to that base.

## Generic values

`Channel.get_property(prop, value_type=None)` returns a
`blconf.values.Value`, converted to the `ValueType` you ask for. When the
stored value is an array, each member is converted. A missing property raises
`BlconfError`; an impossible conversion raises `ConversionError`.
`Channel.set_property(prop, value)` stores any `Value`; 16-bit integers,
alone or inside arrays, are widened to 32-bit ones before they are stored.

`blconf.values` also provides `transform()`, `transform_array()` and
`fixup_16bit_ints()` for working with values directly.

## Arrays and string lists

```python
from blconf import arrays
from blconf.values import ValueType

arrays.set_string_list(panel, "/plugins", ["clock", "tasklist"])
arrays.get_string_list(panel, "/plugins")     # ["clock", "tasklist"]

arrays.set_array(panel, "/geometry", [(ValueType.INT, 10), (ValueType.INT, 20)])
arrays.get_array(panel, "/geometry", [ValueType.INT, ValueType.INT])  # (10, 20)
```

`get_arrayv()` and `set_arrayv()` work with lists of `Value`. The getters
return `None` when there is no non-empty array under the property;
`get_array()` raises `ValueError` when the number of types does not match
and `TypeError` when a member has the wrong type.

## Structs

A struct is stored as an array whose members have fixed types. You can list
the member types each time you use it, or register a layout once by name:

```python
from blconf import structs
from blconf.store import named_struct_register
from blconf.values import ValueType

named_struct_register("point", [ValueType.INT, ValueType.INT])
structs.set_named_struct(panel, "/origin", "point", [3, 4])
structs.get_named_struct(panel, "/origin", "point")   # (3, 4)

structs.set_struct(panel, "/size", [ValueType.UINT16, ValueType.UINT16], [640, 480])
structs.get_struct(panel, "/size", [ValueType.UINT16, ValueType.UINT16])  # (640, 480)
```

Using a struct name that was never registered raises `KeyError`; registering
a name twice raises `BlconfError`.

## Other operations

- `Channel.reset_property(base, recursive)` removes a property, or with
  `recursive=True` a whole subtree. Resetting the root needs `recursive=True`.
- `Channel.get_properties(base)` returns a dict of every property at and
  below `base`, keyed by full property path.
- `Channel.is_property_locked(prop)` reports whether the store has locked a
  property against changes.
- `blconf.store.list_channels()` lists every channel that holds properties.

Store failures are raised as `blconf.store.BlconfError`, whose `code`
attribute names the kind of failure. A value that cannot be converted to the
requested type raises `blconf.values.ConversionError`.

## Running the tests

```
pip install -e ".[test]"
pytest
```