# plistkit

A property list toolkit. It builds plist trees in memory, edits and compares them, and reads and writes them in the XML plist format.

## Install

```
pip install .
```

To get the test requirements as well, install with `pip install .[test]`.

## Building a tree

```python
from plistkit.node import new_dict, new_array, new_string, new_uint, new_bool

root = new_dict()
root.set_dict_item("Name", new_string("demo"))
root.set_dict_item("Count", new_uint(3))

items = new_array()
items.append(new_bool(True))
items.append(new_string("second"))
root.set_dict_item("Items", items)

len(root)                               # 3 entries
root.access_path("Items", 1)            # the "second" string node
for key, value in root.dict_items():
    print(key, value)
```

Every value in a tree is a `Node`. Its `type` is a member of `PlistType`: `ARRAY`, `DICT`, `STRING`, `KEY`, `BOOLEAN`, `UINT`, `UID`, `REAL`, `DATA`, `DATE` or `NULL`. Use the factory functions `new_dict`, `new_array`, `new_string`, `new_bool`, `new_uint`, `new_uid`, `new_real`, `new_data`, `new_date` and `new_null` to create nodes.

Arrays support `array_item`, `set_array_item`, `append`, `insert` and `remove_array_item`. Dicts support `dict_item`, `set_dict_item`, `remove_dict_item`, `dict_items` and `merge`, and they keep their entries in insertion order. A node can belong to only one container at a time. `copy()` returns a deep copy. You can change a node's value and kind in place with the `set_string`, `set_bool`, `set_uint`, `set_uid`, `set_real`, `set_data`, `set_date` and `set_key` methods.

`is_binary(data)` reports whether a byte string starts with the binary plist signature `bplist00`.

## Comparing values

```python
from plistkit.compare import compare_uint, string_contains, values_equal

compare_uint(root.dict_item("Count"), 3)          # 0
string_contains(root.dict_item("Name"), "em")     # True
```

The `compare_*` functions return `-1`, `0` or `1`. A node of the wrong kind, or `None`, always compares as `-1`. `values_equal` compares two nodes by value, except that arrays and dicts are equal only to themselves.

## XML

```python
from plistkit.xmlwriter import to_xml
from plistkit.xmlreader import from_xml

text = to_xml(root)
again = from_xml(text)
```

`to_xml` returns the whole document as a string, including the XML prolog and the `<plist>` wrapper. It raises `FormatError` if the tree contains a null node. A UID node is written as a `CF$UID` dict.

`from_xml` accepts either `str` or UTF-8 `bytes`. It returns the root node, or `None` if the document holds no value. It raises `ParseError` for malformed input and `ValueError` for empty input. A root dict whose only entry is an integer `CF$UID` is read back as a UID node.

## Dates

Date nodes store seconds relative to 2001-01-01 UTC. `Node.date_value()` returns a date as `(seconds, microseconds)`.

The `plistkit.time64` module converts between second counts and broken-down `TM` values for any 64-bit second count. It provides:

- `gmtime64` and `timegm64` for UTC
- `localtime64`, `mktime64` and `timelocal64` for local time
- `asctime64` and `ctime64` for text formatting

The local-time functions handle years outside 1971–2037 by mapping them onto an equivalent year inside that range.

## What it does not do

plistkit reads and writes only the XML plist format. It can recognise binary plist data with `is_binary`, but it cannot parse or write binary plists, and it has no JSON support. It is a library only and provides no command-line tool.