# treekit

Ordered in-memory key/value structures for Python:

- `treekit.trie.TST` is a ternary search trie keyed by non-empty byte
  strings that contain no NUL byte. It supports prefix search and can
  produce Graphviz output.
- `treekit.bpnode.BpNode` is a B+ tree block. Duplicate keys are allowed,
  and the leaves are chained in both directions for forward and backward
  range scans.
- `treekit.keytypes` holds typed keys (`Int8` … `UInt64`, `Int`, `UInt`,
  `String`, `ByteSlice`). They compare, hash and marshal themselves.
- `treekit.traversal` provides in-order, pre-order and post-order traversals
  over any `TreeNode`.

A lookup that misses raises `treekit.keytypes.NotFoundError`, which is a
`KeyError`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Ternary search trie

```python
from treekit.trie import TST

table = TST()
for word in (b"cat", b"cow", b"coo", b"coon"):
    table.put(word, len(word))

table.get(b"cow")                          # 3
b"cat" in table                            # True
[k.value for k, _ in table.prefix_find(b"co")]   # [b'coo', b'coon', b'cow']
table.remove(b"cat")                       # 3
print(table.dotty())                       # Graphviz description of the trie
```

Keys may be given as `bytes` or as `ByteSlice`, and are returned as
`ByteSlice`. `iterate()`, `keys()`, `values()` and `items()` all walk the
trie in byte order. A key that is empty or contains a NUL byte raises
`InvalidKeyError`.

## B+ tree blocks

A tree is its root block. `put` and `remove` return the root to keep using:

```python
from treekit.bpnode import BpNode
from treekit.keytypes import Int

root = BpNode.new_leaf(4)               # capacity of 4 keys per block
for n, label in [(3, "c"), (1, "a"), (3, "d"), (2, "b"), (5, "e")]:
    root = root.put(Int(n), label)

# every pair in ascending key order
[(int(leaf.keys[i]), leaf.values[i]) for i, leaf in root.all()]

# locations of keys 2..3, ascending; backward() walks a range descending
[leaf.values[i] for i, leaf in root.forward(Int(2), Int(3))]

root = root.remove(Int(3), lambda value: value == "c")
```

`remove` returns `None` once the tree is empty. Structural misuse raises
`BpTreeError`. Examples are inserting into a full block or splitting an
internal block on a duplicate key. `BpNode.new_leaf(size, no_dup=True)` makes
a tree in which `put` replaces the value of an existing key instead of adding
a duplicate.

## Keys

```python
from treekit.keytypes import Int8, Int32, String
from treekit.traversal import make_marshals

Int8(200)                               # Int8(-56): wraps like a machine integer
Int32(-1).marshal_binary()              # b'\xff\xff\xff\xff'
Int32.unmarshal_binary(b"\x00\x00\x00\x07")   # Int32(7)
String("abc").key_hash()                # 32-bit FNV-1a of the UTF-8 bytes

marshal, unmarshal = make_marshals(Int32)
```

Keys compare equal and order only against keys of the same class.

## What is not included

There is no balanced binary search tree. There is also no map or multimap
object that wraps `BpNode`, keeps a size count and offers `get`/`count`
across the whole tree. With `BpNode`, the caller holds the root, and
`has`/`count` on a block look only within that block. Nothing is stored on
disk.