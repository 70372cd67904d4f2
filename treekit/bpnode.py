"""Nodes of a B+ tree that allows duplicate keys, with leaves chained both ways."""

from __future__ import annotations

from typing import Any, Callable, Iterator, List, Optional, Tuple

__all__ = [
    "BpTreeError",
    "BpNode",
    "next_location",
    "prev_location",
    "insert_linked_list_node",
    "remove_linked_list_node",
    "balance_nodes",
]

Where = Callable[[Any], bool]
Location = Tuple[int, "BpNode"]


class BpTreeError(Exception):
    """Raised when a B+ tree operation breaks the tree's structural rules."""


class BpNode:
    """A B+ tree block holding at most ``capacity`` keys.

    Leaves hold ``values`` parallel to ``keys`` and are linked through ``prev``
    and ``next``; internal blocks hold ``pointers`` parallel to ``keys``, each
    key being the smallest key below its pointer.
    """

    __slots__ = ("capacity", "keys", "values", "pointers", "next", "prev", "no_dup")

    def __init__(self, capacity: int, internal: bool, no_dup: bool = False) -> None:
        if capacity < 0:
            raise ValueError("negative size")
        self.capacity = capacity
        self.keys: List[Any] = []
        self.values: Optional[List[Any]] = None if internal else []
        self.pointers: Optional[List[Optional[BpNode]]] = [] if internal else None
        self.next: Optional[BpNode] = None
        self.prev: Optional[BpNode] = None
        self.no_dup = no_dup

    @classmethod
    def new_internal(cls, size: int) -> "BpNode":
        """An empty internal block of the given capacity."""
        return cls(size, internal=True)

    @classmethod
    def new_leaf(cls, size: int, no_dup: bool = False) -> "BpNode":
        """An empty leaf of the given capacity; ``no_dup`` makes puts replace values."""
        return cls(size, internal=False, no_dup=no_dup)

    def __repr__(self) -> str:
        kind = "internal" if self.internal() else "leaf"
        keys = ", ".join(repr(k) for k in self.keys)
        return f"BpNode<{kind} {self.capacity} [{keys}]>"

    def full(self) -> bool:
        return len(self.keys) == self.capacity

    def pure(self) -> bool:
        """True if every key in the block is equal to the first."""
        if not self.keys:
            return True
        first = self.keys[0]
        return all(first == k for k in self.keys)

    def internal(self) -> bool:
        return self.pointers is not None

    def height(self) -> int:
        if not self.internal():
            return 1
        if not self.pointers:
            raise BpTreeError("Internal node has no pointers but asked for height")
        return self.pointers[0].height() + 1

    def count(self, key: Any) -> int:
        """Number of keys in this block equal to ``key``."""
        i, _ = self.find(key)
        total = 0
        for k in self.keys[i:]:
            if not k == key:
                break
            total += 1
        return total

    def has(self, key: Any) -> bool:
        """True if this block holds ``key``."""
        return self.find(key)[1]

    def left_most_leaf(self) -> "BpNode":
        node = self
        while node.internal():
            node = node.pointers[0]
        return node

    def right_most_leaf(self) -> "BpNode":
        node = self
        while node.internal():
            node = node.pointers[-1]
        return node

    def _child_index(self, key: Any) -> int:
        i, has = self.find(key)
        if not has and i > 0:
            i -= 1
        return i

    def get_start(self, key: Any) -> Location:
        """Location of the first key >= ``key``, or of the last key if all are smaller."""
        if self.internal():
            return self.pointers[self._child_index(key)].get_start(key)
        return self._leaf_get_start(key)

    def _leaf_get_start(self, key: Any) -> Location:
        leaf = self
        while True:
            i, has = leaf.find(key)
            if i >= len(leaf.keys) and i > 0:
                i = len(leaf.keys) - 1
            if not has and (not leaf.keys or leaf.keys[i] < key) and leaf.next is not None:
                leaf = leaf.next
                continue
            return i, leaf

    def get_end(self, key: Any) -> Location:
        """Location of the last key equal to ``key``, else as :meth:`get_start`."""
        i, leaf = self.get_start(key)
        if not leaf.keys:
            return i, leaf
        pi, pleaf = i, leaf
        end = False
        while not end and leaf.keys[i] == key:
            pi, pleaf = i, leaf
            i, leaf, end = next_location(i, leaf)
        return pi, pleaf

    def put(self, key: Any, value: Any) -> "BpNode":
        """Put the pair into the tree rooted here and return the (possibly new) root."""
        a, b = self.insert(key, value)
        if b is None:
            return a
        root = BpNode.new_internal(self.capacity)
        root.put_kp(a.keys[0], a)
        root.put_kp(b.keys[0], b)
        return root

    def insert(self, key: Any, value: Any) -> Tuple["BpNode", Optional["BpNode"]]:
        """Insert below this block; returns ``(left, right)`` where right is set on a split."""
        if self.internal():
            return self.internal_insert(key, value)
        return self.leaf_insert(key, value)

    def internal_insert(self, key: Any, value: Any) -> Tuple["BpNode", Optional["BpNode"]]:
        if not self.internal():
            raise BpTreeError("Expected a internal node")
        i = self._child_index(key)
        p, q = self.pointers[i].insert(key, value)
        self.keys[i] = p.keys[0]
        self.pointers[i] = p
        if q is not None:
            if self.full():
                return self.internal_split(q.keys[0], q)
            self.put_kp(q.keys[0], q)
        return self, None

    def internal_split(self, key: Any, ptr: Optional["BpNode"]) -> Tuple["BpNode", "BpNode"]:
        if not self.internal():
            raise BpTreeError("Expected a internal node")
        if self.has(key):
            raise BpTreeError("Tried to split an internal block on duplicate key")
        a = self
        b = BpNode.new_internal(self.capacity)
        balance_nodes(a, b)
        if key < b.keys[0]:
            a.put_kp(key, ptr)
        else:
            b.put_kp(key, ptr)
        return a, b

    def leaf_insert(self, key: Any, value: Any) -> Tuple["BpNode", Optional["BpNode"]]:
        if self.internal():
            raise BpTreeError("Expected a leaf node")
        if self.no_dup:
            i, has = self.find(key)
            if has:
                self.values[i] = value
                return self, None
        if self.full():
            return self.leaf_split(key, value)
        self.put_kv(key, value)
        return self, None

    def leaf_split(self, key: Any, value: Any) -> Tuple["BpNode", Optional["BpNode"]]:
        if self.internal():
            raise BpTreeError("Expected a leaf node")
        if self.pure():
            return self.pure_leaf_split(key, value)
        a = self
        b = BpNode.new_leaf(self.capacity, self.no_dup)
        insert_linked_list_node(b, a, a.next)
        balance_nodes(a, b)
        if key < b.keys[0]:
            a.put_kv(key, value)
        else:
            b.put_kv(key, value)
        return a, b

    def pure_leaf_split(self, key: Any, value: Any) -> Tuple["BpNode", Optional["BpNode"]]:
        """Split a block whose keys are all equal, keeping runs of equal keys together."""
        if self.internal() or not self.pure():
            raise BpTreeError("Expected a pure leaf node")
        if key < self.keys[0]:
            a = BpNode.new_leaf(self.capacity, self.no_dup)
            a.put_kv(key, value)
            insert_linked_list_node(a, self.prev, self)
            return a, self
        end = self.find_end_of_pure_run()
        if end.keys[0] == key and not end.full():
            end.put_kv(key, value)
            return self, None
        b = BpNode.new_leaf(self.capacity, self.no_dup)
        b.put_kv(key, value)
        insert_linked_list_node(b, end, end.next)
        if end.keys[0] == key:
            return self, None
        return self, b

    def put_kp(self, key: Any, ptr: Optional["BpNode"]) -> None:
        """Put a key and child pointer into this internal block."""
        if self.full():
            raise BpTreeError("Block is full.")
        if not self.internal():
            raise BpTreeError("Expected a internal node")
        i, has = self.find(key)
        if has:
            raise BpTreeError("Tried to insert a duplicate key into an internal node")
        self.keys.insert(i, key)
        self.pointers.insert(i, ptr)

    def put_kv(self, key: Any, value: Any) -> None:
        """Put a key and value into this leaf, after any equal keys' first position."""
        if self.full():
            raise BpTreeError("Block is full.")
        if self.internal():
            raise BpTreeError("Expected a leaf node")
        i, _ = self.find(key)
        self.keys.insert(i, key)
        self.values.insert(i, value)

    def remove(self, key: Any, where: Where) -> Optional["BpNode"]:
        """Remove pairs with ``key`` whose value satisfies ``where``; return the new root."""
        if self.internal():
            return self.internal_remove(key, None, where)
        if not self.keys:
            raise BpTreeError("cannot remove from an empty leaf")
        return self.leaf_remove(key, self.keys[-1], where)

    def internal_remove(
        self, key: Any, sibling: Optional["BpNode"], where: Where
    ) -> Optional["BpNode"]:
        if not self.internal():
            raise BpTreeError("Expected a internal node")
        i = self._child_index(key)
        if i + 1 < len(self.keys):
            sibling = self.pointers[i + 1]
        elif sibling is not None:
            sibling = sibling.left_most_leaf()
        child = self.pointers[i]
        if child.internal():
            child = child.internal_remove(key, sibling, where)
        else:
            stop = None if sibling is None else sibling.keys[0]
            child = child.leaf_remove(key, stop, where)
        if child is None:
            self._remove_at(i)
        else:
            self.keys[i] = child.keys[0]
            self.pointers[i] = child
        if not self.keys:
            return None
        return self

    def leaf_remove(self, key: Any, stop: Any, where: Where) -> Optional["BpNode"]:
        if self.internal():
            raise BpTreeError("Expected a leaf node")
        result: Optional[BpNode] = self
        for j, leaf in self.forward(key, key):
            if where(leaf.values[j]):
                leaf._remove_at(j)
            if not leaf.keys:
                remove_linked_list_node(leaf)
                if leaf.next is None or stop is None:
                    result = None
                elif not leaf.next.keys[0] == stop:
                    result = leaf.next
                else:
                    result = None
        return result

    def _remove_at(self, i: int) -> None:
        if not 0 <= i < len(self.keys):
            raise BpTreeError(f"i, {i}, is out of bounds, {len(self.keys)}.")
        del self.keys[i]
        if self.values is not None:
            del self.values[i]
        if self.pointers is not None:
            del self.pointers[i]

    def find(self, key: Any) -> Tuple[int, bool]:
        """Index of the first key equal to ``key`` and True, or the insertion index and False."""
        lo, hi = 0, len(self.keys) - 1
        while lo <= hi:
            m = ((hi - lo) >> 1) + lo
            if key < self.keys[m]:
                hi = m - 1
            elif key == self.keys[m]:
                j = m
                while j > 0 and key == self.keys[j - 1]:
                    j -= 1
                return j, True
            else:
                lo = m + 1
        return lo, False

    def find_end_of_pure_run(self) -> "BpNode":
        """The last leaf of the run of pure leaves sharing this leaf's key."""
        k = self.keys[0]
        last = self
        n = self.next
        while n is not None and n.pure() and n.keys and k == n.keys[0]:
            last = n
            n = n.next
        return last

    def all(self) -> Iterator[Location]:
        """Every ``(index, leaf)`` location in key order."""
        j, leaf, end = next_location(-1, self.left_most_leaf())
        while not end:
            i, here = j, leaf
            j, leaf, end = next_location(j, leaf)
            yield i, here

    def all_backward(self) -> Iterator[Location]:
        """Every ``(index, leaf)`` location in reverse key order."""
        leaf = self.right_most_leaf()
        j, leaf, end = prev_location(len(leaf.keys), leaf)
        while not end:
            i, here = j, leaf
            j, leaf, end = prev_location(j, leaf)
            yield i, here

    def forward(self, start: Any, stop: Any) -> Iterator[Location]:
        """Locations of keys from ``start`` up to and including ``stop``, ascending."""
        j, leaf = self.get_start(start)
        j -= 1
        while True:
            j, leaf, end = next_location(j, leaf)
            if end or stop < leaf.keys[j]:
                return
            yield j, leaf

    def backward(self, start: Any, stop: Any) -> Iterator[Location]:
        """Locations of keys from ``start`` down to and including ``stop``, descending."""
        j, leaf = self.get_end(start)
        if not leaf.keys:
            return
        end = False
        while not end and not leaf.keys[j] < stop:
            i, here = j, leaf
            j, leaf, end = prev_location(i, here)
            yield i, here


def next_location(i: int, leaf: BpNode) -> Tuple[int, Optional[BpNode], bool]:
    """The location after ``i`` in ``leaf``, following the leaf chain; third item is True at the end."""
    j = i + 1
    while j >= len(leaf.keys) and leaf.next is not None:
        j = 0
        leaf = leaf.next
    if j >= len(leaf.keys):
        return -1, None, True
    return j, leaf, False


def prev_location(i: int, leaf: BpNode) -> Tuple[int, Optional[BpNode], bool]:
    """The location before ``i`` in ``leaf``, following the leaf chain; third item is True at the start."""
    j = i - 1
    while j < 0 and leaf.prev is not None:
        leaf = leaf.prev
        j = len(leaf.keys) - 1
    if j < 0:
        return -1, None, True
    return j, leaf, False


def insert_linked_list_node(node: BpNode, prev: Optional[BpNode], next: Optional[BpNode]) -> None:
    """Link ``node`` between the adjacent leaves ``prev`` and ``next``."""
    if (prev is not None and prev.next is not next) or (
        next is not None and next.prev is not prev
    ):
        raise BpTreeError("prev and next not hooked up")
    node.prev = prev
    node.next = next
    if prev is not None:
        prev.next = node
    if next is not None:
        next.prev = node


def remove_linked_list_node(node: BpNode) -> None:
    """Unlink ``node`` from its neighbours; its own links are left as they were."""
    if node.prev is not None:
        node.prev.next = node.next
    if node.next is not None:
        node.next.prev = node.prev


def balance_nodes(a: BpNode, b: BpNode) -> None:
    """Move the upper half of full block ``a`` into empty block ``b``, keeping equal keys together."""
    if b.keys:
        raise BpTreeError("b was not empty")
    if not a.full():
        raise BpTreeError(f"a was not full {a!r}")
    if a.capacity != b.capacity:
        raise BpTreeError("cap(a.keys) != cap(b.keys)")
    if (a.values is None) != (b.values is None):
        raise BpTreeError("cap(a.values) != cap(b.values)")
    if (a.pointers is None) != (b.pointers is None):
        raise BpTreeError("cap(a.pointers) != cap(b.pointers)")
    n = len(a.keys)
    m = n // 2
    while m < n and a.keys[m - 1] == a.keys[m]:
        m += 1
    if m == n:
        m -= 1
        while m > 0 and a.keys[m - 1] == a.keys[m]:
            m -= 1
    b.keys = a.keys[m:]
    a.keys = a.keys[:m]
    if a.values is not None:
        b.values = a.values[m:]
        a.values = a.values[:m]
    if a.pointers is not None:
        b.pointers = a.pointers[m:]
        a.pointers = a.pointers[:m]