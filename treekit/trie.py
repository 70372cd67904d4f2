"""A ternary search trie mapping non-empty, NUL-free byte strings to values."""

from __future__ import annotations

from typing import Any, Iterator, List, Optional, Tuple

from treekit.keytypes import ByteSlice, InvalidKeyError, MapEntry, NotFoundError
from treekit.traversal import TreeNode, iter_items, traverse_tree_pre_order

__all__ = ["END", "TSTError", "TSTNode", "TST", "insert"]

END = 0


class TSTError(Exception):
    """Raised when the trie's internal invariants are broken."""


def _to_bytes(key: Any) -> bytes:
    if isinstance(key, ByteSlice):
        return key.value
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"trie keys are bytes, not {type(key).__name__}")


class TSTNode(TreeNode):
    """A trie node: internal nodes branch on ``ch``, accepting leaves hold a key and value.

    ``key`` is the full key with its terminating NUL byte, or None.
    """

    __slots__ = ("key", "value", "ch", "l", "m", "r", "accepting")

    def __init__(
        self,
        ch: int,
        key: Optional[bytes] = None,
        value: Any = None,
        accepting: bool = False,
    ) -> None:
        self.key = key
        self.value = value
        self.ch = ch
        self.l: Optional[TSTNode] = None
        self.m: Optional[TSTNode] = None
        self.r: Optional[TSTNode] = None
        self.accepting = accepting

    def copy(self) -> "TSTNode":
        """A shallow copy sharing the children."""
        node = TSTNode(self.ch, self.key, self.value, self.accepting)
        node.l, node.m, node.r = self.l, self.m, self.r
        return node

    def internal(self) -> bool:
        """True if the node has any child."""
        return self.l is not None or self.m is not None or self.r is not None

    def key_eq(self, key: bytes) -> bool:
        """True if the stored key (with terminator) equals ``key``."""
        if self.key is None:
            return len(key) == 0
        return self.key == bytes(key)

    def _kids(self) -> List["TSTNode"]:
        return [kid for kid in (self.l, self.m, self.r) if kid is not None]

    def children(self) -> Iterator["TSTNode"]:
        return iter(self._kids())

    def get_child(self, i: int) -> "TSTNode":
        return self._kids()[i]

    def child_count(self) -> int:
        return len(self._kids())

    def split(self, other: "TSTNode", depth: int) -> "TSTNode":
        """Split this accepting leaf against the conflicting accepting leaf ``other``.

        Returns a new subtree holding both leaves; neither input is modified.
        """
        if not other.accepting:
            raise TSTError("`a` must be an accepting node")
        if not self.accepting:
            raise TSTError("`b` must be an accepting node")
        if self.key is None or depth >= len(self.key):
            raise TSTError("depth of split exceeds key length of b")
        top = TSTNode(self.ch)
        b = self.copy()
        a = other.copy()
        if depth + 1 < len(b.key):
            b.ch = b.key[depth + 1]
        a.ch = a.key[depth]
        if a.ch < top.ch:
            top.m = b
            top.l = a
        elif a.ch == top.ch:
            top.m = b.split(a, depth + 1)
        else:
            top.m = b
            top.r = a
        if top.m is None:
            raise TSTError("m is nil")
        return top

    def __str__(self) -> str:
        ch = "00" if self.ch == END else format(self.ch, "x")
        if self.accepting:
            key = self.key[:-1].hex() if self.key is not None else ""
            return f"[{ch} {key}]"
        return f"{ch}({_fmt(self.l)}, {_fmt(self.m)}, {_fmt(self.r)})"

    __repr__ = __str__


def _fmt(node: Optional[TSTNode]) -> str:
    return "-" if node is None else str(node)


def insert(node: Optional[TSTNode], key: bytes, value: Any, depth: int) -> TSTNode:
    """Insert the NUL-terminated ``key`` below ``node`` at ``depth``; return the new subtree.

    Nodes on the path are copied, never changed in place.
    """
    if depth >= len(key):
        raise TSTError("depth exceeds key length")
    if key[-1] != END:
        raise TSTError("key must end in 0")
    if node is None:
        return TSTNode(key[depth], key, value, accepting=True)
    if not node.internal():
        if node.accepting and node.key_eq(key):
            updated = node.copy()
            updated.value = value
            return updated
        return node.split(TSTNode(key[depth], key, value, accepting=True), depth)
    ch = key[depth]
    n = node.copy()
    if ch < n.ch:
        n.l = insert(n.l, key, value, depth)
    elif ch == n.ch:
        if depth + 1 == len(key) and ch == END:
            if n.m is None:
                n.m = TSTNode(END, key, value, accepting=True)
            else:
                n.m = n.m.copy()
                n.m.value = value
        else:
            n.m = insert(n.m, key, value, depth + 1)
    else:
        n.r = insert(n.r, key, value, depth)
    return n


def _prune(node: Optional[TSTNode]) -> Optional[TSTNode]:
    if node is None:
        return None
    if not node.internal() and node.key is None:
        return None
    return node


def _accepting_pairs(root: Optional[TSTNode]) -> Iterator[Tuple[ByteSlice, Any]]:
    for node in traverse_tree_pre_order(root):
        if node.accepting:
            yield ByteSlice(node.key[:-1]), node.value


class TST:
    """A ternary search trie keyed by byte strings, iterated in byte order."""

    def __init__(self) -> None:
        self._heads: List[Optional[TSTNode]] = [None] * 256

    def validate_key(self, key: Any) -> bytes:
        """Check that ``key`` can be stored and return it as bytes."""
        if key is None:
            raise InvalidKeyError(key, "key is nil")
        data = _to_bytes(key)
        if len(data) == 0:
            raise InvalidKeyError(key, "len(key) == 0")
        if END in data:
            raise InvalidKeyError(key, "key contains a null byte")
        return data

    def put(self, key: Any, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any earlier value."""
        symbol = self.validate_key(key) + bytes([END])
        self._heads[symbol[0]] = insert(self._heads[symbol[0]], symbol, value, 1)

    def has(self, key: Any) -> bool:
        """True if ``key`` is stored; invalid keys are simply absent."""
        try:
            self.get(key)
        except (NotFoundError, InvalidKeyError):
            return False
        return True

    def get(self, key: Any) -> Any:
        """Return the value stored under ``key``; raises NotFoundError if absent."""
        symbol = self.validate_key(key) + bytes([END])
        node = self._heads[symbol[0]]
        depth = 1
        while node is not None:
            if node.internal():
                if depth >= len(symbol):
                    break
                ch = symbol[depth]
                if ch < node.ch:
                    node = node.l
                elif ch == node.ch:
                    node = node.m
                    depth += 1
                else:
                    node = node.r
            elif node.key_eq(symbol):
                return node.value
            else:
                break
        raise NotFoundError(key)

    def remove(self, key: Any) -> Any:
        """Remove ``key`` and return its value; raises NotFoundError if absent."""
        symbol = self.validate_key(key) + bytes([END])
        found: List[Any] = []

        def _remove(node: Optional[TSTNode], depth: int) -> Optional[TSTNode]:
            if node is None:
                raise NotFoundError(key)
            if node.internal():
                node = node.copy()
                ch = symbol[depth]
                if ch < node.ch:
                    node.l = _prune(_remove(node.l, depth))
                elif ch == node.ch:
                    node.m = _prune(_remove(node.m, depth + 1))
                else:
                    node.r = _prune(_remove(node.r, depth))
                return node
            if node.key is not None and node.key == symbol:
                found.append(node.value)
                return None
            raise NotFoundError(key)

        self._heads[symbol[0]] = _prune(_remove(self._heads[symbol[0]], 1))
        return found[0]

    def prefix_find(self, prefix: Any) -> Iterator[Tuple[ByteSlice, Any]]:
        """Iterate in order over the ``(key, value)`` pairs whose key starts with ``prefix``."""
        data = _to_bytes(prefix)
        if len(data) == 0:
            return self.iterate()
        root: Optional[TSTNode] = None
        node = self._heads[data[0]]
        depth = 1
        while node is not None:
            if node.internal():
                if depth == len(data):
                    root = node
                    break
                ch = data[depth]
                if ch < node.ch:
                    node = node.l
                elif ch == node.ch:
                    node = node.m
                    depth += 1
                else:
                    node = node.r
            elif node.accepting and node.key[: len(data)] == data:
                root = node
                break
            else:
                break
        return _accepting_pairs(root)

    def iterate(self) -> Iterator[Tuple[ByteSlice, Any]]:
        """Iterate over all ``(key, value)`` pairs in byte order of the keys."""
        for head in self._heads:
            if head is not None:
                yield from _accepting_pairs(head)

    def items(self) -> Iterator[MapEntry]:
        return iter_items(self.iterate())

    def keys(self) -> Iterator[ByteSlice]:
        for key, _ in self.iterate():
            yield key

    def values(self) -> Iterator[Any]:
        for _, value in self.iterate():
            yield value

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[ByteSlice]:
        return self.keys()

    def __str__(self) -> str:
        parts = [
            f"{i:x}:({head})" for i, head in enumerate(self._heads) if head is not None
        ]
        return f"TST<{', '.join(parts)}>"

    def dotty(self) -> str:
        """Render the trie as a Graphviz digraph."""
        header = "digraph TST {\nrankdir=LR;\n"
        footer = "\n}\n"
        nodes: List[str] = []
        edges: List[str] = []

        def name() -> str:
            return f"n{len(nodes)}"

        def dotnode(cur: TSTNode, parent: str, label: str) -> None:
            n = name()
            if cur.accepting:
                text = cur.key[:-1].decode("utf-8", "replace")
                nodes.append(f'{n}[label="{text}", fillcolor="#aaffaa" style="filled"];')
            else:
                text = "\\\\0" if cur.ch == END else chr(cur.ch)
                nodes.append(
                    f'{n}[label="{text}", shape="circle", '
                    f'fillcolor="#aaffff", style="filled"];'
                )
            edges.append(f'{parent} -> {n} [label="{label}"];')
            if cur.l is not None:
                dotnode(cur.l, n, "<")
            if cur.m is not None:
                dotnode(cur.m, n, "=")
            if cur.r is not None:
                dotnode(cur.r, n, ">")

        root = name()
        nodes.append(f'{root}[label="heads", shape="rect"];')
        for k, head in enumerate(self._heads):
            if head is not None:
                dotnode(head, root, chr(k))
        return header + "\n".join(nodes) + "\n" + "\n".join(edges) + footer