"""Tree node interfaces, generic traversals and helpers shared by the tree containers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, Type

from treekit.keytypes import MapEntry

__all__ = [
    "TreeNode",
    "BinaryTreeNode",
    "traverse_binary_tree_in_order",
    "traverse_tree_pre_order",
    "traverse_tree_post_order",
    "binary_children",
    "make_marshals",
    "iter_items",
]


class TreeNode(ABC):
    """A node of a tree holding ``key`` and ``value`` attributes.

    Subclasses supply :meth:`children`; :meth:`get_child` and
    :meth:`child_count` are derived from it unless overridden.
    """

    __slots__ = ()

    key: Any
    value: Any

    @abstractmethod
    def children(self) -> Iterator["TreeNode"]:
        """Iterate over the direct children, in order."""

    def get_child(self, i: int) -> "TreeNode":
        """Return the child at position ``i``; raises IndexError if absent."""
        return list(self.children())[i]

    def child_count(self) -> int:
        """Number of direct children."""
        return sum(1 for _ in self.children())


class BinaryTreeNode(TreeNode):
    """A tree node with ``left`` and ``right`` attributes, either of which may be None."""

    __slots__ = ()

    left: Optional["BinaryTreeNode"]
    right: Optional["BinaryTreeNode"]

    def children(self) -> Iterator["BinaryTreeNode"]:
        return iter(binary_children(self))

    def get_child(self, i: int) -> "BinaryTreeNode":
        return binary_children(self)[i]

    def child_count(self) -> int:
        return len(binary_children(self))


def binary_children(node: Optional[BinaryTreeNode]) -> List[BinaryTreeNode]:
    """The children of a binary node that are present: left before right."""
    if node is None:
        return []
    return [kid for kid in (node.left, node.right) if kid is not None]


def traverse_binary_tree_in_order(node: Optional[BinaryTreeNode]) -> Iterator[BinaryTreeNode]:
    """Yield the nodes of a binary tree left subtree first, then the node, then the right."""
    stack: List[BinaryTreeNode] = []
    cur = node
    while stack or cur is not None:
        while cur is not None:
            stack.append(cur)
            cur = cur.left
        cur = stack.pop()
        found = cur
        cur = cur.right
        yield found


def traverse_tree_pre_order(node: Optional[TreeNode]) -> Iterator[TreeNode]:
    """Yield each node before its children, children in their own order."""
    stack: List[TreeNode] = [] if node is None else [node]
    while stack:
        current = stack.pop()
        stack.extend(reversed(list(current.children())))
        yield current


def traverse_tree_post_order(node: Optional[TreeNode]) -> Iterator[TreeNode]:
    """Yield each node after all of its children."""
    stack: List[Tuple[TreeNode, int]] = [] if node is None else [(node, 0)]
    while stack:
        current, i = stack.pop()
        while i < current.child_count():
            kid = current.get_child(i)
            stack.append((current, i + 1))
            current, i = kid, 0
        yield current


def make_marshals(
    key_type: Type[Any],
) -> Tuple[Callable[[Any], bytes], Callable[[bytes], Any]]:
    """Return ``(marshal, unmarshal)`` functions for keys of ``key_type``.

    ``marshal`` turns a key into its binary form and rejects keys of another
    type; ``unmarshal`` rebuilds a key from bytes.
    """

    def marshal(item: Any) -> bytes:
        if not isinstance(item, key_type):
            raise TypeError(
                f"expected {key_type.__name__}, got {type(item).__name__}"
            )
        return item.marshal_binary()

    def unmarshal(data: bytes) -> Any:
        return key_type.unmarshal_binary(data)

    return marshal, unmarshal


def iter_items(pairs: Iterable[Tuple[Any, Any]]) -> Iterator[MapEntry]:
    """Wrap each ``(key, value)`` pair in a :class:`MapEntry`."""
    for key, value in pairs:
        yield MapEntry(key, value)