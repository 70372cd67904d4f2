"""Ordered key/value structures: a ternary search trie, B+ tree blocks, typed keys and tree traversals."""

__version__ = "0.1.0"
__all__ = ["keytypes", "traversal", "trie", "bpnode"]