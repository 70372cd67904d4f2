import random

import pytest

from treekit.keytypes import ByteSlice, InvalidKeyError, MapEntry, NotFoundError
from treekit.trie import TST, TSTError, TSTNode, insert

ITEMS = [
    b"0:java.io.File;",
    b"cat",
    b"catty",
    b"car",
    b"cow",
    b"candy",
    b"coo",
    b"coon",
    b"0:java.io.File;1:new,0:java.util.ArrayList;",
    b"andy",
    b"alex",
    b"andrie",
    b"alexander",
    b"alexi",
    b"bob",
    b"0:java.io.File;",
    b"bobcat",
    b"barnaby",
    b"baskin",
    b"balm",
]

COMPLETE4 = [
    a + b + c + d
    for a in [b"a"]
    for b in [b"b", b"a", b"d", b"c"]
    for c in [b"a", b"b", b"c", b"d"]
    for d in [b"a", b"b", b"c", b"d"]
    if not (b == b"c" and c == b"d" and d == b"d")
] + [b"addd"]


def _filled(keys, value=None):
    table = TST()
    for key in keys:
        table.put(key, value)
        assert table.has(key)
    return table


def _random_records(rng, count):
    candidates = (bytes(rng.randrange(1, 256) for _ in range(3)) for _ in range(count + 50))
    keys = list(dict.fromkeys(candidates))[:count]
    return [(key, ByteSlice(bytes(rng.randrange(256) for _ in range(3)))) for key in keys]


def test_empty_iter():
    assert list(TST().iterate()) == []


def test_iterate_sorted_unique():
    table = _filled(ITEMS)
    keys = [bytes(k) for k, _ in table.iterate()]
    assert keys == sorted(set(ITEMS))


def test_prefix_find():
    table = _filled(ITEMS)
    found = [k for k, _ in table.prefix_find(b"co")]
    assert found == [ByteSlice(b"coo"), ByteSlice(b"coon"), ByteSlice(b"cow")]


def test_prefix_find_empty_prefix_is_full_iteration():
    table = _filled(ITEMS)
    assert list(table.prefix_find(b"")) == list(table.iterate())


def test_prefix_find_no_match():
    table = _filled(ITEMS)
    assert list(table.prefix_find(b"zz")) == []
    assert list(table.prefix_find(b"cx")) == []


def test_prefix_find_single_leaf():
    table = _filled([b"bobcat", b"cat"])
    assert [bytes(k) for k in (k for k, _ in table.prefix_find(b"bo"))] == [b"bobcat"]


def test_complete4():
    table = _filled(COMPLETE4)
    keys = [bytes(k) for k in table.keys()]
    assert keys == sorted(set(COMPLETE4))


def test_put_has_get_remove():
    rng = random.Random(1234)
    records = _random_records(rng, 200)
    assert len(records) > 150
    table = TST()
    for key, value in records:
        table.put(key, "")
        table.put(key, value)
    missing = bytes(rng.randrange(1, 256) for _ in range(12))
    assert not table.has(missing)
    assert all(table.has(key) for key, _ in records)
    assert [table.get(key) for key, _ in records] == [value for _, value in records]
    for i, (key, value) in enumerate(records):
        assert table.remove(key) == value
        assert not table.has(key)
        rest = records[i + 1 :]
        assert [table.get(other) for other, _ in rest] == [v for _, v in rest]
        assert not table.has(missing)
    assert list(table.iterate()) == []


def test_put_overwrites_value():
    table = TST()
    table.put(b"cat", 1)
    table.put(b"catty", 2)
    table.put(b"cat", 3)
    assert table.get(b"cat") == 3
    assert table.get(b"catty") == 2
    assert list(table.values()) == [3, 2]


def test_put_after_remove():
    table = _filled([b"cat", b"catty"], 0)
    table.remove(b"cat")
    table.put(b"cat", 9)
    assert table.get(b"cat") == 9
    table.remove(b"cat")
    table.remove(b"catty")
    table.put(b"cat", 5)
    assert [(bytes(k), v) for k, v in table.iterate()] == [(b"cat", 5)]


def test_get_missing_raises():
    table = _filled([b"cat"])
    with pytest.raises(NotFoundError):
        table.get(b"ca")
    with pytest.raises(NotFoundError):
        table.get(b"dog")


def test_remove_missing_raises():
    table = _filled([b"cat", b"car"])
    with pytest.raises(NotFoundError):
        table.remove(b"cab")
    assert sorted(bytes(k) for k in table.keys()) == [b"car", b"cat"]


@pytest.mark.parametrize(
    "key, reason",
    [(None, "key is nil"), (b"", "len(key) == 0"), (b"a\x00b", "key contains a null byte")],
)
def test_validate_key_errors(key, reason):
    table = TST()
    with pytest.raises(InvalidKeyError) as info:
        table.put(key, 1)
    assert info.value.reason == reason
    assert table.has(key) is False


def test_validate_key_accepts_byteslice():
    table = TST()
    assert table.validate_key(ByteSlice(b"abc")) == b"abc"
    table.put(ByteSlice(b"abc"), 1)
    assert table.get(b"abc") == 1
    assert b"abc" in table


def test_items_are_map_entries():
    table = TST()
    table.put(b"b", 2)
    table.put(b"a", 1)
    entries = list(table.items())
    assert all(isinstance(e, MapEntry) for e in entries)
    assert [(bytes(e.key), e.value) for e in entries] == [(b"a", 1), (b"b", 2)]


def test_str():
    table = TST()
    assert str(table) == "TST<>"
    table.put(b"ab", 1)
    assert str(table) == "TST<61:([62 6162])>"


def test_dotty_single_key():
    table = TST()
    table.put(b"ab", 1)
    assert table.dotty() == (
        "digraph TST {\nrankdir=LR;\n"
        'n0[label="heads", shape="rect"];\n'
        'n1[label="ab", fillcolor="#aaffaa" style="filled"];\n'
        'n0 -> n1 [label="a"];\n}\n'
    )


def test_dotty_counts_nodes():
    table = _filled(ITEMS)
    text = table.dotty()
    assert text.startswith("digraph TST {\nrankdir=LR;\n")
    assert text.endswith("\n}\n")
    assert text.count("#aaffaa") == len(set(ITEMS))
    assert text.count(" -> ") == text.count("[label=") - 1 - text.count(" -> ")


def test_node_children():
    node = TSTNode(ord("m"))
    node.l = TSTNode(ord("a"), b"xa\x00", 1, accepting=True)
    node.r = TSTNode(ord("z"), b"xz\x00", 2, accepting=True)
    assert node.internal()
    assert node.child_count() == 2
    assert node.get_child(1) is node.r
    assert list(node.children()) == [node.l, node.r]
    assert not node.l.internal()


def test_node_copy_is_shallow():
    node = TSTNode(ord("m"), b"am\x00", 1, accepting=True)
    dup = node.copy()
    dup.value = 7
    assert node.value == 1
    assert dup.key_eq(b"am\x00")
    assert not dup.key_eq(b"an\x00")


def test_split_requires_accepting():
    leaf = TSTNode(ord("a"), b"xa\x00", 1, accepting=True)
    plain = TSTNode(ord("b"))
    with pytest.raises(TSTError):
        plain.split(leaf, 1)
    with pytest.raises(TSTError):
        leaf.split(plain, 1)


def test_split_depth_too_large():
    b = TSTNode(ord("a"), b"xa\x00", 1, accepting=True)
    a = TSTNode(ord("b"), b"xb\x00", 2, accepting=True)
    with pytest.raises(TSTError):
        b.split(a, 3)


def test_split_orders_leaves():
    b = TSTNode(ord("b"), b"xb\x00", 1, accepting=True)
    a = TSTNode(ord("a"), b"xa\x00", 2, accepting=True)
    top = b.split(a, 1)
    assert top.ch == ord("b")
    assert top.l.key == b"xa\x00"
    assert top.m.key == b"xb\x00"
    assert top.r is None


def test_insert_errors():
    with pytest.raises(TSTError):
        insert(None, b"ab\x00", 1, 5)
    with pytest.raises(TSTError):
        insert(None, b"ab", 1, 1)


def test_insert_does_not_mutate():
    first = insert(None, b"ab\x00", 1, 1)
    second = insert(first, b"ac\x00", 2, 1)
    assert not first.internal()
    assert first.key == b"ab\x00"
    assert second.internal()
    assert sorted(n.key for n in (second.l, second.m, second.r) if n is not None) == [
        b"ab\x00",
        b"ac\x00",
    ]