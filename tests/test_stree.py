import random

import pytest

from qlab.stree import STNode, STree, first, last, main


def _check_links(tree):
    if tree.root is not None:
        assert tree.root.parent is None
    stack = [tree.root] if tree.root is not None else []
    count = 0
    while stack:
        node = stack.pop()
        count += 1
        for child in (node.left, node.right):
            if child is not None:
                assert child.parent is node
                stack.append(child)
    return count


def _height(node):
    if node is None:
        return 0
    return 1 + max(_height(node.left), _height(node.right))


def test_insert_iterates_sorted_unique():
    tree = STree()
    values = [5, 3, 8, 1, 4, 7, 9, 3, 5]
    for v in values:
        tree.insert(v)
    assert list(tree) == sorted(set(values))
    assert len(tree) == len(set(values))
    assert _check_links(tree) == len(tree)


def test_insert_duplicate_returns_same_node():
    tree = STree()
    node = tree.insert(10)
    assert tree.insert(10) is node
    assert len(tree) == 1


def test_find():
    tree = STree()
    for v in range(20):
        tree.insert(v)
    assert tree.find(13).value == 13
    assert tree.find(42) is None
    assert 7 in tree
    assert 99 not in tree


def test_remove_missing_raises():
    tree = STree()
    tree.insert(1)
    with pytest.raises(KeyError):
        tree.remove(2)
    assert list(tree) == [1]


def test_remove_root_only():
    tree = STree()
    tree.insert(1)
    tree.remove(1)
    assert tree.root is None
    assert list(tree) == []
    assert len(tree) == 0


def test_random_operations_keep_invariants():
    rng = random.Random(1234)
    tree = STree()
    model = set()
    for _ in range(2000):
        v = rng.randrange(200)
        if rng.random() < 0.6:
            tree.insert(v)
            model.add(v)
        elif v in model:
            tree.remove(v)
            model.discard(v)
        else:
            with pytest.raises(KeyError):
                tree.remove(v)
        assert len(tree) == len(model)
    assert list(tree) == sorted(model)
    assert _check_links(tree) == len(model)


def test_remove_everything():
    rng = random.Random(7)
    tree = STree()
    values = rng.sample(range(500), 300)
    for v in values:
        tree.insert(v)
    rng.shuffle(values)
    for v in values:
        tree.remove(v)
        assert v not in tree
    assert list(tree) == []
    assert tree.root is None


def test_ascending_insertions_are_balanced():
    tree = STree()
    for v in range(100):
        tree.insert(v)
    assert list(tree) == list(range(100))
    assert _height(tree.root) < 50


def test_first_and_last():
    tree = STree()
    for v in [50, 20, 80, 10, 90, 30]:
        tree.insert(v)
    assert first(tree.root).value == min(tree)
    assert last(tree.root).value == max(tree)
    leaf = STNode(3)
    assert first(leaf) is leaf
    assert last(leaf) is leaf


def test_main_output(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    start = lines.index("[ After insertions ]")
    stop = lines.index("Removing...")
    inserted = [int(x) for x in lines[start + 1 : stop]]
    assert inserted == sorted(set(inserted))
    assert all(0 <= x < 99 for x in inserted)
    after = lines.index("[ After removals ]")
    remaining = [int(x) for x in lines[after + 1 :] if x.strip()]
    assert remaining == sorted(set(remaining))
    assert set(remaining) <= set(inserted)