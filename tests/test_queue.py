import io

import pytest

from qlab.harness import Harness
from qlab.queue import Node, Queue, merge, merge_sort
from qlab.report import Reporter


@pytest.fixture
def harness():
    return Harness(Reporter(verblevel=0, out=io.StringIO()))


@pytest.fixture
def queue(harness):
    return Queue(harness)


def chain(values):
    head = None
    for value in reversed(values):
        head = Node(value, head)
    return head


def values_of(head):
    out = []
    while head is not None:
        out.append(head.value)
        head = head.next
    return out


def test_insert_head_is_lifo(queue):
    for s in ["a", "b", "c"]:
        assert queue.insert_head(s)
    assert list(queue) == ["c", "b", "a"]
    assert len(queue) == 3


def test_insert_tail_is_fifo(queue):
    for s in ["a", "b", "c"]:
        assert queue.insert_tail(s)
    assert list(queue) == ["a", "b", "c"]
    assert queue.tail.value == "c"


def test_remove_head_returns_values_in_order(queue):
    queue.insert_tail("dolphin")
    queue.insert_tail("bear")
    assert queue.remove_head() == "dolphin"
    assert queue.remove_head() == "bear"
    assert queue.remove_head() is None
    assert len(queue) == 0


def test_remove_head_truncates_to_bufsize(queue):
    queue.insert_head("gerbil")
    assert queue.remove_head(4) == "ger"


def test_remove_head_rejects_bad_bufsize(queue):
    queue.insert_head("x")
    with pytest.raises(ValueError):
        queue.remove_head(0)


def test_insert_tail_after_emptying(queue):
    queue.insert_tail("a")
    queue.remove_head()
    queue.insert_tail("b")
    queue.insert_tail("c")
    assert list(queue) == ["b", "c"]


def test_reverse_and_tail(queue):
    for s in ["a", "b", "c", "d"]:
        queue.insert_tail(s)
    queue.reverse()
    assert list(queue) == ["d", "c", "b", "a"]
    queue.insert_tail("z")
    assert list(queue) == ["d", "c", "b", "a", "z"]


def test_reverse_empty(queue):
    queue.reverse()
    assert list(queue) == []


def test_sort_matches_sorted(queue):
    words = ["pear", "apple", "fig", "apple", "banana", "kiwi", "cherry"]
    for w in words:
        queue.insert_head(w)
    queue.sort()
    assert list(queue) == sorted(words)
    assert queue.tail.value == max(words)
    assert len(queue) == len(words)


def test_sort_does_not_allocate(queue, harness):
    for w in ["c", "a", "b"]:
        queue.insert_tail(w)
    before = harness.allocation_check()
    harness.noallocate_mode = True
    queue.sort()
    queue.reverse()
    harness.noallocate_mode = False
    assert list(queue) == ["c", "b", "a"]
    assert harness.allocation_check() == before


def test_free_releases_everything(queue, harness):
    for w in ["a", "b", "c"]:
        queue.insert_tail(w)
    assert harness.allocation_check() == 7
    queue.free()
    assert harness.allocation_check() == 0
    assert not harness.error_check()


def test_remove_releases_blocks(queue, harness):
    queue.insert_head("a")
    queue.remove_head()
    queue.free()
    assert harness.allocation_check() == 0


def test_operations_on_freed_queue_raise(queue):
    queue.free()
    with pytest.raises(ValueError):
        queue.insert_head("a")
    with pytest.raises(ValueError):
        queue.remove_head()


def test_allocation_failure(harness):
    q = Queue(harness)
    harness.fail_probability = 100
    assert not q.insert_head("a")
    assert not q.insert_tail("b")
    assert len(q) == 0
    assert harness.allocation_check() == 1


def test_queue_allocation_failure(harness):
    harness.fail_probability = 100
    with pytest.raises(MemoryError):
        Queue(harness)


def test_merge_sort_chain():
    words = ["d", "b", "a", "c", "e", "b"]
    assert values_of(merge_sort(chain(words))) == sorted(words)


def test_merge_two_sorted_chains():
    head = merge(chain(["a", "c", "e"]), chain(["b", "d"]))
    assert values_of(head) == ["a", "b", "c", "d", "e"]


def test_merge_with_empty_side():
    assert values_of(merge(None, chain(["x"]))) == ["x"]
    assert merge_sort(None) is None