"""A string queue kept as a singly linked list, allocating through a harness."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .harness import Block, Harness
from .report import Reporter

NODE_SIZE = 16
QUEUE_SIZE = 24


@dataclass(eq=False)
class Node:
    """One list element: its string, the next element and its allocations."""

    value: str
    next: Node | None = None
    block: Block | None = field(default=None, repr=False)
    value_block: Block | None = field(default=None, repr=False)


def merge(left: Node | None, right: Node | None) -> Node | None:
    """Merge two sorted chains into one sorted chain and return its head."""
    if left is None:
        return right
    if right is None:
        return left

    if left.value < right.value:
        head, left = left, left.next
    else:
        head, right = right, right.next
    current = head

    while left is not None and right is not None:
        if left.value < right.value:
            current.next, left = left, left.next
        else:
            current.next, right = right, right.next
        current = current.next

    current.next = left if left is not None else right
    return head


def merge_sort(head: Node | None) -> Node | None:
    """Sort a chain of nodes in ascending order and return the new head."""
    if head is None or head.next is None:
        return head

    slow, fast = head, head.next
    while fast is not None and fast.next is not None:
        slow = slow.next
        fast = fast.next.next
    right = slow.next
    slow.next = None

    return merge(merge_sort(head), merge_sort(right))


class Queue:
    """A FIFO/LIFO queue of strings whose storage is tracked by a harness.

    Raises MemoryError when the queue itself cannot be allocated.
    """

    def __init__(self, harness: Harness | None = None) -> None:
        self.harness = harness if harness is not None else Harness(Reporter())
        block = self.harness.malloc(QUEUE_SIZE)
        if block is None:
            raise MemoryError("could not allocate queue")
        self._block = block
        self.head: Node | None = None
        self.tail: Node | None = None
        self._size = 0
        self._freed = False

    @property
    def freed(self) -> bool:
        return self._freed

    def _check_live(self) -> None:
        if self._freed:
            raise ValueError("queue has been freed")

    def _new_node(self, s: str) -> Node | None:
        node_block = self.harness.malloc(NODE_SIZE)
        if node_block is None:
            return None
        value_block = self.harness.strdup(s)
        if value_block is None:
            self.harness.free(node_block)
            return None
        return Node(s, None, node_block, value_block)

    def _release(self, node: Node) -> None:
        self.harness.free(node.value_block)
        self.harness.free(node.block)

    def insert_head(self, s: str) -> bool:
        """Insert a copy of ``s`` at the head; False if allocation failed."""
        self._check_live()
        node = self._new_node(s)
        if node is None:
            return False
        node.next = self.head
        self.head = node
        self._size += 1
        if self._size == 1:
            self.tail = node
        return True

    def insert_tail(self, s: str) -> bool:
        """Insert a copy of ``s`` at the tail; False if allocation failed."""
        self._check_live()
        node = self._new_node(s)
        if node is None:
            return False
        self._size += 1
        if self._size == 1 or self.tail is None:
            self.head = node
        else:
            self.tail.next = node
        self.tail = node
        return True

    def remove_head(self, bufsize: int | None = None) -> str | None:
        """Remove the head element and return its string, or None if empty.

        With ``bufsize`` given, at most ``bufsize - 1`` characters are returned.
        """
        self._check_live()
        if bufsize is not None and bufsize < 1:
            raise ValueError("bufsize must be at least 1")
        node = self.head
        if node is None:
            return None

        value = node.value if bufsize is None else node.value[: bufsize - 1]
        self.head = node.next
        if self.head is None:
            self.tail = None
        self._size -= 1
        self._release(node)
        return value

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[str]:
        node = self.head
        while node is not None:
            yield node.value
            node = node.next

    def reverse(self) -> None:
        """Reverse the order of elements by relinking them."""
        self._check_live()
        if self.head is None:
            return
        previous: Node | None = None
        current = self.head
        self.tail = self.head
        while current is not None:
            ahead = current.next
            current.next = previous
            previous = current
            current = ahead
        self.head = previous

    def sort(self) -> None:
        """Sort the elements in ascending order by relinking them."""
        self._check_live()
        if self.head is None or self._size == 1:
            return
        self.head = merge_sort(self.head)
        tail = self.head
        while tail.next is not None:
            tail = tail.next
        self.tail = tail

    def free(self) -> None:
        """Release every element and the queue itself."""
        if self._freed:
            return
        node = self.head
        while node is not None:
            following = node.next
            self._release(node)
            node = following
        self.harness.free(self._block)
        self.head = None
        self.tail = None
        self._size = 0
        self._freed = True