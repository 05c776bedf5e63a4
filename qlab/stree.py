"""Self-balancing binary search tree that rebalances using approximate hints."""

from __future__ import annotations

import enum
import random
import sys
from collections.abc import Iterator
from dataclasses import dataclass


class Direction(enum.Enum):
    """Side of a parent on which a child hangs."""

    LEFT = 0
    RIGHT = 1


@dataclass(eq=False)
class STNode:
    """A tree node; ``hint`` approximates the longest chain below it."""

    value: int
    hint: int = 0
    parent: STNode | None = None
    left: STNode | None = None
    right: STNode | None = None


def first(node: STNode) -> STNode:
    """Return the smallest node of the subtree rooted at ``node``."""
    while node.left is not None:
        node = node.left
    return node


def last(node: STNode) -> STNode:
    """Return the largest node of the subtree rooted at ``node``."""
    while node.right is not None:
        node = node.right
    return node


def _balance(n: STNode) -> int:
    left = n.left.hint + 1 if n.left is not None else 0
    right = n.right.hint + 1 if n.right is not None else 0
    return left - right


def _max_hint(n: STNode) -> int:
    left = n.left.hint + 1 if n.left is not None else 0
    right = n.right.hint + 1 if n.right is not None else 0
    return max(left, right)


def _replace_parent_link(p: STNode | None, old: STNode, new: STNode) -> None:
    if p is not None and p.left is old:
        p.left = new
    elif p is not None:
        p.right = new


def _rotate_left(n: STNode) -> None:
    """Lift the left child of ``n`` into its place."""
    lifted = n.left
    p = n.parent
    lifted.parent = n.parent
    n.left = lifted.right
    n.parent = lifted
    lifted.right = n
    _replace_parent_link(p, n, lifted)
    if n.left is not None:
        n.left.parent = n


def _rotate_right(n: STNode) -> None:
    """Lift the right child of ``n`` into its place."""
    lifted = n.right
    p = n.parent
    lifted.parent = n.parent
    n.right = lifted.left
    n.parent = lifted
    lifted.left = n
    _replace_parent_link(p, n, lifted)
    if n.right is not None:
        n.right.parent = n


def _replace_right(n: STNode, r: STNode) -> None:
    """Put ``r``, the first node of the right subtree of ``n``, in place of ``n``."""
    p = n.parent
    rp = r.parent

    if rp.left is r:
        rp.left = r.right
        if r.right is not None:
            r.right.parent = rp

    if rp.parent is n:
        rp.parent = r

    r.parent = p
    r.left = n.left

    if n.right is not r:
        r.right = n.right
        n.right.parent = r

    _replace_parent_link(p, n, r)

    if n.left is not None:
        n.left.parent = r


def _replace_left(n: STNode, lnode: STNode) -> None:
    """Put ``lnode``, the last node of the left subtree of ``n``, in place of ``n``."""
    p = n.parent
    lp = lnode.parent

    if lp.right is lnode:
        lp.right = lnode.left
        if lnode.left is not None:
            lnode.left.parent = lp

    if lp.parent is n:
        lp.parent = lnode

    lnode.parent = p
    lnode.right = n.right

    if n.left is not lnode:
        lnode.left = n.left
        n.left.parent = lnode

    _replace_parent_link(p, n, lnode)

    if n.right is not None:
        n.right.parent = lnode


class STree:
    """A set of integers kept in a hint-balanced binary search tree."""

    def __init__(self) -> None:
        self.root: STNode | None = None
        self._count = 0

    def _update(self, n: STNode | None) -> None:
        while n is not None:
            b = _balance(n)
            prev_hint = n.hint
            p = n.parent

            if b < -1:
                if n is self.root:
                    self.root = n.right
                _rotate_right(n)
            elif b > 1:
                if n is self.root:
                    self.root = n.left
                _rotate_left(n)

            n.hint = _max_hint(n)
            if n.hint == 0 or n.hint != prev_hint:
                n = p
            else:
                break

    def _attach(self, p: STNode, n: STNode, d: Direction) -> None:
        if d is Direction.LEFT:
            p.left = n
        else:
            p.right = n
        n.parent = p
        self._update(n)

    def insert(self, value: int) -> STNode:
        """Insert ``value`` and return its node; an existing node is returned as is."""
        parent: STNode | None = None
        direction = Direction.LEFT
        n = self.root
        while n is not None:
            if value == n.value:
                return n
            parent = n
            if value < n.value:
                n, direction = n.left, Direction.LEFT
            else:
                n, direction = n.right, Direction.RIGHT

        node = STNode(value)
        if parent is None:
            self.root = node
        else:
            self._attach(parent, node, direction)
        self._count += 1
        return node

    def find(self, value: int) -> STNode | None:
        """Return the node holding ``value``, or None."""
        n = self.root
        while n is not None:
            if value == n.value:
                return n
            n = n.left if value < n.value else n.right
        return None

    def remove(self, value: int) -> None:
        """Remove ``value``; raises KeyError if it is not in the tree."""
        node = self.find(value)
        if node is None:
            raise KeyError(value)

        if node.right is not None:
            least = first(node.right)
            if node is self.root:
                self.root = least
            _replace_right(node, least)
            self._update(least.right if least.right is not None else least)
        elif node.left is not None:
            most = last(node.left)
            if node is self.root:
                self.root = most
            _replace_left(node, most)
            self._update(most.left if most.left is not None else most)
        elif node is self.root:
            self.root = None
        else:
            parent = node.parent
            if parent.left is node:
                parent.left = None
            else:
                parent.right = None
            self._update(parent)

        node.parent = node.left = node.right = None
        self._count -= 1

    def __iter__(self) -> Iterator[int]:
        stack: list[STNode] = []
        n = self.root
        while stack or n is not None:
            while n is not None:
                stack.append(n)
                n = n.left
            n = stack.pop()
            yield n.value
            n = n.right

    def __len__(self) -> int:
        return self._count

    def __contains__(self, value: int) -> bool:
        return self.find(value) is not None


def main(argv: list[str] | None = None) -> int:
    """Insert and remove random values, printing the tree before and after."""
    rng = random.Random()
    tree = STree()

    for _ in range(100):
        tree.insert(rng.randrange(99))

    print("[ After insertions ]")
    for value in tree:
        print(value)

    print("Removing...")
    for i in range(100):
        v = rng.randrange(99)
        print(f"{v:2d}  ", end="")
        if (i + 1) % 10 == 0:
            print()
        try:
            tree.remove(v)
        except KeyError:
            pass
    print()

    print("[ After removals ]")
    for value in tree:
        print(value)
    return 0


if __name__ == "__main__":
    sys.exit(main())