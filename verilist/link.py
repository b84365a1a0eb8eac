"""Nodes and owning links.

A ``Link`` is a slot that is either empty or owns exactly one ``Node``. The
only way to move a node out of a slot is ``take`` (or ``replace``), which
leaves the slot empty (or holding the replacement) so that no node is ever
reachable from two places.

Traversals, copies and structural views are loops rather than recursion
over ``next`` so that long chains do not hit the interpreter's recursion
limit.
"""

from __future__ import annotations

import copy
from typing import Generic, Iterator, Optional, TypeVar

from verilist.contracts import ensures, pure
from verilist.errors import IndexOutOfRange, index_error
from verilist.snapshot import structurally_equal

T = TypeVar("T")


def _copy_elem(elem: T, memo: dict) -> T:
    # Elements that cannot be copied (locks, sockets, generators) are shared
    # with the snapshot instead.
    try:
        return copy.deepcopy(elem, memo)
    except (TypeError, copy.Error):
        return elem


class Node(Generic[T]):
    __slots__ = ("elem", "next")

    def __init__(self, elem: T, next: Optional["Link[T]"] = None):
        self.elem = elem
        self.next: Link[T] = next if next is not None else Link()

    def __structure__(self) -> tuple:
        return (self.elem, self.next.__structure__())

    def __deepcopy__(self, memo: dict) -> "Node[T]":
        return Node(_copy_elem(self.elem, memo), copy.deepcopy(self.next, memo))

    def __repr__(self) -> str:
        return f"Node({self.elem!r})"


class Link(Generic[T]):
    """Optional exclusive ownership of a node: Empty or Owns(node)."""

    __slots__ = ("node",)

    def __init__(self, node: Optional[Node[T]] = None):
        self.node = node

    @pure
    def is_empty(self) -> bool:
        return self.node is None

    @ensures(lambda self, old, result: self.is_empty(), "self.is_empty()")
    @ensures(lambda self, old, result: structurally_equal(result, old.node), "result === old(snap(self))")
    def take(self) -> Optional[Node[T]]:
        """Move the owned node out, leaving this link empty."""
        node, self.node = self.node, None
        return node

    @ensures(lambda self, old, result, node: self.node is node, "snap(self) === src")
    @ensures(lambda self, old, result, node: structurally_equal(result, old.node), "result === old(snap(self))")
    def replace(self, node: Optional[Node[T]]) -> Optional[Node[T]]:
        """Store ``node`` in this link and return the node it owned before."""
        previous, self.node = self.node, node
        return previous

    def __structure__(self) -> tuple:
        return tuple(_elems(self))

    def __deepcopy__(self, memo: dict) -> "Link[T]":
        head: Link[T] = Link()
        tail = head
        for elem in _elems(self):
            tail.node = Node(_copy_elem(elem, memo))
            tail = tail.node.next
        return head

    def __repr__(self) -> str:
        return "Link(Empty)" if self.node is None else f"Link(Owns({self.node.elem!r}))"


def _elems(link: Link[T]) -> Iterator[T]:
    node = link.node
    while node is not None:
        yield node.elem
        node = node.next.node


def link_len(link: Link[T]) -> int:
    """Number of nodes reachable from ``link``: empty is 0, otherwise 1 + len(rest)."""
    n = 0
    node = link.node
    while node is not None:
        n += 1
        node = node.next.node
    return n


def link_lookup(link: Link[T], index: int) -> T:
    """Element of the ``index``-th node reachable from ``link``."""
    if not isinstance(index, int) or isinstance(index, bool) or index < 0:
        raise IndexOutOfRange(index_error(index, link_len(link)))
    node = link.node
    i = index
    while node is not None:
        if i == 0:
            return node.elem
        i -= 1
        node = node.next.node
    raise IndexOutOfRange(index_error(index, link_len(link)))
