"""verilist Stack — a singly-linked stack with checked contracts.

The stack owns one ``Link``, the head. ``push`` wraps the current head in a
new node, ``try_pop``/``pop`` unwrap it and hand the remainder back to the
stack. Nothing else restructures the chain.

Contracts (see ``verilist.contracts``):

    push(elem)     len grows by one, lookup(0) === elem, every old element
                   shifts back by one position
    try_pop()      on empty: None, stack stays empty
                   otherwise: Some(old lookup(0)) and head_removed(old)
    pop()          requires !is_empty(); as the non-empty try_pop branch
    peek()         requires !is_empty(); lookup(0), no effect
    peek_mut()     requires !is_empty(); a borrow of the head element. On
                   release, len and every element at index >= 1 are
                   unchanged and peek() === the borrow's final value.

Out-of-range ``lookup`` and ``pop``/``peek``/``peek_mut`` on an empty stack
always raise (``IndexOutOfRange``, ``EmptyStackError``), also with contract
checking turned off.
"""

from __future__ import annotations

import copy
from typing import Any, Generic, Optional, TypeVar

from verilist.config import get_config
from verilist.contracts import (
    after_expiry, check_after_expiry, contracts_of, ensures, predicate, pure, requires,
)
from verilist.errors import (
    BorrowError, EmptyStackError, IndexOutOfRange,
    borrow_error, empty_stack_error, index_error,
)
from verilist.link import Link, Node, link_len, link_lookup
from verilist.snapshot import snap, structurally_equal

T = TypeVar("T")


def _valid_index(stack: "Stack[Any]", index: Any) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < stack.len()


def _empty(operation: str):
    return lambda self, *args: EmptyStackError(empty_stack_error(operation))


class Stack(Generic[T]):
    """Generic LIFO stack over an exclusively owned chain of nodes."""

    __slots__ = ("head", "_borrow")

    def __init__(self) -> None:
        self.head: Link[T] = Link()
        self._borrow: Optional[HeadBorrow[T]] = None

    @classmethod
    @ensures(lambda cls, old, result: result.len() == 0, "result.len() == 0")
    def new(cls) -> "Stack[T]":
        return cls()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @pure
    def len(self) -> int:
        return link_len(self.head)

    @pure
    @ensures(lambda self, old, result: result == (self.len() == 0), "result == (self.len() == 0)")
    def is_empty(self) -> bool:
        return self.head.is_empty()

    @pure
    @requires(_valid_index, "index < self.len()",
              error=lambda self, index: IndexOutOfRange(index_error(index, self.len())))
    def lookup(self, index: int) -> T:
        return link_lookup(self.head, index)

    @pure
    @requires(lambda self: not self.is_empty(), "!self.is_empty()", error=_empty("peek"))
    @ensures(lambda self, old, result: result is self.lookup(0), "result === self.lookup(0)")
    def peek(self) -> T:
        node = self.head.node
        if node is None:
            raise EmptyStackError(empty_stack_error("peek"))
        return node.elem

    @predicate
    def head_removed(self, prev: "Stack[T]") -> bool:
        """Two-state check that ``self`` is ``prev`` without its first element."""
        return self.len() == prev.len() - 1 and all(
            structurally_equal(prev.lookup(i), self.lookup(i - 1))
            for i in range(1, prev.len())
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    @ensures(lambda self, old, result, elem: self.len() == old.len() + 1,
             "self.len() == old(self.len()) + 1")
    @ensures(lambda self, old, result, elem: structurally_equal(self.lookup(0), elem),
             "snap(self.lookup(0)) === elem")
    @ensures(lambda self, old, result, elem: all(
                 structurally_equal(old.lookup(i), self.lookup(i + 1)) for i in range(old.len())),
             "forall i < old(self.len()): old(self.lookup(i)) === self.lookup(i + 1)")
    def push(self, elem: T) -> None:
        self._check_unborrowed("push")
        new_node = Node(elem, Link(self.head.take()))
        self.head.replace(new_node)

    @ensures(lambda self, old, result: not old.is_empty() or (result is None and self.is_empty()),
             "old(self.is_empty()) ==> result.is_none() && self.is_empty()")
    @ensures(lambda self, old, result: old.is_empty() or (
                 self.head_removed(old) and structurally_equal(result, old.lookup(0))),
             "!old(self.is_empty()) ==> self.head_removed(old) && result === Some(old.lookup(0))")
    def try_pop(self) -> Optional[T]:
        """Remove and return the head element, or None when the stack is empty."""
        self._check_unborrowed("try_pop")
        node = self.head.take()
        if node is None:
            return None
        self.head.replace(node.next.take())
        return node.elem

    @requires(lambda self: not self.is_empty(), "!self.is_empty()", error=_empty("pop"))
    @ensures(lambda self, old, result: self.head_removed(old), "self.head_removed(old)")
    @ensures(lambda self, old, result: structurally_equal(result, old.lookup(0)),
             "result === old(snap(self)).lookup(0)")
    def pop(self) -> T:
        self._check_unborrowed("pop")
        if self.head.node is None:
            raise EmptyStackError(empty_stack_error("pop"))
        return self.try_pop()

    @requires(lambda self: not self.is_empty(), "!self.is_empty()", error=_empty("peek_mut"))
    @ensures(lambda self, old, result: structurally_equal(result.value, old.peek()),
             "snap(result) === old(snap(self.peek()))")
    @after_expiry(lambda self, frame, borrow: self.len() == frame.len(),
                  "old(self.len()) === self.len()")
    @after_expiry(lambda self, frame, borrow: all(
                      structurally_equal(frame.lookup(i), self.lookup(i)) for i in range(1, self.len())),
                  "forall 1 <= i < self.len(): old(snap(self.lookup(i))) === snap(self.lookup(i))")
    @after_expiry(lambda self, frame, borrow: structurally_equal(self.peek(), borrow.final_value),
                  "snap(self.peek()) === before_expiry(snap(result))")
    def peek_mut(self) -> "HeadBorrow[T]":
        """Borrow the head element for in-place mutation.

        Use the result as a context manager; push, pop and try_pop raise
        ``BorrowError`` until the borrow is released.
        """
        self._check_unborrowed("peek_mut")
        node = self.head.node
        if node is None:
            raise EmptyStackError(empty_stack_error("peek_mut"))
        frame = snap(self) if get_config().check_ensures else None
        self._borrow = HeadBorrow(self, node, frame)
        return self._borrow

    # ------------------------------------------------------------------

    def _check_unborrowed(self, operation: str) -> None:
        if self._borrow is not None:
            raise BorrowError(borrow_error(operation))

    @property
    def borrowed(self) -> bool:
        return self._borrow is not None

    def __len__(self) -> int:
        return self.len()

    def __structure__(self) -> tuple:
        return self.head.__structure__()

    def __deepcopy__(self, memo: dict) -> "Stack[T]":
        other = type(self)()
        other.head = copy.deepcopy(self.head, memo)
        return other

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.head.__structure__())!r})"


class HeadBorrow(Generic[T]):
    """Exclusive, temporary, mutable view of a stack's head element.

    ``value`` reads and writes the head element in place. Releasing the
    borrow (leaving the ``with`` block or calling ``release``) ends
    exclusivity and, when postconditions are checked, verifies that the rest
    of the stack was left untouched.
    """

    __slots__ = ("_stack", "_node", "_frame", "_released", "final_value")

    def __init__(self, stack: Stack[T], node: Node[T], frame: Optional[Stack[T]]):
        self._stack = stack
        self._node = node
        self._frame = frame
        self._released = False
        self.final_value: Any = None

    @property
    def value(self) -> T:
        self._check_live()
        return self._node.elem

    @value.setter
    def value(self, elem: T) -> None:
        self._check_live()
        self._node.elem = elem

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        self._release(check=True)

    def _release(self, check: bool) -> None:
        if self._released:
            return
        self._released = True
        self.final_value = self._node.elem
        self._stack._borrow = None
        if check and self._frame is not None:
            check_after_expiry(contracts_of(Stack.peek_mut), self._stack, self._frame, self)

    def _check_live(self) -> None:
        if self._released:
            raise BorrowError(borrow_error("HeadBorrow.value after release"))

    def __enter__(self) -> "HeadBorrow[T]":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self._release(check=exc_type is None)

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"HeadBorrow({self._node.elem!r}, {state})"
