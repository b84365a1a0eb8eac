"""verilist Stack Tests — STACK-001 through STACK-009."""

import threading

import pytest

from verilist import (
    BorrowError, EmptyStackError, ErrorKind, HeadBorrow, IndexOutOfRange,
    PreconditionViolation, Stack, structurally_equal,
)
from verilist.config import contract_mode


def stack_of(*elems):
    """Build a stack by pushing ``elems`` in order (last one ends up on top)."""
    s = Stack.new()
    for elem in elems:
        s.push(elem)
    return s


class TestSTACK001:
    """STACK-001: A new stack is empty."""

    def test_new_is_empty(self):
        s = Stack.new()
        assert s.is_empty()
        assert s.len() == 0

    def test_constructor_matches_new(self):
        assert Stack().len() == Stack.new().len() == 0

    def test_dunder_len(self):
        assert len(Stack()) == 0
        assert len(stack_of(1, 2, 3)) == 3

    def test_repr_lists_head_first(self):
        assert repr(stack_of(5, 10)) == "Stack([10, 5])"


class TestSTACK002:
    """STACK-002: The list scenario from new() to an emptied stack."""

    def test_scenario(self):
        s = Stack.new()
        assert s.is_empty() and s.len() == 0

        s.push(5)
        s.push(10)
        assert not s.is_empty() and s.len() == 2
        assert s.lookup(0) == 10
        assert s.lookup(1) == 5

        assert s.pop() == 10
        assert s.try_pop() == 5
        assert s.try_pop() is None
        assert s.is_empty() and s.len() == 0

    def test_try_pop_on_empty_is_idempotent(self):
        s = Stack()
        assert s.try_pop() is None
        assert s.try_pop() is None
        assert s.is_empty()


class TestSTACK003:
    """STACK-003: push is a pure prepend."""

    def test_push_shifts_existing_elements(self):
        s = stack_of("a", "b", "c")
        s.push("d")
        assert [s.lookup(i) for i in range(s.len())] == ["d", "c", "b", "a"]

    def test_push_keeps_element_identity(self):
        elem = ["payload"]
        s = Stack()
        s.push(elem)
        assert s.lookup(0) is elem
        assert s.pop() is elem

    def test_push_then_pop_restores(self):
        s = stack_of(1, 2, 3)
        before = s.__structure__()
        s.push(99)
        assert s.pop() == 99
        assert s.__structure__() == before

    def test_long_chain_has_no_recursion_limit(self):
        s = Stack()
        with contract_mode("requires"):
            for i in range(5000):
                s.push(i)
            assert s.len() == 5000
            assert s.lookup(4999) == 0
            assert s.peek() == 4999


class TestSTACK004:
    """STACK-004: Preconditions fail fast with a distinguished error."""

    @pytest.mark.parametrize("mode", ["off", "requires", "all"])
    def test_pop_on_empty(self, mode):
        with contract_mode(mode):
            with pytest.raises(EmptyStackError) as info:
                Stack().pop()
        assert info.value.kind == ErrorKind.EMPTY_STACK

    @pytest.mark.parametrize("mode", ["off", "requires", "all"])
    def test_peek_on_empty(self, mode):
        with contract_mode(mode):
            with pytest.raises(EmptyStackError):
                Stack().peek()

    @pytest.mark.parametrize("mode", ["off", "requires", "all"])
    def test_peek_mut_on_empty(self, mode):
        with contract_mode(mode):
            with pytest.raises(EmptyStackError):
                Stack().peek_mut()

    @pytest.mark.parametrize("mode", ["off", "requires", "all"])
    @pytest.mark.parametrize("index", [2, 3, -1])
    def test_lookup_out_of_range(self, mode, index):
        s = stack_of(1, 2)
        with contract_mode(mode):
            with pytest.raises(IndexOutOfRange) as info:
                s.lookup(index)
        assert info.value.kind == ErrorKind.INDEX_OUT_OF_RANGE
        assert info.value.error.details == {"index": index, "length": 2}

    def test_lookup_rejects_non_integer_index(self):
        with pytest.raises(IndexOutOfRange):
            stack_of(1).lookup("0")
        with pytest.raises(IndexOutOfRange):
            stack_of(1).lookup(True)

    def test_errors_are_builtin_compatible(self):
        with pytest.raises(IndexError):
            Stack().pop()
        with pytest.raises(PreconditionViolation):
            stack_of(1).lookup(1)

    def test_error_serializes(self):
        with pytest.raises(EmptyStackError) as info:
            Stack().pop()
        assert '"kind": "empty_stack"' in info.value.to_json()


class TestSTACK005:
    """STACK-005: peek reads the head without touching the stack."""

    def test_peek(self):
        s = Stack()
        s.push(16)
        assert s.peek() is s.lookup(0)
        assert s.peek() == 16
        s.push(5)
        assert s.peek() == 5
        s.pop()
        assert s.peek() == 16
        assert s.len() == 1


class TestSTACK006:
    """STACK-006: peek_mut borrows the head for in-place mutation."""

    def test_assign_through_borrow(self):
        s = stack_of(8, 16)
        with s.peek_mut() as first:
            assert first.value == 16
            first.value = 5
        assert s.len() == 2
        assert s.lookup(0) == 5
        assert s.lookup(1) == 8

    def test_in_place_mutation_of_element(self):
        s = stack_of([1], [2])
        with s.peek_mut() as head:
            head.value.append(3)
        assert s.peek() == [2, 3]
        assert s.lookup(1) == [1]

    def test_returns_head_borrow(self):
        s = stack_of(1)
        borrow = s.peek_mut()
        assert isinstance(borrow, HeadBorrow)
        assert s.borrowed
        borrow.release()
        assert not s.borrowed
        assert borrow.released
        assert borrow.final_value == 1

    def test_release_twice_is_noop(self):
        s = stack_of(1)
        borrow = s.peek_mut()
        borrow.release()
        borrow.release()
        assert not s.borrowed

    def test_value_after_release(self):
        s = stack_of(1)
        with s.peek_mut() as head:
            pass
        with pytest.raises(BorrowError):
            head.value
        with pytest.raises(BorrowError):
            head.value = 2


class TestSTACK007:
    """STACK-007: The stack cannot be restructured while the head is borrowed."""

    @pytest.mark.parametrize("operation", [
        lambda s: s.push(3),
        lambda s: s.pop(),
        lambda s: s.try_pop(),
        lambda s: s.peek_mut(),
    ])
    def test_mutation_blocked(self, operation):
        s = stack_of(1, 2)
        with s.peek_mut():
            with pytest.raises(BorrowError) as info:
                operation(s)
        assert info.value.kind == ErrorKind.BORROW
        assert s.len() == 2

    def test_reads_allowed(self):
        s = stack_of(1, 2)
        with s.peek_mut() as head:
            head.value = 20
            assert s.len() == 2
            assert s.peek() == 20
            assert s.lookup(1) == 1

    def test_borrow_released_on_exception(self):
        s = stack_of(1)
        with pytest.raises(ValueError):
            with s.peek_mut():
                raise ValueError("boom")
        assert not s.borrowed
        s.push(2)
        assert s.len() == 2


class TestSTACK008:
    """STACK-008: Structural snapshots of stacks."""

    def test_snapshot_is_independent(self):
        from verilist import snap
        s = stack_of([1], [2])
        copy = snap(s)
        assert structurally_equal(s, copy)
        s.peek().append(3)
        assert not structurally_equal(s, copy)
        assert copy.peek() == [2]

    def test_different_lengths_differ(self):
        assert not structurally_equal(stack_of(1), stack_of(1, 1))


class TestSTACK009:
    """STACK-009: Elements that cannot be deep-copied are shared with snapshots."""

    def test_push_and_pop_lock(self):
        lock = threading.Lock()
        s = Stack.new()
        s.push(lock)
        assert s.peek() is lock
        assert s.pop() is lock
        assert s.is_empty()

    def test_lock_below_head(self):
        lock = threading.Lock()
        s = stack_of(lock, [1])
        with s.peek_mut() as borrow:
            borrow.value.append(2)
        assert s.peek() == [1, 2]
        assert s.lookup(1) is lock

    def test_borrowed_lock_head(self):
        lock = threading.Lock()
        s = stack_of(1, lock)
        with s.peek_mut() as borrow:
            assert borrow.value is lock
        assert s.peek() is lock
        assert s.len() == 2
