"""Non-generic stack of signed 32-bit integers."""

from __future__ import annotations

from typing import Any

from verilist.contracts import inherits, requires
from verilist.errors import PreconditionViolation, element_type_error
from verilist.stack import Stack

I32_MIN = -(2 ** 31)
I32_MAX = 2 ** 31 - 1


def is_i32(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and I32_MIN <= value <= I32_MAX


def _not_i32(self: Any, elem: Any) -> PreconditionViolation:
    return PreconditionViolation(element_type_error(elem, "signed 32-bit integer"))


class IntStack(Stack[int]):
    """A ``Stack`` whose elements are fixed to the i32 range."""

    __slots__ = ()

    @inherits(Stack.push)
    @requires(lambda self, elem: is_i32(elem), "elem: i32", error=_not_i32)
    def push(self, elem: int) -> None:
        """Push an i32; the postconditions of ``Stack.push`` are checked by it."""
        if not is_i32(elem):
            raise _not_i32(self, elem)
        super().push(elem)
