"""Structured error objects for verilist.

Every failure is a programmer error surfaced immediately. Each one carries a
machine-readable ``VerilistError`` record so that contract checkers and test
harnesses can inspect what was violated and with which values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    PRECONDITION = "precondition"
    POSTCONDITION = "postcondition"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    EMPTY_STACK = "empty_stack"
    BORROW = "borrow"
    ELEMENT_TYPE = "element_type"


@dataclass
class VerilistError:
    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details:
            d["details"] = self.details
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=repr)

    def __str__(self) -> str:
        return f"[{self.kind.value}]: {self.message}"


def precondition_error(
    condition: str,
    function_signature: str,
    failing_values: Optional[dict[str, Any]] = None,
) -> VerilistError:
    return VerilistError(
        kind=ErrorKind.PRECONDITION,
        message=f"Precondition violated: {condition}",
        details={
            "condition": condition,
            "function_signature": function_signature,
            "failing_values": failing_values or {},
        },
    )


def postcondition_error(
    condition: str,
    function_signature: str,
    failing_values: Optional[dict[str, Any]] = None,
) -> VerilistError:
    return VerilistError(
        kind=ErrorKind.POSTCONDITION,
        message=f"Postcondition violated: {condition}",
        details={
            "condition": condition,
            "function_signature": function_signature,
            "failing_values": failing_values or {},
        },
    )


def index_error(index: Any, length: int) -> VerilistError:
    return VerilistError(
        kind=ErrorKind.INDEX_OUT_OF_RANGE,
        message=f"Index {index!r} out of range for stack of length {length}",
        details={"index": index, "length": length},
    )


def empty_stack_error(operation: str) -> VerilistError:
    return VerilistError(
        kind=ErrorKind.EMPTY_STACK,
        message=f"'{operation}' called on an empty stack",
        details={"operation": operation},
    )


def borrow_error(operation: str) -> VerilistError:
    return VerilistError(
        kind=ErrorKind.BORROW,
        message=f"'{operation}' called while the head is mutably borrowed",
        details={"operation": operation},
    )


def element_type_error(elem: Any, expected: str) -> VerilistError:
    return VerilistError(
        kind=ErrorKind.ELEMENT_TYPE,
        message=f"Element {elem!r} is not a {expected}",
        details={"element": elem, "expected": expected},
    )


class ContractViolation(Exception):
    """Exception wrapping one or more VerilistErrors."""

    def __init__(self, errors: list[VerilistError] | VerilistError):
        if isinstance(errors, VerilistError):
            errors = [errors]
        self.errors = errors
        super().__init__(self._format())

    @property
    def error(self) -> VerilistError:
        return self.errors[0]

    @property
    def kind(self) -> ErrorKind:
        return self.errors[0].kind

    def _format(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_dict() for e in self.errors], indent=indent, default=repr)


class PreconditionViolation(ContractViolation):
    """The caller broke an operation's precondition."""


class PostconditionViolation(ContractViolation):
    """An operation did not establish its postcondition."""


class IndexOutOfRange(PreconditionViolation, IndexError):
    """``lookup`` with an index outside ``[0, len())``."""


class EmptyStackError(PreconditionViolation, IndexError):
    """``pop``, ``peek`` or ``peek_mut`` on an empty stack."""


class BorrowError(ContractViolation, RuntimeError):
    """Structural mutation attempted while the head is borrowed."""
