"""verilist Contract Layer.

Runtime requires/ensures clauses attached to methods by decorators:

    @requires(lambda self, index: 0 <= index < self.len(), "index < self.len()")
    @ensures(lambda self, old, result, elem: self.len() == old.len() + 1, "...")
    def push(self, elem): ...

Preconditions receive ``(self, *args)``. Postconditions receive
``(self, old, result, *args)`` where ``old`` is a snapshot of the receiver
taken on entry. ``after_expiry`` clauses belong to operations that hand out
a borrow; the borrow evaluates them with ``(self, frame, borrow)`` when it
is released, ``frame`` being the snapshot taken when it was created.

Which clauses are evaluated depends on the active ``ContractConfig`` mode.
Every decorated function keeps its ``Contract`` record, reachable through
``contracts_of``, whatever the mode.

While a clause is being evaluated, nested contracted calls run unchecked:
clauses only call pure queries, and re-checking those would make every
postcondition quadratic.
"""

from __future__ import annotations

import functools
import inspect
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Type

from verilist.config import get_config
from verilist.errors import (
    ContractViolation, PreconditionViolation, PostconditionViolation,
    precondition_error, postcondition_error,
)
from verilist.snapshot import snap, structurally_equal

logger = logging.getLogger(__name__)


@dataclass
class Clause:
    kind: str  # "requires" | "ensures" | "after_expiry"
    description: str
    condition: Callable[..., bool]
    # Builds the exception raised when a precondition fails; None means
    # a plain PreconditionViolation.
    error: Optional[Callable[..., ContractViolation]] = None


@dataclass
class Contract:
    """All clauses and markers declared on one operation."""
    name: str
    requires: list[Clause] = field(default_factory=list)
    ensures: list[Clause] = field(default_factory=list)
    after_expiry: list[Clause] = field(default_factory=list)
    pure: bool = False
    predicate: bool = False
    # Contract of the overridden base operation; its clauses are checked by
    # the base implementation when the override delegates to it.
    inherits: Optional["Contract"] = None

    @property
    def clauses(self) -> list[Clause]:
        own = self.requires + self.ensures + self.after_expiry
        return own + self.inherits.clauses if self.inherits is not None else own

    def describe(self) -> list[str]:
        lines = ["#[pure]"] if self.pure else []
        lines.extend(f"#[{c.kind}({c.description})]" for c in self.clauses)
        return lines


class _CheckState(threading.local):
    active: bool = False


_state = _CheckState()


def contracts_of(func: Any) -> Optional[Contract]:
    """Return the Contract declared on ``func`` (or a bound method), if any."""
    return getattr(func, "__contract__", None)


@contextmanager
def unchecked() -> Iterator[None]:
    """Run contracted calls inside the block without checking them."""
    previous = _state.active
    _state.active = True
    try:
        yield
    finally:
        _state.active = previous


def _raise(exc: ContractViolation, signature: str, failing_values: Optional[dict[str, Any]]) -> None:
    if get_config().log_violations:
        logger.warning("%s in %s (values: %r)", exc.error.message, signature, failing_values or {})
    raise exc


def fail(
    exc_type: Type[ContractViolation],
    description: str,
    signature: str,
    failing_values: Optional[dict[str, Any]] = None,
) -> None:
    """Log and raise a contract violation."""
    if issubclass(exc_type, PreconditionViolation):
        error = precondition_error(description, signature, failing_values)
    else:
        error = postcondition_error(description, signature, failing_values)
    _raise(exc_type(error), signature, failing_values)


def _evaluate(condition: Callable[..., Any], *args: Any) -> Any:
    with unchecked():
        return condition(*args)


def _contracted(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap ``func`` with a contract-checking shim, or reuse an existing one."""
    if contracts_of(func) is not None and hasattr(func, "__wrapped__"):
        return func

    contract = Contract(name=func.__qualname__)
    signature = inspect.signature(func)

    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        config = get_config()
        if _state.active or config.mode == "off":
            return func(self, *args, **kwargs)

        if kwargs:
            # clauses take positional arguments only
            args = signature.bind(self, *args, **kwargs).args[1:]
            kwargs = {}
        values = {"self": self, "args": args}
        for clause in contract.requires:
            if _evaluate(clause.condition, self, *args):
                continue
            if clause.error is not None:
                _raise(_evaluate(clause.error, self, *args), contract.name, values)
            fail(PreconditionViolation, clause.description, contract.name, values)

        if not config.check_ensures or not (contract.ensures or contract.pure):
            return func(self, *args)

        old = snap(self)
        result = func(self, *args)
        if contract.pure and not structurally_equal(self, old):
            fail(PostconditionViolation, "pure operation leaves the receiver unchanged", contract.name, values)
        for clause in contract.ensures:
            if not _evaluate(clause.condition, self, old, result, *args):
                values["result"] = result
                fail(PostconditionViolation, clause.description, contract.name, values)
        return result

    wrapper.__contract__ = contract  # type: ignore[attr-defined]
    return wrapper


def _describe(condition: Callable[..., Any], description: str) -> str:
    return description or getattr(condition, "__name__", "<condition>")


def requires(
    condition: Callable[..., bool],
    description: str = "",
    error: Optional[Callable[..., ContractViolation]] = None,
) -> Callable:
    """Declare a precondition, checked on entry in ``requires`` and ``all`` modes."""
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        wrapper = _contracted(func)
        contracts_of(wrapper).requires.insert(
            0, Clause("requires", _describe(condition, description), condition, error))
        return wrapper
    return decorator


def ensures(condition: Callable[..., bool], description: str = "") -> Callable:
    """Declare a postcondition, checked on exit in ``all`` mode."""
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        wrapper = _contracted(func)
        contracts_of(wrapper).ensures.insert(
            0, Clause("ensures", _describe(condition, description), condition))
        return wrapper
    return decorator


def after_expiry(condition: Callable[..., bool], description: str = "") -> Callable:
    """Declare a clause checked when the borrow returned by the operation is released."""
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        wrapper = _contracted(func)
        contracts_of(wrapper).after_expiry.insert(
            0, Clause("after_expiry", _describe(condition, description), condition))
        return wrapper
    return decorator


def check_after_expiry(contract: Contract, receiver: Any, frame: Any, borrow: Any) -> None:
    """Evaluate ``contract``'s after-expiry clauses, raising on the first failure."""
    for clause in contract.after_expiry:
        if not _evaluate(clause.condition, receiver, frame, borrow):
            fail(PostconditionViolation, clause.description, contract.name, {"self": receiver})


def pure(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a side-effect-free query; ``all`` mode verifies the receiver is unchanged."""
    wrapper = _contracted(func)
    contracts_of(wrapper).pure = True
    return wrapper


def predicate(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a boolean helper used inside contracts. The function is not wrapped."""
    func.__contract__ = Contract(name=func.__qualname__, predicate=True)  # type: ignore[attr-defined]
    return func


def inherits(base: Callable[..., Any]) -> Callable:
    """Record that an override delegates to ``base``, so its clauses are listed too."""
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        wrapper = _contracted(func)
        contracts_of(wrapper).inherits = contracts_of(base)
        return wrapper
    return decorator
