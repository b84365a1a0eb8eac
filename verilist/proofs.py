"""verilist Proofs — stack contracts discharged with Z3.

The stack is modelled as a Z3 sequence over an uninterpreted element sort
``T`` (index 0 is the head), so nothing is assumed about the elements
beyond equality:

    new()          Empty(Seq[T])
    len(s)         Length(s)
    lookup(s, i)   s[i]                                  for 0 <= i < len(s)
    push(s, e)     Unit(e) ++ s
    pop(s)         (s[0], Extract(s, 1, len(s) - 1))    for len(s) > 0
    peek_mut(s, v) Unit(v) ++ Extract(s, 1, len(s) - 1)

Each contract clause is checked by asserting its negation: UNSAT means the
clause holds for every stack, SAT yields a counterexample. Free variables
stand for universally quantified ones (``forall i`` becomes a free ``i``).
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

import z3

from verilist.obligations import ProofObligation, ProofTrace, SolverResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10_000


class StackModel:
    """Symbolic stack vocabulary shared by all obligations."""

    def __init__(self, elem_sort: Optional[z3.SortRef] = None):
        self.elem = elem_sort if elem_sort is not None else z3.DeclareSort("T")
        self.sort = z3.SeqSort(self.elem)
        self.s = z3.Const("s", self.sort)
        self.e = z3.Const("e", self.elem)
        self.v = z3.Const("v", self.elem)
        self.i = z3.Int("i")

    def new(self) -> z3.SeqRef:
        return z3.Empty(self.sort)

    def length(self, s: z3.SeqRef) -> z3.ArithRef:
        return z3.Length(s)

    def is_empty(self, s: z3.SeqRef) -> z3.BoolRef:
        return s == z3.Empty(self.sort)

    def lookup(self, s: z3.SeqRef, index) -> z3.ExprRef:
        return s[index]

    def push(self, s: z3.SeqRef, e: z3.ExprRef) -> z3.SeqRef:
        return z3.Concat(z3.Unit(e), s)

    def rest(self, s: z3.SeqRef) -> z3.SeqRef:
        return z3.Extract(s, 1, z3.Length(s) - 1)

    def try_pop(self, s: z3.SeqRef) -> z3.SeqRef:
        return z3.If(self.is_empty(s), s, self.rest(s))

    def write_head(self, s: z3.SeqRef, v: z3.ExprRef) -> z3.SeqRef:
        return z3.Concat(z3.Unit(v), self.rest(s))

    def head_removed(self, after: z3.SeqRef, prev: z3.SeqRef) -> z3.BoolRef:
        i = self.i
        return z3.And(
            z3.Length(after) == z3.Length(prev) - 1,
            z3.Implies(z3.And(1 <= i, i < z3.Length(prev)), prev[i] == after[i - 1]),
        )


def check_claim(
    operation: str,
    rule: str,
    formula: str,
    claim: z3.BoolRef,
    witness_vars: Optional[Dict[str, z3.ExprRef]] = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> ProofObligation:
    """Discharge ``claim`` by refuting its negation."""
    solver = z3.Solver()
    solver.set("timeout", timeout_ms)
    solver.add(z3.Not(claim))
    smtlib2 = solver.sexpr()

    start = time.perf_counter()
    try:
        answer = solver.check()
    except z3.Z3Exception as exc:
        logger.error("Z3 failed on %s/%s: %s", operation, rule, exc)
        return ProofObligation(
            operation=operation, rule=rule, formula=formula, smtlib2=smtlib2,
            result=SolverResult.ERROR, explanation=str(exc),
        )
    duration_ms = (time.perf_counter() - start) * 1000.0

    witness: Dict[str, str] = {}
    if answer == z3.unsat:
        result = SolverResult.UNSAT
    elif answer == z3.sat:
        result = SolverResult.SAT
        model = solver.model()
        for name, var in (witness_vars or {}).items():
            witness[name] = str(model.evaluate(var, model_completion=True))
    else:
        result = SolverResult.UNKNOWN

    obligation = ProofObligation(
        operation=operation, rule=rule, formula=formula, smtlib2=smtlib2,
        result=result, witness=witness, duration_ms=duration_ms,
        explanation="" if result != SolverResult.UNKNOWN else solver.reason_unknown(),
    )
    logger.debug("%s/%s: %s (%.1f ms)", operation, rule, result.value, duration_ms)
    return obligation


def _stack_claims(m: StackModel) -> List[tuple]:
    s, e, v, i = m.s, m.e, m.v, m.i
    pushed = m.push(s, e)
    nonempty = z3.Length(s) > 0
    popped = m.try_pop(s)
    written = m.write_head(s, v)

    return [
        ("new", "ensures-length",
         "new().len() == 0",
         m.length(m.new()) == 0),
        ("is_empty", "equivalence",
         "s.is_empty() == (s.len() == 0)",
         m.is_empty(s) == (m.length(s) == 0)),
        ("push", "ensures-length",
         "self.len() == old(self.len()) + 1",
         m.length(pushed) == m.length(s) + 1),
        ("push", "ensures-head",
         "snap(self.lookup(0)) === elem",
         m.lookup(pushed, 0) == e),
        ("push", "ensures-shift",
         "forall i < old(self.len()): old(self.lookup(i)) === self.lookup(i + 1)",
         z3.Implies(z3.And(0 <= i, i < m.length(s)), m.lookup(s, i) == m.lookup(pushed, i + 1))),
        ("try_pop", "ensures-empty",
         "old(self.is_empty()) ==> result.is_none() && self.is_empty()",
         z3.Implies(m.is_empty(s), m.is_empty(popped))),
        ("try_pop", "head_removed-length",
         "!old(self.is_empty()) ==> self.len() == old(self.len()) - 1",
         z3.Implies(nonempty, m.length(popped) == m.length(s) - 1)),
        ("try_pop", "head_removed-shift",
         "!old(self.is_empty()) ==> forall 1 <= i < old(self.len()): "
         "old(self.lookup(i)) === self.lookup(i - 1)",
         z3.Implies(nonempty, m.head_removed(popped, s))),
        ("pop", "ensures-result",
         "result === old(snap(self)).lookup(0), remainder is the rest",
         z3.Implies(nonempty, s == z3.Concat(z3.Unit(m.lookup(s, 0)), popped))),
        ("push_pop", "round-trip",
         "pop(push(s, v)) == (v, s)",
         z3.And(m.lookup(pushed, 0) == e, m.try_pop(pushed) == s)),
        ("peek_mut", "after_expiry-length",
         "old(self.len()) === self.len()",
         z3.Implies(nonempty, m.length(written) == m.length(s))),
        ("peek_mut", "after_expiry-frame",
         "forall 1 <= i < self.len(): old(snap(self.lookup(i))) === snap(self.lookup(i))",
         z3.Implies(z3.And(nonempty, 1 <= i, i < m.length(s)), m.lookup(written, i) == m.lookup(s, i))),
        ("peek_mut", "after_expiry-head",
         "snap(self.peek()) === before_expiry(snap(result))",
         z3.Implies(nonempty, m.lookup(written, 0) == v)),
    ]


def prove_stack_contracts(
    model: Optional[StackModel] = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    only: Optional[Callable[[str, str], bool]] = None,
) -> ProofTrace:
    """Discharge every stack contract clause and return the trace.

    ``only`` filters obligations by ``(operation, rule)``.
    """
    m = model if model is not None else StackModel()
    witness_vars = {"s": m.s, "e": m.e, "v": m.v, "i": m.i}
    trace = ProofTrace()
    for operation, rule, formula, claim in _stack_claims(m):
        if only is not None and not only(operation, rule):
            continue
        trace.add(check_claim(operation, rule, formula, claim, witness_vars, timeout_ms))

    logger.info(
        "stack contracts: %d/%d proved, %d failed, %d unknown",
        trace.proved_count, trace.total, trace.failed_count, trace.unknown_count,
    )
    return trace
