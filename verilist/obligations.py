"""verilist Proof Obligations.

Each stack contract discharged by ``verilist.proofs`` is recorded as a
``ProofObligation`` that keeps:

  1. the formula that must hold, in contract notation;
  2. the SMT-LIB2 text handed to Z3, so the result can be reproduced;
  3. the solver outcome: UNSAT (proved), SAT (counterexample) or UNKNOWN;
  4. the witness, i.e. the model that violates the claim, when SAT.

Usage:
    trace = prove_stack_contracts()
    print(trace.to_ascii_table())
    print(trace.to_json())
"""

from __future__ import annotations

import json
import textwrap
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List

from verilist import __version__


class SolverResult(str, Enum):
    """Outcome of an SMT query."""
    UNSAT = "UNSAT"          # Negated claim unsatisfiable → property proved
    SAT = "SAT"              # Counterexample found
    UNKNOWN = "UNKNOWN"      # Solver timed out or gave up
    ERROR = "ERROR"          # The query could not be built or run


@dataclass
class ProofObligation:
    """A single contract clause with its proof artifact.

    Attributes
    ----------
    operation : str
        The stack operation the clause belongs to (e.g. "push").
    rule : str
        Which clause of the operation's contract is being discharged
        (e.g. "ensures-length", "head_removed-shift").
    formula : str
        The clause in contract notation.
    smtlib2 : str
        The SMT-LIB2 query sent to Z3.
    result : SolverResult
        Outcome of the query.
    witness : Dict[str, str]
        Model values violating the clause. Empty unless result is SAT.
    proved : bool
        True iff result is UNSAT.
    duration_ms : float
        Solver time in milliseconds.
    """
    operation: str
    rule: str
    formula: str
    smtlib2: str = ""
    result: SolverResult = SolverResult.UNKNOWN
    witness: Dict[str, str] = field(default_factory=dict)
    explanation: str = ""
    proved: bool = False
    duration_ms: float = 0.0

    def __post_init__(self) -> None:
        if self.result == SolverResult.UNSAT:
            self.proved = True

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["result"] = self.result.value
        return d

    def to_ascii(self) -> str:
        """Single-obligation summary for terminal output."""
        status = "✓ PROVED" if self.proved else ("✗ FAILED" if self.result == SolverResult.SAT else f"? {self.result.value}")
        lines = [
            f"  [{self.operation}] {status}",
            f"    Rule      : {self.rule}",
            f"    Formula   : {self.formula}",
        ]
        if self.explanation:
            lines.append(f"    Explain   : {textwrap.fill(self.explanation, width=72, subsequent_indent=' ' * 16)}")
        if self.witness:
            lines.append(f"    Witness   : {json.dumps(self.witness)}")
        if self.duration_ms:
            lines.append(f"    Solver ms : {self.duration_ms:.1f}")
        return "\n".join(lines)


@dataclass
class ProofTrace:
    """Ordered collection of proof obligations from one run."""
    obligations: List[ProofObligation] = field(default_factory=list)
    version: str = __version__

    def add(self, obligation: ProofObligation) -> None:
        self.obligations.append(obligation)

    def extend(self, obligations: List[ProofObligation]) -> None:
        self.obligations.extend(obligations)

    def get(self, operation: str, rule: str) -> ProofObligation:
        for o in self.obligations:
            if o.operation == operation and o.rule == rule:
                return o
        raise KeyError((operation, rule))

    # ------------------------------------------------------------------
    # Aggregate statistics
    # ------------------------------------------------------------------

    @property
    def total(self) -> int:
        return len(self.obligations)

    @property
    def proved_count(self) -> int:
        return sum(1 for o in self.obligations if o.proved)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.obligations if o.result == SolverResult.SAT)

    @property
    def unknown_count(self) -> int:
        return sum(1 for o in self.obligations if o.result in (SolverResult.UNKNOWN, SolverResult.ERROR))

    @property
    def all_proved(self) -> bool:
        return self.total > 0 and self.proved_count == self.total

    def witnesses(self) -> List[Dict[str, Any]]:
        """Return all counterexamples."""
        return [
            {"operation": o.operation, "rule": o.rule, "formula": o.formula, "witness": o.witness}
            for o in self.obligations
            if o.witness
        ]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "summary": {
                "total": self.total,
                "proved": self.proved_count,
                "failed": self.failed_count,
                "unknown": self.unknown_count,
                "all_proved": self.all_proved,
            },
            "obligations": [o.to_dict() for o in self.obligations],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_ascii_table(self) -> str:
        """Render a compact ASCII table of all obligations."""
        if not self.obligations:
            return "  (no proof obligations recorded)\n"

        col_w = {"operation": 12, "rule": 28, "result": 8}
        header = (
            f"  {'Operation':<{col_w['operation']}} "
            f"{'Rule':<{col_w['rule']}} "
            f"{'Result':<{col_w['result']}}"
        )
        sep = "  " + "-" * (sum(col_w.values()) + 2)
        rows = [header, sep]
        for o in self.obligations:
            result_str = "✓ PROVED" if o.proved else ("✗ FAILED" if o.result == SolverResult.SAT else o.result.value)
            rows.append(
                f"  {o.operation:<{col_w['operation']}} "
                f"{o.rule:<{col_w['rule']}} "
                f"{result_str:<{col_w['result']}}"
            )
        rows.append(sep)
        rows.append(
            f"  {self.proved_count}/{self.total} obligations proved"
            + (f", {self.failed_count} failed" if self.failed_count else "")
            + (f", {self.unknown_count} unknown" if self.unknown_count else "")
        )
        return "\n".join(rows) + "\n"

    def to_smtlib2_bundle(self) -> str:
        """Emit all SMT-LIB2 queries as a single annotated file."""
        parts = [
            "; verilist proof obligation bundle",
            f"; Version: {self.version}",
            f"; Total obligations: {self.total}",
            "",
        ]
        for i, o in enumerate(self.obligations, 1):
            if not o.smtlib2:
                continue
            parts += [
                f"; --- Obligation {i}: {o.operation} / {o.rule} ---",
                f"; Formula : {o.formula}",
                f"; Result  : {o.result.value}",
                o.smtlib2,
                "(check-sat)",
                "(reset)",
                "",
            ]
        return "\n".join(parts)
