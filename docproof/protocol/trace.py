"""Trace hashing.

A trace is a hash chain over a query's shape and literals. Circuits emit it as
public output and the verifier recomputes it from the query it was given, so a
proof cannot be passed off as answering a different query.

    condition:  hash(sigil(op), key, given)
    gate:       hash(sigil(op), trace(left), trace(right))
"""

from typing import Dict

from docproof.linearization.encoder import PathValueEncoder
from docproof.primitives.field import Fe
from docproof.protocol.query import CONDITION_OPERATORS, GATE_OPERATORS, Operator


class TraceHasher:
    """Computes node traces for one field encoding."""

    def __init__(self, encoder: PathValueEncoder):
        self.encoder = encoder
        self.algebra = encoder.algebra
        self._sigils: Dict[Operator, Fe] = {op: encoder.from_string(op.value) for op in Operator}

    def sigil(self, operator: Operator) -> Fe:
        return self._sigils[operator]

    def condition(self, operator: Operator, key: Fe, given: Fe) -> Fe:
        if operator not in CONDITION_OPERATORS:
            raise ValueError(f"{operator} is not a condition operator")
        return self.algebra.hash(self.sigil(operator), key, given)

    def gate(self, operator: Operator, left: Fe, right: Fe) -> Fe:
        if operator not in GATE_OPERATORS:
            raise ValueError(f"{operator} is not a gate operator")
        return self.algebra.hash(self.sigil(operator), left, right)
