"""Query proving program.

`QueryProgram` is the contract a proving backend fulfils: compile to a
verification key, prove a comparison against a committed leaf, combine two
proofs with AND/OR, and verify.

`ReferenceQueryProgram` is a transparent reference implementation of that
contract. Its proofs carry their private inputs and verification re-executes
the circuit, so it offers soundness for testing and local development but no
zero knowledge.

Public input:  (root, key, given)
Public output: (is_satisfied, trace)
"""

import asyncio
import hashlib
import json
import logging
import operator as op
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Protocol, Sequence, Tuple

import numpy as np

from docproof.errors import CircuitAssertionError, ProvingError
from docproof.linearization.encoder import PathValueEncoder
from docproof.primitives.field import Fe, FieldAlgebra
from docproof.primitives.merkle_tree import WitnessStep
from docproof.protocol.query import CONDITION_OPERATORS, GATE_OPERATORS, Operator
from docproof.protocol.trace import TraceHasher

logger = logging.getLogger(__name__)

# --- Constants ---

PROGRAM_NAME = "query-program"
PROGRAM_VERSION = 0

METHOD_NAMES: Dict[Operator, str] = {o: o.value[1:] for o in CONDITION_OPERATORS + GATE_OPERATORS}
METHOD_OPERATORS: Dict[str, Operator] = {name: o for o, name in METHOD_NAMES.items()}

COMPARATORS: Dict[Operator, Callable[[int, int], bool]] = {
    Operator.EQ: op.eq,
    Operator.NE: op.ne,
    Operator.GT: op.gt,
    Operator.LT: op.lt,
    Operator.GE: op.ge,
    Operator.LE: op.le,
}


# --- Data Classes ---

@dataclass(frozen=True)
class QueryInput:
    root: Fe
    key: Fe = 0
    given: Fe = 0


@dataclass(frozen=True)
class QueryOutput:
    is_satisfied: bool
    trace: Fe


@dataclass(frozen=True)
class QueryProof:
    """Proof produced by a query program method.

    Attributes:
        method: Program method that produced the proof ("eq", ..., "and", "or")
        public_input: Root, key and given literal (key/given are 0 for gates)
        public_output: Satisfaction flag and trace
        witness: Merkle witness, condition proofs only
        value: Actual leaf value, condition proofs only
        children: Left and right proofs, gate proofs only
        seal: Digest binding all of the above to a verification key
    """
    method: str
    public_input: QueryInput
    public_output: QueryOutput
    witness: Tuple[WitnessStep, ...] = ()
    value: Optional[Fe] = None
    children: Tuple["QueryProof", ...] = ()
    seal: str = ""

    def to_dict(self, include_seal: bool = True) -> dict:
        body = {
            "method": self.method,
            "publicInput": {
                "root": str(self.public_input.root),
                "key": str(self.public_input.key),
                "given": str(self.public_input.given),
            },
            "publicOutput": {
                "isSatisfied": self.public_output.is_satisfied,
                "trace": str(self.public_output.trace),
            },
            "witness": [{"isLeft": s.is_left, "sibling": str(s.sibling)} for s in self.witness],
            "value": None if self.value is None else str(self.value),
            "children": [c.to_dict() for c in self.children],
        }
        if include_seal:
            body["seal"] = self.seal
        return body

    @classmethod
    def from_dict(cls, data: dict) -> "QueryProof":
        public_input = data["publicInput"]
        public_output = data["publicOutput"]
        return cls(
            method=str(data["method"]),
            public_input=QueryInput(
                root=int(public_input["root"]),
                key=int(public_input["key"]),
                given=int(public_input["given"]),
            ),
            public_output=QueryOutput(
                is_satisfied=bool(public_output["isSatisfied"]),
                trace=int(public_output["trace"]),
            ),
            witness=tuple(WitnessStep(bool(s["isLeft"]), int(s["sibling"])) for s in data["witness"]),
            value=None if data["value"] is None else int(data["value"]),
            children=tuple(cls.from_dict(c) for c in data["children"]),
            seal=str(data["seal"]),
        )


# --- Capability ---

class QueryProgram(Protocol):
    """Proving capability consumed by the backend and verifier."""

    async def compile(self) -> str: ...

    async def eq(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof: ...

    async def ne(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof: ...

    async def gt(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof: ...

    async def lt(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof: ...

    async def ge(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof: ...

    async def le(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof: ...

    async def and_(self, public_input: QueryInput, left: QueryProof, right: QueryProof) -> QueryProof: ...

    async def or_(self, public_input: QueryInput, left: QueryProof, right: QueryProof) -> QueryProof: ...

    async def verify(self, proof: QueryProof, verification_key_id: str) -> bool: ...


# --- Merkle Witness Circuit ---

class MerkleWitnessCircuit:
    """Rebuilds root and key from a leaf value and a fixed-length witness.

    The key is accumulated most significant bit first: at each level the bit
    is 0 for a left child and 1 for a right child.
    """

    def __init__(self, algebra: FieldAlgebra, witness: Sequence[WitnessStep]):
        if len(witness) != algebra.bits:
            raise CircuitAssertionError(f"witness must have {algebra.bits} steps, got {len(witness)}")
        self.algebra = algebra
        self.is_lefts = np.array([bool(s.is_left) for s in witness], dtype=bool)
        self.siblings = algebra.field([algebra.to_int(s.sibling) for s in witness])

    def compute_root_and_key(self, value: Fe) -> Tuple[Fe, Fe]:
        F = self.algebra.field
        node = F(self.algebra.to_int(value))
        key = F(0)
        two = F(2)
        for is_left, raw_sibling in zip(self.is_lefts, self.siblings):
            sibling = F(int(raw_sibling))
            # b*(x - y) selects the order of (node, sibling) without branching
            b = F(int(is_left))
            m = b * (node - sibling)
            left, right = sibling + m, node - m
            node = F(self.algebra.hash(int(left), int(right)))
            key = key * two + F(0 if is_left else 1)
        return int(node), int(key)

    def is_valid_for(self, root: Fe, key: Fe, value: Fe) -> bool:
        computed_root, computed_key = self.compute_root_and_key(value)
        return computed_root == self.algebra.to_int(root) and computed_key == self.algebra.to_int(key)


# --- Reference Program ---

class ReferenceQueryProgram:
    """Transparent QueryProgram: proofs are verified by re-execution.

    Circuit work runs on worker threads through `asyncio.to_thread`; the
    calling event loop is never blocked while a proof is built or checked.
    """

    def __init__(self, encoder: PathValueEncoder):
        self.encoder = encoder
        self.algebra = encoder.algebra
        self.tracer = TraceHasher(encoder)
        self.verification_key_id: Optional[str] = None

    # --- Setup ---

    def descriptor(self) -> str:
        methods = ",".join(METHOD_NAMES.values())
        return f"{PROGRAM_NAME}|v{PROGRAM_VERSION}|p={self.algebra.order}|bits={self.algebra.bits}|{methods}"

    async def compile(self) -> str:
        """Derive the verification key id; deterministic for a given field."""
        key_id = hashlib.blake2b(self.descriptor().encode("utf-8"), digest_size=32).hexdigest()
        self.verification_key_id = key_id
        logger.debug("Compiled %s with verification key %s", PROGRAM_NAME, key_id)
        return key_id

    # --- Condition Methods ---

    async def eq(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof:
        return await asyncio.to_thread(self._prove_condition, Operator.EQ, public_input, witness, value)

    async def ne(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof:
        return await asyncio.to_thread(self._prove_condition, Operator.NE, public_input, witness, value)

    async def gt(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof:
        return await asyncio.to_thread(self._prove_condition, Operator.GT, public_input, witness, value)

    async def lt(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof:
        return await asyncio.to_thread(self._prove_condition, Operator.LT, public_input, witness, value)

    async def ge(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof:
        return await asyncio.to_thread(self._prove_condition, Operator.GE, public_input, witness, value)

    async def le(self, public_input: QueryInput, witness: Sequence[WitnessStep], value: Fe) -> QueryProof:
        return await asyncio.to_thread(self._prove_condition, Operator.LE, public_input, witness, value)

    # --- Combinators ---

    async def and_(self, public_input: QueryInput, left: QueryProof, right: QueryProof) -> QueryProof:
        return await asyncio.to_thread(self._prove_gate, Operator.AND, public_input, left, right)

    async def or_(self, public_input: QueryInput, left: QueryProof, right: QueryProof) -> QueryProof:
        return await asyncio.to_thread(self._prove_gate, Operator.OR, public_input, left, right)

    # --- Verification ---

    async def verify(self, proof: QueryProof, verification_key_id: str) -> bool:
        try:
            return await asyncio.to_thread(self._verify_proof, proof, verification_key_id)
        except (CircuitAssertionError, ValueError) as e:
            logger.debug("Proof rejected: %s", e)
            return False

    # --- Circuits ---

    def _condition_circuit(
        self,
        operator: Operator,
        public_input: QueryInput,
        witness: Sequence[WitnessStep],
        value: Fe,
    ) -> QueryOutput:
        circuit = MerkleWitnessCircuit(self.algebra, witness)
        is_valid = circuit.is_valid_for(public_input.root, public_input.key, value)
        holds = COMPARATORS[operator](self.algebra.to_int(value), self.algebra.to_int(public_input.given))
        trace = self.tracer.condition(operator, public_input.key, public_input.given)
        return QueryOutput(is_satisfied=bool(is_valid and holds), trace=trace)

    def _gate_circuit(
        self,
        operator: Operator,
        public_input: QueryInput,
        left: QueryProof,
        right: QueryProof,
    ) -> QueryOutput:
        for child in (left, right):
            if not self.algebra.equal(child.public_input.root, public_input.root):
                raise CircuitAssertionError(
                    f"child root {child.public_input.root} differs from input root {public_input.root}"
                )
            if not self._verify_proof(child, self.verification_key_id):
                raise CircuitAssertionError(f"child {child.method} proof does not verify")

        a, b = left.public_output.is_satisfied, right.public_output.is_satisfied
        if operator is Operator.AND:
            is_satisfied = a and b
        else:
            is_satisfied = a or b
        trace = self.tracer.gate(operator, left.public_output.trace, right.public_output.trace)
        return QueryOutput(is_satisfied=is_satisfied, trace=trace)

    # --- Internal Helpers ---

    def _require_compiled(self) -> str:
        if self.verification_key_id is None:
            raise ProvingError(f"{PROGRAM_NAME} must be compiled before proving")
        return self.verification_key_id

    def _prove_condition(
        self,
        operator: Operator,
        public_input: QueryInput,
        witness: Sequence[WitnessStep],
        value: Fe,
    ) -> QueryProof:
        key_id = self._require_compiled()
        output = self._condition_circuit(operator, public_input, witness, value)
        logger.debug("Proved %s: satisfied=%s", operator, output.is_satisfied)
        proof = QueryProof(
            method=METHOD_NAMES[operator],
            public_input=public_input,
            public_output=output,
            witness=tuple(witness),
            value=value,
        )
        return self._sealed(proof, key_id)

    def _prove_gate(
        self,
        operator: Operator,
        public_input: QueryInput,
        left: QueryProof,
        right: QueryProof,
    ) -> QueryProof:
        key_id = self._require_compiled()
        output = self._gate_circuit(operator, public_input, left, right)
        logger.debug("Proved %s: satisfied=%s", operator, output.is_satisfied)
        proof = QueryProof(
            method=METHOD_NAMES[operator],
            public_input=public_input,
            public_output=output,
            children=(left, right),
        )
        return self._sealed(proof, key_id)

    def _seal(self, proof: QueryProof, verification_key_id: str) -> str:
        body = json.dumps(proof.to_dict(include_seal=False), sort_keys=True, separators=(",", ":"))
        h = hashlib.blake2b(digest_size=32)
        h.update(verification_key_id.encode("utf-8"))
        h.update(body.encode("utf-8"))
        return h.hexdigest()

    def _sealed(self, proof: QueryProof, verification_key_id: str) -> QueryProof:
        return replace(proof, seal=self._seal(proof, verification_key_id))

    def _verify_proof(self, proof: QueryProof, verification_key_id: Optional[str]) -> bool:
        if verification_key_id is None or verification_key_id != self.verification_key_id:
            return False
        if proof.seal != self._seal(proof, verification_key_id):
            return False

        operator = METHOD_OPERATORS.get(proof.method)
        if operator in CONDITION_OPERATORS:
            if proof.value is None or proof.children:
                return False
            output = self._condition_circuit(operator, proof.public_input, proof.witness, proof.value)
        elif operator in GATE_OPERATORS:
            if len(proof.children) != 2 or proof.witness or proof.value is not None:
                return False
            if proof.public_input.key != 0 or proof.public_input.given != 0:
                return False
            left, right = proof.children
            output = self._gate_circuit(operator, proof.public_input, left, right)
        else:
            return False
        return output == proof.public_output
