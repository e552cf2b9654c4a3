"""Proof orchestration.

`Backend.prove_query` compiles a query into a tree of `ProveAction`s that
mirrors the query. Each action carries the trace its proof must declare,
computed from the query alone, and a `compute` coroutine that drives the
proving program against a committed map.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, ClassVar, List, Optional

from docproof.config import DEFAULT_CONFIG, BackendConfig
from docproof.errors import ConfigurationError, ProvingError, unreachable
from docproof.linearization.encoder import PathValueEncoder
from docproof.primitives.field import PALLAS, Fe
from docproof.primitives.merkle_map import KeyedMerkleMap
from docproof.protocol.program import QueryInput, QueryProgram, QueryProof, ReferenceQueryProgram
from docproof.protocol.query import AndGate, Condition, Gate, Operator, OrGate, Query, conditions_of
from docproof.protocol.trace import TraceHasher

logger = logging.getLogger(__name__)


# --- Data Classes ---

@dataclass(frozen=True)
class ProveAction:
    """Compiled query node.

    Attributes:
        compute: Proves the node against a map
        expected_trace: Trace the resulting proof must declare
    """
    compute: Callable[[KeyedMerkleMap], Awaitable[QueryProof]]
    expected_trace: Fe


@dataclass(frozen=True)
class ExecutionProof:
    """Proof of a whole query together with the key it verifies under."""

    VERSION: ClassVar[int] = 0

    proof: QueryProof
    verification_key_id: str

    @property
    def version(self) -> int:
        return self.VERSION

    @property
    def trace(self) -> Fe:
        return self.proof.public_output.trace

    @property
    def is_satisfied(self) -> bool:
        return self.proof.public_output.is_satisfied

    def __str__(self) -> str:
        return f"ExecutionProof({self.is_satisfied}, {self.trace})"

    def to_dict(self) -> dict:
        return {
            "version": self.VERSION,
            "verificationKeyId": self.verification_key_id,
            "proof": self.proof.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionProof":
        """Load the persisted shape.

        Raises:
            ConfigurationError: If the persisted version is not supported
        """
        version = data.get("version")
        if version != cls.VERSION:
            raise ConfigurationError(f"Unsupported execution proof version {version!r}, expected {cls.VERSION}")
        return cls(
            proof=QueryProof.from_dict(data["proof"]),
            verification_key_id=str(data["verificationKeyId"]),
        )


async def _gather_or_cancel(*coroutines: Awaitable[QueryProof]) -> List[QueryProof]:
    """Run coroutines as tasks; on the first failure cancel and drain the rest."""
    tasks = [asyncio.ensure_future(c) for c in coroutines]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


# --- Backend ---

class Backend:
    """Compiles queries into proof computations and executes them."""

    def __init__(
        self,
        program: Optional[QueryProgram],
        verification_key_id: Optional[str],
        encoder: PathValueEncoder,
        config: BackendConfig = DEFAULT_CONFIG,
    ):
        self.program = program
        self.verification_key_id = verification_key_id
        self.encoder = encoder
        self.tracer = TraceHasher(encoder)
        self.config = config

    @classmethod
    async def compile(
        cls,
        config: BackendConfig = DEFAULT_CONFIG,
        program: Optional[QueryProgram] = None,
        encoder: Optional[PathValueEncoder] = None,
    ) -> "Backend":
        """Compile the proving program and check its verification key.

        Raises:
            ConfigurationError: If config names a verification key id and the
                compiled program has a different one
        """
        if encoder is None:
            encoder = PathValueEncoder(PALLAS)
        if program is None:
            program = ReferenceQueryProgram(encoder)
        verification_key_id = await program.compile()
        expected = config.verification_key_id
        if expected is not None and verification_key_id != expected:
            raise ConfigurationError(
                f"Invalid verification key: compiled {verification_key_id}, expected {expected}"
            )
        return cls(program, verification_key_id, encoder, config)

    @classmethod
    def trace_only(cls, encoder: PathValueEncoder) -> "Backend":
        """Backend that computes expected traces but cannot prove."""
        return cls(None, None, encoder)

    # --- Execution ---

    async def execute(self, merkle_map: KeyedMerkleMap, query: Query) -> ExecutionProof:
        """Prove `query` against `merkle_map`."""
        if self.config.snapshot_map:
            merkle_map = merkle_map.snapshot()
        action = self.prove_query(query)
        logger.debug("Proving %d conditions for %s", len(conditions_of(query)), query)
        proof = await action.compute(merkle_map)
        result = ExecutionProof(proof, self.verification_key_id)
        logger.info("Executed query %s: satisfied=%s", query, result.is_satisfied)
        return result

    def expected_trace(self, query: Query) -> Fe:
        return self.prove_query(query).expected_trace

    # --- Compilation ---

    def prove_query(self, query: Query) -> ProveAction:
        if isinstance(query, Condition):
            return self._prove_condition(query)
        if isinstance(query, (AndGate, OrGate)):
            return self._prove_gate(query)
        unreachable(query)

    def _prove_condition(self, condition: Condition) -> ProveAction:
        key = self.encoder.from_path(condition.path)
        given = self.encoder.from_scalar(condition.expected)

        async def compute(merkle_map: KeyedMerkleMap) -> QueryProof:
            method = self._condition_method(condition.operator)
            actual = merkle_map.get(key)
            witness = merkle_map.witness(key)
            public_input = QueryInput(root=merkle_map.root, key=key, given=given)
            return await method(public_input, witness, actual)

        return ProveAction(compute, self.tracer.condition(condition.operator, key, given))

    def _prove_gate(self, gate: Gate) -> ProveAction:
        left = self.prove_query(gate.left)
        right = self.prove_query(gate.right)

        async def compute(merkle_map: KeyedMerkleMap) -> QueryProof:
            method = self._gate_method(gate.operator)
            if self.config.concurrent_gates:
                proof_left, proof_right = await _gather_or_cancel(
                    left.compute(merkle_map), right.compute(merkle_map)
                )
            else:
                proof_left = await left.compute(merkle_map)
                proof_right = await right.compute(merkle_map)
            root = merkle_map.root
            for child in (proof_left, proof_right):
                if child.public_input.root != root:
                    raise ProvingError("Merkle map changed while proving")
            return await method(QueryInput(root=root), proof_left, proof_right)

        trace = self.tracer.gate(gate.operator, left.expected_trace, right.expected_trace)
        return ProveAction(compute, trace)

    # --- Internal Helpers ---

    def _require_program(self) -> QueryProgram:
        if self.program is None:
            raise ConfigurationError("Backend has no proving program; it only computes traces")
        return self.program

    def _condition_method(self, operator: Operator):
        program = self._require_program()
        if operator is Operator.EQ:
            return program.eq
        if operator is Operator.NE:
            return program.ne
        if operator is Operator.GT:
            return program.gt
        if operator is Operator.LT:
            return program.lt
        if operator is Operator.GE:
            return program.ge
        if operator is Operator.LE:
            return program.le
        unreachable(operator)

    def _gate_method(self, operator: Operator):
        program = self._require_program()
        if operator is Operator.AND:
            return program.and_
        if operator is Operator.OR:
            return program.or_
        unreachable(operator)
