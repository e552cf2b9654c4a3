"""Query proof verification.

A proof is accepted for a query only if
1. the trace it declares equals the trace recomputed from the query, and
2. the proving program accepts it under the known verification key.

The circuit only certifies that its trace is the hash chain of *some* query,
so check 1 is what ties the proof to the query the verifier was given.
"""

import logging
from typing import Optional

from docproof.linearization.encoder import PathValueEncoder
from docproof.primitives.field import PALLAS, Fe
from docproof.protocol.backend import Backend, ExecutionProof
from docproof.protocol.program import QueryProgram, ReferenceQueryProgram
from docproof.protocol.query import Query

logger = logging.getLogger(__name__)


class Verifier:
    """Checks execution proofs against declared queries."""

    def __init__(self, program: QueryProgram, verification_key_id: str, encoder: PathValueEncoder):
        self.program = program
        self.verification_key_id = verification_key_id
        self.encoder = encoder
        self._tracer = Backend.trace_only(encoder)

    @classmethod
    async def create(cls, encoder: Optional[PathValueEncoder] = None) -> "Verifier":
        """Verifier for the reference program over `encoder`'s field."""
        if encoder is None:
            encoder = PathValueEncoder(PALLAS)
        program = ReferenceQueryProgram(encoder)
        verification_key_id = await program.compile()
        return cls(program, verification_key_id, encoder)

    async def check(self, query: Query, execution_proof: ExecutionProof, root: Optional[Fe] = None) -> bool:
        """Return True only if the proof answers `query` and verifies.

        Args:
            query: Query the proof must answer
            execution_proof: Proof to check
            root: Commitment the caller trusts. When given, the proof must be
                about a map with this root. Without it, any map satisfying
                the query is accepted and the caller must compare
                `execution_proof.proof.public_input.root` itself.

        Never raises for malformed or adversarial proofs; any failure is False.
        """
        try:
            return await self._check(query, execution_proof, root)
        except Exception:
            logger.warning("Verification failed with an error", exc_info=True)
            return False

    async def _check(self, query: Query, execution_proof: ExecutionProof, root: Optional[Fe]) -> bool:
        expected_trace = self._tracer.expected_trace(query)
        if expected_trace != execution_proof.trace:
            logger.warning("Trace mismatch: proof does not answer query %s", query)
            return False

        if root is not None and execution_proof.proof.public_input.root != root:
            logger.warning("Proof is for root %s, expected %s", execution_proof.proof.public_input.root, root)
            return False

        if execution_proof.verification_key_id != self.verification_key_id:
            logger.warning("Proof declares unknown verification key %s", execution_proof.verification_key_id)
            return False

        if not await self.program.verify(execution_proof.proof, self.verification_key_id):
            logger.warning("Proof for query %s failed cryptographic verification", query)
            return False
        return True
