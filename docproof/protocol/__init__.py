"""Protocol - queries, proof orchestration and verification."""

from docproof.protocol.backend import Backend, ExecutionProof, ProveAction
from docproof.protocol.program import (
    MerkleWitnessCircuit,
    QueryInput,
    QueryOutput,
    QueryProgram,
    QueryProof,
    ReferenceQueryProgram,
)
from docproof.protocol.query import (
    CONDITION_OPERATORS,
    AndGate,
    Condition,
    Operator,
    OrGate,
    Query,
    parse_query,
)
from docproof.protocol.trace import TraceHasher
from docproof.protocol.verifier import Verifier

__all__ = [
    # Query model
    "Operator",
    "CONDITION_OPERATORS",
    "Condition",
    "AndGate",
    "OrGate",
    "Query",
    "parse_query",
    # Trace
    "TraceHasher",
    # Proving program
    "QueryProgram",
    "ReferenceQueryProgram",
    "MerkleWitnessCircuit",
    "QueryInput",
    "QueryOutput",
    "QueryProof",
    # Orchestration
    "Backend",
    "ProveAction",
    "ExecutionProof",
    "Verifier",
]
