"""
docproof

Commit to a structured document and prove, without revealing it, that a
boolean query over its fields holds.

This package provides:
- Prime field algebra (via galois) and sparse Merkle commitments
- Document linearization into path -> scalar leaves
- A query language compiled into recursive proof composition
- Trace hashing that binds each proof to the query it answers

Usage:
    from docproof import Backend, MerkleMapFactory, PALLAS, Verifier, parse_query

    merkle_map = MerkleMapFactory(PALLAS).from_python({"a": 10, "b": 20})
    query = parse_query({"/a": {"$eq": 10}, "/b": {"$ge": 20}})

    backend = await Backend.compile()
    proof = await backend.execute(merkle_map, query)
    verifier = await Verifier.create()
    assert await verifier.check(query, proof)
"""

# Configuration
from docproof.config import BackendConfig

# Errors
from docproof.errors import (
    BadInputError,
    CircuitAssertionError,
    ConfigurationError,
    DocProofError,
    EncodingError,
    InvalidSegmentError,
    ParseError,
    ProvingError,
    RangeError,
    UnsupportedScalarKindError,
)

# Linearization
from docproof.linearization import (
    LinearModel,
    LinearPath,
    MerkleMapFactory,
    PathValueEncoder,
    from_python,
)

# Field and Merkle commitments
from docproof.primitives import (
    PALLAS,
    FieldAlgebra,
    KeyedMerkleMap,
    PrimeFieldAlgebra,
    SparseMerkleTree,
)

# Queries, proving and verification
from docproof.protocol import (
    Backend,
    ExecutionProof,
    ProveAction,
    Query,
    ReferenceQueryProgram,
    Verifier,
    parse_query,
)

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "BackendConfig",
    # Errors
    "DocProofError",
    "ParseError",
    "InvalidSegmentError",
    "EncodingError",
    "BadInputError",
    "UnsupportedScalarKindError",
    "RangeError",
    "ConfigurationError",
    "ProvingError",
    "CircuitAssertionError",
    # Field and Merkle
    "FieldAlgebra",
    "PrimeFieldAlgebra",
    "PALLAS",
    "SparseMerkleTree",
    "KeyedMerkleMap",
    # Linearization
    "from_python",
    "LinearPath",
    "LinearModel",
    "PathValueEncoder",
    "MerkleMapFactory",
    # Protocol
    "Query",
    "parse_query",
    "Backend",
    "ProveAction",
    "ExecutionProof",
    "ReferenceQueryProgram",
    "Verifier",
]
