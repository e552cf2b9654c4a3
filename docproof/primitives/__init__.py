"""Primitives - field algebra and Merkle commitments."""

from docproof.primitives.field import (
    PALLAS,
    PALLAS_PRIME,
    Fe,
    FieldAlgebra,
    PrimeFieldAlgebra,
)
from docproof.primitives.merkle_map import KeyedMerkleMap
from docproof.primitives.merkle_tree import (
    MerkleWitness,
    SparseMerkleTree,
    WitnessStep,
    compute_root,
)

__all__ = [
    # Field
    "Fe",
    "FieldAlgebra",
    "PrimeFieldAlgebra",
    "PALLAS",
    "PALLAS_PRIME",
    # Merkle
    "SparseMerkleTree",
    "WitnessStep",
    "MerkleWitness",
    "compute_root",
    "KeyedMerkleMap",
]
