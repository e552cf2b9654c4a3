"""Encoding of paths and scalars into field elements.

Strings and paths share one encoding: the UTF-8 bytes, one field element per
byte, hashed together. Null and Boolean(false) both encode to 1; this is kept
for compatibility with existing commitments.
"""

from typing import Optional

from docproof.errors import unreachable
from docproof.linearization.kinds import BooleanKind, IntegerKind, NullKind, ScalarKind, StringKind
from docproof.linearization.model import LinearModel
from docproof.linearization.path import LinearPath
from docproof.primitives.field import Fe, FieldAlgebra
from docproof.primitives.merkle_map import KeyedMerkleMap


class PathValueEncoder:
    """Deterministic (path, scalar) -> field element mapping."""

    def __init__(self, algebra: FieldAlgebra):
        self.algebra = algebra

    def from_string(self, text: str) -> Fe:
        return self.algebra.hash(*(self.algebra.from_int(b) for b in text.encode("utf-8")))

    def from_path(self, path: LinearPath) -> Fe:
        return self.from_string(str(path))

    def from_scalar(self, scalar: ScalarKind) -> Fe:
        if isinstance(scalar, StringKind):
            return self.from_string(scalar.value)
        if isinstance(scalar, NullKind):
            return self.algebra.from_int(1)
        if isinstance(scalar, IntegerKind):
            return self.algebra.from_int(scalar.value)
        if isinstance(scalar, BooleanKind):
            return self.algebra.from_int(2 if scalar.value else 1)
        unreachable(scalar)


class MerkleMapFactory:
    """Builds the commitment map for a linearized document."""

    def __init__(self, algebra: FieldAlgebra, encoder: Optional[PathValueEncoder] = None):
        self.algebra = algebra
        self.encoder = encoder if encoder is not None else PathValueEncoder(algebra)

    def from_linear_model(self, model: LinearModel) -> KeyedMerkleMap:
        merkle_map = KeyedMerkleMap(self.algebra)
        for path, scalar in model.items():
            merkle_map.set(self.encoder.from_path(path), self.encoder.from_scalar(scalar))
        return merkle_map

    def from_python(self, document: object) -> KeyedMerkleMap:
        return self.from_linear_model(LinearModel.from_python(document))
