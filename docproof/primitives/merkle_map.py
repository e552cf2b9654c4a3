"""Key-value map committed to by a sparse Merkle tree.

A key is stored at the leaf whose index is the key's B-bit binary form read
in reverse. Witness steps then run from the key's most significant bit to its
least significant bit, which is the order a circuit rebuilds the key in by
repeated doubling.
"""

from docproof.primitives.field import Fe, FieldAlgebra
from docproof.primitives.merkle_tree import MerkleWitness, SparseMerkleTree


class KeyedMerkleMap:
    """Merkle map from field-element keys to field-element values."""

    def __init__(self, algebra: FieldAlgebra):
        self.algebra = algebra
        self.tree = SparseMerkleTree(algebra, algebra.bits + 1)

    @property
    def height(self) -> int:
        return self.tree.height

    @property
    def root(self) -> Fe:
        return self.tree.root

    def set(self, key: Fe, value: Fe) -> None:
        self.tree.set(self.key_to_index(key), value)

    def get(self, key: Fe) -> Fe:
        return self.tree.get(self.key_to_index(key))

    def witness(self, key: Fe) -> MerkleWitness:
        return self.tree.witness(self.key_to_index(key))

    def key_to_index(self, key: Fe) -> int:
        n = self.algebra.to_int(key)
        index = 0
        for _ in range(self.algebra.bits):
            index = (index << 1) | (n & 1)
            n >>= 1
        return index

    def snapshot(self) -> "KeyedMerkleMap":
        """Independent copy, safe to prove against while this map changes."""
        clone = KeyedMerkleMap.__new__(KeyedMerkleMap)
        clone.algebra = self.algebra
        clone.tree = self.tree.copy()
        return clone
