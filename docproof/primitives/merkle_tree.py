"""Sparse fixed-height binary Merkle tree.

Only nodes that differ from the empty tree are stored; every other node is read
from a precomputed table of empty-subtree hashes:
    zeroes[0] = 0, zeroes[L] = hash(zeroes[L-1], zeroes[L-1])
Indices are arbitrary-precision ints, so heights of 256 are fine.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from docproof.errors import RangeError
from docproof.primitives.field import Fe, FieldAlgebra

# --- Data Classes ---

@dataclass(frozen=True)
class WitnessStep:
    """One level of a Merkle witness.

    Attributes:
        is_left: The path node at this level is a left child (even index)
        sibling: The node at the bit-flipped index on the same level
    """
    is_left: bool
    sibling: Fe


MerkleWitness = Tuple[WitnessStep, ...]


# --- Merkle Tree ---

class SparseMerkleTree:
    """Binary Merkle tree with `2^(height-1)` leaves and zero-default nodes."""

    def __init__(self, algebra: FieldAlgebra, height: int):
        if height < 1:
            raise ValueError(f"height must be at least 1, got {height}")
        self.algebra = algebra
        self.height = height
        self._nodes: Dict[Tuple[int, int], Fe] = {}

        zeroes = [algebra.zero]
        for _ in range(1, height):
            zeroes.append(algebra.hash(zeroes[-1], zeroes[-1]))
        self._zeroes: Tuple[Fe, ...] = tuple(zeroes)

    @property
    def capacity(self) -> int:
        """Number of leaves."""
        return 1 << (self.height - 1)

    @property
    def zeroes(self) -> Tuple[Fe, ...]:
        return self._zeroes

    @property
    def root(self) -> Fe:
        return self._get_node(self.height - 1, 0)

    # --- Core Operations ---

    def get(self, index: int) -> Fe:
        """Return the leaf at index, or zero when it was never set."""
        self._check_index(index)
        return self._get_node(0, index)

    def set(self, index: int, value: Fe) -> None:
        """Set a leaf and recompute every ancestor on its path to the root.

        Raises:
            RangeError: If index is outside [0, capacity)
            ValueError: If value is not a canonical field element; the tree
                is left unchanged
        """
        self._check_index(index)
        value = self.algebra.to_int(value)

        updates = {(0, index): value}
        node = value
        current = index
        for level in range(1, self.height):
            sibling = self._get_node(level - 1, current ^ 1)
            node = self.algebra.hash(node, sibling) if current % 2 == 0 else self.algebra.hash(sibling, node)
            current //= 2
            updates[(level, current)] = node
        self._nodes.update(updates)

    def witness(self, index: int) -> MerkleWitness:
        """Return sibling path for the leaf at index, ordered leaf to root."""
        self._check_index(index)
        steps = []
        for level in range(self.height - 1):
            is_left = index % 2 == 0
            sibling = self._get_node(level, index + 1 if is_left else index - 1)
            steps.append(WitnessStep(is_left=is_left, sibling=sibling))
            index //= 2
        return tuple(steps)

    def copy(self) -> "SparseMerkleTree":
        """Independent tree with the same contents."""
        clone = SparseMerkleTree.__new__(SparseMerkleTree)
        clone.algebra = self.algebra
        clone.height = self.height
        clone._zeroes = self._zeroes
        clone._nodes = dict(self._nodes)
        return clone

    # --- Internal Helpers ---

    def _get_node(self, level: int, index: int) -> Fe:
        return self._nodes.get((level, index), self._zeroes[level])

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self.capacity:
            raise RangeError(f"index {index} is out of range for {self.capacity} leaves")


# --- Witness Folding ---

def compute_root(algebra: FieldAlgebra, leaf: Fe, witness: Sequence[WitnessStep]) -> Fe:
    """Fold a witness from the leaf up to the root it commits to."""
    node = leaf
    for step in witness:
        if step.is_left:
            node = algebra.hash(node, step.sibling)
        else:
            node = algebra.hash(step.sibling, node)
    return node
