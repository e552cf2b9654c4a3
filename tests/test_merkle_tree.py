"""Tests for the sparse Merkle tree."""

import pytest
from hypothesis import given, settings, strategies as st

from docproof.errors import RangeError
from docproof.primitives.field import PALLAS_PRIME
from docproof.primitives.merkle_tree import SparseMerkleTree, WitnessStep, compute_root


def is_valid_witness(tree: SparseMerkleTree, index: int) -> bool:
    root = compute_root(tree.algebra, tree.get(index), tree.witness(index))
    return tree.algebra.equal(root, tree.root)


class TestConstruction:
    """Empty trees and the zero table."""

    def test_root_of_tree_of_height_one_is_zero(self, algebra):
        tree = SparseMerkleTree(algebra, 1)
        assert tree.root == algebra.zero
        assert tree.capacity == 1

    def test_root_of_fresh_tree_is_top_zero(self, algebra):
        for height in (1, 2, 5, 64):
            tree = SparseMerkleTree(algebra, height)
            assert tree.root == tree.zeroes[height - 1]

    def test_zero_table_chains_hashes(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        z = tree.zeroes
        assert z[0] == algebra.zero
        assert z[1] == algebra.hash(z[0], z[0])
        assert z[3] == algebra.hash(z[2], z[2])

    def test_height_must_be_positive(self, algebra):
        with pytest.raises(ValueError):
            SparseMerkleTree(algebra, 0)

    def test_unset_leaf_reads_zero(self, algebra):
        tree = SparseMerkleTree(algebra, 8)
        assert tree.get(17) == algebra.zero


class TestSetAndGet:
    """Leaf updates and root recomputation."""

    def test_root_is_hash_of_two_leaves(self, algebra):
        tree = SparseMerkleTree(algebra, 2)
        tree.set(0, 1)
        tree.set(1, 2)
        assert tree.root == algebra.hash(1, 2)

    def test_set_then_get(self, algebra):
        tree = SparseMerkleTree(algebra, 16)
        tree.set(12345, 99)
        assert tree.get(12345) == 99

    def test_overwrite_recomputes_root(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        tree.set(2, 3)
        first = tree.root
        tree.set(2, 4)
        assert tree.root != first
        tree.set(2, 3)
        assert tree.root == first

    def test_setting_zero_restores_empty_root(self, algebra):
        tree = SparseMerkleTree(algebra, 6)
        empty = tree.root
        tree.set(7, 5)
        tree.set(7, algebra.zero)
        assert tree.root == empty

    def test_copy_is_independent(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        tree.set(1, 10)
        clone = tree.copy()
        tree.set(1, 11)
        assert clone.get(1) == 10
        assert clone.root != tree.root


class TestWitness:
    """Witness structure and root reconstruction."""

    def test_witness_length_is_height_minus_one(self, algebra):
        tree = SparseMerkleTree(algebra, 10)
        assert len(tree.witness(3)) == 9

    def test_witness_flags_follow_index_bits(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        # 0b101: right, left, right
        assert [s.is_left for s in tree.witness(5)] == [False, True, False]

    def test_witness_siblings(self, algebra):
        tree = SparseMerkleTree(algebra, 3)
        tree.set(0, 15)
        tree.set(1, 16)
        tree.set(2, 17)
        tree.set(3, 18)
        witness = tree.witness(2)
        assert witness == (
            WitnessStep(is_left=True, sibling=18),
            WitnessStep(is_left=False, sibling=algebra.hash(15, 16)),
        )

    def test_builds_correct_tree(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        tree.set(0, 1)
        tree.set(1, 2)
        tree.set(2, 3)
        for index in range(4):
            assert is_valid_witness(tree, index)

    def test_witness_rejects_wrong_leaf(self, algebra):
        tree = SparseMerkleTree(algebra, 3)
        tree.set(2, 17)
        root = compute_root(algebra, 16, tree.witness(2))
        assert root != tree.root

    def test_tree_of_height_128(self, algebra):
        tree = SparseMerkleTree(algebra, 128)
        index = 2**64
        assert is_valid_witness(tree, index)
        tree.set(index, 1)
        assert is_valid_witness(tree, index)

    def test_tree_of_height_256(self, algebra):
        tree = SparseMerkleTree(algebra, 256)
        index = 2**128
        assert is_valid_witness(tree, index)
        tree.set(index, 1)
        assert is_valid_witness(tree, index)
        last = tree.capacity - 1
        tree.set(last, 2)
        assert is_valid_witness(tree, last)
        assert is_valid_witness(tree, index)


class TestRange:
    """Out-of-range indices are rejected, never clamped."""

    @pytest.mark.parametrize("operation", ["get", "witness"])
    def test_read_at_capacity(self, algebra, operation):
        tree = SparseMerkleTree(algebra, 4)
        with pytest.raises(RangeError):
            getattr(tree, operation)(tree.capacity)

    def test_set_at_capacity(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        root = tree.root
        with pytest.raises(RangeError):
            tree.set(8, 1)
        assert tree.root == root

    def test_negative_index(self, algebra):
        tree = SparseMerkleTree(algebra, 4)
        with pytest.raises(RangeError):
            tree.set(-1, 1)

    @pytest.mark.parametrize("value", [-1, PALLAS_PRIME])
    def test_rejected_value_leaves_tree_unchanged(self, algebra, value):
        tree = SparseMerkleTree(algebra, 4)
        tree.set(3, 7)
        root = tree.root
        with pytest.raises(ValueError):
            tree.set(3, value)
        assert tree.get(3) == 7
        assert tree.root == root
        assert is_valid_witness(tree, 3)

    def test_range_error_is_index_error(self, algebra):
        tree = SparseMerkleTree(algebra, 2)
        with pytest.raises(IndexError):
            tree.get(2)


class TestWitnessProperty:
    """Witness folding reproduces the root for any index."""

    @settings(max_examples=50, deadline=None)
    @given(
        height=st.integers(min_value=1, max_value=40),
        data=st.data(),
    )
    def test_witness_reconstructs_root(self, algebra, height, data):
        tree = SparseMerkleTree(algebra, height)
        capacity = tree.capacity
        writes = data.draw(st.lists(
            st.tuples(st.integers(0, capacity - 1), st.integers(0, 2**64)),
            max_size=6,
        ))
        for index, value in writes:
            tree.set(index, value)
        index = data.draw(st.integers(0, capacity - 1))
        assert is_valid_witness(tree, index)
