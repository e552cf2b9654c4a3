"""Linearization - documents to committed path/value leaves."""

from docproof.linearization.encoder import MerkleMapFactory, PathValueEncoder
from docproof.linearization.kinds import (
    BooleanKind,
    BytesKind,
    FloatKind,
    IntegerKind,
    Kind,
    LinkKind,
    ListKind,
    MapKind,
    NullKind,
    ScalarKind,
    StringKind,
    from_python,
    is_scalar_kind,
)
from docproof.linearization.model import LinearElement, LinearModel, to_linear_elements
from docproof.linearization.path import LinearPath

__all__ = [
    # Kinds
    "Kind",
    "ScalarKind",
    "NullKind",
    "BooleanKind",
    "IntegerKind",
    "StringKind",
    "FloatKind",
    "BytesKind",
    "LinkKind",
    "ListKind",
    "MapKind",
    "from_python",
    "is_scalar_kind",
    # Paths and models
    "LinearPath",
    "LinearElement",
    "LinearModel",
    "to_linear_elements",
    # Encoding
    "PathValueEncoder",
    "MerkleMapFactory",
]
