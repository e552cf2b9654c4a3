"""Linearization of documents into path -> scalar maps."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterator, List

from docproof.errors import UnsupportedScalarKindError, unreachable
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
)
from docproof.linearization.path import LinearPath


@dataclass(frozen=True)
class LinearElement:
    """One scalar leaf of a linearized document."""
    path: LinearPath
    value: ScalarKind


def to_linear_elements(kind: Kind, parent: LinearPath = LinearPath()) -> List[LinearElement]:
    """Walk a kind tree and emit one element per reachable scalar.

    Raises:
        UnsupportedScalarKindError: On Float, Bytes or Link leaves
    """
    if isinstance(kind, (NullKind, BooleanKind, IntegerKind, StringKind)):
        return [LinearElement(parent, kind)]
    if isinstance(kind, (FloatKind, BytesKind, LinkKind)):
        raise UnsupportedScalarKindError(kind.tag)
    if isinstance(kind, ListKind):
        elements: List[LinearElement] = []
        for i, item in enumerate(kind.value):
            elements.extend(to_linear_elements(item, parent.index(i)))
        return elements
    if isinstance(kind, MapKind):
        elements = []
        for name, item in kind.value.items():
            elements.extend(to_linear_elements(item, parent.child(name)))
        return elements
    unreachable(kind)


class LinearModel(Mapping):
    """Immutable mapping from path to scalar, in document order."""

    def __init__(self, entries: Dict[LinearPath, ScalarKind]):
        self._entries = dict(entries)

    def __getitem__(self, path: LinearPath) -> ScalarKind:
        return self._entries[path]

    def __iter__(self) -> Iterator[LinearPath]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        inner = ", ".join(f"{p}: {v.describe()}" for p, v in self._entries.items())
        return f"LinearModel({inner})"

    @classmethod
    def from_kind(cls, kind: Kind) -> "LinearModel":
        entries: Dict[LinearPath, ScalarKind] = {}
        for element in to_linear_elements(kind):
            entries[element.path] = element.value
        return cls(entries)

    @classmethod
    def from_python(cls, document: object) -> "LinearModel":
        """Classify and linearize a Python document in one step."""
        return cls.from_kind(from_python(document))
