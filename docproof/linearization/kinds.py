"""Document data model.

Every Python value accepted as a document is classified into one of nine
kinds. Four of them are scalars that can be committed to (Null, Boolean,
Integer, String); Float, Bytes and Link exist in the model but are rejected at
linearization; List and Map are containers.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar, Dict, Tuple, Union

from docproof.errors import BadInputError

# Largest integer a JSON/JavaScript number represents exactly
MAX_SAFE_INTEGER = 2**53 - 1


# --- Scalar Kinds ---

@dataclass(frozen=True)
class NullKind:
    tag: ClassVar[str] = "null-kind"
    value: None = None

    def describe(self) -> str:
        return "NullKind"


@dataclass(frozen=True)
class BooleanKind:
    tag: ClassVar[str] = "boolean-kind"
    value: bool

    def describe(self) -> str:
        return f"BooleanKind({str(self.value).lower()})"


@dataclass(frozen=True)
class IntegerKind:
    tag: ClassVar[str] = "integer-kind"
    value: int

    def describe(self) -> str:
        return f"IntegerKind({self.value})"


@dataclass(frozen=True)
class StringKind:
    tag: ClassVar[str] = "string-kind"
    value: str

    def describe(self) -> str:
        return f'StringKind("{self.value}")'


# --- Unsupported Scalar Kinds ---

@dataclass(frozen=True)
class FloatKind:
    tag: ClassVar[str] = "float-kind"
    value: float

    def describe(self) -> str:
        return f"FloatKind({self.value})"


@dataclass(frozen=True)
class BytesKind:
    tag: ClassVar[str] = "bytes-kind"
    value: bytes

    def describe(self) -> str:
        return f"BytesKind({self.value.hex()})"


@dataclass(frozen=True)
class LinkKind:
    """Content-addressed link; `value` is the CID in its string form."""
    tag: ClassVar[str] = "link-kind"
    value: str

    def describe(self) -> str:
        return f"LinkKind({self.value})"


# --- Recursive Kinds ---

@dataclass(frozen=True)
class ListKind:
    tag: ClassVar[str] = "list-kind"
    value: Tuple["Kind", ...]

    def describe(self) -> str:
        return f"ListKind({', '.join(v.describe() for v in self.value)})"


@dataclass(frozen=True)
class MapKind:
    tag: ClassVar[str] = "map-kind"
    value: Dict[str, "Kind"]

    def describe(self) -> str:
        inner = ", ".join(f"{k}: {v.describe()}" for k, v in self.value.items())
        return f"MapKind({inner})"


# --- Type Aliases ---

ScalarKind = Union[NullKind, BooleanKind, IntegerKind, StringKind]
UnsupportedScalarKind = Union[FloatKind, BytesKind, LinkKind]
RecursiveKind = Union[ListKind, MapKind]
Kind = Union[ScalarKind, UnsupportedScalarKind, RecursiveKind]

SCALAR_KINDS = (NullKind, BooleanKind, IntegerKind, StringKind)
ALL_KINDS = SCALAR_KINDS + (FloatKind, BytesKind, LinkKind, ListKind, MapKind)


def is_scalar_kind(kind: Kind) -> bool:
    return isinstance(kind, SCALAR_KINDS)


# --- Classification ---

def from_python(value: object) -> Kind:
    """Classify a Python value into a document kind.

    Args:
        value: None, bool, int, float, str, bytes-like, list/tuple, a mapping
            with string keys, or an already classified kind

    Returns:
        The kind tree for the value

    Raises:
        BadInputError: Non-finite floats, integers beyond the safe range,
            non-string map keys, and values of any other type
    """
    if isinstance(value, ALL_KINDS):
        return value
    if value is None:
        return NullKind()
    # bool is a subclass of int, so it must be tested first
    if isinstance(value, bool):
        return BooleanKind(value)
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            raise BadInputError(value, "integer")
        return IntegerKind(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise BadInputError(value, "number")
        if value.is_integer():
            return from_python(int(value))
        return FloatKind(value)
    if isinstance(value, str):
        return StringKind(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesKind(bytes(value))
    if isinstance(value, (list, tuple)):
        return ListKind(tuple(from_python(v) for v in value))
    if isinstance(value, Mapping):
        record: Dict[str, Kind] = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise BadInputError(k, "map key")
            record[k] = from_python(v)
        return MapKind(record)
    raise BadInputError(value, type(value).__name__)
