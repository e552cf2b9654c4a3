"""Prime field algebra used for commitments and circuits.

Field elements cross data-structure boundaries as canonical Python ints in
[0, p). Arithmetic inside circuits goes through the galois field type exposed
as `PrimeFieldAlgebra.field`.

The shipped instance `PALLAS` is the base field of the Pallas curve:
    p = 2^254 + 45560315531419706090280762371685220353
It is 255 bits wide, so a keyed map over it uses a tree of height 256.
"""

import hashlib
from typing import Protocol, Type

import galois

# --- Constants ---

PALLAS_PRIME = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001
PALLAS_GENERATOR = 5

ELEMENT_BYTES = 32

_HASH_PERSON = b"docproof.field"

# --- Type Aliases ---

Fe = int


# --- Capability ---

class FieldAlgebra(Protocol):
    """Field arithmetic plus a collision-resistant multi-input hash."""

    bits: int
    order: int
    zero: Fe
    # galois FieldArray subclass used for in-circuit arithmetic
    field: Type[galois.FieldArray]

    def equal(self, a: Fe, b: Fe) -> bool: ...

    def hash(self, *elements: Fe) -> Fe: ...

    def to_int(self, a: Fe) -> int: ...

    def from_int(self, n: int) -> Fe: ...


# --- Prime Field ---

class PrimeFieldAlgebra:
    """FieldAlgebra over GF(p) with a BLAKE2b-based hash to the field."""

    def __init__(self, prime: int, generator: int):
        if prime.bit_length() > ELEMENT_BYTES * 8:
            raise ValueError(f"prime must fit in {ELEMENT_BYTES} bytes, got {prime.bit_length()} bits")
        self.order = prime
        self.bits = prime.bit_length()
        # An explicit generator avoids factoring p - 1 at construction
        self.field = galois.GF(prime, primitive_element=generator, verify=False)
        self.zero: Fe = 0

    def __repr__(self) -> str:
        return f"PrimeFieldAlgebra(bits={self.bits})"

    def equal(self, a: Fe, b: Fe) -> bool:
        return self.to_int(a) == self.to_int(b)

    def hash(self, *elements: Fe) -> Fe:
        """Hash any number of field elements to one field element.

        The arity is absorbed first so inputs of different lengths never share
        a preimage encoding.
        """
        h = hashlib.blake2b(digest_size=64, person=_HASH_PERSON)
        h.update(len(elements).to_bytes(4, "big"))
        for e in elements:
            h.update(self.to_int(e).to_bytes(ELEMENT_BYTES, "big"))
        return int.from_bytes(h.digest(), "big") % self.order

    def to_int(self, a: Fe) -> int:
        n = int(a)
        if n < 0 or n >= self.order:
            raise ValueError(f"{n} is not a canonical element of a {self.bits}-bit field")
        return n

    def from_int(self, n: int) -> Fe:
        return int(self.field(n % self.order))


PALLAS = PrimeFieldAlgebra(PALLAS_PRIME, PALLAS_GENERATOR)
