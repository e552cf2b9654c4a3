"""Error taxonomy.

Parse, encoding and range errors signal invalid input and propagate from the
raise site. Verification failure is not an exception: the verifier returns
False.
"""

from typing import NoReturn


class DocProofError(Exception):
    """Root of all errors raised by docproof."""


# --- Input Errors ---

class ParseError(DocProofError, ValueError):
    """Query surface syntax or path text could not be parsed."""


class InvalidSegmentError(ParseError):
    """A path segment contains the separator or collides with a list marker."""

    def __init__(self, segment: str, reason: str = "contains the path separator"):
        super().__init__(f"Invalid path segment {segment!r}: {reason}")
        self.segment = segment


class EncodingError(DocProofError, ValueError):
    """A document value cannot be represented or committed to."""


class BadInputError(EncodingError):
    """The input value has no document kind."""

    def __init__(self, value: object, kind: str):
        super().__init__(f"Bad input {value!r} for kind {kind}")
        self.value = value
        self.kind = kind


class UnsupportedScalarKindError(EncodingError):
    """A scalar kind that exists in the document model but cannot be linearized."""

    def __init__(self, tag: str):
        super().__init__(f"Scalar kind {tag} is not supported for linearization")
        self.tag = tag


class RangeError(DocProofError, IndexError):
    """Tree index outside [0, capacity)."""


# --- Setup Errors ---

class ConfigurationError(DocProofError):
    """Verification key mismatch or unsupported persisted schema version."""


# --- Proving Errors ---

class ProvingError(DocProofError):
    """The proving capability failed to produce a proof."""


class CircuitAssertionError(ProvingError):
    """A circuit assertion does not hold for the supplied inputs."""


class UnreachableCaseError(DocProofError, TypeError):
    """A closed variant received a value outside of its cases."""


def unreachable(value: NoReturn, message: str = "") -> NoReturn:
    """Exhaustiveness guard for dispatch over closed variants."""
    suffix = f": {message}" if message else ""
    raise UnreachableCaseError(f"Unhandled case {value!r}{suffix}")
