"""Canonical paths to scalar leaves.

A path renders as "/seg1/seg2"; the document root is the empty string. List
items use reserved markers "'0", "'1", ... so they never collide with map
field names.
"""

import re
from dataclasses import dataclass
from typing import Tuple

from docproof.errors import InvalidSegmentError, ParseError

SEPARATOR = "/"
LIST_MARKER = "'"

_LIST_MARKER_RE = re.compile(r"'[0-9]+")


@dataclass(frozen=True)
class LinearPath:
    """Validated sequence of path segments."""

    segments: Tuple[str, ...] = ()

    def __post_init__(self):
        for segment in self.segments:
            if SEPARATOR in segment:
                raise InvalidSegmentError(segment)

    def __str__(self) -> str:
        return "".join(SEPARATOR + s for s in self.segments)

    def __repr__(self) -> str:
        return f"LinearPath({str(self)!r})"

    @classmethod
    def root(cls) -> "LinearPath":
        return cls()

    @classmethod
    def parse(cls, text: str) -> "LinearPath":
        """Parse the canonical string form, e.g. "/code/coding/'0/system"."""
        if text == "":
            return cls()
        if not text.startswith(SEPARATOR):
            raise ParseError(f"Path {text!r} must start with {SEPARATOR!r}")
        return cls(tuple(text[1:].split(SEPARATOR)))

    @classmethod
    def from_elements(cls, *names: str) -> "LinearPath":
        path = cls()
        for name in names:
            path = path.child(name)
        return path

    def child(self, name: str) -> "LinearPath":
        """Path of a map field below this one."""
        if _LIST_MARKER_RE.fullmatch(name):
            raise InvalidSegmentError(name, "reserved for list indices")
        return LinearPath(self.segments + (name,))

    def index(self, i: int) -> "LinearPath":
        """Path of a list item below this one."""
        return LinearPath(self.segments + (f"{LIST_MARKER}{i}",))
