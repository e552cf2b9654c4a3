"""Query model and surface-syntax parser.

Surface syntax:
    {"/a": {"$eq": 10}, "/b": {"$ge": 20}}      conditions in an object are AND-ed
    [{"/a": {"$eq": 1}}, {"/a": {"$eq": 2}}]    groups in an array are OR-ed

Gates are binary. Groups with more than two members become a left-associated
chain, and nested arrays are flattened into the enclosing OR chain.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple, Union

from docproof.errors import ParseError, unreachable
from docproof.linearization.kinds import ScalarKind, from_python, is_scalar_kind
from docproof.linearization.path import LinearPath


class Operator(str, Enum):
    """Query sigils."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    LT = "$lt"
    GE = "$ge"
    LE = "$le"
    AND = "$and"
    OR = "$or"

    def __str__(self) -> str:
        return self.value


# Parse order: the first operator whose key is present wins
CONDITION_OPERATORS: Tuple[Operator, ...] = (
    Operator.EQ,
    Operator.NE,
    Operator.GT,
    Operator.LT,
    Operator.GE,
    Operator.LE,
)
GATE_OPERATORS: Tuple[Operator, ...] = (Operator.AND, Operator.OR)


# --- AST ---

@dataclass(frozen=True)
class Condition:
    operator: Operator
    path: LinearPath
    expected: ScalarKind

    def __post_init__(self):
        if self.operator not in CONDITION_OPERATORS:
            raise ValueError(f"{self.operator} is not a condition operator")

    def __str__(self) -> str:
        return f"{self.operator}({self.path}, {self.expected.describe()})"


@dataclass(frozen=True)
class AndGate:
    left: "Query"
    right: "Query"

    operator = Operator.AND

    def __str__(self) -> str:
        return f"{self.operator}({self.left}, {self.right})"


@dataclass(frozen=True)
class OrGate:
    left: "Query"
    right: "Query"

    operator = Operator.OR

    def __str__(self) -> str:
        return f"{self.operator}({self.left}, {self.right})"


Gate = Union[AndGate, OrGate]
Query = Union[Condition, AndGate, OrGate]


def _chain(gate: type, queries: Sequence[Query], name: str) -> Query:
    if len(queries) == 0:
        raise ParseError(f"Empty {name} gate")
    result = queries[0]
    for query in queries[1:]:
        result = gate(result, query)
    return result


# --- Parser ---

def parse_condition(path: LinearPath, condition: object) -> Condition:
    """Parse a single-operator object such as {"$eq": 10}."""
    if not isinstance(condition, Mapping):
        raise ParseError(f"Condition for {path} must be an object, got {condition!r}")

    known = {op.value for op in CONDITION_OPERATORS}
    unknown = [k for k in condition if k not in known]
    if unknown:
        raise ParseError(f"Unknown operator {unknown[0]!r} for {path}")

    matches = [op for op in CONDITION_OPERATORS if op.value in condition]
    if not matches:
        raise ParseError(f"No operator given for {path}")
    if len(matches) > 1:
        names = ", ".join(op.value for op in matches)
        raise ParseError(f"More than one operator given for {path}: {names}")

    operator = matches[0]
    expected = from_python(condition[operator.value])
    if not is_scalar_kind(expected):
        raise ParseError(f"Not a scalar: {expected.describe()}")
    return Condition(operator, path, expected)


def parse_and_group(group: Mapping) -> Query:
    conditions = [parse_condition(LinearPath.parse(path), c) for path, c in group.items()]
    return _chain(AndGate, conditions, "AND")


def _or_members(group: Sequence) -> List[Query]:
    if len(group) == 0:
        raise ParseError("Empty OR gate")
    members: List[Query] = []
    for item in group:
        if isinstance(item, (list, tuple)):
            members.extend(_or_members(item))
        elif isinstance(item, Mapping):
            members.append(parse_and_group(item))
        else:
            raise ParseError(f"OR group members must be objects or arrays, got {item!r}")
    return members


def parse_or_group(group: Sequence) -> Query:
    return _chain(OrGate, _or_members(group), "OR")


def parse_query(surface: object) -> Query:
    """Parse nested object/array surface syntax into a query AST.

    Raises:
        ParseError: Unknown or ambiguous operators, bad paths, non-scalar
            literals, empty groups, or a top level that is not an object or array
    """
    if isinstance(surface, (list, tuple)):
        return parse_or_group(surface)
    if isinstance(surface, Mapping):
        return parse_and_group(surface)
    raise ParseError(f"Not allowed: {surface!r}")


# --- Traversal ---

def conditions_of(query: Query) -> List[Condition]:
    """Conditions in left-to-right order."""
    if isinstance(query, Condition):
        return [query]
    if isinstance(query, (AndGate, OrGate)):
        return conditions_of(query.left) + conditions_of(query.right)
    unreachable(query)
