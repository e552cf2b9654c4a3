"""Tests for the query model, parser and trace hashing."""

import pytest

from docproof.errors import BadInputError, InvalidSegmentError, ParseError
from docproof.linearization.kinds import BooleanKind, IntegerKind, NullKind, StringKind
from docproof.linearization.path import LinearPath
from docproof.protocol.query import AndGate, Condition, Operator, OrGate, conditions_of, parse_query
from docproof.protocol.trace import TraceHasher


def cond(operator, path, value):
    return Condition(operator, LinearPath.parse(path), value)


A = cond(Operator.EQ, "/a", IntegerKind(1))
B = cond(Operator.EQ, "/b", IntegerKind(2))
C = cond(Operator.EQ, "/c", IntegerKind(3))


class TestParseQuery:

    def test_and_of_two_conditions(self):
        query = parse_query({"/a": {"$eq": 10}, "/b": {"$ge": 20}})
        assert query == AndGate(
            cond(Operator.EQ, "/a", IntegerKind(10)),
            cond(Operator.GE, "/b", IntegerKind(20)),
        )
        assert str(query) == "$and($eq(/a, IntegerKind(10)), $ge(/b, IntegerKind(20)))"

    @pytest.mark.parametrize("sigil, operator", [(o.value, o) for o in (
        Operator.EQ, Operator.NE, Operator.GT, Operator.LT, Operator.GE, Operator.LE,
    )])
    def test_every_condition_operator(self, sigil, operator):
        assert parse_query({"/x": {sigil: 1}}) == cond(operator, "/x", IntegerKind(1))

    @pytest.mark.parametrize("literal, kind", [
        (None, NullKind()),
        (True, BooleanKind(True)),
        ("Patient", StringKind("Patient")),
        (-3, IntegerKind(-3)),
    ])
    def test_scalar_literals(self, literal, kind):
        assert parse_query({"/x": {"$eq": literal}}).expected == kind

    def test_singleton_groups_collapse(self):
        assert parse_query({"/a": {"$eq": 1}}) == A
        assert parse_query([{"/a": {"$eq": 1}}]) == A

    def test_and_chains_left_associatively(self):
        query = parse_query({"/a": {"$eq": 1}, "/b": {"$eq": 2}, "/c": {"$eq": 3}})
        assert query == AndGate(AndGate(A, B), C)

    def test_or_chains_left_associatively(self):
        query = parse_query([{"/a": {"$eq": 1}}, {"/b": {"$eq": 2}}, {"/c": {"$eq": 3}}])
        assert query == OrGate(OrGate(A, B), C)

    def test_nested_arrays_are_flattened(self):
        query = parse_query([[{"/a": {"$eq": 1}}, {"/b": {"$eq": 2}}], {"/c": {"$eq": 3}}])
        assert query == OrGate(OrGate(A, B), C)

    def test_or_of_and_groups(self):
        query = parse_query([{"/a": {"$eq": 1}, "/b": {"$eq": 2}}, {"/c": {"$eq": 3}}])
        assert query == OrGate(AndGate(A, B), C)

    def test_list_item_path(self):
        query = parse_query({"/name/'0/family": {"$eq": "Lee"}})
        assert query.path == LinearPath.from_elements("name").index(0).child("family")

    def test_conditions_in_order(self):
        query = parse_query([{"/a": {"$eq": 1}, "/b": {"$eq": 2}}, {"/c": {"$eq": 3}}])
        assert conditions_of(query) == [A, B, C]


class TestParseErrors:

    def test_empty_and_group(self):
        with pytest.raises(ParseError, match="Empty AND gate"):
            parse_query({})

    def test_empty_or_group(self):
        with pytest.raises(ParseError, match="Empty OR gate"):
            parse_query([])

    def test_empty_nested_or_group(self):
        with pytest.raises(ParseError, match="Empty OR gate"):
            parse_query([{"/a": {"$eq": 1}}, []])

    def test_empty_and_group_inside_or(self):
        with pytest.raises(ParseError, match="Empty AND gate"):
            parse_query([{}])

    def test_unknown_operator(self):
        with pytest.raises(ParseError, match="Unknown operator"):
            parse_query({"/a": {"$regex": "x"}})

    def test_unknown_key_next_to_known_operator(self):
        with pytest.raises(ParseError, match="Unknown operator"):
            parse_query({"/a": {"$eq": 1, "extra": 2}})

    def test_more_than_one_operator(self):
        with pytest.raises(ParseError, match="More than one operator"):
            parse_query({"/a": {"$gt": 1, "$lt": 5}})

    def test_no_operator(self):
        with pytest.raises(ParseError, match="No operator"):
            parse_query({"/a": {}})

    def test_condition_must_be_an_object(self):
        with pytest.raises(ParseError):
            parse_query({"/a": 10})

    @pytest.mark.parametrize("literal", [[1, 2], {"x": 1}, 1.5])
    def test_non_scalar_literal(self, literal):
        with pytest.raises(ParseError, match="Not a scalar"):
            parse_query({"/a": {"$eq": literal}})

    def test_literal_without_a_kind(self):
        with pytest.raises(BadInputError):
            parse_query({"/a": {"$eq": float("nan")}})

    @pytest.mark.parametrize("surface", [None, 10, "a", True])
    def test_top_level_must_be_object_or_array(self, surface):
        with pytest.raises(ParseError, match="Not allowed"):
            parse_query(surface)

    def test_or_member_must_be_object_or_array(self):
        with pytest.raises(ParseError):
            parse_query([{"/a": {"$eq": 1}}, 5])

    def test_path_without_leading_separator(self):
        with pytest.raises(ParseError):
            parse_query({"a": {"$eq": 1}})

    def test_path_with_list_marker_field_name(self):
        # "'0" parses as a list marker, not a field
        query = parse_query({"/'0": {"$eq": 1}})
        assert query.path == LinearPath.root().index(0)

    def test_condition_rejects_gate_operator(self):
        with pytest.raises(ValueError):
            Condition(Operator.AND, LinearPath.root(), IntegerKind(1))

    def test_invalid_segment_is_parse_error(self):
        with pytest.raises(ParseError):
            LinearPath(("a/b",))
        assert issubclass(InvalidSegmentError, ParseError)


class TestTraceHasher:

    def test_sigils_encode_operator_strings(self, encoder):
        tracer = TraceHasher(encoder)
        assert tracer.sigil(Operator.EQ) == encoder.from_string("$eq")
        assert tracer.sigil(Operator.OR) == encoder.from_string("$or")

    def test_condition_trace(self, encoder, algebra):
        tracer = TraceHasher(encoder)
        expected = algebra.hash(encoder.from_string("$eq"), 11, 12)
        assert tracer.condition(Operator.EQ, 11, 12) == expected

    def test_gate_trace(self, encoder, algebra):
        tracer = TraceHasher(encoder)
        expected = algebra.hash(encoder.from_string("$and"), 5, 6)
        assert tracer.gate(Operator.AND, 5, 6) == expected
        assert tracer.gate(Operator.OR, 5, 6) != expected

    def test_operator_class_is_checked(self, encoder):
        tracer = TraceHasher(encoder)
        with pytest.raises(ValueError):
            tracer.condition(Operator.AND, 1, 2)
        with pytest.raises(ValueError):
            tracer.gate(Operator.EQ, 1, 2)
