"""
Tests for the expression utility functions.

Tests cover event-name extraction, operator-shape tests, parsing, and
the canonical string form.
"""

import pytest

from tempex.core.duration import HOUR
from tempex.parser.ast_nodes import After, And, EventName, Not, Or, Then
from tempex.parser.expression import (
    contains_operator,
    is_operator,
    names_of,
    parse_expression,
    to_string,
)
from tempex.parser.grammar import ParseError

X = EventName("")
PROBES = {
    "event_name": X,
    "and": And(X, X),
    "or": Or(X, X),
    "not": Not(X),
    "then": Then(X, X),
    "after": After(X, 0),
}


class TestNamesOf:
    """Test names_of."""

    def test_single(self) -> None:
        assert names_of(EventName("a")) == frozenset({"a"})

    def test_all_operators(self) -> None:
        expr = Then(
            EventName("1"),
            And(After(EventName("2"), 0), Or(EventName("4"), Not(EventName("3")))),
        )
        assert names_of(expr) == frozenset({"1", "2", "3", "4"})

    def test_deduplicated(self) -> None:
        expr = And(EventName("a"), Or(EventName("a"), Not(EventName("a"))))
        assert names_of(expr) == frozenset({"a"})

    def test_not_in_set(self) -> None:
        assert "b" not in names_of(Not(EventName("a")))


class TestIsOperator:
    """Test is_operator."""

    @pytest.mark.parametrize("kind", sorted(PROBES))
    def test_same_kind(self, kind: str) -> None:
        expr = {
            "event_name": EventName("a"),
            "and": And(EventName("a"), EventName("b")),
            "or": Or(EventName("a"), EventName("b")),
            "not": Not(EventName("a")),
            "then": Then(EventName("a"), EventName("b")),
            "after": After(EventName("a"), HOUR),
        }[kind]
        for probe_kind, probe in PROBES.items():
            assert is_operator(expr, probe) is (probe_kind == kind)

    def test_probe_contents_ignored(self) -> None:
        assert is_operator(Not(EventName("a")), Not(Then(X, X)))

    def test_class_probe(self) -> None:
        assert is_operator(Then(X, X), Then)
        assert not is_operator(Then(X, X), And)

    def test_root_only(self) -> None:
        assert not is_operator(Not(And(X, X)), And(X, X))


class TestContainsOperator:
    """Test contains_operator."""

    EXPR = Then(EventName("a"), After(Not(EventName("b")), HOUR))

    def test_root(self) -> None:
        assert contains_operator(self.EXPR, PROBES["then"])

    def test_nested(self) -> None:
        assert contains_operator(self.EXPR, PROBES["after"])
        assert contains_operator(self.EXPR, PROBES["not"])
        assert contains_operator(self.EXPR, PROBES["event_name"])

    def test_absent(self) -> None:
        assert not contains_operator(self.EXPR, PROBES["and"])
        assert not contains_operator(self.EXPR, PROBES["or"])

    def test_leaf(self) -> None:
        assert contains_operator(EventName("a"), EventName("zzz"))
        assert not contains_operator(EventName("a"), Not)

    def test_right_operand_searched(self) -> None:
        assert contains_operator(Or(EventName("a"), And(X, X)), And)


class TestParseAndRender:
    """Test parse_expression and to_string."""

    def test_parse(self) -> None:
        assert parse_expression("a THEN b") == Then(EventName("a"), EventName("b"))

    def test_to_string(self) -> None:
        assert to_string(And(EventName("a"), EventName("b"))) == '("a" AND "b")'

    def test_rendering_parses_back(self) -> None:
        expr = Then(
            And(EventName("e1"), Not(EventName("e 2"))),
            After(Or(Not(EventName("e\"2")), EventName("")), -5 * HOUR - 1),
        )
        assert parse_expression(to_string(expr)) == expr

    def test_line_breaks_parse_back(self) -> None:
        expr = Then(EventName("a\nb"), EventName("c\r\nd"))
        assert parse_expression(to_string(expr)) == expr

    def test_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_expression("a AND")
