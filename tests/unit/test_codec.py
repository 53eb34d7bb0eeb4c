"""
Tests for the expression wire codec.

Tests cover round-tripping every node type and deep nesting, the exact
wire layout, and rejection of malformed payloads with
InvalidExpressionError.
"""

import json

import pytest

from tempex.core.codec import InvalidExpressionError, decode, encode, from_dict, to_dict
from tempex.core.duration import HOUR, MILLISECOND
from tempex.parser.ast_nodes import After, And, EventName, Expression, Not, Or, Then

DEEP = Then(
    And(
        After(Not(EventName("1")), 10 * HOUR),
        Or(EventName("2"), After(Not(EventName("3")), MILLISECOND)),
    ),
    And(
        And(Not(EventName("4")), Or(EventName("5"), Not(EventName("6")))),
        Or(EventName("7"), Not(EventName("8"))),
    ),
)


class TestRoundTrip:
    """decode(encode(e)) == e."""

    @pytest.mark.parametrize(
        "expr",
        [
            EventName("a"),
            EventName(""),
            EventName('quote " and ünïcode'),
            And(EventName("a"), EventName("b")),
            Or(EventName("a"), EventName("b")),
            Then(EventName("a"), EventName("b")),
            Not(EventName("a")),
            After(EventName("a"), 42133742),
            After(EventName("a"), -HOUR),
            After(EventName("a"), 2**63 - 1),
            After(EventName("a"), -(2**63)),
            DEEP,
        ],
        ids=str,
    )
    def test_round_trip(self, expr: Expression) -> None:
        assert decode(encode(expr)) == expr

    def test_decode_accepts_str(self) -> None:
        assert decode(encode(DEEP).decode("utf-8")) == DEEP


class TestWireLayout:
    """The encoded form uses fixed field names."""

    def test_event_name(self) -> None:
        assert json.loads(encode(EventName("a"))) == {"operator": "event_name", "a": "a"}

    def test_binary(self) -> None:
        assert to_dict(Then(EventName("a"), EventName("b"))) == {
            "operator": "then",
            "a": {"operator": "event_name", "a": "a"},
            "b": {"operator": "event_name", "a": "b"},
        }

    def test_not(self) -> None:
        assert to_dict(Not(EventName("a"))) == {
            "operator": "not",
            "a": {"operator": "event_name", "a": "a"},
        }

    def test_after_duration_is_decimal_string(self) -> None:
        assert to_dict(After(EventName("a"), 10 * HOUR))["d"] == "36000000000000"

    def test_encode_is_utf8(self) -> None:
        assert "ü" in encode(EventName("ü")).decode("utf-8")

    def test_encode_rejects_non_expression(self) -> None:
        with pytest.raises(TypeError):
            encode("a")  # type: ignore[arg-type]

    def test_extra_keys_ignored(self) -> None:
        assert from_dict({"operator": "event_name", "a": "x", "extra": 1}) == EventName("x")


class TestInvalidInput:
    """Malformed payloads raise InvalidExpressionError."""

    @pytest.mark.parametrize(
        "payload",
        [
            b"{}",
            b'{"no_operation": 1}',
            b'{"operator": 5, "a": "x"}',
            b'{"operator": null}',
            b'{"operator": "xor", "a": {}, "b": {}}',
            b'{"operator": "event_name"}',
            b'{"operator": "event_name", "a": 3}',
            b'{"operator": "not"}',
            b'{"operator": "not", "a": "x"}',
            b'{"operator": "and", "a": {"operator": "event_name", "a": "x"}}',
            b'{"operator": "or", "a": {"operator": "event_name", "a": "x"}, "b": []}',
            b'{"operator": "then", "a": null, "b": {"operator": "event_name", "a": "x"}}',
            b'{"operator": "after", "a": {"operator": "event_name", "a": "x"}}',
            b'{"operator": "after", "a": {"operator": "event_name", "a": "x"}, "d": 10}',
            b'{"operator": "after", "a": {"operator": "event_name", "a": "x"}, "d": "10h"}',
            b'{"operator": "after", "a": {"operator": "event_name", "a": "x"}, "d": "1.5"}',
            b'{"operator": "after", "a": {"operator": "event_name", "a": "x"}, "d": "9223372036854775808"}',
            b'{"operator": "after", "d": "1"}',
            b'{"operator": "not", "a": {"operator": "not", "a": {"operator": "bogus"}}}',
            b"[]",
            b'"event_name"',
            b"null",
            b"not json",
            b"",
            b"\xff\xfe",
        ],
    )
    def test_rejected(self, payload: bytes) -> None:
        with pytest.raises(InvalidExpressionError):
            decode(payload)

    def test_message(self) -> None:
        with pytest.raises(InvalidExpressionError, match="^invalid expression"):
            decode(b'{"no_operation": 1}')

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            decode(b"{}")

    def test_reason_attribute(self) -> None:
        with pytest.raises(InvalidExpressionError) as info:
            decode(b'{"operator": "xor"}')
        assert "xor" in info.value.reason


class TestDeepNesting:
    """Payloads nested past the interpreter's recursion limit are rejected."""

    DEPTH = 5000

    def test_deep_object_payload(self) -> None:
        payload = (
            '{"operator": "not", "a": ' * self.DEPTH
            + '{"operator": "event_name", "a": "x"}'
            + "}" * self.DEPTH
        )
        with pytest.raises(InvalidExpressionError):
            decode(payload.encode())

    def test_deep_array_payload(self) -> None:
        with pytest.raises(InvalidExpressionError):
            decode(b"[" * 100000)

    def test_deep_dict(self) -> None:
        obj = {"operator": "event_name", "a": "x"}
        for _ in range(self.DEPTH):
            obj = {"operator": "not", "a": obj}
        with pytest.raises(InvalidExpressionError, match="nested too deeply"):
            from_dict(obj)
