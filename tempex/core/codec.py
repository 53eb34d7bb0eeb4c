"""
Wire codec for expression trees.

Serializes an expression to a self-describing tagged JSON object and
back. Every node carries an ``operator`` discriminant plus operands
under ``a`` and ``b``; AFTER stores its duration under ``d`` as the
decimal string of a signed 64-bit nanosecond count::

    {"operator": "then",
     "a": {"operator": "event_name", "a": "signup"},
     "b": {"operator": "after",
           "a": {"operator": "not", "a": {"operator": "event_name", "a": "pay"}},
           "d": "36000000000000"}}

Decoding validates the shape of every node and raises
InvalidExpressionError on any mismatch; it never returns a partial tree.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Union

from tempex.parser.ast_nodes import After, And, EventName, Expression, Not, Or, Then

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")

_BINARY_OPS = {
    And.operator: And,
    Or.operator: Or,
    Then.operator: Then,
}


class InvalidExpressionError(ValueError):
    """Exception raised when bytes do not describe a valid expression."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"invalid expression: {reason}")
        self.reason = reason


# ---------------------------------------------------------------------- #
# Encoding
# ---------------------------------------------------------------------- #


def to_dict(expr: Expression) -> Dict[str, Any]:
    """
    Convert an expression tree to its tagged-object form.

    Args:
        expr: The expression to convert.

    Returns:
        A JSON-compatible dictionary.

    Raises:
        TypeError: If ``expr`` is not an expression node.
    """
    if isinstance(expr, EventName):
        return {"operator": expr.operator, "a": expr.name}
    if isinstance(expr, Not):
        return {"operator": expr.operator, "a": to_dict(expr.operand)}
    if isinstance(expr, After):
        return {
            "operator": expr.operator,
            "a": to_dict(expr.operand),
            "d": str(expr.duration),
        }
    if isinstance(expr, (And, Or, Then)):
        return {
            "operator": expr.operator,
            "a": to_dict(expr.left),
            "b": to_dict(expr.right),
        }
    raise TypeError(f"Cannot encode {type(expr).__name__} as an expression")


def encode(expr: Expression) -> bytes:
    """
    Encode an expression tree to UTF-8 JSON bytes.

    Args:
        expr: The expression to encode.

    Returns:
        Bytes that ``decode`` turns back into an equal expression.
    """
    return json.dumps(to_dict(expr), ensure_ascii=False).encode("utf-8")


# ---------------------------------------------------------------------- #
# Decoding
# ---------------------------------------------------------------------- #


def decode(data: Union[bytes, bytearray, str]) -> Expression:
    """
    Decode an expression tree produced by ``encode``.

    Args:
        data: UTF-8 JSON bytes (or an already-decoded string).

    Returns:
        The reconstructed expression.

    Raises:
        InvalidExpressionError: If the payload is not a valid expression.
    """
    try:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        obj = json.loads(data)
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidExpressionError(f"malformed payload ({exc})") from exc
    except RecursionError as exc:
        raise InvalidExpressionError("payload nested too deeply") from exc

    return from_dict(obj)


def from_dict(obj: Any) -> Expression:
    """
    Rebuild an expression tree from its tagged-object form.

    Args:
        obj: A value produced by ``to_dict`` (or parsed from JSON).

    Returns:
        The reconstructed expression.

    Raises:
        InvalidExpressionError: If ``obj`` does not have the expected shape.
    """
    try:
        return _from_dict(obj)
    except RecursionError as exc:
        raise InvalidExpressionError("expression nested too deeply") from exc


def _from_dict(obj: Any) -> Expression:
    if not isinstance(obj, dict):
        raise InvalidExpressionError(f"expected an object, got {_type_name(obj)}")

    operator = obj.get("operator")
    if not isinstance(operator, str):
        raise InvalidExpressionError("missing or non-string 'operator' field")

    if operator == EventName.operator:
        name = obj.get("a")
        if not isinstance(name, str):
            raise InvalidExpressionError("'event_name' requires a string 'a' field")
        return EventName(name)

    if operator == Not.operator:
        return Not(_operand(obj, "a", operator))

    if operator == After.operator:
        return After(_operand(obj, "a", operator), _duration(obj))

    if operator in _BINARY_OPS:
        left = _operand(obj, "a", operator)
        right = _operand(obj, "b", operator)
        return _BINARY_OPS[operator](left, right)

    raise InvalidExpressionError(f"unknown operator '{operator}'")


def _operand(obj: Dict[str, Any], field: str, operator: str) -> Expression:
    """Decode a nested operand, requiring it to be present and an object."""
    if field not in obj:
        raise InvalidExpressionError(f"'{operator}' is missing operand '{field}'")
    value = obj[field]
    if not isinstance(value, dict):
        raise InvalidExpressionError(
            f"'{operator}' operand '{field}' must be an object, got {_type_name(value)}"
        )
    return _from_dict(value)


def _duration(obj: Dict[str, Any]) -> int:
    """Decode the 'd' field of an AFTER node."""
    value = obj.get("d")
    if not isinstance(value, str) or not _DECIMAL_RE.fullmatch(value):
        raise InvalidExpressionError("'after' requires a decimal string 'd' field")
    duration = int(value)
    if not _INT64_MIN <= duration <= _INT64_MAX:
        raise InvalidExpressionError(f"duration {value} is out of 64-bit range")
    return duration


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__
