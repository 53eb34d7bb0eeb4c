"""
Expression utilities.

Provides convenience functions for parsing and inspecting expression
trees: event-name extraction, operator-shape tests, and canonical
string conversion.
"""

from __future__ import annotations

from typing import FrozenSet, Type, Union

from tempex.parser.ast_nodes import After, And, EventName, Expression, Not, Or, Then
from tempex.parser.grammar import ExpressionParser

#: A probe is either an example node or the node class itself.
Probe = Union[Expression, Type[Expression]]

_parser = ExpressionParser()


def parse_expression(text: str) -> Expression:
    """
    Parse an expression string into a tree.

    Args:
        text: The expression string.

    Returns:
        The root Expression node.

    Raises:
        ParseError: If the expression is syntactically invalid.
    """
    return _parser.parse(text)


def names_of(expr: Expression) -> FrozenSet[str]:
    """
    Return every distinct event name referenced by the expression.

    Args:
        expr: The expression to inspect.

    Returns:
        A frozenset of event name strings.
    """
    if isinstance(expr, EventName):
        return frozenset({expr.name})
    if isinstance(expr, (Not, After)):
        return names_of(expr.operand)
    if isinstance(expr, (And, Or, Then)):
        return names_of(expr.left) | names_of(expr.right)
    return frozenset()


def is_operator(expr: Expression, probe: Probe) -> bool:
    """
    True if the root of ``expr`` is the same operator as ``probe``.

    Only the type of ``probe`` matters; its operands are ignored, so
    ``is_operator(e, Then(EventName(""), EventName("")))`` and
    ``is_operator(e, Then)`` are equivalent.
    """
    kind = probe if isinstance(probe, type) else type(probe)
    return type(expr) is kind


def contains_operator(expr: Expression, probe: Probe) -> bool:
    """
    True if ``expr`` or any of its sub-expressions is a ``probe`` operator.

    Args:
        expr: The expression to search.
        probe: Example node (or node class) selecting the operator.

    Returns:
        Whether the operator occurs anywhere in the tree.
    """
    if is_operator(expr, probe):
        return True
    if isinstance(expr, (Not, After)):
        return contains_operator(expr.operand, probe)
    if isinstance(expr, (And, Or, Then)):
        return contains_operator(expr.left, probe) or contains_operator(expr.right, probe)
    return False


def to_string(expr: Expression) -> str:
    """
    Convert an expression to its canonical string representation.

    Args:
        expr: The expression to convert.

    Returns:
        The canonical parenthesised string, which ``parse_expression``
        accepts back.
    """
    return str(expr)
