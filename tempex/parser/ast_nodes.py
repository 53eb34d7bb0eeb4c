"""
Expression tree node definitions for temporal expressions.

Defines immutable, hashable nodes for the closed set of operators:
event-name predicates, boolean connectives (AND, OR, NOT), sequencing
(THEN) and time-gated sequencing (AFTER).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Tuple

from tempex.core.duration import format_duration


class Expression(ABC):
    """
    Base class for all expression nodes.

    All nodes are immutable once constructed and support structural
    equality comparison and hashing for use in sets and dictionaries.
    """

    __slots__ = ()

    #: Operator keyword, also used as the wire-format discriminant.
    operator: str = ""

    @abstractmethod
    def children(self) -> Tuple[Expression, ...]:
        """Return the direct sub-expressions of this node."""

    @abstractmethod
    def __str__(self) -> str:
        """Return the parenthesised textual rendering."""

    @abstractmethod
    def _key(self) -> Tuple[Any, ...]:
        """Return the tuple of fields that defines structural identity."""

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + self._key())

    def __repr__(self) -> str:
        return str(self)


# === Atomic ===


class EventName(Expression):
    """
    Matches any event whose name equals ``name``.

    Attributes:
        name: The event name (may be empty).
    """

    __slots__ = ("name",)

    operator = "event_name"

    def __init__(self, name: str) -> None:
        object.__setattr__(self, "name", name)

    def children(self) -> Tuple[Expression, ...]:
        return ()

    def __str__(self) -> str:
        escaped = (
            self.name.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return f'"{escaped}"'

    def _key(self) -> Tuple[Any, ...]:
        return (self.name,)


# === Unary Operators ===


class Not(Expression):
    """
    Represents NOT A.

    Attributes:
        operand: The expression that must not hold.
    """

    __slots__ = ("operand",)

    operator = "not"

    def __init__(self, operand: Expression) -> None:
        object.__setattr__(self, "operand", operand)

    def children(self) -> Tuple[Expression, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"(NOT {self.operand})"

    def _key(self) -> Tuple[Any, ...]:
        return (self.operand,)


class After(Expression):
    """
    Represents A AFTER D.

    A must hold, and every piece of evidence it relies on must fall no
    earlier than the inherited threshold shifted forward by ``duration``.
    Only meaningful as (part of) the right operand of THEN, which is the
    sole source of a threshold.

    Attributes:
        operand: The time-gated expression.
        duration: Signed shift of the threshold, in nanoseconds.
    """

    __slots__ = ("operand", "duration")

    operator = "after"

    def __init__(self, operand: Expression, duration: int) -> None:
        object.__setattr__(self, "operand", operand)
        object.__setattr__(self, "duration", duration)

    def children(self) -> Tuple[Expression, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"({self.operand} AFTER {format_duration(self.duration)})"

    def _key(self) -> Tuple[Any, ...]:
        return (self.operand, self.duration)


# === Binary Operator Base ===


class _BinaryOp(Expression):
    """Base class for binary operators (not part of public API)."""

    __slots__ = ("left", "right")

    _op_symbol: str = ""

    def __init__(self, left: Expression, right: Expression) -> None:
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)

    def children(self) -> Tuple[Expression, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} {self._op_symbol} {self.right})"

    def _key(self) -> Tuple[Any, ...]:
        return (self.left, self.right)


# === Binary Operators ===


class And(_BinaryOp):
    """
    Represents A AND B. Both operands must hold.

    Attributes:
        left: Left operand.
        right: Right operand.
    """

    __slots__ = ()

    operator = "and"
    _op_symbol = "AND"


class Or(_BinaryOp):
    """
    Represents A OR B. At least one operand must hold.

    Attributes:
        left: Left operand.
        right: Right operand.
    """

    __slots__ = ()

    operator = "or"
    _op_symbol = "OR"


class Then(_BinaryOp):
    """
    Represents A THEN B.

    A holds over some prefix of the event sequence and B holds over the
    events strictly after A's witness.

    Attributes:
        left: Expression matched first (A).
        right: Expression matched over the remaining suffix (B).
    """

    __slots__ = ()

    operator = "then"
    _op_symbol = "THEN"
