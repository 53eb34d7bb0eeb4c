"""
Recursive matcher for temporal expressions.

Decides whether an expression is satisfied by a time-ordered event
sequence. Alongside satisfaction, every node reports two pieces of
state to its parent:

* the witness index: position of the evidence that satisfied the node
  (-1 when there is none), used by THEN to split the sequence, and
* the after-threshold flag: whether that evidence falls no earlier than
  the threshold inherited from an enclosing AFTER. For an event that
  never occurs the flag instead reports whether the current instant is
  past the threshold, which is what lets ``NOT x`` under AFTER express
  "x did not happen for a whole duration".

Thresholds are only introduced by THEN (the right operand inherits the
timestamp of the left operand's witness) and shifted by AFTER. A
threshold of None means "no constraint".
"""

from __future__ import annotations

import time
from typing import Callable, NamedTuple, Optional, Sequence, Tuple

from tempex.core.event import Event
from tempex.parser.ast_nodes import After, And, EventName, Expression, Not, Or, Then
from tempex.utils.logger import EvaluationLogger, LogLevel

#: Zero-argument callable returning the current instant in epoch nanoseconds.
Clock = Callable[[], int]

NO_WITNESS = -1


class MatchResult(NamedTuple):
    """
    Outcome of matching one expression node.

    Attributes:
        index: Witness index into the event window, or -1.
        satisfied: Whether the node holds over the window.
        after: Whether the evidence clears the inherited threshold.
    """

    index: int
    satisfied: bool
    after: bool


_UNSATISFIED = MatchResult(NO_WITNESS, False, False)


class Evaluator:
    """
    Evaluates expressions against event sequences.

    The evaluator keeps no state between calls, so one instance may be
    shared freely. The clock is read only when an event name is absent
    from the window, at the moment the absence is observed.

    Attributes:
        clock: Time source used for absence predicates.
        logger: Logger receiving one DEBUG line per visited node.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        logger: Optional[EvaluationLogger] = None,
    ) -> None:
        """
        Initialize the evaluator.

        Args:
            clock: Time source in epoch nanoseconds (default: time.time_ns).
            logger: Optional logger for per-node debug output.
        """
        self.clock: Clock = clock or time.time_ns
        self.logger: EvaluationLogger = logger or EvaluationLogger(LogLevel.SILENT)

    def evaluate(self, expr: Expression, events: Sequence[Event]) -> bool:
        """
        Check whether ``expr`` is satisfied by ``events``.

        Args:
            expr: The expression to evaluate.
            events: Events sorted ascending by timestamp.

        Returns:
            True if the expression is satisfied.
        """
        return self.match(expr, events).satisfied

    def evaluate_with_index(
        self, expr: Expression, events: Sequence[Event]
    ) -> Tuple[int, bool]:
        """
        Evaluate ``expr`` and also report the outermost witness index.

        Args:
            expr: The expression to evaluate.
            events: Events sorted ascending by timestamp.

        Returns:
            Tuple of (witness index or -1, satisfied).
        """
        result = self.match(expr, events)
        return result.index, result.satisfied

    def match(
        self,
        expr: Expression,
        events: Sequence[Event],
        threshold: Optional[int] = None,
    ) -> MatchResult:
        """
        Match one expression node against an event window.

        Args:
            expr: The expression node.
            events: The visible window of the event sequence.
            threshold: Inherited lower bound in epoch nanoseconds, or None.

        Returns:
            The node's MatchResult.
        """
        result = self._dispatch(expr, events, threshold)
        self.logger.node_matched(
            getattr(expr, "operator", type(expr).__name__),
            len(events),
            threshold,
            *result,
        )
        return result

    # ------------------------------------------------------------------ #
    # Per-operator rules
    # ------------------------------------------------------------------ #

    def _dispatch(
        self, expr: Expression, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        if isinstance(expr, EventName):
            return self._match_event_name(expr, events, threshold)
        if isinstance(expr, Or):
            return self._match_or(expr, events, threshold)
        if isinstance(expr, And):
            return self._match_and(expr, events, threshold)
        if isinstance(expr, Not):
            return self._match_not(expr, events, threshold)
        if isinstance(expr, Then):
            return self._match_then(expr, events, threshold)
        if isinstance(expr, After):
            return self._match_after(expr, events, threshold)
        return _UNSATISFIED

    def _match_event_name(
        self, expr: EventName, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        for i, event in enumerate(events):
            if event.name == expr.name and (threshold is None or event.timestamp >= threshold):
                return MatchResult(i, True, True)

        for i, event in enumerate(events):
            if event.name == expr.name:
                return MatchResult(i, True, False)

        # Nothing to compare against, so the threshold is met only once
        # real time has passed it.
        elapsed = threshold is None or self.clock() >= threshold
        return MatchResult(NO_WITNESS, False, elapsed)

    def _match_or(
        self, expr: Or, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        a = self.match(expr.left, events, threshold)
        b = self.match(expr.right, events, threshold)
        after = a.after or b.after
        if a.satisfied and b.satisfied:
            return MatchResult(min(a.index, b.index), True, after)
        if a.satisfied:
            return MatchResult(a.index, True, after)
        if b.satisfied:
            return MatchResult(b.index, True, after)
        return MatchResult(NO_WITNESS, False, after)

    def _match_and(
        self, expr: And, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        a = self.match(expr.left, events, threshold)
        b = self.match(expr.right, events, threshold)
        if a.satisfied and b.satisfied:
            return MatchResult(max(a.index, b.index), True, a.after and b.after)
        return _UNSATISFIED

    def _match_not(
        self, expr: Not, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        a = self.match(expr.operand, events, threshold)
        if a.satisfied:
            return MatchResult(a.index, False, a.after)
        return MatchResult(NO_WITNESS, True, a.after)

    def _match_then(
        self, expr: Then, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        for k in range(len(events), 0, -1):
            a = self.match(expr.left, events[:k], threshold)
            if not a.satisfied:
                continue

            b_threshold = threshold
            if 0 <= a.index < len(events):
                b_threshold = events[a.index].timestamp

            b = self.match(expr.right, events[a.index + 1:], b_threshold)
            if b.satisfied:
                return MatchResult(a.index + b.index + 1, True, a.after and b.after)
        return _UNSATISFIED

    def _match_after(
        self, expr: After, events: Sequence[Event], threshold: Optional[int]
    ) -> MatchResult:
        if threshold is None:
            # Outside the right operand of THEN there is no point in time
            # to measure the duration from.
            return _UNSATISFIED

        a = self.match(expr.operand, events, threshold + expr.duration)
        if a.satisfied:
            return MatchResult(a.index, a.after, a.after)
        return _UNSATISFIED


def evaluate(
    expr: Expression, events: Sequence[Event], clock: Optional[Clock] = None
) -> bool:
    """
    Check whether ``expr`` is satisfied by ``events``.

    Args:
        expr: The expression to evaluate.
        events: Events sorted ascending by timestamp.
        clock: Optional time source in epoch nanoseconds.

    Returns:
        True if the expression is satisfied.
    """
    return Evaluator(clock).evaluate(expr, events)


def evaluate_with_index(
    expr: Expression, events: Sequence[Event], clock: Optional[Clock] = None
) -> Tuple[int, bool]:
    """
    Evaluate ``expr`` and report the outermost witness index.

    Args:
        expr: The expression to evaluate.
        events: Events sorted ascending by timestamp.
        clock: Optional time source in epoch nanoseconds.

    Returns:
        Tuple of (witness index or -1, satisfied).
    """
    return Evaluator(clock).evaluate_with_index(expr, events)
