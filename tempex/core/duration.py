"""
Signed durations for AFTER expressions.

Durations are plain integers counting nanoseconds, so that values
round-trip exactly through the wire format. This module converts
between that representation and a compact text form such as ``10h``,
``5h30m``, ``-1h`` or ``5h1ns``.
"""

from __future__ import annotations

import re
from typing import List, Tuple

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

# Largest unit first; format_duration relies on this order.
_UNITS: List[Tuple[str, int]] = [
    ("h", HOUR),
    ("m", MINUTE),
    ("s", SECOND),
    ("ms", MILLISECOND),
    ("us", MICROSECOND),
    ("ns", NANOSECOND),
]

_UNIT_VALUES = dict(_UNITS)
_UNIT_VALUES["µs"] = MICROSECOND

# Multi-character units must come before their single-character prefixes.
_UNIT_PATTERN = r"ns|us|µs|ms|s|m|h"
_COMPONENT_RE = re.compile(rf"(\d+)({_UNIT_PATTERN})")
_DURATION_RE = re.compile(rf"(-?)(?:(\d+)|((?:\d+(?:{_UNIT_PATTERN}))+))")

#: Regex used by the lexer to recognise a duration literal.
DURATION_PATTERN = rf"-?\d+(?:(?:{_UNIT_PATTERN})(?:\d+(?:{_UNIT_PATTERN}))*)?"


class DurationError(ValueError):
    """Exception raised for malformed duration strings."""


def parse_duration(text: str) -> int:
    """
    Parse a duration string into a nanosecond count.

    Accepts an optional leading ``-`` followed by either a bare integer
    (nanoseconds) or one or more ``<int><unit>`` groups, where unit is
    one of ``h``, ``m``, ``s``, ``ms``, ``us``, ``µs`` or ``ns``.

    Args:
        text: The duration string (e.g. ``"10h"``, ``"5h30m"``, ``"-1h"``).

    Returns:
        The signed duration in nanoseconds.

    Raises:
        DurationError: If the string is not a valid duration.
    """
    s = text.strip()
    match = _DURATION_RE.fullmatch(s)
    if match is None:
        raise DurationError(f"Invalid duration '{text}'")

    sign, bare, components = match.groups()
    if bare is not None:
        total = int(bare)
    else:
        total = sum(
            int(amount) * _UNIT_VALUES[unit]
            for amount, unit in _COMPONENT_RE.findall(components)
        )
    return -total if sign else total


def format_duration(nanos: int) -> str:
    """
    Render a nanosecond count in compact unit form.

    Zero components are omitted and zero renders as ``0s``, so that
    ``parse_duration(format_duration(n)) == n`` for every integer n.

    Args:
        nanos: The signed duration in nanoseconds.

    Returns:
        The compact duration string.
    """
    if nanos == 0:
        return "0s"

    remaining = abs(nanos)
    parts: List[str] = []
    for unit, size in _UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{unit}")

    text = "".join(parts)
    return f"-{text}" if nanos < 0 else text
