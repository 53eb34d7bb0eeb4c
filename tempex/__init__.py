"""
TEMPEX: temporal expression matching over event logs.

Evaluates boolean expressions built from event-name predicates and the
AND, OR, NOT, THEN and AFTER combinators against chronologically
ordered sequences of timestamped events.
"""

__version__ = "0.1.0"
