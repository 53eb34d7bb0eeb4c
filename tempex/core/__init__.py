"""
Core evaluation engine for TEMPEX.

Contains events, durations, the wire codec for expression trees, and
the recursive matcher that decides whether an expression is satisfied
by a time-ordered event sequence.
"""
