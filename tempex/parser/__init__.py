"""
Temporal expression parser for TEMPEX.

Provides the expression tree model, lexical analysis, parsing of the
textual expression language, and tree inspection utilities.
"""
