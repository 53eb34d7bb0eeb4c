"""
Lexical analyzer for temporal expressions.

Tokenizes expression strings into a stream of tokens (event names,
operators, durations, delimiters) that can be consumed by the parser.
"""

from __future__ import annotations

import re

import sly

from tempex.core import duration

_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "r": "\r"}


class LexerError(Exception):
    """Exception raised for lexical analysis errors."""
    pass


class ExpressionLexer(sly.Lexer):
    """
    Lexical analyzer for temporal expressions.

    Converts an expression string into a stream of tokens.

    Token Types:
        STRING          - Double-quoted event name ("page.view")
        NAME            - Bare event name (signup, cart_item_added)
        DURATION        - Duration literal (10h, 5h30m, -1h, 250ms)
        NOT             - Unary operator
        AND, OR, THEN   - Binary operators
        AFTER           - Postfix time gate, followed by a DURATION
        LPAREN, RPAREN  - Delimiters
    """

    tokens = {
        STRING, NAME, DURATION,
        NOT,
        AND, OR, THEN, AFTER,
        LPAREN, RPAREN,
    }

    # Ignored characters
    ignore = " \t"

    # Ignore newlines
    @_(r"\n+")
    def ignore_newline(self, t):
        self.lineno += len(t.value)

    # Ignore comments (# to end of line)
    ignore_comment = r"\#[^\n]*"

    @_(r'"(?:[^"\\\n]|\\.)*"')
    def STRING(self, t):
        t.value = _ESCAPE_RE.sub(
            lambda m: _ESCAPES.get(m.group(1), m.group(1)), t.value[1:-1]
        )
        return t

    # Symbolic operators
    THEN = r"->"
    AND = r"&&"
    OR = r"\|\|"
    NOT = r"!"
    LPAREN = r"\("
    RPAREN = r"\)"

    @_(duration.DURATION_PATTERN)
    def DURATION(self, t):
        t.value = duration.parse_duration(t.value)
        return t

    # Identifiers and keywords; a "-" joins a name unless it starts "->"
    @_(r"[a-zA-Z_](?:[a-zA-Z0-9_.:]|-(?!>))*")
    def NAME(self, t):
        # Only exact matches are keywords; longer words are event names.
        keywords = {
            "AND": "AND",
            "and": "AND",
            "OR": "OR",
            "or": "OR",
            "NOT": "NOT",
            "not": "NOT",
            "THEN": "THEN",
            "then": "THEN",
            "AFTER": "AFTER",
            "after": "AFTER",
        }
        t.type = keywords.get(t.value, "NAME")
        return t

    def error(self, t):
        """Handle invalid characters."""
        raise LexerError(
            f"Invalid character '{t.value[0]}' at index {self.index}"
        )
