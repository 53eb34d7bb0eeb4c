"""
Parser for temporal expressions.

Implements a grammar with precedence and associativity rules to parse
expression strings into an expression tree::

    expr ::= expr AND expr | expr OR expr | NOT expr
           | expr THEN expr | expr AFTER duration
           | event_name | ( expr )
"""

from __future__ import annotations

import sly

from tempex.parser.ast_nodes import After, And, EventName, Expression, Not, Or, Then
from tempex.parser.lexer import ExpressionLexer


class ParseError(Exception):
    """Exception raised for parsing errors."""

    pass


class _SLYParser(sly.Parser):
    """
    SLY-based parser for temporal expressions.

    Precedence (lowest to highest):
        1. THEN   (sequencing, right-to-left)
        2. AFTER  (postfix time gate, left-to-right)
        3. OR     (disjunction, left-to-right)
        4. AND    (conjunction, left-to-right)
        5. NOT    (unary, right-to-left)

    So ``a THEN NOT b AFTER 5h`` parses as ``a THEN ((NOT b) AFTER 5h)``.
    """

    tokens = ExpressionLexer.tokens

    precedence = (
        ("right", THEN),
        ("left", AFTER),
        ("left", OR),
        ("left", AND),
        ("right", NOT),
    )

    # --- Atomic expressions ---

    @_("NAME")
    def expr(self, p):
        return EventName(p.NAME)

    @_("STRING")
    def expr(self, p):
        return EventName(p.STRING)

    # --- Unary operators ---

    @_("NOT expr")
    def expr(self, p):
        return Not(p.expr)

    @_("expr AFTER DURATION")
    def expr(self, p):
        return After(p.expr, p.DURATION)

    # --- Binary operators ---

    @_("expr AND expr")
    def expr(self, p):
        return And(p.expr0, p.expr1)

    @_("expr OR expr")
    def expr(self, p):
        return Or(p.expr0, p.expr1)

    @_("expr THEN expr")
    def expr(self, p):
        return Then(p.expr0, p.expr1)

    # --- Parentheses ---

    @_("LPAREN expr RPAREN")
    def expr(self, p):
        return p.expr

    def error(self, token):
        if token:
            raise ParseError(
                f"Syntax error at '{token.value}' " f"(type: {token.type}, index: {token.index})"
            )
        raise ParseError("Syntax error: unexpected end of expression")


class ExpressionParser:
    """
    Parser for temporal expressions.

    Wraps the SLY-based parser with a clean public interface.
    Converts expression strings into expression trees.
    """

    def __init__(self) -> None:
        self._lexer = ExpressionLexer()
        self._parser = _SLYParser()

    def parse(self, text: str) -> Expression:
        """
        Parse an expression string into a tree.

        Args:
            text: The expression string to parse.

        Returns:
            The root Expression node.

        Raises:
            ParseError: If the expression is syntactically invalid.
            LexerError: If the expression contains invalid characters.
        """
        text = text.strip()
        if not text:
            raise ParseError("Syntax error: empty expression")

        result = self._parser.parse(self._lexer.tokenize(text))
        if result is None:
            raise ParseError("Syntax error: could not parse expression")
        return result
