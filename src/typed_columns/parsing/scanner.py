"""Cursor operations over a tokenized type declaration.

Positions are character offsets into the original text and every
operation takes an exclusive ``end`` bound, so the parser can work on
sub-ranges of one declaration without copying it.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterator
from typing import NoReturn

from typed_columns.errors import TypeSyntaxError
from typed_columns.parsing.type_lexer import Token

WHITESPACE = frozenset(" \t\n\r\f\v")


class Scanner:
    """Offset-based view of a declaration and its tokens."""

    def __init__(self, text: str, tokens: list[Token]) -> None:
        self.text = text
        self.tokens = tokens
        self._starts = [tok.start for tok in tokens]

    def raw(self, tok: Token) -> str:
        """Return the source text of a token."""
        return self.text[tok.start:tok.end]

    def tokens_between(self, start: int, end: int) -> Iterator[Token]:
        """Yield the tokens lying entirely within ``[start, end)``."""
        for i in range(bisect_left(self._starts, start), len(self.tokens)):
            tok = self.tokens[i]
            if tok.end > end:
                break
            yield tok

    def peek(self, start: int, end: int) -> Token | None:
        """Return the first token at or after ``start``, or None."""
        return next(self.tokens_between(start, end), None)

    def skip_spaces(self, start: int, end: int) -> int:
        """Advance past ASCII whitespace."""
        while start < end and self.text[start] in WHITESPACE:
            start += 1
        return start

    def read_identifier(self, start: int, end: int) -> tuple[str, int]:
        """Read a bare or quoted identifier; return it and the offset after it."""
        tok = self.peek(start, end)
        if tok is None or tok.type not in ("IDENTIFIER", "QUOTED_IDENTIFIER"):
            self._expected("identifier", tok, start)
        return tok.value, tok.end

    def read_single_quoted_literal(self, start: int, end: int) -> tuple[str, int]:
        """Read a single-quoted string literal; return its value and the offset after it."""
        tok = self.peek(start, end)
        if tok is None or tok.type != "STRING":
            self._expected("quoted string", tok, start)
        return tok.value, tok.end

    def find_top_level_delimiter(self, start: int, end: int, delimiters: str = ",)") -> int:
        """Return the offset of the first delimiter outside any brackets.

        Parentheses, square brackets and braces all nest, so array and map
        literals in a DEFAULT clause are skipped. A closing parenthesis that
        does not match one opened after ``start`` belongs to an enclosing
        list. Quoted literals are single tokens, so delimiters inside them
        are never seen. Returns ``end`` if no delimiter is found.
        """
        depth = 0
        for tok in self.tokens_between(start, end):
            if tok.type == "LPAREN":
                depth += 1
            elif tok.type == "RPAREN":
                if depth == 0:
                    if ")" in delimiters:
                        return tok.start
                else:
                    depth -= 1
            elif tok.type == "COMMA" and depth == 0 and "," in delimiters:
                return tok.start
            elif tok.type == "OTHER":
                if tok.value in ("[", "{"):
                    depth += 1
                elif tok.value in ("]", "}") and depth > 0:
                    depth -= 1
        return end

    def _expected(self, what: str, tok: Token | None, start: int) -> NoReturn:
        if tok is None:
            raise TypeSyntaxError(f"Expected {what} but reached end of declaration", self.text, start)
        raise TypeSyntaxError(
            f"Expected {what}, got '{self.raw(tok)}'", self.text, tok.start, tok.end
        )
