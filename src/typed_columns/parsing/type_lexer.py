"""Lexer for column type declarations."""

from __future__ import annotations

from typing import Any, NamedTuple

import ply.lex as lex

from typed_columns.errors import TypeSyntaxError

# Characters that open a quoted token; running out of input inside one is fatal
QUOTES = {"'": "quoted literal", "`": "quoted identifier", '"': "quoted identifier"}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "b": "\b", "f": "\f"}


def unquote(raw: str) -> str:
    """Strip the quotes of a quoted token and resolve its escapes.

    Both a doubled quote character and a backslash-escaped one stand for
    the quote character itself.
    """
    quote = raw[0]
    body = raw[1:-1]
    chars: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            chars.append(_ESCAPES.get(nxt, nxt))
            i += 2
        elif ch == quote and i + 1 < len(body) and body[i + 1] == quote:
            chars.append(quote)
            i += 2
        else:
            chars.append(ch)
            i += 1
    return "".join(chars)


class Token(NamedTuple):
    """A token and the ``[start, end)`` span of its raw text."""

    type: str
    value: Any
    start: int
    end: int


class TypeLexer:
    """Lexer for tokenizing column type declarations."""

    # Token list
    tokens = [
        "IDENTIFIER",
        "QUOTED_IDENTIFIER",
        "STRING",
        "NUMBER",
        "LPAREN",
        "RPAREN",
        "COMMA",
        "EQUALS",
        "OTHER",
    ]

    # Simple tokens
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COMMA = r","
    t_EQUALS = r"="

    # Ignored characters (newlines are counted by t_NEWLINE)
    t_ignore = " \t\r\f\v"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_BACKTICK_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"`(?:[^`\\]|\\.|``)*`"
        t.value = unquote(t.value)
        t.type = "QUOTED_IDENTIFIER"
        return t

    def t_DOUBLE_QUOTED_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r'"(?:[^"\\]|\\.|"")*"'
        t.value = unquote(t.value)
        t.type = "QUOTED_IDENTIFIER"
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'(?:[^'\\]|\\.|'')*'"
        t.value = unquote(t.value)
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"[-+]?(?:0[xX][0-9a-fA-F]+|\d+(?:\.\d*)?(?:[eE][-+]?\d+)?|\.\d+(?:[eE][-+]?\d+)?)"
        # Kept as text: parameters are re-rendered verbatim
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z0-9_]+)*"
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_OTHER(self, t: lex.LexToken) -> lex.LexToken:
        r"[^\s'`\"(),=]"
        # Operators and the like; only meaningful inside DEFAULT expressions
        return t

    def t_error(self, t: lex.LexToken) -> None:
        ch = t.value[0]
        if ch in QUOTES:
            raise TypeSyntaxError(
                f"Unterminated {QUOTES[ch]} (line {t.lineno})",
                t.lexer.lexdata,
                t.lexpos,
            )
        raise TypeSyntaxError(f"Illegal character '{ch}'", t.lexer.lexdata, t.lexpos)

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def tokenize(self, data: str) -> list[Token]:
        """Tokenize the input and return all tokens with their spans.

        Works on a clone of the built lexer, so one TypeLexer can serve
        several threads at once.
        """
        lexer = self.lexer.clone()
        lexer.input(data)
        tokens = []
        while True:
            tok = lexer.token()
            if tok is None:
                break
            # lexpos has already moved past the matched text
            tokens.append(Token(tok.type, tok.value, tok.lexpos, lexer.lexpos))
        return tokens
