"""Parsing module for column type declarations."""

from typed_columns.parsing.column_parser import ColumnParser, of, parse, read_column
from typed_columns.parsing.scanner import Scanner
from typed_columns.parsing.type_lexer import Token, TypeLexer

__all__ = [
    "ColumnParser",
    "Scanner",
    "Token",
    "TypeLexer",
    "of",
    "parse",
    "read_column",
]
