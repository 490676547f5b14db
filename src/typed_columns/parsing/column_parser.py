"""Recursive descent parser for column type declarations."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace

from typed_columns.aggregates import AggregateFunction
from typed_columns.column import ColumnDescriptor, EnumConstants
from typed_columns.errors import TypeSyntaxError, TypeValidationError, UnknownTypeError
from typed_columns.parsing.scanner import Scanner
from typed_columns.parsing.type_lexer import Token, TypeLexer
from typed_columns.types import (
    DEFAULT_ESTIMATED_LENGTH,
    KEYWORDS,
    MAX_DATETIME64_PRECISION,
    MAX_DECIMAL_PRECISION,
    MAX_NESTING_DEPTH,
    DataType,
    Parameters,
    TypeRegistry,
    normalize_keyword,
)

logger = logging.getLogger(__name__)

# Container types whose arguments may carry field names
NAMED_PARENTS = (None, DataType.TUPLE, DataType.NESTED)

# Clauses that may follow a column type; each runs to the next delimiter
CLAUSE_KEYWORDS = frozenset(
    ["DEFAULT", "MATERIALIZED", "ALIAS", "EPHEMERAL", "CODEC", "TTL", "COMMENT"]
)

MODIFIER_KEYWORDS = CLAUSE_KEYWORDS | {"NULL", "NOT"}

# Fixed precision of the sized Decimal types
DECIMAL_PRECISIONS = {
    DataType.DECIMAL32: 9,
    DataType.DECIMAL64: 18,
    DataType.DECIMAL128: 38,
    DataType.DECIMAL256: 76,
}

# Interpreter frames used per nesting level, with headroom for the caller
FRAMES_PER_LEVEL = 5
RESERVED_FRAMES = 100


def max_safe_depth() -> int:
    """Return the deepest nesting the interpreter stack can parse."""
    return (sys.getrecursionlimit() - RESERVED_FRAMES) // FRAMES_PER_LEVEL


class ColumnParser:
    """Parser for column declarations such as ``a Nullable(UInt8) DEFAULT 1``.

    One parser may be shared between threads: the keyword registry is
    read-only and every call tokenizes with its own lexer clone.
    """

    def __init__(self, max_depth: int = MAX_NESTING_DEPTH, registry: TypeRegistry = KEYWORDS) -> None:
        limit = max_safe_depth()
        if not 0 <= max_depth <= limit:
            raise ValueError(f"max_depth must be between 0 and {limit}, got {max_depth}")
        self.lexer = TypeLexer()
        self.lexer.build()
        self.registry = registry
        self.max_depth = max_depth

    def scan(self, text: str, end: int | None = None) -> Scanner:
        """Tokenize a declaration, or only its first ``end`` characters."""
        data = text if end is None else text[:end]
        return Scanner(text, self.lexer.tokenize(data))

    # --- Entry points ---

    def read_column(
        self,
        text: str,
        start: int,
        end: int,
        parent: DataType | None,
        columns: list[ColumnDescriptor],
    ) -> int:
        """Read one declaration starting at ``start`` and append it to ``columns``.

        Args:
            text: Full declaration text.
            start: Offset at which the declaration begins.
            end: Exclusive offset the declaration may not cross.
            parent: Type whose argument list is being read, or None at top level.
            columns: List receiving the parsed descriptor.

        Returns:
            Offset of the top-level comma or closing parenthesis ending the
            declaration, or ``end`` if the text ran out first.
        """
        return self._read_column(self.scan(text, end), start, end, parent, columns, 0)

    def parse(self, text: str) -> list[ColumnDescriptor]:
        """Parse a comma-separated list of column declarations."""
        scanner = self.scan(text)
        end = len(text)
        columns: list[ColumnDescriptor] = []
        pos = 0
        while scanner.peek(pos, end) is not None:
            pos = self._read_column(scanner, pos, end, None, columns, 0)
            tok = scanner.peek(pos, end)
            if tok is None:
                break
            if tok.type != "COMMA":
                raise TypeSyntaxError(f"Unexpected '{scanner.raw(tok)}'", text, tok.start, tok.end)
            pos = tok.end
            if scanner.peek(pos, end) is None:
                raise TypeSyntaxError("Expected column declaration after ','", text, tok.start)
        logger.debug("Parsed %d column(s) from %r", len(columns), text)
        return columns

    def of(self, name: str, type_text: str) -> ColumnDescriptor:
        """Parse a single type (without a name prefix) and give it ``name``."""
        scanner = self.scan(type_text)
        end = len(type_text)
        columns: list[ColumnDescriptor] = []
        pos = self._read_column(scanner, 0, end, None, columns, 0, allow_name=False)
        trailing = scanner.peek(pos, end)
        if trailing is not None:
            raise TypeSyntaxError(
                f"Unexpected '{type_text[trailing.start:].strip()}' after type declaration",
                type_text,
                trailing.start,
                end,
            )
        column = columns[0]
        return replace(column, name=name) if name else column

    # --- Declarations ---

    def _read_column(
        self,
        s: Scanner,
        start: int,
        end: int,
        parent: DataType | None,
        columns: list[ColumnDescriptor],
        depth: int,
        allow_name: bool | None = None,
    ) -> int:
        if depth > self.max_depth:
            raise TypeValidationError(
                f"Type nesting exceeds the maximum depth of {self.max_depth}", s.text, start
            )
        pos = s.skip_spaces(start, end)
        tok = s.peek(pos, end)
        if tok is None or tok.type in ("COMMA", "RPAREN"):
            raise TypeSyntaxError("Expected column declaration", s.text, pos)

        if allow_name is None:
            allow_name = parent in NAMED_PARENTS
        name = ""
        if allow_name:
            name, pos = self._read_name(s, pos, end)
            pos = s.peek(pos, end).start  # _read_name guarantees a type follows

        type_start = pos
        column, pos = self._read_type(s, pos, end, name, depth)
        nullable, type_end, pos = self._read_modifiers(s, pos, end)

        changes: dict[str, object] = {}
        original_type_name = s.text[type_start:type_end]
        if original_type_name != column.original_type_name:
            changes["original_type_name"] = original_type_name
        # An explicit Nullable(...) wrapper wins over trailing modifiers
        if nullable and not column.nullable:
            changes["nullable"] = True
        if changes:
            column = replace(column, **changes)

        columns.append(column)
        return pos

    def _match_keyword(self, s: Scanner, start: int, end: int) -> tuple[DataType, int] | None:
        """Match the longest (possibly multi-word) type keyword at ``start``."""
        words: list[Token] = []
        for tok in s.tokens_between(start, end):
            if tok.type != "IDENTIFIER" or len(words) == self.registry.max_words:
                break
            words.append(tok)
        match = self.registry.match([tok.value for tok in words])
        if match is None:
            return None
        data_type, count = match
        return data_type, words[count - 1].end

    def _is_modifier(self, tok: Token | None) -> bool:
        return tok is not None and tok.type == "IDENTIFIER" and tok.value.upper() in MODIFIER_KEYWORDS

    def _read_name(self, s: Scanner, start: int, end: int) -> tuple[str, int]:
        """Read the column name, or return an empty name for an anonymous type.

        A leading keyword is the type itself when what follows could only
        come after a type: a parameter list, a delimiter, a modifier or
        the end of the declaration.
        """
        tok = s.peek(start, end)
        if tok.type == "QUOTED_IDENTIFIER":
            following = s.peek(tok.end, end)
        elif tok.type == "IDENTIFIER":
            match = self._match_keyword(s, start, end)
            if match is not None:
                after = s.peek(match[1], end)
                if after is None or after.type in ("LPAREN", "COMMA", "RPAREN") or self._is_modifier(after):
                    return "", start
            following = s.peek(tok.end, end)
            if match is None and (following is None or following.type in ("LPAREN", "COMMA", "RPAREN")):
                raise UnknownTypeError(f"Unknown data type '{tok.value}'", s.text, tok.start, tok.end)
        else:
            raise TypeSyntaxError(
                f"Expected column name or type, got '{s.raw(tok)}'", s.text, tok.start, tok.end
            )

        if following is None or following.type in ("COMMA", "RPAREN"):
            raise TypeSyntaxError(f"Missing type for column '{tok.value}'", s.text, tok.start, tok.end)
        return tok.value, tok.end

    def _read_modifiers(self, s: Scanner, pos: int, end: int) -> tuple[bool | None, int, int]:
        """Read trailing NULL / NOT NULL modifiers and DEFAULT-like clauses.

        Returns the requested nullability (None if not given), the end of
        the type text including NULL modifiers, and the offset of the
        delimiter that ends the declaration.
        """
        nullable = None
        type_end = pos
        while True:
            tok = s.peek(pos, end)
            if tok is None:
                return nullable, type_end, end
            if tok.type in ("COMMA", "RPAREN"):
                return nullable, type_end, tok.start

            keyword = tok.value.upper() if tok.type == "IDENTIFIER" else None
            if keyword == "NULL":
                nullable = True
                pos = type_end = tok.end
            elif keyword == "NOT":
                following = s.peek(tok.end, end)
                if following is None or following.type != "IDENTIFIER" or following.value.upper() != "NULL":
                    raise TypeSyntaxError("Expected NULL after NOT", s.text, tok.start, tok.end)
                nullable = False
                pos = type_end = following.end
            elif keyword in CLAUSE_KEYWORDS:
                # The clause expression is not modelled, only skipped
                return nullable, type_end, s.find_top_level_delimiter(tok.end, end)
            else:
                raise TypeSyntaxError(
                    f"Unexpected '{s.raw(tok)}' in column declaration", s.text, tok.start, tok.end
                )

    # --- Types ---

    def _read_type(
        self, s: Scanner, start: int, end: int, name: str, depth: int
    ) -> tuple[ColumnDescriptor, int]:
        match = self._match_keyword(s, start, end)
        if match is None:
            tok = s.peek(start, end)
            raise UnknownTypeError(f"Unknown data type '{s.raw(tok)}'", s.text, tok.start, tok.end)
        data_type, pos = match

        following = s.peek(pos, end)
        has_parameters = following is not None and following.type == "LPAREN"
        if data_type.parameters is Parameters.NONE and has_parameters:
            if normalize_keyword(s.text[start:pos]) == normalize_keyword(data_type.value):
                raise TypeSyntaxError(
                    f"{data_type.value} does not take parameters", s.text, following.start, following.end
                )
            # SQL aliases such as VARCHAR(255) or FLOAT(24) accept and ignore a parameter list
            _, pos = self._read_arguments(s, following, end)
            return ColumnDescriptor(name, s.text[start:pos], data_type), pos
        if data_type.is_composite and not has_parameters:
            raise TypeSyntaxError(f"{data_type.value} requires a parameter list", s.text, start, pos)
        if not has_parameters:
            return ColumnDescriptor(name, s.text[start:pos], data_type), pos

        if data_type.is_wrapper:
            return self._read_wrapper(s, data_type, start, following, end, name, depth)
        if data_type.is_aggregate:
            return self._read_aggregate_function(s, data_type, start, following, end, name, depth)
        if data_type.parameters is Parameters.NESTED:
            children, pos = self._read_type_list(s, following.end, end, data_type, depth, following)
            return self._build(s, start, pos, name, data_type, nested_columns=tuple(children)), pos

        spans, pos = self._read_arguments(s, following, end)
        original_type_name = s.text[start:pos]
        if data_type.is_enum:
            return self._build_enum(s, data_type, spans, name, original_type_name), pos
        return self._build_parameterized(s, data_type, spans, name, original_type_name), pos

    def _build(
        self, s: Scanner, start: int, pos: int, name: str, data_type: DataType, **fields: object
    ) -> ColumnDescriptor:
        """Construct a descriptor, pointing validation errors at its span in the input."""
        try:
            return ColumnDescriptor(name, s.text[start:pos], data_type, **fields)  # type: ignore[arg-type]
        except TypeValidationError as e:
            raise TypeValidationError(e.message, s.text, start, pos) from None

    def _read_type_list(
        self,
        s: Scanner,
        pos: int,
        end: int,
        parent: DataType,
        depth: int,
        opening: Token,
    ) -> tuple[list[ColumnDescriptor], int]:
        """Read comma-separated type arguments up to and including ``)``."""
        children: list[ColumnDescriptor] = []
        while True:
            pos = self._read_column(s, pos, end, parent, children, depth + 1)
            tok = s.peek(pos, end)
            if tok is None:
                raise TypeSyntaxError(
                    f"Unterminated parameter list of {parent.value}", s.text, opening.start
                )
            pos = tok.end
            if tok.type == "RPAREN":
                return children, pos

    def _read_arguments(self, s: Scanner, opening: Token, end: int) -> tuple[list[tuple[int, int]], int]:
        """Split a literal parameter list into ``(start, stop)`` spans.

        Returns the spans and the offset just past the closing parenthesis.
        """
        spans: list[tuple[int, int]] = []
        pos = opening.end
        while True:
            stop = s.find_top_level_delimiter(pos, end)
            delimiter = s.peek(stop, end)
            if delimiter is None:
                raise TypeSyntaxError("Unterminated parameter list", s.text, opening.start)
            spans.append((pos, stop))
            pos = delimiter.end
            if delimiter.type == "RPAREN":
                return spans, pos

    def _read_wrapper(
        self,
        s: Scanner,
        data_type: DataType,
        start: int,
        opening: Token,
        end: int,
        name: str,
        depth: int,
    ) -> tuple[ColumnDescriptor, int]:
        """Fold Nullable(T) / LowCardinality(T) into flags on T."""
        children, pos = self._read_type_list(s, opening.end, end, data_type, depth, opening)
        if len(children) != 1:
            raise TypeValidationError(
                f"{data_type.value} expects exactly one nested type, got {len(children)}",
                s.text,
                start,
                pos,
            )
        inner = children[0]
        column = replace(
            inner,
            name=name,
            original_type_name=s.text[start:pos],
            nullable=inner.nullable or data_type is DataType.NULLABLE,
            low_cardinality=inner.low_cardinality or data_type is DataType.LOW_CARDINALITY,
            fixed_length=False,
            estimated_length=DEFAULT_ESTIMATED_LENGTH,
        )
        return column, pos

    def _read_aggregate_function(
        self,
        s: Scanner,
        data_type: DataType,
        start: int,
        opening: Token,
        end: int,
        name: str,
        depth: int,
    ) -> tuple[ColumnDescriptor, int]:
        """Read ``func[(params)][, ArgType ...]`` of an aggregate function type."""
        function_name, pos = s.read_identifier(opening.end, end)
        function = function_name
        tok = s.peek(pos, end)
        if tok is not None and tok.type == "LPAREN":
            spans, pos = self._read_arguments(s, tok, end)
            parameters = [self._render(s, a, b) for a, b in spans]
            function = f"{function_name}({','.join(parameters)})"
            tok = s.peek(pos, end)

        children: list[ColumnDescriptor] = []
        if tok is None:
            raise TypeSyntaxError(f"Unterminated parameter list of {data_type.value}", s.text, opening.start)
        if tok.type == "COMMA":
            children, pos = self._read_type_list(s, tok.end, end, data_type, depth, opening)
        elif tok.type == "RPAREN":
            pos = tok.end
        else:
            raise TypeSyntaxError(
                f"Expected ',' after aggregate function '{function}'", s.text, tok.start, tok.end
            )

        aggregate_function = AggregateFunction.of(function_name)
        if aggregate_function is None:
            logger.debug("Unknown aggregate function '%s' in %r", function_name, s.text[start:pos])
        column = self._build(
            s,
            start,
            pos,
            name,
            data_type,
            nested_columns=tuple(children),
            aggregate_function=aggregate_function,
            function=function,
        )
        return column, pos

    # --- Literal parameters ---

    def _render(self, s: Scanner, start: int, stop: int) -> str:
        """Return a parameter's source text with whitespace between tokens removed."""
        rendered = "".join(s.raw(tok) for tok in s.tokens_between(start, stop))
        if not rendered:
            raise TypeSyntaxError("Empty parameter", s.text, start)
        return rendered

    def _single_token(self, s: Scanner, span: tuple[int, int], what: str) -> Token:
        tokens = list(s.tokens_between(*span))
        if len(tokens) != 1:
            raise TypeSyntaxError(f"Expected {what}", s.text, span[0], span[1])
        return tokens[0]

    def _to_int(self, s: Scanner, tok: Token | None, what: str) -> int:
        """Convert a NUMBER token to an int."""
        if tok is not None and tok.type == "NUMBER":
            raw = s.raw(tok)
            try:
                if raw.lstrip("+-")[:2].lower() == "0x":
                    return int(raw, 16)
                return int(raw)
            except ValueError:
                pass
        got = "end of declaration" if tok is None else f"'{s.raw(tok)}'"
        raise TypeValidationError(
            f"{what} must be an integer, got {got}",
            s.text,
            tok.start if tok is not None else None,
            tok.end if tok is not None else None,
        )

    def _read_integer(self, s: Scanner, span: tuple[int, int], what: str, low: int, high: int) -> int:
        value = self._to_int(s, self._single_token(s, span, what), what)
        if not low <= value <= high:
            raise TypeValidationError(
                f"{what} must be between {low} and {high}, got {value}", s.text, span[0], span[1]
            )
        return value

    def _read_time_zone(self, s: Scanner, span: tuple[int, int]) -> str:
        tok = self._single_token(s, span, "quoted time zone")
        value, _ = s.read_single_quoted_literal(tok.start, tok.end)
        return value

    def _build_parameterized(
        self,
        s: Scanner,
        data_type: DataType,
        spans: list[tuple[int, int]],
        name: str,
        original_type_name: str,
    ) -> ColumnDescriptor:
        """Build FixedString, Decimal and DateTime descriptors from their parameters."""
        precision = scale = time_zone = None
        if data_type is DataType.FIXED_STRING:
            self._check_count(s, data_type, spans, 1, 1)
            precision = self._read_integer(s, spans[0], "FixedString length", 1, 2**31 - 1)
        elif data_type is DataType.DECIMAL:
            self._check_count(s, data_type, spans, 1, 2)
            precision = self._read_integer(s, spans[0], "Decimal precision", 1, MAX_DECIMAL_PRECISION)
            scale = 0
            if len(spans) == 2:
                scale = self._read_integer(s, spans[1], "Decimal scale", 0, precision)
        elif data_type in DECIMAL_PRECISIONS:
            self._check_count(s, data_type, spans, 1, 1)
            precision = DECIMAL_PRECISIONS[data_type]
            scale = self._read_integer(s, spans[0], f"{data_type.value} scale", 0, precision)
        elif data_type is DataType.DATETIME64:
            self._check_count(s, data_type, spans, 1, 2)
            scale = self._read_integer(s, spans[0], "DateTime64 precision", 0, MAX_DATETIME64_PRECISION)
            if len(spans) == 2:
                time_zone = self._read_time_zone(s, spans[1])
        else:
            self._check_count(s, data_type, spans, 1, 1)
            time_zone = self._read_time_zone(s, spans[0])

        return ColumnDescriptor(
            name,
            original_type_name,
            data_type,
            precision=precision,
            scale=scale,
            time_zone=time_zone,
        )

    def _check_count(
        self, s: Scanner, data_type: DataType, spans: list[tuple[int, int]], low: int, high: int
    ) -> None:
        if not low <= len(spans) <= high:
            expected = str(low) if low == high else f"{low} to {high}"
            raise TypeValidationError(
                f"{data_type.value} expects {expected} parameter(s), got {len(spans)}",
                s.text,
                spans[0][0],
                spans[-1][1],
            )

    def _build_enum(
        self,
        s: Scanner,
        data_type: DataType,
        spans: list[tuple[int, int]],
        name: str,
        original_type_name: str,
    ) -> ColumnDescriptor:
        """Build an Enum8/Enum16 descriptor from ``'name' = code`` pairs."""
        pairs = [self._read_enum_pair(s, a, b) for a, b in spans]
        if data_type is DataType.ENUM:
            # Width is picked from the codes
            fits_byte = all(-128 <= code <= 127 for _, code in pairs)
            data_type = DataType.ENUM8 if fits_byte else DataType.ENUM16
        try:
            constants = EnumConstants.from_pairs(pairs, data_type.enum_bits)
        except TypeValidationError as e:
            raise TypeValidationError(e.message, s.text, spans[0][0], spans[-1][1]) from None
        return ColumnDescriptor(name, original_type_name, data_type, enum_constants=constants)

    def _read_enum_pair(self, s: Scanner, start: int, stop: int) -> tuple[str, int]:
        label, pos = s.read_single_quoted_literal(start, stop)
        equals = s.peek(pos, stop)
        if equals is None or equals.type != "EQUALS":
            raise TypeValidationError(f"Expected '=' after enum name '{label}'", s.text, start, stop)
        value = s.peek(equals.end, stop)
        code = self._to_int(s, value, f"Value of enum name '{label}'")
        trailing = s.peek(value.end, stop)
        if trailing is not None:
            raise TypeSyntaxError(
                f"Unexpected '{s.raw(trailing)}' after enum value", s.text, trailing.start, trailing.end
            )
        return label, code


_default_parser: ColumnParser | None = None


def default_parser() -> ColumnParser:
    """Return the shared parser used by the module-level functions."""
    global _default_parser
    if _default_parser is None:
        _default_parser = ColumnParser()
    return _default_parser


def read_column(
    text: str,
    start: int,
    end: int,
    parent: DataType | None,
    columns: list[ColumnDescriptor],
) -> int:
    """Read one declaration from ``text``; see ColumnParser.read_column."""
    return default_parser().read_column(text, start, end, parent, columns)


def parse(text: str) -> list[ColumnDescriptor]:
    """Parse a comma-separated list of column declarations."""
    return default_parser().parse(text)


def of(name: str, type_text: str) -> ColumnDescriptor:
    """Parse a single type declaration and give it ``name``."""
    return default_parser().of(name, type_text)
