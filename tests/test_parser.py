"""Tests for the column declaration parser."""

import sys
import threading

import pytest

import typed_columns
from typed_columns.aggregates import AggregateFunction
from typed_columns.column import ColumnDescriptor
from typed_columns.errors import (
    TypeDeclarationError,
    TypeSyntaxError,
    TypeValidationError,
    UnknownTypeError,
)
from typed_columns.parsing import ColumnParser, of, parse, read_column
from typed_columns.parsing.column_parser import max_safe_depth
from typed_columns.types import MAX_NESTING_DEPTH, DataType


class TestReadColumn:
    """Tests for reading single declarations at successive offsets."""

    TEXT = "AggregateFunction(max, UInt64), cc LowCardinality(Nullable(String)), a UInt8 null"

    def test_successive_declarations(self):
        """Test reading three declarations one after another."""
        text = self.TEXT
        columns = []

        pos = read_column(text, 0, len(text), None, columns)
        assert pos == text.index("), cc") + 1
        pos = read_column(text, pos + 1, len(text), None, columns)
        assert pos == text.index("), a") + 1
        pos = read_column(text, pos + 1, len(text), None, columns)
        assert pos == len(text)

        assert len(columns) == 3

    def test_aggregate_function_declaration(self):
        """Test the first, anonymous aggregate declaration."""
        columns = []
        read_column(self.TEXT, 0, len(self.TEXT), None, columns)
        column = columns[0]

        assert column.name == ""
        assert column.original_type_name == "AggregateFunction(max, UInt64)"
        assert column.data_type is DataType.AGGREGATE_FUNCTION
        assert column.aggregate_function is AggregateFunction.MAX
        assert column.function == "max"
        assert column.fixed_length is False
        assert column.estimated_length == 1
        assert len(column.nested_columns) == 1
        assert column.nested_columns[0] == of("", "UInt64")

    def test_low_cardinality_nullable_declaration(self):
        """Test the second declaration with both wrappers."""
        text = self.TEXT
        columns = []
        start = text.index("cc")
        read_column(text, start, len(text), None, columns)
        column = columns[0]

        assert column.name == "cc"
        assert column.original_type_name == "LowCardinality(Nullable(String))"
        assert column.data_type is DataType.STRING
        assert column.nullable is True
        assert column.low_cardinality is True
        assert column.fixed_length is False
        assert column.estimated_length == 1

    def test_trailing_null_declaration(self):
        """Test that a trailing NULL keeps a fixed-width type fixed."""
        text = self.TEXT
        columns = []
        read_column(text, text.index("a UInt8"), len(text), None, columns)
        column = columns[0]

        assert column.name == "a"
        assert column.original_type_name == "UInt8 null"
        assert column.data_type is DataType.UINT8
        assert column.nullable is True
        assert column.fixed_length is True
        assert column.estimated_length == 1

    def test_inside_tuple(self):
        """Test reading a named field of a Tuple argument list."""
        text = "Tuple(a UInt8, b String)"
        columns = []
        pos = read_column(text, 6, len(text), DataType.TUPLE, columns)

        assert pos == text.index(",")
        assert columns[0].name == "a"
        assert columns[0].data_type is DataType.UINT8

    def test_stops_at_closing_parenthesis(self):
        """Test that an enclosing closing parenthesis ends the declaration."""
        text = "Array(String)"
        columns = []
        pos = read_column(text, 6, len(text), DataType.ARRAY, columns)

        assert pos == len(text) - 1
        assert columns[0].data_type is DataType.STRING

    def test_default_clause(self):
        """Test that a DEFAULT expression is skipped up to the next column."""
        text = "a UInt8 DEFAULT least(1, 2), b String"
        columns = []
        pos = read_column(text, 0, len(text), None, columns)

        assert pos == text.index(", b")
        assert columns[0].original_type_name == "UInt8"

    def test_end_bound(self):
        """Test that the declaration does not run past the end bound."""
        text = "a UInt8 b String"
        columns = []
        pos = read_column(text, 0, 7, None, columns)

        assert pos == 7
        assert columns[0].name == "a"

    def test_text_after_end_is_ignored(self):
        """Test that malformed text past the end bound is never read."""
        text = "UInt8, 'oops"
        columns = []
        pos = read_column(text, 0, 5, None, columns)

        assert pos == 5
        assert columns[0].data_type is DataType.UINT8


class TestParse:
    """Tests for parsing column lists."""

    def test_parse_list(self):
        """Test parsing several columns in declaration order."""
        columns = parse("id UInt64, name String, score Float64")

        assert [c.name for c in columns] == ["id", "name", "score"]
        assert [c.data_type for c in columns] == [
            DataType.UINT64,
            DataType.STRING,
            DataType.FLOAT64,
        ]

    def test_parse_single_anonymous_type(self):
        """Test parsing a type without a name."""
        columns = parse("Array(String)")

        assert len(columns) == 1
        assert columns[0].name == ""
        assert columns[0].data_type is DataType.ARRAY

    def test_parse_empty(self):
        """Test that empty input yields no columns."""
        assert parse("") == []
        assert parse("   ") == []

    def test_parse_whitespace(self):
        """Test declarations spread over several lines."""
        columns = parse("\n  a UInt8,\n  b Nullable(String)\n")

        assert [c.name for c in columns] == ["a", "b"]
        assert columns[1].original_type_name == "Nullable(String)"

    def test_parse_scenario_list(self):
        """Test parsing a list mixing aggregate, wrapped and modified columns."""
        columns = parse(TestReadColumn.TEXT)

        assert [c.name for c in columns] == ["", "cc", "a"]

    def test_keyword_as_column_name(self):
        """Test that a type keyword followed by a type is a column name."""
        columns = parse("date Date, string String")

        assert columns[0].name == "date"
        assert columns[0].data_type is DataType.DATE
        assert columns[1].name == "string"
        assert columns[1].data_type is DataType.STRING

    def test_quoted_names(self):
        """Test backtick and double-quoted column names."""
        columns = parse('`my col` UInt8, "UInt8" String, `a``b` Date')

        assert [c.name for c in columns] == ["my col", "UInt8", "a`b"]
        assert columns[1].data_type is DataType.STRING

    def test_dotted_names(self):
        """Test flattened Nested column names."""
        columns = parse("n.a Array(UInt8), n.b Array(String)")

        assert [c.name for c in columns] == ["n.a", "n.b"]

    def test_case_insensitive_types(self):
        """Test that type keywords ignore case."""
        columns = parse("a uint8, b nullable(string)")

        assert columns[0].data_type is DataType.UINT8
        assert columns[0].original_type_name == "uint8"
        assert columns[1].data_type is DataType.STRING
        assert columns[1].nullable is True

    def test_multi_word_aliases(self):
        """Test multi-word SQL aliases with and without names."""
        columns = parse("a TINYINT SIGNED, INT1 UNSIGNED, c DOUBLE PRECISION NULL")

        assert columns[0].name == "a"
        assert columns[0].data_type is DataType.INT8
        assert columns[0].original_type_name == "TINYINT SIGNED"
        assert columns[1].name == ""
        assert columns[1].data_type is DataType.UINT8
        assert columns[2].name == "c"
        assert columns[2].data_type is DataType.FLOAT64
        assert columns[2].nullable is True
        assert columns[2].original_type_name == "DOUBLE PRECISION NULL"

    def test_not_null(self):
        """Test that NOT NULL keeps a column non-nullable."""
        column = parse("a UInt8 NOT NULL")[0]

        assert column.nullable is False
        assert column.original_type_name == "UInt8 NOT NULL"

    def test_explicit_wrapper_wins(self):
        """Test that NOT NULL does not override an explicit Nullable wrapper."""
        column = parse("a Nullable(UInt8) NOT NULL")[0]

        assert column.nullable is True

    @pytest.mark.parametrize(
        "clause",
        [
            "DEFAULT 0",
            "MATERIALIZED now()",
            "ALIAS a + 1",
            "EPHEMERAL",
            "CODEC(ZSTD(1))",
            "TTL d + INTERVAL 1 DAY",
            "COMMENT 'x, y'",
        ],
    )
    def test_column_clauses(self, clause):
        """Test that column clauses are skipped up to the next column."""
        columns = parse(f"a UInt32 {clause}, b String")

        assert [c.name for c in columns] == ["a", "b"]
        assert columns[0].original_type_name == "UInt32"

    def test_null_then_default(self):
        """Test a NULL modifier followed by a DEFAULT clause."""
        column = parse("a String NULL DEFAULT 'x'")[0]

        assert column.nullable is True
        assert column.original_type_name == "String NULL"

    def test_trailing_comma(self):
        """Test error on a trailing comma."""
        with pytest.raises(TypeSyntaxError, match="after ','"):
            parse("a UInt8,")

    def test_leading_comma(self):
        """Test error on an empty declaration."""
        with pytest.raises(TypeSyntaxError):
            parse(", a UInt8")

    def test_stray_closing_parenthesis(self):
        """Test error on an unmatched closing parenthesis."""
        with pytest.raises(TypeSyntaxError, match="Unexpected"):
            parse("a UInt8)")

    def test_unexpected_token(self):
        """Test error on a token that is neither a modifier nor a delimiter."""
        with pytest.raises(TypeSyntaxError, match="Unexpected 'b'"):
            parse("a UInt8 b")

    def test_not_without_null(self):
        """Test error on NOT not followed by NULL."""
        with pytest.raises(TypeSyntaxError, match="Expected NULL"):
            parse("a UInt8 NOT")

    def test_unknown_type(self):
        """Test error on an unknown type keyword."""
        with pytest.raises(UnknownTypeError, match="UInt9"):
            parse("a UInt9")

    def test_unknown_anonymous_type(self):
        """Test error on an unknown type without a column name."""
        with pytest.raises(UnknownTypeError, match="Foo"):
            parse("Foo")

    def test_unknown_parameterized_type(self):
        """Test error on an unknown type with parameters."""
        with pytest.raises(UnknownTypeError, match="'Foo'"):
            parse("Foo(1)")

    def test_missing_type(self):
        """Test error on a quoted name without a type."""
        with pytest.raises(TypeSyntaxError, match="Missing type"):
            parse("`a`, b UInt8")

    def test_error_position(self):
        """Test that errors carry the offending span."""
        with pytest.raises(UnknownTypeError) as exc_info:
            parse("a UInt8, b Strin")

        error = exc_info.value
        assert error.start == 11
        assert error.span == "Strin"
        assert "position 11" in str(error)

    def test_validation_error_position(self):
        """Test that arity and naming errors point at the offending type."""
        with pytest.raises(TypeValidationError) as exc_info:
            parse("a UInt8, m Map(String, UInt8, UInt8)")

        assert exc_info.value.start == 11
        assert exc_info.value.span == "Map(String, UInt8, UInt8)"

        with pytest.raises(TypeValidationError) as exc_info:
            parse("n Nested(UInt8)")

        assert exc_info.value.start == 2
        assert exc_info.value.span == "Nested(UInt8)"
        assert "must be named" in exc_info.value.message

    def test_default_with_array_literal(self):
        """Test that commas inside bracketed DEFAULT literals do not split columns."""
        columns = parse("a Array(UInt8) DEFAULT [1, 2], b UInt8, m Map(String, UInt8) DEFAULT {'k': 1}")

        assert [c.name for c in columns] == ["a", "b", "m"]
        assert columns[0].original_type_name == "Array(UInt8)"
        assert columns[2].is_map is True

    def test_errors_are_value_errors(self):
        """Test that every parse failure is a ValueError."""
        with pytest.raises(ValueError):
            parse("a Map(String)")


class TestOf:
    """Tests for parsing a single named type."""

    def test_of(self):
        """Test giving a parsed type a name."""
        column = of("k1", "Int8")

        assert column.name == "k1"
        assert column.original_type_name == "Int8"
        assert column.data_type is DataType.INT8
        assert column.fixed_length is True
        assert column.estimated_length == 1

    def test_of_no_name_scanning(self):
        """Test that a leading identifier is not taken as a name."""
        with pytest.raises(TypeDeclarationError):
            of("x", "k1 Int8")

    def test_of_keyword_type(self):
        """Test that a type keyword followed by a type is still a type."""
        with pytest.raises(TypeSyntaxError):
            of("date", "Date Date")

    def test_of_trailing_modifiers(self):
        """Test that trailing modifiers and clauses are allowed."""
        column = of("a", "DateTime64(3) NULL DEFAULT now64()")

        assert column.nullable is True
        assert column.fixed_length is True
        assert column.estimated_length == 8
        assert column.original_type_name == "DateTime64(3) NULL"

    def test_of_trailing_content(self):
        """Test error on content after the type."""
        with pytest.raises(TypeSyntaxError, match="after type declaration"):
            of("a", "UInt8, String")

    def test_of_anonymous(self):
        """Test an empty name."""
        assert of("", "String").name == ""

    def test_of_equals_nested_argument(self):
        """Test that a standalone type equals the same nested argument."""
        column = of("", "Tuple(UInt32, String)")

        assert column.nested_columns[0] == of("", "UInt32")
        assert column.nested_columns[1] == of("", "String")

    def test_of_empty(self):
        """Test error on an empty declaration."""
        with pytest.raises(TypeSyntaxError):
            of("a", "  ")


class TestWrappers:
    """Tests for Nullable and LowCardinality."""

    def test_nullable(self):
        """Test that Nullable folds into a flag on the wrapped type."""
        column = of("a", "Nullable(UInt8)")

        assert column.data_type is DataType.UINT8
        assert column.nullable is True
        assert column.low_cardinality is False
        assert column.fixed_length is False
        assert column.estimated_length == 1
        assert column.original_type_name == "Nullable(UInt8)"

    def test_low_cardinality(self):
        """Test LowCardinality on a string type."""
        column = of("a", "LowCardinality(String)")

        assert column.data_type is DataType.STRING
        assert column.low_cardinality is True
        assert column.nullable is False

    def test_wrapped_composite_keeps_children(self):
        """Test that a wrapper keeps the children of the wrapped type."""
        column = of("a", "Nullable(Tuple(UInt8, String))")

        assert column.data_type is DataType.TUPLE
        assert column.nullable is True
        assert len(column.nested_columns) == 2

    def test_wrapper_arity(self):
        """Test error on a wrapper with more than one type."""
        with pytest.raises(TypeValidationError, match="exactly one"):
            of("a", "Nullable(UInt8, UInt16)")

    def test_wrapper_without_parameters(self):
        """Test error on a bare wrapper keyword."""
        with pytest.raises(TypeSyntaxError, match="requires a parameter list"):
            of("a", "Nullable")

    def test_unbalanced_parentheses(self):
        """Test error on a missing closing parenthesis."""
        with pytest.raises(TypeSyntaxError, match="Unterminated"):
            of("a", "Nullable(Array(Nullable(UInt8))")

    def test_names_not_allowed_in_wrapper(self):
        """Test error on a named argument of a wrapper."""
        with pytest.raises(TypeDeclarationError):
            of("a", "Nullable(x UInt8)")


class TestArrays:
    """Tests for Array types."""

    def test_nested_arrays(self):
        """Test two levels of Array around a Nullable element."""
        column = parse("Array(Array(Nullable(UInt8)))")[0]

        assert len(column.nested_columns) == 1
        assert len(column.nested_columns[0].nested_columns) == 1
        assert column.array_nested_level == 2
        assert column.array_base_column.original_type_name == "Nullable(UInt8)"
        assert column.array_base_column.nullable is True
        assert column.fixed_length is False
        assert column.estimated_length == 1

    @pytest.mark.parametrize("depth", [1, 2, 5, 10])
    def test_array_nested_level(self, depth):
        """Test that the nesting level counts every Array layer."""
        text = "Array(" * depth + "Decimal(10, 2)" + ")" * depth
        column = of("a", text)

        assert column.array_nested_level == depth
        assert column.array_base_column.original_type_name == "Decimal(10, 2)"
        assert column.nested_columns[0].array_nested_level == depth - 1

    def test_non_array(self):
        """Test the array fields of a non-Array type."""
        column = of("a", "String")

        assert column.is_array is False
        assert column.array_nested_level == 0
        assert column.array_base_column is None

    def test_array_arity(self):
        """Test error on an Array with two element types."""
        with pytest.raises(TypeValidationError, match="exactly one element type"):
            of("a", "Array(UInt8, String)")

    def test_empty_array(self):
        """Test error on an Array without an element type."""
        with pytest.raises(TypeSyntaxError):
            of("a", "Array()")

    def test_array_requires_parameters(self):
        """Test error on a bare Array."""
        with pytest.raises(TypeSyntaxError, match="requires a parameter list"):
            of("a", "Array")


class TestTuplesAndMaps:
    """Tests for Tuple, Map and Nested types."""

    def test_map(self):
        """Test a Map of String to Tuple."""
        column = parse("Map(String, Tuple(UInt8, Nullable(String), UInt16 null))")[0]

        assert column.is_map is True
        assert column.key_info.original_type_name == "String"
        assert len(column.value_info.nested_columns) == 3
        third = column.value_info.nested_columns[2]
        assert third.name == ""
        assert third.data_type is DataType.UINT16
        assert third.nullable is True
        assert third.original_type_name == "UInt16 null"

    def test_map_arity(self):
        """Test error on a Map without exactly two types."""
        with pytest.raises(TypeValidationError, match="exactly two"):
            of("m", "Map(String)")

        with pytest.raises(TypeValidationError, match="exactly two"):
            of("m", "Map(String, UInt8, UInt8)")

    def test_key_info_only_on_map(self):
        """Test that key and value views are absent for other types."""
        column = of("t", "Tuple(String, UInt8)")

        assert column.key_info is None
        assert column.value_info is None

    def test_named_tuple(self):
        """Test a Tuple with named elements."""
        column = of("t", "Tuple(a UInt8, `b c` Array(String), String)")

        assert [c.name for c in column.nested_columns] == ["a", "b c", ""]
        assert column.nested_columns[1].is_array is True

    def test_tuple_is_never_fixed_length(self):
        """Test that a Tuple of fixed-width types is variable length."""
        column = of("t", "Tuple(UInt8, UInt8)")

        assert all(c.fixed_length for c in column.nested_columns)
        assert column.fixed_length is False
        assert column.estimated_length == 1

    def test_nested(self):
        """Test a Nested type with named fields."""
        column = of("n", "Nested(id UInt32, tags Array(String))")

        assert column.is_nested is True
        assert [c.name for c in column.nested_columns] == ["id", "tags"]
        assert column.fixed_length is False

    def test_nested_requires_names(self):
        """Test error on an unnamed Nested field."""
        with pytest.raises(TypeValidationError, match="must be named"):
            of("n", "Nested(UInt32)")

    def test_deeply_composed(self):
        """Test arrays of maps of tuples of nullable arrays."""
        column = of(
            "x", "Array(Map(LowCardinality(String), Tuple(a Array(Nullable(Int64)), b Enum8('x' = 1))))"
        )

        value = column.array_base_column.value_info
        assert column.array_base_column.key_info.low_cardinality is True
        assert value.nested_columns[0].array_base_column.nullable is True
        assert value.nested_columns[1].enum_constants.value("x") == 1


class TestEnums:
    """Tests for Enum types."""

    def test_enum_escapes(self):
        """Test enum names with doubled and escaped quotes."""
        column = of("e", "Enum8('Query''Start' = 1, 'Query\\'Finish' = 10)")

        assert column.data_type is DataType.ENUM8
        assert column.enum_constants.value("Query'Start") == 1
        assert column.enum_constants.value("Query'Finish") == 10
        assert column.enum_constants.name(1) == "Query'Start"
        assert column.enum_constants.name(10) == "Query'Finish"
        assert column.fixed_length is True
        assert column.estimated_length == 1

    def test_enum_non_integer_value(self):
        """Test error on a non-integer enum value."""
        with pytest.raises(TypeValidationError, match="must be an integer"):
            of("e", "Enum8('Query''Start' = a)")

    def test_enum_missing_equals(self):
        """Test error on a pair without '='."""
        with pytest.raises(TypeValidationError, match="Expected '='"):
            of("e", "Enum8('a' 1)")

    def test_enum_missing_value(self):
        """Test error on a pair without a value."""
        with pytest.raises(TypeValidationError):
            of("e", "Enum8('a' = )")

    def test_enum_duplicate_name(self):
        """Test error on a duplicate enum name."""
        with pytest.raises(TypeValidationError, match="Duplicate enum name"):
            of("e", "Enum8('a' = 1, 'a' = 2)")

    def test_enum_duplicate_value(self):
        """Test error on a duplicate enum value."""
        with pytest.raises(TypeValidationError, match="Duplicate enum value"):
            of("e", "Enum8('a' = 1, 'b' = 1)")

    def test_enum8_range(self):
        """Test error on a code outside the signed 8-bit range."""
        with pytest.raises(TypeValidationError, match="does not fit Enum8"):
            of("e", "Enum8('a' = 128)")

    def test_enum16(self):
        """Test a 16-bit enum with negative and hexadecimal codes."""
        column = of("e", "Enum16('low' = -1000, 'high' = 0x7FFF)")

        assert column.data_type is DataType.ENUM16
        assert column.enum_constants.value("high") == 32767
        assert column.enum_constants.name(-1000) == "low"
        assert column.estimated_length == 2

    def test_enum_auto_width(self):
        """Test that Enum picks its width from the codes."""
        assert of("e", "Enum('a' = 1, 'b' = -128)").data_type is DataType.ENUM8
        assert of("e", "Enum('a' = 1, 'b' = 200)").data_type is DataType.ENUM16

    def test_enum_lookup_missing(self):
        """Test that absent names and codes are not found."""
        constants = of("e", "Enum8('a' = 1)").enum_constants

        with pytest.raises(KeyError):
            constants.value("b")
        with pytest.raises(KeyError):
            constants.name(2)

    def test_enum_delimiters_in_names(self):
        """Test enum names containing commas and parentheses."""
        column = of("e", "Enum8('a, b' = 1, '(c)' = 2)")

        assert column.enum_constants.names == ["a, b", "(c)"]

    def test_empty_enum(self):
        """Test error on an enum without constants."""
        with pytest.raises(TypeDeclarationError):
            of("e", "Enum8()")

    def test_unterminated_enum_name(self):
        """Test error on an unterminated enum name."""
        with pytest.raises(TypeSyntaxError, match="Unterminated"):
            of("e", "Enum8('a = 1)")


class TestAggregateFunctions:
    """Tests for AggregateFunction and SimpleAggregateFunction."""

    def test_parameters_normalized(self):
        """Test that function parameters are rendered without whitespace."""
        column = of("q", "AggregateFunction(quantiles(0.5, 0.9), UInt64)")

        assert column.function == "quantiles(0.5,0.9)"
        assert column.aggregate_function is AggregateFunction.QUANTILES
        assert column.nested_columns[0].data_type is DataType.UINT64

    def test_several_argument_types(self):
        """Test a function with two argument types."""
        column = of("a", "AggregateFunction(argMax, String, DateTime)")

        assert column.aggregate_function is AggregateFunction.ARG_MAX
        assert [c.data_type for c in column.nested_columns] == [DataType.STRING, DataType.DATETIME]

    def test_no_argument_types(self):
        """Test a function without argument types."""
        column = of("c", "AggregateFunction(count)")

        assert column.aggregate_function is AggregateFunction.COUNT
        assert column.nested_columns == ()

    def test_combinator(self):
        """Test that combinator suffixes resolve to the base function."""
        column = of("s", "AggregateFunction(sumIf, UInt64, UInt8)")

        assert column.aggregate_function is AggregateFunction.SUM
        assert column.function == "sumIf"

    def test_unknown_function(self):
        """Test that unknown functions keep their signature."""
        column = of("f", "AggregateFunction(myFunc(1), UInt8)")

        assert column.aggregate_function is None
        assert column.function == "myFunc(1)"

    def test_simple_aggregate_function(self):
        """Test a SimpleAggregateFunction column."""
        column = of("m", "SimpleAggregateFunction(max, Nullable(UInt64))")

        assert column.data_type is DataType.SIMPLE_AGGREGATE_FUNCTION
        assert column.aggregate_function is AggregateFunction.MAX
        assert column.nested_columns[0].nullable is True
        assert column.fixed_length is False

    def test_simple_aggregate_function_arity(self):
        """Test error on a SimpleAggregateFunction without one argument type."""
        with pytest.raises(TypeValidationError, match="exactly one argument type"):
            of("m", "SimpleAggregateFunction(max)")

    def test_missing_comma(self):
        """Test error when argument types do not follow a comma."""
        with pytest.raises(TypeSyntaxError, match="Expected ','"):
            of("m", "AggregateFunction(max UInt64)")

    def test_missing_function(self):
        """Test error when the function name is missing."""
        with pytest.raises(TypeSyntaxError, match="Expected identifier"):
            of("m", "AggregateFunction(1, UInt64)")


class TestParameterizedTypes:
    """Tests for FixedString, Decimal and DateTime parameters."""

    def test_fixed_string(self):
        """Test FixedString length."""
        column = of("f", "FixedString(16)")

        assert column.precision == 16
        assert column.fixed_length is True
        assert column.estimated_length == 16

    def test_fixed_string_invalid_length(self):
        """Test error on a zero FixedString length."""
        with pytest.raises(TypeValidationError, match="between 1"):
            of("f", "FixedString(0)")

    def test_fixed_string_parameter_count(self):
        """Test error on extra FixedString parameters."""
        with pytest.raises(TypeValidationError, match="expects 1 parameter"):
            of("f", "FixedString(1, 2)")

    @pytest.mark.parametrize(
        "text, precision, scale, length",
        [
            ("Decimal(9, 2)", 9, 2, 4),
            ("Decimal(10, 2)", 10, 2, 8),
            ("Decimal(18, 18)", 18, 18, 8),
            ("Decimal(38, 0)", 38, 0, 16),
            ("Decimal(76, 10)", 76, 10, 32),
            ("Decimal(5)", 5, 0, 4),
            ("Decimal32(4)", 9, 4, 4),
            ("Decimal64(4)", 18, 4, 8),
            ("Decimal128(4)", 38, 4, 16),
            ("Decimal256(4)", 76, 4, 32),
        ],
    )
    def test_decimal(self, text, precision, scale, length):
        """Test Decimal precision, scale and width."""
        column = of("d", text)

        assert column.precision == precision
        assert column.scale == scale
        assert column.fixed_length is True
        assert column.estimated_length == length

    def test_decimal_out_of_range(self):
        """Test errors on invalid Decimal parameters."""
        with pytest.raises(TypeValidationError):
            of("d", "Decimal(77, 2)")
        with pytest.raises(TypeValidationError):
            of("d", "Decimal(5, 6)")
        with pytest.raises(TypeValidationError, match="must be an integer"):
            of("d", "Decimal(5.5)")

    def test_datetime(self):
        """Test DateTime with and without a time zone."""
        plain = of("t", "DateTime")
        zoned = of("t", "DateTime('Asia/Shanghai')")

        assert plain.time_zone is None
        assert zoned.time_zone == "Asia/Shanghai"
        assert zoned.fixed_length is True
        assert zoned.estimated_length == 4

    def test_datetime64(self):
        """Test DateTime64 precision and time zone."""
        column = of("t", "DateTime64(3, 'UTC')")

        assert column.scale == 3
        assert column.time_zone == "UTC"
        assert column.fixed_length is True
        assert column.estimated_length == 8

    def test_datetime64_invalid_precision(self):
        """Test error on a DateTime64 precision above 9."""
        with pytest.raises(TypeValidationError, match="DateTime64 precision"):
            of("t", "DateTime64(10)")

    def test_time_zone_must_be_quoted(self):
        """Test error on an unquoted time zone."""
        with pytest.raises(TypeSyntaxError, match="quoted string"):
            of("t", "DateTime(UTC)")

    def test_no_parameters_allowed(self):
        """Test error on parameters for a plain type."""
        with pytest.raises(TypeSyntaxError, match="does not take parameters"):
            of("a", "UInt8(1)")

        with pytest.raises(TypeSyntaxError, match="does not take parameters"):
            of("a", "string(1)")

    @pytest.mark.parametrize(
        "text, data_type",
        [
            ("VARCHAR(255)", DataType.STRING),
            ("CHARACTER VARYING(16)", DataType.STRING),
            ("FLOAT(5)", DataType.FLOAT32),
            ("INT(11)", DataType.INT32),
        ],
    )
    def test_alias_parameters_ignored(self, text, data_type):
        """Test that SQL aliases accept a parameter list and ignore it."""
        column = of("a", text)

        assert column.data_type is data_type
        assert column.original_type_name == text
        assert column.precision is None
        assert of("a", column.original_type_name) == column

    def test_nothing(self):
        """Test the Nothing type inside wrappers and arrays."""
        nullable = of("a", "Nullable(Nothing)")
        array = of("b", "Array(Nothing)")

        assert nullable.data_type is DataType.NOTHING
        assert nullable.nullable is True
        assert nullable.fixed_length is False
        assert nullable.estimated_length == 1
        assert array.array_base_column.data_type is DataType.NOTHING
        assert array.array_base_column.fixed_length is False

    @pytest.mark.parametrize(
        "text, data_type, length",
        [
            ("Bool", DataType.BOOL, 1),
            ("Int128", DataType.INT128, 16),
            ("UInt256", DataType.UINT256, 32),
            ("Date32", DataType.DATE32, 4),
            ("UUID", DataType.UUID, 16),
            ("IPv6", DataType.IPV6, 16),
            ("IntervalDay", DataType.INTERVAL_DAY, 8),
        ],
    )
    def test_fixed_width_types(self, text, data_type, length):
        """Test fixed-width types report their intrinsic width."""
        column = of("a", text)

        assert column.data_type is data_type
        assert column.fixed_length is True
        assert column.estimated_length == length

    @pytest.mark.parametrize("text", ["String", "JSON", "Point", "MultiPolygon"])
    def test_variable_width_types(self, text):
        """Test variable-width types."""
        column = of("a", text)

        assert column.fixed_length is False
        assert column.estimated_length == 1


class TestRoundTrip:
    """Tests for original type names and re-parsing."""

    DECLARATIONS = [
        "UInt8",
        "Nullable(String)",
        "LowCardinality(Nullable(String))",
        "Array(Array(Nullable(UInt8)))",
        "Map(String, Tuple(UInt8, Nullable(String), UInt16 null))",
        "Tuple(a UInt8, b Array(String))",
        "Nested(id UInt32, name String)",
        "Enum8('Query''Start' = 1, 'Query\\'Finish' = 10)",
        "AggregateFunction(quantiles(0.5, 0.9), UInt64)",
        "SimpleAggregateFunction(sum, UInt64)",
        "Decimal(18, 4)",
        "DateTime64(3, 'UTC')",
        "FixedString(8) NULL",
        "TINYINT UNSIGNED",
    ]

    @pytest.mark.parametrize("declaration", DECLARATIONS)
    def test_original_type_name_is_input(self, declaration):
        """Test that the original type name is the exact consumed text."""
        column = of("c", f"  {declaration}  DEFAULT 1")

        assert column.original_type_name == declaration

    @pytest.mark.parametrize("declaration", DECLARATIONS)
    def test_reparse_is_equal(self, declaration):
        """Test that parsing the original type name gives an equal descriptor."""
        column = of("c", declaration)

        assert of("c", column.original_type_name) == column


class TestColumnParser:
    """Tests for ColumnParser configuration."""

    def test_max_depth(self):
        """Test that nesting beyond the limit fails fast."""
        parser = ColumnParser(max_depth=3)

        assert parser.of("a", "Array(Array(Array(UInt8)))").array_nested_level == 3
        with pytest.raises(TypeValidationError, match="maximum depth"):
            parser.of("a", "Array(Array(Array(Array(UInt8))))")

    def test_default_depth_limit(self):
        """Test that pathological nesting is rejected by default."""
        text = "Array(" * 200 + "UInt8" + ")" * 200

        with pytest.raises(TypeValidationError, match="maximum depth of 64"):
            parse(text)

    def test_max_depth_bounded_by_stack(self):
        """Test that the depth limit cannot exceed what the interpreter stack allows."""
        assert max_safe_depth() >= MAX_NESTING_DEPTH
        with pytest.raises(ValueError, match="max_depth"):
            ColumnParser(max_depth=sys.getrecursionlimit())
        with pytest.raises(ValueError, match="max_depth"):
            ColumnParser(max_depth=-1)

    def test_deepest_allowed_nesting(self):
        """Test that nesting at the largest allowed limit parses without overflowing the stack."""
        depth = max_safe_depth()
        parser = ColumnParser(max_depth=depth)
        column = parser.of("a", "Array(" * depth + "UInt8" + ")" * depth)

        assert column.array_nested_level == depth

    def test_package_exports(self):
        """Test the top-level convenience functions."""
        assert typed_columns.parse("a UInt8")[0] == typed_columns.of("a", "UInt8")
        assert isinstance(typed_columns.of("a", "UInt8"), ColumnDescriptor)

    def test_concurrent_parsing(self):
        """Test that one parser can be shared between threads."""
        parser = ColumnParser()
        texts = [f"c{i} Array(Tuple(UInt{8 * 2 ** (i % 4)}, String))" for i in range(32)]
        results = {}

        def work(text):
            results[text] = parser.parse(text)

        threads = [threading.Thread(target=work, args=(text,)) for text in texts]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for text in texts:
            assert results[text] == parser.parse(text)
            assert results[text][0].name == text.split()[0]
