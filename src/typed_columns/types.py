"""Data types of the column type language and the keyword registry."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from typed_columns.errors import UnknownTypeError

# Size hint reported for every variable-length or wrapped type
DEFAULT_ESTIMATED_LENGTH = 1

# Deepest allowed nesting of parenthesized type arguments
MAX_NESTING_DEPTH = 64

# Decimal precision limits and the byte width used up to each precision
MAX_DECIMAL_PRECISION = 76
DECIMAL_WIDTHS = ((9, 4), (18, 8), (38, 16), (76, 32))

MAX_DATETIME64_PRECISION = 9


class Parameters(Enum):
    """How a type keyword takes a parenthesized parameter list."""

    NONE = "none"  # no parameter list allowed
    OPTIONAL = "optional"  # literal parameters may follow
    REQUIRED = "required"  # literal parameters must follow
    NESTED = "nested"  # nested type arguments must follow


class DataType(Enum):
    """Closed set of data types a column can be declared with."""

    BOOL = "Bool"
    INT8 = "Int8"
    UINT8 = "UInt8"
    INT16 = "Int16"
    UINT16 = "UInt16"
    INT32 = "Int32"
    UINT32 = "UInt32"
    INT64 = "Int64"
    UINT64 = "UInt64"
    INT128 = "Int128"
    UINT128 = "UInt128"
    INT256 = "Int256"
    UINT256 = "UInt256"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    DECIMAL = "Decimal"
    DECIMAL32 = "Decimal32"
    DECIMAL64 = "Decimal64"
    DECIMAL128 = "Decimal128"
    DECIMAL256 = "Decimal256"
    DATE = "Date"
    DATE32 = "Date32"
    DATETIME = "DateTime"
    DATETIME32 = "DateTime32"
    DATETIME64 = "DateTime64"
    INTERVAL_SECOND = "IntervalSecond"
    INTERVAL_MINUTE = "IntervalMinute"
    INTERVAL_HOUR = "IntervalHour"
    INTERVAL_DAY = "IntervalDay"
    INTERVAL_WEEK = "IntervalWeek"
    INTERVAL_MONTH = "IntervalMonth"
    INTERVAL_QUARTER = "IntervalQuarter"
    INTERVAL_YEAR = "IntervalYear"
    UUID = "UUID"
    IPV4 = "IPv4"
    IPV6 = "IPv6"
    STRING = "String"
    FIXED_STRING = "FixedString"
    JSON = "JSON"
    POINT = "Point"
    RING = "Ring"
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"
    NOTHING = "Nothing"
    ENUM = "Enum"
    ENUM8 = "Enum8"
    ENUM16 = "Enum16"
    ARRAY = "Array"
    TUPLE = "Tuple"
    MAP = "Map"
    NESTED = "Nested"
    NULLABLE = "Nullable"
    LOW_CARDINALITY = "LowCardinality"
    AGGREGATE_FUNCTION = "AggregateFunction"
    SIMPLE_AGGREGATE_FUNCTION = "SimpleAggregateFunction"

    @property
    def byte_length(self) -> int:
        """Return the intrinsic byte width, or 0 when it is not constant.

        FixedString and Decimal widths depend on their parameters and are
        reported as 0 here.
        """
        return _BYTE_LENGTHS.get(self, 0)

    @property
    def parameters(self) -> Parameters:
        """Return how this type takes a parameter list."""
        return _PARAMETERS.get(self, Parameters.NONE)

    @property
    def is_composite(self) -> bool:
        """Return whether a declaration of this type carries parameters."""
        return self.parameters in (Parameters.REQUIRED, Parameters.NESTED)

    @property
    def is_wrapper(self) -> bool:
        """Return whether this type only modifies the single type it wraps."""
        return self in (DataType.NULLABLE, DataType.LOW_CARDINALITY)

    @property
    def is_enum(self) -> bool:
        return self in (DataType.ENUM, DataType.ENUM8, DataType.ENUM16)

    @property
    def is_aggregate(self) -> bool:
        return self in (DataType.AGGREGATE_FUNCTION, DataType.SIMPLE_AGGREGATE_FUNCTION)

    @property
    def enum_bits(self) -> int:
        """Return the signed code width of an enum type."""
        if self is DataType.ENUM16:
            return 16
        if self is DataType.ENUM8:
            return 8
        raise TypeError(f"'{self.value}' is not a fixed-width enum type")

    @property
    def aliases(self) -> tuple[str, ...]:
        """Return the alternative keywords accepted for this type."""
        return _ALIASES.get(self, ())

    @classmethod
    def of(cls, name: str) -> DataType:
        """Resolve a type keyword or alias, case-insensitively."""
        return KEYWORDS.get_or_raise(name)


_BYTE_LENGTHS: dict[DataType, int] = {
    DataType.BOOL: 1,
    DataType.INT8: 1,
    DataType.UINT8: 1,
    DataType.INT16: 2,
    DataType.UINT16: 2,
    DataType.INT32: 4,
    DataType.UINT32: 4,
    DataType.INT64: 8,
    DataType.UINT64: 8,
    DataType.INT128: 16,
    DataType.UINT128: 16,
    DataType.INT256: 32,
    DataType.UINT256: 32,
    DataType.FLOAT32: 4,
    DataType.FLOAT64: 8,
    DataType.DECIMAL32: 4,
    DataType.DECIMAL64: 8,
    DataType.DECIMAL128: 16,
    DataType.DECIMAL256: 32,
    DataType.DATE: 2,
    DataType.DATE32: 4,
    DataType.DATETIME: 4,
    DataType.DATETIME32: 4,
    DataType.DATETIME64: 8,
    DataType.INTERVAL_SECOND: 8,
    DataType.INTERVAL_MINUTE: 8,
    DataType.INTERVAL_HOUR: 8,
    DataType.INTERVAL_DAY: 8,
    DataType.INTERVAL_WEEK: 8,
    DataType.INTERVAL_MONTH: 8,
    DataType.INTERVAL_QUARTER: 8,
    DataType.INTERVAL_YEAR: 8,
    DataType.UUID: 16,
    DataType.IPV4: 4,
    DataType.IPV6: 16,
    DataType.ENUM8: 1,
    DataType.ENUM16: 2,
}

_PARAMETERS: dict[DataType, Parameters] = {
    DataType.DECIMAL: Parameters.REQUIRED,
    DataType.DECIMAL32: Parameters.REQUIRED,
    DataType.DECIMAL64: Parameters.REQUIRED,
    DataType.DECIMAL128: Parameters.REQUIRED,
    DataType.DECIMAL256: Parameters.REQUIRED,
    DataType.DATETIME: Parameters.OPTIONAL,
    DataType.DATETIME32: Parameters.OPTIONAL,
    DataType.DATETIME64: Parameters.REQUIRED,
    DataType.FIXED_STRING: Parameters.REQUIRED,
    DataType.ENUM: Parameters.REQUIRED,
    DataType.ENUM8: Parameters.REQUIRED,
    DataType.ENUM16: Parameters.REQUIRED,
    DataType.ARRAY: Parameters.NESTED,
    DataType.TUPLE: Parameters.NESTED,
    DataType.MAP: Parameters.NESTED,
    DataType.NESTED: Parameters.NESTED,
    DataType.NULLABLE: Parameters.NESTED,
    DataType.LOW_CARDINALITY: Parameters.NESTED,
    DataType.AGGREGATE_FUNCTION: Parameters.NESTED,
    DataType.SIMPLE_AGGREGATE_FUNCTION: Parameters.NESTED,
}

# SQL-compatible spellings accepted by the database for each type
_ALIASES: dict[DataType, tuple[str, ...]] = {
    DataType.BOOL: ("BOOLEAN",),
    DataType.INT8: ("BYTE", "INT1", "INT1 SIGNED", "TINYINT", "TINYINT SIGNED"),
    DataType.UINT8: ("INT1 UNSIGNED", "TINYINT UNSIGNED"),
    DataType.INT16: ("SMALLINT", "SMALLINT SIGNED"),
    DataType.UINT16: ("SMALLINT UNSIGNED", "YEAR"),
    DataType.INT32: (
        "INT", "INTEGER", "MEDIUMINT", "INT SIGNED", "INTEGER SIGNED", "MEDIUMINT SIGNED",
    ),
    DataType.UINT32: ("INT UNSIGNED", "INTEGER UNSIGNED", "MEDIUMINT UNSIGNED"),
    DataType.INT64: ("BIGINT", "SIGNED", "BIGINT SIGNED"),
    DataType.UINT64: ("BIGINT UNSIGNED", "UNSIGNED"),
    DataType.FLOAT32: ("FLOAT", "REAL", "SINGLE"),
    DataType.FLOAT64: ("DOUBLE", "DOUBLE PRECISION"),
    DataType.DECIMAL: ("DEC", "NUMERIC", "FIXED"),
    DataType.DATETIME: ("TIMESTAMP",),
    DataType.IPV4: ("INET4",),
    DataType.IPV6: ("INET6",),
    DataType.STRING: (
        "BINARY LARGE OBJECT",
        "BINARY VARYING",
        "BLOB",
        "BYTEA",
        "CHAR",
        "CHAR LARGE OBJECT",
        "CHAR VARYING",
        "CHARACTER",
        "CHARACTER LARGE OBJECT",
        "CHARACTER VARYING",
        "CLOB",
        "LONGBLOB",
        "LONGTEXT",
        "MEDIUMBLOB",
        "MEDIUMTEXT",
        "NATIONAL CHAR",
        "NATIONAL CHAR VARYING",
        "NATIONAL CHARACTER",
        "NATIONAL CHARACTER LARGE OBJECT",
        "NATIONAL CHARACTER VARYING",
        "NCHAR",
        "NCHAR LARGE OBJECT",
        "NCHAR VARYING",
        "NVARCHAR",
        "TEXT",
        "TINYBLOB",
        "TINYTEXT",
        "VARCHAR",
        "VARCHAR2",
    ),
    DataType.FIXED_STRING: ("BINARY",),
}


def normalize_keyword(words: str | Sequence[str]) -> str:
    """Return the lookup key for a keyword: upper case, single-spaced."""
    if isinstance(words, str):
        words = words.split()
    return " ".join(word.upper() for word in words)


class TypeRegistry:
    """Case-insensitive table of type keywords, including multi-word aliases."""

    def __init__(self) -> None:
        self._keywords: dict[str, DataType] = {}
        self.max_words = 1
        self._register_builtins()

    def _register_builtins(self) -> None:
        """Register every canonical type name and its aliases."""
        for data_type in DataType:
            self.register(data_type.value, data_type)
            for alias in data_type.aliases:
                self.register(alias, data_type)

    def register(self, keyword: str, data_type: DataType) -> None:
        """Register a keyword for a data type."""
        key = normalize_keyword(keyword)
        existing = self._keywords.get(key)
        if existing is not None and existing is not data_type:
            raise ValueError(f"Type keyword '{keyword}' is already defined as '{existing.value}'")
        self._keywords[key] = data_type
        self.max_words = max(self.max_words, len(key.split(" ")))

    def get(self, keyword: str) -> DataType | None:
        """Get a data type by keyword."""
        return self._keywords.get(normalize_keyword(keyword))

    def get_or_raise(self, keyword: str) -> DataType:
        """Get a data type by keyword, raising if not found."""
        data_type = self.get(keyword)
        if data_type is None:
            raise UnknownTypeError(f"Unknown data type '{keyword}'")
        return data_type

    def match(self, words: Sequence[str]) -> tuple[DataType, int] | None:
        """Match the longest keyword formed by a prefix of ``words``.

        Returns the data type and the number of words consumed, or None if
        not even the first word is a keyword.
        """
        for count in range(min(len(words), self.max_words), 0, -1):
            data_type = self._keywords.get(normalize_keyword(words[:count]))
            if data_type is not None:
                return data_type, count
        return None

    def list_keywords(self) -> list[str]:
        """List all registered keywords (normalized)."""
        return sorted(self._keywords)

    def __contains__(self, keyword: str) -> bool:
        return normalize_keyword(keyword) in self._keywords


# Process-wide registry; built once at import and only read afterwards
KEYWORDS = TypeRegistry()
