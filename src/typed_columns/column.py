"""Column descriptors: the parsed, structured form of a column type."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from typed_columns.aggregates import AggregateFunction
from typed_columns.errors import TypeValidationError
from typed_columns.types import DECIMAL_WIDTHS, DEFAULT_ESTIMATED_LENGTH, DataType


def decimal_byte_length(precision: int) -> int:
    """Return the storage width of a Decimal with the given precision."""
    for max_precision, width in DECIMAL_WIDTHS:
        if precision <= max_precision:
            return width
    raise TypeValidationError(f"Decimal precision {precision} is out of range")


def derive_length(data_type: DataType, precision: int | None = None) -> tuple[bool, int]:
    """Return ``(fixed_length, estimated_length)`` for an unwrapped type.

    Only intrinsically fixed-width kinds are fixed length. Containers and
    aggregate states are variable length even when every member is fixed
    width.
    """
    if data_type is DataType.FIXED_STRING and precision:
        return True, precision
    if data_type is DataType.DECIMAL and precision:
        return True, decimal_byte_length(precision)
    width = data_type.byte_length
    if width:
        return True, width
    return False, DEFAULT_ESTIMATED_LENGTH


@dataclass(frozen=True)
class EnumConstants:
    """Bijective table between enum constant names and their integer codes."""

    entries: tuple[tuple[str, int], ...]
    _codes: dict[str, int] = field(init=False, repr=False, compare=False)
    _names: dict[int, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        codes: dict[str, int] = {}
        names: dict[int, str] = {}
        for name, code in self.entries:
            if name in codes:
                raise TypeValidationError(f"Duplicate enum name '{name}'")
            if code in names:
                raise TypeValidationError(
                    f"Duplicate enum value {code} for '{name}' and '{names[code]}'"
                )
            codes[name] = code
            names[code] = name
        object.__setattr__(self, "_codes", codes)
        object.__setattr__(self, "_names", names)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, int]], bits: int) -> EnumConstants:
        """Build a table, checking every code fits a signed ``bits``-wide integer."""
        pairs = tuple(pairs)
        if not pairs:
            raise TypeValidationError("Enum must declare at least one constant")
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        for name, code in pairs:
            if not low <= code <= high:
                raise TypeValidationError(
                    f"Enum value {code} for '{name}' does not fit Enum{bits} "
                    f"(allowed range {low}..{high})"
                )
        return cls(pairs)

    def name(self, code: int) -> str:
        """Return the constant name for a code."""
        try:
            return self._names[code]
        except KeyError:
            raise KeyError(f"Unknown enum value {code}") from None

    def value(self, name: str) -> int:
        """Return the code for a constant name."""
        try:
            return self._codes[name]
        except KeyError:
            raise KeyError(f"Unknown enum name '{name}'") from None

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.entries]

    @property
    def codes(self) -> list[int]:
        return [code for _, code in self.entries]

    def __contains__(self, name: object) -> bool:
        return name in self._codes

    def __iter__(self) -> Iterator[tuple[str, int]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class ColumnDescriptor:
    """Parsed type of one column, or of one argument of a composite type.

    ``original_type_name`` is the exact (trimmed) declaration text of the
    type, excluding the column name and any DEFAULT-like clause. Wrappers
    (Nullable, LowCardinality) are folded into the ``nullable`` and
    ``low_cardinality`` flags of the type they wrap.

    Array descriptors also expose ``array_nested_level``, the number of
    consecutive Array layers, and ``array_base_column``, the first non-Array
    descriptor below them; both are computed once at construction.
    """

    name: str
    original_type_name: str
    data_type: DataType
    nullable: bool = False
    low_cardinality: bool = False
    fixed_length: bool | None = None
    estimated_length: int | None = None
    nested_columns: tuple[ColumnDescriptor, ...] = ()
    enum_constants: EnumConstants | None = None
    aggregate_function: AggregateFunction | None = None
    function: str | None = None
    precision: int | None = None
    scale: int | None = None
    time_zone: str | None = None
    array_nested_level: int = field(init=False, repr=False, compare=False)
    array_base_column: ColumnDescriptor | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.nested_columns, tuple):
            object.__setattr__(self, "nested_columns", tuple(self.nested_columns))
        self._validate()

        if self.fixed_length is None or self.estimated_length is None:
            fixed, estimated = derive_length(self.data_type, self.precision)
            if self.fixed_length is None:
                object.__setattr__(self, "fixed_length", fixed)
            if self.estimated_length is None:
                object.__setattr__(self, "estimated_length", estimated)

        level, base = 0, None
        if self.data_type is DataType.ARRAY:
            element = self.nested_columns[0]
            if element.data_type is DataType.ARRAY:
                level, base = element.array_nested_level + 1, element.array_base_column
            else:
                level, base = 1, element
        object.__setattr__(self, "array_nested_level", level)
        object.__setattr__(self, "array_base_column", base)

    def _validate(self) -> None:
        """Check the arity and kind-specific fields of this descriptor."""
        data_type = self.data_type
        count = len(self.nested_columns)
        if data_type.is_wrapper or data_type is DataType.ENUM:
            raise TypeValidationError(
                f"'{data_type.value}' is resolved while parsing and cannot be a column type",
                self.original_type_name,
            )
        if data_type is DataType.ARRAY and count != 1:
            self._arity_error("exactly one element type")
        elif data_type is DataType.MAP and count != 2:
            self._arity_error("exactly two types (key and value)")
        elif data_type in (DataType.TUPLE, DataType.NESTED) and count == 0:
            self._arity_error("at least one element type")
        elif data_type is DataType.SIMPLE_AGGREGATE_FUNCTION and count != 1:
            self._arity_error("exactly one argument type")
        elif data_type.is_enum and self.enum_constants is None:
            raise TypeValidationError(
                f"{data_type.value} requires enum constants", self.original_type_name
            )

        if data_type is DataType.NESTED:
            for column in self.nested_columns:
                if not column.name:
                    raise TypeValidationError(
                        f"Nested field '{column.original_type_name}' must be named",
                        self.original_type_name,
                    )

    def _arity_error(self, expected: str) -> None:
        raise TypeValidationError(
            f"{self.data_type.value} expects {expected}, got {len(self.nested_columns)}",
            self.original_type_name,
        )

    @property
    def key_info(self) -> ColumnDescriptor | None:
        """Return the key type of a Map."""
        if self.data_type is DataType.MAP:
            return self.nested_columns[0]
        return None

    @property
    def value_info(self) -> ColumnDescriptor | None:
        """Return the value type of a Map."""
        if self.data_type is DataType.MAP:
            return self.nested_columns[1]
        return None

    @property
    def is_array(self) -> bool:
        return self.data_type is DataType.ARRAY

    @property
    def is_tuple(self) -> bool:
        return self.data_type is DataType.TUPLE

    @property
    def is_map(self) -> bool:
        return self.data_type is DataType.MAP

    @property
    def is_nested(self) -> bool:
        return self.data_type is DataType.NESTED

    @property
    def is_enum(self) -> bool:
        return self.data_type.is_enum

    @property
    def is_aggregate_function(self) -> bool:
        return self.data_type.is_aggregate

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of this descriptor tree."""
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.original_type_name,
            "data_type": self.data_type.value,
            "nullable": self.nullable,
            "low_cardinality": self.low_cardinality,
            "fixed_length": self.fixed_length,
            "estimated_length": self.estimated_length,
        }
        for key in ("precision", "scale", "time_zone", "function"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.aggregate_function is not None:
            data["aggregate_function"] = self.aggregate_function.value
        if self.enum_constants is not None:
            data["enum_constants"] = dict(self.enum_constants.entries)
        if self.is_array:
            data["array_nested_level"] = self.array_nested_level
        if self.nested_columns:
            data["nested_columns"] = [c.to_dict() for c in self.nested_columns]
        return data
