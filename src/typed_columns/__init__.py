"""Typed Columns - parser for columnar database column type declarations."""

import logging

from typed_columns.aggregates import AggregateFunction
from typed_columns.column import ColumnDescriptor, EnumConstants
from typed_columns.errors import (
    TypeDeclarationError,
    TypeSyntaxError,
    TypeValidationError,
    UnknownTypeError,
)
from typed_columns.formats import Format
from typed_columns.parsing import ColumnParser, of, parse, read_column
from typed_columns.response import (
    EMPTY_RESPONSE,
    Record,
    RecordListResponse,
    Response,
    ResponseSummary,
)
from typed_columns.types import DataType, TypeRegistry

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Main API
    "ColumnParser",
    "parse",
    "of",
    "read_column",
    # Descriptors
    "ColumnDescriptor",
    "EnumConstants",
    "DataType",
    "AggregateFunction",
    "TypeRegistry",
    # Errors
    "TypeDeclarationError",
    "TypeSyntaxError",
    "UnknownTypeError",
    "TypeValidationError",
    # Collaborators
    "Format",
    "Response",
    "Record",
    "RecordListResponse",
    "ResponseSummary",
    "EMPTY_RESPONSE",
]

__version__ = "0.1.0"
